import pytest

from flexilabel.config import TaggerConfig
from flexilabel.conllu import read_conllu
from flexilabel.evaluation import F1Eval, PredicateEval
from flexilabel.train import collect_lexica, decode, evaluate, harvest_instances, train_tagger

from .conftest import make_corpus


def test_collect_lexica(corpus):
    lexica = collect_lexica(corpus, TaggerConfig())
    assert {"the", "a", "dog", "cat", "runs", "sleeps", "run"} <= lexica.frequent_forms
    assert "end" not in lexica.frequent_forms
    assert lexica.ambiguity_classes["runs"] == "VBZ_NN"
    assert lexica.ambiguity_classes["the"] == "DT"
    assert "end" not in lexica.ambiguity_classes


def test_harvest_instances(corpus):
    config = TaggerConfig()
    lexica = collect_lexica(corpus, config)
    sink = harvest_instances(corpus, lexica, config)
    assert len(sink) == sum(len(s.tokens()) for s in corpus)
    assert sink.labels()[:3] == ["DT", "NN", "VBZ"]
    assert all(s.tokens()[0].label is None for s in corpus)


def test_train_without_dev_skips_bootstrapping(corpus):
    messages = []
    result = train_tagger(corpus, config=TaggerConfig(bootstrap_rounds=2), progress=messages.append)
    assert result.classifier.is_trained
    assert result.scores == []
    assert result.best_score is None
    assert result.bootstrap_rounds == 0
    assert messages == ["No development data: skipping bootstrapping"]


def test_train_with_bootstrapping(corpus):
    config = TaggerConfig(bootstrap_rounds=2, classifier_c=1.0)
    result = train_tagger(corpus, make_corpus(), config)
    assert 2 <= len(result.scores) <= 3
    assert 0.0 <= result.best_score <= 1.0
    assert 0 <= result.bootstrap_rounds <= 2
    # kept rounds strictly improve on the initial model
    kept = result.scores[: result.bootstrap_rounds + 1]
    assert kept == sorted(set(kept))


def test_custom_evaluator_factory(corpus):
    result = train_tagger(
        corpus,
        make_corpus(),
        TaggerConfig(bootstrap_rounds=0),
        evaluator_factory=F1Eval,
    )
    assert len(result.scores) == 1


def test_evaluate_and_decode(corpus):
    config = TaggerConfig(classifier_c=1.0)
    result = train_tagger(corpus, config=config)
    evaluator = evaluate(make_corpus(), result.classifier, result.lexica, config)
    assert evaluator.metric.total == sum(len(s.tokens()) for s in corpus)
    assert 0.0 <= evaluator.score <= 1.0

    unlabeled = make_corpus()
    for sentence in unlabeled:
        sentence.clear_gold_labels()
    states = decode(unlabeled, result.classifier, result.lexica, config)
    assert len(states) == len(unlabeled)
    labels = {"DT", "NN", "VBZ", "NNS", "VBP"}
    for state in states:
        assert all(node.label in labels for node in state.sentence.tokens())


PREDICATES = [
    (["she", "gave", "up"], [None, "give.01", None]),
    (["he", "gave", "in"], [None, "give.01", None]),
    (["they", "run", "fast"], [None, "run.01", None]),
    (["we", "run", "home"], [None, "run.01", None]),
]


def _predicate_conllu() -> str:
    lines = []
    for i, (forms, framesets) in enumerate(PREDICATES * 3):
        lines.append(f"# sent_id = p{i + 1}")
        for j, (form, frameset) in enumerate(zip(forms, framesets)):
            misc = f"pb={frameset}" if frameset else "_"
            lines.append("\t".join([str(j + 1), form, form, "X", "_", "_", "0", "dep", "_", misc]))
        lines.append("")
    return "\n".join(lines) + "\n"


def test_predicates_with_negative_label():
    config = TaggerConfig(label_column="misc:pb", negative_label="O", metric="pred", classifier_c=1.0, bootstrap_rounds=0)
    corpus = list(read_conllu(_predicate_conllu(), label_column="misc:pb"))
    assert all(node.get_feat("pb") is None for s in corpus for node in s.tokens())

    lexica = collect_lexica(corpus, config)
    assert lexica.ambiguity_classes["up"] == "O"
    sink = harvest_instances(corpus, lexica, config)
    assert len(sink) == sum(len(s.tokens()) for s in corpus)
    assert set(sink.labels()) == {"O", "give.01", "run.01"}

    result = train_tagger(corpus, config=config)
    evaluator = evaluate(corpus, result.classifier, result.lexica, config, evaluator=PredicateEval(negative_label="O"))
    assert evaluator.gold_total == len(corpus)
    assert evaluator.precision == pytest.approx(1.0)
    assert evaluator.recall == pytest.approx(1.0)

    unlabeled = list(read_conllu(_predicate_conllu(), label_column="misc:pb", with_labels=False))
    states = decode(unlabeled[:4], result.classifier, result.lexica, config)
    assert [[node.label for node in state.sentence.tokens()] for state in states] == [
        ["O", "give.01", "O"],
        ["O", "give.01", "O"],
        ["O", "run.01", "O"],
        ["O", "run.01", "O"],
    ]
