"""
Corpus-level training driver for flexilabel.

Training runs the engine over the corpus several times:

1. a lexica pass collecting frequent forms and ambiguity classes;
2. a training pass harvesting gold instances, then fitting the classifier;
3. a development pass scoring the model on held-out data;
4. bootstrap rounds: decode the training data with the current model while
   harvesting gold instances, refit, and keep the new model only if the
   development score improves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from .classifier import InstanceCollector, LinearClassifier
from .config import TaggerConfig
from .doc import Sentence
from .engine import TaggingEngine, tag_sentences
from .evaluation import make_evaluator
from .features import FeatureExtractor
from .hooks import MorphHook, RuleHook, no_morphology, no_rules
from .lexicon import AmbiguityClassBuilder, Lexica, collect_frequent_forms
from .modes import TaggerMode
from .state import SentenceState

logger = logging.getLogger(__name__)


@dataclass
class TrainingResult:
    classifier: LinearClassifier
    lexica: Lexica
    scores: List[float] = field(default_factory=list)  # development score of every fitted model, in order
    bootstrap_rounds: int = 0  # bootstrap rounds whose model was kept

    @property
    def best_score(self) -> Optional[float]:
        return max(self.scores) if self.scores else None


def collect_lexica(sentences: Iterable[Sentence], config: TaggerConfig) -> Lexica:
    """Run the lexica pass and compile the read-only lexica snapshot."""
    sentences = list(sentences)
    frequent_forms = collect_frequent_forms(sentences, config.frequent_form_cutoff)
    builder = AmbiguityClassBuilder(frequent_forms)
    engine = TaggingEngine(TaggerMode.LEXICA, ambiguity_builder=builder, negative_label=config.negative_label)
    tag_sentences(engine, sentences)
    classes = builder.build(config.ambiguity_threshold, config.ambiguity_separator)
    logger.info(
        "Collected lexica: %d frequent forms, %d ambiguity classes",
        len(frequent_forms),
        len(classes),
    )
    return Lexica(frequent_forms=frequent_forms, ambiguity_classes=classes)


def harvest_instances(
    sentences: Iterable[Sentence],
    lexica: Lexica,
    config: TaggerConfig,
    *,
    classifier: Optional[LinearClassifier] = None,
    rule_hook: RuleHook = no_rules,
    morph_hook: MorphHook = no_morphology,
) -> InstanceCollector:
    """Training pass without a classifier, bootstrap pass with one."""
    sink = InstanceCollector()
    mode = TaggerMode.TRAIN if classifier is None else TaggerMode.BOOTSTRAP
    engine = TaggingEngine(
        mode,
        FeatureExtractor(config.feature_templates(), lexica),
        classifier=classifier,
        sink=sink,
        rule_hook=rule_hook,
        morph_hook=morph_hook,
        margin_threshold=config.margin_threshold,
        train_history=config.train_history,
        negative_label=config.negative_label,
    )
    tag_sentences(engine, sentences)
    logger.info("%s pass: %d instances", mode.value, len(sink))
    return sink


def train_classifier(sink: InstanceCollector, config: TaggerConfig) -> LinearClassifier:
    classifier = LinearClassifier(c=config.classifier_c, max_iter=config.classifier_max_iter)
    return classifier.train(sink)


def evaluate(
    sentences: Iterable[Sentence],
    classifier: LinearClassifier,
    lexica: Lexica,
    config: TaggerConfig,
    *,
    evaluator=None,
    rule_hook: RuleHook = no_rules,
    morph_hook: MorphHook = no_morphology,
):
    """Development pass; returns the evaluator holding the counts."""
    if evaluator is None:
        evaluator = make_evaluator(config.metric, config.negative_label)
    engine = TaggingEngine(
        TaggerMode.DEVELOP,
        FeatureExtractor(config.feature_templates(), lexica),
        classifier=classifier,
        evaluator=evaluator,
        rule_hook=rule_hook,
        morph_hook=morph_hook,
        margin_threshold=config.margin_threshold,
        negative_label=config.negative_label,
    )
    tag_sentences(engine, sentences)
    return evaluator


def decode(
    sentences: Iterable[Sentence],
    classifier: LinearClassifier,
    lexica: Lexica,
    config: TaggerConfig,
    *,
    rule_hook: RuleHook = no_rules,
    morph_hook: MorphHook = no_morphology,
) -> List[SentenceState]:
    engine = TaggingEngine(
        TaggerMode.DECODE,
        FeatureExtractor(config.feature_templates(), lexica),
        classifier=classifier,
        rule_hook=rule_hook,
        morph_hook=morph_hook,
        margin_threshold=config.margin_threshold,
    )
    return tag_sentences(engine, sentences)


def train_tagger(
    train_sentences: Sequence[Sentence],
    dev_sentences: Optional[Sequence[Sentence]] = None,
    config: Optional[TaggerConfig] = None,
    *,
    rule_hook: RuleHook = no_rules,
    morph_hook: MorphHook = no_morphology,
    evaluator_factory: Optional[Callable[[], object]] = None,
    progress: Optional[Callable[[str], None]] = None,
) -> TrainingResult:
    """
    Train a tagger end to end.

    Args:
        train_sentences: Gold-labeled training sentences
        dev_sentences: Optional gold-labeled development sentences; bootstrapping
            needs them to decide whether a round improves the model
        config: Tagger configuration (defaults to ``TaggerConfig()``)
        rule_hook: Rule hook applied in every pass
        morph_hook: Morphology hook applied in every pass
        evaluator_factory: Builds a fresh evaluator per development pass
            (defaults to the configured metric)
        progress: Optional callback receiving progress messages

    Returns:
        A ``TrainingResult`` with the best classifier and the lexica
    """
    config = config or TaggerConfig()
    train_sentences = list(train_sentences)
    dev_sentences = list(dev_sentences) if dev_sentences else []

    def _report(message: str) -> None:
        logger.info(message)
        if progress:
            progress(message)

    def _new_evaluator():
        return evaluator_factory() if evaluator_factory else make_evaluator(config.metric, config.negative_label)

    lexica = collect_lexica(train_sentences, config)
    sink = harvest_instances(train_sentences, lexica, config, rule_hook=rule_hook, morph_hook=morph_hook)
    classifier = train_classifier(sink, config)
    result = TrainingResult(classifier=classifier, lexica=lexica)

    if not dev_sentences:
        if config.bootstrap_rounds:
            _report("No development data: skipping bootstrapping")
        return result

    best = evaluate(
        dev_sentences, classifier, lexica, config,
        evaluator=_new_evaluator(), rule_hook=rule_hook, morph_hook=morph_hook,
    ).score
    result.scores.append(best)
    _report(f"Initial model: development score {best * 100:.2f}")

    for round_num in range(1, config.bootstrap_rounds + 1):
        sink = harvest_instances(
            train_sentences, lexica, config,
            classifier=result.classifier, rule_hook=rule_hook, morph_hook=morph_hook,
        )
        candidate = train_classifier(sink, config)
        score = evaluate(
            dev_sentences, candidate, lexica, config,
            evaluator=_new_evaluator(), rule_hook=rule_hook, morph_hook=morph_hook,
        ).score
        result.scores.append(score)
        _report(f"Bootstrap round {round_num}: development score {score * 100:.2f}")
        if score <= best:
            break
        best = score
        result.classifier = candidate
        result.bootstrap_rounds = round_num

    return result
