from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from flexilabel.classifier import NO_PREDICTION, Prediction
from flexilabel.doc import Sentence
from flexilabel.features import FeatureVector
from flexilabel.lexicon import AmbiguityClasses, Lexica


class StubClassifier:
    """Returns fixed predictions and records every vector it is asked about."""

    def __init__(self, predictions: Optional[Sequence[Tuple[Prediction, Prediction]]] = None, default=None):
        self.predictions = list(predictions or [])
        self.default = default or (Prediction("NN", 2.0), Prediction("VB", 0.5))
        self.vectors: List[FeatureVector] = []

    def predict_top_two(self, vector: FeatureVector) -> Tuple[Prediction, Prediction]:
        self.vectors.append(vector)
        if self.predictions:
            return self.predictions.pop(0)
        return self.default


class SingleLabelClassifier:
    def predict_top_two(self, vector: FeatureVector) -> Tuple[Prediction, Prediction]:
        return Prediction("X", 0.0), NO_PREDICTION


@pytest.fixture
def stub_classifier():
    return StubClassifier()


@pytest.fixture
def sentence():
    return Sentence.from_forms(
        ["The", "NATO", "runs", "well-known", "3.5", "tests", "."],
        labels=["DT", "NNP", "VBZ", "JJ", "CD", "NNS", "."],
        sent_id="s1",
    )


@pytest.fixture
def lexica():
    frequent = {"the", "nato", "runs", "tests", "."}
    classes: Dict[str, str] = {"runs": "VBZ_NNS", "The": "DT"}
    return Lexica(frequent_forms=frozenset(frequent), ambiguity_classes=AmbiguityClasses(classes))


CORPUS = [
    (["the", "dog", "runs"], ["DT", "NN", "VBZ"]),
    (["a", "cat", "runs"], ["DT", "NN", "VBZ"]),
    (["the", "cat", "sleeps"], ["DT", "NN", "VBZ"]),
    (["a", "dog", "sleeps"], ["DT", "NN", "VBZ"]),
    (["the", "runs", "end"], ["DT", "NN", "VBZ"]),
    (["dogs", "run"], ["NNS", "VBP"]),
    (["cats", "run"], ["NNS", "VBP"]),
]


def make_corpus() -> List[Sentence]:
    return [
        Sentence.from_forms(forms, labels=labels, sent_id=f"s{i + 1}")
        for i, (forms, labels) in enumerate(CORPUS)
    ]


def corpus_conllu() -> str:
    lines = []
    for i, (forms, labels) in enumerate(CORPUS):
        lines.append(f"# sent_id = s{i + 1}")
        for j, (form, label) in enumerate(zip(forms, labels)):
            lines.append("\t".join([str(j + 1), form, form, label, "_", "_", "0", "dep", "_", "_"]))
        lines.append("")
    return "\n".join(lines) + "\n"


@pytest.fixture
def corpus():
    return make_corpus()


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "corpus.conllu"
    path.write_text(corpus_conllu(), encoding="utf-8")
    return path
