"""
Classifier boundary for flexilabel.

The engine only consumes ``predict_top_two``; any object implementing it can
be plugged in. ``LinearClassifier`` is the bundled implementation, a
scikit-learn linear SVM over binary feature-presence vectors.
"""

from __future__ import annotations

import logging
import math
import pickle
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Protocol, Tuple, Union

from .features import FeatureVector

logger = logging.getLogger(__name__)


class Prediction(NamedTuple):
    label: Optional[str]
    score: float


NO_PREDICTION = Prediction(None, -math.inf)


class Classifier(Protocol):
    def predict_top_two(self, vector: FeatureVector) -> Tuple[Prediction, Prediction]:
        """Return the two highest-scoring predictions, best first."""
        ...


class TrainingInstance(NamedTuple):
    label: str
    vector: FeatureVector


class InstanceCollector:
    """Training sink; keeps instances in insertion order."""

    def __init__(self) -> None:
        self.instances: List[TrainingInstance] = []

    def add_instance(self, label: str, vector: FeatureVector) -> None:
        self.instances.append(TrainingInstance(label, vector))

    def add_instances(self, instances: Iterable[Tuple[str, FeatureVector]]) -> None:
        for label, vector in instances:
            self.add_instance(label, vector)

    def labels(self) -> List[str]:
        return [inst.label for inst in self.instances]

    def clear(self) -> None:
        self.instances.clear()

    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self):
        return iter(self.instances)


class LinearClassifier:
    """Linear SVM over feature-presence vectors (scikit-learn)."""

    def __init__(self, c: float = 0.1, max_iter: int = 2000, random_state: int = 0) -> None:
        self.c = c
        self.max_iter = max_iter
        self.random_state = random_state
        self.vectorizer = None
        self.model = None
        self.labels: List[str] = []

    @property
    def is_trained(self) -> bool:
        return bool(self.labels)

    def train(self, instances: Union[InstanceCollector, Iterable[TrainingInstance]]) -> "LinearClassifier":
        from sklearn.feature_extraction import DictVectorizer
        from sklearn.svm import LinearSVC

        data = list(instances)
        if not data:
            raise ValueError("Cannot train a classifier without training instances")
        y = [inst.label for inst in data]
        self.vectorizer = DictVectorizer()
        x = self.vectorizer.fit_transform([inst.vector.to_dict() for inst in data])
        distinct = sorted(set(y))
        if len(distinct) == 1:
            # LinearSVC needs two classes; a single-label model always predicts it
            self.model = None
            self.labels = distinct
            logger.warning("Training data has a single label '%s'", distinct[0])
            return self
        self.model = LinearSVC(C=self.c, max_iter=self.max_iter, random_state=self.random_state)
        self.model.fit(x, y)
        self.labels = [str(label) for label in self.model.classes_]
        logger.info(
            "Trained linear classifier: %d instances, %d labels, %d features",
            len(data),
            len(self.labels),
            len(self.vectorizer.vocabulary_),
        )
        return self

    def predict_top_two(self, vector: FeatureVector) -> Tuple[Prediction, Prediction]:
        if not self.labels:
            raise RuntimeError("Classifier has not been trained")
        if self.model is None:
            return Prediction(self.labels[0], 0.0), NO_PREDICTION
        x = self.vectorizer.transform([vector.to_dict()])
        scores = self.model.decision_function(x)[0]
        if len(self.labels) == 2:
            # Binary models return one margin for the positive class
            margin = float(scores)
            ranked = [(self.labels[1], margin), (self.labels[0], -margin)]
        else:
            ranked = [(label, float(score)) for label, score in zip(self.labels, scores)]
        ranked.sort(key=lambda item: item[1], reverse=True)
        return Prediction(*ranked[0]), Prediction(*ranked[1])

    def save(self, path: Path) -> None:
        with open(path, "wb") as handle:
            pickle.dump(
                {
                    "c": self.c,
                    "max_iter": self.max_iter,
                    "random_state": self.random_state,
                    "vectorizer": self.vectorizer,
                    "model": self.model,
                    "labels": self.labels,
                },
                handle,
            )

    @classmethod
    def load(cls, path: Path) -> "LinearClassifier":
        with open(path, "rb") as handle:
            data = pickle.load(handle)
        classifier = cls(c=data["c"], max_iter=data["max_iter"], random_state=data["random_state"])
        classifier.vectorizer = data["vectorizer"]
        classifier.model = data["model"]
        classifier.labels = data["labels"]
        return classifier
