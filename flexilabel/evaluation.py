from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from tabulate import tabulate

from .doc import FEAT_PREDICATE, Node, Sentence

GoldPredicate = Callable[[Node, Optional[str]], bool]
PredictedPredicate = Callable[[Node, Optional[str]], bool]


def _has_label(node: Node, label: Optional[str]) -> bool:
    return label is not None


def _is_gold_predicate(node: Node, label: Optional[str]) -> bool:
    return label is not None or node.get_feat(FEAT_PREDICATE) is not None


def _ratio(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass
class Metric:
    correct: int = 0
    total: int = 0

    def add(self, is_correct: bool) -> None:
        self.correct += int(bool(is_correct))
        self.total += 1

    @property
    def accuracy(self) -> float:
        return _ratio(self.correct, self.total)


@dataclass
class F1Eval:
    """
    Precision / recall / F1 over positive labels.

    For every real token: if ``is_gold_positive`` holds, the gold total grows and,
    when the token also received a positive predicted label (equal to the gold
    label when ``match_labels`` is set), so does the correct count; independently,
    every token accepted by ``is_predicted_positive`` adds to the predicted total.
    ``negative_label`` is never positive. Ratios with a zero denominator are
    reported as 0.0.
    """

    is_gold_positive: GoldPredicate = _has_label
    is_predicted_positive: PredictedPredicate = _has_label
    negative_label: Optional[str] = None
    match_labels: bool = True
    gold_total: int = 0
    predicted_total: int = 0
    correct: int = 0

    def _positive(self, predicate: GoldPredicate, node: Node, label: Optional[str]) -> bool:
        if label is not None and label == self.negative_label:
            return False
        return predicate(node, label)

    def count(
        self,
        sentence: Sentence,
        gold_labels: Optional[Sequence[Optional[str]]],
        predicted_labels: Sequence[Optional[str]],
    ) -> None:
        gold = gold_labels or [None] * sentence.size
        for node in sentence.tokens():
            predicted = predicted_labels[node.id]
            predicted_positive = self._positive(self.is_predicted_positive, node, predicted)
            if self._positive(self.is_gold_positive, node, gold[node.id]):
                self.gold_total += 1
                if predicted_positive and (not self.match_labels or predicted == gold[node.id]):
                    self.correct += 1
            if predicted_positive:
                self.predicted_total += 1

    def add_counts(self, *, gold: int = 0, predicted: int = 0, correct: int = 0) -> None:
        self.gold_total += gold
        self.predicted_total += predicted
        self.correct += correct

    def merge(self, other: "F1Eval") -> None:
        self.add_counts(gold=other.gold_total, predicted=other.predicted_total, correct=other.correct)

    def reset(self) -> None:
        self.gold_total = 0
        self.predicted_total = 0
        self.correct = 0

    @property
    def precision(self) -> float:
        return _ratio(self.correct, self.predicted_total)

    @property
    def recall(self) -> float:
        return _ratio(self.correct, self.gold_total)

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        if p + r == 0:
            return 0.0
        return 2 * p * r / (p + r)

    @property
    def score(self) -> float:
        return self.f1

    def rows(self) -> List[List[object]]:
        return [
            ["Precision", self.correct, self.predicted_total, f"{self.precision * 100:.2f}"],
            ["Recall", self.correct, self.gold_total, f"{self.recall * 100:.2f}"],
            ["F1", "", "", f"{self.f1 * 100:.2f}"],
        ]

    def report(self) -> str:
        return tabulate(self.rows(), headers=["Metric", "Correct", "Total", "Score (%)"])


@dataclass
class PredicateEval(F1Eval):
    """
    F1 of predicate identification.

    Gold predicates have a gold frameset label or carry the ``pb`` feature; a hit
    only needs a positive prediction, the frameset itself is not compared.
    """

    is_gold_positive: GoldPredicate = _is_gold_predicate
    match_labels: bool = False


@dataclass
class AccuracyEval:
    """Token accuracy; positions without a gold label are not scored."""

    metric: Metric = field(default_factory=Metric)

    def count(
        self,
        sentence: Sentence,
        gold_labels: Optional[Sequence[Optional[str]]],
        predicted_labels: Sequence[Optional[str]],
    ) -> None:
        if not gold_labels:
            return
        for node in sentence.tokens():
            gold = gold_labels[node.id]
            if gold is None:
                continue
            self.metric.add(predicted_labels[node.id] == gold)

    def merge(self, other: "AccuracyEval") -> None:
        self.metric.correct += other.metric.correct
        self.metric.total += other.metric.total

    def reset(self) -> None:
        self.metric = Metric()

    @property
    def score(self) -> float:
        return self.metric.accuracy

    def report(self) -> str:
        rows = [["Accuracy", self.metric.correct, self.metric.total, f"{self.score * 100:.2f}"]]
        return tabulate(rows, headers=["Metric", "Correct", "Total", "Score (%)"])


def make_evaluator(metric: str, negative_label: Optional[str] = None):
    """Evaluator for a metric name: ``accuracy``, ``f1`` or ``pred``."""
    normalized = metric.strip().lower()
    if normalized in ("accuracy", "acc"):
        return AccuracyEval()
    if normalized == "f1":
        return F1Eval(negative_label=negative_label)
    if normalized in ("pred", "predicate"):
        return PredicateEval(negative_label=negative_label)
    raise ValueError(f"Unknown metric '{metric}' (expected accuracy, f1 or pred)")
