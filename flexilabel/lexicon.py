"""
Lexica for flexilabel.

Two lexica are collected from training data and consulted read-only while
tagging:

- the frequent forms: lower simplified forms frequent enough to be used as
  lexical features;
- the ambiguity classes: for each frequent simplified form, the labels it was
  observed with, compressed into one string (e.g. ``"NN_VB"``).

Collection happens in a builder (``AmbiguityClassBuilder``); ``build()``
returns an immutable ``AmbiguityClasses`` snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .doc import Node, Sentence

LEXICA_VERSION = 1

# Joins the surviving labels of an ambiguity class
AMBIGUITY_SEPARATOR = "_"


class ProbTable2D:
    """Counts of (key, label) pairs; labels keep their first-seen order per key."""

    def __init__(self) -> None:
        self._counts: Dict[str, Dict[str, int]] = {}

    def add(self, key: str, label: Optional[str], count: int = 1) -> None:
        if label is None:
            return
        if count < 0:
            raise ValueError("Counts can only grow")
        labels = self._counts.setdefault(key, {})
        labels[label] = labels.get(label, 0) + count

    def keys(self) -> Iterable[str]:
        return self._counts.keys()

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def get_counts(self, key: str) -> Dict[str, int]:
        return dict(self._counts.get(key, {}))

    def get_prob1d(self, key: str) -> List[Tuple[str, float]]:
        """
        Label probabilities for ``key``, most frequent first.

        Equal counts keep the order in which the labels were first observed.
        """
        labels = self._counts.get(key)
        if not labels:
            return []
        total = sum(labels.values())
        # sorted() is stable, so insertion order breaks ties
        ranked = sorted(labels.items(), key=lambda item: item[1], reverse=True)
        return [(label, count / total) for label, count in ranked]

    def merge(self, other: "ProbTable2D") -> None:
        for key, labels in other._counts.items():
            for label, count in labels.items():
                self.add(key, label, count)


class AmbiguityClasses(Mapping[str, str]):
    """Read-only simplified form -> ambiguity class mapping."""

    def __init__(self, classes: Optional[Mapping[str, str]] = None) -> None:
        self._classes = MappingProxyType(dict(classes or {}))

    def __getitem__(self, key: str) -> str:
        return self._classes[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"AmbiguityClasses({len(self)} forms)"

    def to_dict(self) -> Dict[str, str]:
        return dict(self._classes)


class AmbiguityClassBuilder:
    """Collects (simplified form, gold label) counts during a lexica pass."""

    def __init__(self, frequent_forms: Iterable[str]) -> None:
        self.frequent_forms = frozenset(frequent_forms)
        self.table = ProbTable2D()

    def add(self, node: Node, gold_label: Optional[str]) -> None:
        if node.lower_simplified_form in self.frequent_forms:
            self.table.add(node.simplified_form, gold_label)

    def merge(self, other: "AmbiguityClassBuilder") -> None:
        self.table.merge(other.table)

    def build(self, threshold: float, separator: str = AMBIGUITY_SEPARATOR) -> AmbiguityClasses:
        """
        Compress the collected counts into ambiguity classes.

        Args:
            threshold: A label survives when its probability for the form is
                strictly greater than this value.
            separator: String joining the surviving labels.

        Returns:
            An ``AmbiguityClasses`` mapping; forms without surviving labels are omitted.
        """
        classes: Dict[str, str] = {}
        for key in self.table.keys():
            kept = []
            for label, prob in self.table.get_prob1d(key):
                if prob <= threshold:
                    break
                kept.append(label)
            if kept:
                classes[key] = separator.join(kept)
        return AmbiguityClasses(classes)


@dataclass(frozen=True)
class Lexica:
    """Versioned snapshot of the lexica consumed by feature extraction."""

    frequent_forms: frozenset = field(default_factory=frozenset)
    ambiguity_classes: AmbiguityClasses = field(default_factory=AmbiguityClasses)
    version: int = LEXICA_VERSION

    def __post_init__(self):
        if not isinstance(self.frequent_forms, frozenset):
            object.__setattr__(self, "frequent_forms", frozenset(self.frequent_forms))
        if not isinstance(self.ambiguity_classes, AmbiguityClasses):
            object.__setattr__(self, "ambiguity_classes", AmbiguityClasses(self.ambiguity_classes))

    @classmethod
    def empty(cls) -> "Lexica":
        return cls()

    def contains_frequent_form(self, node: Node) -> bool:
        return node.lower_simplified_form in self.frequent_forms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "frequent_forms": sorted(self.frequent_forms),
            "ambiguity_classes": self.ambiguity_classes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lexica":
        version = data.get("version", LEXICA_VERSION)
        if version != LEXICA_VERSION:
            raise ValueError(f"Unsupported lexica version {version} (expected {LEXICA_VERSION})")
        return cls(
            frequent_forms=frozenset(data.get("frequent_forms", [])),
            ambiguity_classes=AmbiguityClasses(data.get("ambiguity_classes", {})),
            version=version,
        )


def collect_frequent_forms(sentences: Iterable[Sentence], cutoff: int = 1) -> frozenset:
    """
    Collect lower simplified forms by document frequency.

    Args:
        sentences: Training sentences
        cutoff: A form is kept when it occurs in more than ``cutoff`` sentences

    Returns:
        The set of frequent lower simplified forms
    """
    df: Dict[str, int] = {}
    for sentence in sentences:
        seen = set()
        for node in sentence.tokens():
            if not node.lower_simplified_form:
                node.simplify()
            seen.add(node.lower_simplified_form)
        for form in seen:
            df[form] = df.get(form, 0) + 1
    return frozenset(form for form, count in df.items() if count > cutoff)
