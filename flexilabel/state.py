"""
Per-sentence tagging state.

A ``SentenceState`` owns the read cursor over a sentence, the gold labels
taken from it before tagging, the labels made visible to feature extraction
and the append-only lists of alternate ("second-best") labels.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .doc import Node, Sentence


class SentenceState:
    """Shift state machine over the real tokens of a sentence (cursor starts at 1)."""

    def __init__(self, sentence: Sentence, gold_labels: Optional[Sequence[Optional[str]]] = None) -> None:
        size = sentence.size
        if gold_labels is not None and len(gold_labels) != size:
            raise ValueError(f"Expected {size} gold labels (root included), got {len(gold_labels)}")
        self._sentence = sentence
        self._size = size
        self._cursor = 1
        self._input = 0  # position of the node most recently shifted, 0 before the first shift
        self._gold: Optional[Tuple[Optional[str], ...]] = tuple(gold_labels) if gold_labels is not None else None
        self._labels: List[Optional[str]] = [None] * size
        self._second_labels: List[List[str]] = [[] for _ in range(size)]

    @property
    def sentence(self) -> Sentence:
        return self._sentence

    @property
    def size(self) -> int:
        return self._size

    @property
    def cursor(self) -> int:
        return self._cursor

    # ------------------------------------------------------------------ shifting

    def is_exhausted(self) -> bool:
        return self._cursor >= self._size

    def shift(self) -> Optional[Node]:
        """Return the node at the cursor and advance; ``None`` once exhausted."""
        if self._cursor >= self._size:
            return None
        node = self._sentence.nodes[self._cursor]
        self._input = self._cursor
        self._cursor += 1
        return node

    def peek(self) -> Optional[Node]:
        if self._cursor >= self._size:
            return None
        return self._sentence.nodes[self._cursor]

    def get_input_node(self) -> Optional[Node]:
        if self._input == 0:
            return None
        return self._sentence.nodes[self._input]

    def get_node(self, offset: int = 0) -> Optional[Node]:
        """Node at ``offset`` from the node just shifted; ``None`` outside the real tokens."""
        if self._input == 0:
            return None
        index = self._input + offset
        if 1 <= index < self._size:
            return self._sentence.nodes[index]
        return None

    def is_input_first_node(self) -> bool:
        return self._input == 1

    def is_input_last_node(self) -> bool:
        return self._input > 0 and self._input == self._size - 1

    # ------------------------------------------------------------------ gold labels

    @property
    def has_gold_labels(self) -> bool:
        return self._gold is not None

    def get_gold_label(self, index: Optional[int] = None) -> Optional[str]:
        """Gold label of the node just shifted (or at ``index``); ``None`` if unsupervised."""
        if self._gold is None:
            return None
        position = self._input if index is None else index
        if 0 <= position < self._size:
            return self._gold[position]
        return None

    def get_gold_labels(self) -> Optional[Tuple[Optional[str], ...]]:
        return self._gold

    # ------------------------------------------------------------------ assigned labels

    def assign_label(self, label: Optional[str], *, write_node: bool = True) -> None:
        """
        Record the label of the node just shifted.

        The label becomes visible to later feature extraction through
        ``get_label``; ``write_node`` additionally stores it on the node.
        """
        if self._input == 0:
            raise RuntimeError("No node has been shifted yet")
        self._labels[self._input] = label
        if write_node:
            self._sentence.nodes[self._input].label = label

    def get_label(self, index: int) -> Optional[str]:
        if 0 <= index < self._size:
            return self._labels[index]
        return None

    def get_labels(self) -> Tuple[Optional[str], ...]:
        return tuple(self._labels)

    # ------------------------------------------------------------------ alternate labels

    def add_second_label(self, label: str) -> None:
        if self._input == 0:
            raise RuntimeError("No node has been shifted yet")
        self._second_labels[self._input].append(label)

    def get_second_labels(self, index: int) -> Tuple[str, ...]:
        if 0 <= index < self._size:
            return tuple(self._second_labels[index])
        return ()
