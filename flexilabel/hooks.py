"""
Pluggable rule and morphology hooks.

A rule hook sees the state right after a shift and may return a label for the
node just shifted; returning ``None`` hands the decision to the classifier.
A morphology hook runs after every label decision and may refine the node
(typically its lemma) given the label.
"""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional, Tuple

from .doc import Node
from .state import SentenceState

RuleHook = Callable[[SentenceState], Optional[str]]
MorphHook = Callable[[Node, Optional[str]], None]


def no_rules(state: SentenceState) -> Optional[str]:
    return None


def no_morphology(node: Node, label: Optional[str]) -> None:
    return None


def lexical_rule(form_labels: Mapping[str, str]) -> RuleHook:
    """Closed-class rule: label nodes whose lower simplified form is listed."""
    table: Dict[str, str] = {form.lower(): label for form, label in form_labels.items()}

    def apply(state: SentenceState) -> Optional[str]:
        node = state.get_input_node()
        if node is None:
            return None
        return table.get(node.lower_simplified_form)

    return apply


def lemma_lookup(table: Mapping[Tuple[str, str], str], lowercase_fallback: bool = True) -> MorphHook:
    """
    Lemmatize from a ``(lowercase form, label) -> lemma`` table.

    Unknown pairs fall back to the lowercase form when ``lowercase_fallback`` is set.
    """
    lemmas = dict(table)

    def analyze(node: Node, label: Optional[str]) -> None:
        lower = node.form.lower()
        lemma = lemmas.get((lower, label)) if label is not None else None
        if lemma:
            node.lemma = lemma
        elif lowercase_fallback and not node.lemma:
            node.lemma = lower

    return analyze
