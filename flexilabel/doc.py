from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .normalization import simplify_form

ROOT_FORM = "<root>"

# Auxiliary feature key marking a gold predicate (semantic-role frameset id)
FEAT_PREDICATE = "pb"


def _normalize_feats(feats: Optional[Dict[str, Any]]) -> Dict[str, str]:
    if not feats:
        return {}
    return {str(key): str(value) for key, value in feats.items() if value is not None}


class FeatsMixin:
    feats: Dict[str, str]

    def get_feat(self, name: str) -> Optional[str]:
        return self.feats.get(name)

    def set_feat(self, name: str, value: Optional[str]) -> None:
        if value is None or value == "":
            self.feats.pop(name, None)
        else:
            self.feats[name] = value

    def clear_feat(self, name: str) -> None:
        self.feats.pop(name, None)


@dataclass
class Node(FeatsMixin):
    id: int
    form: str
    simplified_form: str = ""
    lower_simplified_form: str = ""
    lemma: str = ""
    label: Optional[str] = None
    feats: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.feats = _normalize_feats(self.feats)
        if self.form and not self.simplified_form:
            self.simplify()

    def simplify(self) -> None:
        self.simplified_form = simplify_form(self.form)
        self.lower_simplified_form = self.simplified_form.lower()

    @property
    def is_root(self) -> bool:
        return self.id == 0

    @classmethod
    def root(cls) -> "Node":
        return cls(id=0, form=ROOT_FORM, simplified_form=ROOT_FORM, lower_simplified_form=ROOT_FORM, lemma=ROOT_FORM)

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(
            id=int(data.get("id", 0)),
            form=data.get("form", ""),
            lemma=data.get("lemma", ""),
            label=data.get("label"),
            feats=_normalize_feats(data.get("feats")),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {
            "id": self.id,
            "form": self.form,
        }
        if self.lemma:
            result["lemma"] = self.lemma
        if self.label is not None:
            result["label"] = self.label
        if self.feats:
            result["feats"] = dict(self.feats)
        return result


@dataclass
class Sentence:
    """
    An ordered sequence of nodes with a synthetic root at index 0.

    ``gold_labels`` is aligned with ``nodes``; ``None`` marks a position without
    a gold label (always the case for the root).
    """

    id: str = ""
    nodes: List[Node] = field(default_factory=list)
    gold_labels: Optional[List[Optional[str]]] = None

    def __post_init__(self):
        if not self.nodes or not self.nodes[0].is_root:
            self.nodes.insert(0, Node.root())
        if self.gold_labels is not None and len(self.gold_labels) != len(self.nodes):
            raise ValueError(
                f"Sentence {self.id or '<unnamed>'}: {len(self.gold_labels)} gold labels "
                f"for {len(self.nodes)} nodes (root included)"
            )

    @classmethod
    def from_forms(
        cls,
        forms: Sequence[str],
        labels: Optional[Sequence[Optional[str]]] = None,
        lemmas: Optional[Sequence[str]] = None,
        feats: Optional[Sequence[Optional[Dict[str, str]]]] = None,
        sent_id: str = "",
    ) -> "Sentence":
        nodes = [Node.root()]
        for i, form in enumerate(forms):
            nodes.append(
                Node(
                    id=i + 1,
                    form=form,
                    lemma=lemmas[i] if lemmas else "",
                    feats=feats[i] if feats and feats[i] else {},
                )
            )
        gold = None
        if labels is not None:
            if len(labels) != len(forms):
                raise ValueError(f"Expected {len(forms)} labels, got {len(labels)}")
            gold = [None, *labels]
        return cls(id=sent_id, nodes=nodes, gold_labels=gold)

    @property
    def size(self) -> int:
        """Number of nodes, root included."""
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, index: int) -> Optional[Node]:
        if 0 <= index < len(self.nodes):
            return self.nodes[index]
        return None

    def tokens(self) -> List[Node]:
        return self.nodes[1:]

    def simplify_forms(self) -> None:
        for node in self.tokens():
            node.simplify()

    def get_gold_labels(self) -> Optional[List[Optional[str]]]:
        if self.gold_labels is None:
            return None
        return list(self.gold_labels)

    def clear_gold_labels(self) -> None:
        self.gold_labels = None

    def get_labels(self) -> List[Optional[str]]:
        return [node.label for node in self.nodes]

    def clear_labels(self) -> None:
        for node in self.nodes:
            node.label = None

    def forms(self) -> Iterable[str]:
        return (node.form for node in self.tokens())

    @classmethod
    def from_dict(cls, data: dict) -> "Sentence":
        return cls(
            id=data.get("id", ""),
            nodes=[Node.from_dict(n) for n in data.get("nodes", [])],
            gold_labels=data.get("gold_labels"),
        )

    def to_dict(self) -> dict:
        result: Dict[str, Any] = {
            "id": self.id,
            "nodes": [node.to_dict() for node in self.nodes],
        }
        if self.gold_labels is not None:
            result["gold_labels"] = list(self.gold_labels)
        return result
