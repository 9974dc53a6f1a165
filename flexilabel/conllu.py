"""
CoNLL-U corpus source and tagged output for flexilabel.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .doc import Node, Sentence
from .state import SentenceState

COLUMN_INDEX = {
    "form": 1,
    "lemma": 2,
    "upos": 3,
    "xpos": 4,
    "feats": 5,
    "head": 6,
    "deprel": 7,
    "deps": 8,
    "misc": 9,
}

BLANK = "_"


def _value(raw: str) -> Optional[str]:
    raw = raw.strip()
    return None if not raw or raw == BLANK else raw


def _parse_pairs(raw: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    if not raw or raw == BLANK:
        return pairs
    for item in raw.split("|"):
        if "=" in item:
            key, value = item.split("=", 1)
            key = key.strip()
            if key:
                pairs[key] = value.strip()
    return pairs


def _resolve_label_column(label_column: str) -> Tuple[str, Optional[str]]:
    """Split ``feats:KEY`` / ``misc:KEY`` into (column, key); plain columns have no key."""
    column, _, key = label_column.partition(":")
    column = column.strip().lower()
    if column not in COLUMN_INDEX or column in ("form", "head", "deps"):
        raise ValueError(f"Unsupported label column '{label_column}'")
    if column in ("feats", "misc"):
        if not key:
            raise ValueError(f"Label column '{label_column}' needs a key, e.g. '{column}:pb'")
        return column, key
    if key:
        raise ValueError(f"Label column '{column}' does not take a key")
    return column, None


def read_conllu(conllu_text: str, label_column: str = "upos", with_labels: bool = True) -> Iterator[Sentence]:
    """
    Parse CoNLL-U text into sentences.

    Multiword token ranges (``1-2``) and empty nodes (``1.1``) are skipped.
    FEATS and MISC ``Key=Value`` pairs become auxiliary node features (MISC wins
    on conflicts), except the key used as ``label_column``. Gold labels are read
    from ``label_column``; a blank value gives a ``None`` gold label.

    Args:
        conllu_text: CoNLL-U formatted text
        label_column: ``upos``, ``xpos``, ``deprel``, ``lemma``, ``feats:KEY`` or ``misc:KEY``
        with_labels: If False, sentences carry no gold labels (decode input)
    """
    column, key = _resolve_label_column(label_column)
    nodes: List[Node] = []
    labels: List[Optional[str]] = []
    sent_id = ""
    sentence_counter = 0

    def _finish() -> Sentence:
        nonlocal sentence_counter
        sentence_counter += 1
        gold = [None, *labels] if with_labels else None
        return Sentence(id=sent_id or f"s{sentence_counter}", nodes=[Node.root(), *nodes], gold_labels=gold)

    for line_num, raw_line in enumerate(conllu_text.splitlines(), 1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            if nodes:
                yield _finish()
            nodes, labels, sent_id = [], [], ""
            continue
        if line.startswith("#"):
            key_val = line[1:].strip()
            if key_val.startswith("sent_id") and "=" in key_val:
                sent_id = key_val.split("=", 1)[1].strip()
            continue

        parts = line.split("\t")
        if len(parts) != 10:
            raise ValueError(f"Line {line_num}: expected 10 tab-separated columns, got {len(parts)}")
        token_id = parts[0]
        if "-" in token_id or "." in token_id:
            continue
        if not token_id.isdigit() or int(token_id) != len(nodes) + 1:
            raise ValueError(f"Line {line_num}: unexpected token id '{token_id}'")

        feats = _parse_pairs(parts[COLUMN_INDEX["feats"]])
        feats.update(_parse_pairs(parts[COLUMN_INDEX["misc"]]))
        if key is not None:
            # the label key must not reach feature extraction through ft=KEY
            feats.pop(key, None)
        nodes.append(
            Node(
                id=len(nodes) + 1,
                form=parts[COLUMN_INDEX["form"]],
                lemma=_value(parts[COLUMN_INDEX["lemma"]]) or "",
                feats=feats,
            )
        )
        if key is None:
            labels.append(_value(parts[COLUMN_INDEX[column]]))
        else:
            labels.append(_parse_pairs(parts[COLUMN_INDEX[column]]).get(key))

    if nodes:
        yield _finish()


def load_conllu(path: Path, label_column: str = "upos", with_labels: bool = True) -> List[Sentence]:
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return list(read_conllu(text, label_column=label_column, with_labels=with_labels))


def write_tagged(states: Iterable[SentenceState]) -> str:
    """Render tagged sentences: id, form, lemma, label and alternate labels per line."""
    lines: List[str] = []
    for state in states:
        sentence = state.sentence
        if sentence.id:
            lines.append(f"# sent_id = {sentence.id}")
        for node in sentence.tokens():
            label = state.get_label(node.id) or node.label
            second = state.get_second_labels(node.id)
            lines.append(
                "\t".join(
                    [
                        str(node.id),
                        node.form,
                        node.lemma or BLANK,
                        label or BLANK,
                        "|".join(second) if second else BLANK,
                    ]
                )
            )
        lines.append("")
    return "\n".join(lines) + ("\n" if lines else "")
