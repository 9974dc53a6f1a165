"""
Feature extraction for flexilabel.

A feature template is a list of feature tokens. Each token names a position
relative to the node just shifted (``i``, ``i-1``, ``i+2``) and a field
selector::

    f       raw form               (frequent forms only)
    sf      simplified form        (frequent forms only)
    lsf     lower simplified form  (frequent forms only)
    m       lemma                  (frequent forms only)
    p       label of an already tagged node
    a       ambiguity class
    b0-b9   boolean orthographic predicates
    ft=KEY  auxiliary feature KEY
    pfN     prefix of length N of the lower simplified form
    sfN     suffix of length N of the lower simplified form

Absent context (no node at the requested position) is the normal "no value"
outcome and is returned as ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .lexicon import Lexica
from .normalization import (
    begins_with_upper,
    contains_digit,
    count_inner_capitals,
    get_prefixes,
    get_suffixes,
    is_all_lower,
    is_all_upper,
)
from .state import SentenceState

F_FORM = "f"
F_SIMPLIFIED_FORM = "sf"
F_LOWER_SIMPLIFIED_FORM = "lsf"
F_LEMMA = "m"
F_LABEL = "p"
F_AMBIGUITY_CLASS = "a"

P_BOOLEAN = re.compile(r"^b(\d+)$")
P_FEAT = re.compile(r"^ft=(.+)$")
P_PREFIX = re.compile(r"^pf(\d+)$")
P_SUFFIX = re.compile(r"^sf(\d+)$")

SOURCE_INPUT = "i"

_RE_TOKEN = re.compile(r"^(?P<source>[a-z])(?P<offset>[+-]\d+)?:(?P<selector>.+)$")

# Values of a multi-token feature are joined with this delimiter
VALUE_DELIMITER = "_"

_GATED_FIELDS = {F_FORM, F_SIMPLIFIED_FORM, F_LOWER_SIMPLIFIED_FORM, F_LEMMA}
_SIMPLE_FIELDS = _GATED_FIELDS | {F_LABEL, F_AMBIGUITY_CLASS}


@dataclass
class FeatureToken:
    """One field lookup at a position relative to the node just shifted."""

    source: str
    offset: int
    selector: str
    kind: str = field(init=False, repr=False, compare=False)
    arg: Optional[str] = field(init=False, default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.source != SOURCE_INPUT:
            raise ValueError(f"Unsupported feature source '{self.source}' (expected '{SOURCE_INPUT}')")
        if self.selector in _SIMPLE_FIELDS:
            self.kind = self.selector
            return
        for kind, pattern in (("b", P_BOOLEAN), ("ft", P_FEAT), ("pf", P_PREFIX), ("sfx", P_SUFFIX)):
            m = pattern.match(self.selector)
            if m:
                self.kind = kind
                self.arg = m.group(1)
                return
        raise ValueError(f"Unknown feature field '{self.selector}'")

    @classmethod
    def parse(cls, text: str) -> "FeatureToken":
        m = _RE_TOKEN.match(text.strip())
        if not m:
            raise ValueError(f"Malformed feature token '{text}' (expected e.g. 'i-1:p')")
        offset = int(m.group("offset")) if m.group("offset") else 0
        return cls(source=m.group("source"), offset=offset, selector=m.group("selector"))

    def __str__(self) -> str:
        if self.offset:
            return f"{self.source}{self.offset:+d}:{self.selector}"
        return f"{self.source}:{self.selector}"


@dataclass
class FeatureTemplate:
    name: str
    tokens: List[FeatureToken]
    multi: bool = False

    def __post_init__(self):
        if not self.tokens:
            raise ValueError(f"Feature template '{self.name}' has no tokens")
        if self.multi:
            if len(self.tokens) != 1 or self.tokens[0].kind not in ("pf", "sfx"):
                raise ValueError(
                    f"Feature template '{self.name}': multi templates take a single prefix or suffix token"
                )

    @classmethod
    def from_config(cls, entry: Union[str, Dict[str, Any]]) -> "FeatureTemplate":
        """
        Build a template from a string (``"i-1:p i:p"``) or a dict
        (``{"name": ..., "tokens": [...], "multi": false}``).
        """
        if isinstance(entry, str):
            texts = entry.split()
            return cls(name=entry, tokens=[FeatureToken.parse(t) for t in texts])
        if not isinstance(entry, dict):
            raise ValueError(f"Unsupported feature template entry: {entry!r}")
        unknown = set(entry) - {"name", "tokens", "multi"}
        if unknown:
            raise ValueError(f"Unknown feature template keys: {', '.join(sorted(unknown))}")
        tokens = entry.get("tokens") or []
        if isinstance(tokens, str):
            tokens = tokens.split()
        name = entry.get("name") or " ".join(tokens)
        return cls(name=name, tokens=[FeatureToken.parse(t) for t in tokens], multi=bool(entry.get("multi", False)))

    def to_config(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "tokens": [str(t) for t in self.tokens]}
        if self.multi:
            result["multi"] = True
        return result


class FeatureVector:
    """Ordered (feature name, value) pairs for one node in context."""

    def __init__(self, pairs: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        self._pairs: List[Tuple[str, str]] = list(pairs) if pairs else []

    def add(self, name: str, value: str) -> None:
        self._pairs.append((name, value))

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FeatureVector):
            return self._pairs == other._pairs
        return NotImplemented

    def __repr__(self) -> str:
        return f"FeatureVector({self._pairs!r})"

    @property
    def pairs(self) -> List[Tuple[str, str]]:
        return list(self._pairs)

    def to_strings(self) -> List[str]:
        return [f"{name}={value}" for name, value in self._pairs]

    def to_dict(self) -> Dict[str, float]:
        """Binary-presence encoding used by vectorizers."""
        return {entry: 1.0 for entry in self.to_strings()}


class FeatureExtractor:
    """Resolves feature templates against a sentence state."""

    def __init__(self, templates: Sequence[FeatureTemplate], lexica: Optional[Lexica] = None) -> None:
        self.templates = list(templates)
        self.lexica = lexica if lexica is not None else Lexica.empty()

    def get_field(self, token: FeatureToken, state: SentenceState) -> Optional[str]:
        node = state.get_node(token.offset)
        if node is None:
            return None
        kind = token.kind

        if kind in _GATED_FIELDS:
            if not self.lexica.contains_frequent_form(node):
                return None
            if kind == F_FORM:
                return node.form
            if kind == F_SIMPLIFIED_FORM:
                return node.simplified_form
            if kind == F_LOWER_SIMPLIFIED_FORM:
                return node.lower_simplified_form
            return node.lemma or None
        if kind == F_LABEL:
            return state.get_label(node.id)
        if kind == F_AMBIGUITY_CLASS:
            return self.lexica.ambiguity_classes.get(node.simplified_form)
        if kind == "b":
            return self._get_boolean(int(token.arg), token.selector, node.simplified_form, state)
        if kind == "ft":
            return node.get_feat(token.arg)

        n = int(token.arg)
        form = node.lower_simplified_form
        if n > len(form) or n <= 0:
            return None
        if kind == "pf":
            return form[:n]
        return form[len(form) - n:]

    @staticmethod
    def _get_boolean(code: int, name: str, form: str, state: SentenceState) -> Optional[str]:
        if code == 0:
            flag = is_all_upper(form)
        elif code == 1:
            flag = is_all_lower(form)
        elif code == 2:
            flag = begins_with_upper(form) and not state.is_input_first_node()
        elif code == 3:
            flag = count_inner_capitals(form) == 1
        elif code == 4:
            flag = count_inner_capitals(form) > 1
        elif code == 5:
            flag = "." in form
        elif code == 6:
            flag = contains_digit(form)
        elif code == 7:
            flag = "-" in form
        elif code == 8:
            flag = state.is_input_last_node()
        elif code == 9:
            flag = state.is_input_first_node()
        else:
            raise ValueError(f"Unsupported feature: {name}")
        return name if flag else None

    def get_fields(self, token: FeatureToken, state: SentenceState) -> Optional[List[str]]:
        """All prefixes or suffixes up to the token's length; ``None`` if no node resolves."""
        if token.kind not in ("pf", "sfx"):
            raise ValueError(f"Feature field '{token.selector}' does not produce multiple values")
        node = state.get_node(token.offset)
        if node is None:
            return None
        n = int(token.arg)
        if token.kind == "pf":
            return get_prefixes(node.lower_simplified_form, n)
        return get_suffixes(node.lower_simplified_form, n)

    def extract(self, state: SentenceState) -> FeatureVector:
        vector = FeatureVector()
        for template in self.templates:
            if template.multi:
                for value in self.get_fields(template.tokens[0], state) or []:
                    vector.add(template.name, value)
                continue
            values = []
            for token in template.tokens:
                value = self.get_field(token, state)
                if value is None:
                    break
                values.append(value)
            else:
                vector.add(template.name, VALUE_DELIMITER.join(values))
        return vector
