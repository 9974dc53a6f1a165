"""
Form simplification for flexilabel.

Lexical lookups (frequent forms, ambiguity classes, prefixes and suffixes) run
on simplified forms so that URLs, numbers and repeated punctuation do not
fragment the statistics.
"""
from __future__ import annotations

import re
from typing import List

URL_PLACEHOLDER = "#url#"
NUMBER_PLACEHOLDER = "0"

_RE_URL = re.compile(
    r"(?:(?:https?|ftp)://\S+|www\.\S+|[\w.+-]+@[\w-]+(?:\.[\w-]+)+)",
    re.IGNORECASE,
)
_RE_NUMBER = re.compile(r"\d+(?:[.,:/-]\d+)*")
_RE_REPEATED_PUNCT = re.compile(r"([^\w\s])\1+")


def simplify_form(form: str) -> str:
    """
    Simplify a surface form.

    URLs and e-mail addresses become ``#url#``, digit groups (optionally joined
    by ``.,:/-``) become ``0`` and runs of the same punctuation character are
    collapsed, e.g. ``"3.14"`` -> ``"0"``, ``"!!!"`` -> ``"!"``.
    """
    if not form:
        return form
    if _RE_URL.fullmatch(form):
        return URL_PLACEHOLDER
    simplified = _RE_URL.sub(URL_PLACEHOLDER, form)
    simplified = _RE_NUMBER.sub(NUMBER_PLACEHOLDER, simplified)
    return _RE_REPEATED_PUNCT.sub(r"\1", simplified)


def lower_simplified_form(form: str) -> str:
    return simplify_form(form).lower()


def is_all_upper(form: str) -> bool:
    """True if the form has cased characters and all of them are uppercase."""
    return form.isupper()


def is_all_lower(form: str) -> bool:
    return form.islower()


def begins_with_upper(form: str) -> bool:
    return bool(form) and form[0].isupper()


def count_inner_capitals(form: str) -> int:
    """Number of uppercase characters not at the beginning of the form."""
    return sum(1 for ch in form[1:] if ch.isupper())


def contains_digit(form: str) -> bool:
    return any(ch.isdigit() for ch in form)


def get_prefixes(form: str, n: int) -> List[str]:
    """All prefixes of length 1..min(n, len(form)), shortest first."""
    return [form[:k] for k in range(1, min(n, len(form)) + 1)]


def get_suffixes(form: str, n: int) -> List[str]:
    """All suffixes of length 1..min(n, len(form)), shortest first."""
    return [form[-k:] for k in range(1, min(n, len(form)) + 1)]
