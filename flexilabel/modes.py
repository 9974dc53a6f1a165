"""Central definitions for flexilabel operating modes."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Set


class TaggerMode(Enum):
    """Operating mode of the tagging engine, passed explicitly to every pass."""

    LEXICA = "lexica"
    TRAIN = "train"
    DEVELOP = "develop"
    DECODE = "decode"
    BOOTSTRAP = "bootstrap"

    @property
    def is_train_or_bootstrap(self) -> bool:
        return self in (TaggerMode.TRAIN, TaggerMode.BOOTSTRAP)

    @property
    def is_develop_or_decode(self) -> bool:
        return self in (TaggerMode.DEVELOP, TaggerMode.DECODE)

    @property
    def uses_gold(self) -> bool:
        return self is not TaggerMode.DECODE

    @property
    def uses_classifier(self) -> bool:
        return self in (TaggerMode.DEVELOP, TaggerMode.DECODE, TaggerMode.BOOTSTRAP)


# Canonical mode descriptions
MODE_DESCRIPTIONS: Dict[TaggerMode, str] = {
    TaggerMode.LEXICA: "Collect frequent forms and ambiguity classes.",
    TaggerMode.TRAIN: "Harvest gold-labeled training instances.",
    TaggerMode.DEVELOP: "Decode with the current model and score against gold labels.",
    TaggerMode.DECODE: "Decode unlabeled input.",
    TaggerMode.BOOTSTRAP: "Decode with the current model while harvesting gold-labeled instances.",
}

# Canonical mode -> alias strings
_MODE_ALIAS_DEFINITIONS: Dict[TaggerMode, Set[str]] = {
    TaggerMode.LEXICA: {"lexica", "lexicon", "collect"},
    TaggerMode.TRAIN: {"train", "training"},
    TaggerMode.DEVELOP: {"develop", "dev", "eval", "evaluate"},
    TaggerMode.DECODE: {"decode", "tag", "predict"},
    TaggerMode.BOOTSTRAP: {"bootstrap", "boot"},
}

# Normalized alias lookup
MODE_LOOKUP: Dict[str, TaggerMode] = {}

for canonical, aliases in _MODE_ALIAS_DEFINITIONS.items():
    MODE_LOOKUP[canonical.value] = canonical
    for alias in aliases:
        MODE_LOOKUP[alias.lower()] = canonical


def parse_mode(value: str | TaggerMode) -> TaggerMode:
    if isinstance(value, TaggerMode):
        return value
    mode = MODE_LOOKUP.get(str(value).strip().lower())
    if mode is None:
        raise ValueError(
            f"Unknown mode '{value}'. Expected one of: "
            + ", ".join(m.value for m in TaggerMode)
        )
    return mode
