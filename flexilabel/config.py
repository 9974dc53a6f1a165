"""
Configuration classes for flexilabel.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .features import FeatureTemplate

# Window of forms, lemmas and ambiguity classes, label history, orthography and affixes
DEFAULT_TEMPLATES: List[Union[str, Dict[str, Any]]] = [
    "i-2:f",
    "i-1:f",
    "i:f",
    "i+1:f",
    "i+2:f",
    "i-1:f i:f",
    "i:f i+1:f",
    "i-1:m",
    "i:m",
    "i+1:m",
    "i-1:p",
    "i-2:p",
    "i-2:p i-1:p",
    "i-1:p i+1:a",
    "i:a",
    "i+1:a",
    "i+2:a",
    "i+1:a i+2:a",
    "i-1:p i:a",
    "i:b0",
    "i:b1",
    "i:b2",
    "i:b3",
    "i:b4",
    "i:b5",
    "i:b6",
    "i:b7",
    "i:b8",
    "i:b9",
    {"name": "prefixes", "tokens": ["i:pf3"], "multi": True},
    {"name": "suffixes", "tokens": ["i:sf4"], "multi": True},
]


@dataclass
class TaggerConfig:
    """Configuration for a flexilabel tagger."""
    label_column: str = "upos"  # CoNLL-U column holding gold labels: upos, xpos, deprel, feats:KEY or misc:KEY
    negative_label: Optional[str] = None  # Gold label for tokens without one (e.g. "O" for non-predicates); unset skips them
    margin_threshold: float = 1.0  # Score gap below which the runner-up label is kept as an alternate
    ambiguity_threshold: float = 0.2  # A label joins an ambiguity class when its probability exceeds this
    ambiguity_separator: str = "_"
    frequent_form_cutoff: int = 1  # Forms must occur in more than this many sentences to be lexical features
    train_history: str = "gold"  # Labels visible to later features while training: 'gold' or 'hidden'
    bootstrap_rounds: int = 2  # Maximum bootstrap rounds (0 disables bootstrapping)
    metric: str = "accuracy"  # Development metric: accuracy, f1 or pred
    classifier_c: float = 0.1  # Regularization of the linear classifier
    classifier_max_iter: int = 2000
    templates: List[Union[str, Dict[str, Any]]] = field(default_factory=lambda: list(DEFAULT_TEMPLATES))

    def __post_init__(self):
        if self.train_history not in ("gold", "hidden"):
            raise ValueError(f"train_history must be 'gold' or 'hidden', got '{self.train_history}'")
        if self.bootstrap_rounds < 0:
            raise ValueError("bootstrap_rounds must not be negative")
        if self.negative_label == "":
            raise ValueError("negative_label must not be empty")
        if not 0.0 <= self.ambiguity_threshold < 1.0:
            raise ValueError("ambiguity_threshold must be in [0, 1)")

    def feature_templates(self) -> List[FeatureTemplate]:
        return [FeatureTemplate.from_config(entry) for entry in self.templates]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaggerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Path) -> TaggerConfig:
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: configuration must be a JSON object")
    return TaggerConfig.from_dict(data)


def save_config(config: TaggerConfig, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(config.to_dict(), handle, ensure_ascii=False, indent=2)
