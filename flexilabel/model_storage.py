"""
Model storage for flexilabel.

A model directory holds three files::

    model_dir/
      ├── lexica.json   frequent forms and ambiguity classes (versioned)
      ├── model.pkl     the trained classifier
      └── config.json   the tagger configuration

The lexica and the classifier are opaque to the tagging engine; this module
only moves them between disk and memory.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from . import __version__
from .classifier import LinearClassifier
from .config import TaggerConfig, load_config, save_config
from .lexicon import Lexica

logger = logging.getLogger(__name__)

LEXICA_FILE = "lexica.json"
MODEL_FILE = "model.pkl"
CONFIG_FILE = "config.json"


def save_lexica(lexica: Lexica, path: Path, metadata: Optional[Dict[str, Any]] = None) -> None:
    output_data = {
        "lexica": lexica.to_dict(),
        "metadata": {
            "generator": f"flexilabel {__version__}",
            "created": datetime.now().isoformat(timespec="seconds"),
            "frequent_forms": len(lexica.frequent_forms),
            "ambiguity_classes": len(lexica.ambiguity_classes),
            **(metadata or {}),
        },
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(output_data, f, ensure_ascii=False, indent=2)


def load_lexica(path: Path) -> Lexica:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Lexica file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if "lexica" not in data:
        raise ValueError(f"{path}: missing 'lexica' section")
    return Lexica.from_dict(data["lexica"])


def save_model(
    directory: Path,
    classifier: LinearClassifier,
    lexica: Lexica,
    config: TaggerConfig,
    metadata: Optional[Dict[str, Any]] = None,
) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    save_lexica(lexica, directory / LEXICA_FILE, metadata=metadata)
    classifier.save(directory / MODEL_FILE)
    save_config(config, directory / CONFIG_FILE)
    logger.info("Saved model to %s", directory)
    return directory


def load_model(directory: Path) -> Tuple[LinearClassifier, Lexica, TaggerConfig]:
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Model directory not found: {directory}")
    for name in (LEXICA_FILE, MODEL_FILE, CONFIG_FILE):
        if not (directory / name).exists():
            raise FileNotFoundError(f"No {name} found inside model directory: {directory}")
    lexica = load_lexica(directory / LEXICA_FILE)
    classifier = LinearClassifier.load(directory / MODEL_FILE)
    config = load_config(directory / CONFIG_FILE)
    logger.info("Loaded model from %s (%d labels)", directory, len(classifier.labels))
    return classifier, lexica, config
