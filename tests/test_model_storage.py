import json

import pytest

from flexilabel.config import TaggerConfig
from flexilabel.lexicon import Lexica
from flexilabel.model_storage import (
    CONFIG_FILE,
    LEXICA_FILE,
    MODEL_FILE,
    load_lexica,
    load_model,
    save_lexica,
    save_model,
)
from flexilabel.train import train_tagger


def test_save_and_load_lexica(tmp_path):
    lexica = Lexica(frequent_forms={"the"}, ambiguity_classes={"the": "DT"})
    path = tmp_path / "lexica.json"
    save_lexica(lexica, path, metadata={"train_file": "train.conllu"})
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["frequent_forms"] == 1
    assert data["metadata"]["train_file"] == "train.conllu"
    assert data["metadata"]["generator"].startswith("flexilabel ")
    assert load_lexica(path) == lexica


def test_load_lexica_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_lexica(tmp_path / "missing.json")
    path = tmp_path / "other.json"
    path.write_text(json.dumps({"metadata": {}}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_lexica(path)


def test_save_and_load_model(tmp_path, corpus):
    config = TaggerConfig(label_column="upos", bootstrap_rounds=0)
    result = train_tagger(corpus, config=config)
    directory = save_model(tmp_path / "model", result.classifier, result.lexica, config)
    for name in (LEXICA_FILE, MODEL_FILE, CONFIG_FILE):
        assert (directory / name).exists()

    classifier, lexica, loaded_config = load_model(directory)
    assert classifier.labels == result.classifier.labels
    assert lexica == result.lexica
    assert loaded_config == config


def test_load_model_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_model(tmp_path / "missing")
    (tmp_path / "partial").mkdir()
    (tmp_path / "partial" / LEXICA_FILE).write_text("{}", encoding="utf-8")
    with pytest.raises(FileNotFoundError, match="model.pkl"):
        load_model(tmp_path / "partial")
