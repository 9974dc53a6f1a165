import pytest

from flexilabel.modes import MODE_DESCRIPTIONS, TaggerMode, parse_mode


@pytest.mark.parametrize(
    "value,expected",
    [
        ("lexica", TaggerMode.LEXICA),
        ("TRAIN", TaggerMode.TRAIN),
        (" dev ", TaggerMode.DEVELOP),
        ("tag", TaggerMode.DECODE),
        ("boot", TaggerMode.BOOTSTRAP),
        (TaggerMode.DECODE, TaggerMode.DECODE),
    ],
)
def test_parse_mode(value, expected):
    assert parse_mode(value) is expected


def test_parse_mode_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown mode"):
        parse_mode("sample")


def test_mode_predicates():
    assert TaggerMode.TRAIN.is_train_or_bootstrap
    assert TaggerMode.BOOTSTRAP.is_train_or_bootstrap
    assert not TaggerMode.DEVELOP.is_train_or_bootstrap
    assert TaggerMode.DEVELOP.is_develop_or_decode
    assert TaggerMode.DECODE.is_develop_or_decode
    assert not TaggerMode.DECODE.uses_gold
    assert TaggerMode.LEXICA.uses_gold
    assert not TaggerMode.TRAIN.uses_classifier
    assert TaggerMode.BOOTSTRAP.uses_classifier


def test_every_mode_is_described():
    assert set(MODE_DESCRIPTIONS) == set(TaggerMode)
