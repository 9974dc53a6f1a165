import pytest

from flexilabel.conllu import load_conllu, read_conllu, write_tagged
from flexilabel.doc import Sentence
from flexilabel.state import SentenceState


def _row(*columns):
    return "\t".join(columns)


SAMPLE = "\n".join(
    [
        "# sent_id = d1",
        "# text = del perro",
        _row("1-2", "del", "_", "_", "_", "_", "_", "_", "_", "_"),
        _row("1", "de", "de", "ADP", "SP", "_", "3", "case", "_", "_"),
        _row("2", "el", "el", "DET", "DA", "Definite=Def", "3", "det", "_", "_"),
        _row("3", "perro", "perro", "NOUN", "NC", "Gender=Masc", "0", "root", "_", "pb=perro.01"),
        _row("3.1", "x", "_", "_", "_", "_", "_", "_", "_", "_"),
        "",
        _row("1", "Hola", "_", "_", "UH", "_", "0", "root", "_", "_"),
        "",
    ]
)


def test_read_conllu():
    sentences = list(read_conllu(SAMPLE))
    assert [s.id for s in sentences] == ["d1", "s2"]
    first = sentences[0]
    assert list(first.forms()) == ["de", "el", "perro"]
    assert first.gold_labels == [None, "ADP", "DET", "NOUN"]
    assert first.get(3).get_feat("pb") == "perro.01"
    assert first.get(3).get_feat("Gender") == "Masc"
    assert first.get(1).lemma == "de"
    second = sentences[1]
    assert second.gold_labels == [None, None]
    assert second.get(1).lemma == ""


@pytest.mark.parametrize(
    "column,expected",
    [
        ("xpos", [None, "SP", "DA", "NC"]),
        ("deprel", [None, "case", "det", "root"]),
        ("misc:pb", [None, None, None, "perro.01"]),
        ("feats:Definite", [None, None, "Def", None]),
    ],
)
def test_label_columns(column, expected):
    first = next(read_conllu(SAMPLE, label_column=column))
    assert first.gold_labels == expected


@pytest.mark.parametrize("column", ["form", "feats", "upos:x", "bogus"])
def test_unsupported_label_columns(column):
    with pytest.raises(ValueError):
        list(read_conllu(SAMPLE, label_column=column))


def test_without_labels():
    sentences = list(read_conllu(SAMPLE, with_labels=False))
    assert all(s.gold_labels is None for s in sentences)


def test_malformed_lines():
    with pytest.raises(ValueError, match="10 tab-separated columns"):
        list(read_conllu("1\tonly\n"))
    with pytest.raises(ValueError, match="unexpected token id"):
        list(read_conllu(_row("2", "x", "_", "_", "_", "_", "_", "_", "_", "_") + "\n"))


def test_load_conllu(tmp_path):
    path = tmp_path / "sample.conllu"
    path.write_text(SAMPLE, encoding="utf-8")
    assert len(load_conllu(path)) == 2


def test_write_tagged():
    sentence = Sentence.from_forms(["a", "b"], lemmas=["a", ""], sent_id="x1")
    state = SentenceState(sentence)
    state.shift()
    state.assign_label("DT")
    state.add_second_label("NN")
    state.add_second_label("JJ")
    state.shift()
    state.assign_label("NN")
    assert write_tagged([state]) == "# sent_id = x1\n1\ta\ta\tDT\tNN|JJ\n2\tb\t_\tNN\t_\n\n"
    assert write_tagged([]) == ""


def test_label_key_is_removed_from_feats():
    first = next(read_conllu(SAMPLE, label_column="misc:pb"))
    assert first.gold_labels[3] == "perro.01"
    assert first.get(3).get_feat("pb") is None
    assert first.get(3).get_feat("Gender") == "Masc"

    first = next(read_conllu(SAMPLE, label_column="feats:Definite"))
    assert first.get(2).get_feat("Definite") is None
    # other label columns keep every auxiliary feature
    first = next(read_conllu(SAMPLE))
    assert first.get(3).get_feat("pb") == "perro.01"
