import pytest

from flexilabel.doc import Sentence
from flexilabel.state import SentenceState


def _state(n):
    sentence = Sentence.from_forms([f"w{i}" for i in range(n)], labels=[f"L{i}" for i in range(n)])
    return SentenceState(sentence, sentence.get_gold_labels())


@pytest.mark.parametrize("n", [1, 2, 5])
def test_cursor_monotonicity(n):
    state = _state(n)
    firsts, lasts = [], []
    for i in range(n):
        node = state.shift()
        assert node is not None
        assert node.id == i + 1
        firsts.append(state.is_input_first_node())
        lasts.append(state.is_input_last_node())
    assert state.is_exhausted()
    assert state.shift() is None
    assert state.shift() is None
    assert firsts == [True] + [False] * (n - 1)
    assert lasts == [False] * (n - 1) + [True]


def test_exhausted_shift_does_not_mutate():
    state = _state(2)
    state.shift()
    state.shift()
    cursor = state.cursor
    assert state.shift() is None
    assert state.cursor == cursor
    assert state.get_input_node().id == 2
    assert state.is_input_last_node()


def test_predicates_before_first_shift():
    state = _state(3)
    assert not state.is_input_first_node()
    assert not state.is_input_last_node()
    assert state.get_node(0) is None
    assert state.peek().id == 1


def test_gold_label_of_shifted_node():
    sentence = Sentence.from_forms(["a", "b"], labels=["X", None])
    state = SentenceState(sentence, sentence.get_gold_labels())
    state.shift()
    assert state.get_gold_label() == "X"
    state.shift()
    assert state.get_gold_label() is None


def test_no_gold_labels_in_decode_state():
    sentence = Sentence.from_forms(["a"])
    state = SentenceState(sentence)
    state.shift()
    assert not state.has_gold_labels
    assert state.get_gold_label() is None


def test_relative_nodes_stop_at_boundaries():
    state = _state(3)
    state.shift()
    assert state.get_node(-1) is None  # the root is not context
    assert state.get_node(1).id == 2
    assert state.get_node(2).id == 3
    assert state.get_node(3) is None


def test_second_labels_append_only():
    state = _state(2)
    state.shift()
    state.add_second_label("A")
    state.add_second_label("B")
    state.shift()
    assert state.get_second_labels(1) == ("A", "B")
    assert state.get_second_labels(2) == ()
    assert isinstance(state.get_second_labels(1), tuple)


def test_assign_label_write_node_flag():
    state = _state(2)
    node = state.shift()
    state.assign_label("Z", write_node=False)
    assert state.get_label(1) == "Z"
    assert node.label is None
    node = state.shift()
    state.assign_label("Y")
    assert node.label == "Y"


def test_gold_label_length_is_checked():
    sentence = Sentence.from_forms(["a", "b"])
    with pytest.raises(ValueError):
        SentenceState(sentence, [None, "X"])
