import pytest

from flexilabel.normalization import (
    NUMBER_PLACEHOLDER,
    URL_PLACEHOLDER,
    begins_with_upper,
    count_inner_capitals,
    get_prefixes,
    get_suffixes,
    lower_simplified_form,
    simplify_form,
)


@pytest.mark.parametrize(
    "form,expected",
    [
        ("3.14", NUMBER_PLACEHOLDER),
        ("1,000,000", NUMBER_PLACEHOLDER),
        ("abc123def", "abc0def"),
        ("!!!", "!"),
        ("?!?", "?!?"),
        ("http://example.org/a?b=1", URL_PLACEHOLDER),
        ("www.example.org", URL_PLACEHOLDER),
        ("someone@example.org", URL_PLACEHOLDER),
        ("Word", "Word"),
        ("", ""),
    ],
)
def test_simplify_form(form, expected):
    assert simplify_form(form) == expected


def test_lower_simplified_form():
    assert lower_simplified_form("ABC12") == "abc0"


def test_orthography_helpers():
    assert count_inner_capitals("McDonald") == 1
    assert count_inner_capitals("Nato") == 0
    assert begins_with_upper("Nato")
    assert not begins_with_upper("")


def test_affixes():
    assert get_prefixes("abc", 5) == ["a", "ab", "abc"]
    assert get_suffixes("abc", 2) == ["c", "bc"]
    assert get_prefixes("abc", 0) == []
