"""Unit tests for LaTeX escaping of free-text resume values."""

import pytest

from atlas.contexts.templating.escaping import escape_latex


@pytest.mark.unit
def test_percent_and_dollar():
    assert escape_latex("50% of $100") == r"50\% of \$100"


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("R&D", r"R\&D"),
        ("#1 team", r"\#1 team"),
        ("snake_case", r"snake\_case"),
        ("{braces}", r"\{braces\}"),
        ("~home", r"\textasciitilde{}home"),
        ("x^2", r"x\textasciicircum{}2"),
    ],
)
def test_special_characters(raw, expected):
    assert escape_latex(raw) == expected


@pytest.mark.unit
def test_backslash_braces_are_not_reescaped():
    """The braces introduced for a backslash must survive as-is."""
    assert escape_latex("C:\\Users") == r"C:\textbackslash{}Users"


@pytest.mark.unit
def test_control_characters_removed():
    assert escape_latex("bad\x00byte\x07s\x9f") == "badbytes"


@pytest.mark.unit
def test_newlines_and_whitespace_collapsed():
    assert escape_latex("  line one\n\n\tline   two  ") == "line one line two"


@pytest.mark.unit
def test_unicode_normalization():
    assert escape_latex("Caf\u00e9 M\u00fcller") == "Cafe Muller"
    assert escape_latex("2019\u20132021") == "2019-2021"
    assert escape_latex("\u201cquoted\u201d and \u2018single\u2019") == "\"quoted\" and 'single'"
    assert escape_latex("\u2022 bullet") == "* bullet"
    assert escape_latex("non\u00a0breaking") == "non breaking"


@pytest.mark.unit
def test_none_and_non_string_values():
    assert escape_latex(None) == ""
    assert escape_latex(3.5) == "3.5"

