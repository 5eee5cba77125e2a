"""Tests for emphasis and strong emphasis rules."""
from markdownlint_mcp.core.linter.rules.emphasis import (
    emphasis_style,
    fix_emphasis_style,
    fix_no_space_in_emphasis,
    fix_strong_style,
    no_space_in_emphasis,
    strong_style,
)


# ---------------------------------------------------------------------------
# MD037 no-space-in-emphasis
# ---------------------------------------------------------------------------


def test_spaces_inside_strong_trimmed():
    lines = ["Some ** bold ** text"]
    violations = no_space_in_emphasis(lines, {})

    assert violations[0].message == 'Spaces inside emphasis markers [Context: "** bold **"]'
    assert fix_no_space_in_emphasis(lines, {}) == ["Some **bold** text"]


def test_spaces_inside_underscore_emphasis_trimmed():
    assert fix_no_space_in_emphasis(["Some _ italic _ text"], {}) == ["Some _italic_ text"]


def test_list_marker_not_emphasis():
    assert no_space_in_emphasis(["* item with *emph*"], {}) == []


# ---------------------------------------------------------------------------
# MD049 emphasis-style
# ---------------------------------------------------------------------------


def test_underscore_emphasis_rewritten():
    violations = emphasis_style(["Use _this_ style"], {})

    assert violations[0].message == "Emphasis style [Expected: asterisk; Actual: underscore]"
    assert fix_emphasis_style(["Use _this_ style"], {}) == ["Use *this* style"]


def test_consistent_emphasis_follows_first():
    config = {"MD049": {"style": "consistent"}}

    assert len(emphasis_style(["_a_ and *b*"], config)) == 1
    assert fix_emphasis_style(["_a_ and *b*"], config) == ["_a_ and _b_"]


def test_snake_case_and_code_ignored():
    assert emphasis_style(["snake_case_name"], {}) == []
    assert emphasis_style(["`_x_`"], {}) == []


def test_strong_not_read_as_emphasis():
    assert emphasis_style(["**bold**"], {}) == []


# ---------------------------------------------------------------------------
# MD050 strong-style
# ---------------------------------------------------------------------------


def test_underscore_strong_rewritten():
    assert len(strong_style(["__bold__ text"], {})) == 1
    assert fix_strong_style(["__bold__ text"], {}) == ["**bold** text"]


def test_strong_underscore_style_option():
    assert fix_strong_style(["**bold**"], {"MD050": {"style": "underscore"}}) == ["__bold__"]
