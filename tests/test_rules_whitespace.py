"""Tests for whitespace and blank-line rules."""
from markdownlint_mcp.core.linter.rules.whitespace import (
    fix_no_hard_tabs,
    fix_no_multiple_blanks,
    fix_no_multiple_space_blockquote,
    fix_no_trailing_spaces,
    fix_single_trailing_newline,
    line_length,
    no_blanks_blockquote,
    no_hard_tabs,
    no_multiple_blanks,
    no_multiple_space_blockquote,
    no_trailing_spaces,
    single_trailing_newline,
)


# ---------------------------------------------------------------------------
# MD009 no-trailing-spaces
# ---------------------------------------------------------------------------


def test_trailing_spaces_stripped():
    assert fix_no_trailing_spaces(["Line one.  ", "Line two."], {}) == ["Line one.", "Line two."]


def test_trailing_spaces_reported():
    violations = no_trailing_spaces(["a  ", "b"], {})

    assert len(violations) == 1
    assert violations[0].line == 1
    assert violations[0].message == "Trailing spaces [Expected: 0; Actual: 2]"
    assert violations[0].range == (2, 2)


def test_hard_break_allowed_with_br_spaces():
    config = {"MD009": {"br_spaces": 2}}

    assert no_trailing_spaces(["a  ", "b"], config) == []
    assert fix_no_trailing_spaces(["a   ", "b"], config) == ["a  ", "b"]


def test_strict_flags_break_with_nothing_after():
    config = {"MD009": {"br_spaces": 2, "strict": True}}

    assert len(no_trailing_spaces(["a  ", ""], config)) == 1
    assert fix_no_trailing_spaces(["a  ", ""], config) == ["a", ""]


def test_whitespace_only_line_emptied():
    assert fix_no_trailing_spaces(["   "], {}) == [""]


def test_bad_br_spaces_falls_back_to_default():
    assert len(no_trailing_spaces(["a  "], {"MD009": {"br_spaces": "two"}})) == 1


# ---------------------------------------------------------------------------
# MD010 no-hard-tabs
# ---------------------------------------------------------------------------


def test_hard_tab_reported_and_expanded():
    violations = no_hard_tabs(["a\tb"], {})

    assert violations[0].message == "Hard tabs [Column: 2]"
    assert fix_no_hard_tabs(["a\tb"], {}) == ["a  b"]


def test_indented_code_tab_keeps_block():
    """A leading tab in indented code becomes four spaces."""
    assert fix_no_hard_tabs(["Text", "", "\tcode"], {}) == ["Text", "", "    code"]


def test_tabs_in_code_skipped_when_disabled():
    config = {"MD010": {"code_blocks": False}}

    assert no_hard_tabs(["```", "\tx", "```"], config) == []
    assert fix_no_hard_tabs(["```", "\tx", "```"], config) == ["```", "\tx", "```"]


# ---------------------------------------------------------------------------
# MD012 no-multiple-blanks
# ---------------------------------------------------------------------------


def test_multiple_blanks_collapsed():
    lines = ["Line 1", "", "", "", "Line 2"]

    assert [v.line for v in no_multiple_blanks(lines, {})] == [3, 4]
    assert fix_no_multiple_blanks(lines, {}) == ["Line 1", "", "Line 2"]


def test_multiple_blanks_maximum_option():
    lines = ["Line 1", "", "", "", "Line 2"]

    assert [v.line for v in no_multiple_blanks(lines, {"MD012": {"maximum": 2}})] == [4]


def test_blanks_inside_fence_are_content():
    lines = ["```", "", "", "```"]

    assert no_multiple_blanks(lines, {}) == []
    assert fix_no_multiple_blanks(lines, {}) == lines


def test_multiple_blanks_at_document_edges():
    """The final empty line is the trailing newline, not a blank line."""
    lines = ["", "", "a", "", "", ""]

    assert [v.line for v in no_multiple_blanks(lines, {})] == [2, 5]
    assert fix_no_multiple_blanks(lines, {}) == ["", "a", "", ""]


def test_multiple_blanks_invalid_maximum_uses_default():
    lines = ["", "", "a", "", "", ""]
    config = {"MD012": {"maximum": "x"}}

    assert [v.line for v in no_multiple_blanks(lines, config)] == [2, 5]
    assert fix_no_multiple_blanks(lines, config) == ["", "a", "", ""]


def test_trailing_newline_not_counted_as_blank():
    config = {"MD012": {"maximum": 0}}

    assert no_multiple_blanks(["Text", ""], config) == []
    assert fix_no_multiple_blanks(["Text", ""], config) == ["Text", ""]
    assert fix_no_multiple_blanks(["Text", "", "", ""], config) == ["Text", ""]


# ---------------------------------------------------------------------------
# MD013 line-length
# ---------------------------------------------------------------------------


def test_long_line_reported():
    violations = line_length(["short", "this line is too long"], {"MD013": {"line_length": 10}})

    assert len(violations) == 1
    assert violations[0].line == 2
    assert violations[0].message == "Line length [Expected: 10; Actual: 21]"


def test_unbreakable_line_not_reported():
    assert line_length(["https://example.com/very/long/path"], {"MD013": {"line_length": 10}}) == []


# ---------------------------------------------------------------------------
# Blockquotes
# ---------------------------------------------------------------------------


def test_blockquote_extra_spaces():
    assert len(no_multiple_space_blockquote([">  quoted"], {})) == 1
    assert fix_no_multiple_space_blockquote([">  quoted"], {}) == ["> quoted"]


def test_blank_between_blockquotes():
    violations = no_blanks_blockquote(["> a", "", "> b"], {})

    assert [v.line for v in violations] == [2]
    assert no_blanks_blockquote(["> a", "> b"], {}) == []


# ---------------------------------------------------------------------------
# MD047 single-trailing-newline
# ---------------------------------------------------------------------------


def test_missing_final_newline():
    assert len(single_trailing_newline(["a"], {})) == 1
    assert fix_single_trailing_newline(["a"], {}) == ["a", ""]


def test_final_newline_present():
    assert single_trailing_newline(["a", ""], {}) == []
    assert fix_single_trailing_newline(["a", ""], {}) == ["a", ""]


def test_whitespace_last_line_replaced():
    assert fix_single_trailing_newline(["a", "  "], {}) == ["a", ""]
