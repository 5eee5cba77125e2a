"""Tests for table rules."""
from markdownlint_mcp.core.linter.rules.tables import (
    blanks_around_tables,
    fix_blanks_around_tables,
    fix_table_column_count,
    fix_table_pipe_style,
    table_column_count,
    table_pipe_style,
)

TABLE = ["| a | b |", "| --- | --- |"]


# ---------------------------------------------------------------------------
# MD055 table-pipe-style
# ---------------------------------------------------------------------------


def test_missing_pipes_added():
    lines = TABLE + ["1 | 2"]
    violations = table_pipe_style(lines, {})

    assert violations[0].line == 3
    assert violations[0].message == (
        "Table pipe style [Expected: leading_and_trailing; Actual: no_leading_or_trailing; "
        "Missing leading pipe, Missing trailing pipe]"
    )
    assert fix_table_pipe_style(lines, {})[2] == "| 1 | 2 |"


def test_explicit_pipe_style():
    lines = TABLE + ["| 1 | 2 |"]
    config = {"MD055": {"style": "no_leading_or_trailing"}}

    assert fix_table_pipe_style(lines, config) == ["a | b", "--- | ---", "1 | 2"]


# ---------------------------------------------------------------------------
# MD056 table-column-count
# ---------------------------------------------------------------------------


def test_short_row_padded():
    lines = TABLE + ["| 1 |"]
    violations = table_column_count(lines, {})

    assert violations[0].message == "Table column count [Expected: 2; Actual: 1; Too few cells, row will be missing data]"
    assert fix_table_column_count(lines, {})[2] == "| 1 |  |"


def test_empty_surplus_cell_dropped():
    lines = TABLE + ["| 1 | 2 | |"]

    assert fix_table_column_count(lines, {})[2] == "| 1 | 2 |"


def test_surplus_data_kept():
    lines = TABLE + ["| 1 | 2 | 3 |"]

    assert "Too many cells" in table_column_count(lines, {})[0].message
    assert fix_table_column_count(lines, {}) == lines


def test_prose_with_pipes_ignored():
    assert table_column_count(["a | b", "just text"], {}) == []


# ---------------------------------------------------------------------------
# MD058 blanks-around-tables
# ---------------------------------------------------------------------------


def test_blank_lines_around_table():
    lines = ["Text", "| a |", "| --- |", "More"]

    assert [v.line for v in blanks_around_tables(lines, {})] == [2, 3]
    assert fix_blanks_around_tables(lines, {}) == ["Text", "", "| a |", "| --- |", "", "More"]
