"""Table rules."""
from dataclasses import dataclass
from typing import Optional

from ..models import Violation
from ..options import option_choice, rule_options
from ..scanners import is_blank, is_table_separator, split_table_cells, table_blocks

PIPE_STYLES = {
    "leading_and_trailing": (True, True),
    "leading_only": (True, False),
    "trailing_only": (False, True),
    "no_leading_or_trailing": (False, False),
}


@dataclass
class Row:
    index: int
    indent: str
    cells: list[str]
    leading: bool
    trailing: bool

    @classmethod
    def parse(cls, index: int, line: str) -> "Row":
        body = line.strip()
        return cls(
            index=index,
            indent=line[:len(line) - len(line.lstrip())],
            cells=split_table_cells(line),
            leading=body.startswith('|'),
            trailing=body.endswith('|') and not body.endswith('\\|') and len(body) > 1,
        )

    @property
    def style(self) -> str:
        return next(name for name, pipes in PIPE_STYLES.items() if pipes == (self.leading, self.trailing))

    def render(self, leading: Optional[bool] = None, trailing: Optional[bool] = None) -> str:
        leading = self.leading if leading is None else leading
        trailing = self.trailing if trailing is None else trailing
        text = ' | '.join(self.cells)
        if leading:
            text = f"| {text}"
        if trailing:
            text = f"{text} |"
        return self.indent + text.rstrip()


def _tables(lines: list[str]) -> list[list[Row]]:
    return [[Row.parse(i, lines[i]) for i in range(first, last + 1)] for first, last in table_blocks(lines)]


# ---------------------------------------------------------------------------
# MD055 table-pipe-style
# ---------------------------------------------------------------------------

def _can_restyle(row: Row, leading: bool, trailing: bool) -> bool:
    """Dropping an outer pipe must not lose an empty edge cell or the last pipe."""
    if (row.leading and not leading and not row.cells[0]) or (row.trailing and not trailing and not row.cells[-1]):
        return False
    return len(row.cells) > 1 or (leading or trailing)


def _pipe_errors(lines: list[str], config: dict):
    style = option_choice(rule_options(config, "MD055"), "style", ("consistent", *PIPE_STYLES), "consistent")
    expected_style = None if style == "consistent" else style
    for rows in _tables(lines):
        expected = expected_style or rows[0].style
        leading, trailing = PIPE_STYLES[expected]
        for row in rows:
            if (row.leading, row.trailing) != (leading, trailing) and _can_restyle(row, leading, trailing):
                yield row, expected, leading, trailing


def table_pipe_style(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag table rows whose leading and trailing pipes differ from the style.

    ``consistent`` takes each table's header row as the reference.
    """
    violations = []
    for row, expected, leading, trailing in _pipe_errors(lines, config):
        problems = []
        if leading != row.leading:
            problems.append("Missing leading pipe" if leading else "Unexpected leading pipe")
        if trailing != row.trailing:
            problems.append("Missing trailing pipe" if trailing else "Unexpected trailing pipe")
        violations.append(Violation(
            rule="MD055",
            line=row.index + 1,
            message=f"Table pipe style [Expected: {expected}; Actual: {row.style}; {', '.join(problems)}]",
        ))
    return violations


def fix_table_pipe_style(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for row, _, leading, trailing in _pipe_errors(lines, config):
        fixed[row.index] = row.render(leading, trailing)
    return fixed


# ---------------------------------------------------------------------------
# MD056 table-column-count
# ---------------------------------------------------------------------------

def _miscounted_rows(lines: list[str]):
    for rows in _tables(lines):
        columns = len(rows[0].cells)
        for row in rows[1:]:
            if len(row.cells) != columns:
                yield row, columns


def table_column_count(lines: list[str], config: dict) -> list[Violation]:
    """Flag rows with more or fewer cells than the header row."""
    violations = []
    for row, columns in _miscounted_rows(lines):
        actual = len(row.cells)
        detail = "Too few cells, row will be missing data" if actual < columns \
            else "Too many cells, extra data will be missing"
        violations.append(Violation(
            rule="MD056",
            line=row.index + 1,
            message=f"Table column count [Expected: {columns}; Actual: {actual}; {detail}]",
        ))
    return violations


def fix_table_column_count(lines: list[str], config: dict) -> list[str]:
    """
    Pad short rows with empty cells and drop empty surplus cells.

    Surplus cells holding text are kept since removing them loses data.
    """
    fixed = list(lines)
    for row, columns in _miscounted_rows(lines):
        cells = list(row.cells)
        separator = is_table_separator(lines[row.index])
        filler = "---" if separator else ""
        if len(cells) < columns:
            cells += [filler] * (columns - len(cells))
        while len(cells) > columns and (not cells[-1] or separator):
            cells.pop()
        if cells == row.cells:
            continue
        # An empty last cell only survives with a trailing pipe
        trailing = row.trailing or not cells[-1]
        fixed[row.index] = Row(row.index, row.indent, cells, row.leading, trailing).render()
    return fixed


# ---------------------------------------------------------------------------
# MD058 blanks-around-tables
# ---------------------------------------------------------------------------

def blanks_around_tables(lines: list[str], config: dict) -> list[Violation]:
    violations = []
    for first, last in table_blocks(lines):
        if first > 0 and not is_blank(lines[first - 1]):
            violations.append(Violation(
                rule="MD058",
                line=first + 1,
                message="Tables should be surrounded by blank lines [Above]",
            ))
        if last + 1 < len(lines) and not is_blank(lines[last + 1]):
            violations.append(Violation(
                rule="MD058",
                line=last + 1,
                message="Tables should be surrounded by blank lines [Below]",
            ))
    return violations


def fix_blanks_around_tables(lines: list[str], config: dict) -> list[str]:
    blocks = table_blocks(lines)
    firsts = {first for first, _ in blocks}
    lasts = {last for _, last in blocks}
    fixed = []
    for i, line in enumerate(lines):
        if i in firsts and fixed and not is_blank(fixed[-1]):
            fixed.append('')
        fixed.append(line)
        if i in lasts and i + 1 < len(lines) and not is_blank(lines[i + 1]):
            fixed.append('')
    return fixed
