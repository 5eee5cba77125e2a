"""Whitespace and blank-line rules."""
import re

from ..models import Violation
from ..options import option_bool, option_int, rule_options
from ..scanners import (
    code_mask,
    fence_mask,
    find_headings,
    heading_mask,
    indented_code_mask,
    is_blank,
    is_blockquote,
    table_mask,
)

TRAILING_RE = re.compile(r'[ \t]+$')
BLOCKQUOTE_SPACE_RE = re.compile(r'^(\s*(?:>[ ]?)*>)[ \t]{2,}(?=\S)')


def _br_spaces(config: dict) -> int:
    br_spaces = option_int(rule_options(config, "MD009"), "br_spaces", 0, minimum=0)
    # One trailing space never makes a hard break
    return br_spaces if br_spaces >= 2 else 0


def _allowed_break(lines: list[str], i: int, trailing: str, br_spaces: int, strict: bool) -> bool:
    if not br_spaces or trailing != ' ' * br_spaces or is_blank(lines[i]):
        return False
    if strict:
        # Only a break that is followed by more paragraph text does anything
        return i + 1 < len(lines) and not is_blank(lines[i + 1])
    return True


def no_trailing_spaces(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag trailing spaces and tabs.

    With ``br_spaces`` of 2 or more, exactly that many trailing spaces on a
    content line are a Markdown hard break and pass. ``strict`` also flags
    such breaks when nothing follows them.
    """
    options = rule_options(config, "MD009")
    br_spaces = _br_spaces(config)
    strict = option_bool(options, "strict", False)
    violations = []

    for i, line in enumerate(lines):
        match = TRAILING_RE.search(line)
        if not match:
            continue
        trailing = match.group()
        if _allowed_break(lines, i, trailing, br_spaces, strict):
            continue
        expected = br_spaces if br_spaces and not is_blank(line) else 0
        violations.append(Violation(
            rule="MD009",
            line=i + 1,
            message=f"Trailing spaces [Expected: {expected}; Actual: {len(trailing)}]",
            range=(match.start() + 1, len(trailing)),
        ))
    return violations


def fix_no_trailing_spaces(lines: list[str], config: dict) -> list[str]:
    options = rule_options(config, "MD009")
    br_spaces = _br_spaces(config)
    strict = option_bool(options, "strict", False)
    fixed = []

    for i, line in enumerate(lines):
        match = TRAILING_RE.search(line)
        if not match or _allowed_break(lines, i, match.group(), br_spaces, strict):
            fixed.append(line)
            continue
        stripped = line[:match.start()]
        if (br_spaces and not strict and stripped
                and len(match.group()) > br_spaces and '\t' not in match.group()):
            # Too many spaces still reads as an intended hard break
            fixed.append(stripped + ' ' * br_spaces)
        else:
            fixed.append(stripped)
    return fixed


def no_hard_tabs(lines: list[str], config: dict) -> list[Violation]:
    """Flag hard tab characters, optionally skipping code blocks."""
    options = rule_options(config, "MD010")
    check_code = option_bool(options, "code_blocks", True)
    code = code_mask(lines) if not check_code else [False] * len(lines)
    violations = []

    for i, line in enumerate(lines):
        if code[i] or '\t' not in line:
            continue
        column = line.index('\t')
        violations.append(Violation(
            rule="MD010",
            line=i + 1,
            message=f"Hard tabs [Column: {column + 1}]",
            range=(column + 1, 1),
        ))
    return violations


def fix_no_hard_tabs(lines: list[str], config: dict) -> list[str]:
    """
    Replace tabs with ``spaces_per_tab`` spaces.

    Leading tabs of an indented code block become four spaces so the block
    stays a code block.
    """
    options = rule_options(config, "MD010")
    check_code = option_bool(options, "code_blocks", True)
    spaces = ' ' * option_int(options, "spaces_per_tab", 2, minimum=0, maximum=8)
    fenced = fence_mask(lines)
    indented = indented_code_mask(lines, fenced)

    fixed = []
    for i, line in enumerate(lines):
        if '\t' not in line or (not check_code and (fenced[i] or indented[i])):
            fixed.append(line)
            continue
        if indented[i]:
            body = line.lstrip('\t')
            line = '    ' * (len(line) - len(body)) + body
        fixed.append(line.replace('\t', spaces))
    return fixed


def _maximum(config: dict) -> int:
    return option_int(rule_options(config, "MD012"), "maximum", 1, minimum=0)


def _counted(lines: list[str]) -> int:
    # An empty last line only marks the file's trailing newline
    return len(lines) - 1 if lines and lines[-1] == '' else len(lines)


def no_multiple_blanks(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag blank lines beyond the allowed run length.

    Blank lines inside fenced code are content and do not count.
    """
    maximum = _maximum(config)
    fenced = fence_mask(lines)
    violations = []
    run = 0

    for i in range(_counted(lines)):
        if fenced[i] or not is_blank(lines[i]):
            run = 0
            continue
        run += 1
        if run > maximum:
            violations.append(Violation(
                rule="MD012",
                line=i + 1,
                message=f"Multiple consecutive blank lines [Expected: {maximum}; Actual: {run}]",
            ))
    return violations


def fix_no_multiple_blanks(lines: list[str], config: dict) -> list[str]:
    maximum = _maximum(config)
    fenced = fence_mask(lines)
    counted = _counted(lines)
    fixed = []
    run = 0

    for i in range(counted):
        line = lines[i]
        if fenced[i] or not is_blank(line):
            run = 0
            fixed.append(line)
            continue
        run += 1
        if run <= maximum:
            fixed.append(line)
    return fixed + lines[counted:]


def line_length(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag lines longer than ``line_length``.

    Like markdownlint, a long line only counts when there is whitespace
    past the limit; an unbreakable URL cannot be wrapped anyway.
    """
    options = rule_options(config, "MD013")
    limit = option_int(options, "line_length", 120, minimum=1)
    heading_limit = option_int(options, "heading_line_length", limit, minimum=1)
    code_limit = option_int(options, "code_block_line_length", limit, minimum=1)
    check_code = option_bool(options, "code_blocks", True)
    check_tables = option_bool(options, "tables", True)
    check_headings = option_bool(options, "headings", True)

    code = code_mask(lines)
    tables = table_mask(lines, code)
    headings = heading_mask(lines, find_headings(lines, code))
    violations = []

    for i, line in enumerate(lines):
        if code[i]:
            if not check_code:
                continue
            maximum = code_limit
        elif headings[i]:
            if not check_headings:
                continue
            maximum = heading_limit
        elif tables[i] and not check_tables:
            continue
        else:
            maximum = limit

        if len(line) <= maximum or not re.search(r'\s', line[maximum:]):
            continue
        violations.append(Violation(
            rule="MD013",
            line=i + 1,
            message=f"Line length [Expected: {maximum}; Actual: {len(line)}]",
            range=(maximum + 1, len(line) - maximum),
        ))
    return violations


def no_multiple_space_blockquote(lines: list[str], config: dict) -> list[Violation]:
    """Flag more than one space after a blockquote marker."""
    code = code_mask(lines)
    violations = []
    for i, line in enumerate(lines):
        if code[i]:
            continue
        match = BLOCKQUOTE_SPACE_RE.match(line)
        if match:
            violations.append(Violation(
                rule="MD027",
                line=i + 1,
                message="Multiple spaces after blockquote symbol",
                range=(len(match.group(1)) + 1, match.end() - len(match.group(1))),
            ))
    return violations


def fix_no_multiple_space_blockquote(lines: list[str], config: dict) -> list[str]:
    code = code_mask(lines)
    return [
        line if code[i] else BLOCKQUOTE_SPACE_RE.sub(r'\1 ', line)
        for i, line in enumerate(lines)
    ]


def no_blanks_blockquote(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag blank lines that separate two blockquotes.

    Renderers disagree on whether the two quotes merge, so the author has
    to pick: drop the blank line or put text between the quotes.
    """
    code = code_mask(lines)
    violations = []
    i = 0
    while i < len(lines):
        if code[i] or not is_blockquote(lines[i]):
            i += 1
            continue
        j = i + 1
        while j < len(lines) and is_blank(lines[j]):
            j += 1
        if j > i + 1 and j < len(lines) and not code[j] and is_blockquote(lines[j]):
            for k in range(i + 1, j):
                violations.append(Violation(
                    rule="MD028",
                    line=k + 1,
                    message="Blank line inside blockquote",
                ))
        i = j
    return violations


def single_trailing_newline(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag a document whose last line is not empty.

    Lines come from splitting on newlines, so a file ending in a newline
    has an empty final line.
    """
    if not lines or lines[-1] == '':
        return []
    return [Violation(
        rule="MD047",
        line=len(lines),
        message="Files should end with a single newline character",
        range=(len(lines[-1]), 1),
    )]


def fix_single_trailing_newline(lines: list[str], config: dict) -> list[str]:
    if not lines or lines[-1] == '':
        return list(lines)
    if is_blank(lines[-1]):
        return lines[:-1] + ['']
    return lines + ['']
