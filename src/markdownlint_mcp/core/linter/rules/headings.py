"""Heading rules."""
import re
from typing import Optional

from ..models import Violation
from ..options import (
    option_bool,
    option_choice,
    option_int,
    option_list,
    option_str,
    rule_options,
)
from ..scanners import (
    Heading,
    can_be_setext_text,
    code_mask,
    find_headings,
    is_blank,
    list_mask,
    parse_atx,
    table_mask,
    blockquote_mask,
)

MISSING_SPACE_ATX_RE = re.compile(r'^( {0,3})(#{1,6})([^#\s].*)$')
CLOSED_NO_SPACE_RE = re.compile(r'^( {0,3})(#{1,6})([^#\s](?:.*?[^#\s\\])?)[ \t]*(#+)[ \t]*$')
MULTIPLE_SPACE_ATX_RE = re.compile(r'^( {0,3})(#{1,6})([ \t]{2,})(?=\S)')
CLOSED_ATX_SPACING_RE = re.compile(r'^( {0,3})(#{1,6})([ \t]+)(.*?\S)([ \t]+)(#+)[ \t]*$')
HTML_ENTITY_END_RE = re.compile(r'&#?[0-9A-Za-z]+;$')
HTML_COMMENT_RE = re.compile(r'^\s*<!--.*-->\s*$')

HEADING_STYLES = ("consistent", "atx", "atx_closed", "setext", "setext_with_atx", "setext_with_atx_closed")
DEFAULT_TRAILING_PUNCTUATION = ".,;:!。，；：！"


def render_heading(heading: Heading, level: int, style: str, text: Optional[str] = None) -> list[str]:
    """
    Write a heading back out at ``level`` in ``style``.

    Setext only exists for levels 1 and 2; anything deeper falls back to ATX.
    """
    text = heading.text if text is None else text
    if style == "setext" and level <= 2 and text:
        return [text, ("=" if level == 1 else "-") * max(len(text), 3)]
    hashes = "#" * level
    if style == "atx_closed":
        return [f"{heading.indent}{hashes} {text} {hashes}" if text else f"{heading.indent}{hashes} {hashes}"]
    return [f"{heading.indent}{hashes} {text}".rstrip()]


def _replace_headings(lines: list[str], replacements: dict[int, list[str]], headings: list[Heading]) -> list[str]:
    """Rebuild lines, swapping each heading in ``replacements`` for its new lines."""
    by_start = {h.index: h for h in headings}
    fixed = []
    i = 0
    while i < len(lines):
        heading = by_start.get(i)
        if heading is not None and i in replacements:
            fixed.extend(replacements[i])
            i = heading.end + 1
            continue
        fixed.append(lines[i])
        i += 1
    return fixed


# ---------------------------------------------------------------------------
# MD001 heading-increment
# ---------------------------------------------------------------------------

def heading_increment(lines: list[str], config: dict) -> list[Violation]:
    """Flag headings that skip a level on the way down."""
    violations = []
    previous = 0
    for heading in find_headings(lines):
        if previous and heading.level > previous + 1:
            violations.append(Violation(
                rule="MD001",
                line=heading.index + 1,
                message=f"Heading levels should only increment by one level at a time "
                        f"[Expected: h{previous + 1}; Actual: h{heading.level}]",
            ))
        previous = heading.level
    return violations


def fix_heading_increment(lines: list[str], config: dict) -> list[str]:
    headings = find_headings(lines)
    replacements = {}
    previous = 0
    for heading in headings:
        level = heading.level
        if previous and level > previous + 1:
            level = previous + 1
            replacements[heading.index] = render_heading(heading, level, heading.style)
        previous = level
    return _replace_headings(lines, replacements, headings)


# ---------------------------------------------------------------------------
# MD003 heading-style
# ---------------------------------------------------------------------------

def _expected_style(heading: Heading, style: str) -> str:
    if style in ("setext", "setext_with_atx", "setext_with_atx_closed"):
        if heading.level <= 2 and heading.text and can_be_setext_text(heading.text):
            return "setext"
        return "atx_closed" if style == "setext_with_atx_closed" else "atx"
    return style


def _target_style(headings: list[Heading], config: dict) -> Optional[str]:
    style = option_choice(rule_options(config, "MD003"), "style", HEADING_STYLES, "atx")
    if style == "consistent":
        if not headings:
            return None
        first = headings[0].style
        return "setext_with_atx" if first == "setext" else first
    return style


def heading_style(lines: list[str], config: dict) -> list[Violation]:
    """Flag headings whose style differs from the configured one."""
    headings = find_headings(lines)
    style = _target_style(headings, config)
    violations = []
    for heading in headings:
        expected = _expected_style(heading, style) if style else heading.style
        if heading.style != expected:
            violations.append(Violation(
                rule="MD003",
                line=heading.index + 1,
                message=f"Heading style [Expected: {expected}; Actual: {heading.style}]",
            ))
    return violations


def fix_heading_style(lines: list[str], config: dict) -> list[str]:
    headings = find_headings(lines)
    style = _target_style(headings, config)
    replacements = {}
    for heading in headings:
        expected = _expected_style(heading, style) if style else heading.style
        if heading.style != expected:
            replacements[heading.index] = render_heading(heading, heading.level, expected)
    return _replace_headings(lines, replacements, headings)


# ---------------------------------------------------------------------------
# MD018 - MD021 hash spacing
# ---------------------------------------------------------------------------

def _missing_space_lines(lines: list[str]):
    code = code_mask(lines)
    for i, line in enumerate(lines):
        if code[i] or CLOSED_NO_SPACE_RE.match(line):
            continue
        match = MISSING_SPACE_ATX_RE.match(line)
        if match:
            yield i, match


def no_missing_space_atx(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``#Heading``: no space between the hashes and the text."""
    return [
        Violation(
            rule="MD018",
            line=i + 1,
            message="No space after hash on atx style heading",
            range=(len(match.group(1)) + 1, len(match.group(2)) + 1),
        )
        for i, match in _missing_space_lines(lines)
    ]


def fix_no_missing_space_atx(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i, match in _missing_space_lines(lines):
        fixed[i] = f"{match.group(1)}{match.group(2)} {match.group(3)}"
    return fixed


def _atx_lines(lines: list[str], style: str):
    for heading in find_headings(lines):
        if heading.style == style:
            yield heading.index


def no_multiple_space_atx(lines: list[str], config: dict) -> list[Violation]:
    violations = []
    for i in _atx_lines(lines, "atx"):
        match = MULTIPLE_SPACE_ATX_RE.match(lines[i])
        if match:
            violations.append(Violation(
                rule="MD019",
                line=i + 1,
                message="Multiple spaces after hash on atx style heading",
                range=(len(match.group(1)) + 1, match.end() - len(match.group(1))),
            ))
    return violations


def fix_no_multiple_space_atx(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i in _atx_lines(lines, "atx"):
        fixed[i] = MULTIPLE_SPACE_ATX_RE.sub(r'\1\2 ', lines[i])
    return fixed


def _closed_no_space_lines(lines: list[str]):
    code = code_mask(lines)
    for i, line in enumerate(lines):
        if code[i] or parse_atx(line):
            continue
        match = CLOSED_NO_SPACE_RE.match(line)
        if match:
            yield i, match


def no_missing_space_closed_atx(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``#Heading#``: closed ATX with no space inside the hashes."""
    return [
        Violation(
            rule="MD020",
            line=i + 1,
            message="No space inside hashes on closed atx style heading",
            range=(len(match.group(1)) + 1, len(lines[i].rstrip()) - len(match.group(1))),
        )
        for i, match in _closed_no_space_lines(lines)
    ]


def fix_no_missing_space_closed_atx(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i, match in _closed_no_space_lines(lines):
        indent, opening, text, closing = match.groups()
        fixed[i] = f"{indent}{opening} {text.strip()} {closing}"
    return fixed


def _closed_spacing(lines: list[str]):
    for i in _atx_lines(lines, "atx_closed"):
        match = CLOSED_ATX_SPACING_RE.match(lines[i])
        if match and (len(match.group(3)) > 1 or len(match.group(5)) > 1):
            yield i, match


def no_multiple_space_closed_atx(lines: list[str], config: dict) -> list[Violation]:
    return [
        Violation(
            rule="MD021",
            line=i + 1,
            message="Multiple spaces inside hashes on closed atx style heading",
            range=(len(match.group(1)) + 1, len(lines[i].rstrip()) - len(match.group(1))),
        )
        for i, match in _closed_spacing(lines)
    ]


def fix_no_multiple_space_closed_atx(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i, match in _closed_spacing(lines):
        indent, opening, _, text, _, closing = match.groups()
        fixed[i] = f"{indent}{opening} {text} {closing}"
    return fixed


# ---------------------------------------------------------------------------
# MD022 blanks-around-headings / MD023 heading-start-left
# ---------------------------------------------------------------------------

def blanks_around_headings(lines: list[str], config: dict) -> list[Violation]:
    """Flag headings not separated from their neighbours by a blank line."""
    violations = []
    for heading in find_headings(lines):
        if heading.index > 0 and not is_blank(lines[heading.index - 1]):
            violations.append(Violation(
                rule="MD022",
                line=heading.index + 1,
                message="Headings should be surrounded by blank lines [Expected: 1; Actual: 0; Above]",
            ))
        if heading.end + 1 < len(lines) and not is_blank(lines[heading.end + 1]):
            violations.append(Violation(
                rule="MD022",
                line=heading.index + 1,
                message="Headings should be surrounded by blank lines [Expected: 1; Actual: 0; Below]",
            ))
    return violations


def fix_blanks_around_headings(lines: list[str], config: dict) -> list[str]:
    headings = find_headings(lines)
    starts = {h.index for h in headings}
    ends = {h.end for h in headings}
    fixed = []
    for i, line in enumerate(lines):
        if i in starts and fixed and not is_blank(fixed[-1]):
            fixed.append('')
        fixed.append(line)
        if i in ends and i + 1 < len(lines) and not is_blank(lines[i + 1]):
            fixed.append('')
    return fixed


def _indented_headings(lines: list[str]):
    in_list = list_mask(lines)
    for heading in find_headings(lines):
        if in_list[heading.index]:
            continue
        for i in range(heading.index, heading.end + 1):
            if lines[i][:1] == ' ':
                yield heading, i


def heading_start_left(lines: list[str], config: dict) -> list[Violation]:
    """Flag headings indented by one to three spaces."""
    violations = []
    seen = set()
    for heading, i in _indented_headings(lines):
        if heading.index in seen:
            continue
        seen.add(heading.index)
        indent = len(lines[i]) - len(lines[i].lstrip(' '))
        violations.append(Violation(
            rule="MD023",
            line=heading.index + 1,
            message="Headings must start at the beginning of the line",
            range=(1, indent),
        ))
    return violations


def fix_heading_start_left(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for _, i in _indented_headings(lines):
        fixed[i] = lines[i].lstrip(' ')
    return fixed


# ---------------------------------------------------------------------------
# MD024 no-duplicate-heading / MD025 single-title
# ---------------------------------------------------------------------------

def no_duplicate_heading(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag headings with the same text as an earlier one.

    With ``siblings_only`` only headings that share a parent are compared.
    Renaming a heading is the author's call, so this is reported only.
    """
    siblings_only = option_bool(rule_options(config, "MD024"), "siblings_only", False)
    seen_global: set[str] = set()
    seen_by_level: dict[int, set[str]] = {}
    violations = []

    for heading in find_headings(lines):
        if siblings_only:
            for level in [lvl for lvl in seen_by_level if lvl > heading.level]:
                del seen_by_level[level]
            seen = seen_by_level.setdefault(heading.level, set())
        else:
            seen = seen_global
        if heading.text in seen:
            violations.append(Violation(
                rule="MD024",
                line=heading.index + 1,
                message=f"Multiple headings with the same content [{heading.text}]",
            ))
        seen.add(heading.text)
    return violations


def _title_level(config: dict) -> int:
    return option_int(rule_options(config, "MD025"), "level", 1, minimum=1, maximum=6)


def _extra_titles(headings: list[Heading], level: int) -> list[Heading]:
    titles = [h for h in headings if h.level == level]
    return titles[1:]


def single_title(lines: list[str], config: dict) -> list[Violation]:
    """Flag every top-level heading after the first."""
    level = _title_level(config)
    return [
        Violation(
            rule="MD025",
            line=heading.index + 1,
            message=f"Multiple top-level headings in the same document [{heading.text}]",
        )
        for heading in _extra_titles(find_headings(lines), level)
    ]


def fix_single_title(lines: list[str], config: dict) -> list[str]:
    level = _title_level(config)
    headings = find_headings(lines)
    if level >= 6:
        return list(lines)
    replacements = {
        h.index: render_heading(h, level + 1, h.style)
        for h in _extra_titles(headings, level)
    }
    return _replace_headings(lines, replacements, headings)


# ---------------------------------------------------------------------------
# MD026 no-trailing-punctuation
# ---------------------------------------------------------------------------

def _punctuation(config: dict) -> str:
    return option_str(rule_options(config, "MD026"), "punctuation", DEFAULT_TRAILING_PUNCTUATION)


def _trailing_punctuation(lines: list[str], config: dict):
    punctuation = _punctuation(config)
    if not punctuation:
        return
    for heading in find_headings(lines):
        text = heading.text
        if not text or text[-1] not in punctuation or HTML_ENTITY_END_RE.search(text):
            continue
        stripped = text.rstrip(punctuation).rstrip()
        if stripped:
            yield heading, stripped


def no_trailing_punctuation(lines: list[str], config: dict) -> list[Violation]:
    return [
        Violation(
            rule="MD026",
            line=heading.index + 1,
            message=f"Trailing punctuation in heading [Punctuation: '{heading.text[-1]}']",
        )
        for heading, _ in _trailing_punctuation(lines, config)
    ]


def fix_no_trailing_punctuation(lines: list[str], config: dict) -> list[str]:
    headings = find_headings(lines)
    replacements = {}
    for heading, stripped in _trailing_punctuation(lines, config):
        if heading.style == "setext":
            text_line = lines[heading.index]
            indent = text_line[:len(text_line) - len(text_line.lstrip())]
            replacements[heading.index] = [indent + stripped, lines[heading.end]]
        else:
            replacements[heading.index] = render_heading(heading, heading.level, heading.style, stripped)
    return _replace_headings(lines, replacements, headings)


# ---------------------------------------------------------------------------
# MD036 no-emphasis-as-heading
# ---------------------------------------------------------------------------

EMPHASIS_LINE_RE = re.compile(r'^\s*(\*\*|__|\*|_)(?!\s)([^*_]+?)(?<!\s)\1\s*$')


def _emphasis_headings(lines: list[str], config: dict):
    punctuation = option_str(rule_options(config, "MD036"), "punctuation", ".,;:!?。，；：！？")
    code = code_mask(lines)
    in_list = list_mask(lines)
    tables = table_mask(lines, code)
    quotes = blockquote_mask(lines, code)

    for i, line in enumerate(lines):
        if code[i] or in_list[i] or tables[i] or quotes[i]:
            continue
        # Must be a paragraph of its own
        if (i > 0 and not is_blank(lines[i - 1])) or (i + 1 < len(lines) and not is_blank(lines[i + 1])):
            continue
        match = EMPHASIS_LINE_RE.match(line)
        if not match:
            continue
        text = match.group(2).strip()
        if text[-1] in punctuation:
            continue
        yield i, len(match.group(1)), text


def no_emphasis_as_heading(lines: list[str], config: dict) -> list[Violation]:
    """Flag a paragraph consisting only of bold or italic text."""
    return [
        Violation(
            rule="MD036",
            line=i + 1,
            message=f"Emphasis used instead of a heading [{text}]",
        )
        for i, _, text in _emphasis_headings(lines, config)
    ]


def fix_no_emphasis_as_heading(lines: list[str], config: dict) -> list[str]:
    """Bold becomes an H2, italic an H3."""
    fixed = list(lines)
    for i, marker_length, text in _emphasis_headings(lines, config):
        level = 2 if marker_length == 2 else 3
        fixed[i] = f"{'#' * level} {text}"
    return fixed


# ---------------------------------------------------------------------------
# MD041 first-line-heading / MD043 required-headings
# ---------------------------------------------------------------------------

def first_line_heading(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag a document whose first content line is not a top-level heading.

    Leading blank lines and HTML comments are skipped. Inventing a title
    is not something a fixer can do, so this is reported only.
    """
    level = option_int(rule_options(config, "MD041"), "level", 1, minimum=1, maximum=6)
    first = next(
        (i for i, line in enumerate(lines) if not is_blank(line) and not HTML_COMMENT_RE.match(line)),
        None,
    )
    if first is None:
        return []
    headings = find_headings(lines)
    if headings and headings[0].index == first and headings[0].level == level:
        return []
    return [Violation(
        rule="MD041",
        line=first + 1,
        message=f"First line in a file should be a top-level heading [Expected: h{level}]",
    )]


def required_headings(lines: list[str], config: dict) -> list[Violation]:
    """
    Compare the heading outline with the ``headings`` option.

    Entries are either heading text (``"Introduction"``) or the heading as
    written (``"## Introduction"``). ``*`` matches any number of headings,
    ``+`` one or more and ``?`` exactly one. Stops at the first mismatch.
    """
    options = rule_options(config, "MD043")
    required = option_list(options, "headings", [])
    if not required:
        return []
    match_case = option_bool(options, "match_case", False)

    def same(expected: str, heading: Heading) -> bool:
        actual = f"{'#' * heading.level} {heading.text}" if expected.startswith("#") else heading.text
        if match_case:
            return expected.strip() == actual
        return expected.strip().lower() == actual.lower()

    headings = find_headings(lines)
    i = 0
    match_any = False
    for heading in headings:
        expected = required[i] if i < len(required) else None
        i += 1
        if expected == "*":
            following = required[i] if i < len(required) else None
            if following is not None and same(following, heading):
                i += 1
                match_any = False
            else:
                match_any = True
        elif expected == "+":
            match_any = True
        elif expected == "?":
            match_any = False
        elif expected is not None and same(expected, heading):
            match_any = False
        elif match_any:
            i -= 1
        else:
            return [Violation(
                rule="MD043",
                line=heading.index + 1,
                message=f"Required heading structure [Expected: {expected or '[None]'}; "
                        f"Actual: {'#' * heading.level} {heading.text}]",
            )]

    missing = [entry for entry in required[i:] if entry != "*"]
    if missing:
        return [Violation(
            rule="MD043",
            line=max(len(lines), 1),
            message=f"Required heading structure [Missing: {missing[0]}]",
        )]
    return []
