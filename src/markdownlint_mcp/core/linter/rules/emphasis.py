"""Emphasis and strong emphasis rules."""
import re
from typing import Optional

from ..models import Violation
from ..options import option_choice, rule_options
from ..scanners import (
    THEMATIC_BREAK_RE,
    code_mask,
    code_span_ranges,
    match_list_item,
    overlaps,
    url_ranges,
)

# Groups: marker, leading space, content, trailing space
SPACED_PATTERNS = [
    re.compile(r'(?<![*\\])(\*\*)(?!\*)([ \t]*)([^*]+?)([ \t]*)(?<![*\\])\*\*(?!\*)'),
    re.compile(r'(?<![\w_\\])(__)(?!_)([ \t]*)([^_]+?)([ \t]*)(?<![_\\])__(?![\w_])'),
    re.compile(r'(?<![*\\])(\*)(?!\*)([ \t]*)([^*]+?)([ \t]*)(?<![*\\])\*(?!\*)'),
    re.compile(r'(?<![\w_\\])(_)(?!_)([ \t]*)([^_]+?)([ \t]*)(?<![_\\])_(?![\w_])'),
]

EMPHASIS_PATTERNS = {
    "asterisk": re.compile(r'(?<![*\\])\*(?![*\s])([^*_]+?)(?<![\s\\])\*(?!\*)'),
    "underscore": re.compile(r'(?<![\w_\\])_(?![_\s])([^*_]+?)(?<![\s\\])_(?![\w_])'),
}
STRONG_PATTERNS = {
    "asterisk": re.compile(r'(?<![*\\])\*\*(?![*\s])([^*_]+?)(?<![\s\\])\*\*(?!\*)'),
    "underscore": re.compile(r'(?<![\w_\\])__(?![_\s])([^*_]+?)(?<![\s\\])__(?![\w_])'),
}
STYLE_CHARS = {"asterisk": "*", "underscore": "_"}


def _scannable_lines(lines: list[str]):
    """
    Yield ``(index, line, start, skip)`` for prose lines.

    ``start`` is the offset after any list marker and ``skip`` holds the
    spans of code and URLs that emphasis markers inside must not match.
    """
    code = code_mask(lines)
    for i, line in enumerate(lines):
        if code[i] or THEMATIC_BREAK_RE.match(line):
            continue
        item = match_list_item(line)
        start = item.start(4) if item else 0
        yield i, line, start, code_span_ranges(line) + url_ranges(line)


def _matches(patterns, line: str, start: int, skip: list[tuple[int, int]]):
    """Non-overlapping matches of several patterns, earlier patterns first."""
    taken = list(skip)
    found = []
    for pattern in patterns:
        for match in pattern.finditer(line, start):
            if overlaps(match.span(), taken):
                continue
            taken.append(match.span())
            found.append(match)
    return sorted(found, key=lambda m: m.start())


# ---------------------------------------------------------------------------
# MD037 no-space-in-emphasis
# ---------------------------------------------------------------------------

def _spaced_emphasis(lines: list[str]):
    for i, line, start, skip in _scannable_lines(lines):
        for match in _matches(SPACED_PATTERNS, line, start, skip):
            marker, lead, content, trail = match.groups()
            if not content.strip():
                continue
            if lead or trail or content != content.strip():
                yield i, match, f"{marker}{content.strip()}{marker}"


def no_space_in_emphasis(lines: list[str], config: dict) -> list[Violation]:
    """Flag emphasis markers with whitespace just inside them, like ``** bold **``."""
    return [
        Violation(
            rule="MD037",
            line=i + 1,
            message=f'Spaces inside emphasis markers [Context: "{match.group(0)}"]',
            range=(match.start() + 1, match.end() - match.start()),
        )
        for i, match, _ in _spaced_emphasis(lines)
    ]


def fix_no_space_in_emphasis(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    by_line: dict[int, list] = {}
    for i, match, replacement in _spaced_emphasis(lines):
        by_line.setdefault(i, []).append((match.start(), match.end(), replacement))
    for i, replacements in by_line.items():
        line = lines[i]
        for start, end, replacement in reversed(replacements):
            line = line[:start] + replacement + line[end:]
        fixed[i] = line
    return fixed


# ---------------------------------------------------------------------------
# MD049 emphasis-style / MD050 strong-style
# ---------------------------------------------------------------------------

def _styled_spans(lines: list[str], patterns: dict[str, re.Pattern]):
    """Yield ``(index, style, match)`` for every emphasis span in document order."""
    # Strong markers are masked out so their halves are not read as emphasis
    masks = list(STRONG_PATTERNS.values()) if patterns is EMPHASIS_PATTERNS else []
    for i, line, start, skip in _scannable_lines(lines):
        blocked = skip + [m.span() for p in masks for m in p.finditer(line, start)]
        found = []
        for style, pattern in patterns.items():
            for match in pattern.finditer(line, start):
                if not overlaps(match.span(), blocked):
                    found.append((match.start(), style, match))
        for _, style, match in sorted(found, key=lambda f: f[0]):
            yield i, style, match


def _expected_style(rule: str, spans: list, config: dict) -> Optional[str]:
    style = option_choice(rule_options(config, rule), "style", ("consistent", *STYLE_CHARS), "asterisk")
    if style == "consistent":
        return spans[0][1] if spans else None
    return style


def _style_violations(rule: str, label: str, patterns: dict, lines: list[str], config: dict) -> list[Violation]:
    spans = list(_styled_spans(lines, patterns))
    expected = _expected_style(rule, spans, config)
    return [
        Violation(
            rule=rule,
            line=i + 1,
            message=f"{label} style [Expected: {expected}; Actual: {style}]",
            range=(match.start() + 1, match.end() - match.start()),
        )
        for i, style, match in spans
        if expected and style != expected
    ]


def _restyle(rule: str, patterns: dict, width: int, lines: list[str], config: dict) -> list[str]:
    spans = list(_styled_spans(lines, patterns))
    expected = _expected_style(rule, spans, config)
    fixed = list(lines)
    if not expected:
        return fixed
    marker = STYLE_CHARS[expected] * width
    by_line: dict[int, list] = {}
    for i, style, match in spans:
        if style != expected:
            by_line.setdefault(i, []).append(match)
    for i, matches in by_line.items():
        line = lines[i]
        for match in reversed(matches):
            line = line[:match.start()] + f"{marker}{match.group(1)}{marker}" + line[match.end():]
        fixed[i] = line
    return fixed


def emphasis_style(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``*emphasis*`` and ``_emphasis_`` that do not use the expected marker."""
    return _style_violations("MD049", "Emphasis", EMPHASIS_PATTERNS, lines, config)


def fix_emphasis_style(lines: list[str], config: dict) -> list[str]:
    return _restyle("MD049", EMPHASIS_PATTERNS, 1, lines, config)


def strong_style(lines: list[str], config: dict) -> list[Violation]:
    return _style_violations("MD050", "Strong", STRONG_PATTERNS, lines, config)


def fix_strong_style(lines: list[str], config: dict) -> list[str]:
    return _restyle("MD050", STRONG_PATTERNS, 2, lines, config)
