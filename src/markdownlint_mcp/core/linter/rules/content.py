"""Inline HTML, horizontal rule and proper name rules."""
import re

from ..models import Violation
from ..options import option_bool, option_list, option_str, rule_options
from ..scanners import (
    HTML_TAG_RE,
    THEMATIC_BREAK_RE,
    code_mask,
    code_span_ranges,
    find_headings,
    is_blank,
    overlaps,
    url_ranges,
)

OPENING_TAG_RE = re.compile(r'<([A-Za-z][A-Za-z0-9-]*)')


# ---------------------------------------------------------------------------
# MD033 no-inline-html
# ---------------------------------------------------------------------------

def no_inline_html(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag raw HTML elements outside code.

    Only opening tags are reported, so ``<div>...</div>`` counts once.
    Elements listed in ``allowed_elements`` are skipped. Rewriting HTML as
    Markdown is not attempted.
    """
    allowed = {name.lower() for name in option_list(rule_options(config, "MD033"), "allowed_elements", [])}
    code = code_mask(lines)
    violations = []
    for i, line in enumerate(lines):
        if code[i]:
            continue
        spans = code_span_ranges(line)
        for match in HTML_TAG_RE.finditer(line):
            if match.group(0).startswith('</') or overlaps(match.span(), spans):
                continue
            element = OPENING_TAG_RE.match(match.group(0)).group(1)
            if element.lower() in allowed:
                continue
            violations.append(Violation(
                rule="MD033",
                line=i + 1,
                message=f"Inline HTML [Element: {element}]",
                range=(match.start() + 1, match.end() - match.start()),
            ))
    return violations


# ---------------------------------------------------------------------------
# MD035 hr-style
# ---------------------------------------------------------------------------

def _horizontal_rules(lines: list[str]) -> list[int]:
    code = code_mask(lines)
    underlines = {h.underline for h in find_headings(lines, code) if h.underline is not None}
    return [
        i for i, line in enumerate(lines)
        if not code[i] and i not in underlines and THEMATIC_BREAK_RE.match(line)
    ]


def _hr_style(lines: list[str], rules: list[int], config: dict):
    style = option_str(rule_options(config, "MD035"), "style", "consistent").strip()
    if style != "consistent" and THEMATIC_BREAK_RE.match(style):
        return style
    return lines[rules[0]].strip() if rules else None


def hr_style(lines: list[str], config: dict) -> list[Violation]:
    """Flag horizontal rules written differently from the expected one."""
    rules = _horizontal_rules(lines)
    style = _hr_style(lines, rules, config)
    return [
        Violation(
            rule="MD035",
            line=i + 1,
            message=f"Horizontal rule style [Expected: {style}; Actual: {lines[i].strip()}]",
        )
        for i in rules
        if lines[i].strip() != style
    ]


def fix_hr_style(lines: list[str], config: dict) -> list[str]:
    rules = set(_horizontal_rules(lines))
    style = _hr_style(lines, sorted(rules), config)
    fixed = []
    for i, line in enumerate(lines):
        if i in rules and line.strip() != style:
            # A dash rule right under text would turn the text into a heading
            if style.startswith('-') and fixed and not is_blank(fixed[-1]):
                fixed.append('')
            line = line[:len(line) - len(line.lstrip())] + style
        fixed.append(line)
    return fixed


# ---------------------------------------------------------------------------
# MD044 proper-names
# ---------------------------------------------------------------------------

def _name_patterns(config: dict) -> list[tuple[str, re.Pattern]]:
    names = option_list(rule_options(config, "MD044"), "names", [])
    # Longest first so "JavaScript" wins over "Java"
    names = sorted({name for name in names if name.strip()}, key=len, reverse=True)
    return [
        (name, re.compile(rf'(?<!\w){re.escape(name)}(?!\w)', re.IGNORECASE))
        for name in names
    ]


def _misspelled_names(lines: list[str], config: dict):
    """Yield ``(index, start, end, expected)`` for wrongly capitalised names."""
    patterns = _name_patterns(config)
    if not patterns:
        return
    include_code = option_bool(rule_options(config, "MD044"), "code_blocks", False)
    code = code_mask(lines)

    for i, line in enumerate(lines):
        if code[i] and not include_code:
            continue
        taken = url_ranges(line)
        if not include_code:
            taken += code_span_ranges(line)
        for name, pattern in patterns:
            for match in pattern.finditer(line):
                if overlaps(match.span(), taken):
                    continue
                taken.append(match.span())
                if match.group(0) != name:
                    yield i, match.start(), match.end(), name


def proper_names(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag proper names with the wrong capitalisation.

    Names come from the ``names`` option and match on word boundaries, so
    "superjavascript" is not a misspelt "JavaScript". Code is skipped
    unless ``code_blocks`` is true; URLs are always skipped.
    """
    return [
        Violation(
            rule="MD044",
            line=i + 1,
            message=f"Proper names should have the correct capitalization "
                    f"[Expected: {name}; Actual: {lines[i][start:end]}]",
            range=(start + 1, end - start),
        )
        for i, start, end, name in _misspelled_names(lines, config)
    ]


def fix_proper_names(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    by_line: dict[int, list] = {}
    for i, start, end, name in _misspelled_names(lines, config):
        by_line.setdefault(i, []).append((start, end, name))
    for i, replacements in by_line.items():
        line = lines[i]
        for start, end, name in sorted(replacements, reverse=True):
            line = line[:start] + name + line[end:]
        fixed[i] = line
    return fixed
