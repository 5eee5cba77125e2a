"""List rules."""
from typing import Optional

from ..models import Violation
from ..options import option_bool, option_choice, option_int, rule_options
from ..scanners import ListItem, is_blank, level_indents, list_blocks, list_items

BULLETS = {"asterisk": "*", "dash": "-", "plus": "+"}


def _with_indent(line: str, indent: int) -> str:
    return ' ' * indent + line.lstrip(' \t')


# ---------------------------------------------------------------------------
# MD004 ul-style
# ---------------------------------------------------------------------------

def _bullet(items: list[ListItem], config: dict) -> Optional[str]:
    style = option_choice(rule_options(config, "MD004"), "style", ("consistent", *BULLETS), "consistent")
    if style != "consistent":
        return BULLETS[style]
    first = next((item for item in items if not item.ordered), None)
    return first.marker if first else None


def ul_style(lines: list[str], config: dict) -> list[Violation]:
    """Flag bullets that use a different marker than the expected one."""
    items = list_items(lines)
    bullet = _bullet(items, config)
    return [
        Violation(
            rule="MD004",
            line=item.index + 1,
            message=f"Unordered list style [Expected: {bullet}; Actual: {item.marker}]",
            range=(item.indent + 1, 1),
        )
        for item in items
        if bullet and not item.ordered and item.marker != bullet
    ]


def fix_ul_style(lines: list[str], config: dict) -> list[str]:
    items = list_items(lines)
    bullet = _bullet(items, config)
    fixed = list(lines)
    for item in items:
        if bullet and not item.ordered and item.marker != bullet:
            line = lines[item.index]
            position = len(line) - len(line.lstrip(' \t'))
            fixed[item.index] = line[:position] + bullet + line[position + 1:]
    return fixed


# ---------------------------------------------------------------------------
# MD005 list-indent / MD007 ul-indent
# ---------------------------------------------------------------------------

def _misindented(lines: list[str]):
    items = list_items(lines)
    expected = level_indents(items, lines)
    for item in items:
        if item.indent != expected[item.index]:
            yield item, expected[item.index]


def list_indent(lines: list[str], config: dict) -> list[Violation]:
    """Flag list items whose indentation differs from their siblings."""
    return [
        Violation(
            rule="MD005",
            line=item.index + 1,
            message=f"Inconsistent indentation for list items at the same level "
                    f"[Expected: {expected}; Actual: {item.indent}]",
            range=(1, item.indent + 1),
        )
        for item, expected in _misindented(lines)
    ]


def fix_list_indent(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for item, expected in _misindented(lines):
        fixed[item.index] = _with_indent(lines[item.index], expected)
    return fixed


def _ul_indent_errors(lines: list[str], config: dict):
    options = rule_options(config, "MD007")
    indent = option_int(options, "indent", 2, minimum=1, maximum=8)
    start_indented = option_bool(options, "start_indented", False)
    start_indent = option_int(options, "start_indent", indent, minimum=1, maximum=8)
    base = start_indent if start_indented else 0

    for item in list_items(lines):
        if item.ordered or item.under_ordered:
            continue
        expected = base + item.level * indent
        if item.indent != expected:
            yield item, expected


def ul_indent(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag unordered items not indented by ``indent`` spaces per level.

    Items nested under an ordered list are left to MD005, since their
    indentation follows the width of the ordered marker.
    """
    return [
        Violation(
            rule="MD007",
            line=item.index + 1,
            message=f"Unordered list indentation [Expected: {expected}; Actual: {item.indent}]",
            range=(1, item.indent + 1),
        )
        for item, expected in _ul_indent_errors(lines, config)
    ]


def fix_ul_indent(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for item, expected in _ul_indent_errors(lines, config):
        fixed[item.index] = _with_indent(lines[item.index], expected)
    return fixed


# ---------------------------------------------------------------------------
# MD029 ol-prefix
# ---------------------------------------------------------------------------

def _ordered_groups(lines: list[str]) -> list[list[ListItem]]:
    """Split ordered items into runs that share a list and a parent."""
    items = list_items(lines)
    groups = []
    for first, last in list_blocks(lines):
        open_groups: dict[int, list[ListItem]] = {}
        for item in (it for it in items if first <= it.index <= last):
            for level in [lvl for lvl in open_groups if lvl > item.level]:
                del open_groups[level]
            if not item.ordered:
                open_groups.pop(item.level, None)
                continue
            group = open_groups.get(item.level)
            if group is None:
                group = open_groups[item.level] = []
                groups.append(group)
            group.append(item)
    return groups


def ol_prefix(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag ordered list numbering that does not follow ``style``.

    ``one_or_ordered`` accepts either all ``1.`` or an increasing sequence
    from the first number. Renumbering could break references to the
    numbers in the text, so nothing is rewritten.
    """
    style = option_choice(
        rule_options(config, "MD029"), "style", ("one_or_ordered", "one", "ordered", "zero"), "one_or_ordered"
    )
    violations = []
    for group in _ordered_groups(lines):
        numbers = [int(item.marker[:-1]) for item in group]
        group_style = style
        if style == "one_or_ordered":
            all_ones = len(numbers) > 1 and numbers[0] == 1 and numbers[1] == 1
            group_style = "one" if all_ones else "ordered"

        for position, (item, number) in enumerate(zip(group, numbers)):
            if group_style == "one":
                expected = 1
            elif group_style == "zero":
                expected = 0
            else:
                expected = numbers[0] + position
            if number != expected:
                violations.append(Violation(
                    rule="MD029",
                    line=item.index + 1,
                    message=f"Ordered list item prefix [Expected: {expected}; Actual: {number}]",
                    range=(item.indent + 1, len(item.marker)),
                ))
    return violations


# ---------------------------------------------------------------------------
# MD030 list-marker-space
# ---------------------------------------------------------------------------

def _marker_spacing(lines: list[str], config: dict):
    options = rule_options(config, "MD030")
    ul_single = option_int(options, "ul_single", 1, minimum=1, maximum=4)
    ol_single = option_int(options, "ol_single", 1, minimum=1, maximum=4)
    for item in list_items(lines):
        expected = ol_single if item.ordered else ul_single
        if item.spacing != ' ' * expected:
            yield item, expected


def list_marker_space(lines: list[str], config: dict) -> list[Violation]:
    return [
        Violation(
            rule="MD030",
            line=item.index + 1,
            message=f"Spaces after list markers [Expected: {expected}; Actual: {len(item.spacing)}]",
            range=(item.indent + 1, len(item.marker) + len(item.spacing)),
        )
        for item, expected in _marker_spacing(lines, config)
    ]


def fix_list_marker_space(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for item, expected in _marker_spacing(lines, config):
        line = lines[item.index]
        prefix = line[:len(line) - len(line.lstrip(' \t'))]
        fixed[item.index] = f"{prefix}{item.marker}{' ' * expected}{item.content}"
    return fixed


# ---------------------------------------------------------------------------
# MD032 blanks-around-lists
# ---------------------------------------------------------------------------

def blanks_around_lists(lines: list[str], config: dict) -> list[Violation]:
    """Flag lists that touch the surrounding text without a blank line."""
    violations = []
    for first, last in list_blocks(lines):
        if first > 0 and not is_blank(lines[first - 1]):
            violations.append(Violation(
                rule="MD032",
                line=first + 1,
                message="Lists should be surrounded by blank lines [Above]",
            ))
        if last + 1 < len(lines) and not is_blank(lines[last + 1]):
            violations.append(Violation(
                rule="MD032",
                line=last + 1,
                message="Lists should be surrounded by blank lines [Below]",
            ))
    return violations


def fix_blanks_around_lists(lines: list[str], config: dict) -> list[str]:
    blocks = list_blocks(lines)
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
