"""
Context scanners shared by the rules.

Each scanner is a single forward pass over the raw lines that answers
"what kind of block is line i in". Nothing here parses Markdown into a
tree; the checks are the same regex and toggle heuristics the rules used
to carry individually.
"""
import re
from dataclasses import dataclass
from typing import Optional

FENCE_RE = re.compile(r'^(\s*)(`{3,}|~{3,})(.*)$')
LIST_ITEM_RE = re.compile(r'^(\s*)([-+*]|\d{1,9}[.)])([ \t]+)(\S.*)$')
THEMATIC_BREAK_RE = re.compile(r'^ {0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$')
ATX_RE = re.compile(r'^( {0,3})(#{1,6})(?:[ \t]+(.*?))?[ \t]*$')
SETEXT_UNDERLINE_RE = re.compile(r'^ {0,3}(=+|-+)[ \t]*$')
TABLE_SEPARATOR_RE = re.compile(r'^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$')
BARE_URL_RE = re.compile(r'https?://[^\s<>`\[\]]*[^\s<>`\[\].,;:!?\'")]')
INLINE_LINK_TARGET_RE = re.compile(r'\]\([^)\s]*(?:\s+"[^"]*")?\)')
AUTOLINK_RE = re.compile(r'<[a-zA-Z][a-zA-Z0-9+.-]*:[^\s<>]*>')
HTML_TAG_RE = re.compile(r'</?[A-Za-z][A-Za-z0-9-]*(?:\s[^<>]*)?/?>')


def is_blank(line: str) -> bool:
    return not line.strip()


# ---------------------------------------------------------------------------
# Fenced and indented code
# ---------------------------------------------------------------------------

@dataclass
class Fence:
    """A fenced code block. ``end`` is None when the fence never closes."""
    start: int
    end: Optional[int]
    indent: str
    marker: str
    info: str

    @property
    def char(self) -> str:
        return self.marker[0]

    def last_line(self, total: int) -> int:
        return self.end if self.end is not None else total - 1


def match_fence_open(line: str) -> Optional[re.Match]:
    match = FENCE_RE.match(line)
    if not match:
        return None
    # A backtick fence's info string cannot contain backticks (```x``` is inline code)
    if match.group(2)[0] == '`' and '`' in match.group(3):
        return None
    return match


def _closes(line: str, fence: Fence) -> bool:
    stripped = line.strip()
    run = len(stripped) - len(stripped.lstrip(fence.char))
    return run >= len(fence.marker) and not stripped[run:].strip()


def find_fences(lines: list[str]) -> list[Fence]:
    """
    Locate fenced code blocks.

    A fence opens on a line whose trimmed content starts with three or more
    backticks or tildes and closes on a line made of the same character,
    at least as long as the opener.
    """
    fences = []
    current: Optional[Fence] = None

    for i, line in enumerate(lines):
        if current is None:
            match = match_fence_open(line)
            if match:
                current = Fence(
                    start=i,
                    end=None,
                    indent=match.group(1),
                    marker=match.group(2),
                    info=match.group(3).strip(),
                )
        elif _closes(line, current):
            current.end = i
            fences.append(current)
            current = None

    if current is not None:
        fences.append(current)
    return fences


def fence_mask(lines: list[str]) -> list[bool]:
    """True for every line of a fenced block, fence lines included."""
    mask = [False] * len(lines)
    for fence in find_fences(lines):
        for i in range(fence.start, fence.last_line(len(lines)) + 1):
            mask[i] = True
    return mask


def is_indented_code(lines: list[str], index: int) -> bool:
    """
    Indented code check for a single line.

    The line must be indented by four spaces or a tab and the line just
    before it must be blank. Only that one preceding line is consulted.
    """
    line = lines[index]
    if is_blank(line) or not (line.startswith('    ') or line.startswith('\t')):
        return False
    return index == 0 or is_blank(lines[index - 1])


def indented_code_mask(
    lines: list[str],
    fenced: Optional[list[bool]] = None,
    in_list: Optional[list[bool]] = None,
) -> list[bool]:
    """Mark indented code blocks, continuing a block over its own lines."""
    fenced = fenced if fenced is not None else fence_mask(lines)
    in_list = in_list if in_list is not None else list_mask(lines, fenced)
    mask = [False] * len(lines)

    for i, line in enumerate(lines):
        if fenced[i] or in_list[i]:
            continue
        if is_indented_code(lines, i):
            mask[i] = True
        elif i > 0 and mask[i - 1] and not is_blank(line) and (line.startswith('    ') or line.startswith('\t')):
            mask[i] = True
        elif is_blank(line) and i > 0 and mask[i - 1]:
            # Blank lines inside an indented block belong to it if code follows
            nxt = next((j for j in range(i + 1, len(lines)) if not is_blank(lines[j])), None)
            if nxt is not None and (lines[nxt].startswith('    ') or lines[nxt].startswith('\t')):
                mask[i] = True
    return mask


def code_mask(lines: list[str]) -> list[bool]:
    """True for lines inside fenced or indented code."""
    fenced = fence_mask(lines)
    indented = indented_code_mask(lines, fenced)
    return [f or c for f, c in zip(fenced, indented)]


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def match_list_item(line: str) -> Optional[re.Match]:
    """Match a list item line; thematic breaks like ``* * *`` are excluded."""
    if THEMATIC_BREAK_RE.match(line):
        return None
    return LIST_ITEM_RE.match(line)


def list_blocks(lines: list[str], fenced: Optional[list[bool]] = None) -> list[tuple[int, int]]:
    """
    Return ``(first, last)`` line indexes of each list.

    A list starts at a list item and carries on across blank lines, more
    list items and indented continuation lines. The first non-blank line
    that is neither ends it. Trailing blank lines are not part of the list.
    """
    fenced = fenced if fenced is not None else fence_mask(lines)
    blocks = []
    start = None
    last_content = None

    for i, line in enumerate(lines):
        if start is None:
            if not fenced[i] and match_list_item(line):
                start = last_content = i
            continue

        if is_blank(line):
            continue
        indented = line[:1] in (' ', '\t')
        if match_list_item(line) or indented:
            last_content = i
            continue

        blocks.append((start, last_content))
        start = last_content = None

    if start is not None:
        blocks.append((start, last_content))
    return blocks


def list_mask(lines: list[str], fenced: Optional[list[bool]] = None) -> list[bool]:
    mask = [False] * len(lines)
    for first, last in list_blocks(lines, fenced):
        for i in range(first, last + 1):
            mask[i] = True
    return mask


@dataclass
class ListItem:
    index: int
    indent: int
    marker: str
    spacing: str
    content: str
    level: int = 0
    under_ordered: bool = False

    @property
    def ordered(self) -> bool:
        return self.marker[0].isdigit()


def list_items(lines: list[str]) -> list[ListItem]:
    """
    Collect list items with their nesting level.

    An item nests under the previous one when it is indented further. An
    item whose indentation falls between two open levels joins the deeper
    of the two. Nesting restarts at each new list.
    """
    fenced = fence_mask(lines)
    items = []

    for first, last in list_blocks(lines, fenced):
        stack: list[tuple[int, bool]] = []  # (indent, ordered) per open level

        for i in range(first, last + 1):
            if fenced[i]:
                continue
            match = match_list_item(lines[i])
            if not match:
                continue
            item = ListItem(
                index=i,
                indent=len(match.group(1).expandtabs(4)),
                marker=match.group(2),
                spacing=match.group(3),
                content=match.group(4),
            )

            while stack and item.indent < stack[-1][0]:
                top = stack.pop()
                if not stack or item.indent > stack[-1][0]:
                    stack.append(top)
                    break

            if not stack or item.indent > stack[-1][0]:
                stack.append((item.indent, item.ordered))

            item.level = len(stack) - 1
            item.under_ordered = any(ordered for _, ordered in stack[:-1])
            items.append(item)

    return items


def level_indents(items: list[ListItem], lines: list[str]) -> dict[int, int]:
    """
    Map each item's line index to the indentation of the first item at its level.

    Levels are scoped to their parent so siblings under different parents
    do not constrain each other.
    """
    expected = {}
    fenced = fence_mask(lines)
    blocks = list_blocks(lines, fenced)

    for first, last in blocks:
        scoped = [it for it in items if first <= it.index <= last]
        firsts: dict[int, int] = {}
        for item in scoped:
            # Leaving a level forgets everything deeper than it
            for level in [lvl for lvl in firsts if lvl > item.level]:
                del firsts[level]
            firsts.setdefault(item.level, item.indent)
            expected[item.index] = firsts[item.level]
    return expected


# ---------------------------------------------------------------------------
# Tables and blockquotes
# ---------------------------------------------------------------------------

def is_table_separator(line: str) -> bool:
    return '|' in line and bool(TABLE_SEPARATOR_RE.match(line))


def split_table_cells(line: str) -> list[str]:
    """Split a row into stripped cells, ignoring the outer pipes."""
    body = line.strip()
    if body.startswith('|'):
        body = body[1:]
    if body.endswith('|') and not body.endswith('\\|'):
        body = body[:-1]
    return [cell.strip() for cell in re.split(r'(?<!\\)\|', body)]


def table_blocks(lines: list[str], code: Optional[list[bool]] = None) -> list[tuple[int, int]]:
    """
    Return ``(first, last)`` indexes of each table.

    A table is a run of consecutive pipe lines outside code whose second
    line is a separator row.
    """
    code = code if code is not None else code_mask(lines)
    blocks = []
    i = 0
    while i < len(lines) - 1:
        line = lines[i]
        if (not code[i] and '|' in line and not is_blank(line)
                and not code[i + 1] and is_table_separator(lines[i + 1])
                and not is_blockquote(line)):
            end = i + 1
            while end + 1 < len(lines) and not code[end + 1] and '|' in lines[end + 1] \
                    and not is_blank(lines[end + 1]):
                end += 1
            blocks.append((i, end))
            i = end + 1
        else:
            i += 1
    return blocks


def table_mask(lines: list[str], code: Optional[list[bool]] = None) -> list[bool]:
    mask = [False] * len(lines)
    for first, last in table_blocks(lines, code):
        for i in range(first, last + 1):
            mask[i] = True
    return mask


def is_blockquote(line: str) -> bool:
    return line.lstrip().startswith('>')


def blockquote_mask(lines: list[str], code: Optional[list[bool]] = None) -> list[bool]:
    code = code if code is not None else code_mask(lines)
    return [not c and is_blockquote(line) for line, c in zip(lines, code)]


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

@dataclass
class Heading:
    """A heading; ``underline`` is set for Setext headings."""
    index: int
    level: int
    style: str  # "atx", "atx_closed" or "setext"
    text: str
    indent: str = ''
    underline: Optional[int] = None

    @property
    def end(self) -> int:
        return self.underline if self.underline is not None else self.index


def parse_atx(line: str) -> Optional[tuple[str, int, str, bool]]:
    """Return ``(indent, level, text, closed)`` for an ATX heading line."""
    match = ATX_RE.match(line)
    if not match:
        return None
    indent, hashes, rest = match.group(1), match.group(2), match.group(3) or ''
    closed = False
    close = re.match(r'^(.*?)(?:^|[ \t]+)#+$', rest)
    if close:
        rest = close.group(1)
        closed = True
    return indent, len(hashes), rest.strip(), closed


def can_be_setext_text(line: str) -> bool:
    if is_blank(line) or len(line) - len(line.lstrip(' ')) > 3:
        return False
    if parse_atx(line) or match_list_item(line) or is_blockquote(line):
        return False
    if THEMATIC_BREAK_RE.match(line) or match_fence_open(line) or SETEXT_UNDERLINE_RE.match(line):
        return False
    return not is_table_separator(line)


def find_headings(lines: list[str], code: Optional[list[bool]] = None) -> list[Heading]:
    """
    Find ATX, closed ATX and Setext headings outside code.

    A Setext heading consumes its text line and underline together.
    """
    code = code if code is not None else code_mask(lines)
    tables = table_mask(lines, code)
    headings = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if code[i]:
            i += 1
            continue

        atx = parse_atx(line)
        if atx:
            indent, level, text, closed = atx
            headings.append(Heading(i, level, 'atx_closed' if closed else 'atx', text, indent))
            i += 1
            continue

        if (i + 1 < len(lines) and not code[i + 1] and not tables[i]
                and can_be_setext_text(line)):
            underline = SETEXT_UNDERLINE_RE.match(lines[i + 1])
            if underline:
                level = 1 if underline.group(1)[0] == '=' else 2
                headings.append(Heading(i, level, 'setext', line.strip(), underline=i + 1))
                i += 2
                continue
        i += 1
    return headings


def heading_mask(lines: list[str], headings: Optional[list[Heading]] = None) -> list[bool]:
    mask = [False] * len(lines)
    for heading in headings if headings is not None else find_headings(lines):
        for i in range(heading.index, heading.end + 1):
            mask[i] = True
    return mask


# ---------------------------------------------------------------------------
# Inline exclusion ranges
# ---------------------------------------------------------------------------

def code_span_ranges(line: str) -> list[tuple[int, int]]:
    """Return ``[start, end)`` spans of inline code, backticks included."""
    ranges = []
    i, n = 0, len(line)
    while i < n:
        if line[i] != '`':
            i += 1
            continue
        j = i
        while j < n and line[j] == '`':
            j += 1
        run = j - i
        k = j
        closed = False
        while k < n:
            if line[k] != '`':
                k += 1
                continue
            m = k
            while m < n and line[m] == '`':
                m += 1
            if m - k == run:
                ranges.append((i, m))
                i = m
                closed = True
                break
            k = m
        if not closed:
            i = j
    return ranges


def url_ranges(line: str) -> list[tuple[int, int]]:
    """Spans covered by link destinations, autolinks and bare URLs."""
    ranges = []
    for pattern in (INLINE_LINK_TARGET_RE, AUTOLINK_RE, BARE_URL_RE):
        ranges.extend(m.span() for m in pattern.finditer(line))
    return ranges


def in_ranges(position: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in ranges)


def overlaps(span: tuple[int, int], ranges: list[tuple[int, int]]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in ranges)
