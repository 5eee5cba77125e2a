"""
Link, image and reference rules.

Links are found with regular expressions on each line outside code; a link
that wraps over two lines is not seen. Reference definitions are collected
in a first pass so the usage checks can resolve labels.
"""
import re
from dataclasses import dataclass
from typing import Optional

from ..models import Violation
from ..options import option_bool, option_list, rule_options
from ..scanners import (
    AUTOLINK_RE,
    BARE_URL_RE,
    HTML_TAG_RE,
    code_mask,
    code_span_ranges,
    find_headings,
    overlaps,
)

REVERSED_LINK_RE = re.compile(r'(?<![\]\\])\(([^()]*(?:\([^()]*\)[^()]*)*)\)\[([^\[\]]+)\]')
INLINE_LINK_RE = re.compile(
    r'(!?)\[([^\[\]]*)\]'
    r'\((<[^<>]*>|[^()\s]*(?:\([^()\s]*\)[^()\s]*)*)'
    r'((?:\s+(?:"[^"]*"|\'[^\']*\'|\([^()]*\)))?)\s*\)'
)
REFERENCE_LINK_RE = re.compile(r'(?<![\w\]\\])(!?)\[([^\[\]]+)\]\[([^\[\]]*)\]')
SHORTCUT_LINK_RE = re.compile(r'(?<![\w\]\\])(!?)\[([^\[\]]+)\](?![\[(:])')
DEFINITION_RE = re.compile(
    r'^ {0,3}\[(?!\^)([^\[\]]+)\]:\s*(<[^<>]*>|\S+)'
    r'(?:\s+("[^"]*"|\'[^\']*\'|\([^()]*\)))?\s*$'
)
LINK_TEXT_SPACE_RE = re.compile(r'(!?)\[( *)([^\[\]]*?)( *)\](?=[(\[])')
IMAGE_NO_ALT_RE = re.compile(r'!\[\s*\][(\[]')
IMG_TAG_NO_ALT_RE = re.compile(r'<img\b(?![^>]*\balt\s*=)[^>]*>', re.IGNORECASE)
HTML_ID_RE = re.compile(r'<[^>]*\b(?:id|name)\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
URL_AUTOLINK_RE = re.compile(r'<(https?://[^\s<>]+)>')

DEFAULT_PROHIBITED_TEXTS = ["click here", "here", "link", "more"]


def normalize_label(label: str) -> str:
    return ' '.join(label.split()).lower()


def _outside_code(pattern: re.Pattern, line: str):
    spans = code_span_ranges(line)
    for match in pattern.finditer(line):
        if not overlaps(match.span(), spans):
            yield match


def _content_lines(lines: list[str]):
    """Yield ``(index, line)`` for lines outside code that are not definitions."""
    code = code_mask(lines)
    for i, line in enumerate(lines):
        if not code[i] and not DEFINITION_RE.match(line):
            yield i, line


def _rewrite(line: str, replacements: list[tuple[int, int, str]]) -> str:
    """Apply ``(start, end, text)`` replacements, last first, skipping overlaps."""
    limit = len(line) + 1
    for start, end, text in sorted(replacements, key=lambda r: r[0], reverse=True):
        if end > limit:
            continue
        line = line[:start] + text + line[end:]
        limit = start
    return line


@dataclass
class Definition:
    index: int
    label: str
    url: str
    title: Optional[str]


def find_definitions(lines: list[str]) -> list[Definition]:
    """All ``[label]: url "title"`` lines outside code, in order."""
    code = code_mask(lines)
    definitions = []
    for i, line in enumerate(lines):
        if code[i]:
            continue
        match = DEFINITION_RE.match(line)
        if match:
            url = match.group(2)
            if url.startswith('<') and url.endswith('>'):
                url = url[1:-1]
            definitions.append(Definition(i, normalize_label(match.group(1)), url, match.group(3)))
    return definitions


def _definition_map(lines: list[str]) -> dict[str, Definition]:
    defined: dict[str, Definition] = {}
    for definition in find_definitions(lines):
        defined.setdefault(definition.label, definition)
    return defined


def _used_labels(lines: list[str]) -> set[str]:
    used = set()
    for _, line in _content_lines(lines):
        for match in _outside_code(REFERENCE_LINK_RE, line):
            used.add(normalize_label(match.group(3) or match.group(2)))
        for match in _outside_code(SHORTCUT_LINK_RE, line):
            used.add(normalize_label(match.group(2)))
    return used


# ---------------------------------------------------------------------------
# MD011 no-reversed-links
# ---------------------------------------------------------------------------

def _reversed_links(line: str):
    for match in _outside_code(REVERSED_LINK_RE, line):
        text, url = match.group(1), match.group(2)
        # (text)[^1] is a footnote after a parenthetical
        if text.strip() and url.strip() and not url.startswith('^'):
            yield match


def no_reversed_links(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``(text)[url]``, which was meant to be ``[text](url)``."""
    code = code_mask(lines)
    violations = []
    for i, line in enumerate(lines):
        if code[i]:
            continue
        for match in _reversed_links(line):
            violations.append(Violation(
                rule="MD011",
                line=i + 1,
                message=f"Reversed link syntax [{match.group()}]",
                range=(match.start() + 1, len(match.group())),
            ))
    return violations


def fix_no_reversed_links(lines: list[str], config: dict) -> list[str]:
    code = code_mask(lines)
    fixed = []
    for i, line in enumerate(lines):
        if not code[i]:
            line = _rewrite(line, [
                (m.start(), m.end(), f"[{m.group(1)}]({m.group(2)})") for m in _reversed_links(line)
            ])
        fixed.append(line)
    return fixed


# ---------------------------------------------------------------------------
# MD034 no-bare-urls
# ---------------------------------------------------------------------------

def _bare_urls(line: str):
    covered = code_span_ranges(line)
    for pattern in (INLINE_LINK_RE, REFERENCE_LINK_RE, AUTOLINK_RE, HTML_TAG_RE):
        covered += [m.span() for m in pattern.finditer(line)]
    for match in BARE_URL_RE.finditer(line):
        before = line[match.start() - 1] if match.start() else ''
        if before in ('<', '"', "'", '=', '[') or overlaps(match.span(), covered):
            continue
        yield match


def no_bare_urls(lines: list[str], config: dict) -> list[Violation]:
    """Flag http(s) URLs that are neither links nor autolinks."""
    violations = []
    for i, line in _content_lines(lines):
        for match in _bare_urls(line):
            violations.append(Violation(
                rule="MD034",
                line=i + 1,
                message=f"Bare URL used [{match.group()}]",
                range=(match.start() + 1, len(match.group())),
            ))
    return violations


def fix_no_bare_urls(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i, line in _content_lines(lines):
        fixed[i] = _rewrite(line, [(m.start(), m.end(), f"<{m.group()}>") for m in _bare_urls(line)])
    return fixed


# ---------------------------------------------------------------------------
# MD039 no-space-in-links
# ---------------------------------------------------------------------------

def _padded_link_texts(line: str):
    for match in _outside_code(LINK_TEXT_SPACE_RE, line):
        if match.group(3) and (match.group(2) or match.group(4)):
            yield match


def no_space_in_links(lines: list[str], config: dict) -> list[Violation]:
    violations = []
    for i, line in _content_lines(lines):
        for match in _padded_link_texts(line):
            violations.append(Violation(
                rule="MD039",
                line=i + 1,
                message=f"Spaces inside link text [{match.group()}]",
                range=(match.start() + 1, len(match.group())),
            ))
    return violations


def fix_no_space_in_links(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i, line in _content_lines(lines):
        fixed[i] = _rewrite(line, [
            (m.start(), m.end(), f"{m.group(1)}[{m.group(3)}]") for m in _padded_link_texts(line)
        ])
    return fixed


# ---------------------------------------------------------------------------
# MD042 no-empty-links
# ---------------------------------------------------------------------------

def _empty_links(line: str):
    """Yield ``(match, replacement)`` for links that go nowhere or show nothing."""
    for match in _outside_code(INLINE_LINK_RE, line):
        if match.group(1):
            continue
        text, destination = match.group(2), match.group(3).strip('<>')
        if destination in ('', '#'):
            yield match, text
        elif not text.strip():
            yield match, f"[{destination}]({match.group(3)}{match.group(4)})"


def no_empty_links(lines: list[str], config: dict) -> list[Violation]:
    violations = []
    for i, line in _content_lines(lines):
        for match, _ in _empty_links(line):
            violations.append(Violation(
                rule="MD042",
                line=i + 1,
                message=f"No empty links [{match.group()}]",
                range=(match.start() + 1, len(match.group())),
            ))
    return violations


def fix_no_empty_links(lines: list[str], config: dict) -> list[str]:
    """
    Unwrap links with no destination; give text-less links their URL as text.
    """
    fixed = list(lines)
    for i, line in _content_lines(lines):
        fixed[i] = _rewrite(line, [(m.start(), m.end(), new) for m, new in _empty_links(line)])
    return fixed


# ---------------------------------------------------------------------------
# MD045 no-alt-text
# ---------------------------------------------------------------------------

def no_alt_text(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag images without alternate text.

    Only the author can describe an image, so this is reported only.
    """
    violations = []
    for i, line in _content_lines(lines):
        for pattern in (IMAGE_NO_ALT_RE, IMG_TAG_NO_ALT_RE):
            for match in _outside_code(pattern, line):
                violations.append(Violation(
                    rule="MD045",
                    line=i + 1,
                    message="Images should have alternate text (alt text)",
                    range=(match.start() + 1, len(match.group())),
                ))
    return violations


# ---------------------------------------------------------------------------
# MD051 link-fragments
# ---------------------------------------------------------------------------

def heading_anchor(text: str) -> str:
    """GitHub style anchor for a heading's text."""
    text = re.sub(r'!?\[([^\]]*)\]\([^)]*\)', r'\1', text)
    anchor = re.sub(r'[^\w\- ]', '', text.strip().lower())
    return anchor.replace(' ', '-')


def _anchors(lines: list[str]) -> set[str]:
    anchors = set()
    counts: dict[str, int] = {}
    for heading in find_headings(lines):
        anchor = heading_anchor(heading.text)
        seen = counts.get(anchor, 0)
        anchors.add(f"{anchor}-{seen}" if seen else anchor)
        counts[anchor] = seen + 1
    for _, line in _content_lines(lines):
        anchors.update(m.group(1) for m in HTML_ID_RE.finditer(line))
    return anchors


def _bad_fragments(lines: list[str]):
    """Yield ``(index, match, fixed_fragment_or_None)`` for dead ``#fragment`` links."""
    anchors = None
    for i, line in _content_lines(lines):
        for match in _outside_code(INLINE_LINK_RE, line):
            destination = match.group(3).strip('<>')
            if not destination.startswith('#') or len(destination) < 2:
                continue
            if anchors is None:
                anchors = _anchors(lines)
            fragment = destination[1:]
            if fragment in anchors or fragment.lower() == 'top':
                continue
            candidates = [a for a in anchors if a.lower() == fragment.lower()]
            yield i, match, candidates[0] if len(candidates) == 1 else None


def link_fragments(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``#fragment`` links that match no heading or HTML anchor."""
    return [
        Violation(
            rule="MD051",
            line=i + 1,
            message=f"Link fragments should be valid [{match.group(3)}]",
            range=(match.start() + 1, len(match.group())),
        )
        for i, match, _ in _bad_fragments(lines)
    ]


def fix_link_fragments(lines: list[str], config: dict) -> list[str]:
    """Only a fragment that differs from a real anchor by case is corrected."""
    fixed = list(lines)
    by_line: dict[int, list] = {}
    for i, match, anchor in _bad_fragments(lines):
        if anchor is not None:
            start, end = match.span(3)
            by_line.setdefault(i, []).append((start, end, f"#{anchor}"))
    for i, replacements in by_line.items():
        fixed[i] = _rewrite(lines[i], replacements)
    return fixed


# ---------------------------------------------------------------------------
# MD052 reference-links-images
# ---------------------------------------------------------------------------

def _undefined_references(lines: list[str]):
    defined = _definition_map(lines)
    for i, line in _content_lines(lines):
        for match in _outside_code(REFERENCE_LINK_RE, line):
            label = normalize_label(match.group(3) or match.group(2))
            if label not in defined:
                yield i, match, label


def reference_links_images(lines: list[str], config: dict) -> list[Violation]:
    """Flag ``[text][label]`` and ``[text][]`` whose label has no definition."""
    return [
        Violation(
            rule="MD052",
            line=i + 1,
            message=f"Reference links and images should use a label that is defined [Missing link or image reference definition: \"{label}\"]",
            range=(match.start() + 1, len(match.group())),
        )
        for i, match, label in _undefined_references(lines)
    ]


def fix_reference_links_images(lines: list[str], config: dict) -> list[str]:
    """Prune a broken reference down to its text."""
    fixed = list(lines)
    by_line: dict[int, list] = {}
    for i, match, _ in _undefined_references(lines):
        by_line.setdefault(i, []).append((match.start(), match.end(), match.group(2)))
    for i, replacements in by_line.items():
        fixed[i] = _rewrite(lines[i], replacements)
    return fixed


# ---------------------------------------------------------------------------
# MD053 link-image-reference-definitions
# ---------------------------------------------------------------------------

def _needless_definitions(lines: list[str], config: dict):
    ignored = {normalize_label(label) for label in
               option_list(rule_options(config, "MD053"), "ignored_definitions", ["//"])}
    used = _used_labels(lines)
    seen = set()
    for definition in find_definitions(lines):
        if definition.label in ignored:
            continue
        if definition.label in seen:
            yield definition, "Duplicate link or image reference definition"
        elif definition.label not in used:
            yield definition, "Unused link or image reference definition"
        seen.add(definition.label)


def link_image_reference_definitions(lines: list[str], config: dict) -> list[Violation]:
    return [
        Violation(
            rule="MD053",
            line=definition.index + 1,
            message=f"Link and image reference definitions should be needed [{reason}: \"{definition.label}\"]",
            range=(1, len(lines[definition.index])),
        )
        for definition, reason in _needless_definitions(lines, config)
    ]


def fix_link_image_reference_definitions(lines: list[str], config: dict) -> list[str]:
    drop = {definition.index for definition, _ in _needless_definitions(lines, config)}
    return [line for i, line in enumerate(lines) if i not in drop]


# ---------------------------------------------------------------------------
# MD054 link-image-style
# ---------------------------------------------------------------------------

LINK_STYLES = ("autolink", "inline", "full", "collapsed", "shortcut", "url_inline")


def _link_styles(config: dict) -> dict[str, bool]:
    options = rule_options(config, "MD054")
    return {style: option_bool(options, style, True) for style in LINK_STYLES}


def _styled_links(line: str, defined: dict[str, Definition]):
    """Yield ``(style, match)`` for each link on the line."""
    for match in _outside_code(URL_AUTOLINK_RE, line):
        yield "autolink", match
    for match in _outside_code(INLINE_LINK_RE, line):
        destination = match.group(3).strip('<>')
        if not match.group(4) and match.group(2) == destination:
            yield "url_inline", match
        else:
            yield "inline", match
    for match in _outside_code(REFERENCE_LINK_RE, line):
        yield ("full" if match.group(3) else "collapsed"), match
    for match in _outside_code(SHORTCUT_LINK_RE, line):
        if normalize_label(match.group(2)) in defined:
            yield "shortcut", match


def link_image_style(lines: list[str], config: dict) -> list[Violation]:
    """Flag links written in a style the configuration turns off."""
    allowed = _link_styles(config)
    if all(allowed.values()):
        return []
    defined = _definition_map(lines)
    violations = []
    for i, line in _content_lines(lines):
        for style, match in _styled_links(line, defined):
            if style == "url_inline":
                ok = allowed["inline"] and allowed["url_inline"]
            else:
                ok = allowed[style]
            if not ok:
                violations.append(Violation(
                    rule="MD054",
                    line=i + 1,
                    message=f"Link and image style [Unexpected {style} link]",
                    range=(match.start() + 1, len(match.group())),
                ))
    return violations


def _inline_target(definition: Definition) -> str:
    title = f" {definition.title}" if definition.title else ""
    return f"({definition.url}{title})"


def fix_link_image_style(lines: list[str], config: dict) -> list[str]:
    """
    Rewrite disallowed reference and autolinks as inline links.

    Definitions that only the rewritten links used are dropped. Inline links
    cannot be turned into references without inventing labels.
    """
    allowed = _link_styles(config)
    if all(allowed.values()):
        return list(lines)
    defined = _definition_map(lines)
    used_before = _used_labels(lines)
    fixed = list(lines)

    for i, line in _content_lines(lines):
        replacements = []
        for style, match in _styled_links(line, defined):
            if style in ("full", "collapsed", "shortcut") and not allowed[style] and allowed["inline"]:
                label = normalize_label(match.group(3) if style == "full" else match.group(2))
                definition = defined.get(label)
                if definition is not None:
                    replacements.append((
                        match.start(), match.end(),
                        f"{match.group(1)}[{match.group(2)}]{_inline_target(definition)}",
                    ))
            elif style == "autolink" and not allowed["autolink"] and allowed["inline"] and allowed["url_inline"]:
                url = match.group(1)
                replacements.append((match.start(), match.end(), f"[{url}]({url})"))
            elif style == "url_inline" and not allowed["url_inline"] and allowed["autolink"] and not match.group(1):
                replacements.append((match.start(), match.end(), f"<{match.group(2)}>"))
        if replacements:
            fixed[i] = _rewrite(line, replacements)

    used_after = _used_labels(fixed)
    orphaned = {d.index for d in find_definitions(fixed)
                if d.label in used_before and d.label not in used_after}
    return [line for i, line in enumerate(fixed) if i not in orphaned]


# ---------------------------------------------------------------------------
# MD059 descriptive-link-text
# ---------------------------------------------------------------------------

def _normalize_text(text: str) -> str:
    return ' '.join(re.sub(r'[^\w\s]', ' ', text.lower()).split())


def descriptive_link_text(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag links whose text says nothing about the target, like "click here".

    Better wording depends on what the link is for, so this is reported only.
    """
    prohibited = {
        _normalize_text(text)
        for text in option_list(rule_options(config, "MD059"), "prohibited_texts", DEFAULT_PROHIBITED_TEXTS)
    }
    violations = []
    for i, line in _content_lines(lines):
        for pattern in (INLINE_LINK_RE, REFERENCE_LINK_RE):
            for match in _outside_code(pattern, line):
                if match.group(1) or _normalize_text(match.group(2)) not in prohibited:
                    continue
                violations.append(Violation(
                    rule="MD059",
                    line=i + 1,
                    message=f"Link text should be descriptive [{match.group(2)}]",
                    range=(match.start() + 1, len(match.group())),
                ))
    return violations
