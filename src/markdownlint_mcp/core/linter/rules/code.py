"""Code block and code span rules."""
import re

from ..models import Violation
from ..options import option_choice, option_list, option_str, rule_options
from ..scanners import (
    Fence,
    code_mask,
    code_span_ranges,
    find_fences,
    indented_code_mask,
    is_blank,
)

SHELL_LANGUAGES = {"", "bash", "sh", "shell", "zsh", "console"}
PROMPT_RE = re.compile(r'^(\s*)\$\s+')


# ---------------------------------------------------------------------------
# MD014 commands-show-output
# ---------------------------------------------------------------------------

def _prompt_only_lines(lines: list[str]):
    """Yield indexes of ``$ cmd`` lines in shell blocks that show no output."""
    for fence in find_fences(lines):
        if fence.end is None:
            continue
        language = fence.info.split()[0].lower() if fence.info else ""
        if language not in SHELL_LANGUAGES:
            continue
        body = [i for i in range(fence.start + 1, fence.end) if not is_blank(lines[i])]
        if body and all(PROMPT_RE.match(lines[i]) for i in body):
            yield from body


def commands_show_output(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag ``$`` prompts in a shell block that only lists commands.

    The prompt is noise when there is no output to tell apart from the
    commands, and it breaks copy and paste.
    """
    return [
        Violation(
            rule="MD014",
            line=i + 1,
            message=f"Dollar signs used before commands without showing output [{lines[i].strip()}]",
            range=(len(lines[i]) - len(lines[i].lstrip()) + 1, 2),
        )
        for i in _prompt_only_lines(lines)
    ]


def fix_commands_show_output(lines: list[str], config: dict) -> list[str]:
    fixed = list(lines)
    for i in _prompt_only_lines(lines):
        fixed[i] = PROMPT_RE.sub(r'\1', lines[i], count=1)
    return fixed


# ---------------------------------------------------------------------------
# MD031 blanks-around-fences
# ---------------------------------------------------------------------------

def _fence_edges(lines: list[str]) -> tuple[set[int], set[int]]:
    fences = find_fences(lines)
    return {f.start for f in fences}, {f.end for f in fences if f.end is not None}


def blanks_around_fences(lines: list[str], config: dict) -> list[Violation]:
    """Flag fenced code blocks not set apart by blank lines."""
    violations = []
    for fence in find_fences(lines):
        if fence.start > 0 and not is_blank(lines[fence.start - 1]):
            violations.append(Violation(
                rule="MD031",
                line=fence.start + 1,
                message="Fenced code blocks should be surrounded by blank lines [Above]",
            ))
        if fence.end is not None and fence.end + 1 < len(lines) and not is_blank(lines[fence.end + 1]):
            violations.append(Violation(
                rule="MD031",
                line=fence.end + 1,
                message="Fenced code blocks should be surrounded by blank lines [Below]",
            ))
    return violations


def fix_blanks_around_fences(lines: list[str], config: dict) -> list[str]:
    openings, closings = _fence_edges(lines)
    fixed = []
    for i, line in enumerate(lines):
        if i in openings and fixed and not is_blank(fixed[-1]):
            fixed.append('')
        fixed.append(line)
        if i in closings and i + 1 < len(lines) and not is_blank(lines[i + 1]):
            fixed.append('')
    return fixed


# ---------------------------------------------------------------------------
# MD038 no-space-in-code
# ---------------------------------------------------------------------------

def _padded_spans(line: str):
    """Yield ``(start, end, fixed_span)`` for code spans with padding inside."""
    for start, end in code_span_ranges(line):
        span = line[start:end]
        run = len(span) - len(span.lstrip('`'))
        inner = span[run:-run]
        content = inner.strip(' \t')
        if not content or content == inner:
            continue
        # One space each side is how a span that starts or ends with a backtick is written
        if inner == f" {content} " and (content.startswith('`') or content.endswith('`')):
            continue
        pad = ' ' if content.startswith('`') or content.endswith('`') else ''
        yield start, end, f"{'`' * run}{pad}{content}{pad}{'`' * run}"


def no_space_in_code(lines: list[str], config: dict) -> list[Violation]:
    code = code_mask(lines)
    violations = []
    for i, line in enumerate(lines):
        if code[i]:
            continue
        for start, end, _ in _padded_spans(line):
            violations.append(Violation(
                rule="MD038",
                line=i + 1,
                message=f"Spaces inside code span elements [{line[start:end]}]",
                range=(start + 1, end - start),
            ))
    return violations


def fix_no_space_in_code(lines: list[str], config: dict) -> list[str]:
    code = code_mask(lines)
    fixed = []
    for i, line in enumerate(lines):
        if not code[i]:
            # Right to left keeps earlier offsets valid
            for start, end, replacement in reversed(list(_padded_spans(line))):
                line = line[:start] + replacement + line[end:]
        fixed.append(line)
    return fixed


# ---------------------------------------------------------------------------
# MD040 fenced-code-language
# ---------------------------------------------------------------------------

def fenced_code_language(lines: list[str], config: dict) -> list[Violation]:
    """
    Flag fenced code blocks with no language.

    When ``allowed_languages`` is set, languages outside it are flagged too;
    those cannot be fixed automatically.
    """
    allowed = option_list(rule_options(config, "MD040"), "allowed_languages", [])
    violations = []
    for fence in find_fences(lines):
        language = fence.info.split()[0] if fence.info else ""
        if not language:
            message = "Fenced code blocks should have a language specified"
        elif allowed and language not in allowed:
            message = f"Fenced code blocks should have a language specified [Language not allowed: {language}]"
        else:
            continue
        violations.append(Violation(rule="MD040", line=fence.start + 1, message=message))
    return violations


def fix_fenced_code_language(lines: list[str], config: dict) -> list[str]:
    default = option_str(rule_options(config, "MD040"), "default_language", "text").strip()
    fixed = list(lines)
    if not default or ' ' in default:
        return fixed
    for fence in find_fences(lines):
        if not fence.info:
            fixed[fence.start] = f"{fence.indent}{fence.marker}{default}"
    return fixed


# ---------------------------------------------------------------------------
# MD046 code-block-style
# ---------------------------------------------------------------------------

def _indented_blocks(lines: list[str]) -> list[tuple[int, int]]:
    mask = indented_code_mask(lines)
    blocks = []
    start = None
    for i, flag in enumerate(mask + [False]):
        if flag and start is None:
            start = i
        elif not flag and start is not None:
            blocks.append((start, i - 1))
            start = None
    return blocks


def _code_blocks(lines: list[str]) -> list[tuple[int, str, object]]:
    """All code blocks in document order as ``(start, style, block)``."""
    blocks = [(f.start, "fenced", f) for f in find_fences(lines)]
    blocks += [(start, "indented", (start, end)) for start, end in _indented_blocks(lines)]
    return sorted(blocks, key=lambda b: b[0])


def _code_block_style(blocks: list, config: dict):
    style = option_choice(rule_options(config, "MD046"), "style", ("consistent", "fenced", "indented"), "consistent")
    if style == "consistent":
        return blocks[0][1] if blocks else None
    return style


def code_block_style(lines: list[str], config: dict) -> list[Violation]:
    blocks = _code_blocks(lines)
    style = _code_block_style(blocks, config)
    return [
        Violation(
            rule="MD046",
            line=start + 1,
            message=f"Code block style [Expected: {style}; Actual: {kind}]",
        )
        for start, kind, _ in blocks
        if style and kind != style
    ]


def _convertible_fence(fence: Fence, lines: list[str]) -> bool:
    """A fence can become indented code only if nothing is lost on the way."""
    if fence.end is None or fence.indent or fence.info or fence.end == fence.start + 1:
        return False
    return not is_blank(lines[fence.start + 1]) and not is_blank(lines[fence.end - 1])


def fix_code_block_style(lines: list[str], config: dict) -> list[str]:
    """
    Convert code blocks to the expected style.

    Fences carrying a language, indented fences and empty fences are left
    alone since indented code cannot express them.
    """
    blocks = _code_blocks(lines)
    style = _code_block_style(blocks, config)
    starts = {start: (kind, block) for start, kind, block in blocks if style and kind != style}

    fixed = []
    i = 0
    while i < len(lines):
        if i not in starts:
            fixed.append(lines[i])
            i += 1
            continue

        kind, block = starts[i]
        if kind == "fenced":
            if not _convertible_fence(block, lines):
                fixed.append(lines[i])
                i += 1
                continue
            body = ['    ' + line if not is_blank(line) else '' for line in lines[block.start + 1:block.end]]
            end = block.end
        else:
            start, end = block
            content = [re.sub(r'^( {4}|\t)', '', line) for line in lines[start:end + 1]]
            marker = '~~~' if any(line.lstrip().startswith('```') for line in content) else '```'
            body = [marker, *content, marker]

        if fixed and not is_blank(fixed[-1]):
            fixed.append('')
        fixed.extend(body)
        if end + 1 < len(lines) and not is_blank(lines[end + 1]):
            fixed.append('')
        i = end + 1
    return fixed


# ---------------------------------------------------------------------------
# MD048 code-fence-style
# ---------------------------------------------------------------------------

FENCE_CHARS = {"backtick": "`", "tilde": "~"}


def _fence_char(fences: list[Fence], config: dict):
    style = option_choice(rule_options(config, "MD048"), "style", ("consistent", *FENCE_CHARS), "consistent")
    if style == "consistent":
        return fences[0].char if fences else None
    return FENCE_CHARS[style]


def code_fence_style(lines: list[str], config: dict) -> list[Violation]:
    fences = find_fences(lines)
    char = _fence_char(fences, config)
    return [
        Violation(
            rule="MD048",
            line=fence.start + 1,
            message=f"Code fence style [Expected: {char * 3}; Actual: {fence.char * 3}]",
        )
        for fence in fences
        if char and fence.char != char
    ]


def fix_code_fence_style(lines: list[str], config: dict) -> list[str]:
    fences = find_fences(lines)
    char = _fence_char(fences, config)
    fixed = list(lines)
    for fence in fences:
        if not char or fence.char == char or fence.end is None:
            continue
        if char == '`' and '`' in fence.info:
            continue
        # The new fence must be longer than any run of its character inside the block
        longest = 0
        for line in lines[fence.start + 1:fence.end]:
            stripped = line.lstrip()
            longest = max(longest, len(stripped) - len(stripped.lstrip(char)))
        marker = char * max(len(fence.marker), longest + 1, 3)
        closing = lines[fence.end]
        fixed[fence.start] = f"{fence.indent}{marker}{fence.info}"
        fixed[fence.end] = closing[:len(closing) - len(closing.lstrip())] + marker
    return fixed
