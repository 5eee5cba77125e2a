"""Tests for code block and code span rules."""
from markdownlint_mcp.core.linter.rules.code import (
    blanks_around_fences,
    code_block_style,
    code_fence_style,
    commands_show_output,
    fenced_code_language,
    fix_blanks_around_fences,
    fix_code_block_style,
    fix_code_fence_style,
    fix_commands_show_output,
    fix_fenced_code_language,
    fix_no_space_in_code,
    no_space_in_code,
)


# ---------------------------------------------------------------------------
# MD014 commands-show-output
# ---------------------------------------------------------------------------


def test_prompts_stripped_when_no_output():
    lines = ["```sh", "$ ls", "$ pwd", "```"]

    assert [v.line for v in commands_show_output(lines, {})] == [2, 3]
    assert fix_commands_show_output(lines, {}) == ["```sh", "ls", "pwd", "```"]


def test_prompts_kept_when_output_shown():
    assert commands_show_output(["```sh", "$ ls", "file.txt", "```"], {}) == []


def test_prompts_in_other_languages_ignored():
    assert commands_show_output(["```python", "$ ls", "```"], {}) == []


# ---------------------------------------------------------------------------
# MD031 blanks-around-fences
# ---------------------------------------------------------------------------


def test_blank_lines_around_fence():
    lines = ["Text", "```", "code", "```", "Text"]

    assert [v.line for v in blanks_around_fences(lines, {})] == [2, 4]
    assert fix_blanks_around_fences(lines, {}) == ["Text", "", "```", "code", "```", "", "Text"]


# ---------------------------------------------------------------------------
# MD038 no-space-in-code
# ---------------------------------------------------------------------------


def test_code_span_padding_trimmed():
    violations = no_space_in_code(["Use ` code ` here"], {})

    assert violations[0].message == "Spaces inside code span elements [` code `]"
    assert fix_no_space_in_code(["Use ` code ` here"], {}) == ["Use `code` here"]


def test_whitespace_only_span_left_alone():
    assert no_space_in_code(["A ` ` span"], {}) == []


# ---------------------------------------------------------------------------
# MD040 fenced-code-language
# ---------------------------------------------------------------------------


def test_default_language_added():
    lines = ["```", "x", "```"]

    assert len(fenced_code_language(lines, {})) == 1
    assert fix_fenced_code_language(lines, {}) == ["```text", "x", "```"]
    assert fix_fenced_code_language(lines, {"MD040": {"default_language": "python"}}) == [
        "```python", "x", "```",
    ]


def test_language_not_allowed():
    violations = fenced_code_language(["```ruby", "x", "```"], {"MD040": {"allowed_languages": ["python"]}})

    assert "Language not allowed: ruby" in violations[0].message


# ---------------------------------------------------------------------------
# MD046 code-block-style / MD048 code-fence-style
# ---------------------------------------------------------------------------


def test_indented_block_converted_to_fence():
    lines = ["```", "a", "```", "", "    b"]
    violations = code_block_style(lines, {})

    assert violations[0].line == 5
    assert violations[0].message == "Code block style [Expected: fenced; Actual: indented]"
    assert fix_code_block_style(lines, {}) == ["```", "a", "```", "", "```", "b", "```"]


def test_fence_converted_to_indented():
    config = {"MD046": {"style": "indented"}}

    assert fix_code_block_style(["Text", "", "```", "code", "```"], config) == ["Text", "", "    code"]


def test_fence_with_language_not_converted():
    config = {"MD046": {"style": "indented"}}
    lines = ["Text", "", "```py", "code", "```"]

    assert len(code_block_style(lines, config)) == 1
    assert fix_code_block_style(lines, config) == lines


def test_fence_style_made_consistent():
    lines = ["```", "a", "```", "", "~~~", "b", "~~~"]
    violations = code_fence_style(lines, {})

    assert violations[0].line == 5
    assert violations[0].message == "Code fence style [Expected: ```; Actual: ~~~]"
    assert fix_code_fence_style(lines, {}) == ["```", "a", "```", "", "```", "b", "```"]
