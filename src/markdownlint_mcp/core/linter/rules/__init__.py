"""Markdown style rules and their registry."""
from typing import Iterable, Optional

from ..models import Rule
from . import code, content, emphasis, headings, links, lists, tables, whitespace

# Registry of all rules. Insertion order is the order correctors run in.
RULES: dict[str, Rule] = {rule.identifier: rule for rule in [
    Rule("MD001", "Heading levels should only increment by one level at a time",
         headings.heading_increment, headings.fix_heading_increment, ("heading-increment",)),
    Rule("MD003", "Heading style",
         headings.heading_style, headings.fix_heading_style, ("heading-style",)),
    Rule("MD004", "Unordered list style",
         lists.ul_style, lists.fix_ul_style, ("ul-style",)),
    Rule("MD005", "Inconsistent indentation for list items at the same level",
         lists.list_indent, lists.fix_list_indent, ("list-indent",)),
    Rule("MD007", "Unordered list indentation",
         lists.ul_indent, lists.fix_ul_indent, ("ul-indent",)),
    Rule("MD009", "Trailing spaces",
         whitespace.no_trailing_spaces, whitespace.fix_no_trailing_spaces, ("no-trailing-spaces",)),
    Rule("MD010", "Hard tabs",
         whitespace.no_hard_tabs, whitespace.fix_no_hard_tabs, ("no-hard-tabs",)),
    Rule("MD011", "Reversed link syntax",
         links.no_reversed_links, links.fix_no_reversed_links, ("no-reversed-links",)),
    Rule("MD012", "Multiple consecutive blank lines",
         whitespace.no_multiple_blanks, whitespace.fix_no_multiple_blanks, ("no-multiple-blanks",)),
    Rule("MD013", "Line length",
         whitespace.line_length, aliases=("line-length",)),
    Rule("MD014", "Dollar signs used before commands without showing output",
         code.commands_show_output, code.fix_commands_show_output, ("commands-show-output",)),
    Rule("MD018", "No space after hash on atx style heading",
         headings.no_missing_space_atx, headings.fix_no_missing_space_atx, ("no-missing-space-atx",)),
    Rule("MD019", "Multiple spaces after hash on atx style heading",
         headings.no_multiple_space_atx, headings.fix_no_multiple_space_atx, ("no-multiple-space-atx",)),
    Rule("MD020", "No space inside hashes on closed atx style heading",
         headings.no_missing_space_closed_atx, headings.fix_no_missing_space_closed_atx,
         ("no-missing-space-closed-atx",)),
    Rule("MD021", "Multiple spaces inside hashes on closed atx style heading",
         headings.no_multiple_space_closed_atx, headings.fix_no_multiple_space_closed_atx,
         ("no-multiple-space-closed-atx",)),
    Rule("MD022", "Headings should be surrounded by blank lines",
         headings.blanks_around_headings, headings.fix_blanks_around_headings, ("blanks-around-headings",)),
    Rule("MD023", "Headings must start at the beginning of the line",
         headings.heading_start_left, headings.fix_heading_start_left, ("heading-start-left",)),
    Rule("MD024", "Multiple headings with the same content",
         headings.no_duplicate_heading, aliases=("no-duplicate-heading",)),
    Rule("MD025", "Multiple top-level headings in the same document",
         headings.single_title, headings.fix_single_title, ("single-title", "single-h1")),
    Rule("MD026", "Trailing punctuation in heading",
         headings.no_trailing_punctuation, headings.fix_no_trailing_punctuation, ("no-trailing-punctuation",)),
    Rule("MD027", "Multiple spaces after blockquote symbol",
         whitespace.no_multiple_space_blockquote, whitespace.fix_no_multiple_space_blockquote,
         ("no-multiple-space-blockquote",)),
    Rule("MD028", "Blank line inside blockquote",
         whitespace.no_blanks_blockquote, aliases=("no-blanks-blockquote",)),
    Rule("MD029", "Ordered list item prefix",
         lists.ol_prefix, aliases=("ol-prefix",)),
    Rule("MD030", "Spaces after list markers",
         lists.list_marker_space, lists.fix_list_marker_space, ("list-marker-space",)),
    Rule("MD031", "Fenced code blocks should be surrounded by blank lines",
         code.blanks_around_fences, code.fix_blanks_around_fences, ("blanks-around-fences",)),
    Rule("MD032", "Lists should be surrounded by blank lines",
         lists.blanks_around_lists, lists.fix_blanks_around_lists, ("blanks-around-lists",)),
    Rule("MD033", "Inline HTML",
         content.no_inline_html, aliases=("no-inline-html",)),
    Rule("MD034", "Bare URL used",
         links.no_bare_urls, links.fix_no_bare_urls, ("no-bare-urls",)),
    Rule("MD035", "Horizontal rule style",
         content.hr_style, content.fix_hr_style, ("hr-style",)),
    Rule("MD036", "Emphasis used instead of a heading",
         headings.no_emphasis_as_heading, headings.fix_no_emphasis_as_heading, ("no-emphasis-as-heading",)),
    Rule("MD037", "Spaces inside emphasis markers",
         emphasis.no_space_in_emphasis, emphasis.fix_no_space_in_emphasis, ("no-space-in-emphasis",)),
    Rule("MD038", "Spaces inside code span elements",
         code.no_space_in_code, code.fix_no_space_in_code, ("no-space-in-code",)),
    Rule("MD039", "Spaces inside link text",
         links.no_space_in_links, links.fix_no_space_in_links, ("no-space-in-links",)),
    Rule("MD040", "Fenced code blocks should have a language specified",
         code.fenced_code_language, code.fix_fenced_code_language, ("fenced-code-language",)),
    Rule("MD041", "First line in a file should be a top-level heading",
         headings.first_line_heading, aliases=("first-line-heading", "first-line-h1")),
    Rule("MD042", "No empty links",
         links.no_empty_links, links.fix_no_empty_links, ("no-empty-links",)),
    Rule("MD043", "Required heading structure",
         headings.required_headings, aliases=("required-headings",)),
    Rule("MD044", "Proper names should have the correct capitalization",
         content.proper_names, content.fix_proper_names, ("proper-names",)),
    Rule("MD045", "Images should have alternate text (alt text)",
         links.no_alt_text, aliases=("no-alt-text",)),
    Rule("MD046", "Code block style",
         code.code_block_style, code.fix_code_block_style, ("code-block-style",)),
    Rule("MD047", "Files should end with a single newline character",
         whitespace.single_trailing_newline, whitespace.fix_single_trailing_newline,
         ("single-trailing-newline",)),
    Rule("MD048", "Code fence style",
         code.code_fence_style, code.fix_code_fence_style, ("code-fence-style",)),
    Rule("MD049", "Emphasis style",
         emphasis.emphasis_style, emphasis.fix_emphasis_style, ("emphasis-style",)),
    Rule("MD050", "Strong style",
         emphasis.strong_style, emphasis.fix_strong_style, ("strong-style",)),
    Rule("MD051", "Link fragments should be valid",
         links.link_fragments, links.fix_link_fragments, ("link-fragments",)),
    Rule("MD052", "Reference links and images should use a label that is defined",
         links.reference_links_images, links.fix_reference_links_images, ("reference-links-images",)),
    Rule("MD053", "Link and image reference definitions should be needed",
         links.link_image_reference_definitions, links.fix_link_image_reference_definitions,
         ("link-image-reference-definitions",)),
    Rule("MD054", "Link and image style",
         links.link_image_style, links.fix_link_image_style, ("link-image-style",)),
    Rule("MD055", "Table pipe style",
         tables.table_pipe_style, tables.fix_table_pipe_style, ("table-pipe-style",)),
    Rule("MD056", "Table column count",
         tables.table_column_count, tables.fix_table_column_count, ("table-column-count",)),
    Rule("MD058", "Tables should be surrounded by blank lines",
         tables.blanks_around_tables, tables.fix_blanks_around_tables, ("blanks-around-tables",)),
    Rule("MD059", "Link text should be descriptive",
         links.descriptive_link_text, aliases=("descriptive-link-text",)),
]}

# Lower-cased identifier or alias -> identifier
_NAMES = {name.lower(): rule.identifier for rule in RULES.values() for name in rule.names}


def resolve_identifier(name: str) -> Optional[str]:
    """Map a rule identifier or alias, in any case, to its identifier."""
    return _NAMES.get(name.strip().lower()) if isinstance(name, str) else None


def get_rule(name: str) -> Optional[Rule]:
    identifier = resolve_identifier(name)
    return RULES[identifier] if identifier else None


def list_implemented_rule_identifiers() -> list[str]:
    """Identifiers of rules that carry a corrector, in registry order."""
    return [identifier for identifier, rule in RULES.items() if rule.fixable]


def apply_correctors(
    lines: list[str],
    identifiers: Iterable[str],
    rule_config: Optional[dict] = None,
) -> list[str]:
    """
    Run the correctors of the named rules over ``lines``.

    Correctors run in registry order whatever the order of ``identifiers``,
    each one receiving the previous one's output. Unknown names and rules
    without a corrector are skipped, so the result is an unchanged copy when
    nothing applies.

    Args:
        lines: Document lines
        identifiers: Rule identifiers or aliases to apply
        rule_config: Options keyed by rule identifier

    Returns:
        New list of lines
    """
    wanted = {resolve_identifier(name) for name in identifiers}
    result = list(lines)
    for identifier, rule in RULES.items():
        if identifier in wanted and rule.correct is not None:
            result = rule.correct(result, rule_config or {})
    return result


__all__ = [
    "RULES",
    "apply_correctors",
    "get_rule",
    "list_implemented_rule_identifiers",
    "resolve_identifier",
]
