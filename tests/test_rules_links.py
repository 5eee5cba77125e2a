"""Tests for link, image and reference rules."""
from markdownlint_mcp.core.linter.rules.links import (
    descriptive_link_text,
    fix_link_fragments,
    fix_link_image_reference_definitions,
    fix_link_image_style,
    fix_no_bare_urls,
    fix_no_empty_links,
    fix_no_reversed_links,
    fix_no_space_in_links,
    fix_reference_links_images,
    heading_anchor,
    link_fragments,
    link_image_reference_definitions,
    link_image_style,
    no_alt_text,
    no_bare_urls,
    no_reversed_links,
    reference_links_images,
)


# ---------------------------------------------------------------------------
# MD011 no-reversed-links
# ---------------------------------------------------------------------------


def test_reversed_link_swapped():
    assert len(no_reversed_links(["(click)[https://x.test]"], {})) == 1
    assert fix_no_reversed_links(["(click)[https://x.test]"], {}) == ["[click](https://x.test)"]


def test_footnote_after_parenthetical_not_reversed():
    assert no_reversed_links(["(see)[^1]"], {}) == []


def test_reversed_link_with_nested_parentheses():
    assert fix_no_reversed_links(["(a (b) c)[https://x.test]"], {}) == ["[a (b) c](https://x.test)"]


def test_reversed_links_in_code_left_alone():
    lines = ["`(x)[y]` and (x)[y]", "```", "(x)[y]", "```"]

    assert [v.line for v in no_reversed_links(lines, {})] == [1]
    assert fix_no_reversed_links(lines, {}) == ["`(x)[y]` and [x](y)", "```", "(x)[y]", "```"]


# ---------------------------------------------------------------------------
# MD034 no-bare-urls
# ---------------------------------------------------------------------------


def test_bare_url_wrapped():
    assert fix_no_bare_urls(["Visit https://example.com today"], {}) == ["Visit <https://example.com> today"]


def test_bare_url_trailing_period_stays_outside():
    assert fix_no_bare_urls(["See https://example.com."], {}) == ["See <https://example.com>."]


def test_linked_urls_not_bare():
    lines = ["[site](https://example.com)", "<https://example.com>", "`https://example.com`"]

    assert no_bare_urls(lines, {}) == []


# ---------------------------------------------------------------------------
# MD039 / MD042 / MD045
# ---------------------------------------------------------------------------


def test_link_text_padding_trimmed():
    assert fix_no_space_in_links(["[ text ](https://x.test)"], {}) == ["[text](https://x.test)"]


def test_empty_links():
    assert fix_no_empty_links(["[text]()"], {}) == ["text"]
    assert fix_no_empty_links(["[text](#)"], {}) == ["text"]
    assert fix_no_empty_links(["[](https://x.test)"], {}) == ["[https://x.test](https://x.test)"]


def test_images_without_alt_text():
    assert len(no_alt_text(["![](image.png)"], {})) == 1
    assert len(no_alt_text(['<img src="a.png">'], {})) == 1
    assert no_alt_text(["![A cat](cat.png)"], {}) == []


# ---------------------------------------------------------------------------
# MD051 link-fragments
# ---------------------------------------------------------------------------


def test_heading_anchor():
    assert heading_anchor("Getting Started!") == "getting-started"


def test_valid_fragment():
    assert link_fragments(["# Intro", "", "[go](#intro)"], {}) == []


def test_dead_fragment_reported():
    violations = link_fragments(["# Intro", "", "[go](#missing)"], {})

    assert violations[0].line == 3
    assert violations[0].message == "Link fragments should be valid [#missing]"


def test_fragment_case_fixed():
    lines = ["# Intro", "", "[go](#Intro)"]

    assert fix_link_fragments(lines, {}) == ["# Intro", "", "[go](#intro)"]


# ---------------------------------------------------------------------------
# MD052 / MD053 references
# ---------------------------------------------------------------------------


def test_undefined_reference_pruned():
    lines = ["See [docs][missing]."]

    assert len(reference_links_images(lines, {})) == 1
    assert fix_reference_links_images(lines, {}) == ["See docs."]


def test_defined_reference_ok():
    assert reference_links_images(["See [docs][d].", "", "[d]: https://x.test"], {}) == []


def test_unused_definition_removed():
    lines = ["Text", "", "[unused]: https://x.test"]
    violations = link_image_reference_definitions(lines, {})

    assert "Unused link or image reference definition" in violations[0].message
    assert fix_link_image_reference_definitions(lines, {}) == ["Text", ""]


def test_duplicate_definition():
    lines = ["[x][]", "", "[x]: https://a.test", "[x]: https://b.test"]
    violations = link_image_reference_definitions(lines, {})

    assert [v.line for v in violations] == [4]
    assert "Duplicate link or image reference definition" in violations[0].message


# ---------------------------------------------------------------------------
# MD054 link-image-style
# ---------------------------------------------------------------------------


def test_all_styles_allowed_by_default():
    assert link_image_style(["<https://x.test>", "[a](https://x.test)"], {}) == []


def test_autolink_disallowed():
    config = {"MD054": {"autolink": False}}
    violations = link_image_style(["<https://x.test>"], config)

    assert violations[0].message == "Link and image style [Unexpected autolink link]"
    assert fix_link_image_style(["<https://x.test>"], config) == ["[https://x.test](https://x.test)"]


def test_full_reference_inlined():
    lines = ["See [docs][d].", "", "[d]: https://x.test"]

    assert fix_link_image_style(lines, {"MD054": {"full": False}}) == ["See [docs](https://x.test).", ""]


# ---------------------------------------------------------------------------
# MD059 descriptive-link-text
# ---------------------------------------------------------------------------


def test_generic_link_text():
    violations = descriptive_link_text(["[click here](https://x.test)"], {})

    assert violations[0].message == "Link text should be descriptive [click here]"
    assert descriptive_link_text(["[the docs](https://x.test)"], {}) == []
