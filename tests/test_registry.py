"""Tests for the rule registry and properties every corrector must hold."""
import pytest

from markdownlint_mcp.core.linter.models import Rule
from markdownlint_mcp.core.linter.rules import (
    RULES,
    apply_correctors,
    get_rule,
    list_implemented_rule_identifiers,
)

DETECTION_ONLY = {"MD013", "MD024", "MD028", "MD029", "MD033", "MD041", "MD043", "MD045", "MD059"}

FIXABLE = [identifier for identifier, rule in RULES.items() if rule.fixable]

# Small documents that between them trip a good share of the rules
CORPUS = [
    [],
    [""],
    ["#Title", "Text  ", "", "", "", "* one", "+ two"],
    [
        "# Heading",
        "",
        "Some *emphasis* and __strong__ text.",
        "",
        "```",
        "$ ls",
        "```",
        "",
        "(click)[https://x.test]",
        "",
    ],
    ["| a | b |", "| --- | --- |", "| 1 |", "Text after", ""],
]

ONE_LINERS = [[""], ["x"], ["#"], ["```"], ["---"], ["| a |"], ["  "], ["- item"]]


# ---------------------------------------------------------------------------
# Registry lookups
# ---------------------------------------------------------------------------


def test_keys_match_identifiers():
    assert all(identifier == rule.identifier for identifier, rule in RULES.items())


def test_registry_order_is_identifier_order():
    assert list(RULES) == sorted(RULES)


def test_detection_only_rules():
    assert {identifier for identifier, rule in RULES.items() if not rule.fixable} == DETECTION_ONLY
    assert set(list_implemented_rule_identifiers()) == set(RULES) - DETECTION_ONLY


def test_get_rule_by_alias():
    assert get_rule("no-trailing-spaces").identifier == "MD009"
    assert get_rule("md009").identifier == "MD009"
    assert get_rule("single-h1").identifier == "MD025"
    assert get_rule("no-such-rule") is None


def test_rule_needs_detect_or_correct():
    with pytest.raises(ValueError):
        Rule("MD999", "Nothing")


# ---------------------------------------------------------------------------
# apply_correctors
# ---------------------------------------------------------------------------


def test_apply_correctors_in_registry_order():
    lines = ["#Heading  "]

    assert apply_correctors(lines, ["MD009", "no-missing-space-atx"]) == ["# Heading"]
    assert apply_correctors(lines, ["no-missing-space-atx", "MD009"]) == ["# Heading"]


def test_apply_correctors_skips_unfixable_and_unknown():
    lines = ["Text"]
    result = apply_correctors(lines, ["MD041", "bogus"])

    assert result == lines
    assert result is not lines


def test_apply_correctors_passes_options():
    assert apply_correctors(["Text", "", "", "", "End"], ["MD012"], {"MD012": {"maximum": 2}}) == [
        "Text", "", "", "End",
    ]


# ---------------------------------------------------------------------------
# Corrector properties
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("identifier", FIXABLE)
def test_correct_empty_document(identifier):
    assert RULES[identifier].correct([], {}) == []


@pytest.mark.parametrize("identifier", list(RULES))
@pytest.mark.parametrize("lines", ONE_LINERS)
def test_rules_total_on_one_line_documents(identifier, lines):
    rule = RULES[identifier]

    assert isinstance(rule.detect(lines, {}), list)
    if rule.fixable:
        assert isinstance(rule.correct(lines, {}), list)


@pytest.mark.parametrize("identifier", list(RULES))
def test_rules_tolerate_garbage_options(identifier):
    """Options of the wrong type fall back to defaults instead of raising."""
    rule = RULES[identifier]
    config = {identifier: {key: object() for key in ("style", "maximum", "indent", "names", "headings")}}
    lines = CORPUS[3]

    assert isinstance(rule.detect(lines, config), list)
    if rule.fixable:
        assert isinstance(rule.correct(lines, config), list)


@pytest.mark.parametrize("identifier", FIXABLE)
@pytest.mark.parametrize("lines", CORPUS)
def test_correct_is_idempotent(identifier, lines):
    correct = RULES[identifier].correct
    once = correct(lines, {})

    assert correct(once, {}) == once


@pytest.mark.parametrize("identifier", FIXABLE)
@pytest.mark.parametrize("lines", CORPUS)
def test_correct_does_not_add_violations(identifier, lines):
    rule = RULES[identifier]

    assert len(rule.detect(rule.correct(lines, {}), {})) <= len(rule.detect(lines, {}))


@pytest.mark.parametrize("identifier", FIXABLE)
def test_correct_leaves_input_untouched(identifier):
    lines = list(CORPUS[2])
    RULES[identifier].correct(lines, {})

    assert lines == CORPUS[2]


@pytest.mark.parametrize("identifier", list(RULES))
@pytest.mark.parametrize("lines", CORPUS)
def test_detect_leaves_input_untouched(identifier, lines):
    original = list(lines)
    RULES[identifier].detect(lines, {})

    assert lines == original
