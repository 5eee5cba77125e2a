"""Markdown style linter and fixer."""
from .engine import (
    fix_content,
    fix_file,
    fix_lines,
    get_available_rules,
    lint_content,
    lint_file,
    lint_lines,
)
from .models import FixReport, LintReport, Rule, TerminationReason, Violation
from .rules import RULES, apply_correctors, get_rule, list_implemented_rule_identifiers

__all__ = [
    "fix_content",
    "fix_file",
    "fix_lines",
    "get_available_rules",
    "lint_content",
    "lint_file",
    "lint_lines",
    "FixReport",
    "LintReport",
    "Rule",
    "TerminationReason",
    "Violation",
    "RULES",
    "apply_correctors",
    "get_rule",
    "list_implemented_rule_identifiers",
]
