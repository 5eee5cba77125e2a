"""Lint engine - runs rules and drives the fix loop."""
import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from .models import FixReport, LintReport, TerminationReason, Violation
from .rules import RULES, resolve_identifier

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10


def resolve_rule_config(rule_config: Optional[dict]) -> tuple[list[str], dict[str, dict]]:
    """
    Read a markdownlint style configuration.

    ``default`` switches every rule on or off; a rule key (identifier or
    alias) set to ``false`` disables that rule, ``true`` enables it and an
    object enables it with options. Unknown keys are ignored.

    Returns:
        Tuple of (enabled identifiers in registry order, options keyed by identifier)
    """
    rule_config = rule_config if isinstance(rule_config, dict) else {}
    default = rule_config.get("default", True) is not False
    enabled = {identifier: default for identifier in RULES}
    options: dict[str, dict] = {}

    for key, value in rule_config.items():
        identifier = resolve_identifier(key)
        if identifier is None:
            continue
        if isinstance(value, dict):
            enabled[identifier] = True
            options[identifier] = value
        elif isinstance(value, bool):
            enabled[identifier] = value

    return [identifier for identifier, on in enabled.items() if on], options


def _select_rules(rule_config: Optional[dict], rules: Optional[Iterable[str]]) -> tuple[list[str], dict]:
    enabled, options = resolve_rule_config(rule_config)
    if not rules:
        return enabled, options

    # An explicit rule list overrides the enabled flags but keeps the options
    wanted = set()
    for name in rules:
        identifier = resolve_identifier(name)
        if identifier is None:
            logger.warning(f"Unknown rule: {name}")
            continue
        wanted.add(identifier)
    return [identifier for identifier in RULES if identifier in wanted], options


def _detect(lines: list[str], identifiers: list[str], options: dict) -> list[Violation]:
    violations = []
    for identifier in identifiers:
        rule = RULES[identifier]
        if rule.detect is None:
            continue
        try:
            found = rule.detect(lines, options)
        except Exception as e:
            logger.error(f"Rule {identifier} failed: {e}")
            continue
        for violation in found:
            violation.fixable = rule.fixable
            violations.append(violation)

    violations.sort(key=lambda v: (v.line, v.rule))
    return violations


def lint_lines(
    lines: list[str],
    rule_config: Optional[dict] = None,
    rules: Optional[Iterable[str]] = None,
) -> list[Violation]:
    """Run detection over a line list and return violations sorted by line."""
    identifiers, options = _select_rules(rule_config, rules)
    return _detect(lines, identifiers, options)


def fix_lines(
    lines: list[str],
    rule_config: Optional[dict] = None,
    rules: Optional[Iterable[str]] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> FixReport:
    """
    Apply correctors until nothing fixable is left.

    Each pass runs the correctors of the fixable rules violated in that
    pass, in registry order, then detects again. The loop stops when no
    fixable violation remains, when a pass leaves the lines unchanged or
    brings back lines an earlier pass produced, or after ``max_iterations``
    passes.

    Args:
        lines: Document lines
        rule_config: markdownlint style configuration
        rules: Restrict the run to these identifiers or aliases
        max_iterations: Upper bound on correction passes

    Returns:
        FixReport with the corrected lines and before/after violations
    """
    identifiers, options = _select_rules(rule_config, rules)
    current = list(lines)
    before = _detect(current, identifiers, options)
    after = before
    applied: list[str] = []
    iterations = 0
    # Line states already produced; returning to one means the correctors cycle
    seen = {tuple(current)}

    while True:
        targets = {v.rule for v in after if v.fixable}
        if not targets:
            reason = TerminationReason.CONVERGED
            break
        if iterations >= max_iterations:
            reason = TerminationReason.CAP_REACHED
            break

        iterations += 1
        changed = False
        for identifier in identifiers:
            if identifier not in targets:
                continue
            try:
                result = RULES[identifier].correct(current, options)
            except Exception as e:
                logger.error(f"Rule {identifier} failed to fix: {e}")
                continue
            if result != current:
                current = list(result)
                changed = True
                if identifier not in applied:
                    applied.append(identifier)

        if not changed:
            reason = TerminationReason.NO_PROGRESS
            break
        after = _detect(current, identifiers, options)
        logger.debug(f"Fix pass {iterations}: {len(after)} violations remain")

        state = tuple(current)
        if state in seen:
            logger.warning(f"Correctors returned to an earlier state after pass {iterations}")
            reason = TerminationReason.NO_PROGRESS
            break
        seen.add(state)

    return FixReport(
        lines=current,
        before=before,
        after=after,
        iterations=iterations,
        reason=reason,
        applied_rules=applied,
    )


def _split(content: str) -> tuple[str, list[str], int, str]:
    """Return (frontmatter, body lines, frontmatter line count, newline)."""
    newline = '\r\n' if '\r\n' in content else '\n'
    content = content.replace('\r\n', '\n')
    body, frontmatter_lines = _extract_frontmatter(content)
    frontmatter = content[:len(content) - len(body)]
    return frontmatter, body.split('\n'), frontmatter_lines, newline


def lint_content(
    content: str,
    source_path: str = "<string>",
    rule_config: Optional[dict] = None,
    rules: Optional[Iterable[str]] = None,
) -> LintReport:
    """
    Lint markdown content.

    Args:
        content: The markdown content to lint
        source_path: Path for reporting (doesn't need to exist)
        rule_config: markdownlint style configuration
        rules: Specific rules to run (default: all enabled)

    Returns:
        LintReport with all issues found
    """
    report = LintReport(path=source_path)

    # Skip frontmatter when linting
    _, lines, frontmatter_lines, _ = _split(content)

    for issue in lint_lines(lines, rule_config, rules):
        # Adjust line numbers to account for frontmatter
        issue.line += frontmatter_lines
        report.add_issue(issue)

    return report


def fix_content(
    content: str,
    rule_config: Optional[dict] = None,
    rules: Optional[Iterable[str]] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> tuple[str, FixReport]:
    """
    Fix markdown content, leaving frontmatter and line endings as they were.

    Returns:
        Tuple of (fixed_content, report). Line numbers in the report count
        from the top of the file, frontmatter included.
    """
    frontmatter, lines, frontmatter_lines, newline = _split(content)
    report = fix_lines(lines, rule_config, rules, max_iterations)

    # before and after share objects when nothing was fixed
    shifted = set()
    for violation in report.before + report.after:
        if id(violation) not in shifted:
            shifted.add(id(violation))
            violation.line += frontmatter_lines

    fixed = frontmatter + '\n'.join(report.lines)
    if newline != '\n':
        fixed = fixed.replace('\n', newline)
    return fixed, report


def _read(path: Path) -> str:
    # newline="" keeps CRLF so it can be written back unchanged
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


async def lint_file(
    path: Path,
    rule_config: Optional[dict] = None,
    rules: Optional[list[str]] = None,
) -> LintReport:
    """Lint a markdown file."""
    content = _read(path)
    return lint_content(content, str(path), rule_config, rules)


async def fix_file(
    path: Path,
    write: bool = True,
    rule_config: Optional[dict] = None,
    rules: Optional[list[str]] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> tuple[str, FixReport, bool]:
    """
    Fix a markdown file.

    Args:
        path: Path to the .md file
        write: If True, write the fixed content back
        rule_config: markdownlint style configuration
        rules: Specific rules to run (default: all enabled)
        max_iterations: Upper bound on correction passes

    Returns:
        Tuple of (fixed content, report, whether the file was written)
    """
    content = _read(path)
    fixed_content, report = fix_content(content, rule_config, rules, max_iterations)

    written = False
    if write and fixed_content != content:
        path.write_text(fixed_content, encoding='utf-8', newline='')
        written = True
        logger.info(f"Wrote {report.fixed_count} fixes to {path}")

    return fixed_content, report, written


def _extract_frontmatter(content: str) -> tuple[str, int]:
    """
    Extract YAML frontmatter from content.

    Returns:
        Tuple of (content_without_frontmatter, num_frontmatter_lines)
    """
    if not content.startswith('---'):
        return content, 0

    # Find the closing ---
    match = re.match(r'^---[ \t]*\n.*?\n---[ \t]*\n', content, re.DOTALL)
    if not match:
        return content, 0

    frontmatter = match.group()
    return content[len(frontmatter):], frontmatter.count('\n')


def get_available_rules() -> dict[str, dict]:
    """
    Get the rule catalogue.

    Returns:
        Dict mapping rule identifier to description, aliases and fixability
    """
    return {
        identifier: {
            "description": rule.description,
            "aliases": list(rule.aliases),
            "fixable": rule.fixable,
        }
        for identifier, rule in RULES.items()
    }
