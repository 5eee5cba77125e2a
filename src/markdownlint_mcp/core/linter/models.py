"""Data models for the linter."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

Lines = list[str]
DetectFunc = Callable[[list[str], dict], list["Violation"]]
CorrectFunc = Callable[[list[str], dict], list[str]]


class TerminationReason(Enum):
    """Why the fix loop stopped."""
    CONVERGED = "converged"        # No fixable violations remain
    NO_PROGRESS = "no_progress"    # A pass produced no change
    CAP_REACHED = "cap_reached"    # Iteration cap hit


@dataclass
class Violation:
    """A single rule breach at a specific line."""
    rule: str
    line: int
    message: str
    range: Optional[tuple[int, int]] = None
    fixable: bool = False

    def to_dict(self) -> dict:
        data = {
            "rule": self.rule,
            "line": self.line,
            "message": self.message,
            "fixable": self.fixable,
        }
        if self.range is not None:
            data["range"] = list(self.range)
        return data


@dataclass(frozen=True)
class Rule:
    """
    A named style rule.

    ``detect`` scans lines and returns violations; ``correct`` returns a new
    line list with the best safe automatic correction applied. Either may be
    absent, but not both.
    """
    identifier: str
    description: str
    detect: Optional[DetectFunc] = None
    correct: Optional[CorrectFunc] = None
    aliases: tuple[str, ...] = ()

    def __post_init__(self):
        if self.detect is None and self.correct is None:
            raise ValueError(f"Rule {self.identifier} has neither detect nor correct")

    @property
    def fixable(self) -> bool:
        return self.correct is not None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.identifier, *self.aliases)


@dataclass
class LintReport:
    """Complete lint report for a document."""
    path: str
    total_issues: int = 0
    auto_fixable: int = 0
    warnings: int = 0
    issues: list[Violation] = field(default_factory=list)

    def add_issue(self, issue: Violation) -> None:
        """Add an issue to the report and update counts."""
        self.issues.append(issue)
        self.total_issues += 1

        if issue.fixable:
            self.auto_fixable += 1
        else:
            self.warnings += 1

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "total_issues": self.total_issues,
            "auto_fixable": self.auto_fixable,
            "warnings": self.warnings,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class FixReport:
    """Outcome of a fix run: final lines plus the before/after delta."""
    lines: Lines
    before: list[Violation] = field(default_factory=list)
    after: list[Violation] = field(default_factory=list)
    iterations: int = 0
    reason: TerminationReason = TerminationReason.CONVERGED
    applied_rules: list[str] = field(default_factory=list)

    @property
    def fixed_count(self) -> int:
        return max(0, len(self.before) - len(self.after))

    @property
    def unfixable_rules(self) -> list[str]:
        """Violated rules that have no corrector at all."""
        return _unique(v.rule for v in self.after if not v.fixable)

    @property
    def unresolved_rules(self) -> list[str]:
        """Rules with a corrector whose violations survived the run."""
        return _unique(v.rule for v in self.after if v.fixable)

    @property
    def changed(self) -> bool:
        return bool(self.applied_rules)

    def to_dict(self) -> dict:
        return {
            "before": len(self.before),
            "after": len(self.after),
            "fixed": self.fixed_count,
            "iterations": self.iterations,
            "reason": self.reason.value,
            "applied_rules": self.applied_rules,
            "unfixable_rules": self.unfixable_rules,
            "unresolved_rules": self.unresolved_rules,
            "remaining": [v.to_dict() for v in self.after],
        }


def _unique(names) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)
