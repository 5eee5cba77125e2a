"""CLI for markdownlint-mcp.

Provides direct terminal access to linting and fixing without MCP.
"""
import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from markdownlint_mcp import __version__
from markdownlint_mcp.config import Config

console = Console()


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="markdownlint-mcp-cli",
        description="Lint and fix Markdown files with markdownlint rules"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # lint command
    lint = subparsers.add_parser("lint", help="Report lint issues")
    lint.add_argument("paths", nargs="+", type=Path, help="Markdown files or directories")

    # fix command
    fix = subparsers.add_parser("fix", help="Fix lint issues in place")
    fix.add_argument("paths", nargs="+", type=Path, help="Markdown files or directories")
    fix.add_argument(
        "--dry-run", action="store_true",
        help="Show what would change without writing"
    )
    fix.add_argument(
        "--max-iterations", type=int,
        help="Upper bound on fix passes (default: from config)"
    )

    # rules command
    subparsers.add_parser("rules", help="List available rules")

    args = parser.parse_args()

    if args.command == "lint":
        sys.exit(asyncio.run(lint_command(args)))
    elif args.command == "fix":
        sys.exit(asyncio.run(fix_command(args)))
    elif args.command == "rules":
        rules_command()


def collect_files(paths: list[Path]) -> list[Path]:
    """Expand directories to the Markdown files below them."""
    files = []
    for path in paths:
        path = path.expanduser()
        if path.is_dir():
            files.extend(sorted(path.rglob("*.md")))
        elif path.exists():
            files.append(path)
        else:
            print(f"Error: File not found: {path}", file=sys.stderr)
            sys.exit(1)
    return files


async def lint_command(args) -> int:
    """Execute the lint command. Returns the exit code."""
    from markdownlint_mcp.core.linter import engine

    config = Config.load()
    total = 0

    for path in collect_files(args.paths):
        rule_config, _ = config.resolve_rule_config(path)
        report = await engine.lint_file(path, rule_config=rule_config)
        total += report.total_issues

        if not report.issues:
            console.print(f"[green]✓[/green] {escape(str(path))}")
            continue

        table = Table(title=escape(str(path)), title_justify="left", show_lines=False)
        table.add_column("Line", justify="right", style="cyan")
        table.add_column("Rule", style="magenta")
        table.add_column("Message")
        table.add_column("Fixable", justify="center")
        for issue in report.issues:
            table.add_row(
                str(issue.line),
                issue.rule,
                escape(issue.message),
                "[green]yes[/green]" if issue.fixable else "[yellow]no[/yellow]",
            )
        console.print(table)
        console.print(f"  {report.total_issues} issues ({report.auto_fixable} fixable, {report.warnings} warnings)")

    return 1 if total else 0


async def fix_command(args) -> int:
    """Execute the fix command. Returns the exit code."""
    from markdownlint_mcp.core.linter import engine

    config = Config.load()
    max_iterations = args.max_iterations if args.max_iterations else config.max_iterations
    remaining = 0

    for path in collect_files(args.paths):
        rule_config, _ = config.resolve_rule_config(path)
        _, report, written = await engine.fix_file(
            path,
            write=not args.dry_run,
            rule_config=rule_config,
            max_iterations=max_iterations,
        )
        remaining += len(report.after)

        verb = "would fix" if args.dry_run else "fixed"
        status = "[green]written[/green]" if written else "[dim]unchanged[/dim]"
        if args.dry_run:
            status = "[yellow]dry run[/yellow]"
        console.print(
            f"{escape(str(path))}: {verb} {report.fixed_count} of {len(report.before)} issues "
            f"in {report.iterations} passes ({report.reason.value}) {status}"
        )
        if report.applied_rules:
            console.print(f"  applied: {', '.join(report.applied_rules)}")
        for issue in report.after:
            marker = "unresolved" if issue.fixable else "manual"
            console.print(f"  [yellow]{issue.line}[/yellow] {issue.rule} {escape(issue.message)} [dim]({marker})[/dim]")

    return 1 if remaining else 0


def rules_command():
    """Execute the rules command."""
    from markdownlint_mcp.core.linter import engine

    table = Table(title=f"markdownlint-mcp v{__version__} rules", title_justify="left")
    table.add_column("Rule", style="magenta")
    table.add_column("Aliases", style="cyan")
    table.add_column("Description")
    table.add_column("Fixable", justify="center")
    for identifier, info in engine.get_available_rules().items():
        table.add_row(
            identifier,
            ", ".join(info["aliases"]),
            info["description"],
            "[green]yes[/green]" if info["fixable"] else "[yellow]no[/yellow]",
        )
    console.print(table)


if __name__ == "__main__":
    main()
