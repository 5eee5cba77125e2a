"""lint_markdown / fix_markdown / get_configuration tool implementation."""
import asyncio
import logging
import weakref
from pathlib import Path

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.linter import engine

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}

# One lock per resolved path so concurrent fixes of a file do not interleave.
# Entries vanish once no fix holds or awaits the lock.
_locks: "weakref.WeakValueDictionary[Path, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(path: Path) -> asyncio.Lock:
    return _locks.setdefault(path, asyncio.Lock())


def _resolve(file_path: str) -> tuple[Path | None, dict | None]:
    """Return (path, None) for a usable Markdown file, else (None, error)."""
    path = Path(file_path).expanduser().resolve()

    if not path.exists():
        return None, {"error": f"File not found: {path}"}

    if not path.is_file():
        return None, {"error": f"Not a file: {path}"}

    if path.suffix.lower() not in MARKDOWN_SUFFIXES:
        return None, {"error": f"Expected .md file, got: {path.suffix or '(no extension)'}"}

    return path, None


def register(mcp, config: Config):
    """Register the lint tools with the MCP server."""

    @mcp.tool()
    async def lint_markdown(file_path: str) -> dict:
        """
        Lint a Markdown file against the markdownlint rules.

        The rule configuration comes from a .markdownlint.json/.jsonc/.yaml/.yml
        file next to the document, else the server defaults.

        Args:
            file_path: Path to the .md file

        Returns:
            Dictionary with:
            - path (str): Path that was linted
            - total_issues (int): Total issues found
            - auto_fixable (int): Issues fix_markdown can correct
            - warnings (int): Issues needing manual review
            - issues (list): Individual issues with rule, line, message and fixable flag
            - config_source (str): Config file used, or "defaults"
        """
        path, error = _resolve(file_path)
        if error:
            return error

        rule_config, source = config.resolve_rule_config(path)
        logger.info(f"Linting {path} (config: {source})")

        try:
            report = await engine.lint_file(path, rule_config=rule_config)
        except Exception as e:
            logger.error(f"Lint failed: {e}", exc_info=True)
            return {"error": str(e)}

        logger.info(
            f"Lint complete: {report.total_issues} issues "
            f"({report.auto_fixable} auto-fixable, {report.warnings} warnings)"
        )

        result = report.to_dict()
        result["config_source"] = source
        return result

    @mcp.tool()
    async def fix_markdown(file_path: str, write_file: bool | None = None) -> dict:
        """
        Automatically fix the fixable lint issues in a Markdown file.

        Correctors run repeatedly until nothing fixable is left, a pass
        changes nothing, or the iteration cap is reached. Issues from
        detection-only rules are reported for manual attention.

        Args:
            file_path: Path to the .md file
            write_file: Write the fixed content back (default: true)

        Returns:
            Dictionary with:
            - path (str): Path that was fixed
            - written (bool): Whether the file was rewritten
            - before / after / fixed (int): Issue counts
            - iterations (int): Fix passes run
            - reason (str): converged, no_progress or cap_reached
            - applied_rules (list): Rules whose correctors changed the text
            - unfixable_rules (list): Remaining rules that have no corrector
            - unresolved_rules (list): Remaining rules whose corrector could not clear them
            - remaining (list): Issues left after fixing
            - content (str): Fixed content, only when not written
        """
        path, error = _resolve(file_path)
        if error:
            return error

        write = config.write_fixes if write_file is None else write_file
        rule_config, source = config.resolve_rule_config(path)
        logger.info(f"Fixing {path} (write={write}, config: {source})")

        try:
            async with _lock_for(path):
                fixed_content, report, written = await engine.fix_file(
                    path,
                    write=write,
                    rule_config=rule_config,
                    max_iterations=config.max_iterations,
                )
        except Exception as e:
            logger.error(f"Fix failed: {e}", exc_info=True)
            return {"error": str(e)}

        if report.applied_rules:
            logger.info(f"Auto-fixed: {', '.join(report.applied_rules)}")

        result = {"path": str(path), "written": written, **report.to_dict(), "config_source": source}
        if not write and report.changed:
            result["content"] = fixed_content
        return result

    @mcp.tool()
    async def get_configuration(file_path: str | None = None) -> dict:
        """
        Show the rule configuration that applies to a file.

        Args:
            file_path: Optional document path; its directory is searched for a
                markdownlint config file

        Returns:
            Dictionary with:
            - source (str): Config file used, or "defaults"
            - config (dict): The markdownlint configuration
            - max_iterations (int): Fix loop cap
        """
        document = Path(file_path).expanduser().resolve() if file_path else None
        rule_config, source = config.resolve_rule_config(document)
        return {
            "source": source,
            "config": rule_config,
            "max_iterations": config.max_iterations,
        }
