"""Tests for the terminal front end."""
import argparse
import asyncio

import pytest

from markdownlint_mcp import cli


def _run(coro):
    """Run async coroutine synchronously (avoids pytest-asyncio dep)."""
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    for name in ("MARKDOWNLINT_MCP_CONFIG", "MARKDOWNLINT_MCP_MAX_ITERATIONS"):
        monkeypatch.delenv(name, raising=False)


def test_collect_files_expands_directories(tmp_path):
    (tmp_path / "b.md").write_text("# B\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "a.md").write_text("# A\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("x\n", encoding="utf-8")

    files = cli.collect_files([tmp_path])

    assert sorted(f.name for f in files) == ["a.md", "b.md"]


def test_collect_files_missing_path(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.collect_files([tmp_path / "missing.md"])

    assert excinfo.value.code == 1


def test_lint_exit_codes(tmp_path):
    clean = tmp_path / "clean.md"
    clean.write_text("# Title\n\nText.\n", encoding="utf-8")
    dirty = tmp_path / "dirty.md"
    dirty.write_text("# Title\n\nText  \n", encoding="utf-8")

    assert _run(cli.lint_command(argparse.Namespace(paths=[clean]))) == 0
    assert _run(cli.lint_command(argparse.Namespace(paths=[dirty]))) == 1


def test_fix_command(tmp_path):
    path = tmp_path / "doc.md"
    path.write_text("# Title\n\nText  \n", encoding="utf-8")

    args = argparse.Namespace(paths=[path], dry_run=True, max_iterations=None)
    assert _run(cli.fix_command(args)) == 0
    assert path.read_text(encoding="utf-8") == "# Title\n\nText  \n"

    args = argparse.Namespace(paths=[path], dry_run=False, max_iterations=3)
    assert _run(cli.fix_command(args)) == 0
    assert path.read_text(encoding="utf-8") == "# Title\n\nText\n"
