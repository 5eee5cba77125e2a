"""Tests for process configuration and markdownlint config files."""
import json

import pytest

from markdownlint_mcp.config import (
    DEFAULT_RULE_CONFIG,
    Config,
    find_rule_file,
    load_rule_file,
    strip_json_comments,
)

ENV_VARS = (
    "MARKDOWNLINT_MCP_MAX_ITERATIONS",
    "MARKDOWNLINT_MCP_CONFIG",
    "MARKDOWNLINT_MCP_LOG_LEVEL",
    "MARKDOWNLINT_MCP_WRITE_FIXES",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Clear every MARKDOWNLINT_MCP_* override."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# Config.load
# ---------------------------------------------------------------------------


def test_defaults(clean_env):
    config = Config.load()

    assert config.max_iterations == 10
    assert config.write_fixes is True
    assert config.config_path is None
    assert config.log_level == "INFO"
    assert config.rule_config == DEFAULT_RULE_CONFIG
    assert config.rule_config is not DEFAULT_RULE_CONFIG


def test_env_overrides(clean_env, tmp_path):
    clean_env.setenv("MARKDOWNLINT_MCP_MAX_ITERATIONS", "5")
    clean_env.setenv("MARKDOWNLINT_MCP_CONFIG", str(tmp_path / "lint.json"))
    clean_env.setenv("MARKDOWNLINT_MCP_LOG_LEVEL", "debug")
    clean_env.setenv("MARKDOWNLINT_MCP_WRITE_FIXES", "false")

    config = Config.load()

    assert config.max_iterations == 5
    assert config.config_path == tmp_path / "lint.json"
    assert config.log_level == "DEBUG"
    assert config.write_fixes is False


def test_bad_env_values_keep_defaults(clean_env):
    clean_env.setenv("MARKDOWNLINT_MCP_MAX_ITERATIONS", "many")
    clean_env.setenv("MARKDOWNLINT_MCP_LOG_LEVEL", "loud")

    config = Config.load()

    assert config.max_iterations == 10
    assert config.log_level == "INFO"


def test_iteration_floor(clean_env):
    clean_env.setenv("MARKDOWNLINT_MCP_MAX_ITERATIONS", "0")

    assert Config.load().max_iterations == 1


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


def test_strip_json_comments():
    text = '{"a": "http://x", // trailing\n "b": 1 /* block */}'

    assert json.loads(strip_json_comments(text)) == {"a": "http://x", "b": 1}


def test_load_json_jsonc_and_yaml(tmp_path):
    json_file = tmp_path / ".markdownlint.json"
    json_file.write_text('{"MD013": false}', encoding="utf-8")
    jsonc_file = tmp_path / ".markdownlint.jsonc"
    jsonc_file.write_text('{\n  // no tabs\n  "MD010": false\n}', encoding="utf-8")
    yaml_file = tmp_path / ".markdownlint.yaml"
    yaml_file.write_text("MD007:\n  indent: 4\n", encoding="utf-8")

    assert load_rule_file(json_file) == {"MD013": False}
    assert load_rule_file(jsonc_file) == {"MD010": False}
    assert load_rule_file(yaml_file) == {"MD007": {"indent": 4}}


def test_invalid_files_ignored(tmp_path):
    broken = tmp_path / ".markdownlint.json"
    broken.write_text("{not json", encoding="utf-8")
    listing = tmp_path / ".markdownlint.yaml"
    listing.write_text("- MD013\n", encoding="utf-8")

    assert load_rule_file(broken) is None
    assert load_rule_file(listing) is None
    assert load_rule_file(tmp_path / "missing.json") is None


def test_find_rule_file_order(tmp_path):
    assert find_rule_file(tmp_path) is None

    (tmp_path / ".markdownlint.yml").write_text("default: true\n", encoding="utf-8")
    (tmp_path / ".markdownlint.json").write_text("{}", encoding="utf-8")

    assert find_rule_file(tmp_path).name == ".markdownlint.json"


# ---------------------------------------------------------------------------
# resolve_rule_config
# ---------------------------------------------------------------------------


def test_side_file_wins(tmp_path):
    side = tmp_path / ".markdownlint.json"
    side.write_text('{"MD009": false}', encoding="utf-8")

    rule_config, source = Config().resolve_rule_config(tmp_path / "doc.md")

    assert rule_config == {"MD009": False}
    assert source == str(side)


def test_defaults_without_side_file(tmp_path):
    rule_config, source = Config().resolve_rule_config(tmp_path / "doc.md")

    assert source == "defaults"
    assert rule_config == DEFAULT_RULE_CONFIG


def test_fallback_config_path(tmp_path):
    fallback = tmp_path / "shared.yaml"
    fallback.write_text("MD013:\n  line_length: 80\n", encoding="utf-8")
    docs = tmp_path / "docs"
    docs.mkdir()

    rule_config, source = Config(config_path=fallback).resolve_rule_config(docs / "doc.md")

    assert rule_config == {"MD013": {"line_length": 80}}
    assert source == str(fallback)


def test_broken_side_file_falls_back(tmp_path):
    (tmp_path / ".markdownlint.json").write_text("{oops", encoding="utf-8")

    rule_config, source = Config().resolve_rule_config(tmp_path / "doc.md")

    assert source == "defaults"
    assert rule_config == DEFAULT_RULE_CONFIG
