"""Configuration management with environment variable overrides."""
from dataclasses import dataclass, field
from pathlib import Path
import copy
import json
import logging
import os
import re

import yaml

from markdownlint_mcp import __version__

logger = logging.getLogger(__name__)

# Built-in rule configuration, used when no config file applies
DEFAULT_RULE_CONFIG = {
    "default": True,
    "MD013": {"line_length": 120},
    "MD033": False,
    "MD041": False,
}

# Looked up in the document's directory, first match wins
CONFIG_FILE_NAMES = (
    ".markdownlint.json",
    ".markdownlint.jsonc",
    ".markdownlint.yaml",
    ".markdownlint.yml",
)

# Strings are matched first so "//" inside a value survives
JSONC_TOKEN_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_json_comments(text: str) -> str:
    return JSONC_TOKEN_RE.sub(lambda m: m.group(1) or '', text)


def load_rule_file(path: Path) -> dict | None:
    """
    Parse a markdownlint configuration file.

    Returns:
        The configuration dict, or None if the file cannot be read or is
        not a JSON/YAML object
    """
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(strip_json_comments(text))
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level is not an object")
        return None
    return data


def find_rule_file(directory: Path) -> Path | None:
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


@dataclass
class Config:
    """Configuration for the markdownlint MCP server."""

    # Fix loop
    max_iterations: int = 10

    # Default for fix_markdown's write_file argument
    write_fixes: bool = True

    # Optional config file used when a document's directory has none
    # Set via MARKDOWNLINT_MCP_CONFIG
    config_path: Path | None = None

    log_level: str = "INFO"

    rule_config: dict = field(default_factory=lambda: copy.deepcopy(DEFAULT_RULE_CONFIG))

    # Versioning
    version: str = __version__

    @classmethod
    def load(cls) -> "Config":
        """Load config with environment variable overrides."""
        config = cls()

        if val := os.environ.get("MARKDOWNLINT_MCP_MAX_ITERATIONS"):
            try:
                config.max_iterations = max(1, int(val))
            except ValueError:
                logger.warning(f"Ignoring MARKDOWNLINT_MCP_MAX_ITERATIONS={val!r}: not an integer")

        if val := os.environ.get("MARKDOWNLINT_MCP_CONFIG"):
            config.config_path = Path(val).expanduser()

        if val := os.environ.get("MARKDOWNLINT_MCP_LOG_LEVEL"):
            if val.upper() in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
                config.log_level = val.upper()

        if val := os.environ.get("MARKDOWNLINT_MCP_WRITE_FIXES"):
            config.write_fixes = val.lower() in ("true", "1", "yes")

        return config

    def resolve_rule_config(self, document: Path | None = None) -> tuple[dict, str]:
        """
        Pick the rule configuration for a document.

        A config file in the document's directory replaces the built-in
        defaults, then the MARKDOWNLINT_MCP_CONFIG file, then the defaults.
        Files that fail to load are skipped.

        Returns:
            Tuple of (rule configuration, where it came from)
        """
        candidates = []
        if document is not None:
            directory = document if document.is_dir() else document.parent
            if found := find_rule_file(directory):
                candidates.append(found)
        if self.config_path is not None:
            candidates.append(self.config_path)

        for candidate in candidates:
            data = load_rule_file(candidate)
            if data is not None:
                return data, str(candidate)

        return copy.deepcopy(self.rule_config), "defaults"
