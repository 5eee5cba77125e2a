"""Expose the rule catalogue as MCP resources."""
import json
import logging

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.linter import engine
from markdownlint_mcp.core.linter.rules import get_rule

logger = logging.getLogger(__name__)


def register(mcp, config: Config):
    """Register rule resources with MCP server."""

    @mcp.resource("markdownlint://rules")
    def get_rule_index() -> str:
        """
        Get JSON index of every rule.

        Returns:
            JSON string mapping identifiers to description, aliases and
            whether the rule can be fixed automatically
        """
        rules = engine.get_available_rules()
        result = {
            "rules": rules,
            "total_count": len(rules),
            "fixable_count": sum(1 for info in rules.values() if info["fixable"]),
        }
        return json.dumps(result, indent=2)

    @mcp.resource("markdownlint://rules/{rule_id}")
    def get_rule_details(rule_id: str) -> str:
        """
        Get one rule by identifier or alias.

        Args:
            rule_id: Identifier such as MD009, or an alias such as no-trailing-spaces

        Returns:
            JSON string with the rule's details and its default options
        """
        rule = get_rule(rule_id)
        if rule is None:
            logger.warning(f"Unknown rule requested: {rule_id}")
            return json.dumps({"error": f"Rule not found: {rule_id}"}, indent=2)

        defaults = config.rule_config.get(rule.identifier)
        result = {
            "identifier": rule.identifier,
            "description": rule.description,
            "aliases": list(rule.aliases),
            "fixable": rule.fixable,
            "enabled_by_default": defaults is not False,
            "options": defaults if isinstance(defaults, dict) else {},
        }
        return json.dumps(result, indent=2)
