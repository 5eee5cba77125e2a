"""markdownlint MCP Server - Main entry point."""
import logging
import sys

from mcp.server.fastmcp import FastMCP

from markdownlint_mcp.config import Config
from markdownlint_mcp.core.linter.rules import RULES, list_implemented_rule_identifiers
from markdownlint_mcp.tools import lint
from markdownlint_mcp.resources import rule_resources

# Load configuration
config = Config.load()

# Configure logging to stderr (CRITICAL: stdout is reserved for JSON-RPC)
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("markdownlint")

logger.info(f"markdownlint MCP v{config.version} starting...")
logger.info(
    f"Rules: {len(RULES)} ({len(list_implemented_rule_identifiers())} fixable), "
    f"max iterations: {config.max_iterations}"
)
if config.config_path:
    logger.info(f"Fallback config file: {config.config_path}")


def main():
    """Main entry point for the MCP server."""
    try:
        # Register tools
        logger.info("Registering tools...")
        lint.register(mcp, config)
        logger.info("Tools registered: lint_markdown, fix_markdown, get_configuration")

        # Register resources
        logger.info("Registering resources...")
        rule_resources.register(mcp, config)
        logger.info("Resources registered: markdownlint://rules, markdownlint://rules/{rule_id}")

        # Run the server
        logger.info("Starting MCP server on stdio...")
        mcp.run(transport="stdio")

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
