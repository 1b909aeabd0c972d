# =============================================================================
# main.py - Entry Point for the Bitbucket MCP Server
# =============================================================================
#
# HOW TO RUN:
#   BB_BASE_URL=https://bitbucket.example.com BB_TOKEN=... uv run python main.py
#   (or put both in a .env file next to this script)
#
# WHAT HAPPENS:
#   1. .env is loaded into the environment
#   2. Logging is pointed at STDERR (stdout belongs to the MCP stream)
#   3. The configuration is read ONCE; if BB_BASE_URL or BB_TOKEN is missing
#      the process logs why and exits with status 1 before any tool exists
#   4. The FastMCP server is built and served over stdio
#
# CONNECTING A CLIENT:
#   Point any MCP client at this script as a stdio server, e.g.
#     {"command": "uv", "args": ["run", "python", "/path/to/main.py"],
#      "env": {"BB_BASE_URL": "...", "BB_TOKEN": "..."}}
# =============================================================================

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

# Load .env BEFORE reading configuration.
load_dotenv()

from bitbucket_api.config import load_config
from bitbucket_api.errors import ConfigError
from mcp_tools.mcp_server import create_server


def resolve_log_level(name: str) -> Optional[int]:
    """Map a LOG_LEVEL name such as "debug" to its logging level, or None."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def setup_logging() -> None:
    raw_level = os.environ.get("LOG_LEVEL", "INFO")
    level = resolve_log_level(raw_level)
    logging.basicConfig(
        level=logging.INFO if level is None else level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    if level is None:
        logging.warning("Unknown LOG_LEVEL %r, using INFO", raw_level)


def main() -> None:
    """Validate configuration, then serve the MCP tools over stdio."""
    setup_logging()

    try:
        config = load_config()
    except ConfigError as e:
        logging.critical(str(e))
        sys.exit(1)

    mcp = create_server(config)
    mcp.run()


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
