# =============================================================================
# bitbucket_api/__init__.py
# =============================================================================
# This package contains ALL Bitbucket-facing logic for the MCP server.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  The HTTP client wrapper, the
#   result types, the projections and the tool handlers are plain Python +
#   httpx, so they can be exercised from a test with a fake transport and
#   no MCP machinery at all.  mcp_tools/ is the only layer that knows about
#   the protocol.
# =============================================================================
