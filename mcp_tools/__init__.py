# =============================================================================
# mcp_tools/__init__.py
# =============================================================================
# This package contains the FastMCP wiring.
#
# ARCHITECTURAL ROLE:
#   mcp_tools/ is the "translation layer" between the MCP protocol and
#   bitbucket_api/.  It:
#     1. Registers each operation under a stable tool name and input schema
#     2. Renders every result as one text block (JSON for structured data)
#     3. Turns any escaped exception into "Unhandled error: <message>"
#     4. Registers two static prompt templates
#
# WHAT IT DOES NOT DO:
#   - No HTTP calls and no payload reshaping (that's bitbucket_api/)
#   - No environment reads (configuration arrives as a BitbucketConfig)
# =============================================================================
