# =============================================================================
# mcp_tools/mcp_server.py - FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the bitbucket_api/ operations as MCP tools.  Each tool is a thin
#   typed wrapper around a bitbucket_api.pull_requests function: it declares
#   the input schema (via its signature), and nothing else.
#
# HOW A TOOL CALL FLOWS:
#   1. The MCP client calls a tool by name (e.g. "bitbucketgetdiff")
#   2. FastMCP validates the arguments against the registered signature
#   3. register_api_tool's wrapper awaits the handler
#   4. The result is rendered to ONE text block: strings as-is, everything
#      else as pretty-printed JSON
#   5. If the handler raised, the text is "Unhandled error: <message>"
#
#   Step 5 is the only catch in the tool layer, and it wraps every tool the
#   same way, so a tool call always gets a well-formed response.
#
# TOOL NAMES:
#   bitbucketlistprs / bitbucketgetpr / bitbucketgetdiff are the names
#   existing clients already call.  Don't rename them.
# =============================================================================

import inspect
import json
import logging
from dataclasses import asdict, dataclass, is_dataclass
from typing import Annotated, Any, Awaitable, Callable, Literal, Optional

import httpx
from fastmcp import FastMCP
from pydantic import Field

from bitbucket_api import pull_requests
from bitbucket_api.client import BitbucketClient
from bitbucket_api.config import BitbucketConfig
from mcp_tools.prompts import PROMPTS

logger = logging.getLogger(__name__)

SERVER_NAME = "bitbucket-mcp"

# =============================================================================
# Logging helpers
# =============================================================================
# stdout IS the MCP transport in stdio mode, so everything goes to stderr
# (main.py configures the handler).  Colours make tool calls easy to spot:
#   CYAN = request, YELLOW = status, GREEN = response
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

_LOG_PREVIEW_CHARS = 300


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log a preview of the tool response in GREEN, then return it."""
    preview = text if len(text) <= _LOG_PREVIEW_CHARS else text[:_LOG_PREVIEW_CHARS] + "…"
    logger.info(f"{_GREEN}  ← {tool_name} response: {preview}{_RESET}")
    return text


# =============================================================================
# Output formatting
# =============================================================================
def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def format_output(value: Any) -> str:
    """Render a handler result as the text of the single content block."""
    if isinstance(value, str):
        return value
    return json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False)


# =============================================================================
# Tool registry
# =============================================================================
@dataclass(frozen=True)
class ApiTool:
    """One registry entry: a stable tool name bound to a typed coroutine."""

    name: str
    title: str
    description: str
    fn: Callable[..., Awaitable[Any]]


ProjectKey = Annotated[str, Field(description="Bitbucket project key, e.g. 'PROJ'")]
RepositorySlug = Annotated[str, Field(description="Repository slug, e.g. 'my-service'")]
PullRequestId = Annotated[int, Field(description="Pull request id (the number in its URL)")]


def build_tool_registry(client: BitbucketClient) -> dict[str, ApiTool]:
    """Bind every pull request operation to `client`.

    The inner functions' signatures ARE the MCP input schemas, so their
    parameter names (projectKey, repositorySlug, prId) are part of the wire
    contract.
    """

    async def list_prs(
        role: Annotated[
            Literal["author", "reviewer", "all"],
            Field(description="Only PRs I authored, only PRs I review, or both"),
        ] = "all",
    ):
        result = await pull_requests.list_my_pull_requests(client, role=role)
        if isinstance(result, list):
            _log_status(f"Found {len(result)} open pull requests")
        return result

    async def get_pr(projectKey: ProjectKey, repositorySlug: RepositorySlug, prId: PullRequestId):
        return await pull_requests.get_pull_request_info(client, projectKey, repositorySlug, prId)

    async def get_diff(projectKey: ProjectKey, repositorySlug: RepositorySlug, prId: PullRequestId):
        diff = await pull_requests.get_pull_request_diff(client, projectKey, repositorySlug, prId)
        _log_status(f"Diff is {len(diff)} characters")
        return diff

    tools = [
        ApiTool(
            name="bitbucketlistprs",
            title="List My PRs",
            description="List pull requests where I am author or reviewer",
            fn=list_prs,
        ),
        ApiTool(
            name="bitbucketgetpr",
            title="Get PR Info",
            description="Retrieve information about a specific pull request",
            fn=get_pr,
        ),
        ApiTool(
            name="bitbucketgetdiff",
            title="Get PR Diff",
            description="Get diff of a PR as plain text",
            fn=get_diff,
        ),
    ]
    return {tool.name: tool for tool in tools}


def register_api_tool(mcp: FastMCP, tool: ApiTool) -> None:
    """Register `tool` with FastMCP behind the uniform catch-and-format step."""

    async def handler(*args, **kwargs) -> str:
        _log_request(tool.name, **kwargs)
        try:
            result = await tool.fn(*args, **kwargs)
            text = format_output(result)
        except Exception as e:
            logger.exception("Tool %s failed", tool.name)
            text = format_output(f"Unhandled error: {e}")
        return _log_response(tool.name, text)

    # FastMCP builds the input schema from the signature, so the wrapper
    # presents the handler's parameters.  No __wrapped__: unwrapping must
    # never skip the catch above.
    handler.__name__ = tool.fn.__name__
    handler.__doc__ = tool.description
    handler.__signature__ = inspect.signature(tool.fn).replace(return_annotation=str)
    handler.__annotations__ = {**tool.fn.__annotations__, "return": str}

    mcp.tool(
        name=tool.name,
        title=tool.title,
        description=tool.description,
        output_schema=None,
    )(handler)


def _static_prompt(text: str) -> Callable[[], str]:
    def prompt() -> str:
        return text
    return prompt


def _register_prompts(mcp: FastMCP) -> None:
    for name, (description, text) in PROMPTS.items():
        mcp.prompt(name=name, description=description)(_static_prompt(text))


# =============================================================================
# Server factory
# =============================================================================
def create_server(config: BitbucketConfig,
                  transport: Optional[httpx.AsyncBaseTransport] = None) -> FastMCP:
    """Build the FastMCP server with every tool and prompt registered."""
    mcp = FastMCP(SERVER_NAME)
    client = BitbucketClient(config, transport=transport)

    registry = build_tool_registry(client)
    for tool in registry.values():
        register_api_tool(mcp, tool)
    _register_prompts(mcp)

    logger.info("Registered %d tools and %d prompts for %s",
                len(registry), len(PROMPTS), config.base_url)
    return mcp
