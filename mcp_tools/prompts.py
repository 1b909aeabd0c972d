# =============================================================================
# mcp_tools/prompts.py - Static Prompt Templates
# =============================================================================
# Two canned user prompts that MCP clients can surface as shortcuts.  They
# take no arguments and just ask the model to use the listing tool.
# =============================================================================

MY_REVIEW_REQUESTS_PROMPT = "List PRs where I am reviewer"
MY_AUTHORED_PRS_PROMPT = "List PRs where I am author"

# name → (description, text)
PROMPTS: dict[str, tuple[str, str]] = {
    "my_review_requests": (
        "Pull requests waiting on my review",
        MY_REVIEW_REQUESTS_PROMPT,
    ),
    "my_authored_prs": (
        "Pull requests I opened",
        MY_AUTHORED_PRS_PROMPT,
    ),
}
