# =============================================================================
# bitbucket_api/errors.py - Exception Types
# =============================================================================
# Only two failures are ever raised as exceptions inside this package:
#   - ConfigError: the process can't start (caught in main.py → exit 1)
#   - BitbucketApiError: raised by unwrap() on an Err result, caught by the
#     tool handler that called it and rendered as "Error: <message>"
# Upstream HTTP failures themselves travel as Err values, never exceptions.
# =============================================================================

from typing import Optional


class BitbucketMCPError(Exception):
    """Base class for errors raised by this project."""


class ConfigError(BitbucketMCPError):
    """A required configuration value is missing or invalid."""


class BitbucketApiError(BitbucketMCPError):
    """An upstream call failed; carries the HTTP status when there was one."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)
