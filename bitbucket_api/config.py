# =============================================================================
# bitbucket_api/config.py - Process-wide Configuration
# =============================================================================
#
# The base URL and token are read ONCE at process entry (main.py) and the
# resulting BitbucketConfig is handed to the client.  Nothing else in the
# project reads the environment.
#
# ENVIRONMENT VARIABLES:
#   BB_BASE_URL  (required)  e.g. "https://bitbucket.example.com"
#   BB_TOKEN     (required)  HTTP access token, sent as a bearer credential
#   BB_TIMEOUT   (optional)  per-request timeout in seconds (default 30)
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from bitbucket_api.errors import ConfigError

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class BitbucketConfig:
    """Connection settings for one Bitbucket instance."""

    base_url: str                      # No trailing slash
    token: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks.
        return (f"BitbucketConfig(base_url={self.base_url!r}, token='***', "
                f"timeout_seconds={self.timeout_seconds!r})")


def _require(environ: Mapping[str, str], name: str) -> str:
    value = (environ.get(name) or "").strip()
    if not value:
        raise ConfigError(f"Missing {name}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> BitbucketConfig:
    """Build a BitbucketConfig from the environment.

    Args:
        environ: Mapping to read from.  Defaults to os.environ.

    Raises:
        ConfigError: if a required value is missing/blank or BB_TIMEOUT
            is not a positive number.
    """
    if environ is None:
        environ = os.environ

    base_url = _require(environ, "BB_BASE_URL").rstrip("/")
    token = _require(environ, "BB_TOKEN")

    raw_timeout = (environ.get("BB_TIMEOUT") or "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"BB_TIMEOUT must be a number, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ConfigError(f"BB_TIMEOUT must be positive, got {raw_timeout!r}")
    else:
        timeout = DEFAULT_TIMEOUT_SECONDS

    return BitbucketConfig(base_url=base_url, token=token, timeout_seconds=timeout)
