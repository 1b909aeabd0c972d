# =============================================================================
# bitbucket_api/client.py - Authenticated HTTP Client Wrapper
# =============================================================================
#
# WHAT THIS FILE DOES:
#   One method, BitbucketClient.get(), that performs an authenticated GET
#   against the configured Bitbucket instance and returns an ApiResult.
#
# THE CONTRACT:
#   get() NEVER raises for HTTP or network problems.  A 404, a 500, a DNS
#   failure, a timeout - all of them come back as Err(ApiError(...)) with
#   the upstream status (when there was a response) and a readable message.
#   The tool handlers decide what to do with it.
#
# TIMEOUTS:
#   Every request carries the configured timeout explicitly.  A hung
#   Bitbucket instance produces an Err after timeout_seconds instead of
#   hanging the tool call forever.
# =============================================================================

import logging
from typing import Any, Literal, Mapping, Optional

import httpx

from bitbucket_api.config import BitbucketConfig
from bitbucket_api.models import ApiError, ApiResult, Err, Ok

logger = logging.getLogger(__name__)

ResponseFormat = Literal["json", "text"]

# Longest upstream body we'll echo back as an error message.
_MAX_ERROR_BODY = 500


class BitbucketClient:
    """Thin async GET wrapper around one Bitbucket instance.

    Args:
        config: Base URL, token and timeout.
        transport: Optional httpx transport.  Tests pass an
            httpx.MockTransport here; production leaves it None.
    """

    def __init__(self, config: BitbucketConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def _headers(self, extra: Optional[Mapping[str, str]]) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/json",
        }
        # Caller headers win, so e.g. Accept: text/plain replaces the default.
        headers.update(extra or {})
        return headers

    async def get(
        self,
        path: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        response_format: ResponseFormat = "json",
    ) -> ApiResult[Any]:
        """GET base_url + path and wrap the outcome in Ok/Err.

        Args:
            path: Absolute API path, e.g. "/rest/api/latest/users".
            headers: Extra headers merged over the defaults.
            params: Query parameters (URL-encoded by httpx).
            response_format: "json" to decode the body, "text" for raw text.
        """
        logger.debug("GET %s params=%s", path, dict(params or {}))
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as http:
                response = await http.get(path, headers=self._headers(headers), params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response)
            logger.warning("GET %s failed with HTTP %s: %s", path, status, message)
            return Err(ApiError(message=message, status=status))
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            logger.warning("GET %s failed: %s", path, message)
            return Err(ApiError(message=message))

        if response_format == "text":
            return Ok(response.text)
        try:
            return Ok(response.json())
        except ValueError:
            logger.warning("GET %s returned a non-JSON body", path)
            return Err(ApiError(
                message=f"Expected JSON from {path}, got: {response.text[:_MAX_ERROR_BODY]}",
                status=response.status_code,
            ))


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a failed Bitbucket response.

    Bitbucket error bodies look like {"errors": [{"message": "..."}, ...]}.
    Anything else falls back to the raw body, then to "HTTP <status>".
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        messages = [e.get("message") for e in body["errors"]
                    if isinstance(e, dict) and e.get("message")]
        if messages:
            return "; ".join(messages)

    text = response.text.strip()
    if text:
        return text[:_MAX_ERROR_BODY]
    return f"HTTP {response.status_code}"
