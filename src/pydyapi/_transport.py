"""HTTP transport: header assembly, status classification, JSON decoding."""

from __future__ import annotations

import contextlib
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pydyapi._constants import API_KEY_HEADER, JSON_CONTENT_TYPE
from pydyapi._redact import redact_for_log
from pydyapi.config import DyConfig
from pydyapi.exceptions import DyHttpStatusError, DyTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        ...


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class HttpTransport:
    """JSON-over-HTTPS transport bound to one data center and API key.

    The transport never touches identity state; it only sends what it is
    given and returns the decoded response.
    """

    def __init__(self, config: DyConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def build_headers(self, *, has_body: bool) -> dict[str, str]:
        """Assemble request headers; configured extra headers win."""
        headers: dict[str, str] = {
            "accept": JSON_CONTENT_TYPE,
            API_KEY_HEADER: self._config.api_key,
        }
        if has_body:
            headers["content-type"] = JSON_CONTENT_TYPE
        headers.update(self._config.extra_headers)
        return headers

    def build_url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    async def request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON response.

        Raises
        ------
        DyHttpStatusError
            Non-2xx status. The body is not decoded.
        DyTransportError
            Network failure, or a success response that is not JSON.
        """
        headers = self.build_headers(has_body=body is not None)
        url = self.build_url(path)
        data = json.dumps(body, separators=(",", ":")) if body is not None else None

        _logger.debug("%s %s (%s)", method, url, operation)
        if body is not None:
            _logger.debug("%s request body=%s", operation, redact_for_log(body))

        try:
            async with self._http.request(
                method,
                url,
                data=data,
                headers=headers,
                params=dict(params) if params else None,
            ) as resp:
                status = resp.status
                if not _is_success(status):
                    if _logger.isEnabledFor(logging.DEBUG):
                        with contextlib.suppress(aiohttp.ClientError):
                            excerpt = (await resp.read())[:200].decode("utf-8", "replace")
                            _logger.debug("%s returned HTTP %d: %s", operation, status, excerpt)
                    raise DyHttpStatusError(operation, status)
                raw = await resp.read()
        except aiohttp.ClientError as exc:
            raise DyTransportError(
                f"Request for {operation} failed: {exc}",
                operation=operation,
            ) from exc

        if not raw.strip():
            return {}

        try:
            result = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DyTransportError(
                f"Invalid JSON from {operation}: {raw[:200].decode('utf-8', 'replace')}",
                status_code=status,
                operation=operation,
            ) from exc

        _logger.debug("%s response=%s", operation, redact_for_log(result))
        return result
