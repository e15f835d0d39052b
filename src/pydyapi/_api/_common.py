"""Shared helpers for endpoint modules.

This module centralizes the repeated patterns:
- resolving an endpoint's path and query
- merging identity into identity-bearing bodies
- sending the request through a transport

It is internal to pydyapi and may change at any time.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from pydyapi._api._endpoints import Endpoint, build_query, resolve_path
from pydyapi._api._identity import merge_identity
from pydyapi._transport import Transport
from pydyapi.config import DyConfig
from pydyapi.session import SessionState

_logger = logging.getLogger(__name__)


async def call_endpoint(
    endpoint: Endpoint,
    transport: Transport,
    *,
    body: Mapping[str, Any] | None = None,
    path_params: Mapping[str, Any] | None = None,
    query: Mapping[str, Any] | None = None,
) -> Any:
    """Resolve *endpoint* and send it; return the decoded JSON response."""
    path = resolve_path(endpoint, path_params)
    params = build_query(endpoint, query)

    payload: dict[str, Any] | None = None
    if endpoint.has_body:
        payload = copy.deepcopy(dict(body or {}))
    elif body is not None:
        raise ValueError(f"{endpoint.name} does not take a request body")

    return await transport.request(
        endpoint.name,
        endpoint.method,
        path,
        body=payload,
        params=params or None,
    )


async def post_identity_json(
    *,
    endpoint: Endpoint,
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Merge identity from *state* into *envelope* and post it."""
    body = merge_identity(
        envelope,
        state,
        policy=config.identity_policy,
        operation=endpoint.name,
    )
    _logger.debug("%s identity session=%s", endpoint.name, bool(state.session_id))
    return await call_endpoint(endpoint, transport, body=body)
