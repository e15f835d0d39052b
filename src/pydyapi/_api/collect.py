"""Collect endpoints: pageviews, engagements and events.

Endpoints:
  - /collect/user/pageview
  - /collect/user/engagement
  - /collect/user/event
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydyapi._api._common import post_identity_json
from pydyapi._api._endpoints import TRACK_ENGAGEMENT, TRACK_EVENTS, TRACK_PAGEVIEWS, Endpoint
from pydyapi._transport import Transport
from pydyapi.config import DyConfig
from pydyapi.session import SessionState


async def _collect(
    endpoint: Endpoint,
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    return await post_identity_json(
        endpoint=endpoint,
        config=config,
        state=state,
        transport=transport,
        envelope=envelope,
    )


async def track_pageviews(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Report a pageview (``context``, ``options``)."""
    return await _collect(TRACK_PAGEVIEWS, config, state, transport, envelope)


async def track_engagement(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Report engagements with served variations (``engagements``)."""
    return await _collect(TRACK_ENGAGEMENT, config, state, transport, envelope)


async def track_events(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Report custom or e-commerce events (``context``, ``events``)."""
    return await _collect(TRACK_EVENTS, config, state, transport, envelope)
