"""Serve endpoints: campaign variation choice and search.

Endpoints:
  - /serve/user/choose
  - /serve/user/search
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydyapi._api._common import post_identity_json
from pydyapi._api._endpoints import CHOOSE_VARIATIONS, SEARCH
from pydyapi._transport import Transport
from pydyapi.config import DyConfig
from pydyapi.session import SessionState


async def choose_variations(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Ask the API which variations to serve.

    Parameters
    ----------
    config : DyConfig
        Client configuration.
    state : SessionState
        Identity snapshot merged into the body.
    transport : Transport
        HTTP transport.
    envelope : Mapping
        ``context``, ``selector`` and ``options`` as documented by the API.

    Returns
    -------
    Any
        The decoded JSON response (``choices``, ``cookies``, ...).
    """
    return await post_identity_json(
        endpoint=CHOOSE_VARIATIONS,
        config=config,
        state=state,
        transport=transport,
        envelope=envelope,
    )


async def search(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Run a semantic or keyword search (``query``, ``context``)."""
    return await post_identity_json(
        endpoint=SEARCH,
        config=config,
        state=state,
        transport=transport,
        envelope=envelope,
    )
