"""User data endpoints.

Endpoints:
  - /userdata/{feedKey}/bulk
  - /userdata/events
  - /userprofile
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydyapi._api._common import call_endpoint, post_identity_json
from pydyapi._api._endpoints import EXTERNAL_EVENTS_API, PROFILE_ANYWHERE, USER_DATA_API
from pydyapi._transport import Transport
from pydyapi.config import DyConfig
from pydyapi.models.requests import ProfileQuery, UserDataPath
from pydyapi.session import SessionState


async def user_data_api(
    transport: Transport,
    path: UserDataPath,
    body: Mapping[str, Any],
) -> Any:
    """Upload user attributes in bulk (``users``) to a user data feed."""
    return await call_endpoint(
        USER_DATA_API,
        transport,
        body=body,
        path_params=path.path_params(),
    )


async def external_events_api(
    config: DyConfig,
    state: SessionState,
    transport: Transport,
    envelope: Mapping[str, Any] | None,
) -> Any:
    """Report events that happened outside the website (``events``)."""
    return await post_identity_json(
        endpoint=EXTERNAL_EVENTS_API,
        config=config,
        state=state,
        transport=transport,
        envelope=envelope,
    )


async def profile_anywhere(transport: Transport, query: ProfileQuery) -> Any:
    """Look up a user profile by customer id."""
    return await call_endpoint(PROFILE_ANYWHERE, transport, query=query.query_params())
