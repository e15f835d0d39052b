"""High-level async client for the Dynamic Yield experience API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import aiohttp

from pydyapi._api import collect as _collect_api
from pydyapi._api import feeds as _feeds_api
from pydyapi._api import serve as _serve_api
from pydyapi._api import userdata as _userdata_api
from pydyapi._constants import USER_ID_STORAGE_KEY
from pydyapi._cookies import extract_identity_update
from pydyapi._transport import HttpTransport
from pydyapi.config import DyConfig
from pydyapi.exceptions import DyConfigError
from pydyapi.models.requests import (
    BranchPath,
    FeedPath,
    ProfileQuery,
    TransactionItemPath,
    TransactionPath,
    UserDataPath,
)
from pydyapi.models.responses import ChooseResult
from pydyapi.session import IdentityStorage, IdentityUpdate, SessionState

_logger = logging.getLogger(__name__)

Envelope = Mapping[str, Any]
_IdentityOperation = Callable[[DyConfig, SessionState, HttpTransport, Envelope | None], Awaitable[Any]]


class DyClient:
    """Async client for the Dynamic Yield experience API.

    Usage::

        async with DyClient(DyConfig(api_key="...")) as client:
            client.set_identity("session-id", "user-dyid")
            choices = await client.choose_variations({"context": {"page": {...}}})

    Identity (session id, user id) is held as an immutable
    :class:`~pydyapi.session.SessionState`. Every call reads one snapshot
    at its start; updates, whether from :meth:`set_identity` or from
    response cookies, swap in a new snapshot.
    """

    def __init__(
        self,
        config: DyConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: IdentityStorage | None = None,
        identity: SessionState | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None
        self._storage = storage
        self._identity = identity if identity is not None else self._initial_identity()

    def _initial_identity(self) -> SessionState:
        config = self._config
        user_id = config.user_id
        if user_id is None and self._storage is not None:
            user_id = self._storage.get(USER_ID_STORAGE_KEY)
            if user_id:
                _logger.debug("Loaded persisted user id from storage")
        if config.session_id is None and config.generate_session_id:
            return SessionState.new(user_id=user_id, consent_accepted=config.consent_accepted)
        return SessionState(
            session_id=config.session_id,
            user_id=user_id,
            consent_accepted=config.consent_accepted,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DyClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def config(self) -> DyConfig:
        return self._config

    @property
    def identity(self) -> SessionState:
        """Current identity snapshot."""
        return self._identity

    def set_identity(self, session_id: str, user_id: str) -> SessionState:
        """Set the session id and user id sent with identity-bearing calls."""
        return self._apply_identity(IdentityUpdate(session_id=session_id, user_id=user_id))

    def set_consent(self, accepted: bool | None) -> SessionState:
        """Set (or clear with ``None``) the active consent flag."""
        return self._apply_identity(IdentityUpdate(consent_accepted=accepted))

    def _apply_identity(self, update: IdentityUpdate) -> SessionState:
        """Swap in a new snapshot; the single place identity changes."""
        previous = self._identity
        current = previous.with_update(update)
        if current is previous:
            return current
        self._identity = current
        if self._storage is not None and current.user_id and current.user_id != previous.user_id:
            self._storage.set(USER_ID_STORAGE_KEY, current.user_id)
        return current

    def _sync_identity(self, operation: str, response: Any) -> None:
        """Apply identity cookies found in *response* (best effort)."""
        if not self._config.sync_identity_cookies:
            return
        update = extract_identity_update(response)
        if update is None or update.is_empty:
            return
        try:
            self._apply_identity(update)
        except Exception:
            _logger.warning("Failed to apply identity cookies from %s", operation, exc_info=True)
            return
        _logger.debug(
            "Identity updated from %s cookies (session=%s user=%s)",
            operation,
            bool(update.session_id),
            bool(update.user_id),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise DyConfigError("Client not initialized. Use 'async with DyClient(...) as client:'")
        return self._transport

    async def _call(self, operation: str, fn: Callable[[HttpTransport], Awaitable[Any]]) -> Any:
        transport = self._require_transport()
        response = await fn(transport)
        self._sync_identity(operation, response)
        return response

    async def _identity_call(self, operation: str, fn: _IdentityOperation, envelope: Envelope | None) -> Any:
        state = self._identity
        return await self._call(operation, lambda transport: fn(self._config, state, transport, envelope))

    # ------------------------------------------------------------------
    # Serve
    # ------------------------------------------------------------------

    async def choose_variations(self, envelope: Envelope | None = None) -> Any:
        """Choose variations for the campaigns named in ``selector``."""
        return await self._identity_call("chooseVariations", _serve_api.choose_variations, envelope)

    async def choose(self, envelope: Envelope | None = None) -> ChooseResult:
        """Like :meth:`choose_variations` but returns a typed result."""
        response = await self.choose_variations(envelope)
        return ChooseResult.model_validate(response if isinstance(response, dict) else {})

    async def search(self, envelope: Envelope | None = None) -> Any:
        """Run a search query."""
        return await self._identity_call("search", _serve_api.search, envelope)

    # ------------------------------------------------------------------
    # Collect
    # ------------------------------------------------------------------

    async def track_pageviews(self, envelope: Envelope | None = None) -> Any:
        return await self._identity_call("trackPageviews", _collect_api.track_pageviews, envelope)

    async def track_engagement(self, envelope: Envelope | None = None) -> Any:
        return await self._identity_call("trackEngagement", _collect_api.track_engagement, envelope)

    async def track_events(self, envelope: Envelope | None = None) -> Any:
        return await self._identity_call("trackEvents", _collect_api.track_events, envelope)

    # ------------------------------------------------------------------
    # Feeds
    # ------------------------------------------------------------------

    async def update_product_feed(self, feed_id: str, body: Envelope) -> Any:
        """Submit bulk product feed changes."""
        path = FeedPath(feed_id=feed_id)
        return await self._call(
            "updateProductFeed",
            lambda transport: _feeds_api.update_product_feed(transport, path, body),
        )

    async def track_transaction_status_specific_item(
        self,
        feed_id: str,
        transaction_id: str,
        item_id: str,
    ) -> Any:
        path = TransactionItemPath(feed_id=feed_id, transaction_id=transaction_id, item_id=item_id)
        return await self._call(
            "trackTransactionStatusSpecificItem",
            lambda transport: _feeds_api.track_transaction_status_specific_item(transport, path),
        )

    async def track_transaction_status_whole_transaction(self, feed_id: str, transaction_id: str) -> Any:
        path = TransactionPath(feed_id=feed_id, transaction_id=transaction_id)
        return await self._call(
            "trackTransactionStatusWholeTransaction",
            lambda transport: _feeds_api.track_transaction_status_whole_transaction(transport, path),
        )

    async def update_branch_feed(self, branch_id: str, body: Envelope) -> Any:
        """Update the inventory of one branch."""
        path = BranchPath(branch_id=branch_id)
        return await self._call(
            "updateBranchFeed",
            lambda transport: _feeds_api.update_branch_feed(transport, path, body),
        )

    async def report_outages(self, body: Envelope) -> Any:
        return await self._call("reportOutages", lambda transport: _feeds_api.report_outages(transport, body))

    # ------------------------------------------------------------------
    # User data
    # ------------------------------------------------------------------

    async def user_data_api(self, feed_key: str, body: Envelope) -> Any:
        """Upload user attributes in bulk to a user data feed."""
        path = UserDataPath(feed_key=feed_key)
        return await self._call(
            "userDataApi",
            lambda transport: _userdata_api.user_data_api(transport, path, body),
        )

    async def external_events_api(self, envelope: Envelope | None = None) -> Any:
        return await self._identity_call("externalEventsApi", _userdata_api.external_events_api, envelope)

    async def profile_anywhere(self, cuid: str, cuid_type: str, *, affinity: bool | None = None) -> Any:
        """Look up a user profile by customer id."""
        query = ProfileQuery(cuid=cuid, cuid_type=cuid_type, affinity=affinity)
        return await self._call(
            "profileAnywhere",
            lambda transport: _userdata_api.profile_anywhere(transport, query),
        )
