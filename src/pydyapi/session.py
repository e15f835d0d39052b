"""Session/user identity state carried by a client."""

from __future__ import annotations

import secrets
from typing import Protocol

from pydantic import BaseModel, ConfigDict


class IdentityUpdate(BaseModel):
    """A partial identity change.

    Empty ids leave the current value untouched. ``consent_accepted`` is
    applied only when explicitly given, so ``None`` can clear it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    session_id: str | None = None
    user_id: str | None = None
    consent_accepted: bool | None = None

    @property
    def sets_consent(self) -> bool:
        return "consent_accepted" in self.model_fields_set

    @property
    def is_empty(self) -> bool:
        return not self.session_id and not self.user_id and not self.sets_consent


class SessionState(BaseModel):
    """Immutable identity snapshot.

    A client swaps in a new instance on every update, so a coroutine that
    captured a snapshot keeps a consistent view for the whole call.

    Parameters
    ----------
    session_id : str or None
        Ephemeral id correlating requests of one browsing session.
    user_id : str or None
        Persistent visitor id (``dyid``).
    consent_accepted : bool or None
        Active consent flag, omitted from requests when ``None``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    session_id: str | None = None
    user_id: str | None = None
    consent_accepted: bool | None = None

    @classmethod
    def new(cls, *, user_id: str | None = None, consent_accepted: bool | None = None) -> SessionState:
        """Build a state with a freshly generated session id."""
        return cls(
            session_id=secrets.token_hex(16),
            user_id=user_id,
            consent_accepted=consent_accepted,
        )

    @property
    def is_complete(self) -> bool:
        """Whether both the session id and the user id are present."""
        return bool(self.session_id) and bool(self.user_id)

    def with_update(self, update: IdentityUpdate) -> SessionState:
        """Return a copy with the fields of *update* applied."""
        changes: dict[str, str | bool | None] = {}
        if update.session_id:
            changes["session_id"] = update.session_id
        if update.user_id:
            changes["user_id"] = update.user_id
        if update.sets_consent:
            changes["consent_accepted"] = update.consent_accepted
        if all(getattr(self, key) == value for key, value in changes.items()):
            return self
        return self.model_copy(update=changes)


class IdentityStorage(Protocol):
    """Key-value collaborator used to persist the user id across clients."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryIdentityStorage:
    """In-process :class:`IdentityStorage`, mostly useful in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
