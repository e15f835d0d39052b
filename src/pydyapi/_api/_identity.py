"""Identity merge applied to the bodies of identity-bearing operations.

The synthesized fragment is::

    {"session": {"id": <session_id>},
     "user": {"dyid": <user_id>, "sharedDevice": False}}

with ``user.activeConsentAccepted`` added when consent is known. It is
deep-merged into a copy of the caller's envelope and identity leaves win on
conflict; every other caller key is kept as given.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from pydyapi.config import IdentityPolicy
from pydyapi.exceptions import DyPreconditionError
from pydyapi.session import SessionState


def build_identity_fragment(
    state: SessionState,
    *,
    policy: IdentityPolicy,
    operation: str,
) -> dict[str, Any]:
    """Return the ``session``/``user`` fragment for *state*.

    Raises
    ------
    DyPreconditionError
        Under ``STRICT`` when the session id or the user id is missing.
    """
    if policy is IdentityPolicy.STRICT and not state.is_complete:
        missing = [name for name, value in (("session id", state.session_id), ("user id", state.user_id)) if not value]
        raise DyPreconditionError(
            f"{operation} requires a {' and '.join(missing)}; call set_identity() first",
            operation=operation,
        )

    user: dict[str, Any] = {
        "dyid": state.user_id or "",
        "sharedDevice": False,
    }
    if state.consent_accepted is not None:
        user["activeConsentAccepted"] = state.consent_accepted

    return {
        "session": {"id": state.session_id or ""},
        "user": user,
    }


def _deep_merge(target: dict[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *incoming* into *target* in place; incoming leaves overwrite."""
    for key, value in incoming.items():
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _deep_merge(existing, value)
        elif isinstance(value, Mapping):
            target[key] = copy.deepcopy(dict(value))
        else:
            target[key] = value
    return target


def merge_identity(
    envelope: Mapping[str, Any] | None,
    state: SessionState,
    *,
    policy: IdentityPolicy,
    operation: str,
) -> dict[str, Any]:
    """Build the body sent for an identity-bearing operation.

    The caller's *envelope* is deep-copied first and never modified.
    """
    fragment = build_identity_fragment(state, policy=policy, operation=operation)
    body: dict[str, Any] = copy.deepcopy(dict(envelope or {}))
    # Non-mapping values under session/user cannot hold identity leaves.
    for key in fragment:
        current = body.get(key)
        body[key] = dict(current) if isinstance(current, Mapping) else {}
    return _deep_merge(body, fragment)
