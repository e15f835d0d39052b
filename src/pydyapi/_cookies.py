"""Identity extraction from the ``cookies`` array of decoded responses.

Serve responses may carry ``{"cookies": [{"name", "value", "maxAge"}]}``.
The ``_dyid_server`` and ``_dyjsession`` entries are turned into an
:class:`~pydyapi.session.IdentityUpdate`. This is best effort: malformed
data is logged and skipped, never raised.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pydyapi._constants import SESSION_ID_COOKIE, USER_ID_COOKIE
from pydyapi.models.cookies import ResponseCookie
from pydyapi.session import IdentityUpdate

_logger = logging.getLogger(__name__)

_COOKIE_FIELDS: dict[str, str] = {
    USER_ID_COOKIE: "user_id",
    SESSION_ID_COOKIE: "session_id",
}


def extract_identity_update(response: Any) -> IdentityUpdate | None:
    """Return the identity carried by *response* cookies, if any."""
    if not isinstance(response, dict):
        return None
    raw_cookies = response.get("cookies")
    if raw_cookies is None:
        return None
    if not isinstance(raw_cookies, list):
        _logger.warning("Ignoring malformed cookies field of type %s", type(raw_cookies).__name__)
        return None

    found: dict[str, str] = {}
    for index, entry in enumerate(raw_cookies):
        try:
            cookie = ResponseCookie.model_validate(entry)
        except ValidationError as exc:
            _logger.warning("Ignoring malformed cookie entry #%d: %s", index, exc.errors(include_url=False))
            continue
        field_name = _COOKIE_FIELDS.get(cookie.name)
        if field_name is None:
            continue
        value = cookie.value.strip()
        if not value:
            _logger.debug("Ignoring empty %s cookie", cookie.name)
            continue
        found[field_name] = value

    if not found:
        return None
    return IdentityUpdate(**found)
