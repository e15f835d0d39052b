"""Client configuration for pydyapi."""

from __future__ import annotations

import dataclasses
import enum
import os
from collections.abc import Mapping
from typing import Any

from pydyapi._constants import EU_BASE_URL, US_BASE_URL
from pydyapi.exceptions import DyConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


class DataCenter(enum.StrEnum):
    """Regional deployment the client talks to."""

    US = "us"
    EU = "eu"

    @classmethod
    def _missing_(cls, value: object) -> DataCenter | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def base_url(self) -> str:
        return EU_BASE_URL if self is DataCenter.EU else US_BASE_URL


class IdentityPolicy(enum.StrEnum):
    """What to do when an identity-bearing call has no session/user id.

    ``STRICT`` refuses the call with :class:`~pydyapi.exceptions.DyPreconditionError`.
    ``DEFAULT_EMPTY`` sends empty strings in place of the missing values.
    """

    STRICT = "strict"
    DEFAULT_EMPTY = "default_empty"

    @classmethod
    def _missing_(cls, value: object) -> IdentityPolicy | None:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


@dataclasses.dataclass(frozen=True)
class DyConfig:
    """Client configuration.

    Parameters
    ----------
    api_key : str
        Server-side API key, sent as the ``dy-api-key`` header.
    data_center : DataCenter
        Region selecting the base URL. Defaults to ``us``.
    extra_headers : Mapping[str, str]
        Headers added to every request. They win over the defaults.
    identity_policy : IdentityPolicy
        Behavior when identity is missing on an identity-bearing call.
    sync_identity_cookies : bool
        Apply ``_dyid_server`` / ``_dyjsession`` values found in a
        response's ``cookies`` array to the client's identity.
    session_id : str or None
        Initial session id.
    user_id : str or None
        Initial user id (``dyid``).
    consent_accepted : bool or None
        Active consent flag sent as ``user.activeConsentAccepted``.
        Omitted when ``None``.
    generate_session_id : bool
        Generate a random session id at construction when none is given.
    """

    api_key: str
    data_center: DataCenter = DataCenter.US
    extra_headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    identity_policy: IdentityPolicy = IdentityPolicy.STRICT
    sync_identity_cookies: bool = True
    session_id: str | None = None
    user_id: str | None = None
    consent_accepted: bool | None = None
    generate_session_id: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise DyConfigError("api_key must be a non-empty string")
        try:
            data_center = DataCenter(self.data_center)
            policy = IdentityPolicy(self.identity_policy)
        except ValueError as exc:
            raise DyConfigError(str(exc)) from exc
        # Normalise plain strings into their enum members.
        object.__setattr__(self, "data_center", data_center)
        object.__setattr__(self, "identity_policy", policy)
        object.__setattr__(self, "extra_headers", dict(self.extra_headers))

    @property
    def base_url(self) -> str:
        """Base URL for the configured data center."""
        return self.data_center.base_url

    @classmethod
    def from_env(cls, **overrides: Any) -> DyConfig:
        """Create configuration from environment variables.

        Reads ``DY_API_KEY`` and the optional ``DY_*`` variables below.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DyConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "DY_API_KEY": "api_key",
            "DY_DATA_CENTER": "data_center",
            "DY_IDENTITY_POLICY": "identity_policy",
            "DY_SESSION_ID": "session_id",
            "DY_USER_ID": "user_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "sync_identity_cookies" not in overrides:
            config_kwargs["sync_identity_cookies"] = _env_bool(env.get("DY_SYNC_IDENTITY_COOKIES"), True)

        if "api_key" not in config_kwargs and "api_key" not in overrides:
            raise DyConfigError("DY_API_KEY is not set")

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
