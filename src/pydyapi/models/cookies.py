"""Cookie entries returned in the ``cookies`` array of serve responses."""

from __future__ import annotations

import math

from pydantic import Field, field_validator

from pydyapi.models._base import DyBaseModel


class ResponseCookie(DyBaseModel):
    """One ``{name, value, maxAge}`` entry.

    Only ``name`` and ``value`` decide whether an entry is usable; an
    unparseable ``maxAge`` becomes ``None``.

    Parameters
    ----------
    name : str
        Cookie name, e.g. ``_dyid_server``.
    value : str
        Cookie value.
    max_age : int or None
        Lifetime in seconds as sent by the API.
    """

    name: str = Field(min_length=1)
    value: str
    max_age: int | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: object) -> object:
        # Numeric ids occasionally arrive unquoted.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("max_age", mode="before")
    @classmethod
    def _coerce_max_age(cls, value: object) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            seconds = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if not math.isfinite(seconds):
            return None
        return int(seconds)
