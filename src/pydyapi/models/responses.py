"""Typed views over serve responses."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, ValidationError, field_validator

from pydyapi.models._base import DyBaseModel
from pydyapi.models.cookies import ResponseCookie

_logger = logging.getLogger(__name__)


class Variation(DyBaseModel):
    """A variation chosen for a campaign.

    ``payload`` is kept as the API sends it (``{"type": ..., "data": ...}``).
    """

    id: int | str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class Choice(DyBaseModel):
    """One campaign decision in a ``chooseVariations`` response."""

    id: int | str | None = None
    name: str = ""
    type: str = ""
    decision_id: str | None = None
    variations: list[Variation] = Field(default_factory=list)


class ChooseResult(DyBaseModel):
    """Decoded ``chooseVariations`` response.

    Malformed ``cookies`` entries are dropped; the original list stays in
    ``raw``.
    """

    choices: list[Choice] = Field(default_factory=list)
    cookies: list[ResponseCookie] = Field(default_factory=list)

    @field_validator("cookies", mode="before")
    @classmethod
    def _drop_malformed_cookies(cls, value: Any) -> list[ResponseCookie]:
        if not isinstance(value, list):
            _logger.debug("Ignoring cookies field of type %s", type(value).__name__)
            return []
        cookies: list[ResponseCookie] = []
        for index, entry in enumerate(value):
            try:
                cookies.append(ResponseCookie.model_validate(entry))
            except ValidationError:
                _logger.debug("Dropping malformed cookie entry #%d", index)
        return cookies

    def get_choice(self, name: str) -> Choice | None:
        """Return the choice for the campaign/selector *name*, if any."""
        for choice in self.choices:
            if choice.name == name:
                return choice
        return None
