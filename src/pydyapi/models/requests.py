"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow
for path and query parameters. They are used internally by
:class:`pydyapi.client.DyClient`; a validation failure raises before any
network call.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


_DOT_SEGMENTS = frozenset({".", ".."})


def _non_empty(value: Any, field_name: str) -> str:
    text = str(value).strip()
    if not text:
        raise ValueError(f"{field_name} must be non-empty")
    return text


def _path_segment(value: Any, field_name: str) -> str:
    text = _non_empty(value, field_name)
    if text in _DOT_SEGMENTS:
        raise ValueError(f"{field_name} must not be a dot segment")
    return text


class _PathModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    def path_params(self) -> dict[str, str]:
        """Parameters keyed by their wire names."""
        return self.model_dump(by_alias=True)


class FeedPath(_PathModel):
    feed_id: str = Field(alias="feedId")

    @field_validator("feed_id", mode="before")
    @classmethod
    def _feed_id_non_empty(cls, value: Any) -> str:
        return _path_segment(value, "feed_id")


class TransactionPath(FeedPath):
    transaction_id: str = Field(alias="transactionId")

    @field_validator("transaction_id", mode="before")
    @classmethod
    def _transaction_id_non_empty(cls, value: Any) -> str:
        return _path_segment(value, "transaction_id")


class TransactionItemPath(TransactionPath):
    item_id: str = Field(alias="itemId")

    @field_validator("item_id", mode="before")
    @classmethod
    def _item_id_non_empty(cls, value: Any) -> str:
        return _path_segment(value, "item_id")


class BranchPath(_PathModel):
    branch_id: str = Field(alias="id")

    @field_validator("branch_id", mode="before")
    @classmethod
    def _branch_id_non_empty(cls, value: Any) -> str:
        return _path_segment(value, "branch_id")


class UserDataPath(_PathModel):
    feed_key: str = Field(alias="feedKey")

    @field_validator("feed_key", mode="before")
    @classmethod
    def _feed_key_non_empty(cls, value: Any) -> str:
        return _path_segment(value, "feed_key")


class ProfileQuery(_PathModel):
    """Query for ``profileAnywhere``.

    ``cuid_type`` names the identifier kind (e.g. ``"email"``, ``"dyid"``);
    ``affinity`` asks for affinity data when set.
    """

    cuid: str
    cuid_type: str = Field(alias="cuidType")
    affinity: bool | None = None

    @field_validator("cuid", "cuid_type", mode="before")
    @classmethod
    def _non_empty_strings(cls, value: Any, info: ValidationInfo) -> str:
        return _non_empty(value, info.field_name or "value")

    def query_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
