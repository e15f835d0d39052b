"""Data models for Dynamic Yield API payloads."""

from pydyapi.models._base import DyBaseModel
from pydyapi.models.cookies import ResponseCookie
from pydyapi.models.requests import (
    BranchPath,
    FeedPath,
    ProfileQuery,
    TransactionItemPath,
    TransactionPath,
    UserDataPath,
)
from pydyapi.models.responses import ChooseResult, Choice, Variation

__all__ = [
    "BranchPath",
    "ChooseResult",
    "Choice",
    "DyBaseModel",
    "FeedPath",
    "ProfileQuery",
    "ResponseCookie",
    "TransactionItemPath",
    "TransactionPath",
    "UserDataPath",
    "Variation",
]
