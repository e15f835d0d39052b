"""pydyapi - Async Python client for the Dynamic Yield experience API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydyapi")
except PackageNotFoundError:
    __version__ = "0+local"
from pydyapi.client import DyClient
from pydyapi.config import DataCenter, DyConfig, IdentityPolicy
from pydyapi.exceptions import (
    DyConfigError,
    DyError,
    DyHttpStatusError,
    DyPreconditionError,
    DyTransportError,
)
from pydyapi.models import ChooseResult, Choice, ResponseCookie, Variation
from pydyapi.session import IdentityStorage, IdentityUpdate, MemoryIdentityStorage, SessionState

__all__ = [
    "__version__",
    "ChooseResult",
    "Choice",
    "DataCenter",
    "DyClient",
    "DyConfig",
    "DyConfigError",
    "DyError",
    "DyHttpStatusError",
    "DyPreconditionError",
    "DyTransportError",
    "IdentityPolicy",
    "IdentityStorage",
    "IdentityUpdate",
    "MemoryIdentityStorage",
    "ResponseCookie",
    "SessionState",
    "Variation",
]
