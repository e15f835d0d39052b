"""Static endpoint table and path/query resolution.

Paths are relative to the data-center base URL (``.../v2``).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Wire-level shape of one logical operation."""

    name: str
    method: str
    path: str
    path_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    has_body: bool = True
    identity: bool = False


def _endpoint_table(*endpoints: Endpoint) -> Mapping[str, Endpoint]:
    return MappingProxyType({endpoint.name: endpoint for endpoint in endpoints})


CHOOSE_VARIATIONS = Endpoint("chooseVariations", "POST", "/serve/user/choose", identity=True)
SEARCH = Endpoint("search", "POST", "/serve/user/search", identity=True)
TRACK_PAGEVIEWS = Endpoint("trackPageviews", "POST", "/collect/user/pageview", identity=True)
TRACK_ENGAGEMENT = Endpoint("trackEngagement", "POST", "/collect/user/engagement", identity=True)
TRACK_EVENTS = Endpoint("trackEvents", "POST", "/collect/user/event", identity=True)
UPDATE_PRODUCT_FEED = Endpoint("updateProductFeed", "POST", "/feeds/{feedId}/bulk", path_params=("feedId",))
TRACK_TRANSACTION_STATUS_SPECIFIC_ITEM = Endpoint(
    "trackTransactionStatusSpecificItem",
    "GET",
    "/feeds/{feedId}/transaction/{transactionId}/item/{itemId}",
    path_params=("feedId", "transactionId", "itemId"),
    has_body=False,
)
TRACK_TRANSACTION_STATUS_WHOLE_TRANSACTION = Endpoint(
    "trackTransactionStatusWholeTransaction",
    "GET",
    "/feeds/{feedId}/transaction/{transactionId}",
    path_params=("feedId", "transactionId"),
    has_body=False,
)
UPDATE_BRANCH_FEED = Endpoint("updateBranchFeed", "POST", "/feeds/branch/{id}/inventory", path_params=("id",))
REPORT_OUTAGES = Endpoint("reportOutages", "POST", "/feeds/branch/outage/bulk")
USER_DATA_API = Endpoint("userDataApi", "POST", "/userdata/{feedKey}/bulk", path_params=("feedKey",))
EXTERNAL_EVENTS_API = Endpoint("externalEventsApi", "POST", "/userdata/events", identity=True)
PROFILE_ANYWHERE = Endpoint(
    "profileAnywhere",
    "GET",
    "/userprofile",
    query_params=("cuid", "cuidType", "affinity"),
    has_body=False,
)

ENDPOINTS: Mapping[str, Endpoint] = _endpoint_table(
    CHOOSE_VARIATIONS,
    SEARCH,
    TRACK_PAGEVIEWS,
    TRACK_ENGAGEMENT,
    TRACK_EVENTS,
    UPDATE_PRODUCT_FEED,
    TRACK_TRANSACTION_STATUS_SPECIFIC_ITEM,
    TRACK_TRANSACTION_STATUS_WHOLE_TRANSACTION,
    UPDATE_BRANCH_FEED,
    REPORT_OUTAGES,
    USER_DATA_API,
    EXTERNAL_EVENTS_API,
    PROFILE_ANYWHERE,
)


def resolve_path(endpoint: Endpoint, path_params: Mapping[str, Any] | None = None) -> str:
    """Substitute every declared path parameter into the template.

    Values are encoded as single URL path segments.

    Raises
    ------
    ValueError
        A declared parameter is missing, empty or a dot segment, an
        undeclared one is given, or a placeholder is left unresolved.
    """
    supplied = dict(path_params or {})
    unknown = set(supplied) - set(endpoint.path_params)
    if unknown:
        raise ValueError(f"{endpoint.name} got unexpected path parameters: {sorted(unknown)}")

    path = endpoint.path
    for name in endpoint.path_params:
        value = supplied.get(name)
        if value is None or str(value) == "":
            raise ValueError(f"{endpoint.name} requires path parameter {name!r}")
        if str(value) in (".", ".."):
            raise ValueError(f"{endpoint.name} path parameter {name!r} must not be a dot segment")
        path = path.replace("{" + name + "}", quote(str(value), safe=""), 1)

    leftover = _PLACEHOLDER.search(path)
    if leftover is not None:
        raise ValueError(f"{endpoint.name} left path parameter {leftover.group(1)!r} unresolved")
    return path


def build_query(endpoint: Endpoint, query: Mapping[str, Any] | None = None) -> dict[str, str]:
    """Keep declared query parameters that have a value."""
    params: dict[str, str] = {}
    for name in endpoint.query_params:
        value = (query or {}).get(name)
        if value is None:
            continue
        if isinstance(value, bool):
            params[name] = "true" if value else "false"
        else:
            params[name] = str(value)
    return params
