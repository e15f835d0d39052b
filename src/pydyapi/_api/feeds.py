"""Feed endpoints: product feed bulk updates, branch inventory and outages.

Endpoints:
  - /feeds/{feedId}/bulk
  - /feeds/{feedId}/transaction/{transactionId}
  - /feeds/{feedId}/transaction/{transactionId}/item/{itemId}
  - /feeds/branch/{id}/inventory
  - /feeds/branch/outage/bulk

None of these carry visitor identity.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydyapi._api._common import call_endpoint
from pydyapi._api._endpoints import (
    REPORT_OUTAGES,
    TRACK_TRANSACTION_STATUS_SPECIFIC_ITEM,
    TRACK_TRANSACTION_STATUS_WHOLE_TRANSACTION,
    UPDATE_BRANCH_FEED,
    UPDATE_PRODUCT_FEED,
)
from pydyapi._transport import Transport
from pydyapi.models.requests import BranchPath, FeedPath, TransactionItemPath, TransactionPath

_logger = logging.getLogger(__name__)


def _count(body: Mapping[str, Any] | None, key: str) -> int:
    items = (body or {}).get(key)
    return len(items) if isinstance(items, list) else 0


async def update_product_feed(
    transport: Transport,
    path: FeedPath,
    body: Mapping[str, Any],
) -> Any:
    """Submit bulk product feed changes (``items``).

    The response carries the ``transactionId`` used by the status calls.
    """
    _logger.debug("Product feed %s bulk update items=%d", path.feed_id, _count(body, "items"))
    return await call_endpoint(
        UPDATE_PRODUCT_FEED,
        transport,
        body=body,
        path_params=path.path_params(),
    )


async def track_transaction_status_specific_item(
    transport: Transport,
    path: TransactionItemPath,
) -> Any:
    """Fetch the processing status of one item in a feed transaction."""
    return await call_endpoint(
        TRACK_TRANSACTION_STATUS_SPECIFIC_ITEM,
        transport,
        path_params=path.path_params(),
    )


async def track_transaction_status_whole_transaction(
    transport: Transport,
    path: TransactionPath,
) -> Any:
    """Fetch the processing status of a whole feed transaction."""
    return await call_endpoint(
        TRACK_TRANSACTION_STATUS_WHOLE_TRANSACTION,
        transport,
        path_params=path.path_params(),
    )


async def update_branch_feed(
    transport: Transport,
    path: BranchPath,
    body: Mapping[str, Any],
) -> Any:
    """Update the inventory of one branch (``inventory``)."""
    _logger.debug("Branch %s inventory update entries=%d", path.branch_id, _count(body, "inventory"))
    return await call_endpoint(
        UPDATE_BRANCH_FEED,
        transport,
        body=body,
        path_params=path.path_params(),
    )


async def report_outages(transport: Transport, body: Mapping[str, Any]) -> Any:
    """Report branch outages in bulk (``outages``)."""
    return await call_endpoint(REPORT_OUTAGES, transport, body=body)
