"""Routes for stuck-order listing, summary and per-order history."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from order_monitor.detection import Pagination, StuckOrderFilters
from order_monitor.monitoring import MonitoringContext
from order_monitor.storage import SnapshotGateway

from ..dependencies import get_gateway, get_monitoring_context
from ..schemas.orders import (
    OrderStatusHistoryResponse,
    StatusCatalogResponse,
    StuckOrdersResponse,
    StuckOrdersSummaryResponse,
)
from ..services.stuck_orders import (
    get_order_status_history,
    get_status_catalog,
    get_stuck_orders,
    get_stuck_orders_summary,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/stuck", response_model=StuckOrdersResponse, status_code=status.HTTP_200_OK)
def stuck_orders(
    status_id: Optional[int] = Query(None, description="Filter by exact status id"),
    status_name: Optional[str] = Query(None, alias="status", description="Filter by status name (partial match)"),
    min_hours: Optional[int] = Query(None, ge=0, description="Minimum working hours stuck"),
    max_hours: Optional[int] = Query(None, ge=0, description="Maximum working hours stuck"),
    limit: int = Query(100, ge=1, le=10000, description="Maximum orders to return"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    gateway: SnapshotGateway = Depends(get_gateway),
    context: MonitoringContext = Depends(get_monitoring_context),
) -> StuckOrdersResponse:
    """Return orders currently stuck beyond their status threshold, most overdue first."""

    LOGGER.info(
        "Getting stuck orders (status_id=%s, status=%s, min_hours=%s, max_hours=%s, limit=%s, offset=%s)",
        status_id,
        status_name,
        min_hours,
        max_hours,
        limit,
        offset,
    )
    try:
        response = get_stuck_orders(
            gateway,
            context,
            filters=StuckOrderFilters(
                status_id=status_id,
                status_name=status_name,
                min_hours=min_hours,
                max_hours=max_hours,
            ),
            pagination=Pagination(offset=offset, limit=limit),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    LOGGER.info("Found %s stuck orders (%s on page)", response.total, len(response.items))
    return response


@router.get("/stuck/summary", response_model=StuckOrdersSummaryResponse)
def stuck_orders_summary(
    gateway: SnapshotGateway = Depends(get_gateway),
    context: MonitoringContext = Depends(get_monitoring_context),
) -> StuckOrdersSummaryResponse:
    """Return grouped and ranked counts of stuck orders."""

    return get_stuck_orders_summary(gateway, context)


@router.get("/statuses", response_model=StatusCatalogResponse)
def status_catalog(context: MonitoringContext = Depends(get_monitoring_context)) -> StatusCatalogResponse:
    """Return the monitored status catalog with thresholds."""

    return get_status_catalog(context)


@router.get("/{order_id}/history", response_model=OrderStatusHistoryResponse)
def order_status_history(
    order_id: str,
    gateway: SnapshotGateway = Depends(get_gateway),
    context: MonitoringContext = Depends(get_monitoring_context),
) -> OrderStatusHistoryResponse:
    """Return the status timeline of one order."""

    try:
        return get_order_status_history(gateway, context, order_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
