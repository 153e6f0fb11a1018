"""Service helpers for stuck-order endpoints."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from order_monitor.detection import Pagination, StuckOrderFilters, StuckOrderView, utcnow
from order_monitor.monitoring import (
    MonitoringContext,
    collect_history,
    collect_stuck_orders,
    collect_summary,
)
from order_monitor.storage import SnapshotGateway

from ..schemas import (
    FacilityStatusCountItem,
    OrderStatusHistoryResponse,
    StatusCatalogResponse,
    StatusCountItem,
    StatusDefinitionItem,
    StatusHistoryItem,
    StatusRangeItem,
    StuckOrderItem,
    StuckOrdersResponse,
    StuckOrdersSummaryResponse,
)

LOGGER = logging.getLogger(__name__)


def _stuck_order_item(view: StuckOrderView) -> StuckOrderItem:
    return StuckOrderItem(
        order_id=view.order_id,
        order_number=view.order_number,
        status_id=view.status_id,
        status=view.status_name,
        product_type=view.product_type,
        stuck_since=view.stuck_since,
        hours_stuck=view.hours_stuck,
        threshold_hours=view.threshold_hours,
        region=view.region,
        facility_code=view.facility_code,
        facility_name=view.facility_name,
    )


def get_stuck_orders(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    *,
    filters: Optional[StuckOrderFilters] = None,
    pagination: Optional[Pagination] = None,
    now: Optional[datetime] = None,
) -> StuckOrdersResponse:
    pagination = pagination or Pagination()
    now = now or utcnow()
    result = collect_stuck_orders(gateway, context, filters=filters, pagination=pagination, now=now)
    return StuckOrdersResponse(
        total=result.total_count,
        limit=pagination.limit,
        offset=pagination.offset,
        items=[_stuck_order_item(view) for view in result.items],
        generated_at=now,
    )


def get_stuck_orders_summary(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    *,
    now: Optional[datetime] = None,
) -> StuckOrdersSummaryResponse:
    summary = collect_summary(gateway, context, now=now)
    return StuckOrdersSummaryResponse(
        total_stuck_orders=summary.total_stuck_orders,
        by_threshold=summary.by_threshold_bucket,
        by_facility=summary.by_facility,
        by_status_category=summary.by_status_category,
        top_statuses=[
            StatusCountItem(status_id=item.status_id, status=item.status_name, count=item.count)
            for item in summary.top_statuses
        ],
        by_facility_status=[
            FacilityStatusCountItem(facility=item.facility, status=item.status_name, count=item.count)
            for item in summary.by_facility_and_status
        ],
        generated_at=summary.generated_at,
    )


def get_order_status_history(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    order_id: str,
    *,
    now: Optional[datetime] = None,
) -> OrderStatusHistoryResponse:
    intervals = collect_history(gateway, context, order_id, now=now)
    return OrderStatusHistoryResponse(
        order_id=order_id,
        history=[
            StatusHistoryItem(
                status_id=interval.status_id,
                status=interval.status_name,
                timestamp=interval.entered_at,
                duration=interval.duration_label,
                duration_minutes=interval.duration_minutes,
                hours_from_now=interval.hours_from_now,
                is_stuck=interval.is_stuck,
                is_current=interval.is_current,
            )
            for interval in intervals
        ],
    )


def get_status_catalog(context: MonitoringContext) -> StatusCatalogResponse:
    registry = context.registry

    def _range(status_range) -> StatusRangeItem:
        return StatusRangeItem(
            min_status_id=status_range.min_status_id,
            max_status_id=status_range.max_status_id,
            threshold_hours=status_range.threshold_hours,
        )

    items = sorted(registry.all_statuses(), key=lambda definition: definition.status_id)
    return StatusCatalogResponse(
        prep_range=_range(registry.prep_range),
        facility_range=_range(registry.facility_range),
        default_threshold_hours=registry.default_threshold_hours,
        items=[
            StatusDefinitionItem(
                status_id=definition.status_id,
                status=definition.name,
                category=definition.category,
                threshold_hours=definition.threshold_hours,
            )
            for definition in items
        ],
    )
