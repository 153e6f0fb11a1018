"""Read access to tracking snapshots.

The listing read and the count read are independent queries; rows written
between them can make the two disagree slightly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from order_monitor.detection.reducer import (
    DEFAULT_LOOKBACK_YEARS,
    DEFAULT_TERMINAL_STATUS_CUTOFF,
    TrackingSnapshot,
    years_before,
)
from .models import ConsolidationOrder, MajorProductType, OrderProductTracking, Partner, SnSpecification, TrackingStatus

if TYPE_CHECKING:
    from order_monitor.detection.reducer import SnapshotReducer

LOGGER = logging.getLogger(__name__)


def _candidate_conditions(now: datetime, lookback_years: int, terminal_status_cutoff: int) -> list:
    return [
        OrderProductTracking.is_primary_component.is_(True),
        OrderProductTracking.order_date > years_before(now, lookback_years),
        OrderProductTracking.status < terminal_status_cutoff,
        OrderProductTracking.last_updated_date.isnot(None),
    ]


def _optional_str(value) -> str | None:
    return str(value) if value is not None else None


class SnapshotGateway:
    """Fetches denormalised tracking rows for the detection engine."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def fetch_candidate_snapshots(
        self,
        *,
        now: datetime,
        lookback_years: int = DEFAULT_LOOKBACK_YEARS,
        terminal_status_cutoff: int = DEFAULT_TERMINAL_STATUS_CUTOFF,
    ) -> list[TrackingSnapshot]:
        """Return eligible primary-component rows joined with names and facility."""

        stmt = (
            select(
                OrderProductTracking.id,
                OrderProductTracking.co_number,
                OrderProductTracking.status,
                OrderProductTracking.last_updated_date,
                OrderProductTracking.order_date,
                OrderProductTracking.is_primary_component,
                OrderProductTracking.partner_code,
                ConsolidationOrder.order_number,
                ConsolidationOrder.website_code,
                TrackingStatus.name.label("status_name"),
                MajorProductType.name.label("product_type"),
                Partner.display_name.label("partner_name"),
            )
            .select_from(OrderProductTracking)
            .join(ConsolidationOrder, ConsolidationOrder.co_number == OrderProductTracking.co_number)
            .join(TrackingStatus, TrackingStatus.id == OrderProductTracking.status)
            .outerjoin(SnSpecification, SnSpecification.id == OrderProductTracking.sn_specification_id)
            .outerjoin(MajorProductType, MajorProductType.id == SnSpecification.master_product_type_id)
            .outerjoin(
                Partner,
                and_(Partner.id == OrderProductTracking.partner_code, Partner.is_active.is_(True)),
            )
            .where(*_candidate_conditions(now, lookback_years, terminal_status_cutoff))
        )
        rows = self.session.execute(stmt).all()
        LOGGER.debug("Fetched %s candidate tracking rows", len(rows))
        return [
            TrackingSnapshot(
                order_id=row.co_number,
                status_id=int(row.status),
                timestamp=row.last_updated_date,
                is_primary_component=bool(row.is_primary_component),
                order_created_at=row.order_date,
                order_number=row.order_number,
                status_name=row.status_name,
                product_type=row.product_type,
                region=row.website_code,
                facility_code=_optional_str(row.partner_code),
                facility_name=row.partner_name,
                sequence=int(row.id),
            )
            for row in rows
        ]

    def count_distinct_stuck_orders(
        self,
        reducer: "SnapshotReducer",
        *,
        now: datetime,
    ) -> int:
        """Count distinct stuck orders from a separate lightweight read."""

        stmt = select(
            OrderProductTracking.id,
            OrderProductTracking.co_number,
            OrderProductTracking.status,
            OrderProductTracking.last_updated_date,
            OrderProductTracking.order_date,
            OrderProductTracking.is_primary_component,
        ).where(*_candidate_conditions(now, reducer.lookback_years, reducer.terminal_status_cutoff))
        rows = self.session.execute(stmt).all()
        snapshots = [
            TrackingSnapshot(
                order_id=row.co_number,
                status_id=int(row.status),
                timestamp=row.last_updated_date,
                is_primary_component=bool(row.is_primary_component),
                order_created_at=row.order_date,
                sequence=int(row.id),
            )
            for row in rows
        ]
        return reducer.count_stuck(snapshots, now=now)

    def fetch_history(self, order_id: str) -> list[TrackingSnapshot]:
        """Return one order's primary-component history ordered by timestamp."""

        stmt = (
            select(
                OrderProductTracking.id,
                OrderProductTracking.co_number,
                OrderProductTracking.status,
                OrderProductTracking.last_updated_date,
                OrderProductTracking.is_primary_component,
                TrackingStatus.name.label("status_name"),
            )
            .join(TrackingStatus, TrackingStatus.id == OrderProductTracking.status)
            .where(
                OrderProductTracking.co_number == order_id,
                OrderProductTracking.is_primary_component.is_(True),
                OrderProductTracking.last_updated_date.isnot(None),
            )
            .order_by(OrderProductTracking.last_updated_date.asc(), OrderProductTracking.id.asc())
        )
        rows = self.session.execute(stmt).all()
        return [
            TrackingSnapshot(
                order_id=row.co_number,
                status_id=int(row.status),
                timestamp=row.last_updated_date,
                is_primary_component=bool(row.is_primary_component),
                status_name=row.status_name,
                sequence=int(row.id),
            )
            for row in rows
        ]
