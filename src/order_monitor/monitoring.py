"""Wiring of the detection components and the reads behind each operation.

Every operation captures ``now`` once and threads it through the whole pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from order_monitor.config import AppSettings
from order_monitor.detection import (
    BusinessCalendar,
    ElapsedTimeCalculator,
    Pagination,
    ReducedSnapshots,
    SnapshotReducer,
    StatusInterval,
    StatusRegistry,
    StuckOrderFilters,
    SummaryAggregator,
    SummaryStats,
    TimelineBuilder,
    build_default_registry,
    utcnow,
)
from order_monitor.storage import SnapshotGateway

LOGGER = logging.getLogger(__name__)


@dataclass
class MonitoringContext:
    """The wired detection components shared by a request or a scan."""

    registry: StatusRegistry
    calculator: ElapsedTimeCalculator
    reducer: SnapshotReducer
    timeline_builder: TimelineBuilder
    aggregator: SummaryAggregator


def build_monitoring_context(settings: AppSettings) -> MonitoringContext:
    """Construct the detection components from application settings."""

    thresholds = settings.thresholds
    hours = settings.business_hours
    registry = build_default_registry(thresholds)
    calendar = BusinessCalendar(
        hours.holiday_dates(),
        timezone_name=hours.timezone,
        start_hour=hours.start_hour,
        end_hour=hours.end_hour,
    )
    calculator = ElapsedTimeCalculator(calendar)
    reducer = SnapshotReducer(
        registry,
        calculator,
        terminal_status_cutoff=thresholds.terminal_status_cutoff,
        lookback_years=thresholds.lookback_years,
    )
    return MonitoringContext(
        registry=registry,
        calculator=calculator,
        reducer=reducer,
        timeline_builder=TimelineBuilder(registry, calculator),
        aggregator=SummaryAggregator(registry),
    )


def _fetch_candidates(gateway: SnapshotGateway, context: MonitoringContext, now: datetime):
    return gateway.fetch_candidate_snapshots(
        now=now,
        lookback_years=context.reducer.lookback_years,
        terminal_status_cutoff=context.reducer.terminal_status_cutoff,
    )


def collect_stuck_orders(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    *,
    filters: Optional[StuckOrderFilters] = None,
    pagination: Optional[Pagination] = None,
    now: Optional[datetime] = None,
) -> ReducedSnapshots:
    """Return the requested page of stuck orders with the independent total.

    The page and the total come from two separate gateway reads.
    """

    filters = filters or StuckOrderFilters()
    pagination = pagination or Pagination()
    filters.validate()
    pagination.validate()
    now = now or utcnow()

    reduced = context.reducer.reduce(_fetch_candidates(gateway, context, now), filters, pagination, now=now)
    total = gateway.count_distinct_stuck_orders(context.reducer, now=now)
    return ReducedSnapshots(items=reduced.items, total_count=total)


def collect_summary(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    *,
    now: Optional[datetime] = None,
) -> SummaryStats:
    now = now or utcnow()
    total = gateway.count_distinct_stuck_orders(context.reducer, now=now)
    views = context.reducer.stuck_views(_fetch_candidates(gateway, context, now), now=now)
    return context.aggregator.summarize(views, total, generated_at=now)


def collect_history(
    gateway: SnapshotGateway,
    context: MonitoringContext,
    order_id: str,
    *,
    now: Optional[datetime] = None,
) -> list[StatusInterval]:
    snapshots = gateway.fetch_history(order_id)
    if not snapshots:
        raise LookupError("order_not_found")
    return context.timeline_builder.build_timeline(order_id, snapshots, now=now or utcnow())


def is_order_stuck(
    context: MonitoringContext,
    status_id: int,
    status_updated_at: datetime,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """Return True when a status held since ``status_updated_at`` exceeds its threshold."""

    hours = context.calculator.elapsed_working_hours(status_updated_at, now or utcnow())
    return hours > context.registry.threshold_for(status_id)
