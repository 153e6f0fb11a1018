"""Reduce raw tracking snapshots into the set of currently stuck orders."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, NamedTuple, Optional

from .calendar import ElapsedTimeCalculator, utcnow
from .statuses import StatusRegistry

DEFAULT_TERMINAL_STATUS_CUTOFF = 6400
DEFAULT_LOOKBACK_YEARS = 2
DEFAULT_PAGE_LIMIT = 100


class InvalidQueryError(ValueError):
    """Raised when listing parameters are out of range."""


@dataclass
class TrackingSnapshot:
    """One status-change row for an order component, as supplied by the gateway."""

    order_id: str
    status_id: int
    timestamp: datetime
    is_primary_component: bool = True
    order_created_at: Optional[datetime] = None
    order_number: Optional[str] = None
    status_name: Optional[str] = None
    product_type: Optional[str] = None
    region: Optional[str] = None
    facility_code: Optional[str] = None
    facility_name: Optional[str] = None
    sequence: int = 0


@dataclass
class StuckOrderView:
    """An order whose current status has exceeded its threshold."""

    order_id: str
    order_number: str
    status_id: int
    status_name: str
    product_type: str
    stuck_since: datetime
    hours_stuck: int
    threshold_hours: int
    region: Optional[str] = None
    facility_code: Optional[str] = None
    facility_name: Optional[str] = None


@dataclass
class StuckOrderFilters:
    """Optional conjunctive filters applied after deduplication."""

    status_id: Optional[int] = None
    status_name: Optional[str] = None
    min_hours: Optional[int] = None
    max_hours: Optional[int] = None

    def validate(self) -> None:
        if self.min_hours is not None and self.max_hours is not None and self.min_hours > self.max_hours:
            raise InvalidQueryError(f"min_hours ({self.min_hours}) cannot exceed max_hours ({self.max_hours})")

    def matches(self, view: StuckOrderView) -> bool:
        if self.status_id is not None and view.status_id != self.status_id:
            return False
        if self.status_name and self.status_name.strip():
            if self.status_name.strip().casefold() not in view.status_name.casefold():
                return False
        if self.min_hours is not None and view.hours_stuck < self.min_hours:
            return False
        if self.max_hours is not None and view.hours_stuck > self.max_hours:
            return False
        return True


@dataclass
class Pagination:
    offset: int = 0
    limit: int = DEFAULT_PAGE_LIMIT

    def validate(self) -> None:
        if self.offset < 0:
            raise InvalidQueryError(f"offset must be >= 0 (got {self.offset})")
        if self.limit <= 0:
            raise InvalidQueryError(f"limit must be > 0 (got {self.limit})")


class ReducedSnapshots(NamedTuple):
    items: list[StuckOrderView]
    total_count: int


def years_before(instant: datetime, years: int) -> datetime:
    """Shift ``instant`` back by whole calendar years, clamping 29 February."""

    try:
        return instant.replace(year=instant.year - years)
    except ValueError:
        return instant.replace(year=instant.year - years, day=28)


class SnapshotReducer:
    """Applies eligibility, threshold, dedup, filter, sort and paging rules.

    Only statuses in the prep or facility range can be listed as stuck;
    statuses resolving to the default threshold are never part of the listing.
    """

    def __init__(
        self,
        registry: StatusRegistry,
        calculator: ElapsedTimeCalculator,
        *,
        terminal_status_cutoff: int = DEFAULT_TERMINAL_STATUS_CUTOFF,
        lookback_years: int = DEFAULT_LOOKBACK_YEARS,
    ) -> None:
        self.registry = registry
        self.calculator = calculator
        self.terminal_status_cutoff = terminal_status_cutoff
        self.lookback_years = lookback_years

    def lookback_cutoff(self, now: datetime) -> datetime:
        return years_before(now, self.lookback_years)

    def is_eligible(self, snapshot: TrackingSnapshot, now: datetime) -> bool:
        if not snapshot.is_primary_component or snapshot.timestamp is None:
            return False
        if snapshot.status_id >= self.terminal_status_cutoff:
            return False
        if snapshot.order_created_at is None:
            return False
        return snapshot.order_created_at > self.lookback_cutoff(now)

    def classify_stuck(self, status_id: int, hours_stuck: int) -> bool:
        if not self.registry.is_ranged(status_id):
            return False
        return hours_stuck > self.registry.threshold_for(status_id)

    def stuck_views(self, snapshots: Iterable[TrackingSnapshot], *, now: Optional[datetime] = None) -> list[StuckOrderView]:
        """Return one view per stuck order, keeping each order's latest snapshot."""

        now = now or utcnow()
        latest: dict[str, tuple[tuple[datetime, int, int], TrackingSnapshot, int]] = {}
        for position, snapshot in enumerate(snapshots):
            if not self.is_eligible(snapshot, now) or not self.registry.is_ranged(snapshot.status_id):
                continue
            hours_stuck = self.calculator.elapsed_working_hours(snapshot.timestamp, now)
            if not self.classify_stuck(snapshot.status_id, hours_stuck):
                continue
            rank = (snapshot.timestamp, snapshot.sequence, position)
            current = latest.get(snapshot.order_id)
            if current is None or rank > current[0]:
                latest[snapshot.order_id] = (rank, snapshot, hours_stuck)
        return [self._to_view(snapshot, hours) for _, snapshot, hours in latest.values()]

    def count_stuck(self, snapshots: Iterable[TrackingSnapshot], *, now: Optional[datetime] = None) -> int:
        return len(self.stuck_views(snapshots, now=now))

    def reduce(
        self,
        snapshots: Iterable[TrackingSnapshot],
        filters: Optional[StuckOrderFilters] = None,
        pagination: Optional[Pagination] = None,
        *,
        now: Optional[datetime] = None,
    ) -> ReducedSnapshots:
        filters = filters or StuckOrderFilters()
        pagination = pagination or Pagination()
        filters.validate()
        pagination.validate()

        views = self.stuck_views(snapshots, now=now)
        matched = [view for view in views if filters.matches(view)]
        matched.sort(key=lambda view: (-view.hours_stuck, view.order_id))
        page = matched[pagination.offset : pagination.offset + pagination.limit]
        return ReducedSnapshots(items=page, total_count=len(views))

    def _to_view(self, snapshot: TrackingSnapshot, hours_stuck: int) -> StuckOrderView:
        return StuckOrderView(
            order_id=snapshot.order_id,
            order_number=snapshot.order_number or "",
            status_id=snapshot.status_id,
            status_name=snapshot.status_name or self.registry.name_for(snapshot.status_id),
            product_type=snapshot.product_type or "",
            stuck_since=snapshot.timestamp,
            hours_stuck=hours_stuck,
            threshold_hours=self.registry.threshold_for(snapshot.status_id),
            region=snapshot.region,
            facility_code=snapshot.facility_code,
            facility_name=snapshot.facility_name,
        )
