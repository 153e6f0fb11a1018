"""Summary statistics over the reduced stuck-order set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from .calendar import utcnow
from .reducer import StuckOrderView
from .statuses import StatusRegistry

PREP_BUCKET = "prep"
FACILITY_BUCKET = "facility"
UNKNOWN_FACILITY = "Unknown"
DEFAULT_TOP_N = 10


@dataclass
class StatusCount:
    status_id: int
    status_name: str
    count: int


@dataclass
class FacilityStatusCount:
    facility: str
    status_name: str
    count: int


@dataclass
class SummaryStats:
    total_stuck_orders: int
    by_threshold_bucket: dict[str, int]
    by_facility: dict[str, int] = field(default_factory=dict)
    by_status_category: dict[str, int] = field(default_factory=dict)
    top_statuses: list[StatusCount] = field(default_factory=list)
    by_facility_and_status: list[FacilityStatusCount] = field(default_factory=list)
    generated_at: Optional[datetime] = None


def _facility_label(view: StuckOrderView) -> str:
    name = (view.facility_name or "").strip()
    return name or UNKNOWN_FACILITY


class SummaryAggregator:
    """Folds stuck-order views into grouped and ranked counts."""

    def __init__(self, registry: StatusRegistry, *, top_n: int = DEFAULT_TOP_N) -> None:
        self.registry = registry
        self.top_n = top_n

    def summarize(
        self,
        views: Iterable[StuckOrderView],
        total_count: int,
        *,
        generated_at: Optional[datetime] = None,
    ) -> SummaryStats:
        """Build :class:`SummaryStats`.

        ``total_count`` comes from the independent count read and is reported
        as-is; every other figure is derived from ``views``.
        """

        views = list(views)
        registry = self.registry

        by_threshold = {
            PREP_BUCKET: sum(1 for view in views if registry.is_in_prep_range(view.status_id)),
            FACILITY_BUCKET: sum(1 for view in views if registry.is_in_facility_range(view.status_id)),
        }

        facility_views = [view for view in views if registry.is_in_facility_range(view.status_id)]
        by_facility = dict(
            sorted(Counter(_facility_label(view) for view in facility_views).items(), key=lambda item: (-item[1], item[0]))
        )

        by_category = {
            category: count
            for category, count in registry.categories_of(view.status_id for view in views).items()
            if count > 0
        }

        status_counter: Counter[tuple[int, str]] = Counter((view.status_id, view.status_name) for view in views)
        top_statuses = [
            StatusCount(status_id=status_id, status_name=name, count=count)
            for (status_id, name), count in sorted(status_counter.items(), key=lambda item: (-item[1], item[0][0]))
        ][: self.top_n]

        cross_counter: Counter[tuple[str, str]] = Counter(
            (_facility_label(view), view.status_name) for view in facility_views
        )
        by_facility_and_status = [
            FacilityStatusCount(facility=facility, status_name=name, count=count)
            for (facility, name), count in sorted(
                cross_counter.items(), key=lambda item: (item[0][0], -item[1], item[0][1])
            )
        ]

        return SummaryStats(
            total_stuck_orders=total_count,
            by_threshold_bucket=by_threshold,
            by_facility=by_facility,
            by_status_category=by_category,
            top_statuses=top_statuses,
            by_facility_and_status=by_facility_and_status,
            generated_at=generated_at or utcnow(),
        )
