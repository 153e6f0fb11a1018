"""Stuck-order detection engine exports."""

from .calendar import BusinessCalendar, ElapsedTimeCalculator, parse_holidays, utcnow
from .reducer import (
    InvalidQueryError,
    Pagination,
    ReducedSnapshots,
    SnapshotReducer,
    StuckOrderFilters,
    StuckOrderView,
    TrackingSnapshot,
)
from .statuses import StatusDefinition, StatusRange, StatusRegistry, build_default_registry
from .summary import FacilityStatusCount, StatusCount, SummaryAggregator, SummaryStats
from .timeline import StatusInterval, TimelineBuilder, format_duration, format_open_label

__all__ = [
    "BusinessCalendar",
    "ElapsedTimeCalculator",
    "FacilityStatusCount",
    "InvalidQueryError",
    "Pagination",
    "ReducedSnapshots",
    "SnapshotReducer",
    "StatusCount",
    "StatusDefinition",
    "StatusInterval",
    "StatusRange",
    "StatusRegistry",
    "StuckOrderFilters",
    "StuckOrderView",
    "SummaryAggregator",
    "SummaryStats",
    "TimelineBuilder",
    "TrackingSnapshot",
    "build_default_registry",
    "format_duration",
    "format_open_label",
    "parse_holidays",
    "utcnow",
]
