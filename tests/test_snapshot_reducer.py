from __future__ import annotations

import sys
from datetime import datetime, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import pytest

from order_monitor.detection import (
    BusinessCalendar,
    ElapsedTimeCalculator,
    InvalidQueryError,
    Pagination,
    SnapshotReducer,
    StuckOrderFilters,
    TrackingSnapshot,
    build_default_registry,
)
from order_monitor.detection.reducer import years_before

NOW = datetime(2025, 6, 18, 12)  # Wednesday
CREATED = datetime(2025, 1, 2)


def _snapshot(order_id: str, status_id: int, timestamp: datetime, **overrides) -> TrackingSnapshot:
    values = dict(
        order_id=order_id,
        status_id=status_id,
        timestamp=timestamp,
        order_created_at=CREATED,
        order_number=f"N-{order_id}",
        product_type="Photobook",
        region="UK",
    )
    values.update(overrides)
    return TrackingSnapshot(**values)


@pytest.fixture
def reducer() -> SnapshotReducer:
    return SnapshotReducer(build_default_registry(), ElapsedTimeCalculator(BusinessCalendar()))


def test_prep_status_past_threshold_is_stuck(reducer):
    result = reducer.reduce([_snapshot("A", 3050, datetime(2025, 6, 18, 0))], now=NOW)

    assert result.total_count == 1
    view = result.items[0]
    assert view.order_id == "A"
    assert view.order_number == "N-A"
    assert view.hours_stuck == 12
    assert view.threshold_hours == 6
    assert view.status_name == "PreparationStarted"
    assert view.stuck_since == datetime(2025, 6, 18, 0)


def test_threshold_is_strict(reducer):
    snapshots = [
        _snapshot("exact", 3050, datetime(2025, 6, 18, 6)),
        _snapshot("truncated", 3050, datetime(2025, 6, 18, 5, 59)),
        _snapshot("over", 3050, datetime(2025, 6, 18, 5)),
        _snapshot("facility-exact", 4001, datetime(2025, 6, 16, 12)),
        _snapshot("facility-over", 4001, datetime(2025, 6, 16, 11)),
    ]
    result = reducer.reduce(snapshots, now=NOW)

    assert {view.order_id: view.hours_stuck for view in result.items} == {"over": 7, "facility-over": 49}


def test_weekend_does_not_count_towards_threshold(reducer):
    monday = datetime(2025, 6, 16, 3)
    # Friday 22:00 -> Monday 03:00 is 2h + 3h of working time
    assert reducer.reduce([_snapshot("A", 3050, datetime(2025, 6, 13, 22))], now=monday).items == []
    assert reducer.reduce([_snapshot("A", 3050, datetime(2025, 6, 13, 20))], now=monday).items[0].hours_stuck == 7


def test_latest_stuck_snapshot_wins(reducer):
    snapshots = [
        _snapshot("A", 3050, datetime(2025, 6, 17, 0)),
        _snapshot("A", 3060, datetime(2025, 6, 18, 0)),
        _snapshot("A", 3001, datetime(2025, 6, 16, 0)),
    ]
    result = reducer.reduce(snapshots, now=NOW)

    assert result.total_count == 1
    assert len(result.items) == 1
    assert result.items[0].stuck_since == datetime(2025, 6, 18, 0)
    assert result.items[0].status_id == 3060


def test_equal_timestamps_tie_break_on_sequence(reducer):
    stamp = datetime(2025, 6, 18, 0)
    snapshots = [
        _snapshot("A", 3060, stamp, sequence=9),
        _snapshot("A", 3050, stamp, sequence=3),
    ]
    assert reducer.reduce(snapshots, now=NOW).items[0].status_id == 3060
    assert reducer.reduce(list(reversed(snapshots)), now=NOW).items[0].status_id == 3060


def test_ineligible_rows_are_excluded(reducer):
    old = datetime(2025, 6, 10)
    snapshots = [
        _snapshot("terminal", 6400, old),
        _snapshot("beyond-terminal", 7000, old),
        _snapshot("secondary", 3050, old, is_primary_component=False),
        _snapshot("default-threshold", 2000, old),
        _snapshot("between-ranges", 3950, old),
        _snapshot("no-created", 3050, old, order_created_at=None),
        _snapshot("too-old", 3050, old, order_created_at=datetime(2023, 6, 18, 12)),
        _snapshot("kept", 3050, old, order_created_at=datetime(2023, 6, 18, 12, 1)),
    ]
    result = reducer.reduce(snapshots, now=NOW)

    assert [view.order_id for view in result.items] == ["kept"]
    assert result.total_count == 1


def test_sorted_by_hours_desc_then_order_id(reducer):
    stamp = datetime(2025, 6, 18, 0)
    snapshots = [
        _snapshot("B", 3050, stamp),
        _snapshot("C", 3050, datetime(2025, 6, 17, 0)),
        _snapshot("A", 3050, stamp),
    ]
    result = reducer.reduce(snapshots, now=NOW)
    assert [view.order_id for view in result.items] == ["C", "A", "B"]


def test_pagination_and_total(reducer):
    snapshots = [
        _snapshot(f"O{index:02d}", 3050, NOW - timedelta(hours=7 + index)) for index in range(20)
    ]
    result = reducer.reduce(snapshots, pagination=Pagination(offset=10, limit=5), now=NOW)

    assert result.total_count == 20
    assert [view.hours_stuck for view in result.items] == [16, 15, 14, 13, 12]
    assert [view.order_id for view in result.items] == ["O09", "O08", "O07", "O06", "O05"]

    beyond = reducer.reduce(snapshots, pagination=Pagination(offset=40, limit=5), now=NOW)
    assert beyond.items == []
    assert beyond.total_count == 20


def test_filters_apply_after_dedup_and_keep_total(reducer):
    snapshots = [
        _snapshot("A", 3050, datetime(2025, 6, 18, 0)),
        _snapshot("B", 4001, datetime(2025, 6, 10, 0), status_name="SentToFacility"),
        _snapshot("C", 4010, datetime(2025, 6, 12, 0)),
    ]
    by_name = reducer.reduce(snapshots, StuckOrderFilters(status_name="  sentto "), now=NOW)
    assert [view.order_id for view in by_name.items] == ["B"]
    assert by_name.total_count == 3

    by_id = reducer.reduce(snapshots, StuckOrderFilters(status_id=4010), now=NOW)
    assert [view.order_id for view in by_id.items] == ["C"]

    by_hours = reducer.reduce(snapshots, StuckOrderFilters(min_hours=12, max_hours=60), now=NOW)
    assert [view.order_id for view in by_hours.items] == ["A"]


def test_invalid_queries_raise(reducer):
    with pytest.raises(InvalidQueryError):
        reducer.reduce([], StuckOrderFilters(min_hours=10, max_hours=5), now=NOW)
    with pytest.raises(InvalidQueryError):
        reducer.reduce([], pagination=Pagination(offset=-1), now=NOW)
    with pytest.raises(ValueError):
        reducer.reduce([], pagination=Pagination(limit=0), now=NOW)


def test_count_stuck_matches_distinct_orders(reducer):
    snapshots = [
        _snapshot("A", 3050, datetime(2025, 6, 17, 0)),
        _snapshot("A", 3060, datetime(2025, 6, 18, 0)),
        _snapshot("B", 3050, datetime(2025, 6, 18, 11)),
    ]
    assert reducer.count_stuck(snapshots, now=NOW) == 1


def test_years_before_clamps_leap_day():
    assert years_before(datetime(2024, 2, 29, 8), 2) == datetime(2022, 2, 28, 8)
    assert years_before(datetime(2025, 6, 18, 12), 2) == datetime(2023, 6, 18, 12)


def test_unranged_rows_skip_hours_calculation():
    calls = []

    class _CountingCalculator(ElapsedTimeCalculator):
        def elapsed_working_hours(self, start, end=None):
            calls.append(start)
            return super().elapsed_working_hours(start, end)

    reducer = SnapshotReducer(build_default_registry(), _CountingCalculator(BusinessCalendar()))
    snapshots = [
        _snapshot("default-threshold", 2000, datetime(2024, 1, 1)),
        _snapshot("between-ranges", 3950, datetime(2024, 1, 1)),
        _snapshot("prep", 3050, datetime(2025, 6, 18, 0)),
    ]

    result = reducer.reduce(snapshots, now=NOW)

    assert [view.order_id for view in result.items] == ["prep"]
    assert calls == [datetime(2025, 6, 18, 0)]
