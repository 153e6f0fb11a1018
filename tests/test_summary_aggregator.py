from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import pytest

from order_monitor.detection import StuckOrderView, SummaryAggregator, build_default_registry

GENERATED_AT = datetime(2025, 6, 18, 12)


def _view(order_id: str, status_id: int, status_name: str, facility_name: str | None = None) -> StuckOrderView:
    return StuckOrderView(
        order_id=order_id,
        order_number=f"N-{order_id}",
        status_id=status_id,
        status_name=status_name,
        product_type="Photobook",
        stuck_since=datetime(2025, 6, 17),
        hours_stuck=36,
        threshold_hours=6,
        facility_name=facility_name,
    )


@pytest.fixture
def aggregator() -> SummaryAggregator:
    return SummaryAggregator(build_default_registry())


def test_threshold_buckets(aggregator):
    views = [
        _view("P1", 3050, "PreparationStarted"),
        _view("P2", 3050, "PreparationStarted"),
        _view("P3", 3001, "Initialized_New"),
        _view("F1", 4001, "SentToFacility", "Alpha Print"),
        _view("F2", 5805, "Quarantine at Facility"),
    ]
    summary = aggregator.summarize(views, 5, generated_at=GENERATED_AT)

    assert summary.total_stuck_orders == 5
    assert summary.by_threshold_bucket == {"prep": 3, "facility": 2}
    assert summary.generated_at == GENERATED_AT


def test_total_is_reported_as_given(aggregator):
    summary = aggregator.summarize([_view("P1", 3050, "PreparationStarted")], 4, generated_at=GENERATED_AT)
    assert summary.total_stuck_orders == 4


def test_facility_groups_only_facility_statuses(aggregator):
    views = [
        _view("P1", 3050, "PreparationStarted", "Alpha Print"),
        _view("F1", 4001, "SentToFacility", "Beta Books"),
        _view("F2", 4001, "SentToFacility", None),
        _view("F3", 4010, "FacilityOrderSubmissionError", "  "),
        _view("F4", 4010, "FacilityOrderSubmissionError", "Beta Books"),
        _view("F5", 4001, "SentToFacility", "Beta Books"),
    ]
    summary = aggregator.summarize(views, 6, generated_at=GENERATED_AT)

    assert list(summary.by_facility.items()) == [("Beta Books", 3), ("Unknown", 2)]
    assert [(item.facility, item.status_name, item.count) for item in summary.by_facility_and_status] == [
        ("Beta Books", "SentToFacility", 2),
        ("Beta Books", "FacilityOrderSubmissionError", 1),
        ("Unknown", "FacilityOrderSubmissionError", 1),
        ("Unknown", "SentToFacility", 1),
    ]


def test_status_categories(aggregator):
    views = [
        _view("P1", 3050, "PreparationStarted"),
        _view("F1", 4001, "SentToFacility"),
        _view("F2", 4010, "FacilityOrderSubmissionError"),
        _view("F3", 4010, "FacilityOrderSubmissionError"),
    ]
    summary = aggregator.summarize(views, 4, generated_at=GENERATED_AT)
    assert summary.by_status_category == {"Preparation": 1, "Facility": 1, "FacilityError": 2}


def test_top_statuses_limited_and_ranked(aggregator):
    registry = build_default_registry()
    statuses = [definition for definition in registry.prep_statuses()][:12]
    views = []
    for index, definition in enumerate(statuses):
        repeats = 3 if index == 5 else 1
        views.extend(
            _view(f"O{index}-{repeat}", definition.status_id, definition.name) for repeat in range(repeats)
        )
    summary = aggregator.summarize(views, len(views), generated_at=GENERATED_AT)

    assert len(summary.top_statuses) == 10
    assert summary.top_statuses[0].status_id == statuses[5].status_id
    assert summary.top_statuses[0].count == 3
    remaining_ids = [item.status_id for item in summary.top_statuses[1:]]
    assert remaining_ids == sorted(remaining_ids)


def test_empty_input(aggregator):
    summary = aggregator.summarize([], 0, generated_at=GENERATED_AT)

    assert summary.by_threshold_bucket == {"prep": 0, "facility": 0}
    assert summary.by_facility == {}
    assert summary.top_statuses == []
    assert summary.by_facility_and_status == []
