from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from order_monitor.detection import BusinessCalendar, ElapsedTimeCalculator, SnapshotReducer, build_default_registry
from order_monitor.storage import SnapshotGateway

NOW = datetime(2025, 6, 18, 12)


def _session_returning(rows):
    session = MagicMock()
    session.execute.return_value.all.return_value = rows
    return session


def test_fetch_candidate_snapshots_maps_rows():
    rows = [
        SimpleNamespace(
            id=41,
            co_number="CO-1",
            status=3050,
            last_updated_date=datetime(2025, 6, 18, 0),
            order_date=datetime(2025, 6, 1),
            is_primary_component=1,
            partner_code=17,
            order_number="100234",
            website_code="UK",
            status_name="PreparationStarted",
            product_type="Photobook",
            partner_name="Alpha Print",
        ),
        SimpleNamespace(
            id=42,
            co_number="CO-2",
            status=4001,
            last_updated_date=datetime(2025, 6, 10, 0),
            order_date=datetime(2025, 6, 1),
            is_primary_component=True,
            partner_code=None,
            order_number="100235",
            website_code=None,
            status_name="SentToFacility",
            product_type=None,
            partner_name=None,
        ),
    ]
    gateway = SnapshotGateway(_session_returning(rows))

    snapshots = gateway.fetch_candidate_snapshots(now=NOW)

    assert [snapshot.order_id for snapshot in snapshots] == ["CO-1", "CO-2"]
    first, second = snapshots
    assert first.status_id == 3050
    assert first.sequence == 41
    assert first.facility_code == "17"
    assert first.facility_name == "Alpha Print"
    assert first.region == "UK"
    assert first.is_primary_component is True
    assert second.facility_code is None
    assert second.product_type is None


def test_candidate_query_filters_terminal_and_lookback():
    session = _session_returning([])
    SnapshotGateway(session).fetch_candidate_snapshots(now=NOW, lookback_years=2, terminal_status_cutoff=6400)

    stmt = session.execute.call_args[0][0]
    sql = str(stmt)
    assert "OrderProductTracking" in sql
    assert "LEFT OUTER JOIN" in sql
    params = stmt.compile().params
    assert 6400 in params.values()
    assert datetime(2023, 6, 18, 12) in params.values()


def test_count_distinct_stuck_orders_uses_reducer():
    rows = [
        SimpleNamespace(id=1, co_number="A", status=3050, last_updated_date=datetime(2025, 6, 17), order_date=datetime(2025, 6, 1), is_primary_component=True),
        SimpleNamespace(id=2, co_number="A", status=3060, last_updated_date=datetime(2025, 6, 18), order_date=datetime(2025, 6, 1), is_primary_component=True),
        SimpleNamespace(id=3, co_number="B", status=3050, last_updated_date=datetime(2025, 6, 18, 11), order_date=datetime(2025, 6, 1), is_primary_component=True),
        SimpleNamespace(id=4, co_number="C", status=4001, last_updated_date=datetime(2025, 6, 2), order_date=datetime(2025, 6, 1), is_primary_component=True),
    ]
    reducer = SnapshotReducer(build_default_registry(), ElapsedTimeCalculator(BusinessCalendar()))
    gateway = SnapshotGateway(_session_returning(rows))

    assert gateway.count_distinct_stuck_orders(reducer, now=NOW) == 2


def test_fetch_history_maps_rows_in_query_order():
    rows = [
        SimpleNamespace(id=5, co_number="CO-1", status=3001, last_updated_date=datetime(2025, 6, 16, 9), is_primary_component=True, status_name="Initialized_New"),
        SimpleNamespace(id=6, co_number="CO-1", status=3050, last_updated_date=datetime(2025, 6, 16, 10), is_primary_component=True, status_name="PreparationStarted"),
    ]
    session = _session_returning(rows)

    history = SnapshotGateway(session).fetch_history("CO-1")

    assert [(entry.status_id, entry.status_name, entry.sequence) for entry in history] == [
        (3001, "Initialized_New", 5),
        (3050, "PreparationStarted", 6),
    ]
    assert "ORDER BY" in str(session.execute.call_args[0][0])
