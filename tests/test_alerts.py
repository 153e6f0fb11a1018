from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import pytest

from order_monitor.alerts import AlertChannel, LoggingAlertChannel, render_alert_body, render_alert_subject
from order_monitor.config import AlertSettings
from order_monitor.detection import StatusCount, StuckOrderView, SummaryStats


def _summary() -> SummaryStats:
    return SummaryStats(
        total_stuck_orders=3,
        by_threshold_bucket={"prep": 2, "facility": 1},
        by_facility={"Alpha Print": 1},
        by_status_category={"Preparation": 2, "Facility": 1},
        top_statuses=[StatusCount(3050, "PreparationStarted", 2)],
        generated_at=datetime(2025, 6, 18, 12),
    )


def _views() -> list[StuckOrderView]:
    return [
        StuckOrderView(
            order_id=f"CO-{index}",
            order_number=str(index),
            status_id=3050,
            status_name="PreparationStarted",
            product_type="Photobook",
            stuck_since=datetime(2025, 6, 18),
            hours_stuck=12 - index,
            threshold_hours=6,
        )
        for index in range(3)
    ]


def test_subject_and_body():
    assert render_alert_subject(_summary(), "[Order Monitor]") == "[Order Monitor] 3 stuck orders detected"

    body = render_alert_body(_summary(), _views()[:1])
    assert body[:3] == ["Total stuck orders: 3", "Prep statuses: 2", "Facility statuses: 1"]
    assert "  Alpha Print: 1" in body
    assert body[-1] == "  - Order CO-0: PreparationStarted (3050), stuck for 12h (threshold 6h)"


def test_disabled_channel_does_not_dispatch(caplog):
    channel = LoggingAlertChannel(AlertSettings(enabled=False))
    with caplog.at_level(logging.WARNING):
        assert channel.send_stuck_orders_alert(_summary(), _views()) is False
    assert "ALERT" not in caplog.text


def test_enabled_channel_logs_sampled_orders(caplog):
    channel = LoggingAlertChannel(AlertSettings(recipients=["ops@example.com"], sample_size=2))
    with caplog.at_level(logging.WARNING, logger="order_monitor.alerts"):
        assert channel.send_stuck_orders_alert(_summary(), _views()) is True

    assert "ops@example.com" in caplog.text
    assert "Order CO-1" in caplog.text
    assert "Order CO-2" not in caplog.text


def test_test_alert_requires_recipient(caplog):
    channel = LoggingAlertChannel(AlertSettings(recipients=["ops@example.com"]))
    with pytest.raises(ValueError, match="email_required"):
        channel.send_test_alert("   ")

    with caplog.at_level(logging.INFO, logger="order_monitor.alerts"):
        channel.send_test_alert(" qa@example.com ")
    assert "qa@example.com" in caplog.text


def test_channel_missing_a_method_cannot_be_created():
    class _HalfChannel(AlertChannel):
        def send_test_alert(self, recipient):
            return None

    with pytest.raises(TypeError):
        _HalfChannel()
    with pytest.raises(TypeError):
        AlertChannel()
