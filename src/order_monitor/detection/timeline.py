"""Per-order status timeline reconstruction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .calendar import ElapsedTimeCalculator, utcnow
from .reducer import TrackingSnapshot
from .statuses import StatusRegistry


@dataclass
class StatusInterval:
    status_id: int
    status_name: str
    entered_at: datetime
    duration_label: str
    duration_minutes: Optional[int] = None
    hours_from_now: Optional[int] = None
    is_stuck: bool = False

    @property
    def is_current(self) -> bool:
        return self.duration_minutes is None


def format_duration(minutes: int) -> str:
    """Render a closed interval as ``"45m"`` or ``"3h 5m"``."""

    if minutes < 60:
        return f"{minutes}m"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m"


def format_open_label(hours: int, stuck: bool) -> str:
    return f"{hours}h+ (STUCK)" if stuck else f"{hours}h (Current)"


class TimelineBuilder:
    """Folds one order's status history into intervals.

    Closed intervals run to the next status's entry time and are never stuck.
    The final, open interval is stuck when its elapsed working hours exceed
    the status threshold, including statuses on the default threshold.
    """

    def __init__(self, registry: StatusRegistry, calculator: ElapsedTimeCalculator) -> None:
        self.registry = registry
        self.calculator = calculator

    def build_timeline(
        self,
        order_id: str,
        snapshots: Iterable[TrackingSnapshot],
        *,
        now: Optional[datetime] = None,
    ) -> list[StatusInterval]:
        now = now or utcnow()
        entries = [
            snapshot
            for snapshot in snapshots
            if snapshot.order_id == order_id and snapshot.is_primary_component and snapshot.timestamp is not None
        ]
        entries.sort(key=lambda snapshot: (snapshot.timestamp, snapshot.sequence))

        intervals: list[StatusInterval] = []
        for index, entry in enumerate(entries):
            name = entry.status_name or self.registry.name_for(entry.status_id)
            if index + 1 < len(entries):
                delta = entries[index + 1].timestamp - entry.timestamp
                minutes = int(delta.total_seconds()) // 60
                intervals.append(
                    StatusInterval(
                        status_id=entry.status_id,
                        status_name=name,
                        entered_at=entry.timestamp,
                        duration_label=format_duration(minutes),
                        duration_minutes=minutes,
                    )
                )
                continue

            hours_from_now = self.calculator.elapsed_working_hours(entry.timestamp, now)
            stuck = hours_from_now > self.registry.threshold_for(entry.status_id)
            intervals.append(
                StatusInterval(
                    status_id=entry.status_id,
                    status_name=name,
                    entered_at=entry.timestamp,
                    duration_label=format_open_label(hours_from_now, stuck),
                    hours_from_now=hours_from_now,
                    is_stuck=stuck,
                )
            )
        return intervals
