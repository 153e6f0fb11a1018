"""Router exports."""

from . import alerts, orders

__all__ = ["alerts", "orders"]
