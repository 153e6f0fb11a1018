"""Storage package exports."""

from .database import dispose_engine, get_engine, get_session_factory, session_scope
from .gateway import SnapshotGateway
from .models import (
    Base,
    ConsolidationOrder,
    MajorProductType,
    OrderProductTracking,
    Partner,
    SnSpecification,
    TrackingStatus,
)

__all__ = [
    "Base",
    "ConsolidationOrder",
    "MajorProductType",
    "OrderProductTracking",
    "Partner",
    "SnSpecification",
    "SnapshotGateway",
    "TrackingStatus",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
