"""SQLAlchemy models for the back-office order tracking tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base class."""


class ConsolidationOrder(Base):
    """Represents a customer order (consolidation order)."""

    __tablename__ = "ConsolidationOrder"

    co_number: Mapped[str] = mapped_column("CONumber", String(50), primary_key=True)
    order_number: Mapped[str | None] = mapped_column("orderNumber", String(50), nullable=True)
    website_code: Mapped[str | None] = mapped_column("websiteCode", String(20), nullable=True)


class TrackingStatus(Base):
    """Lookup of tracking status names."""

    __tablename__ = "luk_Tracking_Status"

    id: Mapped[int] = mapped_column("Tracking_Status_id", Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column("Tracking_Status_Name", String(100), nullable=True)


class MajorProductType(Base):
    """Lookup of major product types."""

    __tablename__ = "luk_MajorProductType"

    id: Mapped[int] = mapped_column("MProductTypeID", Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column("MajorProductTypeName", String(100), nullable=True)


class SnSpecification(Base):
    """Product specification linking a tracking row to its product type."""

    __tablename__ = "mas_SnSpecification"

    id: Mapped[int] = mapped_column("SnID", Integer, primary_key=True)
    master_product_type_id: Mapped[int | None] = mapped_column(
        "MasterProductTypeID", Integer, ForeignKey("luk_MajorProductType.MProductTypeID"), nullable=True
    )


class Partner(Base):
    """Fulfilment partner (facility)."""

    __tablename__ = "Partner_Master"

    id: Mapped[int] = mapped_column("PartnerID", Integer, primary_key=True)
    display_name: Mapped[str | None] = mapped_column("PartnerDisplayName", String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column("IsActive", Boolean, nullable=False, default=True)


class OrderProductTracking(Base):
    """One status-change row for an order component."""

    __tablename__ = "OrderProductTracking"

    id: Mapped[int] = mapped_column("OPT_ID", BigInteger, primary_key=True)
    co_number: Mapped[str] = mapped_column(
        "CONumber", String(50), ForeignKey("ConsolidationOrder.CONumber"), nullable=False
    )
    status: Mapped[int] = mapped_column(
        "Status", Integer, ForeignKey("luk_Tracking_Status.Tracking_Status_id"), nullable=False
    )
    last_updated_date: Mapped[datetime | None] = mapped_column("lastUpdatedDate", DateTime, nullable=True)
    is_primary_component: Mapped[bool] = mapped_column("isPrimaryComponent", Boolean, nullable=False, default=False)
    partner_code: Mapped[int | None] = mapped_column(
        "TPartnerCode", Integer, ForeignKey("Partner_Master.PartnerID"), nullable=True
    )
    sn_specification_id: Mapped[int | None] = mapped_column(
        "OPT_SnSpId", Integer, ForeignKey("mas_SnSpecification.SnID"), nullable=True
    )
    order_date: Mapped[datetime | None] = mapped_column("OrderDate", DateTime, nullable=True)
