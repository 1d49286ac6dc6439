from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    MappedAsDataclass,
    mapped_column,
)

from core.domain.health_status import HealthStatus


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _status_column(name: str) -> Any:
    return mapped_column(Enum(HealthStatus, native_enum=False, name=name, length=16))


class Base(MappedAsDataclass, DeclarativeBase):
    pass


class SiteModel(Base):
    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)

    name: Mapped[str] = mapped_column(String(255))
    subdomain: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    custom_domain: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    domain_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)


class ContentModel(Base):
    __tablename__ = "content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"), index=True)

    title: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(32), default="draft", index=True)


class ProductModel(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String(255))
    sku: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)

    category: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    subcategory: Mapped[Optional[str]] = mapped_column(String(255), default=None)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2, asdecimal=True), default=None)
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2, asdecimal=True), default=None)

    inventory_count: Mapped[int] = mapped_column(Integer, default=0)
    in_stock: Mapped[bool] = mapped_column(Boolean, default=True)
    stock_status: Mapped[Optional[str]] = mapped_column(String(32), default=None)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=_utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=_utc_now,
        server_default=func.now(),
        onupdate=_utc_now,
    )


class HealthCheckModel(Base):
    """Append-only; rows are never updated once written."""

    __tablename__ = "site_health_checks"
    __table_args__ = (Index("ix_site_health_checks_site_checked_at", "site_id", "checked_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"))
    checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    overall_status: Mapped[HealthStatus] = _status_column("overall_status")
    health_score: Mapped[int] = mapped_column(Integer)

    domain_status: Mapped[HealthStatus] = _status_column("domain_status")
    ssl_status: Mapped[HealthStatus] = _status_column("ssl_status")
    content_status: Mapped[HealthStatus] = _status_column("content_status")
    performance_status: Mapped[HealthStatus] = _status_column("performance_status")

    response_time_ms: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    uptime_24h: Mapped[float] = mapped_column(Float, default=100.0)

    issues: Mapped[list[dict[str, str]]] = mapped_column(JSON, default_factory=list)
    warnings: Mapped[list[dict[str, str]]] = mapped_column(JSON, default_factory=list)

    content_count: Mapped[int] = mapped_column(Integer, default=0)
    product_count: Mapped[int] = mapped_column(Integer, default=0)
    error_count_24h: Mapped[int] = mapped_column(Integer, default=0)

    scoring_version: Mapped[int] = mapped_column(Integer, default=1)
