"""Relational schema and session factory - Imperative Shell.

SQLAlchemy models for the tables the engine reads and writes. Schema
provisioning belongs to the bootstrap tooling; ``create_tables`` exists
for that tooling and for tests.

All timestamps are stored as naive UTC.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current time as naive UTC, the storage convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage_time(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Declarative base for the hazard tables."""

    pass


class LocationRow(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class DisasterRow(Base):
    __tablename__ = "disasters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class AlertRuleRow(Base):
    """Threshold rule. location_id NULL means a global rule."""

    __tablename__ = "alert_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"),
    )
    disaster_id: Mapped[int] = mapped_column(
        ForeignKey("disasters.id", ondelete="CASCADE"), nullable=False,
    )
    weather_condition: Mapped[str] = mapped_column(String(50), nullable=False)
    threshold_value: Mapped[float] = mapped_column(Float, nullable=False)
    operator: Mapped[str] = mapped_column(String(2), nullable=False)
    severity_level: Mapped[str] = mapped_column(String(20), default="Medium", nullable=False)
    message_template: Mapped[Optional[str]] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class WeatherLogRow(Base):
    """Reading snapshot, with the strongest nearby quake if one was cached."""

    __tablename__ = "weather_logs"
    __table_args__ = (
        Index("ix_weather_logs_location_fetched", "location_id", "fetched_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), nullable=False,
    )
    data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    temperature: Mapped[Optional[float]] = mapped_column(Float)
    humidity: Mapped[Optional[float]] = mapped_column(Float)
    rain_sum: Mapped[Optional[float]] = mapped_column(Float)
    wind_speed: Mapped[Optional[float]] = mapped_column(Float)
    aqi: Mapped[Optional[float]] = mapped_column(Float)
    earthquake_magnitude: Mapped[Optional[float]] = mapped_column(Float)
    earthquake_id: Mapped[Optional[str]] = mapped_column(String(100))
    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class EarthquakeLogRow(Base):
    """Strongest nearby quake per location, one row per physical event."""

    __tablename__ = "earthquake_logs"
    __table_args__ = (
        UniqueConstraint("location_id", "usgs_id", name="uq_location_usgs"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), nullable=False,
    )
    magnitude: Mapped[float] = mapped_column(Float, nullable=False)
    usgs_id: Mapped[str] = mapped_column(String(100), nullable=False)
    is_manual: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class AlertRow(Base):
    """Alert history row. Deactivated, never deleted."""

    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_pair_active", "disaster_id", "location_id", "is_active"),
        Index("ix_alerts_external_location", "external_id", "location_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    disaster_id: Mapped[int] = mapped_column(
        ForeignKey("disasters.id", ondelete="CASCADE"), nullable=False,
    )
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    severity: Mapped[str] = mapped_column(String(50), default="Medium", nullable=False)
    source: Mapped[str] = mapped_column(String(50), default="System", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    external_id: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class SettingRow(Base):
    __tablename__ = "settings"

    setting_key: Mapped[str] = mapped_column(String(100), primary_key=True)
    setting_value: Mapped[Optional[str]] = mapped_column(String(255))


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine.

    In-memory SQLite gets a single shared connection so every session
    sees the same database.
    """
    kwargs: dict[str, Any] = {"echo": echo, "future": True}
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        kwargs["connect_args"] = {"check_same_thread": False}
        kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to an engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """Create all tables. Bootstrap and test use only."""
    Base.metadata.create_all(engine)
