"""
SQLAlchemy models for the strategy paywall.

Models:
- AccountModel: registered users, their role, subscription tier and billing linkage
- UsagePeriodModel: per-account, per-month set of viewed strategy ids
- StrategyModel: paywalled strategy records managed from the admin console
- SavedStrategyModel: strategies bookmarked by an account

Tables are created from these models by scripts/db_setup.py.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all paywall tables."""


class AccountModel(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), index=True)
    role: Mapped[Optional[str]] = mapped_column(String(32))
    subscription_tier: Mapped[Optional[str]] = mapped_column(String(64))

    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(128))
    stripe_status: Mapped[Optional[str]] = mapped_column(String(32))
    current_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, server_default=func.now()
    )


class UsagePeriodModel(Base):
    __tablename__ = "usage_periods"

    account_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    period_key: Mapped[str] = mapped_column(String(7), primary_key=True)
    viewed_resource_ids: Mapped[List[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default="[]"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )


class StrategyModel(Base):
    __tablename__ = "strategies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    win_rate: Mapped[Optional[float]] = mapped_column(Float)
    profit_factor: Mapped[Optional[float]] = mapped_column(Float)
    max_drawdown: Mapped[Optional[float]] = mapped_column(Float)
    trades: Mapped[Optional[int]] = mapped_column(Integer)
    tier: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    market: Mapped[Optional[str]] = mapped_column(String(128))
    timeframe: Mapped[Optional[str]] = mapped_column(String(64))
    asset_class: Mapped[Optional[str]] = mapped_column(String(64))
    risk_reward: Mapped[Optional[float]] = mapped_column(Float)
    expectancy: Mapped[Optional[float]] = mapped_column(Float)
    duration_months: Mapped[Optional[int]] = mapped_column(Integer)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    video_url: Mapped[Optional[str]] = mapped_column(Text)
    detailed_report_url: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, server_default=func.now()
    )


class SavedStrategyModel(Base):
    __tablename__ = "saved_strategies"

    account_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True
    )
    strategy_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("strategies.id", ondelete="CASCADE"), primary_key=True
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )


__all__ = [
    "Base",
    "AccountModel",
    "UsagePeriodModel",
    "StrategyModel",
    "SavedStrategyModel",
]
