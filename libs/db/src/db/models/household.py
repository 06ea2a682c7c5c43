from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CHAR,
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: hb_transactions
# ---------------------------


class HbTransaction(Base):
    __tablename__ = "hb_transactions"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    source_account: Mapped[str | None] = mapped_column(String, nullable=True)
    # Natural key over (date, amount, description). The same statement line
    # imported twice, or from two overlapping exports, hashes identically.
    fingerprint_sha256: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)
    posted_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    running_balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )


# ---------------------------
# Derived: hb_bill_splits
# ---------------------------


class HbBillSplit(Base):
    """One bill split per merchant per calendar month.

    Rows are derived from ``hb_transactions`` and never updated in place; a
    correction deletes and re-derives the row from the source transaction.
    """

    __tablename__ = "hb_bill_splits"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    merchant_name: Mapped[str] = mapped_column(String, nullable=False)
    bill_type: Mapped[str | None] = mapped_column(String, nullable=True)
    bill_month: Mapped[int] = mapped_column(Integer, nullable=False)
    bill_year: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    split_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    occupant_count: Mapped[int] = mapped_column(Integer, nullable=False)
    tracking_id: Mapped[str] = mapped_column(String, nullable=False)
    transaction_fingerprint: Mapped[str] = mapped_column(CHAR(64), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        UniqueConstraint(
            "merchant_name", "bill_month", "bill_year", name="uq_hb_bill_splits_merchant_month"
        ),
        CheckConstraint("bill_month BETWEEN 1 AND 12", name="ck_hb_bill_splits_month"),
        CheckConstraint("occupant_count >= 1", name="ck_hb_bill_splits_occupants"),
    )


__all__ = [
    "Base",
    "HbTransaction",
    "HbBillSplit",
]
