# ruff: noqa: I001
"""Household core tables: statement transactions and bill splits.

Revision ID: 0001_hb_core
Revises: None
Create Date: 2025-04-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_hb_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "hb_transactions",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("source_account", sa.String(), nullable=True),
        sa.Column("fingerprint_sha256", sa.CHAR(64), nullable=False),
        sa.Column("posted_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("running_balance", sa.Numeric(18, 2), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("fingerprint_sha256", name="uq_hb_transactions_fingerprint"),
    )
    op.create_index("ix_hb_transactions_posted_date", "hb_transactions", ["posted_date"])

    op.create_table(
        "hb_bill_splits",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("merchant_name", sa.String(), nullable=False),
        sa.Column("bill_type", sa.String(), nullable=True),
        sa.Column("bill_month", sa.Integer(), nullable=False),
        sa.Column("bill_year", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("split_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("occupant_count", sa.Integer(), nullable=False),
        sa.Column("tracking_id", sa.String(), nullable=False),
        sa.Column("transaction_fingerprint", sa.CHAR(64), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint(
            "merchant_name", "bill_month", "bill_year", name="uq_hb_bill_splits_merchant_month"
        ),
        sa.CheckConstraint("bill_month BETWEEN 1 AND 12", name="ck_hb_bill_splits_month"),
        sa.CheckConstraint("occupant_count >= 1", name="ck_hb_bill_splits_occupants"),
    )


def downgrade() -> None:
    op.drop_table("hb_bill_splits")
    op.drop_index("ix_hb_transactions_posted_date", table_name="hb_transactions")
    op.drop_table("hb_transactions")
