"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the household domain models used by ``household_bills``.
"""

from .household import Base, HbBillSplit, HbTransaction

__all__ = [
    "Base",
    "HbBillSplit",
    "HbTransaction",
]
