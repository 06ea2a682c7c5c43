"""Data models for ``household_bills``.

Records parsed from a statement and everything derived from them are frozen
dataclasses: a derived :class:`BillMatch` is never patched in place, it is
re-derived from its source :class:`TransactionRecord`. Merchant patterns are
pydantic models because they arrive from configuration files and need
validation at the boundary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import ParseError
from .tracking import generate_tracking_id

# ---------------------------------------------------------------------------
# Parsed statement rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """One transaction line of a bank statement export.

    ``amount`` is signed: negative for debits (expenses), positive for
    credits. ``running_balance`` is informational and unused by bill logic.
    """

    date: date
    description: str
    amount: Decimal
    running_balance: Decimal


@dataclass(frozen=True, slots=True)
class StatementSummary:
    """Totals from the summary preamble above the transaction section.

    Any value may be ``None`` when the export omits that row.
    """

    beginning_balance: Decimal | None = None
    total_credits: Decimal | None = None
    total_debits: Decimal | None = None
    ending_balance: Decimal | None = None

    @property
    def net_change(self) -> Decimal | None:
        if self.beginning_balance is None or self.ending_balance is None:
            return None
        return self.ending_balance - self.beginning_balance


class ParsedStatement(NamedTuple):
    records: list[TransactionRecord]
    errors: list[ParseError]


# ---------------------------------------------------------------------------
# Merchant patterns
# ---------------------------------------------------------------------------


class MerchantPattern(BaseModel):
    """A case-insensitive description substring mapped to a canonical merchant.

    Lower ``priority`` values are checked first so overlapping patterns
    resolve deterministically.
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True, str_strip_whitespace=True)

    pattern: str
    merchant_name: str
    priority: int = 100
    bill_type: str | None = None

    @field_validator("pattern", "merchant_name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @field_validator("bill_type")
    @classmethod
    def _normalize_bill_type(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.lower() or None

    def matches(self, description: str) -> bool:
        return self.pattern.casefold() in description.casefold()


class PatternTable:
    """An immutable, priority-ordered set of :class:`MerchantPattern`.

    Patterns sharing a priority keep their declaration order.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[MerchantPattern | Mapping[str, object]] = ()) -> None:
        items = [
            p if isinstance(p, MerchantPattern) else MerchantPattern.model_validate(p)
            for p in patterns
        ]
        ordered = sorted(enumerate(items), key=lambda pair: (pair[1].priority, pair[0]))
        self._patterns: tuple[MerchantPattern, ...] = tuple(p for _, p in ordered)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> PatternTable:
        """Build a table from ``{substring: merchant_name}``; order sets priority."""

        return cls(
            MerchantPattern(pattern=needle, merchant_name=name, priority=i)
            for i, (needle, name) in enumerate(mapping.items())
        )

    def match(self, description: str) -> MerchantPattern | None:
        """Return the first pattern (by priority) contained in ``description``."""

        for p in self._patterns:
            if p.matches(description):
                return p
        return None

    def __iter__(self) -> Iterator[MerchantPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"PatternTable({list(self._patterns)!r})"


# ---------------------------------------------------------------------------
# Bill matches
# ---------------------------------------------------------------------------


class BillKey(NamedTuple):
    """Identity of a bill: at most one split per merchant per month."""

    merchant_name: str
    bill_month: int
    bill_year: int


@dataclass(frozen=True, slots=True)
class BillMatch:
    """A transaction recognized as a recurring bill, split across occupants."""

    merchant_name: str
    bill_month: int
    bill_year: int
    total_amount: Decimal
    split_amount: Decimal
    occupant_count: int
    transaction: TransactionRecord
    bill_type: str | None = None

    @property
    def key(self) -> BillKey:
        return BillKey(self.merchant_name, self.bill_month, self.bill_year)

    @property
    def shares(self) -> tuple[Decimal, ...]:
        """One split amount per occupant."""

        return (self.split_amount,) * self.occupant_count

    @property
    def residual(self) -> Decimal:
        """Collected minus billed; the issuer absorbs this rounding difference."""

        return self.split_amount * self.occupant_count - self.total_amount

    @property
    def tracking_id(self) -> str:
        return generate_tracking_id(
            self.bill_month, self.bill_year, self.bill_type or self.merchant_name
        )


@dataclass(frozen=True, slots=True)
class DuplicateWarning:
    """A bill transaction whose merchant/month was already billed.

    ``kept`` is the match retained from the same batch, or ``None`` when the
    key was billed by an earlier run (persisted history).
    """

    transaction: TransactionRecord
    key: BillKey
    kept: BillMatch | None
    reason: str


class MatchResult(NamedTuple):
    matches: list[BillMatch]
    duplicates: list[DuplicateWarning]


__all__ = [
    "TransactionRecord",
    "StatementSummary",
    "ParsedStatement",
    "MerchantPattern",
    "PatternTable",
    "BillKey",
    "BillMatch",
    "DuplicateWarning",
    "MatchResult",
]
