"""Recurring-bill matching and even splitting across occupants.

:func:`match_and_split_bills` is pure: the merchant pattern table and any
persisted history arrive as arguments, and the result is a fresh
:class:`~household_bills.models.MatchResult`.

Rounding policy
---------------
Each share is ``total / occupants`` rounded half-up to the cent. Shares times
occupants may differ from the total by at most one cent per occupant; that
residual is absorbed by whoever paid the bill and is never redistributed.

Bills are debits
----------------
Only records with a negative amount are bills. A credit from a billing
merchant (a refund) is skipped before the pattern lookup, so it never claims
the month of the real bill.

Duplicate policy
----------------
At most one bill per ``(merchant, month, year)``. Records are visited by date
ascending; the earliest match is kept and each later one is reported as a
:class:`~household_bills.models.DuplicateWarning` for manual review. Keys in
``already_billed`` (bills persisted by earlier runs) are reported the same
way and produce no new match.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from .config import validate_occupant_count
from .errors import ConfigurationError
from .logging_setup import get_logger
from .models import (
    BillKey,
    BillMatch,
    DuplicateWarning,
    MatchResult,
    MerchantPattern,
    PatternTable,
    TransactionRecord,
)

logger = get_logger("household_bills.matching")

_CENT = Decimal("0.01")


def split_amount(total: Decimal, occupant_count: int) -> Decimal:
    """Return one occupant's share of ``total``, rounded half-up to cents."""

    n = validate_occupant_count(occupant_count)
    return (Decimal(total) / n).quantize(_CENT, rounding=ROUND_HALF_UP)


def as_pattern_table(
    pattern_table: PatternTable | Mapping[str, str] | Iterable[MerchantPattern],
) -> PatternTable:
    if isinstance(pattern_table, PatternTable):
        return pattern_table
    if isinstance(pattern_table, Mapping):
        return PatternTable.from_mapping(pattern_table)
    return PatternTable(pattern_table)


def match_and_split_bills(
    records: Iterable[TransactionRecord],
    pattern_table: PatternTable | Mapping[str, str] | Iterable[MerchantPattern],
    occupant_count: int,
    *,
    already_billed: Iterable[tuple[str, int, int]] = (),
) -> MatchResult:
    """Identify bill transactions and split each across ``occupant_count`` people.

    Parameters
    ----------
    records:
        Parsed statement records, in any order. Credits are ignored.
    pattern_table:
        A :class:`PatternTable`, a ``{substring: merchant_name}`` mapping
        (declaration order sets priority), or an iterable of
        :class:`MerchantPattern`.
    occupant_count:
        Number of people sharing each bill; must be an integer >= 1.
    already_billed:
        ``(merchant_name, bill_month, bill_year)`` keys billed by earlier
        runs.

    Raises
    ------
    ConfigurationError
        Invalid occupant count or empty pattern table. Raised before any
        record is examined.
    """

    n = validate_occupant_count(occupant_count)
    table = as_pattern_table(pattern_table)
    if len(table) == 0:
        raise ConfigurationError("pattern table is empty; no bills can be recognized")

    history = {BillKey(*k) for k in already_billed}
    kept: dict[BillKey, BillMatch] = {}
    matches: list[BillMatch] = []
    duplicates: list[DuplicateWarning] = []

    # sorted() is stable, so same-day records keep their statement order.
    for record in sorted(records, key=lambda r: r.date):
        # Refunds and other credits are never bills.
        if record.amount >= 0:
            continue
        pattern = table.match(record.description)
        if pattern is None:
            continue

        key = BillKey(pattern.merchant_name, record.date.month, record.date.year)
        if key in history:
            warning = DuplicateWarning(
                transaction=record,
                key=key,
                kept=None,
                reason=(
                    f"{key.merchant_name} for {key.bill_month:02d}/{key.bill_year} "
                    "was already billed in an earlier run"
                ),
            )
        elif key in kept:
            first = kept[key]
            warning = DuplicateWarning(
                transaction=record,
                key=key,
                kept=first,
                reason=(
                    f"second {key.merchant_name} bill in {key.bill_month:02d}/{key.bill_year}; "
                    f"keeping {first.transaction.date.isoformat()} "
                    f"({first.total_amount}), flagging {record.date.isoformat()} "
                    f"({abs(record.amount)})"
                ),
            )
        else:
            total = abs(record.amount)
            match = BillMatch(
                merchant_name=pattern.merchant_name,
                bill_month=record.date.month,
                bill_year=record.date.year,
                total_amount=total,
                split_amount=split_amount(total, n),
                occupant_count=n,
                transaction=record,
                bill_type=pattern.bill_type,
            )
            kept[key] = match
            matches.append(match)
            logger.debug(
                "Matched %r -> %s: %s split %d ways = %s",
                record.description,
                match.merchant_name,
                match.total_amount,
                n,
                match.split_amount,
            )
            continue

        logger.warning("Duplicate bill flagged for review: %s", warning.reason)
        duplicates.append(warning)

    return MatchResult(matches, duplicates)


__all__ = ["as_pattern_table", "match_and_split_bills", "split_amount"]
