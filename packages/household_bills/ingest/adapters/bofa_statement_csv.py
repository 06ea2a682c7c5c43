"""Adapter for Bank of America checking-account statement CSV exports.

An export has two sections: a summary preamble and the transaction section
that starts at the header ``Date,Description,Amount,Running Bal.``::

    Description,,Summary Amt.
    Beginning balance as of 01/01/2025,,"3,210.55"
    Total credits,,"6,000.00"
    Total debits,,"-5,436.28"
    Ending balance as of 03/31/2025,,"3,774.27"

    Date,Description,Amount,Running Bal.
    01/01/2025,Beginning balance as of 01/01/2025,,"3,210.55"
    01/02/2025,"PGANDE DES:WEB ONLINE ID:XXXXX92231 INDN:TING, ANDREW","-142.18","3,068.37"
    01/03/2025,"Test simple transaction",-100.50,2967.87

Contract
--------
- A transaction line starts with an ``MM/DD/YYYY,`` token. Lines without it
  are statement metadata and are skipped, not reported.
- After the date come exactly three fields: description, amount, running
  balance. Any field may be double-quoted. Quoted fields may contain commas
  (``"TING, ANDREW"``, ``"-5,324.73"``) but never a double quote.
- Amount and balance are parsed as :class:`~decimal.Decimal` after stripping
  quotes and thousands separators.
- Balance-marker rows (``Beginning balance as of …``) carry no amount and are
  skipped like metadata.

Failure mode
------------
A dated line whose fields cannot be split or whose numbers do not parse
raises :class:`~household_bills.errors.ParseError` from
:func:`parse_statement_line`. :func:`parse_statement` collects those errors
and keeps going with the next line.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum, auto

from ...errors import ParseError
from ...logging_setup import get_logger
from ...models import ParsedStatement, StatementSummary, TransactionRecord

logger = get_logger("household_bills.ingest.bofa_statement_csv")

TRANSACTION_HEADER = "Date,Description,Amount,Running Bal."

_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4}),")
_BALANCE_MARKERS = ("beginning balance as of", "ending balance as of")
_BOM = "\ufeff"


# ---------------------------------------------------------------------------
# Field tokenizer
# ---------------------------------------------------------------------------


class _State(Enum):
    BEFORE_FIELD = auto()
    IN_QUOTED_FIELD = auto()
    AFTER_QUOTED_FIELD = auto()
    IN_UNQUOTED_FIELD = auto()


def split_fields(text: str) -> list[str]:
    """Split one comma-separated line into field values with quotes removed.

    Raises ``ValueError`` naming the problem when the quoting is malformed:
    an unterminated quoted field, a character other than a comma after a
    closing quote, or a quote inside an unquoted field.
    """

    fields: list[str] = []
    buf: list[str] = []
    state = _State.BEFORE_FIELD

    for pos, ch in enumerate(text):
        if state is _State.BEFORE_FIELD:
            if ch == '"':
                state = _State.IN_QUOTED_FIELD
            elif ch == ",":
                fields.append("")
            else:
                buf.append(ch)
                state = _State.IN_UNQUOTED_FIELD
        elif state is _State.IN_QUOTED_FIELD:
            if ch == '"':
                state = _State.AFTER_QUOTED_FIELD
            else:
                buf.append(ch)
        elif state is _State.AFTER_QUOTED_FIELD:
            if ch != ",":
                raise ValueError(f"unexpected {ch!r} after closing quote at column {pos + 1}")
            fields.append("".join(buf))
            buf = []
            state = _State.BEFORE_FIELD
        else:
            if ch == ",":
                fields.append("".join(buf))
                buf = []
                state = _State.BEFORE_FIELD
            elif ch == '"':
                raise ValueError(f"quote inside unquoted field at column {pos + 1}")
            else:
                buf.append(ch)

    if state is _State.IN_QUOTED_FIELD:
        raise ValueError("unterminated quoted field")
    fields.append("".join(buf))
    return fields


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def parse_amount(raw: str) -> Decimal:
    """Parse ``"-5,324.73"`` / ``-100.50`` style values into a finite Decimal."""

    cleaned = raw.replace('"', "").replace(",", "").strip()
    if not cleaned:
        raise ValueError("empty value")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {raw!r}") from exc
    if not value.is_finite():
        raise ValueError(f"not a finite number: {raw!r}")
    return value


def _is_balance_marker(description: str) -> bool:
    return description.strip().lower().startswith(_BALANCE_MARKERS)


# ---------------------------------------------------------------------------
# Transaction section
# ---------------------------------------------------------------------------


def parse_statement_line(line: str, *, line_no: int | None = None) -> TransactionRecord | None:
    """Parse one line of the transaction section.

    Returns ``None`` for lines that are not transactions (headers, preamble,
    footers, balance markers). Raises :class:`ParseError` for a dated line
    that is malformed.
    """

    m = _DATE_RE.match(line)
    if m is None:
        return None

    month, day, year = (int(g) for g in m.groups())
    try:
        posted = date(year, month, day)
    except ValueError as exc:
        raise ParseError(f"invalid date {m.group(0)[:-1]!r}", line=line, line_no=line_no) from exc

    try:
        fields = split_fields(line[m.end() :])
    except ValueError as exc:
        raise ParseError(str(exc), line=line, line_no=line_no) from exc

    description = fields[0]
    if _is_balance_marker(description):
        return None
    if len(fields) != 3:
        raise ParseError(
            f"expected description, amount and running balance; found {len(fields)} field(s)",
            line=line,
            line_no=line_no,
        )

    try:
        amount = parse_amount(fields[1])
    except ValueError as exc:
        raise ParseError(f"bad amount: {exc}", line=line, line_no=line_no) from exc
    try:
        running_balance = parse_amount(fields[2])
    except ValueError as exc:
        raise ParseError(f"bad running balance: {exc}", line=line, line_no=line_no) from exc

    return TransactionRecord(
        date=posted,
        description=description,
        amount=amount,
        running_balance=running_balance,
    )


def parse_statement(raw_text: str) -> ParsedStatement:
    """Parse a whole statement export into records and per-line errors.

    Both lists keep input order. A malformed line is logged, reported in
    ``errors`` and excluded; it never aborts the batch.
    """

    records: list[TransactionRecord] = []
    errors: list[ParseError] = []

    for line_no, line in enumerate(raw_text.removeprefix(_BOM).splitlines(), start=1):
        if not line.strip():
            continue
        try:
            record = parse_statement_line(line, line_no=line_no)
        except ParseError as err:
            logger.warning("Skipping malformed statement line %s", err)
            errors.append(err)
            continue
        if record is not None:
            records.append(record)

    logger.debug("Parsed %d record(s), %d error(s)", len(records), len(errors))
    return ParsedStatement(records, errors)


# ---------------------------------------------------------------------------
# Summary preamble
# ---------------------------------------------------------------------------

_SUMMARY_LABELS = (
    ("beginning balance as of", "beginning_balance"),
    ("total credits", "total_credits"),
    ("total debits", "total_debits"),
    ("ending balance as of", "ending_balance"),
)


def parse_statement_summary(raw_text: str) -> StatementSummary | None:
    """Read the summary preamble; ``None`` when the export has none."""

    values: dict[str, Decimal] = {}
    for line in raw_text.removeprefix(_BOM).splitlines():
        if line.strip() == TRANSACTION_HEADER:
            break
        try:
            fields = split_fields(line)
        except ValueError:
            continue
        label = fields[0].strip().lower()
        for prefix, attr in _SUMMARY_LABELS:
            if label.startswith(prefix):
                try:
                    values[attr] = parse_amount(fields[-1])
                except ValueError:
                    logger.warning("Unreadable summary value for %r: %r", fields[0], fields[-1])
                break

    if not values:
        return None
    return StatementSummary(**values)


def reconcile(summary: StatementSummary | None, records: Iterable[TransactionRecord]) -> Decimal | None:
    """Return summary net change minus the sum of parsed amounts.

    Zero means every transaction line made it through parsing. ``None`` when
    the summary lacks a beginning or ending balance.
    """

    if summary is None or summary.net_change is None:
        return None
    return summary.net_change - sum((r.amount for r in records), Decimal("0"))


__all__ = [
    "TRANSACTION_HEADER",
    "split_fields",
    "parse_amount",
    "parse_statement_line",
    "parse_statement",
    "parse_statement_summary",
    "reconcile",
]
