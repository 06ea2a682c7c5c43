"""Error taxonomy for ``household_bills``.

- ``ParseError``: one malformed statement line. Recoverable; ``parse_statement``
  collects these instead of raising so one bad line never aborts a batch.
- ``ConfigurationError``: invalid occupant count, empty or malformed pattern
  table, or a bad environment value. Fatal for the current invocation.

Duplicate bills are not errors; they are reported as
:class:`~household_bills.models.DuplicateWarning` values.
"""

from __future__ import annotations


class ParseError(ValueError):
    """A statement line that carries a date but cannot be turned into a record."""

    def __init__(self, reason: str, *, line: str, line_no: int | None = None) -> None:
        self.reason = reason
        self.line = line
        self.line_no = line_no
        where = f"line {line_no}" if line_no is not None else "line"
        super().__init__(f"{where}: {reason}: {line!r}")


class ConfigurationError(ValueError):
    """Invalid configuration; raised before any work so no partial output exists."""


__all__ = ["ParseError", "ConfigurationError"]
