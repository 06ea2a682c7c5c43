"""Public interface for the ``household_bills`` package.

Symbol re-exports only; no runtime logic lives here.
"""

from .api import (
    load_statement,
    match_and_split_bills,
    parse_statement,
    parse_statement_line,
    parse_statement_summary,
    reconcile,
    run_bills_from_csv,
    split_amount,
)
from .errors import ConfigurationError, ParseError
from .models import (
    BillKey,
    BillMatch,
    DuplicateWarning,
    MatchResult,
    MerchantPattern,
    ParsedStatement,
    PatternTable,
    StatementSummary,
    TransactionRecord,
)
from .tracking import extract_tracking_id, generate_tracking_id, parse_tracking_id

__all__ = [
    # API
    "parse_statement",
    "parse_statement_line",
    "parse_statement_summary",
    "reconcile",
    "load_statement",
    "match_and_split_bills",
    "split_amount",
    "run_bills_from_csv",
    # Models / types
    "TransactionRecord",
    "StatementSummary",
    "ParsedStatement",
    "MerchantPattern",
    "PatternTable",
    "BillKey",
    "BillMatch",
    "DuplicateWarning",
    "MatchResult",
    # Errors
    "ParseError",
    "ConfigurationError",
    # Tracking ids
    "generate_tracking_id",
    "extract_tracking_id",
    "parse_tracking_id",
]
