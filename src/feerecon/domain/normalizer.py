"""Transaction normalization for tabular statement rows."""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping

from feerecon.domain.entities import ColumnMapping, Transaction
from feerecon.domain.errors import ExtractionFailure
from feerecon.domain.reference_extractor import extract_reference
from feerecon.utils.amount_parser import normalize_amount
from feerecon.utils.date_parser import normalize_date

logger = logging.getLogger(__name__)

HEADER_VOCABULARY = ("reference", "amount", "date", "description", "balance", "debit", "credit")
SUMMARY_VOCABULARY = re.compile(r"balance|total|summary|opening|closing", re.IGNORECASE)


@dataclass
class ParseResult:
    """Transactions extracted from a statement plus diagnostics.

    ``skipped`` counts empty, repeated-header and balance/summary rows.
    ``rejected`` lists ``(line_number, reason)`` for rows that reached
    extraction but had no usable reference or positive amount.
    """

    transactions: list[Transaction] = field(default_factory=list)
    skipped: int = 0
    rejected: list[tuple[int, str]] = field(default_factory=list)
    total_rows: int = 0


def should_skip_row(row: Mapping[str, str]) -> bool:
    """Whether a raw row is not a transaction at all.

    Empty rows, repeated header rows (three or more header words) and
    balance or summary rows are skipped.
    """
    values = [str(v).strip() for v in row.values() if v is not None and str(v).strip()]
    if not values:
        return True

    row_text = " ".join(values).lower()
    header_hits = sum(1 for word in HEADER_VOCABULARY if word in row_text)
    if header_hits >= 3:
        return True

    return bool(SUMMARY_VOCABULARY.search(row_text))


def resolve_date(value: str | None, line_number: int | None = None) -> tuple[date, bool]:
    """Return ``(date, inferred)``; unparseable dates fall back to today."""
    parsed = normalize_date(value)
    if parsed is not None:
        return parsed, False
    logger.warning(
        "Could not parse date %r on line %s, using today's date", value, line_number
    )
    return date.today(), True


def extract_transaction(
    row: Mapping[str, str], mapping: ColumnMapping, line_number: int | None = None
) -> Transaction:
    """Build a normalized transaction from a raw row.

    In debit/credit mode only the credit column is read: the reconciler
    only accepts money coming in.

    Raises:
        ExtractionFailure: If the row has no reference or no positive amount
    """

    def value(column: str | None) -> str:
        if not column:
            return ""
        return (row.get(column) or "").strip()

    description = value(mapping.description)
    if mapping.reference:
        reference = extract_reference(value(mapping.reference), description)
    else:
        reference = extract_reference(None, description)
    if not reference:
        raise ExtractionFailure("No reference found")

    if mapping.is_debit_credit:
        amount = normalize_amount(value(mapping.credit))
    else:
        amount = normalize_amount(value(mapping.amount))
    if amount <= Decimal("0"):
        raise ExtractionFailure("No positive amount found")

    txn_date, inferred = resolve_date(value(mapping.date), line_number)

    return Transaction(
        reference=reference,
        amount=amount,
        date=txn_date,
        description=description,
        raw=dict(row),
        line_number=line_number,
        date_inferred=inferred,
    )


def parse_rows(rows, mapping: ColumnMapping) -> ParseResult:
    """Filter and normalize ``(line_number, row)`` pairs from a CSV source."""
    result = ParseResult()
    for line_number, row in rows:
        result.total_rows += 1
        if should_skip_row(row):
            result.skipped += 1
            logger.debug("Skipping non-transaction row %d: %s", line_number, row)
            continue
        try:
            result.transactions.append(extract_transaction(row, mapping, line_number))
        except ExtractionFailure as e:
            logger.debug("Rejected row %d: %s", line_number, e)
            result.rejected.append((line_number, str(e)))
    return result
