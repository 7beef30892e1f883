"""Positional transaction assembly for PDF bank statements.

PDF statements have no column headers: a line holds a date, a free-text
narrative and one or more right-aligned amounts. Which amount is the
credit is decided from how many amounts the line carries:

- three or more: the second from the right (the balance is last)
- exactly two: the leftmost, but only when the narrative quotes a
  structured invoice reference
- fewer: the line is rejected
"""

import logging
import re
from typing import Iterable, Optional

from feerecon.config import reference_prefix
from feerecon.domain.entities import Transaction
from feerecon.domain.errors import ExtractionFailure
from feerecon.domain.normalizer import ParseResult
from feerecon.domain.reference_extractor import extract_reference
from feerecon.domain.source_reader import Glyph, PDFLine
from feerecon.utils.amount_parser import normalize_amount
from feerecon.utils.date_parser import normalize_date

logger = logging.getLogger(__name__)

MONTHS = (
    r"Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?"
)
DATE_PATTERN = re.compile(
    rf"\b(\d{{1,2}}\s+(?:{MONTHS})\s+\d{{4}}|\d{{1,2}}/\d{{1,2}}/\d{{4}}|\d{{1,2}}-\d{{1,2}}-\d{{4}}|\d{{4}}-\d{{2}}-\d{{2}})\b",
    re.IGNORECASE,
)
AMOUNT_TOKEN = re.compile(r"^\(?-?R?\s*\d{1,3}(?:[,\s]?\d{3})*\.\d{2}\)?(?:\s*(?:Cr|Dr))?$", re.IGNORECASE)

INBOUND_VOCABULARY = re.compile(
    r"deposit|payment|transfer in|eft in|credit|tuition|received|inward", re.IGNORECASE
)
OUTBOUND_VOCABULARY = re.compile(
    r"debit order|withdrawal|atm|transfer out|card transaction|bank charge", re.IGNORECASE
)

DEFAULT_DESCRIPTION = "Payment"


def structured_reference_pattern(prefix: Optional[str] = None) -> re.Pattern:
    """Pattern for invoice codes such as HAR149."""
    prefix = prefix or reference_prefix()
    return re.compile(rf"\b{re.escape(prefix)}\d+\b", re.IGNORECASE)


def amount_tokens(tokens: Iterable[Glyph]) -> list[Glyph]:
    """Currency-shaped tokens ordered left to right."""
    return sorted((t for t in tokens if AMOUNT_TOKEN.match(t.text.strip())), key=lambda t: t.x)


def select_credit_token(amounts: list[Glyph], has_structured_reference: bool) -> Glyph:
    """Apply the amount-count decision table.

    Raises:
        ExtractionFailure: When the line is too ambiguous to carry a credit
    """
    if len(amounts) >= 3:
        return amounts[-2]
    if len(amounts) == 2:
        if has_structured_reference:
            return amounts[0]
        raise ExtractionFailure("Two amounts without an invoice reference")
    raise ExtractionFailure("Not enough amounts on line")


def _narrative(text: str, date_text: str, amounts: list[Glyph]) -> str:
    narrative = text.replace(date_text, " ", 1)
    for token in amounts:
        narrative = narrative.replace(token.text.strip(), " ", 1)
    narrative = re.sub(r"\bR\b", " ", narrative)
    return " ".join(narrative.split())


def assemble_transaction(
    line: PDFLine, prefix: Optional[str] = None, line_number: Optional[int] = None
) -> Transaction:
    """Turn one reconstructed statement line into a credit transaction.

    Raises:
        ExtractionFailure: If the line is not an identifiable inbound payment
    """
    text = line.text
    date_match = DATE_PATTERN.search(text)
    if date_match is None:
        raise ExtractionFailure("No date on line")
    txn_date = normalize_date(date_match.group(1))
    if txn_date is None:
        raise ExtractionFailure(f"Unreadable date '{date_match.group(1)}'")

    if OUTBOUND_VOCABULARY.search(text):
        raise ExtractionFailure("Outbound transaction")

    code_match = structured_reference_pattern(prefix).search(text)
    if code_match is None and not INBOUND_VOCABULARY.search(text):
        raise ExtractionFailure("No invoice reference or payment wording")

    amounts = amount_tokens(line.tokens)
    credit = select_credit_token(amounts, code_match is not None)
    amount = normalize_amount(credit.text)
    if amount <= 0:
        raise ExtractionFailure("No positive amount found")

    description = _narrative(text, date_match.group(0), amounts) or DEFAULT_DESCRIPTION
    if code_match is not None:
        reference = code_match.group(0).upper()
    else:
        reference = extract_reference(None, description)
    if not reference:
        raise ExtractionFailure("No reference found")

    return Transaction(
        reference=reference,
        amount=amount,
        date=txn_date,
        description=description,
        raw={"page": line.page, "y": line.y, "text": text},
        line_number=line_number,
    )


def parse_lines(lines: Iterable[PDFLine], prefix: Optional[str] = None) -> ParseResult:
    """Assemble transactions from every line of a PDF statement."""
    result = ParseResult()
    for index, line in enumerate(lines, start=1):
        result.total_rows += 1
        if not line.text:
            result.skipped += 1
            continue
        try:
            result.transactions.append(assemble_transaction(line, prefix, index))
        except ExtractionFailure as e:
            logger.debug("Rejected PDF line %d (page %d): %s", index, line.page, e)
            result.rejected.append((index, str(e)))
    return result
