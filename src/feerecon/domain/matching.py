"""Invoice matching cascade.

Each strategy is a pure function turning the extracted reference into a
search term (or None when it does not apply) plus the kind of ledger
lookup to run with it. Strategies are tried in order against open
invoices, oldest due date first; the first hit wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from feerecon.database.base import Database
from feerecon.domain.entities import Invoice, MatchLookup

logger = logging.getLogger(__name__)

MIN_CONTAINS_LENGTH = 3
MIN_NAME_LENGTH = 3
PAD_WIDTH = 3

_LETTERS_DIGITS = re.compile(r"^([A-Za-z]+)(\d+)$")
_NAME_ONLY = re.compile(r"^[A-Za-z\s]+$")


def exact_candidate(reference: str) -> Optional[str]:
    return reference


def padded_candidate(reference: str) -> Optional[str]:
    """HAR20 -> HAR020."""
    match = _LETTERS_DIGITS.match(reference)
    if match is None or len(match.group(2)) >= PAD_WIDTH:
        return None
    return match.group(1) + match.group(2).zfill(PAD_WIDTH)


def trimmed_candidate(reference: str) -> Optional[str]:
    """HAR020 -> HAR20; only when that changes the reference."""
    match = _LETTERS_DIGITS.match(reference)
    if match is None:
        return None
    trimmed = match.group(1) + (match.group(2).lstrip("0") or "0")
    return trimmed if trimmed != reference else None


def contains_candidate(reference: str) -> Optional[str]:
    return reference if len(reference) >= MIN_CONTAINS_LENGTH else None


def payer_name_candidate(reference: str) -> Optional[str]:
    name = " ".join(reference.split())
    if _NAME_ONLY.match(reference) and len(name) > MIN_NAME_LENGTH:
        return name
    return None


@dataclass(frozen=True)
class MatchStrategy:
    """One step of the cascade.

    ``needs_review`` flags heuristic strategies whose matches an operator
    should confirm.
    """

    name: str
    candidate: Callable[[str], Optional[str]]
    lookup: MatchLookup
    needs_review: bool = False


STRATEGIES: tuple[MatchStrategy, ...] = (
    MatchStrategy("exact", exact_candidate, MatchLookup.EXACT),
    MatchStrategy("zero_padded", padded_candidate, MatchLookup.EXACT),
    MatchStrategy("zero_trimmed", trimmed_candidate, MatchLookup.EXACT),
    MatchStrategy("contains", contains_candidate, MatchLookup.CONTAINS),
    MatchStrategy("payer_name", payer_name_candidate, MatchLookup.PAYER_NAME, needs_review=True),
)


@dataclass(frozen=True)
class InvoiceMatch:
    """An open invoice found for a reference, and how it was found."""

    invoice: Invoice
    strategy: str
    candidate: str
    needs_review: bool = False


class InvoiceMatcher:
    """Runs the cascade against the invoice ledger."""

    def __init__(self, db: Database, strategies: tuple[MatchStrategy, ...] = STRATEGIES):
        """Initialize matcher.

        Args:
            db: Database instance
            strategies: Ordered strategies to try
        """
        self.db = db
        self.strategies = strategies

    def match(self, reference: Optional[str]) -> Optional[InvoiceMatch]:
        """Find the open invoice a reference pays, or None."""
        reference = (reference or "").strip()
        if not reference:
            return None

        for strategy in self.strategies:
            candidate = strategy.candidate(reference)
            if candidate is None:
                continue
            logger.debug("Trying %s match for %r with %r", strategy.name, reference, candidate)
            invoices = self.db.find_open_invoices_by_reference(candidate, strategy.lookup)
            if invoices:
                return InvoiceMatch(
                    invoice=invoices[0],
                    strategy=strategy.name,
                    candidate=candidate,
                    needs_review=strategy.needs_review,
                )
        return None
