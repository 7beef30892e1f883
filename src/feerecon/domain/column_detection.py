"""Column role auto-detection for CSV bank statements."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from feerecon.domain.entities import COLUMN_ROLES, ColumnMapping
from feerecon.domain.errors import ValidationError

logger = logging.getLogger(__name__)

# Below this confidence the caller must confirm the mapping by hand.
MANUAL_MAPPING_THRESHOLD = 80

EXACT_SCORE = 10
CONTAINS_SCORE = 5

# Ordered per role; anchored patterns only ever score as exact matches.
ROLE_PATTERNS: dict[str, tuple[str, ...]] = {
    "reference": (
        r"^ref",
        r"reference",
        r"student",
        r"number",
        r"^id$",
        r"account.?number",
        r"customer.?ref",
        r"payee.?ref",
        r"narrative",
    ),
    "amount": (
        r"amount",
        r"value",
        r"sum",
        r"total",
        r"payment",
        r"debit",
        r"credit",
        r"transaction.?amount",
        r"credit.?amount",
        r"debit.?amount",
    ),
    "date": (
        r"date",
        r"time",
        r"when",
        r"transaction.?date",
        r"payment.?date",
        r"value.?date",
        r"posting.?date",
    ),
    "description": (
        r"desc",
        r"note",
        r"comment",
        r"detail",
        r"memo",
        r"narrative",
        r"particulars",
        r"remarks",
    ),
    "debit": (r"debit", r"^dr$", r"withdrawal", r"money.?out", r"debit.?amount", r"expense"),
    "credit": (r"credit", r"^cr$", r"deposit", r"money.?in", r"credit.?amount", r"income"),
    "balance": (r"balance", r"running.?balance", r"available.?balance"),
}

REQUIRED_ROLE_WEIGHTS = {"reference": 10, "amount": 10, "date": 10}
DESCRIPTION_WEIGHT = 5
DEBIT_CREDIT_WEIGHT = 5


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of header analysis.

    ``roles`` holds every role that could be assigned; ``mapping`` is the
    validated ColumnMapping built from them, or None when the assignment is
    not usable without manual completion.
    """

    roles: dict[str, str]
    confidence: int
    mapping: Optional[ColumnMapping] = None
    scores: dict[str, int] = field(default_factory=dict)

    @property
    def needs_manual_mapping(self) -> bool:
        return self.mapping is None or self.confidence < MANUAL_MAPPING_THRESHOLD


def _normalize(text: str) -> str:
    return re.sub(r"[\s_\-]+", " ", text.strip().lower())


def _literal(pattern: str) -> str:
    return re.sub(r"[^a-z]", "", pattern)


def score_header(header: str, role: str) -> int:
    """Best score of a header against a role's patterns.

    An exact normalized match scores 10, a pattern hit inside the header
    scores 5, anything else 0.
    """
    normalized = _normalize(header)
    compact = normalized.replace(" ", "")
    best = 0
    for pattern in ROLE_PATTERNS[role]:
        if compact == _literal(pattern):
            return EXACT_SCORE
        if re.search(pattern, normalized) or re.search(pattern, compact):
            best = max(best, CONTAINS_SCORE)
    return best


def detect_columns(headers: list[str]) -> DetectionResult:
    """Assign statement columns to semantic roles.

    Roles are resolved in priority order; each takes its highest-scoring
    header not already used by an earlier role, the first header winning
    ties. When both debit and credit resolve, the amount assignment is
    dropped in favour of separate-column mode.
    """
    roles: dict[str, str] = {}
    scores: dict[str, int] = {}
    used: set[str] = set()
    split_mode = _has_debit_credit_pair(headers)

    for role in COLUMN_ROLES:
        if role == "amount" and split_mode:
            continue
        best_header = None
        best_score = 0
        for header in headers:
            if header in used:
                continue
            score = score_header(header, role)
            if score > best_score:
                best_header, best_score = header, score
        if best_header is not None:
            roles[role] = best_header
            scores[role] = best_score
            used.add(best_header)

    if "debit" in roles and "credit" in roles:
        roles.pop("amount", None)
        scores.pop("amount", None)

    confidence = mapping_confidence(roles)
    try:
        mapping = ColumnMapping.from_roles(roles)
    except ValidationError as e:
        logger.debug("Detected roles do not form a usable mapping: %s", e)
        mapping = None

    logger.debug("Auto-detected column mapping %s (confidence %d%%)", roles, confidence)
    return DetectionResult(roles=roles, confidence=confidence, mapping=mapping, scores=scores)


def _has_debit_credit_pair(headers: list[str]) -> bool:
    """True when distinct headers can fill the debit and credit roles."""
    debit = [h for h in headers if score_header(h, "debit")]
    credit = [h for h in headers if score_header(h, "credit")]
    return any(d != c for d in debit for c in credit)


def mapping_confidence(roles: dict[str, Optional[str]]) -> int:
    """Percentage of weighted roles satisfied by an assignment.

    Reference, amount and date weigh 10 each; description and a complete
    debit/credit pair each add 5 to both the score and the maximum. A
    debit/credit pair earns only its own bonus, never the amount weight,
    so split-column assignments always stay below the manual threshold.
    """
    score = 0
    max_score = 0
    has_split = bool(roles.get("debit")) and bool(roles.get("credit"))

    for role, weight in REQUIRED_ROLE_WEIGHTS.items():
        max_score += weight
        if roles.get(role):
            score += weight

    if roles.get("description"):
        score += DESCRIPTION_WEIGHT
        max_score += DESCRIPTION_WEIGHT

    if has_split:
        score += DEBIT_CREDIT_WEIGHT
        max_score += DEBIT_CREDIT_WEIGHT

    return round(score * 100 / max_score)
