"""Payer reference extraction from statement fields.

Rules are plain functions tried in order; the first one returning a value
wins. Extraction never raises: a missing reference is an expected outcome
and is reported as None.
"""

import re
from typing import Callable, Optional

ReferenceRule = Callable[[str], Optional[str]]

ACCOUNT_NUMBER = re.compile(r"\b\d{6,8}\b")
STRUCTURED_REFERENCE = re.compile(r"\b[A-Z]{2,4}\d{2,6}\b", re.IGNORECASE)
KEYWORD_TOKEN = re.compile(r"\b(?:reference|ref|student|id|number)\b[\s:#.\-]*([a-z0-9]+)", re.IGNORECASE)
NAME_BEFORE_GRADE = re.compile(r"([A-Za-z][A-Za-z\s]+?)\s+(?:grade|class|gr)\b\.?", re.IGNORECASE)


def account_number(text: str) -> Optional[str]:
    """A 6-8 digit run, read as a student or account number."""
    match = ACCOUNT_NUMBER.search(text)
    return match.group(0) if match else None


def structured_reference(text: str) -> Optional[str]:
    """A 2-4 letter prefix followed by 2-6 digits, e.g. HAR149."""
    match = STRUCTURED_REFERENCE.search(text)
    return match.group(0) if match else None


def keyword_token(text: str) -> Optional[str]:
    """The token following a ref/student/id/number keyword."""
    match = KEYWORD_TOKEN.search(text)
    return match.group(1) if match else None


def payer_name(text: str) -> Optional[str]:
    """Letters preceding a grade or class marker, read as a payer name."""
    match = NAME_BEFORE_GRADE.search(text)
    if match is None:
        return None
    name = " ".join(match.group(1).split())
    return name if len(name) >= 2 else None


REFERENCE_RULES: tuple[ReferenceRule, ...] = (
    account_number,
    structured_reference,
    keyword_token,
    payer_name,
)


def extract_reference(reference: Optional[str], description: Optional[str] = None) -> Optional[str]:
    """Pull a candidate payer reference out of raw statement fields.

    Args:
        reference: Raw value of the reference column, if the statement has one
        description: Raw free-text description

    Returns:
        The first rule hit over the combined text; otherwise the raw
        reference, or the raw description when there is no reference.
        None when both inputs are empty.
    """
    reference = (reference or "").strip()
    description = (description or "").strip()
    combined = f"{reference} {description}".strip()
    if not combined:
        return None

    for rule in REFERENCE_RULES:
        candidate = rule(combined)
        if candidate:
            return candidate.strip()

    return reference or description
