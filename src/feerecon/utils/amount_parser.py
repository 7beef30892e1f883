"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")

_CURRENCY_SYMBOLS = re.compile(r"[R$€£¥₹]")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a value to two decimal places (half-up)."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R123.45", "$123.45"
    - "-123.45"
    - "1,234.56", "1 234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Statement suffixes: "500.00 Cr" / "500.00Dr"
    suffix = re.search(r"\s*(cr|dr)$", amount_str, re.IGNORECASE)
    if suffix:
        is_negative = is_negative or suffix.group(1).lower() == "dr"
        amount_str = amount_str[: suffix.start()]

    amount_str = _CURRENCY_SYMBOLS.sub("", amount_str)

    # Thousands separators and inner spaces
    amount_str = re.sub(r"[,\s]", "", amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if is_negative:
        amount = -amount
    return to_money(amount)


def normalize_amount(value: str | None) -> Decimal:
    """Return the positive magnitude of a statement amount, or 0.

    Sign carries no meaning for statement amounts: direction comes from the
    column or token position the value was read from. Empty and
    non-numeric values yield zero so the row is later discarded.
    """
    if value is None:
        return Decimal("0.00")
    try:
        return abs(parse_amount(str(value)))
    except ValueError:
        return Decimal("0.00")
