"""Utility functions for feerecon."""

from feerecon.utils.date_parser import parse_date, normalize_date
from feerecon.utils.amount_parser import parse_amount, normalize_amount, to_money

__all__ = ["parse_date", "normalize_date", "parse_amount", "normalize_amount", "to_money"]
