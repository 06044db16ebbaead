"""Utility functions for budgetit."""

from budgetit.utils.date_parser import parse_iso_date, is_iso_date, add_months_clamped
from budgetit.utils.amount_parser import parse_minor_units, format_minor_units

__all__ = [
    "parse_iso_date",
    "is_iso_date",
    "add_months_clamped",
    "parse_minor_units",
    "format_minor_units",
]
