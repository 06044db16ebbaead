"""Amount parsing utilities."""

import re
from decimal import Decimal

_USD_PATTERN = re.compile(r"^-?\d+(\.\d{1,2})?$", re.ASCII)


def parse_minor_units(amount: str | int | float | Decimal) -> int:
    """Parse a USD amount into integer minor units (cents).

    Handles these formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "100" (whole dollars)
    - "1.5" (one decimal digit, read as 1.50)

    Thousands separators, other currency symbols and more than two decimal
    digits are rejected rather than guessed at.

    Args:
        amount: Amount string, or a number as read from a spreadsheet cell

    Returns:
        Amount in cents. Negative amounts are returned as negative cents;
        callers decide whether they are acceptable.

    Raises:
        ValueError: If the amount cannot be parsed
    """
    if isinstance(amount, (int, float, Decimal)) and not isinstance(amount, bool):
        text = f"{Decimal(str(amount)):.2f}"
    else:
        text = str(amount).strip()
        if text.startswith("$"):
            text = text[1:]

    if not _USD_PATTERN.match(text):
        raise ValueError(f"Invalid USD amount: '{amount}'")

    negative = text.startswith("-")
    whole, _, fractional = text.lstrip("-").partition(".")
    cents = int(whole) * 100 + int((fractional + "00")[:2])
    return -cents if negative else cents


def format_minor_units(amount_minor: int) -> str:
    """Format integer cents for display, e.g. 123456 -> "$1,234.56"."""
    sign = "-" if amount_minor < 0 else ""
    dollars, cents = divmod(abs(amount_minor), 100)
    return f"{sign}${dollars:,}.{cents:02d}"
