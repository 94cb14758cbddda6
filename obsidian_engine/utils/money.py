"""Money rounding and formatting helpers"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_cents(amount: float) -> float:
    """Round a dollar amount to whole cents, half away from zero"""
    return float(Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def format_money(amount: float) -> str:
    """Format a dollar amount for display, e.g. 1234.5 -> "$1,234.50" """
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percent(ratio: float, decimals: int = 1) -> str:
    return f"{ratio * 100:.{decimals}f}%"
