"""Display helpers for CLI output."""

from decimal import Decimal


def format_currency(value: Decimal | float | int) -> str:
    """Abbreviate a currency amount: $1.2M, $3.4K, $950. Negatives keep the sign."""
    num = float(value)
    sign = "-" if num < 0 else ""
    num = abs(num)
    if num >= 1_000_000:
        return f"{sign}${num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{sign}${num / 1_000:.1f}K"
    return f"{sign}${num:.0f}"


def format_percentage(value: float) -> str:
    """Signed percentage with one decimal, e.g. +12.3%."""
    return f"{'+' if value > 0 else ''}{value:.1f}%"


def format_address(address: str | None) -> str:
    """Shorten an address to 0x4bfb...982e."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
