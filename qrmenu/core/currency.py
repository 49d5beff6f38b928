"""Price formatting helpers. Prices are integers in the smallest currency unit."""

from typing import Optional

from qrmenu.core.config import get_settings


def format_price(price: int, symbol: Optional[str] = None) -> str:
    """
    Format a price the way the menu shows it.

    >>> format_price(15000, "Rp")
    'Rp 15.000'
    """
    if symbol is None:
        symbol = get_settings().currency_symbol
    sign = "-" if price < 0 else ""
    grouped = f"{abs(int(price)):,}".replace(",", ".")
    return f"{sign}{symbol} {grouped}"
