"""
Currency formatting for report output.

Formatting only — LedgerLens never converts between currencies.
"""

from __future__ import annotations

CURRENCY_INFO = {
    "USD": {"symbol": "$", "name": "US Dollar", "decimals": 2},
    "EUR": {"symbol": "€", "name": "Euro", "decimals": 2},
    "GBP": {"symbol": "£", "name": "British Pound", "decimals": 2},
    "CAD": {"symbol": "CA$", "name": "Canadian Dollar", "decimals": 2},
    "AUD": {"symbol": "A$", "name": "Australian Dollar", "decimals": 2},
    "JPY": {"symbol": "¥", "name": "Japanese Yen", "decimals": 0},
    "CHF": {"symbol": "CHF", "name": "Swiss Franc", "decimals": 2},
    "INR": {"symbol": "₹", "name": "Indian Rupee", "decimals": 2},
    "MXN": {"symbol": "MX$", "name": "Mexican Peso", "decimals": 2},
    "BRL": {"symbol": "R$", "name": "Brazilian Real", "decimals": 2},
    "KRW": {"symbol": "₩", "name": "South Korean Won", "decimals": 0},
    "SEK": {"symbol": "kr", "name": "Swedish Krona", "decimals": 2},
}


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format an amount with the currency's symbol and decimals.

    Negative amounts put the sign before the symbol (``-$1,200.00``).
    Unknown codes fall back to the code itself as the symbol.
    """
    info = CURRENCY_INFO.get(currency.upper(), {})
    symbol = info.get("symbol", currency.upper())
    decimals = info.get("decimals", 2)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a percentage value (``80.0`` -> ``80.0%``)."""
    return f"{value:.{decimals}f}%"
