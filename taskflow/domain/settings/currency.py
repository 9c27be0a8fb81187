"""Supported currencies and amount formatting"""

from typing import Optional

CURRENCIES = {
    "DKK": "kr",
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "SEK": "kr",
    "NOK": "kr",
    "CHF": "Fr",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
}

POSITIONS = ("before", "after")

DEFAULT_CURRENCY_CODE = "DKK"
DEFAULT_POSITION = "after"


def is_supported(code: Optional[str]) -> bool:
    return bool(code) and code.upper() in CURRENCIES


def normalize_code(code: str) -> str:
    """Uppercase and validate a currency code; raises ValueError for unknown codes"""
    normalized = code.strip().upper()
    if normalized not in CURRENCIES:
        raise ValueError(
            f"Unsupported currency '{code}'. Supported: {', '.join(CURRENCIES)}"
        )
    return normalized


def currency_symbol(code: str) -> str:
    return CURRENCIES[normalize_code(code)]


def format_amount(amount: float, symbol: str, position: str = DEFAULT_POSITION) -> str:
    """
    Format an amount with two decimals in Danish grouping (1.234,56)
    and place the symbol before or after it without a space.

    >>> format_amount(1234.5, "kr")
    '1.234,50kr'
    >>> format_amount(99, "€", "before")
    '€99,00'
    """
    formatted = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    if round(amount, 2) < 0:
        formatted = f"-{formatted}"

    if position == "before":
        return f"{symbol}{formatted}"
    return f"{formatted}{symbol}"
