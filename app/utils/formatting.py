# app/utils/formatting.py
from typing import Optional


def format_currency(value: Optional[float], symbol: str = "€") -> str:
    """Formats an amount the French way: 1 234,50 €"""
    if value is None:
        return ""
    text = f"{value:,.2f}".replace(",", " ").replace(".", ",")
    return f"{text} {symbol}"


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip('0').rstrip('.').replace(".", ",")
