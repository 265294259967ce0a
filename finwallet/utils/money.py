"""
Unified money formatting for the whole project.

Usage:
    from finwallet.utils.money import format_money

    format_money(15000, "BGN")     -> "15 000 лв."
    format_money(1200.50, "USD")   -> "1 200 USD"
    format_money2(15.99, "EUR")    -> "15.99 EUR"
"""
from decimal import Decimal

# Суффикс для BGN - «лв.», для остальных - ISO-код валюты
_CURRENCY_SUFFIX = {
    "BGN": "лв.",
}


def currency_label(code: str) -> str:
    """Человекочитаемый суффикс валюты."""
    return _CURRENCY_SUFFIX.get(code, code)


def format_money(amount, currency: str = "BGN", decimals: int = 0) -> str:
    """
    Отформатировать сумму с пробелами-разделителями тысяч и суффиксом валюты.

    Args:
        amount: число (int / float / Decimal / str)
        currency: ISO-код валюты (BGN, USD, EUR …)
        decimals: знаков после запятой (0 - целое, 2 - стотинки)
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    fmt = f"{{:,.{decimals}f}}"
    formatted = fmt.format(amount).replace(",", " ")
    return f"{formatted} {currency_label(currency)}"


def format_money2(amount, currency: str = "BGN") -> str:
    """Формат с 2 знаками после запятой (для балансов и подписок)."""
    return format_money(amount, currency, decimals=2)
