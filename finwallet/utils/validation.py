"""
Validation utilities
"""
import re
from decimal import Decimal, InvalidOperation

from finwallet.domain.errors import ValidationError


def normalize_decimal_input(value: str) -> str:
    """
    Нормализовать ввод суммы: заменить запятую на точку

    Example:
        >>> normalize_decimal_input("15,99")
        "15.99"
    """
    return value.strip().replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Валидация денежной суммы

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "Максимум 2 знака после запятой")
    """
    normalized = normalize_decimal_input(value)

    try:
        Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Некорректная сумма"

    pattern = rf"^-?\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"Максимум {max_decimal_places} знака после запятой"

    return True, None


def validate_and_normalize_amount(value: str, max_decimal_places: int = 2) -> str:
    """
    Валидировать и нормализовать сумму (raise exception при ошибке)

    Raises:
        ValidationError: если валидация не прошла
    """
    is_valid, error = validate_decimal_amount(value, max_decimal_places)
    if not is_valid:
        raise ValidationError(error)

    return normalize_decimal_input(value)


def parse_amount(value, positive: bool = True) -> Decimal:
    """
    Привести ввод (str / int / Decimal) к Decimal с не более чем 2 знаками.

    Raises:
        ValidationError: нечисло, > 2 знаков, либо <= 0 при positive=True
    """
    if isinstance(value, Decimal):
        amount = value
        if not amount.is_finite():
            raise ValidationError("Некорректная сумма")
        if amount != amount.quantize(Decimal("0.01")):
            raise ValidationError("Максимум 2 знака после запятой")
    else:
        amount = Decimal(validate_and_normalize_amount(str(value)))

    if positive and amount <= 0:
        raise ValidationError("Сумма должна быть больше нуля")
    return amount
