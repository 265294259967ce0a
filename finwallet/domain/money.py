"""
Money primitive - exact Decimal arithmetic shared by the ledger and analytics.

Правила округления:
- суммы хранятся с 2 знаками (ROUND_HALF_EVEN только при сохранении);
- промежуточные суммы не округляются;
- проценты округляются ROUND_HALF_UP (0 знаков для долей категорий,
  2 знака для процента исполнения бюджета).
"""
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import Iterable

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Привести int / str / Decimal / float к Decimal без потери точности строки."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value) -> Decimal:
    """Final persisted representation: scale 2, banker's rounding."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def add(a, b) -> Decimal:
    return to_decimal(a) + to_decimal(b)


def subtract(a, b) -> Decimal:
    return to_decimal(a) - to_decimal(b)


def total(values: Iterable) -> Decimal:
    """Sum of amounts at full precision (never rounded)."""
    return sum((to_decimal(v) for v in values), ZERO)


def multiply_by_percent(amount, percent) -> Decimal:
    """amount * percent / 100, full precision."""
    return to_decimal(amount) * to_decimal(percent) / HUNDRED


def percent_of(value, total_value, places: int = 0):
    """
    Доля value от total_value в процентах.

    round_half_up(value * 100 / total, places). При total == 0 возвращает 0,
    деления на ноль не происходит.

    Returns:
        int при places == 0, иначе Decimal с заданным числом знаков
    """
    total_dec = to_decimal(total_value)
    if total_dec == 0:
        return 0 if places == 0 else ZERO.quantize(Decimal(1).scaleb(-places))

    raw = to_decimal(value) * HUNDRED / total_dec
    if places == 0:
        return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return raw.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def distribute_percents(values: list, total_value=None) -> list[int]:
    """
    Integer percent shares of ``values`` that always add up to 100.

    Each share starts as percent_of(); the rounding residue is then moved
    to the entries with the largest remainders (ties keep input order).
    Returns all zeros when the total is 0.
    """
    amounts = [to_decimal(v) for v in values]
    total_dec = total(amounts) if total_value is None else to_decimal(total_value)
    if not amounts or total_dec == 0:
        return [0] * len(amounts)

    shares = [percent_of(a, total_dec) for a in amounts]
    residue = 100 - sum(shares)
    if residue == 0:
        return shares

    exact = [a * HUNDRED / total_dec for a in amounts]
    # remainder relative to the already-rounded share
    deltas = [exact[i] - shares[i] for i in range(len(amounts))]
    step = 1 if residue > 0 else -1
    order = sorted(
        range(len(amounts)),
        key=lambda i: deltas[i],
        reverse=(step > 0),
    )
    for i in order[:abs(residue)]:
        shares[i] += step
    return shares
