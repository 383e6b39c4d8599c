"""
Price Model — Constrained Bonding Curve Prices

Мгновенная цена опции i:

    price_i = supply_i * SCALE / (total_supply + k)

При k > 0:
- price_i < SCALE (строго меньше 1.0) в любом достижимом состоянии
- Σ price_i = total_supply * SCALE / (total_supply + k) <= SCALE

Нормализованные цены (probabilities) — отдельная величина:

    normalized_i = supply_i * SCALE / total_supply

При total_supply == 0 — равномерное распределение SCALE / n.
Сумма normalized может быть меньше SCALE на величину integer truncation
(не более n - 1 единиц), принудительной коррекции нет.
"""

from typing import Sequence

from curvemarket.core.errors import ValidationError
from curvemarket.core.math.fixed_point import SCALE, checked_add, div_scaled


def price(supply_i: int, total_supply: int, k: int) -> int:
    """
    Мгновенная цена одной опции.

    Args:
        supply_i: Supply опции (fixed-point)
        total_supply: Сумма supply всех опций (fixed-point)
        k: Крутизна кривой (fixed-point)

    Returns:
        Цена в fixed-point; 0 если total_supply + k == 0

    Examples:
        >>> price(1000 * SCALE, 1000 * SCALE, 1000 * SCALE) == SCALE // 2
        True
    """
    denominator = checked_add(total_supply, k)
    if denominator == 0:
        return 0
    return div_scaled(supply_i, denominator)


def all_prices(supplies: Sequence[int], total_supply: int, k: int) -> tuple[int, ...]:
    """
    Цены всех опций в порядке опций.

    Returns:
        Кортеж цен; все нули если total_supply + k == 0
    """
    return tuple(price(s, total_supply, k) for s in supplies)


def sum_of_prices(total_supply: int, k: int) -> int:
    """Σ price_i в закрытой форме: total_supply * SCALE / (total_supply + k)."""
    return price(total_supply, total_supply, k)


def normalized_prices(supplies: Sequence[int], total_supply: int) -> tuple[int, ...]:
    """
    Нормализованные вероятности опций.

    Args:
        supplies: Supply по опциям
        total_supply: Сумма supply

    Returns:
        SCALE // n для каждой опции при total_supply == 0,
        иначе supply_i * SCALE // total_supply

    Raises:
        ValidationError: Если опций нет
    """
    n = len(supplies)
    if n == 0:
        raise ValidationError("normalized_prices requires at least one option", num_options=n)

    if total_supply == 0:
        return tuple(SCALE // n for _ in supplies)

    return tuple(div_scaled(s, total_supply) for s in supplies)


def is_price_bounded(supplies: Sequence[int], total_supply: int, k: int) -> bool:
    """True если каждая цена строго меньше SCALE."""
    return all(p < SCALE for p in all_prices(supplies, total_supply, k))
