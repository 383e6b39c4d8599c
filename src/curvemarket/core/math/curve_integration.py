"""
Curve Integration — Buy Cost & Sell Return

Численное интегрирование кривой цены методом средней точки (midpoint rule).
Замкнутая форма интеграла намеренно не используется: число шагов,
порядок округлений и остаток последнего шага определяют экономику
рынка и должны воспроизводиться бит-в-бит.

ФОРМУЛЫ:
    steps     = 100 если token_amount > 1000 * SCALE, иначе 10
    step_size = token_amount // steps  (последний шаг забирает остаток)

    BUY (supply растёт):
        avg_supply = supply + step / 2
        avg_total  = total  + step / 2
        step_price = avg_supply * SCALE // (avg_total + k)
        cost      += step * step_price // SCALE

    SELL (supply падает, midpoint clamp >= 0):
        avg_supply = max(supply - step / 2, 0)
        avg_total  = max(total  - step / 2, 0)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Σ шагов == token_amount
2. token_amount == 0 → 0 без итераций
3. Результат — чистая функция четырёх аргументов (без float, без random)
"""

from typing import Final, Iterator

from curvemarket.core.math.fixed_point import (
    SCALE,
    checked_add,
    checked_sub,
    clamp_non_negative,
    div_scaled,
    half,
    mul_scaled,
)

# =============================================================================
# ПАРАМЕТРЫ ИНТЕГРИРОВАНИЯ
# =============================================================================

# Порог крупной сделки (в токенах), выше которого используется мелкий шаг
LARGE_TRADE_THRESHOLD: Final[int] = 1000 * SCALE

# Число шагов для крупной сделки
STEPS_LARGE_TRADE: Final[int] = 100

# Число шагов для мелкой сделки
STEPS_SMALL_TRADE: Final[int] = 10


def integration_steps(token_amount: int) -> int:
    """
    Число шагов интегрирования для сделки.

    Крупная сделка → 100 шагов (ограничение ошибки аппроксимации),
    мелкая → 10 шагов (ограничение стоимости вычисления).
    """
    if token_amount > LARGE_TRADE_THRESHOLD:
        return STEPS_LARGE_TRADE
    return STEPS_SMALL_TRADE


def step_sizes(token_amount: int) -> Iterator[int]:
    """
    Размеры шагов; последний шаг забирает остаток деления.

    Examples:
        >>> list(step_sizes(25))
        [2, 2, 2, 2, 2, 2, 2, 2, 2, 7]
    """
    steps = integration_steps(token_amount)
    step_size = token_amount // steps

    for _ in range(steps - 1):
        yield step_size
    yield token_amount - step_size * (steps - 1)


# =============================================================================
# COST INTEGRATOR
# =============================================================================


def buy_cost(current_supply: int, token_amount: int, k: int, total_supply: int) -> int:
    """
    Стоимость покупки token_amount токенов опции.

    Интегрирует цену на отрезке supply_i: current_supply → current_supply + token_amount
    (total_supply сдвигается синхронно).

    Args:
        current_supply: Текущий supply опции (fixed-point)
        token_amount: Количество токенов к покупке (fixed-point)
        k: Крутизна кривой (fixed-point, > 0)
        total_supply: Текущий суммарный supply (fixed-point)

    Returns:
        Стоимость в collateral (fixed-point), 0 при token_amount == 0

    Examples:
        >>> buy_cost(0, 0, 1000 * SCALE, 0)
        0
    """
    if token_amount == 0:
        return 0

    cost = 0
    supply = current_supply
    total = total_supply

    for step in step_sizes(token_amount):
        mid_offset = half(step)
        avg_supply = checked_add(supply, mid_offset)
        avg_total = checked_add(total, mid_offset)

        step_price = div_scaled(avg_supply, checked_add(avg_total, k))
        cost = checked_add(cost, mul_scaled(step, step_price))

        supply = checked_add(supply, step)
        total = checked_add(total, step)

    return cost


# =============================================================================
# RETURN INTEGRATOR
# =============================================================================


def sell_return(current_supply: int, token_amount: int, k: int, total_supply: int) -> int:
    """
    Выручка от продажи token_amount токенов опции.

    Зеркально buy_cost, supply убывает. Продажа больше current_supply
    на этом уровне — no-op (возвращает 0); жёсткую ошибку выставляет
    вызывающий слой.

    Args:
        current_supply: Текущий supply опции (fixed-point)
        token_amount: Количество токенов к продаже (fixed-point)
        k: Крутизна кривой (fixed-point, > 0)
        total_supply: Текущий суммарный supply (fixed-point)

    Returns:
        Выручка в collateral (fixed-point)
    """
    if token_amount == 0 or token_amount > current_supply:
        return 0

    proceeds = 0
    supply = current_supply
    total = total_supply

    for step in step_sizes(token_amount):
        mid_offset = half(step)
        avg_supply = clamp_non_negative(supply - mid_offset)
        avg_total = clamp_non_negative(total - mid_offset)

        step_price = div_scaled(avg_supply, checked_add(avg_total, k))
        proceeds = checked_add(proceeds, mul_scaled(step, step_price))

        supply = checked_sub(supply, step)
        total = clamp_non_negative(total - step)

    return proceeds
