"""
Budget Solver — Max Tokens For A Spending Budget

Обращение buy_cost: для бюджета max_budget найти максимальное количество
токенов, стоимость которых не превышает бюджет.

Два режима:

SMALL (max_budget <= 100 * SCALE):
    spot       = price(current_supply, total_supply, k)
    tokens     = max_budget * SCALE // (spot + PRICE_PREMIUM),  PRICE_PREMIUM = 1.0
    cost       = buy_cost(tokens)
    если cost > max_budget:
        tokens = tokens * max_budget // cost
        cost   = max_budget

    Это аппроксимация первого порядка, а не точное решение. Серия очень
    мелких сделок может накапливать небольшой дрейф cost/quantity
    относительно пути binary search.

LARGE (max_budget > 100 * SCALE):
    Бинарный поиск на [0, max_budget], ровно до 50 итераций.
    Верхняя граница — бюджет в единицах collateral, использованный как
    граница количества токенов. Это корректно только потому, что обе
    величины масштабированы одним SCALE; при другом масштабе collateral
    границу нужно выводить заново.

На границе режимов (около 100 * SCALE) результаты двух путей разрывны.
"""

import logging
from typing import Final, NamedTuple, Sequence

from curvemarket.core.errors import InvariantViolation
from curvemarket.core.math.curve_integration import buy_cost
from curvemarket.core.math.fixed_point import (
    SCALE,
    checked_add,
    checked_div,
    checked_mul,
    div_scaled,
)
from curvemarket.core.math.price_model import price

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ
# =============================================================================

# Граница между SMALL и LARGE режимами (collateral, fixed-point)
SMALL_BUDGET_THRESHOLD: Final[int] = 100 * SCALE

# Надбавка к spot-цене в знаменателе оценки (одна единица цены, 1.0).
# Держит оценку конечной при spot == 0 и смещает её вниз: tokens <= max_budget.
PRICE_PREMIUM: Final[int] = SCALE

# Число итераций бинарного поиска
BINARY_SEARCH_ITERATIONS: Final[int] = 50


class BudgetQuote(NamedTuple):
    """Результат решения: количество токенов и фактическая стоимость."""

    tokens_out: int
    actual_cost: int


# =============================================================================
# SOLVER
# =============================================================================


def tokens_for_budget(
    current_supply: int,
    max_budget: int,
    k: int,
    total_supply: int,
    small_budget_threshold: int = SMALL_BUDGET_THRESHOLD,
) -> BudgetQuote:
    """
    Максимальное количество токенов для бюджета.

    Args:
        current_supply: Supply опции (fixed-point)
        max_budget: Бюджет в collateral (fixed-point)
        k: Крутизна кривой (fixed-point, > 0)
        total_supply: Суммарный supply (fixed-point)
        small_budget_threshold: Граница режимов (default: 100 * SCALE)

    Returns:
        BudgetQuote(tokens_out, actual_cost), actual_cost <= max_budget

    Examples:
        >>> tokens_for_budget(0, 0, 1000 * SCALE, 0)
        BudgetQuote(tokens_out=0, actual_cost=0)
    """
    if max_budget == 0:
        return BudgetQuote(0, 0)

    if max_budget <= small_budget_threshold:
        logger.debug(f"Budget {max_budget} solved by spot estimate")
        return _solve_small(current_supply, max_budget, k, total_supply)

    logger.debug(f"Budget {max_budget} solved by binary search")
    return _solve_large(current_supply, max_budget, k, total_supply)


def _solve_small(current_supply: int, max_budget: int, k: int, total_supply: int) -> BudgetQuote:
    spot = price(current_supply, total_supply, k)
    tokens_out = div_scaled(max_budget, checked_add(spot, PRICE_PREMIUM))
    actual_cost = buy_cost(current_supply, tokens_out, k, total_supply)

    if actual_cost > max_budget:
        # Пропорциональное уменьшение вместо повторного решения
        tokens_out = checked_div(checked_mul(tokens_out, max_budget), actual_cost)
        actual_cost = max_budget

    return BudgetQuote(tokens_out, actual_cost)


def _solve_large(current_supply: int, max_budget: int, k: int, total_supply: int) -> BudgetQuote:
    low = 0
    high = max_budget
    best = BudgetQuote(0, 0)

    for _ in range(BINARY_SEARCH_ITERATIONS):
        if low > high:
            break

        mid = (low + high) // 2
        cost = buy_cost(current_supply, mid, k, total_supply)

        if cost <= max_budget:
            best = BudgetQuote(mid, cost)
            low = mid + 1
        else:
            # mid == 0 недоступен: high = mid - 1 ушёл бы ниже нуля
            if mid == 0:
                break
            high = mid - 1

    return best


# =============================================================================
# ПОСТ-ПРОВЕРКА
# =============================================================================


def post_trade_price_check(
    supplies: Sequence[int],
    total_supply: int,
    k: int,
) -> None:
    """
    Last-resort проверка: ни одна цена после сделки не достигает 1.0.

    При k > 0 недостижимо математически; срабатывание означает
    численный баг.

    Args:
        supplies: Supply по опциям ПОСЛЕ сделки
        total_supply: Суммарный supply ПОСЛЕ сделки
        k: Крутизна кривой

    Raises:
        InvariantViolation: Если какая-либо цена >= SCALE
    """
    for option, supply in enumerate(supplies):
        option_price = price(supply, total_supply, k)
        if option_price >= SCALE:
            raise InvariantViolation(
                "post-trade price reached 1.0",
                reason="price_bound",
                option=option,
                price=option_price,
                bound=SCALE,
                excess=option_price - SCALE,
                supply=supply,
                total_supply=total_supply,
                k=k,
            )
