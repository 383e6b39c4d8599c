"""
Тесты для Curve Integration (buy_cost / sell_return)

Проверяет:
1. Число шагов и размеры шагов (остаток в последнем шаге)
2. Midpoint-интегрирование против ручного расчёта
3. Граничные случаи: token_amount == 0, продажа больше supply
4. Round-trip buy → sell без арбитража
5. Clamp midpoint при продаже до нуля
"""

import pytest

from curvemarket.core.math.curve_integration import (
    LARGE_TRADE_THRESHOLD,
    STEPS_LARGE_TRADE,
    STEPS_SMALL_TRADE,
    buy_cost,
    integration_steps,
    sell_return,
    step_sizes,
)
from curvemarket.core.math.fixed_point import SCALE

K = 1000 * SCALE


# =============================================================================
# ШАГИ
# =============================================================================


class TestSteps:
    """Тесты для integration_steps / step_sizes"""

    def test_small_trade_uses_ten_steps(self) -> None:
        assert integration_steps(SCALE) == STEPS_SMALL_TRADE == 10

    def test_threshold_is_inclusive_for_small(self) -> None:
        """Ровно 1000 токенов — ещё мелкая сделка"""
        assert integration_steps(LARGE_TRADE_THRESHOLD) == 10

    def test_large_trade_uses_hundred_steps(self) -> None:
        assert integration_steps(LARGE_TRADE_THRESHOLD + 1) == STEPS_LARGE_TRADE == 100

    def test_last_step_absorbs_remainder(self) -> None:
        sizes = list(step_sizes(25))

        assert sizes == [2] * 9 + [7]
        assert sum(sizes) == 25

    def test_amount_smaller_than_step_count(self) -> None:
        """Все шаги кроме последнего нулевые"""
        sizes = list(step_sizes(3))

        assert sizes == [0] * 9 + [3]

    @pytest.mark.parametrize("amount", [1, 999, 10 * SCALE + 7, 1234 * SCALE + 99])
    def test_steps_sum_to_amount(self, amount: int) -> None:
        sizes = list(step_sizes(amount))

        assert sum(sizes) == amount
        assert len(sizes) == integration_steps(amount)


# =============================================================================
# BUY COST
# =============================================================================


class TestBuyCost:
    """Тесты для buy_cost"""

    def test_zero_amount_costs_nothing(self) -> None:
        assert buy_cost(0, 0, K, 0) == 0
        assert buy_cost(500 * SCALE, 0, K, 800 * SCALE) == 0

    def test_matches_hand_computed_midpoints(self) -> None:
        """
        10 токенов с нуля при k = 10: шаг 1.0, midpoint (i + 0.5).

        step_price_i = (i + 0.5) / (i + 10.5) = (2i + 1) / (2i + 21)
        """
        expected = sum((2 * i + 1) * SCALE // (2 * i + 21) for i in range(10))

        assert buy_cost(0, 10 * SCALE, 10 * SCALE, 0) == expected

    def test_cost_below_token_amount(self) -> None:
        """Каждая цена < 1.0 → стоимость < количества токенов"""
        for amount in (SCALE, 100 * SCALE, 5000 * SCALE):
            assert buy_cost(0, amount, K, 0) < amount

    def test_cost_monotonic_in_amount(self) -> None:
        previous = 0
        for amount in range(SCALE, 3000 * SCALE, 150 * SCALE):
            current = buy_cost(200 * SCALE, amount, K, 500 * SCALE)
            assert current >= previous
            previous = current

    def test_cost_rises_with_existing_supply(self) -> None:
        """Та же покупка дороже при большем supply опции"""
        cheap = buy_cost(0, 100 * SCALE, K, 0)
        expensive = buy_cost(1000 * SCALE, 100 * SCALE, K, 1000 * SCALE)

        assert expensive > cheap

    def test_deterministic(self) -> None:
        args = (321 * SCALE, 4321 * SCALE + 17, K, 999 * SCALE)
        assert buy_cost(*args) == buy_cost(*args)

    def test_close_to_closed_form(self) -> None:
        """
        Одна опция, k = 1000, покупка 1000 с нуля:
        ∫ t / (t + 1000) dt = 1000 - 1000 * ln(2) ≈ 306.85
        """
        cost = buy_cost(0, 1000 * SCALE, K, 0)

        # midpoint rule на вогнутой кривой завышает интеграл
        assert cost > 306_852_819 * SCALE // 10**6
        assert cost == pytest.approx(306.852819 * SCALE, rel=2e-3)


# =============================================================================
# SELL RETURN
# =============================================================================


class TestSellReturn:
    """Тесты для sell_return"""

    def test_zero_amount_returns_nothing(self) -> None:
        assert sell_return(100 * SCALE, 0, K, 100 * SCALE) == 0

    def test_selling_more_than_supply_returns_zero(self) -> None:
        """No-op вместо underflow"""
        assert sell_return(10 * SCALE, 10 * SCALE + 1, K, 50 * SCALE) == 0

    def test_sell_entire_supply(self) -> None:
        """Продажа всего supply: midpoint последнего шага не уходит ниже нуля"""
        proceeds = sell_return(7, 7, K, 7)

        assert proceeds == 0

    def test_sell_entire_supply_large(self) -> None:
        proceeds = sell_return(2000 * SCALE, 2000 * SCALE, K, 2000 * SCALE)

        assert 0 < proceeds < 2000 * SCALE

    def test_total_below_supply_is_clamped(self) -> None:
        """Несогласованный total не вызывает underflow"""
        proceeds = sell_return(100 * SCALE, 100 * SCALE, K, 10 * SCALE)

        assert proceeds >= 0

    def test_proceeds_rise_with_supply(self) -> None:
        low = sell_return(100 * SCALE, 50 * SCALE, K, 100 * SCALE)
        high = sell_return(3000 * SCALE, 50 * SCALE, K, 3000 * SCALE)

        assert high > low


# =============================================================================
# ROUND TRIP
# =============================================================================


class TestRoundTrip:
    """Покупка x и немедленная продажа x не даёт прибыли"""

    @pytest.mark.parametrize(
        "supply,total,amount",
        [
            (0, 0, 10 * SCALE),
            (500 * SCALE, 1500 * SCALE, 100 * SCALE),
            (0, 0, 5000 * SCALE),
            (2000 * SCALE, 2500 * SCALE, 1200 * SCALE),
        ],
    )
    def test_even_steps_round_trip_is_exact(self, supply: int, total: int, amount: int) -> None:
        """Равные чётные шаги → одинаковые midpoint, выручка == стоимость"""
        cost = buy_cost(supply, amount, K, total)
        proceeds = sell_return(supply + amount, amount, K, total + amount)

        assert proceeds <= cost
        assert proceeds == cost

    @pytest.mark.parametrize(
        "supply,total,amount",
        [
            (0, 0, 10 * SCALE + 7),
            (123 * SCALE, 456 * SCALE, 77 * SCALE + 3),
            (0, 0, 1500 * SCALE + 99),
        ],
    )
    def test_uneven_steps_within_discretization_error(
        self, supply: int, total: int, amount: int
    ) -> None:
        """Остаток в последнем шаге даёт расхождение в единицы wei"""
        cost = buy_cost(supply, amount, K, total)
        proceeds = sell_return(supply + amount, amount, K, total + amount)

        assert proceeds <= cost + 1000
