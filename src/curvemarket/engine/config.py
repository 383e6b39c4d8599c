"""Конфигурация движка рынка.

Глобальные параметры, общие для всех рынков движка:
- default_k: крутизна кривой при k == 0 / не задан
- house_fee_bps: комиссия оператора при resolve (300 bps)
- small_budget_threshold: граница SMALL/LARGE режимов BudgetSolver
- clock: источник времени (unix seconds)
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from curvemarket.core.domain.units import DEFAULT_K, HOUSE_FEE_BPS
from curvemarket.core.errors import ValidationError
from curvemarket.core.math.budget_solver import SMALL_BUDGET_THRESHOLD
from curvemarket.core.math.fixed_point import BPS_DENOMINATOR


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация MarketEngine.

    house_fee_bps — глобальный параметр, per-market override не поддерживается.
    """
    default_k: int = DEFAULT_K
    house_fee_bps: int = HOUSE_FEE_BPS
    small_budget_threshold: int = SMALL_BUDGET_THRESHOLD
    clock: Callable[[], float] = field(default=time.time, compare=False)

    def __post_init__(self) -> None:
        if self.default_k <= 0:
            raise ValidationError("default_k must be positive", default_k=self.default_k)
        if not 0 <= self.house_fee_bps <= BPS_DENOMINATOR:
            raise ValidationError(
                "house_fee_bps out of range",
                house_fee_bps=self.house_fee_bps,
                bound=BPS_DENOMINATOR,
            )
        if self.small_budget_threshold < 0:
            raise ValidationError(
                "small_budget_threshold must be non-negative",
                small_budget_threshold=self.small_budget_threshold,
            )

    def now(self) -> int:
        """Текущее время в целых секундах."""
        return int(self.clock())
