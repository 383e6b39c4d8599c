"""
Market — Модель состояния рынка одного вопроса

Immutable Pydantic модель. Любая мутация (buy/sell/resolve/redeem) создаёт
новый экземпляр через конструктор, поэтому инварианты перепроверяются
при каждом изменении, а движок подменяет рынок в arena одним присваиванием.

ИНВАРИАНТЫ (model_validator):
1. total_supply == Σ supplies
2. supplies[i] >= 0, total_collateral >= 0
3. k > 0
4. len(supplies) == len(options), 2 <= len(options) <= 10
5. winning_option задан тогда и только тогда, когда resolved
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from curvemarket.core.errors import FixedPointUnderflow
from curvemarket.core.math.fixed_point import checked_add, checked_sub
from curvemarket.core.math.price_model import (
    all_prices,
    normalized_prices,
    sum_of_prices,
)
from curvemarket.core.domain.units import MAX_OPTIONS, MIN_OPTIONS


# =============================================================================
# ENUMS
# =============================================================================


class MarketStatus(str, Enum):
    """Фаза рынка"""

    OPEN = "open"  # Торговля разрешена
    CLOSED = "closed"  # Deadline прошёл, ожидает resolve
    RESOLVED = "resolved"  # Победитель зафиксирован, только redeem


# =============================================================================
# MARKET MODEL
# =============================================================================


class Market(BaseModel):
    """
    Состояние рынка одного вопроса.

    Все количественные поля — fixed-point int (SCALE = 10^18).
    """

    # Идентификация
    question_id: int = Field(..., ge=0, description="Индекс рынка в arena")
    question: str = Field(..., min_length=1, description="Текст вопроса")
    options: tuple[str, ...] = Field(
        ..., min_length=MIN_OPTIONS, max_length=MAX_OPTIONS, description="Метки опций"
    )

    # Кривая
    k: int = Field(..., gt=0, description="Крутизна кривой (immutable)")
    supplies: tuple[int, ...] = Field(..., description="Supply по опциям")
    total_supply: int = Field(0, ge=0, description="Σ supplies")

    # Collateral
    total_collateral: int = Field(0, ge=0, description="Collateral рынка")

    # Время (unix seconds)
    created_ts: int = Field(..., ge=0, description="Время создания")
    deadline_ts: int = Field(..., gt=0, description="Окончание торговли")

    # Resolution
    resolved: bool = Field(False, description="Победитель зафиксирован")
    winning_option: int | None = Field(None, ge=0, description="Индекс победившей опции")
    payout_pool: int = Field(0, ge=0, description="Пул выплат после house fee")
    winning_supply: int = Field(0, ge=0, description="Supply победителя на момент resolve")

    model_config = {"frozen": True}  # Immutable

    @model_validator(mode="after")
    def validate_invariants(self) -> "Market":
        """Проверка инвариантов supply/resolution"""
        if len(self.supplies) != len(self.options):
            raise ValueError(
                f"supplies length {len(self.supplies)} must equal options length {len(self.options)}"
            )
        for i, supply in enumerate(self.supplies):
            if supply < 0:
                raise ValueError(f"supply of option {i} must be non-negative, got {supply}")
        if sum(self.supplies) != self.total_supply:
            raise ValueError(
                f"total_supply {self.total_supply} must equal sum of supplies {sum(self.supplies)}"
            )
        if self.deadline_ts <= self.created_ts:
            raise ValueError(
                f"deadline_ts {self.deadline_ts} must be after created_ts {self.created_ts}"
            )
        if self.resolved != (self.winning_option is not None):
            raise ValueError("winning_option must be set exactly when market is resolved")
        if self.winning_option is not None and self.winning_option >= len(self.options):
            raise ValueError(
                f"winning_option {self.winning_option} out of range for {len(self.options)} options"
            )
        return self

    # -------------------------------------------------------------------------
    # ЧТЕНИЕ
    # -------------------------------------------------------------------------

    @property
    def num_options(self) -> int:
        return len(self.options)

    def status(self, now_ts: int) -> MarketStatus:
        """Фаза рынка на момент now_ts."""
        if self.resolved:
            return MarketStatus.RESOLVED
        if now_ts < self.deadline_ts:
            return MarketStatus.OPEN
        return MarketStatus.CLOSED

    def is_trading_open(self, now_ts: int) -> bool:
        return self.status(now_ts) == MarketStatus.OPEN

    def prices(self) -> tuple[int, ...]:
        """Мгновенные цены всех опций."""
        return all_prices(self.supplies, self.total_supply, self.k)

    def normalized_prices(self) -> tuple[int, ...]:
        """Нормализованные вероятности опций."""
        return normalized_prices(self.supplies, self.total_supply)

    def sum_of_prices(self) -> int:
        return sum_of_prices(self.total_supply, self.k)

    # -------------------------------------------------------------------------
    # ПЕРЕХОДЫ (новый экземпляр)
    # -------------------------------------------------------------------------

    def _evolve(self, **changes: Any) -> "Market":
        data = self.model_dump()
        data.update(changes)
        return type(self)(**data)

    def with_buy(self, option: int, tokens: int, cost: int) -> "Market":
        """Состояние после покупки tokens опции option за cost."""
        supplies = list(self.supplies)
        supplies[option] = checked_add(supplies[option], tokens)
        return self._evolve(
            supplies=tuple(supplies),
            total_supply=checked_add(self.total_supply, tokens),
            total_collateral=checked_add(self.total_collateral, cost),
        )

    def with_sell(self, option: int, tokens: int, proceeds: int) -> "Market":
        """
        Состояние после продажи tokens опции option с выручкой proceeds.

        Raises:
            FixedPointUnderflow: Если supply или collateral ушли бы ниже нуля
        """
        supplies = list(self.supplies)
        supplies[option] = checked_sub(supplies[option], tokens)
        return self._evolve(
            supplies=tuple(supplies),
            total_supply=checked_sub(self.total_supply, tokens),
            total_collateral=checked_sub(self.total_collateral, proceeds),
        )

    def with_resolution(self, winning_option: int, fee: int) -> "Market":
        """Фиксация победителя: fee уходит оператору, остаток — в пул выплат."""
        remaining = checked_sub(self.total_collateral, fee)
        return self._evolve(
            resolved=True,
            winning_option=winning_option,
            total_collateral=remaining,
            payout_pool=remaining,
            winning_supply=self.supplies[winning_option],
        )

    def with_payout(self, amount: int) -> "Market":
        """Списание выплаты из collateral рынка."""
        if amount > self.total_collateral:
            raise FixedPointUnderflow(
                "payout exceeds market collateral",
                payout=amount,
                total_collateral=self.total_collateral,
                shortfall=amount - self.total_collateral,
            )
        return self._evolve(total_collateral=self.total_collateral - amount)

    # -------------------------------------------------------------------------
    # КОНТРАКТ
    # -------------------------------------------------------------------------

    def to_contract(self, now_ts: int) -> dict[str, Any]:
        """
        Снапшот рынка для market_snapshot.json.

        Fixed-point величины сериализуются десятичными строками
        (выходят за пределы точного int в JSON).
        """
        return {
            "schema_version": "1",
            "question_id": self.question_id,
            "question": self.question,
            "status": self.status(now_ts).value,
            "k": str(self.k),
            "total_supply": str(self.total_supply),
            "total_collateral": str(self.total_collateral),
            "deadline_ts": self.deadline_ts,
            "options": [
                {
                    "index": i,
                    "label": label,
                    "supply": str(supply),
                    "price": str(p),
                    "probability": str(prob),
                }
                for i, (label, supply, p, prob) in enumerate(
                    zip(self.options, self.supplies, self.prices(), self.normalized_prices())
                )
            ],
            "winning_option": self.winning_option,
        }
