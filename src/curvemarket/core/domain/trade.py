"""
Trade — Результаты операций движка

Immutable Pydantic модели, которые движок возвращает вызывающей стороне:
- TradeReceipt — исполненная покупка/продажа
- Resolution — фиксация победителя
- PayoutReceipt — выплата по redeem

Количественные поля — fixed-point int (SCALE = 10^18).
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from curvemarket.core.math.fixed_point import div_scaled


# =============================================================================
# ENUMS
# =============================================================================


class TradeSide(str, Enum):
    """Направление сделки"""

    BUY = "buy"
    SELL = "sell"


# =============================================================================
# TRADE RECEIPT
# =============================================================================


class TradeReceipt(BaseModel):
    """
    Исполненная сделка.

    Для BUY collateral_amount — фактически списанная стоимость,
    для SELL — выплаченная выручка.
    """

    question_id: int = Field(..., ge=0)
    option: int = Field(..., ge=0)
    token_id: int = Field(..., ge=0)
    side: TradeSide
    trader: str = Field(..., min_length=1)

    tokens: int = Field(..., gt=0, description="Количество токенов")
    collateral_amount: int = Field(..., ge=0, description="Стоимость или выручка")

    price_before: int = Field(..., ge=0, description="Цена опции до сделки")
    price_after: int = Field(..., ge=0, description="Цена опции после сделки")
    total_supply_after: int = Field(..., ge=0)
    total_collateral_after: int = Field(..., ge=0)

    ts: int = Field(..., ge=0, description="Время исполнения (unix seconds)")

    model_config = {"frozen": True}

    def average_price(self) -> int:
        """Средняя цена исполнения (fixed-point)."""
        return div_scaled(self.collateral_amount, self.tokens)

    def to_contract(self) -> dict[str, Any]:
        """Сериализация для trade_receipt.json."""
        return {
            "schema_version": "1",
            "question_id": self.question_id,
            "option": self.option,
            "token_id": self.token_id,
            "side": self.side.value,
            "trader": self.trader,
            "tokens": str(self.tokens),
            "collateral_amount": str(self.collateral_amount),
            "price_before": str(self.price_before),
            "price_after": str(self.price_after),
            "total_supply_after": str(self.total_supply_after),
            "total_collateral_after": str(self.total_collateral_after),
            "ts": self.ts,
        }


# =============================================================================
# RESOLUTION / PAYOUT
# =============================================================================


class Resolution(BaseModel):
    """Фиксация победителя рынка."""

    question_id: int = Field(..., ge=0)
    winning_option: int = Field(..., ge=0)
    house_fee: int = Field(..., ge=0, description="Комиссия оператору")
    payout_pool: int = Field(..., ge=0, description="Пул выплат победителям")
    winning_supply: int = Field(..., ge=0, description="Supply победителя")
    ts: int = Field(..., ge=0)

    model_config = {"frozen": True}


class PayoutReceipt(BaseModel):
    """
    Результат redeem.

    Проигравшая опция: payout == 0, токены уничтожены.
    """

    question_id: int = Field(..., ge=0)
    option: int = Field(..., ge=0)
    holder: str = Field(..., min_length=1)
    tokens_burned: int = Field(..., gt=0)
    payout: int = Field(..., ge=0)
    is_winner: bool

    model_config = {"frozen": True}
