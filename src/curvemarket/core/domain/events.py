"""
Events — Структурированные уведомления для EventSink

Движок только публикует события (observability) и никогда не читает их обратно.
"""

from typing import Literal

from pydantic import BaseModel, Field

from curvemarket.core.domain.trade import TradeSide


class MarketEvent(BaseModel):
    """Базовое событие рынка"""

    question_id: int = Field(..., ge=0)
    ts: int = Field(..., ge=0)

    model_config = {"frozen": True}


class MarketCreated(MarketEvent):
    kind: Literal["market_created"] = "market_created"
    question: str
    options: tuple[str, ...]
    k: int = Field(..., gt=0)
    deadline_ts: int


class TradeExecuted(MarketEvent):
    kind: Literal["trade_executed"] = "trade_executed"
    side: TradeSide
    trader: str
    option: int = Field(..., ge=0)
    tokens: int = Field(..., gt=0)
    collateral_amount: int = Field(..., ge=0)
    price_after: int = Field(..., ge=0)


class MarketResolved(MarketEvent):
    kind: Literal["market_resolved"] = "market_resolved"
    winning_option: int = Field(..., ge=0)
    house_fee: int = Field(..., ge=0)
    payout_pool: int = Field(..., ge=0)


class PayoutClaimed(MarketEvent):
    kind: Literal["payout_claimed"] = "payout_claimed"
    holder: str
    option: int = Field(..., ge=0)
    tokens_burned: int = Field(..., gt=0)
    payout: int = Field(..., ge=0)


class EmergencyWithdrawal(BaseModel):
    """Вывод средств администратором (не привязан к рынку)."""

    kind: Literal["emergency_withdrawal"] = "emergency_withdrawal"
    recipient: str
    amount: int = Field(..., gt=0)
    ts: int = Field(..., ge=0)

    model_config = {"frozen": True}
