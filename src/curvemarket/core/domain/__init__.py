"""
Domain models and value objects.

Contains fundamental domain entities like Market, TradeReceipt, market events
and token/fee units.
"""

from curvemarket.core.domain.events import (
    EmergencyWithdrawal,
    MarketCreated,
    MarketEvent,
    MarketResolved,
    PayoutClaimed,
    TradeExecuted,
)
from curvemarket.core.domain.market import Market, MarketStatus
from curvemarket.core.domain.trade import (
    PayoutReceipt,
    Resolution,
    TradeReceipt,
    TradeSide,
)
from curvemarket.core.domain.units import (
    DEFAULT_K,
    HOUSE_FEE_BPS,
    MAX_OPTIONS,
    MIN_OPTIONS,
    TOKEN_ID_MULTIPLIER,
    effective_k,
    house_fee,
    payout_pool,
    pro_rata_payout,
    split_token_id,
    token_id,
)

__all__ = [
    # Units module
    "DEFAULT_K",
    "HOUSE_FEE_BPS",
    "MAX_OPTIONS",
    "MIN_OPTIONS",
    "TOKEN_ID_MULTIPLIER",
    "effective_k",
    "house_fee",
    "payout_pool",
    "pro_rata_payout",
    "split_token_id",
    "token_id",
    # Market model
    "Market",
    "MarketStatus",
    # Trade models
    "TradeReceipt",
    "TradeSide",
    "Resolution",
    "PayoutReceipt",
    # Events
    "MarketEvent",
    "MarketCreated",
    "TradeExecuted",
    "MarketResolved",
    "PayoutClaimed",
    "EmergencyWithdrawal",
]
