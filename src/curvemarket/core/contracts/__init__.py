"""
Contract Validation Module

Модуль для валидации JSON контрактов, экспортируемых движком.
"""

from .validators import (
    ContractValidator,
    MarketSnapshotValidator,
    SchemaLoader,
    TradeReceiptValidator,
    validate_market_snapshot,
    validate_trade_receipt,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "MarketSnapshotValidator",
    "TradeReceiptValidator",
    # Functions
    "validate_market_snapshot",
    "validate_trade_receipt",
]
