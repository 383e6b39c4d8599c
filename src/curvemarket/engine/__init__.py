"""Engine — оркестрация рынков поверх core.

- MarketEngine: create/buy/sell/resolve/redeem/emergency withdraw
- Интерфейсы внешних коллабораторов и их in-memory реализации
- ReentrancyGuard и EngineConfig
"""

from .collaborators import AccessControl, CollateralAsset, EventSink, Ledger
from .config import EngineConfig
from .guard import ReentrancyGuard
from .in_memory import (
    InMemoryCollateral,
    InMemoryLedger,
    LoggingEventSink,
    RecordingEventSink,
    SingleAdminAccessControl,
)
from .market_engine import MarketEngine

__all__ = [
    "MarketEngine",
    "EngineConfig",
    "ReentrancyGuard",
    "Ledger",
    "CollateralAsset",
    "AccessControl",
    "EventSink",
    "InMemoryLedger",
    "InMemoryCollateral",
    "SingleAdminAccessControl",
    "RecordingEventSink",
    "LoggingEventSink",
]
