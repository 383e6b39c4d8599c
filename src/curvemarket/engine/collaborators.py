"""Внешние коллабораторы движка (интерфейсы).

Движок потребляет эти интерфейсы, но не реализует их:
- Ledger: multi-token балансы (mint/burn по token_id)
- CollateralAsset: перевод collateral между участниками и движком
- AccessControl: единственный держатель admin capability
- EventSink: структурированные уведомления (только запись)

Предположение: минимальная единица CollateralAsset совпадает с SCALE.
Конверсия для активов с другим числом десятичных знаков — вне движка.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Ledger(Protocol):
    """Multi-token ledger."""

    def mint(self, account: str, token_id: int, amount: int) -> None: ...

    def burn(self, account: str, token_id: int, amount: int) -> None: ...

    def balance_of(self, account: str, token_id: int) -> int: ...

    def total_supply(self, token_id: int) -> int: ...


@runtime_checkable
class CollateralAsset(Protocol):
    """Collateral (stablecoin). Возвращает False при отказе перевода."""

    def transfer_from(self, payer: str, amount: int) -> bool: ...

    def transfer(self, recipient: str, amount: int) -> bool: ...


@runtime_checkable
class AccessControl(Protocol):
    """Admin capability для create/resolve/emergency withdraw."""

    @property
    def admin(self) -> str: ...

    def require_admin(self, caller: str) -> None: ...


@runtime_checkable
class EventSink(Protocol):
    """Приёмник событий (observability)."""

    def emit(self, event: BaseModel) -> None: ...
