"""In-memory реализации коллабораторов.

Используются в тестах и локальных симуляциях. Production-интеграции
(on-chain ledger, stablecoin, audit log) подключаются через те же
интерфейсы из collaborators.py.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from pydantic import BaseModel

from curvemarket.core.errors import (
    AccessDeniedError,
    InsufficientBalanceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class InMemoryLedger:
    """Multi-token ledger на словарях."""

    def __init__(self) -> None:
        self._balances: Dict[Tuple[str, int], int] = defaultdict(int)
        self._supplies: Dict[int, int] = defaultdict(int)

    def mint(self, account: str, token_id: int, amount: int) -> None:
        if amount < 0:
            raise ValidationError("mint amount must be non-negative", amount=amount)
        self._balances[(account, token_id)] += amount
        self._supplies[token_id] += amount

    def burn(self, account: str, token_id: int, amount: int) -> None:
        if amount < 0:
            raise ValidationError("burn amount must be non-negative", amount=amount)
        balance = self._balances[(account, token_id)]
        if balance < amount:
            raise InsufficientBalanceError(
                "burn exceeds balance",
                account=account,
                token_id=token_id,
                balance=balance,
                requested=amount,
                shortfall=amount - balance,
            )
        self._balances[(account, token_id)] = balance - amount
        self._supplies[token_id] -= amount

    def balance_of(self, account: str, token_id: int) -> int:
        return self._balances.get((account, token_id), 0)

    def total_supply(self, token_id: int) -> int:
        return self._supplies.get(token_id, 0)


class InMemoryCollateral:
    """Collateral-актив с казной движка (treasury).

    transfer_from: payer → treasury, transfer: treasury → recipient.
    Недостаток средств → False (без исключения), как у ERC20-подобных активов.
    """

    def __init__(self, treasury: str = "engine") -> None:
        self.treasury = treasury
        self._balances: Dict[str, int] = defaultdict(int)

    def deposit(self, account: str, amount: int) -> None:
        """Зачисление средств участнику (faucet)."""
        if amount < 0:
            raise ValidationError("deposit amount must be non-negative", amount=amount)
        self._balances[account] += amount

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def transfer_from(self, payer: str, amount: int) -> bool:
        return self._move(payer, self.treasury, amount)

    def transfer(self, recipient: str, amount: int) -> bool:
        return self._move(self.treasury, recipient, amount)

    def _move(self, source: str, target: str, amount: int) -> bool:
        if amount < 0 or self._balances[source] < amount:
            logger.debug(f"Collateral transfer {source} -> {target} of {amount} rejected")
            return False
        self._balances[source] -= amount
        self._balances[target] += amount
        return True


class SingleAdminAccessControl:
    """Единственный держатель admin capability."""

    def __init__(self, admin: str) -> None:
        if not admin:
            raise ValidationError("admin must be non-empty", admin=admin)
        self._admin = admin

    @property
    def admin(self) -> str:
        return self._admin

    def require_admin(self, caller: str) -> None:
        if caller != self._admin:
            raise AccessDeniedError("admin capability required", caller=caller)


class RecordingEventSink:
    """Сохраняет события в списке (для тестов и симуляций)."""

    def __init__(self) -> None:
        self.events: List[BaseModel] = []

    def emit(self, event: BaseModel) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> List[BaseModel]:
        return [e for e in self.events if getattr(e, "kind", None) == kind]


class LoggingEventSink:
    """EventSink по умолчанию: пишет события в logging."""

    def emit(self, event: BaseModel) -> None:
        logger.debug(f"Event {event.model_dump_json()}")
