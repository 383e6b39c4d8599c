"""Reentrancy guard для state-mutating операций движка."""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from curvemarket.core.errors import ReentrancyError


class ReentrancyGuard:
    """Взаимное исключение на время buy/sell/resolve/redeem/withdraw.

    Вложенный вход (например, из callback внешнего перевода) не ждёт,
    а сразу отклоняется ReentrancyError. Guard освобождается на любом
    пути выхода, включая исключения.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active_operation: Optional[str] = None

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def active_operation(self) -> Optional[str]:
        return self._active_operation

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        """Захват guard на время операции.

        Raises:
            ReentrancyError: если guard уже захвачен
        """
        if not self._lock.acquire(blocking=False):
            raise ReentrancyError(
                "reentrant call rejected",
                operation=operation,
                active_operation=self._active_operation,
            )
        self._active_operation = operation
        try:
            yield
        finally:
            self._active_operation = None
            self._lock.release()
