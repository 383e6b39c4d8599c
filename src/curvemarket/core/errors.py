"""
Errors — Иерархия ошибок движка рынка

Каждая ошибка прерывает операцию целиком (all-or-nothing): состояние
рынка, ledger и collateral остаются такими же, как до вызова.
Ретраев внутри движка нет, вызывающая сторона повторяет запрос
с исправленными параметрами.

Все ошибки несут `context` — словарь входных параметров и нарушенной
границы, чтобы вызывающая сторона видела, какой bound нарушен и на сколько.
"""

from typing import Any


class MarketError(Exception):
    """
    Базовая ошибка движка.

    Args:
        message: Человекочитаемое описание
        **context: Входные параметры и нарушенная граница (as-is)
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context: dict[str, Any] = dict(context)
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ValidationError(MarketError):
    """Некорректные входные данные: число опций, duration, amount, индекс опции."""


class PhaseError(MarketError):
    """Операция в неправильной фазе: торговля после deadline, повторный resolve и т.п."""


class SlippageError(MarketError):
    """Результат сделки хуже минимума, заданного вызывающей стороной."""


class InsufficientBalanceError(MarketError):
    """Sell/redeem превышает баланс токенов у вызывающего."""


class DivideByZero(MarketError, ZeroDivisionError):
    """Нулевой знаменатель в fixed-point делении."""


class InvariantViolation(MarketError):
    """
    Нарушение инварианта цены после сделки (price >= 1.0).

    При корректной математике недостижимо. Если возникло — это
    численный баг, операция отклоняется как fatal.
    """


class FixedPointOverflow(MarketError, ArithmeticError):
    """Результат fixed-point операции вышел за MAX_UINT256."""


class FixedPointUnderflow(MarketError, ArithmeticError):
    """Результат fixed-point операции стал бы отрицательным."""


class AccessDeniedError(MarketError):
    """Вызывающий не владеет admin capability."""


class ReentrancyError(MarketError):
    """Вложенный вызов state-mutating операции во время выполнения другой."""


class TransferFailed(MarketError):
    """CollateralAsset отказал в переводе; операция откатывается."""
