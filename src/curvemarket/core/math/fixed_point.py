"""
Fixed Point — Checked Fixed-Point Primitives

Все величины (supply, цены, суммы collateral) — целые числа,
масштабированные на SCALE (10^18 = 1.0).

Модуль обеспечивает детерминированную integer-арифметику:
- Масштабированное умножение/деление (mul_scaled, div_scaled)
- Checked add/sub/mul/div с явным отказом вместо wraparound
- Конверсию в/из fixed-point для отображения
- Basis points

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Результат никогда не превышает MAX_UINT256 (FixedPointOverflow)
2. Результат никогда не становится отрицательным (FixedPointUnderflow)
3. Деление на ноль — нарушение precondition (DivideByZero)
4. Никакого float: все операции детерминированы и воспроизводимы
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Final

from curvemarket.core.errors import (
    DivideByZero,
    FixedPointOverflow,
    FixedPointUnderflow,
    ValidationError,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# 1.0 в fixed-point представлении
SCALE: Final[int] = 10**18

# Верхняя граница всех величин (256-битное беззнаковое слово)
MAX_UINT256: Final[int] = 2**256 - 1

# Знаменатель для basis points
BPS_DENOMINATOR: Final[int] = 10_000


# =============================================================================
# ПРОВЕРКИ ОПЕРАНДОВ
# =============================================================================


def _require_uint(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an int", name=name, value=value)
    if value < 0:
        raise FixedPointUnderflow(f"{name} must be non-negative", name=name, value=value)
    if value > MAX_UINT256:
        raise FixedPointOverflow(f"{name} exceeds MAX_UINT256", name=name, value=value)
    return value


def _bounded(result: int, op: str, a: int, b: int) -> int:
    if result > MAX_UINT256:
        raise FixedPointOverflow(f"{op} overflow", a=a, b=b, result_bits=result.bit_length())
    return result


# =============================================================================
# CHECKED ОПЕРАЦИИ
# =============================================================================


def checked_add(a: int, b: int) -> int:
    """Сложение с отказом при переполнении."""
    _require_uint(a, "a")
    _require_uint(b, "b")
    return _bounded(a + b, "add", a, b)


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание с отказом при отрицательном результате.

    Raises:
        FixedPointUnderflow: Если b > a
    """
    _require_uint(a, "a")
    _require_uint(b, "b")
    if b > a:
        raise FixedPointUnderflow("sub underflow", a=a, b=b, shortfall=b - a)
    return a - b


def checked_mul(a: int, b: int) -> int:
    """Умножение с отказом при переполнении."""
    _require_uint(a, "a")
    _require_uint(b, "b")
    return _bounded(a * b, "mul", a, b)


def checked_div(a: int, b: int) -> int:
    """
    Целочисленное деление (truncation).

    Raises:
        DivideByZero: Если b == 0
    """
    _require_uint(a, "a")
    _require_uint(b, "b")
    if b == 0:
        raise DivideByZero("division by zero", numerator=a)
    return a // b


# =============================================================================
# МАСШТАБИРОВАННЫЕ ОПЕРАЦИИ
# =============================================================================


def mul_scaled(a: int, b: int) -> int:
    """
    Умножение двух fixed-point величин.

    Формула: a * b / SCALE (truncation)

    Examples:
        >>> mul_scaled(2 * SCALE, 3 * SCALE) == 6 * SCALE
        True
        >>> mul_scaled(SCALE // 2, SCALE // 2) == SCALE // 4
        True
    """
    return checked_div(checked_mul(a, b), SCALE)


def div_scaled(a: int, b: int) -> int:
    """
    Деление двух fixed-point величин.

    Формула: a * SCALE / b (truncation)

    Вызывающая сторона обязана исключить b == 0 заранее
    (в частности, total_supply + k == 0).

    Raises:
        DivideByZero: Если b == 0

    Examples:
        >>> div_scaled(SCALE, 4 * SCALE) == SCALE // 4
        True
    """
    if b == 0:
        raise DivideByZero("div_scaled by zero", numerator=a)
    return checked_div(checked_mul(a, SCALE), b)


def bps_of(amount: int, bps: int) -> int:
    """
    Доля amount в basis points (truncation).

    Examples:
        >>> bps_of(100 * SCALE, 300) == 3 * SCALE
        True
    """
    return checked_div(checked_mul(amount, bps), BPS_DENOMINATOR)


def half(value: int) -> int:
    """Половина величины (truncation)."""
    return checked_div(value, 2)


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_fixed(value: int | str | Decimal) -> int:
    """
    Конверсия человекочитаемой величины в fixed-point.

    Дробная часть ниже 1/SCALE отбрасывается (truncation).

    Args:
        value: Целое, строка ("12.5") или Decimal

    Returns:
        value * SCALE как int

    Examples:
        >>> to_fixed(1000) == 1000 * SCALE
        True
        >>> to_fixed("0.5") == SCALE // 2
        True
    """
    if isinstance(value, bool):
        raise ValidationError("bool is not a fixed-point value", value=value)
    if isinstance(value, int):
        _require_uint(value, "value")
        return checked_mul(value, SCALE)
    try:
        dec = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError("value is not a decimal number", value=value) from e
    if not dec.is_finite():
        raise ValidationError("value must be finite", value=value)
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = int(dec * SCALE)
    return _require_uint(scaled, "value")


def from_fixed(value: int) -> Decimal:
    """
    Конверсия fixed-point в Decimal для отображения.

    Examples:
        >>> from_fixed(SCALE // 2)
        Decimal('0.5')
    """
    _require_uint(value, "value")
    return Decimal(value) / Decimal(SCALE)


def clamp_non_negative(value: int) -> int:
    """Отрицательный результат → 0 (вместо wraparound)."""
    return value if value > 0 else 0
