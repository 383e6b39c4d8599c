"""
Units — Идентификаторы токенов, комиссии и выплаты

Единственный допустимый способ:
- получить token_id опции (question_id * 1000 + option)
- получить k рынка с учётом default
- посчитать house fee и pro-rata выплату победителю

ЗАПРЕЩЕНО собирать token_id или делить пул выплат в обход этого модуля.
"""

from typing import Final

from curvemarket.core.errors import ValidationError
from curvemarket.core.math.fixed_point import (
    BPS_DENOMINATOR,
    SCALE,
    bps_of,
    checked_div,
    checked_mul,
    checked_sub,
)

# =============================================================================
# ПАРАМЕТРЫ РЫНКА
# =============================================================================

# Множитель token_id. Требует option < 1000 (при 2-10 опциях выполняется с запасом)
TOKEN_ID_MULTIPLIER: Final[int] = 1000

# Допустимое число опций
MIN_OPTIONS: Final[int] = 2
MAX_OPTIONS: Final[int] = 10

# Крутизна кривой по умолчанию (при k == 0 или не задан)
DEFAULT_K: Final[int] = 1000 * SCALE

# House fee (глобальный параметр, не per-market)
HOUSE_FEE_BPS: Final[int] = 300


# =============================================================================
# TOKEN ID
# =============================================================================


def token_id(question_id: int, option: int) -> int:
    """
    Детерминированный token_id опции.

    Формула: question_id * 1000 + option

    Raises:
        ValidationError: Если option вне [0, 1000) или question_id < 0

    Examples:
        >>> token_id(7, 2)
        7002
    """
    if question_id < 0:
        raise ValidationError("question_id must be non-negative", question_id=question_id)
    if not 0 <= option < TOKEN_ID_MULTIPLIER:
        raise ValidationError(
            "option index does not fit token id scheme",
            option=option,
            bound=TOKEN_ID_MULTIPLIER,
        )
    return question_id * TOKEN_ID_MULTIPLIER + option


def split_token_id(token: int) -> tuple[int, int]:
    """
    Обратная операция: token_id → (question_id, option).

    Examples:
        >>> split_token_id(7002)
        (7, 2)
    """
    if token < 0:
        raise ValidationError("token id must be non-negative", token_id=token)
    return divmod(token, TOKEN_ID_MULTIPLIER)


# =============================================================================
# КРИВАЯ
# =============================================================================


def effective_k(k: int | None, default_k: int = DEFAULT_K) -> int:
    """
    k рынка: override вызывающего или default при 0/None.

    Raises:
        ValidationError: Если k < 0 или default_k <= 0
    """
    if default_k <= 0:
        raise ValidationError("default k must be positive", default_k=default_k)
    if k is None or k == 0:
        return default_k
    if k < 0:
        raise ValidationError("k must be positive", k=k)
    return k


# =============================================================================
# ВЫПЛАТЫ
# =============================================================================


def house_fee(total_collateral: int, fee_bps: int = HOUSE_FEE_BPS) -> int:
    """
    House fee с общего collateral рынка (truncation).

    Examples:
        >>> house_fee(1000 * SCALE) == 30 * SCALE
        True
    """
    if not 0 <= fee_bps <= BPS_DENOMINATOR:
        raise ValidationError("fee_bps out of range", fee_bps=fee_bps, bound=BPS_DENOMINATOR)
    return bps_of(total_collateral, fee_bps)


def payout_pool(total_collateral: int, fee_bps: int = HOUSE_FEE_BPS) -> int:
    """Пул выплат победителям: total_collateral - house_fee."""
    return checked_sub(total_collateral, house_fee(total_collateral, fee_bps))


def pro_rata_payout(balance: int, pool: int, winning_supply: int) -> int:
    """
    Доля держателя победившей опции.

    Формула: balance * pool // winning_supply (truncation)

    Args:
        balance: Баланс токенов держателя
        pool: Пул выплат (после fee)
        winning_supply: Supply победившей опции на момент resolve

    Returns:
        Выплата в collateral; 0 если winning_supply == 0
    """
    if winning_supply == 0:
        return 0
    if balance > winning_supply:
        raise ValidationError(
            "balance exceeds winning supply",
            balance=balance,
            winning_supply=winning_supply,
            excess=balance - winning_supply,
        )
    return checked_div(checked_mul(balance, pool), winning_supply)
