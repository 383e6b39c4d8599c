"""MarketEngine — оркестрация сделок, resolve и redeem.

Поток BUY:
    validate (фаза, индекс опции, amount) → BudgetSolver (CostIntegrator)
    → slippage → post-trade price check → новое состояние рынка + mint
    → transfer_from(payer)

Поток SELL:
    validate → баланс → ReturnIntegrator → slippage → новое состояние
    + burn → transfer(seller)

Атомарность:
- Рынки хранятся в arena (list), индекс = question_id
- Market immutable: мутация = подмена элемента arena одним присваиванием
- Состояние применяется ДО внешнего перевода; отказ перевода (False или
  исключение) откатывает рынок и ledger к состоянию до вызова
- Все state-mutating операции выполняются под ReentrancyGuard
"""

import logging
from typing import Callable, List, Optional, Sequence

from curvemarket.core.contracts import (
    validate_market_snapshot,
    validate_trade_receipt,
)
from curvemarket.core.domain.events import (
    EmergencyWithdrawal,
    MarketCreated,
    MarketResolved,
    PayoutClaimed,
    TradeExecuted,
)
from curvemarket.core.domain.market import Market
from curvemarket.core.domain.trade import (
    PayoutReceipt,
    Resolution,
    TradeReceipt,
    TradeSide,
)
from curvemarket.core.domain.units import (
    MAX_OPTIONS,
    MIN_OPTIONS,
    effective_k,
    house_fee,
    pro_rata_payout,
    token_id,
)
from curvemarket.core.errors import (
    InsufficientBalanceError,
    InvariantViolation,
    PhaseError,
    SlippageError,
    TransferFailed,
    ValidationError,
)
from curvemarket.core.math.budget_solver import (
    BudgetQuote,
    post_trade_price_check,
    tokens_for_budget,
)
from curvemarket.core.math.curve_integration import sell_return
from curvemarket.core.math.price_model import price
from curvemarket.engine.collaborators import (
    AccessControl,
    CollateralAsset,
    EventSink,
    Ledger,
)
from curvemarket.engine.config import EngineConfig
from curvemarket.engine.guard import ReentrancyGuard
from curvemarket.engine.in_memory import LoggingEventSink

logger = logging.getLogger(__name__)


def _no_ledger_change() -> None:
    return None


class MarketEngine:
    """Движок constrained bonding curve рынков.

    Владеет supply и collateral рынков. Внешние балансы токенов не
    изменяет напрямую: только сообщает Ledger, что mint/burn.
    """

    def __init__(
        self,
        ledger: Ledger,
        collateral: CollateralAsset,
        access_control: AccessControl,
        event_sink: Optional[EventSink] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            ledger: multi-token ledger
            collateral: collateral-актив
            access_control: держатель admin capability
            event_sink: приёмник событий (default: logging)
            config: конфигурация движка
        """
        self.ledger = ledger
        self.collateral = collateral
        self.access_control = access_control
        self.event_sink = event_sink or LoggingEventSink()
        self.config = config or EngineConfig()

        self._markets: List[Market] = []
        self._guard = ReentrancyGuard()

    # ------------------------------------------------------------------
    # Создание рынка
    # ------------------------------------------------------------------

    def create_market(
        self,
        caller: str,
        question: str,
        options: Sequence[str],
        duration_sec: int,
        k: Optional[int] = None,
    ) -> int:
        """Создание рынка с нулевыми supply.

        Args:
            caller: вызывающий (должен владеть admin capability)
            question: текст вопроса
            options: метки опций (2-10)
            duration_sec: длительность торговли в секундах (> 0)
            k: крутизна кривой; 0/None → config.default_k

        Returns:
            question_id нового рынка
        """
        self.access_control.require_admin(caller)

        if not question:
            raise ValidationError("question must be non-empty")
        if not MIN_OPTIONS <= len(options) <= MAX_OPTIONS:
            raise ValidationError(
                "option count out of range",
                num_options=len(options),
                min_options=MIN_OPTIONS,
                max_options=MAX_OPTIONS,
            )
        for index, label in enumerate(options):
            if not label:
                raise ValidationError("option label must be non-empty", option=index)
        if duration_sec <= 0:
            raise ValidationError("duration must be positive", duration_sec=duration_sec)

        now = self.config.now()
        market = Market(
            question_id=len(self._markets),
            question=question,
            options=tuple(options),
            k=effective_k(k, self.config.default_k),
            supplies=(0,) * len(options),
            total_supply=0,
            total_collateral=0,
            created_ts=now,
            deadline_ts=now + duration_sec,
        )
        self._markets.append(market)

        logger.info(
            f"Market {market.question_id} created: {len(options)} options, "
            f"k={market.k}, deadline={market.deadline_ts}"
        )
        self.event_sink.emit(
            MarketCreated(
                question_id=market.question_id,
                ts=now,
                question=question,
                options=market.options,
                k=market.k,
                deadline_ts=market.deadline_ts,
            )
        )
        return market.question_id

    # ------------------------------------------------------------------
    # Торговля
    # ------------------------------------------------------------------

    def buy(
        self,
        caller: str,
        question_id: int,
        option: int,
        usdc_amount: int,
        min_tokens_out: int = 0,
    ) -> TradeReceipt:
        """Покупка токенов опции на бюджет usdc_amount.

        Списывается фактическая стоимость (actual_cost <= usdc_amount).

        Raises:
            ValidationError, PhaseError, SlippageError, InvariantViolation,
            TransferFailed
        """
        with self._guard.hold("buy"):
            market = self._get(question_id)
            now = self.config.now()
            self._require_trading(market, now)
            self._require_option(market, option)
            if usdc_amount <= 0:
                raise ValidationError("usdc_amount must be positive", usdc_amount=usdc_amount)
            if min_tokens_out < 0:
                raise ValidationError(
                    "min_tokens_out must be non-negative", min_tokens_out=min_tokens_out
                )

            quote = tokens_for_budget(
                market.supplies[option],
                usdc_amount,
                market.k,
                market.total_supply,
                self.config.small_budget_threshold,
            )
            if quote.tokens_out == 0:
                raise ValidationError(
                    "budget buys zero tokens", usdc_amount=usdc_amount, option=option
                )
            if quote.tokens_out < min_tokens_out:
                raise SlippageError(
                    "tokens out below minimum",
                    tokens_out=quote.tokens_out,
                    min_tokens_out=min_tokens_out,
                    shortfall=min_tokens_out - quote.tokens_out,
                    usdc_amount=usdc_amount,
                )

            updated = market.with_buy(option, quote.tokens_out, quote.actual_cost)
            post_trade_price_check(updated.supplies, updated.total_supply, updated.k)

            tid = token_id(question_id, option)
            self._settle(
                previous=market,
                updated=updated,
                apply_ledger=lambda: self.ledger.mint(caller, tid, quote.tokens_out),
                revert_ledger=lambda: self.ledger.burn(caller, tid, quote.tokens_out),
                transfer=lambda: self.collateral.transfer_from(caller, quote.actual_cost),
                payer=caller,
                amount=quote.actual_cost,
            )

            receipt = self._receipt(
                TradeSide.BUY, caller, market, updated, option, quote.tokens_out,
                quote.actual_cost, now,
            )

        logger.debug(
            f"BUY q={question_id} option={option} tokens={quote.tokens_out} "
            f"cost={quote.actual_cost} by {caller}"
        )
        self._emit_trade(receipt)
        return receipt

    def sell(
        self,
        caller: str,
        question_id: int,
        option: int,
        token_amount: int,
        min_usdc_out: int = 0,
    ) -> TradeReceipt:
        """Продажа token_amount токенов опции.

        Выручка sell_return может превысить total_collateral рынка: дрейф
        midpoint-дискретизации между серией мелких покупок и одной крупной
        продажей. Такая продажа отклоняется InvariantViolation с
        reason="collateral_shortfall"; нарушение границы цены несёт
        reason="price_bound".

        Raises:
            ValidationError, PhaseError, InsufficientBalanceError,
            SlippageError, InvariantViolation, TransferFailed
        """
        with self._guard.hold("sell"):
            market = self._get(question_id)
            now = self.config.now()
            self._require_trading(market, now)
            self._require_option(market, option)
            if token_amount <= 0:
                raise ValidationError("token_amount must be positive", token_amount=token_amount)
            if min_usdc_out < 0:
                raise ValidationError("min_usdc_out must be non-negative", min_usdc_out=min_usdc_out)

            tid = token_id(question_id, option)
            balance = self.ledger.balance_of(caller, tid)
            if balance < token_amount:
                raise InsufficientBalanceError(
                    "sell exceeds token balance",
                    balance=balance,
                    token_amount=token_amount,
                    shortfall=token_amount - balance,
                )
            if token_amount > market.supplies[option]:
                raise ValidationError(
                    "sell exceeds option supply",
                    token_amount=token_amount,
                    supply=market.supplies[option],
                )

            proceeds = sell_return(
                market.supplies[option], token_amount, market.k, market.total_supply
            )
            if proceeds == 0:
                raise ValidationError("sell returns zero collateral", token_amount=token_amount)
            if proceeds < min_usdc_out:
                raise SlippageError(
                    "usdc out below minimum",
                    usdc_out=proceeds,
                    min_usdc_out=min_usdc_out,
                    shortfall=min_usdc_out - proceeds,
                    token_amount=token_amount,
                )
            if proceeds > market.total_collateral:
                raise InvariantViolation(
                    "sell proceeds exceed market collateral",
                    reason="collateral_shortfall",
                    proceeds=proceeds,
                    total_collateral=market.total_collateral,
                    excess=proceeds - market.total_collateral,
                )

            updated = market.with_sell(option, token_amount, proceeds)
            self._settle(
                previous=market,
                updated=updated,
                apply_ledger=lambda: self.ledger.burn(caller, tid, token_amount),
                revert_ledger=lambda: self.ledger.mint(caller, tid, token_amount),
                transfer=lambda: self.collateral.transfer(caller, proceeds),
                recipient=caller,
                amount=proceeds,
            )

            receipt = self._receipt(
                TradeSide.SELL, caller, market, updated, option, token_amount, proceeds, now
            )

        logger.debug(
            f"SELL q={question_id} option={option} tokens={token_amount} "
            f"proceeds={proceeds} by {caller}"
        )
        self._emit_trade(receipt)
        return receipt

    # ------------------------------------------------------------------
    # Resolve / redeem
    # ------------------------------------------------------------------

    def resolve(self, caller: str, question_id: int, winning_option: int) -> Resolution:
        """Фиксация победителя (один раз, после deadline).

        House fee (house_fee_bps от total_collateral) уходит оператору,
        остаток становится пулом выплат.
        """
        with self._guard.hold("resolve"):
            self.access_control.require_admin(caller)
            market = self._get(question_id)
            now = self.config.now()
            if market.resolved:
                raise PhaseError(
                    "market already resolved",
                    question_id=question_id,
                    winning_option=market.winning_option,
                )
            if now < market.deadline_ts:
                raise PhaseError(
                    "resolution before deadline",
                    now=now,
                    deadline_ts=market.deadline_ts,
                    remaining_sec=market.deadline_ts - now,
                )
            self._require_option(market, winning_option)

            fee = house_fee(market.total_collateral, self.config.house_fee_bps)
            updated = market.with_resolution(winning_option, fee)
            operator = self.access_control.admin
            self._settle(
                previous=market,
                updated=updated,
                apply_ledger=_no_ledger_change,
                revert_ledger=_no_ledger_change,
                transfer=lambda: fee == 0 or self.collateral.transfer(operator, fee),
                recipient=operator,
                amount=fee,
            )

            resolution = Resolution(
                question_id=question_id,
                winning_option=winning_option,
                house_fee=fee,
                payout_pool=updated.payout_pool,
                winning_supply=updated.winning_supply,
                ts=now,
            )

        logger.info(
            f"Market {question_id} resolved: winner={winning_option}, fee={fee}, "
            f"pool={updated.payout_pool}"
        )
        self.event_sink.emit(
            MarketResolved(
                question_id=question_id,
                ts=now,
                winning_option=winning_option,
                house_fee=fee,
                payout_pool=updated.payout_pool,
            )
        )
        return resolution

    def redeem(self, caller: str, question_id: int, option: int) -> PayoutReceipt:
        """Погашение токенов опции после resolve.

        Победитель получает balance * payout_pool // winning_supply,
        проигравший — 0. Токены уничтожаются в обоих случаях.
        """
        with self._guard.hold("redeem"):
            market = self._get(question_id)
            if not market.resolved:
                raise PhaseError("market not resolved", question_id=question_id)
            self._require_option(market, option)

            tid = token_id(question_id, option)
            balance = self.ledger.balance_of(caller, tid)
            if balance == 0:
                raise InsufficientBalanceError(
                    "nothing to redeem", question_id=question_id, option=option, balance=0
                )

            is_winner = option == market.winning_option
            if is_winner:
                payout = pro_rata_payout(balance, market.payout_pool, market.winning_supply)
                updated = market.with_payout(payout)
            else:
                payout = 0
                updated = market

            self._settle(
                previous=market,
                updated=updated,
                apply_ledger=lambda: self.ledger.burn(caller, tid, balance),
                revert_ledger=lambda: self.ledger.mint(caller, tid, balance),
                transfer=lambda: payout == 0 or self.collateral.transfer(caller, payout),
                recipient=caller,
                amount=payout,
            )
            now = self.config.now()

        logger.info(
            f"Redeem q={question_id} option={option} by {caller}: "
            f"burned={balance}, payout={payout}"
        )
        self.event_sink.emit(
            PayoutClaimed(
                question_id=question_id,
                ts=now,
                holder=caller,
                option=option,
                tokens_burned=balance,
                payout=payout,
            )
        )
        return PayoutReceipt(
            question_id=question_id,
            option=option,
            holder=caller,
            tokens_burned=balance,
            payout=payout,
            is_winner=is_winner,
        )

    def emergency_withdraw(self, caller: str, recipient: str, amount: int) -> None:
        """Экстренный вывод collateral администратором.

        Учёт collateral рынков не изменяется.
        """
        with self._guard.hold("emergency_withdraw"):
            self.access_control.require_admin(caller)
            if amount <= 0:
                raise ValidationError("withdraw amount must be positive", amount=amount)
            if not self.collateral.transfer(recipient, amount):
                raise TransferFailed(
                    "emergency withdrawal rejected", recipient=recipient, amount=amount
                )
            now = self.config.now()

        logger.warning(f"Emergency withdrawal of {amount} to {recipient} by {caller}")
        self.event_sink.emit(EmergencyWithdrawal(recipient=recipient, amount=amount, ts=now))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def market_count(self) -> int:
        return len(self._markets)

    def get_market(self, question_id: int) -> Market:
        return self._get(question_id)

    def token_id(self, question_id: int, option: int) -> int:
        market = self._get(question_id)
        self._require_option(market, option)
        return token_id(question_id, option)

    def get_prices(self, question_id: int) -> tuple[int, ...]:
        return self._get(question_id).prices()

    def get_normalized_prices(self, question_id: int) -> tuple[int, ...]:
        return self._get(question_id).normalized_prices()

    def quote_buy(self, question_id: int, option: int, usdc_amount: int) -> BudgetQuote:
        """Котировка покупки без изменения состояния."""
        if usdc_amount <= 0:
            raise ValidationError("usdc_amount must be positive", usdc_amount=usdc_amount)
        market = self._get(question_id)
        self._require_option(market, option)
        return tokens_for_budget(
            market.supplies[option],
            usdc_amount,
            market.k,
            market.total_supply,
            self.config.small_budget_threshold,
        )

    def quote_sell(self, question_id: int, option: int, token_amount: int) -> int:
        """Котировка продажи без изменения состояния (0 если amount > supply)."""
        if token_amount <= 0:
            raise ValidationError("token_amount must be positive", token_amount=token_amount)
        market = self._get(question_id)
        self._require_option(market, option)
        return sell_return(market.supplies[option], token_amount, market.k, market.total_supply)

    def export_market(self, question_id: int) -> dict:
        """Снапшот рынка, провалидированный по market_snapshot.json."""
        snapshot = self._get(question_id).to_contract(self.config.now())
        validate_market_snapshot(snapshot)
        return snapshot

    def export_receipt(self, receipt: TradeReceipt) -> dict:
        """Квитанция сделки, провалидированная по trade_receipt.json."""
        self._get(receipt.question_id)
        data = receipt.to_contract()
        validate_trade_receipt(data)
        return data

    # ------------------------------------------------------------------
    # Внутреннее
    # ------------------------------------------------------------------

    def _get(self, question_id: int) -> Market:
        if not 0 <= question_id < len(self._markets):
            raise ValidationError(
                "unknown market", question_id=question_id, market_count=len(self._markets)
            )
        return self._markets[question_id]

    @staticmethod
    def _require_option(market: Market, option: int) -> None:
        if not 0 <= option < market.num_options:
            raise ValidationError(
                "option index out of range",
                option=option,
                num_options=market.num_options,
            )

    @staticmethod
    def _require_trading(market: Market, now: int) -> None:
        if market.resolved:
            raise PhaseError("market resolved", question_id=market.question_id)
        if now >= market.deadline_ts:
            raise PhaseError(
                "trading closed",
                question_id=market.question_id,
                now=now,
                deadline_ts=market.deadline_ts,
                overdue_sec=now - market.deadline_ts,
            )

    def _settle(
        self,
        previous: Market,
        updated: Market,
        apply_ledger: Callable[[], None],
        revert_ledger: Callable[[], None],
        transfer: Callable[[], bool],
        **transfer_context: object,
    ) -> None:
        """Применение состояния, затем внешний перевод; откат при отказе."""
        question_id = previous.question_id
        self._markets[question_id] = updated
        try:
            apply_ledger()
        except Exception:
            self._markets[question_id] = previous
            raise

        try:
            accepted = transfer()
        except Exception:
            self._rollback(previous, revert_ledger)
            raise

        if not accepted:
            self._rollback(previous, revert_ledger)
            raise TransferFailed("collateral transfer rejected", **transfer_context)

    def _rollback(self, previous: Market, revert_ledger: Callable[[], None]) -> None:
        logger.warning(f"Rolling back market {previous.question_id} after failed transfer")
        # Рынок восстанавливается до ledger: отказ revert_ledger не оставляет
        # supply/collateral неоплаченной сделки
        self._markets[previous.question_id] = previous
        revert_ledger()

    def _receipt(
        self,
        side: TradeSide,
        trader: str,
        before: Market,
        after: Market,
        option: int,
        tokens: int,
        collateral_amount: int,
        now: int,
    ) -> TradeReceipt:
        return TradeReceipt(
            question_id=before.question_id,
            option=option,
            token_id=token_id(before.question_id, option),
            side=side,
            trader=trader,
            tokens=tokens,
            collateral_amount=collateral_amount,
            price_before=price(before.supplies[option], before.total_supply, before.k),
            price_after=price(after.supplies[option], after.total_supply, after.k),
            total_supply_after=after.total_supply,
            total_collateral_after=after.total_collateral,
            ts=now,
        )

    def _emit_trade(self, receipt: TradeReceipt) -> None:
        self.event_sink.emit(
            TradeExecuted(
                question_id=receipt.question_id,
                ts=receipt.ts,
                side=receipt.side,
                trader=receipt.trader,
                option=receipt.option,
                tokens=receipt.tokens,
                collateral_amount=receipt.collateral_amount,
                price_after=receipt.price_after,
            )
        )
