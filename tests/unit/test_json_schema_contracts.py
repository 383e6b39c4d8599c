"""
Tests for JSON Schema Contract Validators

Комплексное тестирование JSON Schema валидаторов:
- Валидность самих схем
- Валидация правильных данных
- Детекция нарушений required полей
- Детекция нарушений типов
- Детекция нарушений constraints (pattern/enum/maxItems)
- Интеграция с Pydantic моделями
"""

import pytest
from jsonschema import ValidationError

from curvemarket.core.contracts import (
    MarketSnapshotValidator,
    SchemaLoader,
    TradeReceiptValidator,
    validate_market_snapshot,
    validate_trade_receipt,
)
from curvemarket.core.domain import Market, TradeReceipt, TradeSide
from curvemarket.core.math.fixed_point import SCALE


# =============================================================================
# FIXTURES - VALID DATA SAMPLES
# =============================================================================


@pytest.fixture
def valid_market_snapshot():
    """Валидный market_snapshot для тестирования."""
    return {
        "schema_version": "1",
        "question_id": 4,
        "question": "Will the launch happen on time?",
        "status": "open",
        "k": "1000000000000000000000",
        "total_supply": "2500000000000000000000",
        "total_collateral": "900000000000000000000",
        "deadline_ts": 1700086400,
        "options": [
            {
                "index": 0,
                "label": "yes",
                "supply": "2000000000000000000000",
                "price": "571428571428571428",
                "probability": "800000000000000000",
            },
            {
                "index": 1,
                "label": "no",
                "supply": "500000000000000000000",
                "price": "142857142857142857",
                "probability": "200000000000000000",
            },
        ],
        "winning_option": None,
    }


@pytest.fixture
def valid_trade_receipt():
    """Валидный trade_receipt для тестирования."""
    return {
        "schema_version": "1",
        "question_id": 4,
        "option": 1,
        "token_id": 4001,
        "side": "sell",
        "trader": "0xabc",
        "tokens": "10000000000000000000",
        "collateral_amount": "1400000000000000000",
        "price_before": "142857142857142857",
        "price_after": "139442231075697211",
        "total_supply_after": "2490000000000000000000",
        "total_collateral_after": "898600000000000000000",
        "ts": 1700001000,
    }


# =============================================================================
# TESTS - SCHEMA LOADING
# =============================================================================


def test_schema_loader_loads_all_schemas():
    """Проверка загрузки всех схем."""
    loader = SchemaLoader()

    snapshot_schema = loader.load_schema("market_snapshot")
    receipt_schema = loader.load_schema("trade_receipt")

    # Проверка версий схем
    assert snapshot_schema["properties"]["schema_version"]["const"] == "1"
    assert receipt_schema["properties"]["schema_version"]["const"] == "1"


def test_schema_loader_caches_schemas():
    """Проверка кэширования схем."""
    loader = SchemaLoader()

    schema1 = loader.load_schema("market_snapshot")
    schema2 = loader.load_schema("market_snapshot")

    # Должен вернуть тот же объект (кэш)
    assert schema1 is schema2


def test_schema_loader_raises_on_missing_schema():
    """Проверка ошибки при отсутствующей схеме."""
    loader = SchemaLoader()

    with pytest.raises(FileNotFoundError):
        loader.load_schema("non_existent_schema")


def test_schema_loader_rejects_invalid_schema(tmp_path):
    """Схема, не прошедшая meta-validation, отклоняется."""
    (tmp_path / "broken.json").write_text('{"type": 42}', encoding="utf-8")
    loader = SchemaLoader(tmp_path)

    with pytest.raises(ValueError, match="Invalid JSON Schema"):
        loader.load_schema("broken")


def test_schema_loader_missing_directory(tmp_path):
    with pytest.raises(RuntimeError):
        SchemaLoader(tmp_path / "absent")


# =============================================================================
# TESTS - MARKET SNAPSHOT VALIDATION
# =============================================================================


def test_market_snapshot_validator_accepts_valid_data(valid_market_snapshot):
    """Валидация правильного market_snapshot."""
    validator = MarketSnapshotValidator()
    validator.validate(valid_market_snapshot)  # Не должно выбросить исключение


def test_market_snapshot_validate_function(valid_market_snapshot):
    """Проверка функции validate_market_snapshot."""
    validate_market_snapshot(valid_market_snapshot)


def test_market_snapshot_rejects_missing_required_field(valid_market_snapshot):
    """Валидация отклоняет данные без обязательных полей."""
    data = valid_market_snapshot.copy()
    del data["k"]

    with pytest.raises(ValidationError) as exc_info:
        validate_market_snapshot(data)
    assert "'k' is a required property" in str(exc_info.value)


def test_market_snapshot_rejects_numeric_fixed_point(valid_market_snapshot):
    """Fixed-point величины — строки, а не JSON числа."""
    data = valid_market_snapshot.copy()
    data["total_supply"] = 2500 * SCALE

    with pytest.raises(ValidationError) as exc_info:
        validate_market_snapshot(data)
    assert "is not of type 'string'" in str(exc_info.value)


def test_market_snapshot_rejects_negative_string(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["total_collateral"] = "-1"

    with pytest.raises(ValidationError):
        MarketSnapshotValidator().validate(data)


def test_market_snapshot_rejects_zero_k(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["k"] = "0"

    with pytest.raises(ValidationError):
        validate_market_snapshot(data)


def test_market_snapshot_rejects_invalid_status(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["status"] = "paused"

    with pytest.raises(ValidationError):
        validate_market_snapshot(data)


def test_market_snapshot_rejects_single_option(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["options"] = data["options"][:1]

    with pytest.raises(ValidationError):
        validate_market_snapshot(data)


def test_market_snapshot_accepts_resolved_winner(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["status"] = "resolved"
    data["winning_option"] = 1

    validate_market_snapshot(data)


def test_market_snapshot_rejects_extra_field(valid_market_snapshot):
    data = valid_market_snapshot.copy()
    data["house_fee_bps"] = 300

    with pytest.raises(ValidationError, match="house_fee_bps"):
        validate_market_snapshot(data)


# =============================================================================
# TESTS - TRADE RECEIPT VALIDATION
# =============================================================================


def test_trade_receipt_validator_accepts_valid_data(valid_trade_receipt):
    validator = TradeReceiptValidator()
    validator.validate(valid_trade_receipt)


def test_trade_receipt_validate_function(valid_trade_receipt):
    validate_trade_receipt(valid_trade_receipt)


def test_trade_receipt_rejects_invalid_side(valid_trade_receipt):
    data = valid_trade_receipt.copy()
    data["side"] = "short"

    with pytest.raises(ValidationError):
        validate_trade_receipt(data)


def test_trade_receipt_rejects_zero_tokens(valid_trade_receipt):
    data = valid_trade_receipt.copy()
    data["tokens"] = "0"

    with pytest.raises(ValidationError):
        validate_trade_receipt(data)


def test_trade_receipt_rejects_missing_trader(valid_trade_receipt):
    data = valid_trade_receipt.copy()
    del data["trader"]

    with pytest.raises(ValidationError) as exc_info:
        validate_trade_receipt(data)
    assert "'trader' is a required property" in str(exc_info.value)


def test_trade_receipt_rejects_leading_zeros(valid_trade_receipt):
    data = valid_trade_receipt.copy()
    data["collateral_amount"] = "007"

    with pytest.raises(ValidationError):
        validate_trade_receipt(data)


# =============================================================================
# TESTS - PYDANTIC MODEL INTEGRATION
# =============================================================================


def test_market_model_generates_valid_snapshot():
    """Market.to_contract() проходит market_snapshot схему."""
    market = Market(
        question_id=9,
        question="Which option wins?",
        options=("a", "b", "c"),
        k=1000 * SCALE,
        supplies=(10 * SCALE, 0, 5 * SCALE),
        total_supply=15 * SCALE,
        total_collateral=7 * SCALE,
        created_ts=100,
        deadline_ts=200,
    )

    validate_market_snapshot(market.to_contract(now_ts=150))
    validate_market_snapshot(market.with_resolution(2, 0).to_contract(now_ts=250))


def test_receipt_model_generates_valid_json():
    """TradeReceipt.to_contract() проходит trade_receipt схему."""
    receipt = TradeReceipt(
        question_id=9,
        option=2,
        token_id=9002,
        side=TradeSide.BUY,
        trader="alice",
        tokens=3 * SCALE,
        collateral_amount=SCALE,
        price_before=0,
        price_after=2_994_011_976_047_904,
        total_supply_after=3 * SCALE,
        total_collateral_after=SCALE,
        ts=120,
    )

    validate_trade_receipt(receipt.to_contract())
