"""
JSON Schema Contract Validators

Модуль для валидации экспортируемых движком данных согласно формальным
JSON Schema контрактам. Использует библиотеку jsonschema (Draft 2020-12).

Схемы (package data, curvemarket/core/contracts/schema/):
- market_snapshot.json — снапшот рынка (цены, supply, вероятности)
- trade_receipt.json — исполненная сделка

Fixed-point величины в контрактах — десятичные строки без знака.
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат рядом с модулем в каталоге schema/.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'market_snapshot')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)


class MarketSnapshotValidator(ContractValidator):
    """Валидатор для market_snapshot контракта."""

    def __init__(self):
        super().__init__("market_snapshot")


class TradeReceiptValidator(ContractValidator):
    """Валидатор для trade_receipt контракта."""

    def __init__(self):
        super().__init__("trade_receipt")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_market_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация market_snapshot данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    MarketSnapshotValidator().validate(data)


def validate_trade_receipt(data: Dict[str, Any]) -> None:
    """
    Валидация trade_receipt данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    TradeReceiptValidator().validate(data)
