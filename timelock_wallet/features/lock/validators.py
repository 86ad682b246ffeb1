"""Validators for human-entered lock amounts and durations."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


class LockInputValidator:
    """Parses the amount and duration fields of the create-lock form."""

    @staticmethod
    def parse_amount(value: Any) -> ValidationResult:
        if isinstance(value, bool):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        if isinstance(value, (int, float, Decimal)):
            raw_amount = str(value)
        elif isinstance(value, str):
            if not value.strip():
                return ValidationResult(
                    is_valid=False,
                    error_message="Amount is required",
                )
            raw_amount = value.strip().replace(",", "").replace(" ", "")
            if raw_amount.startswith("-") or raw_amount.startswith("+"):
                return ValidationResult(
                    is_valid=False,
                    error_message="Amount must be a positive number",
                )
        else:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        try:
            amount_decimal = Decimal(raw_amount)
        except (InvalidOperation, ValueError):
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be a valid number",
            )

        if not amount_decimal.is_finite():
            return ValidationResult(
                is_valid=False,
                error_message="Invalid numeric format (special value detected)",
            )

        if amount_decimal < 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount cannot be negative",
            )

        if amount_decimal == 0:
            return ValidationResult(
                is_valid=False,
                error_message="Amount must be greater than zero",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=amount_decimal,
        )

    @staticmethod
    def parse_duration(value: Any) -> ValidationResult:
        if isinstance(value, bool):
            return ValidationResult(
                is_valid=False,
                error_message="Duration must be a whole number",
            )

        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return ValidationResult(
                    is_valid=False,
                    error_message="Duration is required",
                )
            try:
                magnitude = int(raw)
            except ValueError:
                return ValidationResult(
                    is_valid=False,
                    error_message="Duration must be a whole number",
                )
        elif isinstance(value, int):
            magnitude = value
        elif isinstance(value, (float, Decimal)):
            if not Decimal(str(value)).is_finite() or value != int(value):
                return ValidationResult(
                    is_valid=False,
                    error_message="Duration must be a whole number",
                )
            magnitude = int(value)
        else:
            return ValidationResult(
                is_valid=False,
                error_message="Duration must be a whole number",
            )

        if magnitude <= 0:
            return ValidationResult(
                is_valid=False,
                error_message="Duration must be greater than zero",
            )

        return ValidationResult(is_valid=True, normalized_value=magnitude)
