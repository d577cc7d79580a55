"""
Input Validation Layer for Alchemy (2025)

Purpose
-------
Provide a centralized validation layer for every value the surrounding
application hands to the progression engine: user and entity identifiers,
point amounts, page parameters and free-text descriptions.

Responsibilities
----------------
- Validate and convert inputs to the correct types
- Enforce bounds checking for numerical inputs (min/max validation)
- Validate identifier and description strings
- Raise ValidationError with user-friendly error messages

Non-Responsibilities
--------------------
- Business rule validation (balance, stock, tier; service layer concern)
- Database constraints and persistence
- Authentication (the caller passes a trusted user id)

Observability
-------------
Every validation failure is logged at debug level with field_name,
raw_value (repr) and reason.

Dependencies
------------
- alchemy.modules.shared.exceptions.ValidationError
- alchemy.core.logging.logger.get_logger
"""

from __future__ import annotations

import re
from typing import Any, NoReturn, Optional, Tuple

from alchemy.core.logging.logger import get_logger
from alchemy.modules.shared.exceptions import ValidationError

logger = get_logger(__name__)

MAX_IDENTIFIER_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 255


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    """
    Centralized helper to log and raise a ValidationError.

    All validation failures go through this function to ensure consistent,
    structured logging and error construction.
    """
    logger.debug(
        "Input validation failed",
        extra={
            "field_name": field_name,
            "raw_value": repr(value),
            "reason": message,
        },
    )
    raise ValidationError(field_name, message)


class InputValidator:
    """
    Centralized input validation.

    All validation methods:
    - Are stateless and deterministic
    - Return validated values on success
    - Raise ValidationError on failure (never silently fail)
    """

    # =========================================================================
    # INTEGER VALIDATION
    # =========================================================================

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        allow_zero: bool = True,
    ) -> int:
        """
        Validate and convert value to integer with optional bounds checking.

        Booleans and non-integral floats are rejected rather than coerced.

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if isinstance(value, bool):
            _raise_validation_error(field_name, value, "Must be a whole number")

        if isinstance(value, float) and not value.is_integer():
            _raise_validation_error(
                field_name, value, f"Must be a whole number, got '{value}'"
            )

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            _raise_validation_error(
                field_name,
                value,
                f"Must be a whole number, got '{value}'",
            )

        if not allow_zero and int_value == 0:
            _raise_validation_error(field_name, int_value, "Cannot be zero")

        if min_value is not None and int_value < min_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Must be at least {min_value}, got {int_value}",
            )

        if max_value is not None and int_value > max_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Cannot exceed {max_value}, got {int_value}",
            )

        return int_value

    @staticmethod
    def validate_positive_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        """Validate that value is a strictly positive integer (>= 1)."""
        return InputValidator.validate_integer(
            value=value,
            field_name=field_name,
            min_value=1,
            max_value=max_value,
            allow_zero=False,
        )

    @staticmethod
    def validate_non_negative_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        return InputValidator.validate_integer(
            value=value,
            field_name=field_name,
            min_value=0,
            max_value=max_value,
            allow_zero=True,
        )

    # =========================================================================
    # STRING VALIDATION
    # =========================================================================

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        allowed_chars: Optional[str] = None,
    ) -> str:
        """
        Validate string input with optional length and character constraints.

        Args:
            value: String value to validate
            field_name: Name of field for error messages
            min_length: Minimum string length (after stripping)
            max_length: Maximum string length
            allowed_chars: Regex character class for allowed characters

        Raises:
            ValidationError: If validation fails
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if not isinstance(value, str):
            _raise_validation_error(field_name, value, "Must be text")

        str_value = value.strip()

        if min_length is not None and len(str_value) < min_length:
            _raise_validation_error(
                field_name,
                str_value,
                f"Must be at least {min_length} characters",
            )

        if max_length is not None and len(str_value) > max_length:
            _raise_validation_error(
                field_name,
                str_value,
                f"Cannot exceed {max_length} characters",
            )

        if allowed_chars is not None:
            if not re.fullmatch(f"[{allowed_chars}]+", str_value):
                _raise_validation_error(
                    field_name,
                    str_value,
                    "Contains invalid characters",
                )

        return str_value

    @staticmethod
    def validate_identifier(value: Any, field_name: str) -> str:
        """
        Validate an opaque identifier (user id, quest id, reward id).

        Identifiers are non-empty, at most 64 characters, and limited to
        letters, digits, dash, underscore, dot and colon.
        """
        return InputValidator.validate_string(
            value,
            field_name,
            min_length=1,
            max_length=MAX_IDENTIFIER_LENGTH,
            allowed_chars=r"A-Za-z0-9_\-.:",
        )

    @staticmethod
    def validate_description(value: Any, field_name: str = "description") -> str:
        return InputValidator.validate_string(
            value,
            field_name,
            min_length=1,
            max_length=MAX_DESCRIPTION_LENGTH,
        )

    # =========================================================================
    # PAGINATION
    # =========================================================================

    @staticmethod
    def validate_page_params(
        page: Any,
        per_page: Any,
        max_per_page: int,
    ) -> Tuple[int, int]:
        """
        Validate 1-based page parameters.

        Returns:
            (page, per_page) as integers

        Raises:
            ValidationError: If page < 1, per_page < 1 or per_page > max_per_page
        """
        page_value = InputValidator.validate_positive_integer(page, "page")
        per_page_value = InputValidator.validate_positive_integer(
            per_page, "per_page", max_value=max_per_page
        )
        return page_value, per_page_value
