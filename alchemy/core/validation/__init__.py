"""
Alchemy validation package.

Exposes `InputValidator`, the single entry point for validating caller
supplied identifiers, amounts, descriptions and page parameters.
Business rules (balance, stock, tier) are enforced by services.
"""

from alchemy.core.validation.input_validator import InputValidator

__all__ = [
    "InputValidator",
]
