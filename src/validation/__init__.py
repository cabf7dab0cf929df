"""Input validation package."""

from src.validation.validator import InputValidator, InvalidInputError, coerce_amount

__all__ = ["InputValidator", "InvalidInputError", "coerce_amount"]
