"""Boundary validation package."""

from finance_engine.validation.validator import InputValidationError, InputValidator

__all__ = ["InputValidationError", "InputValidator"]
