"""Parameter validation package."""

from .parameter_validator import ParameterValidator

__all__ = ["ParameterValidator"]
