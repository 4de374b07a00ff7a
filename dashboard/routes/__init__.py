"""Dashboard routes."""

from .calculator import calculator_bp

__all__ = [
    "calculator_bp",
]
