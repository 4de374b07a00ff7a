"""Web dashboard for the Legionella UFC calculator."""

from .app import create_app

__all__ = ["create_app"]
