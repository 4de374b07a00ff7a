"""Dashboard configuration."""

import os

from legionella_src.config import Config as CalculatorConfig


class Config:
    """Base configuration."""

    # Flask
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-change-in-production")
    DEBUG = os.environ.get("FLASK_DEBUG", "false").lower() == "true"

    # Dashboard
    DASHBOARD_API_KEY = os.environ.get("DASHBOARD_API_KEY", "")

    # Calculator
    SAMPLE_TYPES = CalculatorConfig.SAMPLE_TYPES


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


def get_config():
    """Get configuration based on environment."""
    env = os.environ.get("FLASK_ENV", "development")
    if env == "production":
        return ProductionConfig()
    return DevelopmentConfig()
