"""Flask application factory for the Legionella UFC calculator dashboard."""

import os

from flask import Flask

from .config import get_config


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration object or dict

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        config = get_config()

    if isinstance(config, dict):
        app.config.update(config)
    else:
        app.config.from_object(config)

    app.config.setdefault("SAMPLE_TYPES", ["A", "B", "C", "D", "E"])
    app.config.setdefault("DASHBOARD_API_KEY", "")

    # Register blueprints
    from .routes.calculator import calculator_bp

    app.register_blueprint(calculator_bp)  # Calculator at /, API at /api

    # Context processor for templates
    @app.context_processor
    def inject_globals():
        return {
            "app_name": "Legionella UFC Calculator",
        }

    return app


def run_dev_server():
    """Run development server."""
    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=True,
    )


if __name__ == "__main__":
    run_dev_server()
