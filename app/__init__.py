"""
Quote Threading - Application Package

- api/: HTTP route handlers (Flask Blueprints)

Business logic lives in the top-level services/ package; the app factory is
in app_init.py at the project root.
"""

import logging

from app.api.conversations import conversations_bp

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(conversations_bp)
    logger.info("Registered API blueprints")


__all__ = ['register_blueprints', 'conversations_bp']
