"""
Application Initialization Module
Creates the Flask app: configuration, logging, database, blueprints
"""
import os
import logging
from flask import Flask
from config import get_config
from logging_config import setup_logging
from database.connection import configure_engine, init_db
from health_checks import register_health_checks

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """
    Application factory

    Args:
        config_class: Config class to load; defaults to the one selected by FLASK_ENV

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    config_class = config_class or get_config()
    app.config.from_object(config_class)

    setup_logging(app)

    logger.info("Initializing Quote Threading service")
    logger.info(f"Environment: {os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    configure_engine(app.config['DATABASE_URL'])
    if app.config.get('TESTING'):
        init_db()

    from app import register_blueprints
    register_blueprints(app)
    register_health_checks(app)

    logger.info("Application initialization complete")
    return app
