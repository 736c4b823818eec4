"""
Centralized Configuration for the Quote Threading service
Manages environment-specific settings, database location, and revision policy.
"""
import os
from datetime import timedelta

from flask import current_app, has_app_context


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()

    # Database Settings
    DATABASE_URL = os.environ.get('DATABASE_URL', 'postgresql://localhost/quote_threads')

    # Revision policy
    FREE_TIER_REVISION_LIMIT = int(os.environ.get('FREE_TIER_REVISION_LIMIT', '2'))
    MAX_FAMILY_DEPTH = int(os.environ.get('MAX_FAMILY_DEPTH', '32'))

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')
    LOG_TO_FILE = True

    # Session Configuration
    SESSION_PERMANENT = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    PREFERRED_URL_SCHEME = 'https'
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    SECRET_KEY = 'test-secret-key-minimum-32-chars-long-for-security'
    DATABASE_URL = 'sqlite://'
    LOG_TO_FILE = False


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)


def get_revision_policy(config=None):
    """
    Revision limits for the active configuration.

    Reads the running app's config when called inside an app context, so a
    class passed to create_app() takes effect; otherwise falls back to the
    class selected by FLASK_ENV.
    """
    if config is None and has_app_context():
        config = current_app.config
    if config is None:
        config = get_config()
    if isinstance(config, dict):
        return {
            'free_tier_revision_limit': config['FREE_TIER_REVISION_LIMIT'],
            'max_family_depth': config['MAX_FAMILY_DEPTH'],
        }
    return {
        'free_tier_revision_limit': config.FREE_TIER_REVISION_LIMIT,
        'max_family_depth': config.MAX_FAMILY_DEPTH,
    }
