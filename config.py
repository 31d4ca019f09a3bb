"""
Application Configuration

Centralizes all Flask, database and ledger configuration settings.
"""

import json
import os

from constants import (
    DEFAULT_PLATFORM,
    DEFAULT_PLATFORM_MARKUPS,
    OVERHEAD_DAILY_SERVES,
    OVERHEAD_PERIOD_DAYS,
)

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _markups_from_env():
    """Platform markup table, optionally overridden by a JSON env var."""
    raw = os.environ.get('PLATFORM_MARKUPS')
    if not raw:
        return dict(DEFAULT_PLATFORM_MARKUPS)
    return {str(k): float(v) for k, v in json.loads(raw).items()}


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'ledger.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Sales channels: multiplier applied to weighted-average cost when a
    # direct ingredient sale comes in without a price
    PLATFORM_MARKUPS = _markups_from_env()
    DEFAULT_PLATFORM = os.environ.get('DEFAULT_PLATFORM', DEFAULT_PLATFORM)

    # Catalog defaults
    DEFAULT_MIN_STOCK = float(os.environ.get('DEFAULT_MIN_STOCK', 5))

    # Target gross profit % used for suggested menu prices
    TARGET_GP = float(os.environ.get('TARGET_GP', 60))

    # Overhead-inclusive menu cost: expenses of the last N days spread over
    # the menu servings sold in them
    OVERHEAD_PERIOD_DAYS = int(os.environ.get('OVERHEAD_PERIOD_DAYS', OVERHEAD_PERIOD_DAYS))
    OVERHEAD_DAILY_SERVES = float(os.environ.get('OVERHEAD_DAILY_SERVES', OVERHEAD_DAILY_SERVES))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'WARNING'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
