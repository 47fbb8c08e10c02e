"""
Configuration for the freelance marketplace.

Values are read from the environment (a .env file is loaded first), so a
deployment can point DATA_DIR at durable storage and tune retry behaviour
without code changes.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "freelance_market_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Storage
    # ==========================================================================
    # DATA_DIR holds one JSON file per collection (users, jobs, notifications,
    # freelancers). An empty value keeps everything in memory.
    #
    # Transient I/O errors are retried STORAGE_MAX_RETRIES times, waiting
    # STORAGE_RETRY_DELAY_SECONDS between attempts, before the operation fails
    # with StorageUnavailableError.
    # ==========================================================================
    DATA_DIR = os.environ.get("DATA_DIR", str(BASE_DIR / "data"))
    STORAGE_MAX_RETRIES = int(os.environ.get("STORAGE_MAX_RETRIES", "3"))
    STORAGE_RETRY_DELAY_SECONDS = float(
        os.environ.get("STORAGE_RETRY_DELAY_SECONDS", "0.05")
    )

    # ==========================================================================
    # Simulated payment gateway
    # ==========================================================================
    # PAYMENT_DELAY_SECONDS: artificial confirmation latency (demo spinner)
    # PAYMENT_TIMEOUT_SECONDS: confirmations slower than this fail with
    #   PaymentTimeoutError and must be retried by the caller
    # ==========================================================================
    PAYMENT_DELAY_SECONDS = float(os.environ.get("PAYMENT_DELAY_SECONDS", "0"))
    PAYMENT_TIMEOUT_SECONDS = float(os.environ.get("PAYMENT_TIMEOUT_SECONDS", "10"))

    # Logging (rotating files are written in production only)
    LOG_DIR = os.environ.get("LOG_DIR", str(BASE_DIR / "logs"))
    LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", str(10 * 1024 * 1024)))
    LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", "5"))

    # Input limits
    MAX_DESCRIPTION_LENGTH = int(os.environ.get("MAX_DESCRIPTION_LENGTH", "2000"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration (in-memory store, no retry delay)."""
    DEBUG = False
    TESTING = True
    DATA_DIR = ""
    STORAGE_RETRY_DELAY_SECONDS = 0.0
    PAYMENT_DELAY_SECONDS = 0.0
