"""
Freelance Marketplace - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env + config.Config)
2. Configures thread-aware logging
3. Opens the data store and wires the marketplace services (fail-fast)
4. Registers route blueprints
5. Sets up JSON error handlers

ARCHITECTURE:
    Request threads (Flask)
    └── Marketplace facade
        ├── JobService       (per-job locks for accept/pay)
        ├── PaymentService   (idempotent confirmation)
        ├── MailboxService   (event -> notification)
        ├── IdentityService  (users)
        └── FreelancerDirectory
            └── DataStore (users, jobs, notifications, freelancers)

The presentation layer never touches the store; it only calls the API.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Union

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.exceptions import MarketplaceError, StorageUnavailableError
from services.marketplace import Marketplace
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In PyInstaller bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent


def create_app(config_object: Union[str, type, None] = None) -> Flask:
    """
    Application factory - creates and configures Flask app.

    FAIL-FAST: If the data store cannot be loaded, the app will not start.

    Args:
        config_object: Import path or class of the configuration
            (default: "config.Config")

    Returns:
        Configured Flask application

    Raises:
        StorageUnavailableError: If a collection file cannot be loaded
    """
    # Use override=True so .env file always takes precedence over shell environment
    env_file = _get_base_path() / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object or "config.Config")

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        log_dir=app.config.get("LOG_DIR") or None,
        enable_file_logging=enable_file_logging,
        max_bytes=app.config.get("LOG_MAX_BYTES", 10 * 1024 * 1024),
        backup_count=app.config.get("LOG_BACKUP_COUNT", 5),
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting marketplace in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CORE INITIALIZATION (FAIL-FAST)
    # =========================================================================

    try:
        marketplace = Marketplace.create(
            data_dir=app.config.get("DATA_DIR") or None,
            max_retries=app.config.get("STORAGE_MAX_RETRIES", 3),
            retry_delay_seconds=app.config.get("STORAGE_RETRY_DELAY_SECONDS", 0.05),
            payment_delay_seconds=app.config.get("PAYMENT_DELAY_SECONDS", 0.0),
            payment_timeout_seconds=app.config.get("PAYMENT_TIMEOUT_SECONDS", 10.0),
            max_description_length=app.config.get("MAX_DESCRIPTION_LENGTH", 2000),
        )
    except StorageUnavailableError as e:
        logger.error(f"FATAL: Cannot start application - {e}")
        raise

    app.config["MARKETPLACE"] = marketplace

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(e: MarketplaceError):
        if e.status_code >= 500:
            logger.error(f"{e.code}: {e}")
        else:
            logger.info(f"{e.code}: {e.message}")
        return e.to_dict(), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return {
            "error": (e.name or "http_error").lower().replace(" ", "_"),
            "message": e.description,
            "details": {},
        }, e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.error(f"500 error: {e}", exc_info=True)
        return {
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again.",
            "details": {},
        }, 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
