"""
Flask route blueprints for the freelance marketplace.

This module contains all route handlers organized by functionality:
- pricing: Service catalog and price quotes
- users: Signup, login, profiles, freelancer directory
- jobs: Posting, listing and accepting jobs
- mailbox: Inboxes and payments
- api: Health check

Every handler is a thin JSON wrapper around the Marketplace facade stored
in app.config["MARKETPLACE"]. Errors raised by the core are converted to
JSON by the handler registered in create_app().
"""

from .pricing import pricing_bp
from .users import users_bp
from .jobs import jobs_bp
from .mailbox import mailbox_bp
from .api import api_bp

__all__ = [
    "pricing_bp",
    "users_bp",
    "jobs_bp",
    "mailbox_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(pricing_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(jobs_bp)
    app.register_blueprint(mailbox_bp)
    app.register_blueprint(api_bp)
