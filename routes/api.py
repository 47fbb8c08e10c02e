"""
Service routes.

Handles:
- /health - Health check endpoint
"""

from flask import Blueprint, current_app

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with store status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    market = current_app.config.get("MARKETPLACE")
    if market is None:
        health_status["checks"]["marketplace"] = "not_available"
        health_status["status"] = "degraded"
    else:
        store = market.store
        health_status["checks"]["storage"] = "persistent" if store.is_persistent else "memory"
        health_status["checks"]["collections"] = {
            "users": len(store.users),
            "jobs": len(store.jobs),
            "notifications": len(store.notifications),
            "freelancers": len(store.freelancers),
        }

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
