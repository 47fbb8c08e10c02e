"""
Pricing routes.

Handles:
- /api/services - Service catalog and complexity levels for pricing forms
- /api/quote    - Price quote (recomputed by the UI on every input change)
"""

from typing import Any

from flask import Blueprint, current_app, request

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

pricing_bp = Blueprint("pricing", __name__, url_prefix="/api")


def parse_number(value: Any) -> Any:
    """
    Convert numeric form strings ("10", "2.5") to float.

    Anything else is returned unchanged so the core can reject it with a
    ValidationError.
    """
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return value
    return value


@pricing_bp.route("/services", methods=["GET"])
def services():
    """List the service catalog and complexity multipliers."""
    market = current_app.config["MARKETPLACE"]
    return market.list_services()


@pricing_bp.route("/quote", methods=["POST"])
def quote():
    """
    Quote a price.

    Body: {"service_type": "web", "complexity": "medium", "hours": 10}
    """
    data = request.get_json(silent=True) or {}
    market = current_app.config["MARKETPLACE"]

    price_quote = market.quote_price(
        data.get("service_type"),
        data.get("complexity"),
        parse_number(data.get("hours")),
    )
    return price_quote.to_dict()
