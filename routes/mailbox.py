"""
Mailbox and payment routes.

Handles:
- GET  /api/inbox/<username>              - Notifications, newest first
- POST /api/payments                      - Request payment from a notification
- POST /api/payments/<intent_id>/confirm  - Confirm (idempotent)
"""

from flask import Blueprint, current_app, request

from core.exceptions import ValidationError
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

mailbox_bp = Blueprint("mailbox", __name__, url_prefix="/api")


@mailbox_bp.route("/inbox/<username>", methods=["GET"])
def inbox(username: str):
    market = current_app.config["MARKETPLACE"]
    notifications = market.get_inbox(username)
    return {
        "username": username,
        "notifications": [n.to_dict() for n in notifications],
        "unpaid_total": market.mailbox.unpaid_total(username),
    }


@mailbox_bp.route("/payments", methods=["POST"])
def request_payment():
    """
    Start paying for an accepted job.

    Body: {"notification_id": 3}
    """
    data = request.get_json(silent=True) or {}
    notification_id = data.get("notification_id")
    if isinstance(notification_id, bool) or not isinstance(notification_id, int):
        raise ValidationError("notification_id must be an integer", field="notification_id")

    market = current_app.config["MARKETPLACE"]
    intent = market.request_payment(notification_id)
    return intent.to_dict(), 201


@mailbox_bp.route("/payments/<intent_id>/confirm", methods=["POST"])
def confirm_payment(intent_id: str):
    """
    Confirm a payment.

    Repeating the call is safe: `already_confirmed` is true and nothing changes.
    """
    market = current_app.config["MARKETPLACE"]
    newly_confirmed = market.confirm_payment(intent_id)

    if not newly_confirmed:
        logger.info(f"Duplicate confirmation for intent {intent_id[:8]}")

    return {
        "intent_id": intent_id,
        "confirmed": True,
        "already_confirmed": not newly_confirmed,
    }
