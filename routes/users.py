"""
User and directory routes.

Handles:
- POST  /api/users             - Sign up (client or freelancer)
- POST  /api/login             - Authenticate, remember username in session
- POST  /api/logout            - Forget the session user
- GET   /api/users/<username>  - Public profile
- PATCH /api/users/<username>  - Profile edit
- GET   /api/freelancers?q=    - Directory search
"""

from flask import Blueprint, current_app, request, session

from core.exceptions import ValidationError
from modules.sanitize import sanitize_text
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/api")

# Constants
MAX_NAME_LENGTH = 100
TEXT_FIELDS = ("name", "email", "phone", "specialization")


def _clean_profile(data: dict) -> dict:
    """Sanitize free-text fields; leave credentials and numbers alone."""
    cleaned = dict(data)
    for field in TEXT_FIELDS:
        if field in cleaned:
            cleaned[field] = sanitize_text(cleaned[field], MAX_NAME_LENGTH)
    return cleaned


@users_bp.route("/users", methods=["POST"])
def register():
    """
    Sign up.

    Body: {"username", "password", "name", "role", "email"?, "phone"?,
           "specialization"?, "rating"?}
    """
    data = request.get_json(silent=True) or {}
    market = current_app.config["MARKETPLACE"]

    username = market.register_user(_clean_profile(data))
    return {"username": username}, 201


@users_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate.

    Body: {"username", "password"}
    """
    data = request.get_json(silent=True) or {}
    market = current_app.config["MARKETPLACE"]

    username = market.authenticate(data.get("username"), data.get("password"))

    session["username"] = username
    session.modified = True
    return {"username": username}


@users_bp.route("/logout", methods=["POST"])
def logout():
    session.pop("username", None)
    return {"status": "ok"}


@users_bp.route("/users/<username>", methods=["GET"])
def get_user(username: str):
    market = current_app.config["MARKETPLACE"]
    user = market.get_user(username)
    if user is None:
        return {"error": "not_found", "message": f"User {username} not found", "details": {}}, 404
    return user.to_public_dict()


@users_bp.route("/users/<username>", methods=["PATCH"])
def update_user(username: str):
    """
    Edit a profile. Only the logged-in user may edit their own profile.

    Body: any of {"name", "email", "phone", "specialization", "rating"}
    """
    if session.get("username") != username:
        return {
            "error": "forbidden",
            "message": "Log in as this user to edit the profile",
            "details": {},
        }, 403

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        raise ValidationError("Request body must be a non-empty JSON object")

    market = current_app.config["MARKETPLACE"]
    user = market.update_profile(username, **_clean_profile(data))
    return user.to_public_dict()


@users_bp.route("/freelancers", methods=["GET"])
def search_freelancers():
    """Search the directory by name or specialization (?q=term)."""
    market = current_app.config["MARKETPLACE"]
    profiles = market.search_freelancers(request.args.get("q", ""))
    return {"freelancers": [p.to_dict() for p in profiles]}
