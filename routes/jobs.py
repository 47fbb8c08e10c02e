"""
Job routes.

Handles:
- POST /api/jobs               - Post a job (client)
- GET  /api/jobs               - List open jobs, oldest first (freelancer)
- GET  /api/jobs/<id>          - Job details
- POST /api/jobs/<id>/accept   - Accept a job (freelancer)

A lost acceptance race comes back as 409 job_not_open so the UI can
refresh its open-jobs list.
"""

from flask import Blueprint, current_app, request

from routes.pricing import parse_number
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

jobs_bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


@jobs_bp.route("", methods=["POST"])
def post_job():
    """
    Post a job.

    Body: {"client": "alice", "service_type": "content", "complexity": "high",
           "hours": 5, "description": "...", "direct_hire_to": "bob"?}
    """
    data = request.get_json(silent=True) or {}
    market = current_app.config["MARKETPLACE"]

    job_id = market.post_job(
        data.get("client"),
        data.get("service_type"),
        data.get("complexity"),
        parse_number(data.get("hours")),
        data.get("description"),
        direct_hire_to=data.get("direct_hire_to") or None,
    )
    job = market.get_job(job_id)

    logger.info(f"Job {job_id} posted via API")
    return {"job_id": job_id, "job": job.to_dict()}, 201


@jobs_bp.route("", methods=["GET"])
def list_open_jobs():
    """List open jobs. ?freelancer=<username> hides jobs reserved for others."""
    market = current_app.config["MARKETPLACE"]
    jobs = market.list_open_jobs(request.args.get("freelancer") or None)
    return {"jobs": [job.to_dict() for job in jobs]}


@jobs_bp.route("/<int:job_id>", methods=["GET"])
def get_job(job_id: int):
    market = current_app.config["MARKETPLACE"]
    return market.get_job(job_id).to_dict()


@jobs_bp.route("/<int:job_id>/accept", methods=["POST"])
def accept_job(job_id: int):
    """
    Accept a job.

    Body: {"freelancer": "bob"}
    """
    data = request.get_json(silent=True) or {}
    market = current_app.config["MARKETPLACE"]

    job = market.accept_job(job_id, data.get("freelancer"))
    return job.to_dict()
