import logging

from flask import Blueprint, jsonify
from werkzeug.exceptions import HTTPException

from ..exceptions import CarshareError

logger = logging.getLogger(__name__)

bp = Blueprint("errors", __name__)


@bp.app_errorhandler(CarshareError)
def handle_carshare_error(err: CarshareError):
    """Domain errors: stable code, message and their own status."""
    if err.status >= 500:
        logger.error("%s: %s", err.code, err.message)
    return jsonify(err.to_dict()), err.status


@bp.app_errorhandler(HTTPException)
def handle_http_error(err: HTTPException):
    """Unknown routes, wrong methods and the like, rendered as JSON."""
    code = (err.name or "error").upper().replace(" ", "_")
    return jsonify({"error": err.description, "code": code}), err.code


@bp.app_errorhandler(Exception)
def handle_unexpected_error(err: Exception):
    logger.exception("Unhandled error")
    return jsonify({"error": f"Internal server error: {err}", "code": "INTERNAL_ERROR"}), 500
