from flask import Blueprint, current_app, jsonify, request

from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..utils.decorators import json_body

bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


@bp.get("/availability")
def availability():
    """Is the car free for [start_date, end_date)? Lists the conflicting bookings if not."""
    result = AvailabilityService.check_availability_query(request.args)
    return jsonify(result.to_dict()), 200


@bp.get("")
def list_bookings():
    rows = BookingService.list_bookings(
        car_id=request.args.get("car_id"),
        limit=request.args.get("limit"),
        offset=request.args.get("offset"),
        max_size=current_app.config["MAX_PAGE_SIZE"],
    )
    return jsonify(rows), 200


@bp.post("")
@json_body
def create_booking(payload):
    """Create a booking request; 409 with the conflicts if the slot is taken."""
    booking = BookingService.create_booking(payload)
    return jsonify(booking), 201


@bp.get("/<booking_id>")
def get_booking(booking_id):
    return jsonify(BookingService.get_booking(booking_id)), 200


@bp.put("/<booking_id>")
@json_body
def update_booking(booking_id, payload):
    """Owner's confirm/cancel action, or any other partial update."""
    booking = BookingService.update_booking(
        booking_id,
        payload,
        strict=current_app.config["ENFORCE_STATUS_TRANSITIONS"],
    )
    return jsonify(booking), 200
