from flask import Blueprint, current_app, jsonify, request

from ..services.vehicle_service import VehicleService
from ..utils.decorators import json_body

bp = Blueprint("listings", __name__, url_prefix="/api/car-listings")


@bp.get("")
def list_or_get():
    """Single listing with `?id=`, otherwise a page of listings filtered by `?search=`."""
    vid = request.args.get("id")
    if vid is not None:
        return jsonify(VehicleService.get_vehicle(vid)), 200

    rows = VehicleService.list_vehicles(
        search=request.args.get("search"),
        limit=request.args.get("limit"),
        offset=request.args.get("offset"),
        max_size=current_app.config["MAX_PAGE_SIZE"],
    )
    return jsonify(rows), 200


@bp.post("")
@json_body
def create_listing(payload):
    return jsonify(VehicleService.create_vehicle(payload)), 201


@bp.put("")
@json_body
def update_listing(payload):
    vehicle = VehicleService.update_vehicle(request.args.get("id"), payload)
    return jsonify(vehicle), 200


@bp.delete("")
def delete_listing():
    deleted = VehicleService.delete_vehicle(request.args.get("id"))
    return jsonify({"message": "Car listing deleted successfully", "deleted": deleted}), 200
