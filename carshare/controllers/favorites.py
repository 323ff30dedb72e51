from flask import Blueprint, jsonify, request

from ..services.favorite_service import FavoriteService
from ..utils.decorators import json_body

bp = Blueprint("favorites", __name__, url_prefix="/api/favorites")


@bp.get("")
def list_favorites():
    return jsonify(FavoriteService.list_favorites()), 200


@bp.post("")
@json_body
def add_favorite(payload):
    """201 for a new favorite, 200 with the existing row when already favorited."""
    favorite, created = FavoriteService.add_favorite(payload)
    return jsonify(favorite), 201 if created else 200


@bp.delete("")
def remove_favorite():
    deleted = FavoriteService.remove_favorite(request.args.get("car_id"))
    return jsonify({"message": "Favorite removed successfully", "deleted": deleted}), 200
