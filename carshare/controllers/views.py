from flask import Blueprint, jsonify

from ..services.common import _store

bp = Blueprint("views", __name__)


@bp.get("/")
def home():
    return jsonify({"message": "Car rental marketplace API"}), 200


@bp.get("/api/health")
def health():
    store = _store()
    return jsonify({
        "status": "ok",
        "persistent": store.path is not None,
        "vehicles": len(store.vehicles),
        "bookings": len(store.bookings),
    }), 200
