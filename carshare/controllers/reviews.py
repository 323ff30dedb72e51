from flask import Blueprint, jsonify, request

from ..services.review_service import ReviewService
from ..utils.decorators import json_body

bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")


@bp.get("")
def list_reviews():
    return jsonify(ReviewService.list_reviews(request.args.get("car_id"))), 200


@bp.post("")
@json_body
def create_review(payload):
    return jsonify(ReviewService.create_review(payload)), 201
