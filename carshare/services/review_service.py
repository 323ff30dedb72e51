from __future__ import annotations

import logging
from typing import Optional

from carshare.exceptions import ValidationError, VehicleNotFoundError
from carshare.models.store import Store
from carshare.services.common import _store, clean, is_blank, newest_first, parse_id, to_int_safe
from carshare.utils.timeutils import now_iso

logger = logging.getLogger(__name__)


class ReviewService:
    """Vehicle reviews. Anyone may review any vehicle."""

    @staticmethod
    def create_review(payload: dict, store: Optional[Store] = None) -> dict:
        st = store or _store()

        if is_blank(payload.get("car_id")):
            raise ValidationError("car_id is required", "MISSING_CAR_ID")
        if payload.get("reviewer_name") is None or payload.get("reviewer_name") == "":
            raise ValidationError("reviewer_name is required", "MISSING_REVIEWER_NAME")
        if payload.get("rating") is None:
            raise ValidationError("rating is required", "MISSING_RATING")
        if payload.get("comment") is None or payload.get("comment") == "":
            raise ValidationError("comment is required", "MISSING_COMMENT")

        car_id = parse_id(payload["car_id"], "INVALID_CAR_ID", "car_id")

        rating = to_int_safe(payload["rating"])
        if rating is None or not 1 <= rating <= 5:
            raise ValidationError("rating must be an integer between 1 and 5", "INVALID_RATING")

        reviewer_name = clean(payload["reviewer_name"])
        comment = clean(payload["comment"])
        if not reviewer_name:
            raise ValidationError("reviewer_name cannot be empty", "EMPTY_REVIEWER_NAME")
        if not comment:
            raise ValidationError("comment cannot be empty", "EMPTY_COMMENT")

        with st.transaction():
            if st.get_vehicle(car_id) is None:
                raise VehicleNotFoundError()
            review = st.create_review({
                "car_id": car_id,
                "reviewer_name": reviewer_name,
                "rating": rating,
                "comment": comment,
                "created_at": now_iso(),
            })

        logger.info("Review %s added to car %s (rating %d)", review["id"], car_id, rating)
        return review

    @staticmethod
    def list_reviews(car_id, store: Optional[Store] = None) -> list[dict]:
        st = store or _store()
        if is_blank(car_id):
            return newest_first(st.list_reviews())
        vid = parse_id(car_id, "INVALID_CAR_ID", "car_id")
        return newest_first(st.reviews_for_vehicle(vid))
