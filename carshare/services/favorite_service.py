from __future__ import annotations

import logging
from typing import Optional

from carshare.exceptions import FavoriteNotFoundError, ValidationError, VehicleNotFoundError
from carshare.models.store import Store
from carshare.services.common import _store, is_blank, newest_first, parse_id
from carshare.utils.timeutils import now_iso

logger = logging.getLogger(__name__)


class FavoriteService:
    """Favorites: at most one per vehicle, adding twice returns the first row."""

    @staticmethod
    def add_favorite(payload: dict, store: Optional[Store] = None) -> tuple[dict, bool]:
        """Return (favorite, created); created is False when it already existed."""
        st = store or _store()

        if is_blank(payload.get("car_id")):
            raise ValidationError("car_id is required", "MISSING_REQUIRED_FIELD")
        car_id = parse_id(payload["car_id"], "INVALID_CAR_ID", "car_id")

        with st.transaction():
            if st.get_vehicle(car_id) is None:
                raise VehicleNotFoundError()
            favorite, created = st.create_favorite({"car_id": car_id, "added_at": now_iso()})

        if created:
            logger.info("Car %s added to favorites", car_id)
        return favorite, created

    @staticmethod
    def list_favorites(store: Optional[Store] = None) -> list[dict]:
        """Favorites newest first, each with the vehicle record (None if it is gone)."""
        st = store or _store()
        out = []
        for f in newest_first(st.list_favorites(), key="added_at"):
            out.append({
                "id": f["id"],
                "car_id": f["car_id"],
                "added_at": f["added_at"],
                "car": st.get_vehicle(f["car_id"]),
            })
        return out

    @staticmethod
    def remove_favorite(car_id, store: Optional[Store] = None) -> dict:
        st = store or _store()
        if is_blank(car_id):
            raise ValidationError("car_id query parameter is required", "MISSING_CAR_ID")
        vid = parse_id(car_id, "INVALID_CAR_ID", "car_id")

        deleted = st.delete_favorite(vid)
        if deleted is None:
            raise FavoriteNotFoundError()
        logger.info("Car %s removed from favorites", vid)
        return deleted
