from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING
from urllib.parse import urlparse

from carshare.exceptions import ValidationError, VehicleInUseError, VehicleNotFoundError, DuplicatePlateError
from carshare.services.common import (
    _store,
    clean,
    is_blank,
    newest_first,
    paginate,
    parse_email,
    parse_id,
    parse_positive_float,
    require,
)
from carshare.utils.constants import FuelType, MAX_PAGE_SIZE, OPEN_BOOKING_STATES
from carshare.utils.timeutils import now_iso

if TYPE_CHECKING:
    # Only for type hints; won't execute at runtime
    from carshare.models.store import Store  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "car_name",
    "car_model",
    "number_plate",
    "rc_number",
    "fuel_type",
    "price_per_hour",
    "insurance",
    "owner_name",
    "owner_contact",
    "owner_email",
    "owner_license",
]
TEXT_FIELDS = ("car_name", "car_model", "number_plate", "rc_number", "insurance",
               "owner_name", "owner_contact", "owner_license")
OPTIONAL_FIELDS = ("driving_notes", "car_image")


def valid_image_path(s: Optional[str]) -> bool:
    """Accept /static/... or absolute http(s) URL."""
    if not s:
        return False
    s = s.strip()
    if s.startswith("/static/"):
        return True
    u = urlparse(s)
    return u.scheme in ("http", "https") and bool(u.netloc)


def _parse_fuel_type(value) -> str:
    fuel = clean(value)
    if fuel not in FuelType.ALL:
        raise ValidationError("Fuel type must be one of: " + ", ".join(FuelType.ALL), "INVALID_FUEL_TYPE")
    return fuel


def _parse_optional(name: str, value) -> Optional[str]:
    text = clean(value) or None
    if name == "car_image" and text is not None and not valid_image_path(text):
        raise ValidationError("car_image must be a /static/ path or an http(s) URL", "INVALID_CAR_IMAGE")
    return text


class VehicleService:
    """Vehicle listings: create, fetch with reviews, search, update, delete."""

    @staticmethod
    def _with_reviews(st, vehicle: dict) -> dict:
        out = dict(vehicle)
        out["reviews"] = newest_first(st.reviews_for_vehicle(vehicle["id"]))
        return out

    @staticmethod
    def create_vehicle(payload: dict, store: Optional["Store"] = None) -> dict:
        """
        Create a listing. The plate pre-check gives the friendly error; the
        store re-checks uniqueness under its lock and wins any race.
        """
        st = store or _store()

        require(payload, REQUIRED_FIELDS)
        fuel_type = _parse_fuel_type(payload["fuel_type"])
        price = parse_positive_float(payload["price_per_hour"], "INVALID_PRICE_PER_HOUR", "price_per_hour")
        owner_email = parse_email(payload["owner_email"], "INVALID_OWNER_EMAIL", "owner_email")

        plate = clean(payload["number_plate"])
        if st.find_vehicle_by_plate(plate) is not None:
            raise DuplicatePlateError()

        record = {name: clean(payload[name]) for name in TEXT_FIELDS}
        record.update({
            "number_plate": plate,
            "fuel_type": fuel_type,
            "price_per_hour": price,
            "owner_email": owner_email,
        })
        for name in OPTIONAL_FIELDS:
            record[name] = _parse_optional(name, payload.get(name))
        record["created_at"] = now_iso()

        vehicle = st.create_vehicle(record)
        logger.info("Created listing %s (%s)", vehicle["id"], plate)
        return vehicle

    @staticmethod
    def get_vehicle(vehicle_id, store: Optional["Store"] = None) -> dict:
        """Return a vehicle with its reviews or raise VehicleNotFoundError."""
        st = store or _store()
        vid = parse_id(vehicle_id, "INVALID_ID", "id")
        vehicle = st.get_vehicle(vid)
        if vehicle is None:
            raise VehicleNotFoundError(code="NOT_FOUND")
        return VehicleService._with_reviews(st, vehicle)

    @staticmethod
    def list_vehicles(search=None, limit=None, offset=None, *,
                      max_size: int = MAX_PAGE_SIZE, store: Optional["Store"] = None) -> list[dict]:
        """
        List vehicles newest first, each with its reviews.
        `search` is a case-insensitive substring match on name or model.
        """
        st = store or _store()
        rows = st.list_vehicles()

        kw = clean(search).lower()
        if kw:
            rows = [
                v for v in rows
                if kw in (v.get("car_name") or "").lower() or kw in (v.get("car_model") or "").lower()
            ]

        rows = paginate(newest_first(rows), limit, offset, max_size)
        return [VehicleService._with_reviews(st, v) for v in rows]

    @staticmethod
    def update_vehicle(vehicle_id, payload: dict, store: Optional["Store"] = None) -> dict:
        """Apply only the supplied fields; fuel type, price and plate are re-validated."""
        st = store or _store()
        vid = parse_id(vehicle_id, "INVALID_ID", "id")
        existing = st.get_vehicle(vid)
        if existing is None:
            raise VehicleNotFoundError(code="NOT_FOUND")

        updates = {}
        if payload.get("fuel_type") is not None:
            updates["fuel_type"] = _parse_fuel_type(payload["fuel_type"])
        if payload.get("price_per_hour") is not None:
            updates["price_per_hour"] = parse_positive_float(
                payload["price_per_hour"], "INVALID_PRICE_PER_HOUR", "price_per_hour")
        for name in TEXT_FIELDS:
            if payload.get(name) is not None:
                if is_blank(payload[name]):
                    raise ValidationError(f"{name} cannot be empty", f"EMPTY_{name.upper()}")
                updates[name] = clean(payload[name])
        if payload.get("owner_email") is not None:
            updates["owner_email"] = parse_email(payload["owner_email"], "INVALID_OWNER_EMAIL", "owner_email")
        for name in OPTIONAL_FIELDS:
            if name in payload:
                updates[name] = _parse_optional(name, payload[name])

        if not updates:
            raise ValidationError("No fields to update", "NO_UPDATE_FIELDS")

        plate = updates.get("number_plate")
        if plate is not None and plate != existing["number_plate"]:
            other = st.find_vehicle_by_plate(plate)
            if other is not None and other["id"] != vid:
                raise DuplicatePlateError()

        vehicle = st.update_vehicle(vid, updates)
        if vehicle is None:
            raise VehicleNotFoundError(code="NOT_FOUND")
        logger.info("Updated listing %s: %s", vid, sorted(updates))
        return vehicle

    @staticmethod
    def delete_vehicle(vehicle_id, store: Optional["Store"] = None) -> dict:
        """
        Delete a vehicle if and only if:
        - the vehicle exists,
        - no pending or confirmed booking references it.
        Its reviews and favorite go with it; past bookings are kept as history.
        """
        st = store or _store()
        vid = parse_id(vehicle_id, "INVALID_ID", "id")

        with st.transaction("vehicles", "reviews", "favorites"):
            if st.get_vehicle(vid) is None:
                raise VehicleNotFoundError(code="NOT_FOUND")

            open_bookings = [b for b in st.bookings_for_vehicle(vid) if b.get("status") in OPEN_BOOKING_STATES]
            if open_bookings:
                raise VehicleInUseError()

            removed_reviews = st.delete_reviews_for_vehicle(vid)
            st.delete_favorite(vid)
            deleted = st.delete_vehicle(vid)

        logger.info("Deleted listing %s (%d review(s) removed)", vid, removed_reviews)
        return deleted
