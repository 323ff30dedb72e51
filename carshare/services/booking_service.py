"""Booking-related service layer: create, update status, list."""

import logging
from typing import Optional

from carshare.exceptions import (
    BookingNotFoundError,
    InvalidDateRangeError,
    InvalidStatusTransitionError,
    ValidationError,
    VehicleNotFoundError,
    VehicleUnavailableError,
)
from carshare.models.store import Store
from carshare.services.availability_service import AvailabilityService
from carshare.services.common import (
    _store,
    clean,
    is_blank,
    newest_first,
    paginate,
    parse_date_field,
    parse_email,
    parse_id,
    parse_positive_float,
    parse_positive_int,
    parse_status,
    require,
)
from carshare.utils.constants import ACTIVE_BOOKING_STATES, BookingStatus, MAX_PAGE_SIZE, STATUS_TRANSITIONS
from carshare.utils.timeutils import now_iso, to_iso

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "car_id",
    "car_name",
    "renter_name",
    "renter_email",
    "renter_phone",
    "start_date",
    "end_date",
    "total_hours",
    "total_price",
]

# Plain text fields that a partial update may change (trimmed on write).
TEXT_FIELDS = ("car_name", "renter_name", "renter_phone")


class BookingService:
    """
    Create and update bookings.

    Every write that leaves a booking occupying the calendar re-runs the
    availability check under the store lock, so two overlapping active
    bookings for one vehicle can never both be stored.
    """

    @staticmethod
    def create_booking(payload: dict, store: Optional[Store] = None) -> dict:
        """
        Validate and persist a booking request.

        Validation order (first failure wins): required fields, car id,
        total hours, total price, status, email, dates, vehicle existence.
        Raises VehicleUnavailableError if the interval is already taken.
        """
        st = store or _store()

        require(payload, REQUIRED_FIELDS)
        car_id = parse_id(payload["car_id"], "INVALID_CAR_ID", "car_id")
        total_hours = parse_positive_int(payload["total_hours"], "INVALID_TOTAL_HOURS", "total_hours")
        total_price = parse_positive_float(payload["total_price"], "INVALID_TOTAL_PRICE", "total_price")
        raw_status = payload.get("status")
        status = BookingStatus.PENDING if is_blank(raw_status) else parse_status(raw_status)
        renter_email = parse_email(payload["renter_email"], label="renter_email")
        start = parse_date_field(payload["start_date"], "INVALID_START_DATE", "start_date")
        end = parse_date_field(payload["end_date"], "INVALID_END_DATE", "end_date")
        if start >= end:
            raise InvalidDateRangeError()

        record = {
            "car_id": car_id,
            "car_name": clean(payload["car_name"]),
            "renter_name": clean(payload["renter_name"]),
            "renter_email": renter_email,
            "renter_phone": clean(payload["renter_phone"]),
            "start_date": to_iso(start),
            "end_date": to_iso(end),
            "total_hours": total_hours,
            "total_price": total_price,
            "status": status,
        }

        # --- existence, conflict re-check and insert as one unit ---
        with st.transaction():
            if st.get_vehicle(car_id) is None:
                raise VehicleNotFoundError()

            if status in ACTIVE_BOOKING_STATES:
                conflicts = AvailabilityService.find_conflicts(car_id, start, end, store=st)
                if conflicts:
                    logger.warning(
                        "Rejected booking for car %s (%s..%s): overlaps booking(s) %s",
                        car_id, record["start_date"], record["end_date"], [c["id"] for c in conflicts],
                    )
                    raise VehicleUnavailableError(conflicts)

            record["created_at"] = now_iso()
            booking = st.create_booking(record)

        logger.info("Created booking %s for car %s (%s)", booking["id"], car_id, status)
        return booking

    @staticmethod
    def get_booking(booking_id, store: Optional[Store] = None) -> dict:
        st = store or _store()
        bid = parse_id(booking_id, "INVALID_ID", "id")
        booking = st.get_booking(bid)
        if booking is None:
            raise BookingNotFoundError()
        return booking

    @staticmethod
    def list_bookings(car_id=None, limit=None, offset=None, *,
                      max_size: int = MAX_PAGE_SIZE, store: Optional[Store] = None) -> list[dict]:
        """Bookings newest first, optionally for one vehicle."""
        st = store or _store()
        if is_blank(car_id):
            rows = st.list_bookings()
        else:
            vid = parse_id(car_id, "INVALID_CAR_ID", "car_id")
            rows = st.bookings_for_vehicle(vid)
        return paginate(newest_first(rows), limit, offset, max_size)

    @staticmethod
    def _collect_updates(payload: dict) -> dict:
        """Validate the supplied fields of a partial update; unknown keys are ignored."""
        updates = {}
        if payload.get("status") is not None:
            updates["status"] = parse_status(payload["status"])
        for name in TEXT_FIELDS:
            if payload.get(name) is not None:
                value = clean(payload[name])
                if not value:
                    raise ValidationError(f"{name} cannot be empty", f"EMPTY_{name.upper()}")
                updates[name] = value
        if payload.get("renter_email") is not None:
            updates["renter_email"] = parse_email(payload["renter_email"], label="renter_email")
        if payload.get("start_date") is not None:
            updates["start_date"] = parse_date_field(payload["start_date"], "INVALID_START_DATE", "start_date")
        if payload.get("end_date") is not None:
            updates["end_date"] = parse_date_field(payload["end_date"], "INVALID_END_DATE", "end_date")
        if payload.get("total_hours") is not None:
            updates["total_hours"] = parse_positive_int(payload["total_hours"], "INVALID_TOTAL_HOURS", "total_hours")
        if payload.get("total_price") is not None:
            updates["total_price"] = parse_positive_float(payload["total_price"], "INVALID_TOTAL_PRICE", "total_price")
        return updates

    @staticmethod
    def update_booking(booking_id, payload: dict, *, strict: bool = True,
                       store: Optional[Store] = None) -> dict:
        """
        Apply a partial update (typically the owner's confirm/cancel action).

        With ``strict`` the STATUS_TRANSITIONS table is enforced; without it
        any status may move to any other. Either way, a booking that ends up
        active is re-checked for conflicts when its interval changes or it
        leaves ``cancelled``.
        """
        st = store or _store()
        bid = parse_id(booking_id, "INVALID_ID", "id")
        if payload.get("status") is not None:
            parse_status(payload["status"])
        if st.get_booking(bid) is None:
            raise BookingNotFoundError()

        updates = BookingService._collect_updates(payload)
        if not updates:
            raise ValidationError("No fields to update", "NO_UPDATE_FIELDS")

        with st.transaction():
            current = st.get_booking(bid)
            if current is None:
                raise BookingNotFoundError()

            old_status = current["status"]
            new_status = updates.get("status", old_status)
            if strict and new_status != old_status and new_status not in STATUS_TRANSITIONS.get(old_status, ()):
                raise InvalidStatusTransitionError(
                    f"Cannot change booking status from {old_status} to {new_status}"
                )

            start = updates.pop("start_date", None)
            end = updates.pop("end_date", None)
            interval_changed = start is not None or end is not None
            start = start or parse_date_field(current["start_date"], "INVALID_START_DATE", "start_date")
            end = end or parse_date_field(current["end_date"], "INVALID_END_DATE", "end_date")
            if start >= end:
                raise InvalidDateRangeError()
            if interval_changed:
                updates["start_date"] = to_iso(start)
                updates["end_date"] = to_iso(end)

            reactivated = old_status not in ACTIVE_BOOKING_STATES
            if new_status in ACTIVE_BOOKING_STATES and (interval_changed or reactivated):
                conflicts = AvailabilityService.find_conflicts(
                    current["car_id"], start, end, store=st, exclude_booking_id=bid,
                )
                if conflicts:
                    logger.warning("Rejected update of booking %s: overlaps %s", bid, [c["id"] for c in conflicts])
                    raise VehicleUnavailableError(conflicts)

            booking = st.update_booking(bid, updates)

        if new_status != old_status:
            logger.info("Booking %s status %s -> %s", bid, old_status, new_status)
        return booking
