"""Availability engine: conflict detection over a vehicle's bookings."""

import logging
from typing import Optional

from carshare.exceptions import InvalidDateRangeError, ValidationError
from carshare.models.availability import AvailabilityResult
from carshare.models.store import Store
from carshare.services.common import _store, is_blank, overlap, parse_date_field, parse_id
from carshare.utils.constants import ACTIVE_BOOKING_STATES, BookingStatus
from carshare.utils.timeutils import parse_instant

logger = logging.getLogger(__name__)

# Booking fields shown to whoever asks about availability; renter contact details stay private.
CONFLICT_FIELDS = (
    "id", "car_id", "car_name", "renter_name", "start_date", "end_date",
    "status", "total_hours", "total_price",
)


class AvailabilityService:
    """
    Decide whether a vehicle can be booked for [start, end).

    Pending, confirmed and completed bookings occupy the calendar; cancelled
    ones never do. The check is recomputed from the store on every call.
    """

    @staticmethod
    def find_conflicts(
            vehicle_id: int,
            start,
            end,
            *,
            store: Optional[Store] = None,
            exclude_booking_id: Optional[int] = None,
    ) -> list[dict]:
        """Active bookings of a vehicle overlapping [start, end), reduced to CONFLICT_FIELDS."""
        st = store or _store()
        conflicts = []
        for b in st.bookings_for_vehicle(vehicle_id, exclude_statuses=(BookingStatus.CANCELLED,)):
            if exclude_booking_id is not None and b.get("id") == exclude_booking_id:
                continue
            if b.get("status") not in ACTIVE_BOOKING_STATES:
                continue
            b_start = parse_instant(b["start_date"])
            b_end = parse_instant(b["end_date"])
            if overlap(start, end, b_start, b_end):
                conflicts.append(b)
        conflicts.sort(key=lambda b: (parse_instant(b["start_date"]), b.get("id") or 0))
        return [{k: b.get(k) for k in CONFLICT_FIELDS} for b in conflicts]

    @staticmethod
    def check_availability(
            vehicle_id: int,
            requested_start,
            requested_end,
            *,
            store: Optional[Store] = None,
            exclude_booking_id: Optional[int] = None,
    ) -> AvailabilityResult:
        """
        Check a vehicle for the half-open interval [requested_start, requested_end).

        ISO strings and datetimes are both accepted. An inverted or empty
        interval is a caller error and raises InvalidDateRangeError rather
        than being reported as unavailable.
        """
        start = parse_date_field(requested_start, "INVALID_START_DATE", "start_date")
        end = parse_date_field(requested_end, "INVALID_END_DATE", "end_date")
        if start >= end:
            raise InvalidDateRangeError()

        conflicts = AvailabilityService.find_conflicts(
            vehicle_id, start, end, store=store, exclude_booking_id=exclude_booking_id,
        )
        if conflicts:
            logger.debug("Car %s busy for %s..%s: %d conflict(s)", vehicle_id, start, end, len(conflicts))
        return AvailabilityResult.from_conflicts(conflicts)

    @staticmethod
    def check_availability_query(params, store: Optional[Store] = None) -> AvailabilityResult:
        """Validate raw query parameters (car_id, start_date, end_date) and run the check."""
        car_id = params.get("car_id")
        start_raw = params.get("start_date")
        end_raw = params.get("end_date")

        if is_blank(car_id):
            raise ValidationError("car_id is required", "MISSING_CAR_ID")
        if is_blank(start_raw):
            raise ValidationError("start_date is required", "MISSING_START_DATE")
        if is_blank(end_raw):
            raise ValidationError("end_date is required", "MISSING_END_DATE")

        vehicle_id = parse_id(car_id, "INVALID_CAR_ID", "car_id")
        return AvailabilityService.check_availability(vehicle_id, start_raw, end_raw, store=store)
