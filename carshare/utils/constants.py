# carshare/utils/constants.py

"""
Global constants for booking statuses, fuel types and paging.
These constants are imported by both models and services.
"""


class BookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, CONFIRMED, COMPLETED, CANCELLED)


class FuelType:
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"

    ALL = (PETROL, DIESEL, ELECTRIC, HYBRID)


# Bookings in these states occupy the vehicle's calendar.
ACTIVE_BOOKING_STATES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
})

# Bookings in these states block deleting the vehicle.
OPEN_BOOKING_STATES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# Allowed status moves when transitions are enforced. Same-status writes are no-ops.
STATUS_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# --- Paging ---
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
