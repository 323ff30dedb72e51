"""
Custom exception classes for the car rental marketplace.

Services raise these; the Flask error handler in ``carshare.controllers.errors``
turns each one into a JSON body ``{"error": ..., "code": ...}`` with the
matching HTTP status instead of a generic 500.
"""


class CarshareError(Exception):
    """Base error carrying a stable machine-readable code and an HTTP status."""

    status = 400
    code = "BAD_REQUEST"
    default_message = "Error: bad request"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(CarshareError):
    """Raised when a request field is missing, malformed or out of range."""

    default_message = "Error: invalid input"
    code = "INVALID_INPUT"


class InvalidDateRangeError(ValidationError):
    """Raised when start date is not strictly before end date."""

    default_message = "start_date must be before end_date"
    code = "INVALID_DATE_RANGE"


class VehicleNotFoundError(CarshareError):
    """Raised when a vehicle ID cannot be found in the system."""

    status = 404
    default_message = "Car listing not found"
    code = "CAR_NOT_FOUND"


class BookingNotFoundError(CarshareError):
    """Raised when a booking record cannot be found in the system."""

    status = 404
    default_message = "Booking not found"
    code = "BOOKING_NOT_FOUND"


class FavoriteNotFoundError(CarshareError):
    status = 404
    default_message = "Favorite not found"
    code = "FAVORITE_NOT_FOUND"


class DuplicatePlateError(CarshareError):
    """Raised when a number plate is already used by another vehicle."""

    default_message = "A car with this number plate already exists"
    code = "DUPLICATE_NUMBER_PLATE"


class VehicleUnavailableError(CarshareError):
    """Raised when a vehicle is already booked for part of the requested interval."""

    status = 409
    default_message = "Car is not available for the requested dates"
    code = "VEHICLE_UNAVAILABLE"

    def __init__(self, conflicts: list[dict], message: str | None = None) -> None:
        self.conflicts = list(conflicts)
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["conflicts"] = self.conflicts
        return body


class InvalidStatusTransitionError(CarshareError):
    status = 409
    default_message = "Booking status change is not allowed"
    code = "INVALID_STATUS_TRANSITION"


class VehicleInUseError(CarshareError):
    """Raised when a vehicle cannot be deleted while it has open bookings."""

    status = 409
    default_message = "Cannot delete: pending or confirmed bookings exist"
    code = "VEHICLE_HAS_ACTIVE_BOOKINGS"


class StorageError(CarshareError):
    """Raised when the store fails to read or persist its data."""

    status = 500
    default_message = "Error: storage failure"
    code = "INTERNAL_ERROR"

    def to_dict(self) -> dict:
        return {"error": "Internal server error: " + self.message, "code": self.code}
