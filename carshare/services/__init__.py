from .availability_service import AvailabilityService
from .booking_service import BookingService
from .favorite_service import FavoriteService
from .review_service import ReviewService
from .vehicle_service import VehicleService

__all__ = [
    "AvailabilityService",
    "BookingService",
    "VehicleService",
    "ReviewService",
    "FavoriteService",
]
