from datetime import timedelta

from carshare import create_app
from carshare.exceptions import CarshareError
from carshare.models.store import Store
from carshare.services.booking_service import BookingService
from carshare.services.review_service import ReviewService
from carshare.services.vehicle_service import VehicleService
from carshare.utils.timeutils import to_iso, utc_now

DEMO_LISTINGS = [
    {
        "car_name": "Honda City", "car_model": "City VX CVT", "number_plate": "KA-01-AB-1234",
        "rc_number": "KA01AB1234RC", "fuel_type": "Petrol", "price_per_hour": 500,
        "insurance": "Comprehensive (ICICI Lombard)",
        "driving_notes": "Well-maintained sedan, perfect for family trips",
        "owner_name": "Rajesh Kumar", "owner_contact": "+91-9876543210",
        "owner_email": "rajesh.kumar@example.com", "owner_license": "KA01DL123456",
    },
    {
        "car_name": "Maruti Swift", "car_model": "Swift VXI", "number_plate": "KA-02-CD-5678",
        "rc_number": "KA02CD5678RC", "fuel_type": "Petrol", "price_per_hour": 300,
        "insurance": "Third Party (Bajaj Allianz)",
        "driving_notes": "Compact and fuel-efficient, great for city drives",
        "owner_name": "Priya Sharma", "owner_contact": "+91-9876501234",
        "owner_email": "priya.sharma@example.com", "owner_license": "KA02DL654321",
    },
    {
        "car_name": "Tata Nexon EV", "car_model": "Nexon EV Max", "number_plate": "KA-03-EF-9012",
        "rc_number": "KA03EF9012RC", "fuel_type": "Electric", "price_per_hour": 650,
        "insurance": "Comprehensive (HDFC Ergo)",
        "owner_name": "Arjun Rao", "owner_contact": "+91-9988776655",
        "owner_email": "arjun.rao@example.com", "owner_license": "KA03DL112233",
    },
]


def ensure_listing(store: Store, payload: dict) -> dict:
    """Create the listing unless its plate is already present (idempotent)."""
    existing = store.find_vehicle_by_plate(payload["number_plate"])
    if existing:
        return existing
    return VehicleService.create_vehicle(payload, store=store)


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()

        cars = [ensure_listing(store, p) for p in DEMO_LISTINGS]

        if not store.reviews:
            ReviewService.create_review({
                "car_id": cars[0]["id"], "reviewer_name": "Anita", "rating": 5,
                "comment": "Spotless car and a very responsive owner.",
            }, store=store)
            ReviewService.create_review({
                "car_id": cars[1]["id"], "reviewer_name": "Vikram", "rating": 4,
                "comment": "Great mileage, slightly stiff clutch.",
            }, store=store)

        if not store.bookings:
            start = utc_now().replace(minute=0, second=0, microsecond=0) + timedelta(days=1)
            try:
                BookingService.create_booking({
                    "car_id": cars[0]["id"], "car_name": cars[0]["car_name"],
                    "renter_name": "Meera Iyer", "renter_email": "meera@example.com",
                    "renter_phone": "+91-9000000001",
                    "start_date": to_iso(start), "end_date": to_iso(start + timedelta(hours=6)),
                    "total_hours": 6, "total_price": 6 * cars[0]["price_per_hour"],
                }, store=store)
            except CarshareError as e:
                print(f"Skipped demo booking: {e.code}")

        store.save()

        print("✅ Seed complete.")
        print(f"🚗 Listings: {len(store.vehicles)}, bookings: {len(store.bookings)}, reviews: {len(store.reviews)}")


if __name__ == "__main__":
    main()
