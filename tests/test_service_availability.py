"""
Availability engine tests: half-open overlap, the status-inclusion policy
(only cancelled bookings free the calendar) and input validation.
"""

import threading

import pytest

from carshare.exceptions import InvalidDateRangeError, ValidationError
from carshare.services.availability_service import AvailabilityService

A_START = "2030-11-01T10:00:00Z"
A_END = "2030-11-01T12:00:00Z"


def test_back_to_back_is_available(make_vehicle, make_booking):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END, status="confirmed")

    result = AvailabilityService.check_availability(car["id"], "2030-11-01T12:00:00Z", "2030-11-01T14:00:00Z")
    assert result.available
    assert result.conflicts == []

    result = AvailabilityService.check_availability(car["id"], "2030-11-01T08:00:00Z", A_START)
    assert result.available


def test_fully_contained_request_conflicts(make_vehicle, make_booking):
    car = make_vehicle()
    a = make_booking(car["id"], "2030-11-01T09:00:00Z", "2030-11-01T18:00:00Z", status="confirmed")

    result = AvailabilityService.check_availability(car["id"], "2030-11-01T10:00:00Z", "2030-11-01T11:00:00Z")
    assert not result.available
    assert [c["id"] for c in result.conflicts] == [a["id"]]


def test_partial_overlap_on_either_side(make_vehicle, make_booking):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END)

    assert not AvailabilityService.check_availability(car["id"], "2030-11-01T09:00:00Z", "2030-11-01T11:00:00Z").available
    assert not AvailabilityService.check_availability(car["id"], "2030-11-01T11:00:00Z", "2030-11-01T13:00:00Z").available


def test_identical_interval_conflicts(make_vehicle, make_booking):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END)

    result = AvailabilityService.check_availability(car["id"], A_START, A_END)
    assert not result.available
    assert len(result.conflicts) == 1


@pytest.mark.parametrize("status", ["pending", "confirmed", "completed"])
def test_active_statuses_occupy_calendar(make_vehicle, make_booking, status):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END, status=status)

    result = AvailabilityService.check_availability(car["id"], A_START, A_END)
    assert not result.available
    assert result.conflicts[0]["status"] == status


def test_cancelled_booking_never_conflicts(make_vehicle, make_booking):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END, status="cancelled")

    result = AvailabilityService.check_availability(car["id"], A_START, A_END)
    assert result.available
    assert result.conflicts == []


def test_lists_every_overlapping_booking_in_start_order(make_vehicle, make_booking):
    car = make_vehicle()
    late = make_booking(car["id"], "2030-11-01T14:00:00Z", "2030-11-01T16:00:00Z", status="pending")
    early = make_booking(car["id"], "2030-11-01T08:00:00Z", "2030-11-01T10:30:00Z", status="completed")
    make_booking(car["id"], "2030-11-01T11:00:00Z", "2030-11-01T13:00:00Z", status="cancelled")

    result = AvailabilityService.check_availability(car["id"], "2030-11-01T09:00:00Z", "2030-11-01T15:00:00Z")
    assert [c["id"] for c in result.conflicts] == [early["id"], late["id"]]
    assert result.to_dict()["available"] is False


def test_other_vehicles_bookings_are_ignored(make_vehicle, make_booking):
    car = make_vehicle()
    other = make_vehicle()
    make_booking(other["id"], A_START, A_END, status="confirmed")

    assert AvailabilityService.check_availability(car["id"], A_START, A_END).available


def test_unknown_vehicle_is_vacuously_available():
    assert AvailabilityService.check_availability(999, A_START, A_END).available


def test_offsets_are_normalised_to_utc(make_vehicle, make_booking):
    car = make_vehicle()
    make_booking(car["id"], A_START, A_END)

    # 15:30+05:30 == 10:00Z
    result = AvailabilityService.check_availability(car["id"], "2030-11-01T15:30:00+05:30", "2030-11-01T16:00:00+05:30")
    assert not result.available


def test_exclude_booking_id_skips_itself(make_vehicle, make_booking):
    car = make_vehicle()
    b = make_booking(car["id"], A_START, A_END)

    assert AvailabilityService.check_availability(car["id"], A_START, A_END, exclude_booking_id=b["id"]).available


@pytest.mark.parametrize("start,end", [
    (A_START, A_START),
    (A_END, A_START),
])
def test_empty_or_inverted_range_is_rejected(make_vehicle, start, end):
    car = make_vehicle()
    with pytest.raises(InvalidDateRangeError) as exc:
        AvailabilityService.check_availability(car["id"], start, end)
    assert exc.value.code == "INVALID_DATE_RANGE"


@pytest.mark.parametrize("params,code", [
    ({"start_date": A_START, "end_date": A_END}, "MISSING_CAR_ID"),
    ({"car_id": "1", "end_date": A_END}, "MISSING_START_DATE"),
    ({"car_id": "1", "start_date": A_START}, "MISSING_END_DATE"),
    ({"car_id": "abc", "start_date": A_START, "end_date": A_END}, "INVALID_CAR_ID"),
    ({"car_id": "1", "start_date": "tomorrow", "end_date": A_END}, "INVALID_START_DATE"),
    ({"car_id": "1", "start_date": A_START, "end_date": "2030-13-45"}, "INVALID_END_DATE"),
    ({"car_id": "1", "start_date": A_END, "end_date": A_START}, "INVALID_DATE_RANGE"),
])
def test_query_validation_codes(params, code):
    with pytest.raises(ValidationError) as exc:
        AvailabilityService.check_availability_query(params)
    assert exc.value.code == code


def test_check_survives_concurrent_bookings_on_other_cars(fake_store, make_vehicle, make_booking):
    car = make_vehicle()
    other = make_vehicle()
    make_booking(car["id"], A_START, A_END)
    errors = []
    done = threading.Event()

    def insert_many():
        try:
            for i in range(2000):
                make_booking(other["id"], f"2031-01-01T{i % 24:02d}:00:00Z", f"2031-01-01T{i % 24:02d}:30:00Z")
        finally:
            done.set()

    t = threading.Thread(target=insert_many)
    t.start()
    while not done.is_set():
        try:
            result = AvailabilityService.check_availability(car["id"], A_START, A_END)
            assert [c["id"] for c in result.conflicts] == [1]
        except RuntimeError as e:
            errors.append(str(e))
    t.join()

    assert not errors
