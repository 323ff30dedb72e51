import pytest

from carshare.exceptions import FavoriteNotFoundError, ValidationError, VehicleNotFoundError
from carshare.services.favorite_service import FavoriteService
from carshare.services.review_service import ReviewService


def review(**overrides):
    body = {"car_id": 1, "reviewer_name": "Anita", "rating": 5, "comment": "Lovely car"}
    body.update(overrides)
    return body


def test_create_review_trims(make_vehicle):
    car = make_vehicle()
    r = ReviewService.create_review(review(car_id=str(car["id"]), reviewer_name=" Anita ", rating="4",
                                           comment="  Clean  "))
    assert r["reviewer_name"] == "Anita"
    assert r["comment"] == "Clean"
    assert r["rating"] == 4
    assert ReviewService.list_reviews(car["id"]) == [r]


@pytest.mark.parametrize("overrides,code", [
    ({"car_id": None}, "MISSING_CAR_ID"),
    ({"reviewer_name": None}, "MISSING_REVIEWER_NAME"),
    ({"rating": None}, "MISSING_RATING"),
    ({"comment": ""}, "MISSING_COMMENT"),
    ({"car_id": "abc"}, "INVALID_CAR_ID"),
    ({"rating": 0}, "INVALID_RATING"),
    ({"rating": 6}, "INVALID_RATING"),
    ({"rating": "great"}, "INVALID_RATING"),
    ({"reviewer_name": "   "}, "EMPTY_REVIEWER_NAME"),
    ({"comment": "   "}, "EMPTY_COMMENT"),
])
def test_review_validation_codes(make_vehicle, overrides, code):
    make_vehicle()
    with pytest.raises(ValidationError) as exc:
        ReviewService.create_review(review(**overrides))
    assert exc.value.code == code


def test_review_for_unknown_car():
    with pytest.raises(VehicleNotFoundError) as exc:
        ReviewService.create_review(review(car_id=77))
    assert exc.value.code == "CAR_NOT_FOUND"


def test_favorite_is_idempotent(fake_store, make_vehicle):
    car = make_vehicle()
    first, created = FavoriteService.add_favorite({"car_id": car["id"]})
    assert created

    second, created_again = FavoriteService.add_favorite({"car_id": str(car["id"])})
    assert not created_again
    assert second["id"] == first["id"]
    assert len(fake_store.favorites) == 1


def test_list_favorites_embeds_car(make_vehicle):
    car = make_vehicle()
    FavoriteService.add_favorite({"car_id": car["id"]})

    rows = FavoriteService.list_favorites()
    assert len(rows) == 1
    assert rows[0]["car"]["id"] == car["id"]


def test_favorite_validation():
    with pytest.raises(ValidationError) as exc:
        FavoriteService.add_favorite({})
    assert exc.value.code == "MISSING_REQUIRED_FIELD"

    with pytest.raises(ValidationError) as exc:
        FavoriteService.add_favorite({"car_id": "x"})
    assert exc.value.code == "INVALID_CAR_ID"

    with pytest.raises(VehicleNotFoundError):
        FavoriteService.add_favorite({"car_id": 5})


def test_remove_favorite(fake_store, make_vehicle):
    car = make_vehicle()
    FavoriteService.add_favorite({"car_id": car["id"]})

    deleted = FavoriteService.remove_favorite(str(car["id"]))
    assert deleted["car_id"] == car["id"]
    assert fake_store.favorites == {}

    with pytest.raises(FavoriteNotFoundError):
        FavoriteService.remove_favorite(car["id"])

    with pytest.raises(ValidationError) as exc:
        FavoriteService.remove_favorite(None)
    assert exc.value.code == "MISSING_CAR_ID"
