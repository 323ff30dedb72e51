from datetime import datetime

import pytest
import pytz

from carshare.services.common import overlap, to_int_safe
from carshare.utils.timeutils import parse_instant, to_iso


def test_parse_instant_variants():
    utc = pytz.utc
    assert parse_instant("2030-01-10") == utc.localize(datetime(2030, 1, 10))
    assert parse_instant("2030-01-10T10:00:00Z") == utc.localize(datetime(2030, 1, 10, 10))
    assert parse_instant("2030-01-10T15:30:00+05:30") == utc.localize(datetime(2030, 1, 10, 10))
    assert parse_instant(datetime(2030, 1, 10, 10)).tzinfo is not None


@pytest.mark.parametrize("bad", [
    "", "   ", "10/01/2030", None, 12,
    "0001-01-01T00:00:00+01:00",  # shifts below year 1
    "9999-12-31T23:00:00-05:00",
])
def test_parse_instant_rejects_garbage(bad):
    with pytest.raises(ValueError):
        parse_instant(bad)


def test_to_iso_is_utc_millis():
    assert to_iso(parse_instant("2030-01-10T15:30:00.123456+05:30")) == "2030-01-10T10:00:00.123Z"


def test_to_iso_pads_early_years():
    s = to_iso(parse_instant("0999-01-01T00:00:00Z"))
    assert s == "0999-01-01T00:00:00.000Z"
    assert parse_instant(s) == pytz.utc.localize(datetime(999, 1, 1))


def test_half_open_overlap():
    assert overlap(1, 3, 2, 4)
    assert not overlap(1, 2, 2, 3)
    assert not overlap(2, 3, 1, 2)
    assert overlap(0, 10, 3, 4)


def test_to_int_safe():
    assert to_int_safe("42") == 42
    assert to_int_safe(3.0) == 3
    assert to_int_safe(3.5) is None
    assert to_int_safe(True) is None
    assert to_int_safe("4x") is None
