import math

import pytest

from jyotish_dasha.astro.constants import NAKSHATRA_SPAN_DEG
from jyotish_dasha.astro.errors import DomainError, OutOfRangeError
from jyotish_dasha.astro.nakshatra import locate


def approx_equal(a: float, b: float, eps: float = 1e-7) -> bool:
    return abs(a - b) <= eps


def test_zero_longitude_is_start_of_ashwini():
    pos = locate(0.0)
    assert pos.sector_index == 0
    assert pos.elapsed_fraction == 0.0
    assert pos.name == "Ashwini"
    assert pos.number == 1
    assert pos.pada == 1
    assert pos.lord == "Ketu"


def test_nakshatra_pada_boundaries():
    # Just before 13°20' (13.333333...) -> Ashwini, pada 4
    edge = 360.0 / 27.0
    pos = locate(edge - 1e-6)
    assert pos.name == "Ashwini"
    assert pos.pada == 4
    assert pos.elapsed_fraction < 1.0

    # Just after boundary -> Bharani, pada 1
    pos = locate(edge + 1e-6)
    assert pos.name == "Bharani"
    assert pos.number == 2
    assert pos.pada == 1


def test_exact_sector_span_lands_in_second_sector():
    pos = locate(NAKSHATRA_SPAN_DEG)
    assert pos.sector_index == 1
    assert approx_equal(pos.elapsed_fraction, 0.0)
    assert pos.lord == "Venus"


def test_elapsed_fraction_within_sector():
    pos = locate(NAKSHATRA_SPAN_DEG * 4.3)
    assert pos.sector_index == 4
    assert approx_equal(pos.elapsed_fraction, 0.3)
    assert pos.name == "Mrigashira"
    assert pos.pada == 2


def test_negative_and_overflowing_longitudes_wrap():
    pos = locate(-1.0)
    assert pos.sector_index == 26
    assert pos.name == "Revati"
    assert approx_equal(pos.longitude, 359.0)

    pos = locate(720.0 + 10.0)
    assert pos.sector_index == 0
    assert approx_equal(pos.elapsed_fraction, 10.0 / NAKSHATRA_SPAN_DEG)

    # Wraps to exactly 360.0 in float arithmetic; must fold to 0
    pos = locate(-1e-20)
    assert pos.sector_index == 0
    assert pos.longitude == 0.0


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_longitude_is_rejected(value):
    with pytest.raises(OutOfRangeError) as exc_info:
        locate(value)
    assert exc_info.value.code == "OUT_OF_RANGE"
    assert isinstance(exc_info.value, DomainError)
    assert isinstance(exc_info.value, ValueError)


def test_every_sector_maps_to_its_lord_cyclically():
    lords = [locate(NAKSHATRA_SPAN_DEG * (i + 0.5)).lord for i in range(27)]
    assert lords[:9] == lords[9:18] == lords[18:]
    assert lords[:9] == ["Ketu", "Venus", "Sun", "Moon", "Mars", "Rahu", "Jupiter", "Saturn", "Mercury"]


def test_position_to_dict():
    data = locate(NAKSHATRA_SPAN_DEG * 9.6).to_dict()
    assert data["name"] == "Magha"
    assert data["index"] == 10
    assert data["lord"] == "Ketu"
    assert data["pada"] == 3
    assert approx_equal(data["elapsedFraction"], 0.6)


@pytest.mark.parametrize("value", [10 ** 400, -(10 ** 400), None, "north"])
def test_unconvertible_longitude_is_rejected(value):
    with pytest.raises(OutOfRangeError):
        locate(value)


def test_large_finite_integer_wraps():
    pos = locate(10 ** 6 * 360 + 20)
    assert pos.sector_index == 1
    assert approx_equal(pos.longitude, 20.0)
