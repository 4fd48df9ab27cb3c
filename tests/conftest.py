from datetime import date

import pytest

from core.models import Attraction, CrowdDay, WeatherDay

TUESDAY = date(2026, 10, 20)
SATURDAY = date(2026, 10, 24)


class FixedRandom:
    """Random source pinned to the middle of the jitter band (multiplier 1.0)."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_rng():
    return FixedRandom()


@pytest.fixture
def park():
    return Attraction(
        id="attr_test",
        name="Test Park",
        category="theme_park",
        city="Jakarta",
        capacity=10000,
        base_price=200000,
        latitude=-6.12,
        longitude=106.84,
        tags=("outdoor",),
    )


def make_weather(d, temperature=28, condition="sunny", precipitation=10):
    return WeatherDay(date=d, temperature=temperature, condition=condition,
                      precipitation=precipitation)


def make_crowd(d, capacity_percentage=30, level=None, factors=None, capacity=10000):
    from core.crowds import crowd_level

    return CrowdDay(
        date=d,
        expected_visitors=capacity * capacity_percentage // 100,
        capacity_percentage=capacity_percentage,
        level=level or crowd_level(capacity_percentage),
        factors=factors if factors is not None else ["Weekday normal pattern"],
    )
