from dataclasses import replace
from datetime import timedelta

import pytest

from conftest import SATURDAY, TUESDAY, make_crowd, make_weather
from core.errors import DataMismatch, InvalidArgument
from core.models import PricingInfo, ScoreBreakdown, VisitPreferences
from core.scoring import (
    DynamicPricingPolicy,
    EventCalendar,
    FlatPricingPolicy,
    align_series,
    badges_for,
    crowd_points,
    generate_insights,
    price_points,
    score_date,
    score_dates,
    temperature_points,
    weather_points,
)

WEDNESDAY = TUESDAY + timedelta(days=1)
THURSDAY = TUESDAY + timedelta(days=2)


def test_weather_points_for_cool_partly_cloudy_day():
    weather = make_weather(TUESDAY, temperature=24, condition="partly_cloudy", precipitation=18)
    # 20 - 3*2 for temperature, 15 for <20% rain, 3 for partly cloudy
    assert weather_points(weather) == 32


def test_weather_points_stay_in_bounds():
    for temperature in range(-10, 50, 3):
        for precipitation in range(0, 101, 10):
            for condition in ("sunny", "clear", "partly-cloudy", "rain", "thunderstorm", "fog"):
                points = weather_points(make_weather(TUESDAY, temperature, condition, precipitation))
                assert 0 <= points <= 40


def test_temperature_points():
    assert temperature_points(26) == 20
    assert temperature_points(30) == 20
    assert temperature_points(31) == 17
    assert temperature_points(45) == 0


def test_crowd_points_never_increase_with_percentage():
    points = [crowd_points(pct) for pct in range(0, 101)]
    assert points == sorted(points, reverse=True)
    assert crowd_points(39) == 35
    assert crowd_points(60) == 25
    assert crowd_points(61) == 10


def test_breakdown_rejects_out_of_range_components():
    with pytest.raises(InvalidArgument):
        ScoreBreakdown(weather=41)
    with pytest.raises(InvalidArgument):
        ScoreBreakdown(crowd=-1)


def test_quiet_sunny_weekday_scores_high(park):
    rec = score_date(park, make_weather(TUESDAY), make_crowd(TUESDAY, 30))

    assert rec.breakdown == ScoreBreakdown(weather=40, crowd=35, price=15, events=0)
    assert rec.score == 90
    assert rec.day_of_week == "Tuesday"
    assert rec.pricing == PricingInfo(dynamic_price=180000, reason="Weekday discount")
    assert rec.badges == ["Best Weather", "Good Crowd", "Best Value"]
    assert len(rec.reasons) == 3
    assert rec.reasons[0].startswith("Ideal weather")


def test_busy_weekend_scores_lower(park):
    rec = score_date(park, make_weather(SATURDAY), make_crowd(SATURDAY, 75))

    assert rec.breakdown == ScoreBreakdown(weather=40, crowd=10, price=5, events=0)
    assert rec.score == 55
    assert rec.pricing.reason == "Weekend premium"
    assert rec.badges == ["Best Weather"]


def test_crowd_reason_added_only_when_avoiding_crowds(park):
    weather, crowd = make_weather(SATURDAY), make_crowd(SATURDAY, 75)

    avoiding = score_date(park, weather, crowd, VisitPreferences(avoid_crowds=True))
    indifferent = score_date(park, weather, crowd, VisitPreferences(avoid_crowds=False))

    assert len(indifferent.reasons) == 1
    assert len(avoiding.reasons) == 2
    assert "visitors" in avoiding.reasons[1]


def test_poor_day_still_gets_a_reason(park):
    weather = make_weather(SATURDAY, temperature=40, condition="thunderstorm", precipitation=90)
    rec = score_date(park, weather, make_crowd(SATURDAY, 95),
                     VisitPreferences(avoid_crowds=False))
    assert rec.breakdown.weather == 0
    assert len(rec.reasons) == 1


def test_score_date_rejects_different_dates(park):
    with pytest.raises(DataMismatch):
        score_date(park, make_weather(TUESDAY), make_crowd(SATURDAY))


def test_free_attraction_gets_full_price_points(park):
    free = replace(park, base_price=0)
    rec = score_date(free, make_weather(SATURDAY), make_crowd(SATURDAY, 75))
    assert rec.pricing == PricingInfo(dynamic_price=0, reason="Free entry")
    assert rec.breakdown.price == 15
    assert "Free entry." in rec.reasons


def test_pricing_policies(park):
    dynamic = DynamicPricingPolicy()
    assert dynamic.quote(park, make_crowd(TUESDAY, 50)).reason == "Standard pricing"
    assert price_points(dynamic.quote(park, make_crowd(TUESDAY, 50)), park.base_price) == 10

    flat = FlatPricingPolicy()
    rec = score_date(park, make_weather(SATURDAY), make_crowd(SATURDAY, 75), pricing_policy=flat)
    assert rec.pricing.dynamic_price == park.base_price
    assert rec.breakdown.price == 10


def test_event_calendar_adds_points_and_badge(park):
    events = EventCalendar({SATURDAY: ["Jakarta Fair"]})
    rec = score_date(park, make_weather(SATURDAY), make_crowd(SATURDAY, 75), events=events)

    assert rec.breakdown.events == 10
    assert rec.score == 65
    assert "Special Event" in rec.badges
    assert "Special events: Jakarta Fair." in rec.reasons
    assert events.points(TUESDAY) == 0


def test_badges_thresholds():
    assert badges_for(ScoreBreakdown(weather=35, crowd=25, price=15, events=1)) == [
        "Best Weather", "Good Crowd", "Best Value", "Special Event",
    ]
    assert badges_for(ScoreBreakdown(weather=34, crowd=24, price=14)) == []


def test_ranking_orders_by_score_then_date(park):
    dates = [THURSDAY, SATURDAY, TUESDAY, WEDNESDAY]
    weather = [make_weather(d) for d in dates]
    crowds = [make_crowd(d, 75 if d == SATURDAY else 30) for d in dates]

    result = score_dates(park, weather, crowds)

    assert [r.date for r in result.recommended_dates] == [TUESDAY, WEDNESDAY, THURSDAY, SATURDAY]
    assert result.best.date == TUESDAY
    assert result.source == "deterministic"
    for r in result.recommended_dates:
        assert r.score == r.breakdown.total
        assert 0 <= r.score <= 100


def test_score_dates_requires_matching_series(park):
    weather = [make_weather(TUESDAY), make_weather(WEDNESDAY)]
    with pytest.raises(DataMismatch):
        score_dates(park, weather, [make_crowd(TUESDAY), make_crowd(THURSDAY)])
    with pytest.raises(DataMismatch):
        score_dates(park, weather, [make_crowd(TUESDAY)])


def test_align_series_rejects_duplicates():
    with pytest.raises(DataMismatch):
        align_series([make_weather(TUESDAY), make_weather(TUESDAY)], [make_crowd(TUESDAY)])


def test_align_series_pairs_by_date():
    pairs = align_series(
        [make_weather(WEDNESDAY), make_weather(TUESDAY)],
        [make_crowd(TUESDAY), make_crowd(WEDNESDAY)],
    )
    assert [(w.date, c.date) for w, c in pairs] == [(TUESDAY, TUESDAY), (WEDNESDAY, WEDNESDAY)]


def test_empty_series_give_empty_result(park):
    result = score_dates(park, [], [])
    assert result.recommended_dates == []
    assert result.insights == []
    assert result.best is None


def test_insights(park):
    friday = TUESDAY + timedelta(days=3)
    new_year_crowd = make_crowd(
        friday, 95, factors=["Friday - pre-weekend rush", "Public holiday: Test Day"],
    )
    weather = [
        make_weather(TUESDAY),
        make_weather(WEDNESDAY),
        make_weather(THURSDAY, precipitation=70, condition="rain"),
        make_weather(friday),
    ]
    crowds = [make_crowd(TUESDAY, 20), make_crowd(WEDNESDAY, 30), make_crowd(THURSDAY, 30),
              new_year_crowd]

    result = score_dates(park, weather, crowds)
    titles = [(i.type, i.title) for i in result.insights]

    assert ("tip", "Best Time to Visit") in titles
    assert ("warning", "Rain Risk") in titles
    assert ("info", "Holiday Crowds") in titles
    assert ("tip", "Crowd-Free Window") in titles


def test_crowd_free_window_needs_avoid_crowds(park):
    weather = [make_weather(TUESDAY), make_weather(SATURDAY)]
    crowds = [make_crowd(TUESDAY, 20), make_crowd(SATURDAY, 80)]
    ranked = score_dates(park, weather, crowds).recommended_dates

    titles = [i.title for i in generate_insights(ranked, VisitPreferences(avoid_crowds=False))]
    assert "Crowd-Free Window" not in titles


def test_crowd_free_window_without_busy_days(park):
    weather = [make_weather(TUESDAY), make_weather(WEDNESDAY)]
    crowds = [make_crowd(TUESDAY, 20), make_crowd(WEDNESDAY, 50)]

    titles = [i.title for i in score_dates(park, weather, crowds).insights]
    assert "Crowd-Free Window" in titles


def test_closed_day_is_flagged(park):
    monday = TUESDAY - timedelta(days=1)
    museum = replace(park, open_hours=(("monday", "Closed"), ("tuesday", "09:00-17:00")))
    weather = [make_weather(monday), make_weather(TUESDAY)]
    crowds = [make_crowd(monday, 20), make_crowd(TUESDAY, 20)]

    result = score_dates(museum, weather, crowds)
    by_date = {r.date: r for r in result.recommended_dates}

    assert by_date[monday].reasons[0] == "Test Park is closed on Mondays."
    assert len(by_date[monday].reasons) == 3
    assert not any("closed" in r for r in by_date[TUESDAY].reasons)
    closed = [i for i in result.insights if i.title == "Closed Days"]
    assert closed and closed[0].type == "warning"
    assert "Mon Oct 19" in closed[0].message


def test_reason_shares_use_component_maxima():
    assert ScoreBreakdown.maximum("weather") == 40
    assert ScoreBreakdown.maximum("events") == 10
