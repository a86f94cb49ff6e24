from datetime import datetime, timedelta, timezone

import pytest

from almanac.services import lunar
from almanac.services.errors import InvalidInputError
from almanac.services.lunar import LunarOverride, compute_lunar_state


def test_reference_new_moon_is_day_zero():
    state = compute_lunar_state(lunar.REFERENCE_NEW_MOON)
    assert state.phase == "new"
    assert state.category == "new"
    assert state.illumination_percent == 0
    assert state.day_in_cycle == pytest.approx(0.0)
    assert state.zodiac_index == 0
    assert state.zodiac_sign == "Aries"
    assert state.element == "fire"
    assert state.overridden is False


def test_just_past_half_cycle_is_full_and_fully_lit():
    at = lunar.REFERENCE_NEW_MOON + timedelta(days=lunar.SYNODIC_MONTH / 2 + 0.1)
    state = compute_lunar_state(at)
    assert state.phase == "full"
    assert state.illumination_percent == 100


@pytest.mark.parametrize(
    "day,phase",
    [
        (0.0, "new"),
        (1.84, "new"),
        (1.85, "waxing-crescent"),
        (7.38, "first-quarter"),
        (9.23, "waxing-gibbous"),
        (14.77, "full"),
        (16.61, "waning-gibbous"),
        (22.15, "last-quarter"),
        (23.99, "waning-crescent"),
        (29.5, "waning-crescent"),
    ],
)
def test_phase_boundaries_belong_to_later_phase(day, phase):
    assert lunar.phase_for_day(day) == phase


def test_day_in_cycle_stays_in_range_for_many_instants():
    start = datetime(1950, 1, 1, tzinfo=timezone.utc)
    for step in range(0, 40000, 97):
        state = compute_lunar_state(start + timedelta(days=step, hours=step % 24))
        assert 0 <= state.day_in_cycle < lunar.SYNODIC_MONTH
        assert 0 <= state.zodiac_index <= 11
        assert 0 <= state.illumination_percent <= 100


def test_instants_before_reference_are_normalized():
    state = compute_lunar_state("1999-12-01T00:00:00Z")
    assert 0 <= state.day_in_cycle < lunar.SYNODIC_MONTH
    assert lunar.normalize_cycle(-1.0, 10.0) == pytest.approx(9.0)


def test_same_instant_gives_same_state():
    at = "2024-06-21T08:30:00Z"
    assert compute_lunar_state(at) == compute_lunar_state(at)


def test_naive_and_utc_timestamps_agree():
    naive = datetime(2024, 3, 1, 12, 0)
    aware = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert compute_lunar_state(naive) == compute_lunar_state(aware)


def test_bad_timestamp_is_rejected():
    with pytest.raises(InvalidInputError) as exc:
        compute_lunar_state("next tuesday")
    assert exc.value.field == "at"


def test_zodiac_index_steps_every_twelfth_of_sidereal_month():
    twelfth = lunar.SIDEREAL_MONTH / 12
    assert lunar.zodiac_index_for_days(twelfth * 0.5) == 0
    assert lunar.zodiac_index_for_days(twelfth * 1.5) == 1
    assert lunar.zodiac_index_for_days(-twelfth * 0.5) == 11


def test_override_replaces_computed_state_entirely():
    override = LunarOverride(category="waning", element="Earth")
    a = compute_lunar_state("2024-01-11T00:00:00Z", override=override)
    b = compute_lunar_state("2024-07-04T00:00:00Z", override=override)
    assert a == b
    assert a.overridden is True
    assert a.phase == "waning-gibbous"
    assert a.category == "waning"
    assert a.zodiac_sign == "Taurus"
    assert a.element == "earth"
    assert a.zodiac_index == 1
    assert a.day_in_cycle == pytest.approx((16.61 + 22.15) / 2)


def test_override_by_phase_and_sign():
    state = compute_lunar_state(override=LunarOverride(phase="first quarter", zodiac_sign="leo"))
    assert state.phase == "first-quarter"
    assert state.category == "waxing"
    assert state.zodiac_sign == "Leo"
    assert state.element == "fire"


@pytest.mark.parametrize(
    "override,field",
    [
        (LunarOverride(category="sideways", element="earth"), "category"),
        (LunarOverride(category="waning", element="plasma"), "element"),
        (LunarOverride(element="earth"), "category"),
        (LunarOverride(category="full"), "element"),
        (LunarOverride(category="full", phase="new", element="earth"), "phase"),
        (LunarOverride(category="full", element="water", zodiac_sign="Leo"), "zodiac_sign"),
    ],
)
def test_invalid_override_is_rejected(override, field):
    with pytest.raises(InvalidInputError) as exc:
        compute_lunar_state(override=override)
    assert exc.value.field == field


def test_state_dict_carries_label_and_symbol():
    d = compute_lunar_state(override=LunarOverride(category="full", zodiac_sign="Leo")).as_dict()
    assert d["phase_label"] == "Full Moon"
    assert d["zodiac_label"] == "♌ Leo"
