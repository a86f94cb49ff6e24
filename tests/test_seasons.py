import logging
from datetime import date

import pytest

from almanac.services.errors import InvalidInputError
from almanac.services.seasons import (
    OFF_SEASON,
    SEASONAL_MOVEMENTS,
    SeasonalMovement,
    resolve_movement,
    validate_partition,
)


def test_default_table_covers_every_day_once():
    report = validate_partition()
    assert report.ok, (report.gaps, report.overlaps)


@pytest.mark.parametrize(
    "month_day,movement_id",
    [
        ((1, 14), "seed-sanctuary"),
        ((1, 15), "root-whisper"),
        ((2, 29), "root-whisper"),
        ((3, 15), "root-whisper"),
        ((3, 16), "cool-octave"),
        ((5, 28), "cool-octave"),
        ((5, 29), "solar-peak"),
        ((8, 14), "solar-peak"),
        ((8, 15), "harvest-return"),
        ((10, 31), "harvest-return"),
        ((11, 1), "seed-sanctuary"),
        ((12, 31), "seed-sanctuary"),
        ((1, 1), "seed-sanctuary"),
    ],
)
def test_window_edges(month_day, movement_id):
    assert resolve_movement(month_day).id == movement_id


@pytest.mark.parametrize("month_day", [(13, 1), (0, 5), (2, 30), (4, 31)])
def test_impossible_month_day_is_rejected(month_day):
    with pytest.raises(InvalidInputError) as err:
        resolve_movement(month_day)
    assert err.value.field == "on"


def test_leap_day_is_accepted():
    assert resolve_movement((2, 29)).id


def test_march_15_belongs_to_exactly_one_window():
    hits = [m.id for m in SEASONAL_MOVEMENTS if m.contains(315)]
    assert hits == ["root-whisper"]


def test_dates_and_timestamps_resolve_on_utc_day():
    assert resolve_movement(date(2024, 7, 4)).id == "solar-peak"
    # 01:00 at +05:00 is still March 15 in UTC.
    assert resolve_movement("2024-03-16T01:00:00+05:00").id == "root-whisper"


def test_uncovered_date_falls_back_to_off_season(caplog):
    only_winter = [SEASONAL_MOVEMENTS[0]]
    with caplog.at_level(logging.WARNING):
        movement = resolve_movement((7, 1), only_winter)
    assert movement is OFF_SEASON
    assert "seasonal_window_no_match" in caplog.text


def test_validator_reports_gaps_and_overlaps():
    gappy = validate_partition([SEASONAL_MOVEMENTS[0]])
    assert not gappy.ok
    assert "07-01" in gappy.gaps

    extra = SeasonalMovement(id="extra", name="EXTRA", octave="x", start=(3, 10), end=(3, 20), hz=396)
    overlapping = validate_partition(list(SEASONAL_MOVEMENTS) + [extra])
    assert not overlapping.ok
    assert any(o.startswith("03-15") for o in overlapping.overlaps)
    assert not overlapping.gaps


def test_movement_labels():
    sanctuary = resolve_movement((12, 1))
    assert sanctuary.wraps
    d = sanctuary.as_dict()
    assert d["start"] == "11-01"
    assert d["end"] == "01-14"
