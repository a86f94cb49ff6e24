from datetime import datetime, timedelta, timezone

import pytest

from almanac.services import harmonic
from almanac.services.errors import InvalidInputError
from almanac.services.events import EventChannel, PEST_DETECTED
from almanac.services.harmonic import (
    HarmonicDependencyResolver,
    IrrigationEntry,
    ZoneStatus,
    check_irrigation,
    default_zones,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def watered(*days_ago, zone=417):
    return [IrrigationEntry(at=NOW - timedelta(days=d), zone=zone) for d in days_ago]


@pytest.mark.parametrize(
    "value,status",
    [(70, "optimal"), (60, "optimal"), (40, "warning"), (36, "warning"), (30, "critical"), (None, "no-data")],
)
def test_status_is_derived_from_value_and_threshold(value, status):
    zone = ZoneStatus(396, "ROOT", "Earth", "Phosphorus", 60, value)
    assert zone.status == status


def test_status_follows_updates_and_clamps():
    zone = ZoneStatus(396, "ROOT", "Earth", "Phosphorus", 60, 20)
    assert zone.status == "critical"
    zone.update(150, at=NOW)
    assert zone.value == 100.0
    assert zone.status == "optimal"
    assert zone.last_updated == NOW
    zone.update(-5)
    assert zone.value == 0.0


@pytest.mark.parametrize("threshold", [0, -10, 120])
def test_threshold_outside_range_is_rejected(threshold):
    with pytest.raises(InvalidInputError):
        ZoneStatus(396, "ROOT", "Earth", "Phosphorus", threshold)


def test_default_zones_rejects_unknown_zone():
    assert default_zones({396: 80})[396].status == "optimal"
    with pytest.raises(InvalidInputError):
        default_zones({400: 50})


def test_solar_work_blocked_by_weak_roots():
    resolver = HarmonicDependencyResolver()
    assert resolver.check(528, default_zones({396: 80})).approved

    result = resolver.check(528, default_zones({396: 30}))
    assert not result.approved
    alert = result.alerts[0]
    assert alert.dependency_id == "root-to-solar"
    assert alert.severity == "critical"
    assert alert.observed_value == 30
    assert alert.threshold == 60
    assert "528Hz" in alert.message and "396Hz" in alert.message


def test_missing_source_reading_is_treated_as_no_data():
    result = HarmonicDependencyResolver().check(528, default_zones())
    assert result.alerts[0].severity == "no-data"


def test_fruit_feeding_needs_regular_irrigation():
    resolver = HarmonicDependencyResolver()
    zones = default_zones({417: 80})
    assert resolver.check(741, zones, watered(1, 3, 5), now=NOW).approved

    result = resolver.check(741, zones, watered(1, 5), now=NOW)
    assert not result.approved
    assert "4 day gap" in result.alerts[0].irrigation_issue


def test_irrigation_check_messages():
    assert check_irrigation(417, [], now=NOW).issue.startswith("No irrigation data")
    assert "only 1 watering" in check_irrigation(417, watered(2), now=NOW).issue
    # Entries for other zones or outside the window are ignored.
    assert not check_irrigation(417, watered(1, 2, zone=396) + watered(9, 10), now=NOW).regular
    assert check_irrigation(417, watered(0.5, 2.5, 4.5, 6.5), now=NOW).regular


def test_irrigation_window_comes_from_env(monkeypatch):
    monkeypatch.setenv("ALMANAC_IRRIGATION_MAX_GAP_DAYS", "5")
    assert check_irrigation(417, watered(1, 5), now=NOW).regular


def test_unmapped_zone_fail_open_and_fail_closed():
    opened = HarmonicDependencyResolver(policy="fail-open").check(852, default_zones())
    assert opened.approved
    assert "852" in opened.note

    closed = HarmonicDependencyResolver(policy="fail-closed").check(852, default_zones())
    assert not closed.approved
    assert closed.alerts[0].kind == "unmapped"


def test_policy_from_env(monkeypatch):
    resolver = HarmonicDependencyResolver()
    assert resolver.policy == "fail-open"
    monkeypatch.setenv("ALMANAC_DEPENDENCY_POLICY", "fail-closed")
    assert resolver.policy == "fail-closed"
    assert not resolver.check(852, default_zones()).approved


def test_zone_referenced_only_as_source_is_mapped():
    result = HarmonicDependencyResolver(policy="fail-closed").check(396, default_zones())
    assert result.approved
    assert result.note is None


def test_shield_directive_persists_until_acknowledged():
    channel = EventChannel()
    resolver = HarmonicDependencyResolver()
    resolver.attach(channel)

    channel.signal(PEST_DETECTED, {"pest": "Aphids"})
    directives = resolver.active_directives()
    assert len(directives) == 1
    assert directives[0].alert.target_zone == harmonic.ALL_ZONES
    assert directives[0].alert.message == "Defensive maneuver required: Aphids reported."

    # Unrelated checks and repeat signals leave the directive in place.
    resolver.check(528, default_zones({396: 90}))
    channel.signal(PEST_DETECTED, {"pest": "Slugs"})
    directives = resolver.active_directives()
    assert len(directives) == 1
    assert directives[0].signals == 2

    assert resolver.acknowledge("source-shield") is True
    assert resolver.active_directives() == []
    assert resolver.acknowledge("source-shield") is False


def test_other_events_do_not_raise_the_shield():
    channel = EventChannel()
    resolver = HarmonicDependencyResolver()
    resolver.attach(channel)
    channel.signal("frost-warning", {})
    assert resolver.active_directives() == []
