import pytest

from almanac.services import gates
from almanac.services.constants import CATEGORIES, ELEMENTS
from almanac.services.errors import InvalidInputError
from almanac.services.gates import TaskDescriptor, evaluate_task
from almanac.services.lunar import LunarOverride, compute_lunar_state
from almanac.services.seasons import OFF_SEASON, resolve_movement


def moon(**kw):
    return compute_lunar_state(override=LunarOverride(**kw))


@pytest.mark.parametrize("category", CATEGORIES)
@pytest.mark.parametrize("element", ELEMENTS)
def test_seed_gate_truth_table(category, element):
    result = gates.seed_saving_gate(moon(category=category, element=element))
    expected = element in ("fire", "air") and category in ("waning", "full")
    assert result.passed is expected
    assert result.gate == gates.SEED_GATE
    if not expected:
        assert result.resolution
        assert result.wait_until


def test_root_gate_is_or_composed():
    # Waning alone is enough even in a fire sign.
    assert gates.lunar_gate("root", moon(category="waning", zodiac_sign="Leo")).passed
    # Earth sign alone is enough even while waxing.
    assert gates.lunar_gate("root", moon(category="waxing", zodiac_sign="Virgo")).passed
    closed = gates.lunar_gate("root", moon(category="waxing", zodiac_sign="Leo"))
    assert not closed.passed
    assert "waxing" in closed.message and "Leo" in closed.message
    assert "Taurus/Virgo/Capricorn" in closed.wait_until


def test_leaf_gate():
    assert gates.lunar_gate("leaf", moon(category="new", zodiac_sign="Aries")).passed
    assert gates.lunar_gate("leaf", moon(category="waning", zodiac_sign="Pisces")).passed
    assert not gates.lunar_gate("leaf", moon(category="waning", zodiac_sign="Aries")).passed


def test_fruit_gate_accepts_waxing_gibbous():
    assert gates.lunar_gate("fruit", moon(phase="waxing-gibbous", zodiac_sign="Taurus")).passed
    assert gates.lunar_gate("fruit", moon(category="new", zodiac_sign="Sagittarius")).passed
    assert not gates.lunar_gate("fruit", moon(phase="waxing-crescent", zodiac_sign="Taurus")).passed


def test_seasonal_gate_names_the_next_allowing_window():
    result = gates.seasonal_gate("Watermelon", resolve_movement((2, 10)))
    assert not result.passed
    assert result.wait_until == "THE SOLAR PEAK (05-29)"
    assert "Deep Octave" in result.message


def test_seasonal_gate_passes_allowed_crop_and_off_season():
    assert gates.seasonal_gate("Carrots", resolve_movement((2, 10))).passed
    assert gates.seasonal_gate("Watermelon", OFF_SEASON).passed


def test_blocked_crop_with_no_allowing_window_has_no_wait():
    result = gates.seasonal_gate("Eggplant", resolve_movement((4, 1)))
    assert not result.passed
    assert result.wait_until is None


def test_evaluate_task_aggregates_results():
    task = TaskDescriptor("root", "Carrots")
    ok = evaluate_task(task, at="2024-02-10T12:00:00Z", override=LunarOverride(category="waning", element="earth"))
    assert [r.gate for r in ok.results] == [gates.LUNAR_GATE, gates.SEASONAL_GATE]
    assert not ok.blocked
    assert ok.movement.id == "root-whisper"

    blocked = evaluate_task(TaskDescriptor("season-bound", "Watermelon"), at="2024-02-10T12:00:00Z")
    assert blocked.blocked
    assert len(blocked.results) == 1


def test_seed_saving_runs_only_the_dry_day_gate():
    evaluation = evaluate_task(TaskDescriptor("Seed Saving", "Tomatoes"), override=LunarOverride(category="full", element="air"))
    assert evaluation.task.task_class == "seed-saving"
    assert [r.gate for r in evaluation.results] == [gates.SEED_GATE]
    assert not evaluation.blocked


def test_unknown_task_class_and_gate_are_rejected():
    with pytest.raises(InvalidInputError):
        TaskDescriptor("bulb", "Tulips")
    with pytest.raises(InvalidInputError):
        evaluate_task(TaskDescriptor("root", "Carrots"), gates=["WIND GATE"])


def test_explicit_empty_gate_list_runs_nothing():
    evaluation = evaluate_task(TaskDescriptor("season-bound", "Watermelon"), at="2024-02-10T12:00:00Z", gates=[])
    assert evaluation.results == ()
    assert evaluation.blocked is False
