"""Inter-zone dependency rules.

A fruiting zone is only advised when the zone that feeds it is healthy:
roots before solar feeding, steady water before fruit feeding. A third rule
is event driven and shields every zone when a pest is reported.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from . import config
from .errors import InvalidInputError
from .events import PEST_DETECTED, EventChannel
from .lunar import to_utc

logger = logging.getLogger(__name__)

ALL_ZONES = "ALL"

OPTIMAL = "optimal"
WARNING = "warning"
CRITICAL = "critical"
NO_DATA = "no-data"

WARNING_RATIO = 0.6


def derive_status(value: Optional[float], threshold: float) -> str:
    if value is None:
        return NO_DATA
    if value >= threshold:
        return OPTIMAL
    if value >= threshold * WARNING_RATIO:
        return WARNING
    return CRITICAL


def _clamp_value(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return max(0.0, min(100.0, float(value)))


@dataclass
class ZoneStatus:
    """Health reading for one frequency band.

    ``status`` is always derived from ``value`` and ``threshold``; there is
    no way to set it directly.
    """

    id: int
    name: str
    element: str
    nutrient: str
    threshold: float
    value: Optional[float] = None
    last_updated: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not 0 < self.threshold <= 100:
            raise InvalidInputError("threshold", f"must be within (0, 100], got {self.threshold}")
        self.value = _clamp_value(self.value)

    @property
    def status(self) -> str:
        return derive_status(self.value, self.threshold)

    def update(self, value: Optional[float], at=None) -> "ZoneStatus":
        self.value = _clamp_value(value)
        self.last_updated = to_utc(at)
        return self

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "element": self.element,
            "nutrient": self.nutrient,
            "value": self.value,
            "threshold": self.threshold,
            "status": self.status,
        }


_ZONE_TABLE = [
    (396, "ROOT", "Earth", "Phosphorus", 60),
    (417, "SACRAL", "Water", "Hydration", 50),
    (528, "SOLAR", "Fire", "Nitrogen", 60),
    (639, "HEART", "Air", "Calcium", 55),
    (741, "THROAT", "Ether", "Potassium", 50),
    (852, "THIRD EYE", "Light", "Trace Minerals", 40),
    (963, "SOURCE", "Spirit", "Vitality", 70),
]


def default_zones(readings: Optional[Mapping[int, float]] = None) -> Dict[int, ZoneStatus]:
    """Fresh zone snapshot, optionally seeded with ``{zone_id: value}``."""

    zones = {hz: ZoneStatus(hz, name, element, nutrient, threshold) for hz, name, element, nutrient, threshold in _ZONE_TABLE}
    for zone_id, value in (readings or {}).items():
        if zone_id not in zones:
            raise InvalidInputError("zone", f"unknown zone {zone_id}")
        zones[zone_id].update(value)
    return zones


@dataclass(frozen=True)
class HarmonicDependency:
    id: str
    name: str
    rule: str
    source_zone: int
    target_zone: Union[int, str]
    alert_template: str
    resolution: str
    trigger_event: Optional[str] = None
    requires_regular_irrigation: bool = False

    @property
    def event_triggered(self) -> bool:
        return self.target_zone == ALL_ZONES


DEFAULT_DEPENDENCIES: tuple[HarmonicDependency, ...] = (
    HarmonicDependency(
        id="root-to-solar",
        name="THE ROOT DEPENDENCY",
        rule="Nitrogen (vegetative energy) cannot be metabolized without phosphorus (root energy).",
        source_zone=396,
        target_zone=528,
        alert_template=(
            "Harmonic error: Solar energy ({target_zone}Hz) requires strong roots ({source_zone}Hz). "
            "{source_name} is {status} at {value} against a threshold of {threshold}."
        ),
        resolution="Apply bone meal or rock phosphate to the root zone before proceeding.",
    ),
    HarmonicDependency(
        id="flow-to-expression",
        name="THE FLOW DEPENDENCY",
        rule="Fruit swelling (potassium) requires consistent hydration.",
        source_zone=417,
        target_zone=741,
        alert_template=(
            "Harmonic error: Fruit expression ({target_zone}Hz) is stalled. Stabilize flow ({source_zone}Hz) "
            "before feeding. {source_name} is {status} at {value} against a threshold of {threshold}."
        ),
        resolution="Establish a consistent irrigation schedule (every 2-3 days) before fruit feeding.",
        requires_regular_irrigation=True,
    ),
    HarmonicDependency(
        id="source-shield",
        name="THE SOURCE SHIELD",
        rule="The crown protects the body.",
        source_zone=963,
        target_zone=ALL_ZONES,
        alert_template="Defensive maneuver required: {detail} reported.",
        resolution="Deploy protective companion planting (garlic/onion guild) to the affected area immediately.",
        trigger_event=PEST_DETECTED,
    ),
)


@dataclass(frozen=True)
class HarmonicAlert:
    kind: str
    dependency_id: str
    message: str
    resolution: Optional[str] = None
    source_zone: Optional[int] = None
    target_zone: Union[int, str, None] = None
    observed_value: Optional[float] = None
    threshold: Optional[float] = None
    severity: Optional[str] = None
    irrigation_issue: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "dependency_id": self.dependency_id,
            "message": self.message,
            "resolution": self.resolution,
            "source_zone": self.source_zone,
            "target_zone": self.target_zone,
            "observed_value": self.observed_value,
            "threshold": self.threshold,
            "severity": self.severity,
            "irrigation_issue": self.irrigation_issue,
        }


@dataclass(frozen=True)
class DependencyCheck:
    target_zone: int
    alerts: tuple[HarmonicAlert, ...]
    note: Optional[str] = None

    @property
    def approved(self) -> bool:
        return not self.alerts


# --- Irrigation regularity -------------------------------------------------


@dataclass(frozen=True)
class IrrigationEntry:
    at: datetime
    zone: int
    amount: float = 0.0
    method: str = "drip"


@dataclass(frozen=True)
class IrrigationCheck:
    regular: bool
    issue: Optional[str] = None


def check_irrigation(zone: int, log: Iterable[IrrigationEntry], now=None) -> IrrigationCheck:
    """Waterings for ``zone`` in the trailing window must be frequent and evenly spaced."""

    window_days = config.irrigation_window_days()
    max_gap = config.irrigation_max_gap_days()
    current = to_utc(now)
    since = current - timedelta(days=window_days)

    recent = sorted(to_utc(e.at) for e in log if e.zone == zone and since <= to_utc(e.at) <= current)
    if not recent:
        return IrrigationCheck(False, f"No irrigation data in the last {window_days} days.")
    if len(recent) < 2:
        return IrrigationCheck(False, f"Irregular irrigation: only 1 watering in {window_days} days.")
    for prev, nxt in zip(recent, recent[1:]):
        gap = (nxt - prev).total_seconds() / 86400.0
        if gap > max_gap:
            return IrrigationCheck(False, f"Irregular irrigation: {int(gap)} day gap detected.")
    return IrrigationCheck(True)


# --- Resolver ----------------------------------------------------------------


@dataclass
class Directive:
    alert: HarmonicAlert
    signals: int = 1
    payload: Optional[dict] = None
    activated_at: datetime = field(default_factory=lambda: to_utc(None))


class HarmonicDependencyResolver:
    """Evaluate state-dependent rules and track event-triggered directives.

    ``policy`` decides what happens when a target zone is not mentioned by
    any rule: ``fail-open`` approves with an explanatory note,
    ``fail-closed`` returns an ``unmapped`` alert.
    """

    def __init__(self, dependencies: Sequence[HarmonicDependency] = DEFAULT_DEPENDENCIES, policy: Optional[str] = None) -> None:
        self.dependencies = tuple(dependencies)
        self._policy = policy
        self._directives: Dict[str, Directive] = {}
        self._lock = threading.Lock()

    @property
    def policy(self) -> str:
        return self._policy or config.dependency_policy()

    def _state_rules(self) -> List[HarmonicDependency]:
        return [d for d in self.dependencies if not d.event_triggered]

    def known_zones(self) -> set:
        zones = set()
        for dep in self._state_rules():
            zones.add(dep.source_zone)
            zones.add(dep.target_zone)
        return zones

    def check(
        self,
        target_zone: int,
        zones: Mapping[int, ZoneStatus],
        irrigation_log: Optional[Iterable[IrrigationEntry]] = None,
        now=None,
    ) -> DependencyCheck:
        """Alerts for planning work in ``target_zone`` given the ``zones`` snapshot."""

        rules = [d for d in self._state_rules() if d.target_zone == target_zone]
        if not rules and target_zone not in self.known_zones():
            logger.info("harmonic_zone_unmapped", extra={"target_zone": target_zone, "policy": self.policy})
            note = f"No dependency rules reference zone {target_zone}."
            if self.policy == "fail-closed":
                alert = HarmonicAlert(
                    kind="unmapped",
                    dependency_id="unmapped-zone",
                    message=f"{note} Zone is treated as misconfigured.",
                    resolution="Add the zone to the dependency table or choose a mapped zone.",
                    target_zone=target_zone,
                )
                return DependencyCheck(target_zone, (alert,), note)
            return DependencyCheck(target_zone, (), note)

        log = list(irrigation_log or [])
        alerts: List[HarmonicAlert] = []
        for dep in rules:
            source = zones.get(dep.source_zone)
            status = source.status if source else NO_DATA
            value = source.value if source else None
            threshold = source.threshold if source else None
            irrigation = check_irrigation(dep.source_zone, log, now) if dep.requires_regular_irrigation else IrrigationCheck(True)

            if status == OPTIMAL and irrigation.regular:
                continue
            message = dep.alert_template.format(
                source_name=source.name if source else f"Zone {dep.source_zone}",
                source_zone=dep.source_zone,
                target_zone=dep.target_zone,
                status=status,
                value="no reading" if value is None else f"{value:g}",
                threshold="unknown" if threshold is None else f"{threshold:g}",
            )
            if not irrigation.regular:
                message = f"{message} {irrigation.issue}"
            alerts.append(
                HarmonicAlert(
                    kind="block",
                    dependency_id=dep.id,
                    message=message,
                    resolution=dep.resolution,
                    source_zone=dep.source_zone,
                    target_zone=dep.target_zone,
                    observed_value=value,
                    threshold=threshold,
                    severity=status,
                    irrigation_issue=irrigation.issue,
                )
            )

        if alerts:
            logger.info("harmonic_dependency_blocked", extra={"target_zone": target_zone, "alerts": len(alerts)})
        return DependencyCheck(target_zone, tuple(alerts))

    # Event-triggered rules -------------------------------------------------

    def attach(self, channel: EventChannel) -> List:
        """Subscribe every event-triggered rule on ``channel``."""

        unsubscribers = []
        for event_name in {d.trigger_event for d in self.dependencies if d.event_triggered and d.trigger_event}:
            unsubscribers.append(channel.on_signal(event_name, self.handle_signal))
        return unsubscribers

    def handle_signal(self, event_name: str, payload: Optional[dict] = None) -> List[HarmonicAlert]:
        activated = []
        detail = (payload or {}).get("pest") or event_name
        for dep in self.dependencies:
            if not dep.event_triggered or dep.trigger_event != event_name:
                continue
            with self._lock:
                existing = self._directives.get(dep.id)
                if existing is not None:
                    existing.signals += 1
                    activated.append(existing.alert)
                    continue
                alert = HarmonicAlert(
                    kind="shield",
                    dependency_id=dep.id,
                    message=dep.alert_template.format(detail=detail),
                    resolution=dep.resolution,
                    source_zone=dep.source_zone,
                    target_zone=ALL_ZONES,
                )
                self._directives[dep.id] = Directive(alert=alert, payload=payload)
            logger.warning("harmonic_directive_activated", extra={"dependency_id": dep.id, "event_name": event_name})
            activated.append(alert)
        return activated

    def active_directives(self) -> List[Directive]:
        with self._lock:
            return list(self._directives.values())

    def acknowledge(self, dependency_id: str) -> bool:
        """Dismiss an active directive. Returns False when none was active."""

        with self._lock:
            removed = self._directives.pop(dependency_id, None)
        if removed is not None:
            logger.info("harmonic_directive_acknowledged", extra={"dependency_id": dependency_id})
        return removed is not None


# Resolver shared by the HTTP routes.
RESOLVER = HarmonicDependencyResolver()
