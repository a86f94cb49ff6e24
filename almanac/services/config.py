"""Environment-driven settings.

Values are read on every call so tests can ``monkeypatch.setenv`` without
reloading modules.
"""

import os

DEPENDENCY_POLICIES = ("fail-open", "fail-closed")


def logging_enabled() -> bool:
    return os.getenv("LOGGING_ENABLED", "false").lower() == "true"


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def dependency_policy() -> str:
    policy = os.getenv("ALMANAC_DEPENDENCY_POLICY", "fail-open").lower()
    if policy not in DEPENDENCY_POLICIES:
        return "fail-open"
    return policy


def default_bed_length_ft() -> float:
    return float(os.getenv("ALMANAC_DEFAULT_BED_LENGTH_FT", "60"))


def default_bed_width_ft() -> float:
    return float(os.getenv("ALMANAC_DEFAULT_BED_WIDTH_FT", "4"))


def irrigation_window_days() -> int:
    return int(os.getenv("ALMANAC_IRRIGATION_WINDOW_DAYS", "7"))


def irrigation_max_gap_days() -> float:
    return float(os.getenv("ALMANAC_IRRIGATION_MAX_GAP_DAYS", "3"))
