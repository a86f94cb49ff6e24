SIGN_NAMES = ["Aries","Taurus","Gemini","Cancer","Leo","Virgo","Libra","Scorpio","Sagittarius","Capricorn","Aquarius","Pisces"]

ELEMENTS = ["fire", "earth", "air", "water"]

# Fire, earth, air, water repeating from Aries.
SIGN_ELEMENTS = {name: ELEMENTS[idx % 4] for idx, name in enumerate(SIGN_NAMES)}

SIGN_SYMBOLS = {
    "Aries": "♈",
    "Taurus": "♉",
    "Gemini": "♊",
    "Cancer": "♋",
    "Leo": "♌",
    "Virgo": "♍",
    "Libra": "♎",
    "Scorpio": "♏",
    "Sagittarius": "♐",
    "Capricorn": "♑",
    "Aquarius": "♒",
    "Pisces": "♓",
}

EARTH_SIGNS = ("Taurus", "Virgo", "Capricorn")
WATER_SIGNS = ("Cancer", "Scorpio", "Pisces")
FIRE_SIGNS = ("Aries", "Leo", "Sagittarius")
AIR_SIGNS = ("Gemini", "Libra", "Aquarius")

DRY_ELEMENTS = ("fire", "air")

PHASES = [
    "new",
    "waxing-crescent",
    "first-quarter",
    "waxing-gibbous",
    "full",
    "waning-gibbous",
    "last-quarter",
    "waning-crescent",
]

CATEGORIES = ["new", "waxing", "full", "waning"]

PHASE_CATEGORY = {
    "new": "new",
    "waxing-crescent": "waxing",
    "first-quarter": "waxing",
    "waxing-gibbous": "waxing",
    "full": "full",
    "waning-gibbous": "waning",
    "last-quarter": "waning",
    "waning-crescent": "waning",
}

# Upper bound (exclusive, in days) of each phase; the last phase runs to the
# end of the synodic cycle.
PHASE_THRESHOLDS = [
    (1.85, "new"),
    (7.38, "waxing-crescent"),
    (9.23, "first-quarter"),
    (14.77, "waxing-gibbous"),
    (16.61, "full"),
    (22.15, "waning-gibbous"),
    (23.99, "last-quarter"),
]

PHASE_LABELS = {
    "new": "New Moon",
    "waxing-crescent": "Waxing Crescent",
    "first-quarter": "First Quarter",
    "waxing-gibbous": "Waxing Gibbous",
    "full": "Full Moon",
    "waning-gibbous": "Waning Gibbous",
    "last-quarter": "Last Quarter",
    "waning-crescent": "Waning Crescent",
}

# Frequency bands used as the join key between zones, beds and tasks.
ZONE_BANDS = [396, 417, 528, 639, 741, 852, 963]


def sign_index(name: str) -> int:
    return SIGN_NAMES.index(name)


def element_for_sign(name: str) -> str:
    return SIGN_ELEMENTS[name]


def signs_for_element(element: str) -> list[str]:
    return [name for name in SIGN_NAMES if SIGN_ELEMENTS[name] == element]


def fmt_sign(name: str) -> str:
    return f"{SIGN_SYMBOLS.get(name, '★')} {name}"
