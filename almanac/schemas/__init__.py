from .celestial import (
    LunarOverrideIn,
    TaskIn,
    CelestialStateRequest,
    CelestialStateResponse,
    CelestialCheckRequest,
    CelestialCheckResponse,
    MovementOut,
)

from .harmonic import (
    HarmonicCheckRequest,
    HarmonicCheckResponse,
    SignalRequest,
    DirectivesResponse,
)

from .chords import (
    BedCreateRequest,
    BedOut,
    AssignRequest,
    AssignmentResultOut,
    SuggestionsResponse,
    ApplySuggestionsRequest,
    ApplySuggestionsResponse,
    OverlayRequest,
)

from .intervention import TextRequest, ActionVerdictOut, PestVerdictOut
