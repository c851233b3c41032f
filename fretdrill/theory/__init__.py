"""Music theory layer: pitch model, modes, spelling, focus filters, staff mapping."""

from .keys import UnknownNoteError  # noqa: F401
from .scale import KeyContext  # noqa: F401
from .chord import Chord  # noqa: F401
