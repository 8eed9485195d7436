"""nura.voice

Wake phrase handling for transcribed speech.
"""

from nura.voice.wake import (
    VIA_EXACT,
    VIA_NONE,
    VIA_PHONETIC,
    WakeMatchResult,
    WakeWordStripper,
)

__all__ = [
    "VIA_EXACT",
    "VIA_NONE",
    "VIA_PHONETIC",
    "WakeMatchResult",
    "WakeWordStripper",
]
