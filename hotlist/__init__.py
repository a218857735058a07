"""Hotlist - identify known tracks in a live audio stream.

Matches batches of audio fingerprints from a stream against a hotlist of
reference tracks (ads, speech, music, jingles) and reports, for each
batch, the best-matching track, its time alignment and confidence.

Matching principle:
- Look up the batch hashes in the reference index
- Vote on (time offset, track) pairs; true matches agree on one offset
- Derive confidence from the size and time spread of the winning group
"""

__version__ = "0.1.0"

from .buffer import FingerprintBuffer, FingerprintEvent
from .constants import ContentClass
from .database import HotlistDB, ReferenceMatch, TrackMeta
from .engine import EngineState, Hotlist
from .errors import HotlistError, IndexUnavailable, LookupFailure
from .result import DetectionResult

__all__ = [
    "ContentClass",
    "DetectionResult",
    "EngineState",
    "FingerprintBuffer",
    "FingerprintEvent",
    "Hotlist",
    "HotlistDB",
    "HotlistError",
    "IndexUnavailable",
    "LookupFailure",
    "ReferenceMatch",
    "TrackMeta",
]
