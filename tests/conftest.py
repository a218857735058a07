"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from hotlist.buffer import FingerprintEvent
from hotlist.config import MatchingConfig
from hotlist.constants import ContentClass
from hotlist.database import HotlistDB

# Reference track planted in the sample hotlist: hash 100+i at time code 50+i
PLANTED_TRACK = "ads/promo.mp3"
PLANTED_COUNT = 20
PLANTED_LENGTH_MS = 5000

# Track sharing a few hashes with the planted one, at scattered offsets
NOISE_TRACK = "music/song.mp3"
NOISE_FINGERPRINTS = [(100, 500), (103, 900), (106, 1300)]

# Hash absent from the hotlist, first event of the sample query
UNKNOWN_HASH = 999


@pytest.fixture
def matching() -> MatchingConfig:
    """Matching configuration with a round time quantum."""
    return MatchingConfig(time_quantum_s=0.1)


@pytest.fixture
def hotlist_path(tmp_path: Path) -> Path:
    """Provide a hotlist database with one ad and one music track."""
    path = tmp_path / "France_Test.sqlite"
    db = HotlistDB.create(path)
    db.add_track(
        PLANTED_TRACK,
        ContentClass.ADS,
        [(100 + i, 50 + i) for i in range(PLANTED_COUNT)],
        length_ms=PLANTED_LENGTH_MS,
    )
    db.add_track(NOISE_TRACK, ContentClass.MUSIC, NOISE_FINGERPRINTS, length_ms=180_000)
    db.close()
    return path


@pytest.fixture
def query_events() -> list[FingerprintEvent]:
    """Query batch: an unknown hash, then 10 planted fingerprints 10 quanta later."""
    events = [FingerprintEvent(UNKNOWN_HASH, 0)]
    events += [FingerprintEvent(100 + i, 10 + i) for i in range(10)]
    return events
