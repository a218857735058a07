"""Constants shared across the hotlist matcher."""

from enum import IntEnum

# Fingerprint extractor quantum: 22050 Hz sampling, 256-sample step
DEFAULT_TIME_QUANTUM_S = 256 / 22050

# Type tag of records delivered downstream
RECORD_TYPE = "hotlist"

DEFAULT_HOTLIST_DIR = "predictor-db/hotlist"


class ContentClass(IntEnum):
    """Classification of a reference track.

    The integer values are the ones stored in the ``class`` column of
    hotlist databases.
    """

    ADS = 0
    SPEECH = 1
    MUSIC = 2
    JINGLES = 3

    @property
    def label(self) -> str:
        """Label used in prediction outputs, e.g. ``"0-ads"``."""
        return f"{self.value}-{self.name.lower()}"


NUM_CLASSES = len(ContentClass)
