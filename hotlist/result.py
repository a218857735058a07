"""Detection records emitted once per trigger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .constants import NUM_CLASSES, RECORD_TYPE, ContentClass
from .scoring import Confidence
from .voter import Vote

# Precision of ratios and confidences in emitted records
RECORD_DECIMALS = 5


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of matching one batch of fingerprints.

    ``file``, ``content_class`` and ``diff`` are None when nothing matched.
    """

    # reference track with the most fingerprints in sync
    file: str | None = None
    content_class: ContentClass | None = None
    diff: int | None = None  # time quanta
    duration_ref: float = 0.0  # seconds
    fingers_count_ref: int = 0

    # matching fingerprints
    matches_sync: int = 0  # at the winning alignment
    matches_total: int = 0  # at any alignment
    t_ref_avg: float = 0.0  # seconds
    t_ref_std: float = 0.0  # seconds

    fingers_count_measurements: int = 0

    ratio_fingers_reference: float = 0.0
    ratio_fingers_measurements: float = 0.0
    matching_focus: float = 0.0
    confidence1: float = 0.0
    confidence2: float = 0.0
    softmax: tuple[float, ...] = (1 / NUM_CLASSES,) * NUM_CLASSES

    @classmethod
    def empty(cls) -> DetectionResult:
        """Canonical result for an empty batch or a batch without matches."""
        return cls()

    @classmethod
    def from_vote(cls, vote: Vote, confidence: Confidence, batch_size: int) -> DetectionResult:
        """Build a result from a voting winner and its confidence."""
        return cls(
            file=vote.track,
            content_class=vote.content_class,
            diff=vote.diff,
            duration_ref=confidence.duration_ref,
            fingers_count_ref=confidence.fingers_count_ref,
            matches_sync=vote.count,
            matches_total=vote.total_rows,
            t_ref_avg=confidence.t_ref_avg,
            t_ref_std=confidence.t_ref_std,
            fingers_count_measurements=batch_size,
            ratio_fingers_reference=confidence.ratio_fingers_reference,
            ratio_fingers_measurements=confidence.ratio_fingers_measurements,
            matching_focus=confidence.matching_focus,
            confidence1=confidence.confidence1,
            confidence2=confidence.confidence2,
            softmax=confidence.softmax,
        )

    @property
    def is_empty(self) -> bool:
        return self.file is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the keys used by downstream consumers."""
        return {
            "file": self.file,
            "class": int(self.content_class) if self.content_class is not None else None,
            "diff": self.diff,
            "durationRef": self.duration_ref,
            "fingersCountRef": self.fingers_count_ref,
            "matchesSync": self.matches_sync,
            "matchesTotal": self.matches_total,
            "tRefAvg": self.t_ref_avg,
            "tRefStd": self.t_ref_std,
            "fingersCountMeasurements": self.fingers_count_measurements,
            "ratioFingersReference": round(self.ratio_fingers_reference, RECORD_DECIMALS),
            "ratioFingersMeasurements": round(self.ratio_fingers_measurements, RECORD_DECIMALS),
            "matchingFocus": round(self.matching_focus, RECORD_DECIMALS),
            "confidence1": round(self.confidence1, RECORD_DECIMALS),
            "confidence2": round(self.confidence2, RECORD_DECIMALS),
            "softmaxraw": list(self.softmax),
        }

    def to_record(self) -> dict[str, Any]:
        """Wrap as a typed output stream record."""
        return {"type": RECORD_TYPE, "data": self.to_dict()}
