"""Confidence scoring for the winning alignment group.

The scorer looks at where the winning fingerprints sit in the reference
track and how many of them there are, relative to the reference track and
to the query batch, and derives two confidence values plus a 4-way
class distribution.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .constants import NUM_CLASSES, ContentClass
from .database import ReferenceMatch, TrackMeta
from .voter import Vote


@dataclass(frozen=True)
class Confidence:
    """Statistics and confidence factors of a detection."""

    duration_ref: float  # seconds
    fingers_count_ref: int
    t_ref_avg: float  # seconds
    t_ref_std: float  # seconds
    ratio_fingers_reference: float
    ratio_fingers_measurements: float
    matching_focus: float
    confidence1: float
    confidence2: float
    softmax: tuple[float, ...]


def activation(x: float) -> float:
    """Map [0, inf) onto [0, 1): ~x near zero, saturating towards 1."""
    return 1 - math.exp(-x)


def softmax(content_class: ContentClass | None, confidence: float) -> tuple[float, ...]:
    """Class distribution biased towards ``content_class``.

    Uniform when ``confidence`` is 0; always sums to 1.
    """
    return tuple(
        1 / NUM_CLASSES + (NUM_CLASSES - 1) / NUM_CLASSES * confidence
        if c == content_class
        else 1 / NUM_CLASSES - 1 / NUM_CLASSES * confidence
        for c in ContentClass
    )


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return numerator / denominator, or 0 when the result isn't finite."""
    if not denominator:
        return 0.0
    value = numerator / denominator
    return value if math.isfinite(value) else 0.0


def exact_mean_std(values: np.ndarray) -> tuple[float, float]:
    """Mean and population standard deviation."""
    return float(np.mean(values)), float(np.std(values))


def legacy_mean_std(values: np.ndarray) -> tuple[float, float]:
    """Mean and dispersion as computed by earlier hotlist versions.

    The dispersion accumulates squared deviations from the running sum
    (not the final mean), then divides the root by n. It is kept only to
    reproduce historical outputs.
    """
    total = 0.0
    acc = 0.0
    for v in values.tolist():
        total += v
        acc += (v - total) ** 2
    n = len(values)
    return total / n, math.sqrt(acc) / n


def score(
    vote: Vote,
    rows: Sequence[ReferenceMatch],
    track: TrackMeta | None,
    batch_size: int,
    time_quantum_s: float,
    legacy_std: bool = False,
) -> Confidence:
    """Compute confidence factors for a voting winner.

    Args:
        vote: Winning (offset, track) group
        rows: Lookup rows the vote was computed from
        track: Metadata of the winning track (None if unknown to the index)
        batch_size: Number of query fingerprints in the batch
        time_quantum_s: Duration of one time code unit, in seconds
        legacy_std: Reproduce the historical dispersion formula

    Returns:
        Confidence factors
    """
    positions = np.array(
        [rows[i].ref_time_code for i in vote.match_indices], dtype=np.float64
    )
    mean, std = legacy_mean_std(positions) if legacy_std else exact_mean_std(positions)
    t_ref_avg = round(mean * time_quantum_s, 2)
    t_ref_std = round(std * time_quantum_s, 2)

    duration_ref = track.duration_seconds if track else 0.0
    fingers_count_ref = track.fingerprint_count if track else 0

    # share of the reference track found in the batch
    ratio_fingers_reference = safe_ratio(vote.count, fingers_count_ref)
    # share of the batch that supports the detection
    ratio_fingers_measurements = safe_ratio(vote.count, batch_size)
    # << 1 when the matches are concentrated in time within the reference
    matching_focus = safe_ratio(duration_ref, t_ref_std) if t_ref_std > 0 else 1.0

    confidence1 = activation(ratio_fingers_reference * ratio_fingers_measurements)
    confidence2 = activation(
        ratio_fingers_reference * ratio_fingers_measurements * matching_focus
    )

    return Confidence(
        duration_ref=duration_ref,
        fingers_count_ref=fingers_count_ref,
        t_ref_avg=t_ref_avg,
        t_ref_std=t_ref_std,
        ratio_fingers_reference=ratio_fingers_reference,
        ratio_fingers_measurements=ratio_fingers_measurements,
        matching_focus=matching_focus,
        confidence1=confidence1,
        confidence2=confidence2,
        softmax=softmax(vote.content_class, confidence2),
    )
