"""Time-alignment histogram voting.

True matches between the query and a reference track share one time
offset, while spurious hash collisions scatter across many offsets. Each
lookup row votes for its (offset, track) pair and the pair with the most
votes identifies the track and its alignment.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .buffer import FingerprintEvent
from .constants import ContentClass
from .database import ReferenceMatch

logger = logging.getLogger(__name__)


@dataclass
class DiffBucket:
    """Votes collected for one (offset, track) pair."""

    count: int = 0
    match_indices: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class Vote:
    """Winner of a voting pass.

    Attributes:
        diff: Alignment offset, in time quanta, relative to the first query
            event and the first lookup row
        track: Winning reference track
        content_class: Class of the winning track
        count: Number of rows voting for the winner
        match_indices: Positions in the lookup rows of those votes
        total_rows: Number of lookup rows, all offsets included
    """

    diff: int
    track: str
    content_class: ContentClass
    count: int
    match_indices: tuple[int, ...]
    total_rows: int


def first_time_codes(events: Sequence[FingerprintEvent]) -> dict[int, int]:
    """Map each hash to the time code of its first occurrence."""
    time_by_hash: dict[int, int] = {}
    for event in events:
        if event.hash not in time_by_hash:
            time_by_hash[event.hash] = event.time_code
    return time_by_hash


def vote(
    events: Sequence[FingerprintEvent],
    rows: Sequence[ReferenceMatch],
) -> Vote | None:
    """Find the (offset, track) pair supported by the most lookup rows.

    Ties go to the pair that reached the maximum count first while scanning
    rows in order.

    Args:
        events: Query batch, in arrival order
        rows: Lookup results for the batch hashes

    Returns:
        The winning pair, or None if nothing can vote
    """
    if not events or not rows:
        return None

    time_by_hash = first_time_codes(events)
    query_origin = events[0].time_code
    ref_origin = rows[0].ref_time_code

    buckets: dict[tuple[int, str], DiffBucket] = {}
    best: tuple[int, str] | None = None
    best_class: ContentClass | None = None
    largest_count = 0

    for i, row in enumerate(rows):
        measure_time = time_by_hash.get(row.hash)
        if measure_time is None:
            # Row for a hash that was never queried
            logger.debug("Ignoring lookup row for unknown hash %d", row.hash)
            continue

        delta_measure = measure_time - query_origin
        delta_ref = row.ref_time_code - ref_origin
        diff = delta_ref - delta_measure

        key = (diff, row.track)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = DiffBucket()
        bucket.count += 1
        bucket.match_indices.append(i)

        if bucket.count > largest_count:
            largest_count = bucket.count
            best = key
            best_class = row.content_class

    if best is None or best_class is None:
        return None

    winner = buckets[best]
    logger.debug(
        "Vote: %d rows, %d buckets, winner %s diff=%d count=%d",
        len(rows),
        len(buckets),
        best[1],
        best[0],
        winner.count,
    )
    return Vote(
        diff=best[0],
        track=best[1],
        content_class=best_class,
        count=winner.count,
        match_indices=tuple(winner.match_indices),
        total_rows=len(rows),
    )
