"""Hotlist matching engine.

Public API
----------
``Hotlist.start()``
    Opens the reference index and loads its track list. If the index is
    unavailable the engine stays disabled for good: ingestion is ignored
    and every trigger yields the empty result.

``Hotlist.push(event)`` / ``Hotlist.push_many(hashes, time_codes)``
    Feed fingerprints from the extractor.

``Hotlist.trigger()``
    Match everything buffered since the previous trigger and return one
    ``DetectionResult``, or raise ``LookupFailure``. ``trigger_async()``
    does the same on a background worker and returns a Future.

Pipeline
--------
1. Drain the ingestion buffer
2. Look up the batch hashes in the index (one query per batch)
3. Vote on (time offset, track) pairs
4. Score the winning group
5. Emit the result on the event bus and return it
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

from .buffer import FingerprintBuffer, FingerprintEvent
from .config import HotlistConfig, MatchingConfig
from .database import HotlistDB, ReferenceMatch, TrackMeta
from .errors import HotlistError, IndexUnavailable, LookupFailure
from .event_bus import EventBus, Events
from .protocols import ReferenceIndexProtocol
from .result import DetectionResult
from .scoring import score
from .voter import vote

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Availability of the matching engine."""

    DISABLED = "disabled"  # No index, or closed: ingestion ignored, empty results
    ACTIVE = "active"


class Hotlist:
    """Match buffered fingerprints against a hotlist of reference tracks."""

    def __init__(
        self,
        open_index: Callable[[], ReferenceIndexProtocol],
        matching: MatchingConfig | None = None,
        event_bus: EventBus | None = None,
    ):
        """Initialize engine (disabled until ``start()``).

        Args:
            open_index: Opens the reference index; raises IndexUnavailable
                when there is none
            matching: Matching configuration (defaults if None)
            event_bus: Bus receiving one event per trigger (new bus if None)
        """
        self._open_index = open_index
        self.matching = matching or MatchingConfig()
        self.event_bus = event_bus or EventBus()

        self.state = EngineState.DISABLED
        self._started = False
        self._closed = False
        self.index: ReferenceIndexProtocol | None = None
        self.tracks: dict[str, TrackMeta] = {}

        self.buffer = FingerprintBuffer()
        # One lookup in flight at a time; ingestion only takes the buffer lock
        self._lookup_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def from_config(cls, config: HotlistConfig, event_bus: EventBus | None = None) -> Hotlist:
        """Create an engine reading the SQLite hotlist named by ``config``."""
        path = config.index.resolve_path()
        return cls(lambda: HotlistDB.open(path), config.matching, event_bus)

    # ========== Lifecycle ==========

    def start(self) -> EngineState:
        """Open the index and load the track list.

        Can only be called once; the resulting state is final.

        Returns:
            The engine state
        """
        if self._started:
            raise RuntimeError("Hotlist engine already started")
        self._started = True

        try:
            index = self._open_index()
        except IndexUnavailable as e:
            logger.warning("%s, hotlist module disabled", e)
            return self.state

        self.index = index
        try:
            self.tracks = {}
            for t in index.list_tracks():
                # first row wins for duplicated files
                self.tracks.setdefault(t.track, t)
        except Exception:
            logger.warning("Could not get track list from hotlist", exc_info=True)
            self.tracks = {}

        self.state = EngineState.ACTIVE
        logger.info("Hotlist ready (%d tracks)", len(self.tracks))
        return self.state

    def close(self) -> None:
        """Wait for pending triggers, disable the engine and close the index.

        Once closed, ingestion is ignored and ``trigger()`` returns the empty
        result, as when disabled.
        """
        with self._lookup_lock:
            self.state = EngineState.DISABLED
            self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self.index is not None:
            logger.info("Closing hotlist index")
            self.index.close()
            self.index = None

    def __enter__(self) -> Hotlist:
        if not self._started:
            self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_active(self) -> bool:
        return self.state is EngineState.ACTIVE

    # ========== Ingestion ==========

    def push(self, event: FingerprintEvent) -> None:
        """Buffer one fingerprint (ignored when disabled)."""
        if self.is_active:
            self.buffer.push(event)

    def push_many(self, hashes: Iterable[int], time_codes: Iterable[int]) -> int:
        """Buffer fingerprints given as parallel arrays.

        Returns:
            Number of fingerprints buffered (0 when disabled)
        """
        if not self.is_active:
            return 0
        return self.buffer.push_many(hashes, time_codes)

    # ========== Matching ==========

    def trigger(self) -> DetectionResult:
        """Match the fingerprints buffered since the last trigger.

        Returns:
            Detection result, empty if there was nothing to match

        Raises:
            LookupFailure: If the index lookup failed
        """
        if not self.is_active:
            return self._emit(DetectionResult.empty())

        with self._lookup_lock:
            if not self.is_active:
                # closed while waiting for the lock
                return self._emit(DetectionResult.empty())

            batch = self.buffer.drain()
            if not batch:
                logger.warning("No fingerprints to search (batch #%d)", batch.generation)
                return self._emit(DetectionResult.empty())

            assert self.index is not None
            # one key per distinct hash, in first-occurrence order
            hashes = list(dict.fromkeys(e.hash for e in batch.events))
            try:
                rows = self.index.lookup(hashes)
            except Exception as e:
                failure = LookupFailure(batch.generation, len(batch), e)
                logger.error("%s", failure)
                self.event_bus.emit(Events.HOTLIST_ERROR, error=failure)
                raise failure from e

        result = self.match(batch.events, rows)
        logger.debug(
            "Batch #%d: %d fingerprints, %d rows, file=%s diff=%s sync=%d",
            batch.generation,
            len(batch),
            len(rows),
            result.file,
            result.diff,
            result.matches_sync,
        )
        return self._emit(result)

    def trigger_async(self) -> Future[DetectionResult]:
        """Run ``trigger()`` on the background worker.

        The future resolves to the result or to the LookupFailure.
        """
        if self._closed:
            raise HotlistError("Hotlist engine is closed")
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hotlist")
        return self._executor.submit(self.trigger)

    def match(
        self,
        events: Sequence[FingerprintEvent],
        rows: Sequence[ReferenceMatch],
    ) -> DetectionResult:
        """Build the detection for a batch from its lookup rows."""
        winner = vote(events, rows)
        if winner is None:
            return DetectionResult.empty()

        track = self.tracks.get(winner.track)
        if track is None:
            logger.warning("Track %s missing from hotlist track list", winner.track)

        confidence = score(
            winner,
            rows,
            track,
            batch_size=len(events),
            time_quantum_s=self.matching.time_quantum_s,
            legacy_std=self.matching.legacy_std,
        )
        return DetectionResult.from_vote(winner, confidence, len(events))

    def _emit(self, result: DetectionResult) -> DetectionResult:
        self.event_bus.emit(Events.HOTLIST, record=result.to_record(), result=result)
        return result
