"""Ingestion buffer for fingerprint events.

Fingerprints produced by the extractor accumulate here between match
triggers. A trigger detaches everything buffered so far in one atomic
swap, so ingestion can keep going while the detached batch is matched.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FingerprintEvent:
    """A single fingerprint emitted by the extractor.

    Attributes:
        hash: Fingerprint hash
        time_code: Position in the stream, in extractor time quanta
    """

    hash: int
    time_code: int


@dataclass(frozen=True, slots=True)
class Batch:
    """Events detached from the buffer by one drain.

    Attributes:
        generation: Sequence number of the drain (starts at 1)
        events: Buffered events, in arrival order
    """

    generation: int
    events: tuple[FingerprintEvent, ...]

    def __len__(self) -> int:
        return len(self.events)

    def __bool__(self) -> bool:
        return bool(self.events)


class FingerprintBuffer:
    """Unbounded, ordered, thread-safe fingerprint buffer.

    Each ``drain()`` swaps the backing list under the lock and returns it
    with a new generation number. An event pushed concurrently with a drain
    lands either in the drained batch or in the next one, never both.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[FingerprintEvent] = []
        self._generation = 0

    def push(self, event: FingerprintEvent) -> None:
        """Append one event."""
        with self._lock:
            self._events.append(event)

    def push_many(self, hashes: Iterable[int], time_codes: Iterable[int]) -> int:
        """Append events given as parallel hash and time code arrays.

        Args:
            hashes: Fingerprint hashes
            time_codes: Time codes, same length as ``hashes``

        Returns:
            Number of events appended

        Raises:
            ValueError: If the arrays have different lengths
        """
        hashes = list(hashes)
        time_codes = list(time_codes)
        if len(hashes) != len(time_codes):
            raise ValueError(
                f"hashes and time codes differ in length ({len(hashes)} != {len(time_codes)})"
            )

        events = [FingerprintEvent(int(h), int(t)) for h, t in zip(hashes, time_codes)]
        with self._lock:
            self._events.extend(events)
        return len(events)

    def drain(self) -> Batch:
        """Detach and return all buffered events, leaving the buffer empty."""
        with self._lock:
            events, self._events = self._events, []
            self._generation += 1
            generation = self._generation
        return Batch(generation=generation, events=tuple(events))

    @property
    def generation(self) -> int:
        """Generation number of the last drain (0 before the first one)."""
        with self._lock:
            return self._generation

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
