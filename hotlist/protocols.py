"""Protocol definitions for the reference index.

Using Protocol (structural subtyping) lets the engine run against any
index, such as the SQLite hotlist or an in-memory fake in tests.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .database import ReferenceMatch, TrackMeta


@runtime_checkable
class ReferenceIndexProtocol(Protocol):
    """Protocol for reference index operations used by the engine."""

    def lookup(self, hashes: Iterable[int]) -> list[ReferenceMatch]: ...
    def list_tracks(self) -> list[TrackMeta]: ...
    def close(self) -> None: ...
