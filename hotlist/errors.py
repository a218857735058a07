"""Exceptions raised by the hotlist matcher."""

from __future__ import annotations


class HotlistError(Exception):
    """Base class for hotlist errors."""


class IndexUnavailable(HotlistError):
    """The reference index could not be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"hotlist index unavailable at {path}: {reason}")
        self.path = path
        self.reason = reason


class LookupFailure(HotlistError):
    """A batch lookup against the reference index failed.

    Distinct from an empty result: an empty result means the batch was
    looked up and nothing matched.
    """

    def __init__(self, generation: int, batch_size: int, cause: BaseException) -> None:
        super().__init__(
            f"lookup failed for batch #{generation} ({batch_size} fingerprints): {cause}"
        )
        self.generation = generation
        self.batch_size = batch_size
        self.cause = cause
