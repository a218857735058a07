"""Tests for hotlist.voter - time-alignment histogram voting."""

from __future__ import annotations

from hotlist.buffer import FingerprintEvent
from hotlist.constants import ContentClass
from hotlist.database import ReferenceMatch
from hotlist.voter import first_time_codes, vote


def _row(hash_: int, track: str, ref: int, cls: ContentClass = ContentClass.ADS) -> ReferenceMatch:
    return ReferenceMatch(hash=hash_, track=track, content_class=cls, ref_time_code=ref)


class TestFirstTimeCodes:
    """Unit tests for first_time_codes()."""

    def test_keeps_first_occurrence(self) -> None:
        """A repeated hash maps to the time code of its first event."""
        events = [FingerprintEvent(7, 3), FingerprintEvent(8, 4), FingerprintEvent(7, 9)]
        assert first_time_codes(events) == {7: 3, 8: 4}


class TestVote:
    """Unit tests for vote()."""

    def test_no_rows_returns_none(self) -> None:
        assert vote([FingerprintEvent(1, 0)], []) is None

    def test_no_events_returns_none(self) -> None:
        assert vote([], [_row(1, "a", 0)]) is None

    def test_planted_track_found_at_its_offset(self) -> None:
        """Fingerprints planted k quanta after the query anchor vote for diff = -k."""
        k = 25
        planted = 12
        events = [FingerprintEvent(999, 1000)]
        events += [FingerprintEvent(100 + i, 1000 + k + 3 * i) for i in range(planted)]
        rows = [_row(100 + i, "ads/promo.mp3", 40 + 3 * i) for i in range(planted)]
        # scattered collisions with another track
        rows += [_row(100 + i, "music/song.mp3", 7 * i * i, ContentClass.MUSIC) for i in range(5)]

        result = vote(events, rows)

        assert result is not None
        assert result.track == "ads/promo.mp3"
        assert result.diff == -k
        assert result.count == planted
        assert result.content_class is ContentClass.ADS
        assert result.total_rows == planted + 5
        assert result.match_indices == tuple(range(planted))

    def test_offset_independent_of_anchor_when_anchor_is_planted(self) -> None:
        """When the first event and first row belong to the match, diff is 0."""
        events = [FingerprintEvent(100 + i, 500 + i) for i in range(6)]
        rows = [_row(100 + i, "jingle.wav", 20 + i, ContentClass.JINGLES) for i in range(6)]

        result = vote(events, rows)

        assert result is not None
        assert result.diff == 0
        assert result.count == 6
        assert result.content_class is ContentClass.JINGLES

    def test_tie_goes_to_first_bucket_to_reach_max(self) -> None:
        """Equal counts don't overwrite the bucket that reached the maximum first."""
        events = [FingerprintEvent(h, t) for h, t in [(1, 0), (2, 1), (3, 2), (4, 3)]]
        rows = [
            _row(1, "A", 100),  # (0, A)
            _row(2, "B", 200, ContentClass.SPEECH),  # (99, B)
            _row(3, "B", 201, ContentClass.SPEECH),  # (99, B) reaches 2
            _row(4, "A", 103),  # (0, A) reaches 2, too late
        ]

        result = vote(events, rows)

        assert result is not None
        assert result.track == "B"
        assert result.diff == 99
        assert result.count == 2
        assert result.match_indices == (1, 2)
        assert result.content_class is ContentClass.SPEECH

    def test_tie_in_scan_order_first_seen(self) -> None:
        """With interleaved equal buckets, the earlier-completed one wins."""
        events = [FingerprintEvent(h, t) for h, t in [(1, 0), (2, 1), (3, 2), (4, 3)]]
        rows = [
            _row(1, "A", 100),  # (0, A)
            _row(2, "B", 200),  # (99, B)
            _row(4, "A", 103),  # (0, A) reaches 2
            _row(3, "B", 201),  # (99, B) reaches 2, too late
        ]

        result = vote(events, rows)

        assert result is not None
        assert (result.diff, result.track) == (0, "A")

    def test_same_offset_different_tracks_are_separate_buckets(self) -> None:
        """Buckets are keyed by (offset, track), not offset alone."""
        events = [FingerprintEvent(h, h) for h in range(1, 6)]
        rows = [_row(1, "A", 1), _row(2, "B", 2), _row(3, "B", 3), _row(4, "A", 4), _row(5, "B", 5)]

        result = vote(events, rows)

        assert result is not None
        assert result.track == "B"
        assert result.count == 3
        assert result.total_rows == 5

    def test_repeated_query_hash_uses_first_occurrence(self) -> None:
        """All rows of a repeated hash align against its first time code."""
        events = [FingerprintEvent(5, 0), FingerprintEvent(6, 4), FingerprintEvent(5, 10)]
        rows = [_row(5, "A", 30), _row(6, "A", 34)]

        result = vote(events, rows)

        assert result is not None
        assert result.diff == 0
        assert result.count == 2

    def test_rows_for_unqueried_hash_are_ignored(self) -> None:
        """A row whose hash was never queried doesn't vote but is counted in total."""
        events = [FingerprintEvent(1, 0), FingerprintEvent(2, 1)]
        rows = [_row(1, "A", 10), _row(2, "A", 11), _row(42, "B", 99)]

        result = vote(events, rows)

        assert result is not None
        assert result.track == "A"
        assert result.count == 2
        assert result.total_rows == 3
