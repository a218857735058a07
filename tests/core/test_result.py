"""Tests for detection records."""

import dataclasses

import pytest

from hotlist.constants import ContentClass
from hotlist.result import DetectionResult


class TestDetectionResult:
    """Test DetectionResult."""

    def test_empty_result(self) -> None:
        """The canonical empty result has zero counts and a uniform softmax."""
        result = DetectionResult.empty()

        assert result.is_empty
        assert result.file is None
        assert result.content_class is None
        assert result.diff is None
        assert result.matches_sync == 0
        assert result.matches_total == 0
        assert result.confidence1 == 0
        assert result.confidence2 == 0
        assert result.softmax == (0.25, 0.25, 0.25, 0.25)

    def test_empty_record(self) -> None:
        record = DetectionResult.empty().to_record()

        assert record["type"] == "hotlist"
        data = record["data"]
        assert data["file"] is None
        assert data["class"] is None
        assert data["diff"] is None
        assert data["matchesSync"] == 0
        assert data["softmaxraw"] == [0.25, 0.25, 0.25, 0.25]

    def test_immutable(self) -> None:
        result = DetectionResult.empty()
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.matches_sync = 3  # type: ignore[misc]

    def test_record_keys_and_rounding(self) -> None:
        result = DetectionResult(
            file="jingles/top.wav",
            content_class=ContentClass.JINGLES,
            diff=-12,
            duration_ref=4.2,
            fingers_count_ref=80,
            matches_sync=20,
            matches_total=31,
            t_ref_avg=1.23,
            t_ref_std=0.4,
            fingers_count_measurements=150,
            ratio_fingers_reference=0.25,
            ratio_fingers_measurements=2 / 15,
            matching_focus=10.5,
            confidence1=0.0327868852,
            confidence2=0.2978,
            softmax=(0.1755, 0.1755, 0.1755, 0.4735),
        )

        data = result.to_dict()

        assert data["class"] == 3
        assert data["diff"] == -12
        assert data["durationRef"] == 4.2
        assert data["fingersCountRef"] == 80
        assert data["matchesTotal"] == 31
        assert data["tRefAvg"] == 1.23
        assert data["fingersCountMeasurements"] == 150
        assert data["ratioFingersMeasurements"] == 0.13333
        assert data["confidence1"] == 0.03279
        assert data["softmaxraw"] == [0.1755, 0.1755, 0.1755, 0.4735]
