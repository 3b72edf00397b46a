"""Tests for duration parsing and shorts classification"""

import pytest

from viral_finder.services.shorts_classifier import (
    has_shorts_marker, is_short_video, parse_duration_to_seconds
)


class TestParseDuration:
    """Test ISO 8601 duration parsing"""

    @pytest.mark.parametrize("duration,expected", [
        ("PT1H2M3S", 3723),
        ("PT10M", 600),
        ("PT58S", 58),
        ("PT2H", 7200),
        ("PT1M", 60),
        ("PT", 0),
        ("PT45S", 45),
        ("PT1M1S", 61),
        ("PT2M1S", 121),
    ])
    def test_valid_durations(self, duration, expected):
        assert parse_duration_to_seconds(duration) == expected

    @pytest.mark.parametrize("duration", [None, "", "P1D", "1:30", "PT1.5S", "pt1m"])
    def test_invalid_durations(self, duration):
        assert parse_duration_to_seconds(duration) is None


class TestShortsClassification:
    """Test short-form detection"""

    def test_cutoff_is_inclusive(self, make_video):
        assert is_short_video(make_video("a", duration="PT2M")) is True
        assert is_short_video(make_video("b", duration="PT2M1S")) is False
        assert is_short_video(make_video("c", duration="PT45S")) is True

    def test_custom_cutoff(self, make_video):
        video = make_video("a", duration="PT90S")
        assert is_short_video(video, cutoff_seconds=61) is False
        assert is_short_video(video, cutoff_seconds=90) is True

    def test_marker_in_title(self, make_video):
        assert is_short_video(make_video("a", duration="PT15M", title="Morning routine #Shorts")) is True

    def test_marker_in_tags(self, make_video):
        video = make_video("a", duration=None, tags=["ヘアケア", "ショート動画"])
        assert is_short_video(video) is True

    def test_long_video_without_markers(self, make_video):
        assert is_short_video(make_video("a", duration="PT15M", title="Full shampoo review")) is False

    def test_unknown_duration_without_markers(self, make_video):
        assert is_short_video(make_video("a", duration=None)) is False

    @pytest.mark.parametrize("text", ["#short", "SHORTS", "ショーツ", "ショート", "Short動画"])
    def test_markers(self, text):
        assert has_shorts_marker(f"hair care {text}") is True

    def test_no_marker(self):
        assert has_shorts_marker("shampoo comparison") is False
