"""Tests for ratio qualification and row construction"""

import pytest

from viral_finder.models.search_models import FilterConfig
from viral_finder.models.video_models import MatchedRule, YouTubeVideoRaw
from viral_finder.services.qualification import (
    build_video_row, build_video_rows, qualifies_by_ratio, spread_rate
)


class TestRatio:
    """Test the subscriber ratio rule"""

    @pytest.mark.parametrize("views,subscribers,multiple,expected", [
        (3000, 1000, 3, True),
        (2999, 1000, 3, False),
        (2000, 1000, 2, True),
        (1000, 1000, 1, True),
        (999, 1000, 1, False),
        (0, 0, 3, True),
        (2500, 1000, 2, True),
        (2500, 1000, 3, False),
    ])
    def test_qualifies_by_ratio(self, views, subscribers, multiple, expected):
        assert qualifies_by_ratio(views, subscribers, False, multiple) is expected

    def test_hidden_or_unknown_never_qualifies(self):
        assert qualifies_by_ratio(10 ** 9, 10, True, 1) is False
        assert qualifies_by_ratio(10 ** 9, None, False, 1) is False
        assert qualifies_by_ratio(2500, None, False, 1) is False
        assert qualifies_by_ratio(2500, 1000, True, 1) is False

    def test_spread_rate(self):
        assert spread_rate(5000, 1000, False) == 5.0
        assert spread_rate(5000, 1000, True) is None
        assert spread_rate(5000, None, False) is None
        assert spread_rate(5000, 0, False) is None


class TestBuildVideoRow:
    """Test joining videos with channels"""

    def test_row_fields(self, make_video, make_channel):
        video = make_video("abc123", channel_id="UC1", views="12000")
        channel = make_channel("UC1", subscribers="3000", country="JP")

        row = build_video_row(video, channel, FilterConfig(ratio_threshold=3))

        assert row.video_id == "abc123"
        assert row.video_url == "https://www.youtube.com/watch?v=abc123"
        assert row.channel_url == "https://www.youtube.com/channel/UC1"
        assert row.thumbnail_url == "https://i.ytimg.com/vi/abc123/mqdefault.jpg"
        assert row.view_count == 12000
        assert row.like_count == 1200
        assert row.subscriber_count == 3000
        assert row.country == "JP"
        assert row.spread_rate == 4.0
        assert row.matched_rule == MatchedRule.RATIO_3X
        assert row.is_short is False

    def test_min_views_rule_when_ratio_fails(self, make_video, make_channel):
        video = make_video("a", views="20000")
        channel = make_channel("UC_channel_a", subscribers="100000")

        row = build_video_row(video, channel, FilterConfig(min_views=10000))

        assert row.matched_rule == MatchedRule.MIN_VIEWS

    def test_no_rule(self, make_video, make_channel):
        video = make_video("a", views="500")
        channel = make_channel("UC_channel_a", subscribers="100000")

        row = build_video_row(video, channel, FilterConfig(min_views=10000))

        assert row.matched_rule == MatchedRule.NONE

    def test_hidden_subscribers(self, make_video, make_channel):
        video = make_video("a", views="90000")
        channel = make_channel("UC_channel_a", subscribers=None, hidden=True)

        row = build_video_row(video, channel, FilterConfig())

        assert row.hidden_subscriber_count is True
        assert row.subscriber_count is None
        assert row.spread_rate is None
        assert row.matched_rule == MatchedRule.MIN_VIEWS

    def test_missing_channel_leaves_fields_unknown(self, make_video):
        row = build_video_row(make_video("a", views="90000"), None, FilterConfig())

        assert row.subscriber_count is None
        assert row.country is None
        assert row.spread_rate is None
        assert row.hidden_subscriber_count is False

    def test_missing_statistics(self, make_video_item, make_channel):
        item = make_video_item("a")
        del item["statistics"]
        row = build_video_row(YouTubeVideoRaw.model_validate(item), make_channel("UC_channel_a"), FilterConfig())

        assert row.view_count == 0
        assert row.like_count is None

    def test_shorts_cutoff_passed_through(self, make_video):
        video = make_video("a", duration="PT90S")

        assert build_video_row(video, None, FilterConfig(), shorts_cutoff=120).is_short is True
        assert build_video_row(video, None, FilterConfig(), shorts_cutoff=61).is_short is False

    def test_build_rows_keeps_order(self, make_video, make_channel):
        videos = [make_video("v1", channel_id="UC1"), make_video("v2", channel_id="UC2")]
        channels = {"UC1": make_channel("UC1"), "UC2": make_channel("UC2", country="US")}

        rows = build_video_rows(videos, channels, FilterConfig())

        assert [row.video_id for row in rows] == ["v1", "v2"]
        assert rows[1].country == "US"
