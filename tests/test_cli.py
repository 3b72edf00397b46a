"""Tests for the command-line interface"""

import pytest
from unittest.mock import AsyncMock, patch

from viral_finder.cli import ViralFinderCLI, main
from viral_finder.core.exceptions import YouTubeAPIError
from viral_finder.core.key_store import InMemoryKeyStore
from viral_finder.models.search_models import KeyCheckResult
from viral_finder.services.key_manager import KeyManager


class TestViralFinderCLI:
    """Test argument parsing and command handling"""

    @pytest.fixture
    def cli(self, mock_youtube_client):
        manager = KeyManager(store=InMemoryKeyStore(), client_factory=lambda key: mock_youtube_client)
        return ViralFinderCLI(key_manager=manager)

    def test_search_arguments(self, cli):
        args = cli.create_parser().parse_args([
            "search", "--keyword", "shampoo", "--country", "jp", "--page-size", "20",
            "--ratio", "2", "--shorts", "only", "--period", "1y", "--include-hidden",
        ])

        assert args.command == "search"
        assert args.keyword == "shampoo"
        assert args.page_size == 20
        assert args.ratio == 2
        assert args.shorts == "only"
        assert args.period == "1y"
        assert args.include_hidden is True
        assert args.min_views == 10000
        assert args.max_pages == 10

    def test_invalid_page_size_rejected(self, cli):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["search", "--page-size", "30"])

    def test_mask(self):
        assert ViralFinderCLI._mask("AIzaSyABCDEFGH1234") == "AIza**********1234"
        assert ViralFinderCLI._mask("short") == "*****"

    @pytest.mark.asyncio
    async def test_key_set(self, cli, capsys):
        args = cli.create_parser().parse_args(["key", "set", "AIza-good"])

        assert await cli.key_command(args) == 0
        assert cli.key_manager.store.load() == "AIza-good"
        assert "verified and saved" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_key_set_rejected(self, cli, mock_youtube_client, capsys):
        mock_youtube_client.verify_api_key.return_value = KeyCheckResult(ok=False, reason="HTTP 400")
        args = cli.create_parser().parse_args(["key", "set", "AIza-bad"])

        assert await cli.key_command(args) == 1
        assert cli.key_manager.store.load() == ""
        assert "HTTP 400" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_comments_command_exports(self, cli, mock_youtube_client, make_thread, tmp_path):
        mock_youtube_client.get_comment_threads.return_value = ([make_thread("c1")], None)
        args = cli.create_parser().parse_args(["comments", "vid1", "--csv-dir", str(tmp_path)])

        with patch("viral_finder.cli.YouTubeClient", return_value=mock_youtube_client):
            assert await cli.comments_command(args) == 0

        exported = list(tmp_path.glob("comments_vid1_*.csv"))
        assert len(exported) == 1

    @pytest.mark.asyncio
    async def test_search_fails_when_comment_fetch_fails(
        self, cli, mock_youtube_client, make_video, make_channel, tmp_path, capsys
    ):
        mock_youtube_client.search_videos.return_value = (["vid1"], None)
        mock_youtube_client.get_video_details.return_value = [make_video("vid1", channel_id="UC_a")]
        mock_youtube_client.get_channel_details.return_value = [make_channel("UC_a")]
        mock_youtube_client.get_comment_threads.side_effect = YouTubeAPIError("comments disabled")
        args = cli.create_parser().parse_args([
            "search", "--comments-top", "1", "--csv-dir", str(tmp_path),
        ])

        with patch("viral_finder.cli.YouTubeClient", return_value=mock_youtube_client):
            assert await cli.search_command(args) == 1

        assert len(list(tmp_path.glob("videos_*.csv"))) == 1
        assert "No comments to export" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_main_reports_api_errors(self, capsys):
        with patch.object(ViralFinderCLI, "search_command", AsyncMock(side_effect=YouTubeAPIError("quota exceeded"))):
            assert await main(["search"]) == 1

        assert "quota exceeded" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_main_without_command(self, capsys):
        assert await main([]) == 0
        assert "usage" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_main_rejects_invalid_options(self, capsys):
        assert await main(["search", "--min-views", "-5"]) == 2
        assert "Invalid search options" in capsys.readouterr().out
