"""Command-line interface for finding videos that outperform their channel"""

import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import ValidationError

from .agents.search_agent import create_search_agent
from .agents.comment_agent import create_comment_agent
from .clients.youtube_client import YouTubeClient
from .core.exceptions import ViralFinderError, ConfigurationError, YouTubeAPIError
from .core.logging import setup_logging, get_logger
from .core.settings import get_settings
from .models.search_models import (
    FilterConfig, LookbackPeriod, RatioThreshold, SearchProgress, ShortsMode,
    MAX_SEARCH_PAGES, PAGE_SIZE_CHOICES
)
from .models.video_models import VideoRow
from .services.csv_export import export_comments_csv, export_videos_csv
from .services.filter_pipeline import SORTABLE_KEYS, sort_rows
from .services.formatting import format_count, format_date_japanese, format_spread_rate
from .services.key_manager import KeyManager

# Setup logging system
setup_logging()
logger = get_logger(__name__)


class ViralFinderCLI:
    """Command-line interface for the viral video finder"""

    def __init__(self, key_manager: Optional[KeyManager] = None):
        try:
            self.settings = get_settings()
        except ValueError as e:
            print(f"❌ Configuration error: {e}")
            print("💡 Please check your .env file.")
            sys.exit(1)
        self.key_manager = key_manager or KeyManager()

    def create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser"""
        parser = argparse.ArgumentParser(
            description="Find YouTube videos whose views outrun their channel's subscribers",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )
        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Key command
        key_parser = subparsers.add_parser('key', help='Manage the YouTube API key')
        key_sub = key_parser.add_subparsers(dest='key_command')
        set_parser = key_sub.add_parser('set', help='Verify and save an API key')
        set_parser.add_argument('api_key', help='YouTube Data API key')
        verify_parser = key_sub.add_parser('verify', help='Check that a key authenticates')
        verify_parser.add_argument('api_key', nargs='?', help='Key to check (default: saved key)')
        key_sub.add_parser('show', help='Show the saved key, masked')

        # Search command
        search_parser = subparsers.add_parser('search', help='Search and rank videos')
        search_parser.add_argument('--keyword', '-k', type=str, default="",
                                   help='Search keyword (blank uses the default phrase)')
        search_parser.add_argument('--min-views', type=int, default=self.settings.default_min_views,
                                   help=f'Minimum view count (default: {self.settings.default_min_views})')
        search_parser.add_argument('--country', type=str, default=None,
                                   help='Two-letter country code of the channel, e.g. JP')
        search_parser.add_argument('--page-size', type=int, choices=list(PAGE_SIZE_CHOICES), default=50,
                                   help='Results per search page (default: 50)')
        search_parser.add_argument('--max-pages', type=int, default=self.settings.max_search_pages,
                                   help=f'Search pages to read, at most {MAX_SEARCH_PAGES}')
        search_parser.add_argument('--include-hidden', action='store_true',
                                   help='Drop the subscriber ratio requirement')
        search_parser.add_argument('--period', choices=[p.value for p in LookbackPeriod],
                                   default=LookbackPeriod.THREE_YEARS.value,
                                   help='Publication window (default: 3y)')
        search_parser.add_argument('--shorts', choices=[m.value for m in ShortsMode],
                                   default=ShortsMode.EXCLUDE.value,
                                   help='Short-form handling (default: exclude)')
        search_parser.add_argument('--ratio', type=int, choices=[r.value for r in RatioThreshold],
                                   default=RatioThreshold.THREE.value,
                                   help='Views must reach this multiple of subscribers (default: 3)')
        search_parser.add_argument('--sort-by', choices=sorted(SORTABLE_KEYS), default='view_count',
                                   help='Column to order the table by')
        search_parser.add_argument('--sort-dir', choices=['desc', 'asc'], default='desc')
        search_parser.add_argument('--limit', type=int, default=20,
                                   help='Rows to print (default: 20, 0 for all)')
        search_parser.add_argument('--csv-dir', type=str, default=None,
                                   help='Export the ranked list as CSV into this directory')
        search_parser.add_argument('--comments-top', type=int, default=0,
                                   help='Fetch and export comments of the top N videos')

        # Comments command
        comments_parser = subparsers.add_parser('comments', help='Fetch and export comments')
        comments_parser.add_argument('video_ids', nargs='+', help='YouTube video IDs')
        comments_parser.add_argument('--csv-dir', type=str, default=".",
                                     help='Directory for the CSV file (default: current)')

        return parser

    async def key_command(self, args) -> int:
        """Handle the key subcommands"""
        if args.key_command == 'set':
            print("🔑 Verifying API key...")
            result = await self.key_manager.save_verified(args.api_key)
            if result.ok:
                print("✅ API key verified and saved")
                return 0
            print(f"❌ API key rejected: {result.reason}")
            return 1

        if args.key_command == 'verify':
            key = args.api_key or self.key_manager.current_key()
            result = await self.key_manager.verify(key)
            if result.ok:
                print("✅ API key is valid")
                return 0
            print(f"❌ API key check failed: {result.reason}")
            return 1

        key = self.key_manager.current_key()
        print(f"🔑 {self._mask(key)}" if key else "⚠️  No API key saved")
        return 0

    async def search_command(self, args) -> int:
        """Run a search and print the ranked table"""
        config = FilterConfig(
            keyword=args.keyword,
            min_views=args.min_views,
            country=args.country,
            page_size=args.page_size,
            max_pages=max(1, min(args.max_pages, MAX_SEARCH_PAGES)),
            include_hidden=args.include_hidden,
            period=args.period,
            shorts_mode=args.shorts,
            ratio_threshold=args.ratio,
        )
        api_key = self.key_manager.require_key()

        print(f"🔍 Searching '{config.keyword}' ({config.period.value}, ratio {config.ratio_threshold.label})")

        async with YouTubeClient(api_key=api_key) as client:
            agent = create_search_agent(youtube_client=client, on_progress=self._show_progress)
            result = await agent.run_search(config)
            print()

            rows = sort_rows(result.rows, args.sort_by, args.sort_dir)
            exit_code = 0
            print(f"\n✅ {result.total_after_filter} of {result.total_before_filter} videos qualified")
            self._display_rows(rows if args.limit <= 0 else rows[:args.limit])

            if args.csv_dir:
                path = export_videos_csv(
                    rows, config.keyword, config.ratio_threshold.label, args.csv_dir, result.searched_at
                )
                print(f"📄 Video list saved to: {path}")

            if args.comments_top > 0 and rows:
                video_ids = [row.video_id for row in rows[:args.comments_top]]
                exit_code = await self._fetch_and_export_comments(client, video_ids, args.csv_dir or ".")

            print(f"📈 Quota used: {client.get_quota_usage()}")
        return exit_code

    async def comments_command(self, args) -> int:
        """Fetch comments for the given videos and export them"""
        api_key = self.key_manager.require_key()
        async with YouTubeClient(api_key=api_key) as client:
            return await self._fetch_and_export_comments(client, args.video_ids, args.csv_dir)

    async def _fetch_and_export_comments(self, client: YouTubeClient, video_ids: List[str], csv_dir: str) -> int:
        failures: List[str] = []
        agent = create_comment_agent(youtube_client=client, notify=failures.append)

        for video_id in video_ids:
            print(f"💬 Fetching comments for {video_id}...")
            rows = await agent.fetch_comments(video_id)
            if rows is None:
                print(f"   ⚠️  {failures[-1]}")
            else:
                print(f"   • {len(rows)} comments")

        fetched = [video_id for video_id in video_ids if video_id in agent.comments_by_video]
        if not any(agent.comments_by_video[video_id] for video_id in fetched):
            print("⚠️  No comments to export")
            return 1

        path = export_comments_csv(agent.comments_by_video, fetched, csv_dir)
        print(f"📄 Comments saved to: {path}")
        return 1 if failures else 0

    def _display_rows(self, rows: List[VideoRow]) -> None:
        """Print rows as a compact ranked list"""
        for i, row in enumerate(rows, 1):
            short_tag = " [Shorts]" if row.is_short else ""
            print(f"{i:>3}. {row.title}{short_tag}")
            print(
                f"     👁 {format_count(row.view_count)}  "
                f"👥 {format_count(row.subscriber_count)}  "
                f"📈 {format_spread_rate(row.spread_rate)}  "
                f"🏷 {row.matched_rule.value}  "
                f"📅 {format_date_japanese(row.published_at)}"
            )
            print(f"     {row.channel_title} ({row.country or '-'})  {row.video_url}")

    def _show_progress(self, progress: SearchProgress) -> None:
        """Show search page progress on one line"""
        total = progress.total_pages
        current = progress.current_page
        bar_length = 30
        filled_length = int(bar_length * current // total) if total > 0 else 0
        bar = '█' * filled_length + '-' * (bar_length - filled_length)
        print(f'\rPages: |{bar}| {current}/{total} ({progress.total_fetched} IDs)', end='', flush=True)

    @staticmethod
    def _mask(key: str) -> str:
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    cli = ViralFinderCLI()
    parser = cli.create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == 'key':
            return await cli.key_command(args)
        if args.command == 'search':
            return await cli.search_command(args)
        if args.command == 'comments':
            return await cli.comments_command(args)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        print(f"❌ Invalid search options: {errors}")
        return 2
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 2
    except YouTubeAPIError as e:
        print(f"\n❌ YouTube API error: {e}")
        return 1
    except ViralFinderError as e:
        logger.debug(f"Command {args.command} failed", exc_info=True)
        print(f"\n❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        return 130

    parser.print_help()
    return 0


def run() -> None:
    """Console script entry point"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
