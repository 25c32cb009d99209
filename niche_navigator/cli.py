"""Command-line interface for niche video discovery"""

import asyncio
import argparse
import json
import sys
import logging
from typing import List, Optional, Sequence

from .clients.suggest_client import SuggestClient
from .clients.youtube_client import YouTubeClient
from .core.exceptions import ConfigurationError, ValidationError
from .core.formatting import format_count, format_time_ago
from .core.logging import setup_logging
from .core.niches import parse_niche
from .core.settings import get_settings
from .models.video_models import (
    AnalyticsReport, ContentIdea, FilterCriteria, SortKey, UploadDate, VideoRecord
)
from .services.aggregator import NicheAggregator
from .services.idea_generator import IdeaGenerator, format_idea
from .services.video_filters import filter_videos, sort_videos

logger = logging.getLogger(__name__)


def _dump(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class NicheNavigatorCLI:
    """Command-line interface for niche video discovery"""

    def __init__(self, youtube_client: Optional[YouTubeClient] = None):
        self.settings = get_settings()
        self.youtube_client = youtube_client

    def _client(self) -> YouTubeClient:
        if self.youtube_client is None:
            self.youtube_client = YouTubeClient()
        return self.youtube_client

    def create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser"""
        parser = argparse.ArgumentParser(
            prog="niche-navigator",
            description="Discover YouTube videos by niche, rank them and generate content ideas",
            formatter_class=argparse.RawDescriptionHelpFormatter
        )
        parser.add_argument(
            '--json',
            action='store_true',
            help='Print raw JSON instead of formatted text'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Search command
        search_parser = subparsers.add_parser('search', help='Search videos within a niche')
        search_parser.add_argument('query', type=str, nargs='?', default="", help='Search text')
        search_parser.add_argument(
            '--niche',
            type=str,
            default=self.settings.default_niche,
            help='Niche to search (Entertainment, Sports, Business, AI, Science or All)'
        )
        search_parser.add_argument(
            '--max-results',
            type=int,
            default=self.settings.search_page_size,
            help='Results per page (default: %(default)s)'
        )
        search_parser.add_argument('--page-token', type=str, help='Continuation token from a previous page')
        search_parser.add_argument(
            '--sort',
            type=str,
            choices=[key.value for key in SortKey],
            default=SortKey.RELEVANCE.value,
            help='Client-side sort order (default: relevance)'
        )
        search_parser.add_argument('--min-views', type=int, help='Minimum view count')
        search_parser.add_argument('--min-likes', type=int, help='Minimum like count')
        search_parser.add_argument('--min-comments', type=int, help='Minimum comment count')
        search_parser.add_argument(
            '--duration',
            type=int,
            nargs=2,
            metavar=('MIN', 'MAX'),
            help='Inclusive duration range in minutes'
        )
        search_parser.add_argument(
            '--upload-date',
            type=str,
            choices=[bucket.value for bucket in UploadDate],
            help='Only videos uploaded today, this week, month or year'
        )

        # Discover command
        discover_parser = subparsers.add_parser('discover', help='Shuffled videos from every niche')
        discover_parser.add_argument(
            '--per-niche',
            type=int,
            default=self.settings.discovery_per_niche,
            help='Videos per niche (default: %(default)s)'
        )

        # Trending command
        trending_parser = subparsers.add_parser('trending', help='Trending videos across all niches')
        trending_parser.add_argument('--max-results', type=int, default=self.settings.search_page_size)
        trending_parser.add_argument('--page-token', type=str)

        # Analytics command
        analytics_parser = subparsers.add_parser('analytics', help='Rank videos by views, likes and comments')
        analytics_parser.add_argument('--per-niche', type=int, default=self.settings.analytics_per_niche)
        analytics_parser.add_argument('--top-n', type=int, default=self.settings.analytics_top_n)

        # Ideas command
        ideas_parser = subparsers.add_parser('ideas', help='Generate content ideas')
        ideas_parser.add_argument(
            '--topic',
            type=str,
            help='Generate one idea for this topic instead of one per niche'
        )

        # Suggest command
        suggest_parser = subparsers.add_parser('suggest', help='Autocomplete a search query')
        suggest_parser.add_argument('query', type=str)

        return parser

    def _criteria_from_args(self, args) -> Optional[FilterCriteria]:
        values = {}
        if args.min_views is not None:
            values['min_views'] = args.min_views
        if args.min_likes is not None:
            values['min_likes'] = args.min_likes
        if args.min_comments is not None:
            values['min_comments'] = args.min_comments
        if args.duration is not None:
            values['duration'] = tuple(args.duration)
        if args.upload_date is not None:
            values['upload_date'] = args.upload_date
        return FilterCriteria(**values) if values else None

    async def search_command(self, args) -> None:
        try:
            niche = parse_niche(args.niche)
        except ValueError as e:
            raise ValidationError(str(e))

        result = await self._client().search_videos(args.query, niche, args.max_results, args.page_token)

        videos = result.videos
        criteria = self._criteria_from_args(args)
        if criteria is not None:
            videos = filter_videos(videos, criteria)
        videos = sort_videos(videos, args.sort)

        if args.json:
            print(_dump({
                "videos": [v.model_dump(mode="json") for v in videos],
                "next_page_token": result.next_page_token
            }))
            return

        self._display_videos(videos)
        if result.next_page_token:
            print(f"\nMore results: --page-token {result.next_page_token}")

    async def discover_command(self, args) -> None:
        videos = await NicheAggregator(self._client()).discovery_feed(args.per_niche)
        if args.json:
            print(_dump([v.model_dump(mode="json") for v in videos]))
            return
        self._display_videos(videos)

    async def trending_command(self, args) -> None:
        result = await NicheAggregator(self._client()).trending_feed(args.max_results, args.page_token)
        if args.json:
            print(_dump(result.model_dump(mode="json")))
            return
        self._display_videos(result.videos)
        if result.next_page_token:
            print(f"\nMore results: --page-token {result.next_page_token}")

    async def analytics_command(self, args) -> None:
        report = await NicheAggregator(self._client()).analytics(args.per_niche, args.top_n)
        if args.json:
            print(_dump(report.model_dump(mode="json")))
            return
        self._display_analytics(report)

    async def ideas_command(self, args) -> None:
        generator = IdeaGenerator(self._client())
        if args.topic is not None:
            idea = await generator.generate_from_topic(args.topic)
            ideas = [idea] if idea else []
            if not ideas:
                print("No videos found for this topic. Try a different topic.")
                return
        else:
            ideas = await generator.generate_initial_ideas()

        if args.json:
            print(_dump([idea.model_dump(mode="json") for idea in ideas]))
            return
        self._display_ideas(ideas)

    async def suggest_command(self, args) -> None:
        async with SuggestClient() as client:
            suggestions = await client.get_search_suggestions(args.query)
        if args.json:
            print(_dump(suggestions))
            return
        for suggestion in suggestions:
            print(suggestion)

    def _display_videos(self, videos: Sequence[VideoRecord]) -> None:
        """Display videos in readable format"""
        if not videos:
            print("No videos found.")
            return

        for i, video in enumerate(videos, 1):
            print(f"{i:>3}. {video.title}  [{video.niche.value}]")
            print(
                f"     {video.channel_name} · {format_count(video.view_count)} views · "
                f"{format_count(video.like_count)} likes · {format_count(video.comment_count)} comments · "
                f"{video.duration} · {format_time_ago(video.published_at)}"
            )
            print(f"     {video.watch_url}")

    def _display_analytics(self, report: AnalyticsReport) -> None:
        metrics = report.metrics
        print(f"Videos analyzed: {report.total_videos_analyzed}")
        print(
            f"Averages: {format_count(metrics.avg_views)} views · {format_count(metrics.avg_likes)} likes · "
            f"{format_count(metrics.avg_comments)} comments · engagement {metrics.engagement_rate}%"
        )

        for heading, ranking, attr in (
            ("Most viewed", report.top_viewed, "view_count"),
            ("Most liked", report.most_liked, "like_count"),
            ("Most commented", report.most_commented, "comment_count"),
        ):
            print(f"\n{heading}:")
            for i, video in enumerate(ranking, 1):
                print(f"  {i}. {video.title} ({format_count(getattr(video, attr))}) [{video.niche.value}]")

        print("\nNiche distribution:")
        for niche, count in report.niche_distribution.items():
            print(f"  {niche}: {count}")

    def _display_ideas(self, ideas: List[ContentIdea]) -> None:
        if not ideas:
            print("No ideas could be generated.")
            return
        for idea in ideas:
            print(format_idea(idea))
            print("-" * 60)

    async def close(self) -> None:
        if self.youtube_client is not None:
            await self.youtube_client.aclose()


async def main(
    argv: Optional[List[str]] = None,
    youtube_client: Optional[YouTubeClient] = None
) -> int:
    """Main CLI entry point; returns the process exit code"""
    setup_logging()

    cli = NicheNavigatorCLI(youtube_client)
    parser = cli.create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    handlers = {
        'search': cli.search_command,
        'discover': cli.discover_command,
        'trending': cli.trending_command,
        'analytics': cli.analytics_command,
        'ideas': cli.ideas_command,
        'suggest': cli.suggest_command,
    }

    try:
        await handlers[args.command](args)
        return 0
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Set YOUTUBE_API_KEY in your environment or .env file.", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await cli.close()


def run() -> None:
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    run()
