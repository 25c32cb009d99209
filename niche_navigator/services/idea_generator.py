"""Template-based content idea generation from trending videos"""

import logging
import random
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..clients.youtube_client import YouTubeClient
from ..core.exceptions import ValidationError
from ..core.logging import log_performance
from ..core.niches import DEFAULT_NICHES
from ..core.settings import get_settings
from ..models.video_models import ALL_NICHES, ContentIdea, Difficulty, Niche, VideoRecord

# Setup logging
logger = logging.getLogger(__name__)

# Titles per niche; {k0}/{k1} are the first two title keywords, {year} the current year
TITLE_TEMPLATES: Dict[str, str] = {
    Niche.ENTERTAINMENT.value: "Top 10 {k0} {k1} Moments of {year}",
    Niche.SPORTS.value: "How to Master {k0} {k1} Techniques",
    Niche.BUSINESS.value: "{k0} {k1} Strategies for Beginners",
    Niche.AI.value: "The Future of {k0} {k1}: What's Coming Next",
    Niche.SCIENCE.value: "Explaining {k0} {k1} Concepts Simply",
}
FALLBACK_TEMPLATE = "How to Create Engaging Content About {k0} {k1}"

# Stand-ins when the title has fewer than two usable keywords
KEYWORD_FALLBACKS: Dict[str, tuple] = {
    Niche.ENTERTAINMENT.value: ("Trending", "Entertainment"),
    Niche.SPORTS.value: ("Professional", "Sports"),
    Niche.BUSINESS.value: ("Successful", "Business"),
    Niche.AI.value: ("Artificial", "Intelligence"),
    Niche.SCIENCE.value: ("Complex", "Scientific"),
}
FALLBACK_KEYWORDS = ("Popular", "Topics")

EASY_VIEW_LIMIT = 100_000
HARD_VIEW_LIMIT = 500_000

ESTIMATED_TIMES = {
    Difficulty.EASY: "2-3 hours",
    Difficulty.MEDIUM: "4-6 hours",
    Difficulty.HARD: "8+ hours",
}

MAX_KEYWORDS = 3
MIN_KEYWORD_LENGTH = 5


def extract_keywords(title: str) -> List[str]:
    """Up to three words of the title longer than four characters"""
    return [word for word in title.split(" ") if len(word) >= MIN_KEYWORD_LENGTH][:MAX_KEYWORDS]


def difficulty_for_views(view_count: int) -> Difficulty:
    """Higher view counts mean more competition, so a harder idea"""
    if view_count > HARD_VIEW_LIMIT:
        return Difficulty.HARD
    if view_count < EASY_VIEW_LIMIT:
        return Difficulty.EASY
    return Difficulty.MEDIUM


def make_idea_id(clock: Callable[[], float] = time.time, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return f"idea-{int(clock() * 1000)}-{rng.randrange(1000)}"


def generate_idea(
    video: VideoRecord,
    related_videos: Sequence[VideoRecord],
    niche: Union[Niche, str],
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None
) -> ContentIdea:
    """
    Derive one content idea from an inspiring video.

    Deterministic apart from the identifier suffix.

    Args:
        video: The video the idea is based on
        related_videos: Videos shown alongside the idea
        niche: Niche that selects the title template
        now: Reference time for the year placeholder
        rng: Random source for the identifier
    """
    now = now or datetime.now()
    niche_name = niche.value if isinstance(niche, Niche) else str(niche)
    keywords = extract_keywords(video.title)

    template = TITLE_TEMPLATES.get(niche_name, FALLBACK_TEMPLATE)
    fallback = KEYWORD_FALLBACKS.get(niche_name, FALLBACK_KEYWORDS)
    k0 = keywords[0] if len(keywords) > 0 else fallback[0]
    k1 = keywords[1] if len(keywords) > 1 else fallback[1]
    title = template.format(k0=k0, k1=k1, year=now.year)

    tags = [
        niche_name,
        keywords[0] if len(keywords) > 0 else "content",
        keywords[1] if len(keywords) > 1 else "creator",
        "tutorial",
        "guide",
        str(now.year),
    ]

    description = (
        f"Create a comprehensive {niche_name.lower()} video that explores "
        f"{title.lower()}. Based on trending content, this topic has high "
        f"viewer interest and engagement potential."
    )

    difficulty = difficulty_for_views(video.view_count)

    return ContentIdea(
        id=make_idea_id(clock=lambda: now.timestamp(), rng=rng),
        title=title,
        description=description,
        tags=tags,
        difficulty=difficulty,
        estimated_time=ESTIMATED_TIMES[difficulty],
        related_videos=list(related_videos),
        inspiration_source=video.title
    )


def filter_ideas(ideas: Sequence[ContentIdea], text: str) -> List[ContentIdea]:
    """Ideas whose title, description or a tag contains ``text`` (case-insensitive)"""
    needle = (text or "").strip().lower()
    if not needle:
        return list(ideas)
    return [
        idea for idea in ideas
        if needle in idea.title.lower()
        or needle in idea.description.lower()
        or any(needle in tag.lower() for tag in idea.tags)
    ]


def format_idea(idea: ContentIdea) -> str:
    """Plain-text rendering suitable for the clipboard"""
    return "\n\n".join([
        f"Title: {idea.title}",
        f"Description: {idea.description}",
        f"Tags: {', '.join(idea.tags)}",
        f"Difficulty: {idea.difficulty.value}",
        f"Estimated Time: {idea.estimated_time}",
        f"Inspiration: {idea.inspiration_source or ''}",
    ])


class IdeaGenerator:
    """Fetches inspiration videos and turns them into content ideas"""

    def __init__(
        self,
        youtube_client: Optional[YouTubeClient] = None,
        niches: Optional[Sequence[Niche]] = None,
        rng: Optional[random.Random] = None
    ):
        self.settings = get_settings()
        self.youtube_client = youtube_client
        self.niches: List[Niche] = [Niche(n) for n in (niches or DEFAULT_NICHES)]
        self.rng = rng

    def _client(self) -> YouTubeClient:
        if self.youtube_client is None:
            self.youtube_client = YouTubeClient()
        return self.youtube_client

    @log_performance("generate_initial_ideas")
    async def generate_initial_ideas(self) -> List[ContentIdea]:
        """One idea per niche, based on that niche's trending videos"""
        client = self._client()
        ideas: List[ContentIdea] = []

        for niche in self.niches:
            try:
                result = await client.search_videos("trending", niche, self.settings.ideas_per_niche)
            except Exception as e:
                logger.error(f"Error generating idea for {niche.value}: {e}")
                continue

            if not result.videos:
                logger.info(f"No inspiration videos for {niche.value}")
                continue

            ideas.append(generate_idea(result.videos[0], result.videos, niche, rng=self.rng))

        return ideas

    async def generate_from_topic(self, topic: str) -> Optional[ContentIdea]:
        """
        Generate an idea for a user-supplied topic.

        The niche is taken from the first matching video's own category.

        Returns:
            The idea, or None when the topic finds no videos

        Raises:
            ValidationError: When the topic is blank
        """
        if not topic or not topic.strip():
            raise ValidationError("Please enter a topic to generate an idea")

        result = await self._client().search_videos(
            topic.strip(), ALL_NICHES, self.settings.ideas_per_niche
        )
        if not result.videos:
            logger.info(f"No videos found for topic '{topic}'")
            return None

        main_video = result.videos[0]
        return generate_idea(main_video, result.videos, main_video.niche, rng=self.rng)
