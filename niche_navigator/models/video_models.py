"""Video data models for YouTube API results and derived views"""

from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Tuple
from datetime import datetime
from enum import Enum

from ..core.formatting import duration_to_minutes, watch_url


class Niche(str, Enum):
    """Topical niches used both as search filter and display tag"""
    ENTERTAINMENT = "Entertainment"
    SPORTS = "Sports"
    BUSINESS = "Business"
    AI = "AI"
    SCIENCE = "Science"


# Search-only pseudo niche: no category constraint, never assigned to a video
ALL_NICHES = "All"


class VideoRecord(BaseModel):
    """
    Normalized video as presented by every view.

    Built from a YouTube ``videos`` resource; immutable once created.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="YouTube video ID")
    title: str = Field("", description="Video title")
    channel_name: str = Field("", description="Channel name")
    channel_avatar: str = Field("", description="Channel avatar URL")
    thumbnail_url: str = Field("", description="Thumbnail URL")
    view_count: int = Field(0, ge=0, description="Number of views")
    like_count: int = Field(0, ge=0, description="Number of likes")
    comment_count: int = Field(0, ge=0, description="Number of comments")
    duration: str = Field("0:00", description="Duration as H:MM:SS or M:SS")
    published_at: datetime = Field(..., description="Publication date")
    niche: Niche = Field(Niche.ENTERTAINMENT, description="Assigned niche")

    @property
    def watch_url(self) -> str:
        """Canonical watch page for this video"""
        return watch_url(self.id)

    @property
    def duration_minutes(self) -> int:
        return duration_to_minutes(self.duration)

    def with_niche(self, niche: Niche) -> "VideoRecord":
        """Copy of this record tagged with another niche"""
        return self.model_copy(update={"niche": Niche(niche)})


class SearchResult(BaseModel):
    """One page of search results plus the continuation token, if any"""
    videos: List[VideoRecord] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(
        None, description="Opaque cursor for the next page; None when exhausted"
    )

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None


class Difficulty(str, Enum):
    """Production difficulty of a content idea"""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class ContentIdea(BaseModel):
    """Template-generated content suggestion inspired by a trending video"""
    id: str = Field(..., description="Transient identifier")
    title: str
    description: str
    tags: List[str] = Field(default_factory=list)
    difficulty: Difficulty
    estimated_time: str
    related_videos: List[VideoRecord] = Field(default_factory=list)
    inspiration_source: Optional[str] = Field(None, description="Title of the inspiring video")


class SortKey(str, Enum):
    """Client-side sort options"""
    RELEVANCE = "relevance"
    DATE = "date"
    VIEWS = "views"
    RATING = "rating"
    TITLE = "title"


class UploadDate(str, Enum):
    """Upload date buckets, evaluated relative to the current time"""
    ANY = "any"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class FilterCriteria(BaseModel):
    """Thresholds applied to an already-fetched list of videos"""
    duration: Tuple[int, int] = Field((0, 60), description="Inclusive duration range in minutes")
    min_views: int = Field(1000, ge=0)
    min_likes: int = Field(100, ge=0)
    min_comments: int = Field(10, ge=0)
    upload_date: UploadDate = UploadDate.ANY

    @model_validator(mode="after")
    def check_duration_range(self):
        low, high = self.duration
        if low < 0 or high < low:
            raise ValueError("duration must be a non-negative (min, max) range")
        return self

    def active_count(self) -> int:
        """Number of filters that differ from their defaults"""
        defaults = FilterCriteria()
        count = 0
        if self.duration[0] > defaults.duration[0] or self.duration[1] < defaults.duration[1]:
            count += 1
        if self.min_views > defaults.min_views:
            count += 1
        if self.min_likes > defaults.min_likes:
            count += 1
        if self.min_comments > defaults.min_comments:
            count += 1
        if self.upload_date != UploadDate.ANY:
            count += 1
        return count


class EngagementMetrics(BaseModel):
    """Averages over a ranking of videos"""
    avg_views: int = 0
    avg_likes: int = 0
    avg_comments: int = 0
    engagement_rate: float = Field(0.0, description="(likes + comments) / views, in percent")


class NicheAverages(BaseModel):
    """Average views and likes of the videos of one niche"""
    video_count: int = 0
    avg_views: int = 0
    avg_likes: int = 0


class AnalyticsReport(BaseModel):
    """Rankings and aggregates derived from one multi-niche pull"""
    top_viewed: List[VideoRecord] = Field(default_factory=list)
    most_liked: List[VideoRecord] = Field(default_factory=list)
    most_commented: List[VideoRecord] = Field(default_factory=list)
    metrics: EngagementMetrics = Field(default_factory=EngagementMetrics)
    niche_distribution: Dict[str, int] = Field(default_factory=dict)
    niche_averages: Dict[str, NicheAverages] = Field(default_factory=dict)
    total_videos_analyzed: int = 0
    generated_at: datetime = Field(default_factory=datetime.now, description="Report generation timestamp")
