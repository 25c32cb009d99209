"""Client-side sorting and filtering of already-fetched videos"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from ..models.video_models import FilterCriteria, SortKey, UploadDate, VideoRecord


def sort_videos(videos: List[VideoRecord], sort_by: Union[SortKey, str]) -> List[VideoRecord]:
    """
    Return a re-ordered copy of ``videos``.

    ``date``, ``views`` and ``rating`` sort descending, ``title`` ascending.
    ``relevance`` and unrecognized keys keep the original order. Sorting is
    stable, so applying it twice gives the same list.
    """
    try:
        key = SortKey(sort_by)
    except ValueError:
        return list(videos)

    if key == SortKey.DATE:
        return sorted(videos, key=lambda v: v.published_at.timestamp(), reverse=True)
    if key == SortKey.VIEWS:
        return sorted(videos, key=lambda v: v.view_count, reverse=True)
    if key == SortKey.RATING:
        return sorted(videos, key=lambda v: v.like_count, reverse=True)
    if key == SortKey.TITLE:
        return sorted(videos, key=lambda v: (v.title.casefold(), v.title))
    return list(videos)


def matches_upload_date(published_at: datetime, bucket: UploadDate, now: datetime) -> bool:
    """Whether ``published_at`` falls in ``bucket`` relative to ``now``"""
    if bucket == UploadDate.ANY:
        return True

    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is not None:
        published_at = published_at.astimezone(now.tzinfo)
    else:
        published_at = published_at.replace(tzinfo=None)

    if bucket == UploadDate.TODAY:
        return published_at.date() == now.date()
    if bucket == UploadDate.WEEK:
        return published_at >= now - timedelta(days=7)
    if bucket == UploadDate.MONTH:
        return (published_at.year, published_at.month) == (now.year, now.month)
    if bucket == UploadDate.YEAR:
        return published_at.year == now.year
    return True


def matches_criteria(video: VideoRecord, criteria: FilterCriteria, now: datetime) -> bool:
    """Filter predicate: every threshold must hold"""
    low, high = criteria.duration
    if not low <= video.duration_minutes <= high:
        return False
    if video.view_count < criteria.min_views:
        return False
    if video.like_count < criteria.min_likes:
        return False
    if video.comment_count < criteria.min_comments:
        return False
    return matches_upload_date(video.published_at, criteria.upload_date, now)


def filter_videos(
    videos: List[VideoRecord],
    criteria: FilterCriteria,
    now: Optional[datetime] = None
) -> List[VideoRecord]:
    """
    Keep only the videos that satisfy ``criteria``, preserving order.

    Args:
        videos: Already-fetched videos
        criteria: Duration range, count minimums and upload date bucket
        now: Evaluation time for the upload date bucket (defaults to now, UTC)
    """
    now = now or datetime.now(timezone.utc)
    return [video for video in videos if matches_criteria(video, criteria, now)]


def search_within(videos: List[VideoRecord], text: str) -> List[VideoRecord]:
    """Case-insensitive match on title or channel name"""
    needle = (text or "").strip().lower()
    if not needle:
        return list(videos)
    return [
        video for video in videos
        if needle in video.title.lower() or needle in video.channel_name.lower()
    ]
