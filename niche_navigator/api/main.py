"""FastAPI service exposing the discover, trending, analytics and ideas views"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

from ..clients.suggest_client import SuggestClient
from ..clients.youtube_client import YouTubeClient
from ..core.exceptions import ConfigurationError, ValidationError, YouTubeAPIError
from ..core.formatting import watch_url
from ..core.logging import setup_logging
from ..core.niches import parse_niche
from ..core.settings import get_settings
from ..models.video_models import (
    AnalyticsReport, ContentIdea, FilterCriteria, SearchResult, SortKey, VideoRecord
)
from ..services.aggregator import NicheAggregator
from ..services.idea_generator import IdeaGenerator
from ..services.video_filters import filter_videos, sort_videos

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create shared HTTP clients for the lifetime of the app"""
    logger.info("Starting Niche Navigator API...")

    app.state.youtube_client = None
    try:
        app.state.youtube_client = YouTubeClient()
    except ConfigurationError as e:
        logger.error(f"YouTube client unavailable: {e}")
    app.state.suggest_client = SuggestClient()

    yield

    logger.info("Shutting down Niche Navigator API...")
    if app.state.youtube_client is not None:
        await app.state.youtube_client.aclose()
    await app.state.suggest_client.aclose()


# FastAPI app instance
app = FastAPI(
    title="Niche Navigator API",
    description="Niche-organized YouTube discovery, analytics and content ideas",
    version=VERSION,
    lifespan=lifespan
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

startup_time = datetime.now()


# Dependencies

def get_youtube_client(request: Request) -> YouTubeClient:
    client = getattr(request.app.state, "youtube_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="YouTube API key is not configured")
    return client


def get_suggest_client(request: Request) -> SuggestClient:
    client = getattr(request.app.state, "suggest_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Suggestion service not initialized")
    return client


def get_aggregator(client: YouTubeClient = Depends(get_youtube_client)) -> NicheAggregator:
    return NicheAggregator(client)


def get_idea_generator(client: YouTubeClient = Depends(get_youtube_client)) -> IdeaGenerator:
    return IdeaGenerator(client)


def _niche_or_400(value: str):
    try:
        return parse_niche(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# Request/response models

class FilterRequest(BaseModel):
    """Videos already held by the caller, plus thresholds and sort order"""
    videos: List[VideoRecord]
    criteria: Optional[FilterCriteria] = None
    sort_by: SortKey = SortKey.RELEVANCE


class IdeaRequest(BaseModel):
    topic: str = Field(..., max_length=200, description="Topic to base the idea on")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    uptime_seconds: float
    youtube_configured: bool


# Routes

@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        version=VERSION,
        uptime_seconds=(datetime.now() - startup_time).total_seconds(),
        youtube_configured=getattr(request.app.state, "youtube_client", None) is not None
    )


@app.get("/api/videos/search", response_model=SearchResult)
async def search_videos(
    q: str = Query("", max_length=500, description="Free-text query"),
    niche: str = Query("Entertainment", description="Niche or 'All'"),
    max_results: int = Query(20, ge=1, le=50),
    page_token: Optional[str] = Query(None),
    sort_by: SortKey = Query(SortKey.RELEVANCE),
    client: YouTubeClient = Depends(get_youtube_client)
):
    """Search one niche; pass ``page_token`` to continue a previous search"""
    result = await client.search_videos(q, _niche_or_400(niche), max_results, page_token)
    return SearchResult(videos=sort_videos(result.videos, sort_by), next_page_token=result.next_page_token)


@app.post("/api/videos/filter", response_model=List[VideoRecord])
async def filter_and_sort(request: FilterRequest):
    """Filter and sort caller-supplied videos without touching the network"""
    videos = request.videos
    if request.criteria is not None:
        videos = filter_videos(videos, request.criteria)
    return sort_videos(videos, request.sort_by)


@app.get("/api/feed/discover", response_model=List[VideoRecord])
async def discover_feed(
    per_niche: Optional[int] = Query(None, ge=1, le=50),
    aggregator: NicheAggregator = Depends(get_aggregator)
):
    """Shuffled videos from every niche"""
    return await aggregator.discovery_feed(per_niche)


@app.get("/api/feed/trending", response_model=SearchResult)
async def trending_feed(
    max_results: Optional[int] = Query(None, ge=1, le=50),
    page_token: Optional[str] = Query(None),
    aggregator: NicheAggregator = Depends(get_aggregator)
):
    return await aggregator.trending_feed(max_results, page_token)


@app.get("/api/analytics", response_model=AnalyticsReport)
async def analytics(
    per_niche: Optional[int] = Query(None, ge=1, le=50),
    top_n: Optional[int] = Query(None, ge=1, le=50),
    aggregator: NicheAggregator = Depends(get_aggregator)
):
    """Top videos by views, likes and comments across all niches"""
    return await aggregator.analytics(per_niche, top_n)


@app.get("/api/ideas", response_model=List[ContentIdea])
async def initial_ideas(generator: IdeaGenerator = Depends(get_idea_generator)):
    """One content idea per niche"""
    return await generator.generate_initial_ideas()


@app.post("/api/ideas", response_model=ContentIdea)
async def idea_from_topic(
    request: IdeaRequest,
    generator: IdeaGenerator = Depends(get_idea_generator)
):
    idea = await generator.generate_from_topic(request.topic)
    if idea is None:
        raise HTTPException(
            status_code=404,
            detail="No videos found for this topic. Try a different topic."
        )
    return idea


@app.get("/api/suggestions", response_model=List[str])
async def suggestions(
    q: str = Query("", max_length=200),
    client: SuggestClient = Depends(get_suggest_client)
):
    return await client.get_search_suggestions(q)


@app.get("/watch/{video_id}")
async def watch(video_id: str):
    """Redirect to the video's canonical watch page"""
    return RedirectResponse(watch_url(video_id), status_code=307)


# Error handlers
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request", "detail": str(exc)})


@app.exception_handler(YouTubeAPIError)
async def youtube_error_handler(request: Request, exc: YouTubeAPIError):
    logger.error(f"YouTube API error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": "YouTube API request failed", "detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(status_code=503, content={"error": "Service misconfigured", "detail": str(exc)})


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "niche_navigator.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level="info"
    )
