"""Source fetchers for news, video and social-post signals.

Each fetcher:
- reads its credential from the explicit Settings it is given
- issues hardcoded queries against one external API
- filters, deduplicates and caps the normalized records
- never raises; failures come back as an empty FetchResult tagged `failed`

An httpx.Client may be injected for tests or connection reuse; otherwise a
short-lived client is created with the configured timeout.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, Iterator, List, Optional, TypeVar
from urllib.parse import urlparse

import httpx

from .config import Settings
from .models import NewsItem, PostItem, VideoItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_OK = "ok"
STATUS_NOT_CONFIGURED = "not_configured"
STATUS_FAILED = "failed"

NEWS_ENDPOINT = "https://newsapi.org/v2/everything"
VIDEO_SEARCH_ENDPOINT = "https://www.googleapis.com/youtube/v3/search"
POST_MEDIA_ENDPOINT = "https://graph.instagram.com/me/media"
VIDEO_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

NEWS_KEYWORDS: tuple[str, ...] = (
    "Pune real estate",
    "PCMC property",
    "Pune metro",
    "Pune infrastructure",
    "Godrej Properties Pune",
    "Lodha Pune",
    "Kolte Patil Pune",
    "VTP Realty Pune",
    "Pune housing",
    "Pune commercial property",
)
EXCLUDED_DOMAINS: tuple[str, ...] = ("youtube.com", "quora.com", "reddit.com")
NEWS_PAGE_SIZE = 50
NEWS_LIMIT = 20

VIDEO_QUERIES: tuple[str, ...] = (
    "Godrej Properties Pune launch",
    "Lodha Pune project",
    "Kolte Patil Pune property",
    "VTP Realty Pune",
    "Pune metro real estate",
    "Pune infrastructure development",
    "Pune PCMC property market",
    "Pune real estate 2025",
    "Pune property investment",
)
VIDEO_RESULTS_PER_QUERY = 5
VIDEO_LIMIT = 25

POST_FIELDS = "id,caption,media_url,permalink,timestamp"
POST_KEYWORDS: tuple[str, ...] = ("pune", "pcmc", "real estate", "property")
POST_LIMIT = 15


@dataclass
class FetchResult(Generic[T]):
    """Records from one source plus how they were obtained."""

    source: str
    items: List[T] = field(default_factory=list)
    status: str = STATUS_OK
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.status != STATUS_OK


# --- Helpers --------------------------------------------------------------

def build_http_client(timeout: float) -> httpx.Client:
    """Create an httpx client; separated for easier testing."""
    return httpx.Client(timeout=timeout)


@contextmanager
def _client_scope(
    client: Optional[httpx.Client], settings: Settings
) -> Iterator[httpx.Client]:
    """Yield the injected client, or a fresh one that is closed afterwards."""
    if client is not None:
        yield client
        return
    with build_http_client(settings.request_timeout) as owned:
        yield owned


def _get_json(client: httpx.Client, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
    response = client.get(url, params=params)
    response.raise_for_status()
    return response.json()


def dedupe(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Drop items whose key was already seen; first occurrence wins."""
    seen: set = set()
    unique: List[T] = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(item)
    return unique


def is_excluded_domain(url: str, excluded: Iterable[str] = EXCLUDED_DOMAINS) -> bool:
    host = urlparse(url).hostname or ""
    return any(domain in host for domain in excluded)


def is_relevant_caption(caption: str, keywords: Iterable[str] = POST_KEYWORDS) -> bool:
    lowered = caption.lower()
    return any(keyword in lowered for keyword in keywords)


def _not_configured(source: str, credential: str) -> FetchResult:
    logger.warning("%s not configured; skipping %s fetch", credential, source)
    return FetchResult(source=source, status=STATUS_NOT_CONFIGURED)


def _failed(source: str, exc: Exception) -> FetchResult:
    logger.warning("Error fetching %s data: %s", source, exc)
    return FetchResult(source=source, status=STATUS_FAILED, error=str(exc))


# --- News -----------------------------------------------------------------

def _news_item(raw: Dict[str, Any]) -> NewsItem:
    source = raw.get("source") or {}
    return NewsItem(
        title=raw.get("title") or "",
        url=raw.get("url") or "",
        description=raw.get("description") or "",
        published_at=raw.get("publishedAt"),
        source=source.get("name") or "",
    )


def fetch_news(
    settings: Settings, client: Optional[httpx.Client] = None
) -> FetchResult[NewsItem]:
    """Search recent English news for the Pune/PCMC property keywords."""
    if not settings.newsapi_key:
        return _not_configured("news", "NEWSAPI_KEY")

    params = {
        "q": " OR ".join(NEWS_KEYWORDS),
        "language": "en",
        "sortBy": "publishedAt",
        "pageSize": NEWS_PAGE_SIZE,
        "apiKey": settings.newsapi_key,
    }
    try:
        with _client_scope(client, settings) as http:
            data = _get_json(http, NEWS_ENDPOINT, params)
        articles = data.get("articles") or []
        kept = [a for a in articles if not is_excluded_domain(a.get("url") or "")]
        unique = dedupe(kept, key=lambda a: a.get("title"))
        items = [_news_item(a) for a in unique[:NEWS_LIMIT]]
    except Exception as exc:
        return _failed("news", exc)

    return FetchResult(source="news", items=items)


# --- Video ----------------------------------------------------------------

def _video_id(raw: Dict[str, Any]) -> str | None:
    return (raw.get("id") or {}).get("videoId")


def _video_item(raw: Dict[str, Any], video_id: str) -> VideoItem:
    snippet = raw.get("snippet") or {}
    return VideoItem(
        title=snippet.get("title") or "",
        url=VIDEO_WATCH_URL.format(video_id=video_id),
        description=snippet.get("description") or "",
        published_at=snippet.get("publishedAt"),
        channel_title=snippet.get("channelTitle") or "",
    )


def _search_videos(http: httpx.Client, query: str, api_key: str) -> List[VideoItem]:
    params = {
        "part": "snippet",
        "q": query,
        "type": "video",
        "maxResults": VIDEO_RESULTS_PER_QUERY,
        "order": "date",
        "key": api_key,
    }
    data = _get_json(http, VIDEO_SEARCH_ENDPOINT, params)
    # Channel or playlist hits carry no videoId; skip them rather than fail the batch.
    return [
        _video_item(item, video_id)
        for item in data.get("items") or []
        if (video_id := _video_id(item))
    ]


def fetch_videos(
    settings: Settings,
    client: Optional[httpx.Client] = None,
    queries: Iterable[str] = VIDEO_QUERIES,
) -> FetchResult[VideoItem]:
    """
    Search recent videos for each query, one request at a time.

    The search API is quota-sensitive, so queries are never fanned out. A
    failure on any query discards every batch collected so far: the result is
    all-or-nothing, unlike the single-call news and post fetchers.
    """
    if not settings.youtube_api_key:
        return _not_configured("youtube", "YOUTUBE_API_KEY")

    try:
        with _client_scope(client, settings) as http:
            batches = [
                _search_videos(http, query, settings.youtube_api_key)
                for query in queries
            ]
    except Exception as exc:
        return _failed("youtube", exc)

    unique = dedupe(chain.from_iterable(batches), key=lambda v: v.url)
    return FetchResult(source="youtube", items=unique[:VIDEO_LIMIT])


# --- Social posts ---------------------------------------------------------

def fetch_posts(
    settings: Settings, client: Optional[httpx.Client] = None
) -> FetchResult[PostItem]:
    """List the account's recent media and keep property-related captions."""
    if not settings.instagram_access_token:
        return _not_configured("instagram", "INSTAGRAM_ACCESS_TOKEN")

    params = {
        "fields": POST_FIELDS,
        "access_token": settings.instagram_access_token,
    }
    try:
        with _client_scope(client, settings) as http:
            data = _get_json(http, POST_MEDIA_ENDPOINT, params)
        posts = data.get("data") or []
        relevant = [p for p in posts if is_relevant_caption(p.get("caption") or "")]
        items = [
            PostItem(
                caption=p.get("caption") or "",
                url=p.get("permalink"),
                timestamp=p.get("timestamp"),
            )
            for p in relevant[:POST_LIMIT]
        ]
    except Exception as exc:
        return _failed("instagram", exc)

    return FetchResult(source="instagram", items=items)
