"""Fan-out/join over the three source fetchers."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from .config import Settings
from .fetchers import FetchResult, fetch_news, fetch_posts, fetch_videos
from .models import SourceBundle

logger = logging.getLogger(__name__)

FetcherFn = Callable[[Settings], FetchResult]


def fetch_all(
    settings: Settings,
    *,
    news_fn: Optional[FetcherFn] = None,
    video_fn: Optional[FetcherFn] = None,
    post_fn: Optional[FetcherFn] = None,
) -> SourceBundle:
    """
    Run the three fetchers concurrently and wait for all of them.

    Fetchers never raise, so one empty source does not affect the others.
    Anything that does escape (executor setup, a programming error) propagates.
    """
    fetchers = {
        "news": news_fn or fetch_news,
        "youtube": video_fn or fetch_videos,
        "instagram": post_fn or fetch_posts,
    }
    logger.info("Fetching data from all sources...")

    with ThreadPoolExecutor(max_workers=len(fetchers)) as executor:
        futures = {
            name: executor.submit(fn, settings) for name, fn in fetchers.items()
        }
        results = {name: future.result() for name, future in futures.items()}

    bundle = SourceBundle(
        news=results["news"].items,
        youtube=results["youtube"].items,
        instagram=results["instagram"].items,
        degraded_sources=[name for name, res in results.items() if res.degraded],
    )
    logger.info(
        "Fetched: %d news, %d videos, %d posts",
        len(bundle.news),
        len(bundle.youtube),
        len(bundle.instagram),
    )
    return bundle
