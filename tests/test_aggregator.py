import threading

import pytest

from trend_intel.aggregator import fetch_all
from trend_intel.config import Settings
from trend_intel.fetchers import FetchResult
from trend_intel.models import NewsItem, PostItem, VideoItem


def _settings() -> Settings:
    return Settings(_env_file=None)


def test_fetch_all_merges_sources_and_counts():
    def news(settings):
        return FetchResult(
            source="news",
            items=[NewsItem(title="A", url="https://example.com/a", source="ET")],
        )

    def videos(settings):
        return FetchResult(
            source="youtube",
            items=[
                VideoItem(title="V1", url="https://www.youtube.com/watch?v=1"),
                VideoItem(title="V2", url="https://www.youtube.com/watch?v=2"),
            ],
        )

    def posts(settings):
        return FetchResult(source="instagram", status="not_configured")

    bundle = fetch_all(_settings(), news_fn=news, video_fn=videos, post_fn=posts)

    assert bundle.total_items == 3
    assert bundle.counts().model_dump() == {"news": 1, "youtube": 2, "instagram": 0}
    assert bundle.degraded_sources == ["instagram"]


def test_fetch_all_runs_fetchers_concurrently():
    # Each fetcher waits for the others; a sequential run would time out.
    barrier = threading.Barrier(3, timeout=5)

    def make(source, item):
        def fetcher(settings):
            barrier.wait()
            return FetchResult(source=source, items=[item])

        return fetcher

    bundle = fetch_all(
        _settings(),
        news_fn=make("news", NewsItem(title="N", url="https://e.com/n")),
        video_fn=make("youtube", VideoItem(title="V", url="https://y.com/v")),
        post_fn=make("instagram", PostItem(caption="pune", url="https://ig/p")),
    )

    assert bundle.total_items == 3
    assert bundle.degraded_sources == []


def test_fetch_all_propagates_unexpected_errors():
    def broken(settings):
        raise RuntimeError("boom")

    def empty(settings):
        return FetchResult(source="x")

    with pytest.raises(RuntimeError, match="boom"):
        fetch_all(_settings(), news_fn=broken, video_fn=empty, post_fn=empty)
