import json
from datetime import datetime, timezone
from functools import partial

import httpx
import pytest

from trend_intel.aggregator import fetch_all
from trend_intel.analyzer import analyze_trends
from trend_intel.config import Settings
from trend_intel.fetchers import fetch_news, fetch_posts, fetch_videos
from trend_intel.models import AnalysisResult, SourceBundle
from trend_intel.pipeline import run_trend_analysis, to_response, utc_timestamp

from test_analyzer import FakeClient


def _settings() -> Settings:
    return Settings(
        _env_file=None,
        newsapi_key="news",
        youtube_api_key="yt",
        instagram_access_token=None,
        openai_api_key="sk-test",
    )


def _news_transport():
    articles = [
        {
            "title": "Hinjewadi metro boosts rentals",
            "url": "https://example.com/a",
            "description": "Rentals up",
            "publishedAt": "2025-03-01",
            "source": {"name": "ET Realty"},
        },
        {
            "title": "Hinjewadi metro boosts rentals",
            "url": "https://www.reddit.com/r/pune/b",
            "description": "Repost",
            "publishedAt": "2025-03-01",
            "source": {"name": "Reddit"},
        },
        {
            "title": "Kolte Patil launches in Wakad",
            "url": "https://example.org/c",
            "description": "New launch",
            "publishedAt": "2025-03-02",
            "source": {"name": "Mint"},
        },
    ]
    return httpx.MockTransport(lambda request: httpx.Response(200, json={"articles": articles}))


def _video_transport():
    # Two distinct videos overall; repeated queries return the same pair.
    items = [
        {"id": {"videoId": vid}, "snippet": {"title": vid, "description": "", "publishedAt": "", "channelTitle": "C"}}
        for vid in ("v1", "v2")
    ]
    return httpx.MockTransport(lambda request: httpx.Response(200, json={"items": items}))


def test_end_to_end_counts_and_single_model_call():
    settings = _settings()
    client = FakeClient(
        json.dumps({"summary": "Demand is shifting west.", "patterns": ["P"], "strategies": ["S"]})
    )

    def fetch(settings):
        return fetch_all(
            settings,
            news_fn=partial(fetch_news, client=httpx.Client(transport=_news_transport())),
            video_fn=partial(fetch_videos, client=httpx.Client(transport=_video_transport())),
            post_fn=fetch_posts,
        )

    def analyze(news, youtube, instagram, settings):
        return analyze_trends(
            news, youtube, instagram, settings, client=client, history_fn=lambda s: []
        )

    logged = []

    def log(timestamp, analysis, counts, settings):
        logged.append((timestamp, counts))
        return True

    result = run_trend_analysis(
        settings,
        fetch_fn=fetch,
        analyze_fn=analyze,
        log_fn=log,
        clock=lambda: datetime(2025, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc),
    )

    assert result.bundle.counts().model_dump() == {"news": 2, "youtube": 2, "instagram": 0}
    assert result.bundle.total_items == 4
    assert result.bundle.degraded_sources == ["instagram"]
    assert len(client.chat.completions.calls) == 1
    assert result.timestamp == "2025-03-04T05:06:07.890Z"
    assert result.logged is True
    assert logged[0][1].news == 2

    body = to_response(result).model_dump()
    assert body == {
        "timestamp": "2025-03-04T05:06:07.890Z",
        "summary": "Demand is shifting west.",
        "patterns": ["P"],
        "strategies": ["S"],
        "sources": {"news": 2, "youtube": 2, "instagram": 0},
    }


def _bundle(settings):
    return SourceBundle()


def _analysis(news, youtube, instagram, settings):
    return AnalysisResult(summary="ok", patterns=["p"], strategies=["s"])


def test_logging_failure_does_not_fail_run():
    def log(*args):
        raise RuntimeError("sheet missing")

    result = run_trend_analysis(
        Settings(_env_file=None), fetch_fn=_bundle, analyze_fn=_analysis, log_fn=log
    )

    assert result.analysis.summary == "ok"
    assert result.logged is False
    assert result.log_error == "sheet missing"
    assert "log" not in json.dumps(to_response(result).model_dump())


def test_skip_log_never_calls_logger():
    def log(*args):
        raise AssertionError("logger should not be called")

    result = run_trend_analysis(
        Settings(_env_file=None),
        fetch_fn=_bundle,
        analyze_fn=_analysis,
        log_fn=log,
        skip_log=True,
    )
    assert result.logged is False
    assert result.log_error is None


def test_fetch_failure_propagates():
    def fetch(settings):
        raise RuntimeError("executor unavailable")

    with pytest.raises(RuntimeError, match="executor unavailable"):
        run_trend_analysis(Settings(_env_file=None), fetch_fn=fetch, analyze_fn=_analysis)


def test_utc_timestamp_normalizes_offsets():
    from datetime import timedelta

    ist = timezone(timedelta(hours=5, minutes=30))
    assert utc_timestamp(datetime(2025, 1, 1, 5, 30, tzinfo=ist)) == "2025-01-01T00:00:00.000Z"
