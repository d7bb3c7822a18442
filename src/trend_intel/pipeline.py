"""Orchestration of one trend analysis run: fetch, analyze, log.

Aggregation and analysis failures propagate to the caller. Logging is best
effort: a log-store error is recorded on the result and never fails the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from .aggregator import fetch_all
from .analyzer import analyze_trends
from .config import Settings, get_settings
from .models import (
    AnalysisResponse,
    AnalysisResult,
    NewsItem,
    PostItem,
    SourceBundle,
    SourceCounts,
    VideoItem,
)
from .trend_log import log_analysis

logger = logging.getLogger(__name__)

FetchFn = Callable[[Settings], SourceBundle]
AnalyzeFn = Callable[
    [Sequence[NewsItem], Sequence[VideoItem], Sequence[PostItem], Settings],
    AnalysisResult,
]
LogFn = Callable[[str, AnalysisResult, SourceCounts, Settings], bool]


@dataclass
class TrendRunResult:
    timestamp: str
    bundle: SourceBundle
    analysis: AnalysisResult
    logged: bool = False
    log_error: str | None = None


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC instant with millisecond precision and a Z suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def run_trend_analysis(
    settings: Optional[Settings] = None,
    *,
    fetch_fn: FetchFn | None = None,
    analyze_fn: AnalyzeFn | None = None,
    log_fn: LogFn | None = None,
    clock: Callable[[], datetime] | None = None,
    skip_log: bool = False,
) -> TrendRunResult:
    """Run fetch -> analyze -> log once and return everything produced."""
    settings = settings or get_settings()
    fetch_fn = fetch_fn or fetch_all
    analyze_fn = analyze_fn or analyze_trends
    log_fn = log_fn or log_analysis

    logger.info("Starting trend analysis...")
    bundle = fetch_fn(settings)
    analysis = analyze_fn(bundle.news, bundle.youtube, bundle.instagram, settings)
    timestamp = utc_timestamp(clock() if clock else None)

    result = TrendRunResult(timestamp=timestamp, bundle=bundle, analysis=analysis)
    if skip_log:
        return result

    try:
        result.logged = bool(log_fn(timestamp, analysis, bundle.counts(), settings))
    except Exception as exc:
        logger.error("Failed to log to Google Sheets: %s", exc)
        result.log_error = str(exc)
    return result


def to_response(result: TrendRunResult) -> AnalysisResponse:
    return AnalysisResponse(
        timestamp=result.timestamp,
        summary=result.analysis.summary,
        patterns=result.analysis.patterns,
        strategies=result.analysis.strategies,
        sources=result.bundle.counts(),
    )
