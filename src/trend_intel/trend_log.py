"""Append analysis runs to the Trends log."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .config import Settings
from .locks import locked
from .log_store import (
    APPEND_RANGE,
    HEADER,
    HEADER_RANGE,
    LIST_DELIMITER,
    RAW_INPUT,
    ValuesStore,
    open_spreadsheet,
    store_key,
)
from .models import AnalysisResult, SourceCounts

logger = logging.getLogger(__name__)


@dataclass
class LogRow:
    timestamp: str
    news_count: int
    youtube_count: int
    instagram_count: int
    summary: str
    patterns: str
    strategies: str

    def to_values(self) -> List[object]:
        return [
            self.timestamp,
            self.news_count,
            self.youtube_count,
            self.instagram_count,
            self.summary,
            self.patterns,
            self.strategies,
        ]


def build_log_row(
    timestamp: str, analysis: AnalysisResult, counts: SourceCounts
) -> LogRow:
    return LogRow(
        timestamp=timestamp,
        news_count=counts.news,
        youtube_count=counts.youtube,
        instagram_count=counts.instagram,
        summary=analysis.summary,
        patterns=LIST_DELIMITER.join(analysis.patterns),
        strategies=LIST_DELIMITER.join(analysis.strategies),
    )


def ensure_header(store: ValuesStore) -> bool:
    """Write the header row when it is missing; return True if it was written."""
    try:
        existing = store.values_get(HEADER_RANGE).get("values")
    except Exception as exc:
        # Usually the sheet does not exist yet; writing the header creates the range.
        logger.debug("Header check failed (%s); writing header", exc)
        existing = None
    if existing:
        return False
    store.values_update(HEADER_RANGE, params=RAW_INPUT, body={"values": [HEADER]})
    return True


def log_analysis(
    timestamp: str,
    analysis: AnalysisResult,
    counts: SourceCounts,
    settings: Settings,
    spreadsheet: Optional[ValuesStore] = None,
) -> bool:
    """
    Append one row for this run.

    Returns False without writing when the log store is not configured.
    Raises on any write failure so the caller decides whether it is fatal.
    """
    if spreadsheet is None and not settings.log_store_configured:
        logger.warning("Google Sheets credentials not configured. Skipping logging.")
        return False

    row = build_log_row(timestamp, analysis, counts)
    try:
        store = spreadsheet if spreadsheet is not None else open_spreadsheet(settings)
        with locked(store_key(settings)):
            ensure_header(store)
            store.values_append(
                APPEND_RANGE, params=RAW_INPUT, body={"values": [row.to_values()]}
            )
    except Exception:
        logger.exception("Error logging to Google Sheets")
        raise

    logger.info("Successfully logged to Google Sheets")
    return True
