"""Strategy memory read back from the Trends log."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .config import Settings
from .log_store import STRATEGIES_RANGE, ValuesStore, open_spreadsheet

logger = logging.getLogger(__name__)


def split_strategy_cells(rows: Iterable[Sequence[str]]) -> List[str]:
    """Flatten pipe-joined strategy cells into one list, preserving row order."""
    strategies: List[str] = []
    for row in rows:
        if not row or not row[0]:
            continue
        parts = (part.strip() for part in str(row[0]).split("|"))
        strategies.extend(part for part in parts if part)
    return strategies


def load_past_strategies(
    settings: Settings, spreadsheet: Optional[ValuesStore] = None
) -> List[str]:
    """
    Return every strategy previously written to the log.

    Memory is silently disabled (empty list) when the log store is not
    configured or cannot be read.
    """
    if spreadsheet is None and not settings.log_store_configured:
        logger.warning("Google Sheets credentials not configured. Memory disabled.")
        return []

    try:
        store = spreadsheet if spreadsheet is not None else open_spreadsheet(settings)
        response = store.values_get(STRATEGIES_RANGE)
    except Exception as exc:
        logger.warning("Error fetching past strategies: %s", exc)
        return []

    strategies = split_strategy_cells(response.get("values") or [])
    logger.info("Loaded %d past strategies from memory", len(strategies))
    return strategies
