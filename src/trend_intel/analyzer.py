"""Trend analysis over the fetched bundle with one structured model call.

Steps:
- load past strategies from the log (negative constraint for the model)
- render each source as bullets and fill the prompt template
- request a single JSON object from the chat model
- parse and default missing fields

Any failure yields the fixed degraded result instead of raising, so callers
never special-case a missing analysis.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from string import Template
from typing import Any, Callable, Dict, List, Optional, Sequence

from openai import OpenAI

from .config import Settings
from .history import load_past_strategies
from .models import AnalysisResult, NewsItem, PostItem, VideoItem
from .schema import validate_analysis_payload

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"
ANALYSIS_PROMPT = "trend_analysis.txt"

SYSTEM_PROMPT = (
    "You are an expert real estate marketing analyst. Always respond with valid JSON."
)
CAPTION_PREVIEW_CHARS = 200
MISSING_SUMMARY = "No summary generated"
FALLBACK_SUMMARY = (
    "Analysis could not be completed due to an error. "
    "Please check your OpenAI API configuration."
)
FALLBACK_PATTERNS = ("Unable to analyze patterns",)
FALLBACK_STRATEGIES = ("Unable to generate strategies",)

HistoryFn = Callable[[Settings], List[str]]


def degraded_result() -> AnalysisResult:
    """The fixed placeholder returned whenever analysis cannot complete."""
    return AnalysisResult(
        summary=FALLBACK_SUMMARY,
        patterns=list(FALLBACK_PATTERNS),
        strategies=list(FALLBACK_STRATEGIES),
        degraded=True,
    )


def build_client(api_key: Optional[str] = None) -> OpenAI:
    """Create an OpenAI client; separated for easier testing."""
    return OpenAI(api_key=api_key)


def _require_api_key(settings: Settings) -> str:
    if not settings.openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY is required. Set it in the environment or .env file."
        )
    return settings.openai_api_key


# --- Prompt rendering -----------------------------------------------------

def render_news(items: Sequence[NewsItem]) -> str:
    return "\n".join(
        f"- {a.title} ({a.source}, {a.published_at}): {a.description}" for a in items
    )


def render_videos(items: Sequence[VideoItem]) -> str:
    return "\n".join(
        f"- {v.title} ({v.channel_title}, {v.published_at}): {v.description}"
        for v in items
    )


def render_posts(items: Sequence[PostItem]) -> str:
    return "\n".join(
        f"- {p.caption[:CAPTION_PREVIEW_CHARS]}... ({p.timestamp})" for p in items
    )


def render_history(past_strategies: Sequence[str]) -> str:
    if not past_strategies:
        return ""
    numbered = "\n".join(f"{i}. {s}" for i, s in enumerate(past_strategies, start=1))
    return f"\n\nPREVIOUSLY GENERATED STRATEGIES (DO NOT REPEAT):\n{numbered}"


def _load_prompt_template(filename: str = ANALYSIS_PROMPT) -> Template:
    return Template((PROMPTS_DIR / filename).read_text(encoding="utf-8"))


def build_prompt(
    news: Sequence[NewsItem],
    youtube: Sequence[VideoItem],
    instagram: Sequence[PostItem],
    past_strategies: Sequence[str] = (),
) -> str:
    return _load_prompt_template().substitute(
        news_content=render_news(news),
        video_content=render_videos(youtube),
        post_content=render_posts(instagram),
        past_strategies=render_history(past_strategies),
    )


# --- Response handling ----------------------------------------------------

def _completion_text_or_raise(completion: Any) -> str:
    """Extract the message text or raise when the model returned nothing."""
    choices = getattr(completion, "choices", None) or []
    if not choices:
        raise RuntimeError("Analysis response contained no choices.")
    content = getattr(choices[0].message, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise RuntimeError("No content received from OpenAI")
    return content


def parse_analysis(content: str) -> AnalysisResult:
    """
    Decode the model's JSON object into an AnalysisResult.

    Missing (or null/empty) fields are defaulted one by one; a body that is not
    JSON, or has fields of the wrong type, raises ValueError.
    """
    try:
        data: Dict[str, Any] = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Analysis response is not valid JSON: {exc}") from exc
    validate_analysis_payload(data)
    return AnalysisResult(
        summary=data.get("summary") or MISSING_SUMMARY,
        patterns=data.get("patterns") or [],
        strategies=data.get("strategies") or [],
    )


def analyze_trends(
    news: Sequence[NewsItem],
    youtube: Sequence[VideoItem],
    instagram: Sequence[PostItem],
    settings: Settings,
    *,
    client: Optional[OpenAI] = None,
    history_fn: Optional[HistoryFn] = None,
) -> AnalysisResult:
    """Summarize the bundle and propose fresh strategies; never raises."""
    logger.info("Starting AI analysis...")
    history_fn = history_fn or load_past_strategies
    try:
        past_strategies = history_fn(settings)
        prompt = build_prompt(news, youtube, instagram, past_strategies)
        active_client = client or build_client(_require_api_key(settings))
        completion = active_client.chat.completions.create(
            model=settings.analysis_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            response_format={"type": "json_object"},
        )
        result = parse_analysis(_completion_text_or_raise(completion))
    except Exception:
        logger.exception("Error in AI analysis; returning degraded result")
        return degraded_result()

    logger.info("AI analysis complete")
    return result
