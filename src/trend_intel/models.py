"""Data models for the trend intelligence workflow."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NewsItem(BaseModel):
    """Normalized news search hit."""

    title: str
    url: str
    description: str = ""
    published_at: Optional[str] = Field(
        None, description="Publication timestamp as reported by the API."
    )
    source: str = Field("", description="Publisher name.")


class VideoItem(BaseModel):
    """Normalized video search hit."""

    title: str
    url: str
    description: str = ""
    published_at: Optional[str] = None
    channel_title: str = ""


class PostItem(BaseModel):
    """Normalized social post from the account's media listing."""

    caption: str = ""
    url: Optional[str] = Field(None, description="Permalink to the post.")
    timestamp: Optional[str] = None


class SourceCounts(BaseModel):
    news: int
    youtube: int
    instagram: int


class SourceBundle(BaseModel):
    """Everything fetched for a single analysis run."""

    model_config = ConfigDict(frozen=True)

    news: List[NewsItem] = Field(default_factory=list)
    youtube: List[VideoItem] = Field(default_factory=list)
    instagram: List[PostItem] = Field(default_factory=list)
    degraded_sources: List[str] = Field(
        default_factory=list,
        description="Sources that came back empty because of missing config or a suppressed failure.",
    )

    @property
    def total_items(self) -> int:
        return len(self.news) + len(self.youtube) + len(self.instagram)

    def counts(self) -> SourceCounts:
        return SourceCounts(
            news=len(self.news),
            youtube=len(self.youtube),
            instagram=len(self.instagram),
        )


class AnalysisResult(BaseModel):
    """Model output: narrative summary, observed patterns, strategy ideas."""

    summary: str
    patterns: List[str] = Field(default_factory=list)
    strategies: List[str] = Field(default_factory=list)
    degraded: bool = Field(
        False, description="True only for the fixed fallback result."
    )


class AnalysisResponse(BaseModel):
    """Payload returned by the trigger route and written by the CLI."""

    timestamp: str
    summary: str
    patterns: List[str]
    strategies: List[str]
    sources: SourceCounts
