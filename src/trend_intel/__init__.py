"""Package for summarizing Pune & PCMC real-estate trends with OpenAI."""

__all__ = ["config", "models", "pipeline"]
