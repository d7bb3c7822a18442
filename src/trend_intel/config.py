"""Configuration helpers for the trend intelligence agent."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every credential is optional; a missing one disables the component that
    needs it instead of failing the run.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    newsapi_key: str | None = Field(None, alias="NEWSAPI_KEY")
    youtube_api_key: str | None = Field(None, alias="YOUTUBE_API_KEY")
    instagram_access_token: str | None = Field(None, alias="INSTAGRAM_ACCESS_TOKEN")
    openai_api_key: str | None = Field(None, alias="OPENAI_API_KEY")

    sheets_client_email: str | None = Field(None, alias="GOOGLE_SHEETS_CLIENT_EMAIL")
    sheets_private_key: str | None = Field(
        None,
        alias="GOOGLE_SHEETS_PRIVATE_KEY",
        description="Service-account private key; literal \\n sequences are unescaped.",
    )
    spreadsheet_id: str | None = Field(None, alias="GOOGLE_SHEETS_SPREADSHEET_ID")

    analysis_model: str = Field(
        "gpt-4-turbo-preview",
        alias="ANALYSIS_MODEL",
        description="Chat model used for the trend analysis call.",
    )
    temperature: float = Field(
        0.8,
        alias="ANALYSIS_TEMPERATURE",
        description="Generation temperature; kept high so strategies vary between runs.",
    )
    max_tokens: int = Field(
        2500,
        alias="ANALYSIS_MAX_TOKENS",
        description="Upper bound on the generated summary, patterns and strategies.",
    )
    request_timeout: float = Field(
        10.0,
        alias="REQUEST_TIMEOUT",
        description="Per-call timeout in seconds for every source API request.",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_allow_origins: str = Field(
        "*",
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated dashboard origins allowed to call the API, or \"*\".",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def log_store_configured(self) -> bool:
        return bool(
            self.sheets_client_email and self.sheets_private_key and self.spreadsheet_id
        )

    def service_account_info(self) -> dict[str, str]:
        """Return the credential mapping expected by google-auth."""
        if not self.log_store_configured:
            raise RuntimeError(
                "GOOGLE_SHEETS_CLIENT_EMAIL, GOOGLE_SHEETS_PRIVATE_KEY and "
                "GOOGLE_SHEETS_SPREADSHEET_ID are required for the log store."
            )
        return {
            "type": "service_account",
            "client_email": self.sheets_client_email,
            "private_key": self.sheets_private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }


def get_settings() -> Settings:
    """Return a settings instance read from the current environment."""
    return Settings()
