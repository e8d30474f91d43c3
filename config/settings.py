from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./news_relay.db"

    # Server
    API_HOST: str = "0.0.0.0"
    DASHBOARD_PORT: int = 8001
    LOG_LEVEL: str = "INFO"
    SHUTDOWN_TOKEN: str = ""

    # Sources
    SOURCES: str = "news,changelog,forum_updates,forum_project_news"

    # Fetch behaviour
    INTER_SOURCE_DELAY_SECONDS: float = Field(15.0, ge=0)
    SUSPEND_MINUTES: int = Field(30, gt=0)
    REQUEST_TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    MAX_REDIRECTS: int = Field(5, ge=0)
    USER_AGENT: str = "NewsRelay/0.1 (+https://github.com)"

    # Stats
    STATS_FLUSH_HOURS: int = Field(24, gt=0)

    # Delivery
    NEWS_WEBHOOK_URL: str = ""
    ALERT_WEBHOOK_URL: str = ""
    ARTIFACT_DIR: str = "./artifacts"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
