from __future__ import annotations

import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from content_ingest.services.http import RetryPolicy


def _to_bool(v: str | None, default: bool = False) -> bool:
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}

def _to_int(v: str | None, default: int) -> int:
    if v is None or not v.strip():
        return default
    return int(v.strip())

def _to_list(v: str | None) -> list[str]:
    if v is None or not v.strip():
        return []
    return [x.strip() for x in v.split(",") if x.strip()]

def _to_opt_str(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    return v.strip()



class Settings(BaseModel):
    database_url: str = Field(default="sqlite:///data/content.db")
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    lock_path: str = Field(default="data/ingest.lock")

    publish_window_start: int = Field(default=9, ge=0, le=24)
    publish_window_end: int = Field(default=23, ge=0, le=24)
    summary_max_length: int = Field(default=140, ge=1)

    topic_daily_count: int = Field(default=26, ge=0)
    topic_seed: str | None = Field(default=None)
    ranking_seed: str | None = Field(default=None)
    summary_weekly_key: str | None = Field(default=None)
    summary_monthly_key: str | None = Field(default=None)

    rss_feeds: list[str] = Field(default_factory=list)
    rss_max_items_per_feed: int = Field(default=5, ge=0)

    fetch_retries: int = Field(default=2, ge=0)
    fetch_timeout_ms: int = Field(default=8000, gt=0)
    fetch_backoff_ms: int = Field(default=800, ge=0)
    user_agent: str = Field(default="content-ingest/1.0")

    catalog_api_url: str = Field(default="https://api.example.com/affiliate/v3/ItemList")
    catalog_api_id: str = Field(default="")
    catalog_affiliate_id: str = Field(default="")
    catalog_hits_per_page: int = Field(default=20, ge=1, le=100)
    catalog_max_pages: int = Field(default=1, ge=1)

    notify_webhook_url: str = Field(default="")
    telegram_enabled: bool = Field(default=False)
    telegram_bot_token: str = Field(default="")
    telegram_chat_id: str = Field(default="")

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            retries=self.fetch_retries,
            timeout_ms=self.fetch_timeout_ms,
            backoff_ms=self.fetch_backoff_ms,
        )

    # Date-derived defaults are resolved per call so a long-lived process
    # does not keep yesterday's keys.
    def resolved_topic_seed(self, now: datetime | None = None) -> str:
        return self.topic_seed or _utc_today(now)

    def resolved_ranking_seed(self, now: datetime | None = None) -> str:
        return self.ranking_seed or _utc_today(now)

    def resolved_summary_keys(self, now: datetime | None = None) -> tuple[str, str]:
        today = _utc_today(now)
        return (self.summary_weekly_key or today, self.summary_monthly_key or today[:7])


def _utc_today(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/content.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        lock_path=os.getenv("LOCK_PATH", "data/ingest.lock"),
        publish_window_start=_to_int(os.getenv("PUBLISH_WINDOW_START"), 9),
        publish_window_end=_to_int(os.getenv("PUBLISH_WINDOW_END"), 23),
        summary_max_length=_to_int(os.getenv("SUMMARY_MAX_LENGTH"), 140),
        topic_daily_count=_to_int(os.getenv("TOPIC_DAILY_COUNT"), 26),
        topic_seed=_to_opt_str(os.getenv("TOPIC_SEED")),
        ranking_seed=_to_opt_str(os.getenv("RANKING_SEED")),
        summary_weekly_key=_to_opt_str(os.getenv("SUMMARY_WEEKLY_KEY")),
        summary_monthly_key=_to_opt_str(os.getenv("SUMMARY_MONTHLY_KEY")),
        rss_feeds=_to_list(os.getenv("RSS_FEEDS")),
        rss_max_items_per_feed=_to_int(os.getenv("RSS_MAX_ITEMS_PER_FEED"), 5),
        fetch_retries=_to_int(os.getenv("FETCH_RETRIES"), 2),
        fetch_timeout_ms=_to_int(os.getenv("FETCH_TIMEOUT_MS"), 8000),
        fetch_backoff_ms=_to_int(os.getenv("FETCH_BACKOFF_MS"), 800),
        user_agent=os.getenv("USER_AGENT", "content-ingest/1.0"),
        catalog_api_url=os.getenv("CATALOG_API_URL", "https://api.example.com/affiliate/v3/ItemList"),
        catalog_api_id=os.getenv("CATALOG_API_ID", ""),
        catalog_affiliate_id=os.getenv("CATALOG_AFFILIATE_ID", ""),
        catalog_hits_per_page=_to_int(os.getenv("CATALOG_HITS_PER_PAGE"), 20),
        catalog_max_pages=_to_int(os.getenv("CATALOG_MAX_PAGES"), 1),
        notify_webhook_url=os.getenv("NOTIFY_WEBHOOK_URL", ""),
        telegram_enabled=_to_bool(os.getenv("TELEGRAM_ENABLED"), False),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", ""),
    )


_settings: Settings | None = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
