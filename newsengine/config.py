import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Go up one level from newsengine/ to root/
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# ---- Fixed domain constants (not configurable per request) ----
CACHE_TTL = timedelta(minutes=15)
DECAY_K = 0.08
PROFILE_WINDOW_DAYS = 14
FALLBACK_SUMMARY_CHARS = 200
FALLBACK_CATEGORY = "General"


@dataclass(frozen=True)
class RankingWeights:
    like: float = 1.0
    comment: float = 2.0
    share: float = 1.5
    poll_vote: float = 1.0
    city_boost: float = 1.3
    source_boost: float = 1.2
    category_boost: float = 1.15
    keyword_step: float = 0.1


WEIGHTS = RankingWeights()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


@dataclass
class Settings:
    db_url: str = "sqlite:///news_engine.db"
    newsapi_key: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-latest"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash"
    source_timeout: float = 10.0
    summary_timeout: float = 20.0
    fetch_page_size: int = 30
    auth_url: str = ""
    auth_api_key: str = ""
    rss_lang: str = "en"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_url=os.getenv("DB_URL", "sqlite:///news_engine.db"),
            newsapi_key=os.getenv("NEWSAPI_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-latest"),
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            google_model=os.getenv("GOOGLE_MODEL", "gemini-2.0-flash"),
            source_timeout=_float_env("SOURCE_TIMEOUT", 10.0),
            summary_timeout=_float_env("SUMMARY_TIMEOUT", 20.0),
            fetch_page_size=int(os.getenv("FETCH_PAGE_SIZE", "30")),
            auth_url=os.getenv("AUTH_URL", ""),
            auth_api_key=os.getenv("AUTH_API_KEY", ""),
            rss_lang=os.getenv("RSS_LANG", "en"),
        )

    @property
    def summary_providers(self) -> list:
        keys = (("openai", self.openai_api_key), ("anthropic", self.anthropic_api_key),
                ("google", self.google_api_key))
        return [name for name, key in keys if key]

    def describe(self) -> dict:
        # Safe view for startup logging (no secrets)
        return {
            "db_url": self.db_url.split("@")[-1],
            "newsapi": bool(self.newsapi_key),
            "summary_providers": self.summary_providers,
            "auth": bool(self.auth_url),
        }

