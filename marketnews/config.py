import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SOURCE_URL = "https://analysis.hfm.com/en-za/market-news/"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_STATIC_DIR = os.path.join(os.path.dirname(__file__), "public")


def _env_bool(name: str, default: str = "true") -> bool:
    return (os.getenv(name, default) or "").lower() in ("1", "true", "yes", "y", "on")


class Settings(BaseModel):
    port: int = 5000
    database_url: str = "sqlite:///./market_news.db"
    source_url: str = DEFAULT_SOURCE_URL
    scrape_interval_seconds: float = 120
    ready_timeout_ms: int = 10000
    consent_timeout_ms: int = 5000
    source_offset_hours: int = 2
    browser_headless: bool = True
    browser_user_agent: str = DEFAULT_USER_AGENT
    static_dir: str = DEFAULT_STATIC_DIR
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Lê as variáveis de ambiente (e o .env, se existir) para Settings."""
    return Settings(
        port=int(os.getenv("PORT", "5000")),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./market_news.db"),
        source_url=os.getenv("SOURCE_URL", DEFAULT_SOURCE_URL),
        scrape_interval_seconds=float(os.getenv("SCRAPE_INTERVAL_SECONDS", "120")),
        ready_timeout_ms=int(os.getenv("READY_TIMEOUT_MS", "10000")),
        consent_timeout_ms=int(os.getenv("CONSENT_TIMEOUT_MS", "5000")),
        source_offset_hours=int(os.getenv("SOURCE_OFFSET_HOURS", "2")),
        browser_headless=_env_bool("BROWSER_HEADLESS", "true"),
        browser_user_agent=os.getenv("BROWSER_USER_AGENT", DEFAULT_USER_AGENT),
        static_dir=os.getenv("STATIC_DIR", DEFAULT_STATIC_DIR),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


settings = load_settings()
