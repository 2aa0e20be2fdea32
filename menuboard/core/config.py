"""
Menu Board — Configuration
All settings are read from environment variables (or .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "menuboard"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # ── PostgreSQL ────────────────────────────────────────────
    POSTGRES_HOST: str = "menu-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "menu_db"
    POSTGRES_USER: str = "menu_user"
    POSTGRES_PASSWORD: str = "menu_pass"
    DATABASE_URL: str = ""  # overrides the POSTGRES_* parts when set

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Redis ─────────────────────────────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def celery_broker_url(self) -> str:
        return self.redis_url

    @property
    def celery_result_backend(self) -> str:
        return self.redis_url

    # ── Ordering ──────────────────────────────────────────────
    TAX_RATE: float = 0.1

    # ── Optimistic Locking Retry ──────────────────────────────
    OPT_LOCK_MAX_RETRIES: int = 5
    OPT_LOCK_BASE_DELAY_MS: int = 20      # base exponential backoff delay in ms
    OPT_LOCK_MAX_DELAY_MS: int = 500      # max backoff cap in ms
    OPT_LOCK_JITTER_MS: int = 20          # random jitter range in ms

    # ── Admin Access ──────────────────────────────────────────
    JWT_SECRET_KEY: str = "CHANGE_ME_IN_PRODUCTION"
    JWT_ALGORITHM: str = "HS256"
    ADMIN_PASSWORD: str = "CHANGE_ME_IN_PRODUCTION"
    ADMIN_SESSION_HOURS: int = 24

    # ── Rate Limiting (admin login) ───────────────────────────
    RATE_LIMIT_MAX_ATTEMPTS: int = 3
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # ── External Sync ─────────────────────────────────────────
    WEBHOOK_SECRET: str = ""
    GOOGLE_SHEETS_API_KEY: str = ""
    GOOGLE_SHEETS_ID: str = ""
    GOOGLE_SHEETS_BASE_URL: str = "https://sheets.googleapis.com/v4/spreadsheets"
    SHEETS_SYNC_INTERVAL_SECONDS: int = 60
    SYNC_TIMEOUT_SECONDS: float = 30.0
    HTTP_TIMEOUT_SECONDS: float = 5.0

    # ── Exchange Rates ────────────────────────────────────────
    EXCHANGE_RATES_URL: str = "https://api.frankfurter.dev/v1/latest?base=USD&symbols=CZK,EUR,CNY"

    # ── Live Updates (SSE) ────────────────────────────────────
    SSE_KEEPALIVE_INTERVAL_SECONDS: int = 15
    SSE_RETRY_MILLISECONDS: int = 3000

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
