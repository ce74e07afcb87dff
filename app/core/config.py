import os
from decimal import Decimal
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Environment setting
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # OpenAI API KEY (daily motivation quotes)
    openai_api_key: str = os.getenv("OPENAI_API_KEY")
    MOTIVATION_MODEL = os.getenv("MOTIVATION_MODEL", "gpt-4o-mini")

    # Clerk Configuration
    CLERK_SECRET_KEY = os.getenv("CLERK_SECRET_KEY")
    AUTH_DEV_BYPASS = _as_bool(os.getenv("AUTH_DEV_BYPASS", "false"))

    # db creds
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", "studio")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_SSL = _as_bool(os.getenv("DB_SSL", "false"))

    # Booking policy
    BOOKING_CANCELLATION_CUTOFF_HOURS = int(os.getenv("BOOKING_CANCELLATION_CUTOFF_HOURS", "12"))

    # Reporting: revenue attributed to one redeemed credit
    REVENUE_PER_CREDIT = Decimal(os.getenv("REVENUE_PER_CREDIT", "10"))

    # Home EMS onboarding
    SAFETY_VIDEO_COMPLETION_PERCENT = int(os.getenv("SAFETY_VIDEO_COMPLETION_PERCENT", "90"))

    # Transient store failures on reads
    STORE_READ_RETRIES = int(os.getenv("STORE_READ_RETRIES", "2"))
    STORE_RETRY_DELAY_SECONDS = float(os.getenv("STORE_RETRY_DELAY_SECONDS", "0.2"))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]

    # Build URL with SSL requirement based on environment
    def _build_database_url(self):
        override = os.getenv("DATABASE_URL")
        if override:
            return override
        base_url = f"postgresql+asyncpg://{self.DB_USER}:{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if self.DB_SSL:
            return f"{base_url}?ssl=require"
        return base_url

    @property
    def DATABASE_URL(self):
        return self._build_database_url()

    @property
    def IS_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def IS_PRODUCTION(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
