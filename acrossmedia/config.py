from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./acrossmedia.db"

    # JWT (session cookie)
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    jwt_issuer: str = "across-media-app"
    jwt_audience: str = "across-media-users"

    # Session cookie
    auth_cookie_name: str = "auth_token"
    cookie_secure: bool = False  # True behind HTTPS in production

    # Frontend URL for CORS and links in emails
    frontend_url: str = "http://localhost:5173"
    # Public URL of this API (approval links point here)
    backend_url: str = "http://localhost:3001"

    # Redis (optional shared store for login security state; empty = in-process memory)
    redis_url: str = ""  # e.g. redis://localhost:6379/0

    # Email provider (Resend-compatible HTTP API); empty key = emails are logged and skipped
    email_api_url: str = "https://api.resend.com/emails"
    email_api_key: str = ""
    email_from: str = "AcrossMedia <no-reply@acrossmedia.in>"
    email_timeout_seconds: int = 10

    # YouTube Data API
    youtube_api_key: str = ""

    # Superadmin bootstrap (python -m acrossmedia.bootstrap)
    superadmin_username: str = "superadmin"
    superadmin_email: str = ""
    superadmin_password: str = ""

    # Login rate limit: fixed window per IP + user agent
    login_rate_limit_window_seconds: int = 15 * 60
    login_rate_limit_max: int = 5

    # Progressive delay (same window as the rate limit)
    slowdown_delay_after: int = 10
    slowdown_delay_ms: int = 500
    slowdown_max_delay_ms: int = 20_000

    # Account lockout
    lockout_max_failed_attempts: int = 5
    lockout_duration_seconds: int = 30 * 60

    # Anomaly detection
    anomaly_window_seconds: int = 30
    anomaly_max_attempts: int = 3
    anomaly_history_size: int = 10
    anomaly_retention_seconds: int = 60 * 60

    # CAPTCHA
    captcha_ttl_seconds: int = 5 * 60

    # Registration throttling for pending accounts
    registration_max_attempts: int = 3
    registration_block_minutes: int = 10

    # Email approval link lifetime
    approval_token_expire_minutes: int = 60

    # Logging
    log_level: str = "INFO"

    # Janitor interval for in-memory security state
    security_cleanup_interval_seconds: int = 10 * 60

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
