from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/goalplan"
    storage_backend: str = "memory"  # "memory" | "sql"
    default_tz: str = "UTC"
    service_api_key: str | None = None
    log_level: str = "INFO"

    # Access tokens
    jwt_secret: str = "change-me-to-a-long-random-secret-value"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080

    # Login lockout
    login_max_failed_attempts: int = 5
    login_lockout_minutes: int = 30

    # Guest daily quotas (reset at local midnight in default_tz)
    guest_daily_goal_limit: int = 3
    guest_daily_report_limit: int = 1

    # Plan report assumes this capacity when the goal has none
    report_default_monthly_capacity: float | None = 300.0

    # External member directory (sync disabled unless url + key are set)
    member_directory_url: str | None = None
    member_directory_api_key: str | None = None
    member_directory_site_id: str | None = None
    member_directory_timeout_seconds: float = 10.0

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
