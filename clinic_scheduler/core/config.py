from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    CLINIC_API_BASE_URL: str | None = None
    CLINIC_API_TOKEN: str | None = None
    CLINIC_API_TIMEOUT_SECONDS: float = 10.0

    BUSINESS_TIMEZONE: str = "Asia/Kolkata"
    EDIT_LOCK_MINUTES: int = 120
    DEFAULT_CAPACITY_DAYS: int = 14


settings = Settings()
