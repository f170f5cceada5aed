"""Application configuration using Pydantic Settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB
    mongodb_url: str
    mongodb_db_name: str = "goal_pacing"

    # Tokens are issued by the external identity provider; we only verify them
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 60

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Scheduling defaults for users without saved settings
    default_daily_hours: float = 6.0
    default_work_days: str = "1,2,3,4,5"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def default_work_days_list(self) -> list[int]:
        """Parse default work days (0 = Sunday) from comma-separated string."""
        return [int(day) for day in self.default_work_days.split(",") if day.strip()]


settings = Settings()
