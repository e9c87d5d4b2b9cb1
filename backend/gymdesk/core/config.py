from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "mysql+pymysql://gymuser:gympassword@db:3306/gymdesk?charset=utf8mb4"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # Security
    AES_KEY: str = ""

    # Resend
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@example.com"

    # Site
    SITE_URL: str = "http://localhost:8000"
    SITE_NAME: str = "GymDesk"
    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:3000"

    # Session
    SESSION_TIMEOUT_MINUTES: int = 60

    # Scheduler
    SCHEDULER_TIMEZONE: str = "Asia/Manila"
    EXPIRY_REMINDER_DAYS: int = 7

    # Kiosk
    TAP_COOLDOWN_MS: int = 3000
    PENDING_ASSIGNMENT_TTL_MINUTES: int = 5

    # Environment
    ENV: str = "development"
    DEBUG: bool = True

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
