# backend/tourbooking/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/tourbooking.db"
    redis_url: str = "redis://localhost:6379/0"

    # Slot engine
    slot_step_minutes: int = 30
    default_buffer_minutes: int = 60
    exclusive_requires_empty_day: bool = False

    # Pricing
    discount_threshold: int = 5
    discount_rate: float = 0.10

    # Orders
    order_expiration_minutes: int = 15
    expiration_check_interval: int = 60  # seconds
    enable_background_jobs: bool = True
    skip_payment: bool = False

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path is resolved against the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
