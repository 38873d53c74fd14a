import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

load_dotenv()


class Settings(BaseSettings):
    # --- REST backend ---
    API_BASE_URL: str = "http://localhost:5000"
    REQUEST_TIMEOUT: float = 10.0
    ORGANIZATION_HEADER: str = "X-Organization-ID"
    DEFAULT_ORGANIZATION_ID: Optional[str] = None

    # --- Reference data refresh ---
    REFRESH_INTERVAL: float = 300.0

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="REPAIR_PRICING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Basic logging setup for host applications; the library itself never calls it."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


logger.debug(
    "Configuration loaded: API=%s refresh=%ss timeout=%ss",
    settings.API_BASE_URL,
    settings.REFRESH_INTERVAL,
    settings.REQUEST_TIMEOUT,
)
