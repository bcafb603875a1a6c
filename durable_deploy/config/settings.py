# config/settings.py
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DURABLE_DEPLOY_", extra="ignore")

    # Control plane
    API_BASE_URL: str = "https://api.cloudflare.com/client/v4"
    API_TOKEN: Optional[str] = None
    AUTH_EMAIL: Optional[str] = None
    AUTH_KEY: Optional[str] = None
    REQUEST_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # Logging knobs
    LOGGER_NAME: str = "durable-deploy"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_FILE_NAME: str = "deploy.log"
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 3


settings = Settings()
