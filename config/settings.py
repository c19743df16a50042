# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from repository.namespaces import MTIME_INDEX
from util.enums import Environment


if os.getenv("REAPER_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    REAPER_ENV: str = Field(default=Environment.DEV.value, validation_alias="REAPER_ENV")

    # Redis
    REDIS_HOST: str = Field(default="localhost", validation_alias="REAPER_REDIS_HOST")
    REDIS_PORT: int = Field(default=6379, validation_alias="REAPER_REDIS_PORT")
    REDIS_DB: int = Field(default=0, validation_alias="REAPER_REDIS_DB")
    REDIS_SOCKET_TIMEOUT: float = Field(
        default=5.0, validation_alias="REAPER_REDIS_SOCKET_TIMEOUT"
    )

    # Reaping policy
    INDEX_KEY: str = Field(default=MTIME_INDEX, validation_alias="REAPER_INDEX_KEY")
    BATCH_SIZE: int = Field(default=10, ge=1, validation_alias="REAPER_BATCH_SIZE")
    RETENTION_SECONDS: int = Field(
        default=6 * 24 * 60 * 60, validation_alias="REAPER_RETENTION_SECONDS"
    )
    # Unlink stays off until an operator explicitly turns it on.
    DELETE_ENABLED: bool = Field(default=False, validation_alias="REAPER_DELETE_ENABLED")
    WORKERS: int = Field(default=1, ge=1, validation_alias="REAPER_WORKERS")

    # Logging knobs
    LOGGER_NAME: str = "reaper"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="reaper.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
