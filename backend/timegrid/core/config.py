from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def _split_list(value: str | list[str]) -> list[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Timegrid API"
    api_prefix: str = "/api"

    database_url: str = "sqlite+pysqlite:///./timegrid.db"
    log_level: str = "INFO"

    max_request_size_bytes: int = 2_500_000

    default_institute_id: str = "default"

    # Day shape used when a generation request carries no timeSlotConfig.
    default_day_start: str = "09:00"
    default_day_end: str = "17:00"
    default_session_minutes: int = 60
    default_short_break_minutes: int = 10
    default_lunch_start: str = "12:00"
    default_lunch_minutes: int = 60

    working_days: list[str] = list(WEEKDAYS)
    default_rooms: list[str] = ["Room 101", "Room 102", "Room 103"]

    conflict_lookup: Literal["index", "scan"] = "index"

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", "working_days", "default_rooms", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        return _split_list(value)


@lru_cache
def get_settings() -> Settings:
    return Settings()
