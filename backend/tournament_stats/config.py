"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass, field

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class PointsTable:
    win: int = 3
    draw: int = 1
    loss: int = 0


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    sqlite_timeout: int = 30
    cors_origins: list[str] = field(default_factory=list)
    auto_seed_on_empty: bool = False
    log_level: str = "INFO"
    strict_match_transitions: bool = True
    points: PointsTable = field(default_factory=PointsTable)


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL"),
        sqlite_timeout=env_int("SQLITE_TIMEOUT", 30),
        cors_origins=env_list("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"),
        auto_seed_on_empty=env_flag("AUTO_SEED_ON_EMPTY", False),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        strict_match_transitions=env_flag("STRICT_MATCH_TRANSITIONS", True),
        points=PointsTable(
            win=env_int("POINTS_FOR_WIN", 3),
            draw=env_int("POINTS_FOR_DRAW", 1),
            loss=env_int("POINTS_FOR_LOSS", 0),
        ),
    )


settings = load_settings()
