"""Engine and session plumbing shared by the API, the seed script and the tests."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DB_PATH = BASE_DIR / "tournament_stats.db"
IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def normalize_database_url(raw_url: str | None) -> str:
    if not raw_url:
        return f"sqlite:///{DEFAULT_DB_PATH}"

    for prefix in ("postgres://", "postgresql://"):
        if raw_url.startswith(prefix):
            return raw_url.replace(prefix, "postgresql+psycopg://", 1)

    return raw_url


def build_engine(database_url: str, *, sqlite_timeout: int = 30) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine_kwargs: dict[str, object] = {
        "connect_args": {"check_same_thread": False, "timeout": sqlite_timeout},
    }
    # Every connection to an in-memory database must be the same one.
    if database_url in IN_MEMORY_URLS:
        engine_kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **engine_kwargs)


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


DATABASE_URL = normalize_database_url(settings.database_url)

engine = build_engine(DATABASE_URL, sqlite_timeout=settings.sqlite_timeout)
SessionLocal = create_session_factory(engine)
Base = declarative_base()


def create_schema(bind: Engine | None = None, *, reset: bool = False) -> None:
    """Create every mapped table; ``reset`` drops them first."""
    bind = bind or engine
    if reset:
        Base.metadata.drop_all(bind=bind)
    Base.metadata.create_all(bind=bind)


@contextmanager
def session_scope() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    with session_scope() as db:
        yield db
