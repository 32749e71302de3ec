from sqlalchemy import inspect, text
from sqlalchemy.pool import StaticPool

from tournament_stats import models
from tournament_stats.database import (
    DEFAULT_DB_PATH,
    build_engine,
    create_schema,
    create_session_factory,
    normalize_database_url,
)


def test_database_url_defaults_to_local_sqlite_file():
    assert normalize_database_url(None) == f"sqlite:///{DEFAULT_DB_PATH}"
    assert normalize_database_url("") == f"sqlite:///{DEFAULT_DB_PATH}"


def test_postgres_urls_use_the_psycopg_driver():
    assert normalize_database_url("postgres://u:p@db/stats") == "postgresql+psycopg://u:p@db/stats"
    assert normalize_database_url("postgresql://u:p@db/stats") == "postgresql+psycopg://u:p@db/stats"
    assert normalize_database_url("sqlite:///tmp/x.db") == "sqlite:///tmp/x.db"


def test_in_memory_engine_keeps_a_single_connection():
    engine = build_engine("sqlite://")

    assert isinstance(engine.pool, StaticPool)
    with engine.connect() as connection:
        connection.execute(text("CREATE TABLE scratch (id INTEGER)"))
        connection.commit()
    with engine.connect() as connection:
        assert connection.execute(text("SELECT count(*) FROM scratch")).scalar() == 0


def test_file_engine_uses_the_default_pool(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'stats.db'}")

    assert not isinstance(engine.pool, StaticPool)


def test_reset_schema_drops_existing_rows():
    engine = build_engine("sqlite://")
    create_schema(engine)
    session_factory = create_session_factory(engine)
    with session_factory() as db:
        db.add(models.Player(name="Alice"))
        db.commit()

    create_schema(engine, reset=True)

    assert "players" in inspect(engine).get_table_names()
    with session_factory() as db:
        assert db.query(models.Player).count() == 0
