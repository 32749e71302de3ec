import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import create_schema, session_scope
from .errors import register_exception_handlers
from .models import Tournament
from .routes import (
    analytics,
    match_results,
    matches,
    players,
    registrations,
    standings,
    stats,
    teams,
    tournaments,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Tournament Stats API",
    version="1.0.0",
    description=(
        "Tournament standings, player and team statistics, leaderboards "
        "and match lifecycle APIs."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

create_schema()


def seed_if_empty() -> None:
    if not settings.auto_seed_on_empty:
        return

    with session_scope() as db:
        has_tournaments = db.query(Tournament.id).first() is not None

    if has_tournaments:
        return

    from seed import seed

    logger.info("Database is empty, loading demo data")
    seed()


seed_if_empty()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(players.router, prefix="/players")
app.include_router(teams.router, prefix="/teams")
app.include_router(tournaments.router, prefix="/tournaments")
app.include_router(registrations.router, prefix="/registrations")
app.include_router(matches.router, prefix="/matches")
app.include_router(match_results.router, prefix="/match-results")
app.include_router(standings.router, prefix="/standings")
app.include_router(stats.router, prefix="/stats")
app.include_router(analytics.router, prefix="/analytics")
