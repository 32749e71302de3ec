from datetime import datetime

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from .analytics import AnalyticsDashboardAssembler, GrowthMetricsCalculator
from .config import settings
from .database import get_db
from .errors import bad_request
from .leaderboard import DEFAULT_LIMIT, LeaderboardRanker
from .lifecycle import MatchLifecycle
from .repositories import (
    MatchRepository,
    MatchResultRepository,
    ParticipantRepository,
    RegistrationRepository,
    StandingsRepository,
    TournamentRepository,
)
from .schemas import SportType, StatisticsFilters
from .standings import StandingsEngine
from .statistics import StatisticsAggregator


def get_participants(db: Session = Depends(get_db)) -> ParticipantRepository:
    return ParticipantRepository(db)


def get_tournaments(db: Session = Depends(get_db)) -> TournamentRepository:
    return TournamentRepository(db)


def get_registrations(db: Session = Depends(get_db)) -> RegistrationRepository:
    return RegistrationRepository(db)


def get_matches(db: Session = Depends(get_db)) -> MatchRepository:
    return MatchRepository(db)


def get_match_results(db: Session = Depends(get_db)) -> MatchResultRepository:
    return MatchResultRepository(db)


def get_lifecycle(matches: MatchRepository = Depends(get_matches)) -> MatchLifecycle:
    return MatchLifecycle(matches, strict=settings.strict_match_transitions)


def get_standings_engine(db: Session = Depends(get_db)) -> StandingsEngine:
    return StandingsEngine(
        StandingsRepository(db),
        TournamentRepository(db),
        ParticipantRepository(db),
        RegistrationRepository(db),
        MatchRepository(db),
        MatchResultRepository(db),
        points=settings.points,
    )


def get_aggregator(db: Session = Depends(get_db)) -> StatisticsAggregator:
    return StatisticsAggregator(
        ParticipantRepository(db),
        TournamentRepository(db),
        RegistrationRepository(db),
        MatchRepository(db),
    )


def get_ranker(aggregator: StatisticsAggregator = Depends(get_aggregator)) -> LeaderboardRanker:
    return LeaderboardRanker(aggregator)


def get_growth_calculator(db: Session = Depends(get_db)) -> GrowthMetricsCalculator:
    return GrowthMetricsCalculator(ParticipantRepository(db), TournamentRepository(db))


def get_dashboard_assembler(
    db: Session = Depends(get_db),
    aggregator: StatisticsAggregator = Depends(get_aggregator),
    ranker: LeaderboardRanker = Depends(get_ranker),
    growth: GrowthMetricsCalculator = Depends(get_growth_calculator),
) -> AnalyticsDashboardAssembler:
    return AnalyticsDashboardAssembler(
        ParticipantRepository(db),
        TournamentRepository(db),
        RegistrationRepository(db),
        MatchRepository(db),
        aggregator,
        ranker,
        growth,
    )


def get_statistics_filters(
    sport_type: SportType | None = Query(default=None),
    from_date: datetime | None = Query(default=None),
    to_date: datetime | None = Query(default=None),
    tournament_id: int | None = Query(default=None, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT),
    offset: int = Query(default=0),
) -> StatisticsFilters:
    if from_date is not None and to_date is not None and to_date < from_date:
        raise bad_request(ValueError("to_date cannot be before from_date."))
    return StatisticsFilters(
        sport_type=sport_type,
        from_date=from_date,
        to_date=to_date,
        tournament_id=tournament_id,
        limit=limit,
        offset=offset,
    )
