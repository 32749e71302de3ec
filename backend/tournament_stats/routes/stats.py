from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..analytics import AnalyticsDashboardAssembler
from ..dependencies import get_aggregator, get_dashboard_assembler, get_ranker, get_statistics_filters
from ..errors import not_found
from ..leaderboard import DEFAULT_CATEGORY, DEFAULT_ENTITY_TYPE, DEFAULT_LIMIT, LeaderboardRanker
from ..serializers import envelope
from ..statistics import StatisticsAggregator

router = APIRouter(tags=["statistics"])

LeaderboardEnvelope = schemas.ApiResponse[schemas.LeaderboardResponse]


@router.get("/player/{player_id}", response_model=schemas.ApiResponse[schemas.PlayerStatistics])
def get_player_statistics(
    player_id: int,
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    aggregator: StatisticsAggregator = Depends(get_aggregator),
) -> dict[str, object]:
    try:
        stats = aggregator.player_statistics(player_id, filters)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(stats, "PLAYER_STATISTICS_FOUND")


@router.get("/team/{team_id}", response_model=schemas.ApiResponse[schemas.TeamStatistics])
def get_team_statistics(
    team_id: int,
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    aggregator: StatisticsAggregator = Depends(get_aggregator),
) -> dict[str, object]:
    try:
        stats = aggregator.team_statistics(team_id, filters)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(stats, "TEAM_STATISTICS_FOUND")


@router.get("/tournament/{tournament_id}", response_model=schemas.ApiResponse[schemas.TournamentStatistics])
def get_tournament_statistics(
    tournament_id: int,
    aggregator: StatisticsAggregator = Depends(get_aggregator),
) -> dict[str, object]:
    try:
        stats = aggregator.tournament_statistics(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(stats, "TOURNAMENT_STATISTICS_FOUND")


@router.get("/leaderboard", response_model=LeaderboardEnvelope)
def get_leaderboard(
    category: str = Query(default=DEFAULT_CATEGORY),
    entity_type: str = Query(default=DEFAULT_ENTITY_TYPE),
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    ranker: LeaderboardRanker = Depends(get_ranker),
) -> dict[str, object]:
    leaderboard = ranker.rank(category, entity_type, filters.limit, filters.offset, filters)
    return envelope(leaderboard, "LEADERBOARD_FOUND")


@router.get("/leaderboard/players", response_model=LeaderboardEnvelope)
def get_player_leaderboard(
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    ranker: LeaderboardRanker = Depends(get_ranker),
) -> dict[str, object]:
    return envelope(ranker.player_points(filters.limit, filters.offset, filters), "LEADERBOARD_FOUND")


@router.get("/leaderboard/players/wins", response_model=LeaderboardEnvelope)
def get_player_leaderboard_by_wins(
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    ranker: LeaderboardRanker = Depends(get_ranker),
) -> dict[str, object]:
    return envelope(ranker.player_wins(filters.limit, filters.offset, filters), "LEADERBOARD_FOUND")


@router.get("/leaderboard/players/earnings", response_model=LeaderboardEnvelope)
def get_player_leaderboard_by_earnings(
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    ranker: LeaderboardRanker = Depends(get_ranker),
) -> dict[str, object]:
    return envelope(ranker.player_earnings(filters.limit, filters.offset, filters), "LEADERBOARD_FOUND")


@router.get("/leaderboard/teams", response_model=LeaderboardEnvelope)
def get_team_leaderboard(
    filters: schemas.StatisticsFilters = Depends(get_statistics_filters),
    ranker: LeaderboardRanker = Depends(get_ranker),
) -> dict[str, object]:
    return envelope(ranker.team_points(filters.limit, filters.offset, filters), "LEADERBOARD_FOUND")


@router.get("/records", response_model=schemas.ApiResponse[list[schemas.GameRecord]])
def get_game_records(
    limit: int = Query(default=DEFAULT_LIMIT),
    assembler: AnalyticsDashboardAssembler = Depends(get_dashboard_assembler),
) -> dict[str, object]:
    return envelope(assembler.game_records(limit), "GAME_RECORDS_FOUND")


@router.get("/summary", response_model=schemas.ApiResponse[schemas.AnalyticsDashboard])
def get_platform_summary(
    assembler: AnalyticsDashboardAssembler = Depends(get_dashboard_assembler),
) -> dict[str, object]:
    return envelope(assembler.assemble(), "PLATFORM_SUMMARY_FOUND")
