import logging

from . import schemas
from .statistics import EntityTally, StatisticsAggregator

logger = logging.getLogger(__name__)

CATEGORIES = ("points", "wins", "earnings", "win_rate")
ENTITY_TYPES = ("player", "team")
DEFAULT_CATEGORY = "win_rate"
DEFAULT_ENTITY_TYPE = "team"
MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 20


def clamp_limit(limit: int | None, default: int = DEFAULT_LIMIT) -> int:
    if limit is None:
        return default
    return max(MIN_LIMIT, min(MAX_LIMIT, limit))


def clamp_offset(offset: int | None) -> int:
    if offset is None:
        return 0
    return max(0, offset)


def score_of(tally: EntityTally, category: str) -> float:
    if category == "points":
        return tally.ranking_points
    if category == "wins":
        return tally.matches_won
    if category == "earnings":
        return tally.total_earnings
    return tally.win_rate


def sort_key(tally: EntityTally, category: str) -> tuple:
    return (
        -score_of(tally, category),
        -tally.matches_won,
        -tally.win_rate,
        tally.name.casefold(),
        tally.entity_id,
    )


class LeaderboardRanker:
    def __init__(self, aggregator: StatisticsAggregator) -> None:
        self.aggregator = aggregator

    def rank(
        self,
        category: str = DEFAULT_CATEGORY,
        entity_type: str = DEFAULT_ENTITY_TYPE,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.LeaderboardResponse:
        if category not in CATEGORIES:
            logger.info("Unknown leaderboard category %r, using %s", category, DEFAULT_CATEGORY)
            category = DEFAULT_CATEGORY
        if entity_type not in ENTITY_TYPES:
            logger.info("Unknown leaderboard entity type %r, using %s", entity_type, DEFAULT_ENTITY_TYPE)
            entity_type = DEFAULT_ENTITY_TYPE
        limit = clamp_limit(limit)
        offset = clamp_offset(offset)

        if entity_type == "player":
            tallies = self.aggregator.player_tallies(filters)
        else:
            tallies = self.aggregator.team_tallies(filters)

        candidates = list(tallies.values())
        if category != "win_rate":
            candidates = [tally for tally in candidates if score_of(tally, category) > 0]

        ranked = sorted(candidates, key=lambda tally: sort_key(tally, category))
        page = ranked[offset : offset + limit]

        entries = [
            schemas.LeaderboardEntry(
                rank=offset + index,
                entity_id=tally.entity_id,
                entity_name=tally.name,
                entity_type=entity_type,
                points=tally.ranking_points,
                tournaments_won=tally.tournaments_won,
                matches_won=tally.matches_won,
                win_rate=tally.win_rate,
                total_earnings=tally.total_earnings,
                last_active=tally.last_active,
            )
            for index, tally in enumerate(page, start=1)
        ]
        return schemas.LeaderboardResponse(
            category=category,
            entity_type=entity_type,
            limit=limit,
            offset=offset,
            entries=entries,
        )

    def player_points(
        self,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.LeaderboardResponse:
        return self.rank("points", "player", limit, offset, filters)

    def player_wins(
        self,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.LeaderboardResponse:
        return self.rank("wins", "player", limit, offset, filters)

    def player_earnings(
        self,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.LeaderboardResponse:
        return self.rank("earnings", "player", limit, offset, filters)

    def team_points(
        self,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.LeaderboardResponse:
        return self.rank("points", "team", limit, offset, filters)
