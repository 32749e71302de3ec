import logging
from collections.abc import Callable
from datetime import datetime

from . import schemas
from .formulas import growth_rate, round_half_up, to_decimal
from .leaderboard import LeaderboardRanker, clamp_limit
from .models import utcnow
from .statistics import StatisticsAggregator

logger = logging.getLogger(__name__)

ACTIVE_TOURNAMENT_STATUSES = ("in_progress", "registration_open")
DASHBOARD_TOP_N = 5
RECENT_TOURNAMENTS = 5
PARTICIPATION_RECORD = "most_tournament_participations"


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def previous_month_start(moment: datetime) -> datetime:
    start = month_start(moment)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


def next_month_start(moment: datetime) -> datetime:
    start = month_start(moment)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


class GrowthMetricsCalculator:
    """Compares the current calendar month against the previous one."""

    def __init__(self, participants, tournaments, *, now: Callable[[], datetime] = utcnow) -> None:
        self.participants = participants
        self.tournaments = tournaments
        self.now = now

    def calculate(self) -> schemas.GrowthMetrics:
        current = self.now()
        this_start = month_start(current)
        this_end = next_month_start(current)
        last_start = previous_month_start(current)

        players_now = self.participants.count_players_created_between(this_start, this_end)
        players_before = self.participants.count_players_created_between(last_start, this_start)
        teams_now = self.participants.count_teams_created_between(this_start, this_end)
        teams_before = self.participants.count_teams_created_between(last_start, this_start)
        tournaments_now = self.tournaments.count_created_between(this_start, this_end)
        tournaments_before = self.tournaments.count_created_between(last_start, this_start)
        revenue_now = self.tournaments.prize_pool_created_between(this_start, this_end)
        revenue_before = self.tournaments.prize_pool_created_between(last_start, this_start)

        return schemas.GrowthMetrics(
            new_players_this_month=players_now,
            new_players_last_month=players_before,
            player_growth_rate=growth_rate(players_now, players_before),
            new_teams_this_month=teams_now,
            new_teams_last_month=teams_before,
            team_growth_rate=growth_rate(teams_now, teams_before),
            tournaments_this_month=tournaments_now,
            tournaments_last_month=tournaments_before,
            tournament_growth_rate=growth_rate(tournaments_now, tournaments_before),
            # Match volume is not tracked per month yet.
            matches_this_month=0,
            revenue_this_month=round_half_up(revenue_now),
            revenue_last_month=round_half_up(revenue_before),
            revenue_growth_rate=growth_rate(revenue_now, revenue_before),
        )


class AnalyticsDashboardAssembler:
    def __init__(
        self,
        participants,
        tournaments,
        registrations,
        matches,
        aggregator: StatisticsAggregator,
        ranker: LeaderboardRanker,
        growth: GrowthMetricsCalculator,
    ) -> None:
        self.participants = participants
        self.tournaments = tournaments
        self.registrations = registrations
        self.matches = matches
        self.aggregator = aggregator
        self.ranker = ranker
        self.growth = growth

    def most_popular_sport(self) -> str | None:
        counts = self.tournaments.sport_type_counts()
        if not counts:
            return None
        return min(counts, key=lambda sport: (-counts[sport], sport))

    def average_tournament_size(self) -> float:
        sizes = self.registrations.approved_counts_by_tournament()
        if not sizes:
            return 0.0
        return round_half_up(to_decimal(sum(sizes.values())) / len(sizes))

    def assemble(self) -> schemas.AnalyticsDashboard:
        top_players = self.ranker.rank("points", "player", DASHBOARD_TOP_N, 0).entries
        top_teams = self.ranker.rank("points", "team", DASHBOARD_TOP_N, 0).entries
        recent = [
            self.aggregator.summarize_tournament(tournament)
            for tournament in self.tournaments.most_recent(RECENT_TOURNAMENTS)
        ]

        dashboard = schemas.AnalyticsDashboard(
            total_players=self.participants.count_players(),
            total_teams=self.participants.count_teams(),
            total_tournaments=self.tournaments.count(),
            total_matches=self.matches.count(),
            active_tournaments=self.tournaments.count_with_status(ACTIVE_TOURNAMENT_STATUSES),
            total_earnings_distributed=round_half_up(self.tournaments.prize_pool_with_status("completed")),
            average_tournament_size=self.average_tournament_size(),
            most_popular_sport=self.most_popular_sport(),
            top_players=top_players,
            top_teams=top_teams,
            recent_tournaments=recent,
            growth_metrics=self.growth.calculate(),
        )
        logger.debug(
            "Assembled dashboard: %d players, %d teams, %d tournaments",
            dashboard.total_players,
            dashboard.total_teams,
            dashboard.total_tournaments,
        )
        return dashboard

    def game_records(self, limit: int | None = 20) -> list[schemas.GameRecord]:
        """Players ordered by how many tournaments they were approved into."""
        limit = clamp_limit(limit)
        tallies = self.aggregator.player_tallies()
        ranked = sorted(
            (tally for tally in tallies.values() if tally.tournament_ids),
            key=lambda tally: (-len(tally.tournament_ids), tally.name.casefold(), tally.entity_id),
        )
        return [
            schemas.GameRecord(
                record_type=PARTICIPATION_RECORD,
                entity_id=tally.entity_id,
                entity_name=tally.name,
                value=float(len(tally.tournament_ids)),
                achieved_at=tally.last_active,
            )
            for tally in ranked[:limit]
        ]
