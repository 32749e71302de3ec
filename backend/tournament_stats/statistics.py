"""Lifetime statistics for players, teams and tournaments.

Statistics are derived on every call from completed matches and approved
registrations; nothing here is persisted. The per-entity tallies are shared
with the leaderboard so both use the same formulas.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from . import models, schemas
from .formulas import percentage, round_half_up, to_decimal

logger = logging.getLogger(__name__)

PENDING_MATCH_STATUSES = ("scheduled", "in_progress")
TOURNAMENT_WIN_POINTS = 100
MATCH_WIN_POINTS = 10


@dataclass
class EntityTally:
    entity_id: int
    name: str
    created_at: datetime
    total_matches: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    tournament_ids: set[int] = field(default_factory=set)
    earnings: Decimal = Decimal(0)
    last_registration_update: datetime | None = None

    @property
    def win_rate(self) -> float:
        return percentage(self.matches_won, self.total_matches)

    @property
    def tournaments_won(self) -> int:
        # Approximation: no per-tournament placement is recorded, so match wins stand in.
        return self.matches_won

    @property
    def ranking_points(self) -> int:
        return self.tournaments_won * TOURNAMENT_WIN_POINTS + self.matches_won * MATCH_WIN_POINTS

    @property
    def total_earnings(self) -> float:
        return round_half_up(self.earnings)

    @property
    def last_active(self) -> datetime:
        return self.last_registration_update or self.created_at


def player_sides(match: models.Match) -> dict[int, set[int]]:
    return {
        1: {player_id for player_id in (match.player1_id, match.partner1_id) if player_id is not None},
        2: {player_id for player_id in (match.player2_id, match.partner2_id) if player_id is not None},
    }


def team_sides(match: models.Match) -> dict[int, set[int]]:
    return {
        1: {match.team1_id} if match.team1_id is not None else set(),
        2: {match.team2_id} if match.team2_id is not None else set(),
    }


def _tally_matches(tallies: dict[int, EntityTally], matches: Iterable[models.Match], sides_of) -> None:
    for match in matches:
        for side, entity_ids in sides_of(match).items():
            for entity_id in entity_ids:
                tally = tallies.get(entity_id)
                if tally is None:
                    continue
                tally.total_matches += 1
                if match.winner_side == side:
                    tally.matches_won += 1
                elif match.winner_side is not None:
                    tally.matches_lost += 1


def _tally_registrations(
    tallies: dict[int, EntityTally],
    registrations: Iterable[models.TournamentRegistration],
    owner_of,
) -> None:
    for registration in registrations:
        tally = tallies.get(owner_of(registration))
        if tally is None:
            continue

        # Activity counts every registration; totals only approved ones.
        if tally.last_registration_update is None or registration.updated_at > tally.last_registration_update:
            tally.last_registration_update = registration.updated_at

        if registration.status != "approved":
            continue
        tally.tournament_ids.add(registration.category.tournament_id)
        tally.earnings += to_decimal(registration.payment_amount)


def _top_winner(wins: dict[int, int], names: dict[int, str]) -> schemas.TopPerformer | None:
    if not wins:
        return None
    entity_id = min(wins, key=lambda key: (-wins[key], names.get(key, "").casefold(), key))
    return schemas.TopPerformer(id=entity_id, name=names.get(entity_id, ""), wins=wins[entity_id])


class StatisticsAggregator:
    def __init__(self, participants, tournaments, registrations, matches) -> None:
        self.participants = participants
        self.tournaments = tournaments
        self.registrations = registrations
        self.matches = matches

    # ------------------------------------------------------------------
    # Bulk tallies
    # ------------------------------------------------------------------
    def player_tallies(
        self,
        filters: schemas.StatisticsFilters | None = None,
        players: Iterable[models.Player] | None = None,
        *,
        player_id: int | None = None,
    ) -> dict[int, EntityTally]:
        if players is None:
            players = self.participants.list_players()
        tallies = {
            player.id: EntityTally(entity_id=player.id, name=player.name, created_at=player.created_at)
            for player in players
        }
        if not tallies:
            return tallies

        _tally_matches(
            tallies,
            self.matches.list_with_statuses(("completed",), player_id=player_id, filters=filters),
            player_sides,
        )
        _tally_registrations(
            tallies,
            self.registrations.list_for_statistics(player_id=player_id, filters=filters),
            lambda registration: registration.player_id,
        )
        return tallies

    def team_tallies(
        self,
        filters: schemas.StatisticsFilters | None = None,
        teams: Iterable[models.Team] | None = None,
        *,
        team_id: int | None = None,
    ) -> dict[int, EntityTally]:
        if teams is None:
            teams = self.participants.list_teams()
        tallies = {
            team.id: EntityTally(entity_id=team.id, name=team.name, created_at=team.created_at)
            for team in teams
        }
        if not tallies:
            return tallies

        _tally_matches(
            tallies,
            self.matches.list_with_statuses(("completed",), team_id=team_id, filters=filters),
            team_sides,
        )
        _tally_registrations(
            tallies,
            self.registrations.list_for_statistics(team_id=team_id, filters=filters),
            lambda registration: registration.team_id,
        )
        return tallies

    # ------------------------------------------------------------------
    # Single entities
    # ------------------------------------------------------------------
    def player_statistics(
        self,
        player_id: int,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.PlayerStatistics:
        player = self.participants.get_player(player_id)
        if player is None:
            raise LookupError("Player not found.")

        tally = self.player_tallies(filters, [player], player_id=player_id)[player_id]
        return schemas.PlayerStatistics(
            player_id=player.id,
            player_name=player.name,
            total_tournaments=len(tally.tournament_ids),
            tournaments_won=tally.tournaments_won,
            total_matches=tally.total_matches,
            matches_won=tally.matches_won,
            matches_lost=tally.matches_lost,
            win_rate=tally.win_rate,
            total_earnings=tally.total_earnings,
            ranking_points=tally.ranking_points,
            last_active=tally.last_active,
        )

    def team_statistics(
        self,
        team_id: int,
        filters: schemas.StatisticsFilters | None = None,
    ) -> schemas.TeamStatistics:
        team = self.participants.get_team(team_id)
        if team is None:
            raise LookupError("Team not found.")

        tally = self.team_tallies(filters, [team], team_id=team_id)[team_id]
        return schemas.TeamStatistics(
            team_id=team.id,
            team_name=team.name,
            members_count=self.participants.member_counts().get(team.id, 0),
            total_tournaments=len(tally.tournament_ids),
            tournaments_won=tally.tournaments_won,
            total_matches=tally.total_matches,
            matches_won=tally.matches_won,
            matches_lost=tally.matches_lost,
            win_rate=tally.win_rate,
            total_earnings=tally.total_earnings,
            ranking_points=tally.ranking_points,
            last_active=tally.last_active,
        )

    def tournament_statistics(self, tournament_id: int) -> schemas.TournamentStatistics:
        tournament = self.tournaments.get(tournament_id)
        if tournament is None:
            raise LookupError("Tournament not found.")
        return self.summarize_tournament(tournament)

    def summarize_tournament(self, tournament: models.Tournament) -> schemas.TournamentStatistics:
        approved = self.registrations.list_registrations(tournament_id=tournament.id, status="approved")
        matches = self.matches.list_matches(tournament_id=tournament.id)

        completed = [match for match in matches if match.status == "completed"]
        pending_count = sum(1 for match in matches if match.status in PENDING_MATCH_STATUSES)

        durations = [
            (match.actual_end_date - match.actual_start_date).total_seconds() / 60
            for match in completed
            if match.actual_start_date is not None
            and match.actual_end_date is not None
            and match.actual_end_date >= match.actual_start_date
        ]
        average_duration = round_half_up(sum(durations) / len(durations)) if durations else None

        player_wins: dict[int, int] = {}
        player_names: dict[int, str] = {}
        team_wins: dict[int, int] = {}
        team_names: dict[int, str] = {}
        for match in completed:
            if match.winner_side not in (1, 2):
                continue
            if match.winner_side == 1:
                winners = [match.player1, match.partner1]
                winning_team = match.team1
            else:
                winners = [match.player2, match.partner2]
                winning_team = match.team2
            for player in winners:
                if player is None:
                    continue
                player_wins[player.id] = player_wins.get(player.id, 0) + 1
                player_names[player.id] = player.name
            if winning_team is not None:
                team_wins[winning_team.id] = team_wins.get(winning_team.id, 0) + 1
                team_names[winning_team.id] = winning_team.name

        return schemas.TournamentStatistics(
            tournament_id=tournament.id,
            tournament_name=tournament.name,
            sport_type=tournament.sport_type,
            status=tournament.status,
            total_registrations=len(approved),
            total_participants=sum(1 for registration in approved if registration.player_id is not None),
            total_teams=sum(1 for registration in approved if registration.team_id is not None),
            total_matches=len(matches),
            completed_matches=len(completed),
            pending_matches=pending_count,
            completion_rate=percentage(len(completed), len(matches)),
            total_prize_pool=round_half_up(tournament.prize_pool),
            average_match_duration=average_duration,
            most_wins_player=_top_winner(player_wins, player_names),
            most_wins_team=_top_winner(team_wins, team_names),
            start_date=tournament.start_date,
            end_date=tournament.end_date,
        )
