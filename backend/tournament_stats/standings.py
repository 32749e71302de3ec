"""Tournament standings tables.

Rows are keyed by tournament, category (a missing category shares the ``0``
slot) and participant. Writes go through :meth:`StandingsEngine.bulk_upsert`,
which only overwrites the fields a record actually carries.
"""

import logging

from . import models, schemas, serializers
from .config import PointsTable
from .models import KNOCKOUT_MATCH_TYPES, utcnow

logger = logging.getLogger(__name__)

COUNTED_MATCH_STATUSES = ("completed", "forfeited")
KEY_FIELDS = {"tournament_id", "category_id", "participant_id", "participant_type"}
ZERO_FIELDS = (
    "points",
    "matches_played",
    "matches_won",
    "matches_lost",
    "matches_drawn",
    "sets_won",
    "sets_lost",
    "games_won",
    "games_lost",
    "goal_difference",
    "bonus_points",
    "penalty_points",
)

Participant = tuple[str, int]


def side_participant(match: models.Match, side: int) -> tuple[Participant, str] | None:
    """The ``(type, id)`` key and display name for one side of a match."""
    team = match.team1 if side == 1 else match.team2
    player = match.player1 if side == 1 else match.player2
    partner = match.partner1 if side == 1 else match.partner2

    if team is not None:
        return ("team", team.id), team.name
    if player is not None:
        name = f"{player.name} / {partner.name}" if partner is not None else player.name
        return ("player", player.id), name
    return None


def registration_participant(registration: models.TournamentRegistration) -> tuple[Participant, str] | None:
    if registration.team is not None:
        return ("team", registration.team.id), registration.team.name
    if registration.player is not None:
        partner = registration.partner
        name = f"{registration.player.name} / {partner.name}" if partner is not None else registration.player.name
        return ("player", registration.player.id), name
    return None


def position_key(row: models.TournamentStandings) -> tuple:
    effective_points = row.points + row.bonus_points - row.penalty_points
    return (
        -effective_points,
        -row.matches_won,
        -row.goal_difference,
        -(row.games_won - row.games_lost),
        -(row.sets_won - row.sets_lost),
        row.participant_name.casefold(),
        row.id,
    )


class StandingsEngine:
    def __init__(
        self,
        standings,
        tournaments,
        participants,
        registrations,
        matches,
        results,
        *,
        points: PointsTable | None = None,
    ) -> None:
        self.standings = standings
        self.tournaments = tournaments
        self.participants = participants
        self.registrations = registrations
        self.matches = matches
        self.results = results
        self.points = points or PointsTable()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _resolve_name(self, participant_type: str, participant_id: int) -> str:
        if participant_type == "team":
            team = self.participants.get_team(participant_id)
            if team is None:
                raise LookupError("Team not found.")
            return team.name
        player = self.participants.get_player(participant_id)
        if player is None:
            raise LookupError("Player not found.")
        return player.name

    def _check_scope(self, tournament_id: int, category_id: int | None) -> None:
        self.tournaments.get_or_raise(tournament_id)
        if category_id is None:
            return
        category = self.tournaments.get_category(category_id)
        if category is None or category.tournament_id != tournament_id:
            raise LookupError("Tournament category not found.")

    def bulk_upsert(self, records: list[schemas.StandingsUpsert]) -> list[models.TournamentStandings]:
        checked_scopes: set[tuple[int, int | None]] = set()
        rows: list[models.TournamentStandings] = []

        for record in records:
            scope = (record.tournament_id, record.category_id)
            if scope not in checked_scopes:
                self._check_scope(*scope)
                checked_scopes.add(scope)

            row = self.standings.find(
                record.tournament_id,
                record.category_id,
                record.participant_type,
                record.participant_id,
            )
            if row is None:
                row = models.TournamentStandings(
                    tournament_id=record.tournament_id,
                    category_id=record.category_id,
                    participant_id=record.participant_id,
                    participant_type=record.participant_type,
                    participant_name=record.participant_name
                    or self._resolve_name(record.participant_type, record.participant_id),
                    is_eliminated=False,
                    **{field_name: 0 for field_name in ZERO_FIELDS},
                )
                self.standings.add(row)

            changes = record.model_dump(exclude=KEY_FIELDS, exclude_none=True)
            claimed_played = changes.pop("matches_played", None)
            for field_name, value in changes.items():
                setattr(row, field_name, value)

            played = row.matches_won + row.matches_lost + row.matches_drawn
            if claimed_played is not None and claimed_played != played:
                self.standings.rollback()
                raise ValueError(
                    f"matches_played ({claimed_played}) must equal won + lost + drawn ({played}) "
                    f"for {record.participant_type} {record.participant_id}."
                )
            row.matches_played = played
            if not row.is_eliminated:
                row.elimination_round = None
            row.last_updated = utcnow()
            rows.append(row)

        self.standings.commit()
        logger.info("Upserted %d standings rows", len(rows))
        return rows

    def recalculate_standings(self, tournament_id: int) -> int:
        """Clear every stored row of a tournament and return how many were removed."""
        self.tournaments.get_or_raise(tournament_id)
        deleted = self.standings.delete_by_tournament(tournament_id)
        logger.info("Cleared %d standings rows for tournament %s", deleted, tournament_id)
        return deleted

    def compute_standings(
        self,
        tournament_id: int,
        category_id: int | None = None,
    ) -> list[schemas.StandingsUpsert]:
        self._check_scope(tournament_id, category_id)

        table: dict[Participant, dict[str, object]] = {}

        def entry(key: Participant, name: str) -> dict[str, object]:
            if key not in table:
                table[key] = {
                    "name": name,
                    "points": 0,
                    "won": 0,
                    "lost": 0,
                    "drawn": 0,
                    "sets_won": 0,
                    "sets_lost": 0,
                    "games_won": 0,
                    "games_lost": 0,
                    "eliminated_in": None,
                }
            return table[key]

        for registration in self.registrations.list_registrations(
            tournament_id=tournament_id,
            category_id=category_id,
            status="approved",
        ):
            participant = registration_participant(registration)
            if participant is not None:
                entry(*participant)

        matches = [
            match
            for match in self.matches.list_matches(tournament_id=tournament_id, category_id=category_id)
            if match.status in COUNTED_MATCH_STATUSES
        ]
        results_by_match = self.results.list_for_matches([match.id for match in matches])

        for match in matches:
            side1 = side_participant(match, 1)
            side2 = side_participant(match, 2)
            if side1 is None or side2 is None:
                continue
            if not match.is_draw and match.winner_side not in (1, 2):
                continue

            row1 = entry(*side1)
            row2 = entry(*side2)

            if match.is_draw:
                for row in (row1, row2):
                    row["drawn"] += 1
                    row["points"] += self.points.draw
            else:
                winner, loser = (row1, row2) if match.winner_side == 1 else (row2, row1)
                winner["won"] += 1
                winner["points"] += self.points.win
                loser["lost"] += 1
                loser["points"] += self.points.loss
                if match.match_type in KNOCKOUT_MATCH_TYPES:
                    loser["eliminated_in"] = match.match_type

            for result in results_by_match.get(match.id, []):
                if result.score1 is None or result.score2 is None:
                    continue
                row1["games_won"] += result.score1
                row1["games_lost"] += result.score2
                row2["games_won"] += result.score2
                row2["games_lost"] += result.score1
                if result.score1 > result.score2:
                    row1["sets_won"] += 1
                    row2["sets_lost"] += 1
                elif result.score2 > result.score1:
                    row2["sets_won"] += 1
                    row1["sets_lost"] += 1

        return [
            schemas.StandingsUpsert(
                tournament_id=tournament_id,
                category_id=category_id,
                participant_type=participant_type,
                participant_id=participant_id,
                participant_name=str(row["name"]),
                points=int(row["points"]),
                matches_played=int(row["won"]) + int(row["lost"]) + int(row["drawn"]),
                matches_won=int(row["won"]),
                matches_lost=int(row["lost"]),
                matches_drawn=int(row["drawn"]),
                sets_won=int(row["sets_won"]),
                sets_lost=int(row["sets_lost"]),
                games_won=int(row["games_won"]),
                games_lost=int(row["games_lost"]),
                goal_difference=int(row["games_won"]) - int(row["games_lost"]),
                is_eliminated=row["eliminated_in"] is not None,
                elimination_round=row["eliminated_in"],
            )
            for (participant_type, participant_id), row in table.items()
        ]

    def update_standings(
        self,
        tournament_id: int,
        category_id: int | None = None,
        match_ids: list[int] | None = None,
    ) -> int:
        """Recompute, store and rank the table; returns the number of rows written."""
        records = self.compute_standings(tournament_id, category_id)

        if match_ids:
            wanted = set(match_ids)
            involved: set[Participant] = set()
            for match in self.matches.list_matches(tournament_id=tournament_id, category_id=category_id):
                if match.id not in wanted:
                    continue
                for side in (1, 2):
                    participant = side_participant(match, side)
                    if participant is not None:
                        involved.add(participant[0])
            records = [
                record for record in records if (record.participant_type, record.participant_id) in involved
            ]

        if records:
            self.bulk_upsert(records)
        self.update_positions(tournament_id, category_id)
        logger.info(
            "Updated standings for tournament %s category %s (%d rows)",
            tournament_id,
            category_id,
            len(records),
        )
        return len(records)

    def update_positions(self, tournament_id: int, category_id: int | None = None) -> int:
        self._check_scope(tournament_id, category_id)
        rows = self.standings.list_rows(tournament_id, category_id, scoped=True)
        for position, row in enumerate(sorted(rows, key=position_key), start=1):
            row.position = position
        self.standings.commit()
        return len(rows)

    def update_row(self, standing_id: int, changes: schemas.StandingsRowUpdate) -> models.TournamentStandings:
        row = self.standings.get(standing_id)
        if row is None:
            raise LookupError("Standings row not found.")

        values = changes.model_dump(exclude_unset=True)
        for field_name, value in values.items():
            if field_name in {"bonus_points", "penalty_points", "is_eliminated"} and value is None:
                continue
            setattr(row, field_name, value)
        if not row.is_eliminated:
            row.elimination_round = None

        row.last_updated = utcnow()
        self.standings.commit()
        return row

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def tournament_standings(self, tournament_id: int) -> schemas.StandingsResponse:
        self.tournaments.get_or_raise(tournament_id)
        rows = self.standings.list_rows(tournament_id)
        return serializers.standings_response(tournament_id, None, rows)

    def category_standings(self, category_id: int) -> schemas.StandingsResponse:
        category = self.tournaments.get_category(category_id)
        if category is None:
            raise LookupError("Tournament category not found.")
        rows = self.standings.list_rows(category.tournament_id, category_id)
        return serializers.standings_response(category.tournament_id, category_id, rows)
