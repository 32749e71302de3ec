"""SQLAlchemy-backed data access used by the services.

Each repository wraps one request-scoped session. Lookups of referenced rows
raise ``LookupError``; rejected input raises ``ValueError``.
"""

from collections import Counter
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from . import models, schemas


def _normalize_text(value: str) -> str:
    return " ".join(value.split())


def _filtered_by_tournament(query, filters: schemas.StatisticsFilters | None):
    """Apply sport/tournament filters to a query already joined to Tournament."""
    if filters is None:
        return query
    if filters.sport_type is not None:
        query = query.filter(models.Tournament.sport_type == filters.sport_type)
    if filters.tournament_id is not None:
        query = query.filter(models.Tournament.id == filters.tournament_id)
    return query


class ParticipantRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_player(self, player_id: int) -> models.Player | None:
        return self.db.get(models.Player, player_id)

    def get_team(self, team_id: int) -> models.Team | None:
        return self.db.get(models.Team, team_id)

    def list_players(self) -> list[models.Player]:
        return self.db.query(models.Player).order_by(models.Player.name.asc(), models.Player.id.asc()).all()

    def list_teams(self) -> list[models.Team]:
        return self.db.query(models.Team).order_by(models.Team.name.asc()).all()

    def create_player(self, payload: schemas.PlayerCreate) -> models.Player:
        name = _normalize_text(payload.name)
        if not name:
            raise ValueError("Player name cannot be empty.")

        email = payload.email.strip().lower() if payload.email else None
        if email:
            existing = self.db.query(models.Player).filter(models.Player.email == email).first()
            if existing:
                raise ValueError("A player with this email already exists.")

        player = models.Player(name=name, email=email)
        self.db.add(player)
        self.db.commit()
        self.db.refresh(player)
        return player

    def create_team(self, payload: schemas.TeamCreate) -> models.Team:
        name = _normalize_text(payload.name)
        if not name:
            raise ValueError("Team name cannot be empty.")

        existing = (
            self.db.query(models.Team)
            .filter(func.lower(models.Team.name) == name.lower())
            .first()
        )
        if existing:
            raise ValueError("A team with this name already exists.")

        team = models.Team(name=name, sport_type=payload.sport_type)
        self.db.add(team)
        self.db.commit()
        self.db.refresh(team)
        return team

    def add_team_member(self, team_id: int, player_id: int) -> models.TeamMember:
        if self.get_team(team_id) is None:
            raise LookupError("Team not found.")
        if self.get_player(player_id) is None:
            raise LookupError("Player not found.")

        existing = (
            self.db.query(models.TeamMember)
            .filter(models.TeamMember.team_id == team_id, models.TeamMember.player_id == player_id)
            .first()
        )
        if existing:
            raise ValueError("Player is already a member of this team.")

        member = models.TeamMember(team_id=team_id, player_id=player_id)
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)
        return member

    def list_team_members(self, team_id: int) -> list[models.TeamMember]:
        if self.get_team(team_id) is None:
            raise LookupError("Team not found.")
        return (
            self.db.query(models.TeamMember)
            .options(selectinload(models.TeamMember.player))
            .filter(models.TeamMember.team_id == team_id)
            .order_by(models.TeamMember.joined_at.asc(), models.TeamMember.id.asc())
            .all()
        )

    def member_counts(self) -> dict[int, int]:
        rows = (
            self.db.query(models.TeamMember.team_id, func.count(models.TeamMember.id))
            .group_by(models.TeamMember.team_id)
            .all()
        )
        return {team_id: count for team_id, count in rows}

    def count_players(self) -> int:
        return self.db.query(func.count(models.Player.id)).scalar() or 0

    def count_teams(self) -> int:
        return self.db.query(func.count(models.Team.id)).scalar() or 0

    def count_players_created_between(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(func.count(models.Player.id))
            .filter(models.Player.created_at >= start, models.Player.created_at < end)
            .scalar()
            or 0
        )

    def count_teams_created_between(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(func.count(models.Team.id))
            .filter(models.Team.created_at >= start, models.Team.created_at < end)
            .scalar()
            or 0
        )


class TournamentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, tournament_id: int) -> models.Tournament | None:
        return self.db.get(models.Tournament, tournament_id)

    def get_or_raise(self, tournament_id: int) -> models.Tournament:
        tournament = self.get(tournament_id)
        if tournament is None:
            raise LookupError("Tournament not found.")
        return tournament

    def list_tournaments(self, status: str | None = None) -> list[models.Tournament]:
        query = self.db.query(models.Tournament)
        if status is not None:
            query = query.filter(models.Tournament.status == status)
        return query.order_by(models.Tournament.created_at.desc(), models.Tournament.id.desc()).all()

    def create(self, payload: schemas.TournamentCreate) -> models.Tournament:
        name = _normalize_text(payload.name)
        if not name:
            raise ValueError("Tournament name cannot be empty.")
        if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
            raise ValueError("Tournament end date cannot be before its start date.")

        tournament = models.Tournament(
            name=name,
            sport_type=payload.sport_type,
            format=payload.format,
            status=payload.status,
            start_date=payload.start_date,
            end_date=payload.end_date,
            prize_pool=Decimal(str(payload.prize_pool)) if payload.prize_pool is not None else None,
        )
        self.db.add(tournament)
        self.db.commit()
        self.db.refresh(tournament)
        return tournament

    def update(self, tournament_id: int, payload: schemas.TournamentUpdate) -> models.Tournament:
        tournament = self.get_or_raise(tournament_id)
        changes = payload.model_dump(exclude_unset=True)

        if "name" in changes and changes["name"] is not None:
            tournament.name = _normalize_text(changes["name"])
        if changes.get("status") is not None:
            tournament.status = changes["status"]
        if "start_date" in changes:
            tournament.start_date = changes["start_date"]
        if "end_date" in changes:
            tournament.end_date = changes["end_date"]
        if "prize_pool" in changes:
            prize_pool = changes["prize_pool"]
            tournament.prize_pool = Decimal(str(prize_pool)) if prize_pool is not None else None

        if tournament.start_date and tournament.end_date and tournament.end_date < tournament.start_date:
            self.db.rollback()
            raise ValueError("Tournament end date cannot be before its start date.")

        self.db.commit()
        self.db.refresh(tournament)
        return tournament

    def create_category(self, tournament_id: int, payload: schemas.CategoryCreate) -> models.TournamentCategory:
        self.get_or_raise(tournament_id)
        name = _normalize_text(payload.name)
        if not name:
            raise ValueError("Category name cannot be empty.")

        existing = (
            self.db.query(models.TournamentCategory)
            .filter(
                models.TournamentCategory.tournament_id == tournament_id,
                func.lower(models.TournamentCategory.name) == name.lower(),
            )
            .first()
        )
        if existing:
            raise ValueError("A category with this name already exists in the tournament.")

        category = models.TournamentCategory(
            tournament_id=tournament_id,
            name=name,
            team_composition=payload.team_composition,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_category(self, category_id: int) -> models.TournamentCategory | None:
        return self.db.get(models.TournamentCategory, category_id)

    def list_categories(self, tournament_id: int) -> list[models.TournamentCategory]:
        self.get_or_raise(tournament_id)
        return (
            self.db.query(models.TournamentCategory)
            .filter(models.TournamentCategory.tournament_id == tournament_id)
            .order_by(models.TournamentCategory.id.asc())
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(models.Tournament.id)).scalar() or 0

    def count_with_status(self, statuses: tuple[str, ...]) -> int:
        return (
            self.db.query(func.count(models.Tournament.id))
            .filter(models.Tournament.status.in_(statuses))
            .scalar()
            or 0
        )

    def count_created_between(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(func.count(models.Tournament.id))
            .filter(models.Tournament.created_at >= start, models.Tournament.created_at < end)
            .scalar()
            or 0
        )

    def prize_pool_created_between(self, start: datetime, end: datetime) -> Decimal:
        total = (
            self.db.query(func.coalesce(func.sum(models.Tournament.prize_pool), 0))
            .filter(models.Tournament.created_at >= start, models.Tournament.created_at < end)
            .scalar()
        )
        return Decimal(str(total or 0))

    def prize_pool_with_status(self, status: str) -> Decimal:
        total = (
            self.db.query(func.coalesce(func.sum(models.Tournament.prize_pool), 0))
            .filter(models.Tournament.status == status)
            .scalar()
        )
        return Decimal(str(total or 0))

    def sport_type_counts(self) -> Counter:
        rows = (
            self.db.query(models.Tournament.sport_type, func.count(models.Tournament.id))
            .group_by(models.Tournament.sport_type)
            .all()
        )
        return Counter({sport_type: count for sport_type, count in rows})

    def most_recent(self, limit: int) -> list[models.Tournament]:
        return (
            self.db.query(models.Tournament)
            .order_by(models.Tournament.created_at.desc(), models.Tournament.id.desc())
            .limit(limit)
            .all()
        )


class RegistrationRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, registration_id: int) -> models.TournamentRegistration | None:
        return self.db.get(models.TournamentRegistration, registration_id)

    def create(self, payload: schemas.RegistrationCreate) -> models.TournamentRegistration:
        if (payload.team_id is None) == (payload.player_id is None):
            raise ValueError("A registration needs exactly one of team_id or player_id.")
        if payload.partner_player_id is not None and payload.player_id is None:
            raise ValueError("A partner can only be registered alongside a player.")
        if payload.partner_player_id is not None and payload.partner_player_id == payload.player_id:
            raise ValueError("A player cannot partner themselves.")

        if self.db.get(models.TournamentCategory, payload.category_id) is None:
            raise LookupError("Tournament category not found.")
        if payload.team_id is not None and self.db.get(models.Team, payload.team_id) is None:
            raise LookupError("Team not found.")
        for player_id in (payload.player_id, payload.partner_player_id):
            if player_id is not None and self.db.get(models.Player, player_id) is None:
                raise LookupError("Player not found.")

        duplicate_query = self.db.query(models.TournamentRegistration).filter(
            models.TournamentRegistration.category_id == payload.category_id
        )
        if payload.team_id is not None:
            duplicate_query = duplicate_query.filter(models.TournamentRegistration.team_id == payload.team_id)
        else:
            duplicate_query = duplicate_query.filter(models.TournamentRegistration.player_id == payload.player_id)
        if duplicate_query.first():
            raise ValueError("This participant is already registered in the category.")

        registration = models.TournamentRegistration(
            category_id=payload.category_id,
            team_id=payload.team_id,
            player_id=payload.player_id,
            partner_player_id=payload.partner_player_id,
            status=payload.status,
            payment_status=payload.payment_status,
            payment_amount=Decimal(str(payload.payment_amount)) if payload.payment_amount is not None else None,
            notes=payload.notes,
        )
        self.db.add(registration)
        self.db.commit()
        self.db.refresh(registration)
        return registration

    def update(self, registration_id: int, payload: schemas.RegistrationUpdate) -> models.TournamentRegistration:
        registration = self.get(registration_id)
        if registration is None:
            raise LookupError("Registration not found.")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("status") is not None:
            registration.status = changes["status"]
        if changes.get("payment_status") is not None:
            registration.payment_status = changes["payment_status"]
        if "payment_amount" in changes:
            amount = changes["payment_amount"]
            registration.payment_amount = Decimal(str(amount)) if amount is not None else None
        if "notes" in changes:
            registration.notes = changes["notes"]

        self.db.commit()
        self.db.refresh(registration)
        return registration

    def list_registrations(
        self,
        *,
        tournament_id: int | None = None,
        category_id: int | None = None,
        status: str | None = None,
    ) -> list[models.TournamentRegistration]:
        query = self.db.query(models.TournamentRegistration).options(
            selectinload(models.TournamentRegistration.category)
        )
        if tournament_id is not None:
            query = query.join(models.TournamentCategory).filter(
                models.TournamentCategory.tournament_id == tournament_id
            )
        if category_id is not None:
            query = query.filter(models.TournamentRegistration.category_id == category_id)
        if status is not None:
            query = query.filter(models.TournamentRegistration.status == status)
        return query.order_by(models.TournamentRegistration.id.asc()).all()

    def list_for_statistics(
        self,
        *,
        team_id: int | None = None,
        player_id: int | None = None,
        filters: schemas.StatisticsFilters | None = None,
    ) -> list[models.TournamentRegistration]:
        """Registrations of any status, joined to their tournament for filtering."""
        query = (
            self.db.query(models.TournamentRegistration)
            .join(models.TournamentCategory)
            .join(models.Tournament, models.TournamentCategory.tournament_id == models.Tournament.id)
            .options(selectinload(models.TournamentRegistration.category))
        )
        if team_id is not None:
            query = query.filter(models.TournamentRegistration.team_id == team_id)
        if player_id is not None:
            query = query.filter(models.TournamentRegistration.player_id == player_id)
        query = _filtered_by_tournament(query, filters)
        if filters is not None and filters.from_date is not None:
            query = query.filter(models.TournamentRegistration.registration_date >= filters.from_date)
        if filters is not None and filters.to_date is not None:
            query = query.filter(models.TournamentRegistration.registration_date <= filters.to_date)
        return query.order_by(models.TournamentRegistration.id.asc()).all()

    def approved_counts_by_tournament(self) -> dict[int, int]:
        rows = (
            self.db.query(models.TournamentCategory.tournament_id, func.count(models.TournamentRegistration.id))
            .join(models.TournamentRegistration, models.TournamentRegistration.category_id == models.TournamentCategory.id)
            .filter(models.TournamentRegistration.status == "approved")
            .group_by(models.TournamentCategory.tournament_id)
            .all()
        )
        return {tournament_id: count for tournament_id, count in rows}


class MatchRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self):
        return self.db.query(models.Match).options(
            selectinload(models.Match.category),
            selectinload(models.Match.team1),
            selectinload(models.Match.team2),
            selectinload(models.Match.player1),
            selectinload(models.Match.player2),
            selectinload(models.Match.partner1),
            selectinload(models.Match.partner2),
        )

    def get(self, match_id: int) -> models.Match | None:
        return self.db.get(models.Match, match_id)

    def get_or_raise(self, match_id: int) -> models.Match:
        match = self.get(match_id)
        if match is None:
            raise LookupError("Match not found.")
        return match

    def _validate_side(self, side: int, team_id: int | None, player_id: int | None, partner_id: int | None) -> None:
        if team_id is not None and player_id is not None:
            raise ValueError(f"Side {side} cannot be both a team and a player.")
        if partner_id is not None and player_id is None:
            raise ValueError(f"Side {side} partner requires a player.")
        if partner_id is not None and partner_id == player_id:
            raise ValueError(f"Side {side} player cannot partner themselves.")
        if team_id is not None and self.db.get(models.Team, team_id) is None:
            raise LookupError(f"Side {side} team not found.")
        for candidate in (player_id, partner_id):
            if candidate is not None and self.db.get(models.Player, candidate) is None:
                raise LookupError(f"Side {side} player not found.")

    def create(self, payload: schemas.MatchCreate) -> models.Match:
        if self.db.get(models.TournamentCategory, payload.category_id) is None:
            raise LookupError("Tournament category not found.")

        self._validate_side(1, payload.team1_id, payload.player1_id, payload.partner1_id)
        self._validate_side(2, payload.team2_id, payload.player2_id, payload.partner2_id)

        if payload.team1_id is not None and payload.team1_id == payload.team2_id:
            raise ValueError("A team cannot play against itself.")
        side1_players = {payload.player1_id, payload.partner1_id} - {None}
        side2_players = {payload.player2_id, payload.partner2_id} - {None}
        if side1_players & side2_players:
            raise ValueError("A player cannot appear on both sides of a match.")

        match = models.Match(
            category_id=payload.category_id,
            team1_id=payload.team1_id,
            player1_id=payload.player1_id,
            partner1_id=payload.partner1_id,
            team2_id=payload.team2_id,
            player2_id=payload.player2_id,
            partner2_id=payload.partner2_id,
            match_type=payload.match_type,
            status="scheduled",
            round_number=payload.round_number,
            match_number=payload.match_number,
            scheduled_date=payload.scheduled_date,
            venue=payload.venue,
            court_number=payload.court_number,
            notes=payload.notes,
        )
        self.db.add(match)
        self.db.commit()
        self.db.refresh(match)
        return match

    def update(self, match_id: int, payload: schemas.MatchUpdate) -> models.Match:
        match = self.get_or_raise(match_id)
        for field_name, value in payload.model_dump(exclude_unset=True).items():
            if field_name == "match_type" and value is None:
                continue
            setattr(match, field_name, value)
        self.db.commit()
        self.db.refresh(match)
        return match

    def delete(self, match_id: int) -> None:
        match = self.get_or_raise(match_id)
        self.db.delete(match)
        self.db.commit()

    def save(self, match: models.Match) -> models.Match:
        self.db.commit()
        self.db.refresh(match)
        return match

    def rollback(self) -> None:
        self.db.rollback()

    def list_matches(
        self,
        *,
        tournament_id: int | None = None,
        category_id: int | None = None,
        status: str | None = None,
    ) -> list[models.Match]:
        query = self._query()
        if tournament_id is not None:
            query = query.join(models.TournamentCategory).filter(
                models.TournamentCategory.tournament_id == tournament_id
            )
        if category_id is not None:
            query = query.filter(models.Match.category_id == category_id)
        if status is not None:
            query = query.filter(models.Match.status == status)
        return query.order_by(
            models.Match.round_number.asc(),
            models.Match.match_number.asc(),
            models.Match.id.asc(),
        ).all()

    def list_with_statuses(
        self,
        statuses: tuple[str, ...],
        *,
        team_id: int | None = None,
        player_id: int | None = None,
        filters: schemas.StatisticsFilters | None = None,
    ) -> list[models.Match]:
        query = (
            self._query()
            .join(models.TournamentCategory)
            .join(models.Tournament, models.TournamentCategory.tournament_id == models.Tournament.id)
            .filter(models.Match.status.in_(statuses))
        )
        if team_id is not None:
            query = query.filter((models.Match.team1_id == team_id) | (models.Match.team2_id == team_id))
        if player_id is not None:
            query = query.filter(
                (models.Match.player1_id == player_id)
                | (models.Match.partner1_id == player_id)
                | (models.Match.player2_id == player_id)
                | (models.Match.partner2_id == player_id)
            )
        query = _filtered_by_tournament(query, filters)
        match_date = func.coalesce(models.Match.actual_end_date, models.Match.scheduled_date, models.Match.created_at)
        if filters is not None and filters.from_date is not None:
            query = query.filter(match_date >= filters.from_date)
        if filters is not None and filters.to_date is not None:
            query = query.filter(match_date <= filters.to_date)
        return query.order_by(models.Match.id.asc()).all()

    def count(self) -> int:
        return self.db.query(func.count(models.Match.id)).scalar() or 0


class MatchResultRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, result_id: int) -> models.MatchResult | None:
        return self.db.get(models.MatchResult, result_id)

    def _build(self, payload: schemas.MatchResultCreate) -> models.MatchResult:
        if self.db.get(models.Match, payload.match_id) is None:
            raise LookupError("Match not found.")

        existing = (
            self.db.query(models.MatchResult)
            .filter(
                models.MatchResult.match_id == payload.match_id,
                models.MatchResult.set_number == payload.set_number,
            )
            .first()
        )
        if existing:
            raise ValueError(f"Set {payload.set_number} already has a result for this match.")

        result = models.MatchResult(
            match_id=payload.match_id,
            set_number=payload.set_number,
            period_name=payload.period_name,
            score1=payload.score1,
            score2=payload.score2,
            score_details=payload.score_details,
            statistics=payload.statistics,
        )
        self.db.add(result)
        return result

    def create(self, payload: schemas.MatchResultCreate) -> models.MatchResult:
        result = self._build(payload)
        self.db.commit()
        self.db.refresh(result)
        return result

    def bulk_create(self, payloads: list[schemas.MatchResultCreate]) -> list[models.MatchResult]:
        created: list[models.MatchResult] = []
        for payload in payloads:
            created.append(self.create(payload))
        return created

    def update(self, result_id: int, payload: schemas.MatchResultUpdate) -> models.MatchResult:
        result = self.get(result_id)
        if result is None:
            raise LookupError("Match result not found.")
        for field_name, value in payload.model_dump(exclude_unset=True).items():
            setattr(result, field_name, value)
        self.db.commit()
        self.db.refresh(result)
        return result

    def delete(self, result_id: int) -> None:
        result = self.get(result_id)
        if result is None:
            raise LookupError("Match result not found.")
        self.db.delete(result)
        self.db.commit()

    def list_for_match(self, match_id: int) -> list[models.MatchResult]:
        if self.db.get(models.Match, match_id) is None:
            raise LookupError("Match not found.")
        return (
            self.db.query(models.MatchResult)
            .filter(models.MatchResult.match_id == match_id)
            .order_by(models.MatchResult.set_number.asc())
            .all()
        )

    def list_for_matches(self, match_ids: list[int]) -> dict[int, list[models.MatchResult]]:
        grouped: dict[int, list[models.MatchResult]] = {match_id: [] for match_id in match_ids}
        if not match_ids:
            return grouped
        rows = (
            self.db.query(models.MatchResult)
            .filter(models.MatchResult.match_id.in_(match_ids))
            .order_by(models.MatchResult.match_id.asc(), models.MatchResult.set_number.asc())
            .all()
        )
        for row in rows:
            grouped[row.match_id].append(row)
        return grouped


class StandingsRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, standing_id: int) -> models.TournamentStandings | None:
        return self.db.get(models.TournamentStandings, standing_id)

    def find(
        self,
        tournament_id: int,
        category_id: int | None,
        participant_type: str,
        participant_id: int,
    ) -> models.TournamentStandings | None:
        return (
            self.db.query(models.TournamentStandings)
            .filter(
                models.TournamentStandings.tournament_id == tournament_id,
                func.coalesce(models.TournamentStandings.category_id, 0) == (category_id or 0),
                models.TournamentStandings.participant_type == participant_type,
                models.TournamentStandings.participant_id == participant_id,
            )
            .first()
        )

    def add(self, row: models.TournamentStandings) -> models.TournamentStandings:
        self.db.add(row)
        self.db.flush()
        return row

    def list_rows(
        self,
        tournament_id: int,
        category_id: int | None = None,
        *,
        scoped: bool = False,
    ) -> list[models.TournamentStandings]:
        """Rows for a tournament.

        With ``scoped`` the category filter is exact, so ``None`` selects only
        the tournament-wide rows.
        """
        query = self.db.query(models.TournamentStandings).filter(
            models.TournamentStandings.tournament_id == tournament_id
        )
        if scoped or category_id is not None:
            query = query.filter(func.coalesce(models.TournamentStandings.category_id, 0) == (category_id or 0))
        return query.order_by(
            models.TournamentStandings.position.is_(None),
            models.TournamentStandings.position.asc(),
            models.TournamentStandings.participant_name.asc(),
            models.TournamentStandings.id.asc(),
        ).all()

    def delete_by_tournament(self, tournament_id: int) -> int:
        deleted = (
            self.db.query(models.TournamentStandings)
            .filter(models.TournamentStandings.tournament_id == tournament_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
