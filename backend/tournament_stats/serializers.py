from . import models, schemas
from .formulas import percentage, ratio, round_half_up


def _money(value: object) -> float | None:
    if value is None:
        return None
    return round_half_up(value)


def _side_label(team: models.Team | None, player: models.Player | None, partner: models.Player | None) -> str:
    if team is not None:
        return team.name
    if player is not None:
        if partner is not None:
            return f"{player.name} / {partner.name}"
        return player.name
    return "TBD"


def tournament_to_read(tournament: models.Tournament) -> schemas.TournamentRead:
    return schemas.TournamentRead(
        id=tournament.id,
        name=tournament.name,
        sport_type=tournament.sport_type,
        format=tournament.format,
        status=tournament.status,
        start_date=tournament.start_date,
        end_date=tournament.end_date,
        prize_pool=_money(tournament.prize_pool),
        created_at=tournament.created_at,
    )


def registration_to_read(registration: models.TournamentRegistration) -> schemas.RegistrationRead:
    return schemas.RegistrationRead(
        id=registration.id,
        category_id=registration.category_id,
        tournament_id=registration.category.tournament_id,
        team_id=registration.team_id,
        player_id=registration.player_id,
        partner_player_id=registration.partner_player_id,
        status=registration.status,
        payment_status=registration.payment_status,
        payment_amount=_money(registration.payment_amount),
        registration_date=registration.registration_date,
        updated_at=registration.updated_at,
    )


def member_to_read(member: models.TeamMember) -> schemas.TeamMemberRead:
    return schemas.TeamMemberRead(
        id=member.id,
        team_id=member.team_id,
        player_id=member.player_id,
        player_name=member.player.name if member.player else "",
        joined_at=member.joined_at,
    )


def match_to_read(match: models.Match) -> schemas.MatchRead:
    return schemas.MatchRead(
        id=match.id,
        category_id=match.category_id,
        tournament_id=match.category.tournament_id if match.category else None,
        team1_id=match.team1_id,
        player1_id=match.player1_id,
        partner1_id=match.partner1_id,
        side1=_side_label(match.team1, match.player1, match.partner1),
        team2_id=match.team2_id,
        player2_id=match.player2_id,
        partner2_id=match.partner2_id,
        side2=_side_label(match.team2, match.player2, match.partner2),
        match_type=match.match_type,
        status=match.status,
        round_number=match.round_number,
        match_number=match.match_number,
        scheduled_date=match.scheduled_date,
        actual_start_date=match.actual_start_date,
        actual_end_date=match.actual_end_date,
        venue=match.venue,
        court_number=match.court_number,
        winner_side=match.winner_side,
        is_draw=match.is_draw,
        notes=match.notes,
    )


def standing_to_entry(row: models.TournamentStandings) -> schemas.StandingEntry:
    return schemas.StandingEntry(
        id=row.id,
        position=row.position,
        participant_id=row.participant_id,
        participant_type=row.participant_type,
        participant_name=row.participant_name,
        category_id=row.category_id,
        points=row.points,
        bonus_points=row.bonus_points,
        penalty_points=row.penalty_points,
        matches_played=row.matches_played,
        matches_won=row.matches_won,
        matches_lost=row.matches_lost,
        matches_drawn=row.matches_drawn,
        sets_won=row.sets_won,
        sets_lost=row.sets_lost,
        games_won=row.games_won,
        games_lost=row.games_lost,
        goal_difference=row.goal_difference,
        win_percentage=percentage(row.matches_won, row.matches_played),
        set_ratio=ratio(row.sets_won, row.sets_lost),
        game_ratio=ratio(row.games_won, row.games_lost),
        is_eliminated=row.is_eliminated,
        elimination_round=row.elimination_round,
        last_updated=row.last_updated,
    )


def standings_response(
    tournament_id: int,
    category_id: int | None,
    rows: list[models.TournamentStandings],
) -> schemas.StandingsResponse:
    return schemas.StandingsResponse(
        tournament_id=tournament_id,
        category_id=category_id,
        standings=[standing_to_entry(row) for row in rows],
        last_updated=max((row.last_updated for row in rows), default=None),
    )


def envelope(result: object, meta: str) -> dict[str, object]:
    return {"result": result, "meta": meta}
