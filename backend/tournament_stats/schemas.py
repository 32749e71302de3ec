from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class ORMBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


T = TypeVar("T")

SportType = Literal[
    "basketball",
    "table_tennis",
    "volleyball",
    "badminton",
    "tennis",
    "football",
    "cricket",
    "chess",
    "esports",
]
TournamentFormat = Literal[
    "elimination",
    "double_elimination",
    "round_robin",
    "league",
    "swiss",
    "groups_and_knockout",
]
TournamentStatus = Literal[
    "draft",
    "upcoming",
    "registration_open",
    "registration_closed",
    "in_progress",
    "completed",
    "cancelled",
]
TeamComposition = Literal["singles", "doubles", "mixed_doubles", "team"]
MatchStatus = Literal["scheduled", "in_progress", "completed", "cancelled", "postponed", "forfeited", "bye"]
MatchType = Literal[
    "group_stage",
    "round_of_128",
    "round_of_64",
    "round_of_32",
    "round_of_16",
    "quarter_final",
    "semi_final",
    "third_place",
    "final",
    "qualifying",
    "playoff",
]
RegistrationStatus = Literal["pending", "approved", "rejected", "withdrawn", "waitlisted"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded", "waived"]
ParticipantType = Literal["player", "team"]
LeaderboardCategory = Literal["points", "wins", "earnings", "win_rate"]
EntityType = Literal["player", "team"]


class ApiResponse(BaseModel, Generic[T]):
    result: T
    meta: str


class ErrorResponse(BaseModel):
    error: str
    meta: str


# ---------------------------------------------------------------------------
# Participants
# ---------------------------------------------------------------------------
class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=255)


class PlayerRead(ORMBaseModel):
    id: int
    name: str
    email: str | None = None
    created_at: datetime


class TeamCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    sport_type: SportType | None = None


class TeamRead(ORMBaseModel):
    id: int
    name: str
    sport_type: str | None = None
    created_at: datetime


class TeamMemberCreate(BaseModel):
    player_id: int = Field(gt=0)


class TeamMemberRead(BaseModel):
    id: int
    team_id: int
    player_id: int
    player_name: str
    joined_at: datetime


# ---------------------------------------------------------------------------
# Tournaments, categories and registrations
# ---------------------------------------------------------------------------
class TournamentCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    sport_type: SportType
    format: TournamentFormat
    status: TournamentStatus = "draft"
    start_date: datetime | None = None
    end_date: datetime | None = None
    prize_pool: float | None = Field(default=None, ge=0)


class TournamentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    status: TournamentStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    prize_pool: float | None = Field(default=None, ge=0)


class TournamentRead(BaseModel):
    id: int
    name: str
    sport_type: str
    format: str
    status: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    prize_pool: float | None = None
    created_at: datetime


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    team_composition: TeamComposition = "singles"


class CategoryRead(ORMBaseModel):
    id: int
    tournament_id: int
    name: str
    team_composition: str


class RegistrationCreate(BaseModel):
    category_id: int = Field(gt=0)
    team_id: int | None = Field(default=None, gt=0)
    player_id: int | None = Field(default=None, gt=0)
    partner_player_id: int | None = Field(default=None, gt=0)
    status: RegistrationStatus = "pending"
    payment_status: PaymentStatus = "pending"
    payment_amount: float | None = Field(default=None, ge=0)
    notes: str | None = None


class RegistrationUpdate(BaseModel):
    status: RegistrationStatus | None = None
    payment_status: PaymentStatus | None = None
    payment_amount: float | None = Field(default=None, ge=0)
    notes: str | None = None


class RegistrationRead(BaseModel):
    id: int
    category_id: int
    tournament_id: int
    team_id: int | None = None
    player_id: int | None = None
    partner_player_id: int | None = None
    status: str
    payment_status: str
    payment_amount: float | None = None
    registration_date: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------
class MatchCreate(BaseModel):
    category_id: int = Field(gt=0)
    team1_id: int | None = Field(default=None, gt=0)
    player1_id: int | None = Field(default=None, gt=0)
    partner1_id: int | None = Field(default=None, gt=0)
    team2_id: int | None = Field(default=None, gt=0)
    player2_id: int | None = Field(default=None, gt=0)
    partner2_id: int | None = Field(default=None, gt=0)
    match_type: MatchType = "group_stage"
    round_number: int | None = Field(default=None, ge=1)
    match_number: int | None = Field(default=None, ge=1)
    scheduled_date: datetime | None = None
    venue: str | None = Field(default=None, max_length=200)
    court_number: str | None = Field(default=None, max_length=32)
    notes: str | None = None


class MatchUpdate(BaseModel):
    match_type: MatchType | None = None
    round_number: int | None = Field(default=None, ge=1)
    match_number: int | None = Field(default=None, ge=1)
    scheduled_date: datetime | None = None
    venue: str | None = Field(default=None, max_length=200)
    court_number: str | None = Field(default=None, max_length=32)
    notes: str | None = None


class MatchStatusUpdate(BaseModel):
    status: MatchStatus
    winner_side: Literal[1, 2] | None = None
    is_draw: bool | None = None
    notes: str | None = None


class MatchCompleteRequest(BaseModel):
    winner_side: Literal[1, 2] | None = None
    is_draw: bool = False


class MatchCancelRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class BulkMatchCancel(BaseModel):
    match_ids: list[int] = Field(min_length=1)
    reason: str = Field(min_length=1, max_length=500)


class BulkMatchUpdate(BaseModel):
    match_ids: list[int] = Field(min_length=1)
    status: MatchStatus | None = None
    winner_side: Literal[1, 2] | None = None
    is_draw: bool | None = None
    scheduled_date: datetime | None = None
    venue: str | None = Field(default=None, max_length=200)
    court_number: str | None = Field(default=None, max_length=32)
    notes: str | None = None


class BulkFailure(BaseModel):
    id: int
    error: str


class BulkOperationResult(BaseModel):
    succeeded: list[int] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)


class MatchRead(BaseModel):
    id: int
    category_id: int
    tournament_id: int | None = None

    team1_id: int | None = None
    player1_id: int | None = None
    partner1_id: int | None = None
    side1: str

    team2_id: int | None = None
    player2_id: int | None = None
    partner2_id: int | None = None
    side2: str

    match_type: str
    status: str
    round_number: int | None = None
    match_number: int | None = None

    scheduled_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    venue: str | None = None
    court_number: str | None = None

    winner_side: int | None = None
    is_draw: bool = False
    notes: str | None = None


class MatchResultCreate(BaseModel):
    match_id: int = Field(gt=0)
    set_number: int = Field(ge=1)
    period_name: str | None = Field(default=None, max_length=64)
    score1: int | None = Field(default=None, ge=0)
    score2: int | None = Field(default=None, ge=0)
    score_details: dict[str, Any] | None = None
    statistics: dict[str, Any] | None = None


class MatchResultBulkCreate(BaseModel):
    results: list[MatchResultCreate] = Field(min_length=1)


class MatchResultUpdate(BaseModel):
    score1: int | None = Field(default=None, ge=0)
    score2: int | None = Field(default=None, ge=0)
    period_name: str | None = Field(default=None, max_length=64)
    score_details: dict[str, Any] | None = None
    statistics: dict[str, Any] | None = None


class MatchResultRead(ORMBaseModel):
    id: int
    match_id: int
    set_number: int
    period_name: str | None = None
    score1: int | None = None
    score2: int | None = None
    score_details: dict[str, Any] | None = None
    statistics: dict[str, Any] | None = None
    created_at: datetime


class ScorePair(BaseModel):
    score1: int | None = None
    score2: int | None = None


class ScoreValidationRequest(BaseModel):
    scores: list[ScorePair] = Field(default_factory=list)


class ScoreValidationResult(BaseModel):
    match_id: int
    valid: bool
    errors: list[str] = Field(default_factory=list)


class MatchScoreSummary(BaseModel):
    match_id: int
    sets_played: int
    sets_won1: int
    sets_won2: int
    total_points1: int
    total_points2: int


# ---------------------------------------------------------------------------
# Standings
# ---------------------------------------------------------------------------
class StandingsUpsert(BaseModel):
    """Partial standings record; ``None`` fields keep the stored value."""

    tournament_id: int = Field(gt=0)
    category_id: int | None = Field(default=None, gt=0)
    participant_id: int = Field(gt=0)
    participant_type: ParticipantType
    participant_name: str | None = Field(default=None, max_length=200)

    points: int | None = None
    matches_played: int | None = Field(default=None, ge=0)
    matches_won: int | None = Field(default=None, ge=0)
    matches_lost: int | None = Field(default=None, ge=0)
    matches_drawn: int | None = Field(default=None, ge=0)
    sets_won: int | None = Field(default=None, ge=0)
    sets_lost: int | None = Field(default=None, ge=0)
    games_won: int | None = Field(default=None, ge=0)
    games_lost: int | None = Field(default=None, ge=0)
    goal_difference: int | None = None
    bonus_points: int | None = Field(default=None, ge=0)
    penalty_points: int | None = Field(default=None, ge=0)
    is_eliminated: bool | None = None
    elimination_round: MatchType | None = None


class StandingsBulkUpsert(BaseModel):
    records: list[StandingsUpsert] = Field(min_length=1)


class StandingsRowUpdate(BaseModel):
    position: int | None = Field(default=None, ge=1)
    bonus_points: int | None = Field(default=None, ge=0)
    penalty_points: int | None = Field(default=None, ge=0)
    is_eliminated: bool | None = None
    elimination_round: MatchType | None = None


class StandingsUpdateRequest(BaseModel):
    tournament_id: int = Field(gt=0)
    category_id: int | None = Field(default=None, gt=0)
    recalculate_all: bool = True
    match_ids: list[int] | None = None


class StandingEntry(BaseModel):
    id: int
    position: int | None = None
    participant_id: int
    participant_type: str
    participant_name: str
    category_id: int | None = None

    points: int
    bonus_points: int
    penalty_points: int
    matches_played: int
    matches_won: int
    matches_lost: int
    matches_drawn: int
    sets_won: int
    sets_lost: int
    games_won: int
    games_lost: int
    goal_difference: int

    win_percentage: float
    set_ratio: float | None = None
    game_ratio: float | None = None

    is_eliminated: bool
    elimination_round: str | None = None
    last_updated: datetime


class StandingsResponse(BaseModel):
    tournament_id: int
    category_id: int | None = None
    standings: list[StandingEntry] = Field(default_factory=list)
    last_updated: datetime | None = None


class StandingsOperationResult(BaseModel):
    tournament_id: int
    category_id: int | None = None
    affected_rows: int


# ---------------------------------------------------------------------------
# Statistics, leaderboards and analytics
# ---------------------------------------------------------------------------
class StatisticsFilters(BaseModel):
    sport_type: SportType | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    tournament_id: int | None = None
    limit: int = 20
    offset: int = 0


class PlayerStatistics(BaseModel):
    player_id: int
    player_name: str
    total_tournaments: int = 0
    tournaments_won: int = 0
    tournaments_runner_up: int = 0
    total_matches: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    win_rate: float = 0.0
    total_earnings: float = 0.0
    average_placement: float = 0.0
    best_placement: int = 0
    current_ranking: int | None = None
    ranking_points: int = 0
    last_active: datetime


class TeamStatistics(BaseModel):
    team_id: int
    team_name: str
    members_count: int = 0
    total_tournaments: int = 0
    tournaments_won: int = 0
    tournaments_runner_up: int = 0
    total_matches: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    win_rate: float = 0.0
    total_earnings: float = 0.0
    average_placement: float = 0.0
    best_placement: int = 0
    current_ranking: int | None = None
    ranking_points: int = 0
    last_active: datetime


class TopPerformer(BaseModel):
    id: int
    name: str
    wins: int


class TournamentStatistics(BaseModel):
    tournament_id: int
    tournament_name: str
    sport_type: str
    status: str
    total_registrations: int = 0
    total_participants: int = 0
    total_teams: int = 0
    total_matches: int = 0
    completed_matches: int = 0
    pending_matches: int = 0
    completion_rate: float = 0.0
    total_prize_pool: float = 0.0
    average_match_duration: float | None = None
    most_wins_player: TopPerformer | None = None
    most_wins_team: TopPerformer | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class LeaderboardEntry(BaseModel):
    rank: int
    entity_id: int
    entity_name: str
    entity_type: EntityType
    points: int
    tournaments_won: int
    matches_won: int
    win_rate: float
    total_earnings: float
    last_active: datetime


class LeaderboardResponse(BaseModel):
    category: LeaderboardCategory
    entity_type: EntityType
    limit: int
    offset: int
    entries: list[LeaderboardEntry] = Field(default_factory=list)


class GameRecord(BaseModel):
    record_type: str
    entity_id: int
    entity_name: str
    value: float
    tournament_id: int | None = None
    achieved_at: datetime


class GrowthMetrics(BaseModel):
    new_players_this_month: int = 0
    new_players_last_month: int = 0
    player_growth_rate: float = 0.0
    new_teams_this_month: int = 0
    new_teams_last_month: int = 0
    team_growth_rate: float = 0.0
    tournaments_this_month: int = 0
    tournaments_last_month: int = 0
    tournament_growth_rate: float = 0.0
    matches_this_month: int = 0
    revenue_this_month: float = 0.0
    revenue_last_month: float = 0.0
    revenue_growth_rate: float = 0.0


class AnalyticsDashboard(BaseModel):
    total_players: int
    total_teams: int
    total_tournaments: int
    total_matches: int
    active_tournaments: int
    total_earnings_distributed: float
    average_tournament_size: float
    most_popular_sport: str | None = None
    top_players: list[LeaderboardEntry] = Field(default_factory=list)
    top_teams: list[LeaderboardEntry] = Field(default_factory=list)
    recent_tournaments: list[TournamentStatistics] = Field(default_factory=list)
    growth_metrics: GrowthMetrics
