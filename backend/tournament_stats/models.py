from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base

SPORT_TYPES = (
    "basketball",
    "table_tennis",
    "volleyball",
    "badminton",
    "tennis",
    "football",
    "cricket",
    "chess",
    "esports",
)
TOURNAMENT_FORMATS = (
    "elimination",
    "double_elimination",
    "round_robin",
    "league",
    "swiss",
    "groups_and_knockout",
)
TOURNAMENT_STATUSES = (
    "draft",
    "upcoming",
    "registration_open",
    "registration_closed",
    "in_progress",
    "completed",
    "cancelled",
)
TEAM_COMPOSITIONS = ("singles", "doubles", "mixed_doubles", "team")
MATCH_STATUSES = (
    "scheduled",
    "in_progress",
    "completed",
    "cancelled",
    "postponed",
    "forfeited",
    "bye",
)
MATCH_TYPES = (
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
)
KNOCKOUT_MATCH_TYPES = frozenset(
    {
        "round_of_128",
        "round_of_64",
        "round_of_32",
        "round_of_16",
        "quarter_final",
        "semi_final",
        "final",
    }
)
REGISTRATION_STATUSES = ("pending", "approved", "rejected", "withdrawn", "waitlisted")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded", "waived")
PARTICIPANT_TYPES = ("player", "team")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _one_of(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} in ({quoted})"


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    sport_type = Column(String(32), nullable=False, index=True)
    format = Column(String(32), nullable=False)
    status = Column(String(32), default="draft", nullable=False, index=True)

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    prize_pool = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    categories = relationship("TournamentCategory", back_populates="tournament", cascade="all, delete-orphan")
    standings = relationship("TournamentStandings", back_populates="tournament", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(_one_of("sport_type", SPORT_TYPES), name="ck_tournament_sport_type_valid"),
        CheckConstraint(_one_of("format", TOURNAMENT_FORMATS), name="ck_tournament_format_valid"),
        CheckConstraint(_one_of("status", TOURNAMENT_STATUSES), name="ck_tournament_status_valid"),
        CheckConstraint("prize_pool is null or prize_pool >= 0", name="ck_tournament_prize_pool_nonnegative"),
    )


class TournamentCategory(Base):
    __tablename__ = "tournament_categories"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    team_composition = Column(String(32), default="singles", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    tournament = relationship("Tournament", back_populates="categories")
    matches = relationship("Match", back_populates="category", cascade="all, delete-orphan")
    registrations = relationship("TournamentRegistration", back_populates="category", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tournament_id", "name", name="uq_category_name_tournament"),
        CheckConstraint(_one_of("team_composition", TEAM_COMPOSITIONS), name="ck_category_composition_valid"),
    )


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    memberships = relationship("TeamMember", back_populates="player", cascade="all, delete-orphan")


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    sport_type = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    members = relationship("TeamMember", back_populates="team", cascade="all, delete-orphan")


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    joined_at = Column(DateTime, default=utcnow, nullable=False)

    team = relationship("Team", back_populates="members")
    player = relationship("Player", back_populates="memberships")

    __table_args__ = (UniqueConstraint("team_id", "player_id", name="uq_team_member"),)


class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("tournament_categories.id"), nullable=False, index=True)

    # A side is either a team or a player (with an optional doubles partner).
    team1_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    player1_id = Column(Integer, ForeignKey("players.id"), nullable=True, index=True)
    partner1_id = Column(Integer, ForeignKey("players.id"), nullable=True)
    team2_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    player2_id = Column(Integer, ForeignKey("players.id"), nullable=True, index=True)
    partner2_id = Column(Integer, ForeignKey("players.id"), nullable=True)

    match_type = Column(String(32), default="group_stage", nullable=False)
    status = Column(String(32), default="scheduled", nullable=False, index=True)
    round_number = Column(Integer, nullable=True)
    match_number = Column(Integer, nullable=True)

    scheduled_date = Column(DateTime, nullable=True)
    actual_start_date = Column(DateTime, nullable=True)
    actual_end_date = Column(DateTime, nullable=True)
    venue = Column(String(200), nullable=True)
    court_number = Column(String(32), nullable=True)

    winner_side = Column(Integer, nullable=True)
    is_draw = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("TournamentCategory", back_populates="matches")
    team1 = relationship("Team", foreign_keys=[team1_id])
    team2 = relationship("Team", foreign_keys=[team2_id])
    player1 = relationship("Player", foreign_keys=[player1_id])
    player2 = relationship("Player", foreign_keys=[player2_id])
    partner1 = relationship("Player", foreign_keys=[partner1_id])
    partner2 = relationship("Player", foreign_keys=[partner2_id])
    results = relationship(
        "MatchResult",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchResult.set_number",
    )

    __table_args__ = (
        CheckConstraint(_one_of("status", MATCH_STATUSES), name="ck_match_status_valid"),
        CheckConstraint(_one_of("match_type", MATCH_TYPES), name="ck_match_type_valid"),
        CheckConstraint("winner_side in (1, 2) or winner_side is null", name="ck_match_winner_side_valid"),
        CheckConstraint("team1_id is null or player1_id is null", name="ck_match_side1_single_kind"),
        CheckConstraint("team2_id is null or player2_id is null", name="ck_match_side2_single_kind"),
    )


class MatchResult(Base):
    __tablename__ = "match_results"

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    set_number = Column(Integer, nullable=False)
    period_name = Column(String(64), nullable=True)

    score1 = Column(Integer, nullable=True)
    score2 = Column(Integer, nullable=True)
    score_details = Column(JSON, nullable=True)
    statistics = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    match = relationship("Match", back_populates="results")

    __table_args__ = (
        UniqueConstraint("match_id", "set_number", name="uq_match_result_set"),
        CheckConstraint("set_number >= 1", name="ck_match_result_set_number_positive"),
        CheckConstraint("score1 is null or score1 >= 0", name="ck_match_result_score1_nonnegative"),
        CheckConstraint("score2 is null or score2 >= 0", name="ck_match_result_score2_nonnegative"),
    )


class TournamentRegistration(Base):
    __tablename__ = "tournament_registrations"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("tournament_categories.id"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=True, index=True)
    partner_player_id = Column(Integer, ForeignKey("players.id"), nullable=True)

    status = Column(String(32), default="pending", nullable=False, index=True)
    payment_status = Column(String(32), default="pending", nullable=False)
    payment_amount = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)

    registration_date = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("TournamentCategory", back_populates="registrations")
    team = relationship("Team")
    player = relationship("Player", foreign_keys=[player_id])
    partner = relationship("Player", foreign_keys=[partner_player_id])

    __table_args__ = (
        CheckConstraint(_one_of("status", REGISTRATION_STATUSES), name="ck_registration_status_valid"),
        CheckConstraint(_one_of("payment_status", PAYMENT_STATUSES), name="ck_registration_payment_status_valid"),
        CheckConstraint(
            "(team_id is null) <> (player_id is null)",
            name="ck_registration_single_participant",
        ),
        CheckConstraint(
            "payment_amount is null or payment_amount >= 0",
            name="ck_registration_payment_nonnegative",
        ),
    )


class TournamentStandings(Base):
    __tablename__ = "tournament_standings"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("tournament_categories.id"), nullable=True, index=True)

    participant_id = Column(Integer, nullable=False)
    participant_type = Column(String(16), nullable=False)
    participant_name = Column(String(200), nullable=False)

    position = Column(Integer, nullable=True)
    points = Column(Integer, default=0, nullable=False)
    matches_played = Column(Integer, default=0, nullable=False)
    matches_won = Column(Integer, default=0, nullable=False)
    matches_lost = Column(Integer, default=0, nullable=False)
    matches_drawn = Column(Integer, default=0, nullable=False)
    sets_won = Column(Integer, default=0, nullable=False)
    sets_lost = Column(Integer, default=0, nullable=False)
    games_won = Column(Integer, default=0, nullable=False)
    games_lost = Column(Integer, default=0, nullable=False)
    goal_difference = Column(Integer, default=0, nullable=False)
    bonus_points = Column(Integer, default=0, nullable=False)
    penalty_points = Column(Integer, default=0, nullable=False)

    is_eliminated = Column(Boolean, default=False, nullable=False)
    elimination_round = Column(String(32), nullable=True)
    last_updated = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tournament = relationship("Tournament", back_populates="standings")
    category = relationship("TournamentCategory")

    __table_args__ = (
        CheckConstraint(_one_of("participant_type", PARTICIPANT_TYPES), name="ck_standings_participant_type_valid"),
        CheckConstraint("position is null or position >= 1", name="ck_standings_position_positive"),
        # A null category shares one slot per participant via the 0 sentinel.
        Index(
            "uq_standings_participant",
            "tournament_id",
            func.coalesce(category_id, 0),
            "participant_type",
            "participant_id",
            unique=True,
        ),
    )
