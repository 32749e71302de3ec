from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tournament_stats import models
from tournament_stats.analytics import AnalyticsDashboardAssembler, GrowthMetricsCalculator
from tournament_stats.database import build_engine, create_schema, create_session_factory, get_db
from tournament_stats.leaderboard import LeaderboardRanker
from tournament_stats.lifecycle import MatchLifecycle
from tournament_stats.main import app
from tournament_stats.repositories import (
    MatchRepository,
    MatchResultRepository,
    ParticipantRepository,
    RegistrationRepository,
    StandingsRepository,
    TournamentRepository,
)
from tournament_stats.standings import StandingsEngine
from tournament_stats.statistics import StatisticsAggregator


@pytest.fixture()
def session_factory():
    engine = build_engine("sqlite://")
    create_schema(engine)
    return create_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Factory:
    """Creates committed rows with sensible defaults."""

    def __init__(self, db):
        self.db = db

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def player(self, name, **fields):
        return self._save(models.Player(name=name, **fields))

    def team(self, name, **fields):
        return self._save(models.Team(name=name, **fields))

    def member(self, team, player):
        return self._save(models.TeamMember(team_id=team.id, player_id=player.id))

    def tournament(
        self,
        name="Spring Open",
        sport_type="badminton",
        format="round_robin",
        status="in_progress",
        prize_pool=None,
        **fields,
    ):
        if prize_pool is not None:
            prize_pool = Decimal(str(prize_pool))
        return self._save(
            models.Tournament(
                name=name,
                sport_type=sport_type,
                format=format,
                status=status,
                prize_pool=prize_pool,
                **fields,
            )
        )

    def category(self, tournament, name="Open Singles", team_composition="singles"):
        return self._save(
            models.TournamentCategory(
                tournament_id=tournament.id,
                name=name,
                team_composition=team_composition,
            )
        )

    def registration(self, category, *, player=None, team=None, status="approved", payment_amount=None, **fields):
        if payment_amount is not None:
            payment_amount = Decimal(str(payment_amount))
        return self._save(
            models.TournamentRegistration(
                category_id=category.id,
                player_id=player.id if player is not None else None,
                team_id=team.id if team is not None else None,
                status=status,
                payment_amount=payment_amount,
                **fields,
            )
        )

    def match(
        self,
        category,
        side1,
        side2,
        *,
        status="scheduled",
        winner_side=None,
        is_draw=False,
        match_type="group_stage",
        **fields,
    ):
        sides = {}
        for number, participant in ((1, side1), (2, side2)):
            if isinstance(participant, models.Team):
                sides[f"team{number}_id"] = participant.id
            else:
                sides[f"player{number}_id"] = participant.id
        return self._save(
            models.Match(
                category_id=category.id,
                status=status,
                winner_side=winner_side,
                is_draw=is_draw,
                match_type=match_type,
                **sides,
                **fields,
            )
        )

    def result(self, match, set_number, score1, score2):
        return self._save(
            models.MatchResult(match_id=match.id, set_number=set_number, score1=score1, score2=score2)
        )


@pytest.fixture()
def factory(db):
    return Factory(db)


@pytest.fixture()
def lifecycle(db):
    return MatchLifecycle(MatchRepository(db))


@pytest.fixture()
def aggregator(db):
    return StatisticsAggregator(
        ParticipantRepository(db),
        TournamentRepository(db),
        RegistrationRepository(db),
        MatchRepository(db),
    )


@pytest.fixture()
def ranker(aggregator):
    return LeaderboardRanker(aggregator)


@pytest.fixture()
def standings_engine(db):
    return StandingsEngine(
        StandingsRepository(db),
        TournamentRepository(db),
        ParticipantRepository(db),
        RegistrationRepository(db),
        MatchRepository(db),
        MatchResultRepository(db),
    )


@pytest.fixture()
def make_assembler(db, aggregator, ranker):
    def build(now=models.utcnow):
        growth = GrowthMetricsCalculator(ParticipantRepository(db), TournamentRepository(db), now=now)
        return AnalyticsDashboardAssembler(
            ParticipantRepository(db),
            TournamentRepository(db),
            RegistrationRepository(db),
            MatchRepository(db),
            aggregator,
            ranker,
            growth,
        )

    return build
