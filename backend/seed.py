from __future__ import annotations

import argparse
import logging
from datetime import timedelta
from decimal import Decimal
from itertools import combinations

from tournament_stats import models
from tournament_stats.config import settings
from tournament_stats.database import create_schema, session_scope
from tournament_stats.repositories import (
    MatchRepository,
    MatchResultRepository,
    ParticipantRepository,
    RegistrationRepository,
    StandingsRepository,
    TournamentRepository,
)
from tournament_stats.standings import StandingsEngine

logger = logging.getLogger(__name__)

TEAM_ROSTERS = {
    "Golden Monks": ["Swaroop", "Ashutosh", "Avinash", "Pallavi"],
    "Spartans": ["Nagakiran", "Nitesh", "Sriraman", "Himani"],
    "Feather Fighters": ["Suman", "Jeetu", "Ranjith", "Snigdha"],
    "Smash Hawks": ["Pratham", "Darshan", "Abhishek", "Ruchika"],
}

TOURNAMENTS = [
    {
        "name": "City Badminton Open",
        "sport_type": "badminton",
        "format": "round_robin",
        "status": "in_progress",
        "prize_pool": Decimal("5000.00"),
        "entry_fee": Decimal("25.00"),
    },
    {
        "name": "Winter Table Tennis Cup",
        "sport_type": "table_tennis",
        "format": "elimination",
        "status": "registration_open",
        "prize_pool": Decimal("1200.00"),
        "entry_fee": Decimal("10.00"),
    },
]

# (score1, score2) per set for each demo round-robin fixture, in fixture order.
DEMO_SET_SCORES = [
    [(21, 17), (21, 15)],
    [(16, 21), (21, 19), (18, 21)],
    [(21, 12), (21, 18)],
    [(19, 21), (21, 23)],
    [(21, 19), (20, 22), (21, 16)],
]


def reset_database() -> None:
    create_schema(reset=True)


def winner_from_sets(sets: list[tuple[int, int]]) -> int:
    won1 = sum(1 for score1, score2 in sets if score1 > score2)
    won2 = sum(1 for score1, score2 in sets if score2 > score1)
    return 1 if won1 > won2 else 2


def seed(*, demo_progress: bool = False) -> None:
    reset_database()

    with session_scope() as db:
        now = models.utcnow()
        teams: list[models.Team] = []

        for team_name, roster in TEAM_ROSTERS.items():
            team = models.Team(name=team_name, sport_type="badminton")
            db.add(team)
            db.flush()
            teams.append(team)
            for player_name in roster:
                player = models.Player(name=player_name)
                db.add(player)
                db.flush()
                db.add(models.TeamMember(team_id=team.id, player_id=player.id))

        for details in TOURNAMENTS:
            tournament = models.Tournament(
                name=details["name"],
                sport_type=details["sport_type"],
                format=details["format"],
                status=details["status"],
                prize_pool=details["prize_pool"],
                start_date=now + timedelta(days=7),
                end_date=now + timedelta(days=9),
            )
            db.add(tournament)
            db.flush()

            category = models.TournamentCategory(
                tournament_id=tournament.id,
                name="Team Event",
                team_composition="team",
            )
            db.add(category)
            db.flush()

            for team in teams:
                db.add(
                    models.TournamentRegistration(
                        category_id=category.id,
                        team_id=team.id,
                        status="approved",
                        payment_status="completed",
                        payment_amount=details["entry_fee"],
                    )
                )

            if details["format"] != "round_robin":
                continue

            for match_number, (team1, team2) in enumerate(combinations(teams, 2), start=1):
                match = models.Match(
                    category_id=category.id,
                    team1_id=team1.id,
                    team2_id=team2.id,
                    match_type="group_stage",
                    status="scheduled",
                    round_number=1,
                    match_number=match_number,
                    scheduled_date=now + timedelta(days=7, minutes=30 * match_number),
                    venue="Central Sports Hall",
                    court_number=str((match_number - 1) % 3 + 1),
                )
                db.add(match)
                db.flush()

                if not demo_progress or match_number > len(DEMO_SET_SCORES):
                    continue

                sets = DEMO_SET_SCORES[match_number - 1]
                for set_number, (score1, score2) in enumerate(sets, start=1):
                    db.add(models.MatchResult(match_id=match.id, set_number=set_number, score1=score1, score2=score2))
                match.status = "completed"
                match.winner_side = winner_from_sets(sets)
                match.actual_start_date = now - timedelta(hours=match_number)
                match.actual_end_date = match.actual_start_date + timedelta(minutes=40)

        db.commit()

        if demo_progress:
            standings_engine = StandingsEngine(
                StandingsRepository(db),
                TournamentRepository(db),
                ParticipantRepository(db),
                RegistrationRepository(db),
                MatchRepository(db),
                MatchResultRepository(db),
                points=settings.points,
            )
            for tournament in db.query(models.Tournament).all():
                standings_engine.update_standings(tournament.id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    parser = argparse.ArgumentParser(description="Seed tournament data.")
    parser.add_argument(
        "--demo-progress",
        action="store_true",
        help="Seed with completed matches, set scores and standings for demo screens.",
    )
    args = parser.parse_args()

    seed(demo_progress=args.demo_progress)
    mode = "demo" if args.demo_progress else "fresh"
    logger.info("Seed completed (%s)", mode)
