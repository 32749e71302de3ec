from datetime import datetime

from tournament_stats.leaderboard import LeaderboardRanker, clamp_limit, clamp_offset
from tournament_stats.statistics import EntityTally


def seed_earnings(factory, amounts):
    players = []
    for index, amount in enumerate(amounts):
        player = factory.player(f"Player {index + 1}")
        category = factory.category(factory.tournament(name=f"Open {index + 1}"))
        factory.registration(category, player=player, payment_amount=amount)
        players.append(player)
    return players


def test_earnings_leaderboard_orders_and_skips_zero(factory, ranker):
    p1, p2, p3, p4 = seed_earnings(factory, [500, 0, 1200, 300])

    response = ranker.rank("earnings", "player")

    assert [entry.entity_id for entry in response.entries] == [p3.id, p1.id, p4.id]
    assert [entry.total_earnings for entry in response.entries] == [1200.0, 500.0, 300.0]
    assert [entry.rank for entry in response.entries] == [1, 2, 3]
    assert p2.id not in {entry.entity_id for entry in response.entries}


def test_limit_is_clamped():
    assert clamp_limit(500) == 100
    assert clamp_limit(0) == 1
    assert clamp_limit(-3) == 1
    assert clamp_limit(None) == 20
    assert clamp_offset(-5) == 0


def test_response_reports_clamped_limit(ranker):
    assert ranker.rank("points", "player", limit=500).limit == 100
    assert ranker.rank("points", "player", limit=0).limit == 1


def test_offset_keeps_ranks_contiguous(factory, ranker):
    seed_earnings(factory, [100, 200, 300, 400])

    first_page = ranker.rank("earnings", "player", limit=2, offset=0)
    second_page = ranker.rank("earnings", "player", limit=2, offset=2)

    assert [entry.rank for entry in first_page.entries] == [1, 2]
    assert [entry.rank for entry in second_page.entries] == [3, 4]
    assert [entry.total_earnings for entry in second_page.entries] == [200.0, 100.0]


def test_unknown_category_and_entity_fall_back(factory, ranker):
    factory.team("Alpha")

    response = ranker.rank("style", "coach")

    assert response.category == "win_rate"
    assert response.entity_type == "team"
    assert [entry.entity_name for entry in response.entries] == ["Alpha"]


def test_win_rate_keeps_entities_without_matches(factory, ranker):
    tournament = factory.tournament()
    category = factory.category(tournament, name="Teams", team_composition="team")
    alpha = factory.team("Alpha")
    bravo = factory.team("Bravo")
    factory.team("Charlie")
    factory.match(category, alpha, bravo, status="completed", winner_side=1)

    response = ranker.rank("win_rate", "team")

    assert [entry.entity_name for entry in response.entries] == ["Alpha", "Bravo", "Charlie"]
    assert [entry.win_rate for entry in response.entries] == [100.0, 0.0, 0.0]


def test_points_leaderboard_uses_ranking_points(factory, ranker):
    tournament = factory.tournament()
    category = factory.category(tournament)
    alice = factory.player("Alice")
    bob = factory.player("Bob")
    cara = factory.player("Cara")
    factory.match(category, alice, bob, status="completed", winner_side=1)
    factory.match(category, alice, cara, status="completed", winner_side=1)
    factory.match(category, bob, cara, status="completed", winner_side=1)

    response = ranker.player_points()

    assert [(entry.entity_name, entry.points) for entry in response.entries] == [("Alice", 220), ("Bob", 110)]


class StubAggregator:
    def __init__(self, tallies):
        self.tallies = tallies

    def player_tallies(self, filters=None):
        return {tally.entity_id: tally for tally in self.tallies}

    def team_tallies(self, filters=None):
        return {}


def test_ties_break_on_wins_then_name():
    created = datetime(2024, 1, 1)
    tallies = [
        EntityTally(entity_id=1, name="zed", created_at=created, total_matches=4, matches_won=2),
        EntityTally(entity_id=2, name="Amy", created_at=created, total_matches=2, matches_won=1),
        EntityTally(entity_id=3, name="bea", created_at=created, total_matches=4, matches_won=2),
    ]
    ranker = LeaderboardRanker(StubAggregator(tallies))

    response = ranker.rank("win_rate", "player")

    assert [entry.entity_id for entry in response.entries] == [3, 1, 2]


def test_equal_wins_are_ordered_by_win_rate(factory, ranker):
    tournament = factory.tournament()
    category = factory.category(tournament)
    records = {"Amy": (2, 4), "Foe": (2, 6), "Zed": (2, 2)}
    for name, (wins, played) in records.items():
        player = factory.player(name)
        for index in range(played):
            rival = factory.player(f"{name} rival {index}")
            factory.match(category, player, rival, status="completed", winner_side=1 if index < wins else 2)

    response = ranker.rank("wins", "player", limit=3)

    assert [(entry.entity_name, entry.matches_won, entry.win_rate) for entry in response.entries] == [
        ("Zed", 2, 100.0),
        ("Amy", 2, 50.0),
        ("Foe", 2, 33.33),
    ]


def test_ranking_the_same_snapshot_twice_gives_the_same_order(factory, ranker):
    tournament = factory.tournament()
    category = factory.category(tournament)
    players = [factory.player(name) for name in ("Dana", "cara", "Bea", "alex")]
    for player, rival in zip(players, players[1:] + players[:1]):
        factory.match(category, player, rival, status="completed", winner_side=1)

    for category_name in ("points", "wins", "win_rate"):
        first = ranker.rank(category_name, "player")
        second = ranker.rank(category_name, "player")

        assert first == second
        assert [entry.entity_name for entry in first.entries] == ["alex", "Bea", "cara", "Dana"]
        assert [entry.rank for entry in first.entries] == [1, 2, 3, 4]
