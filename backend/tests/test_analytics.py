from datetime import datetime

FIXED_NOW = datetime(2024, 5, 15, 9, 0)


def fixed_now():
    return FIXED_NOW


def test_growth_compares_calendar_months(factory, make_assembler):
    factory.player("May One", created_at=datetime(2024, 5, 3))
    factory.player("May Two", created_at=datetime(2024, 5, 14, 23, 59))
    factory.player("April", created_at=datetime(2024, 4, 20))
    factory.player("March", created_at=datetime(2024, 3, 31))
    factory.tournament(name="May Cup", prize_pool=1000, created_at=datetime(2024, 5, 1))

    growth = make_assembler(now=fixed_now).growth.calculate()

    assert growth.new_players_this_month == 2
    assert growth.new_players_last_month == 1
    assert growth.player_growth_rate == 100.0
    assert growth.tournaments_this_month == 1
    assert growth.tournaments_last_month == 0
    assert growth.tournament_growth_rate == 0.0
    assert growth.revenue_this_month == 1000.0
    assert growth.matches_this_month == 0


def test_growth_without_previous_month_is_zero(factory, make_assembler):
    factory.player("Fresh", created_at=datetime(2024, 5, 2))

    growth = make_assembler(now=fixed_now).growth.calculate()

    assert growth.new_players_this_month == 1
    assert growth.new_players_last_month == 0
    assert growth.player_growth_rate == 0.0


def test_growth_wraps_january_to_december(factory, make_assembler):
    factory.team("Winter", created_at=datetime(2023, 12, 10))
    factory.team("New Year", created_at=datetime(2024, 1, 2))
    factory.team("Also New", created_at=datetime(2024, 1, 3))

    growth = make_assembler(now=lambda: datetime(2024, 1, 20)).growth.calculate()

    assert growth.new_teams_last_month == 1
    assert growth.new_teams_this_month == 2
    assert growth.team_growth_rate == 100.0


def test_dashboard_totals(factory, make_assembler):
    spring = factory.tournament(name="Spring Open", status="in_progress")
    summer = factory.tournament(name="Summer Open", status="registration_open")
    factory.tournament(name="Winter Open", status="completed", prize_pool=2000)
    factory.tournament(name="Clay Cup", sport_type="tennis", status="completed", prize_pool=500.25)
    spring_singles = factory.category(spring)
    summer_singles = factory.category(summer)
    alice, bob, cara = (factory.player(name) for name in ("Alice", "Bob", "Cara"))
    for player in (alice, bob, cara):
        factory.registration(spring_singles, player=player)
    factory.registration(summer_singles, player=alice)
    factory.registration(summer_singles, player=bob, status="rejected")
    factory.match(spring_singles, alice, bob, status="completed", winner_side=1)

    dashboard = make_assembler().assemble()

    assert dashboard.total_players == 3
    assert dashboard.total_tournaments == 4
    assert dashboard.total_matches == 1
    assert dashboard.active_tournaments == 2
    assert dashboard.total_earnings_distributed == 2500.25
    assert dashboard.average_tournament_size == 2.0
    assert dashboard.most_popular_sport == "badminton"
    assert [entry.entity_name for entry in dashboard.top_players] == ["Alice"]
    assert dashboard.top_teams == []
    assert len(dashboard.recent_tournaments) == 4


def test_dashboard_on_empty_database(make_assembler):
    dashboard = make_assembler().assemble()

    assert dashboard.total_players == 0
    assert dashboard.average_tournament_size == 0.0
    assert dashboard.most_popular_sport is None
    assert dashboard.total_earnings_distributed == 0.0


def test_most_popular_sport_ties_break_alphabetically(factory, make_assembler):
    factory.tournament(name="Court Cup", sport_type="tennis")
    factory.tournament(name="Hoop Cup", sport_type="basketball")

    assert make_assembler().most_popular_sport() == "basketball"


def test_game_records_rank_tournament_participations(factory, make_assembler):
    alice = factory.player("Alice")
    bob = factory.player("Bob")
    factory.player("Idle")
    for name in ("First", "Second"):
        category = factory.category(factory.tournament(name=name))
        factory.registration(category, player=alice)
    factory.registration(factory.category(factory.tournament(name="Third")), player=bob)

    records = make_assembler().game_records()

    assert [(record.entity_name, record.value) for record in records] == [("Alice", 2.0), ("Bob", 1.0)]
    assert {record.record_type for record in records} == {"most_tournament_participations"}
