from tournament_stats import models


def create_player(client, name):
    response = client.post("/players/", json={"name": name})
    assert response.status_code == 201
    return response.json()["result"]["id"]


def create_singles_category(client, name="Spring Open", **fields):
    tournament = client.post(
        "/tournaments/",
        json={"name": name, "sport_type": "badminton", "format": "round_robin", "status": "in_progress", **fields},
    )
    assert tournament.status_code == 201
    tournament_id = tournament.json()["result"]["id"]

    category = client.post(f"/tournaments/{tournament_id}/categories", json={"name": "Open Singles"})
    assert category.status_code == 201
    return tournament_id, category.json()["result"]["id"]


def create_match(client, category_id, player1_id, player2_id):
    response = client.post(
        "/matches/",
        json={"category_id": category_id, "player1_id": player1_id, "player2_id": player2_id},
    )
    assert response.status_code == 201
    return response.json()["result"]["id"]


def test_healthcheck(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_success_envelope_carries_meta(client):
    player_id = create_player(client, "Alice")

    response = client.get(f"/players/{player_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"] == "PLAYER_FOUND"
    assert body["result"]["name"] == "Alice"


def test_missing_resource_uses_error_envelope(client):
    response = client.get("/players/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Player not found.", "meta": "NOT_FOUND"}


def test_invalid_body_is_a_bad_request(client):
    response = client.post("/tournaments/", json={"name": "X", "sport_type": "quidditch", "format": "league"})

    assert response.status_code == 400
    body = response.json()
    assert body["meta"] == "VALIDATION_ERROR"
    assert "sport_type" in body["error"]


def test_registration_needs_exactly_one_participant(client):
    _, category_id = create_singles_category(client)

    response = client.post("/registrations/", json={"category_id": category_id})

    assert response.status_code == 400
    assert response.json()["meta"] == "BAD_REQUEST"


def test_match_lifecycle_over_http(client):
    _, category_id = create_singles_category(client)
    alice = create_player(client, "Alice")
    bob = create_player(client, "Bob")
    match_id = create_match(client, category_id, alice, bob)

    started = client.post(f"/matches/{match_id}/start")
    assert started.status_code == 200
    assert started.json()["meta"] == "MATCH_STARTED"
    assert started.json()["result"]["status"] == "in_progress"
    assert started.json()["result"]["actual_start_date"] is not None

    completed = client.post(f"/matches/{match_id}/complete", json={"winner_side": 1})
    assert completed.status_code == 200
    assert completed.json()["result"]["status"] == "completed"
    assert completed.json()["result"]["winner_side"] == 1
    assert completed.json()["result"]["side1"] == "Alice"

    reopened = client.patch(f"/matches/{match_id}/status", json={"status": "scheduled"})
    assert reopened.status_code == 400
    assert reopened.json()["meta"] == "INVALID_TRANSITION"


def test_cancel_records_reason(client):
    _, category_id = create_singles_category(client)
    match_id = create_match(client, category_id, create_player(client, "Alice"), create_player(client, "Bob"))

    response = client.post(f"/matches/{match_id}/cancel", json={"reason": "rain"})

    assert response.status_code == 200
    assert response.json()["result"]["status"] == "cancelled"
    assert response.json()["result"]["notes"] == "Cancelled: rain"


def test_transition_on_missing_match_is_not_found(client):
    response = client.post("/matches/4040/start")

    assert response.status_code == 404
    assert response.json()["meta"] == "NOT_FOUND"


def test_bulk_cancel_reports_failures(client):
    _, category_id = create_singles_category(client)
    match_id = create_match(client, category_id, create_player(client, "Alice"), create_player(client, "Bob"))

    response = client.post("/matches/bulk/cancel", json={"match_ids": [match_id, 777], "reason": "storm"})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["succeeded"] == [match_id]
    assert [failure["id"] for failure in result["failed"]] == [777]


def test_results_and_score_summary(client):
    _, category_id = create_singles_category(client)
    match_id = create_match(client, category_id, create_player(client, "Alice"), create_player(client, "Bob"))

    created = client.post(
        "/match-results/bulk",
        json={
            "results": [
                {"match_id": match_id, "set_number": 1, "score1": 21, "score2": 17},
                {"match_id": match_id, "set_number": 2, "score1": 18, "score2": 21},
                {"match_id": match_id, "set_number": 3, "score1": 21, "score2": 19},
            ]
        },
    )
    assert created.status_code == 201
    assert [row["set_number"] for row in created.json()["result"]] == [1, 2, 3]

    duplicate = client.post("/match-results/", json={"match_id": match_id, "set_number": 1, "score1": 1, "score2": 0})
    assert duplicate.status_code == 400

    summary = client.get(f"/matches/{match_id}/score-summary")
    assert summary.status_code == 200
    assert summary.json()["result"] == {
        "match_id": match_id,
        "sets_played": 3,
        "sets_won1": 2,
        "sets_won2": 1,
        "total_points1": 60,
        "total_points2": 57,
    }


def test_validate_scores_flags_negative_values(client):
    _, category_id = create_singles_category(client)
    match_id = create_match(client, category_id, create_player(client, "Alice"), create_player(client, "Bob"))

    response = client.post(
        f"/matches/{match_id}/results/validate",
        json={"scores": [{"score1": 21, "score2": 10}, {"score1": -1, "score2": 21}]},
    )

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["valid"] is False
    assert len(result["errors"]) == 1


def test_standings_update_and_read(client):
    tournament_id, category_id = create_singles_category(client)
    alice = create_player(client, "Alice")
    bob = create_player(client, "Bob")
    for player_id in (alice, bob):
        registered = client.post(
            "/registrations/",
            json={"category_id": category_id, "player_id": player_id, "status": "approved"},
        )
        assert registered.status_code == 201
    match_id = create_match(client, category_id, alice, bob)
    client.post(f"/matches/{match_id}/complete", json={"winner_side": 2})

    updated = client.post("/standings/update", json={"tournament_id": tournament_id, "category_id": category_id})
    assert updated.status_code == 200
    assert updated.json()["result"]["affected_rows"] == 2

    standings = client.get(f"/standings/category/{category_id}")
    assert standings.status_code == 200
    rows = standings.json()["result"]["standings"]
    assert [(row["participant_name"], row["position"], row["points"]) for row in rows] == [
        ("Bob", 1, 3),
        ("Alice", 2, 0),
    ]


def test_bulk_upsert_rejects_inconsistent_record(client):
    tournament_id, _ = create_singles_category(client)
    alice = create_player(client, "Alice")

    response = client.post(
        "/standings/bulk-upsert",
        json={
            "records": [
                {
                    "tournament_id": tournament_id,
                    "participant_id": alice,
                    "participant_type": "player",
                    "matches_played": 4,
                    "matches_won": 1,
                }
            ]
        },
    )

    assert response.status_code == 400
    assert response.json()["meta"] == "BAD_REQUEST"


def test_recalculate_clears_standings(client, session_factory):
    tournament_id, _ = create_singles_category(client)
    alice = create_player(client, "Alice")
    client.post(
        "/standings/bulk-upsert",
        json={"records": [{"tournament_id": tournament_id, "participant_id": alice, "participant_type": "player"}]},
    )

    response = client.post(f"/standings/tournament/{tournament_id}/recalculate")

    assert response.status_code == 200
    assert response.json()["result"]["affected_rows"] == 1
    with session_factory() as db:
        assert db.query(models.TournamentStandings).count() == 0


def test_player_statistics_endpoint(client):
    _, category_id = create_singles_category(client)
    alice = create_player(client, "Alice")
    bob = create_player(client, "Bob")
    match_id = create_match(client, category_id, alice, bob)
    client.post(f"/matches/{match_id}/complete", json={"winner_side": 1})

    response = client.get(f"/stats/player/{alice}")

    assert response.status_code == 200
    stats = response.json()["result"]
    assert stats["matches_won"] == 1
    assert stats["win_rate"] == 100.0
    assert stats["ranking_points"] == 110


def test_statistics_reject_reversed_date_range(client):
    alice = create_player(client, "Alice")

    response = client.get(
        f"/stats/player/{alice}",
        params={"from_date": "2024-06-01T00:00:00", "to_date": "2024-05-01T00:00:00"},
    )

    assert response.status_code == 400


def test_leaderboard_falls_back_and_clamps(client):
    response = client.get("/stats/leaderboard", params={"category": "bogus", "entity_type": "robots", "limit": 500})

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["category"] == "win_rate"
    assert result["entity_type"] == "team"
    assert result["limit"] == 100


def test_analytics_endpoints(client):
    create_singles_category(client, prize_pool=750)
    create_player(client, "Alice")

    dashboard = client.get("/analytics/dashboard")
    growth = client.get("/analytics/growth")

    assert dashboard.status_code == 200
    assert dashboard.json()["meta"] == "ANALYTICS_DASHBOARD_FOUND"
    assert dashboard.json()["result"]["total_players"] == 1
    assert dashboard.json()["result"]["active_tournaments"] == 1
    assert growth.status_code == 200
    assert growth.json()["result"]["new_players_this_month"] == 1


def test_leaderboard_applies_statistics_filters_and_paging(client):
    spring_id, spring_category = create_singles_category(client, "Spring Open")
    _, autumn_category = create_singles_category(client, "Autumn Open")
    alice = create_player(client, "Alice")
    bob = create_player(client, "Bob")
    cara = create_player(client, "Cara")
    for category_id, winner, loser in [
        (spring_category, alice, bob),
        (spring_category, alice, bob),
        (spring_category, bob, cara),
        (autumn_category, cara, bob),
        (autumn_category, cara, bob),
        (autumn_category, cara, alice),
    ]:
        match_id = create_match(client, category_id, winner, loser)
        client.post(f"/matches/{match_id}/complete", json={"winner_side": 1})

    everything = client.get("/stats/leaderboard/players/wins")
    spring_page = client.get(
        "/stats/leaderboard/players/wins",
        params={"tournament_id": spring_id, "limit": 1, "offset": 1},
    )

    assert [entry["entity_name"] for entry in everything.json()["result"]["entries"]] == ["Cara", "Alice", "Bob"]
    result = spring_page.json()["result"]
    assert (result["limit"], result["offset"]) == (1, 1)
    assert [(entry["rank"], entry["entity_name"], entry["matches_won"]) for entry in result["entries"]] == [
        (2, "Bob", 1)
    ]
