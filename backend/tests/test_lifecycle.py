from datetime import datetime

import pytest

from tournament_stats.lifecycle import InvalidTransitionError, MatchLifecycle, can_transition
from tournament_stats.repositories import MatchRepository

FIXED_NOW = datetime(2024, 5, 1, 10, 30)


@pytest.fixture()
def singles(factory):
    tournament = factory.tournament()
    category = factory.category(tournament)
    alice = factory.player("Alice")
    bob = factory.player("Bob")
    return factory.match(category, alice, bob)


def test_start_stamps_actual_start(db, singles):
    lifecycle = MatchLifecycle(MatchRepository(db), now=lambda: FIXED_NOW)

    match = lifecycle.start(singles.id)

    assert match.status == "in_progress"
    assert match.actual_start_date == FIXED_NOW
    assert match.actual_end_date is None


def test_complete_records_winner_and_end(lifecycle, singles):
    lifecycle.start(singles.id)
    match = lifecycle.complete(singles.id, winner_side=2)

    assert match.status == "completed"
    assert match.winner_side == 2
    assert match.is_draw is False
    assert match.actual_end_date is not None


def test_complete_as_draw_stores_no_winner(lifecycle, singles):
    match = lifecycle.complete(singles.id, winner_side=1, is_draw=True)

    assert match.status == "completed"
    assert match.winner_side is None
    assert match.is_draw is True


def test_complete_without_winner_is_rejected(lifecycle, singles, db):
    with pytest.raises(ValueError):
        lifecycle.complete(singles.id, winner_side=None)

    db.refresh(singles)
    assert singles.status == "scheduled"


def test_cancel_appends_reason_to_notes(lifecycle, factory, singles):
    singles.notes = "Court 3"
    factory.db.commit()

    match = lifecycle.cancel(singles.id, "rain")

    assert match.status == "cancelled"
    assert match.notes == "Court 3\nCancelled: rain"
    assert match.actual_end_date is not None


def test_completed_match_can_still_be_cancelled(lifecycle, singles):
    lifecycle.complete(singles.id, winner_side=1)

    match = lifecycle.cancel(singles.id, "result voided")

    assert match.status == "cancelled"
    assert match.winner_side is None
    assert match.notes == "Cancelled: result voided"


def test_forfeited_match_can_still_be_cancelled(lifecycle, singles):
    lifecycle.set_status(singles.id, "forfeited", winner_side=2)

    assert lifecycle.cancel(singles.id, "appeal upheld").status == "cancelled"


def test_postpone_has_no_end_timestamp(lifecycle, singles):
    match = lifecycle.postpone(singles.id)

    assert match.status == "postponed"
    assert match.actual_end_date is None


def test_postponed_match_can_start(lifecycle, singles):
    lifecycle.postpone(singles.id)
    match = lifecycle.start(singles.id)

    assert match.status == "in_progress"


def test_completed_match_cannot_return_to_scheduled(lifecycle, singles):
    lifecycle.complete(singles.id, winner_side=1)

    with pytest.raises(InvalidTransitionError):
        lifecycle.set_status(singles.id, "scheduled")


def test_relaxed_mode_accepts_any_transition(db, singles):
    lifecycle = MatchLifecycle(MatchRepository(db), strict=False)
    lifecycle.complete(singles.id, winner_side=1)

    match = lifecycle.set_status(singles.id, "scheduled")

    assert match.status == "scheduled"
    assert match.winner_side is None


def test_reopening_in_relaxed_mode_clears_end_timestamp(db, singles):
    lifecycle = MatchLifecycle(MatchRepository(db), strict=False, now=lambda: FIXED_NOW)
    lifecycle.start(singles.id)
    lifecycle.complete(singles.id, winner_side=1)

    match = lifecycle.set_status(singles.id, "scheduled")

    assert match.actual_end_date is None
    assert match.actual_start_date == FIXED_NOW


def test_postponing_a_cancelled_match_in_relaxed_mode_clears_end_timestamp(db, singles):
    lifecycle = MatchLifecycle(MatchRepository(db), strict=False)
    lifecycle.cancel(singles.id, "rain")

    match = lifecycle.postpone(singles.id)

    assert match.status == "postponed"
    assert match.actual_end_date is None


def test_winner_cleared_when_status_has_no_result(db, singles):
    lifecycle = MatchLifecycle(MatchRepository(db), strict=False)
    lifecycle.complete(singles.id, winner_side=1)

    match = lifecycle.set_status(singles.id, "cancelled")

    assert match.winner_side is None
    assert match.is_draw is False


def test_forfeit_keeps_winner(lifecycle, singles):
    match = lifecycle.set_status(singles.id, "forfeited", winner_side=1)

    assert match.status == "forfeited"
    assert match.winner_side == 1
    assert match.actual_end_date is not None


def test_missing_match_returns_none(lifecycle):
    assert lifecycle.start(9999) is None
    assert lifecycle.cancel(9999, "gone") is None


def test_terminal_states_have_no_exits():
    for terminal in ("completed", "cancelled", "forfeited", "bye"):
        for target in ("scheduled", "in_progress", "postponed", "completed"):
            assert not can_transition(terminal, target)


def test_bulk_cancel_reports_each_item(lifecycle, factory, singles):
    category = singles.category
    other = factory.match(category, factory.player("Cara"), factory.player("Dan"))
    lifecycle.complete(other.id, winner_side=1)

    outcome = lifecycle.bulk_cancel([singles.id, other.id, 4242, singles.id], "venue closed")

    assert outcome.succeeded == [singles.id, other.id]
    assert [failure.id for failure in outcome.failed] == [4242]


def test_bulk_update_reports_illegal_transition(lifecycle, factory, singles):
    other = factory.match(singles.category, factory.player("Cara"), factory.player("Dan"))
    lifecycle.complete(other.id, winner_side=2)

    outcome = lifecycle.bulk_update([singles.id, other.id], {"status": "postponed"})

    assert outcome.succeeded == [singles.id]
    assert [failure.id for failure in outcome.failed] == [other.id]
    factory.db.refresh(other)
    assert other.status == "completed"
    assert other.winner_side == 2


def test_bulk_update_applies_fields_and_status(lifecycle, factory, singles):
    other = factory.match(singles.category, factory.player("Cara"), factory.player("Dan"))

    outcome = lifecycle.bulk_update([singles.id, other.id], {"status": "postponed", "venue": "Hall B"})

    assert outcome.succeeded == [singles.id, other.id]
    factory.db.refresh(other)
    assert other.status == "postponed"
    assert other.venue == "Hall B"
