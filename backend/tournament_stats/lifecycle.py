"""Match status state machine.

Every status change goes through :class:`MatchLifecycle`, which stamps the
actual start/end timestamps and keeps the winner fields consistent with the
status. Operations return ``None`` when the match does not exist.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from . import models, schemas
from .models import utcnow

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"completed", "cancelled", "forfeited", "bye"})
STATUSES_WITH_RESULT = frozenset({"completed", "forfeited"})
STATUSES_WITH_END = frozenset({"completed", "cancelled", "forfeited"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "scheduled": frozenset({"in_progress", "completed", "cancelled", "postponed", "forfeited", "bye"}),
    "in_progress": frozenset({"completed", "cancelled", "postponed", "forfeited"}),
    "postponed": frozenset({"scheduled", "in_progress", "completed", "cancelled", "forfeited"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
    "forfeited": frozenset(),
    "bye": frozenset(),
}

BULK_UPDATE_FIELDS = ("scheduled_date", "venue", "court_number", "notes")


class InvalidTransitionError(ValueError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move a match from '{current}' to '{target}'.")
        self.current = current
        self.target = target


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _append_note(existing: str | None, note: str) -> str:
    if not existing:
        return note
    return f"{existing}\n{note}"


class MatchLifecycle:
    def __init__(
        self,
        matches,
        *,
        strict: bool = True,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.matches = matches
        self.strict = strict
        self.now = now

    def _check(self, match: models.Match, target: str) -> None:
        if not self.strict:
            return
        if not can_transition(match.status, target):
            raise InvalidTransitionError(match.status, target)

    def _apply(
        self,
        match: models.Match,
        target: str,
        *,
        winner_side: int | None = None,
        is_draw: bool | None = None,
        check: bool = True,
    ) -> None:
        if check:
            self._check(match, target)
        previous = match.status
        match.status = target

        if target == "in_progress":
            match.actual_start_date = self.now()
        if target in STATUSES_WITH_END:
            match.actual_end_date = self.now()
        elif target not in TERMINAL_STATUSES:
            match.actual_end_date = None

        if target in STATUSES_WITH_RESULT:
            draw = bool(is_draw)
            if draw:
                match.winner_side = None
            elif winner_side in (1, 2):
                match.winner_side = winner_side
            elif target == "completed":
                raise ValueError("A completed match needs winner_side 1 or 2 unless it is a draw.")
            match.is_draw = draw
        else:
            match.winner_side = None
            match.is_draw = False

        logger.info("Match %s moved from %s to %s", match.id, previous, target)

    def _run(self, match_id: int, mutate: Callable[[models.Match], None]) -> models.Match | None:
        match = self.matches.get(match_id)
        if match is None:
            return None
        try:
            mutate(match)
        except ValueError:
            self.matches.rollback()
            raise
        return self.matches.save(match)

    def start(self, match_id: int) -> models.Match | None:
        return self._run(match_id, lambda match: self._apply(match, "in_progress"))

    def complete(self, match_id: int, winner_side: int | None, is_draw: bool = False) -> models.Match | None:
        return self._run(
            match_id,
            lambda match: self._apply(match, "completed", winner_side=winner_side, is_draw=is_draw),
        )

    def cancel(self, match_id: int, reason: str) -> models.Match | None:
        def mutate(match: models.Match) -> None:
            # Cancelling is allowed from every status, terminal ones included.
            self._apply(match, "cancelled", check=False)
            match.notes = _append_note(match.notes, f"Cancelled: {reason}")

        return self._run(match_id, mutate)

    def postpone(self, match_id: int) -> models.Match | None:
        return self._run(match_id, lambda match: self._apply(match, "postponed"))

    def set_status(
        self,
        match_id: int,
        status: str,
        *,
        winner_side: int | None = None,
        is_draw: bool | None = None,
        notes: str | None = None,
    ) -> models.Match | None:
        def mutate(match: models.Match) -> None:
            if status == "forfeited" and not is_draw and winner_side not in (1, 2):
                raise ValueError("A forfeited match needs the winning side.")
            self._apply(match, status, winner_side=winner_side, is_draw=is_draw)
            if notes is not None:
                match.notes = notes

        return self._run(match_id, mutate)

    def bulk_cancel(self, match_ids: list[int], reason: str) -> schemas.BulkOperationResult:
        return self._bulk(match_ids, lambda match_id: self.cancel(match_id, reason))

    def bulk_update(self, match_ids: list[int], changes: dict[str, Any]) -> schemas.BulkOperationResult:
        """Apply the same changes to each match, committing item by item."""
        status = changes.get("status")
        field_changes = {key: changes[key] for key in BULK_UPDATE_FIELDS if key in changes}

        def update_one(match_id: int) -> models.Match | None:
            if status is not None:
                match = self.set_status(
                    match_id,
                    status,
                    winner_side=changes.get("winner_side"),
                    is_draw=changes.get("is_draw"),
                )
                if match is None:
                    return None
            else:
                match = self.matches.get(match_id)
                if match is None:
                    return None
            for field_name, value in field_changes.items():
                setattr(match, field_name, value)
            return self.matches.save(match)

        return self._bulk(match_ids, update_one)

    def _bulk(
        self,
        match_ids: list[int],
        operation: Callable[[int], models.Match | None],
    ) -> schemas.BulkOperationResult:
        outcome = schemas.BulkOperationResult()
        for match_id in dict.fromkeys(match_ids):
            try:
                match = operation(match_id)
            except ValueError as exc:
                logger.warning("Bulk operation skipped match %s: %s", match_id, exc)
                outcome.failed.append(schemas.BulkFailure(id=match_id, error=str(exc)))
                continue
            if match is None:
                outcome.failed.append(schemas.BulkFailure(id=match_id, error="Match not found."))
                continue
            outcome.succeeded.append(match_id)
        return outcome
