from fastapi import APIRouter, Depends, Query, status

from .. import schemas, serializers
from ..dependencies import get_lifecycle, get_match_results, get_matches
from ..errors import bad_request, not_found
from ..lifecycle import MatchLifecycle
from ..models import Match
from ..repositories import MatchRepository, MatchResultRepository
from ..scoring import summarize_scores, validate_result_scores
from ..serializers import envelope

router = APIRouter(tags=["matches"])

MatchEnvelope = schemas.ApiResponse[schemas.MatchRead]


def _transitioned(match: Match | None, meta: str) -> dict[str, object]:
    if match is None:
        raise not_found(LookupError("Match not found."))
    return envelope(serializers.match_to_read(match), meta)


@router.get("/", response_model=schemas.ApiResponse[list[schemas.MatchRead]])
def list_matches(
    tournament_id: int | None = Query(default=None, ge=1),
    category_id: int | None = Query(default=None, ge=1),
    status_filter: schemas.MatchStatus | None = Query(default=None, alias="status"),
    matches: MatchRepository = Depends(get_matches),
) -> dict[str, object]:
    rows = matches.list_matches(tournament_id=tournament_id, category_id=category_id, status=status_filter)
    return envelope([serializers.match_to_read(match) for match in rows], "MATCHES_FOUND")


@router.post("/", response_model=MatchEnvelope, status_code=status.HTTP_201_CREATED)
def create_match(payload: schemas.MatchCreate, matches: MatchRepository = Depends(get_matches)) -> dict[str, object]:
    try:
        match = matches.create(payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(serializers.match_to_read(match), "MATCH_CREATED")


@router.post("/bulk/update", response_model=schemas.ApiResponse[schemas.BulkOperationResult])
def bulk_update_matches(
    payload: schemas.BulkMatchUpdate,
    lifecycle: MatchLifecycle = Depends(get_lifecycle),
) -> dict[str, object]:
    changes = payload.model_dump(exclude={"match_ids"}, exclude_unset=True)
    if not changes:
        raise bad_request(ValueError("No changes supplied."))
    return envelope(lifecycle.bulk_update(payload.match_ids, changes), "MATCHES_UPDATED")


@router.post("/bulk/cancel", response_model=schemas.ApiResponse[schemas.BulkOperationResult])
def bulk_cancel_matches(
    payload: schemas.BulkMatchCancel,
    lifecycle: MatchLifecycle = Depends(get_lifecycle),
) -> dict[str, object]:
    return envelope(lifecycle.bulk_cancel(payload.match_ids, payload.reason), "MATCHES_CANCELLED")


@router.get("/{match_id}", response_model=MatchEnvelope)
def get_match(match_id: int, matches: MatchRepository = Depends(get_matches)) -> dict[str, object]:
    match = matches.get(match_id)
    if match is None:
        raise not_found(LookupError("Match not found."))
    return envelope(serializers.match_to_read(match), "MATCH_FOUND")


@router.put("/{match_id}", response_model=MatchEnvelope)
def update_match(
    match_id: int,
    payload: schemas.MatchUpdate,
    matches: MatchRepository = Depends(get_matches),
) -> dict[str, object]:
    try:
        match = matches.update(match_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(serializers.match_to_read(match), "MATCH_UPDATED")


@router.delete("/{match_id}", response_model=schemas.ApiResponse[dict[str, int]])
def delete_match(match_id: int, matches: MatchRepository = Depends(get_matches)) -> dict[str, object]:
    try:
        matches.delete(match_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope({"id": match_id}, "MATCH_DELETED")


@router.patch("/{match_id}/status", response_model=MatchEnvelope)
def update_match_status(
    match_id: int,
    payload: schemas.MatchStatusUpdate,
    lifecycle: MatchLifecycle = Depends(get_lifecycle),
) -> dict[str, object]:
    try:
        match = lifecycle.set_status(
            match_id,
            payload.status,
            winner_side=payload.winner_side,
            is_draw=payload.is_draw,
            notes=payload.notes,
        )
    except ValueError as exc:
        raise bad_request(exc, "INVALID_TRANSITION") from exc
    return _transitioned(match, "MATCH_STATUS_UPDATED")


@router.post("/{match_id}/start", response_model=MatchEnvelope)
def start_match(match_id: int, lifecycle: MatchLifecycle = Depends(get_lifecycle)) -> dict[str, object]:
    try:
        match = lifecycle.start(match_id)
    except ValueError as exc:
        raise bad_request(exc, "INVALID_TRANSITION") from exc
    return _transitioned(match, "MATCH_STARTED")


@router.post("/{match_id}/complete", response_model=MatchEnvelope)
def complete_match(
    match_id: int,
    payload: schemas.MatchCompleteRequest,
    lifecycle: MatchLifecycle = Depends(get_lifecycle),
) -> dict[str, object]:
    try:
        match = lifecycle.complete(match_id, payload.winner_side, payload.is_draw)
    except ValueError as exc:
        raise bad_request(exc, "INVALID_TRANSITION") from exc
    return _transitioned(match, "MATCH_COMPLETED")


@router.post("/{match_id}/cancel", response_model=MatchEnvelope)
def cancel_match(
    match_id: int,
    payload: schemas.MatchCancelRequest,
    lifecycle: MatchLifecycle = Depends(get_lifecycle),
) -> dict[str, object]:
    try:
        match = lifecycle.cancel(match_id, payload.reason)
    except ValueError as exc:
        raise bad_request(exc, "INVALID_TRANSITION") from exc
    return _transitioned(match, "MATCH_CANCELLED")


@router.post("/{match_id}/postpone", response_model=MatchEnvelope)
def postpone_match(match_id: int, lifecycle: MatchLifecycle = Depends(get_lifecycle)) -> dict[str, object]:
    try:
        match = lifecycle.postpone(match_id)
    except ValueError as exc:
        raise bad_request(exc, "INVALID_TRANSITION") from exc
    return _transitioned(match, "MATCH_POSTPONED")


@router.get("/{match_id}/results", response_model=schemas.ApiResponse[list[schemas.MatchResultRead]])
def list_match_results(
    match_id: int,
    results: MatchResultRepository = Depends(get_match_results),
) -> dict[str, object]:
    try:
        rows = results.list_for_match(match_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope([schemas.MatchResultRead.model_validate(row) for row in rows], "MATCH_RESULTS_FOUND")


@router.post("/{match_id}/results/validate", response_model=schemas.ApiResponse[schemas.ScoreValidationResult])
def validate_match_result_scores(
    match_id: int,
    payload: schemas.ScoreValidationRequest,
    matches: MatchRepository = Depends(get_matches),
) -> dict[str, object]:
    if matches.get(match_id) is None:
        raise not_found(LookupError("Match not found."))
    return envelope(validate_result_scores(match_id, payload.scores), "MATCH_SCORES_VALIDATED")


@router.get("/{match_id}/score-summary", response_model=schemas.ApiResponse[schemas.MatchScoreSummary])
def get_score_summary(
    match_id: int,
    results: MatchResultRepository = Depends(get_match_results),
) -> dict[str, object]:
    try:
        rows = results.list_for_match(match_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(summarize_scores(match_id, rows), "MATCH_SCORE_SUMMARY_FOUND")
