from fastapi import APIRouter, Depends

from .. import schemas, serializers
from ..dependencies import get_standings_engine
from ..errors import bad_request, not_found
from ..serializers import envelope
from ..standings import StandingsEngine

router = APIRouter(tags=["standings"])

StandingsEnvelope = schemas.ApiResponse[schemas.StandingsResponse]
OperationEnvelope = schemas.ApiResponse[schemas.StandingsOperationResult]


@router.get("/tournament/{tournament_id}", response_model=StandingsEnvelope)
def get_tournament_standings(
    tournament_id: int,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        standings = engine.tournament_standings(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(standings, "STANDINGS_FOUND")


@router.get("/category/{category_id}", response_model=StandingsEnvelope)
def get_category_standings(
    category_id: int,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        standings = engine.category_standings(category_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(standings, "STANDINGS_FOUND")


@router.post("/tournament/{tournament_id}/recalculate", response_model=OperationEnvelope)
def recalculate_standings(
    tournament_id: int,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        deleted = engine.recalculate_standings(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    result = schemas.StandingsOperationResult(tournament_id=tournament_id, affected_rows=deleted)
    return envelope(result, "STANDINGS_RECALCULATED")


@router.post("/tournament/{tournament_id}/positions", response_model=OperationEnvelope)
def update_positions(
    tournament_id: int,
    category_id: int | None = None,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        ranked = engine.update_positions(tournament_id, category_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    result = schemas.StandingsOperationResult(
        tournament_id=tournament_id,
        category_id=category_id,
        affected_rows=ranked,
    )
    return envelope(result, "STANDINGS_POSITIONS_UPDATED")


@router.post("/update", response_model=OperationEnvelope)
def update_standings(
    payload: schemas.StandingsUpdateRequest,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    match_ids = None if payload.recalculate_all else payload.match_ids
    try:
        affected = engine.update_standings(payload.tournament_id, payload.category_id, match_ids)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    result = schemas.StandingsOperationResult(
        tournament_id=payload.tournament_id,
        category_id=payload.category_id,
        affected_rows=affected,
    )
    return envelope(result, "STANDINGS_UPDATED")


@router.post("/bulk-upsert", response_model=schemas.ApiResponse[list[schemas.StandingEntry]])
def bulk_upsert_standings(
    payload: schemas.StandingsBulkUpsert,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        rows = engine.bulk_upsert(payload.records)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope([serializers.standing_to_entry(row) for row in rows], "STANDINGS_UPSERTED")


@router.patch("/{standing_id}", response_model=schemas.ApiResponse[schemas.StandingEntry])
def update_standing_row(
    standing_id: int,
    payload: schemas.StandingsRowUpdate,
    engine: StandingsEngine = Depends(get_standings_engine),
) -> dict[str, object]:
    try:
        row = engine.update_row(standing_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(serializers.standing_to_entry(row), "STANDINGS_ROW_UPDATED")
