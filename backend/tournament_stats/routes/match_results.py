from fastapi import APIRouter, Depends, status

from .. import schemas
from ..dependencies import get_match_results
from ..errors import bad_request, not_found
from ..repositories import MatchResultRepository
from ..serializers import envelope

router = APIRouter(tags=["match-results"])

ResultEnvelope = schemas.ApiResponse[schemas.MatchResultRead]


@router.post("/", response_model=ResultEnvelope, status_code=status.HTTP_201_CREATED)
def create_match_result(
    payload: schemas.MatchResultCreate,
    results: MatchResultRepository = Depends(get_match_results),
) -> dict[str, object]:
    try:
        result = results.create(payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(schemas.MatchResultRead.model_validate(result), "MATCH_RESULT_CREATED")


@router.post(
    "/bulk",
    response_model=schemas.ApiResponse[list[schemas.MatchResultRead]],
    status_code=status.HTTP_201_CREATED,
)
def bulk_create_match_results(
    payload: schemas.MatchResultBulkCreate,
    results: MatchResultRepository = Depends(get_match_results),
) -> dict[str, object]:
    try:
        created = results.bulk_create(payload.results)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope([schemas.MatchResultRead.model_validate(row) for row in created], "MATCH_RESULTS_CREATED")


@router.get("/{result_id}", response_model=ResultEnvelope)
def get_match_result(result_id: int, results: MatchResultRepository = Depends(get_match_results)) -> dict[str, object]:
    result = results.get(result_id)
    if result is None:
        raise not_found(LookupError("Match result not found."))
    return envelope(schemas.MatchResultRead.model_validate(result), "MATCH_RESULT_FOUND")


@router.patch("/{result_id}", response_model=ResultEnvelope)
def correct_match_result(
    result_id: int,
    payload: schemas.MatchResultUpdate,
    results: MatchResultRepository = Depends(get_match_results),
) -> dict[str, object]:
    try:
        result = results.update(result_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(schemas.MatchResultRead.model_validate(result), "MATCH_RESULT_UPDATED")


@router.delete("/{result_id}", response_model=schemas.ApiResponse[dict[str, int]])
def delete_match_result(result_id: int, results: MatchResultRepository = Depends(get_match_results)) -> dict[str, object]:
    try:
        results.delete(result_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope({"id": result_id}, "MATCH_RESULT_DELETED")
