from fastapi import APIRouter, Depends, Query, status

from .. import schemas, serializers
from ..dependencies import get_aggregator, get_tournaments
from ..errors import bad_request, not_found
from ..repositories import TournamentRepository
from ..serializers import envelope
from ..statistics import StatisticsAggregator

router = APIRouter(tags=["tournaments"])


@router.get("/", response_model=schemas.ApiResponse[list[schemas.TournamentRead]])
def list_tournaments(
    status_filter: schemas.TournamentStatus | None = Query(default=None, alias="status"),
    tournaments: TournamentRepository = Depends(get_tournaments),
) -> dict[str, object]:
    rows = tournaments.list_tournaments(status=status_filter)
    return envelope([serializers.tournament_to_read(row) for row in rows], "TOURNAMENTS_FOUND")


@router.post("/", response_model=schemas.ApiResponse[schemas.TournamentRead], status_code=status.HTTP_201_CREATED)
def create_tournament(
    payload: schemas.TournamentCreate,
    tournaments: TournamentRepository = Depends(get_tournaments),
) -> dict[str, object]:
    try:
        tournament = tournaments.create(payload)
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(serializers.tournament_to_read(tournament), "TOURNAMENT_CREATED")


@router.get("/{tournament_id}", response_model=schemas.ApiResponse[schemas.TournamentRead])
def get_tournament(tournament_id: int, tournaments: TournamentRepository = Depends(get_tournaments)) -> dict[str, object]:
    try:
        tournament = tournaments.get_or_raise(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(serializers.tournament_to_read(tournament), "TOURNAMENT_FOUND")


@router.patch("/{tournament_id}", response_model=schemas.ApiResponse[schemas.TournamentRead])
def update_tournament(
    tournament_id: int,
    payload: schemas.TournamentUpdate,
    tournaments: TournamentRepository = Depends(get_tournaments),
) -> dict[str, object]:
    try:
        tournament = tournaments.update(tournament_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(serializers.tournament_to_read(tournament), "TOURNAMENT_UPDATED")


@router.get("/{tournament_id}/categories", response_model=schemas.ApiResponse[list[schemas.CategoryRead]])
def list_categories(tournament_id: int, tournaments: TournamentRepository = Depends(get_tournaments)) -> dict[str, object]:
    try:
        categories = tournaments.list_categories(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope([schemas.CategoryRead.model_validate(category) for category in categories], "CATEGORIES_FOUND")


@router.post(
    "/{tournament_id}/categories",
    response_model=schemas.ApiResponse[schemas.CategoryRead],
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    tournament_id: int,
    payload: schemas.CategoryCreate,
    tournaments: TournamentRepository = Depends(get_tournaments),
) -> dict[str, object]:
    try:
        category = tournaments.create_category(tournament_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(schemas.CategoryRead.model_validate(category), "CATEGORY_CREATED")


@router.get("/{tournament_id}/stats", response_model=schemas.ApiResponse[schemas.TournamentStatistics])
def get_tournament_stats(
    tournament_id: int,
    aggregator: StatisticsAggregator = Depends(get_aggregator),
) -> dict[str, object]:
    try:
        stats = aggregator.tournament_statistics(tournament_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(stats, "TOURNAMENT_STATISTICS_FOUND")
