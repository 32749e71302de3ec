from fastapi import APIRouter, Depends, Query, status

from .. import schemas, serializers
from ..dependencies import get_registrations
from ..errors import bad_request, not_found
from ..repositories import RegistrationRepository
from ..serializers import envelope

router = APIRouter(tags=["registrations"])


@router.get("/", response_model=schemas.ApiResponse[list[schemas.RegistrationRead]])
def list_registrations(
    tournament_id: int | None = Query(default=None, ge=1),
    category_id: int | None = Query(default=None, ge=1),
    status_filter: schemas.RegistrationStatus | None = Query(default=None, alias="status"),
    registrations: RegistrationRepository = Depends(get_registrations),
) -> dict[str, object]:
    rows = registrations.list_registrations(
        tournament_id=tournament_id,
        category_id=category_id,
        status=status_filter,
    )
    return envelope([serializers.registration_to_read(row) for row in rows], "REGISTRATIONS_FOUND")


@router.post("/", response_model=schemas.ApiResponse[schemas.RegistrationRead], status_code=status.HTTP_201_CREATED)
def create_registration(
    payload: schemas.RegistrationCreate,
    registrations: RegistrationRepository = Depends(get_registrations),
) -> dict[str, object]:
    try:
        registration = registrations.create(payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(serializers.registration_to_read(registration), "REGISTRATION_CREATED")


@router.get("/{registration_id}", response_model=schemas.ApiResponse[schemas.RegistrationRead])
def get_registration(
    registration_id: int,
    registrations: RegistrationRepository = Depends(get_registrations),
) -> dict[str, object]:
    registration = registrations.get(registration_id)
    if registration is None:
        raise not_found(LookupError("Registration not found."))
    return envelope(serializers.registration_to_read(registration), "REGISTRATION_FOUND")


@router.patch("/{registration_id}", response_model=schemas.ApiResponse[schemas.RegistrationRead])
def update_registration(
    registration_id: int,
    payload: schemas.RegistrationUpdate,
    registrations: RegistrationRepository = Depends(get_registrations),
) -> dict[str, object]:
    try:
        registration = registrations.update(registration_id, payload)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope(serializers.registration_to_read(registration), "REGISTRATION_UPDATED")
