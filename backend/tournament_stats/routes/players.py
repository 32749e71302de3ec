from fastapi import APIRouter, Depends, status

from .. import schemas
from ..dependencies import get_participants
from ..errors import bad_request, not_found
from ..repositories import ParticipantRepository
from ..serializers import envelope

router = APIRouter(tags=["players"])


@router.get("/", response_model=schemas.ApiResponse[list[schemas.PlayerRead]])
def list_players(participants: ParticipantRepository = Depends(get_participants)) -> dict[str, object]:
    players = [schemas.PlayerRead.model_validate(player) for player in participants.list_players()]
    return envelope(players, "PLAYERS_FOUND")


@router.post("/", response_model=schemas.ApiResponse[schemas.PlayerRead], status_code=status.HTTP_201_CREATED)
def create_player(
    payload: schemas.PlayerCreate,
    participants: ParticipantRepository = Depends(get_participants),
) -> dict[str, object]:
    try:
        player = participants.create_player(payload)
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(schemas.PlayerRead.model_validate(player), "PLAYER_CREATED")


@router.get("/{player_id}", response_model=schemas.ApiResponse[schemas.PlayerRead])
def get_player(player_id: int, participants: ParticipantRepository = Depends(get_participants)) -> dict[str, object]:
    player = participants.get_player(player_id)
    if player is None:
        raise not_found(LookupError("Player not found."))
    return envelope(schemas.PlayerRead.model_validate(player), "PLAYER_FOUND")
