from fastapi import APIRouter, Depends, status

from .. import schemas, serializers
from ..dependencies import get_participants
from ..errors import bad_request, not_found
from ..repositories import ParticipantRepository
from ..serializers import envelope

router = APIRouter(tags=["teams"])


@router.get("/", response_model=schemas.ApiResponse[list[schemas.TeamRead]])
def list_teams(participants: ParticipantRepository = Depends(get_participants)) -> dict[str, object]:
    teams = [schemas.TeamRead.model_validate(team) for team in participants.list_teams()]
    return envelope(teams, "TEAMS_FOUND")


@router.post("/", response_model=schemas.ApiResponse[schemas.TeamRead], status_code=status.HTTP_201_CREATED)
def create_team(
    payload: schemas.TeamCreate,
    participants: ParticipantRepository = Depends(get_participants),
) -> dict[str, object]:
    try:
        team = participants.create_team(payload)
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(schemas.TeamRead.model_validate(team), "TEAM_CREATED")


@router.get("/{team_id}", response_model=schemas.ApiResponse[schemas.TeamRead])
def get_team(team_id: int, participants: ParticipantRepository = Depends(get_participants)) -> dict[str, object]:
    team = participants.get_team(team_id)
    if team is None:
        raise not_found(LookupError("Team not found."))
    return envelope(schemas.TeamRead.model_validate(team), "TEAM_FOUND")


@router.get("/{team_id}/members", response_model=schemas.ApiResponse[list[schemas.TeamMemberRead]])
def list_team_members(team_id: int, participants: ParticipantRepository = Depends(get_participants)) -> dict[str, object]:
    try:
        members = participants.list_team_members(team_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    return envelope([serializers.member_to_read(member) for member in members], "TEAM_MEMBERS_FOUND")


@router.post(
    "/{team_id}/members",
    response_model=schemas.ApiResponse[schemas.TeamMemberRead],
    status_code=status.HTTP_201_CREATED,
)
def add_team_member(
    team_id: int,
    payload: schemas.TeamMemberCreate,
    participants: ParticipantRepository = Depends(get_participants),
) -> dict[str, object]:
    try:
        member = participants.add_team_member(team_id, payload.player_id)
    except LookupError as exc:
        raise not_found(exc) from exc
    except ValueError as exc:
        raise bad_request(exc) from exc
    return envelope(serializers.member_to_read(member), "TEAM_MEMBER_ADDED")
