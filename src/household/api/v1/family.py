"""family.v1.FamilyService procedures."""

from fastapi import APIRouter

from src.household.api.context import CurrentAuth, FamilyAuth, ManagerAuth
from src.household.api.dependencies import FamilyServiceDep
from src.household.schemas.base import EmptyRequest, SuccessResponse
from src.household.schemas.family import (
    CreateFamilyRequest,
    FamilyInfo,
    FamilyResponse,
    GetFamilyResponse,
    JoinFamilyRequest,
    ListFamilyMembersResponse,
    MemberInfo,
    RegenerateInviteCodeResponse,
    RemoveFamilyMemberRequest,
)

router = APIRouter(prefix="/family.v1.FamilyService", tags=["family"])


@router.post("/CreateFamily", response_model=FamilyResponse)
async def create_family(
    body: CreateFamilyRequest, auth: CurrentAuth, service: FamilyServiceDep
) -> FamilyResponse:
    """Create a family with its own database. The caller becomes its manager."""
    family = await service.create_family(auth.user_id, body.name)
    return FamilyResponse(family=FamilyInfo.model_validate(family))


@router.post("/JoinFamily", response_model=FamilyResponse)
async def join_family(
    body: JoinFamilyRequest, auth: CurrentAuth, service: FamilyServiceDep
) -> FamilyResponse:
    family = await service.join_family(auth.user_id, body.invite_code)
    return FamilyResponse(family=FamilyInfo.model_validate(family))


@router.post("/GetFamily", response_model=GetFamilyResponse)
async def get_family(
    auth: FamilyAuth, service: FamilyServiceDep, body: EmptyRequest | None = None
) -> GetFamilyResponse:
    assert auth.family_id is not None
    family = await service.get_family(auth.family_id)
    members = await service.list_members(auth.family_id)
    return GetFamilyResponse(
        family=FamilyInfo.model_validate(family),
        members=[MemberInfo.model_validate(m) for m in members],
    )


@router.post("/ListFamilyMembers", response_model=ListFamilyMembersResponse)
async def list_family_members(
    auth: FamilyAuth, service: FamilyServiceDep, body: EmptyRequest | None = None
) -> ListFamilyMembersResponse:
    assert auth.family_id is not None
    members = await service.list_members(auth.family_id)
    return ListFamilyMembersResponse(members=[MemberInfo.model_validate(m) for m in members])


@router.post("/LeaveFamily", response_model=SuccessResponse)
async def leave_family(
    auth: FamilyAuth, service: FamilyServiceDep, body: EmptyRequest | None = None
) -> SuccessResponse:
    await service.leave_family(auth.user_id)
    return SuccessResponse()


@router.post("/RemoveFamilyMember", response_model=SuccessResponse)
async def remove_family_member(
    body: RemoveFamilyMemberRequest, auth: ManagerAuth, service: FamilyServiceDep
) -> SuccessResponse:
    assert auth.family_id is not None
    await service.remove_member(auth.family_id, auth.user_id, body.user_id)
    return SuccessResponse()


@router.post("/DeleteFamily", response_model=SuccessResponse)
async def delete_family(
    auth: ManagerAuth, service: FamilyServiceDep, body: EmptyRequest | None = None
) -> SuccessResponse:
    assert auth.family_id is not None
    await service.delete_family(auth.family_id, auth.user_id)
    return SuccessResponse()


@router.post("/RegenerateInviteCode", response_model=RegenerateInviteCodeResponse)
async def regenerate_invite_code(
    auth: ManagerAuth, service: FamilyServiceDep, body: EmptyRequest | None = None
) -> RegenerateInviteCodeResponse:
    assert auth.family_id is not None
    code = await service.regenerate_invite_code(auth.family_id, auth.user_id)
    return RegenerateInviteCodeResponse(invite_code=code)
