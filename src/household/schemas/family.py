from datetime import datetime

from pydantic import Field

from src.household.schemas.base import RpcModel


class FamilyInfo(RpcModel):
    """A family as seen by its members. The database location is never exposed."""

    id: str
    name: str
    invite_code: str
    manager_id: str
    schema_version: int
    created_at: datetime
    updated_at: datetime


class MemberInfo(RpcModel):
    user_id: str
    name: str
    email: str
    role: str
    joined_at: datetime


class CreateFamilyRequest(RpcModel):
    name: str = Field(max_length=200)


class JoinFamilyRequest(RpcModel):
    invite_code: str = Field(max_length=64)


class FamilyResponse(RpcModel):
    family: FamilyInfo


class GetFamilyResponse(RpcModel):
    family: FamilyInfo
    members: list[MemberInfo]


class ListFamilyMembersResponse(RpcModel):
    members: list[MemberInfo]


class RemoveFamilyMemberRequest(RpcModel):
    user_id: str


class RegenerateInviteCodeResponse(RpcModel):
    invite_code: str
