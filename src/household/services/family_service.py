"""Family service - family lifecycle, invite codes and memberships.

A user belongs to at most one family. The rule is checked here before any
membership is written and backed by a unique index on
``family_memberships.user_id``.
"""

import asyncio
import secrets
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.household.core.db import TenantRegistry, get_session
from src.household.core.exceptions import AuthError, Code, FamilyError, ProvisioningError
from src.household.core.logging import get_logger
from src.household.core.security import generate_id
from src.household.models.base import mark_updated, utc_now
from src.household.models.enums import MembershipRole
from src.household.models.family import FamilyMember
from src.household.models.master import Family, User
from src.household.repositories import (
    FamilyMemberRepository,
    FamilyRepository,
    MembershipRepository,
    UserRepository,
)
from src.household.services.auth_service import USER_NOT_FOUND, AuthService

logger = get_logger(__name__)

FAMILY_NOT_FOUND = "FAMILY_NOT_FOUND"
INVALID_INVITE_CODE = "INVALID_INVITE_CODE"
USER_ALREADY_IN_FAMILY = "USER_ALREADY_IN_FAMILY"
INVALID_FAMILY_NAME = "INVALID_FAMILY_NAME"
DATABASE_CREATION_FAILED = "DATABASE_CREATION_FAILED"
NOT_FAMILY_MANAGER = "NOT_FAMILY_MANAGER"
MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
MANAGER_CANNOT_LEAVE = "MANAGER_CANNOT_LEAVE"
CANNOT_REMOVE_MANAGER = "CANNOT_REMOVE_MANAGER"

MAX_FAMILY_NAME_LENGTH = 100
INVITE_CODE_ATTEMPTS = 5

# Memorable words for invite codes
INVITE_WORDS = (
    "apple", "brave", "cloud", "dance", "eagle", "flame", "grape", "heart",
    "island", "joy", "kite", "light", "moon", "nature", "ocean", "peace",
    "quiet", "river", "star", "tree", "unity", "voice", "water", "bright",
    "calm", "dream", "free", "green", "happy", "love", "magic", "pure",
)  # fmt: skip


def generate_invite_code() -> str:
    """Three random words and a three-digit number, e.g. ``moon-kite-calm-042``."""
    words = [secrets.choice(INVITE_WORDS) for _ in range(3)]
    return f"{'-'.join(words)}-{secrets.randbelow(1000):03d}"


@dataclass
class MemberInfo:
    user_id: str
    name: str
    email: str
    role: str
    joined_at: datetime


class FamilyService:
    """Family lifecycle on the master database plus tenant provisioning.

    Tenant databases are created before the Family row is written. The row and
    the manager membership are committed in one master transaction; if that
    fails the fresh tenant database is discarded, so no family ever points at a
    half-provisioned database.
    """

    def __init__(
        self,
        family_repo: FamilyRepository,
        membership_repo: MembershipRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        registry: TenantRegistry,
    ):
        self.family_repo = family_repo
        self.membership_repo = membership_repo
        self.user_repo = user_repo
        self.session = session
        self.registry = registry
        self.auth = AuthService.for_session(session)

    @classmethod
    def for_session(cls, session: AsyncSession, registry: TenantRegistry) -> "FamilyService":
        return cls(
            FamilyRepository(session),
            MembershipRepository(session),
            UserRepository(session),
            session,
            registry,
        )

    async def create_family(self, user_id: str, name: str) -> Family:
        """Create a family managed by ``user_id`` with its own database.

        Raises:
            FamilyError: INVALID_FAMILY_NAME, USER_ALREADY_IN_FAMILY or
                DATABASE_CREATION_FAILED.
        """
        name = name.strip()
        if not name or len(name) > MAX_FAMILY_NAME_LENGTH:
            raise FamilyError(
                INVALID_FAMILY_NAME,
                f"Family name must be between 1 and {MAX_FAMILY_NAME_LENGTH} characters",
            )

        user = await self._get_user(user_id)
        await self._ensure_not_in_family(user_id)
        invite_code = await self._unique_invite_code()

        family_id = generate_id()
        try:
            handle = await self.registry.provision(family_id, name)
        except ProvisioningError as e:
            logger.exception("Family database provisioning failed", family_id=family_id)
            raise FamilyError(
                DATABASE_CREATION_FAILED, "Failed to create family database", Code.INTERNAL
            ) from e

        now = utc_now()
        family = Family(
            id=family_id,
            name=name,
            invite_code=invite_code,
            database_url=handle.url,
            manager_id=user_id,
            schema_version=handle.schema_version,
            created_at=now,
            updated_at=now,
        )
        self.family_repo.add(family)
        # Flush the family first so the membership's foreign key resolves
        try:
            await self.session.flush()
            self.membership_repo.create_membership(
                user_id, family_id, MembershipRole.MANAGER.value
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            await self.registry.discard(handle)
            raise self._already_in_family() from e
        except BaseException:
            # Cancellation included: nothing committed references the database
            await self.session.rollback()
            await asyncio.shield(self.registry.discard(handle))
            raise

        await self.registry.attach(handle)
        await self._mirror_member(handle.engine, family_id, user, MembershipRole.MANAGER.value)
        await self.auth.update_user_family_sessions(
            user_id, family_id, MembershipRole.MANAGER.value
        )

        logger.info("Family created", family_id=family_id, manager_id=user_id)
        return family

    async def join_family(self, user_id: str, invite_code: str) -> Family:
        """Join the family behind an invite code as a member.

        Raises:
            FamilyError: INVALID_INVITE_CODE or USER_ALREADY_IN_FAMILY.
        """
        invite_code = invite_code.strip().lower()
        if not invite_code:
            raise FamilyError(INVALID_INVITE_CODE, "Invite code is required")

        user = await self._get_user(user_id)
        await self._ensure_not_in_family(user_id)

        family = await self.family_repo.get_by_invite_code(invite_code)
        if family is None:
            raise FamilyError(INVALID_INVITE_CODE, "Invalid or expired invite code", Code.NOT_FOUND)

        self.membership_repo.create_membership(user_id, family.id, MembershipRole.MEMBER.value)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise self._already_in_family() from e
        except Exception:
            await self.session.rollback()
            raise

        engine = await self.registry.resolve(family.id)
        await self._mirror_member(engine, family.id, user, MembershipRole.MEMBER.value)
        await self.auth.update_user_family_sessions(
            user_id, family.id, MembershipRole.MEMBER.value
        )

        logger.info("User joined family", family_id=family.id, user_id=user_id)
        return family

    async def get_family(self, family_id: str) -> Family:
        family = await self.family_repo.get_by_id(family_id)
        if family is None:
            raise FamilyError(FAMILY_NOT_FOUND, "Family not found", Code.NOT_FOUND)
        return family

    async def list_members(self, family_id: str) -> list[MemberInfo]:
        """Members of a family with their account details, oldest first."""
        memberships = await self.membership_repo.list_family_members(family_id)
        users = {
            user.id: user
            for user in await self.user_repo.get_many([m.user_id for m in memberships])
        }
        return [
            MemberInfo(
                user_id=membership.user_id,
                name=users[membership.user_id].name,
                email=users[membership.user_id].email,
                role=membership.role,
                joined_at=membership.joined_at,
            )
            for membership in memberships
            if membership.user_id in users
        ]

    async def leave_family(self, user_id: str) -> None:
        """Leave the current family.

        A manager cannot leave while other members remain. A manager who is the
        last member takes the family and its database with them.

        Raises:
            FamilyError: MEMBER_NOT_FOUND or MANAGER_CANNOT_LEAVE.
        """
        membership = await self.membership_repo.get_user_membership(user_id)
        if membership is None:
            raise FamilyError(MEMBER_NOT_FOUND, "User is not a member of a family", Code.NOT_FOUND)

        family_id = membership.family_id
        if membership.role == MembershipRole.MANAGER.value:
            if await self.membership_repo.count_family_members(family_id) > 1:
                raise FamilyError(
                    MANAGER_CANNOT_LEAVE,
                    "Family manager cannot leave while other members remain",
                    Code.FAILED_PRECONDITION,
                )
            await self.delete_family(family_id, user_id)
            return

        await self._remove_membership(family_id, user_id)
        logger.info("User left family", family_id=family_id, user_id=user_id)

    async def remove_member(self, family_id: str, manager_id: str, member_id: str) -> None:
        """Remove another member from the family (manager only)."""
        await self._require_manager(family_id, manager_id)
        if member_id == manager_id:
            raise FamilyError(
                CANNOT_REMOVE_MANAGER, "Family manager cannot be removed", Code.FAILED_PRECONDITION
            )
        if await self.membership_repo.get_membership(member_id, family_id) is None:
            raise FamilyError(MEMBER_NOT_FOUND, "Member not found", Code.NOT_FOUND)

        await self._remove_membership(family_id, member_id)
        logger.info(
            "Family member removed",
            family_id=family_id,
            member_id=member_id,
            manager_id=manager_id,
        )

    async def delete_family(self, family_id: str, user_id: str) -> None:
        """Delete a family and its database (manager only).

        Members' sessions are cleared of the family once the registry has
        removed it.
        """
        await self._require_manager(family_id, user_id)
        member_ids = [m.user_id for m in await self.membership_repo.list_family_members(family_id)]

        # Release this session's read transaction before the registry writes
        await self.session.commit()
        await self.registry.delete(family_id)

        for member_id in member_ids:
            await self.auth.update_user_family_sessions(member_id, None, None)

        logger.info("Family deleted", family_id=family_id, manager_id=user_id)

    async def regenerate_invite_code(self, family_id: str, user_id: str) -> str:
        """Replace a family's invite code (manager only). Returns the new code."""
        family = await self._require_manager(family_id, user_id)
        family.invite_code = await self._unique_invite_code()
        mark_updated(family)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Family invite code regenerated", family_id=family_id)
        return family.invite_code

    async def _require_manager(self, family_id: str, user_id: str) -> Family:
        family = await self.get_family(family_id)
        membership = await self.membership_repo.get_membership(user_id, family_id)
        if membership is None or membership.role != MembershipRole.MANAGER.value:
            raise FamilyError(
                NOT_FAMILY_MANAGER,
                "Only family managers can perform this action",
                Code.PERMISSION_DENIED,
            )
        return family

    async def _get_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthError(USER_NOT_FOUND, "User not found", Code.NOT_FOUND)
        return user

    async def _ensure_not_in_family(self, user_id: str) -> None:
        if await self.membership_repo.get_user_membership(user_id) is not None:
            raise self._already_in_family()

    @staticmethod
    def _already_in_family() -> FamilyError:
        return FamilyError(
            USER_ALREADY_IN_FAMILY,
            "User is already a member of a family",
            Code.ALREADY_EXISTS,
        )

    async def _unique_invite_code(self) -> str:
        for _ in range(INVITE_CODE_ATTEMPTS):
            code = generate_invite_code()
            if not await self.family_repo.invite_code_exists(code):
                return code
        raise FamilyError(
            "INVITE_CODE_UNAVAILABLE",
            "Could not generate a unique invite code",
            Code.UNAVAILABLE,
        )

    async def _remove_membership(self, family_id: str, user_id: str) -> None:
        try:
            await self.membership_repo.delete_membership(user_id, family_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        try:
            engine = await self.registry.resolve(family_id)
            await self._deactivate_member(engine, family_id, user_id)
        except Exception as e:
            logger.warning(
                "Failed to deactivate member in family database",
                family_id=family_id,
                user_id=user_id,
                error=str(e),
            )

        await self.auth.update_user_family_sessions(user_id, None, None)

    async def _mirror_member(
        self, engine: AsyncEngine, family_id: str, user: User, role: str
    ) -> None:
        """Copy a membership into the family database. Failures are logged only."""
        try:
            async with get_session(engine) as session:
                repo = FamilyMemberRepository(session)
                member = await repo.get_by_id(user.id)
                if member is None:
                    repo.add(
                        FamilyMember(id=user.id, name=user.name, email=user.email, role=role)
                    )
                else:
                    member.name = user.name
                    member.email = user.email
                    member.role = role
                    member.is_active = True
                    member.joined_at = utc_now()
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to add member to family database",
                family_id=family_id,
                user_id=user.id,
                error=str(e),
            )

    @staticmethod
    async def _deactivate_member(engine: AsyncEngine, family_id: str, user_id: str) -> None:
        async with get_session(engine) as session:
            member = await FamilyMemberRepository(session).get_by_id(user_id)
            if member is not None:
                member.is_active = False
                await session.commit()


