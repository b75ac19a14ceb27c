"""Family settings - typed key/value pairs in a family database."""

import json

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.household.core.exceptions import AppError, Code, NotFoundError
from src.household.core.logging import get_logger
from src.household.models.enums import SettingDataType
from src.household.models.family import FamilySetting
from src.household.repositories import FamilySettingRepository

logger = get_logger(__name__)

SETTING_NOT_FOUND = "SETTING_NOT_FOUND"
INVALID_SETTING = "INVALID_SETTING"

MAX_SETTING_KEY_LENGTH = 100


def _check_value(value: str | None, data_type: SettingDataType) -> None:
    """Raise ValueError if ``value`` does not parse as ``data_type``."""
    if value is None or data_type is SettingDataType.STRING:
        return
    if data_type is SettingDataType.INTEGER:
        int(value)
    elif data_type is SettingDataType.BOOLEAN:
        if value.lower() not in ("true", "false"):
            raise ValueError(f"not a boolean: {value!r}")
    elif data_type is SettingDataType.JSON:
        json.loads(value)


class SettingsService:
    def __init__(self, setting_repo: FamilySettingRepository, session: AsyncSession):
        self.setting_repo = setting_repo
        self.session = session

    @classmethod
    def for_session(cls, session: AsyncSession) -> "SettingsService":
        return cls(FamilySettingRepository(session), session)

    async def get_setting(self, key: str) -> FamilySetting:
        setting = await self.setting_repo.get_by_key(key)
        if setting is None:
            raise NotFoundError(SETTING_NOT_FOUND, "Setting not found", Code.NOT_FOUND)
        return setting

    async def list_settings(self) -> list[FamilySetting]:
        return await self.setting_repo.list_all()

    async def set_setting(
        self, key: str, value: str | None, data_type: str = SettingDataType.STRING.value
    ) -> FamilySetting:
        """Create or replace a setting.

        Raises:
            AppError: INVALID_SETTING if the key is empty, the type unknown, or
                the value does not parse as the type.
        """
        key = key.strip()
        if not key or len(key) > MAX_SETTING_KEY_LENGTH:
            raise AppError(
                INVALID_SETTING,
                f"Setting key must be between 1 and {MAX_SETTING_KEY_LENGTH} characters",
            )
        try:
            kind = SettingDataType(data_type)
            _check_value(value, kind)
        except ValueError as e:
            raise AppError(INVALID_SETTING, f"Invalid {data_type} setting value") from e

        setting = await self.setting_repo.get_by_key(key)
        if setting is None:
            setting = FamilySetting(setting_key=key, setting_value=value, data_type=kind.value)
            self.setting_repo.add(setting)
        else:
            setting.setting_value = value
            setting.data_type = kind.value

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AppError(
                INVALID_SETTING, "Setting was modified concurrently", Code.ALREADY_EXISTS
            ) from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Family setting saved", setting_key=key, data_type=kind.value)
        return setting

    async def delete_setting(self, key: str) -> None:
        setting = await self.get_setting(key)
        try:
            await self.setting_repo.remove(setting)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Family setting deleted", setting_key=key)
