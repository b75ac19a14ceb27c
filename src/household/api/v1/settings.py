"""settings.v1.SettingsService procedures. Writes are manager only."""

from fastapi import APIRouter

from src.household.api.context import FamilyAuth, ManagerAuth
from src.household.api.dependencies import SettingsServiceDep
from src.household.schemas.base import EmptyRequest, SuccessResponse
from src.household.schemas.settings import (
    ListSettingsResponse,
    SetSettingRequest,
    SettingInfo,
    SettingKeyRequest,
    SettingResponse,
)

router = APIRouter(prefix="/settings.v1.SettingsService", tags=["settings"])


@router.post("/GetSetting", response_model=SettingResponse)
async def get_setting(
    body: SettingKeyRequest, auth: FamilyAuth, service: SettingsServiceDep
) -> SettingResponse:
    setting = await service.get_setting(body.setting_key)
    return SettingResponse(setting=SettingInfo.model_validate(setting))


@router.post("/ListSettings", response_model=ListSettingsResponse)
async def list_settings(
    auth: FamilyAuth, service: SettingsServiceDep, body: EmptyRequest | None = None
) -> ListSettingsResponse:
    settings = await service.list_settings()
    return ListSettingsResponse(settings=[SettingInfo.model_validate(s) for s in settings])


@router.post("/SetSetting", response_model=SettingResponse)
async def set_setting(
    body: SetSettingRequest, auth: ManagerAuth, service: SettingsServiceDep
) -> SettingResponse:
    setting = await service.set_setting(body.setting_key, body.setting_value, body.data_type)
    return SettingResponse(setting=SettingInfo.model_validate(setting))


@router.post("/DeleteSetting", response_model=SuccessResponse)
async def delete_setting(
    body: SettingKeyRequest, auth: ManagerAuth, service: SettingsServiceDep
) -> SuccessResponse:
    await service.delete_setting(body.setting_key)
    return SuccessResponse()
