from pydantic import Field

from src.household.models.enums import SettingDataType
from src.household.schemas.base import RpcModel


class SettingInfo(RpcModel):
    id: str
    setting_key: str
    setting_value: str | None = None
    data_type: str


class SettingKeyRequest(RpcModel):
    setting_key: str = Field(max_length=100)


class SetSettingRequest(RpcModel):
    setting_key: str = Field(max_length=100)
    setting_value: str | None = None
    data_type: str = SettingDataType.STRING.value


class SettingResponse(RpcModel):
    setting: SettingInfo


class ListSettingsResponse(RpcModel):
    settings: list[SettingInfo]
