"""Family settings model - tenant database."""

from sqlmodel import Field, SQLModel

from src.household.core.security import generate_id
from src.household.models.enums import SettingDataType


class FamilySetting(SQLModel, table=True):
    __tablename__ = "family_settings"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=32)
    setting_key: str = Field(max_length=100, unique=True)
    setting_value: str | None = None
    data_type: str = Field(default=SettingDataType.STRING.value, max_length=20)
