from typing import Any

from pydantic import BaseModel, Field


class SettingEntry(BaseModel):
    name: str
    value: int
    data: str | None = None


class SettingsResponse(BaseModel):
    settings: list[SettingEntry]


class SettingUpdate(BaseModel):
    value: int = 0
    data: str | dict[str, Any] | list[Any] | None = Field(default=None)


class SettingChangeResponse(BaseModel):
    name: str
    changed: bool
