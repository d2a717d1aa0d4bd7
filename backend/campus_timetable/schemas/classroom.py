from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from campus_timetable.models.classroom import RoomType


def _normalize_equipment(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    cleaned: list[str] = []
    for item in value:
        label = item.strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned


class ClassroomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=5000)
    room_type: RoomType
    equipment: list[str] = Field(default_factory=list, max_length=50)
    location: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Room name cannot be empty")
        return name

    @field_validator("equipment")
    @classmethod
    def normalize_equipment(cls, value: list[str]) -> list[str]:
        return _normalize_equipment(value)


class ClassroomCreate(ClassroomBase):
    available: bool = True


class ClassroomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=5000)
    room_type: RoomType | None = None
    equipment: list[str] | None = Field(default=None, max_length=50)
    available: bool | None = None
    location: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("equipment")
    @classmethod
    def normalize_equipment(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_equipment(value)


class ClassroomFilters(BaseModel):
    room_type: RoomType | None = None
    min_capacity: int | None = Field(default=None, ge=1)
    available: bool | None = None
    search: str | None = Field(default=None, max_length=100)


class ClassroomOut(ClassroomBase):
    id: str
    available: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
