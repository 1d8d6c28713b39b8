from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FamilyMemberCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    parent_id: int | None = None
    mother_name: str | None = None
    phone_number: str | None = None
    is_deceased: bool = False
    position: int = 0

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class FamilyMemberUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    parent_id: int | None = None
    mother_name: str | None = None
    phone_number: str | None = None
    is_deceased: bool | None = None
    position: int | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name may not be null")
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("is_deceased", "position")
    @classmethod
    def not_null(cls, value):
        # Only runs for fields present in the request body.
        if value is None:
            raise ValueError("field may not be null")
        return value


class FamilyMemberResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    name: str
    parent_id: int | None
    mother_name: str | None
    phone_number: str | None
    is_deceased: bool
    position: int


class SwapRequest(CamelModel):
    id1: int
    id2: int


class SwapResponse(CamelModel):
    member1: FamilyMemberResponse
    member2: FamilyMemberResponse


class AddParentResponse(CamelModel):
    parent: FamilyMemberResponse
    member: FamilyMemberResponse
