from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

# What browser FormData sends for an unset parent
_EMPTY_PARENT_VALUES = {"", "null", "undefined"}


class StudentBase(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class StudentCreate(StudentBase):
    parent: Optional[int] = None

    @field_validator("parent", mode="before")
    @classmethod
    def empty_parent_is_root(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip() in _EMPTY_PARENT_VALUES:
            return None
        return v


class StudentUpdate(StudentBase):
    """Full replacement of the text fields; ``parent`` is not updatable."""


class StudentResponse(StudentBase):
    model_config = {"from_attributes": True, "populate_by_name": True}

    id: int
    profile: str
    parent: Optional[int] = Field(
        None, validation_alias=AliasChoices("parent_id", "parent")
    )
