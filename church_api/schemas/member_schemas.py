from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from church_api.models.role import MemberRole

BIRTH_DATE_FORMAT = "%d/%m/%Y"


def parse_birth_date(value):
    """Accept dd/MM/yyyy text (or a date) and return a date"""
    if value is None or isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, BIRTH_DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValueError("Data de nascimento inválida. Use o formato dd/MM/yyyy.")


BirthDate = Annotated[date | None, BeforeValidator(parse_birth_date)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys (avatarUrl, positionId, ...)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldEditRequest(CamelModel):
    """
    Partial update of a member's core fields.

    Only the keys present in the payload are applied; an explicit null
    clears an optional field. Role and permissions are never changed here.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    birth_date: BirthDate = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    avatar_url: str | None = Field(default=None, max_length=500)
    position_id: int | None = None

    @field_validator("name", "email")
    @classmethod
    def required_fields_not_null(cls, value):
        if value is None:
            raise ValueError("Campo obrigatório não pode ser nulo")
        return value


class MemberCreate(CamelModel):
    """Create a member in a branch (defaults to the creator's branch)"""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    branch_id: int | None = None
    role: MemberRole = Field(default=MemberRole.MEMBER)
    auth_user_id: str | None = Field(default=None, min_length=1, max_length=255)
    birth_date: BirthDate = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    avatar_url: str | None = Field(default=None, max_length=500)
    position_id: int | None = None


class RoleChangeRequest(CamelModel):
    """Change member's role (ADMINGERAL or ADMINFILIAL)"""

    role: MemberRole = Field(..., description="New role to assign")


class PositionSummary(CamelModel):
    id: int
    name: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MemberResponse(CamelModel):
    """
    Member representation.

    Optional keys are always present and null when absent; front-end
    consumers rely on a stable shape.
    """

    id: int
    name: str
    email: str | None = None
    role: MemberRole
    branch_id: int
    church_id: int | None = None
    birth_date: str | None = None
    phone: str | None = None
    address: str | None = None
    avatar_url: str | None = None
    position_id: int | None = None
    position: PositionSummary | None = None
    permissions: list[str] = Field(default_factory=list)
