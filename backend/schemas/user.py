from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


def _require_text(value: str, message: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(message)
    return normalized


def normalize_email(value: str) -> str:
    return value.strip().lower()


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; every stored timestamp is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _require_text(value, 'Please provide your name.')

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized or '@' not in normalized:
            raise ValueError('Please provide a valid email.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Please provide a password.')
        return value


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class ProfileUpdateRequest(CamelModel):
    """Partial profile update.

    Only fields present in the request body are applied. A field sent as an
    empty string or ``false`` overwrites the stored value; a missing field or
    an explicit ``null`` leaves it unchanged.
    """

    name: str | None = None
    phone: str | None = None
    notifications: bool | None = None

    def provided_changes(self) -> dict:
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }


class PasswordUpdateRequest(CamelModel):
    current_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Please provide a new password.')
        return value


class UserResponse(CamelModel):
    id: int = Field(validation_alias=AliasChoices('id', '_id'), serialization_alias='_id')
    name: str
    email: str
    is_admin: bool
    phone: str | None = None
    notifications: bool = True
    created_at: datetime | None = None

    @field_validator('created_at')
    @classmethod
    def created_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
