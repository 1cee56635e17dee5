from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.models.survey import EDUCATION_LEVELS, MIGRATION_ANSWERS
from backend.schemas.user import CamelModel, as_utc


def _validate_choice(value: str, choices: tuple[str, ...], message: str) -> str:
    normalized = value.strip().lower()
    if normalized not in choices:
        raise ValueError(message)
    return normalized


class SurveyCreateRequest(CamelModel):
    current_institution: str
    institution_location: str
    current_residence: str
    education_level: str
    is_migrated: str
    migration_reason: str | None = ''

    @field_validator('current_institution', 'institution_location', 'current_residence')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('This field is required.')
        return normalized

    @field_validator('education_level')
    @classmethod
    def validate_education_level(cls, value: str) -> str:
        return _validate_choice(value, EDUCATION_LEVELS, 'Please select your education level.')

    @field_validator('is_migrated')
    @classmethod
    def validate_is_migrated(cls, value: str) -> str:
        return _validate_choice(value, MIGRATION_ANSWERS, 'Please indicate if you migrated for education.')

    @field_validator('migration_reason')
    @classmethod
    def strip_reason(cls, value: str | None) -> str:
        return (value or '').strip()


class SurveyUpdateRequest(CamelModel):
    """Partial survey update; empty values keep what is stored."""

    current_institution: str | None = None
    institution_location: str | None = None
    current_residence: str | None = None
    education_level: str | None = None
    is_migrated: str | None = None
    migration_reason: str | None = None

    @field_validator('education_level')
    @classmethod
    def validate_education_level(cls, value: str | None) -> str | None:
        if not value:
            return value
        return _validate_choice(value, EDUCATION_LEVELS, 'Please select your education level.')

    @field_validator('is_migrated')
    @classmethod
    def validate_is_migrated(cls, value: str | None) -> str | None:
        if not value:
            return value
        return _validate_choice(value, MIGRATION_ANSWERS, 'Please indicate if you migrated for education.')


class SurveyResponse(CamelModel):
    id: int = Field(validation_alias=AliasChoices('id', '_id'), serialization_alias='_id')
    user_id: int = Field(validation_alias=AliasChoices('user_id', 'user'), serialization_alias='user')
    current_institution: str
    institution_location: str
    current_residence: str
    education_level: str
    is_migrated: str
    migration_reason: str
    submitted_at: datetime | None = None

    @field_validator('submitted_at')
    @classmethod
    def submitted_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SurveyWithOwnerResponse(CamelModel):
    id: int = Field(validation_alias=AliasChoices('id', '_id'), serialization_alias='_id')
    user_id: int
    user_name: str | None = None
    user_email: str | None = None
    current_institution: str
    institution_location: str
    current_residence: str
    education_level: str
    is_migrated: str
    migration_reason: str
    submitted_at: datetime | None = None

    @field_validator('submitted_at')
    @classmethod
    def submitted_at_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TopReason(BaseModel):
    reason: str
    percentage: int


class EducationLevelCount(BaseModel):
    level: str
    count: int


class AnalyticsReport(CamelModel):
    total_responses: int
    migration_rate: float
    top_reasons: list[TopReason]
    education_level_distribution: list[EducationLevelCount]
