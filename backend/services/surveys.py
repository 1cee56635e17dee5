import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.core.errors import Conflict, Forbidden, NotFound, ValidationError
from backend.database import is_storable_id
from backend.models.survey import EDUCATION_LEVELS, Survey
from backend.models.user import User
from backend.schemas.survey import (
    AnalyticsReport,
    EducationLevelCount,
    SurveyCreateRequest,
    SurveyUpdateRequest,
    SurveyWithOwnerResponse,
    TopReason,
)

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED_MESSAGE = (
    'You have already submitted a survey. Please update your existing survey instead.'
)
MISSING_REASON_MESSAGE = 'Please provide a migration reason.'
UPDATABLE_TEXT_FIELDS = (
    'current_institution',
    'institution_location',
    'current_residence',
    'education_level',
    'is_migrated',
)

# Static figures shown on the dashboard. Not computed from stored reasons.
PLACEHOLDER_TOP_REASONS = (
    ('Better quality education', 45),
    ('More opportunities', 30),
    ('Specific program availability', 15),
    ('Other', 10),
)


def resolve_migration_reason(is_migrated: str, reason: str | None, fallback: str = '') -> str:
    """Reason to store for the given migration answer.

    Always empty unless the respondent migrated, in which case a non-empty
    reason (the new one, else ``fallback``) is required.
    """
    if is_migrated != 'yes':
        return ''

    resolved = (reason or '').strip() or fallback
    if not resolved:
        raise ValidationError(MISSING_REASON_MESSAGE)
    return resolved


def get_survey_or_404(db: Session, survey_id: int) -> Survey:
    survey = db.get(Survey, survey_id) if is_storable_id(survey_id) else None
    if survey is None:
        raise NotFound('Survey not found')
    return survey


def get_my_survey(db: Session, user: User) -> Survey | None:
    return db.query(Survey).filter(Survey.user_id == user.id).first()


def create_survey(db: Session, user: User, data: SurveyCreateRequest) -> Survey:
    if get_my_survey(db, user) is not None:
        raise Conflict(ALREADY_SUBMITTED_MESSAGE)

    survey = Survey(
        user_id=user.id,
        current_institution=data.current_institution,
        institution_location=data.institution_location,
        current_residence=data.current_residence,
        education_level=data.education_level,
        is_migrated=data.is_migrated,
        migration_reason=resolve_migration_reason(data.is_migrated, data.migration_reason),
    )
    db.add(survey)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(ALREADY_SUBMITTED_MESSAGE) from exc
    db.refresh(survey)

    logger.info('User %s submitted survey %s', user.id, survey.id)
    return survey


def update_survey(db: Session, survey_id: int, requester: User, data: SurveyUpdateRequest) -> Survey:
    survey = get_survey_or_404(db, survey_id)

    if survey.user_id != requester.id and not requester.is_admin:
        raise Forbidden('Not authorized to update this survey')

    changes = {}
    for field in UPDATABLE_TEXT_FIELDS:
        value = (getattr(data, field) or '').strip()
        if value:
            changes[field] = value

    is_migrated = changes.get('is_migrated', survey.is_migrated)
    changes['migration_reason'] = resolve_migration_reason(
        is_migrated,
        data.migration_reason,
        fallback=survey.migration_reason or '',
    )

    for field, value in changes.items():
        setattr(survey, field, value)
    db.commit()
    db.refresh(survey)
    return survey


def list_surveys(db: Session) -> list[SurveyWithOwnerResponse]:
    rows = (
        db.query(Survey, User)
        .outerjoin(User, User.id == Survey.user_id)
        .order_by(Survey.submitted_at.asc(), Survey.id.asc())
        .all()
    )

    return [
        SurveyWithOwnerResponse(
            id=survey.id,
            user_id=survey.user_id,
            user_name=owner.name if owner else None,
            user_email=owner.email if owner else None,
            current_institution=survey.current_institution,
            institution_location=survey.institution_location,
            current_residence=survey.current_residence,
            education_level=survey.education_level,
            is_migrated=survey.is_migrated,
            migration_reason=survey.migration_reason,
            submitted_at=survey.submitted_at,
        )
        for survey, owner in rows
    ]


def delete_survey(db: Session, survey_id: int) -> None:
    survey = get_survey_or_404(db, survey_id)
    db.delete(survey)
    db.commit()
    logger.info('Deleted survey %s', survey_id)


def build_analytics(db: Session) -> AnalyticsReport:
    surveys = db.query(Survey.is_migrated, Survey.education_level).all()

    total = len(surveys)
    migrated = sum(1 for is_migrated, _ in surveys if is_migrated == 'yes')
    level_counts = {level: 0 for level in EDUCATION_LEVELS}
    for _, education_level in surveys:
        if education_level in level_counts:
            level_counts[education_level] += 1

    return AnalyticsReport(
        total_responses=total,
        migration_rate=migrated / total if total > 0 else 0,
        top_reasons=[
            TopReason(reason=reason, percentage=percentage)
            for reason, percentage in PLACEHOLDER_TOP_REASONS
        ],
        education_level_distribution=[
            EducationLevelCount(level=level, count=level_counts[level])
            for level in EDUCATION_LEVELS
        ],
    )
