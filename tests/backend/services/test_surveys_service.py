import pytest
from pydantic import ValidationError as SchemaValidationError

from backend.core.errors import Conflict, Forbidden, NotFound, ValidationError
from backend.models.survey import Survey
from backend.schemas.survey import SurveyCreateRequest, SurveyUpdateRequest
from backend.services import credentials, surveys


def _survey_data(**overrides) -> SurveyCreateRequest:
    fields = {
        'currentInstitution': 'MIT',
        'institutionLocation': 'Cambridge, USA',
        'currentResidence': 'Boston',
        'educationLevel': 'masters',
        'isMigrated': 'yes',
        'migrationReason': 'funding',
    }
    fields.update(overrides)
    return SurveyCreateRequest.model_validate(fields)


@pytest.fixture
def owner(db):
    user, _token = credentials.register(db, 'Ada', 'ada@example.com', 'secret')
    return user


@pytest.fixture
def other_user(db):
    user, _token = credentials.register(db, 'Bob', 'bob@example.com', 'secret')
    return user


def test_create_keeps_reason_when_migrated(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())

    assert survey.user_id == owner.id
    assert survey.migration_reason == 'funding'
    assert survey.submitted_at is not None


def test_create_clears_reason_when_not_migrated(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data(isMigrated='no', migrationReason='X'))

    assert survey.migration_reason == ''


def test_create_requires_reason_when_migrated(db, owner) -> None:
    with pytest.raises(ValidationError):
        surveys.create_survey(db, owner, _survey_data(migrationReason='  '))

    assert db.query(Survey).count() == 0


def test_second_submission_conflicts(db, owner) -> None:
    surveys.create_survey(db, owner, _survey_data())

    with pytest.raises(Conflict) as exception_info:
        surveys.create_survey(db, owner, _survey_data(currentInstitution='Stanford', isMigrated='no'))

    assert exception_info.value.status_code == 400
    assert db.query(Survey).filter(Survey.user_id == owner.id).count() == 1


def test_unique_constraint_backs_up_the_check(db, owner, monkeypatch: pytest.MonkeyPatch) -> None:
    surveys.create_survey(db, owner, _survey_data())
    monkeypatch.setattr(surveys, 'get_my_survey', lambda _db, _user: None)

    with pytest.raises(Conflict):
        surveys.create_survey(db, owner, _survey_data())

    assert db.query(Survey).count() == 1


def test_create_request_rejects_unknown_education_level() -> None:
    with pytest.raises(SchemaValidationError):
        _survey_data(educationLevel='kindergarten')


def test_create_request_rejects_blank_required_field() -> None:
    with pytest.raises(SchemaValidationError):
        _survey_data(currentResidence='   ')


def test_update_switching_to_no_clears_reason(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())

    updated = surveys.update_survey(db, survey.id, owner, SurveyUpdateRequest(is_migrated='no'))

    assert updated.id == survey.id
    assert updated.is_migrated == 'no'
    assert updated.migration_reason == ''


def test_update_never_stores_reason_without_migration(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data(isMigrated='no'))

    updated = surveys.update_survey(db, survey.id, owner, SurveyUpdateRequest(migration_reason='X'))

    assert updated.migration_reason == ''


def test_update_keeps_stored_values_for_empty_fields(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())

    updated = surveys.update_survey(
        db,
        survey.id,
        owner,
        SurveyUpdateRequest(current_institution='', current_residence='Lisbon', migration_reason=''),
    )

    assert updated.current_institution == 'MIT'
    assert updated.current_residence == 'Lisbon'
    assert updated.is_migrated == 'yes'
    assert updated.migration_reason == 'funding'


def test_update_to_migrated_requires_reason(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data(isMigrated='no'))

    with pytest.raises(ValidationError):
        surveys.update_survey(db, survey.id, owner, SurveyUpdateRequest(is_migrated='yes'))

    updated = surveys.update_survey(
        db, survey.id, owner, SurveyUpdateRequest(is_migrated='yes', migration_reason='scholarship'),
    )
    assert updated.migration_reason == 'scholarship'


def test_update_by_stranger_is_forbidden(db, owner, other_user) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())

    with pytest.raises(Forbidden):
        surveys.update_survey(db, survey.id, other_user, SurveyUpdateRequest(current_institution='Hacked'))

    db.refresh(survey)
    assert survey.current_institution == 'MIT'


def test_update_by_admin_succeeds(db, owner, other_user) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())
    other_user.is_admin = True
    db.commit()

    updated = surveys.update_survey(db, survey.id, other_user, SurveyUpdateRequest(education_level='phd'))

    assert updated.education_level == 'phd'
    assert updated.user_id == owner.id


def test_update_unknown_survey(db, owner) -> None:
    with pytest.raises(NotFound):
        surveys.update_survey(db, 999, owner, SurveyUpdateRequest())


def test_get_my_survey_returns_none_without_submission(db, owner) -> None:
    assert surveys.get_my_survey(db, owner) is None


def test_list_surveys_joins_owner_info(db, owner, other_user) -> None:
    surveys.create_survey(db, owner, _survey_data())
    surveys.create_survey(db, other_user, _survey_data(isMigrated='no'))
    credentials.delete_user(db, other_user.id)

    listed = surveys.list_surveys(db)

    assert [(row.user_name, row.user_email) for row in listed] == [
        ('Ada', 'ada@example.com'),
        (None, None),
    ]


def test_delete_survey(db, owner) -> None:
    survey = surveys.create_survey(db, owner, _survey_data())

    surveys.delete_survey(db, survey.id)

    assert surveys.get_my_survey(db, owner) is None
    with pytest.raises(NotFound):
        surveys.delete_survey(db, survey.id)


def test_analytics_on_empty_store(db) -> None:
    report = surveys.build_analytics(db)

    assert report.total_responses == 0
    assert report.migration_rate == 0
    assert [(item.level, item.count) for item in report.education_level_distribution] == [
        ('high_school', 0),
        ('bachelors', 0),
        ('masters', 0),
        ('phd', 0),
        ('other', 0),
    ]


def test_analytics_aggregates_surveys(db, owner, other_user) -> None:
    surveys.create_survey(db, owner, _survey_data(educationLevel='phd'))
    surveys.create_survey(db, other_user, _survey_data(isMigrated='no', educationLevel='phd'))

    report = surveys.build_analytics(db)

    assert report.total_responses == 2
    assert report.migration_rate == 0.5
    assert dict((item.level, item.count) for item in report.education_level_distribution)['phd'] == 2
    assert [(item.reason, item.percentage) for item in report.top_reasons] == list(surveys.PLACEHOLDER_TOP_REASONS)
