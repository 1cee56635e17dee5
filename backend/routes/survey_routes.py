from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user, require_admin
from backend.database import get_db
from backend.models.user import User
from backend.schemas.survey import (
    AnalyticsReport,
    SurveyCreateRequest,
    SurveyResponse,
    SurveyUpdateRequest,
    SurveyWithOwnerResponse,
)
from backend.schemas.user import MessageResponse
from backend.services import surveys

router = APIRouter(tags=['surveys'])


@router.post('', response_model=SurveyResponse, status_code=status.HTTP_201_CREATED)
def create_survey(
    data: SurveyCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return surveys.create_survey(db, current_user, data)


@router.get('/my-survey', response_model=SurveyResponse, responses={404: {'description': 'No survey yet'}})
def get_my_survey(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    survey = surveys.get_my_survey(db, current_user)
    if survey is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=None)
    return survey


@router.get('/analytics', response_model=AnalyticsReport)
def get_analytics(
    _current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return surveys.build_analytics(db)


@router.get('', response_model=list[SurveyWithOwnerResponse])
def list_surveys(
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return surveys.list_surveys(db)


@router.put('/{survey_id}', response_model=SurveyResponse)
def update_survey(
    survey_id: int,
    data: SurveyUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return surveys.update_survey(db, survey_id, current_user, data)


@router.delete('/{survey_id}', response_model=MessageResponse)
def delete_survey(
    survey_id: int,
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    surveys.delete_survey(db, survey_id)
    return MessageResponse(message='Survey removed')
