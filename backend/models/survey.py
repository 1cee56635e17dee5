"""Survey model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from backend.database import Base
from backend.models.user import utcnow

EDUCATION_LEVELS = ("high_school", "bachelors", "masters", "phd", "other")
MIGRATION_ANSWERS = ("yes", "no")


class Survey(Base):
    """One respondent's answers to the migration questionnaire."""
    __tablename__ = "surveys"
    # Backstop for the one-survey-per-user check done in the service.
    __table_args__ = (UniqueConstraint("user_id", name="uq_surveys_user_id"),)

    id = Column(Integer, primary_key=True, index=True)
    # No foreign key: deleting a user leaves their survey in place.
    user_id = Column(Integer, nullable=False, index=True)
    current_institution = Column(String, nullable=False)
    institution_location = Column(String, nullable=False)
    current_residence = Column(String, nullable=False)
    education_level = Column(String, nullable=False)
    is_migrated = Column(String, nullable=False)
    migration_reason = Column(String, nullable=False, default="")
    submitted_at = Column(DateTime(timezone=True), default=utcnow)
