from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from resume_studio.db.database import Base
from resume_studio.models.base import new_id, utcnow


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    job_title = Column(String(100), nullable=False)
    company = Column(String(100), nullable=False)
    location = Column(String(100))
    job_description_id = Column(String(36), ForeignKey("job_descriptions.id", ondelete="SET NULL"))
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="SET NULL"))
    # applied | interview | offer | rejected | withdrawn
    status = Column(String(20), default="applied", nullable=False, index=True)
    applied_date = Column(Date, nullable=False)
    interview_date = Column(Date)
    offer_date = Column(Date)
    rejection_date = Column(Date)
    salary = Column(String(50))
    notes = Column(Text)
    application_url = Column(String(500))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    job_description = relationship("JobDescription", lazy="joined")
    resume = relationship("Resume", lazy="joined")
