from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from resume_studio.db.database import Base
from resume_studio.models.base import new_id, utcnow


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    job_description_id = Column(String(36), ForeignKey("job_descriptions.id", ondelete="SET NULL"))
    title = Column(String(255), nullable=False)
    strategy = Column(String(50), nullable=False)
    latex_content = Column(Text, nullable=False)
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    job_description = relationship("JobDescription", lazy="joined")
    scores = relationship("ResumeScore", order_by="ResumeScore.scanned_at.desc()",
                          cascade="all, delete-orphan", back_populates="resume")


class ResumeScore(Base):
    __tablename__ = "resume_scores"

    id = Column(String(36), primary_key=True, default=new_id)
    resume_id = Column(String(36), ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    ats_score = Column(Integer, nullable=False)
    recruiter_score = Column(Integer, nullable=False)
    keyword_match_pct = Column(Integer, nullable=False)
    formatting_score = Column(Integer, nullable=False)
    readability_score = Column(Integer, nullable=False)
    metrics_score = Column(Integer, nullable=False)
    verbs_score = Column(Integer, nullable=False)
    breakdown = Column(JSON, default=dict, nullable=False)
    missing_keywords = Column(JSON, default=list, nullable=False)
    recommendations = Column(JSON, default=list, nullable=False)
    scanned_at = Column(DateTime, default=utcnow, nullable=False)

    resume = relationship("Resume", back_populates="scores")
