from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from resume_studio.db.database import Base
from resume_studio.models.base import new_id, utcnow


class JobDescription(Base):
    __tablename__ = "job_descriptions"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    company = Column(String(100), nullable=False)
    description_text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    analysis = relationship("JobAnalysis", uselist=False, back_populates="job_description",
                            cascade="all, delete-orphan", lazy="joined")


class JobAnalysis(Base):
    """Structured analysis of a job description. List columns hold JSON arrays."""
    __tablename__ = "job_analyses"

    id = Column(String(36), primary_key=True, default=new_id)
    job_description_id = Column(String(36), ForeignKey("job_descriptions.id", ondelete="CASCADE"),
                                unique=True, nullable=False)
    required_skills = Column(JSON, default=list, nullable=False)
    preferred_skills = Column(JSON, default=list, nullable=False)
    responsibilities = Column(JSON, default=list, nullable=False)
    # [{"keyword": str, "weight": int, "category": "required" | "preferred" | "general"}]
    ats_keywords = Column(JSON, default=list, nullable=False)
    experience_level = Column(String(20))
    created_at = Column(DateTime, default=utcnow, nullable=False)

    job_description = relationship("JobDescription", back_populates="analysis")
