from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from resume_studio.db.database import Base
from resume_studio.models.base import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    summary = Column(Text)
    completeness_percent = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="profile")
    personal_info = relationship("PersonalInfo", uselist=False, cascade="all, delete-orphan")
    skills = relationship("Skill", cascade="all, delete-orphan")
    experiences = relationship("Experience", order_by="Experience.order", cascade="all, delete-orphan")
    projects = relationship("Project", order_by="Project.order", cascade="all, delete-orphan")
    educations = relationship("Education", order_by="Education.order", cascade="all, delete-orphan")
    certifications = relationship("Certification", cascade="all, delete-orphan")
    achievements = relationship("Achievement", cascade="all, delete-orphan")
