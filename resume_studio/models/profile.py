"""Profile sections. Each row belongs to exactly one profile."""
from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from resume_studio.db.database import Base
from resume_studio.models.base import new_id


def _profile_fk():
    return Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)


class PersonalInfo(Base):
    __tablename__ = "personal_info"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(100), default="", nullable=False)
    last_name = Column(String(100), default="", nullable=False)
    email = Column(String(255), default="", nullable=False)
    phone = Column(String(50))
    location = Column(String(200))
    linkedin = Column(String(255))
    website = Column(String(255))


class SkillCategory(Base):
    __tablename__ = "skill_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    category_id = Column(String(36), ForeignKey("skill_categories.id"), nullable=False)
    profile_id = _profile_fk()

    category = relationship("SkillCategory", lazy="joined")


class Experience(Base):
    __tablename__ = "experiences"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = _profile_fk()
    title = Column(String(200), nullable=False)
    company = Column(String(200), nullable=False)
    location = Column(String(200))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    is_current = Column(Boolean, default=False, nullable=False)
    description = Column(Text, default="", nullable=False)
    order = Column(Integer, default=0, nullable=False)


class Education(Base):
    __tablename__ = "educations"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = _profile_fk()
    institution = Column(String(200), nullable=False)
    degree = Column(String(200), nullable=False)
    field = Column(String(200))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    gpa = Column(String(20))
    order = Column(Integer, default=0, nullable=False)


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = _profile_fk()
    name = Column(String(200), nullable=False)
    description = Column(Text, default="", nullable=False)
    url = Column(String(500))
    technologies = Column(String(500))
    order = Column(Integer, default=0, nullable=False)


class Certification(Base):
    __tablename__ = "certifications"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = _profile_fk()
    name = Column(String(200), nullable=False)
    issuer = Column(String(200), nullable=False)
    issue_date = Column(Date, nullable=False)
    expiry_date = Column(Date)
    credential_id = Column(String(200))
    credential_url = Column(String(500))


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(String(36), primary_key=True, default=new_id)
    profile_id = _profile_fk()
    title = Column(String(200), nullable=False)
    description = Column(Text, default="", nullable=False)
    date = Column(Date)
