"""
Models module - SQLAlchemy ORM tables.

Importing this package registers every table on Base.metadata.
"""
from resume_studio.models.user import User, Profile
from resume_studio.models.profile import (
    PersonalInfo, SkillCategory, Skill, Experience, Education, Project, Certification, Achievement
)
from resume_studio.models.job import JobDescription, JobAnalysis
from resume_studio.models.resume import Resume, ResumeScore
from resume_studio.models.application import Application

__all__ = [
    "User", "Profile", "PersonalInfo", "SkillCategory", "Skill", "Experience", "Education",
    "Project", "Certification", "Achievement", "JobDescription", "JobAnalysis",
    "Resume", "ResumeScore", "Application",
]
