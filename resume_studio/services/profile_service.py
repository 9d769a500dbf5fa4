"""
Profile Service

A profile is the source material for every generated resume:
personal info, summary, skills, experience, education, projects,
certifications and achievements.

Saving works section by section: a section present in the input
REPLACES the stored section; missing sections are left untouched.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session, selectinload

from resume_studio.core.errors import NotFoundError
from resume_studio.db.database import get_db_session
from resume_studio.models import (
    Achievement, Certification, Education, Experience, PersonalInfo, Profile, Project, Skill, SkillCategory
)
from resume_studio.schemas.schemas import ProfileInput

# Required sections always count toward the total; optional ones only when present
COMPLETENESS_WEIGHTS = {
    "personal_info": 20,
    "summary": 15,
    "skills": 20,
    "experience": 25,
    "education": 10,
    "projects": 5,
    "certifications": 3,
    "achievements": 2,
}

MIN_SUMMARY_LENGTH = 50


def profile_query_options():
    """Eager-load every section so profiles stay usable after the session closes."""
    return [
        selectinload(Profile.personal_info),
        selectinload(Profile.skills).joinedload(Skill.category),
        selectinload(Profile.experiences),
        selectinload(Profile.projects),
        selectinload(Profile.educations),
        selectinload(Profile.certifications),
        selectinload(Profile.achievements),
    ]


def load_profile(db: Session, profile_id: str) -> Optional[Profile]:
    return (
        db.query(Profile)
        .options(*profile_query_options())
        .filter(Profile.id == profile_id)
        .first()
    )


def compute_completeness(profile: Profile) -> dict:
    """
    Weighted completeness of a loaded profile.

    Returns:
        {"percent": int, "missing": [section labels]}
    """
    w = COMPLETENESS_WEIGHTS
    missing = []
    completed = 0
    total = 0

    info = profile.personal_info
    total += w["personal_info"]
    if info and info.first_name and info.last_name and info.email:
        completed += w["personal_info"]
    else:
        missing.append("Personal Info")

    total += w["summary"]
    if profile.summary and len(profile.summary) >= MIN_SUMMARY_LENGTH:
        completed += w["summary"]
    else:
        missing.append("Professional Summary")

    for key, items, label in (
        ("skills", profile.skills, "Skills"),
        ("experience", profile.experiences, "Work Experience"),
        ("education", profile.educations, "Education"),
    ):
        total += w[key]
        if items:
            completed += w[key]
        else:
            missing.append(label)

    for key, items in (
        ("projects", profile.projects),
        ("certifications", profile.certifications),
        ("achievements", profile.achievements),
    ):
        if items:
            total += w[key]
            completed += w[key]

    percent = int(completed / total * 100 + 0.5) if total else 0
    return {"percent": percent, "missing": missing}


class ProfileService:
    """Read, save and score profiles."""

    def get_profile(self, profile_id: str) -> Profile:
        with get_db_session() as db:
            profile = load_profile(db, profile_id)
        if not profile:
            raise NotFoundError("Profile")
        return profile

    def save_profile(self, profile_id: str, data: ProfileInput) -> Profile:
        with get_db_session() as db:
            profile = load_profile(db, profile_id)
            if not profile:
                raise NotFoundError("Profile")

            if data.personal_info is not None:
                info = data.personal_info.model_dump()
                info["email"] = info["email"] or ""
                if profile.personal_info:
                    for key, value in info.items():
                        setattr(profile.personal_info, key, value)
                else:
                    profile.personal_info = PersonalInfo(**info)

            if data.summary is not None:
                profile.summary = data.summary

            if data.skills is not None:
                profile.skills = self._build_skills(db, profile_id, data.skills)

            if data.experiences is not None:
                profile.experiences = [
                    Experience(**self._with_order(exp.model_dump(), i)) for i, exp in enumerate(data.experiences)
                ]

            if data.projects is not None:
                profile.projects = [
                    Project(**self._with_order(proj.model_dump(), i)) for i, proj in enumerate(data.projects)
                ]

            if data.educations is not None:
                profile.educations = [
                    Education(**self._with_order(edu.model_dump(), i)) for i, edu in enumerate(data.educations)
                ]

            if data.certifications is not None:
                profile.certifications = [Certification(**cert.model_dump()) for cert in data.certifications]

            if data.achievements is not None:
                profile.achievements = [Achievement(**ach.model_dump()) for ach in data.achievements]

            db.flush()
            db.expire(profile)
            profile = load_profile(db, profile_id)
            profile.completeness_percent = compute_completeness(profile)["percent"]

        logger.info(f"Profile {profile_id} saved ({profile.completeness_percent}% complete)")
        return self.get_profile(profile_id)

    def calculate_completeness(self, profile_id: str) -> dict:
        return compute_completeness(self.get_profile(profile_id))

    @staticmethod
    def _with_order(values: dict, index: int) -> dict:
        if values.get("order") is None:
            values["order"] = index
        return values

    @staticmethod
    def _build_skills(db: Session, profile_id: str, groups) -> list:
        """Upsert categories by name and build the new skill rows."""
        skills = []
        for group in groups:
            category = db.query(SkillCategory).filter(SkillCategory.name == group.category_name).first()
            if not category:
                category = SkillCategory(name=group.category_name)
                db.add(category)
                db.flush()
            for name in group.skills:
                name = name.strip()
                if name:
                    skills.append(Skill(name=name, category=category, profile_id=profile_id))
        return skills


# Singleton instance
_profile_service: Optional[ProfileService] = None


def get_profile_service() -> ProfileService:
    global _profile_service
    if _profile_service is None:
        _profile_service = ProfileService()
    return _profile_service
