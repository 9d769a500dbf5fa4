"""
Resume Generator Service

PURPOSE:
Build a LaTeX (moderncv) resume from a profile, tailored to one job description.

HOW IT WORKS:
1. Load the profile and the job description with its ATS keywords
2. Snapshot the profile into plain dicts (never mutate ORM rows)
3. If the job has keywords, ask the AI provider to rewrite the summary and
   each experience description around them; a failed rewrite keeps the original
4. Render header + sections in the strategy's order from Jinja2 templates
5. Store the result as a Resume titled "<job title> at <company>"

Strategies only change which sections appear and in what order.
"""

from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy.orm import joinedload, selectinload

from resume_studio.core.errors import AIServiceError, NotFoundError
from resume_studio.db.database import get_db_session
from resume_studio.models import JobDescription, Profile, Resume
from resume_studio.services.ai_client import get_ai_client
from resume_studio.services.profile_service import load_profile
from resume_studio.utils.latex import get_template_registry, linkedin_handle

SECTION_ORDER: Dict[str, List[str]] = {
    "max_ats": ["skills", "experience", "education", "projects", "certifications"],
    "recruiter_readability": ["summary", "experience", "skills", "education", "projects"],
    "career_switch": ["summary", "skills", "projects", "experience", "education"],
    "promotion_internal": ["summary", "achievements", "experience", "skills"],
    "stretch_role": ["summary", "projects", "skills", "experience"],
}
DEFAULT_STRATEGY = "recruiter_readability"

SUMMARY_PROMPT = """Rewrite this professional summary to be more ATS-friendly and aligned with the job requirements. Keep it concise (2-3 sentences), include relevant keywords naturally, and maintain authenticity.

Original Summary:
{summary}

Target Job: {job_title}
Key Keywords to incorporate: {keywords}

Return only the rewritten summary, no explanations."""

EXPERIENCE_PROMPT = """Rewrite these job responsibilities to be more ATS-friendly and impactful. Use action verbs, include metrics/numbers where possible, and naturally incorporate relevant keywords. Keep 3-5 bullet points.

Job Title: {title}
Company: {company}
Original Description:
{description}

Target Job Keywords: {keywords}

Return only the rewritten bullet points, one per line, starting with action verbs."""


def snapshot_profile(profile: Profile) -> dict:
    """Copy the fields the templates need into plain dicts."""
    info = profile.personal_info
    return {
        "personal_info": {
            "first_name": info.first_name,
            "last_name": info.last_name,
            "email": info.email,
            "phone": info.phone,
            "location": info.location,
            "linkedin": info.linkedin,
        } if info else None,
        "summary": profile.summary or "",
        "skills": [{"name": s.name, "category": s.category.name} for s in profile.skills],
        "experiences": [
            {
                "title": e.title, "company": e.company, "location": e.location,
                "start_date": e.start_date, "end_date": e.end_date,
                "is_current": e.is_current, "description": e.description or "",
            }
            for e in profile.experiences
        ],
        "educations": [
            {
                "institution": e.institution, "degree": e.degree, "field": e.field,
                "start_date": e.start_date, "end_date": e.end_date, "gpa": e.gpa,
            }
            for e in profile.educations
        ],
        "projects": [
            {"name": p.name, "description": p.description or "", "technologies": p.technologies}
            for p in profile.projects
        ],
        "certifications": [
            {"name": c.name, "issuer": c.issuer, "issue_date": c.issue_date}
            for c in profile.certifications
        ],
        "achievements": [
            {"title": a.title, "description": a.description or "", "date": a.date}
            for a in profile.achievements
        ],
    }


def group_skills(skills: List[dict]) -> List[tuple]:
    """[(category, [names])] in first-seen category order."""
    groups: Dict[str, List[str]] = {}
    for skill in skills:
        groups.setdefault(skill["category"], []).append(skill["name"])
    return list(groups.items())


def render_header(data: dict, job_title: str) -> str:
    info = data.get("personal_info") or {}
    linkedin = info.get("linkedin")
    return get_template_registry().render(
        "resume/header",
        first_name=info.get("first_name") or "First",
        last_name=info.get("last_name") or "Last",
        email=info.get("email") or "email@example.com",
        phone=info.get("phone") or "",
        location=info.get("location") or "",
        linkedin=linkedin_handle(linkedin) if linkedin else "",
        title=job_title,
    )


def render_section(section: str, data: dict) -> str:
    """Render one section; empty sections render to ''."""
    registry = get_template_registry()

    if section == "summary":
        return registry.render("resume/summary", summary=data["summary"]) if data["summary"] else ""
    if section == "skills":
        return registry.render("resume/skills", skill_groups=group_skills(data["skills"])) if data["skills"] else ""

    collections = {
        "experience": ("experiences", "resume/experience"),
        "education": ("educations", "resume/education"),
        "projects": ("projects", "resume/projects"),
        "certifications": ("certifications", "resume/certifications"),
        "achievements": ("achievements", "resume/achievements"),
    }
    if section not in collections:
        return ""
    key, template = collections[section]
    if not data[key]:
        return ""
    return registry.render(template, **{key: data[key]})


def render_resume(data: dict, job_title: str, strategy: str) -> str:
    """Full LaTeX document for a profile snapshot."""
    sections = SECTION_ORDER.get(strategy, SECTION_ORDER[DEFAULT_STRATEGY])
    parts = [render_header(data, job_title)]
    parts.extend(render_section(section, data) for section in sections)
    parts.append("\\end{document}\n")
    return "".join(parts)


class ResumeGeneratorService:

    def __init__(self, ai_client=None):
        self.ai_client = ai_client or get_ai_client()

    def generate_resume(self, profile_id: str, job_description_id: str, strategy: str) -> Resume:
        with get_db_session() as db:
            profile = load_profile(db, profile_id)
            if not profile:
                raise NotFoundError("Profile")
            job = (
                db.query(JobDescription)
                .filter(JobDescription.id == job_description_id, JobDescription.profile_id == profile_id)
                .first()
            )
            if not job:
                raise NotFoundError("Job description")

        if strategy not in SECTION_ORDER:
            logger.warning(f"Unknown strategy '{strategy}', using {DEFAULT_STRATEGY}")
            strategy = DEFAULT_STRATEGY

        keywords = [kw["keyword"] for kw in (job.analysis.ats_keywords if job.analysis else []) if kw.get("keyword")]
        data = snapshot_profile(profile)
        if keywords:
            data = self._optimize_with_ai(data, job.title, keywords)

        latex = render_resume(data, job.title, strategy)

        with get_db_session() as db:
            resume = Resume(
                profile_id=profile_id,
                job_description_id=job_description_id,
                title=f"{job.title} at {job.company}",
                strategy=strategy,
                latex_content=latex,
            )
            db.add(resume)
            db.flush()
            resume = self._load(db, resume.id)

        logger.info(f"Generated resume {resume.id} ({strategy}) for job {job_description_id}")
        return resume

    def _optimize_with_ai(self, data: dict, job_title: str, keywords: List[str]) -> dict:
        """Rewrite summary and experience descriptions; each failure keeps the original text."""
        if data["summary"]:
            try:
                data["summary"] = self.ai_client.call(
                    SUMMARY_PROMPT.format(
                        summary=data["summary"], job_title=job_title, keywords=", ".join(keywords[:10])
                    ),
                    temperature=0.7,
                    max_tokens=200,
                    use_cache=False,
                ).strip()
            except AIServiceError as e:
                logger.warning(f"AI summary optimization failed: {e}")

        for exp in data["experiences"]:
            if not exp["description"]:
                continue
            try:
                exp["description"] = self.ai_client.call(
                    EXPERIENCE_PROMPT.format(
                        title=exp["title"], company=exp["company"],
                        description=exp["description"], keywords=", ".join(keywords[:8]),
                    ),
                    temperature=0.7,
                    max_tokens=300,
                    use_cache=False,
                ).strip()
            except AIServiceError as e:
                logger.warning(f"AI optimization failed for {exp['title']}: {e}")
        return data

    @staticmethod
    def _load(db, resume_id: str) -> Optional[Resume]:
        return (
            db.query(Resume)
            .options(joinedload(Resume.job_description), selectinload(Resume.scores))
            .filter(Resume.id == resume_id)
            .first()
        )

    def get_resume(self, resume_id: str, profile_id: str) -> Resume:
        """Resume with its scores; other users' resumes are reported as not found."""
        with get_db_session() as db:
            resume = self._load(db, resume_id)
        if not resume or resume.profile_id != profile_id:
            raise NotFoundError("Resume")
        return resume

    def get_resume_history(self, profile_id: str) -> List[Resume]:
        with get_db_session() as db:
            return (
                db.query(Resume)
                .options(joinedload(Resume.job_description), selectinload(Resume.scores))
                .filter(Resume.profile_id == profile_id)
                .order_by(Resume.created_at.desc())
                .all()
            )

    def delete_resume(self, resume_id: str, profile_id: str) -> None:
        with get_db_session() as db:
            resume = db.query(Resume).filter(Resume.id == resume_id).first()
            if not resume or resume.profile_id != profile_id:
                raise NotFoundError("Resume")
            db.delete(resume)
        logger.info(f"Deleted resume {resume_id}")


# Singleton instance
_resume_generator_service: Optional[ResumeGeneratorService] = None


def get_resume_generator_service() -> ResumeGeneratorService:
    global _resume_generator_service
    if _resume_generator_service is None:
        _resume_generator_service = ResumeGeneratorService()
    return _resume_generator_service
