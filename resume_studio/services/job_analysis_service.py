"""
Job Analysis Service

PURPOSE:
Turn a raw job posting into structured data the rest of the pipeline uses:
required / preferred skills, responsibilities, weighted ATS keywords and
experience level.

HOW IT WORKS:
1. Store the job description (owned by the caller's profile)
2. Ask the AI provider for a structured analysis (cached by content hash)
3. If the AI call fails for any reason, use the rule-based analyzer below
4. Store the analysis next to the job description

The rule-based analyzer is deterministic: word counts give keyword weights,
nearby indicator words decide required vs preferred.
"""

import re
from collections import Counter
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.orm import joinedload

from resume_studio.core.errors import AIServiceError, NotFoundError
from resume_studio.db.database import get_db_session
from resume_studio.models import JobAnalysis, JobDescription
from resume_studio.services.ai_client import get_ai_client


STOPWORDS = {
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
}

REQUIRED_INDICATORS = ("must", "required", "essential", "mandatory", "need", "needs")
PREFERRED_INDICATORS = ("nice to have", "preferred", "bonus", "plus", "ideal")
RESPONSIBILITY_VERBS = ("lead", "develop", "design", "build", "create", "manage", "implement")

CONTEXT_WINDOW = 100
MAX_KEYWORDS = 20
EXPERIENCE_LEVELS = ("Junior", "Mid-Level", "Senior")

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert job description analyzer. Extract structured data from job postings "
    "for ATS (Applicant Tracking System) optimization. Be precise and focus on technical "
    "skills, tools, and qualifications."
)

ANALYSIS_PROMPT = """Analyze this job posting and extract structured information.

Job Title: {title}

Job Description:
{description}

Extract and return a JSON object with this exact structure:
{{
  "requiredSkills": ["skill1", "skill2"],
  "preferredSkills": ["skill1", "skill2"],
  "responsibilities": ["responsibility 1", "responsibility 2"],
  "atsKeywords": [
    {{"keyword": "keyword1", "weight": 10, "category": "required"}},
    {{"keyword": "keyword2", "weight": 7, "category": "preferred"}},
    {{"keyword": "keyword3", "weight": 5, "category": "general"}}
  ],
  "experienceLevel": "Junior" | "Mid-Level" | "Senior" | null
}}

requiredSkills: technical skills explicitly marked as required / must have.
preferredSkills: skills marked as nice-to-have / preferred / bonus.
responsibilities: key job responsibilities (3-8 items).
atsKeywords: top 20 ATS keywords with weights (10=critical, 5=important, 1=mentioned).

Focus on:
- Technical skills, tools, frameworks, languages
- Years of experience mentioned
- Required vs preferred qualifications
- Key action verbs and responsibilities
- Industry-specific terms"""


# ============================================================
# RULE-BASED ANALYSIS
# ============================================================

def extract_keywords(title: str, description_text: str) -> List[dict]:
    """Top keywords by occurrence count; ties keep first-seen order."""
    full_text = f"{title}\n{description_text}".lower()
    words = [
        word for word in re.sub(r"[^\w\s]", " ", full_text).split()
        if len(word) > 2 and word not in STOPWORDS
    ]
    counts = Counter(words)
    # Counter keeps insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:MAX_KEYWORDS]
    return [
        {"keyword": word[0].upper() + word[1:], "weight": count, "category": "general"}
        for word, count in ranked
    ]


def keyword_context(lower_text: str, keyword: str) -> str:
    """Text within CONTEXT_WINDOW chars of the keyword's first occurrence."""
    kw = keyword.lower()
    pos = lower_text.find(kw)
    return lower_text[max(0, pos - CONTEXT_WINDOW):min(len(lower_text), pos + len(kw) + CONTEXT_WINDOW)]


def extract_responsibilities(description_text: str) -> List[str]:
    sentences = [s.strip() for s in re.split(r"[.!?]+", description_text)]
    responsibilities = []
    for sentence in sentences:
        if len(sentence) <= 20:
            continue
        first_word = sentence.split()[0].lower()
        if any(verb in first_word for verb in RESPONSIBILITY_VERBS):
            responsibilities.append(sentence)
    return responsibilities[:8]


def detect_experience_level(lower_text: str) -> str:
    if any(word in lower_text for word in ("senior", "lead", "principal")):
        return "Senior"
    if any(word in lower_text for word in ("junior", "entry", "graduate")):
        return "Junior"
    if "mid-level" in lower_text or "intermediate" in lower_text:
        return "Mid-Level"

    match = re.search(r"(\d+)\+?\s*years", lower_text)
    if match:
        years = int(match.group(1))
        if years >= 7:
            return "Senior"
        if years >= 3:
            return "Mid-Level"
        return "Junior"
    return "Mid-Level"


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def rule_based_analysis(title: str, description_text: str) -> dict:
    """
    Analyze a job posting without AI.

    Returns the same shape as the AI analysis:
        required_skills, preferred_skills, responsibilities, ats_keywords, experience_level
    """
    lower_text = f"{title}\n{description_text}".lower()
    keywords = extract_keywords(title, description_text)

    required, preferred = [], []
    for kw in keywords:
        context = keyword_context(lower_text, kw["keyword"])
        if any(ind in context for ind in REQUIRED_INDICATORS):
            kw["category"] = "required"
            required.append(kw["keyword"])
        elif any(ind in context for ind in PREFERRED_INDICATORS):
            kw["category"] = "preferred"
            preferred.append(kw["keyword"])

    return {
        "required_skills": _unique(required)[:10],
        "preferred_skills": _unique(preferred)[:10],
        "responsibilities": extract_responsibilities(description_text),
        "ats_keywords": keywords,
        "experience_level": detect_experience_level(lower_text),
    }


def normalize_ai_analysis(result: dict) -> dict:
    """Clamp and clean the AI's JSON to the stored shape."""
    if not isinstance(result, dict):
        raise AIServiceError("AI analysis was not a JSON object")

    def _list(key: str, limit: int) -> list:
        value = result.get(key)
        return [str(v) for v in value[:limit]] if isinstance(value, list) else []

    level = result.get("experienceLevel")
    keywords = []
    raw_keywords = result.get("atsKeywords")
    if isinstance(raw_keywords, list):
        for kw in raw_keywords[:MAX_KEYWORDS]:
            if not isinstance(kw, dict):
                continue
            weight = kw.get("weight")
            if not isinstance(weight, (int, float)) or isinstance(weight, bool) or weight <= 0:
                weight = 5
            category = kw.get("category")
            keywords.append({
                "keyword": str(kw.get("keyword") or ""),
                "weight": weight,
                "category": category if category in ("required", "preferred") else "general",
            })

    return {
        "required_skills": _list("requiredSkills", 15),
        "preferred_skills": _list("preferredSkills", 15),
        "responsibilities": _list("responsibilities", 8),
        "ats_keywords": keywords,
        "experience_level": level if level in EXPERIENCE_LEVELS else None,
    }


# ============================================================
# SERVICE
# ============================================================

class JobAnalysisService:
    """Stores job descriptions and their analyses."""

    def __init__(self, ai_client=None):
        self.ai_client = ai_client or get_ai_client()

    def analyze_text(self, title: str, description_text: str) -> Tuple[dict, str]:
        """
        Analyze with AI, falling back to rules.

        Returns:
            (analysis dict, source) where source is "ai" or "rules"
        """
        try:
            result = self.ai_client.call_json(
                ANALYSIS_PROMPT.format(title=title, description=description_text),
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
                temperature=0.3,
                max_tokens=2000,
                use_cache=True,
            )
            return normalize_ai_analysis(result), "ai"
        except AIServiceError as e:
            logger.warning(f"AI job analysis failed, using rule-based analysis: {e}")
            return rule_based_analysis(title, description_text), "rules"

    def analyze_job(self, profile_id: str, title: str, company: str, description_text: str) -> JobDescription:
        analysis, source = self.analyze_text(title, description_text)

        with get_db_session() as db:
            job = JobDescription(
                profile_id=profile_id,
                title=title,
                company=company,
                description_text=description_text,
            )
            job.analysis = JobAnalysis(**analysis)
            db.add(job)

        logger.info(
            f"Analyzed job '{title}' at {company} via {source}: "
            f"{len(analysis['ats_keywords'])} keywords, level={analysis['experience_level']}"
        )
        return job

    def get_job_description(self, job_id: str, profile_id: str) -> JobDescription:
        with get_db_session() as db:
            job = (
                db.query(JobDescription)
                .options(joinedload(JobDescription.analysis))
                .filter(JobDescription.id == job_id, JobDescription.profile_id == profile_id)
                .first()
            )
        if not job:
            raise NotFoundError("Job description")
        return job

    def get_job_history(self, profile_id: str, page: int = 1, limit: int = 20) -> Tuple[List[JobDescription], int]:
        """Newest first, paginated. Returns (items, total)."""
        with get_db_session() as db:
            query = db.query(JobDescription).filter(JobDescription.profile_id == profile_id)
            total = query.count()
            jobs = (
                query.options(joinedload(JobDescription.analysis))
                .order_by(JobDescription.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        return jobs, total


# Singleton instance
_job_analysis_service: Optional[JobAnalysisService] = None


def get_job_analysis_service() -> JobAnalysisService:
    global _job_analysis_service
    if _job_analysis_service is None:
        _job_analysis_service = JobAnalysisService()
    return _job_analysis_service
