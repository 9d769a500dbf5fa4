"""
Profile <-> Job Matching Service

PURPOSE:
Show how well a profile covers a job's ATS keywords before generating a resume.

HOW IT WORKS:
1. Load the job analysis keywords and the profile
2. Classify each keyword:
   - direct:  keyword is a listed skill or appears in profile text
   - partial: keyword belongs to a synonym group and another variant is present
   - gap:     nothing found -> suggestion
3. match_percent = (direct + 0.5 * partial) / total
4. Recommendations from the AI provider, rule-based when unavailable

WHY SYNONYMS?
- "JS" on a profile should count toward a "JavaScript" requirement
- Only counts half: an ATS doing exact matching will still miss it
"""

from typing import List, Optional

from loguru import logger

from resume_studio.core.errors import AIServiceError, NotFoundError
from resume_studio.db.database import get_db_session
from resume_studio.models import JobDescription, Profile
from resume_studio.services.ai_client import get_ai_client
from resume_studio.services.profile_service import load_profile

SKILL_SYNONYMS = {
    "javascript": ["js", "ecmascript", "es6"],
    "typescript": ["ts"],
    "python": ["py"],
    "react": ["reactjs", "react.js"],
    "node": ["nodejs", "node.js"],
    "postgresql": ["postgres", "psql"],
    "mongodb": ["mongo"],
    "kubernetes": ["k8s"],
    "aws": ["amazon web services"],
    "gcp": ["google cloud platform"],
    "azure": ["microsoft azure"],
    "ci/cd": ["continuous integration", "continuous deployment"],
    "ml": ["machine learning"],
    "ai": ["artificial intelligence"],
    "api": ["apis", "rest api", "restful"],
    "agile": ["scrum", "kanban"],
}

GAP_SUGGESTIONS = {
    "python": "Consider adding Python projects or courses to your profile",
    "kubernetes": "K8s experience is valuable - consider container orchestration training",
    "aws": "Cloud skills are in demand - explore AWS certifications",
    "leadership": "Highlight team lead or mentoring experiences",
}

RECOMMENDATION_PROMPT = """Analyze the match between a candidate profile and job requirements, then provide 3-5 specific, actionable recommendations.

Match Statistics:
- Direct Matches: {direct}/{total}
- Missing Keywords: {gap_count}
- Top Missing: {top_missing}

Profile Summary (first 300 characters):
{profile_text}

Provide concise recommendations focusing on:
1. How to bridge skill gaps
2. Ways to highlight transferable skills
3. Keywords to naturally incorporate
4. Experience framing strategies

Return as JSON array: ["recommendation 1", "recommendation 2", ...]"""


def profile_text(profile: Profile) -> str:
    """Lower-cased searchable text: summary, experience and project fields."""
    parts = []
    if profile.summary:
        parts.append(profile.summary)
    for exp in profile.experiences:
        parts.extend([exp.title, exp.company, exp.description or ""])
    for proj in profile.projects:
        parts.extend([proj.name, proj.description or ""])
    return " ".join(parts).lower()


def find_evidence(profile: Profile, keyword: str) -> str:
    for skill in profile.skills:
        if skill.name.lower() == keyword:
            return f"Listed in Skills: {skill.name}"
    for exp in profile.experiences:
        if keyword in (exp.description or "").lower():
            return f"Found in experience: {exp.title}"
    return "Found in profile"


def gap_suggestion(keyword: str) -> str:
    return GAP_SUGGESTIONS.get(keyword.lower(), f"Consider gaining experience with {keyword}")


def synonym_group(keyword: str) -> Optional[List[str]]:
    for main, synonyms in SKILL_SYNONYMS.items():
        variants = [main] + synonyms
        if keyword in variants:
            return variants
    return None


def classify_keywords(profile: Profile, ats_keywords: List[dict]) -> dict:
    """
    Split ATS keywords into direct / partial / gap items and compute match_percent.
    """
    text = profile_text(profile)
    skills = [s.name.lower() for s in profile.skills]

    direct, partial, gaps = [], [], []
    for kw in ats_keywords:
        keyword = kw.get("keyword", "")
        lower = keyword.lower()

        if lower in skills or lower in text:
            direct.append({
                "keyword": keyword,
                "match_type": "direct",
                "evidence": find_evidence(profile, lower),
            })
            continue

        variants = synonym_group(lower) or []
        found = next((v for v in variants if v in skills or v in text), None)
        if found:
            partial.append({
                "keyword": keyword,
                "match_type": "partial",
                "evidence": f"Found related skill: {found}",
            })
        else:
            gaps.append({
                "keyword": keyword,
                "match_type": "gap",
                "suggestion": gap_suggestion(keyword),
            })

    total = len(ats_keywords) or 1
    match_percent = int((len(direct) + len(partial) * 0.5) / total * 100 + 0.5)

    return {
        "match_percent": min(100, match_percent),
        "direct_matches": direct,
        "partial_matches": partial,
        "gaps": gaps,
    }


def rule_based_recommendations(result: dict) -> List[str]:
    recommendations = []
    gaps = result["gaps"]
    if gaps:
        top = ", ".join(g["keyword"] for g in gaps[:5])
        recommendations.append(f"Address missing keywords where you have real experience: {top}")
    if result["partial_matches"]:
        names = ", ".join(p["keyword"] for p in result["partial_matches"][:3])
        recommendations.append(f"Use the exact job wording for related skills: {names}")
    if result["match_percent"] < 50:
        recommendations.append("Highlight transferable skills in your summary and experience bullets")
    for gap in gaps[:2]:
        recommendations.append(gap["suggestion"])
    if not recommendations:
        recommendations.append("Strong match! Emphasize your most relevant achievements for this role.")
    return recommendations[:5]


class MatchService:

    def __init__(self, ai_client=None):
        self.ai_client = ai_client or get_ai_client()

    def match_profile_to_job(self, profile_id: str, job_description_id: str) -> dict:
        with get_db_session() as db:
            job = (
                db.query(JobDescription)
                .filter(JobDescription.id == job_description_id, JobDescription.profile_id == profile_id)
                .first()
            )
            if not job or not job.analysis:
                raise NotFoundError("Job description or analysis")

            profile = load_profile(db, profile_id)
            if not profile:
                raise NotFoundError("Profile")

        result = classify_keywords(profile, job.analysis.ats_keywords or [])
        result["recommendations"] = self._recommendations(result, profile_text(profile))
        logger.info(f"Matched profile {profile_id} to job {job_description_id}: {result['match_percent']}%")
        return result

    def _recommendations(self, result: dict, text: str) -> List[str]:
        direct = len(result["direct_matches"])
        total = direct + len(result["partial_matches"]) + len(result["gaps"])
        prompt = RECOMMENDATION_PROMPT.format(
            direct=direct,
            total=total,
            gap_count=len(result["gaps"]),
            top_missing=", ".join(g["keyword"] for g in result["gaps"][:5]),
            profile_text=text[:300],
        )
        try:
            recs = self.ai_client.call_json(prompt, temperature=0.6, max_tokens=400, use_cache=False)
            if isinstance(recs, list) and recs:
                return [str(r) for r in recs[:5]]
            logger.warning("AI match recommendations had unexpected shape, using rules")
        except AIServiceError as e:
            logger.warning(f"AI match recommendations failed, using rules: {e}")
        return rule_based_recommendations(result)


# Singleton instance
_match_service: Optional[MatchService] = None


def get_match_service() -> MatchService:
    global _match_service
    if _match_service is None:
        _match_service = MatchService()
    return _match_service
