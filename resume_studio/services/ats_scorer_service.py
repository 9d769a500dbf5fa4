"""
ATS / Recruiter Scoring Service

Scores a generated LaTeX resume two ways:

ATS score (how a keyword-filtering system sees it)
    40% keyword coverage  - weighted share of job keywords present
    20% formatting        - always 100, the LaTeX output is well-formed
    20% sections          - experience / education / skills headings present
    20% length            - 400-800 words is ideal

Recruiter score (how a human skims it)
    40% metrics       - bullets containing numbers
    30% action verbs  - bullets opening with a strong verb
    30% readability   - bullets close to 15 words

Each scan is stored as a new ResumeScore; the resume keeps its history.
"""

import math
import re
from typing import List, Optional

from loguru import logger

from resume_studio.core.errors import AIServiceError, NotFoundError
from resume_studio.db.database import get_db_session
from resume_studio.models import Resume, ResumeScore
from resume_studio.services.ai_client import get_ai_client

ACTION_VERBS = {
    "achieved", "administered", "analyzed", "architected", "automated",
    "built", "collaborated", "coordinated", "created", "decreased",
    "delivered", "designed", "developed", "directed", "drove",
    "enabled", "engineered", "established", "executed", "expanded",
    "facilitated", "generated", "grew", "headed", "implemented",
    "improved", "increased", "influenced", "initiated", "innovated",
    "integrated", "introduced", "launched", "led", "leveraged",
    "managed", "maximized", "mentored", "migrated", "modernized",
    "optimized", "orchestrated", "organized", "oversaw", "pioneered",
    "produced", "reduced", "refactored", "redesigned", "scaled",
    "spearheaded", "standardized", "streamlined", "strengthened",
    "supervised", "transformed", "unified", "upgraded",
}

REQUIRED_SECTIONS = ("experience", "professional experience", "education", "skills")
IDEAL_WORDS = (400, 800)
IDEAL_BULLET_WORDS = 15

_COMMAND_WITH_ARG_RE = re.compile(r"\\[a-zA-Z]+\{([^}]*)\}")
_COMMAND_RE = re.compile(r"\\[a-zA-Z]+")
_LATEX_SYMBOLS_RE = re.compile(r"[{}\\%]")
_BULLET_RE = re.compile(r"\\item\s+([^\\]+)")
_SECTION_RE = re.compile(r"\\section\{([^}]+)\}")
_NUMBER_RE = re.compile(r"\d+%?")

RECOMMENDATION_PROMPT = """Analyze this resume and provide 3-5 specific, actionable recommendations to improve ATS score and recruiter appeal.

Resume Score: ATS {ats}/100, Recruiter {recruiter}/100
Missing Keywords: {missing}
Metrics Score: {metrics}/100
Action Verb Score: {verbs}/100

Resume Content (first 500 characters):
{text}

Provide concise, actionable recommendations (one sentence each). Focus on:
1. How to naturally incorporate missing keywords
2. Improving quantifiable achievements
3. Strengthening action verbs
4. Overall optimization tips

Return as JSON array: ["recommendation 1", "recommendation 2", ...]"""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


# ============================================================
# TEXT EXTRACTION
# ============================================================

def extract_plain_text(latex: str) -> str:
    text = _COMMAND_WITH_ARG_RE.sub(r"\1", latex)
    text = _COMMAND_RE.sub("", text)
    text = _LATEX_SYMBOLS_RE.sub("", text)
    return re.sub(r"\s+", " ", text).strip().lower()


def extract_bullets(latex: str) -> List[str]:
    return [m.group(1).strip() for m in _BULLET_RE.finditer(latex)]


def detect_sections(latex: str) -> List[str]:
    return [m.group(1).lower() for m in _SECTION_RE.finditer(latex)]


# ============================================================
# COMPONENT SCORES
# ============================================================

def keyword_match(text: str, keywords: List[dict]) -> tuple:
    """Weighted keyword coverage. Returns (match_pct, missing_keywords)."""
    if not keywords:
        return 100, []

    missing = []
    matched_weight = 0
    total_weight = 0
    for kw in keywords:
        weight = kw.get("weight", 5)
        total_weight += weight
        if kw["keyword"].lower() in text:
            matched_weight += weight
        else:
            missing.append(kw["keyword"])

    match_pct = clamp(matched_weight / total_weight * 100) if total_weight > 0 else 100
    return match_pct, missing


def section_score(sections: List[str]) -> int:
    score = 100
    for required in REQUIRED_SECTIONS:
        if not any(required in s for s in sections):
            score -= 20
    return max(0, score)


def length_score(word_count: int) -> int:
    low, high = IDEAL_WORDS
    if low <= word_count <= high:
        return 100
    diff = low - word_count if word_count < low else word_count - high
    return max(0, 100 - diff // 10)


def metrics_score(bullets: List[str]) -> int:
    with_metrics = sum(1 for b in bullets if _NUMBER_RE.search(b))
    return min(100, with_metrics * 8)


def action_verb_score(bullets: List[str]) -> int:
    if not bullets:
        return 0
    strong = sum(1 for b in bullets if b.split() and b.split()[0].lower() in ACTION_VERBS)
    return round_half_up(strong / len(bullets) * 100)


def readability_score(bullets: List[str]) -> float:
    if not bullets:
        return 100
    avg_words = sum(len(b.split()) for b in bullets) / len(bullets)
    return max(0, 100 - abs(avg_words - IDEAL_BULLET_WORDS) * 2)


def rule_based_recommendations(scores: dict, sections: List[str]) -> List[str]:
    recommendations = []
    missing = scores["missing_keywords"]
    if missing:
        recommendations.append(f"Add these keywords to improve ATS score: {', '.join(missing[:5])}")
    if scores["metrics_score"] < 50:
        recommendations.append("Add more quantified achievements (numbers, percentages) to your bullets")
    if scores["verbs_score"] < 70:
        recommendations.append("Start more bullet points with strong action verbs (Led, Developed, Increased)")
    if not any("summary" in s for s in sections):
        recommendations.append("Consider adding a Professional Summary section")
    if scores["ats_score"] >= 80 and scores["recruiter_score"] >= 80:
        recommendations.append("Your resume is well-optimized! Consider minor tweaks for specific roles.")
    return recommendations[:5]


def calculate_scores(latex: str, keywords: List[dict]) -> dict:
    """
    All score components for a LaTeX document (no recommendations).

    Returns a dict shaped like the ResumeScore columns plus "sections" and "plain_text".
    """
    plain = extract_plain_text(latex)
    bullets = extract_bullets(latex)
    sections = detect_sections(latex)
    word_count = len(plain.split())

    match_pct, missing = keyword_match(plain, keywords)
    format_score = 100
    sec_score = section_score(sections)
    len_score = length_score(word_count)
    ats = round_half_up(match_pct * 0.4 + format_score * 0.2 + sec_score * 0.2 + len_score * 0.2)

    metrics = metrics_score(bullets)
    verbs = action_verb_score(bullets)
    readability = readability_score(bullets)
    recruiter = round_half_up(metrics * 0.4 + verbs * 0.3 + readability * 0.3)

    return {
        "ats_score": clamp(ats),
        "recruiter_score": clamp(recruiter),
        "keyword_match_pct": match_pct,
        "formatting_score": format_score,
        "readability_score": round_half_up(readability),
        "metrics_score": metrics,
        "verbs_score": verbs,
        "breakdown": {
            "ats": {
                "keyword_coverage": match_pct,
                "format_score": format_score,
                "section_score": sec_score,
                "length_score": len_score,
            },
            "recruiter": {
                "metrics_score": metrics,
                "action_verb_score": verbs,
                "readability_score": readability,
            },
        },
        "missing_keywords": missing,
        "sections": sections,
        "plain_text": plain,
    }


class ATSScorerService:

    def __init__(self, ai_client=None):
        self.ai_client = ai_client or get_ai_client()

    def score_resume(self, resume_id: str, profile_id: str) -> ResumeScore:
        with get_db_session() as db:
            resume = db.query(Resume).filter(Resume.id == resume_id).first()
            if not resume or resume.profile_id != profile_id:
                raise NotFoundError("Resume")
            job = resume.job_description
            keywords = (job.analysis.ats_keywords if job and job.analysis else None) or []
            latex = resume.latex_content

        scores = calculate_scores(latex, keywords)
        sections = scores.pop("sections")
        plain_text = scores.pop("plain_text")
        scores["recommendations"] = self._recommendations(scores, sections, plain_text)

        with get_db_session() as db:
            score = ResumeScore(resume_id=resume_id, **scores)
            db.add(score)

        logger.info(
            f"Scored resume {resume_id}: ATS {score.ats_score}, recruiter {score.recruiter_score}, "
            f"{len(score.missing_keywords)} missing keywords"
        )
        return score

    def _recommendations(self, scores: dict, sections: List[str], plain_text: str) -> List[str]:
        if scores["missing_keywords"]:
            prompt = RECOMMENDATION_PROMPT.format(
                ats=scores["ats_score"],
                recruiter=scores["recruiter_score"],
                missing=", ".join(scores["missing_keywords"][:10]),
                metrics=scores["metrics_score"],
                verbs=scores["verbs_score"],
                text=plain_text[:500],
            )
            try:
                recs = self.ai_client.call_json(prompt, temperature=0.5, max_tokens=300, use_cache=False)
                if isinstance(recs, list) and recs:
                    return [str(r) for r in recs[:5]]
            except AIServiceError as e:
                logger.warning(f"AI recommendations failed, using rules: {e}")
        return rule_based_recommendations(scores, sections)


# Singleton instance
_ats_scorer_service: Optional[ATSScorerService] = None


def get_ats_scorer_service() -> ATSScorerService:
    global _ats_scorer_service
    if _ats_scorer_service is None:
        _ats_scorer_service = ATSScorerService()
    return _ats_scorer_service
