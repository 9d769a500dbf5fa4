"""LaTeX helpers, templates and strategy-based resume assembly."""
from datetime import date
from unittest.mock import MagicMock

import pytest
from jinja2 import TemplateNotFound

from resume_studio.core.errors import AIServiceError
from resume_studio.services.resume_generator_service import (
    SECTION_ORDER,
    ResumeGeneratorService,
    group_skills,
    render_resume,
    render_section,
)
from resume_studio.utils.latex import (
    TemplateRegistry,
    bullet_lines,
    escape_latex,
    format_date_range,
    format_year,
    linkedin_handle,
)


def resume_data(**overrides):
    data = {
        "personal_info": {
            "first_name": "Jane", "last_name": "Doe", "email": "jane@example.com",
            "phone": "555 0100", "location": "Berlin", "linkedin": "https://linkedin.com/in/janedoe",
        },
        "summary": "Engineer focused on data platforms.",
        "skills": [
            {"name": "Python", "category": "Languages"},
            {"name": "Docker", "category": "Tools"},
            {"name": "SQL", "category": "Languages"},
        ],
        "experiences": [{
            "title": "Senior Engineer", "company": "AT&T", "location": "Berlin",
            "start_date": date(2020, 1, 1), "end_date": None, "is_current": True,
            "description": "• Led migration of 12 services\n- Cut costs by 30%",
        }],
        "educations": [{
            "institution": "State University", "degree": "BSc", "field": "Computer Science",
            "start_date": date(2012, 9, 1), "end_date": date(2016, 6, 1), "gpa": "3.8",
        }],
        "projects": [{"name": "resume_tools", "description": "CLI for resumes", "technologies": "Python"}],
        "certifications": [{"name": "CKA", "issuer": "CNCF", "issue_date": date(2022, 5, 1)}],
        "achievements": [{"title": "Hackathon winner", "description": "First place", "date": date(2021, 3, 1)}],
    }
    data.update(overrides)
    return data


def section_positions(latex, titles):
    return [latex.index(f"\\section{{{title}}}") for title in titles]


# ---------- helpers ----------

def test_escape_latex_special_characters():
    assert escape_latex("R&D 100% $5 #1 a_b {x}") == r"R\&D 100\% \$5 \#1 a\_b \{x\}"


def test_escape_latex_single_pass():
    assert escape_latex("a\\b~c^d") == r"a\textbackslash{}b\textasciitilde{}c\textasciicircum{}d"


def test_escape_latex_empty():
    assert escape_latex(None) == ""
    assert escape_latex("") == ""


def test_format_date_range():
    assert format_date_range(date(2020, 1, 15), None, True) == "Jan 2020 -- Present"
    assert format_date_range(date(2020, 1, 1), date(2022, 3, 1)) == "Jan 2020 -- Mar 2022"
    assert format_date_range(date(2019, 12, 1)) == "Dec 2019"


def test_format_year():
    assert format_year(date(2021, 7, 4)) == "2021"
    assert format_year(None) == ""


def test_bullet_lines_strip_markers_and_blank_lines():
    assert bullet_lines("• Built X\n- Led Y\n\n* Cut Z\nPlain") == ["Built X", "Led Y", "Cut Z", "Plain"]
    assert bullet_lines(None) == []


def test_linkedin_handle():
    assert linkedin_handle("https://linkedin.com/in/janedoe") == "janedoe"


def test_group_skills_keeps_category_order():
    assert group_skills(resume_data()["skills"]) == [("Languages", ["Python", "SQL"]), ("Tools", ["Docker"])]


# ---------- registry ----------

def test_registry_caches_templates():
    registry = TemplateRegistry()
    first = registry.get_template("resume/skills")
    assert "resume/skills" in registry._cache
    assert registry.get_template("resume/skills") is first


def test_registry_missing_template():
    with pytest.raises(TemplateNotFound):
        TemplateRegistry().get_template("resume/nonexistent")


# ---------- sections ----------

def test_experience_section_renders_bullets():
    latex = render_section("experience", resume_data())
    assert latex.startswith("\\section{Professional Experience}\n")
    assert "\\cventry{Jan 2020 -- Present}{Senior Engineer}{AT\\&T}{Berlin}{}{" in latex
    assert "\\item Led migration of 12 services\n" in latex
    assert "\\item Cut costs by 30\\%\n" in latex


def test_skills_section_groups_by_category():
    latex = render_section("skills", resume_data())
    assert "\\cvitem{Languages}{Python, SQL}\n" in latex
    assert "\\cvitem{Tools}{Docker}\n" in latex


def test_education_section():
    latex = render_section("education", resume_data())
    assert "\\cventry{Sep 2012 -- Jun 2016}{BSc in Computer Science}{State University}{}{GPA: 3.8}{}" in latex


def test_empty_sections_render_nothing():
    data = resume_data(summary="", skills=[], projects=[])
    assert render_section("summary", data) == ""
    assert render_section("skills", data) == ""
    assert render_section("projects", data) == ""
    assert render_section("unknown", data) == ""


# ---------- documents ----------

def test_document_structure():
    latex = render_resume(resume_data(), "Data Engineer", "recruiter_readability")
    assert latex.startswith("\\documentclass[11pt,a4paper]{moderncv}")
    assert "\\name{Jane}{Doe}" in latex
    assert "\\title{Data Engineer}" in latex
    assert "\\social[linkedin]{janedoe}" in latex
    assert latex.endswith("\\end{document}\n")


def test_header_placeholders_without_personal_info():
    latex = render_resume(resume_data(personal_info=None), "Engineer", "max_ats")
    assert "\\name{First}{Last}" in latex
    assert "\\email{email@example.com}" in latex
    assert "\\social" not in latex


@pytest.mark.parametrize("strategy", sorted(SECTION_ORDER))
def test_sections_follow_strategy_order(strategy):
    titles = {
        "summary": "Professional Summary",
        "skills": "Skills",
        "experience": "Professional Experience",
        "education": "Education",
        "projects": "Projects",
        "certifications": "Certifications",
        "achievements": "Achievements",
    }
    latex = render_resume(resume_data(), "Engineer", strategy)
    expected = [titles[s] for s in SECTION_ORDER[strategy]]

    positions = section_positions(latex, expected)
    assert positions == sorted(positions)
    for section, title in titles.items():
        if section not in SECTION_ORDER[strategy]:
            assert f"\\section{{{title}}}" not in latex


def test_unknown_strategy_uses_default():
    assert render_resume(resume_data(), "Engineer", "bogus") == render_resume(
        resume_data(), "Engineer", "recruiter_readability"
    )


def test_ai_rewrite_failure_keeps_original_text():
    ai_client = MagicMock()
    ai_client.call.side_effect = [AIServiceError("down"), "  Led 12 migrations  "]
    data = ResumeGeneratorService(ai_client=ai_client)._optimize_with_ai(resume_data(), "Engineer", ["Python"])

    assert data["summary"] == "Engineer focused on data platforms."
    assert data["experiences"][0]["description"] == "Led 12 migrations"
    assert ai_client.call.call_count == 2
