"""Rule-based job analysis and the /api/job endpoints."""
from unittest.mock import MagicMock, patch

import pytest

from conftest import JOB_TEXT
from resume_studio.core.errors import AIServiceError
from resume_studio.services.job_analysis_service import (
    JobAnalysisService,
    detect_experience_level,
    extract_keywords,
    extract_responsibilities,
    get_job_analysis_service,
    normalize_ai_analysis,
    rule_based_analysis,
)
from resume_studio.utils.file_upload import MAX_FILE_SIZE_BYTES

TITLE = "Python Developer"
TEXT = (
    "We are hiring a Python developer. Python experience is required. "
    "Must know Django and PostgreSQL. Docker is a plus. "
    "Develop backend services for our platform and maintain APIs. "
    "Design scalable data pipelines with the analytics team."
)


def test_keywords_ranked_by_count():
    keywords = extract_keywords(TITLE, TEXT)
    assert keywords[0] == {"keyword": "Python", "weight": 3, "category": "general"}
    weights = [kw["weight"] for kw in keywords]
    assert weights == sorted(weights, reverse=True)
    assert len(keywords) <= 20


def test_keyword_ties_keep_first_seen_order():
    keywords = extract_keywords("Rust Engineer", "Kafka Rust zebra apple kafka")
    assert [kw["keyword"] for kw in keywords] == ["Rust", "Kafka", "Engineer", "Zebra", "Apple"]
    assert [kw["weight"] for kw in keywords] == [2, 2, 1, 1, 1]


def test_keywords_skip_stopwords_and_short_words():
    words = {kw["keyword"].lower() for kw in extract_keywords(TITLE, TEXT)}
    assert "the" not in words
    assert "and" not in words
    assert "is" not in words


def test_required_keywords_detected_from_context():
    analysis = rule_based_analysis(TITLE, TEXT)
    assert "Python" in analysis["required_skills"]
    python = next(kw for kw in analysis["ats_keywords"] if kw["keyword"] == "Python")
    assert python["category"] == "required"


def test_preferred_keywords_detected_from_context():
    text = "Nice to have: experience with Terraform and cloud tooling in general environments today."
    analysis = rule_based_analysis("Engineer", text)
    assert "Terraform" in analysis["preferred_skills"]


def test_responsibilities_start_with_action_verbs():
    assert extract_responsibilities(TEXT) == [
        "Develop backend services for our platform and maintain APIs",
        "Design scalable data pipelines with the analytics team",
    ]


def test_experience_level_keywords():
    assert detect_experience_level("senior backend engineer") == "Senior"
    assert detect_experience_level("graduate programme") == "Junior"
    assert detect_experience_level("intermediate developer") == "Mid-Level"


def test_experience_level_from_years():
    assert detect_experience_level("requires 8+ years of python") == "Senior"
    assert detect_experience_level("requires 3 years of python") == "Mid-Level"
    assert detect_experience_level("requires 2 years of python") == "Junior"
    assert detect_experience_level("python developer") == "Mid-Level"


def test_normalize_ai_analysis_maps_and_cleans():
    result = normalize_ai_analysis({
        "requiredSkills": ["Python", "SQL"],
        "preferredSkills": ["Go"],
        "responsibilities": ["Build APIs"],
        "atsKeywords": [
            {"keyword": "Python", "weight": 10, "category": "required"},
            {"keyword": "Teamwork", "weight": True, "category": "soft"},
            "not-a-dict",
        ],
        "experienceLevel": "Senior",
    })
    assert result["required_skills"] == ["Python", "SQL"]
    assert result["ats_keywords"] == [
        {"keyword": "Python", "weight": 10, "category": "required"},
        {"keyword": "Teamwork", "weight": 5, "category": "general"},
    ]
    assert result["experience_level"] == "Senior"


@pytest.mark.parametrize("level", [5, "Mid-Level to Senior (5+ yrs)", ["Senior"], None])
def test_normalize_ai_analysis_drops_unknown_experience_level(level):
    assert normalize_ai_analysis({"experienceLevel": level})["experience_level"] is None


def test_normalize_ai_analysis_replaces_non_positive_weights():
    result = normalize_ai_analysis({"atsKeywords": [
        {"keyword": "Python", "weight": 0},
        {"keyword": "Go", "weight": -8},
        {"keyword": "SQL", "weight": 2.5},
    ]})
    assert [kw["weight"] for kw in result["ats_keywords"]] == [5, 5, 2.5]


def test_analyze_endpoint_with_odd_ai_level(auth_client):
    ai_client = MagicMock()
    ai_client.call_json.return_value = {"atsKeywords": [], "experienceLevel": 5}
    with patch.object(get_job_analysis_service(), "ai_client", ai_client):
        response = auth_client.post(
            "/api/job/analyze",
            json={"title": "Backend Developer", "company": "Acme", "description_text": JOB_TEXT},
        )
    assert response.status_code == 201
    assert response.json()["data"]["analysis"]["experience_level"] is None


def test_analyze_text_uses_ai_when_available():
    ai_client = MagicMock()
    ai_client.call_json.return_value = {"requiredSkills": ["Rust"], "atsKeywords": []}
    analysis, source = JobAnalysisService(ai_client=ai_client).analyze_text(TITLE, TEXT)
    assert source == "ai"
    assert analysis["required_skills"] == ["Rust"]


def test_analyze_text_falls_back_to_rules():
    ai_client = MagicMock()
    ai_client.call_json.side_effect = AIServiceError("provider down")
    analysis, source = JobAnalysisService(ai_client=ai_client).analyze_text(TITLE, TEXT)
    assert source == "rules"
    assert analysis == rule_based_analysis(TITLE, TEXT)


def test_analyze_endpoint_stores_analysis(auth_client, analyzed_job):
    assert analyzed_job["title"] == "Senior Python Developer"
    assert analyzed_job["company"] == "Acme"
    analysis = analyzed_job["analysis"]
    assert analysis["experience_level"] == "Senior"
    assert analysis["ats_keywords"][0]["keyword"] == "Python"

    fetched = auth_client.get(f"/api/job/{analyzed_job['id']}").json()["data"]
    assert fetched["analysis"]["id"] == analysis["id"]


def test_analyze_rejects_short_description(auth_client):
    response = auth_client.post(
        "/api/job/analyze", json={"title": "Dev", "company": "Acme", "description_text": "too short"}
    )
    assert response.status_code == 400
    assert "description_text" in response.json()["error"]["details"]


def test_analyze_upload_txt(auth_client):
    response = auth_client.post(
        "/api/job/analyze/upload",
        data={"title": "Python Developer", "company": "Acme"},
        files={"file": ("job.txt", JOB_TEXT.encode("utf-8"), "text/plain")},
    )
    assert response.status_code == 201
    assert response.json()["data"]["description_text"] == JOB_TEXT


def test_analyze_upload_rejects_unknown_extension(auth_client):
    response = auth_client.post(
        "/api/job/analyze/upload",
        data={"title": "Python Developer", "company": "Acme"},
        files={"file": ("job.exe", b"binary", "application/octet-stream")},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_analyze_upload_rejects_oversize_file(auth_client):
    response = auth_client.post(
        "/api/job/analyze/upload",
        data={"title": "Python Developer", "company": "Acme"},
        files={"file": ("job.txt", b"a" * (MAX_FILE_SIZE_BYTES + 1), "text/plain")},
    )
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "FILE_TOO_LARGE"


def test_analyze_upload_rejects_overlong_text(auth_client):
    text = " ".join([JOB_TEXT] * 50)
    response = auth_client.post(
        "/api/job/analyze/upload",
        data={"title": "Python Developer", "company": "Acme"},
        files={"file": ("job.txt", text.encode("utf-8"), "text/plain")},
    )
    assert response.status_code == 400
    assert "too long" in response.json()["error"]["message"]
    assert auth_client.get("/api/job").json()["data"] == []


def test_job_history_is_paginated(auth_client, analyzed_job):
    auth_client.post(
        "/api/job/analyze",
        json={"title": "Data Engineer", "company": "Globex", "description_text": JOB_TEXT},
    )
    response = auth_client.get("/api/job", params={"page": 1, "limit": 1})
    body = response.json()
    assert len(body["data"]) == 1
    assert body["data"][0]["title"] == "Data Engineer"
    assert body["meta"]["pagination"] == {
        "page": 1, "limit": 1, "total": 2, "total_pages": 2, "has_next": True, "has_prev": False,
    }


def test_jobs_are_private(other_client, analyzed_job):
    response = other_client.get(f"/api/job/{analyzed_job['id']}")
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Job description not found"
