"""Profile saving and completeness scoring."""
import copy
from types import SimpleNamespace

from conftest import PROFILE_PAYLOAD
from resume_studio.services.profile_service import compute_completeness


def make_profile(**overrides):
    fields = dict(
        personal_info=None, summary=None, skills=[], experiences=[], educations=[],
        projects=[], certifications=[], achievements=[],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


FULL_INFO = SimpleNamespace(first_name="Jane", last_name="Doe", email="jane@example.com")


def test_empty_profile_is_zero_percent():
    result = compute_completeness(make_profile())
    assert result["percent"] == 0
    assert result["missing"] == [
        "Personal Info", "Professional Summary", "Skills", "Work Experience", "Education"
    ]


def test_required_sections_only_is_complete():
    profile = make_profile(
        personal_info=FULL_INFO, summary="x" * 60, skills=[1], experiences=[1], educations=[1]
    )
    assert compute_completeness(profile) == {"percent": 100, "missing": []}


def test_optional_sections_count_only_when_present():
    # 20 + 20 + 25 + 5 completed out of 90 + 5
    profile = make_profile(
        personal_info=FULL_INFO, summary="too short", skills=[1], experiences=[1], projects=[1]
    )
    result = compute_completeness(profile)
    assert result["percent"] == 74
    assert result["missing"] == ["Professional Summary", "Education"]


def test_personal_info_needs_name_and_email():
    info = SimpleNamespace(first_name="Jane", last_name="", email="jane@example.com")
    result = compute_completeness(make_profile(personal_info=info))
    assert "Personal Info" in result["missing"]


def test_new_user_has_empty_profile(auth_client):
    response = auth_client.get("/api/profile")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["personal_info"] is None
    assert data["skills"] == []
    assert data["completeness_percent"] == 0


def test_save_profile_stores_all_sections(auth_client):
    response = auth_client.post("/api/profile/save", json=PROFILE_PAYLOAD)
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["personal_info"]["first_name"] == "Jane"
    assert {s["name"] for s in data["skills"]} == {"Python", "SQL", "Docker"}
    assert {s["category"]["name"] for s in data["skills"]} == {"Languages", "Tools"}
    assert data["experiences"][0]["company"] == "Acme & Co"
    assert data["experiences"][0]["order"] == 0
    assert data["educations"][0]["field"] == "Computer Science"
    assert data["completeness_percent"] == 100

    completeness = auth_client.get("/api/profile/completeness").json()["data"]
    assert completeness == {"percent": 100, "missing": []}


def test_save_replaces_only_sections_present(auth_client):
    auth_client.post("/api/profile/save", json=PROFILE_PAYLOAD)

    response = auth_client.post(
        "/api/profile/save",
        json={"skills": [{"category_name": "Languages", "skills": ["Go"]}]},
    )
    data = response.json()["data"]
    assert [s["name"] for s in data["skills"]] == ["Go"]
    assert len(data["experiences"]) == 1
    assert data["summary"] == PROFILE_PAYLOAD["summary"]


def test_save_profile_validates_dates(auth_client):
    payload = copy.deepcopy(PROFILE_PAYLOAD)
    payload["experiences"][0]["start_date"] = "not-a-date"
    response = auth_client.post("/api/profile/save", json=payload)
    assert response.status_code == 400
    assert "experiences.0.start_date" in response.json()["error"]["details"]


def test_profile_requires_authentication(client):
    assert client.get("/api/profile").status_code == 401
    assert client.post("/api/profile/save", json={}).status_code == 401
