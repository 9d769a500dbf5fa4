"""Resume generation, scoring and download through the API."""
import pytest

from conftest import PROFILE_PAYLOAD
from resume_studio.api.routes.resume_routes import download_filename


@pytest.fixture
def resume(auth_client, analyzed_job):
    auth_client.post("/api/profile/save", json=PROFILE_PAYLOAD)
    response = auth_client.post(
        "/api/resume/generate",
        json={"job_description_id": analyzed_job["id"], "strategy": "max_ats"},
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_download_filename():
    assert download_filename("Senior Dev at Acme & Co.") == "Senior_Dev_at_Acme___Co_.tex"


def test_generate_resume(resume, analyzed_job):
    assert resume["title"] == "Senior Python Developer at Acme"
    assert resume["strategy"] == "max_ats"
    assert resume["version"] == 1
    assert resume["job_description"]["id"] == analyzed_job["id"]
    assert resume["latest_score"] is None

    latex = resume["latex_content"]
    assert latex.index("\\section{Skills}") < latex.index("\\section{Professional Experience}")
    assert "\\section{Professional Summary}" not in latex
    assert "Acme \\& Co" in latex
    assert latex.endswith("\\end{document}\n")


def test_generate_defaults_to_recruiter_readability(auth_client, analyzed_job):
    auth_client.post("/api/profile/save", json=PROFILE_PAYLOAD)
    response = auth_client.post("/api/resume/generate", json={"job_description_id": analyzed_job["id"]})
    data = response.json()["data"]
    assert data["strategy"] == "recruiter_readability"
    assert data["latex_content"].index("\\section{Professional Summary}") < data["latex_content"].index(
        "\\section{Professional Experience}"
    )


def test_generate_rejects_unknown_strategy(auth_client, analyzed_job):
    response = auth_client.post(
        "/api/resume/generate",
        json={"job_description_id": analyzed_job["id"], "strategy": "shotgun"},
    )
    assert response.status_code == 400
    assert "strategy" in response.json()["error"]["details"]


def test_generate_for_another_users_job_is_404(other_client, analyzed_job):
    response = other_client.post("/api/resume/generate", json={"job_description_id": analyzed_job["id"]})
    assert response.status_code == 404


def test_score_resume_and_history(auth_client, resume):
    response = auth_client.post("/api/resume/score", json={"resume_id": resume["id"]})
    assert response.status_code == 201
    score = response.json()["data"]
    assert score["resume_id"] == resume["id"]
    assert 0 <= score["ats_score"] <= 100
    assert 0 <= score["recruiter_score"] <= 100
    assert set(score["breakdown"]) == {"ats", "recruiter"}
    assert score["recommendations"]

    fetched = auth_client.get(f"/api/resume/{resume['id']}").json()["data"]
    assert fetched["latest_score"]["id"] == score["id"]

    history = auth_client.get("/api/resume/history").json()["data"]
    assert [r["id"] for r in history] == [resume["id"]]
    assert history[0]["latest_score"]["id"] == score["id"]


def test_latest_score_is_newest(auth_client, resume):
    auth_client.post("/api/resume/score", json={"resume_id": resume["id"]})
    second = auth_client.post("/api/resume/score", json={"resume_id": resume["id"]}).json()["data"]
    fetched = auth_client.get(f"/api/resume/{resume['id']}").json()["data"]
    assert fetched["latest_score"]["id"] == second["id"]


def test_download_latex(auth_client, resume):
    response = auth_client.get(f"/api/resume/{resume['id']}/download")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-latex")
    assert response.headers["content-disposition"] == (
        'attachment; filename="Senior_Python_Developer_at_Acme.tex"'
    )
    assert response.text == resume["latex_content"]


def test_resumes_are_private(other_client, resume):
    assert other_client.get(f"/api/resume/{resume['id']}").status_code == 404
    assert other_client.post("/api/resume/score", json={"resume_id": resume["id"]}).status_code == 404
    assert other_client.delete(f"/api/resume/{resume['id']}").status_code == 404
    assert other_client.get("/api/resume/history").json()["data"] == []


def test_delete_resume(auth_client, resume):
    auth_client.post("/api/resume/score", json={"resume_id": resume["id"]})

    response = auth_client.delete(f"/api/resume/{resume['id']}")
    assert response.status_code == 200
    assert auth_client.get(f"/api/resume/{resume['id']}").status_code == 404
    assert auth_client.get("/api/resume/history").json()["data"] == []
