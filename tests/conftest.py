"""
Shared fixtures.

Settings are read once at import time, so the environment is set up
before anything from resume_studio is imported: a throwaway SQLite
database, no AI key (rule-based paths) and no MongoDB (memory cache).
"""
import os
import tempfile
import uuid

_TEST_DIR = tempfile.mkdtemp(prefix="resume_studio_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["AI_API_KEY"] = ""
os.environ["MONGODB_URI"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from resume_studio.db.database import init_db  # noqa: E402
from resume_studio.main import app  # noqa: E402
from resume_studio.middleware.rate_limiter import rate_limiter  # noqa: E402

JOB_TEXT = (
    "We are hiring a Senior Python Developer. Python experience is required. "
    "Must know Django and PostgreSQL. Docker is a plus. "
    "Develop backend services for our platform and maintain APIs. "
    "Design scalable data pipelines with the analytics team."
)

PROFILE_PAYLOAD = {
    "personal_info": {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "location": "Berlin",
        "linkedin": "https://linkedin.com/in/janedoe",
    },
    "summary": "Backend engineer with 6 years of experience building Python APIs and data platforms.",
    "skills": [
        {"category_name": "Languages", "skills": ["Python", "SQL"]},
        {"category_name": "Tools", "skills": ["Docker"]},
    ],
    "experiences": [
        {
            "title": "Senior Engineer",
            "company": "Acme & Co",
            "location": "Berlin",
            "start_date": "2020-01-01",
            "is_current": True,
            "description": "Led migration of 12 services to Kubernetes\nReduced costs by 30% with caching",
        }
    ],
    "educations": [
        {
            "institution": "State University",
            "degree": "BSc",
            "field": "Computer Science",
            "start_date": "2012-09-01",
            "end_date": "2016-06-01",
        }
    ],
    "projects": [
        {"name": "resume-tools", "description": "CLI for building resumes", "technologies": "Python"}
    ],
}


@pytest.fixture(scope="session", autouse=True)
def database():
    init_db()
    yield


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def client():
    return TestClient(app)


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}@example.com"


def register(test_client: TestClient, email: str = None, password: str = "password123", name: str = "Test User"):
    return test_client.post(
        "/api/auth/register",
        json={"email": email or unique_email(), "password": password, "name": name},
    )


@pytest.fixture
def auth_client():
    """A client holding the session cookie of a freshly registered user."""
    test_client = TestClient(app)
    response = register(test_client)
    assert response.status_code == 201
    return test_client


@pytest.fixture
def other_client():
    """Second, unrelated user."""
    test_client = TestClient(app)
    assert register(test_client).status_code == 201
    return test_client


@pytest.fixture
def analyzed_job(auth_client):
    response = auth_client.post(
        "/api/job/analyze",
        json={"title": "Senior Python Developer", "company": "Acme", "description_text": JOB_TEXT},
    )
    assert response.status_code == 201
    return response.json()["data"]
