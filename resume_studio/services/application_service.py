"""
Application Tracking Service

Tracks where a user applied and how far each application got.

Statuses: applied, interview, offer, rejected, withdrawn (any transition allowed).

Moving into interview / offer / rejected stamps the matching date.
"""

from datetime import date
from typing import List, Optional, Tuple

from loguru import logger

from resume_studio.core.errors import NotFoundError
from resume_studio.db.database import execute_raw_sql, get_db_session
from resume_studio.models import Application, JobDescription, Resume
from resume_studio.schemas.schemas import ApplicationCreate, ApplicationStatus, ApplicationUpdate

STATUS_DATE_FIELDS = {
    "interview": "interview_date",
    "offer": "offer_date",
    "rejected": "rejection_date",
}

NON_NULLABLE_FIELDS = {"job_title", "company", "applied_date"}

ACTION_TEXT = {
    "applied": "Applied to position",
    "interview": "Moved to interview stage",
    "offer": "Received offer",
    "rejected": "Application rejected",
    "withdrawn": "Withdrew application",
}


def action_text(status: str) -> str:
    return ACTION_TEXT.get(status, "Updated application")


def check_linked_records(db, profile_id: str, values: dict) -> None:
    """Linked resume and job description must belong to the same profile."""
    resume_id = values.get("resume_id")
    if resume_id and not db.query(Resume).filter(
            Resume.id == resume_id, Resume.profile_id == profile_id).first():
        raise NotFoundError("Resume")

    job_id = values.get("job_description_id")
    if job_id and not db.query(JobDescription).filter(
            JobDescription.id == job_id, JobDescription.profile_id == profile_id).first():
        raise NotFoundError("Job description")


class ApplicationService:

    def list_applications(self, profile_id: str, status: Optional[str] = None,
                          page: int = 1, limit: int = 20) -> Tuple[List[Application], int]:
        """Caller's applications, most recently updated first. Returns (items, total)."""
        with get_db_session() as db:
            query = db.query(Application).filter(Application.profile_id == profile_id)
            if status:
                query = query.filter(Application.status == status)
            total = query.count()
            items = (
                query.order_by(Application.updated_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        return items, total

    def get_stats(self, profile_id: str) -> dict:
        by_status = {status.value: 0 for status in ApplicationStatus}
        rows = execute_raw_sql(
            "SELECT status, COUNT(*) AS count FROM applications WHERE profile_id = :pid GROUP BY status",
            {"pid": profile_id},
        )
        for row in rows:
            by_status[row["status"]] = row["count"]

        recent, _ = self.list_applications(profile_id, limit=5)
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "recent_activity": [
                {"date": app.updated_at, "action": action_text(app.status), "application": app}
                for app in recent
            ],
        }

    def create_application(self, profile_id: str, data: ApplicationCreate) -> Application:
        values = data.model_dump()
        values["status"] = data.status.value
        values["applied_date"] = data.applied_date or date.today()

        date_field = STATUS_DATE_FIELDS.get(values["status"])
        if date_field:
            values[date_field] = date.today()

        with get_db_session() as db:
            check_linked_records(db, profile_id, values)
            app = Application(profile_id=profile_id, **values)
            db.add(app)

        logger.info(f"Created application {app.id} ({app.job_title} at {app.company})")
        return app

    def update_application(self, app_id: str, profile_id: str, data: ApplicationUpdate) -> Application:
        changes = data.model_dump(exclude_unset=True)

        with get_db_session() as db:
            app = db.query(Application).filter(Application.id == app_id).first()
            if not app or app.profile_id != profile_id:
                raise NotFoundError("Application")

            check_linked_records(db, profile_id, changes)

            new_status = changes.pop("status", None)
            for key, value in changes.items():
                if value is None and key in NON_NULLABLE_FIELDS:
                    continue
                setattr(app, key, value)

            if new_status is not None:
                new_status = ApplicationStatus(new_status).value
                if new_status != app.status:
                    date_field = STATUS_DATE_FIELDS.get(new_status)
                    if date_field:
                        setattr(app, date_field, date.today())
                    logger.info(f"Application {app_id}: {app.status} -> {new_status}")
                app.status = new_status

            db.flush()
            db.refresh(app)
        return app

    def delete_application(self, app_id: str, profile_id: str) -> None:
        with get_db_session() as db:
            app = db.query(Application).filter(Application.id == app_id).first()
            if not app or app.profile_id != profile_id:
                raise NotFoundError("Application")
            db.delete(app)


# Singleton instance
_application_service: Optional[ApplicationService] = None


def get_application_service() -> ApplicationService:
    global _application_service
    if _application_service is None:
        _application_service = ApplicationService()
    return _application_service
