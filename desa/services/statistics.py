"""Dashboard counters."""

from __future__ import annotations

from sqlalchemy import func, select

from desa.extensions import db
from desa.models.models import (
    Document, Event, Gallery, News, ServiceSubmission, SubmissionStatus,
)

COUNTED_TABLES = {
    'news': News,
    'gallery': Gallery,
    'events': Event,
    'submissions': ServiceSubmission,
    'documents': Document,
}


def _count(model) -> int:
    return db.session.execute(select(func.count()).select_from(model)).scalar_one()


def get_statistics() -> dict[str, int]:
    """Row counts per content table, one COUNT(*) each."""
    return {key: _count(model) for key, model in COUNTED_TABLES.items()}


def get_submission_breakdown() -> dict[str, int]:
    """Submission counts keyed by every status value, zero-filled."""
    rows = db.session.execute(
        select(ServiceSubmission.status, func.count()).group_by(ServiceSubmission.status)
    ).all()
    breakdown = {status.value: 0 for status in SubmissionStatus}
    for status, total in rows:
        key = status.value if isinstance(status, SubmissionStatus) else str(status)
        breakdown[key] = total
    return breakdown


__all__ = ['get_statistics', 'get_submission_breakdown', 'COUNTED_TABLES']
