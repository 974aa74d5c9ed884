"""Village services (layanan) and citizen service submissions."""

from __future__ import annotations

import re
import secrets
import string
from datetime import date
from typing import Any

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from desa.extensions import db
from desa.models.models import Service, ServiceSubmission, SubmissionStatus
from desa.services.crud import CRUDService, DEFAULT_PAGE_LIMIT

NIK_PATTERN = re.compile(r'^[0-9]{16}$')
SUBMISSION_NUMBER_PATTERN = re.compile(r'^[0-9]{6}-[A-Z0-9]{6}$')
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

# English status names accepted as aliases for the stored values
STATUS_ALIASES = {
    'processing': SubmissionStatus.PROCESSING.value,
    'done': SubmissionStatus.DONE.value,
    'rejected': SubmissionStatus.REJECTED.value,
}


def generate_submission_number(today: date | None = None) -> str:
    """Return ``YYMMDD-XXXXXX`` with a random upper-case alphanumeric suffix.

    Not unique by construction; the unique constraint on
    ``nomor_pengajuan`` rejects the rare collision.
    """
    today = today or date.today()
    suffix = ''.join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{today:%y%m%d}-{suffix}"


def is_valid_nik(nik: Any) -> bool:
    return isinstance(nik, str) and bool(NIK_PATTERN.match(nik.strip()))


def normalize_status(status: Any) -> str | None:
    """Map a client status (stored value or English alias) to the stored value."""
    if not isinstance(status, str):
        return None
    status = status.strip().lower()
    status = STATUS_ALIASES.get(status, status)
    return status if status in {s.value for s in SubmissionStatus} else None


class ServiceCatalog(CRUDService):
    """Administrative services offered by the village office."""

    writable_fields = ('nama', 'deskripsi', 'persyaratan', 'template_dokumen')
    required_fields = ('nama',)
    label = 'Layanan'

    def __init__(self):
        super().__init__(Service)

    def base_query(self):
        return select(Service).order_by(Service.nama.asc(), Service.id.asc())


class SubmissionService(CRUDService):
    """Public service requests and their administrative processing."""

    writable_fields = ('layanan_id', 'nama', 'nik', 'file_pendukung')
    required_fields = ('layanan_id', 'nama', 'nik')
    int_fields = ('layanan_id',)
    label = 'Pengajuan'

    def __init__(self):
        super().__init__(ServiceSubmission)

    def _validate_extra(self, data: dict[str, Any], partial: bool) -> dict[str, str]:
        errors: dict[str, str] = {}
        nik = data.get('nik')
        if nik not in (None, '') and not is_valid_nik(str(nik)):
            errors['nik'] = "NIK must be 16 digits"
        return errors

    def list_submissions(
        self,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_LIMIT,
        status: str | None = None,
        layanan_id: Any = None,
    ) -> dict[str, Any]:
        filters: dict[str, Any] = {}
        if status:
            filters['status'] = SubmissionStatus(status)
        if layanan_id not in (None, ''):
            filters['layanan_id'] = int(layanan_id)
        return self.list_page(page, limit, filters=filters)

    def get_by_number(self, nomor_pengajuan: str) -> ServiceSubmission | None:
        return db.session.execute(
            select(ServiceSubmission).where(
                ServiceSubmission.nomor_pengajuan == nomor_pengajuan.strip().upper()
            )
        ).scalar_one_or_none()

    def clean(self, data: dict[str, Any]) -> dict[str, Any]:
        cleaned = super().clean(data)
        if cleaned.get('nik') is not None:
            cleaned['nik'] = str(cleaned['nik']).strip()
        return cleaned

    def _prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        values['nomor_pengajuan'] = generate_submission_number()
        values['status'] = SubmissionStatus.PENDING
        values['catatan'] = None
        return values

    def submit(self, data: dict[str, Any]) -> tuple[ServiceSubmission | None, str | None]:
        """Create a submission in ``pending`` for an existing service."""
        errors = self.validate(data)
        if errors:
            return None, next(iter(errors.values()))

        if db.session.get(Service, int(data['layanan_id'])) is None:
            return None, service_catalog.not_found_message

        submission, error = self.create(data)
        if submission:
            current_app.logger.info(
                f"Submission {submission.nomor_pengajuan} created for layanan {submission.layanan_id}"
            )
        return submission, error

    def update_status(
        self,
        submission_id: int,
        status: Any,
        catatan: str | None = None,
    ) -> tuple[ServiceSubmission | None, str | None]:
        """
        Set a submission's status and, when given, its notes.

        Transitions are unrestricted; any status may follow any other.
        """
        submission = self.get_by_id(submission_id)
        if not submission:
            return None, self.not_found_message

        value = normalize_status(status)
        if value is None:
            return None, "status must be one of: " + ", ".join(s.value for s in SubmissionStatus)

        try:
            submission.status = SubmissionStatus(value)
            if catatan is not None:
                submission.catatan = catatan.strip() or None
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            return None, self._handle_integrity_error(e)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update pengajuan_layanan status: {e}")
            return None, "Failed to update pengajuan_layanan"

        current_app.logger.info(
            f"Submission {submission.nomor_pengajuan} moved to {submission.status.value}"
        )
        return submission, None


service_catalog = ServiceCatalog()
submission_service = SubmissionService()


__all__ = [
    'generate_submission_number',
    'is_valid_nik',
    'normalize_status',
    'NIK_PATTERN',
    'SUBMISSION_NUMBER_PATTERN',
    'ServiceCatalog',
    'SubmissionService',
    'service_catalog',
    'submission_service',
]
