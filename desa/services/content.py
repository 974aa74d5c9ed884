"""Content services: news, gallery, events, organization chart and documents."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from desa.extensions import db
from desa.models.models import (
    Document, Event, Gallery, News, NewsStatus, OrganizationMember,
)
from desa.services.crud import CRUDService, DEFAULT_PAGE_LIMIT, paginate

STATUS_ALL = 'all'


def slugify(text: str) -> str:
    """Convert text to URL-friendly slug."""
    text = (text or '').lower()
    text = re.sub(r'[^a-z0-9 -]', '', text)
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'-+', '-', text)
    return text.strip('-')


class NewsService(CRUDService):
    """News articles. The slug is always derived from the title."""

    writable_fields = ('judul', 'konten', 'gambar', 'tanggal', 'penulis', 'status')
    required_fields = ('judul', 'konten', 'penulis')
    date_fields = ('tanggal',)
    label = 'News'

    def __init__(self):
        super().__init__(News)

    def base_query(self):
        return select(News).order_by(News.tanggal.desc(), News.id.desc())

    def list_news(
        self,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_LIMIT,
        status: str | None = NewsStatus.PUBLISHED.value,
    ) -> dict[str, Any]:
        """Paginated news, optionally restricted to one status (``all`` disables the filter)."""
        stmt = self.base_query()
        if status and status != STATUS_ALL:
            stmt = stmt.where(News.status == NewsStatus(status))
        return paginate(stmt, page, limit)

    def get_by_slug(self, slug: str) -> News | None:
        return db.session.execute(
            select(News).where(News.slug == slug)
        ).scalar_one_or_none()

    def _validate_extra(self, data: dict[str, Any], partial: bool) -> dict[str, str]:
        errors: dict[str, str] = {}
        status = data.get('status')
        if status not in (None, '') and status not in {s.value for s in NewsStatus}:
            errors['status'] = "status must be 'published' or 'draft'"
        judul = data.get('judul')
        if isinstance(judul, str) and judul.strip() and not slugify(judul):
            errors['judul'] = "judul must contain at least one letter or digit"
        return errors

    def clean(self, data: dict[str, Any]) -> dict[str, Any]:
        cleaned = super().clean(data)
        if cleaned.get('status') is not None:
            cleaned['status'] = NewsStatus(cleaned['status'])
        elif 'status' in cleaned:
            del cleaned['status']
        if 'tanggal' in cleaned and cleaned['tanggal'] is None:
            del cleaned['tanggal']
        return cleaned

    def _prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        values['slug'] = slugify(values['judul'])
        return values

    def _prepare_update(self, instance: News, values: dict[str, Any]) -> dict[str, Any]:
        if values.get('judul'):
            values['slug'] = slugify(values['judul'])
        return values


class GalleryService(CRUDService):
    writable_fields = ('judul', 'deskripsi', 'gambar', 'kategori', 'tanggal')
    required_fields = ('judul', 'gambar')
    date_fields = ('tanggal',)
    label = 'Gallery item'

    def __init__(self):
        super().__init__(Gallery)

    def base_query(self):
        return select(Gallery).order_by(Gallery.tanggal.desc(), Gallery.id.desc())

    def clean(self, data: dict[str, Any]) -> dict[str, Any]:
        cleaned = super().clean(data)
        if 'tanggal' in cleaned and cleaned['tanggal'] is None:
            del cleaned['tanggal']
        return cleaned

    def categories(self) -> list[str]:
        """Distinct non-empty categories, alphabetically."""
        rows = db.session.execute(
            select(Gallery.kategori)
            .where(Gallery.kategori.is_not(None))
            .distinct()
            .order_by(Gallery.kategori)
        ).scalars().all()
        return [row for row in rows if row]


class EventService(CRUDService):
    writable_fields = ('judul', 'deskripsi', 'tanggal', 'lokasi', 'gambar')
    required_fields = ('judul', 'tanggal')
    datetime_fields = ('tanggal',)
    label = 'Event'

    def __init__(self):
        super().__init__(Event)

    def base_query(self):
        return select(Event).order_by(Event.tanggal.asc(), Event.id.asc())

    def list_events(self, when: str | None = None, now: datetime | None = None) -> list[Event]:
        """
        List events, optionally only upcoming or past ones.

        Upcoming/past is derived from ``now`` at read time; nothing is stored.
        Upcoming events come soonest first, past events most recent first.
        """
        now = now or datetime.now()
        stmt = self.base_query()
        if when == 'upcoming':
            stmt = stmt.where(Event.tanggal >= now)
        elif when == 'past':
            stmt = select(Event).where(Event.tanggal < now).order_by(Event.tanggal.desc(), Event.id.desc())
        return list(db.session.execute(stmt).scalars().all())


class OrganizationService(CRUDService):
    """Organization chart. Display order is the ``urutan`` column."""

    writable_fields = ('nama', 'jabatan', 'foto', 'urutan')
    required_fields = ('nama', 'jabatan')
    int_fields = ('urutan',)
    label = 'Organization member'

    def __init__(self):
        super().__init__(OrganizationMember)

    def base_query(self):
        return select(OrganizationMember).order_by(
            OrganizationMember.urutan.asc(), OrganizationMember.id.asc()
        )

    def _prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        if values.get('urutan') is None:
            highest = db.session.execute(
                select(func.max(OrganizationMember.urutan))
            ).scalar()
            values['urutan'] = (highest or 0) + 1
        return values

    def _prepare_update(self, instance: OrganizationMember, values: dict[str, Any]) -> dict[str, Any]:
        if 'urutan' in values and values['urutan'] is None:
            del values['urutan']
        return values

    def swap(self, first_id: int, second_id: int) -> tuple[list[OrganizationMember] | None, str | None]:
        """
        Exchange the display order of two members.

        Members sharing an ``urutan`` value are renumbered 1..n first so the
        swap is visible.

        Returns:
            (ordered_members, error_message)
        """
        first = self.get_by_id(first_id)
        second = self.get_by_id(second_id)
        if not first or not second:
            return None, self.not_found_message
        if first.id == second.id:
            return self.list_all(), None

        try:
            if first.urutan == second.urutan:
                for position, item in enumerate(self.list_all(), start=1):
                    item.urutan = position
            first.urutan, second.urutan = second.urutan, first.urutan
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to reorder organisasi: {e}")
            return None, "Failed to reorder organisasi"
        return self.list_all(), None

    def move(self, member_id: int, direction: str) -> tuple[list[OrganizationMember] | None, str | None]:
        """
        Swap a member with its neighbour in display order.

        Moving the first member up or the last member down leaves the order
        unchanged.
        """
        if direction not in ('up', 'down'):
            return None, "direction must be 'up' or 'down'"

        members = self.list_all()
        index = next((i for i, m in enumerate(members) if m.id == int(member_id)), None)
        if index is None:
            return None, self.not_found_message

        neighbour_index = index - 1 if direction == 'up' else index + 1
        if neighbour_index < 0 or neighbour_index >= len(members):
            return members, None

        return self.swap(members[index].id, members[neighbour_index].id)


class DocumentService(CRUDService):
    writable_fields = ('judul', 'deskripsi', 'file_path', 'kategori', 'ukuran')
    required_fields = ('judul', 'file_path')
    int_fields = ('ukuran',)
    label = 'Document'

    def __init__(self):
        super().__init__(Document)

    def _validate_extra(self, data: dict[str, Any], partial: bool) -> dict[str, str]:
        errors: dict[str, str] = {}
        file_path = data.get('file_path')
        if isinstance(file_path, str) and '..' in file_path.replace('\\', '/').split('/'):
            errors['file_path'] = "file_path cannot contain '..' segments"
        ukuran = data.get('ukuran')
        try:
            if ukuran not in (None, '') and int(ukuran) < 0:
                errors['ukuran'] = "ukuran cannot be negative"
        except (TypeError, ValueError):
            # reported by the int_fields check
            pass
        return errors


news_service = NewsService()
gallery_service = GalleryService()
event_service = EventService()
organization_service = OrganizationService()
document_service = DocumentService()


__all__ = [
    'slugify',
    'STATUS_ALL',
    'NewsService',
    'GalleryService',
    'EventService',
    'OrganizationService',
    'DocumentService',
    'news_service',
    'gallery_service',
    'event_service',
    'organization_service',
    'document_service',
]
