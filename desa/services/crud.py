"""Generic CRUD service with pagination and validation."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Type, TypeVar

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from desa.extensions import db

Model = TypeVar("Model", bound=db.Model)

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

DUPLICATE_MESSAGE = "A record with these values already exists"
MISSING_REFERENCE_MESSAGE = "Referenced record does not exist"


def parse_date(value: Any) -> date:
    """Accept a date, a datetime or an ISO ``YYYY-MM-DD`` string (optionally with a time)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        # a full timestamp is fine, trailing junk after the day is not
        if text[10] not in ('T', ' '):
            raise ValueError(f"Invalid isoformat string: {text!r}")
        return parse_datetime(text).date()
    return date.fromisoformat(text)


def parse_datetime(value: Any) -> datetime:
    """Accept a datetime or an ISO string (``T`` or space separated)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip().replace('Z', '')
    return datetime.fromisoformat(text.replace(' ', 'T', 1))


def normalize_paging(page: Any, limit: Any) -> tuple[int, int]:
    """Coerce page/limit query values; page is 1-based."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_LIMIT
    return max(page, 1), min(max(limit, 1), MAX_PAGE_LIMIT)


def paginate(stmt, page: Any = 1, limit: Any = DEFAULT_PAGE_LIMIT) -> dict[str, Any]:
    """
    Run a select statement one page at a time.

    Args:
        stmt: SQLAlchemy ``select()`` of a single entity
        page: 1-based page number; pages past the end yield no items
        limit: Page size

    Returns:
        Dict with items, total, page, limit and total_pages
    """
    page, limit = normalize_paging(page, limit)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = db.session.execute(count_stmt).scalar_one()

    items = db.session.execute(
        stmt.offset((page - 1) * limit).limit(limit)
    ).scalars().all()

    return {
        'items': list(items),
        'total': total,
        'page': page,
        'limit': limit,
        'total_pages': math.ceil(total / limit),
    }


class CRUDService:
    """Base CRUD service with common operations."""

    #: Columns a client may set on create/update
    writable_fields: tuple[str, ...] = ()
    #: Columns that must be present and non-empty on create
    required_fields: tuple[str, ...] = ()
    #: Columns parsed with parse_date / parse_datetime
    date_fields: tuple[str, ...] = ()
    datetime_fields: tuple[str, ...] = ()
    int_fields: tuple[str, ...] = ()
    label: str | None = None

    def __init__(self, model: Type[Model]):
        """
        Initialize CRUD service.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model
        self.model_name = model.__tablename__
        self.label = self.label or self.model_name.capitalize()

    # ----- reads -----

    def get_by_id(self, object_id: int) -> Model | None:
        """Get record by primary key."""
        try:
            return db.session.get(self.model, int(object_id))
        except (TypeError, ValueError):
            return None

    def base_query(self):
        """Default select statement used for listing."""
        return select(self.model).order_by(self.model.id.desc())

    def list_all(self, filters: dict[str, Any] | None = None, order_by: Any = None) -> list[Model]:
        """
        List all records.

        Args:
            filters: Column equality filters; None values are ignored
            order_by: SQLAlchemy order_by clause replacing the default ordering

        Returns:
            List of model instances
        """
        stmt = self._filtered(filters, order_by)
        return list(db.session.execute(stmt).scalars().all())

    def list_page(
        self,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_LIMIT,
        filters: dict[str, Any] | None = None,
        order_by: Any = None,
    ) -> dict[str, Any]:
        return paginate(self._filtered(filters, order_by), page, limit)

    def count(self) -> int:
        return db.session.execute(
            select(func.count()).select_from(self.model)
        ).scalar_one()

    def _filtered(self, filters: dict[str, Any] | None, order_by: Any):
        stmt = self.base_query()
        if order_by is not None:
            stmt = stmt.order_by(None).order_by(order_by)
        for key, value in (filters or {}).items():
            if value is None or value == '':
                continue
            stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    # ----- validation -----

    def validate(self, data: dict[str, Any], partial: bool = False) -> dict[str, str]:
        """
        Validate client data.

        Args:
            data: Raw payload
            partial: True for updates, where required fields may be omitted

        Returns:
            Mapping of field name to error message (empty when valid)
        """
        errors: dict[str, str] = {}
        for field in self.required_fields:
            if partial and field not in data:
                continue
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field] = f"{field} is required"

        for field in self.date_fields:
            if data.get(field) not in (None, '') and field not in errors:
                try:
                    parse_date(data[field])
                except ValueError:
                    errors[field] = f"{field} must be a date (YYYY-MM-DD)"

        for field in self.datetime_fields:
            if data.get(field) not in (None, '') and field not in errors:
                try:
                    parse_datetime(data[field])
                except ValueError:
                    errors[field] = f"{field} must be a date and time (YYYY-MM-DDTHH:MM)"

        for field in self.int_fields:
            if data.get(field) not in (None, '') and field not in errors:
                try:
                    int(data[field])
                except (TypeError, ValueError):
                    errors[field] = f"{field} must be a whole number"

        errors.update(self._validate_extra(data, partial))
        return errors

    def _validate_extra(self, data: dict[str, Any], partial: bool) -> dict[str, str]:
        """Model-specific validation. Override in subclasses."""
        return {}

    def clean(self, data: dict[str, Any]) -> dict[str, Any]:
        """Keep writable fields and convert them to column types."""
        cleaned: dict[str, Any] = {}
        for key in self.writable_fields:
            if key not in data:
                continue
            value = data[key]
            if isinstance(value, str):
                value = value.strip()
            if value == '':
                value = None
            if value is not None:
                if key in self.date_fields:
                    value = parse_date(value)
                elif key in self.datetime_fields:
                    value = parse_datetime(value)
                elif key in self.int_fields:
                    value = int(value)
            cleaned[key] = value
        return cleaned

    # ----- writes -----

    def create(self, data: dict[str, Any]) -> tuple[Model | None, str | None]:
        """
        Create a new record.

        Args:
            data: Dictionary of field values

        Returns:
            (created_object, error_message)
        """
        errors = self.validate(data)
        if errors:
            return None, next(iter(errors.values()))

        try:
            values = self._prepare_create(self.clean(data))
            instance = self.model(**values)
            db.session.add(instance)
            db.session.commit()
            return instance, None

        except IntegrityError as e:
            db.session.rollback()
            return None, self._handle_integrity_error(e)

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to create {self.model_name}: {e}")
            return None, f"Failed to create {self.model_name}"

    def update(self, object_id: int, data: dict[str, Any]) -> tuple[Model | None, str | None]:
        """
        Update a record. Fields absent from ``data`` are left unchanged.

        Args:
            object_id: ID of object to update
            data: Dictionary of fields to update

        Returns:
            (updated_object, error_message)
        """
        instance = self.get_by_id(object_id)
        if not instance:
            return None, self.not_found_message

        errors = self.validate(data, partial=True)
        if errors:
            return None, next(iter(errors.values()))

        try:
            values = self._prepare_update(instance, self.clean(data))
            for key, value in values.items():
                setattr(instance, key, value)
            db.session.commit()
            return instance, None

        except IntegrityError as e:
            db.session.rollback()
            return None, self._handle_integrity_error(e)

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update {self.model_name}: {e}")
            return None, f"Failed to update {self.model_name}"

    def delete(self, object_id: int) -> tuple[bool, str | None]:
        """
        Delete a record.

        Args:
            object_id: ID of object to delete

        Returns:
            (success, error_message)
        """
        instance = self.get_by_id(object_id)
        if not instance:
            return False, self.not_found_message

        try:
            db.session.delete(instance)
            db.session.commit()
            return True, None

        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete {self.model_name}: {e}")
            return False, f"Failed to delete {self.model_name}"

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found"

    def _prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        """Fill computed columns before insert. Override in subclasses."""
        return values

    def _prepare_update(self, instance: Model, values: dict[str, Any]) -> dict[str, Any]:
        """Fill computed columns before update. Override in subclasses."""
        return values

    def _handle_integrity_error(self, error: IntegrityError) -> str:
        """Convert database integrity errors to user-friendly messages."""
        error_msg = str(error).lower()
        if 'unique' in error_msg or 'duplicate' in error_msg:
            return DUPLICATE_MESSAGE
        if 'foreign' in error_msg:
            return MISSING_REFERENCE_MESSAGE
        current_app.logger.error(f"Constraint violation on {self.model_name}: {error}")
        return "Database constraint violation"


__all__ = [
    'CRUDService',
    'paginate',
    'normalize_paging',
    'parse_date',
    'parse_datetime',
    'DEFAULT_PAGE_LIMIT',
    'MAX_PAGE_LIMIT',
    'DUPLICATE_MESSAGE',
    'MISSING_REFERENCE_MESSAGE',
]
