"""Village settings singleton."""

from __future__ import annotations

import re
from typing import Any, Dict

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from desa.extensions import db
from desa.models.models import SETTINGS_ID, DesaSettings

DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_SECONDARY_COLOR = "#10B981"

SETTINGS_FIELDS = (
    'nama_desa',
    'slogan',
    'alamat',
    'logo',
    'hero_image',
    'primary_color',
    'secondary_color',
    'deskripsi',
)
_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')

DEFAULT_SETTINGS: Dict[str, Any] = {
    'id': 0,
    'nama_desa': 'Desa Digital',
    'slogan': 'Menuju Desa Modern dan Sejahtera',
    'alamat': 'Alamat Desa',
    'logo': '',
    'hero_image': '',
    'primary_color': DEFAULT_PRIMARY_COLOR,
    'secondary_color': DEFAULT_SECONDARY_COLOR,
    'deskripsi': 'Deskripsi desa',
}


def serialize_settings(settings: DesaSettings | None) -> Dict[str, Any]:
    """Settings as a plain dict; the built-in defaults when nothing is stored yet."""
    if settings is None:
        return dict(DEFAULT_SETTINGS, created_at=None, updated_at=None)
    data = {field: getattr(settings, field) for field in SETTINGS_FIELDS}
    data['id'] = settings.id
    data['created_at'] = settings.created_at.isoformat() if settings.created_at else None
    data['updated_at'] = settings.updated_at.isoformat() if settings.updated_at else None
    return data


def get_settings() -> DesaSettings | None:
    return db.session.get(DesaSettings, SETTINGS_ID)


def validate_settings(data: Dict[str, Any], creating: bool) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    nama = data.get('nama_desa')
    if creating and (not isinstance(nama, str) or not nama.strip()):
        errors['nama_desa'] = "nama_desa is required"
    elif 'nama_desa' in data and nama is not None and not str(nama).strip():
        errors['nama_desa'] = "nama_desa cannot be empty"

    for field in ('primary_color', 'secondary_color'):
        value = data.get(field)
        if value is not None and not _COLOR_RE.match(str(value)):
            errors[field] = f"{field} must be a hex color like #3B82F6"
    return errors


def update_settings(data: Dict[str, Any]) -> tuple[DesaSettings | None, str | None, Dict[str, str]]:
    """
    Upsert the settings row.

    Only keys present with a non-null value overwrite stored values
    (COALESCE merge), so partial payloads leave other fields untouched.

    Returns:
        (settings, error_message, field_errors)
    """
    settings = get_settings()
    values = {
        key: (value.strip() if isinstance(value, str) else value)
        for key, value in data.items()
        if key in SETTINGS_FIELDS and value is not None
    }

    errors = validate_settings(values, creating=settings is None)
    if errors:
        return None, next(iter(errors.values())), errors

    try:
        if settings is None:
            settings = DesaSettings(id=SETTINGS_ID, **values)
            db.session.add(settings)
        else:
            for key, value in values.items():
                setattr(settings, key, value)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to update desa_settings: {e}")
        return None, "Failed to update settings", {}

    return settings, None, {}


__all__ = [
    'DEFAULT_SETTINGS',
    'SETTINGS_FIELDS',
    'get_settings',
    'serialize_settings',
    'update_settings',
    'validate_settings',
]
