"""File upload service for images and downloadable documents."""

from __future__ import annotations

import os
import secrets
import time
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
DOCUMENT_EXTENSIONS = {'pdf', 'doc', 'docx', 'xls', 'xlsx', 'odt', 'txt'}

# Upload folder -> allowed extensions
UPLOAD_FOLDERS = {
    'news': IMAGE_EXTENSIONS,
    'gallery': IMAGE_EXTENSIONS,
    'events': IMAGE_EXTENSIONS,
    'organization': IMAGE_EXTENSIONS,
    'settings': IMAGE_EXTENSIONS,
    'services': IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS,
    'documents': IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS,
    'submissions': IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS,
    'general': IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS,
}
PUBLIC_PREFIX = '/uploads'
_SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']


class UploadError(ValueError):
    """Raised when an uploaded file is rejected."""


def format_file_size(size: int | None) -> str:
    """Human readable size: 0 -> '0 Bytes', 1536 -> '1.5 KB'."""
    if not size or size <= 0:
        return '0 Bytes'
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {_SIZE_UNITS[exponent]}"


def allowed_file(filename: str, folder: str = 'general') -> bool:
    """Check if file extension is allowed for the upload folder."""
    allowed = UPLOAD_FOLDERS.get(folder, set())
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def upload_root() -> Path:
    """Return (and ensure) the configured upload directory."""
    root = Path(current_app.config['UPLOAD_FOLDER'])
    root.mkdir(parents=True, exist_ok=True)
    return root


def _ensure_within_upload_root(path: Path) -> None:
    root = upload_root().resolve()
    resolved = path.resolve()
    if root != resolved and root not in resolved.parents:
        raise PermissionError('Attempted to write outside upload directory')


def _determine_size(file: FileStorage) -> int:
    stream = file.stream
    current = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(current)
    return size


def save_upload(file: FileStorage | None, folder: str = 'general') -> dict:
    """
    Save an uploaded file and describe it.

    Args:
        file: The uploaded file from the request
        folder: One of UPLOAD_FOLDERS (e.g. 'news', 'documents')

    Returns:
        Dict with the public path, stored file name, original name and size

    Raises:
        UploadError: missing file, unknown folder, bad extension or too large
    """
    if file is None or not file.filename:
        raise UploadError('No file provided')

    if folder not in UPLOAD_FOLDERS:
        raise UploadError(f"Unknown upload folder '{folder}'")

    if not allowed_file(file.filename, folder):
        allowed = ', '.join(sorted(UPLOAD_FOLDERS[folder]))
        raise UploadError(f"File type not allowed. Allowed types: {allowed}")

    max_size = current_app.config.get('MAX_UPLOAD_SIZE', 5 * 1024 * 1024)
    size = _determine_size(file)
    if size > max_size:
        raise UploadError(f"File size too large. Maximum size: {format_file_size(max_size)}")

    target_dir = upload_root() / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    ext = file.filename.rsplit('.', 1)[1].lower()
    filename = f"{int(time.time() * 1000)}_{secrets.token_hex(6)}.{ext}"
    filepath = target_dir / filename
    _ensure_within_upload_root(filepath)

    file.stream.seek(0)
    file.save(str(filepath))
    current_app.logger.info(f"Stored upload {folder}/{filename} ({size} bytes)")

    return {
        'path': f"{PUBLIC_PREFIX}/{folder}/{filename}",
        'file_name': filename,
        'original_name': secure_filename(file.filename),
        'mime_type': file.mimetype,
        'size': size,
        'size_label': format_file_size(size),
    }


def delete_upload(file_url: str | None) -> bool:
    """
    Delete an uploaded file given its public path.

    Args:
        file_url: The path returned by save_upload (e.g. '/uploads/news/123_ab.jpg')

    Returns:
        True if a file was removed. Paths that resolve outside the upload
        folder are never touched.
    """
    if not file_url or not file_url.startswith(PUBLIC_PREFIX + '/'):
        return False

    target = upload_root() / file_url[len(PUBLIC_PREFIX) + 1:]
    try:
        _ensure_within_upload_root(target)
    except PermissionError:
        current_app.logger.warning(f"Refusing to delete {file_url}: outside upload directory")
        return False

    if target.exists() and target.is_file():
        target.unlink()
        return True
    return False


__all__ = [
    'UploadError',
    'UPLOAD_FOLDERS',
    'PUBLIC_PREFIX',
    'allowed_file',
    'delete_upload',
    'format_file_size',
    'save_upload',
    'upload_root',
]
