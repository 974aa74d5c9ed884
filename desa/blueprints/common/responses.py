"""JSON envelope helpers and API error handlers."""

from __future__ import annotations

from typing import Any, Iterable

from flask import abort, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from desa.extensions import db
from desa.services.crud import DUPLICATE_MESSAGE, MISSING_REFERENCE_MESSAGE


def ok(data: Any = None, message: str | None = None, status: int = 200):
    body: dict[str, Any] = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    return jsonify(body), status


def fail(message: str, status: int = 400, errors: dict[str, str] | None = None):
    body: dict[str, Any] = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status


def paginated(result: dict[str, Any], serializer):
    """List envelope for a crud.paginate() result."""
    return jsonify({
        'success': True,
        'data': [serializer(item) for item in result['items']],
        'total': result['total'],
        'page': result['page'],
        'limit': result['limit'],
        'totalPages': result['total_pages'],
    })


def listing(items: Iterable[Any], serializer):
    """List envelope for an unpaginated list (one page holding everything)."""
    data = [serializer(item) for item in items]
    return jsonify({
        'success': True,
        'data': data,
        'total': len(data),
        'page': 1,
        'limit': len(data),
        'totalPages': 1 if data else 0,
    })


def error_status(message: str | None) -> int:
    """HTTP status for a service-layer error message."""
    if not message:
        return 400
    if message == DUPLICATE_MESSAGE:
        return 409
    if message == MISSING_REFERENCE_MESSAGE:
        return 400
    if message.endswith(' not found'):
        return 404
    if message.startswith('Failed to '):
        return 500
    return 400


def json_payload() -> dict[str, Any]:
    """Request body as a dict; 400 when it is not a JSON object."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description='Request body must be a JSON object')
    return payload


def register_error_handlers(app) -> None:
    """Render HTTP and database errors in the API envelope."""

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        message = error.description if error.code == 400 else error.name
        if error.code == 413:
            message = 'Payload too large'
        elif error.code == 429:
            message = 'Too many requests, please try again later'
        return fail(message, error.code or 500)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.error(f"Query failed on {request.method} {request.path}: {error}")
        return fail('Database error, please try again later', 500)


__all__ = [
    'error_status',
    'fail',
    'json_payload',
    'listing',
    'ok',
    'paginated',
    'register_error_handlers',
]
