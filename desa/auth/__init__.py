"""Authentication helpers shared across blueprints."""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, cast

from flask import jsonify, request
from flask_login import current_user

from desa.extensions import login_manager
from desa.models import Admin
from desa.services.accounts import load_admin_from_token

F = TypeVar('F', bound=Callable[..., object])


def bearer_token() -> str | None:
    """Token from ``Authorization: Bearer <token>``, if present."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


@login_manager.request_loader
def load_admin_from_request(req) -> Admin | None:
    return load_admin_from_token(bearer_token())


@login_manager.unauthorized_handler
def handle_unauthorized():
    return jsonify({'success': False, 'message': 'Authentication required'}), 401


def is_admin() -> bool:
    return bool(current_user and current_user.is_authenticated)


def admin_required(func: F) -> F:
    """Decorator rejecting requests without a valid admin bearer token."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not is_admin():
            return handle_unauthorized()
        return func(*args, **kwargs)
    return cast(F, wrapper)


__all__ = [
    'admin_required',
    'bearer_token',
    'handle_unauthorized',
    'is_admin',
]
