"""Admin accounts: password hashing, signed session tokens, login and registration."""

from __future__ import annotations

import time
from typing import Any

import jwt
from email_validator import EmailNotValidError, validate_email
from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from desa.extensions import bcrypt, db
from desa.models.models import Admin

TOKEN_ALGORITHM = "HS256"
DEFAULT_BCRYPT_ROUNDS = 12
# bcrypt only hashes the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72
DEFAULT_SESSION_MAX_AGE = 24 * 60 * 60


def hash_password(password: str, rounds: int | None = None) -> str:
    if rounds is None:
        rounds = current_app.config.get('BCRYPT_ROUNDS', DEFAULT_BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def verify_password(password: str, hashed: str | None) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        return False


def session_max_age() -> int:
    """Token lifetime in seconds."""
    hours = current_app.config.get('SESSION_MAX_AGE_HOURS')
    return int(hours * 3600) if hours else DEFAULT_SESSION_MAX_AGE


def generate_token(admin: Admin, issued_at: float | None = None) -> str:
    """Sign ``{id, email, nama, iat}`` with the application secret."""
    payload = {
        'id': admin.id,
        'email': admin.email,
        'nama': admin.nama,
        'iat': int(issued_at if issued_at is not None else time.time()),
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm=TOKEN_ALGORITHM)


def parse_token(token: str | None) -> dict[str, Any] | None:
    """Return the token claims, or None when the token is malformed or its signature is wrong."""
    if not token:
        return None
    try:
        claims = jwt.decode(
            token,
            current_app.config['SECRET_KEY'],
            algorithms=[TOKEN_ALGORITHM],
            options={'require': ['iat']},
        )
    except jwt.InvalidTokenError as exc:
        current_app.logger.warning(f"Rejected session token: {exc}")
        return None
    if not isinstance(claims.get('id'), int):
        return None
    return claims


def _fresh_claims(token: str | None, now: float | None) -> dict[str, Any] | None:
    claims = parse_token(token)
    if claims is None:
        return None
    now = time.time() if now is None else now
    if now - claims['iat'] >= session_max_age():
        return None
    return claims


def is_session_valid(token: str | None, now: float | None = None) -> bool:
    """A token is valid while ``now - iat`` is below the session max age (24h)."""
    return _fresh_claims(token, now) is not None


def load_admin_from_token(token: str | None, now: float | None = None) -> Admin | None:
    """Resolve a still-valid token to its admin; the email must still match."""
    claims = _fresh_claims(token, now)
    if claims is None:
        return None
    admin = db.session.get(Admin, claims['id'])
    if admin is None or admin.email != claims.get('email'):
        return None
    return admin


def find_admin_by_email(email: str) -> Admin | None:
    return db.session.execute(
        select(Admin).where(func.lower(Admin.email) == email.strip().lower())
    ).scalar_one_or_none()


def authenticate(email: str | None, password: str | None) -> Admin | None:
    """Return the admin whose email and password match, else None."""
    if not email or not password:
        return None
    admin = find_admin_by_email(email)
    if admin is None or not verify_password(password, admin.password):
        return None
    return admin


def admin_count() -> int:
    return db.session.execute(select(func.count()).select_from(Admin)).scalar_one()


def password_error(password: Any) -> str | None:
    """Reason a password is unacceptable, or None."""
    min_length = current_app.config.get('MIN_PASSWORD_LENGTH', 8)
    if not isinstance(password, str) or len(password) < min_length:
        return f"password must be at least {min_length} characters"
    if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        return f"password must be at most {MAX_PASSWORD_BYTES} bytes"
    return None


def validate_registration(nama: Any, email: Any, password: Any) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not isinstance(nama, str) or not nama.strip():
        errors['nama'] = "nama is required"
    if not isinstance(email, str) or not email.strip():
        errors['email'] = "email is required"
    else:
        try:
            validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            errors['email'] = str(exc)
    password_problem = password_error(password)
    if password_problem:
        errors['password'] = password_problem
    return errors


def register_admin(nama: Any, email: Any, password: Any) -> tuple[Admin | None, str | None, dict[str, str]]:
    """
    Create an admin account.

    Returns:
        (admin, error_message, field_errors)
    """
    errors = validate_registration(nama, email, password)
    if errors:
        return None, next(iter(errors.values())), errors

    email = email.strip().lower()
    if find_admin_by_email(email) is not None:
        return None, "Email is already registered", {'email': "Email is already registered"}

    admin = Admin(nama=nama.strip(), email=email, password=hash_password(password))
    try:
        db.session.add(admin)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return None, "Email is already registered", {'email': "Email is already registered"}
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to create admin: {e}")
        return None, "Failed to create admin", {}

    current_app.logger.info(f"Admin {admin.email} registered")
    return admin, None, {}


def set_password(admin: Admin, password: str) -> None:
    admin.password = hash_password(password)
    db.session.commit()


def serialize_admin(admin: Admin) -> dict[str, Any]:
    """Public view of an admin; never includes the password hash."""
    return {
        'id': admin.id,
        'nama': admin.nama,
        'email': admin.email,
        'created_at': admin.created_at.isoformat() if admin.created_at else None,
        'updated_at': admin.updated_at.isoformat() if admin.updated_at else None,
    }


__all__ = [
    'admin_count',
    'authenticate',
    'find_admin_by_email',
    'generate_token',
    'hash_password',
    'is_session_valid',
    'load_admin_from_token',
    'parse_token',
    'password_error',
    'register_admin',
    'serialize_admin',
    'session_max_age',
    'set_password',
    'verify_password',
]
