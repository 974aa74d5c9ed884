"""Authentication blueprint: bearer-token login and admin registration."""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_login import current_user

from desa.auth import admin_required, handle_unauthorized, is_admin
from desa.blueprints.common.responses import fail, json_payload, ok
from desa.extensions import limiter
from desa.security import auth_rate_limit, register_rate_limit
from desa.services.accounts import (
    admin_count,
    authenticate,
    generate_token,
    register_admin,
    serialize_admin,
    session_max_age,
)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(auth_rate_limit)
def login():
    payload = json_payload()
    email = (payload.get('email') or '').strip()
    password = payload.get('password') or ''
    if not email or not password:
        errors = {}
        if not email:
            errors['email'] = 'email is required'
        if not password:
            errors['password'] = 'password is required'
        return fail('Email and password are required', 400, errors)

    admin = authenticate(email, password)
    if admin is None:
        current_app.logger.warning(f"Failed login for {email} from {request.remote_addr}")
        return fail('Email atau password salah', 401)

    current_app.logger.info(f"Admin {admin.email} logged in")
    return ok(
        {
            'admin': serialize_admin(admin),
            'token': generate_token(admin),
            'expires_in': session_max_age(),
        },
        'Login berhasil',
    )


@auth_bp.route("/register", methods=["POST"])
@limiter.limit(register_rate_limit)
def register():
    # The very first admin can bootstrap the back office; after that only admins add admins.
    if admin_count() > 0 and not is_admin():
        return handle_unauthorized()

    payload = json_payload()
    admin, error, errors = register_admin(
        payload.get('nama'),
        payload.get('email'),
        payload.get('password'),
    )
    if error:
        status = 409 if errors.get('email') == 'Email is already registered' else (400 if errors else 500)
        return fail(error, status, errors)
    return ok(serialize_admin(admin), 'Admin created', 201)


@auth_bp.route("/me", methods=["GET"])
@admin_required
def me():
    return ok(serialize_admin(current_user))


@auth_bp.route("/logout", methods=["POST"])
def logout():
    # Tokens are stateless; the client discards its copy.
    return ok(message='Logged out')
