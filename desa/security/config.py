"""Security configuration and middleware."""

from flask import abort, request


def configure_security_headers(app):
    """Configure security headers."""

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'DENY'

        # Control referrer information
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'

        # JSON API and uploaded files only; nothing here should run scripts
        response.headers['Content-Security-Policy'] = "default-src 'none'; img-src 'self'; frame-ancestors 'none'"

        # HSTS for HTTPS (only add if using HTTPS)
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    return app


def validate_input_length(app):
    """Middleware to validate request payload size."""
    @app.before_request
    def limit_request_size():
        if not request.content_length:
            return None
        # Multipart uploads get the upload limit (plus form overhead), everything else 1MB
        if request.mimetype == 'multipart/form-data':
            limit = app.config.get('MAX_UPLOAD_SIZE', 5 * 1024 * 1024) + 64 * 1024
        else:
            limit = app.config.get('MAX_JSON_SIZE', 1024 * 1024)
        if request.content_length > limit:
            abort(413)  # Payload Too Large
        return None

    return app


# Rate limits applied with Flask-Limiter decorators
def auth_rate_limit():
    """Rate limit for login attempts."""
    return "5 per minute"


def register_rate_limit():
    """Rate limit for admin registration."""
    return "10 per hour"


def public_submission_rate_limit():
    """Rate limit for public service submissions."""
    return "20 per hour"


__all__ = [
    'configure_security_headers',
    'validate_input_length',
    'auth_rate_limit',
    'register_rate_limit',
    'public_submission_rate_limit',
]
