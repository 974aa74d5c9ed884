"""Security package for Desa Digital."""

from desa.security.config import (
    auth_rate_limit,
    configure_security_headers,
    public_submission_rate_limit,
    register_rate_limit,
    validate_input_length,
)

__all__ = [
    "auth_rate_limit",
    "configure_security_headers",
    "public_submission_rate_limit",
    "register_rate_limit",
    "validate_input_length",
]
