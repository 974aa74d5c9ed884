"""CLI commands for Desa Digital."""

from .admin import admin_commands
from .seed import db_init, seed_commands


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(admin_commands)
    app.cli.add_command(seed_commands)
    app.cli.add_command(db_init)
