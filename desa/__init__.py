"""Application factory for the Desa Digital village website API."""

from __future__ import annotations

from flask import Flask, send_from_directory

from desa.config import Config
from desa.extensions import (
    db,
    migrate,
    login_manager,
    limiter,
)
from desa.services.db import close_db, engine_options, ensure_core_tables
from desa.security.config import (
    configure_security_headers,
    validate_input_length,
)


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options(app.config)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # Ensure models and the bearer-token loader are registered
    import desa.models  # noqa: F401
    import desa.auth  # noqa: F401

    # Create-if-missing safety net for environments without migrations
    if not app.config.get('SKIP_BOOTSTRAP'):
        with app.app_context():
            ensure_core_tables()

    # Configure security
    configure_security_headers(app)
    validate_input_length(app)

    from desa.blueprints.api import api_bp
    from desa.blueprints.auth import auth_bp
    from desa.blueprints.common.responses import register_error_handlers

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(api_bp, url_prefix='/api')
    register_error_handlers(app)

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    @app.teardown_appcontext
    def teardown_db(exception):
        close_db()

    # Register CLI commands
    from desa.commands import register_commands
    register_commands(app)

    return app
