import pytest

from desa import create_app
from desa.config import TestConfig
from desa.extensions import db
from desa.models import Admin
from desa.services.accounts import generate_token, hash_password


ADMIN_EMAIL = 'admin@desa.go.id'
ADMIN_PASSWORD = 'rahasia123'


@pytest.fixture()
def app(tmp_path):
    """Application on a fresh in-memory database with uploads under tmp_path."""

    class _Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(_Config)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_id(app):
    with app.app_context():
        admin = Admin(nama='Admin Desa', email=ADMIN_EMAIL, password=hash_password(ADMIN_PASSWORD))
        db.session.add(admin)
        db.session.commit()
        return admin.id


@pytest.fixture()
def token(app, admin_id):
    with app.app_context():
        return generate_token(db.session.get(Admin, admin_id))


@pytest.fixture()
def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}
