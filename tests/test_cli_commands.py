"""Tests for the flask CLI commands."""

from desa.extensions import db
from desa.models import Admin, News, OrganizationMember, Service
from desa.services.accounts import verify_password
from desa.services.site import get_settings


def test_admin_create_and_list(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'admin', 'create', '--nama', 'Administrator',
        '--email', 'admin@desa.go.id', '--password', 'rahasia123',
    ])
    assert 'Admin created successfully!' in result.output

    result = runner.invoke(args=['admin', 'list'])
    assert 'admin@desa.go.id' in result.output

    with app.app_context():
        admin = db.session.execute(db.select(Admin)).scalar_one()
        assert verify_password('rahasia123', admin.password)


def test_admin_create_rejects_short_password(app):
    result = app.test_cli_runner().invoke(args=[
        'admin', 'create', '--nama', 'Administrator',
        '--email', 'admin@desa.go.id', '--password', 'pendek',
    ])

    assert 'Error' in result.output
    with app.app_context():
        assert db.session.execute(db.select(Admin)).first() is None


def test_admin_set_password(app, admin_id):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'admin', 'set-password', '--email', 'admin@desa.go.id', '--password', 'kata-sandi-baru',
    ])
    assert 'Password updated.' in result.output

    with app.app_context():
        admin = db.session.get(Admin, admin_id)
        assert verify_password('kata-sandi-baru', admin.password)


def test_db_init_is_idempotent(app):
    runner = app.test_cli_runner()

    assert 'All tables already exist.' in runner.invoke(args=['db-init']).output


def test_seed_demo(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed', 'demo'])
    assert 'Demo content seeded!' in result.output

    with app.app_context():
        assert get_settings().nama_desa == 'Desa Maju Sejahtera'
        assert db.session.execute(db.select(db.func.count()).select_from(News)).scalar_one() == 3
        assert db.session.execute(db.select(db.func.count()).select_from(Service)).scalar_one() == 3
        positions = db.session.execute(db.select(OrganizationMember.urutan)).scalars().all()
        assert sorted(positions) == [1, 2, 3]

    again = runner.invoke(args=['seed', 'demo'])
    assert '--force' in again.output


def test_admin_create_rejects_password_over_72_bytes(app):
    result = app.test_cli_runner().invoke(args=[
        'admin', 'create', '--nama', 'Administrator',
        '--email', 'admin@desa.go.id', '--password', 'x' * 73,
    ])

    assert 'Error' in result.output
    with app.app_context():
        assert db.session.execute(db.select(Admin)).first() is None


def test_admin_set_password_rejects_password_over_72_bytes(app, admin_id):
    result = app.test_cli_runner().invoke(args=[
        'admin', 'set-password', '--email', 'admin@desa.go.id', '--password', 'x' * 73,
    ])

    assert 'Error' in result.output
    assert 'Password updated.' not in result.output
    with app.app_context():
        admin = db.session.get(Admin, admin_id)
        assert verify_password('rahasia123', admin.password)
