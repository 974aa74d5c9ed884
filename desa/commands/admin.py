"""Admin account CLI commands."""

import click
from flask.cli import with_appcontext
from sqlalchemy import select

from desa.extensions import db
from desa.models import Admin
from desa.services.accounts import find_admin_by_email, password_error, register_admin, set_password


@click.group('admin')
def admin_commands():
    """Admin account commands."""
    pass


@admin_commands.command('create')
@click.option('--nama', required=True, help='Display name')
@click.option('--email', required=True, help='Login email')
@click.option('--password', required=True, help='Login password')
@with_appcontext
def create_admin(nama, email, password):
    """Create a back-office admin.

    Example:
        flask admin create --nama "Administrator" --email admin@desa.go.id --password rahasia123
    """
    admin, error, errors = register_admin(nama, email, password)
    if error:
        click.echo(click.style(f'Error: {error}', fg='red'))
        for field, message in errors.items():
            click.echo(f'  {field}: {message}')
        return

    click.echo(click.style('Admin created successfully!', fg='green'))
    click.echo(f'  Nama: {admin.nama}')
    click.echo(f'  Email: {admin.email}')


@admin_commands.command('set-password')
@click.option('--email', required=True, help='Admin email')
@click.option('--password', required=True, help='New password')
@with_appcontext
def set_admin_password(email, password):
    """Set or reset an admin's password."""
    admin = find_admin_by_email(email)
    if not admin:
        click.echo(click.style(f'Error: No admin with email {email}', fg='red'))
        return

    problem = password_error(password)
    if problem:
        click.echo(click.style(f'Error: {problem[0].upper()}{problem[1:]}', fg='red'))
        return

    set_password(admin, password)
    click.echo(click.style('Password updated.', fg='green'))


@admin_commands.command('list')
@with_appcontext
def list_admins():
    """List admin accounts."""
    admins = db.session.execute(select(Admin).order_by(Admin.id)).scalars().all()
    if not admins:
        click.echo('No admins yet. Create one with: flask admin create')
        return
    for admin in admins:
        click.echo(f'{admin.id:>4}  {admin.email:<40} {admin.nama}')
