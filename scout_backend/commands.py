import click
from flask.cli import with_appcontext

from scout_backend.errors import ConflictError
from scout_backend.extensions import db
from scout_backend.models import UserRole
from scout_backend.services import users as user_service


@click.command("create-admin")
@click.option("--email", prompt=True, help="Login email of the new admin.")
@click.option("--name", default="Super Admin", show_default=True)
@click.password_option(help="Password for the new admin.")
@with_appcontext
def create_admin_command(email, name, password):
    """Create an ADMIN user, e.g. the first account of a fresh database."""
    email = email.strip().lower()
    try:
        user = user_service.create_user(db.session, email=email, name=name,
                                        password=password, role=UserRole.ADMIN)
    except ConflictError:
        raise click.ClickException(f"User with email '{email}' already exists.")

    click.echo(f"Admin created successfully (id={user.id}, email={user.email})")


def register_commands(app):
    app.cli.add_command(create_admin_command)
