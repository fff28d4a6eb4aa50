# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/stockledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates missing tables and seeds default users if none exist.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
# - python -m flask users create --username alice --password secret --role user
#
# Catalog:
# - python -m flask products list
# - python -m flask products add --grams 100 --price 5.0 --quantity 10
#
# Purchases:
# - python -m flask purchases list --channel lettuce

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Channel, User
from .services import auth_service, ledger_service, products_service
from .services.auth_service import DuplicateUsernameError
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and seed the default users if the users table is empty."""
    click.echo("START Initializing database...")
    db.create_all()
    click.echo("PASS Tables ready")

    inserted = auth_service.seed_default_users()
    if inserted:
        click.echo(f"PASS Seeded {inserted} default users")
    else:
        click.echo("SKIP Users already present, nothing seeded")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed users.")


@click.group('users')
def users_group():
    """User inspection/bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List users with roles (passwords are never printed)."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<5} {'Username':<20} {'Role':<8}")
    click.echo("-" * 35)
    for user in users:
        click.echo(f"{user.id:<5} {user.username:<20} {user.role:<8}")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(['user', 'admin']), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, password, role):
    """Register a user."""
    try:
        user_id = auth_service.register_user(username, password, role)
    except (ValidationError, DuplicateUsernameError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {username} (ID: {user_id}, role: {role})")


@click.group('products')
def products_group():
    """Catalog commands."""


@products_group.command('list')
@with_appcontext
def list_products_cli():
    products = products_service.list_products()
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<5} {'Grams':<8} {'Price':<10} {'Qty':<6}")
    click.echo("-" * 32)
    for p in products:
        click.echo(f"{p['id']:<5} {p['grams']:<8} {p['price']:<10.2f} {p['quantity']:<6}")


@products_group.command('add')
@click.option('--grams', type=int, required=True)
@click.option('--price', type=float, required=True)
@click.option('--quantity', type=int, required=True)
@with_appcontext
def add_product_cli(grams, price, quantity):
    try:
        product_id = products_service.create_product(
            {"grams": grams, "price": price, "quantity": quantity}
        )
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created product {grams}g (ID: {product_id})")


@click.group('purchases')
def purchases_group():
    """Purchase log inspection."""


@purchases_group.command('list')
@click.option('--channel', type=click.Choice([c.value for c in Channel]), required=True)
@with_appcontext
def list_purchases_cli(channel):
    rows = ledger_service.list_purchases(Channel(channel))
    if not rows:
        click.echo(f"No {channel} purchases found.")
        return

    click.echo(f"{'ID':<5} {'Grams':<8} {'Qty':<6} {'Total':<10} {'Date'}")
    click.echo("-" * 45)
    for r in rows:
        click.echo(
            f"{r['id']:<5} {r['grams']:<8} {r['quantity']:<6} "
            f"{str(r['totalCost']):<10} {r['purchaseDate']}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
    app.cli.add_command(purchases_group)
