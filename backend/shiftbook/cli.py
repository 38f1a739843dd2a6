# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/shiftbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to the factory (PowerShell: $env:FLASK_APP="shiftbook:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables, seeds the default catalog, creates the admin operator.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog list [--all]
# - python -m flask catalog reset --yes
#   Replace the active catalog with the seed list (shift data untouched).
#
# Operators:
# - python -m flask users create --username baker --display-name "Morning Baker" --password "..."
# - python -m flask users list
#
# Shifts:
# - python -m flask shifts status
#   Current shift status with reconciled totals.
# - python -m flask shifts reports --limit 10
#   Recent shift reports.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import catalog_service, report_service, shift_service
from .services.auth_service import create_user, PasswordValidationError


def _money(cents: int | None) -> str:
    return "-" if cents is None else f"{cents / 100:,.2f}"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--admin-password', default='bakery123', help='Password for the default admin operator')
@with_appcontext
def init_system(admin_password):
    """
    Initialize the system: schema, default catalog, default operator.

    Safe to run repeatedly; existing data is left alone.

    SECURITY: Change the admin password immediately in production!
    """
    click.echo("START Initializing shiftbook...")

    db.create_all()
    click.echo("PASS Schema ready")

    if catalog_service.seed_default_catalog():
        click.echo(f"PASS Seeded default catalog ({len(catalog_service.list_items())} items)")
    else:
        click.echo("PASS Using existing catalog")

    if db.session.query(User).filter_by(username="admin").first():
        click.echo("WARN  User 'admin' already exists, skipping...")
    else:
        try:
            create_user("admin", admin_password, display_name="Administrator")
            click.echo("PASS Created user: admin")
        except PasswordValidationError as e:
            click.echo(f"FAIL Password validation failed for 'admin': {str(e)}")

    shift = shift_service.get_current_shift()
    click.echo(f"PASS Current shift: {shift.id} ({shift.status})")
    click.echo("DONE shiftbook initialized")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('catalog')
def catalog_group():
    """Catalog inspection and reset."""


@catalog_group.command('list')
@click.option('--all', 'include_inactive', is_flag=True, help='Include removed items')
@with_appcontext
def list_catalog(include_inactive):
    items = catalog_service.list_items(include_inactive=include_inactive)
    if not items:
        click.echo("Catalog is empty. Run: python -m flask system init")
        return

    click.echo("\n" + "="*88)
    click.echo(f"{'ID':<34} {'Name':<22} {'Category':<10} {'Unit':<6} {'Cost':>6} {'Price':>7}")
    click.echo("="*88)
    for item in items:
        name = item.name if item.is_active else f"{item.name} (removed)"
        click.echo(
            f"{item.id:<34} {name:<22} {item.category:<10} {item.unit:<6} "
            f"{_money(item.cost_price_cents):>6} {_money(item.selling_price_cents):>7}"
        )
    click.echo("="*88 + "\n")


@catalog_group.command('reset')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_catalog(yes):
    """Replace the active catalog with the default seed list."""
    if not yes:
        click.confirm("WARN This replaces the whole catalog with the defaults. Continue?", abort=True)
    items = catalog_service.reset_to_defaults()
    click.echo(f"PASS Catalog reset ({len(items)} items)")


@click.group('users')
def users_group():
    """Operator account commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--display-name', default=None, help='Name shown on shift reports')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(username, display_name, password):
    try:
        user = create_user(username, password, display_name=display_name)
        click.echo(f"PASS Created user: {user.username} (ID: {user.id})")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, at least one letter and one digit")
    except ValueError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return
    for user in users:
        active_str = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:<5} {user.username:<20} {user.display_name or '-':<25} {active_str}")


@click.group('shifts')
def shifts_group():
    """Shift inspection commands."""


@shifts_group.command('status')
@with_appcontext
def shift_status_cli():
    shift, summary = shift_service.current_summary()
    click.echo(f"Shift {shift.id}: {shift.status}")
    click.echo(f"  Produced units:   {summary.total_produced}")
    click.echo(f"  Sold (reconciled): {summary.total_sold}  (POS log: {summary.total_sales_logged})")
    click.echo(f"  Discharged units: {summary.discharges.count}")
    click.echo(f"  Revenue:          {_money(summary.total_revenue_cents)}")
    click.echo(f"  Cost:             {_money(summary.total_cost_cents)}")
    click.echo(f"  Est. profit:      {_money(summary.estimated_profit_cents)}")
    uncounted = [r.name for r in summary.rows if r.end is None]
    if shift.is_open and uncounted:
        click.echo(f"  WARN {len(uncounted)} item(s) have no ending count yet")


@shifts_group.command('reports')
@click.option('--limit', type=int, default=20, help='Max reports to show')
@with_appcontext
def list_reports_cli(limit):
    reports = report_service.list_reports(limit=limit)
    if not reports:
        click.echo("No shift reports found.")
        return

    click.echo("\n" + "="*96)
    click.echo(f"{'ID':<5} {'Shift':<7} {'Operator':<18} {'Closed':<22} {'Sold':>6} {'Revenue':>12} {'Profit':>12}")
    click.echo("="*96)
    for report in reports:
        closed = report.end_time.strftime("%Y-%m-%d %H:%M") if report.end_time else "-"
        click.echo(
            f"{report.id:<5} {report.shift_id:<7} {(report.user_display_name or 'Unknown'):<18} {closed:<22} "
            f"{report.total_sold:>6} {_money(report.total_revenue_cents):>12} {_money(report.estimated_profit_cents):>12}"
        )
    click.echo("="*96 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(users_group)
    app.cli.add_command(shifts_group)
