"""
Custom Flask CLI commands.

These commands are registered with the app by ``register_commands()`` in
the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check                          # Verify database connectivity
    flask promotion-sweep                   # Sweep every active company
    flask promotion-sweep --company-id 3    # Sweep one company
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from hrcore.extensions import db
from hrcore.models.organization import Company


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the tables exist.

    Runs a simple query against the configured database and counts the
    active companies, which is what the promotion scheduler will sweep.
    """
    click.echo("=" * 60)
    click.echo("  HR Core — Database Connectivity Check")
    click.echo("=" * 60)

    click.echo(f"\n  Connection string: {current_app.config['SQLALCHEMY_DATABASE_URI']}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
        if not row or row[0] != 1:
            click.secho("      ✗ Unexpected result from test query.", fg="red")
            return
        click.secho("      ✓ Connected successfully.", fg="green")
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Does your .env DATABASE_URL match your server config?")
        return

    # -- Step 2: Tenant directory ------------------------------------------
    click.echo("[2/2] Checking tenant directory...")
    try:
        active = Company.query.filter_by(is_active=True).count()
        total = Company.query.count()
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Tenant check failed: {exc}", fg="red")
        click.echo("        Have you run `flask db upgrade`?")
        return

    click.secho(f"      ✓ {active} active of {total} companies.", fg="green")
    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("promotion-sweep")
@click.option(
    "--company-id",
    type=int,
    default=None,
    help="Sweep only this company (default: every active company).",
)
@with_appcontext
def promotion_sweep_command(company_id: int | None):
    """Apply every due pending promotion now."""
    # pylint: disable=import-outside-toplevel
    from hrcore.services import promotion_scheduler

    if company_id is None:
        click.echo("Sweeping due promotions for all active companies...")
        result = promotion_scheduler.process_all_company_promotions()
    else:
        click.echo(f"Sweeping due promotions for company {company_id}...")
        result = promotion_scheduler.manual_trigger_promotion(company_id)

    click.echo(f"Applied: {result.applied}  Failed: {result.failed}")
    if result.failed:
        click.secho("Some promotions could not be applied; see the log.", fg="yellow")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(promotion_sweep_command)
