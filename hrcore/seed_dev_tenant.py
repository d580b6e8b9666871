"""
Seed script — create a development tenant for local testing.

Registers a ``flask seed-dev-tenant`` CLI command that creates a demo
company with two departments, a designation ladder in each, and a few
active employees.  It gives the promotion endpoints and the daily sweep
something to work on without a production data copy.

Usage::

    flask seed-dev-tenant                     # Create with defaults
    flask seed-dev-tenant --name "Acme Ltd"   # Custom company name

Prerequisites:
    - The database must exist and ``flask db upgrade`` must have been run.
"""

from datetime import date

import click
from flask.cli import with_appcontext

from hrcore.extensions import db
from hrcore.models.organization import Company, Department, Designation, Employee

_DEFAULT_COMPANY_NAME = "Demo Company"

# Department name -> designation ladder, junior first.
_DEPARTMENTS = {
    "Engineering": ["Software Engineer", "Senior Software Engineer", "Tech Lead"],
    "Sales": ["Sales Associate", "Account Executive", "Sales Manager"],
}

# (code, first, last, department, designation index, joined)
_EMPLOYEES = [
    ("E-001", "Ada", "Lovelace", "Engineering", 0, date(2021, 3, 1)),
    ("E-002", "Grace", "Hopper", "Engineering", 1, date(2019, 9, 16)),
    ("E-003", "Dale", "Carnegie", "Sales", 0, date(2022, 1, 10)),
]


@click.command("seed-dev-tenant")
@click.option(
    "--name",
    "company_name",
    default=_DEFAULT_COMPANY_NAME,
    show_default=True,
    help="Company name for the demo tenant.",
)
@with_appcontext
def seed_dev_tenant_command(company_name: str):
    """
    Create a demo tenant with departments, designations and employees.

    If a company with the given name already exists, nothing is created
    and its ID is reported.
    """
    click.echo("=" * 60)
    click.echo("  HR Core — Seed Dev Tenant")
    click.echo("=" * 60)

    # -- Step 1: Company ----------------------------------------------------
    click.echo("\n[1/3] Looking up company...")
    existing = Company.query.filter_by(company_name=company_name).first()
    if existing is not None:
        click.secho(
            f"      ✓ '{company_name}' already exists (id={existing.id}).",
            fg="yellow",
        )
        click.echo("        Nothing to do.")
        return

    company = Company(company_name=company_name, is_active=True)
    db.session.add(company)
    db.session.flush()
    click.secho(f"      ✓ Created company id={company.id}.", fg="green")

    # -- Step 2: Departments and designations ------------------------------
    click.echo("[2/3] Creating departments and designations...")
    ladders = {}
    for department_name, titles in _DEPARTMENTS.items():
        department = Department(company_id=company.id, department_name=department_name)
        db.session.add(department)
        db.session.flush()

        ladder = []
        for level, title in enumerate(titles, start=1):
            designation = Designation(
                company_id=company.id,
                department_id=department.id,
                designation_name=title,
                level=level,
            )
            db.session.add(designation)
            ladder.append(designation)
        db.session.flush()
        ladders[department_name] = (department, ladder)
        click.echo(f"      - {department_name}: {', '.join(titles)}")

    # -- Step 3: Employees --------------------------------------------------
    click.echo("[3/3] Creating employees...")
    for code, first, last, department_name, index, joined in _EMPLOYEES:
        department, ladder = ladders[department_name]
        designation = ladder[index]
        db.session.add(
            Employee(
                company_id=company.id,
                employee_code=code,
                first_name=first,
                last_name=last,
                email=f"{first.lower()}.{last.lower()}@example.com",
                department_id=department.id,
                department=department.department_name,
                designation_id=designation.id,
                designation=designation.designation_name,
                date_of_joining=joined,
            )
        )
        click.echo(f"      - {code} {first} {last} ({designation.designation_name})")

    db.session.commit()

    click.echo("\n" + "=" * 60)
    click.secho(
        f"  Demo tenant ready. Company ID: {company.id}", fg="green", bold=True
    )
    click.echo("=" * 60)


def register_seed_commands(app):
    """Register seed commands with the Flask application."""
    app.cli.add_command(seed_dev_tenant_command)
