"""
Pytest configuration and shared fixtures.

Provides a test application and seeded tenants that all test modules
can use.  Uses the ``testing`` configuration: an in-memory SQLite
database created fresh for every test, and Celery tasks that run
eagerly in-process.
"""

from datetime import date

import pytest

from hrcore import create_app
from hrcore.extensions import db as _db
from hrcore.models.organization import Company, Department, Designation, Employee


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    Each test gets its own in-memory database with the full schema, so
    tests never see each other's rows.
    """
    app = create_app("testing")

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def celery_app(app):  # pylint: disable=redefined-outer-name
    """Provide the Celery app bound to the test application."""
    return app.extensions["celery"]


def _add(record):
    _db.session.add(record)
    _db.session.flush()
    return record


def _seed_tenant(name: str, is_active: bool) -> dict:
    company = _add(Company(company_name=name, is_active=is_active))
    engineering = _add(Department(company_id=company.id, department_name="Engineering"))
    sales = _add(Department(company_id=company.id, department_name="Sales"))

    def designation(department, title, level):
        return _add(
            Designation(
                company_id=company.id,
                department_id=department.id,
                designation_name=title,
                level=level,
            )
        )

    engineer = designation(engineering, "Engineer", 1)
    senior = designation(engineering, "Senior Engineer", 2)
    tech_lead = designation(engineering, "Tech Lead", 3)
    sales_rep = designation(sales, "Sales Representative", 1)

    employee = _add(
        Employee(
            company_id=company.id,
            employee_code="E-001",
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            department_id=engineering.id,
            department=engineering.department_name,
            designation_id=engineer.id,
            designation=engineer.designation_name,
            date_of_joining=date(2020, 1, 1),
        )
    )
    _db.session.commit()

    return {
        "company": company,
        "engineering": engineering,
        "sales": sales,
        "engineer": engineer,
        "senior": senior,
        "tech_lead": tech_lead,
        "sales_rep": sales_rep,
        "employee": employee,
    }


@pytest.fixture
def make_tenant(app):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Factory that seeds a company with two departments and an employee.

    The returned dict holds ``company``, ``engineering``, ``sales``,
    ``engineer``, ``senior``, ``tech_lead``, ``sales_rep`` and
    ``employee`` (an Engineer in Engineering, joined 2020-01-01).

    Usage::

        def test_two_companies(make_tenant):
            first = make_tenant("First")
            second = make_tenant("Second", is_active=False)
    """

    def _make(name: str = "Acme", is_active: bool = True) -> dict:
        return _seed_tenant(name, is_active)

    return _make


@pytest.fixture
def tenant(make_tenant):  # pylint: disable=redefined-outer-name
    """One seeded, active tenant."""
    return make_tenant()


@pytest.fixture
def add_employee(app):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Factory that adds another employee to a seeded tenant.

    Usage::

        grace = add_employee(tenant, "Grace", designation=tenant["senior"])
    """

    def _add_employee(seed: dict, first_name: str, designation=None, joined=date(2020, 1, 1)):
        designation = designation or seed["engineer"]
        department = _db.session.get(Department, designation.department_id)
        employee = _add(
            Employee(
                company_id=seed["company"].id,
                first_name=first_name,
                last_name="Tester",
                department_id=department.id,
                department=department.department_name,
                designation_id=designation.id,
                designation=designation.designation_name,
                date_of_joining=joined,
            )
        )
        _db.session.commit()
        return employee

    return _add_employee


@pytest.fixture
def fixed_today(monkeypatch):
    """
    Pin the date used by every promotion date gate.

    Usage::

        def test_something(fixed_today):
            fixed_today(date(2025, 6, 1))
    """
    # pylint: disable=import-outside-toplevel
    from hrcore.services import promotion_service

    def _pin(value: date) -> date:
        monkeypatch.setattr(promotion_service, "today", lambda: value)
        return value

    return _pin
