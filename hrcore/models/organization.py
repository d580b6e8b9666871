"""
Organization models — companies (tenants), departments, designations
and employees.

Every tenant-scoped table carries ``company_id``.  Services always
filter on it; a row is never visible outside the company that owns it.
"""

from hrcore.extensions import db

# -- Employee status values (shared by all lifecycle services) -------------
EMPLOYEE_ACTIVE = "Active"
EMPLOYEE_ON_NOTICE = "On Notice"
EMPLOYEE_RESIGNED = "Resigned"
EMPLOYEE_TERMINATED = "Terminated"


class Company(db.Model):
    """
    A tenant.  The promotion scheduler sweeps every active company.
    """

    __tablename__ = "company"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_name = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Company {self.id}: {self.company_name}>"


class Department(db.Model):
    """Department within a company."""

    __tablename__ = "department"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    department_name = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    # -- Relationships -----------------------------------------------------
    designations = db.relationship(
        "Designation", back_populates="department", lazy="dynamic"
    )

    def __repr__(self) -> str:
        return f"<Department {self.id}: {self.department_name}>"


class Designation(db.Model):
    """
    Job title within a company.

    ``department_id`` is optional: some designations (e.g. "Intern")
    are shared across departments.  ``level`` orders designations from
    junior to senior for selection lists.
    """

    __tablename__ = "designation"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    department_id = db.Column(
        db.Integer, db.ForeignKey("department.id"), nullable=True, index=True
    )
    designation_name = db.Column(db.String(200), nullable=False)
    level = db.Column(db.Integer, nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    # -- Relationships -----------------------------------------------------
    department = db.relationship("Department", back_populates="designations")

    def __repr__(self) -> str:
        return f"<Designation {self.id}: {self.designation_name}>"


class Employee(db.Model):
    """
    Employee record shared by every HR subsystem.

    ``department`` and ``designation`` are denormalized display names
    kept next to their ID columns; the promotion applier writes both
    together so readers never see a mismatched pair.
    """

    __tablename__ = "employee"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    employee_code = db.Column(db.String(50), nullable=True, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default="")
    email = db.Column(db.String(200), nullable=True)
    department_id = db.Column(
        db.Integer, db.ForeignKey("department.id"), nullable=True, index=True
    )
    department = db.Column(db.String(200), nullable=True)
    designation_id = db.Column(
        db.Integer, db.ForeignKey("designation.id"), nullable=True, index=True
    )
    designation = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=EMPLOYEE_ACTIVE)
    date_of_joining = db.Column(db.Date, nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    @property
    def full_name(self) -> str:
        """Return the employee's full display name."""
        return f"{self.first_name} {self.last_name or ''}".strip()

    def __repr__(self) -> str:
        return f"<Employee {self.id}: {self.full_name} ({self.status})>"
