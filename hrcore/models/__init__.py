"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - organization.py -> company, department, designation, employee
  - lifecycle.py    -> promotion, resignation, termination
  - audit.py        -> audit_log
"""

from hrcore.models.organization import (  # noqa: F401
    Company,
    Department,
    Designation,
    Employee,
)
from hrcore.models.lifecycle import (  # noqa: F401
    Promotion,
    Resignation,
    Termination,
)
from hrcore.models.audit import AuditLog  # noqa: F401
