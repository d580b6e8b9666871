"""
Employee lifecycle models — promotions, resignations and terminations.

At most one *in-flight* lifecycle record may reference an employee at a
time.  In-flight means:

  - promotion:   ``pending``
  - resignation: ``pending`` or ``approved`` (not yet processed)
  - termination: ``pending``

The rule is enforced by ``lifecycle_service.validate_employee_lifecycle``
before any of the three record types is created or re-dated.  For
promotions a filtered unique index also holds it in the database.
"""

from hrcore.extensions import db

# -- Promotion status values -----------------------------------------------
PROMOTION_PENDING = "pending"
PROMOTION_APPLIED = "applied"
PROMOTION_CANCELLED = "cancelled"

# Row filter of the partial unique index on promotion.employee_id.
PENDING_PROMOTION_FILTER = "status = 'pending' AND is_deleted = 0"

# -- Resignation status values ---------------------------------------------
RESIGNATION_PENDING = "pending"
RESIGNATION_APPROVED = "approved"
RESIGNATION_REJECTED = "rejected"
RESIGNATION_WITHDRAWN = "withdrawn"
RESIGNATION_PROCESSED = "processed"

# -- Termination status values ---------------------------------------------
TERMINATION_PENDING = "pending"
TERMINATION_PROCESSED = "processed"
TERMINATION_CANCELLED = "cancelled"

RESIGNATION_IN_FLIGHT = (RESIGNATION_PENDING, RESIGNATION_APPROVED)
TERMINATION_IN_FLIGHT = (TERMINATION_PENDING,)


class Promotion(db.Model):
    """
    Move of an employee to a target department and designation,
    effective on ``promotion_date``.

    Only the target pair is stored.  The employee's "from" department
    and designation are resolved from the live employee row when the
    record is read, so they always reflect the current state.

    ``status`` transitions:

      - pending   -> applied    (date reached; applier)
      - applied   -> pending    (date edited into the future)
      - pending   -> cancelled

    Nothing leaves ``cancelled``.
    """

    __tablename__ = "promotion"
    __table_args__ = (
        # One pending, non-deleted promotion per employee.
        db.Index(
            "ux_promotion_pending_employee",
            "employee_id",
            unique=True,
            sqlite_where=db.text(PENDING_PROMOTION_FILTER),
            mssql_where=db.text(PENDING_PROMOTION_FILTER),
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    employee_id = db.Column(
        db.Integer, db.ForeignKey("employee.id"), nullable=False, index=True
    )
    target_department_id = db.Column(
        db.Integer, db.ForeignKey("department.id"), nullable=False
    )
    target_designation_id = db.Column(
        db.Integer, db.ForeignKey("designation.id"), nullable=False
    )
    promotion_date = db.Column(db.Date, nullable=False, index=True)
    promotion_type = db.Column(db.String(50), nullable=False, default="Regular")

    # -- Salary change (all optional) --------------------------------------
    previous_salary = db.Column(db.Numeric(12, 2), nullable=True)
    new_salary = db.Column(db.Numeric(12, 2), nullable=True)
    increment = db.Column(db.Numeric(12, 2), nullable=True)
    increment_percentage = db.Column(db.Numeric(6, 2), nullable=True)

    reason = db.Column(db.Text, nullable=False, default="")
    notes = db.Column(db.Text, nullable=False, default="")
    status = db.Column(
        db.String(20), nullable=False, default=PROMOTION_PENDING, index=True
    )
    applied_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    # -- User attribution --------------------------------------------------
    created_by_id = db.Column(db.String(100), nullable=True)
    created_by_name = db.Column(db.String(200), nullable=True)
    updated_by_id = db.Column(db.String(100), nullable=True)
    updated_by_name = db.Column(db.String(200), nullable=True)

    is_deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    # -- Relationships -----------------------------------------------------
    employee = db.relationship("Employee")
    target_department = db.relationship("Department")
    target_designation = db.relationship("Designation")

    def __repr__(self) -> str:
        return (
            f"<Promotion {self.id} employee={self.employee_id} "
            f"date={self.promotion_date} status={self.status}>"
        )


class Resignation(db.Model):
    """
    Employee-initiated separation.

    ``status`` values: pending, approved, rejected, withdrawn, processed.
    Approval puts the employee on notice; processing marks them resigned.
    """

    __tablename__ = "resignation"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    employee_id = db.Column(
        db.Integer, db.ForeignKey("employee.id"), nullable=False, index=True
    )
    resignation_date = db.Column(db.Date, nullable=False)
    notice_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default=RESIGNATION_PENDING, index=True
    )
    approved_at = db.Column(db.DateTime, nullable=True)
    processed_at = db.Column(db.DateTime, nullable=True)
    created_by_id = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    employee = db.relationship("Employee")

    def __repr__(self) -> str:
        return f"<Resignation {self.id} employee={self.employee_id} status={self.status}>"


class Termination(db.Model):
    """
    Employer-initiated separation.

    ``status`` values: pending, processed, cancelled.  Creating a
    termination puts the employee on notice immediately.
    """

    __tablename__ = "termination"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("company.id"), nullable=False, index=True
    )
    employee_id = db.Column(
        db.Integer, db.ForeignKey("employee.id"), nullable=False, index=True
    )
    termination_type = db.Column(db.String(50), nullable=False)
    termination_date = db.Column(db.Date, nullable=False)
    notice_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.String(20), nullable=False, default=TERMINATION_PENDING, index=True
    )
    processed_at = db.Column(db.DateTime, nullable=True)
    created_by_id = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    employee = db.relationship("Employee")

    def __repr__(self) -> str:
        return f"<Termination {self.id} employee={self.employee_id} status={self.status}>"
