"""Initial HR lifecycle schema

Revision ID: 3a7c91d0b4e2
Revises:
Create Date: 2026-10-18 09:12:44.318205

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a7c91d0b4e2"
down_revision = None
branch_labels = None
depends_on = None

# One pending, non-deleted promotion per employee.
PENDING_FILTER = "status = 'pending' AND is_deleted = 0"


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    """Create the tenant, organization and lifecycle tables."""
    op.create_table(
        "company",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_name", sa.String(length=200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "department",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("department_name", sa.String(length=200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_department_company_id", "department", ["company_id"])

    op.create_table(
        "designation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("designation_name", sa.String(length=200), nullable=False),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_designation_company_id", "designation", ["company_id"])
    op.create_index("ix_designation_department_id", "designation", ["department_id"])

    op.create_table(
        "employee",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_code", sa.String(length=50), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("designation_id", sa.Integer(), nullable=True),
        sa.Column("designation", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("date_of_joining", sa.Date(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"]),
        sa.ForeignKeyConstraint(["designation_id"], ["designation.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employee_company_id", "employee", ["company_id"])
    op.create_index("ix_employee_employee_code", "employee", ["employee_code"])
    op.create_index("ix_employee_department_id", "employee", ["department_id"])
    op.create_index("ix_employee_designation_id", "employee", ["designation_id"])

    op.create_table(
        "promotion",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("target_department_id", sa.Integer(), nullable=False),
        sa.Column("target_designation_id", sa.Integer(), nullable=False),
        sa.Column("promotion_date", sa.Date(), nullable=False),
        sa.Column("promotion_type", sa.String(length=50), nullable=False),
        sa.Column("previous_salary", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("new_salary", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("increment", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("increment_percentage", sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("applied_at", sa.DateTime(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("created_by_id", sa.String(length=100), nullable=True),
        sa.Column("created_by_name", sa.String(length=200), nullable=True),
        sa.Column("updated_by_id", sa.String(length=100), nullable=True),
        sa.Column("updated_by_name", sa.String(length=200), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employee.id"]),
        sa.ForeignKeyConstraint(["target_department_id"], ["department.id"]),
        sa.ForeignKeyConstraint(["target_designation_id"], ["designation.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'applied', 'cancelled')",
            name="CK_promotion_status",
        ),
    )
    op.create_index("ix_promotion_company_id", "promotion", ["company_id"])
    op.create_index("ix_promotion_employee_id", "promotion", ["employee_id"])
    op.create_index("ix_promotion_promotion_date", "promotion", ["promotion_date"])
    op.create_index("ix_promotion_status", "promotion", ["status"])
    op.create_index(
        "ux_promotion_pending_employee",
        "promotion",
        ["employee_id"],
        unique=True,
        sqlite_where=sa.text(PENDING_FILTER),
        mssql_where=sa.text(PENDING_FILTER),
    )

    op.create_table(
        "resignation",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("resignation_date", sa.Date(), nullable=False),
        sa.Column("notice_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("created_by_id", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employee.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_resignation_company_id", "resignation", ["company_id"])
    op.create_index("ix_resignation_employee_id", "resignation", ["employee_id"])
    op.create_index("ix_resignation_status", "resignation", ["status"])

    op.create_table(
        "termination",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("termination_type", sa.String(length=50), nullable=False),
        sa.Column("termination_date", sa.Date(), nullable=False),
        sa.Column("notice_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("created_by_id", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["company.id"]),
        sa.ForeignKeyConstraint(["employee_id"], ["employee.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_termination_company_id", "termination", ["company_id"])
    op.create_index("ix_termination_employee_id", "termination", ["employee_id"])
    op.create_index("ix_termination_status", "termination", ["status"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.String(length=100), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_company_id", "audit_log", ["company_id"])


def downgrade():
    """Drop every table created in upgrade(), children first."""
    op.drop_index("ix_audit_log_company_id", table_name="audit_log")
    op.drop_table("audit_log")

    for table in ("termination", "resignation"):
        op.drop_index(f"ix_{table}_status", table_name=table)
        op.drop_index(f"ix_{table}_employee_id", table_name=table)
        op.drop_index(f"ix_{table}_company_id", table_name=table)
        op.drop_table(table)

    op.drop_index("ux_promotion_pending_employee", table_name="promotion")
    op.drop_index("ix_promotion_status", table_name="promotion")
    op.drop_index("ix_promotion_promotion_date", table_name="promotion")
    op.drop_index("ix_promotion_employee_id", table_name="promotion")
    op.drop_index("ix_promotion_company_id", table_name="promotion")
    op.drop_table("promotion")

    op.drop_index("ix_employee_designation_id", table_name="employee")
    op.drop_index("ix_employee_department_id", table_name="employee")
    op.drop_index("ix_employee_employee_code", table_name="employee")
    op.drop_index("ix_employee_company_id", table_name="employee")
    op.drop_table("employee")

    op.drop_index("ix_designation_department_id", table_name="designation")
    op.drop_index("ix_designation_company_id", table_name="designation")
    op.drop_table("designation")

    op.drop_index("ix_department_company_id", table_name="department")
    op.drop_table("department")

    op.drop_table("company")
