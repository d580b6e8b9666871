"""
Termination service — employer-initiated separations.

Filing a termination puts the employee on notice straight away.
Processing marks them terminated; cancelling puts them back to active.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from hrcore.extensions import db
from hrcore.models.lifecycle import (
    TERMINATION_CANCELLED,
    TERMINATION_PENDING,
    TERMINATION_PROCESSED,
    Termination,
)
from hrcore.models.organization import (
    EMPLOYEE_ACTIVE,
    EMPLOYEE_ON_NOTICE,
    EMPLOYEE_TERMINATED,
    Employee,
)
from hrcore.services.lifecycle_service import (
    ACTION_TERMINATION,
    validate_employee_lifecycle,
)
from hrcore.services.promotion_service import parse_date
from hrcore.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = (
    "employeeId",
    "reason",
    "terminationDate",
    "terminationType",
    "noticeDate",
)


def add_termination(company_id: int, form: dict, user_id: str | None = None) -> ServiceResult:
    """
    File a termination and put the employee on notice.

    Args:
        company_id: Tenant that owns the employee.
        form:       ``employeeId``, ``reason``, ``terminationDate``,
                    ``terminationType``, ``noticeDate``.
        user_id:    ID of the user filing the termination.
    """
    for key in _REQUIRED_FIELDS:
        if not form.get(key):
            return ServiceResult.fail(ErrorKind.VALIDATION, f"Missing field: {key}")

    termination_date = parse_date(form["terminationDate"])
    notice_date = parse_date(form["noticeDate"])
    if termination_date is None or notice_date is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid termination dates")

    try:
        employee_id = int(form["employeeId"])
    except (TypeError, ValueError):
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid employee ID format")

    try:
        lifecycle = validate_employee_lifecycle(
            company_id, employee_id, ACTION_TERMINATION
        )
        if not lifecycle.is_valid:
            return ServiceResult.fail(ErrorKind.CONFLICT, lifecycle.message)

        employee = Employee.query.filter_by(
            id=employee_id, company_id=company_id, is_deleted=False
        ).first()
        if employee is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Employee not found")

        termination = Termination(
            company_id=company_id,
            employee_id=employee.id,
            termination_type=str(form["terminationType"]).strip(),
            termination_date=termination_date,
            notice_date=notice_date,
            reason=str(form["reason"]).strip(),
            status=TERMINATION_PENDING,
            created_by_id=user_id,
        )
        db.session.add(termination)
        employee.status = EMPLOYEE_ON_NOTICE
        employee.updated_at = datetime.now(timezone.utc)
        db.session.commit()

        logger.info(
            "Termination %s filed for employee %s (company %s); employee on notice",
            termination.id,
            employee.id,
            company_id,
        )
        return ServiceResult.ok({"id": termination.id}, "Termination added successfully")

    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error adding termination (company %s): %s", company_id, exc)
        return ServiceResult.fail(ErrorKind.INTERNAL, str(exc))


def _close(
    company_id: int,
    termination_id: int,
    new_status: str,
    employee_status: str,
) -> ServiceResult:
    try:
        termination = Termination.query.filter_by(
            id=termination_id, company_id=company_id
        ).first()
        if termination is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Termination not found")

        if termination.status != TERMINATION_PENDING:
            return ServiceResult.fail(
                ErrorKind.CONFLICT,
                f"Termination is already '{termination.status}'",
            )

        now = datetime.now(timezone.utc)
        termination.status = new_status
        termination.updated_at = now
        if new_status == TERMINATION_PROCESSED:
            termination.processed_at = now

        employee = termination.employee
        if employee is not None:
            employee.status = employee_status
            employee.updated_at = now

        db.session.commit()
        logger.info(
            "Termination %s -> %s (company %s)", termination_id, new_status, company_id
        )
        return ServiceResult.ok({"id": termination.id, "status": new_status})

    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error updating termination %s: %s", termination_id, exc)
        return ServiceResult.fail(ErrorKind.INTERNAL, str(exc))


def process_termination(company_id: int, termination_id: int) -> ServiceResult:
    """Complete a pending termination; the employee is marked terminated."""
    return _close(company_id, termination_id, TERMINATION_PROCESSED, EMPLOYEE_TERMINATED)


def cancel_termination(company_id: int, termination_id: int) -> ServiceResult:
    """Cancel a pending termination; the employee returns to active."""
    return _close(company_id, termination_id, TERMINATION_CANCELLED, EMPLOYEE_ACTIVE)
