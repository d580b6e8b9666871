"""
Resignation service — employee-initiated separations.

Workflow: pending -> approved -> processed, pending -> rejected, or
pending / approved -> withdrawn.  Approval puts the employee on notice,
processing marks them resigned and withdrawal makes them active again.
A resignation cannot be filed while the employee has another in-flight
lifecycle record (see ``lifecycle_service``).
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from hrcore.extensions import db
from hrcore.models.lifecycle import (
    RESIGNATION_APPROVED,
    RESIGNATION_PENDING,
    RESIGNATION_PROCESSED,
    RESIGNATION_REJECTED,
    RESIGNATION_WITHDRAWN,
    Resignation,
)
from hrcore.models.organization import (
    EMPLOYEE_ACTIVE,
    EMPLOYEE_ON_NOTICE,
    EMPLOYEE_RESIGNED,
    Employee,
)
from hrcore.services.lifecycle_service import (
    ACTION_RESIGNATION,
    validate_employee_lifecycle,
)
from hrcore.services.promotion_service import parse_date
from hrcore.services.results import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("employeeId", "reason", "resignationDate", "noticeDate")


def _get_resignation(company_id: int, resignation_id: int) -> Resignation | None:
    return Resignation.query.filter_by(id=resignation_id, company_id=company_id).first()


def _set_employee_status(employee: Employee | None, status: str) -> None:
    if employee is not None:
        employee.status = status
        employee.updated_at = datetime.now(timezone.utc)


def add_resignation(company_id: int, form: dict) -> ServiceResult:
    """
    File a resignation for an employee.

    Args:
        company_id: Tenant that owns the employee.
        form:       ``employeeId``, ``reason``, ``resignationDate``,
                    ``noticeDate`` and optional ``createdBy``.
    """
    for key in _REQUIRED_FIELDS:
        if not form.get(key):
            return ServiceResult.fail(ErrorKind.VALIDATION, f"Missing field: {key}")

    resignation_date = parse_date(form["resignationDate"])
    notice_date = parse_date(form["noticeDate"])
    if resignation_date is None or notice_date is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid resignation dates")

    try:
        employee_id = int(form["employeeId"])
    except (TypeError, ValueError):
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid employee ID format")

    try:
        lifecycle = validate_employee_lifecycle(
            company_id, employee_id, ACTION_RESIGNATION
        )
        if not lifecycle.is_valid:
            return ServiceResult.fail(ErrorKind.CONFLICT, lifecycle.message)

        employee = Employee.query.filter_by(
            id=employee_id, company_id=company_id, is_deleted=False
        ).first()
        if employee is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Employee not found")

        resignation = Resignation(
            company_id=company_id,
            employee_id=employee.id,
            resignation_date=resignation_date,
            notice_date=notice_date,
            reason=str(form["reason"]).strip(),
            status=RESIGNATION_PENDING,
            created_by_id=form.get("createdBy"),
        )
        db.session.add(resignation)
        db.session.commit()

        logger.info(
            "Resignation %s filed for employee %s (company %s)",
            resignation.id,
            employee.id,
            company_id,
        )
        return ServiceResult.ok({"id": resignation.id}, "Resignation added successfully")

    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error adding resignation (company %s): %s", company_id, exc)
        return ServiceResult.fail(ErrorKind.INTERNAL, str(exc))


def _transition(
    company_id: int,
    resignation_id: int,
    allowed_from: tuple[str, ...],
    new_status: str,
    employee_status: str | None,
) -> ServiceResult:
    try:
        resignation = _get_resignation(company_id, resignation_id)
        if resignation is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Resignation not found")

        if resignation.status not in allowed_from:
            return ServiceResult.fail(
                ErrorKind.CONFLICT,
                f"Resignation is '{resignation.status}', cannot mark it '{new_status}'",
            )

        now = datetime.now(timezone.utc)
        resignation.status = new_status
        resignation.updated_at = now
        if new_status == RESIGNATION_APPROVED:
            resignation.approved_at = now
        elif new_status == RESIGNATION_PROCESSED:
            resignation.processed_at = now

        if employee_status is not None:
            _set_employee_status(resignation.employee, employee_status)

        db.session.commit()
        logger.info(
            "Resignation %s -> %s (company %s)", resignation_id, new_status, company_id
        )
        return ServiceResult.ok({"id": resignation.id, "status": new_status})

    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error updating resignation %s: %s", resignation_id, exc)
        return ServiceResult.fail(ErrorKind.INTERNAL, str(exc))


def approve_resignation(company_id: int, resignation_id: int) -> ServiceResult:
    """Approve a pending resignation; the employee goes on notice."""
    return _transition(
        company_id,
        resignation_id,
        (RESIGNATION_PENDING,),
        RESIGNATION_APPROVED,
        EMPLOYEE_ON_NOTICE,
    )


def reject_resignation(company_id: int, resignation_id: int) -> ServiceResult:
    """Reject a pending resignation."""
    return _transition(
        company_id, resignation_id, (RESIGNATION_PENDING,), RESIGNATION_REJECTED, None
    )


def process_resignation(company_id: int, resignation_id: int) -> ServiceResult:
    """Complete an approved resignation; the employee is marked resigned."""
    return _transition(
        company_id,
        resignation_id,
        (RESIGNATION_APPROVED,),
        RESIGNATION_PROCESSED,
        EMPLOYEE_RESIGNED,
    )


def withdraw_resignation(company_id: int, resignation_id: int) -> ServiceResult:
    """
    Withdraw a resignation that has not been processed yet.

    Both pending and approved resignations can be withdrawn.  The
    employee is set back to active, which ends a notice period started
    by approval.
    """
    return _transition(
        company_id,
        resignation_id,
        (RESIGNATION_PENDING, RESIGNATION_APPROVED),
        RESIGNATION_WITHDRAWN,
        EMPLOYEE_ACTIVE,
    )
