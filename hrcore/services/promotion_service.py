"""
Promotion service — the promotion lifecycle state machine.

A promotion moves an employee to a target department and designation
on ``promotion_date``.  Its status follows:

    pending  --(date reached)-->  applied
    applied  --(date edited into the future)-->  pending
    pending  --(cancel)-->  cancelled

Three paths lead to ``apply_promotion``:

  - ``create_promotion`` when the new record is already due,
  - ``update_promotion`` when an edit makes a pending record due or
    changes the target of an applied one,
  - ``process_pending_promotions``, run daily for every tenant by the
    promotion scheduler.

The applier writes the employee row and the promotion row in two
separate commits, employee first.  If the process dies in between, the
promotion is still ``pending`` and the next sweep applies it again;
writing the same department and designation twice is harmless, so the
sweep gives at-least-once application without a multi-row transaction.

Payload dicts use the controller-facing camelCase keys (``employeeId``,
``promotionTo``, ``promotionDate``, ...).  Every public function returns
a ``ServiceResult`` (or ``SweepResult``) and never raises to its caller.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hrcore.extensions import db
from hrcore.models.lifecycle import (
    PROMOTION_APPLIED,
    PROMOTION_CANCELLED,
    PROMOTION_PENDING,
    Promotion,
)
from hrcore.models.organization import (
    EMPLOYEE_ACTIVE,
    EMPLOYEE_RESIGNED,
    EMPLOYEE_TERMINATED,
    Department,
    Designation,
    Employee,
)
from hrcore.services import audit_service
from hrcore.services.lifecycle_service import (
    ACTION_PROMOTION,
    PENDING_PROMOTION_MESSAGE,
    validate_employee_lifecycle,
)
from hrcore.services.results import ErrorKind, ServiceResult, SweepResult

logger = logging.getLogger(__name__)

ENTITY_TYPE = "hr.promotion"
DEFAULT_PROMOTION_TYPE = "Regular"

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%m/%d/%Y")

_SALARY_FIELDS = {
    "previousSalary": "previous_salary",
    "newSalary": "new_salary",
    "increment": "increment",
    "incrementPercentage": "increment_percentage",
}


# =========================================================================
# Date and input helpers
# =========================================================================


def today() -> date:
    """
    Return the calendar date used for every date gate.

    Inside an app context the date is taken in the configured
    ``TIMEZONE``, the same zone the Celery beat crontab fires in, so a
    sweep at midnight sees the new day.  Outside one it is the host's
    local date.
    """
    if has_app_context():
        zone = ZoneInfo(current_app.config.get("TIMEZONE") or "UTC")
        return datetime.now(zone).date()
    return date.today()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: Any) -> date | None:
    """
    Parse a date from the formats controllers send.

    Accepts ``date``/``datetime`` objects, ISO-8601 strings (with or
    without a time part) and the common day-first / month-first forms.
    Returns None for empty or unparseable input; time of day is dropped.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _is_due(promotion_date: date) -> bool:
    """True when the promotion's date is today or earlier (date-only)."""
    return promotion_date <= today()


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _parse_id(value: Any) -> int | None:
    """Coerce a record ID from int or numeric string; None if invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = _clean(value)
    if text.isdigit() and int(text) > 0:
        return int(text)
    return None


def _parse_amount(value: Any) -> Decimal | None:
    """Coerce a salary amount; anything non-numeric becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def _target_ids(payload: dict) -> tuple[Any, Any]:
    """
    Extract the raw target department and designation IDs.

    Accepts the nested ``promotionTo.department.id`` form and the flat
    legacy keys.  Returns ``(None, None)`` for keys that are absent so
    callers can tell "not provided" from "provided but empty".
    """
    target = payload.get("promotionTo") or {}
    department = target.get("department")
    designation = target.get("designation")

    department_id = None
    if isinstance(department, dict):
        department_id = department.get("id", "")
    elif "departmentId" in target:
        department_id = target.get("departmentId")
    elif "targetDepartmentId" in payload:
        department_id = payload.get("targetDepartmentId")
    elif "departmentId" in payload:
        department_id = payload.get("departmentId")

    designation_id = None
    if isinstance(designation, dict):
        designation_id = designation.get("id", "")
    elif "designationId" in target:
        designation_id = target.get("designationId")
    elif isinstance(payload.get("designationTo"), dict):
        designation_id = payload["designationTo"].get("id", "")
    elif "designationId" in payload:
        designation_id = payload.get("designationId")

    return department_id, designation_id


def _salary_values(salary: dict | None) -> dict[str, Decimal | None]:
    salary = salary or {}
    return {
        column: _parse_amount(salary.get(key))
        for key, column in _SALARY_FIELDS.items()
    }


def _user_ref(user: dict | None) -> tuple[str | None, str | None]:
    user = user or {}
    return _clean(user.get("userId")) or None, _clean(user.get("userName")) or None


def normalize_promotion_input(payload: dict | None) -> dict[str, Any]:
    """
    Normalize a create payload into Promotion column values.

    Strings are trimmed and IDs coerced.  A missing ``promotionDate``
    defaults to today; a present but unparseable one normalizes to None
    and is rejected by validation.
    """
    payload = payload or {}
    employee = payload.get("employee") or {}
    department_raw, designation_raw = _target_ids(payload)

    raw_date = payload.get("promotionDate")
    if raw_date is None or _clean(raw_date) == "":
        promotion_date = today()
    else:
        promotion_date = parse_date(raw_date)

    created_by_id, created_by_name = _user_ref(payload.get("createdBy"))

    values = {
        "employee_id": _parse_id(employee.get("id") or payload.get("employeeId")),
        "target_department_id": _parse_id(department_raw),
        "target_designation_id": _parse_id(designation_raw),
        "promotion_date": promotion_date,
        "promotion_type": _clean(payload.get("promotionType"))
        or DEFAULT_PROMOTION_TYPE,
        "reason": _clean(payload.get("reason")),
        "notes": _clean(payload.get("notes")),
        "created_by_id": created_by_id,
        "created_by_name": created_by_name,
        "updated_by_id": created_by_id,
        "updated_by_name": created_by_name,
    }
    values.update(_salary_values(payload.get("salaryChange")))
    return values


# =========================================================================
# Lookups (always tenant-scoped)
# =========================================================================


def _get_promotion(company_id: int, promotion_id: int) -> Promotion | None:
    return Promotion.query.filter_by(
        id=promotion_id, company_id=company_id, is_deleted=False
    ).first()


def _get_employee(company_id: int, employee_id: int) -> Employee | None:
    return Employee.query.filter_by(
        id=employee_id, company_id=company_id, is_deleted=False
    ).first()


def _get_department(company_id: int, department_id: int) -> Department | None:
    return Department.query.filter_by(
        id=department_id, company_id=company_id, is_deleted=False
    ).first()


def _get_designation(company_id: int, designation_id: int) -> Designation | None:
    return Designation.query.filter_by(
        id=designation_id, company_id=company_id, is_deleted=False
    ).first()


# =========================================================================
# Validation
# =========================================================================


def _validate_required(values: dict) -> ServiceResult | None:
    if values["employee_id"] is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Employee is required")
    if values["target_department_id"] is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Target department is required")
    if values["target_designation_id"] is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Target designation is required")
    if values["promotion_date"] is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion date")
    return None


def _validate_against_employee(
    company_id: int,
    values: dict,
    employee: Employee,
    exclude_promotion_id: int | None = None,
    check_designation_diff: bool = True,
    starts_in_flight: bool = True,
) -> ServiceResult | None:
    """
    Validate a promotion's target and date against the live employee row.

    Args:
        company_id:             Tenant that owns the records.
        values:                 Promotion column values (merged, for updates).
        employee:               The promoted employee, freshly loaded.
        exclude_promotion_id:   The record being updated, if any.
        check_designation_diff: Compare the target designation with the
                                employee's current one.  Skipped when an
                                applied promotion is re-dated without a
                                new target, since the employee already
                                holds that designation.
        starts_in_flight:       False when the edit keeps an applied promotion
                                applied.  The employee-status check and the
                                scan for other lifecycle types are skipped;
                                another pending promotion still conflicts.

    Returns:
        A failed ServiceResult, or None when the promotion is valid.
    """
    if starts_in_flight and employee.status in (EMPLOYEE_RESIGNED, EMPLOYEE_TERMINATED):
        return ServiceResult.fail(
            ErrorKind.CONFLICT,
            f"Cannot promote an employee whose status is '{employee.status}'",
        )

    department = _get_department(company_id, values["target_department_id"])
    if department is None:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, "Target department not found")

    designation = _get_designation(company_id, values["target_designation_id"])
    if designation is None:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, "Target designation not found")

    if (
        designation.department_id is not None
        and designation.department_id != department.id
    ):
        return ServiceResult.fail(
            ErrorKind.VALIDATION,
            "Target designation does not belong to the target department",
        )

    if check_designation_diff and employee.designation_id == designation.id:
        return ServiceResult.fail(
            ErrorKind.VALIDATION,
            "New designation must be different from current designation",
        )

    if (
        employee.date_of_joining is not None
        and values["promotion_date"] < employee.date_of_joining
    ):
        return ServiceResult.fail(
            ErrorKind.VALIDATION,
            "Promotion date cannot be before employee's joining date",
        )

    lifecycle = validate_employee_lifecycle(
        company_id,
        employee.id,
        ACTION_PROMOTION,
        exclude_promotion_id,
        same_type_only=not starts_in_flight,
    )
    if not lifecycle.is_valid:
        return ServiceResult.fail(ErrorKind.CONFLICT, lifecycle.message)

    return None


# =========================================================================
# Serialization
# =========================================================================


def _amount_out(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def _audit_snapshot(promotion: Promotion) -> dict[str, Any]:
    return {
        "employee_id": promotion.employee_id,
        "target_department_id": promotion.target_department_id,
        "target_designation_id": promotion.target_designation_id,
        "promotion_date": promotion.promotion_date,
        "promotion_type": promotion.promotion_type,
        "status": promotion.status,
    }


def serialize_promotion(promotion: Promotion) -> dict[str, Any]:
    """
    Return a promotion as a plain dict for controllers.

    ``promotion_from`` is resolved from the employee's live row, so for
    an applied promotion it matches ``promotion_to``.
    """
    employee = promotion.employee
    department = promotion.target_department
    designation = promotion.target_designation

    return {
        "id": promotion.id,
        "company_id": promotion.company_id,
        "employee": {
            "id": promotion.employee_id,
            "name": employee.full_name if employee else "",
        },
        "promotion_from": {
            "department": {
                "id": employee.department_id if employee else None,
                "name": employee.department if employee else None,
            },
            "designation": {
                "id": employee.designation_id if employee else None,
                "name": employee.designation if employee else None,
            },
        },
        "promotion_to": {
            "department": {
                "id": promotion.target_department_id,
                "name": department.department_name if department else None,
            },
            "designation": {
                "id": promotion.target_designation_id,
                "name": designation.designation_name if designation else None,
            },
        },
        "promotion_date": promotion.promotion_date.isoformat(),
        "promotion_type": promotion.promotion_type,
        "salary_change": {
            "previous_salary": _amount_out(promotion.previous_salary),
            "new_salary": _amount_out(promotion.new_salary),
            "increment": _amount_out(promotion.increment),
            "increment_percentage": _amount_out(promotion.increment_percentage),
        },
        "reason": promotion.reason,
        "notes": promotion.notes,
        "status": promotion.status,
        "applied_at": promotion.applied_at.isoformat() if promotion.applied_at else None,
        "cancelled_at": (
            promotion.cancelled_at.isoformat() if promotion.cancelled_at else None
        ),
        "created_by": {
            "user_id": promotion.created_by_id,
            "user_name": promotion.created_by_name,
        },
        "updated_by": {
            "user_id": promotion.updated_by_id,
            "user_name": promotion.updated_by_name,
        },
        "created_at": promotion.created_at.isoformat() if promotion.created_at else None,
        "updated_at": promotion.updated_at.isoformat() if promotion.updated_at else None,
    }


def _internal_failure(operation: str, company_id: int, record_id, exc) -> ServiceResult:
    db.session.rollback()
    logger.error(
        "Promotion %s failed: company=%s promotion=%s: %s",
        operation,
        company_id,
        record_id,
        exc,
        exc_info=True,
    )
    return ServiceResult.fail(ErrorKind.INTERNAL, str(exc))


def _pending_conflict(operation: str, company_id: int, ref, exc) -> ServiceResult:
    """A concurrent writer stored a pending promotion for the same employee."""
    db.session.rollback()
    logger.warning(
        "Promotion %s hit the pending-promotion index: company=%s ref=%s: %s",
        operation,
        company_id,
        ref,
        exc,
    )
    return ServiceResult.fail(ErrorKind.CONFLICT, PENDING_PROMOTION_MESSAGE)


# =========================================================================
# Applier
# =========================================================================


def apply_promotion(
    company_id: int,
    promotion_id: int,
    reapply: bool = False,
) -> ServiceResult:
    """
    Commit a promotion's target onto the employee and mark it applied.

    Idempotent: applying an already-applied promotion is a successful
    no-op unless ``reapply`` is set, which pushes a corrected target
    onto the employee after an applied promotion was edited.

    Args:
        company_id:   Tenant that owns the promotion.
        promotion_id: Promotion to apply.
        reapply:      Re-run the employee update for an applied record.

    Returns:
        ServiceResult with the serialized promotion, or a failure when
        the record is missing, cancelled, not yet due, or its target
        cannot be resolved.
    """
    try:
        promotion = _get_promotion(company_id, promotion_id)
        if promotion is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Promotion not found")

        if promotion.status == PROMOTION_APPLIED and not reapply:
            logger.debug("Promotion %s already applied", promotion_id)
            return ServiceResult.ok(serialize_promotion(promotion), "Already applied")

        if promotion.status == PROMOTION_CANCELLED:
            return ServiceResult.fail(
                ErrorKind.CONFLICT, "Cannot apply cancelled promotion"
            )

        # Re-checked here even though every caller filters on the date.
        if not _is_due(promotion.promotion_date):
            return ServiceResult.fail(
                ErrorKind.VALIDATION, "Promotion date not yet reached"
            )

        department = _get_department(company_id, promotion.target_department_id)
        if department is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Target department not found")

        designation = _get_designation(company_id, promotion.target_designation_id)
        if designation is None:
            return ServiceResult.fail(
                ErrorKind.NOT_FOUND, "Target designation not found"
            )

        employee = _get_employee(company_id, promotion.employee_id)
        if employee is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Employee not found")

        now = _utcnow()

        # -- Step 1: employee row ------------------------------------------
        employee.department_id = department.id
        employee.department = department.department_name
        employee.designation_id = designation.id
        employee.designation = designation.designation_name
        employee.updated_at = now
        db.session.commit()

        # -- Step 2: promotion row (retry checkpoint) ----------------------
        previous_status = promotion.status
        promotion.status = PROMOTION_APPLIED
        promotion.applied_at = now
        promotion.updated_at = now
        audit_service.log_change(
            company_id=company_id,
            user_id=None,
            action_type="APPLY",
            entity_type=ENTITY_TYPE,
            entity_id=promotion.id,
            previous_value={"status": previous_status},
            new_value={
                "status": PROMOTION_APPLIED,
                "department_id": department.id,
                "designation_id": designation.id,
                "reapply": reapply,
            },
        )
        db.session.commit()

        logger.info(
            "Applied promotion %s for employee %s (company %s): %s / %s",
            promotion.id,
            employee.id,
            company_id,
            department.department_name,
            designation.designation_name,
        )
        return ServiceResult.ok(serialize_promotion(promotion))

    except SQLAlchemyError as exc:
        return _internal_failure("apply", company_id, promotion_id, exc)


# =========================================================================
# Sweeper
# =========================================================================


def process_pending_promotions(company_id: int) -> SweepResult:
    """
    Apply every due pending promotion for one tenant.

    Promotions are applied one at a time in ID order.  A failure is
    counted and logged and the loop moves on; the record stays pending
    and is retried on the next sweep.  Never raises.

    Args:
        company_id: Tenant to sweep.

    Returns:
        SweepResult with applied and failed counts.
    """
    result = SweepResult()

    try:
        due_ids = [
            row.id
            for row in db.session.query(Promotion.id)
            .filter(
                Promotion.company_id == company_id,
                Promotion.status == PROMOTION_PENDING,
                Promotion.is_deleted == False,  # noqa: E712
                Promotion.promotion_date <= today(),
            )
            .order_by(Promotion.id)
            .all()
        ]
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error(
            "Could not load pending promotions for company %s: %s", company_id, exc
        )
        return result

    logger.info(
        "Found %d pending promotions to process for company %s",
        len(due_ids),
        company_id,
    )

    for promotion_id in due_ids:
        try:
            outcome = apply_promotion(company_id, promotion_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            db.session.rollback()
            outcome = ServiceResult.fail(ErrorKind.INTERNAL, str(exc))

        if outcome.done:
            result.applied += 1
        else:
            result.failed += 1
            logger.error(
                "Failed to apply promotion %s (company %s): %s",
                promotion_id,
                company_id,
                outcome.error,
            )

    logger.info(
        "Processed promotions for company %s: %d applied, %d failed",
        company_id,
        result.applied,
        result.failed,
    )
    return result


# =========================================================================
# Record store: create / update / cancel / delete
# =========================================================================


def create_promotion(company_id: int, payload: dict) -> ServiceResult:
    """
    Validate and store a new promotion, applying it at once when due.

    A due promotion that fails to apply is still created (as pending) and
    will be retried by the scheduler.

    Args:
        company_id: Tenant creating the promotion.
        payload:    Controller payload (``employeeId``, ``promotionTo``,
                    ``promotionDate``, ``promotionType``,
                    ``salaryChange``, ``reason``, ``notes``,
                    ``createdBy``).

    Returns:
        ServiceResult with the serialized promotion as stored after any
        immediate application.
    """
    values = normalize_promotion_input(payload)
    failure = _validate_required(values)
    if failure is not None:
        logger.warning("Promotion rejected (company %s): %s", company_id, failure.error)
        return failure

    try:
        employee = _get_employee(company_id, values["employee_id"])
        if employee is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Employee not found")

        failure = _validate_against_employee(company_id, values, employee)
        if failure is not None:
            logger.warning(
                "Promotion rejected (company %s, employee %s): %s",
                company_id,
                employee.id,
                failure.error,
            )
            return failure

        promotion = Promotion(
            company_id=company_id,
            status=PROMOTION_PENDING,
            is_deleted=False,
            **values,
        )
        db.session.add(promotion)
        db.session.flush()

        audit_service.log_change(
            company_id=company_id,
            user_id=values["created_by_id"],
            action_type="CREATE",
            entity_type=ENTITY_TYPE,
            entity_id=promotion.id,
            new_value=_audit_snapshot(promotion),
        )
        db.session.commit()
        promotion_id = promotion.id

        logger.info(
            "Created promotion %s for employee %s (company %s), effective %s",
            promotion_id,
            employee.id,
            company_id,
            values["promotion_date"],
        )
    except IntegrityError as exc:
        return _pending_conflict("create", company_id, values["employee_id"], exc)
    except SQLAlchemyError as exc:
        return _internal_failure("create", company_id, None, exc)

    if _is_due(values["promotion_date"]):
        outcome = apply_promotion(company_id, promotion_id)
        if not outcome.done:
            logger.warning(
                "Promotion %s is due but could not be applied yet: %s",
                promotion_id,
                outcome.error,
            )

    try:
        return ServiceResult.ok(
            serialize_promotion(_get_promotion(company_id, promotion_id))
        )
    except SQLAlchemyError as exc:
        return _internal_failure("create", company_id, promotion_id, exc)


def _update_values(payload: dict) -> tuple[dict[str, Any], ServiceResult | None]:
    """Translate an update payload into column changes (or a failure)."""
    changes: dict[str, Any] = {}

    if payload.get("promotionDate"):
        promotion_date = parse_date(payload["promotionDate"])
        if promotion_date is None:
            return {}, ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion date")
        changes["promotion_date"] = promotion_date

    if payload.get("promotionType"):
        changes["promotion_type"] = _clean(payload["promotionType"])
    if "reason" in payload:
        changes["reason"] = _clean(payload["reason"])
    if "notes" in payload:
        changes["notes"] = _clean(payload["notes"])

    department_raw, designation_raw = _target_ids(payload)
    if department_raw is not None:
        department_id = _parse_id(department_raw)
        if department_id is None:
            return {}, ServiceResult.fail(
                ErrorKind.VALIDATION, "Target department is required"
            )
        changes["target_department_id"] = department_id
    if designation_raw is not None:
        designation_id = _parse_id(designation_raw)
        if designation_id is None:
            return {}, ServiceResult.fail(
                ErrorKind.VALIDATION, "New designation is required"
            )
        changes["target_designation_id"] = designation_id

    if "salaryChange" in payload:
        changes.update(_salary_values(payload["salaryChange"]))

    if payload.get("updatedBy"):
        changes["updated_by_id"], changes["updated_by_name"] = _user_ref(
            payload["updatedBy"]
        )

    return changes, None


def update_promotion(company_id: int, promotion_id: Any, payload: dict) -> ServiceResult:
    """
    Merge changes into a promotion and reconcile its status.

    Re-validation runs only when the date or the target changes.  An
    applied promotion whose new date is still due stays applied, so the
    employee-status and cross-type lifecycle checks are skipped for it;
    only another pending promotion blocks the edit.  After the update is
    stored the status is reconciled:

      - applied and now dated in the future  -> back to pending,
        ``applied_at`` cleared (the employee row is left as is and is
        rewritten when the new date arrives);
      - pending and now due                  -> applied;
      - applied and the target changed       -> re-applied.

    Args:
        company_id:   Tenant that owns the promotion.
        promotion_id: Promotion to update (int or numeric string).
        payload:      Fields to change, same keys as ``create_promotion``
                      plus ``updatedBy``.

    Returns:
        ServiceResult with the serialized promotion after reconciliation.
    """
    record_id = _parse_id(promotion_id)
    if record_id is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion ID format")

    changes, failure = _update_values(payload or {})
    if failure is not None:
        return failure

    try:
        promotion = _get_promotion(company_id, record_id)
        if promotion is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Promotion not found")

        if promotion.status == PROMOTION_CANCELLED:
            return ServiceResult.fail(
                ErrorKind.CONFLICT, "Cannot modify a cancelled promotion"
            )

        changes = {
            column: value
            for column, value in changes.items()
            if getattr(promotion, column) != value
        }
        date_changed = "promotion_date" in changes
        designation_changed = "target_designation_id" in changes
        target_changed = designation_changed or "target_department_id" in changes
        previous_status = promotion.status

        if date_changed or target_changed:
            merged = {
                "target_department_id": changes.get(
                    "target_department_id", promotion.target_department_id
                ),
                "target_designation_id": changes.get(
                    "target_designation_id", promotion.target_designation_id
                ),
                "promotion_date": changes.get(
                    "promotion_date", promotion.promotion_date
                ),
            }
            employee = _get_employee(company_id, promotion.employee_id)
            if employee is None:
                return ServiceResult.fail(ErrorKind.NOT_FOUND, "Employee not found")

            # A re-dated applied promotion that is still due stays applied.
            stays_applied = previous_status == PROMOTION_APPLIED and _is_due(
                merged["promotion_date"]
            )
            failure = _validate_against_employee(
                company_id,
                merged,
                employee,
                exclude_promotion_id=promotion.id,
                check_designation_diff=(
                    previous_status != PROMOTION_APPLIED or designation_changed
                ),
                starts_in_flight=not stays_applied,
            )
            if failure is not None:
                logger.warning(
                    "Promotion %s update rejected: %s", promotion.id, failure.error
                )
                return failure

        previous = {column: getattr(promotion, column) for column in changes}
        for column, value in changes.items():
            setattr(promotion, column, value)
        promotion.updated_at = _utcnow()

        audit_service.log_change(
            company_id=company_id,
            user_id=promotion.updated_by_id,
            action_type="UPDATE",
            entity_type=ENTITY_TYPE,
            entity_id=promotion.id,
            previous_value=previous,
            new_value=changes,
        )
        db.session.commit()

        # -- Status reconciliation -----------------------------------------
        if previous_status == PROMOTION_APPLIED and not _is_due(promotion.promotion_date):
            logger.info(
                "Promotion %s moved to %s, reverting to pending",
                promotion.id,
                promotion.promotion_date,
            )
            promotion.status = PROMOTION_PENDING
            promotion.applied_at = None
            audit_service.log_change(
                company_id=company_id,
                user_id=promotion.updated_by_id,
                action_type="REVERT",
                entity_type=ENTITY_TYPE,
                entity_id=promotion.id,
                previous_value={"status": PROMOTION_APPLIED},
                new_value={"status": PROMOTION_PENDING},
            )
            db.session.commit()
        elif promotion.status == PROMOTION_PENDING and _is_due(promotion.promotion_date):
            outcome = apply_promotion(company_id, record_id)
            if not outcome.done:
                logger.warning(
                    "Promotion %s is due but could not be applied: %s",
                    record_id,
                    outcome.error,
                )
        elif promotion.status == PROMOTION_APPLIED and target_changed:
            logger.info("Applied promotion %s re-targeted, reapplying", record_id)
            outcome = apply_promotion(company_id, record_id, reapply=True)
            if not outcome.done:
                logger.warning(
                    "Promotion %s could not be reapplied: %s", record_id, outcome.error
                )

        return ServiceResult.ok(
            serialize_promotion(_get_promotion(company_id, record_id))
        )

    except IntegrityError as exc:
        return _pending_conflict("update", company_id, record_id, exc)
    except SQLAlchemyError as exc:
        return _internal_failure("update", company_id, record_id, exc)


def cancel_promotion(
    company_id: int,
    promotion_id: Any,
    cancelled_by: dict | None = None,
) -> ServiceResult:
    """
    Cancel a pending promotion.  Applied and cancelled ones are refused.

    Args:
        company_id:   Tenant that owns the promotion.
        promotion_id: Promotion to cancel.
        cancelled_by: Optional ``{"userId", "userName"}`` attribution.
    """
    record_id = _parse_id(promotion_id)
    if record_id is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion ID format")

    try:
        promotion = _get_promotion(company_id, record_id)
        if promotion is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Promotion not found")

        if promotion.status != PROMOTION_PENDING:
            return ServiceResult.fail(
                ErrorKind.CONFLICT,
                f"Only pending promotions can be cancelled (status is "
                f"'{promotion.status}')",
            )

        user_id, user_name = _user_ref(cancelled_by)
        now = _utcnow()
        promotion.status = PROMOTION_CANCELLED
        promotion.cancelled_at = now
        promotion.updated_at = now
        if user_id:
            promotion.updated_by_id = user_id
            promotion.updated_by_name = user_name

        audit_service.log_change(
            company_id=company_id,
            user_id=user_id,
            action_type="CANCEL",
            entity_type=ENTITY_TYPE,
            entity_id=promotion.id,
            previous_value={"status": PROMOTION_PENDING},
            new_value={"status": PROMOTION_CANCELLED},
        )
        db.session.commit()

        logger.info("Cancelled promotion %s (company %s)", record_id, company_id)
        return ServiceResult.ok(serialize_promotion(promotion))

    except SQLAlchemyError as exc:
        return _internal_failure("cancel", company_id, record_id, exc)


def delete_promotion(
    company_id: int,
    promotion_id: Any,
    deleted_by: str | None = None,
) -> ServiceResult:
    """
    Permanently delete a promotion.

    Deleting an applied promotion does not touch the employee: the
    department and designation it set stay in place.

    Args:
        company_id:   Tenant that owns the promotion.
        promotion_id: Promotion to delete.
        deleted_by:   Optional user ID recorded in the audit log.
    """
    record_id = _parse_id(promotion_id)
    if record_id is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion ID format")

    try:
        promotion = _get_promotion(company_id, record_id)
        if promotion is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Promotion not found")

        snapshot = _audit_snapshot(promotion)
        db.session.delete(promotion)
        audit_service.log_change(
            company_id=company_id,
            user_id=deleted_by,
            action_type="DELETE",
            entity_type=ENTITY_TYPE,
            entity_id=record_id,
            previous_value=snapshot,
        )
        db.session.commit()

        logger.info(
            "Deleted promotion %s (company %s, status was %s)",
            record_id,
            company_id,
            snapshot["status"],
        )
        return ServiceResult.ok(message="Promotion deleted successfully")

    except SQLAlchemyError as exc:
        return _internal_failure("delete", company_id, record_id, exc)


# =========================================================================
# Read side
# =========================================================================


def get_promotions(company_id: int, filters: dict | None = None) -> ServiceResult:
    """
    List promotions for a tenant, newest effective date first.

    Supported filters: ``employeeId``, ``departmentId`` (target
    department), ``promotionType``, ``status``, ``startDate``,
    ``endDate``.
    """
    filters = filters or {}
    try:
        query = Promotion.query.filter(
            Promotion.company_id == company_id,
            Promotion.is_deleted == False,  # noqa: E712
        )

        employee_id = _parse_id(filters.get("employeeId"))
        if employee_id is not None:
            query = query.filter(Promotion.employee_id == employee_id)

        department_id = _parse_id(filters.get("departmentId"))
        if department_id is not None:
            query = query.filter(Promotion.target_department_id == department_id)

        if filters.get("promotionType"):
            query = query.filter(Promotion.promotion_type == filters["promotionType"])
        if filters.get("status"):
            query = query.filter(Promotion.status == filters["status"])

        start_date = parse_date(filters.get("startDate"))
        if start_date is not None:
            query = query.filter(Promotion.promotion_date >= start_date)
        end_date = parse_date(filters.get("endDate"))
        if end_date is not None:
            query = query.filter(Promotion.promotion_date <= end_date)

        promotions = query.order_by(
            desc(Promotion.promotion_date), desc(Promotion.created_at), desc(Promotion.id)
        ).all()
        return ServiceResult.ok([serialize_promotion(p) for p in promotions])

    except SQLAlchemyError as exc:
        return _internal_failure("list", company_id, None, exc)


def get_promotion_by_id(company_id: int, promotion_id: Any) -> ServiceResult:
    """Return one promotion of the tenant."""
    record_id = _parse_id(promotion_id)
    if record_id is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid promotion ID format")
    try:
        promotion = _get_promotion(company_id, record_id)
        if promotion is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Promotion not found")
        return ServiceResult.ok(serialize_promotion(promotion))
    except SQLAlchemyError as exc:
        return _internal_failure("get", company_id, record_id, exc)


def get_employees_for_promotion(
    company_id: int,
    department_id: Any = None,
) -> ServiceResult:
    """
    List active employees eligible for selection in a promotion form.

    The designation name is read from the designation table rather than
    the employee's cached display name, so a renamed designation shows
    its current name.
    """
    try:
        query = Employee.query.filter(
            Employee.company_id == company_id,
            Employee.is_deleted == False,  # noqa: E712
            Employee.status == EMPLOYEE_ACTIVE,
        )
        dept_id = _parse_id(department_id)
        if dept_id is not None:
            query = query.filter(Employee.department_id == dept_id)

        employees = query.order_by(Employee.first_name, Employee.last_name).all()

        designation_ids = {e.designation_id for e in employees if e.designation_id}
        names = {}
        if designation_ids:
            names = {
                d.id: d.designation_name
                for d in Designation.query.filter(
                    Designation.id.in_(designation_ids)
                ).all()
            }

        return ServiceResult.ok(
            [
                {
                    "id": e.id,
                    "name": e.full_name,
                    "email": e.email,
                    "employee_code": e.employee_code,
                    "department_id": e.department_id,
                    "department": e.department or "",
                    "designation_id": e.designation_id,
                    "designation": names.get(e.designation_id, e.designation or ""),
                }
                for e in employees
            ]
        )
    except SQLAlchemyError as exc:
        return _internal_failure("list-employees", company_id, None, exc)


def get_designations_for_department(company_id: int, department_id: Any) -> ServiceResult:
    """List a department's designations, most senior first."""
    dept_id = _parse_id(department_id)
    if dept_id is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, "Department ID is required")
    try:
        designations = (
            Designation.query.filter(
                Designation.company_id == company_id,
                Designation.department_id == dept_id,
                Designation.is_deleted == False,  # noqa: E712
            )
            .order_by(desc(Designation.level), Designation.designation_name)
            .all()
        )
        return ServiceResult.ok(
            [
                {
                    "id": d.id,
                    "name": d.designation_name,
                    "level": d.level,
                    "department_id": d.department_id,
                }
                for d in designations
            ]
        )
    except SQLAlchemyError as exc:
        return _internal_failure("list-designations", company_id, None, exc)
