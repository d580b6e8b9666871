"""
Lifecycle service — enforces one in-flight lifecycle action per employee.

An employee can be in at most one of these states at a time:

  - a pending promotion
  - a pending or approved (not yet processed) resignation
  - a pending termination

The promotion, resignation and termination services call
``validate_employee_lifecycle`` before creating a record (and the
promotion service again when a record is re-dated or re-targeted).
The check is a pure read; it never modifies data.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from hrcore.models.lifecycle import (
    PROMOTION_PENDING,
    RESIGNATION_IN_FLIGHT,
    TERMINATION_IN_FLIGHT,
    Promotion,
    Resignation,
    Termination,
)
from hrcore.services.results import LifecycleValidation

logger = logging.getLogger(__name__)

ACTION_PROMOTION = "promotion"
ACTION_RESIGNATION = "resignation"
ACTION_TERMINATION = "termination"

LIFECYCLE_ACTIONS = (ACTION_PROMOTION, ACTION_RESIGNATION, ACTION_TERMINATION)

# Human-readable description of each in-flight record type.
_IN_FLIGHT_LABELS = {
    ACTION_PROMOTION: "a pending promotion",
    ACTION_RESIGNATION: "an active resignation",
    ACTION_TERMINATION: "a pending termination",
}

PENDING_PROMOTION_MESSAGE = (
    "Employee already has a pending promotion. Please complete or cancel "
    "the existing promotion first."
)


def _in_flight_query(action: str, company_id: int, employee_id: int):
    """Return the query selecting in-flight records of one lifecycle type."""
    if action == ACTION_PROMOTION:
        return Promotion.query.filter(
            Promotion.company_id == company_id,
            Promotion.employee_id == employee_id,
            Promotion.status == PROMOTION_PENDING,
            Promotion.is_deleted == False,  # noqa: E712
        )
    if action == ACTION_RESIGNATION:
        return Resignation.query.filter(
            Resignation.company_id == company_id,
            Resignation.employee_id == employee_id,
            Resignation.status.in_(RESIGNATION_IN_FLIGHT),
        )
    return Termination.query.filter(
        Termination.company_id == company_id,
        Termination.employee_id == employee_id,
        Termination.status.in_(TERMINATION_IN_FLIGHT),
    )


def _model_for(action: str):
    return {
        ACTION_PROMOTION: Promotion,
        ACTION_RESIGNATION: Resignation,
        ACTION_TERMINATION: Termination,
    }[action]


def validate_employee_lifecycle(
    company_id: int,
    employee_id: int,
    intended_action: str,
    exclude_record_id: int | None = None,
    same_type_only: bool = False,
) -> LifecycleValidation:
    """
    Check whether an employee may start a new lifecycle action.

    Args:
        company_id:        Tenant that owns the employee.
        employee_id:       Employee to check.
        intended_action:   One of ``promotion``, ``resignation``,
                           ``termination``.
        exclude_record_id: ID of a record of the intended action's own
                           type to ignore (used when an update re-checks
                           its own record).
        same_type_only:    Only look for in-flight records of the
                           intended action's type.  Used for edits that
                           do not start a new in-flight record.

    Returns:
        ``LifecycleValidation`` with ``is_valid=False`` and a message
        naming the conflicting action when the employee already has an
        in-flight lifecycle record, or when the check itself failed.
    """
    if intended_action not in LIFECYCLE_ACTIONS:
        return LifecycleValidation(
            is_valid=False,
            message=f"Unknown lifecycle action: {intended_action}",
        )

    try:
        actions = (intended_action,) if same_type_only else LIFECYCLE_ACTIONS
        for action in actions:
            query = _in_flight_query(action, company_id, employee_id)
            if action == intended_action and exclude_record_id is not None:
                model = _model_for(action)
                query = query.filter(model.id != exclude_record_id)

            conflict = query.first()
            if conflict is None:
                continue

            if action == ACTION_PROMOTION:
                message = PENDING_PROMOTION_MESSAGE
            else:
                message = (
                    f"Employee has {_IN_FLIGHT_LABELS[action]} "
                    f"(#{conflict.id}). Resolve it before starting a "
                    f"{intended_action}."
                )

            logger.info(
                "Lifecycle conflict: company=%s employee=%s intended=%s "
                "existing=%s#%s",
                company_id,
                employee_id,
                intended_action,
                action,
                conflict.id,
            )
            return LifecycleValidation(is_valid=False, message=message)

    except SQLAlchemyError as exc:
        logger.error(
            "Lifecycle validation failed: company=%s employee=%s: %s",
            company_id,
            employee_id,
            exc,
        )
        return LifecycleValidation(
            is_valid=False,
            message=f"Could not verify employee lifecycle status: {exc}",
        )

    return LifecycleValidation(is_valid=True)
