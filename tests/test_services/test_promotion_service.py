"""
Tests for promotion_service — record store, applier and tenant sweep.

Every test pins "today" to 2025-06-01 so the date gates are
deterministic.  The seeded employee is an Engineer in Engineering who
joined on 2020-01-01.
"""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from hrcore.extensions import db
from hrcore.models.lifecycle import (
    PROMOTION_APPLIED,
    PROMOTION_CANCELLED,
    PROMOTION_PENDING,
    Promotion,
)
from hrcore.models.organization import (
    EMPLOYEE_ON_NOTICE,
    EMPLOYEE_RESIGNED,
    EMPLOYEE_TERMINATED,
)
from hrcore.services import (
    audit_service,
    promotion_service,
    resignation_service,
    termination_service,
)
from hrcore.services.results import ErrorKind, LifecycleValidation

TODAY = date(2025, 6, 1)


def _payload(seed, designation="senior", department="engineering", when="2025-06-01", **extra):
    """Build a create payload in the nested controller shape."""
    payload = {
        "employeeId": seed["employee"].id,
        "promotionTo": {
            "department": {"id": seed[department].id},
            "designation": {"id": seed[designation].id},
        },
        "promotionDate": when,
        "reason": "Strong delivery",
    }
    payload.update(extra)
    return payload


def _history(seed, promotion_id):
    entries = audit_service.get_entity_history(
        seed["company"].id, promotion_service.ENTITY_TYPE, promotion_id
    )
    return [entry.action_type for entry in entries]


class TestCreatePromotion:
    """Creating promotions, immediate application and validation."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today):
        self.seed = tenant
        self.company_id = tenant["company"].id
        self.employee = tenant["employee"]
        fixed_today(TODAY)

    def test_future_promotion_is_stored_pending(self):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-07-01")
        )

        assert result.done
        assert result.data["status"] == PROMOTION_PENDING
        assert result.data["applied_at"] is None
        assert self.employee.designation_id == self.seed["engineer"].id

    def test_due_promotion_is_applied_immediately(self):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-06-01")
        )

        assert result.done
        assert result.data["status"] == PROMOTION_APPLIED
        assert result.data["applied_at"] is not None
        assert self.employee.designation_id == self.seed["senior"].id
        assert self.employee.designation == "Senior Engineer"
        assert self.employee.department == "Engineering"
        # The "from" side reflects the live employee row.
        assert (
            result.data["promotion_from"]["designation"]
            == result.data["promotion_to"]["designation"]
        )

    def test_missing_date_defaults_to_today(self):
        payload = _payload(self.seed)
        del payload["promotionDate"]

        result = promotion_service.create_promotion(self.company_id, payload)

        assert result.done
        assert result.data["promotion_date"] == "2025-06-01"
        assert result.data["status"] == PROMOTION_APPLIED

    def test_flat_legacy_target_keys_are_accepted(self):
        payload = {
            "employeeId": str(self.employee.id),
            "departmentId": self.seed["engineering"].id,
            "designationTo": {"id": self.seed["tech_lead"].id},
            "promotionDate": "2025-08-15",
        }

        result = promotion_service.create_promotion(self.company_id, payload)

        assert result.done
        assert result.data["promotion_to"]["designation"]["name"] == "Tech Lead"

    def test_salary_and_attribution_are_stored(self):
        payload = _payload(
            self.seed,
            when="2025-09-01",
            promotionType="Merit",
            salaryChange={"previousSalary": "50000", "newSalary": 55000, "increment": 5000},
            createdBy={"userId": "u-7", "userName": "Pat HR"},
        )

        result = promotion_service.create_promotion(self.company_id, payload)

        assert result.done
        assert result.data["promotion_type"] == "Merit"
        assert result.data["salary_change"]["previous_salary"] == 50000.0
        assert result.data["salary_change"]["new_salary"] == 55000.0
        assert result.data["salary_change"]["increment_percentage"] is None
        assert result.data["created_by"] == {"user_id": "u-7", "user_name": "Pat HR"}

    @pytest.mark.parametrize(
        "mutate, message",
        [
            (lambda p: p.pop("employeeId"), "Employee is required"),
            (lambda p: p["promotionTo"].pop("department"), "Target department is required"),
            (lambda p: p["promotionTo"].pop("designation"), "Target designation is required"),
            (lambda p: p.update(promotionDate="not-a-date"), "Invalid promotion date"),
        ],
    )
    def test_required_fields(self, mutate, message):
        payload = _payload(self.seed)
        mutate(payload)

        result = promotion_service.create_promotion(self.company_id, payload)

        assert not result.done
        assert result.kind == ErrorKind.VALIDATION
        assert result.error == message
        assert Promotion.query.count() == 0

    def test_same_designation_is_rejected(self):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, designation="engineer")
        )

        assert not result.done
        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "New designation must be different from current designation"

    def test_date_before_joining_is_rejected(self):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2019-12-31")
        )

        assert not result.done
        assert result.error == "Promotion date cannot be before employee's joining date"

    def test_designation_outside_target_department_is_rejected(self):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, department="sales", designation="senior")
        )

        assert not result.done
        assert result.kind == ErrorKind.VALIDATION

    def test_unknown_target_is_not_found(self):
        payload = _payload(self.seed)
        payload["promotionTo"]["designation"]["id"] = 9999

        result = promotion_service.create_promotion(self.company_id, payload)

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Target designation not found"

    def test_employee_of_another_company_is_not_found(self, make_tenant):
        other = make_tenant("Other Co")

        result = promotion_service.create_promotion(other["company"].id, _payload(self.seed))

        assert not result.done
        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Employee not found"

    def test_second_pending_promotion_is_a_conflict(self):
        first = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-07-01")
        )
        second = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, designation="tech_lead", when="2025-08-01")
        )

        assert first.done
        assert not second.done
        assert second.kind == ErrorKind.CONFLICT
        assert "already has a pending promotion" in second.error
        assert Promotion.query.count() == 1

    def test_concurrent_pending_promotion_is_a_conflict(self, monkeypatch):
        promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-07-01")
        )
        # A second request that passed validation before the first committed.
        monkeypatch.setattr(
            promotion_service,
            "validate_employee_lifecycle",
            lambda *args, **kwargs: LifecycleValidation(is_valid=True),
        )

        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, designation="tech_lead", when="2025-08-01")
        )

        assert result.kind == ErrorKind.CONFLICT
        assert "already has a pending promotion" in result.error
        assert Promotion.query.count() == 1

    def test_database_rejects_second_pending_row(self):
        for designation in ("senior", "tech_lead"):
            db.session.add(
                Promotion(
                    company_id=self.company_id,
                    employee_id=self.employee.id,
                    target_department_id=self.seed["engineering"].id,
                    target_designation_id=self.seed[designation].id,
                    promotion_date=date(2025, 9, 1),
                    status=PROMOTION_PENDING,
                    is_deleted=False,
                )
            )

        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_applied_promotion_does_not_block_the_next_one(self):
        promotion_service.create_promotion(self.company_id, _payload(self.seed))

        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, designation="tech_lead", when="2026-01-01")
        )

        assert result.done

    def test_pending_termination_blocks_promotion(self):
        termination_service.add_termination(
            self.company_id,
            {
                "employeeId": self.employee.id,
                "reason": "Restructuring",
                "terminationDate": "2025-07-01",
                "terminationType": "Layoff",
                "noticeDate": "2025-06-01",
            },
        )
        assert self.employee.status == EMPLOYEE_ON_NOTICE

        result = promotion_service.create_promotion(self.company_id, _payload(self.seed))

        assert result.kind == ErrorKind.CONFLICT
        assert "pending termination" in result.error

    def test_resigned_employee_cannot_be_promoted(self):
        self.employee.status = EMPLOYEE_RESIGNED
        db.session.commit()

        result = promotion_service.create_promotion(self.company_id, _payload(self.seed))

        assert result.kind == ErrorKind.CONFLICT

    def test_audit_trail_for_due_promotion(self):
        result = promotion_service.create_promotion(self.company_id, _payload(self.seed))

        assert _history(self.seed, result.data["id"]) == ["APPLY", "CREATE"]


class TestApplyPromotion:
    """The applier: idempotence, date gate and reapply."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today):
        self.seed = tenant
        self.company_id = tenant["company"].id
        self.employee = tenant["employee"]
        self.pin = fixed_today
        fixed_today(TODAY)

    def _pending(self, when="2025-07-01", designation="senior"):
        result = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, designation=designation, when=when)
        )
        assert result.data["status"] == PROMOTION_PENDING
        return result.data["id"]

    def test_apply_is_idempotent(self):
        promotion_id = self._pending()
        self.pin(date(2025, 7, 1))

        first = promotion_service.apply_promotion(self.company_id, promotion_id)
        applied_at = first.data["applied_at"]
        second = promotion_service.apply_promotion(self.company_id, promotion_id)

        assert first.done and second.done
        assert second.message == "Already applied"
        assert second.data["applied_at"] == applied_at
        assert self.employee.designation_id == self.seed["senior"].id
        assert _history(self.seed, promotion_id).count("APPLY") == 1

    def test_not_yet_due_is_refused(self):
        promotion_id = self._pending()

        result = promotion_service.apply_promotion(self.company_id, promotion_id)

        assert not result.done
        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "Promotion date not yet reached"
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_PENDING
        assert self.employee.designation_id == self.seed["engineer"].id

    def test_cancelled_is_refused(self):
        promotion_id = self._pending()
        promotion_service.cancel_promotion(self.company_id, promotion_id)
        self.pin(date(2025, 7, 1))

        result = promotion_service.apply_promotion(self.company_id, promotion_id)

        assert result.kind == ErrorKind.CONFLICT
        assert result.error == "Cannot apply cancelled promotion"

    def test_missing_promotion(self):
        result = promotion_service.apply_promotion(self.company_id, 424242)

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.error == "Promotion not found"

    def test_other_tenant_cannot_apply(self, make_tenant):
        other = make_tenant("Other Co")
        promotion_id = self._pending()
        self.pin(date(2025, 7, 1))

        result = promotion_service.apply_promotion(other["company"].id, promotion_id)

        assert result.kind == ErrorKind.NOT_FOUND
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_PENDING

    def test_reapply_pushes_corrected_target(self):
        created = promotion_service.create_promotion(self.company_id, _payload(self.seed))
        promotion = db.session.get(Promotion, created.data["id"])
        promotion.target_designation_id = self.seed["tech_lead"].id
        db.session.commit()

        plain = promotion_service.apply_promotion(self.company_id, promotion.id)
        assert plain.message == "Already applied"
        assert self.employee.designation_id == self.seed["senior"].id

        result = promotion_service.apply_promotion(self.company_id, promotion.id, reapply=True)

        assert result.done
        assert self.employee.designation_id == self.seed["tech_lead"].id
        assert self.employee.designation == "Tech Lead"


class TestProcessPendingPromotions:
    """The per-tenant sweep."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today, add_employee):
        self.seed = tenant
        self.company_id = tenant["company"].id
        self.pin = fixed_today
        self.add_employee = add_employee
        fixed_today(TODAY)

    def _schedule(self, employee, when, designation="senior"):
        payload = _payload(self.seed, designation=designation, when=when)
        payload["employeeId"] = employee.id
        result = promotion_service.create_promotion(self.company_id, payload)
        assert result.done, result.error
        return result.data["id"]

    def test_applies_only_due_promotions(self):
        grace = self.add_employee(self.seed, "Grace")
        due_id = self._schedule(self.seed["employee"], "2025-06-10")
        later_id = self._schedule(grace, "2025-06-20")

        self.pin(date(2025, 6, 10))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.to_dict() == {"applied": 1, "failed": 0}
        assert db.session.get(Promotion, due_id).status == PROMOTION_APPLIED
        assert db.session.get(Promotion, later_id).status == PROMOTION_PENDING
        assert grace.designation_id == self.seed["engineer"].id

    def test_failure_does_not_stop_the_sweep(self):
        grace = self.add_employee(self.seed, "Grace")
        good_id = self._schedule(self.seed["employee"], "2025-06-10")
        broken = Promotion(
            company_id=self.company_id,
            employee_id=grace.id,
            target_department_id=self.seed["engineering"].id,
            target_designation_id=9999,
            promotion_date=date(2025, 6, 5),
            promotion_type="Regular",
            reason="",
            notes="",
            status=PROMOTION_PENDING,
            is_deleted=False,
        )
        db.session.add(broken)
        db.session.commit()

        self.pin(date(2025, 6, 10))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.applied == 1
        assert result.failed == 1
        assert db.session.get(Promotion, good_id).status == PROMOTION_APPLIED
        assert db.session.get(Promotion, broken.id).status == PROMOTION_PENDING

    def test_cancelled_and_deleted_are_skipped(self):
        grace = self.add_employee(self.seed, "Grace")
        cancelled_id = self._schedule(self.seed["employee"], "2025-06-10")
        deleted_id = self._schedule(grace, "2025-06-10")
        promotion_service.cancel_promotion(self.company_id, cancelled_id)
        promotion_service.delete_promotion(self.company_id, deleted_id)

        self.pin(date(2025, 6, 10))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.to_dict() == {"applied": 0, "failed": 0}
        assert self.seed["employee"].designation_id == self.seed["engineer"].id

    def test_interrupted_apply_is_completed_by_the_next_sweep(self):
        """
        The employee row was written but the process died before the
        promotion was marked applied.  The sweep finishes the job.
        """
        promotion_id = self._schedule(self.seed["employee"], "2025-06-10")
        employee = self.seed["employee"]
        employee.designation_id = self.seed["senior"].id
        employee.designation = "Senior Engineer"
        db.session.commit()

        self.pin(date(2025, 6, 10))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.applied == 1
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_APPLIED
        assert employee.designation_id == self.seed["senior"].id

    def test_sweep_is_tenant_scoped(self, make_tenant):
        other = make_tenant("Other Co")
        payload = _payload(other, when="2025-06-10")
        other_id = promotion_service.create_promotion(other["company"].id, payload).data["id"]
        self._schedule(self.seed["employee"], "2025-06-10")

        self.pin(date(2025, 6, 10))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.applied == 1
        assert db.session.get(Promotion, other_id).status == PROMOTION_PENDING

    def test_empty_tenant(self):
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.to_dict() == {"applied": 0, "failed": 0}


class TestUpdatePromotion:
    """Updates and status reconciliation."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today):
        self.seed = tenant
        self.company_id = tenant["company"].id
        self.employee = tenant["employee"]
        self.pin = fixed_today
        fixed_today(TODAY)

    def _create(self, when):
        return promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when=when)
        ).data["id"]

    def test_applied_moved_to_future_reverts_to_pending(self):
        promotion_id = self._create("2025-06-01")

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-09-01"}
        )

        assert result.done
        assert result.data["status"] == PROMOTION_PENDING
        assert result.data["applied_at"] is None
        # The employee keeps the department and designation already written.
        assert self.employee.designation_id == self.seed["senior"].id
        assert _history(self.seed, promotion_id)[:2] == ["REVERT", "UPDATE"]

    def test_reverted_promotion_is_reapplied_on_its_new_date(self):
        promotion_id = self._create("2025-06-01")
        promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-09-01"}
        )

        self.pin(date(2025, 9, 1))
        result = promotion_service.process_pending_promotions(self.company_id)

        assert result.applied == 1
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_APPLIED

    def test_pending_moved_into_the_past_is_applied(self):
        promotion_id = self._create("2025-09-01")

        result = promotion_service.update_promotion(
            self.company_id, str(promotion_id), {"promotionDate": "2025-05-15"}
        )

        assert result.data["status"] == PROMOTION_APPLIED
        assert self.employee.designation_id == self.seed["senior"].id

    def test_applied_retarget_is_reapplied(self):
        promotion_id = self._create("2025-06-01")

        result = promotion_service.update_promotion(
            self.company_id,
            promotion_id,
            {"promotionTo": {"designation": {"id": self.seed["tech_lead"].id}}},
        )

        assert result.done
        assert result.data["status"] == PROMOTION_APPLIED
        assert self.employee.designation_id == self.seed["tech_lead"].id
        assert result.data["promotion_to"]["designation"]["name"] == "Tech Lead"

    def test_applied_redated_in_the_past_keeps_its_target(self):
        promotion_id = self._create("2025-06-01")

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-03-01"}
        )

        assert result.done
        assert result.data["status"] == PROMOTION_APPLIED
        assert result.data["promotion_date"] == "2025-03-01"

    def _resign(self):
        return resignation_service.add_resignation(
            self.company_id,
            {
                "employeeId": self.employee.id,
                "reason": "Relocating",
                "resignationDate": "2025-08-01",
                "noticeDate": "2025-07-01",
            },
        )

    def test_applied_redated_in_the_past_ignores_pending_resignation(self):
        promotion_id = self._create("2025-05-01")
        assert self._resign().done

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-05-02"}
        )

        assert result.done
        assert result.data["status"] == PROMOTION_APPLIED
        assert result.data["promotion_date"] == "2025-05-02"

    def test_applied_redated_in_the_past_for_terminated_employee(self):
        promotion_id = self._create("2025-05-01")
        termination_id = termination_service.add_termination(
            self.company_id,
            {
                "employeeId": self.employee.id,
                "reason": "Restructuring",
                "terminationDate": "2025-06-01",
                "terminationType": "Layoff",
                "noticeDate": "2025-05-15",
            },
        ).data["id"]
        termination_service.process_termination(self.company_id, termination_id)
        assert self.employee.status == EMPLOYEE_TERMINATED

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-05-02"}
        )

        assert result.done
        assert result.data["status"] == PROMOTION_APPLIED

    def test_applied_moved_to_future_still_checks_resignation(self):
        promotion_id = self._create("2025-05-01")
        self._resign()

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "2025-09-01"}
        )

        assert result.kind == ErrorKind.CONFLICT
        assert "active resignation" in result.error
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_APPLIED

    def test_pending_retarget_to_current_designation_is_rejected(self):
        promotion_id = self._create("2025-09-01")

        result = promotion_service.update_promotion(
            self.company_id,
            promotion_id,
            {"promotionTo": {"designation": {"id": self.seed["engineer"].id}}},
        )

        assert result.kind == ErrorKind.VALIDATION
        assert result.error == "New designation must be different from current designation"

    def test_reason_only_update_records_changed_fields(self):
        promotion_id = self._create("2025-09-01")

        result = promotion_service.update_promotion(
            self.company_id,
            promotion_id,
            {"reason": "Revised", "updatedBy": {"userId": "u-9", "userName": "Lee"}},
        )

        assert result.done
        assert result.data["reason"] == "Revised"
        assert result.data["status"] == PROMOTION_PENDING
        assert result.data["updated_by"] == {"user_id": "u-9", "user_name": "Lee"}
        latest = audit_service.get_entity_history(
            self.company_id, promotion_service.ENTITY_TYPE, promotion_id
        )[0]
        assert latest.action_type == "UPDATE"
        assert "Revised" in latest.new_value
        assert "promotion_date" not in latest.new_value

    def test_cancelled_cannot_be_modified(self):
        promotion_id = self._create("2025-09-01")
        promotion_service.cancel_promotion(self.company_id, promotion_id)

        result = promotion_service.update_promotion(
            self.company_id, promotion_id, {"reason": "Too late"}
        )

        assert result.kind == ErrorKind.CONFLICT

    def test_invalid_id_and_date(self):
        promotion_id = self._create("2025-09-01")

        bad_id = promotion_service.update_promotion(self.company_id, "abc", {})
        bad_date = promotion_service.update_promotion(
            self.company_id, promotion_id, {"promotionDate": "31/31/2025"}
        )

        assert bad_id.error == "Invalid promotion ID format"
        assert bad_date.error == "Invalid promotion date"
        assert bad_date.kind == ErrorKind.VALIDATION

    def test_missing_promotion(self):
        result = promotion_service.update_promotion(self.company_id, 999, {"reason": "x"})

        assert result.kind == ErrorKind.NOT_FOUND


class TestCancelAndDeletePromotion:
    """Cancellation and hard delete."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today):
        self.seed = tenant
        self.company_id = tenant["company"].id
        self.employee = tenant["employee"]
        fixed_today(TODAY)

    def test_cancel_pending(self):
        promotion_id = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-09-01")
        ).data["id"]

        result = promotion_service.cancel_promotion(
            self.company_id, promotion_id, {"userId": "u-1", "userName": "HR"}
        )

        assert result.done
        assert result.data["status"] == PROMOTION_CANCELLED
        assert result.data["cancelled_at"] is not None
        # The employee is free for a new promotion.
        again = promotion_service.create_promotion(
            self.company_id, _payload(self.seed, when="2025-10-01")
        )
        assert again.done

    def test_cancel_applied_is_refused(self):
        promotion_id = promotion_service.create_promotion(
            self.company_id, _payload(self.seed)
        ).data["id"]

        result = promotion_service.cancel_promotion(self.company_id, promotion_id)

        assert result.kind == ErrorKind.CONFLICT
        assert db.session.get(Promotion, promotion_id).status == PROMOTION_APPLIED

    def test_delete_applied_leaves_employee_alone(self):
        promotion_id = promotion_service.create_promotion(
            self.company_id, _payload(self.seed)
        ).data["id"]

        result = promotion_service.delete_promotion(self.company_id, promotion_id, "u-1")

        assert result.done
        assert result.message == "Promotion deleted successfully"
        assert db.session.get(Promotion, promotion_id) is None
        assert self.employee.designation_id == self.seed["senior"].id
        assert _history(self.seed, promotion_id)[0] == "DELETE"

        lookup = promotion_service.get_promotion_by_id(self.company_id, promotion_id)
        assert lookup.kind == ErrorKind.NOT_FOUND

    def test_delete_unknown(self):
        result = promotion_service.delete_promotion(self.company_id, 31337)

        assert result.kind == ErrorKind.NOT_FOUND


class TestReadSide:
    """Listing and selection helpers."""

    @pytest.fixture(autouse=True)
    def _setup(self, tenant, fixed_today, add_employee):
        self.seed = tenant
        self.company_id = tenant["company"].id
        fixed_today(TODAY)
        self.grace = add_employee(tenant, "Grace", designation=tenant["senior"])

        payload = _payload(tenant, designation="tech_lead", when="2025-08-01")
        payload["employeeId"] = self.grace.id
        self.pending_id = promotion_service.create_promotion(self.company_id, payload).data["id"]
        self.applied_id = promotion_service.create_promotion(
            self.company_id, _payload(tenant, when="2025-05-01")
        ).data["id"]

    def test_list_is_newest_first(self):
        result = promotion_service.get_promotions(self.company_id)

        assert [p["id"] for p in result.data] == [self.pending_id, self.applied_id]

    @pytest.mark.parametrize(
        "filters, expected",
        [
            ({"status": "pending"}, "pending_id"),
            ({"status": "applied"}, "applied_id"),
            ({"startDate": "2025-07-01"}, "pending_id"),
            ({"endDate": "2025-05-31"}, "applied_id"),
        ],
    )
    def test_filters(self, filters, expected):
        result = promotion_service.get_promotions(self.company_id, filters)

        assert [p["id"] for p in result.data] == [getattr(self, expected)]

    def test_filter_by_employee(self):
        result = promotion_service.get_promotions(
            self.company_id, {"employeeId": str(self.grace.id)}
        )

        assert [p["employee"]["id"] for p in result.data] == [self.grace.id]

    def test_other_tenant_sees_nothing(self, make_tenant):
        other = make_tenant("Other Co")

        result = promotion_service.get_promotions(other["company"].id)

        assert result.done
        assert result.data == []

    def test_employees_for_promotion_are_active_only(self):
        self.grace.status = EMPLOYEE_RESIGNED
        db.session.commit()

        result = promotion_service.get_employees_for_promotion(self.company_id)

        assert [e["name"] for e in result.data] == ["Ada Lovelace"]

    def test_employees_show_current_designation_name(self):
        self.seed["senior"].designation_name = "Staff Engineer"
        db.session.commit()

        result = promotion_service.get_employees_for_promotion(
            self.company_id, self.seed["engineering"].id
        )

        names = {e["name"]: e["designation"] for e in result.data}
        assert names["Ada Lovelace"] == "Staff Engineer"

    def test_designations_for_department_most_senior_first(self):
        result = promotion_service.get_designations_for_department(
            self.company_id, self.seed["engineering"].id
        )

        assert [d["name"] for d in result.data] == [
            "Tech Lead",
            "Senior Engineer",
            "Engineer",
        ]

    def test_designations_require_department(self):
        result = promotion_service.get_designations_for_department(self.company_id, None)

        assert result.kind == ErrorKind.VALIDATION


class TestInputHelpers:
    """Date parsing and payload normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2025-06-01", date(2025, 6, 1)),
            ("2025-06-01T15:30:00Z", date(2025, 6, 1)),
            ("01/06/2025", date(2025, 6, 1)),
            ("", None),
            ("soon", None),
            (None, None),
        ],
    )
    def test_parse_date(self, raw, expected):
        assert promotion_service.parse_date(raw) == expected

    def test_normalize_trims_and_coerces(self, fixed_today):
        fixed_today(TODAY)

        values = promotion_service.normalize_promotion_input(
            {
                "employee": {"id": "12"},
                "promotionTo": {"departmentId": "3", "designationId": 4},
                "reason": "  Earned it  ",
                "promotionType": " ",
            }
        )

        assert values["employee_id"] == 12
        assert values["target_department_id"] == 3
        assert values["target_designation_id"] == 4
        assert values["promotion_date"] == TODAY
        assert values["reason"] == "Earned it"
        assert values["promotion_type"] == "Regular"
