import pytest
from fastapi import HTTPException

from hr_portal.models.roles import JobRoleCreate, PromotionCreate
from hr_portal.models.workflow import DecisionRequest, RequestStatus
from hr_portal.repositories.data_store import EMPLOYEES
from hr_portal.services import container


def test_promotion_approval_rolls_role_history(actor, store):
    promotion = container.role_service.submit_promotion(
        actor("u-hr-001"),
        PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr", new_salary=118000, notes="Strong year"),
    )
    assert promotion.status == RequestStatus.PENDING
    assert promotion.old_role_id == "role-eng"

    decided = container.role_service.decide_promotion(
        actor("u-admin-001"), promotion.promotion_id, DecisionRequest(approve=True)
    )
    assert decided.status == RequestStatus.APPROVED

    employee = store.get(EMPLOYEES, "emp-emp-002")
    assert employee["role_id"] == "role-eng-sr"
    assert employee["salary"] == 118000

    history = container.role_service.role_history(actor("u-hr-001"), "emp-emp-002")
    assert [h.role_id for h in history] == ["role-eng", "role-eng-sr"]
    assert history[0].effective_to == history[1].effective_from
    assert history[1].effective_to is None
    assert history[1].promotion_notes == "Strong year"


def test_rejected_promotion_keeps_role(actor, store):
    promotion = container.role_service.submit_promotion(
        actor("u-mgr-001"), PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr")
    )
    container.role_service.decide_promotion(actor("u-admin-001"), promotion.promotion_id, DecisionRequest(approve=False))
    assert store.get(EMPLOYEES, "emp-emp-002")["role_id"] == "role-eng"
    assert len(container.role_service.role_history(actor("u-hr-001"), "emp-emp-002")) == 1


def test_only_role_managers_decide_promotions(actor):
    promotion = container.role_service.submit_promotion(
        actor("u-mgr-001"), PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr")
    )
    with pytest.raises(HTTPException) as exc_info:
        container.role_service.decide_promotion(actor("u-hr-001"), promotion.promotion_id, DecisionRequest(approve=True))
    assert exc_info.value.status_code == 403


def test_manager_cannot_set_salary_on_promotion(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.role_service.submit_promotion(
            actor("u-mgr-001"),
            PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr", new_salary=200000),
        )
    assert exc_info.value.status_code == 403


def test_second_pending_promotion_conflicts(actor):
    payload = PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr")
    container.role_service.submit_promotion(actor("u-hr-001"), payload)
    with pytest.raises(HTTPException) as exc_info:
        container.role_service.submit_promotion(actor("u-hr-001"), payload)
    assert exc_info.value.status_code == 409


def test_create_role_requires_role_management(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.role_service.create_role(actor("u-hr-001"), JobRoleCreate(title="Staff Engineer", level=4))
    assert exc_info.value.status_code == 403

    role = container.role_service.create_role(actor("u-admin-001"), JobRoleCreate(title="Staff Engineer", level=4))
    assert role.title == "Staff Engineer"


def test_salary_hidden_from_plain_employees(actor):
    history = container.role_service.role_history(actor("u-emp-002"), "emp-emp-002")
    assert history[0].salary == 99000.0

    record = container.employee_service.get_employee(actor("u-emp-001"), "emp-dep-001")
    assert record.salary == 128000.0
    with pytest.raises(HTTPException):
        container.employee_service.get_employee(actor("u-emp-001"), "emp-emp-002")


def test_promotion_for_deactivated_employee_cannot_be_approved(actor, store):
    promotion = container.role_service.submit_promotion(
        actor("u-hr-001"), PromotionCreate(employee_id="emp-emp-002", new_role_id="role-eng-sr")
    )
    container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-emp-002")

    with pytest.raises(HTTPException) as exc_info:
        container.role_service.decide_promotion(
            actor("u-admin-001"), promotion.promotion_id, DecisionRequest(approve=True)
        )

    assert exc_info.value.status_code == 409
    assert store.get(EMPLOYEES, "emp-emp-002")["role_id"] == "role-eng"
    assert container.role_service.current_entry("emp-emp-002") is None

    rejected = container.role_service.decide_promotion(
        actor("u-admin-001"), promotion.promotion_id, DecisionRequest(approve=False)
    )
    assert rejected.status == RequestStatus.REJECTED
