from datetime import date

from hr_portal.models.leave import LeaveRequestCreate, LeaveType
from hr_portal.services import container
from hr_portal.services.analytics_service import EventLogger


def test_event_log_filters_and_skips_corrupt_lines(tmp_path):
    event_logger = EventLogger(tmp_path / "events.jsonl")
    event_logger.log_event("workflow_action", "u-1", "hr", {"action": "a"})
    with event_logger.event_path.open("a", encoding="utf-8") as f:
        f.write("{not json\n")
    event_logger.log_event("auth_login", "u-2", "employee", {"email": "x@example.com"})
    event_logger.log_event("workflow_action", "u-2", "employee", {"action": "b"})

    assert len(event_logger.read_events()) == 3
    assert [e["details"]["action"] for e in event_logger.recent_events(event_type="workflow_action")] == ["a", "b"]
    assert [e["event_type"] for e in event_logger.recent_events(actor_id="u-2", limit=1)] == ["workflow_action"]


def test_leave_stats_respect_visibility(actor):
    container.leave_service.create_leave_request(
        actor("u-emp-002"),
        LeaveRequestCreate(leave_type=LeaveType.ANNUAL, start_date=date(2030, 1, 7), end_date=date(2030, 1, 8), reason="Ski"),
    )
    container.leave_service.create_leave_request(
        actor("u-hr-001"),
        LeaveRequestCreate(leave_type=LeaveType.CASUAL, start_date=date(2030, 1, 9), end_date=date(2030, 1, 9), reason="Errand"),
    )

    everyone = container.analytics_service.get_request_stats(None)
    assert everyone.leave.pending == 2

    manager_view = container.employee_service.visible_employee_ids(actor("u-mgr-001"))
    assert container.analytics_service.get_request_stats(manager_view).leave.total == 1


def test_request_stats_endpoint_is_for_approvers(client, auth_headers):
    assert client.get("/analytics/requests", headers=auth_headers("u-emp-002")).status_code == 403
    response = client.get("/analytics/requests", headers=auth_headers("u-hr-001"))
    assert response.status_code == 200
    assert set(response.json()) == {"leave", "expenses", "promotions"}
