def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_login_and_me(client):
    response = client.post("/auth/token", data={"username": "jane.rivera@example.com", "password": "manager123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["user_id"] == "u-mgr-001"
    assert me.json()["employee_id"] == "emp-mgr-001"


def test_login_rejects_bad_password(client):
    response = client.post("/auth/token", data={"username": "jane.rivera@example.com", "password": "nope"})
    assert response.status_code == 401


def test_requests_without_token_are_rejected(client):
    assert client.get("/employees").status_code == 401


def test_my_permissions(client, auth_headers):
    response = client.get("/auth/me/permissions", headers=auth_headers("u-mgr-001"))
    assert response.json() == {
        "role": "manager",
        "can_create_users": False,
        "can_manage_employees": True,
        "can_manage_departments": False,
        "can_view_salaries": True,
        "can_edit_salaries": False,
        "can_manage_roles": False,
    }


def test_unknown_role_permissions_is_404(client, auth_headers):
    response = client.get("/auth/roles/intern/permissions", headers=auth_headers("u-hr-001"))
    assert response.status_code == 404


def test_only_hr0_creates_accounts(client, auth_headers):
    payload = {
        "email": "riley.chen@example.com",
        "password": "riley-password",
        "role": "employee",
        "display_name": "Riley Chen",
        "employee_id": "emp-emp-003",
    }
    assert client.post("/auth/users", json=payload, headers=auth_headers("u-hr-001")).status_code == 403

    created = client.post("/auth/users", json=payload, headers=auth_headers("u-admin-001"))
    assert created.status_code == 201
    assert created.json()["employee_id"] == "emp-emp-003"

    duplicate = client.post("/auth/users", json=payload, headers=auth_headers("u-admin-001"))
    assert duplicate.status_code == 409


def test_admin_cannot_change_own_role(client, auth_headers):
    response = client.patch("/auth/users/u-admin-001/role", json={"role": "hr"}, headers=auth_headers("u-admin-001"))
    assert response.status_code == 400


def test_manager_sees_team_with_salaries(client, auth_headers):
    response = client.get("/employees", headers=auth_headers("u-mgr-001"))
    ids = {e["employee_id"] for e in response.json()}
    assert ids == {"emp-mgr-001", "emp-dep-001", "emp-emp-002", "emp-emp-003"}
    assert all(e["salary"] is not None for e in response.json())


def test_employee_sees_only_self(client, auth_headers):
    response = client.get("/employees", headers=auth_headers("u-emp-002"))
    assert [e["employee_id"] for e in response.json()] == ["emp-emp-002"]


def test_role_change_invalidates_existing_token(client, auth_headers):
    old_headers = auth_headers("u-emp-002")
    changed = client.patch("/auth/users/u-emp-002/role", json={"role": "manager"}, headers=auth_headers("u-admin-001"))
    assert changed.status_code == 200
    assert changed.json()["role"] == "manager"

    assert client.get("/auth/me", headers=old_headers).status_code == 401
    assert client.get("/auth/me", headers=auth_headers("u-emp-002")).json()["role"] == "manager"
