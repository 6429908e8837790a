import pytest

from hr_portal.repositories.data_store import EMPLOYEES, DataStore


@pytest.fixture
def local_store():
    store = DataStore()
    store.insert(EMPLOYEES, "e1", {"employee_id": "e1", "status": "active", "tags": []})
    return store


def test_reads_return_copies(local_store):
    row = local_store.get(EMPLOYEES, "e1")
    row["tags"].append("mutated")
    assert local_store.get(EMPLOYEES, "e1")["tags"] == []


def test_insert_rejects_duplicate_id(local_store):
    with pytest.raises(KeyError):
        local_store.insert(EMPLOYEES, "e1", {"employee_id": "e1"})


def test_update_if_applies_when_expected_matches(local_store):
    updated = local_store.update_if(EMPLOYEES, "e1", {"status": "active"}, {"status": "inactive"})
    assert updated["status"] == "inactive"


def test_update_if_refuses_stale_expectation(local_store):
    local_store.update(EMPLOYEES, "e1", {"status": "inactive"})
    assert local_store.update_if(EMPLOYEES, "e1", {"status": "active"}, {"status": "on_leave"}) is None
    assert local_store.get(EMPLOYEES, "e1")["status"] == "inactive"


def test_update_if_missing_document(local_store):
    assert local_store.update_if(EMPLOYEES, "nope", {}, {"status": "x"}) is None


def test_transaction_rolls_back_on_error(local_store):
    with pytest.raises(RuntimeError):
        with local_store.transaction():
            local_store.update(EMPLOYEES, "e1", {"status": "inactive"})
            local_store.insert(EMPLOYEES, "e2", {"employee_id": "e2"})
            raise RuntimeError("boom")

    assert local_store.get(EMPLOYEES, "e1")["status"] == "active"
    assert not local_store.exists(EMPLOYEES, "e2")


def test_find_filters_on_fields(local_store):
    local_store.insert(EMPLOYEES, "e2", {"employee_id": "e2", "status": "inactive"})
    assert [r["employee_id"] for r in local_store.find(EMPLOYEES, status="inactive")] == ["e2"]


def test_unknown_collection(local_store):
    with pytest.raises(KeyError):
        local_store.get("payroll", "x")
