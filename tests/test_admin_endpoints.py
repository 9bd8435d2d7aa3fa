"""Tests for admin endpoints."""

from fastapi.testclient import TestClient

from lazy_lifts.api.app import create_app

ADMIN_HEADERS = {"X-Admin-Token": "admin-token"}


def test_admin_requires_token(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/admin/health").status_code == 401
    assert (
        client.get("/admin/health", headers={"X-Admin-Token": "wrong"}).status_code
        == 401
    )
    assert client.get("/admin/health", headers=ADMIN_HEADERS).json() == {
        "status": "ok"
    }


def test_backup_and_restore(container) -> None:
    client = TestClient(create_app(container))
    client.post("/workouts/log", headers={"X-Owner-Id": "user-1"})

    backup = client.get("/admin/backup/user-1", headers=ADMIN_HEADERS).json()
    restored = client.post(
        "/admin/restore/user-1", json=backup, headers=ADMIN_HEADERS
    )
    refused = client.post("/admin/restore/user-2", json=backup, headers=ADMIN_HEADERS)

    assert backup["user_id"] == "user-1"
    assert [item["id"] for item in backup["workouts"]] == ["Wk 1-Mon-1"]
    assert restored.json() == {"cycles": 1, "workouts": 1}
    assert refused.status_code == 400


def test_write_backup_to_directory(container, tmp_path) -> None:
    container.settings.backup_dir = tmp_path
    client = TestClient(create_app(container))

    response = client.post("/admin/backup/user-1", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["path"].startswith(str(tmp_path))
