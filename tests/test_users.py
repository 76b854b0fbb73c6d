import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from emhr.domain.audit.models import AuditLog
from emhr.domain.auth.models import User
from tests.conftest import API


def _new_user_payload(**overrides) -> dict:
    payload = {
        "username": "newtherapist",
        "password": "Str0ngPassword!",
        "fname": "Nora",
        "lname": "Therapist",
        "email": "nora@clinic.org",
        "userType": "user",
        "isProvider": True,
    }
    payload.update(overrides)
    return payload


@pytest.mark.admin
@pytest.mark.integration
class TestUserAdministration:
    """Staff user administration"""

    def test_create_user(self, admin_client: TestClient, db_session: Session) -> None:
        """Test admin creates a provider account"""
        response = admin_client.post(f"{API}/users/", json=_new_user_payload())

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["username"] == "newtherapist"
        assert user["fullName"] == "Nora Therapist"
        assert user["isProvider"] is True
        assert user["userType"] == "user"
        assert "password" not in user

        audit = db_session.query(AuditLog).filter(AuditLog.action == "create_user").one()
        assert audit.resource_id == user["id"]
        assert audit.details["username"] == "newtherapist"

    def test_created_user_can_login(self, admin_client: TestClient, client: TestClient) -> None:
        admin_client.post(f"{API}/users/", json=_new_user_payload())

        response = client.post(
            f"{API}/auth/login", json={"username": "newtherapist", "password": "Str0ngPassword!"}
        )

        assert response.status_code == 200

    def test_duplicate_username(self, admin_client: TestClient, clinician_user: User) -> None:
        response = admin_client.post(f"{API}/users/", json=_new_user_payload(username="clinician"))

        assert response.status_code == 409
        assert response.json()["message"] == "Username already exists"

    def test_short_password_rejected(self, admin_client: TestClient) -> None:
        response = admin_client.post(f"{API}/users/", json=_new_user_payload(password="short"))

        assert response.status_code == 400
        assert "at least 8 characters" in response.json()["message"]

    def test_non_admin_cannot_create_user(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/users/", json=_new_user_payload())

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied - admin role required"

    def test_list_users(self, admin_client: TestClient, clinician_user: User) -> None:
        response = admin_client.get(f"{API}/users/")

        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()["users"]}
        assert {"admin", "clinician"} <= usernames

    def test_list_providers(self, clinician_client: TestClient, admin_user: User) -> None:
        response = clinician_client.get(f"{API}/users/providers")

        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()["users"]}
        assert "clinician" in usernames
        assert "admin" not in usernames

    def test_update_user_records_changed_fields(
        self, admin_client: TestClient, db_session: Session, clinician_user: User
    ) -> None:
        response = admin_client.put(
            f"{API}/users/{clinician_user.id}",
            json={"title": "LCSW", "isSupervisor": True}
        )

        assert response.status_code == 200
        assert response.json()["user"]["title"] == "LCSW"
        assert response.json()["user"]["isSupervisor"] is True

        audit = db_session.query(AuditLog).filter(AuditLog.action == "edit_user").one()
        assert audit.details["changed_fields"] == ["is_supervisor", "title"]

    def test_deactivated_user_cannot_login(
        self, admin_client: TestClient, client: TestClient, clinician_user: User
    ) -> None:
        admin_client.put(f"{API}/users/{clinician_user.id}", json={"isActive": False})

        response = client.post(f"{API}/auth/login", json={"username": "clinician", "password": "Password123!"})

        assert response.status_code == 401

    def test_update_unknown_user(self, admin_client: TestClient) -> None:
        response = admin_client.put(f"{API}/users/9999", json={"title": "MD"})

        assert response.status_code == 404


@pytest.mark.admin
@pytest.mark.integration
class TestSupervision:
    """Supervisor assignments"""

    def test_assign_supervisor(
        self, admin_client: TestClient, clinician_user: User, supervisor_user: User
    ) -> None:
        response = admin_client.post(
            f"{API}/users/{clinician_user.id}/supervisors",
            json={"supervisorId": supervisor_user.id}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == clinician_user.id
        assert data["supervisorName"] == "Sam Supervisor"
        assert data["endedAt"] is None

    def test_assign_non_supervisor_rejected(
        self, admin_client: TestClient, clinician_user: User, outsider_user: User
    ) -> None:
        response = admin_client.post(
            f"{API}/users/{clinician_user.id}/supervisors",
            json={"supervisorId": outsider_user.id}
        )

        assert response.status_code == 400

    def test_self_supervision_rejected(self, admin_client: TestClient, supervisor_user: User) -> None:
        response = admin_client.post(
            f"{API}/users/{supervisor_user.id}/supervisors",
            json={"supervisorId": supervisor_user.id}
        )

        assert response.status_code == 400

    def test_duplicate_assignment(
        self, admin_client: TestClient, intern_user: User, supervisor_user: User
    ) -> None:
        response = admin_client.post(
            f"{API}/users/{intern_user.id}/supervisors",
            json={"supervisorId": supervisor_user.id}
        )

        assert response.status_code == 409

    def test_supervisor_lists_supervisees(self, supervisor_client: TestClient, intern_user: User) -> None:
        response = supervisor_client.get(f"{API}/users/supervisees")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["relationships"][0]["userName"] == "Ivy Intern"

    def test_non_supervisor_cannot_list_supervisees(self, clinician_client: TestClient) -> None:
        response = clinician_client.get(f"{API}/users/supervisees")

        assert response.status_code == 403

    def test_user_views_own_supervisors(self, intern_client: TestClient, intern_user: User) -> None:
        response = intern_client.get(f"{API}/users/{intern_user.id}/supervisors")

        assert response.status_code == 200
        assert response.json()["relationships"][0]["supervisorName"] == "Sam Supervisor"

    def test_end_supervision(
        self, admin_client: TestClient, intern_user: User, supervisor_user: User, supervisor_client: TestClient
    ) -> None:
        response = admin_client.delete(f"{API}/users/{intern_user.id}/supervisors/{supervisor_user.id}")

        assert response.status_code == 200

        response = supervisor_client.get(f"{API}/users/supervisees")
        assert response.json()["count"] == 0
