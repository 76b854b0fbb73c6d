import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from emhr.domain.audit.models import AuditLog
from emhr.domain.auth.models import User
from emhr.domain.clients.models import Client, ClientProvider
from tests.conftest import API


@pytest.mark.clients
@pytest.mark.integration
class TestClientRecords:
    """Client registration and demographics"""

    def test_create_client(self, clinician_client: TestClient, db_session: Session, clinician_user: User) -> None:
        """Test a clinician registers a client and joins the care team"""
        response = clinician_client.post(f"{API}/clients/", json={
            "fname": "Jane",
            "lname": "Roe",
            "dob": "1990-02-01",
            "phoneCell": "555-0111",
            "ssn": "123-45-6789",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Client created successfully"

        client_id = data["clientId"]
        membership = db_session.query(ClientProvider).filter(ClientProvider.client_id == client_id).one()
        assert membership.provider_id == clinician_user.id
        assert membership.role.value == "primary_clinician"

        record = db_session.query(Client).filter(Client.id == client_id).one()
        assert record.ssn_encrypted is not None
        assert "6789" not in record.ssn_encrypted

    @pytest.mark.parametrize("missing,message", [
        ("fname", "First name is required"),
        ("lname", "Last name is required"),
        ("dob", "Date of birth is required"),
    ])
    def test_create_client_requires_fields(self, clinician_client: TestClient, missing: str, message: str) -> None:
        payload = {"fname": "Jane", "lname": "Roe", "dob": "1990-02-01"}
        payload.pop(missing)

        response = clinician_client.post(f"{API}/clients/", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == message

    def test_future_birth_date_rejected(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/clients/", json={"fname": "Jane", "lname": "Roe", "dob": "2999-01-01"})

        assert response.status_code == 400

    def test_get_client_detail(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.get(f"{API}/clients/{sample_client.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["client"]["fullName"] == "John Doe"
        assert data["client"]["age"] >= 40
        assert data["client"]["ssnMasked"] is None
        assert len(data["careTeam"]) == 3
        assert data["insurances"] == []
        assert data["counts"] == {"notes": 0, "appointments": 0, "documents": 0}

    def test_view_is_audited(self, clinician_client: TestClient, db_session: Session, sample_client: Client) -> None:
        clinician_client.get(f"{API}/clients/{sample_client.id}")

        audit = db_session.query(AuditLog).filter(AuditLog.action == "view_client").one()
        assert audit.resource_id == sample_client.id
        assert audit.username == "clinician"
        assert audit.request_id is not None

    def test_ssn_is_masked(self, clinician_client: TestClient, sample_client: Client) -> None:
        clinician_client.put(f"{API}/clients/{sample_client.id}", json={"ssn": "123-45-6789"})

        response = clinician_client.get(f"{API}/clients/{sample_client.id}")

        assert response.json()["client"]["ssnMasked"] == "***-**-6789"

    def test_update_demographics(self, clinician_client: TestClient, db_session: Session, sample_client: Client) -> None:
        response = clinician_client.put(
            f"{API}/clients/{sample_client.id}",
            json={"city": "Portland", "pronouns": "he/him"}
        )

        assert response.status_code == 200
        assert response.json()["city"] == "Portland"

        audit = db_session.query(AuditLog).filter(AuditLog.action == "edit_demographics").one()
        assert audit.details["changed_fields"] == ["city", "pronouns"]

    def test_update_without_changes_rejected(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.put(f"{API}/clients/{sample_client.id}", json={})

        assert response.status_code == 400

    def test_unknown_client(self, admin_client: TestClient) -> None:
        response = admin_client.get(f"{API}/clients/9999")

        assert response.status_code == 404
        assert response.json()["message"] == "Client not found"


@pytest.mark.clients
@pytest.mark.integration
class TestClientAccess:
    """Care-team based visibility"""

    def test_outsider_cannot_view_client(self, outsider_client: TestClient, sample_client: Client) -> None:
        response = outsider_client.get(f"{API}/clients/{sample_client.id}")

        assert response.status_code == 403
        assert "care team" in response.json()["message"]

    def test_supervisor_sees_supervisee_clients(self, supervisor_client: TestClient, sample_client: Client) -> None:
        """The intern is on the care team, so the intern's supervisor can view the client"""
        response = supervisor_client.get(f"{API}/clients/{sample_client.id}")

        assert response.status_code == 200

    def test_list_is_scoped_to_caseload(
        self, outsider_client: TestClient, clinician_client: TestClient, sample_client: Client
    ) -> None:
        assert outsider_client.get(f"{API}/clients/").json()["count"] == 0

        response = clinician_client.get(f"{API}/clients/")
        assert response.json()["count"] == 1
        assert response.json()["clients"][0]["id"] == sample_client.id

    def test_admin_sees_all_clients(self, admin_client: TestClient, sample_client: Client) -> None:
        response = admin_client.get(f"{API}/clients/")

        assert response.json()["count"] == 1

    def test_invalid_status_filter(self, clinician_client: TestClient) -> None:
        response = clinician_client.get(f"{API}/clients/", params={"status": "bogus"})

        assert response.status_code == 400

    def test_search_by_name_and_phone(self, clinician_client: TestClient, sample_client: Client) -> None:
        by_name = clinician_client.get(f"{API}/clients/search", params={"q": "John Doe"})
        by_phone = clinician_client.get(f"{API}/clients/search", params={"q": "555-0100"})
        by_dob = clinician_client.get(f"{API}/clients/search", params={"q": "1985-06-15"})

        for response in (by_name, by_phone, by_dob):
            assert response.status_code == 200
            assert response.json()["count"] == 1

    def test_search_hides_other_caseloads(self, outsider_client: TestClient, sample_client: Client) -> None:
        response = outsider_client.get(f"{API}/clients/search", params={"q": "Doe"})

        assert response.json()["count"] == 0

    def test_search_term_too_short(self, clinician_client: TestClient) -> None:
        response = clinician_client.get(f"{API}/clients/search", params={"q": "J"})

        assert response.status_code == 400

    def test_search_is_audited(self, clinician_client: TestClient, db_session: Session, sample_client: Client) -> None:
        clinician_client.get(f"{API}/clients/search", params={"q": "Doe"})

        audit = db_session.query(AuditLog).filter(AuditLog.action == "search_clients").one()
        assert audit.details == {"search_term": "Doe", "result_count": 1}

    def test_stats(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.get(f"{API}/clients/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["totalClients"] == 1
        assert data["activeClients"] == 1
        assert data["dischargedClients"] == 0
        assert data["todayAppointments"] == 0


@pytest.mark.clients
@pytest.mark.integration
class TestClientDeletion:
    """Soft delete"""

    def test_non_admin_cannot_delete(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.delete(f"{API}/clients/{sample_client.id}")

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied - administrator role required"

    def test_admin_soft_deletes(self, admin_client: TestClient, db_session: Session, sample_client: Client) -> None:
        response = admin_client.delete(f"{API}/clients/{sample_client.id}")
        assert response.status_code == 200

        assert admin_client.get(f"{API}/clients/{sample_client.id}").status_code == 404

        db_session.expire_all()
        assert db_session.query(Client).filter(Client.id == sample_client.id).one().deleted_at is not None


@pytest.mark.clients
@pytest.mark.integration
class TestCareTeam:
    """Care team assignment"""

    def test_get_care_team(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.get(f"{API}/clients/{sample_client.id}/care-team")

        assert response.status_code == 200
        roles = {m["providerName"]: m["role"] for m in response.json()["careTeam"]}
        assert roles["Carla Clinician"] == "primary_clinician"
        assert roles["Sol Worker"] == "social_worker"

    def test_assign_provider(
        self, admin_client: TestClient, outsider_client: TestClient, sample_client: Client, outsider_user: User
    ) -> None:
        response = admin_client.post(
            f"{API}/clients/{sample_client.id}/care-team",
            json={"providerId": outsider_user.id, "role": "clinician"}
        )

        assert response.status_code == 201
        assert response.json()["providerName"] == "Otto Outsider"

        assert outsider_client.get(f"{API}/clients/{sample_client.id}").status_code == 200

    def test_assign_existing_member_conflicts(
        self, admin_client: TestClient, sample_client: Client, clinician_user: User
    ) -> None:
        response = admin_client.post(
            f"{API}/clients/{sample_client.id}/care-team",
            json={"providerId": clinician_user.id}
        )

        assert response.status_code == 409

    def test_non_admin_cannot_assign(
        self, clinician_client: TestClient, sample_client: Client, outsider_user: User
    ) -> None:
        response = clinician_client.post(
            f"{API}/clients/{sample_client.id}/care-team",
            json={"providerId": outsider_user.id}
        )

        assert response.status_code == 403

    def test_end_assignment_removes_access(
        self, admin_client: TestClient, clinician_client: TestClient, sample_client: Client, clinician_user: User
    ) -> None:
        response = admin_client.delete(f"{API}/clients/{sample_client.id}/care-team/{clinician_user.id}")
        assert response.status_code == 200

        assert clinician_client.get(f"{API}/clients/{sample_client.id}").status_code == 403
