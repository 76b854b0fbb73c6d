import pytest
from fastapi.testclient import TestClient

from emhr.domain.clients.models import Client
from tests.conftest import API


@pytest.fixture
def payer(admin_client: TestClient) -> dict:
    response = admin_client.post(f"{API}/insurance/providers", json={
        "name": "Blue Shield",
        "insuranceType": "commercial",
        "payerId": "BS001",
        "claimsPhone": "800-555-0199",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.billing
@pytest.mark.integration
class TestInsuranceProviders:
    """Payer administration"""

    def test_create_provider(self, payer: dict) -> None:
        assert payer["name"] == "Blue Shield"
        assert payer["payerId"] == "BS001"
        assert payer["isActive"] is True

    def test_duplicate_name(self, admin_client: TestClient, payer: dict) -> None:
        response = admin_client.post(f"{API}/insurance/providers", json={"name": " Blue Shield "})

        assert response.status_code == 409

    def test_non_admin_cannot_create(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/insurance/providers", json={"name": "Aetna"})

        assert response.status_code == 403

    def test_list_and_search(self, clinician_client: TestClient, admin_client: TestClient, payer: dict) -> None:
        admin_client.post(f"{API}/insurance/providers", json={"name": "Aetna"})

        everything = clinician_client.get(f"{API}/insurance/providers").json()
        searched = clinician_client.get(f"{API}/insurance/providers", params={"search": "blue"}).json()

        assert everything["count"] == 2
        assert [p["name"] for p in searched["providers"]] == ["Blue Shield"]

    def test_update_provider(self, admin_client: TestClient, payer: dict) -> None:
        response = admin_client.put(f"{API}/insurance/providers/{payer['id']}", json={"isActive": False})

        assert response.status_code == 200
        assert response.json()["isActive"] is False
        assert admin_client.get(f"{API}/insurance/providers").json()["count"] == 0

    def test_delete_unreferenced_provider(self, admin_client: TestClient, payer: dict) -> None:
        response = admin_client.delete(f"{API}/insurance/providers/{payer['id']}")

        assert response.status_code == 200

    def test_delete_referenced_provider(
        self, admin_client: TestClient, clinician_client: TestClient, payer: dict, sample_client: Client
    ) -> None:
        clinician_client.put(
            f"{API}/insurance/clients/{sample_client.id}/primary", json={"providerId": payer["id"]}
        )

        response = admin_client.delete(f"{API}/insurance/providers/{payer['id']}")

        assert response.status_code == 409


@pytest.mark.billing
@pytest.mark.integration
class TestClientCoverage:
    """Primary, secondary and tertiary coverage"""

    def test_add_primary_coverage(self, clinician_client: TestClient, payer: dict, sample_client: Client) -> None:
        response = clinician_client.put(f"{API}/insurance/clients/{sample_client.id}/primary", json={
            "providerId": payer["id"],
            "policyNumber": "XYZ123456",
            "effectiveDate": "2024-01-01",
            "copay": "25",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["coverageType"] == "primary"
        assert data["providerName"] == "Blue Shield"
        assert data["copay"] == "25.00"
        assert data["subscriberRelationship"] == "self"

    def test_upsert_replaces_existing(self, clinician_client: TestClient, payer: dict, sample_client: Client) -> None:
        url = f"{API}/insurance/clients/{sample_client.id}/primary"
        first = clinician_client.put(url, json={"providerId": payer["id"], "policyNumber": "OLD"}).json()
        second = clinician_client.put(url, json={"providerId": payer["id"], "policyNumber": "NEW"}).json()

        assert first["id"] == second["id"]
        listed = clinician_client.get(f"{API}/insurance/clients/{sample_client.id}").json()["insurances"]
        assert [i["policyNumber"] for i in listed] == ["NEW"]

    def test_coverage_shown_on_client(self, clinician_client: TestClient, payer: dict, sample_client: Client) -> None:
        clinician_client.put(
            f"{API}/insurance/clients/{sample_client.id}/secondary", json={"providerId": payer["id"]}
        )

        insurances = clinician_client.get(f"{API}/clients/{sample_client.id}").json()["insurances"]

        assert insurances[0]["coverageType"] == "secondary"
        assert insurances[0]["providerName"] == "Blue Shield"

    def test_end_date_before_effective_date(
        self, clinician_client: TestClient, payer: dict, sample_client: Client
    ) -> None:
        response = clinician_client.put(f"{API}/insurance/clients/{sample_client.id}/primary", json={
            "providerId": payer["id"], "effectiveDate": "2024-06-01", "endDate": "2024-01-01",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "End date cannot be before the effective date"

    def test_unknown_payer(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.put(
            f"{API}/insurance/clients/{sample_client.id}/primary", json={"providerId": 9999}
        )

        assert response.status_code == 404

    def test_invalid_coverage_type(self, clinician_client: TestClient, payer: dict, sample_client: Client) -> None:
        response = clinician_client.put(
            f"{API}/insurance/clients/{sample_client.id}/quaternary", json={"providerId": payer["id"]}
        )

        assert response.status_code == 400

    def test_outsider_cannot_view_coverage(self, outsider_client: TestClient, sample_client: Client) -> None:
        response = outsider_client.get(f"{API}/insurance/clients/{sample_client.id}")

        assert response.status_code == 403
