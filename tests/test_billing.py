import pytest
from fastapi.testclient import TestClient

from emhr.domain.clients.models import Client
from tests.conftest import API


@pytest.fixture
def cpt_code(admin_client: TestClient) -> dict:
    response = admin_client.post(f"{API}/billing/cpt-codes", json={
        "code": "90834",
        "category": "Psychotherapy",
        "description": "Psychotherapy, 45 minutes",
        "standardDurationMinutes": 45,
        "standardFee": "150.00",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def telehealth_modifier(admin_client: TestClient) -> dict:
    response = admin_client.post(f"{API}/billing/modifiers", json={
        "code": "95", "description": "Synchronous telemedicine service",
    })
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.billing
@pytest.mark.integration
class TestCptCatalogue:
    """CPT code administration"""

    def test_create_normalises_code(self, admin_client: TestClient) -> None:
        response = admin_client.post(f"{API}/billing/cpt-codes", json={
            "code": " h0031 ", "category": "Assessment", "description": "Mental health assessment",
        })

        assert response.status_code == 201
        assert response.json()["code"] == "H0031"

    def test_fee_serialised_as_string(self, cpt_code: dict) -> None:
        assert cpt_code["standardFee"] == "150.00"

    def test_duplicate_code(self, admin_client: TestClient, cpt_code: dict) -> None:
        response = admin_client.post(f"{API}/billing/cpt-codes", json={
            "code": "90834", "category": "Psychotherapy", "description": "Duplicate",
        })

        assert response.status_code == 409

    def test_non_admin_cannot_create(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/billing/cpt-codes", json={
            "code": "90837", "category": "Psychotherapy", "description": "Psychotherapy, 60 minutes",
        })

        assert response.status_code == 403

    def test_list_and_search(self, clinician_client: TestClient, cpt_code: dict) -> None:
        listed = clinician_client.get(f"{API}/billing/cpt-codes").json()
        found = clinician_client.get(f"{API}/billing/cpt-codes", params={"search": "45 minutes"}).json()
        missing = clinician_client.get(f"{API}/billing/cpt-codes", params={"category": "Assessment"}).json()

        assert listed["count"] == 1
        assert found["cptCodes"][0]["code"] == "90834"
        assert missing["count"] == 0

    def test_deactivated_code_hidden(self, admin_client: TestClient, cpt_code: dict) -> None:
        admin_client.put(f"{API}/billing/cpt-codes/{cpt_code['id']}", json={"isActive": False})

        assert admin_client.get(f"{API}/billing/cpt-codes").json()["count"] == 0
        assert admin_client.get(f"{API}/billing/cpt-codes", params={"includeInactive": True}).json()["count"] == 1

    def test_delete_code(self, admin_client: TestClient, cpt_code: dict) -> None:
        response = admin_client.delete(f"{API}/billing/cpt-codes/{cpt_code['id']}")

        assert response.status_code == 200
        assert admin_client.delete(f"{API}/billing/cpt-codes/{cpt_code['id']}").status_code == 404


@pytest.mark.billing
@pytest.mark.integration
class TestModifiers:
    """Billing modifier administration"""

    def test_list_modifiers(self, clinician_client: TestClient, telehealth_modifier: dict) -> None:
        response = clinician_client.get(f"{API}/billing/modifiers")

        assert response.json()["count"] == 1
        assert response.json()["modifiers"][0]["code"] == "95"

    def test_duplicate_modifier(self, admin_client: TestClient, telehealth_modifier: dict) -> None:
        response = admin_client.post(f"{API}/billing/modifiers", json={"code": "95", "description": "Again"})

        assert response.status_code == 409

    def test_delete_unused_modifier(self, admin_client: TestClient, telehealth_modifier: dict) -> None:
        response = admin_client.delete(f"{API}/billing/modifiers/{telehealth_modifier['id']}")

        assert response.status_code == 200

    def test_modifier_in_use_cannot_be_deleted(
        self, admin_client: TestClient, clinician_client: TestClient,
        cpt_code: dict, telehealth_modifier: dict, sample_client: Client
    ) -> None:
        clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges", json={"code": "90834", "modifier": "95"}
        )

        response = admin_client.delete(f"{API}/billing/modifiers/{telehealth_modifier['id']}")

        assert response.status_code == 409


@pytest.mark.billing
@pytest.mark.integration
class TestClientLedger:
    """Charges, payments and balance"""

    def test_charge_uses_standard_fee(
        self, clinician_client: TestClient, cpt_code: dict, sample_client: Client
    ) -> None:
        response = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges", json={"code": "90834", "units": 2}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["fee"] == "150.00"
        assert data["total"] == "300.00"
        assert data["codeType"] == "CPT4"

    def test_charge_with_explicit_fee_and_modifier(
        self, clinician_client: TestClient, cpt_code: dict, telehealth_modifier: dict, sample_client: Client
    ) -> None:
        response = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges",
            json={"code": "90834", "fee": "120", "modifier": "95", "justify": "F41.1"}
        )

        assert response.status_code == 201
        assert response.json()["fee"] == "120.00"
        assert response.json()["modifier"] == "95"

    def test_unknown_cpt_code(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges", json={"code": "99999"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Unknown or inactive CPT code: 99999"

    def test_unknown_modifier(self, clinician_client: TestClient, cpt_code: dict, sample_client: Client) -> None:
        response = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges", json={"code": "90834", "modifier": "GT"}
        )

        assert response.status_code == 400

    def test_payment_validation(self, clinician_client: TestClient, sample_client: Client) -> None:
        zero = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/payments", json={"amount": "0"}
        )
        bad_method = clinician_client.post(
            f"{API}/billing/clients/{sample_client.id}/payments", json={"amount": "10", "method": "barter"}
        )

        assert zero.status_code == 400
        assert bad_method.status_code == 400

    def test_balance(self, clinician_client: TestClient, cpt_code: dict, sample_client: Client) -> None:
        """Balance is total charges less total payments"""
        base = f"{API}/billing/clients/{sample_client.id}"
        clinician_client.post(f"{base}/charges", json={"code": "90834", "units": 2})
        clinician_client.post(f"{base}/payments", json={"amount": "100", "method": "card", "reference": "AUTH-1"})

        response = clinician_client.get(base)

        assert response.status_code == 200
        data = response.json()
        assert data["totalCharges"] == "300.00"
        assert data["totalPayments"] == "100.00"
        assert data["balance"] == "200.00"
        assert data["chargeCount"] == 1
        assert data["paymentCount"] == 1
        assert data["payments"][0]["method"] == "card"

    def test_empty_ledger(self, clinician_client: TestClient, sample_client: Client) -> None:
        data = clinician_client.get(f"{API}/billing/clients/{sample_client.id}").json()

        assert data["balance"] == "0.00"
        assert data["charges"] == []

    def test_outsider_cannot_bill(self, outsider_client: TestClient, cpt_code: dict, sample_client: Client) -> None:
        response = outsider_client.post(
            f"{API}/billing/clients/{sample_client.id}/charges", json={"code": "90834"}
        )

        assert response.status_code == 403
