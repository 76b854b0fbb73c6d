import pytest
from fastapi.testclient import TestClient

from emhr.domain.clients.models import Client
from tests.conftest import API


def _add_goal(test_client: TestClient, patient_id: int, text: str) -> dict:
    response = test_client.post(f"{API}/treatment-goals", json={"patientId": patient_id, "goalText": text})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.notes
@pytest.mark.integration
class TestTreatmentGoals:
    """Client treatment goals"""

    def test_create_goal(self, clinician_client: TestClient, sample_client: Client) -> None:
        goal = _add_goal(clinician_client, sample_client.id, "  Reduce panic attacks to one per week  ")

        assert goal["goalText"] == "Reduce panic attacks to one per week"
        assert goal["status"] == "active"
        assert goal["achievedAt"] is None

    def test_blank_goal_rejected(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.post(
            f"{API}/treatment-goals", json={"patientId": sample_client.id, "goalText": "   "}
        )

        assert response.status_code == 400

    def test_outsider_cannot_add_goal(self, outsider_client: TestClient, sample_client: Client) -> None:
        response = outsider_client.post(
            f"{API}/treatment-goals", json={"patientId": sample_client.id, "goalText": "Sleep 7 hours"}
        )

        assert response.status_code == 403

    def test_list_defaults_to_active(self, clinician_client: TestClient, sample_client: Client) -> None:
        first = _add_goal(clinician_client, sample_client.id, "Sleep 7 hours")
        _add_goal(clinician_client, sample_client.id, "Return to work")
        clinician_client.patch(f"{API}/treatment-goals/{first['id']}", json={"status": "achieved"})

        response = clinician_client.get(f"{API}/treatment-goals", params={"patientId": sample_client.id})

        assert response.status_code == 200
        data = response.json()
        assert [g["goalText"] for g in data["goals"]] == ["Return to work"]
        assert data["activeCount"] == 1
        assert list(data["grouped"]) == ["active"]

    def test_list_all_groups_by_status(self, clinician_client: TestClient, sample_client: Client) -> None:
        first = _add_goal(clinician_client, sample_client.id, "Sleep 7 hours")
        _add_goal(clinician_client, sample_client.id, "Return to work")
        clinician_client.patch(f"{API}/treatment-goals/{first['id']}", json={"status": "discontinued"})

        data = clinician_client.get(
            f"{API}/treatment-goals", params={"patientId": sample_client.id, "includeAll": True}
        ).json()

        assert len(data["goals"]) == 2
        assert set(data["grouped"]) == {"active", "discontinued"}

    def test_achieved_sets_timestamp(self, clinician_client: TestClient, sample_client: Client) -> None:
        goal = _add_goal(clinician_client, sample_client.id, "Sleep 7 hours")

        achieved = clinician_client.patch(f"{API}/treatment-goals/{goal['id']}", json={"status": "achieved"})
        reopened = clinician_client.patch(f"{API}/treatment-goals/{goal['id']}", json={"status": "active"})

        assert achieved.json()["achievedAt"] is not None
        assert reopened.json()["achievedAt"] is None

    def test_invalid_status(self, clinician_client: TestClient, sample_client: Client) -> None:
        goal = _add_goal(clinician_client, sample_client.id, "Sleep 7 hours")

        response = clinician_client.patch(f"{API}/treatment-goals/{goal['id']}", json={"status": "finished"})

        assert response.status_code == 400

    def test_unknown_goal(self, clinician_client: TestClient) -> None:
        response = clinician_client.patch(f"{API}/treatment-goals/9999", json={"status": "achieved"})

        assert response.status_code == 404


@pytest.mark.notes
@pytest.mark.integration
class TestInterventionLibrary:
    """Tiered intervention library and favorites"""

    @pytest.fixture
    def library(self, admin_client: TestClient) -> dict:
        created = {}
        for name, tier, modality in (
            ("Active listening", 1, None),
            ("Cognitive restructuring", 2, "CBT"),
            ("Distress tolerance", 2, "DBT"),
            ("Safety planning", 3, None),
            ("Psychoeducation", 4, None),
        ):
            response = admin_client.post(f"{API}/interventions", json={
                "interventionName": name, "interventionTier": tier, "modality": modality,
            })
            assert response.status_code == 201, response.text
            created[name] = response.json()["id"]
        return created

    def test_library_grouped_by_tier(self, clinician_client: TestClient, library: dict) -> None:
        response = clinician_client.get(f"{API}/interventions")

        assert response.status_code == 200
        data = response.json()
        assert data["totalCount"] == 5
        assert [i["interventionName"] for i in data["interventions"]["tier1"]] == ["Active listening"]
        assert set(data["interventions"]["tier2"]) == {"CBT", "DBT"}
        assert data["interventions"]["tier3"][0]["interventionName"] == "Safety planning"
        assert data["favorites"] == []

    def test_filter_by_tier(self, clinician_client: TestClient, library: dict) -> None:
        data = clinician_client.get(f"{API}/interventions", params={"tier": 2}).json()

        assert data["totalCount"] == 2
        assert data["interventions"]["tier1"] == []

    def test_invalid_tier(self, clinician_client: TestClient) -> None:
        response = clinician_client.get(f"{API}/interventions", params={"tier": 7})

        assert response.status_code == 400

    def test_non_admin_cannot_add(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(
            f"{API}/interventions", json={"interventionName": "Grounding", "interventionTier": 1}
        )

        assert response.status_code == 403

    def test_toggle_favorite(self, clinician_client: TestClient, library: dict) -> None:
        intervention_id = library["Safety planning"]

        added = clinician_client.post(f"{API}/interventions/{intervention_id}/favorite")
        assert added.json()["isFavorite"] is True

        favorites = clinician_client.get(f"{API}/interventions").json()["favorites"]
        assert [f["id"] for f in favorites] == [intervention_id]

        removed = clinician_client.post(f"{API}/interventions/{intervention_id}/favorite")
        assert removed.json()["isFavorite"] is False

    def test_favorites_are_per_user(
        self, clinician_client: TestClient, intern_client: TestClient, library: dict
    ) -> None:
        clinician_client.post(f"{API}/interventions/{library['Psychoeducation']}/favorite")

        assert intern_client.get(f"{API}/interventions").json()["favorites"] == []

    def test_favorite_unknown_intervention(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/interventions/9999/favorite")

        assert response.status_code == 404
