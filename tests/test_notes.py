import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from emhr.domain.audit.models import AuditLog
from emhr.domain.clients.models import Client
from emhr.domain.notes.models import ClinicalNote, NoteDraft
from emhr.domain.scheduling.models import Appointment
from tests.conftest import API


def _create_note(test_client: TestClient, payload: dict) -> int:
    response = test_client.post(f"{API}/notes/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["noteId"]


def _sign(test_client: TestClient, note_id: int):
    return test_client.post(f"{API}/notes/sign", json={"noteId": note_id})


@pytest.mark.notes
@pytest.mark.integration
class TestNoteAuthoring:
    """Creating, reading, editing and deleting draft notes"""

    def test_create_progress_note(
        self, clinician_client: TestClient, db_session: Session, progress_note_payload: dict
    ) -> None:
        """Test a clinician creates a BIRP draft"""
        response = clinician_client.post(f"{API}/notes/", json=progress_note_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["noteUuid"]

        note = clinician_client.get(f"{API}/notes/{data['noteId']}").json()["note"]
        assert note["status"] == "draft"
        assert note["templateType"] == "BIRP"
        assert note["isLocked"] is False
        assert note["providerName"] == "Carla Clinician"
        assert note["patientName"] == "John Doe"
        assert note["plan"] == "Practice thought records daily."

        actions = [a.action for a in db_session.query(AuditLog).order_by(AuditLog.id).all()]
        assert "create_note" in actions
        assert "view_note" in actions

    def test_get_by_uuid(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        created = clinician_client.post(f"{API}/notes/", json=progress_note_payload).json()

        response = clinician_client.get(f"{API}/notes/by-uuid/{created['noteUuid']}")

        assert response.status_code == 200
        assert response.json()["note"]["id"] == created["noteId"]

    @pytest.mark.parametrize("missing,label", [
        ("patientId", "patientId"),
        ("noteType", "noteType"),
        ("serviceDate", "serviceDate"),
    ])
    def test_required_fields(
        self, clinician_client: TestClient, progress_note_payload: dict, missing: str, label: str
    ) -> None:
        progress_note_payload.pop(missing)

        response = clinician_client.post(f"{API}/notes/", json=progress_note_payload)

        assert response.status_code == 400
        assert response.json()["message"] == f"Missing required field: {label}"

    def test_social_worker_cannot_write_notes(
        self, social_worker_client: TestClient, progress_note_payload: dict
    ) -> None:
        response = social_worker_client.post(f"{API}/notes/", json=progress_note_payload)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied - clinical notes are restricted to clinical staff"

    def test_social_worker_cannot_read_notes(
        self, clinician_client: TestClient, social_worker_client: TestClient,
        progress_note_payload: dict, sample_client: Client
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        assert social_worker_client.get(f"{API}/notes/{note_id}").status_code == 403
        assert social_worker_client.get(f"{API}/notes/patient/{sample_client.id}").status_code == 403

    def test_outsider_cannot_read_notes(
        self, clinician_client: TestClient, outsider_client: TestClient, progress_note_payload: dict
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = outsider_client.get(f"{API}/notes/{note_id}")

        assert response.status_code == 403
        assert "care team" in response.json()["message"]

    def test_update_draft(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.put(
            f"{API}/notes/{note_id}", json={"plan": "Follow up in one week.", "riskPresent": False}
        )

        assert response.status_code == 200
        assert response.json()["lastAutosaveAt"] is not None
        note = clinician_client.get(f"{API}/notes/{note_id}").json()["note"]
        assert note["plan"] == "Follow up in one week."

    @pytest.mark.parametrize("field", ["noteType", "serviceDate", "status", "templateType"])
    def test_update_cannot_clear_required_field(
        self, clinician_client: TestClient, progress_note_payload: dict, field: str
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.put(f"{API}/notes/{note_id}", json={field: None})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert field in response.json()["message"]
        assert clinician_client.get(f"{API}/notes/{note_id}").json()["note"]["noteType"] == "progress"

    def test_status_cannot_jump_to_signed(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.put(f"{API}/notes/{note_id}", json={"status": "signed"})

        assert response.status_code == 400

    def test_only_author_edits(
        self, clinician_client: TestClient, intern_client: TestClient, progress_note_payload: dict
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = intern_client.put(f"{API}/notes/{note_id}", json={"plan": "Changed"})

        assert response.status_code == 403

    def test_list_patient_notes_with_filters(
        self, clinician_client: TestClient, progress_note_payload: dict, sample_client: Client
    ) -> None:
        _create_note(clinician_client, progress_note_payload)
        _create_note(clinician_client, dict(progress_note_payload, noteType="crisis", serviceDate="2024-01-05"))

        everything = clinician_client.get(f"{API}/notes/patient/{sample_client.id}").json()
        crisis_only = clinician_client.get(
            f"{API}/notes/patient/{sample_client.id}", params={"noteType": "crisis"}
        ).json()

        assert everything["totalCount"] == 2
        assert everything["notes"][0]["serviceDate"] == date.today().isoformat()
        assert crisis_only["totalCount"] == 1
        assert crisis_only["filters"]["noteType"] == "crisis"

    def test_delete_draft(
        self, clinician_client: TestClient, db_session: Session, progress_note_payload: dict
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.delete(f"{API}/notes/{note_id}")

        assert response.status_code == 200
        assert db_session.query(ClinicalNote).count() == 0
        assert db_session.query(AuditLog).filter(AuditLog.action == "delete_note").count() == 1

    def test_note_linked_to_appointment(
        self, clinician_client: TestClient, db_session: Session,
        progress_note_payload: dict, appointment_payload: dict
    ) -> None:
        appointment_id = clinician_client.post(f"{API}/appointments", json=appointment_payload).json()["appointmentId"]

        _create_note(clinician_client, dict(progress_note_payload, appointmentId=appointment_id))

        db_session.expire_all()
        appointment = db_session.query(Appointment).filter(Appointment.id == appointment_id).one()
        assert appointment.clinical_note_id is not None


@pytest.mark.notes
@pytest.mark.integration
class TestSigning:
    """Signing locks a note"""

    def test_sign_locks_note(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = _sign(clinician_client, note_id)

        assert response.status_code == 200
        data = response.json()
        assert data["signedAt"]
        assert data["diagnosisSynced"] is False
        assert data["diagnosisCount"] == 0

        note = clinician_client.get(f"{API}/notes/{note_id}").json()["note"]
        assert note["status"] == "signed"
        assert note["isLocked"] is True
        assert note["signerName"] == "Carla Clinician"

    def test_locked_note_cannot_be_edited(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)
        _sign(clinician_client, note_id)

        response = clinician_client.put(f"{API}/notes/{note_id}", json={"plan": "Changed"})

        assert response.status_code == 403
        assert response.json()["error_code"] == "RESOURCE_LOCKED"

    def test_signed_note_cannot_be_deleted(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)
        _sign(clinician_client, note_id)

        response = clinician_client.delete(f"{API}/notes/{note_id}")

        assert response.status_code == 403
        assert response.json()["error_code"] == "RESOURCE_LOCKED"

    def test_cannot_sign_twice(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)
        _sign(clinician_client, note_id)

        response = _sign(clinician_client, note_id)

        assert response.status_code == 400
        assert response.json()["message"] == "Note is already signed and locked"

    def test_signing_is_audited(
        self, clinician_client: TestClient, db_session: Session, progress_note_payload: dict
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)
        _sign(clinician_client, note_id)

        audit = db_session.query(AuditLog).filter(AuditLog.action == "sign_note").one()
        assert audit.resource_id == note_id

    def test_unknown_note(self, clinician_client: TestClient) -> None:
        assert _sign(clinician_client, 9999).status_code == 404


@pytest.mark.notes
@pytest.mark.integration
class TestSupervisorReview:
    """Co-signature workflow for supervised clinicians"""

    @pytest.fixture
    def review_note(self, intern_client: TestClient, progress_note_payload: dict) -> int:
        return _create_note(intern_client, dict(progress_note_payload, supervisorReviewRequired=True))

    def test_review_required_blocks_signing(self, intern_client: TestClient, review_note: int) -> None:
        response = _sign(intern_client, review_note)

        assert response.status_code == 400
        assert response.json()["message"] == "Note requires supervisor approval before signing"

    def test_full_review_cycle(
        self, intern_client: TestClient, supervisor_client: TestClient, db_session: Session, review_note: int
    ) -> None:
        """Submit, approve, then sign"""
        response = intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})
        assert response.status_code == 200

        queue = supervisor_client.get(f"{API}/notes/pending-review").json()
        assert queue["count"] == 1
        assert queue["notes"][0]["id"] == review_note

        response = supervisor_client.post(f"{API}/notes/cosign", json={"noteId": review_note, "approved": True})
        assert response.status_code == 200
        assert response.json()["reviewStatus"] == "approved"

        assert supervisor_client.get(f"{API}/notes/pending-review").json()["count"] == 0

        response = _sign(intern_client, review_note)
        assert response.status_code == 200

        note = intern_client.get(f"{API}/notes/{review_note}").json()["note"]
        assert note["status"] == "signed"
        assert note["supervisorName"] == "Sam Supervisor"

        actions = {a.action for a in db_session.query(AuditLog).all()}
        assert {"supervisor_sign_note", "sign_note"} <= actions

    def test_pending_review_note_is_read_only(
        self, intern_client: TestClient, review_note: int
    ) -> None:
        intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})

        response = intern_client.put(f"{API}/notes/{review_note}", json={"plan": "Changed"})

        assert response.status_code == 400

    def test_rejection_returns_note_to_draft(
        self, intern_client: TestClient, supervisor_client: TestClient, review_note: int
    ) -> None:
        intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})

        response = supervisor_client.post(
            f"{API}/notes/cosign",
            json={"noteId": review_note, "approved": False, "comments": "Add risk assessment."}
        )

        assert response.status_code == 200
        assert response.json()["reviewStatus"] == "rejected"
        assert response.json()["message"] == "Note returned for revision"

        note = intern_client.get(f"{API}/notes/{review_note}").json()["note"]
        assert note["status"] == "draft"
        assert note["supervisorComments"] == "Add risk assessment."

        # Revised note can be resubmitted
        intern_client.put(f"{API}/notes/{review_note}", json={"riskAssessment": "No current risk."})
        response = intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})
        assert response.status_code == 200

    def test_rejection_requires_comments(
        self, intern_client: TestClient, supervisor_client: TestClient, review_note: int
    ) -> None:
        intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})

        response = supervisor_client.post(f"{API}/notes/cosign", json={"noteId": review_note, "approved": False})

        assert response.status_code == 400

    def test_cosign_before_submit(self, supervisor_client: TestClient, review_note: int) -> None:
        response = supervisor_client.post(f"{API}/notes/cosign", json={"noteId": review_note})

        assert response.status_code == 400
        assert response.json()["message"] == "Note has not been submitted for review"

    def test_non_supervisor_cannot_cosign(
        self, intern_client: TestClient, clinician_client: TestClient, review_note: int
    ) -> None:
        intern_client.post(f"{API}/notes/submit-for-review", json={"noteId": review_note})

        response = clinician_client.post(f"{API}/notes/cosign", json={"noteId": review_note})

        assert response.status_code == 403

    def test_submit_without_review_requirement(
        self, clinician_client: TestClient, progress_note_payload: dict
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.post(f"{API}/notes/submit-for-review", json={"noteId": note_id})

        assert response.status_code == 400

    def test_cosign_setting_forces_review(
        self, admin_client: TestClient, intern_client: TestClient, clinician_client: TestClient,
        progress_note_payload: dict
    ) -> None:
        """With co-signature required, supervised clinicians' notes need review"""
        admin_client.put(f"{API}/settings", json={"settings": {"supervision.require_cosign": True}})

        intern_note = _create_note(intern_client, progress_note_payload)
        clinician_note = _create_note(clinician_client, progress_note_payload)

        assert intern_client.get(f"{API}/notes/{intern_note}").json()["note"]["supervisorReviewRequired"] is True
        assert clinician_client.get(f"{API}/notes/{clinician_note}").json()["note"]["supervisorReviewRequired"] is False


@pytest.mark.notes
@pytest.mark.integration
class TestAddenda:
    """Addenda on signed notes"""

    @pytest.fixture
    def signed_note(self, clinician_client: TestClient, progress_note_payload: dict) -> int:
        note_id = _create_note(clinician_client, progress_note_payload)
        assert _sign(clinician_client, note_id).status_code == 200
        return note_id

    def test_create_addendum(self, clinician_client: TestClient, signed_note: int) -> None:
        response = clinician_client.post(f"{API}/notes/addendum", json={
            "parentNoteId": signed_note,
            "addendumReason": "Late entry",
            "addendumContent": "Client called after session to report improved sleep.",
        })

        assert response.status_code == 201
        assert response.json()["parentNoteId"] == signed_note

        detail = clinician_client.get(f"{API}/notes/{signed_note}").json()
        assert len(detail["addenda"]) == 1
        assert detail["addenda"][0]["addendumReason"] == "Late entry"
        assert detail["addenda"][0]["plan"].startswith("Client called")
        assert detail["addenda"][0]["status"] == "draft"

    def test_addendum_inherits_parent_details(
        self, clinician_client: TestClient, db_session: Session, signed_note: int
    ) -> None:
        addendum_id = clinician_client.post(f"{API}/notes/addendum", json={
            "parentNoteId": signed_note, "addendumReason": "Correction", "addendumContent": "Text",
        }).json()["addendumId"]

        addendum = db_session.query(ClinicalNote).filter(ClinicalNote.id == addendum_id).one()
        parent = db_session.query(ClinicalNote).filter(ClinicalNote.id == signed_note).one()
        assert addendum.is_addendum is True
        assert addendum.template_type == "addendum"
        assert addendum.patient_id == parent.patient_id
        assert addendum.note_type == parent.note_type
        assert addendum.service_date == parent.service_date

    def test_addendum_requires_signed_parent(self, clinician_client: TestClient, progress_note_payload: dict) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)

        response = clinician_client.post(f"{API}/notes/addendum", json={
            "parentNoteId": note_id, "addendumReason": "Late entry", "addendumContent": "Text",
        })

        assert response.status_code == 400

    def test_addendum_requires_fields(self, clinician_client: TestClient, signed_note: int) -> None:
        response = clinician_client.post(f"{API}/notes/addendum", json={"parentNoteId": signed_note})

        assert response.status_code == 400

    def test_addenda_can_be_disabled(
        self, admin_client: TestClient, clinician_client: TestClient, signed_note: int
    ) -> None:
        admin_client.put(f"{API}/clinical-settings/allow_post_signature_edits", json={"value": False})

        response = clinician_client.post(f"{API}/notes/addendum", json={
            "parentNoteId": signed_note, "addendumReason": "Late entry", "addendumContent": "Text",
        })

        assert response.status_code == 403


@pytest.mark.notes
@pytest.mark.integration
class TestDraftsAndQueues:
    """Autosave drafts and the pending-work queues"""

    def test_autosave_upserts(self, clinician_client: TestClient, db_session: Session, sample_client: Client) -> None:
        payload = {
            "patientId": sample_client.id,
            "noteType": "progress",
            "serviceDate": date.today().isoformat(),
            "draftContent": {"plan": "first"},
        }
        first = clinician_client.post(f"{API}/notes/autosave", json=payload)
        payload["draftContent"] = {"plan": "second"}
        second = clinician_client.post(f"{API}/notes/autosave", json=payload)

        assert first.status_code == 200
        assert first.json()["draftId"] == second.json()["draftId"]
        assert db_session.query(NoteDraft).count() == 1

        response = clinician_client.get(f"{API}/notes/draft", params={"patientId": sample_client.id})
        assert response.json()["draft"]["draftContent"] == {"plan": "second"}

    def test_autosave_requires_content(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.post(f"{API}/notes/autosave", json={"patientId": sample_client.id})

        assert response.status_code == 400

    def test_autosave_rejects_locked_note(
        self, clinician_client: TestClient, progress_note_payload: dict, sample_client: Client
    ) -> None:
        note_id = _create_note(clinician_client, progress_note_payload)
        _sign(clinician_client, note_id)

        response = clinician_client.post(f"{API}/notes/autosave", json={
            "noteId": note_id, "patientId": sample_client.id, "draftContent": {"plan": "x"},
        })

        assert response.status_code == 403
        assert response.json()["error_code"] == "RESOURCE_LOCKED"

    def test_no_drafts(self, clinician_client: TestClient) -> None:
        assert clinician_client.get(f"{API}/notes/draft").status_code == 404

    def test_list_all_drafts(self, clinician_client: TestClient, sample_client: Client) -> None:
        clinician_client.post(f"{API}/notes/autosave", json={
            "patientId": sample_client.id, "draftContent": {"plan": "x"},
        })

        response = clinician_client.get(f"{API}/notes/draft")

        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_pending_combines_drafts_and_missing_notes(
        self, clinician_client: TestClient, progress_note_payload: dict, appointment_payload: dict
    ) -> None:
        clinician_client.post(f"{API}/appointments", json=appointment_payload)
        _create_note(clinician_client, progress_note_payload)

        response = clinician_client.get(f"{API}/notes/pending")

        assert response.status_code == 200
        data = response.json()
        assert data["draftCount"] == 1
        assert data["missingCount"] == 1
        assert data["totalCount"] == 2
        assert {item["type"] for item in data["combined"]} == {"draft", "missing"}
        assert data["missing"][0]["categoryName"] == "Therapy Session"

    def test_appointment_with_note_not_missing(
        self, clinician_client: TestClient, progress_note_payload: dict, appointment_payload: dict
    ) -> None:
        appointment_id = clinician_client.post(f"{API}/appointments", json=appointment_payload).json()["appointmentId"]
        note_id = _create_note(clinician_client, dict(progress_note_payload, appointmentId=appointment_id))
        _sign(clinician_client, note_id)

        data = clinician_client.get(f"{API}/notes/pending").json()

        assert data["totalCount"] == 0

    def test_non_supervisor_review_queue(self, clinician_client: TestClient) -> None:
        assert clinician_client.get(f"{API}/notes/pending-review").status_code == 403
