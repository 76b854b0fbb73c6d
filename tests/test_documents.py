import pytest
from pathlib import Path
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from emhr.core.config import settings
from emhr.domain.audit.models import AuditLog
from emhr.domain.clients.models import Client
from emhr.domain.documents.service import safe_file_name
from tests.conftest import API


@pytest.fixture(autouse=True)
def document_storage(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.setattr(settings, "DOCUMENT_STORAGE_PATH", str(tmp_path))
    return tmp_path


@pytest.fixture
def intake_category(admin_client: TestClient) -> dict:
    response = admin_client.post(f"{API}/documents/categories", json={"name": "Intake Forms"})
    assert response.status_code == 201, response.text
    return response.json()


def _upload(test_client: TestClient, patient_id: int, content: bytes = b"%PDF-1.4 consent", **form) -> dict:
    response = test_client.post(
        f"{API}/documents/clients/{patient_id}",
        files={"file": ("consent form.pdf", content, "application/pdf")},
        data=form,
    )
    assert response.status_code == 201, response.text
    return response.json()["document"]


@pytest.mark.clients
@pytest.mark.unit
class TestFileNames:
    @pytest.mark.parametrize("raw,expected", [
        ("consent.pdf", "consent.pdf"),
        ("../../etc/passwd", "passwd"),
        ("intake form (1).pdf", "intake_form_1_.pdf"),
        ("", "document"),
    ])
    def test_safe_file_name(self, raw: str, expected: str) -> None:
        assert safe_file_name(raw) == expected


@pytest.mark.clients
@pytest.mark.integration
class TestDocumentCategories:
    """Document category administration"""

    def test_create_and_list(self, clinician_client: TestClient, intake_category: dict) -> None:
        categories = clinician_client.get(f"{API}/documents/categories").json()["categories"]

        assert [c["name"] for c in categories] == ["Intake Forms"]

    def test_duplicate_category(self, admin_client: TestClient, intake_category: dict) -> None:
        response = admin_client.post(f"{API}/documents/categories", json={"name": "Intake Forms"})

        assert response.status_code == 409

    def test_unknown_parent(self, admin_client: TestClient) -> None:
        response = admin_client.post(f"{API}/documents/categories", json={"name": "Labs", "parentId": 9999})

        assert response.status_code == 404

    def test_non_admin_cannot_create(self, clinician_client: TestClient) -> None:
        response = clinician_client.post(f"{API}/documents/categories", json={"name": "Labs"})

        assert response.status_code == 403


@pytest.mark.clients
@pytest.mark.integration
class TestClientDocuments:
    """Upload, download and delete of chart documents"""

    def test_upload_stores_file(
        self, clinician_client: TestClient, sample_client: Client,
        intake_category: dict, document_storage: Path, db_session: Session
    ) -> None:
        document = _upload(
            clinician_client, sample_client.id,
            categoryId=str(intake_category["id"]), description="Signed consent",
        )

        assert document["fileName"] == "consent_form.pdf"
        assert document["categoryName"] == "Intake Forms"
        assert document["uploaderName"] == "Carla Clinician"
        assert document["fileSize"] == len(b"%PDF-1.4 consent")
        assert len(list((document_storage / str(sample_client.id)).iterdir())) == 1

        entry = db_session.query(AuditLog).filter(AuditLog.action == "upload_document").one()
        assert entry.resource_id == document["id"]
        assert entry.details["file_name"] == "consent_form.pdf"

    def test_empty_file_rejected(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.post(
            f"{API}/documents/clients/{sample_client.id}",
            files={"file": ("empty.txt", b"", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Uploaded file is empty"

    def test_oversized_file_rejected(self, monkeypatch, clinician_client: TestClient, sample_client: Client) -> None:
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)

        response = clinician_client.post(
            f"{API}/documents/clients/{sample_client.id}",
            files={"file": ("big.pdf", b"x", "application/pdf")},
        )

        assert response.status_code == 400

    def test_unknown_category(self, clinician_client: TestClient, sample_client: Client) -> None:
        response = clinician_client.post(
            f"{API}/documents/clients/{sample_client.id}",
            files={"file": ("a.pdf", b"data", "application/pdf")},
            data={"categoryId": "9999"},
        )

        assert response.status_code == 404

    def test_outsider_cannot_upload(self, outsider_client: TestClient, sample_client: Client) -> None:
        response = outsider_client.post(
            f"{API}/documents/clients/{sample_client.id}",
            files={"file": ("a.pdf", b"data", "application/pdf")},
        )

        assert response.status_code == 403

    def test_list_filtered_by_category(
        self, clinician_client: TestClient, sample_client: Client, intake_category: dict
    ) -> None:
        _upload(clinician_client, sample_client.id, categoryId=str(intake_category["id"]))
        _upload(clinician_client, sample_client.id)

        everything = clinician_client.get(f"{API}/documents/clients/{sample_client.id}").json()
        intake = clinician_client.get(
            f"{API}/documents/clients/{sample_client.id}", params={"categoryId": intake_category["id"]}
        ).json()

        assert everything["count"] == 2
        assert intake["count"] == 1

    def test_download(self, clinician_client: TestClient, intern_client: TestClient, sample_client: Client) -> None:
        document = _upload(clinician_client, sample_client.id, content=b"treatment consent v2")

        response = intern_client.get(f"{API}/documents/{document['id']}/download")

        assert response.status_code == 200
        assert response.content == b"treatment consent v2"
        assert response.headers["content-type"].startswith("application/pdf")

    def test_download_missing_file(
        self, clinician_client: TestClient, sample_client: Client, document_storage: Path
    ) -> None:
        document = _upload(clinician_client, sample_client.id)
        for stored in (document_storage / str(sample_client.id)).iterdir():
            stored.unlink()

        response = clinician_client.get(f"{API}/documents/{document['id']}/download")

        assert response.status_code == 404

    def test_only_uploader_or_admin_deletes(
        self, clinician_client: TestClient, intern_client: TestClient, sample_client: Client
    ) -> None:
        document = _upload(clinician_client, sample_client.id)

        response = intern_client.delete(f"{API}/documents/{document['id']}")

        assert response.status_code == 403

    def test_delete_hides_document(
        self, clinician_client: TestClient, admin_client: TestClient, sample_client: Client, db_session: Session
    ) -> None:
        document = _upload(clinician_client, sample_client.id)

        response = admin_client.delete(f"{API}/documents/{document['id']}")

        assert response.status_code == 200
        assert clinician_client.get(f"{API}/documents/clients/{sample_client.id}").json()["count"] == 0
        assert clinician_client.get(f"{API}/documents/{document['id']}/download").status_code == 404
        assert db_session.query(AuditLog).filter(AuditLog.action == "delete_document").count() == 1
