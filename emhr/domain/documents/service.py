"""
Document Service Layer

Client document storage on the local filesystem, under
``DOCUMENT_STORAGE_PATH/<client id>/``.
"""

from typing import Optional, List, Dict, Any
from pathlib import Path
import hashlib
import logging
import re
import uuid

from emhr.core.config import settings
from emhr.core.exceptions import ConflictError, NotFoundError, ValidationError, AuthorizationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.documents.models import DocumentCategory, ClientDocument
from emhr.domain.documents.repository import DocumentCategoryRepository, ClientDocumentRepository

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_name(file_name: str) -> str:
    """Strip directory parts and unsafe characters from an uploaded name"""
    name = Path(file_name or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "document"


class DocumentCategoryService:
    def __init__(self, db):
        self.db = db
        self.repo = DocumentCategoryRepository(db)

    def list_categories(self, include_inactive: bool = False) -> List[DocumentCategory]:
        return self.repo.get_all(include_inactive=include_inactive)

    def create_category(self, name: str, parent_id: Optional[int] = None) -> DocumentCategory:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if self.repo.get_by_name(name):
            raise ConflictError(f"Document category '{name}' already exists")
        if parent_id and not self.repo.get_by_id(parent_id):
            raise NotFoundError("Parent category not found")
        return self.repo.create({"name": name, "parent_id": parent_id})


class ClientDocumentService:
    """Service layer for client documents"""

    def __init__(self, db, current_user: User, audit: Optional[AuditLogger] = None):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.repo = ClientDocumentRepository(db)
        self.category_repo = DocumentCategoryRepository(db)
        self.audit = audit or AuditLogger(db, current_user)
        self.storage_root = Path(settings.DOCUMENT_STORAGE_PATH)

    def _ensure_client(self, patient_id: int):
        if not ClientRepository(self.db).get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(patient_id)

    def list_documents(self, patient_id: int, category_id: Optional[int] = None) -> List[ClientDocument]:
        self._ensure_client(patient_id)
        return self.repo.get_for_patient(patient_id, category_id=category_id)

    def upload_document(
        self,
        patient_id: int,
        file_name: str,
        content: bytes,
        mime_type: Optional[str] = None,
        category_id: Optional[int] = None,
        description: Optional[str] = None
    ) -> ClientDocument:
        self._ensure_client(patient_id)

        if not content:
            raise ValidationError("Uploaded file is empty")
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        if len(content) > max_bytes:
            raise ValidationError(f"File exceeds the maximum upload size of {settings.MAX_UPLOAD_SIZE_MB} MB")
        if category_id and not self.category_repo.get_by_id(category_id):
            raise NotFoundError("Document category not found")

        display_name = safe_file_name(file_name)
        client_dir = self.storage_root / str(patient_id)
        client_dir.mkdir(parents=True, exist_ok=True)
        stored_path = client_dir / f"{uuid.uuid4().hex}_{display_name}"
        stored_path.write_bytes(content)

        document = self.repo.create({
            "patient_id": patient_id,
            "category_id": category_id,
            "file_name": display_name,
            "storage_path": str(stored_path),
            "mime_type": mime_type or "application/octet-stream",
            "file_size": len(content),
            "sha256": hashlib.sha256(content).hexdigest(),
            "description": description,
            "uploaded_by": self.current_user.id,
        })

        logger.info(f"Document {document.id} uploaded for client {patient_id} ({len(content)} bytes)")
        self.audit.upload_document(document.id, patient_id, display_name)
        return document

    def get_document(self, document_id: int) -> ClientDocument:
        document = self.repo.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document not found")
        self.permissions.ensure_client_access(document.patient_id)
        return document

    def get_download(self, document_id: int) -> Dict[str, Any]:
        document = self.get_document(document_id)
        path = Path(document.storage_path)
        if not path.is_file():
            logger.error(f"Document {document.id} is missing from storage at {path}")
            raise NotFoundError("Document file is missing from storage")

        self.audit.log("download_document", "document", document.id, {"client_id": document.patient_id})
        return {"document": document, "path": path}

    def delete_document(self, document_id: int):
        document = self.get_document(document_id)
        if document.uploaded_by != self.current_user.id and not self.permissions.is_admin:
            raise AuthorizationError("Only the uploader or an administrator can delete this document")

        self.repo.soft_delete(document)
        self.audit.delete_document(document.id, document.patient_id)
