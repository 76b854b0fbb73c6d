from typing import Optional, List
from datetime import datetime
from sqlalchemy.orm import joinedload

from emhr.domain.documents.models import DocumentCategory, ClientDocument


class DocumentCategoryRepository:
    """Repository for document category data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, category_data: dict) -> DocumentCategory:
        category = DocumentCategory(**category_data)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_by_id(self, category_id: int) -> Optional[DocumentCategory]:
        return self.db.query(DocumentCategory).filter(DocumentCategory.id == category_id).first()

    def get_by_name(self, name: str) -> Optional[DocumentCategory]:
        return self.db.query(DocumentCategory).filter(DocumentCategory.name == name).first()

    def get_all(self, include_inactive: bool = False) -> List[DocumentCategory]:
        query = self.db.query(DocumentCategory)
        if not include_inactive:
            query = query.filter(DocumentCategory.is_active.is_(True))
        return query.order_by(DocumentCategory.name).all()


class ClientDocumentRepository:
    """Repository for uploaded client documents"""

    def __init__(self, db):
        self.db = db

    def create(self, document_data: dict) -> ClientDocument:
        document = ClientDocument(**document_data)
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        return document

    def get_by_id(self, document_id: int) -> Optional[ClientDocument]:
        return self.db.query(ClientDocument).options(
            joinedload(ClientDocument.category),
            joinedload(ClientDocument.uploader)
        ).filter(
            ClientDocument.id == document_id,
            ClientDocument.deleted_at.is_(None)
        ).first()

    def get_for_patient(self, patient_id: int, category_id: Optional[int] = None) -> List[ClientDocument]:
        query = self.db.query(ClientDocument).options(
            joinedload(ClientDocument.category),
            joinedload(ClientDocument.uploader)
        ).filter(
            ClientDocument.patient_id == patient_id,
            ClientDocument.deleted_at.is_(None)
        )
        if category_id:
            query = query.filter(ClientDocument.category_id == category_id)
        return query.order_by(ClientDocument.created_at.desc(), ClientDocument.id.desc()).all()

    def soft_delete(self, document: ClientDocument):
        document.deleted_at = datetime.utcnow()
        self.db.commit()
