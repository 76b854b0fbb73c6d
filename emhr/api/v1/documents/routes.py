from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import Optional

from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.documents.models import ClientDocument
from emhr.domain.documents.service import DocumentCategoryService, ClientDocumentService
from emhr.api.deps import get_current_user, get_audit_logger, require_admin
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.documents.schemas import (
    DocumentCategoryCreate,
    DocumentCategoryResponse,
    DocumentCategoryListResponse,
    DocumentResponse,
    DocumentListResponse,
    DocumentUploadResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/documents", tags=["Documents"])


def _document_response(document: ClientDocument) -> DocumentResponse:
    response = DocumentResponse.model_validate(document)
    response.category_name = document.category.name if document.category else None
    response.uploader_name = document.uploader.full_name if document.uploader else None
    return response


# ==================== Category Endpoints ====================

@router.get("/categories", response_model=DocumentCategoryListResponse)
def list_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DocumentCategoryListResponse(categories=DocumentCategoryService(db).list_categories())


@router.post("/categories", response_model=DocumentCategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: DocumentCategoryCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return DocumentCategoryService(db).create_category(category_data.name, category_data.parent_id)


# ==================== Client Document Endpoints ====================

@router.get("/clients/{patient_id}", response_model=DocumentListResponse)
def list_documents(
    patient_id: int,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    documents = ClientDocumentService(db, current_user).list_documents(patient_id, category_id=category_id)
    return DocumentListResponse(
        patient_id=patient_id,
        documents=[_document_response(d) for d in documents],
        count=len(documents),
    )


@router.post("/clients/{patient_id}", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    patient_id: int,
    file: UploadFile = File(...),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    description: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Upload a document to the client's chart"""
    content = file.file.read()
    document = ClientDocumentService(db, current_user, audit).upload_document(
        patient_id,
        file_name=file.filename,
        content=content,
        mime_type=file.content_type,
        category_id=category_id,
        description=description,
    )
    return DocumentUploadResponse(
        document_id=document.id,
        message="Document uploaded successfully",
        document=_document_response(document),
    )


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    download = ClientDocumentService(db, current_user, audit).get_download(document_id)
    document = download["document"]
    return FileResponse(download["path"], media_type=document.mime_type, filename=document.file_name)


@router.delete("/{document_id}", response_model=SuccessResponse)
def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    ClientDocumentService(db, current_user, audit).delete_document(document_id)
    return SuccessResponse(message="Document deleted successfully")
