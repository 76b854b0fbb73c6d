from pydantic import Field
from typing import Optional, List
from datetime import datetime

from emhr.api.v1.common import CamelModel


class DocumentCategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    parent_id: Optional[int] = None


class DocumentCategoryResponse(CamelModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    is_active: bool


class DocumentCategoryListResponse(CamelModel):
    success: bool = True
    categories: List[DocumentCategoryResponse]


class DocumentResponse(CamelModel):
    id: int
    patient_id: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    file_name: str
    mime_type: Optional[str] = None
    file_size: int
    sha256: str
    description: Optional[str] = None
    uploaded_by: int
    uploader_name: Optional[str] = None
    created_at: Optional[datetime] = None


class DocumentListResponse(CamelModel):
    success: bool = True
    patient_id: int
    documents: List[DocumentResponse]
    count: int


class DocumentUploadResponse(CamelModel):
    success: bool = True
    document_id: int
    message: str
    document: DocumentResponse
