from pydantic import Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from emhr.api.v1.common import CamelModel
from emhr.domain.notes.models import NoteStatus, NoteType, SupervisorReviewStatus


class DiagnosisCodeEntry(CamelModel):
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    is_primary: bool = False


class NoteContent(CamelModel):
    """Editable note content shared by create and update"""
    template_type: Optional[str] = Field(None, max_length=30)
    service_duration: Optional[int] = Field(None, ge=0)
    service_location: Optional[str] = Field(None, max_length=100)
    appointment_id: Optional[int] = None
    billing_id: Optional[int] = None

    behavior_problem: Optional[str] = None
    intervention: Optional[str] = None
    response: Optional[str] = None
    plan: Optional[str] = None

    risk_present: Optional[bool] = None
    risk_assessment: Optional[str] = None

    goals_addressed: Optional[List[Any]] = None
    interventions_selected: Optional[List[Any]] = None
    client_presentation: Optional[Any] = None

    diagnosis_codes: Optional[List[DiagnosisCodeEntry]] = None
    presenting_concerns: Optional[str] = None
    clinical_observations: Optional[str] = None
    mental_status_exam: Optional[Dict[str, Any]] = None
    symptoms_reported: Optional[str] = None
    symptoms_observed: Optional[str] = None
    clinical_justification: Optional[str] = None
    differential_diagnosis: Optional[str] = None
    severity_specifiers: Optional[str] = None
    functional_impairment: Optional[str] = None
    duration_of_symptoms: Optional[str] = Field(None, max_length=100)
    previous_diagnoses: Optional[str] = None


class NoteCreate(NoteContent):
    """Required fields are checked by the service so errors name them"""
    patient_id: Optional[int] = None
    note_type: Optional[NoteType] = None
    service_date: Optional[date] = None
    supervisor_review_required: Optional[bool] = None


class NoteUpdate(NoteContent):
    note_type: Optional[NoteType] = None
    service_date: Optional[date] = None
    status: Optional[NoteStatus] = None


class NoteResponse(NoteContent):
    id: int
    note_uuid: str
    patient_id: int
    patient_name: Optional[str] = None
    provider_id: int
    provider_name: Optional[str] = None
    note_type: NoteType
    service_date: date
    status: NoteStatus
    diagnosis_codes: Optional[List[Dict[str, Any]]] = None

    is_locked: bool
    signed_at: Optional[datetime] = None
    signed_by: Optional[int] = None
    signer_name: Optional[str] = None
    signature_data: Optional[Dict[str, Any]] = None
    locked_at: Optional[datetime] = None

    supervisor_review_required: bool
    supervisor_review_status: Optional[SupervisorReviewStatus] = None
    submitted_for_review_at: Optional[datetime] = None
    supervisor_signed_by: Optional[int] = None
    supervisor_signed_at: Optional[datetime] = None
    supervisor_name: Optional[str] = None
    supervisor_comments: Optional[str] = None

    is_addendum: bool
    parent_note_id: Optional[int] = None
    addendum_reason: Optional[str] = None

    last_autosave_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AddendumSummary(CamelModel):
    id: int
    note_uuid: str
    addendum_reason: Optional[str] = None
    plan: Optional[str] = None
    status: NoteStatus
    provider_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NoteDetailResponse(CamelModel):
    success: bool = True
    note: NoteResponse
    addenda: List[AddendumSummary]


class NoteListFilters(CamelModel):
    note_type: Optional[NoteType] = None
    status: Optional[NoteStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PatientNotesResponse(CamelModel):
    success: bool = True
    patient_id: int
    notes: List[NoteResponse]
    total_count: int
    filters: NoteListFilters


class NoteCreatedResponse(CamelModel):
    success: bool = True
    note_id: int
    note_uuid: str
    message: str


class NoteUpdatedResponse(CamelModel):
    success: bool = True
    note_id: int
    message: str
    last_autosave_at: Optional[datetime] = None


# Workflow requests

class NoteIdRequest(CamelModel):
    note_id: int


class SignNoteRequest(CamelModel):
    note_id: int
    signature_data: Optional[Dict[str, Any]] = None


class SignNoteResponse(CamelModel):
    success: bool = True
    note_id: int
    message: str
    signed_at: datetime
    diagnosis_synced: bool
    diagnosis_count: int


class CosignRequest(CamelModel):
    note_id: int
    approved: bool = True
    comments: Optional[str] = None


class CosignResponse(CamelModel):
    success: bool = True
    note_id: int
    message: str
    reviewed_at: datetime
    review_status: SupervisorReviewStatus


class SubmitForReviewResponse(CamelModel):
    success: bool = True
    note_id: int
    message: str
    submitted_at: datetime


class AddendumCreate(CamelModel):
    parent_note_id: Optional[int] = None
    addendum_reason: Optional[str] = None
    addendum_content: Optional[str] = None


class AddendumCreatedResponse(CamelModel):
    success: bool = True
    addendum_id: int
    addendum_uuid: str
    parent_note_id: int
    message: str


# Drafts

class AutosaveRequest(CamelModel):
    note_id: Optional[int] = None
    patient_id: Optional[int] = None
    appointment_id: Optional[int] = None
    note_type: Optional[NoteType] = None
    service_date: Optional[date] = None
    draft_content: Optional[Dict[str, Any]] = None


class AutosaveResponse(CamelModel):
    success: bool = True
    draft_id: int
    message: str
    saved_at: datetime


class DraftResponse(CamelModel):
    id: int
    note_id: Optional[int] = None
    patient_id: int
    appointment_id: Optional[int] = None
    note_type: Optional[str] = None
    service_date: Optional[date] = None
    draft_content: Dict[str, Any]
    saved_at: datetime


class DraftDetailResponse(CamelModel):
    success: bool = True
    draft: DraftResponse


class DraftListResponse(CamelModel):
    success: bool = True
    drafts: List[DraftResponse]
    count: int


# Work queues

class PendingItem(CamelModel):
    type: str
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    service_date: date
    note_type: Optional[str] = None
    status: str


class MissingNoteAppointment(CamelModel):
    appointment_id: int
    patient_id: int
    patient_name: Optional[str] = None
    event_date: date
    category_name: Optional[str] = None
    status: str


class PendingNotesResponse(CamelModel):
    success: bool = True
    draft_count: int
    missing_count: int
    total_count: int
    drafts: List[NoteResponse]
    missing: List[MissingNoteAppointment]
    combined: List[PendingItem]


class PendingReviewResponse(CamelModel):
    success: bool = True
    count: int
    notes: List[NoteResponse]
