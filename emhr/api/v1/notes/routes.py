from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional, Dict, Any, Union
from datetime import date

from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.notes.models import NoteStatus, NoteType
from emhr.domain.notes.service import ClinicalNoteService
from emhr.api.deps import get_current_user, get_audit_logger
from emhr.api.v1.common import SuccessResponse
from emhr.api.v1.notes.schemas import (
    NoteCreate,
    NoteUpdate,
    NoteDetailResponse,
    NoteListFilters,
    PatientNotesResponse,
    NoteCreatedResponse,
    NoteUpdatedResponse,
    NoteIdRequest,
    SignNoteRequest,
    SignNoteResponse,
    CosignRequest,
    CosignResponse,
    SubmitForReviewResponse,
    AddendumCreate,
    AddendumCreatedResponse,
    AutosaveRequest,
    AutosaveResponse,
    DraftDetailResponse,
    DraftListResponse,
    PendingNotesResponse,
    PendingItem,
    MissingNoteAppointment,
    PendingReviewResponse,
)
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/notes", tags=["Clinical Notes"])


def _note_payload(note_data, **dump_options) -> Dict[str, Any]:
    data = note_data.model_dump(**dump_options)
    if note_data.diagnosis_codes is not None:
        data["diagnosis_codes"] = [entry.model_dump(by_alias=True) for entry in note_data.diagnosis_codes]
    return data


# ==================== Workflow Endpoints ====================

@router.post("/sign", response_model=SignNoteResponse)
def sign_note(
    sign_data: SignNoteRequest,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Sign and lock a note; diagnosis notes update the problem list"""
    result = ClinicalNoteService(db, current_user, audit).sign_note(sign_data.note_id, sign_data.signature_data)
    return SignNoteResponse(
        note_id=result["note"].id,
        message="Note signed and locked successfully",
        signed_at=result["signed_at"],
        diagnosis_synced=result["diagnosis_synced"],
        diagnosis_count=result["diagnosis_count"],
    )


@router.post("/submit-for-review", response_model=SubmitForReviewResponse)
def submit_for_review(
    request_data: NoteIdRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    note = ClinicalNoteService(db, current_user).submit_for_review(request_data.note_id)
    return SubmitForReviewResponse(
        note_id=note.id,
        message="Note submitted for supervisor review",
        submitted_at=note.submitted_for_review_at,
    )


@router.post("/cosign", response_model=CosignResponse)
def supervisor_cosign(
    cosign_data: CosignRequest,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Supervisor approval, or return for revision"""
    note = ClinicalNoteService(db, current_user, audit).supervisor_cosign(
        cosign_data.note_id, approved=cosign_data.approved, comments=cosign_data.comments
    )
    return CosignResponse(
        note_id=note.id,
        message="Note co-signed successfully" if cosign_data.approved else "Note returned for revision",
        reviewed_at=note.supervisor_signed_at,
        review_status=note.supervisor_review_status,
    )


@router.post("/addendum", response_model=AddendumCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_addendum(
    addendum_data: AddendumCreate,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Append an addendum to a signed note"""
    addendum = ClinicalNoteService(db, current_user, audit).create_addendum(
        addendum_data.parent_note_id, addendum_data.addendum_reason, addendum_data.addendum_content
    )
    return AddendumCreatedResponse(
        addendum_id=addendum.id,
        addendum_uuid=addendum.note_uuid,
        parent_note_id=addendum.parent_note_id,
        message="Addendum created successfully",
    )


# ==================== Draft Endpoints ====================

@router.post("/autosave", response_model=AutosaveResponse)
def autosave(
    draft_data: AutosaveRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    draft = ClinicalNoteService(db, current_user).autosave(draft_data.model_dump())
    return AutosaveResponse(draft_id=draft.id, message="Draft saved", saved_at=draft.saved_at)


@router.get("/draft", response_model=Union[DraftDetailResponse, DraftListResponse])
def get_draft(
    note_id: Optional[int] = Query(None, alias="noteId"),
    appointment_id: Optional[int] = Query(None, alias="appointmentId"),
    patient_id: Optional[int] = Query(None, alias="patientId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest draft for a note, appointment or client; all drafts without a filter"""
    result = ClinicalNoteService(db, current_user).get_drafts(
        note_id=note_id, appointment_id=appointment_id, patient_id=patient_id
    )
    if "draft" in result:
        return DraftDetailResponse(draft=result["draft"])
    return DraftListResponse(drafts=result["drafts"], count=len(result["drafts"]))


# ==================== Work Queue Endpoints ====================

@router.get("/pending", response_model=PendingNotesResponse)
def my_pending_notes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Own unsigned drafts and recent appointments without a note"""
    pending = ClinicalNoteService(db, current_user).my_pending_notes()
    drafts, missing = pending["drafts"], pending["missing"]
    return PendingNotesResponse(
        draft_count=len(drafts),
        missing_count=len(missing),
        total_count=len(drafts) + len(missing),
        drafts=drafts,
        missing=[
            MissingNoteAppointment(
                appointment_id=a.id,
                patient_id=a.patient_id,
                patient_name=a.patient.full_name if a.patient else None,
                event_date=a.event_date,
                category_name=a.category.name if a.category else None,
                status=a.status.value,
            )
            for a in missing
        ],
        combined=[PendingItem(**item) for item in pending["combined"]],
    )


@router.get("/pending-review", response_model=PendingReviewResponse)
def pending_supervisor_review(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Supervisees' notes awaiting co-signature, oldest first"""
    notes = ClinicalNoteService(db, current_user).pending_supervisor_review()
    return PendingReviewResponse(count=len(notes), notes=notes)


@router.get("/patient/{patient_id}", response_model=PatientNotesResponse)
def list_patient_notes(
    patient_id: int,
    note_type: Optional[NoteType] = Query(None, alias="noteType"),
    note_status: Optional[NoteStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notes = ClinicalNoteService(db, current_user).get_patient_notes(
        patient_id, note_type=note_type, status=note_status, start_date=start_date, end_date=end_date
    )
    return PatientNotesResponse(
        patient_id=patient_id,
        notes=notes,
        total_count=len(notes),
        filters=NoteListFilters(note_type=note_type, status=note_status, start_date=start_date, end_date=end_date),
    )


@router.get("/by-uuid/{note_uuid}", response_model=NoteDetailResponse)
def get_note_by_uuid(
    note_uuid: str,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    result = ClinicalNoteService(db, current_user, audit).get_note(note_uuid=note_uuid)
    return NoteDetailResponse(note=result["note"], addenda=result["addenda"])


# ==================== Note Endpoints ====================

@router.post("/", response_model=NoteCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_note(
    note_data: NoteCreate,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Create a draft clinical note"""
    note = ClinicalNoteService(db, current_user, audit).create_note(_note_payload(note_data, exclude_none=True))
    return NoteCreatedResponse(note_id=note.id, note_uuid=note.note_uuid, message="Note created successfully")


@router.get("/{note_id}", response_model=NoteDetailResponse)
def get_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """A note with its addenda, newest first"""
    result = ClinicalNoteService(db, current_user, audit).get_note(note_id=note_id)
    return NoteDetailResponse(note=result["note"], addenda=result["addenda"])


@router.put("/{note_id}", response_model=NoteUpdatedResponse)
def update_note(
    note_id: int,
    note_data: NoteUpdate,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    note = ClinicalNoteService(db, current_user, audit).update_note(
        note_id, _note_payload(note_data, exclude_unset=True)
    )
    return NoteUpdatedResponse(
        note_id=note.id,
        message="Note updated successfully",
        last_autosave_at=note.last_autosave_at,
    )


@router.delete("/{note_id}", response_model=SuccessResponse)
def delete_note(
    note_id: int,
    current_user: User = Depends(get_current_user),
    audit: AuditLogger = Depends(get_audit_logger),
    db: Session = Depends(get_db)
):
    """Delete an unsigned note and its drafts"""
    ClinicalNoteService(db, current_user, audit).delete_note(note_id)
    return SuccessResponse(message="Note deleted successfully")
