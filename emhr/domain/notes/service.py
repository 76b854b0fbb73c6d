"""
Clinical Notes Service Layer

Business logic for clinical documentation:
- note authoring, autosave drafts and addenda
- the signing workflow (draft -> pending_review -> signed/locked)
- supervisor co-signature
- diagnosis sync into the problem list on signing
"""

from typing import Optional, List, Dict, Any
from datetime import date, datetime, timedelta
import logging

from sqlalchemy.exc import SQLAlchemyError

from emhr.core.exceptions import (
    AuthorizationError, BusinessLogicError, LockedResourceError, NotFoundError,
    ValidationError, handle_database_error
)
from emhr.core.permissions import PermissionChecker
from emhr.domain.audit.service import AuditLogger
from emhr.domain.auth.models import User
from emhr.domain.auth.repository import SupervisionRepository
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.diagnoses.service import ProblemListService
from emhr.domain.notes.models import (
    ClinicalNote, NoteDraft, NoteStatus, NoteType, SupervisorReviewStatus, EDITABLE_STATUSES
)
from emhr.domain.notes.repository import ClinicalNoteRepository, NoteDraftRepository
from emhr.domain.scheduling.models import Appointment
from emhr.domain.settings.service import (
    SettingsService, ClinicalSettingsService, REQUIRE_COSIGN_KEY, ALLOW_POST_SIGNATURE_EDITS_KEY
)

logger = logging.getLogger(__name__)

# Content columns a client may set on create/update
NOTE_CONTENT_FIELDS = (
    "template_type", "service_duration", "service_location", "appointment_id", "billing_id",
    "behavior_problem", "intervention", "response", "plan",
    "risk_present", "risk_assessment",
    "goals_addressed", "interventions_selected", "client_presentation",
    "diagnosis_codes", "presenting_concerns", "clinical_observations", "mental_status_exam",
    "symptoms_reported", "symptoms_observed", "clinical_justification",
    "differential_diagnosis", "severity_specifiers", "functional_impairment",
    "duration_of_symptoms", "previous_diagnoses",
)

UPDATABLE_FIELDS = NOTE_CONTENT_FIELDS + ("note_type", "service_date", "status")

# Updatable columns that may not be cleared, keyed to their request names
REQUIRED_FIELDS = {
    "note_type": "noteType",
    "service_date": "serviceDate",
    "status": "status",
    "template_type": "templateType",
}

PENDING_LOOKBACK_DAYS = 30


class ClinicalNoteService:
    """Service layer for clinical notes"""

    def __init__(self, db, current_user: User, audit: Optional[AuditLogger] = None):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.note_repo = ClinicalNoteRepository(db)
        self.draft_repo = NoteDraftRepository(db)
        self.client_repo = ClientRepository(db)
        self.supervision_repo = SupervisionRepository(db)
        self.problem_list = ProblemListService(db, current_user)
        self.audit = audit or AuditLogger(db, current_user)

    # Helpers

    def _get_note_or_404(self, note_id: int) -> ClinicalNote:
        note = self.note_repo.get_by_id(note_id)
        if not note:
            raise NotFoundError("Note not found")
        return note

    def _ensure_author_or_admin(self, note: ClinicalNote, action: str):
        if note.provider_id != self.current_user.id and not self.permissions.is_admin:
            raise AuthorizationError(f"Only the note's author can {action} this note")

    def _commit(self, operation: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_error(e, operation)

    # Authoring

    def create_note(self, data: Dict[str, Any]) -> ClinicalNote:
        """Create a draft note authored by the current user"""
        for field, label in (("patient_id", "patientId"), ("note_type", "noteType"), ("service_date", "serviceDate")):
            if not data.get(field):
                raise ValidationError(f"Missing required field: {label}")

        patient_id = data["patient_id"]
        if not self.client_repo.get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_can_create_notes(patient_id)

        appointment = None
        if data.get("appointment_id"):
            appointment = self.db.query(Appointment).filter(Appointment.id == data["appointment_id"]).first()
            if not appointment:
                raise NotFoundError("Appointment not found")
            if appointment.patient_id != patient_id:
                raise ValidationError("Appointment belongs to a different client")

        note_data = {field: data[field] for field in NOTE_CONTENT_FIELDS if data.get(field) is not None}
        note_data.update({
            "patient_id": patient_id,
            "provider_id": self.current_user.id,
            "note_type": data["note_type"],
            "service_date": data["service_date"],
            "status": NoteStatus.DRAFT,
            "supervisor_review_required": self._review_required(data.get("supervisor_review_required")),
            "last_autosave_at": datetime.utcnow(),
        })
        note_data.setdefault("template_type", "BIRP")

        note = self.note_repo.create(note_data)
        if appointment:
            appointment.clinical_note_id = note.id
        self._commit("create clinical note")

        logger.info(f"Note {note.id} created for client {patient_id} by user {self.current_user.id}")
        self.audit.create_note(note.id, patient_id, note.note_type.value)
        return note

    def _review_required(self, requested: Optional[bool]) -> bool:
        if SettingsService(self.db).get_bool(REQUIRE_COSIGN_KEY) and \
                self.supervision_repo.has_active_supervisor(self.current_user.id):
            return True
        return bool(requested)

    def get_note(self, note_id: Optional[int] = None, note_uuid: Optional[str] = None) -> Dict[str, Any]:
        if note_id is None and not note_uuid:
            raise ValidationError("Note ID or UUID is required")

        note = self.note_repo.get_by_id(note_id) if note_id is not None else self.note_repo.get_by_uuid(note_uuid)
        if not note:
            raise NotFoundError("Note not found")
        self.permissions.ensure_can_view_notes(note.patient_id)

        addenda = self.note_repo.get_addenda(note.id)
        self.audit.view_note(note.id, note.patient_id)
        return {"note": note, "addenda": addenda}

    def get_patient_notes(
        self,
        patient_id: int,
        note_type: Optional[NoteType] = None,
        status: Optional[NoteStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[ClinicalNote]:
        if not self.client_repo.get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_can_view_notes(patient_id)
        return self.note_repo.get_patient_notes(
            patient_id, note_type=note_type, status=status, start_date=start_date, end_date=end_date
        )

    def update_note(self, note_id: int, data: Dict[str, Any]) -> ClinicalNote:
        note = self._get_note_or_404(note_id)

        if note.is_locked:
            raise LockedResourceError("Cannot update locked note. Create an addendum instead.")
        if note.status == NoteStatus.PENDING_REVIEW:
            raise BusinessLogicError("Note is awaiting supervisor review and cannot be edited")
        self._ensure_author_or_admin(note, "edit")

        changes = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS}
        cleared = [name for field, name in REQUIRED_FIELDS.items()
                   if field in changes and changes[field] is None]
        if cleared:
            raise ValidationError(f"Fields cannot be empty: {', '.join(cleared)}")
        if "status" in changes and changes["status"] not in EDITABLE_STATUSES:
            raise ValidationError("Status can only be set to draft or in_progress; use the sign workflow")
        if not changes:
            raise ValidationError("No fields to update")

        for field, value in changes.items():
            setattr(note, field, value)
        note.last_autosave_at = datetime.utcnow()
        self._commit("update clinical note")

        self.audit.edit_note(note.id, note.patient_id, ",".join(sorted(changes)))
        return note

    def delete_note(self, note_id: int):
        note = self._get_note_or_404(note_id)

        if note.is_locked or note.status == NoteStatus.SIGNED or note.signed_at is not None:
            raise LockedResourceError("Cannot delete signed notes")
        self._ensure_author_or_admin(note, "delete")

        patient_id = note.patient_id
        self.db.query(Appointment).filter(Appointment.clinical_note_id == note.id).update(
            {Appointment.clinical_note_id: None}, synchronize_session=False
        )
        self.draft_repo.delete_for_note(note.id)
        self.note_repo.delete(note)
        self._commit("delete clinical note")

        logger.info(f"Note {note_id} deleted by user {self.current_user.id}")
        self.audit.delete_note(note_id, patient_id, "draft_deleted")

    # Supervision / signing

    def submit_for_review(self, note_id: int) -> ClinicalNote:
        note = self._get_note_or_404(note_id)
        self._ensure_author_or_admin(note, "submit")

        if note.is_locked:
            raise LockedResourceError("Note is already signed and locked")
        if not note.supervisor_review_required:
            raise BusinessLogicError("Note does not require supervisor review")
        if note.status not in EDITABLE_STATUSES:
            raise BusinessLogicError("Only draft notes can be submitted for review")

        note.status = NoteStatus.PENDING_REVIEW
        note.supervisor_review_status = SupervisorReviewStatus.PENDING
        note.submitted_for_review_at = datetime.utcnow()
        self._commit("submit note for review")
        return note

    def supervisor_cosign(self, note_id: int, approved: bool = True, comments: Optional[str] = None) -> ClinicalNote:
        if not self.permissions.is_supervisor:
            raise AuthorizationError("Access denied - supervisor role required")

        note = self._get_note_or_404(note_id)

        if not note.supervisor_review_required:
            raise BusinessLogicError("Note does not require supervisor review")
        if note.supervisor_review_status == SupervisorReviewStatus.APPROVED:
            raise BusinessLogicError("Note has already been reviewed")
        if note.status != NoteStatus.PENDING_REVIEW:
            raise BusinessLogicError("Note has not been submitted for review")
        if not self.supervision_repo.get_active_link(note.provider_id, self.current_user.id):
            raise AuthorizationError("You are not an active supervisor for this note's author")
        if not approved and not (comments or "").strip():
            raise ValidationError("Comments are required when returning a note for revision")

        now = datetime.utcnow()
        note.supervisor_signed_by = self.current_user.id
        note.supervisor_signed_at = now
        note.supervisor_comments = comments
        if approved:
            note.supervisor_review_status = SupervisorReviewStatus.APPROVED
        else:
            note.supervisor_review_status = SupervisorReviewStatus.REJECTED
            note.status = NoteStatus.DRAFT
        self._commit("supervisor co-sign")

        logger.info(f"Note {note.id} {'approved' if approved else 'returned'} by supervisor {self.current_user.id}")
        self.audit.sign_note(note.id, note.patient_id, is_supervisor=True)
        return note

    def sign_note(self, note_id: int, signature_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Sign and lock a note; diagnosis notes also update the problem list"""
        note = self._get_note_or_404(note_id)

        if note.is_locked:
            raise BusinessLogicError("Note is already signed and locked")
        if note.supervisor_review_required and note.supervisor_review_status != SupervisorReviewStatus.APPROVED:
            raise BusinessLogicError("Note requires supervisor approval before signing")
        self._ensure_author_or_admin(note, "sign")

        now = datetime.utcnow()
        note.status = NoteStatus.SIGNED
        note.is_locked = True
        note.signed_at = now
        note.signed_by = self.current_user.id
        note.signature_data = signature_data
        note.locked_at = now

        diagnosis_count = 0
        if note.note_type == NoteType.DIAGNOSIS:
            diagnosis_count = self.problem_list.sync_from_note(note)
        self._commit("sign clinical note")

        logger.info(f"Note {note.id} signed by user {self.current_user.id}")
        self.audit.sign_note(note.id, note.patient_id)
        return {
            "note": note,
            "signed_at": now,
            "diagnosis_synced": diagnosis_count > 0,
            "diagnosis_count": diagnosis_count,
        }

    def create_addendum(self, parent_note_id: int, reason: str, content: str) -> ClinicalNote:
        if not parent_note_id or not (reason or "").strip() or not (content or "").strip():
            raise ValidationError("Missing required fields: parentNoteId, addendumReason, addendumContent")

        parent = self.note_repo.get_by_id(parent_note_id)
        if not parent:
            raise NotFoundError("Parent note not found")
        if not ClinicalSettingsService(self.db).get_bool(ALLOW_POST_SIGNATURE_EDITS_KEY, default=True):
            raise AuthorizationError("Post-signature addenda are disabled")
        if not parent.is_locked:
            raise BusinessLogicError("Addenda can only be added to signed notes")
        self.permissions.ensure_can_create_notes(parent.patient_id)

        addendum = self.note_repo.create({
            "patient_id": parent.patient_id,
            "provider_id": self.current_user.id,
            "note_type": parent.note_type,
            "template_type": "addendum",
            "service_date": parent.service_date,
            "parent_note_id": parent.id,
            "is_addendum": True,
            "addendum_reason": reason.strip(),
            "plan": content,
            "status": NoteStatus.DRAFT,
            "is_locked": False,
        })
        self._commit("create addendum")

        self.audit.create_addendum(addendum.id, parent.id, parent.patient_id)
        return addendum

    # Drafts

    def autosave(self, data: Dict[str, Any]) -> NoteDraft:
        patient_id = data.get("patient_id")
        if not patient_id or data.get("draft_content") is None:
            raise ValidationError("Missing required fields: patientId, draftContent")
        self.permissions.ensure_can_create_notes(patient_id)

        note_id = data.get("note_id")
        if note_id:
            note = self._get_note_or_404(note_id)
            if note.is_locked:
                raise LockedResourceError("Cannot autosave a locked note")

        note_type = data.get("note_type")
        if isinstance(note_type, NoteType):
            note_type = note_type.value

        draft = self.draft_repo.find_for_upsert(
            provider_id=self.current_user.id,
            patient_id=patient_id,
            note_id=note_id,
            appointment_id=data.get("appointment_id"),
            note_type=note_type,
            service_date=data.get("service_date"),
        )
        now = datetime.utcnow()
        if draft:
            draft.draft_content = data["draft_content"]
            draft.note_type = note_type
            draft.service_date = data.get("service_date")
            draft.saved_at = now
        else:
            draft = self.draft_repo.add({
                "note_id": note_id,
                "provider_id": self.current_user.id,
                "patient_id": patient_id,
                "appointment_id": data.get("appointment_id"),
                "draft_content": data["draft_content"],
                "note_type": note_type,
                "service_date": data.get("service_date"),
                "saved_at": now,
            })
        self._commit("autosave note draft")
        return draft

    def get_drafts(
        self,
        note_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
        patient_id: Optional[int] = None
    ) -> Dict[str, Any]:
        if note_id or appointment_id or patient_id:
            draft = self.draft_repo.get_latest(
                self.current_user.id, note_id=note_id, appointment_id=appointment_id, patient_id=patient_id
            )
            if not draft:
                raise NotFoundError("No draft found")
            return {"draft": draft}

        drafts = self.draft_repo.get_all_for_provider(self.current_user.id)
        if not drafts:
            raise NotFoundError("No draft found")
        return {"drafts": drafts}

    # Work queues

    def my_pending_notes(self) -> Dict[str, Any]:
        today = date.today()
        drafts = self.note_repo.get_provider_drafts(self.current_user.id)
        missing = self.note_repo.get_appointments_missing_notes(
            self.current_user.id, today - timedelta(days=PENDING_LOOKBACK_DAYS), today
        )

        combined = [
            {"type": "draft", "id": n.id, "patient_id": n.patient_id, "patient_name": n.patient_name,
             "service_date": n.service_date, "note_type": n.note_type.value, "status": n.status.value}
            for n in drafts
        ] + [
            {"type": "missing", "id": a.id, "patient_id": a.patient_id,
             "patient_name": a.patient.full_name if a.patient else None,
             "service_date": a.event_date, "note_type": None, "status": a.status.value}
            for a in missing
        ]
        combined.sort(key=lambda item: item["service_date"], reverse=True)

        return {
            "drafts": drafts,
            "missing": missing,
            "combined": combined[:10],
        }

    def pending_supervisor_review(self) -> List[ClinicalNote]:
        if not self.permissions.is_supervisor:
            raise AuthorizationError("Access denied - supervisor role required")
        return self.note_repo.get_pending_supervisor_review(self.permissions.get_supervisee_ids())
