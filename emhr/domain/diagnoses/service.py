"""
Problem List Service Layer

Keeps a client's problem list in step with their signed diagnosis notes.
"""

from typing import Optional, List, Dict, Any
from datetime import date
import json
import logging

from emhr.core.exceptions import NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.clients.repository import ClientRepository
from emhr.domain.diagnoses.models import Diagnosis
from emhr.domain.diagnoses.repository import DiagnosisRepository

logger = logging.getLogger(__name__)


def format_icd10_code(code: str) -> str:
    """Normalise an ICD-10 code: ``f411`` / ``F41.1`` -> ``F41.1``"""
    compact = code.strip().upper().replace(".", "")
    if len(compact) > 3:
        return f"{compact[:3]}.{compact[3:]}"
    return compact


def parse_diagnosis_codes(raw: Any) -> List[Dict[str, Any]]:
    """Normalised, de-duplicated ``[{code, description, is_primary}]`` from note content"""
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("Diagnosis codes are not valid JSON")
    if not isinstance(raw, list):
        raise ValidationError("Diagnosis codes must be a list")

    parsed: Dict[str, Dict[str, Any]] = {}
    for entry in raw:
        if not isinstance(entry, dict) or not str(entry.get("code") or "").strip():
            continue
        code = format_icd10_code(str(entry["code"]))
        is_primary = bool(entry.get("isPrimary") or entry.get("is_primary"))
        if code in parsed:
            parsed[code]["is_primary"] = parsed[code]["is_primary"] or is_primary
            continue
        parsed[code] = {
            "code": code,
            "description": (entry.get("description") or "").strip() or None,
            "is_primary": is_primary,
        }
    return list(parsed.values())


class ProblemListService:
    """Service layer for client diagnoses"""

    def __init__(self, db, current_user=None):
        self.db = db
        self.current_user = current_user
        self.repo = DiagnosisRepository(db)

    def sync_from_note(self, note) -> int:
        """
        Upsert, reactivate and retire problem list rows so the client's
        active diagnoses match the note's code list. Does not commit.
        """
        codes = parse_diagnosis_codes(note.diagnosis_codes)
        if not codes:
            return 0

        service_date = note.service_date
        wanted = {entry["code"] for entry in codes}

        for entry in codes:
            existing = self.repo.get_latest_for_code(note.patient_id, entry["code"])
            if existing:
                existing.activity = True
                existing.enddate = None
                existing.is_primary = entry["is_primary"]
                existing.source_note_id = note.id
                existing.append_comment(f"Updated from diagnosis note #{note.id}")
                continue

            comment = f"Created from diagnosis note #{note.id}"
            if entry["is_primary"]:
                comment += " (Primary Diagnosis)"
            self.repo.add({
                "patient_id": note.patient_id,
                "code": entry["code"],
                "title": entry["description"] or f"Diagnosis: {entry['code']}",
                "begdate": service_date,
                "activity": True,
                "is_primary": entry["is_primary"],
                "comments": comment,
                "source_note_id": note.id,
                "created_by": note.provider_id,
            })

        self.db.flush()

        for diagnosis in self.repo.get_active(note.patient_id):
            if diagnosis.code in wanted:
                continue
            diagnosis.activity = False
            diagnosis.enddate = max(service_date, diagnosis.begdate)
            diagnosis.append_comment(f"Retired by diagnosis note #{note.id}")

        self.db.flush()
        logger.info(f"Synced {len(codes)} diagnosis code(s) from note {note.id} for client {note.patient_id}")
        return len(codes)

    def get_patient_diagnoses(
        self,
        patient_id: int,
        active_as_of: Optional[date] = None,
        include_retired: bool = False
    ) -> List[Diagnosis]:
        if not ClientRepository(self.db).get_by_id(patient_id):
            raise NotFoundError("Client not found")
        PermissionChecker(self.db, self.current_user).ensure_client_access(patient_id)
        return self.repo.get_for_patient(
            patient_id,
            active_as_of=active_as_of or date.today(),
            include_retired=include_retired
        )
