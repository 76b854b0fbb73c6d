from typing import Optional, List
from datetime import date, datetime

from emhr.api.v1.common import CamelModel


class DiagnosisResponse(CamelModel):
    id: int
    patient_id: int
    code: str
    title: str
    begdate: date
    enddate: Optional[date] = None
    activity: bool
    is_primary: bool
    comments: Optional[str] = None
    source_note_id: Optional[int] = None
    created_at: Optional[datetime] = None


class PatientDiagnosesResponse(CamelModel):
    success: bool = True
    patient_id: int
    active_as_of: date
    include_retired: bool
    diagnoses: List[DiagnosisResponse]
    count: int
