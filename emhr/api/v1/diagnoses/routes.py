from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from emhr.domain.auth.models import User
from emhr.domain.diagnoses.service import ProblemListService
from emhr.api.deps import get_current_user
from emhr.api.v1.diagnoses.schemas import PatientDiagnosesResponse
from emhr.infrastructure.database import get_db

router = APIRouter(prefix="/diagnoses", tags=["Diagnoses"])


@router.get("/patient/{patient_id}", response_model=PatientDiagnosesResponse)
def get_patient_diagnoses(
    patient_id: int,
    active_as_of: Optional[date] = Query(None, alias="activeAsOf"),
    include_retired: bool = Query(False, alias="includeRetired"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Client problem list as of a date, or the full history"""
    as_of = active_as_of or date.today()
    diagnoses = ProblemListService(db, current_user).get_patient_diagnoses(
        patient_id, active_as_of=as_of, include_retired=include_retired
    )
    return PatientDiagnosesResponse(
        patient_id=patient_id,
        active_as_of=as_of,
        include_retired=include_retired,
        diagnoses=diagnoses,
        count=len(diagnoses),
    )
