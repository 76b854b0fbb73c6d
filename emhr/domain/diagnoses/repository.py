from typing import Optional, List
from datetime import date
from sqlalchemy import or_

from emhr.domain.diagnoses.models import Diagnosis


class DiagnosisRepository:
    """Repository for problem list rows. Callers own the transaction."""

    def __init__(self, db):
        self.db = db

    def add(self, diagnosis_data: dict) -> Diagnosis:
        diagnosis = Diagnosis(**diagnosis_data)
        self.db.add(diagnosis)
        return diagnosis

    def get_latest_for_code(self, patient_id: int, code: str) -> Optional[Diagnosis]:
        return self.db.query(Diagnosis).filter(
            Diagnosis.patient_id == patient_id,
            Diagnosis.code == code
        ).order_by(Diagnosis.id.desc()).first()

    def get_active(self, patient_id: int) -> List[Diagnosis]:
        return self.db.query(Diagnosis).filter(
            Diagnosis.patient_id == patient_id,
            Diagnosis.activity.is_(True),
            Diagnosis.enddate.is_(None)
        ).all()

    def get_for_patient(
        self,
        patient_id: int,
        active_as_of: Optional[date] = None,
        include_retired: bool = False
    ) -> List[Diagnosis]:
        query = self.db.query(Diagnosis).filter(Diagnosis.patient_id == patient_id)
        if not include_retired:
            query = query.filter(
                Diagnosis.begdate <= active_as_of,
                or_(Diagnosis.enddate.is_(None), Diagnosis.enddate > active_as_of),
                Diagnosis.activity.is_(True)
            )
        return query.order_by(
            Diagnosis.is_primary.desc(), Diagnosis.begdate.desc(), Diagnosis.id.desc()
        ).all()
