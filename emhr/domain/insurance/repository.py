from typing import Optional, List

from emhr.domain.insurance.models import InsuranceProvider, ClientInsurance, CoverageType


class InsuranceProviderRepository:
    """Repository for insurance payer data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, provider_data: dict) -> InsuranceProvider:
        provider = InsuranceProvider(**provider_data)
        self.db.add(provider)
        self.db.commit()
        self.db.refresh(provider)
        return provider

    def get_by_id(self, provider_id: int) -> Optional[InsuranceProvider]:
        return self.db.query(InsuranceProvider).filter(InsuranceProvider.id == provider_id).first()

    def get_by_name(self, name: str) -> Optional[InsuranceProvider]:
        return self.db.query(InsuranceProvider).filter(InsuranceProvider.name == name).first()

    def get_all(self, include_inactive: bool = False, search: Optional[str] = None) -> List[InsuranceProvider]:
        query = self.db.query(InsuranceProvider)
        if not include_inactive:
            query = query.filter(InsuranceProvider.is_active.is_(True))
        if search:
            query = query.filter(InsuranceProvider.name.ilike(f"%{search}%"))
        return query.order_by(InsuranceProvider.name).all()

    def update(self, provider: InsuranceProvider, update_data: dict) -> InsuranceProvider:
        for field, value in update_data.items():
            setattr(provider, field, value)
        self.db.commit()
        self.db.refresh(provider)
        return provider

    def delete(self, provider: InsuranceProvider):
        self.db.delete(provider)
        self.db.commit()

    def is_referenced(self, provider_id: int) -> bool:
        return self.db.query(ClientInsurance.id).filter(
            ClientInsurance.provider_id == provider_id
        ).first() is not None


class ClientInsuranceRepository:
    """Repository for client coverage rows"""

    def __init__(self, db):
        self.db = db

    def get_for_patient(self, patient_id: int) -> List[ClientInsurance]:
        rows = self.db.query(ClientInsurance).filter(ClientInsurance.patient_id == patient_id).all()
        order = list(CoverageType)
        return sorted(rows, key=lambda row: order.index(row.coverage_type))

    def get_by_type(self, patient_id: int, coverage_type: CoverageType) -> Optional[ClientInsurance]:
        return self.db.query(ClientInsurance).filter(
            ClientInsurance.patient_id == patient_id,
            ClientInsurance.coverage_type == coverage_type
        ).first()

    def save(self, insurance: ClientInsurance) -> ClientInsurance:
        self.db.add(insurance)
        self.db.commit()
        self.db.refresh(insurance)
        return insurance
