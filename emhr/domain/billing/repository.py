"""
Billing Repository Layer

Provides data access operations for the CPT catalogue, modifiers, and
client charges and payments.
"""

from typing import Optional, List
from sqlalchemy import or_, func

from emhr.domain.billing.models import CptCode, BillingModifier, Charge, Payment


class CptCodeRepository:
    """Repository for CPT code data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, code_data: dict) -> CptCode:
        cpt_code = CptCode(**code_data)
        self.db.add(cpt_code)
        self.db.commit()
        self.db.refresh(cpt_code)
        return cpt_code

    def get_by_id(self, code_id: int) -> Optional[CptCode]:
        return self.db.query(CptCode).filter(CptCode.id == code_id).first()

    def get_by_code(self, code: str) -> Optional[CptCode]:
        return self.db.query(CptCode).filter(CptCode.code == code).first()

    def get_all(
        self,
        category: Optional[str] = None,
        include_inactive: bool = False,
        search: Optional[str] = None
    ) -> List[CptCode]:
        query = self.db.query(CptCode)
        if not include_inactive:
            query = query.filter(CptCode.is_active.is_(True))
        if category:
            query = query.filter(CptCode.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(CptCode.code.ilike(pattern), CptCode.description.ilike(pattern)))
        return query.order_by(CptCode.category, CptCode.sort_order, CptCode.code).all()

    def update(self, cpt_code: CptCode, update_data: dict) -> CptCode:
        for field, value in update_data.items():
            setattr(cpt_code, field, value)
        self.db.commit()
        self.db.refresh(cpt_code)
        return cpt_code

    def delete(self, cpt_code: CptCode):
        self.db.delete(cpt_code)
        self.db.commit()


class BillingModifierRepository:
    """Repository for billing modifier data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, modifier_data: dict) -> BillingModifier:
        modifier = BillingModifier(**modifier_data)
        self.db.add(modifier)
        self.db.commit()
        self.db.refresh(modifier)
        return modifier

    def get_by_id(self, modifier_id: int) -> Optional[BillingModifier]:
        return self.db.query(BillingModifier).filter(BillingModifier.id == modifier_id).first()

    def get_by_code(self, code: str) -> Optional[BillingModifier]:
        return self.db.query(BillingModifier).filter(BillingModifier.code == code).first()

    def get_all(self, include_inactive: bool = False) -> List[BillingModifier]:
        query = self.db.query(BillingModifier)
        if not include_inactive:
            query = query.filter(BillingModifier.is_active.is_(True))
        return query.order_by(BillingModifier.sort_order, BillingModifier.code).all()

    def update(self, modifier: BillingModifier, update_data: dict) -> BillingModifier:
        for field, value in update_data.items():
            setattr(modifier, field, value)
        self.db.commit()
        self.db.refresh(modifier)
        return modifier

    def delete(self, modifier: BillingModifier):
        self.db.delete(modifier)
        self.db.commit()

    def is_in_use(self, code: str) -> bool:
        return self.db.query(Charge.id).filter(Charge.modifier == code).first() is not None


class ClientBillingRepository:
    """Repository for client charges and payments"""

    def __init__(self, db):
        self.db = db

    def create_charge(self, charge_data: dict) -> Charge:
        charge = Charge(**charge_data)
        self.db.add(charge)
        self.db.commit()
        self.db.refresh(charge)
        return charge

    def create_payment(self, payment_data: dict) -> Payment:
        payment = Payment(**payment_data)
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def get_charges(self, patient_id: int) -> List[Charge]:
        return self.db.query(Charge).filter(
            Charge.patient_id == patient_id
        ).order_by(Charge.service_date.desc(), Charge.id.desc()).all()

    def get_payments(self, patient_id: int) -> List[Payment]:
        return self.db.query(Payment).filter(
            Payment.patient_id == patient_id
        ).order_by(Payment.payment_date.desc(), Payment.id.desc()).all()

    def total_charges(self, patient_id: int):
        return self.db.query(
            func.coalesce(func.sum(Charge.fee * Charge.units), 0)
        ).filter(Charge.patient_id == patient_id).scalar()

    def total_payments(self, patient_id: int):
        return self.db.query(
            func.coalesce(func.sum(Payment.amount), 0)
        ).filter(Payment.patient_id == patient_id).scalar()
