"""
Billing Service Layer

CPT catalogue and modifier administration, and per-client charges,
payments and balance.
"""

from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal
import logging

from emhr.core.exceptions import ConflictError, NotFoundError, ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.auth.models import User
from emhr.domain.billing.models import CptCode, BillingModifier, Charge, Payment
from emhr.domain.billing.repository import (
    CptCodeRepository, BillingModifierRepository, ClientBillingRepository
)
from emhr.domain.clients.repository import ClientRepository

logger = logging.getLogger(__name__)

CPT_CODE_TYPE = "CPT4"
PAYMENT_METHODS = ("cash", "check", "card", "insurance", "other")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


class CptCodeService:
    """Service layer for the CPT code catalogue"""

    def __init__(self, db, current_user: Optional[User] = None):
        self.db = db
        self.current_user = current_user
        self.repo = CptCodeRepository(db)

    def list_codes(self, category: Optional[str] = None, include_inactive: bool = False, search: Optional[str] = None) -> List[CptCode]:
        return self.repo.get_all(category=category, include_inactive=include_inactive, search=search)

    def get_code(self, code_id: int) -> CptCode:
        cpt_code = self.repo.get_by_id(code_id)
        if not cpt_code:
            raise NotFoundError("CPT code not found")
        return cpt_code

    def create_code(self, code_data: Dict[str, Any]) -> CptCode:
        code = (code_data.get("code") or "").strip().upper()
        if not code or not code_data.get("category") or not code_data.get("description"):
            raise ValidationError("Code, category and description are required")
        if self.repo.get_by_code(code):
            raise ConflictError(f"CPT code {code} already exists")

        code_data["code"] = code
        cpt_code = self.repo.create(code_data)
        logger.info(f"CPT code {code} created")
        return cpt_code

    def update_code(self, code_id: int, update_data: Dict[str, Any]) -> CptCode:
        cpt_code = self.get_code(code_id)
        if "code" in update_data:
            new_code = (update_data["code"] or "").strip().upper()
            if not new_code:
                raise ValidationError("Code cannot be empty")
            existing = self.repo.get_by_code(new_code)
            if existing and existing.id != cpt_code.id:
                raise ConflictError(f"CPT code {new_code} already exists")
            update_data["code"] = new_code
        return self.repo.update(cpt_code, update_data)

    def delete_code(self, code_id: int):
        self.repo.delete(self.get_code(code_id))


class BillingModifierService:
    """Service layer for billing modifiers"""

    def __init__(self, db, current_user: Optional[User] = None):
        self.db = db
        self.current_user = current_user
        self.repo = BillingModifierRepository(db)

    def list_modifiers(self, include_inactive: bool = False) -> List[BillingModifier]:
        return self.repo.get_all(include_inactive=include_inactive)

    def get_modifier(self, modifier_id: int) -> BillingModifier:
        modifier = self.repo.get_by_id(modifier_id)
        if not modifier:
            raise NotFoundError("Modifier not found")
        return modifier

    def create_modifier(self, modifier_data: Dict[str, Any]) -> BillingModifier:
        code = (modifier_data.get("code") or "").strip().upper()
        if not code or not modifier_data.get("description"):
            raise ValidationError("Code and description are required")
        if self.repo.get_by_code(code):
            raise ConflictError(f"Modifier {code} already exists")

        modifier_data["code"] = code
        return self.repo.create(modifier_data)

    def update_modifier(self, modifier_id: int, update_data: Dict[str, Any]) -> BillingModifier:
        modifier = self.get_modifier(modifier_id)
        if "code" in update_data:
            new_code = (update_data["code"] or "").strip().upper()
            if not new_code:
                raise ValidationError("Code cannot be empty")
            existing = self.repo.get_by_code(new_code)
            if existing and existing.id != modifier.id:
                raise ConflictError(f"Modifier {new_code} already exists")
            update_data["code"] = new_code
        return self.repo.update(modifier, update_data)

    def delete_modifier(self, modifier_id: int):
        modifier = self.get_modifier(modifier_id)
        if self.repo.is_in_use(modifier.code):
            raise ConflictError("Modifier is in use by existing charges and cannot be deleted")
        self.repo.delete(modifier)


class ClientBillingService:
    """Service layer for a client's ledger"""

    def __init__(self, db, current_user: User):
        self.db = db
        self.current_user = current_user
        self.permissions = PermissionChecker(db, current_user)
        self.repo = ClientBillingRepository(db)
        self.cpt_repo = CptCodeRepository(db)
        self.modifier_repo = BillingModifierRepository(db)

    def _ensure_client(self, patient_id: int):
        if not ClientRepository(self.db).get_by_id(patient_id):
            raise NotFoundError("Client not found")
        self.permissions.ensure_client_access(patient_id)

    def get_summary(self, patient_id: int) -> Dict[str, Any]:
        self._ensure_client(patient_id)
        charges = self.repo.get_charges(patient_id)
        payments = self.repo.get_payments(patient_id)

        total_charges = _money(self.repo.total_charges(patient_id))
        total_payments = _money(self.repo.total_payments(patient_id))
        return {
            "charges": charges,
            "payments": payments,
            "total_charges": total_charges,
            "total_payments": total_payments,
            "balance": total_charges - total_payments,
            "charge_count": len(charges),
            "payment_count": len(payments),
        }

    def post_charge(self, patient_id: int, charge_data: Dict[str, Any]) -> Charge:
        self._ensure_client(patient_id)

        code_type = (charge_data.get("code_type") or CPT_CODE_TYPE).upper()
        code = (charge_data.get("code") or "").strip().upper()
        if not code:
            raise ValidationError("Code is required")
        if (charge_data.get("units") or 1) < 1:
            raise ValidationError("Units must be at least 1")

        fee = charge_data.get("fee")
        modifier = (charge_data.get("modifier") or "").strip().upper() or None
        if code_type == CPT_CODE_TYPE:
            cpt_code = self.cpt_repo.get_by_code(code)
            if not cpt_code or not cpt_code.is_active:
                raise ValidationError(f"Unknown or inactive CPT code: {code}")
            if modifier:
                known = self.modifier_repo.get_by_code(modifier)
                if not known or not known.is_active:
                    raise ValidationError(f"Unknown or inactive modifier: {modifier}")
            if fee is None:
                fee = cpt_code.standard_fee

        charge = self.repo.create_charge({
            "patient_id": patient_id,
            "service_date": charge_data.get("service_date") or date.today(),
            "code_type": code_type,
            "code": code,
            "modifier": modifier,
            "units": charge_data.get("units") or 1,
            "fee": _money(fee),
            "justify": charge_data.get("justify"),
            "note_id": charge_data.get("note_id"),
            "appointment_id": charge_data.get("appointment_id"),
            "posted_by": self.current_user.id,
        })
        logger.info(f"Charge {charge.id} ({code}) posted for client {patient_id}")
        return charge

    def post_payment(self, patient_id: int, payment_data: Dict[str, Any]) -> Payment:
        self._ensure_client(patient_id)

        amount = payment_data.get("amount")
        if amount is None or _money(amount) <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        method = (payment_data.get("method") or "cash").lower()
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")

        payment = self.repo.create_payment({
            "patient_id": patient_id,
            "payment_date": payment_data.get("payment_date") or date.today(),
            "amount": _money(amount),
            "method": method,
            "reference": payment_data.get("reference"),
            "memo": payment_data.get("memo"),
            "posted_by": self.current_user.id,
        })
        logger.info(f"Payment {payment.id} posted for client {patient_id}")
        return payment
