"""
Report Service Layer

Practice-wide statistics for administrators: appointment volume, note
documentation status, provider productivity and client flow over a date range.
"""

from typing import Optional, List, Dict, Any
from datetime import date, timedelta
from collections import Counter
import enum
import logging

from emhr.core.exceptions import ValidationError
from emhr.core.permissions import PermissionChecker
from emhr.domain.auth.models import User
from emhr.domain.reports.repository import ReportRepository
from emhr.domain.scheduling.models import AppointmentStatus

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30
MAX_RANGE_DAYS = 366 * 5


class ReportType(str, enum.Enum):
    ALL = "all"
    APPOINTMENTS = "appointments"
    NOTES = "notes"
    PRODUCTIVITY = "productivity"
    CLIENT_FLOW = "client_flow"


def label(value: str) -> str:
    """``no_show`` -> ``No Show``"""
    return value.replace("_", " ").title()


def provider_name(fname: Optional[str], lname: Optional[str]) -> str:
    return f"{fname or ''} {lname or ''}".strip() or "Unknown"


class ReportService:
    """Builds the admin reports; every run is written to the audit trail"""

    def __init__(self, db, current_user: User, audit=None):
        self.db = db
        self.current_user = current_user
        self.audit = audit
        self.permissions = PermissionChecker(db, current_user)
        self.repo = ReportRepository(db)

    @staticmethod
    def resolve_range(start_date: Optional[date], end_date: Optional[date]):
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=DEFAULT_RANGE_DAYS)
        if end_date < start_date:
            raise ValidationError("endDate must be on or after startDate")
        if (end_date - start_date).days > MAX_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")
        return start_date, end_date

    def build(
        self,
        report: ReportType = ReportType.ALL,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Dict[str, Any]:
        self.permissions.ensure_admin()
        start_date, end_date = self.resolve_range(start_date, end_date)

        result: Dict[str, Any] = {"date_range": {"start": start_date, "end": end_date}}
        if report in (ReportType.ALL, ReportType.APPOINTMENTS):
            result["appointments"] = self.appointment_stats(start_date, end_date)
        if report in (ReportType.ALL, ReportType.NOTES):
            result["notes"] = self.note_stats(start_date, end_date)
        if report in (ReportType.ALL, ReportType.PRODUCTIVITY):
            result["productivity"] = self.provider_productivity(start_date, end_date)
        if report in (ReportType.ALL, ReportType.CLIENT_FLOW):
            result["client_flow"] = self.client_flow(start_date, end_date)

        if self.audit:
            self.audit.export("report", filters={
                "report": report.value,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            })
        logger.info(f"Report '{report.value}' for {start_date} to {end_date} run by user {self.current_user.id}")
        return result

    def appointment_stats(self, start_date: date, end_date: date) -> Dict[str, Any]:
        by_status = [
            {"status": status.value, "label": label(status.value), "count": count}
            for status, count in self.repo.appointments_by_status(start_date, end_date)
        ]
        counts = {row["status"]: row["count"] for row in by_status}
        return {
            "by_status": by_status,
            "by_category": [
                {"category_id": category_id, "category": name, "count": count}
                for category_id, name, count in self.repo.appointments_by_category(start_date, end_date)
            ],
            "by_provider": [
                {"provider_id": provider_id, "provider": provider_name(fname, lname), "count": count}
                for provider_id, fname, lname, count in self.repo.appointments_by_provider(start_date, end_date)
            ],
            "totals": {
                "total": sum(counts.values()),
                "scheduled": counts.get(AppointmentStatus.SCHEDULED.value, 0),
                "completed": counts.get(AppointmentStatus.COMPLETED.value, 0),
                "no_show": counts.get(AppointmentStatus.NO_SHOW.value, 0),
                "cancelled": counts.get(AppointmentStatus.CANCELLED.value, 0),
            },
        }

    def note_stats(self, start_date: date, end_date: date) -> Dict[str, Any]:
        by_state = dict(self.repo.notes_by_signing_state(start_date, end_date))
        return {
            "by_type": [
                {"type": note_type.value, "label": label(note_type.value), "count": count}
                for note_type, count in self.repo.notes_by_type(start_date, end_date)
            ],
            "by_status": [
                {"status": state, "label": label(state), "count": by_state[state]}
                for state in ("signed", "pending_review", "unsigned") if by_state.get(state)
            ],
            "by_provider": [
                {"provider_id": provider_id, "provider": provider_name(fname, lname), "count": count}
                for provider_id, fname, lname, count in self.repo.notes_by_provider(start_date, end_date)
            ],
            "totals": {
                "total": sum(by_state.values()),
                "signed": by_state.get("signed", 0),
                "unsigned": by_state.get("unsigned", 0),
                "pending_review": by_state.get("pending_review", 0),
            },
        }

    def provider_productivity(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """Per active provider; providers with no activity in the range are left out"""
        appointments = {
            provider_id: (total, int(completed or 0))
            for provider_id, total, completed in self.repo.provider_appointment_counts(start_date, end_date)
        }
        notes = {
            provider_id: (total, int(signed or 0))
            for provider_id, total, signed in self.repo.provider_note_counts(start_date, end_date)
        }

        rows = []
        for provider in self.repo.active_providers():
            appointment_total, completed = appointments.get(provider.id, (0, 0))
            note_total, signed = notes.get(provider.id, (0, 0))
            if not appointment_total and not note_total:
                continue
            rows.append({
                "provider_id": provider.id,
                "provider": provider.full_name,
                "appointments": appointment_total,
                "completed_appointments": completed,
                "notes": note_total,
                "signed_notes": signed,
                "unsigned_notes": note_total - signed,
            })
        return rows

    def client_flow(self, start_date: date, end_date: date) -> Dict[str, Any]:
        created = self.repo.new_client_dates(start_date, end_date)
        by_month = Counter(created_at.strftime("%Y-%m") for created_at in created)
        return {
            "new_clients": len(created),
            "active_clients": len(self.repo.active_client_ids(start_date, end_date)),
            "by_month": [{"month": month, "count": by_month[month]} for month in sorted(by_month)],
        }
