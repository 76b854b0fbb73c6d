from typing import Optional, List
from datetime import date

from emhr.api.v1.common import CamelModel


class DateRange(CamelModel):
    start: date
    end: date


class StatusCount(CamelModel):
    status: str
    label: str
    count: int


class TypeCount(CamelModel):
    type: str
    label: str
    count: int


class CategoryCount(CamelModel):
    category_id: int
    category: str
    count: int


class ProviderCount(CamelModel):
    provider_id: int
    provider: str
    count: int


class AppointmentTotals(CamelModel):
    total: int
    scheduled: int
    completed: int
    no_show: int
    cancelled: int


class AppointmentReport(CamelModel):
    by_status: List[StatusCount]
    by_category: List[CategoryCount]
    by_provider: List[ProviderCount]
    totals: AppointmentTotals


class NoteTotals(CamelModel):
    total: int
    signed: int
    unsigned: int
    pending_review: int


class NoteReport(CamelModel):
    by_type: List[TypeCount]
    by_status: List[StatusCount]
    by_provider: List[ProviderCount]
    totals: NoteTotals


class ProviderProductivity(CamelModel):
    provider_id: int
    provider: str
    appointments: int
    completed_appointments: int
    notes: int
    signed_notes: int
    unsigned_notes: int


class MonthCount(CamelModel):
    month: str
    count: int


class ClientFlowReport(CamelModel):
    new_clients: int
    active_clients: int
    by_month: List[MonthCount]


class ReportResponse(CamelModel):
    success: bool = True
    date_range: DateRange
    appointments: Optional[AppointmentReport] = None
    notes: Optional[NoteReport] = None
    productivity: Optional[List[ProviderProductivity]] = None
    client_flow: Optional[ClientFlowReport] = None
