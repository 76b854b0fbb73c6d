"""
Client Repository Layer

Data access for client demographics and care team assignments.
"""

from typing import Optional, List
from datetime import date, datetime
from sqlalchemy import or_, func
from sqlalchemy.orm import joinedload

from emhr.core.permissions import active_on
from emhr.domain.clients.models import Client, ClientProvider, CareTeamStatus
from emhr.domain.scheduling.models import Appointment


class ClientRepository:
    """Repository for client data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, client_data: dict) -> Client:
        client = Client(**client_data)
        self.db.add(client)
        self.db.commit()
        self.db.refresh(client)
        return client

    def get_by_id(self, client_id: int) -> Optional[Client]:
        return self.db.query(Client).filter(
            Client.id == client_id,
            Client.deleted_at.is_(None)
        ).first()

    def _base_query(self, access_filter=None):
        query = self.db.query(Client).filter(Client.deleted_at.is_(None))
        if access_filter is not None:
            query = query.filter(access_filter)
        return query

    def get_all(
        self,
        access_filter=None,
        status: Optional[CareTeamStatus] = None,
        search: Optional[str] = None
    ) -> List[Client]:
        query = self._base_query(access_filter)
        if status:
            query = query.filter(Client.care_team_status == status)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(
                Client.fname.ilike(term),
                Client.lname.ilike(term),
                Client.preferred_name.ilike(term),
                Client.email.ilike(term)
            ))
        return query.order_by(Client.lname, Client.fname).all()

    def search(self, q: str, access_filter=None, limit: int = 20) -> List[Client]:
        term = f"%{q.strip()}%"
        conditions = [
            Client.fname.ilike(term),
            Client.lname.ilike(term),
            Client.phone_cell.ilike(term),
            Client.phone_home.ilike(term),
        ]
        parts = q.strip().split()
        if len(parts) == 2:
            conditions.append(
                (Client.fname.ilike(f"%{parts[0]}%")) & (Client.lname.ilike(f"%{parts[1]}%"))
            )
        try:
            conditions.append(Client.dob == date.fromisoformat(q.strip()))
        except ValueError:
            pass
        query = self._base_query(access_filter).filter(or_(*conditions))
        return query.order_by(Client.lname, Client.fname).limit(limit).all()

    def update(self, client: Client, update_data: dict) -> Client:
        for field, value in update_data.items():
            setattr(client, field, value)
        self.db.commit()
        self.db.refresh(client)
        return client

    def soft_delete(self, client: Client):
        client.deleted_at = datetime.utcnow()
        self.db.commit()

    def count_by_status(self, access_filter=None) -> dict:
        query = self.db.query(Client.care_team_status, func.count(Client.id)).filter(
            Client.deleted_at.is_(None)
        )
        if access_filter is not None:
            query = query.filter(access_filter)
        return {row[0]: row[1] for row in query.group_by(Client.care_team_status).all()}

    def count_created_since(self, since: datetime, access_filter=None) -> int:
        query = self._base_query(access_filter).filter(Client.created_at >= since)
        return query.count()

    def count_with_appointments_on(self, day: date, access_filter=None) -> int:
        query = self.db.query(func.count(func.distinct(Appointment.patient_id))).join(
            Client, Client.id == Appointment.patient_id
        ).filter(
            Appointment.event_date == day,
            Client.deleted_at.is_(None)
        )
        if access_filter is not None:
            query = query.filter(access_filter)
        return query.scalar() or 0


class CareTeamRepository:
    """Repository for client_providers rows"""

    def __init__(self, db):
        self.db = db

    def create(self, assignment_data: dict) -> ClientProvider:
        assignment = ClientProvider(**assignment_data)
        self.db.add(assignment)
        self.db.commit()
        self.db.refresh(assignment)
        return assignment

    def get_active_for_client(self, client_id: int) -> List[ClientProvider]:
        return self.db.query(ClientProvider).options(
            joinedload(ClientProvider.provider)
        ).filter(
            ClientProvider.client_id == client_id,
            active_on(ClientProvider.ended_at)
        ).order_by(ClientProvider.assigned_at).all()

    def get_active(self, client_id: int, provider_id: int) -> Optional[ClientProvider]:
        return self.db.query(ClientProvider).filter(
            ClientProvider.client_id == client_id,
            ClientProvider.provider_id == provider_id,
            active_on(ClientProvider.ended_at)
        ).first()

    def end(self, assignment: ClientProvider, ended_at: date):
        assignment.ended_at = ended_at
        self.db.commit()
