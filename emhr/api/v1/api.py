from fastapi import APIRouter

from emhr.core.exceptions import ErrorResponse, ValidationErrorResponse
from emhr.api.v1.auth.routes import router as auth_router
from emhr.api.v1.users.routes import router as users_router
from emhr.api.v1.clients.routes import router as clients_router
from emhr.api.v1.appointments.routes import router as appointments_router
from emhr.api.v1.notes.routes import router as notes_router
from emhr.api.v1.diagnoses.routes import router as diagnoses_router
from emhr.api.v1.treatment.routes import router as treatment_router
from emhr.api.v1.settings.routes import router as settings_router
from emhr.api.v1.billing.routes import router as billing_router
from emhr.api.v1.insurance.routes import router as insurance_router
from emhr.api.v1.documents.routes import router as documents_router
from emhr.api.v1.audit.routes import router as audit_router
from emhr.api.v1.reports.routes import router as reports_router

# Error envelopes shown in the OpenAPI docs for every endpoint
error_responses = {
    400: {"model": ValidationErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

api_router = APIRouter(responses=error_responses)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(clients_router)
api_router.include_router(appointments_router)
api_router.include_router(notes_router)
api_router.include_router(diagnoses_router)
api_router.include_router(treatment_router)
api_router.include_router(settings_router)
api_router.include_router(billing_router)
api_router.include_router(insurance_router)
api_router.include_router(documents_router)
api_router.include_router(audit_router)
api_router.include_router(reports_router)
