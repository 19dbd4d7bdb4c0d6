"""FastAPI dependencies: the verified caller and the resource services.

Identity comes only from the bearer token. The token is verified, the user
is reloaded on every request and inactive accounts are rejected, so role
changes and deactivations apply immediately.

Example:
    @router.get("/audits")
    async def list_audits(actor: CurrentActor, service: Audits): ...
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from coretax.core.config import Settings, get_settings
from coretax.core.context import RequestContext
from coretax.core.exceptions import AuthenticationError
from coretax.core.security import decode_access_token
from coretax.domain.access import Actor
from coretax.infrastructure.database.dependencies import DatabaseSession
from coretax.infrastructure.repositories import UserRepository
from coretax.infrastructure.sync import SyncScheduler, get_sync_scheduler
from coretax.services.audits import AuditService
from coretax.services.auth import AuthService
from coretax.services.bank_integrations import BankIntegrationService
from coretax.services.compliance import ComplianceService
from coretax.services.consultations import ConsultationService
from coretax.services.dashboard import DashboardService
from coretax.services.documents import DocumentService
from coretax.services.notifications import NotificationService
from coretax.services.profiles import ProfileService
from coretax.services.tax_calculations import TaxCalculationService

# Missing credentials are reported through AuthenticationError, not a bare 403
bearer_scheme = HTTPBearer(auto_error=False)

AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_current_actor(
    db: DatabaseSession,
    settings: AppSettings,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Actor:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired, or
            the user no longer exists or is inactive.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    claims = decode_access_token(credentials.credentials, settings.auth_config)
    user = await UserRepository(db).get_by_id(claims.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid token", context={"user_id": claims.user_id})

    RequestContext.set_actor(user.id, user.role)
    return Actor(id=user.id, role=user.role)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
Scheduler = Annotated[SyncScheduler, Depends(get_sync_scheduler)]


def get_auth_service(db: DatabaseSession, settings: AppSettings) -> AuthService:
    return AuthService(db, settings.auth_config)


def get_audit_service(db: DatabaseSession) -> AuditService:
    return AuditService(db)


def get_bank_integration_service(
    db: DatabaseSession, scheduler: Scheduler
) -> BankIntegrationService:
    return BankIntegrationService(db, scheduler)


def get_compliance_service(db: DatabaseSession) -> ComplianceService:
    return ComplianceService(db)


def get_consultation_service(db: DatabaseSession) -> ConsultationService:
    return ConsultationService(db)


def get_dashboard_service(db: DatabaseSession) -> DashboardService:
    return DashboardService(db)


def get_document_service(db: DatabaseSession) -> DocumentService:
    return DocumentService(db)


def get_notification_service(db: DatabaseSession) -> NotificationService:
    return NotificationService(db)


def get_profile_service(db: DatabaseSession) -> ProfileService:
    return ProfileService(db)


def get_tax_calculation_service(db: DatabaseSession) -> TaxCalculationService:
    return TaxCalculationService(db)


Auth = Annotated[AuthService, Depends(get_auth_service)]
Audits = Annotated[AuditService, Depends(get_audit_service)]
BankIntegrations = Annotated[
    BankIntegrationService, Depends(get_bank_integration_service)
]
ComplianceRecords = Annotated[ComplianceService, Depends(get_compliance_service)]
Consultations = Annotated[ConsultationService, Depends(get_consultation_service)]
Dashboard = Annotated[DashboardService, Depends(get_dashboard_service)]
Documents = Annotated[DocumentService, Depends(get_document_service)]
Notifications = Annotated[NotificationService, Depends(get_notification_service)]
Profiles = Annotated[ProfileService, Depends(get_profile_service)]
TaxCalculations = Annotated[TaxCalculationService, Depends(get_tax_calculation_service)]
