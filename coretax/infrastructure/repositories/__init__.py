"""Entity repositories built on ``BaseRepository``."""

from coretax.infrastructure.repositories.audits import AuditItemRepository, AuditRepository
from coretax.infrastructure.repositories.bank_integrations import BankIntegrationRepository
from coretax.infrastructure.repositories.compliance import ComplianceRecordRepository
from coretax.infrastructure.repositories.consultations import ConsultationRepository
from coretax.infrastructure.repositories.documents import DocumentRepository
from coretax.infrastructure.repositories.filters import search_any
from coretax.infrastructure.repositories.notifications import (
    NotificationRepository,
    NotificationSettingsRepository,
)
from coretax.infrastructure.repositories.profiles import UserProfileRepository
from coretax.infrastructure.repositories.reports import PaymentRepository, TaxReportRepository
from coretax.infrastructure.repositories.tax_calculations import TaxCalculationRepository
from coretax.infrastructure.repositories.users import UserRepository

__all__ = [
    "AuditItemRepository",
    "AuditRepository",
    "BankIntegrationRepository",
    "ComplianceRecordRepository",
    "ConsultationRepository",
    "DocumentRepository",
    "NotificationRepository",
    "NotificationSettingsRepository",
    "PaymentRepository",
    "TaxCalculationRepository",
    "TaxReportRepository",
    "UserProfileRepository",
    "UserRepository",
    "search_any",
]
