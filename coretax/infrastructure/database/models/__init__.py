"""SQLAlchemy models. Importing this package registers every table on
``Base.metadata`` (used by Alembic and by test schema creation)."""

from coretax.infrastructure.database.models.audit import Audit, AuditItem
from coretax.infrastructure.database.models.bank import BankIntegration
from coretax.infrastructure.database.models.compliance import ComplianceRecord
from coretax.infrastructure.database.models.consultation import Consultation
from coretax.infrastructure.database.models.document import Document
from coretax.infrastructure.database.models.notification import (
    Notification,
    NotificationSettings,
)
from coretax.infrastructure.database.models.profile import UserProfile
from coretax.infrastructure.database.models.tax import (
    Payment,
    TaxCalculation,
    TaxReport,
)
from coretax.infrastructure.database.models.user import User

__all__ = [
    "Audit",
    "AuditItem",
    "BankIntegration",
    "ComplianceRecord",
    "Consultation",
    "Document",
    "Notification",
    "NotificationSettings",
    "Payment",
    "TaxCalculation",
    "TaxReport",
    "User",
    "UserProfile",
]
