"""Closed enumerations shared by models, schemas and services.

Values are the wire format; they are stored as strings in the database.
"""

from enum import StrEnum


class Role(StrEnum):
    WAJIB_PAJAK = "WAJIB_PAJAK"
    TAX_OFFICER = "TAX_OFFICER"
    CONSULTANT = "CONSULTANT"
    ADMIN = "ADMIN"


class TaxType(StrEnum):
    PPH_21 = "PPH_21"
    PPH_22 = "PPH_22"
    PPH_23 = "PPH_23"
    PPH_25 = "PPH_25"
    PPH_29 = "PPH_29"
    PPN = "PPN"
    PPNBM = "PPNBM"
    PBB = "PBB"
    BPHTB = "BPHTB"
    PAJAK_KENDARAAN = "PAJAK_KENDARAAN"


class CalculationType(StrEnum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMI_ANNUAL = "SEMI_ANNUAL"
    ANNUAL = "ANNUAL"
    SPECIAL = "SPECIAL"


class TaxCalculationStatus(StrEnum):
    DRAFT = "DRAFT"
    CALCULATED = "CALCULATED"
    VERIFIED = "VERIFIED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AuditType(StrEnum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    TAX_COMPLIANCE = "TAX_COMPLIANCE"
    FINANCIAL = "FINANCIAL"
    OPERATIONAL = "OPERATIONAL"
    SYSTEM = "SYSTEM"


class AuditScope(StrEnum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    TARGETED = "TARGETED"
    FOLLOW_UP = "FOLLOW_UP"


class AuditStatus(StrEnum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AuditItemStatus(StrEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class RiskLevel(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class RegulationType(StrEnum):
    TAX_REGULATION = "TAX_REGULATION"
    ACCOUNTING_STANDARD = "ACCOUNTING_STANDARD"
    LEGAL_REQUIREMENT = "LEGAL_REQUIREMENT"
    INDUSTRY_STANDARD = "INDUSTRY_STANDARD"
    INTERNAL_POLICY = "INTERNAL_POLICY"


class ComplianceStatus(StrEnum):
    NOT_COMPLIANT = "NOT_COMPLIANT"
    PARTIALLY_COMPLIANT = "PARTIALLY_COMPLIANT"
    COMPLIANT = "COMPLIANT"
    UNDER_REVIEW = "UNDER_REVIEW"
    EXEMPTED = "EXEMPTED"


class ConsultationStatus(StrEnum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DocumentCategory(StrEnum):
    SPT_TAHUNAN = "SPT_TAHUNAN"
    SPT_MASA = "SPT_MASA"
    FAKTUR_PAJAK = "FAKTUR_PAJAK"
    BUKTI_PEMBAYARAN = "BUKTI_PEMBAYARAN"
    LAPORAN_KEUANGAN = "LAPORAN_KEUANGAN"
    DOKUMEN_PENDUKUNG = "DOKUMEN_PENDUKUNG"
    SURAT_KETERANGAN = "SURAT_KETERANGAN"
    KUITANSI = "KUITANSI"
    LAINNYA = "LAINNYA"


class DocumentStatus(StrEnum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    PENDING_REVIEW = "PENDING_REVIEW"
    DELETED = "DELETED"


class BankAccountType(StrEnum):
    SAVINGS = "SAVINGS"
    CURRENT = "CURRENT"
    DEPOSIT = "DEPOSIT"
    CREDIT = "CREDIT"
    E_WALLET = "E_WALLET"
    VIRTUAL_ACCOUNT = "VIRTUAL_ACCOUNT"


class BankStatus(StrEnum):
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ERROR = "ERROR"
    SUSPENDED = "SUSPENDED"


class SyncStatus(StrEnum):
    NOT_SYNCED = "NOT_SYNCED"
    SYNCING = "SYNCING"
    SYNCED = "SYNCED"
    FAILED = "FAILED"


class NotificationType(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    REMINDER = "REMINDER"


class CompanyType(StrEnum):
    PT = "PT"
    CV = "CV"
    UD = "UD"
    FIRM = "FIRM"
    KOPERASI = "KOPERASI"
    YAYASAN = "YAYASAN"
    PERORANGAN = "PERORANGAN"


class ProfileStatus(StrEnum):
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"


class TaxReportStatus(StrEnum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class PaymentStatus(StrEnum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


STAFF_ROLES = frozenset({Role.ADMIN, Role.TAX_OFFICER})
