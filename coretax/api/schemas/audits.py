from datetime import datetime

from coretax.api.schemas.common import RecordOut, UserSummary
from coretax.domain.enums import AuditItemStatus, AuditScope, AuditStatus, AuditType, RiskLevel


class AuditItemOut(RecordOut):
    audit_id: int
    category: str
    title: str
    description: str
    severity: RiskLevel
    status: AuditItemStatus
    finding: str | None
    recommendation: str | None
    evidence: str | None
    due_date: datetime | None
    notes: str | None


class AuditOut(RecordOut):
    user_id: int
    auditor_id: int | None
    title: str
    description: str
    audit_type: AuditType
    scope: AuditScope
    start_date: datetime | None
    end_date: datetime | None
    status: AuditStatus
    risk_level: RiskLevel
    compliance_score: int | None
    report_url: str | None
    notes: str | None
    user: UserSummary
    auditor: UserSummary | None
