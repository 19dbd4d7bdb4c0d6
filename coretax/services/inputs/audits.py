from datetime import datetime

from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import AuditItemStatus, AuditScope, AuditStatus, AuditType, RiskLevel


class AuditCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    audit_type: AuditType
    scope: AuditScope
    start_date: datetime | None = None
    end_date: datetime | None = None
    risk_level: RiskLevel = RiskLevel.LOW
    auditor_id: int | None = None
    user_id: int | None = Field(
        default=None, description="Owner; honored for staff only"
    )
    notes: str | None = None


class AuditUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    audit_type: AuditType | None = None
    scope: AuditScope | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: AuditStatus | None = None
    risk_level: RiskLevel | None = None
    compliance_score: int | None = Field(default=None, ge=0, le=100)
    report_url: str | None = None
    auditor_id: int | None = None
    notes: str | None = None


class AuditItemCreate(CamelModel):
    category: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    severity: RiskLevel = RiskLevel.LOW
    finding: str | None = None
    recommendation: str | None = None
    evidence: str | None = None
    due_date: datetime | None = None
    notes: str | None = None


class AuditItemUpdate(CamelModel):
    category: str | None = Field(default=None, min_length=1, max_length=100)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    severity: RiskLevel | None = None
    status: AuditItemStatus | None = None
    finding: str | None = None
    recommendation: str | None = None
    evidence: str | None = None
    due_date: datetime | None = None
    notes: str | None = None
