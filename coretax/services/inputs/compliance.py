from datetime import datetime

from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import ComplianceStatus, Priority, RegulationType, RiskLevel


class ComplianceRecordCreate(CamelModel):
    regulation_type: RegulationType
    regulation_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    requirement: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    risk_level: RiskLevel = RiskLevel.LOW
    next_review: datetime | None = None
    assigned_to_id: int | None = None
    user_id: int | None = Field(
        default=None, description="Owner; honored for staff only"
    )
    action_plan: str | None = None
    notes: str | None = None


class ComplianceRecordUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    requirement: str | None = None
    status: ComplianceStatus | None = None
    evidence: str | None = None
    last_verified: datetime | None = None
    next_review: datetime | None = None
    priority: Priority | None = None
    risk_level: RiskLevel | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    action_plan: str | None = None
    implementation_date: datetime | None = None
    assigned_to_id: int | None = None
    notes: str | None = None
