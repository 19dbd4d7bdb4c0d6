from datetime import datetime

from coretax.api.schemas.common import RecordOut, UserSummary
from coretax.domain.enums import ComplianceStatus, Priority, RegulationType, RiskLevel


class ComplianceRecordOut(RecordOut):
    user_id: int
    assigned_to_id: int | None
    regulation_type: RegulationType
    regulation_id: str
    title: str
    description: str
    requirement: str
    status: ComplianceStatus
    evidence: str | None
    last_verified: datetime | None
    next_review: datetime | None
    priority: Priority
    risk_level: RiskLevel
    score: int | None
    action_plan: str | None
    implementation_date: datetime | None
    notes: str | None
    user: UserSummary
    assigned_to: UserSummary | None
