from coretax.api.schemas.common import CamelModel, MoneyValue


class DashboardStats(CamelModel):
    total_tax_paid: MoneyValue
    this_month_tax: MoneyValue
    pending_reports: int
    overdue_reports: int
    total_reports: int
    unread_notifications: int
    compliance_rate: int
