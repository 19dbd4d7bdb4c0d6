"""CoreTax - multi-tenant tax administration backend.

CoreTax lets taxpayers, tax officers, consultants and administrators manage
tax calculations, audits, compliance records, documents, consultations,
bank-account integrations, notifications and tax profiles over a REST API.

Architecture Overview:
- **API Layer**: FastAPI routers, authorization dependencies and middleware
- **Core Layer**: Configuration, logging, tracing, errors, security, caching
- **Domain Layer**: Enumerations, access policies, status transitions,
  bulk action vocabularies and the tax calculator
- **Services Layer**: Role-gated use cases built on the repositories
- **Infrastructure Layer**: SQLAlchemy models, repositories and deferred sync
"""
