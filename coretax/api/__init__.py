"""HTTP API layer for CoreTax.

Key components:
- **main**: Application factory and lifecycle management
- **dependencies**: Authentication and service injection for routers
- **routers**: One router per resource group, mounted under ``/api``
- **middleware**: Security headers, correlation IDs, request logging and
  centralized error handling
- **schemas**: Pydantic request/response models
- **utils**: orjson-backed response class

Every route resolves the caller through a server-verified bearer token before
any data access, then delegates to a service from ``coretax.services``.
"""
