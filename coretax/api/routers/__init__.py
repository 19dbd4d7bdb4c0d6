"""Resource routers, mounted under ``Settings.api_prefix``."""

from fastapi import APIRouter

from coretax.api.routers import (
    audits,
    auth,
    bank_integrations,
    compliance,
    consultations,
    dashboard,
    documents,
    notifications,
    profiles,
    tax_calculations,
)


def build_api_router() -> APIRouter:
    router = APIRouter()
    for module in (
        auth,
        tax_calculations,
        audits,
        bank_integrations,
        consultations,
        documents,
        compliance,
        notifications,
        profiles,
        dashboard,
    ):
        router.include_router(module.router)
    return router
