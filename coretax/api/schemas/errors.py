"""Error response schemas shared by every endpoint.

``ErrorResponse`` always carries an ``error`` string so clients can display
a message without knowing the error taxonomy, plus a machine-readable
``error_code`` and tracing metadata.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Metadata about the service that generated the error."""

    name: str = Field(..., description="Name of the service", examples=["CoreTax"])
    version: str = Field(..., description="Version of the service", examples=["0.1.0"])
    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(BaseModel):
    """Standardized error envelope."""

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Audit not found", "Unauthorized"],
    )

    error_code: str = Field(
        ...,
        description="Unique error code identifying the error type",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "CONFLICT"],
    )

    message: str = Field(
        ...,
        description="Human-readable error message (same as error)",
        examples=["Only planned audits can be deleted"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details (e.g., field-specific validation errors)",
        examples=[{"validation_errors": {"grossIncome": ["Field required"]}}],
    )

    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
    )

    severity: str | None = Field(
        default=None,
        description="Error severity level (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW", "HIGH"],
    )

    service_info: ServiceInfo | None = Field(
        default=None,
        description="Information about the service that generated the error",
    )

    request_id: str | None = Field(
        default=None,
        description="Unique request identifier",
        examples=["req-550e8400-e29b-41d4-a716-446655440000"],
    )

    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Debug information (only populated in development environments)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Only planned audits can be deleted",
                    "error_code": "CONFLICT",
                    "message": "Only planned audits can be deleted",
                    "details": {"status": "IN_PROGRESS"},
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2025-06-14T12:00:00+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "CoreTax",
                        "version": "0.1.0",
                        "environment": "production",
                    },
                },
                {
                    "error": "Unauthorized",
                    "error_code": "UNAUTHORIZED",
                    "message": "Unauthorized",
                    "timestamp": "2025-06-14T12:00:02+00:00",
                    "severity": "HIGH",
                },
            ]
        }
    }
