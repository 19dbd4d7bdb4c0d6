"""Core application constants."""

MILLISECONDS_PER_SECOND = 1000

REDACTED = "[REDACTED]"

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "x-csrf-token",
        "set-cookie",
        "proxy-authorization",
    }
)

# Paths that are never traced
TRACING_EXCLUDED_URLS = "/health,/docs,/redoc,/openapi.json"
