"""API-related constants."""

HTTP_500_INTERNAL_SERVER_ERROR = 500

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

MAX_USER_AGENT_LENGTH = 200

DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

