"""Core package for shared application functionality.

- **config**: Settings with environment support
- **context**: Request context and correlation ID management
- **exceptions**: Error hierarchy mapped to HTTP status codes
- **error_context**: Sensitive data sanitization for safe logging
- **logging**: Loguru setup with cloud formatters
- **observability**: OpenTelemetry tracing
- **security**: Password hashing and bearer token signing
- **cache**: Bounded TTL response cache
- **types**: Type aliases
"""
