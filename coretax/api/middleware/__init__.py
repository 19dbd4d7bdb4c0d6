"""Cross-cutting request/response middleware.

- **SecurityHeadersMiddleware**: adds HSTS, X-Frame-Options and friends
- **RequestContextMiddleware**: correlation ids and log context
- **RequestLoggingMiddleware**: request timing and slow request warnings
- **error_handler**: exception handlers producing the error envelope

Execution order (outermost first): security headers, request context,
request logging, route handler.
"""
