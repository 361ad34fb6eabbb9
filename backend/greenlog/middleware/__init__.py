# Middleware package init
"""
GreenLog Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so the access log line and any error body
      carry the same correlation ID.
    - The access log wraps everything else so its duration covers the
      whole request, including compression.
"""
