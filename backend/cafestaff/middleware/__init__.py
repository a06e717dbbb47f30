# Middleware package init
"""
CafeStaff Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: Correlation ID for every log line of the request
    2. Logging: Method, path, status and duration, tagged with that ID
    3. GZip / CORS: Applied by Starlette's and FastAPI's own middleware

    Responses travel the chain in reverse, so the request ID header is on
    every response and the logged status is the final one.
"""
