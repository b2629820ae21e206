# Middleware package init
"""
ServiceNest Backend — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line carries the id; the
    response passes back through the same chain in reverse.
"""
