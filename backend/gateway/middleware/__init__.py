# Middleware package init
"""
Event Gateway: Middleware Package
==================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [Rate Limit] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging records status and duration of everything below it,
       including rate-limited rejections
    3. Rate Limit applies to /login and /signup only
"""
