"""
Event Gateway: Application Package
===================================

What:  HTTP action gateway in front of a GraphQL identity store and the
       vendor services an event management site needs (image hosting,
       payments, outbound email).

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← envelope validation, HTTP only
    ├─────────────────────────────────────┤
    │      Actions (one per endpoint)     │  ← transform input, one call out
    ├─────────────────────────────────────┤
    │     Clients (one per collaborator)  │  ← GraphQL, Cloudinary, Chapa, SMTP
    └─────────────────────────────────────┘

    Nothing is persisted locally; every request is a single round trip to
    one collaborator.
"""

__version__ = "1.0.0"
