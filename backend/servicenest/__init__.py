"""
ServiceNest Backend — Application Package
==========================================

What: REST backend for a services marketplace (services, bookings, messages).
How:  Layered the same way throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth gate
    ├─────────────────────────────────────┤
    │      Services (Business Rules)      │  ← identity stamping, field rules
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data Shapes)   │  ← Identity, field names, results
    ├─────────────────────────────────────┤
    │   Database (Collection Accessors)   │  ← MongoDB async client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
