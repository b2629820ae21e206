# Routes package init
"""
ServiceNest Backend — API Routes Package
=========================================

Route Inventory:
    - services.py:  POST/GET /services, GET/PUT/DELETE /services/{id}
    - bookings.py:  POST/GET /bookings, PATCH /bookings/{id}
    - messages.py:  POST/GET /messages
    - health.py:    GET /health

Routes stay thin: resolve the caller, call one service method, return its result.
"""
