# Services package init
"""
ServiceNest Backend — Services Layer
=====================================

Service Inventory:
    - IdentityVerifier (abstract): bearer token → verified Identity
    - FirebaseIdentityVerifier: Firebase Admin SDK implementation
    - ServiceCatalog: services collection (provider stamping, merge-patch)
    - BookingService: bookings collection (customer stamping, status changes)
    - MessageService: messages collection
"""
