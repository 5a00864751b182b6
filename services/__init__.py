"""
services/ - Business Logic Layer
================================
Each service fronts one repository (durable store) and one storage (cache).
Repository calls are synchronous and run in worker threads, so every service
call is an await point for the event loop.
"""
