"""
models/ - Domain Layer
======================
Plain dataclasses shared by repositories, services and handlers.
No I/O happens here.
"""
