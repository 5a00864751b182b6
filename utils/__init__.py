"""
utils/ - Shared Utilities
=========================
Logging setup, the error taxonomy and small concurrency helpers.
Imported by every other layer; imports nothing from them.
"""
