"""
storages/ - Fast Read Path
==========================
In-process caches placed in front of the repositories.
Services read through a storage and fall back to the repository on a miss.
"""
