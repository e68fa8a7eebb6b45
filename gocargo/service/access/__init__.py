"""
Access
======

Direct reads and writes against a single collection. Lookups by a missing
key return ``None``; it is up to the caller to decide whether that is an error.
"""
