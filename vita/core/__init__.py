"""
Core utilities shared across the VITA API.

This package hosts configuration, logging setup, the error taxonomy and the
credential helpers (password hashing and bearer tokens). Routers and services
depend on these primitives instead of reading os.environ or calling the
hashing/JWT libraries directly.
"""
