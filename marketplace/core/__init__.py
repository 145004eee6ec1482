"""
Core utilities shared across the marketplace API.

Configuration, password hashing, signed tokens, logging setup and the
error taxonomy live here; routers and services depend on these primitives
instead of reading the environment or building responses by hand.
"""
