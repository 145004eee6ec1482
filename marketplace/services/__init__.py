"""
High-level use cases for the marketplace API.

Each service orchestrates the repository and external adapters (hasher,
token signer, revocation list, image host). Routers call these services
instead of manipulating storage directly.
"""
