"""
Backend package for the nursery storefront API.

This package provides a FastAPI application over a relational catalogue,
a document store for per-user data and editorial content, and an identity
provider, with in-memory implementations of each for local development.
"""
