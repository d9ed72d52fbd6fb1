"""
Backend package for the church management app.

This package provides a FastAPI application for the people registry and the
accounting ledger, with storage and database abstractions so the same routes
run against Postgres/S3 in production and in-memory clients in tests.
"""
