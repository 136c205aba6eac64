"""Shared infrastructure providers (object storage, metadata store)."""
