"""Adapters connecting the reconciliation engine to registries and storage."""
