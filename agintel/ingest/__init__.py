"""Reconciliation of connector records into the warehouse."""

from .store import ReconciliationStore, StorageUnavailable, storage_session

__all__ = ["ReconciliationStore", "StorageUnavailable", "storage_session"]
