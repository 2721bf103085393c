# src/storage/store_factory.py — v1
"""Factory for job store and audit log instantiation."""

from __future__ import annotations

from toolfactory.config.settings import Settings
from toolfactory.storage.base_job_store import BaseAuditLog, BaseJobStore


def create_stores(settings: Settings | None = None) -> tuple[BaseJobStore, BaseAuditLog]:
    """Instantiate the configured job store and audit log.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        (job_store, audit_log) pair sharing the same backend.
    """
    backend = "memory" if settings is None else settings.job_store_backend

    if backend == "memory":
        from toolfactory.storage.memory_store import InMemoryAuditLog, InMemoryJobStore
        return InMemoryJobStore(), InMemoryAuditLog()

    if backend == "sqlite":
        from toolfactory.storage.sqlite_store import SqliteAuditLog, SqliteJobStore
        db_path = settings.job_store_path
        return SqliteJobStore(db_path), SqliteAuditLog(db_path)

    raise ValueError(f"Unsupported job store backend: {backend!r}")
