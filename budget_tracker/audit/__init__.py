"""Audit logging package."""

from budget_tracker.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
