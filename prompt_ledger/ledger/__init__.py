"""Prompt ledger - append-only, versioned storage for system prompts.

This module provides:
- Partition key resolution for shared and private prompt scopes
- Contention-safe version number allocation
- The async PromptLedger store (save, load latest, history, exact version)
"""

from prompt_ledger.ledger.errors import AllocationConflictError, LedgerError, PersistenceError, ValidationError
from prompt_ledger.ledger.scope import PartitionKey, resolve_partition_key
from prompt_ledger.ledger.store import PromptLedger
from prompt_ledger.ledger.types import VersionRecord, VersionSummary

__all__ = [
    "AllocationConflictError",
    "LedgerError",
    "PartitionKey",
    "PersistenceError",
    "PromptLedger",
    "ValidationError",
    "VersionRecord",
    "VersionSummary",
    "resolve_partition_key",
]
