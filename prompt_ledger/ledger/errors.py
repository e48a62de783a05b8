"""Error types for the prompt ledger.

Lookup misses are not errors: read operations return None when a partition
is empty or a version does not exist.
"""


class LedgerError(RuntimeError):
    """Base exception for prompt ledger errors."""


class ValidationError(LedgerError):
    """Raised when caller input violates a precondition (no I/O performed)."""


class PersistenceError(LedgerError):
    """Raised when the underlying store fails (unreachable, quota, lock timeout)."""


class AllocationConflictError(PersistenceError):
    """Raised when a unique version could not be allocated within the retry budget.

    Attributes:
        partition_key: Partition the save was targeting
        attempts: Number of attempts made
    """

    def __init__(self, partition_key: str, attempts: int) -> None:
        self.partition_key = partition_key
        self.attempts = attempts
        super().__init__(
            f"could not allocate a unique version after contention "
            f"(partition={partition_key}, attempts={attempts})"
        )
