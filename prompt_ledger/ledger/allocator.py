"""Version number allocation.

Each partition owns one PromptVersionCounter row. The next version is taken
with a single atomic statement:

    UPDATE prompt_version_counters
       SET last_version = last_version + 1
     WHERE partition_key = :key
    RETURNING last_version

The row lock taken by the UPDATE is held until the surrounding transaction
(which also inserts the version record) commits or rolls back, so concurrent
writers to one partition are serialized and a rolled-back save leaves no gap.

A partition without a counter gets one seeded from max(version) of its
existing records. Two writers creating the same counter collide on the
primary key; the loser sees IntegrityError and the caller retries.
"""

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from prompt_ledger.db.models import PromptVersion, PromptVersionCounter


def current_max_version(session: Session, partition_key: str) -> int:
    """Highest committed version in the partition, 0 when empty."""
    query = select(func.max(PromptVersion.version)).where(PromptVersion.partition_key == partition_key)
    return session.execute(query).scalar_one_or_none() or 0


def allocate_next_version(session: Session, partition_key: str) -> int:
    """Reserve the next version number for a partition.

    Must run inside the transaction that inserts the version record.

    Args:
        session: Database session (transaction in progress or about to begin)
        partition_key: Physical partition key

    Returns:
        Version number strictly greater than every committed version

    Raises:
        sqlalchemy.exc.IntegrityError: If another writer created the
            partition counter concurrently (caller retries)
    """
    bump = (
        update(PromptVersionCounter)
        .where(PromptVersionCounter.partition_key == partition_key)
        .values(last_version=PromptVersionCounter.last_version + 1)
        .returning(PromptVersionCounter.last_version)
        .execution_options(synchronize_session=False)
    )
    allocated = session.execute(bump).scalar_one_or_none()
    if allocated is not None:
        logger.bind(partition_key=partition_key, version=allocated).debug("Allocated version from counter")
        return allocated

    # First save to this partition (or records predate the counter)
    allocated = current_max_version(session, partition_key) + 1
    session.add(PromptVersionCounter(partition_key=partition_key, last_version=allocated))
    session.flush()
    logger.bind(partition_key=partition_key, version=allocated).debug("Created partition counter")
    return allocated
