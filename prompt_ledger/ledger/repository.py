"""Repository functions for prompt version persistence.

Handles creating and querying prompt versions.
Single responsibility: database operations only.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session, defer

from prompt_ledger.db.models import PromptVersion
from prompt_ledger.ledger.allocator import allocate_next_version
from prompt_ledger.ledger.scope import PartitionKey
from prompt_ledger.ledger.technical_key import generate_technical_key
from prompt_ledger.ledger.types import VersionRecord, VersionSummary


def create_prompt_version(
    session: Session,
    *,
    partition: PartitionKey,
    prompt_text: str,
    evaluation_notes: str,
    author_id: str,
    author_email: str | None,
    model_identifier: str,
) -> VersionRecord:
    """Append a prompt version with the next version number.

    Args:
        session: Database session
        partition: Resolved partition to write to
        prompt_text: Full prompt text
        evaluation_notes: Why this version was saved
        author_id: Writer identity
        author_email: Writer email (optional)
        model_identifier: Model the prompt was tuned for

    Returns:
        The persisted version, including its server-assigned timestamp

    Raises:
        sqlalchemy.exc.IntegrityError: On a version allocation conflict
    """
    version = allocate_next_version(session, partition.value)

    row = PromptVersion(
        partition_key=partition.value,
        workspace=partition.workspace,
        is_shared=partition.is_shared,
        version=version,
        prompt_text=prompt_text,
        evaluation_notes=evaluation_notes,
        author_id=author_id,
        author_email=author_email,
        model_identifier=model_identifier,
        technical_key=generate_technical_key(author_id, version, author_email),
    )
    session.add(row)
    session.flush()
    # Load server-assigned saved_at
    session.refresh(row)
    return VersionRecord.from_row(row)


def get_latest_prompt_version(session: Session, partition_key: str) -> VersionRecord | None:
    """Return the version with the highest number in the partition, or None if empty."""
    query = (
        select(PromptVersion)
        .where(PromptVersion.partition_key == partition_key)
        .order_by(PromptVersion.version.desc())
        .limit(1)
    )
    row = session.execute(query).scalar_one_or_none()
    return VersionRecord.from_row(row) if row is not None else None


def get_prompt_version(session: Session, partition_key: str, version: int) -> VersionRecord | None:
    """Return the exact version in the partition, or None if it does not exist."""
    query = select(PromptVersion).where(
        PromptVersion.partition_key == partition_key,
        PromptVersion.version == version,
    )
    row = session.execute(query).scalar_one_or_none()
    return VersionRecord.from_row(row) if row is not None else None


def list_prompt_versions(session: Session, partition_key: str, *, limit: int) -> list[VersionSummary]:
    """List versions in the partition, newest first.

    Args:
        session: Database session
        partition_key: Partition to query
        limit: Maximum number of entries

    Returns:
        Summaries ordered by saved_at DESC, then version DESC
    """
    query = (
        select(PromptVersion, func.length(PromptVersion.prompt_text))
        .options(defer(PromptVersion.prompt_text))
        .where(PromptVersion.partition_key == partition_key)
        .order_by(PromptVersion.saved_at.desc(), PromptVersion.version.desc())
        .limit(limit)
    )
    return [VersionSummary.from_row(row, prompt_length or 0) for row, prompt_length in session.execute(query).all()]
