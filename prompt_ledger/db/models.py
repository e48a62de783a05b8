from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.expression import FunctionElement


class statement_now(FunctionElement):
    """Time the current statement started.

    PostgreSQL now() is the transaction start. A save that waited on the
    partition counter lock would get an older saved_at than the version
    committed before it, so saved_at uses statement_timestamp() there.
    """

    type = DateTime(timezone=True)
    inherit_cache = True


@compiles(statement_now)
def _statement_now_default(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(statement_now, "postgresql")
def _statement_now_postgresql(element, compiler, **kw):
    return "statement_timestamp()"


class Base(DeclarativeBase):
    """Base class for all database models."""


class PromptVersion(Base):
    """System prompt revisions stored as immutable facts.

    Revisions are never updated - only inserted. A correction is a new
    revision with a higher version number.

    Schema:
    - id: UUID primary key
    - partition_key: Physical partition (workspace + sharing scope [+ owner])
    - workspace: Logical workspace name
    - is_shared: Visible to all workspace members (True) or only the author (False)
    - version: Positive integer, unique within the partition
    - prompt_text: Full prompt text (not a diff)
    - evaluation_notes: Why this version was saved (may be empty)
    - author_id / author_email: Provenance of the writer
    - model_identifier: Model the prompt was tuned for (informational)
    - technical_key: Human-readable "<user>_v<version>" reference
    - saved_at: Server-assigned time of the INSERT statement

    Constraints:
    - Unique constraint: (partition_key, version) rejects a duplicate version
    """

    __tablename__ = "prompt_versions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    partition_key: Mapped[str] = mapped_column(String, nullable=False, index=True)
    workspace: Mapped[str] = mapped_column(String, nullable=False)
    is_shared: Mapped[bool] = mapped_column(Boolean, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    prompt_text: Mapped[str] = mapped_column(Text, nullable=False)
    evaluation_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_id: Mapped[str] = mapped_column(String, nullable=False)
    author_email: Mapped[str | None] = mapped_column(String, nullable=True)
    model_identifier: Mapped[str] = mapped_column(String, nullable=False)
    technical_key: Mapped[str] = mapped_column(String, nullable=False)
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=statement_now())

    __table_args__ = (
        UniqueConstraint("partition_key", "version", name="uq_prompt_versions_partition_version"),
        Index("idx_prompt_versions_partition_saved_at", "partition_key", "saved_at"),
    )


class PromptVersionCounter(Base):
    """Per-partition version counter.

    The only mutable row in the ledger. Incremented atomically in the same
    transaction that inserts the matching PromptVersion row.
    """

    __tablename__ = "prompt_version_counters"

    partition_key: Mapped[str] = mapped_column(String, primary_key=True)
    last_version: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
