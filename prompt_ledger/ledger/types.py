"""Version record types returned by the prompt ledger.

A version record answers one question only:
"What did the prompt say at version N, who saved it and why?"

It is:
- immutable
- append-only
- auditable
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from prompt_ledger.db.models import PromptVersion


class VersionSummary(BaseModel):
    """History entry without the full prompt text.

    Attributes:
        id: Opaque record identifier
        version: Version number within the partition
        saved_at: Server-assigned save timestamp
        evaluation_notes: Why this version was saved
        author_id: Writer identity
        author_email: Writer email (optional)
        workspace: Workspace name
        is_shared: Shared or private scope
        model_identifier: Model the prompt was tuned for
        technical_key: "<user>_v<version>" reference
        prompt_length: Length of the prompt text in characters
    """

    model_config = ConfigDict(frozen=True)

    id: str
    version: int
    saved_at: datetime
    evaluation_notes: str
    author_id: str
    author_email: str | None = None
    workspace: str
    is_shared: bool
    model_identifier: str
    technical_key: str
    prompt_length: int

    @classmethod
    def from_row(cls, row: PromptVersion, prompt_length: int) -> "VersionSummary":
        return cls(
            id=row.id,
            version=row.version,
            saved_at=row.saved_at,
            evaluation_notes=row.evaluation_notes,
            author_id=row.author_id,
            author_email=row.author_email,
            workspace=row.workspace,
            is_shared=row.is_shared,
            model_identifier=row.model_identifier,
            technical_key=row.technical_key,
            prompt_length=prompt_length,
        )


class VersionRecord(BaseModel):
    """Immutable snapshot of the prompt at one version."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    partition_key: str
    version: int
    prompt_text: str
    saved_at: datetime
    evaluation_notes: str
    author_id: str
    author_email: str | None = None
    workspace: str
    is_shared: bool
    model_identifier: str
    technical_key: str

    @classmethod
    def from_row(cls, row: PromptVersion) -> "VersionRecord":
        return cls.model_validate(row)

