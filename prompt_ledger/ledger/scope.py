"""Workspace/scope resolution for the prompt ledger.

Maps a logical (workspace, author, is_shared) triple to the physical
partition key under which versions are numbered and stored.

Shared scope:  "<workspace>:shared"            (every author in the workspace)
Private scope: "<workspace>:private:<author>"  (one author only)

Workspace names cannot contain ":", so keys of different scopes never collide.
This module is pure: no I/O, no state.
"""

import re
from dataclasses import dataclass

from prompt_ledger.ledger.errors import ValidationError

WORKSPACE_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
SHARED_SEGMENT = "shared"
PRIVATE_SEGMENT = "private"


@dataclass(frozen=True)
class PartitionKey:
    """Resolved storage partition.

    Attributes:
        workspace: Logical workspace name
        is_shared: Whether the partition is visible to all workspace members
        owner_id: Author owning a private partition (None when shared)
        value: Physical partition key string
    """

    workspace: str
    is_shared: bool
    owner_id: str | None
    value: str

    def __str__(self) -> str:
        return self.value


def validate_workspace(workspace: str) -> str:
    if not workspace or not WORKSPACE_PATTERN.match(workspace):
        raise ValidationError(
            f"Invalid workspace name {workspace!r}: use letters, digits, '_', '.' or '-'"
        )
    return workspace


def resolve_partition_key(workspace: str, author_id: str | None, is_shared: bool) -> PartitionKey:
    """Compute the partition key for a logical scope.

    Deterministic: two processes resolving the same scope get equal keys.

    Args:
        workspace: Workspace name
        author_id: Author identity; ignored for shared scope, required for private scope
        is_shared: Shared (workspace-wide) or private (per-author) history

    Returns:
        PartitionKey for the scope

    Raises:
        ValidationError: If the workspace name is invalid, or author_id is
            empty for a private scope
    """
    validate_workspace(workspace)

    if is_shared:
        return PartitionKey(
            workspace=workspace,
            is_shared=True,
            owner_id=None,
            value=f"{workspace}:{SHARED_SEGMENT}",
        )

    if not author_id or not author_id.strip():
        raise ValidationError("author_id is required for a private prompt scope")

    return PartitionKey(
        workspace=workspace,
        is_shared=False,
        owner_id=author_id,
        value=f"{workspace}:{PRIVATE_SEGMENT}:{author_id}",
    )
