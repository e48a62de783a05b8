"""Async prompt version ledger.

PromptLedger is the public entry point for saving and reading system prompt
versions. Every operation runs its blocking database work in a worker
thread (asyncio.to_thread), one session per call, so callers on the event
loop never block.

Read operations return None for "nothing saved yet" and "no such version";
store failures raise PersistenceError. Callers must keep the two apart:
None is a normal first-use state, not a fault.

A cancelled save may still commit in its worker thread. Re-query
list_history() or load_latest() before retrying an unconfirmed save.
"""

import asyncio
import random
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from prompt_ledger.config.settings import settings
from prompt_ledger.db.session import get_session, get_session_factory
from prompt_ledger.ledger.errors import AllocationConflictError, PersistenceError, ValidationError
from prompt_ledger.ledger.repository import (
    create_prompt_version,
    get_latest_prompt_version,
    get_prompt_version,
    list_prompt_versions,
)
from prompt_ledger.ledger.scope import PartitionKey
from prompt_ledger.ledger.types import VersionRecord, VersionSummary

T = TypeVar("T")


class PromptLedger:
    """Append-only, per-partition store of system prompt versions."""

    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        *,
        history_limit: int | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        backoff_max_seconds: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.history_limit = history_limit or settings.history_limit
        self.max_attempts = max_attempts or settings.allocation_max_attempts
        self.backoff_seconds = settings.allocation_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.backoff_max_seconds = (
            settings.allocation_backoff_max_seconds if backoff_max_seconds is None else backoff_max_seconds
        )

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def save(
        self,
        partition: PartitionKey,
        prompt_text: str,
        evaluation_notes: str = "",
        *,
        author_id: str,
        author_email: str | None = None,
        model_identifier: str | None = None,
    ) -> int:
        """Save a new version and return its version number.

        Raises:
            ValidationError: If prompt_text is blank or author_id is empty
            PersistenceError: If the store fails or allocation stays contended
        """
        record = await self.save_record(
            partition,
            prompt_text,
            evaluation_notes,
            author_id=author_id,
            author_email=author_email,
            model_identifier=model_identifier,
        )
        return record.version

    async def save_record(
        self,
        partition: PartitionKey,
        prompt_text: str,
        evaluation_notes: str = "",
        *,
        author_id: str,
        author_email: str | None = None,
        model_identifier: str | None = None,
    ) -> VersionRecord:
        """Save a new version and return the persisted record.

        The counter bump and the record insert commit together: either the
        record exists with the returned version, or nothing was written.
        Allocation conflicts are retried with exponential backoff up to
        max_attempts; other store errors are not retried.

        Args:
            partition: Resolved partition to write to
            prompt_text: Full prompt text, must not be blank
            evaluation_notes: Why this version was saved
            author_id: Writer identity
            author_email: Writer email, used for the technical key
            model_identifier: Model label (defaults to settings.default_model_identifier)

        Returns:
            The persisted VersionRecord

        Raises:
            ValidationError: If prompt_text is blank, author_id is empty, or
                author_id does not own the private partition
            AllocationConflictError: If every attempt hit a conflict
            PersistenceError: If the store fails
        """
        if not prompt_text or not prompt_text.strip():
            raise ValidationError("Prompt text cannot be empty")
        if not author_id or not author_id.strip():
            raise ValidationError("author_id is required to save a prompt version")
        if not partition.is_shared and author_id != partition.owner_id:
            raise ValidationError(
                f"Private partition {partition.value} belongs to {partition.owner_id}, not {author_id}"
            )

        model = model_identifier or settings.default_model_identifier
        log = logger.bind(partition_key=partition.value, author_id=author_id)

        for attempt in range(self.max_attempts):
            try:
                record = await asyncio.to_thread(
                    self._save_once,
                    partition,
                    prompt_text,
                    evaluation_notes or "",
                    author_id,
                    author_email,
                    model,
                )
            except IntegrityError:
                log.bind(attempt=attempt + 1).warning(
                    f"Version allocation conflict (attempt {attempt + 1}/{self.max_attempts})"
                )
                if attempt < self.max_attempts - 1:
                    await asyncio.sleep(self._backoff_delay(attempt))
                continue
            except SQLAlchemyError as e:
                log.error(f"Failed to save prompt version: {type(e).__name__}: {e}")
                raise PersistenceError(f"Failed to save prompt version: {e}") from e

            log.bind(version=record.version, technical_key=record.technical_key).info(
                f"Saved prompt version {record.version} ({len(prompt_text)} chars)"
            )
            return record

        log.error(f"Giving up on version allocation after {self.max_attempts} attempts")
        raise AllocationConflictError(partition.value, self.max_attempts)

    async def load_latest(self, partition: PartitionKey) -> str | None:
        """Return the prompt text of the latest version, or None if the partition is empty."""
        record = await self.load_latest_record(partition)
        return record.prompt_text if record is not None else None

    async def load_latest_record(self, partition: PartitionKey) -> VersionRecord | None:
        """Return the latest version record, or None if the partition is empty."""
        record = await self._read(get_latest_prompt_version, partition.value)
        if record is None:
            logger.bind(partition_key=partition.value).debug("No prompt versions saved yet")
        else:
            logger.bind(partition_key=partition.value, version=record.version).debug("Loaded latest prompt version")
        return record

    async def list_history(self, partition: PartitionKey, limit: int | None = None) -> list[VersionSummary]:
        """List versions newest first (saved_at DESC, ties by version DESC).

        Results are capped at history_limit entries (settings.history_limit,
        500 by default). A smaller limit may be requested.

        Raises:
            ValidationError: If limit is not positive
            PersistenceError: If the store fails
        """
        if limit is not None and limit < 1:
            raise ValidationError(f"History limit must be positive, got {limit}")
        effective_limit = min(limit, self.history_limit) if limit is not None else self.history_limit

        history = await self._read(list_prompt_versions, partition.value, limit=effective_limit)
        logger.bind(partition_key=partition.value, count=len(history)).debug("Loaded prompt history")
        return history

    async def get_version(self, partition: PartitionKey, version_number: int) -> VersionRecord | None:
        """Return the exact version, or None if the partition has no such version.

        Raises:
            ValidationError: If version_number is not positive
            PersistenceError: If the store fails
        """
        if version_number < 1:
            raise ValidationError(f"Version numbers start at 1, got {version_number}")
        return await self._read(get_prompt_version, partition.value, version_number)

    def _save_once(
        self,
        partition: PartitionKey,
        prompt_text: str,
        evaluation_notes: str,
        author_id: str,
        author_email: str | None,
        model_identifier: str,
    ) -> VersionRecord:
        with get_session(self.session_factory) as session:
            return create_prompt_version(
                session,
                partition=partition,
                prompt_text=prompt_text,
                evaluation_notes=evaluation_notes,
                author_id=author_id,
                author_email=author_email,
                model_identifier=model_identifier,
            )

    async def _read(self, query_fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        def _run() -> T:
            with get_session(self.session_factory) as session:
                return query_fn(session, *args, **kwargs)

        try:
            return await asyncio.to_thread(_run)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read prompt versions: {type(e).__name__}: {e}")
            raise PersistenceError(f"Failed to read prompt versions: {e}") from e

    def _backoff_delay(self, attempt: int) -> float:
        delay = min(self.backoff_seconds * (2**attempt), self.backoff_max_seconds)
        # 50-100% jitter
        return delay * random.uniform(0.5, 1.0)
