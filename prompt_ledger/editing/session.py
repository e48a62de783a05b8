"""Prompt editing session.

Holds the draft of a system prompt in memory and talks to the ledger only
on explicit actions: open, save, load a version, load latest. There is no
autosave; loading any version replaces the draft without touching the
ledger.
"""

from loguru import logger

from prompt_ledger.ledger.scope import PartitionKey
from prompt_ledger.ledger.store import PromptLedger
from prompt_ledger.ledger.types import VersionSummary
from prompt_ledger.sample.source import SampleTextSource


class PromptEditingSession:
    """One user's editing session over a prompt partition.

    Attributes:
        draft: Current in-memory prompt text
        evaluation_notes: Note to attach to the next save
        history: Last fetched history (newest first)
        loaded_version: Version the draft was loaded from, None for latest/new
        is_first_use: True when the partition had no versions at open()
    """

    def __init__(
        self,
        ledger: PromptLedger,
        partition: PartitionKey,
        *,
        author_id: str,
        author_email: str | None = None,
        sample_source: SampleTextSource | None = None,
    ) -> None:
        self.ledger = ledger
        self.partition = partition
        self.author_id = author_id
        self.author_email = author_email
        self.sample_source = sample_source

        self.draft = ""
        self.evaluation_notes = ""
        self.history: list[VersionSummary] = []
        self.loaded_version: int | None = None
        self.is_first_use = False
        self._baseline = ""

    @property
    def dirty(self) -> bool:
        """Whether the draft differs from the last loaded or saved text."""
        return self.draft != self._baseline

    async def open(self) -> None:
        """Load the latest version into the draft and fetch history."""
        latest = await self.ledger.load_latest(self.partition)
        self.is_first_use = latest is None
        self._replace_draft(latest or "", version=None)
        await self.refresh_history()

    async def refresh_history(self) -> list[VersionSummary]:
        self.history = await self.ledger.list_history(self.partition)
        return self.history

    def edit(self, text: str) -> None:
        self.draft = text

    def load_sample(self) -> bool:
        """Replace the draft with the sample prompt.

        Returns:
            False if no sample source is configured or the sample is empty
            (draft unchanged), True otherwise
        """
        sample = self.sample_source.fetch_sample_text() if self.sample_source else ""
        if not sample.strip():
            logger.warning("Sample prompt is empty or missing")
            return False
        self.draft = sample
        return True

    async def save(self, evaluation_notes: str | None = None) -> int:
        """Save the draft as a new version and refresh history.

        Returns:
            The new version number
        """
        notes = self.evaluation_notes if evaluation_notes is None else evaluation_notes
        version = await self.ledger.save(
            self.partition,
            self.draft,
            notes,
            author_id=self.author_id,
            author_email=self.author_email,
        )
        self.evaluation_notes = ""
        self.is_first_use = False
        self._baseline = self.draft
        self.loaded_version = version
        await self.refresh_history()
        return version

    async def load_version(self, version_number: int) -> bool:
        """Replace the draft with a historical version.

        Returns:
            False if the version does not exist (draft unchanged)
        """
        record = await self.ledger.get_version(self.partition, version_number)
        if record is None:
            logger.bind(partition_key=self.partition.value, version=version_number).info("Prompt version not found")
            return False
        self._replace_draft(record.prompt_text, version=record.version)
        self.evaluation_notes = record.evaluation_notes
        return True

    async def load_latest(self) -> bool:
        """Replace the draft with the latest version.

        Returns:
            False if nothing has been saved yet (draft unchanged)
        """
        latest = await self.ledger.load_latest(self.partition)
        if latest is None:
            return False
        self._replace_draft(latest, version=None)
        self.evaluation_notes = ""
        return True

    def _replace_draft(self, text: str, *, version: int | None) -> None:
        self.draft = text
        self._baseline = text
        self.loaded_version = version
