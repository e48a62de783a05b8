"""Tests for the prompt editing session."""

import pytest

from prompt_ledger.editing.session import PromptEditingSession
from prompt_ledger.ledger.scope import PartitionKey
from prompt_ledger.ledger.store import PromptLedger
from prompt_ledger.sample.source import StaticSampleTextSource


def _session(ledger: PromptLedger, partition: PartitionKey, sample: str = "") -> PromptEditingSession:
    return PromptEditingSession(
        ledger,
        partition,
        author_id="u1",
        author_email="maija@retta.fi",
        sample_source=StaticSampleTextSource(sample),
    )


@pytest.mark.asyncio
async def test_open_on_empty_partition_starts_first_use(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition)
    await editor.open()

    assert editor.is_first_use is True
    assert editor.draft == ""
    assert editor.history == []
    assert editor.dirty is False


@pytest.mark.asyncio
async def test_open_loads_latest(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    await ledger.save(shared_partition, "v1", author_id="u2")
    await ledger.save(shared_partition, "v2", author_id="u2")

    editor = _session(ledger, shared_partition)
    await editor.open()

    assert editor.is_first_use is False
    assert editor.draft == "v2"
    assert [entry.version for entry in editor.history] == [2, 1]


@pytest.mark.asyncio
async def test_save_submits_draft_and_refreshes_history(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition)
    await editor.open()

    editor.edit("New invoicing prompt")
    assert editor.dirty is True
    editor.evaluation_notes = "first try"

    version = await editor.save()

    assert version == 1
    assert editor.dirty is False
    assert editor.evaluation_notes == ""
    assert editor.is_first_use is False
    assert [entry.version for entry in editor.history] == [1]
    assert editor.history[0].evaluation_notes == "first try"
    assert editor.history[0].technical_key == "maija_v1"


@pytest.mark.asyncio
async def test_edit_does_not_autosave(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition)
    await editor.open()
    editor.edit("unsaved text")

    assert await ledger.load_latest(shared_partition) is None


@pytest.mark.asyncio
async def test_load_version_replaces_draft_without_writing(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    await ledger.save(shared_partition, "old prompt", "baseline", author_id="u1")
    await ledger.save(shared_partition, "new prompt", author_id="u1")

    editor = _session(ledger, shared_partition)
    await editor.open()

    assert await editor.load_version(1) is True
    assert editor.draft == "old prompt"
    assert editor.loaded_version == 1
    assert editor.evaluation_notes == "baseline"
    assert len(await ledger.list_history(shared_partition)) == 2


@pytest.mark.asyncio
async def test_load_missing_version_keeps_draft(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition)
    await editor.open()
    editor.edit("work in progress")

    assert await editor.load_version(5) is False
    assert editor.draft == "work in progress"


@pytest.mark.asyncio
async def test_restore_old_version_by_saving_it_again(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    await ledger.save(shared_partition, "good prompt", author_id="u1")
    await ledger.save(shared_partition, "broken prompt", author_id="u1")

    editor = _session(ledger, shared_partition)
    await editor.open()
    await editor.load_version(1)
    version = await editor.save("restore v1")

    assert version == 3
    assert await ledger.load_latest(shared_partition) == "good prompt"


@pytest.mark.asyncio
async def test_load_latest_reflects_other_writers(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition)
    await editor.open()
    assert await editor.load_latest() is False

    await ledger.save(shared_partition, "saved elsewhere", author_id="u2")

    assert await editor.load_latest() is True
    assert editor.draft == "saved elsewhere"


@pytest.mark.asyncio
async def test_load_sample(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition, sample="# Sample invoicing prompt\n")
    await editor.open()

    assert editor.load_sample() is True
    assert editor.draft == "# Sample invoicing prompt"
    assert editor.dirty is True


@pytest.mark.asyncio
async def test_empty_sample_leaves_draft(ledger: PromptLedger, shared_partition: PartitionKey) -> None:
    editor = _session(ledger, shared_partition, sample="   ")
    await editor.open()
    editor.edit("mine")

    assert editor.load_sample() is False
    assert editor.draft == "mine"
