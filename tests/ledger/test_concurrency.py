"""Tests for version numbering under concurrent writers.

Concurrent saves run in separate worker threads with separate database
connections, so they genuinely race for the partition counter.
"""

import asyncio

import pytest

from prompt_ledger.ledger.scope import PartitionKey
from prompt_ledger.ledger.store import PromptLedger


@pytest.mark.asyncio
async def test_two_concurrent_first_saves_get_distinct_versions(
    ledger: PromptLedger, shared_partition: PartitionKey
) -> None:
    """Both writers target version 1 of an empty partition; one gets 1, the other 2."""
    versions = await asyncio.gather(
        ledger.save(shared_partition, "from u1", author_id="u1"),
        ledger.save(shared_partition, "from u2", author_id="u2"),
    )

    assert sorted(versions) == [1, 2]

    history = await ledger.list_history(shared_partition)
    assert len(history) == 2
    assert {entry.author_id for entry in history} == {"u1", "u2"}


@pytest.mark.asyncio
async def test_concurrent_saves_are_gapless_and_unique(
    ledger: PromptLedger, shared_partition: PartitionKey
) -> None:
    n = 10
    versions = await asyncio.gather(
        *(ledger.save(shared_partition, f"prompt from writer {i}", author_id=f"u{i}") for i in range(n))
    )

    assert sorted(versions) == list(range(1, n + 1))

    history = await ledger.list_history(shared_partition)
    assert len(history) == n
    assert sorted(entry.version for entry in history) == list(range(1, n + 1))


@pytest.mark.asyncio
async def test_each_concurrent_version_holds_its_writers_text(
    ledger: PromptLedger, shared_partition: PartitionKey
) -> None:
    texts = [f"prompt from writer {i}" for i in range(6)]
    versions = await asyncio.gather(*(ledger.save(shared_partition, text, author_id="u1") for text in texts))

    for version, text in zip(versions, texts, strict=True):
        record = await ledger.get_version(shared_partition, version)
        assert record is not None
        assert record.prompt_text == text


@pytest.mark.asyncio
async def test_concurrent_saves_to_different_partitions_do_not_interfere(
    ledger: PromptLedger,
    private_partition_u1: PartitionKey,
    private_partition_u2: PartitionKey,
) -> None:
    results = await asyncio.gather(
        *(ledger.save(private_partition_u1, f"u1 {i}", author_id="u1") for i in range(4)),
        *(ledger.save(private_partition_u2, f"u2 {i}", author_id="u2") for i in range(4)),
    )

    assert sorted(results[:4]) == [1, 2, 3, 4]
    assert sorted(results[4:]) == [1, 2, 3, 4]
