"""Unit tests for identifier-based deduplication."""

from __future__ import annotations

from nfpachem.modules.chemicals.database import DatabaseAggregator
from nfpachem.modules.chemicals.schemas import ChemicalRecord, IdentifierType
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.dedup import Deduplicator


def _records(*names: str | None) -> list[ChemicalRecord]:
    return [ChemicalRecord.from_ratings(name, 1, 3, 0) for name in names]


async def test_first_occurrence_is_kept(fake_resolver) -> None:
    consensus = ConsensusResolver([fake_resolver("r", {"A": "1", "B": "1", "C": "2"})], timeout=1.0)
    records = _records("A", "B", "C")

    result = await Deduplicator(consensus, max_workers=2).dedupe(records, IdentifierType.CID)
    assert [r.name for r in result] == ["A", "C"]


async def test_dedupe_mutates_list_in_place(fake_resolver) -> None:
    consensus = ConsensusResolver([fake_resolver("r", {"A": "1", "B": "1"})], timeout=1.0)
    records = _records("A", "B")
    first = records[0]

    result = await Deduplicator(consensus).dedupe(records, IdentifierType.CID)
    assert result is records
    assert records == [first]
    assert records[0] is first


async def test_unresolved_records_are_kept(fake_resolver) -> None:
    consensus = ConsensusResolver([fake_resolver("r", {"A": "1"})], timeout=1.0)
    records = _records("A", "Mystery", "Mystery")

    await Deduplicator(consensus).dedupe(records, IdentifierType.CID)
    assert [r.name for r in records] == ["A", "Mystery", "Mystery"]


async def test_unnamed_records_kept_by_default(fake_resolver) -> None:
    resolver = fake_resolver("r", {"A": "1"})
    consensus = ConsensusResolver([resolver], timeout=1.0)
    records = _records("A", None, "  ")

    await Deduplicator(consensus, drop_unnamed=False).dedupe(records, IdentifierType.CID)
    assert [r.name for r in records] == ["A", None, "  "]
    assert [name for name, _ in resolver.calls] == ["A"]


async def test_unnamed_records_dropped_when_configured(fake_resolver) -> None:
    consensus = ConsensusResolver([fake_resolver("r", {"A": "1"})], timeout=1.0)
    records = _records(None, "A", "")

    await Deduplicator(consensus, drop_unnamed=True).dedupe(records, IdentifierType.CID)
    assert [r.name for r in records] == ["A"]


async def test_empty_list(fake_resolver) -> None:
    consensus = ConsensusResolver([fake_resolver("r")], timeout=1.0)
    records: list[ChemicalRecord] = []
    assert await Deduplicator(consensus).dedupe(records, IdentifierType.CID) == []


async def test_lookups_are_bounded_by_max_workers(fake_resolver) -> None:
    names = [f"chem-{i}" for i in range(10)]
    resolver = fake_resolver("r", {name: name for name in names}, delay=0.02)
    consensus = ConsensusResolver([resolver], timeout=1.0)

    await Deduplicator(consensus, max_workers=3).dedupe(_records(*names), IdentifierType.CID)
    assert len(resolver.calls) == 10
    assert 1 < resolver.max_in_flight <= 3


async def test_identifiers_are_cached_on_records(fake_resolver) -> None:
    resolver = fake_resolver("r", {"A": "1"})
    consensus = ConsensusResolver([resolver], timeout=1.0)
    records = _records("A")

    deduplicator = Deduplicator(consensus)
    await deduplicator.dedupe(records, IdentifierType.CID)
    await deduplicator.dedupe(records, IdentifierType.CID)
    assert records[0].get_identifier(IdentifierType.CID) == "1"
    assert len(resolver.calls) == 1


async def test_query_deduplicated_across_databases(
    aggregator: DatabaseAggregator,
    consensus: ConsensusResolver,
) -> None:
    template = ChemicalRecord.from_ratings(None, 3, 0, 1)
    assert len(aggregator.query(template)) == 2

    results = await aggregator.query_deduplicated(
        template, False, Deduplicator(consensus), IdentifierType.CID
    )
    assert [r.name for r in results] == ["Sodium hydroxide"]
