"""Shared test fixtures for the NFPA chemical ID test suite."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from nfpachem.core.dependencies import get_aggregator, get_consensus_resolver, get_deduplicator
from nfpachem.main import app
from nfpachem.modules.chemicals.database import ChemicalDatabase, DatabaseAggregator
from nfpachem.modules.chemicals.schemas import ChemicalRecord, IdentifierType, SpecialSymbol
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.dedup import Deduplicator
from nfpachem.modules.identifiers.resolvers import IdentifierResolver


class FakeResolver(IdentifierResolver):
    """In-memory resolver: answers from a name -> identifier table."""

    def __init__(
        self,
        name: str,
        answers: dict[str, str | None] | None = None,
        *,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.answers = answers or {}
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, IdentifierType]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def resolve(
        self,
        name: str,
        id_type: IdentifierType,
        *,
        timeout: float | None = None,
    ) -> str | None:
        self.calls.append((name, id_type))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.answers.get(name)
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_resolver() -> type[FakeResolver]:
    return FakeResolver


def _lab_records() -> list[ChemicalRecord]:
    return [
        ChemicalRecord.from_ratings("Acetone", 1, 3, 0),
        ChemicalRecord.from_ratings("Methanol", 1, 3, 0),
        ChemicalRecord.from_ratings("Sodium", 3, 3, 2, [SpecialSymbol.WATER_REACT]),
        ChemicalRecord.from_ratings("Sodium hydroxide", 3, 0, 1),
    ]


def _industrial_records() -> list[ChemicalRecord]:
    return [
        ChemicalRecord.from_ratings("Acetone", 1, 3, 0),
        ChemicalRecord.from_ratings("Caustic soda", 3, 0, 1),
        ChemicalRecord.from_ratings("Calcium carbide", 3, 3, 2, [SpecialSymbol.WATER_REACT]),
    ]


@pytest.fixture
def aggregator() -> DatabaseAggregator:
    return DatabaseAggregator(
        [
            ChemicalDatabase("lab", _lab_records()),
            ChemicalDatabase("industrial", _industrial_records()),
        ]
    )


CIDS = {
    "Acetone": "180",
    "Methanol": "887",
    "Sodium": "5360545",
    "Sodium hydroxide": "14798",
    "Caustic soda": "14798",
    "Calcium carbide": "10290742",
}


@pytest.fixture
def consensus() -> ConsensusResolver:
    return ConsensusResolver(
        [FakeResolver("primary", CIDS), FakeResolver("secondary", CIDS)],
        timeout=1.0,
    )


@pytest.fixture
async def client(
    aggregator: DatabaseAggregator,
    consensus: ConsensusResolver,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the FastAPI app with in-memory services."""
    deduplicator = Deduplicator(consensus, max_workers=2)
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    app.dependency_overrides[get_consensus_resolver] = lambda: consensus
    app.dependency_overrides[get_deduplicator] = lambda: deduplicator

    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
