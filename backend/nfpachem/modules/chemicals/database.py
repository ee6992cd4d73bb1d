from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from nfpachem.modules.chemicals import query as hazard_query
from nfpachem.modules.chemicals.loader import ChemicalDataError, load_database
from nfpachem.modules.chemicals.schemas import (
    ChemicalRecord,
    HazardProperty,
    IdentifierType,
    SpecialSymbol,
)

if TYPE_CHECKING:
    from nfpachem.modules.identifiers.dedup import Deduplicator

logger = structlog.get_logger()


class ChemicalDatabase:
    """The records loaded from one source file."""

    def __init__(self, name: str, records: Iterable[ChemicalRecord], source: str = "") -> None:
        self.name = name
        self.source = source or name
        self.records = list(records)

    @classmethod
    def from_file(cls, path: str | Path) -> ChemicalDatabase:
        path = Path(path)
        return cls(path.stem, load_database(path), source=str(path))

    def __len__(self) -> int:
        return len(self.records)

    def query(self, template: ChemicalRecord, include_specials: bool = False) -> list[ChemicalRecord]:
        return hazard_query.query(self.records, template, include_specials)

    def query_ratings(
        self,
        properties: Mapping[HazardProperty, int],
        specials: Mapping[SpecialSymbol, bool] | None = None,
    ) -> list[ChemicalRecord]:
        return hazard_query.query_ratings(self.records, properties, specials)


class DatabaseAggregator:
    """Several databases queried as one.

    Results are concatenated in database order, so the same chemical listed
    in two files shows up twice until :meth:`query_deduplicated` is used.
    """

    def __init__(self, databases: Iterable[ChemicalDatabase] = ()) -> None:
        self.databases = list(databases)

    @classmethod
    def from_files(cls, paths: Iterable[str | Path]) -> DatabaseAggregator:
        """Load every file; a file that cannot be read is logged and skipped."""
        databases = []
        for path in paths:
            try:
                databases.append(ChemicalDatabase.from_file(path))
            except ChemicalDataError as e:
                logger.error("chemical_database_failed", source=str(path), error=str(e))
        return cls(databases)

    def add(self, database: ChemicalDatabase) -> None:
        self.databases.append(database)

    @property
    def records(self) -> list[ChemicalRecord]:
        return [record for database in self.databases for record in database.records]

    def __len__(self) -> int:
        return sum(len(database) for database in self.databases)

    def query(self, template: ChemicalRecord, include_specials: bool = False) -> list[ChemicalRecord]:
        results: list[ChemicalRecord] = []
        for database in self.databases:
            results.extend(database.query(template, include_specials))
        return results

    def query_ratings(
        self,
        properties: Mapping[HazardProperty, int],
        specials: Mapping[SpecialSymbol, bool] | None = None,
    ) -> list[ChemicalRecord]:
        results: list[ChemicalRecord] = []
        for database in self.databases:
            results.extend(database.query_ratings(properties, specials))
        return results

    async def query_deduplicated(
        self,
        template: ChemicalRecord,
        include_specials: bool,
        deduplicator: Deduplicator,
        id_type: IdentifierType,
    ) -> list[ChemicalRecord]:
        results = self.query(template, include_specials)
        return await deduplicator.dedupe(results, id_type)
