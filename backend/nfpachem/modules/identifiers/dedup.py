from __future__ import annotations

import asyncio

import structlog

from nfpachem.core.config import settings
from nfpachem.modules.chemicals.schemas import ChemicalRecord, IdentifierType
from nfpachem.modules.identifiers.consensus import ConsensusResolver

logger = structlog.get_logger()


class Deduplicator:
    """Collapse records that resolve to the same canonical identifier.

    Records are resolved concurrently, at most ``max_workers`` at a time;
    each of those lookups fans out to every resolver on its own.

    The first record (in list order) carrying an identifier is kept and
    later records with the same identifier are dropped.  Records whose
    identifier cannot be resolved are always kept.  Unnamed records are
    kept unless ``drop_unnamed`` is set.
    """

    def __init__(
        self,
        consensus: ConsensusResolver,
        max_workers: int | None = None,
        drop_unnamed: bool | None = None,
    ) -> None:
        self.consensus = consensus
        self.max_workers = max(1, max_workers or settings.dedupe_max_workers)
        self.drop_unnamed = settings.dedupe_drop_unnamed if drop_unnamed is None else drop_unnamed

    async def _resolve_all(
        self,
        records: list[ChemicalRecord],
        id_type: IdentifierType,
    ) -> list[str | None]:
        semaphore = asyncio.Semaphore(self.max_workers)

        async def worker(record: ChemicalRecord) -> str | None:
            if not record.is_named:
                return None
            async with semaphore:
                return await self.consensus.resolve_record(record, id_type)

        return list(await asyncio.gather(*(worker(record) for record in records)))

    async def dedupe(
        self,
        records: list[ChemicalRecord],
        id_type: IdentifierType,
    ) -> list[ChemicalRecord]:
        """Remove duplicates from ``records`` in place and return it."""
        identifiers = await self._resolve_all(records, id_type)

        duplicates: set[int] = set()
        for i, origin in enumerate(identifiers):
            if origin is None or i in duplicates:
                continue
            for j in range(i + 1, len(records)):
                if j not in duplicates and identifiers[j] == origin:
                    duplicates.add(j)

        kept = [
            record
            for index, record in enumerate(records)
            if index not in duplicates and (record.is_named or not self.drop_unnamed)
        ]
        removed = len(records) - len(kept)
        records[:] = kept

        logger.info(
            "dedupe_complete",
            id_type=id_type.value,
            duplicates=len(duplicates),
            removed=removed,
            kept=len(kept),
        )
        return records
