from __future__ import annotations

from fastapi import APIRouter, Depends

from nfpachem.core.dependencies import get_aggregator, get_deduplicator
from nfpachem.modules.chemicals.database import DatabaseAggregator
from nfpachem.modules.chemicals.schemas import (
    ChemicalOut,
    DatabaseSummary,
    HazardQuery,
    HazardQueryResponse,
)
from nfpachem.modules.identifiers.dedup import Deduplicator

router = APIRouter(prefix="/chemicals", tags=["chemicals"])


@router.post("/query", response_model=HazardQueryResponse)
async def query_chemicals(
    body: HazardQuery,
    aggregator: DatabaseAggregator = Depends(get_aggregator),
    deduplicator: Deduplicator = Depends(get_deduplicator),
) -> HazardQueryResponse:
    template = body.to_template()
    if body.dedupe:
        items = await aggregator.query_deduplicated(
            template, body.match_specials, deduplicator, body.id_type
        )
    else:
        items = aggregator.query(template, body.match_specials)
    return HazardQueryResponse(
        items=[ChemicalOut.model_validate(record) for record in items],
        total=len(items),
        deduplicated=body.dedupe,
    )


@router.get("/databases", response_model=list[DatabaseSummary])
async def list_databases(
    aggregator: DatabaseAggregator = Depends(get_aggregator),
) -> list[DatabaseSummary]:
    return [
        DatabaseSummary(name=db.name, source=db.source, records=len(db))
        for db in aggregator.databases
    ]
