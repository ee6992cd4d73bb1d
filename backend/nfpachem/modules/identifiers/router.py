from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from nfpachem.core.dependencies import get_consensus_resolver
from nfpachem.modules.chemicals.schemas import IdentifierType
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.schemas import ConsensusResult

router = APIRouter(prefix="/identifiers", tags=["identifiers"])


@router.get("/{id_type}", response_model=ConsensusResult)
async def resolve_identifier(
    id_type: IdentifierType,
    name: str = Query(..., min_length=1, max_length=200),
    consensus: ConsensusResolver = Depends(get_consensus_resolver),
) -> ConsensusResult:
    if not name.strip():
        raise HTTPException(status_code=422, detail="Chemical name must not be blank")
    return await consensus.vote(name.strip(), id_type)
