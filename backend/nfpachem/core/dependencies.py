from __future__ import annotations

from fastapi import Request

from nfpachem.modules.chemicals.database import DatabaseAggregator
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.dedup import Deduplicator


# Populated by the application lifespan in nfpachem.main


def get_aggregator(request: Request) -> DatabaseAggregator:
    return request.app.state.aggregator


def get_consensus_resolver(request: Request) -> ConsensusResolver:
    return request.app.state.consensus


def get_deduplicator(request: Request) -> Deduplicator:
    return request.app.state.deduplicator
