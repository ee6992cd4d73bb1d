"""Majority-vote identifier resolution across several external services.

Every configured resolver is asked concurrently; the join waits for all of
them (or their timeout) before voting, since a majority needs every vote.

  Vote:     one resolver's answer (None = no answer / timed out / failed)
  Tally:    identifier string -> (count, lowest resolver priority)
  Winner:   highest count, ties go to the lowest priority index
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import httpx
import structlog

from nfpachem.core.config import settings
from nfpachem.modules.chemicals.schemas import ChemicalRecord, IdentifierType
from nfpachem.modules.identifiers.resolvers import IdentifierResolver, build_resolvers
from nfpachem.modules.identifiers.schemas import ConsensusResult, Vote

logger = structlog.get_logger()


def pick_consensus(votes: Sequence[Vote]) -> str | None:
    """Return the most frequent identifier among ``votes``.

    Ties are broken by the lowest resolver priority that produced each
    candidate, so the outcome does not depend on completion order.
    """
    tally: dict[str, tuple[int, int]] = {}
    for vote in votes:
        if vote.identifier is None:
            continue
        count, best = tally.get(vote.identifier, (0, vote.priority))
        tally[vote.identifier] = (count + 1, min(best, vote.priority))

    if not tally:
        return None
    return min(tally, key=lambda key: (-tally[key][0], tally[key][1]))


class ConsensusResolver:
    """Fans a lookup out to every registered resolver and votes on the answers.

    Built once at startup and passed to whatever needs identifiers.  Resolver
    order is vote priority.
    """

    def __init__(
        self,
        resolvers: Sequence[IdentifierResolver],
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.resolvers = list(resolvers)
        self.timeout = timeout if timeout is not None else settings.resolver_timeout_seconds
        self._client = client

    @classmethod
    def from_settings(cls) -> ConsensusResolver:
        """Build the configured resolvers around one shared HTTP client."""
        client = httpx.AsyncClient(
            headers={"User-Agent": settings.http_user_agent},
            follow_redirects=True,
        )
        resolvers = build_resolvers(
            settings.resolvers,
            client,
            timeout=settings.resolver_timeout_seconds,
        )
        logger.info(
            "consensus_resolver_ready",
            resolvers=[r.name for r in resolvers],
            timeout=settings.resolver_timeout_seconds,
        )
        return cls(resolvers, timeout=settings.resolver_timeout_seconds, client=client)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def _ask(
        self,
        priority: int,
        resolver: IdentifierResolver,
        name: str,
        id_type: IdentifierType,
    ) -> Vote:
        value: str | None = None
        try:
            value = await asyncio.wait_for(
                resolver.resolve(name, id_type, timeout=self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "consensus_vote_timeout",
                resolver=resolver.name,
                chemical=name,
                id_type=id_type.value,
            )
        except Exception:
            logger.warning(
                "consensus_vote_failed",
                resolver=resolver.name,
                chemical=name,
                id_type=id_type.value,
                exc_info=True,
            )
        return Vote(resolver=resolver.name, priority=priority, identifier=value or None)

    async def vote(self, name: str, id_type: IdentifierType) -> ConsensusResult:
        """Ask every resolver and return the winner together with all votes."""
        votes = await asyncio.gather(
            *(
                self._ask(priority, resolver, name, id_type)
                for priority, resolver in enumerate(self.resolvers)
            )
        )
        identifier = pick_consensus(votes)
        logger.info(
            "consensus_resolved",
            chemical=name,
            id_type=id_type.value,
            identifier=identifier,
            votes={v.resolver: v.identifier for v in votes},
        )
        return ConsensusResult(name=name, id_type=id_type, identifier=identifier, votes=list(votes))

    async def resolve_consensus(self, name: str, id_type: IdentifierType) -> str | None:
        return (await self.vote(name, id_type)).identifier

    # ------------------------------------------------------------------
    # Record cache
    # ------------------------------------------------------------------

    async def resolve_record(self, record: ChemicalRecord, id_type: IdentifierType) -> str | None:
        """Resolve and cache ``record``'s identifier, at most once per type.

        Concurrent calls for the same record and type share one lookup: the
        second caller waits on the record's lock and then reads the cache.
        """
        if not record.is_named:
            logger.debug("identifier_skipped_unnamed", id_type=id_type.value)
            return None

        cached = record.get_identifier(id_type)
        if cached is not None:
            return cached

        async with record.identifier_lock(id_type):
            cached = record.get_identifier(id_type)
            if cached is not None:
                return cached
            identifier = await self.resolve_consensus(record.name, id_type)
            if identifier is None:
                return None
            return record.cache_identifier(id_type, identifier)
