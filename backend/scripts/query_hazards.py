#!/usr/bin/env python3
"""Look up chemicals by NFPA 704 fire-diamond ratings.

Queries the bundled databases (or the files given with --database) and prints
the names of matching chemicals, optionally collapsing entries that several
databases list under different names.

Usage:
    python -m scripts.query_hazards --health 1 --flammability 3 --reactivity 0
    python -m scripts.query_hazards -H 3 -F 3 -R 2 --special W
    python -m scripts.query_hazards -H 3 -F 0 -R 1 --dedupe --id-type CID
"""
from __future__ import annotations

import argparse
import asyncio

import structlog

from nfpachem.core.config import settings
from nfpachem.modules.chemicals.database import DatabaseAggregator
from nfpachem.modules.chemicals.schemas import ChemicalRecord, IdentifierType, SpecialSymbol
from nfpachem.modules.identifiers.consensus import ConsensusResolver
from nfpachem.modules.identifiers.dedup import Deduplicator

logger = structlog.get_logger()


def _rating(value: str) -> int:
    rating = int(value)
    if not 0 <= rating <= 4:
        raise argparse.ArgumentTypeError(f"rating must be between 0 and 4, got {rating}")
    return rating


def _special(value: str) -> SpecialSymbol:
    symbol = SpecialSymbol.from_token(value)
    if symbol is None:
        try:
            symbol = SpecialSymbol(value.upper())
        except ValueError:
            raise argparse.ArgumentTypeError(f"unknown special symbol: {value}") from None
    return symbol


def format_results(records: list[ChemicalRecord]) -> str:
    if not records:
        return "No results."
    return "\n".join(f" - {record.name or '(unnamed)'}" for record in records)


async def run_query(
    template: ChemicalRecord,
    include_specials: bool,
    database_files: list[str],
    dedupe: bool = False,
    id_type: IdentifierType = IdentifierType.CID,
) -> list[ChemicalRecord]:
    """Query every database and optionally dedupe the merged results."""
    aggregator = DatabaseAggregator.from_files(database_files)
    logger.info("databases_loaded", databases=len(aggregator.databases), records=len(aggregator))

    if not dedupe:
        return aggregator.query(template, include_specials)

    consensus = ConsensusResolver.from_settings()
    try:
        return await aggregator.query_deduplicated(
            template, include_specials, Deduplicator(consensus), id_type
        )
    finally:
        await consensus.aclose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="NFPA 704 chemical lookup")
    parser.add_argument("-H", "--health", type=_rating, required=True)
    parser.add_argument("-F", "--flammability", type=_rating, required=True)
    parser.add_argument("-R", "--reactivity", type=_rating, required=True)
    parser.add_argument(
        "--special",
        type=_special,
        action="append",
        default=None,
        help="Special symbol (OX, SA, W); repeat for several. Enables special matching.",
    )
    parser.add_argument(
        "--match-specials",
        action="store_true",
        help="Match special symbols even when none are given (i.e. require none)",
    )
    parser.add_argument("--dedupe", action="store_true", help="Collapse duplicates across databases")
    parser.add_argument(
        "--id-type",
        type=IdentifierType,
        choices=list(IdentifierType),
        default=IdentifierType(settings.default_id_type),
    )
    parser.add_argument(
        "--database",
        action="append",
        default=None,
        help="Database file (JSON or CSV); repeat for several. Defaults to the bundled set.",
    )
    args = parser.parse_args(argv)

    template = ChemicalRecord.from_ratings(
        None,
        args.health,
        args.flammability,
        args.reactivity,
        specials=args.special or (),
    )
    include_specials = args.match_specials or args.special is not None

    results = asyncio.run(
        run_query(
            template,
            include_specials,
            args.database or settings.database_files,
            dedupe=args.dedupe,
            id_type=args.id_type,
        )
    )
    print(format_results(results))


if __name__ == "__main__":
    main()
