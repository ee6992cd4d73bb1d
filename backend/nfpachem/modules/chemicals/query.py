"""NFPA 704 hazard matching.

Exact-match only: a record matches when its three hazard ratings equal the
template's, and, when requested, its special symbols too.  Each query is a
linear scan over the records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from nfpachem.modules.chemicals.schemas import (
    ChemicalRecord,
    HazardProperty,
    SpecialSymbol,
)


def query(
    records: Iterable[ChemicalRecord],
    template: ChemicalRecord,
    include_specials: bool = False,
) -> list[ChemicalRecord]:
    """Return the records matching ``template``, in input order."""
    return [record for record in records if record.equals_nfpa(template, include_specials)]


def query_ratings(
    records: Iterable[ChemicalRecord],
    properties: Mapping[HazardProperty, int],
    specials: Mapping[SpecialSymbol, bool] | None = None,
) -> list[ChemicalRecord]:
    """Query by raw ratings; passing ``specials`` also matches special symbols."""
    template = ChemicalRecord(properties=dict(properties), specials=specials)
    return query(records, template, include_specials=specials is not None)
