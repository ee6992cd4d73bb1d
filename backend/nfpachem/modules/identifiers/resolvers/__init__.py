"""External chemical-name resolution services.

  cts:     Fiehn lab Chemical Translation Service (CAS / CID / InChIKey)
  opsin:   OPSIN IUPAC name parser (InChIKey only)
  pubchem: PubChem PUG REST (CAS via synonyms / CID / InChIKey)
"""

from __future__ import annotations

import httpx

from nfpachem.core.config import settings
from nfpachem.modules.identifiers.resolvers.base import (
    HttpIdentifierResolver,
    IdentifierResolver,
    clean_name,
    replace_spaces,
)
from nfpachem.modules.identifiers.resolvers.cts import CTSResolver
from nfpachem.modules.identifiers.resolvers.opsin import OPSINResolver
from nfpachem.modules.identifiers.resolvers.pubchem import PubChemResolver

RESOLVERS: dict[str, type[HttpIdentifierResolver]] = {
    "cts": CTSResolver,
    "opsin": OPSINResolver,
    "pubchem": PubChemResolver,
}


def _base_url(name: str) -> str:
    return {
        "cts": settings.cts_base_url,
        "opsin": settings.opsin_base_url,
        "pubchem": settings.pubchem_base_url,
    }[name]


def build_resolvers(
    names: list[str],
    client: httpx.AsyncClient,
    timeout: float | None = None,
) -> list[IdentifierResolver]:
    """Instantiate resolvers in ``names`` order, which is also their vote priority."""
    resolvers: list[IdentifierResolver] = []
    for name in names:
        resolver_cls = RESOLVERS.get(name)
        if resolver_cls is None:
            raise ValueError(f"Unknown identifier resolver: {name}")
        resolvers.append(resolver_cls(client, _base_url(name), timeout=timeout))
    return resolvers


__all__ = [
    "CTSResolver",
    "HttpIdentifierResolver",
    "IdentifierResolver",
    "OPSINResolver",
    "PubChemResolver",
    "RESOLVERS",
    "build_resolvers",
    "clean_name",
    "replace_spaces",
]
