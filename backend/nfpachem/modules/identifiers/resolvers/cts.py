from __future__ import annotations

from typing import Any

from nfpachem.modules.chemicals.schemas import IdentifierType
from nfpachem.modules.identifiers.resolvers.base import HttpIdentifierResolver

# CTS names the target identifier in the URL path
CTS_TARGETS: dict[IdentifierType, str] = {
    IdentifierType.CASRN: "CAS",
    IdentifierType.CID: "PubChem%20CID",
    IdentifierType.INCHI_KEY: "InChIKey",
}


class CTSResolver(HttpIdentifierResolver):
    """Fiehn lab Chemical Translation Service: chemical name -> CAS / CID / InChIKey."""

    name = "cts"
    space_separator = "_"

    def build_url(self, name: str, id_type: IdentifierType) -> str:
        return f"{self.base_url}/service/convert/Chemical%20Name/{CTS_TARGETS[id_type]}/{name}"

    def parse_response(self, data: Any, id_type: IdentifierType) -> str | None:
        # [{"fromIdentifier": ..., "searchTerm": ..., "toIdentifier": ..., "results": [...]}]
        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        if not isinstance(first, dict):
            return None
        results = first.get("results", first.get("result")) or []
        if not results:
            return None
        return str(results[0])
