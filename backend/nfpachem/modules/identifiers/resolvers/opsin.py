from __future__ import annotations

from typing import Any

from nfpachem.modules.chemicals.schemas import IdentifierType
from nfpachem.modules.identifiers.resolvers.base import HttpIdentifierResolver


class OPSINResolver(HttpIdentifierResolver):
    """OPSIN IUPAC name parser.  Only yields standard InChIKeys."""

    name = "opsin"
    space_separator = "%20"
    supported_types = frozenset({IdentifierType.INCHI_KEY})

    def build_url(self, name: str, id_type: IdentifierType) -> str:
        return f"{self.base_url}/opsin/{name}.json"

    def parse_response(self, data: Any, id_type: IdentifierType) -> str | None:
        if not isinstance(data, dict):
            return None
        return data.get("stdinchikey")
