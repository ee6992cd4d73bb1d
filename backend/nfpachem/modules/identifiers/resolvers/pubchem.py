from __future__ import annotations

import re
from typing import Any

from nfpachem.modules.chemicals.schemas import IdentifierType
from nfpachem.modules.identifiers.resolvers.base import HttpIdentifierResolver

_CAS_RE = re.compile(r"^(\d{2,7})-(\d{2})-(\d)$")


def is_cas_number(text: str) -> bool:
    """True for a well-formed CAS RN whose check digit is correct."""
    m = _CAS_RE.match(text.strip())
    if not m:
        return False
    digits = (m.group(1) + m.group(2))[::-1]
    checksum = sum(int(d) * i for i, d in enumerate(digits, start=1)) % 10
    return checksum == int(m.group(3))


class PubChemResolver(HttpIdentifierResolver):
    """PubChem PUG REST name lookup.

    CAS numbers are not a first-class PubChem property; they are picked out of
    the compound's synonym list.
    """

    name = "pubchem"
    space_separator = "%20"

    def build_url(self, name: str, id_type: IdentifierType) -> str:
        base = f"{self.base_url}/compound/name/{name}"
        if id_type == IdentifierType.CID:
            return f"{base}/cids/JSON"
        if id_type == IdentifierType.INCHI_KEY:
            return f"{base}/property/InChIKey/JSON"
        return f"{base}/synonyms/JSON"

    def parse_response(self, data: Any, id_type: IdentifierType) -> str | None:
        if not isinstance(data, dict):
            return None

        if id_type == IdentifierType.CID:
            cids = (data.get("IdentifierList") or {}).get("CID") or []
            return str(int(cids[0])) if cids else None

        if id_type == IdentifierType.INCHI_KEY:
            props = (data.get("PropertyTable") or {}).get("Properties") or []
            return props[0].get("InChIKey") if props else None

        info = (data.get("InformationList") or {}).get("Information") or []
        for entry in info:
            for synonym in entry.get("Synonym") or []:
                if is_cas_number(synonym):
                    return synonym.strip()
        return None
