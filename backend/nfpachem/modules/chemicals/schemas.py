from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field, PrivateAttr, field_validator


class HazardProperty(str, Enum):
    HEALTH = "HEALTH"
    FLAMMABILITY = "FLAMMABILITY"
    REACTIVITY = "REACTIVITY"


class IdentifierType(str, Enum):
    CASRN = "CASRN"
    CID = "CID"
    INCHI_KEY = "INCHI_KEY"

    @property
    def label(self) -> str:
        return IDENTIFIER_LABELS[self]


class SpecialSymbol(str, Enum):
    OXIDIZER = "OXIDIZER"
    SIMPLE_ASPHYXIANT = "SIMPLE_ASPHYXIANT"
    WATER_REACT = "WATER_REACT"

    @property
    def token(self) -> str:
        """Abbreviation used on the fire diamond and in database files."""
        return SPECIAL_TOKENS[self]

    @classmethod
    def from_token(cls, token: str) -> SpecialSymbol | None:
        token = token.strip().upper()
        for symbol, abbreviation in SPECIAL_TOKENS.items():
            if abbreviation == token:
                return symbol
        return None


SPECIAL_TOKENS: dict[SpecialSymbol, str] = {
    SpecialSymbol.OXIDIZER: "OX",
    SpecialSymbol.SIMPLE_ASPHYXIANT: "SA",
    SpecialSymbol.WATER_REACT: "W",
}

IDENTIFIER_LABELS: dict[IdentifierType, str] = {
    IdentifierType.CASRN: "CASRN",
    IdentifierType.CID: "CID",
    IdentifierType.INCHI_KEY: "InChI Key",
}

Rating = Annotated[int, Field(ge=0, le=4)]


def _no_specials() -> dict[SpecialSymbol, bool]:
    return {symbol: False for symbol in SpecialSymbol}


# --- Domain record ---


class ChemicalRecord(BaseModel):
    """A chemical and its NFPA 704 fire-diamond ratings.

    ``properties`` always holds all three hazard ratings in 0..4 and
    ``specials`` always holds all three special symbols.  Both are checked on
    construction and on every assignment, so the setters below cannot leave a
    record in an invalid state.

    ``identifiers`` is a write-once cache filled by the consensus resolver;
    unnamed records never get an entry.
    """

    name: str | None = None
    properties: dict[HazardProperty, Rating]
    specials: dict[SpecialSymbol, bool] = Field(default_factory=_no_specials)
    identifiers: dict[IdentifierType, str] = Field(default_factory=dict)

    _identifier_locks: dict[IdentifierType, asyncio.Lock] = PrivateAttr(default_factory=dict)

    model_config = {"validate_assignment": True}

    @field_validator("properties")
    @classmethod
    def _require_all_ratings(cls, value: dict[HazardProperty, int]) -> dict[HazardProperty, int]:
        missing = [prop.value for prop in HazardProperty if prop not in value]
        if missing:
            raise ValueError(f"missing hazard ratings: {', '.join(missing)}")
        return {prop: value[prop] for prop in HazardProperty}

    @field_validator("specials", mode="before")
    @classmethod
    def _coerce_specials(cls, value: Any) -> Any:
        if value is None:
            return {}
        # A bare collection of symbols means "these are present"
        if isinstance(value, (list, tuple, set, frozenset)):
            return {symbol: True for symbol in value}
        return value

    @field_validator("specials")
    @classmethod
    def _fill_specials(cls, value: dict[SpecialSymbol, bool]) -> dict[SpecialSymbol, bool]:
        return {symbol: bool(value.get(symbol, False)) for symbol in SpecialSymbol}

    @classmethod
    def from_ratings(
        cls,
        name: str | None,
        health: int,
        flammability: int,
        reactivity: int,
        specials: Iterable[SpecialSymbol] = (),
    ) -> ChemicalRecord:
        return cls(
            name=name,
            properties={
                HazardProperty.HEALTH: health,
                HazardProperty.FLAMMABILITY: flammability,
                HazardProperty.REACTIVITY: reactivity,
            },
            specials={symbol: True for symbol in specials},
        )

    # ------------------------------------------------------------------
    # Accessors / setters
    # ------------------------------------------------------------------

    @property
    def is_named(self) -> bool:
        return bool(self.name and self.name.strip())

    def get_property(self, prop: HazardProperty) -> int:
        return self.properties[prop]

    def set_property(self, prop: HazardProperty, rating: int) -> None:
        self.properties = {**self.properties, prop: rating}

    def set_properties(self, properties: Mapping[HazardProperty, int]) -> None:
        self.properties = dict(properties)

    def get_special(self, symbol: SpecialSymbol) -> bool:
        return self.specials[symbol]

    def set_special(self, symbol: SpecialSymbol, present: bool) -> None:
        self.specials = {**self.specials, symbol: present}

    def get_identifier(self, id_type: IdentifierType) -> str | None:
        return self.identifiers.get(id_type)

    # ------------------------------------------------------------------
    # Identifier cache
    # ------------------------------------------------------------------

    def identifier_lock(self, id_type: IdentifierType) -> asyncio.Lock:
        """Lock serialising resolution of one identifier type for this record."""
        lock = self._identifier_locks.get(id_type)
        if lock is None:
            lock = self._identifier_locks[id_type] = asyncio.Lock()
        return lock

    def cache_identifier(self, id_type: IdentifierType, value: str) -> str:
        """Store ``value`` unless an identifier of this type is already cached.

        Returns the cached identifier, which is the first value ever stored.
        """
        return self.identifiers.setdefault(id_type, value)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def equals_nfpa(self, other: ChemicalRecord, include_specials: bool) -> bool:
        if self.properties != other.properties:
            return False
        if include_specials:
            return self.specials == other.specials
        return True


# --- API schemas ---


class HazardQuery(BaseModel):
    health: Rating
    flammability: Rating
    reactivity: Rating
    specials: list[SpecialSymbol] | None = None
    include_specials: bool = False
    dedupe: bool = False
    id_type: IdentifierType = IdentifierType.CID

    def to_template(self) -> ChemicalRecord:
        return ChemicalRecord.from_ratings(
            None,
            self.health,
            self.flammability,
            self.reactivity,
            specials=self.specials or (),
        )

    @property
    def match_specials(self) -> bool:
        return self.include_specials or self.specials is not None


class ChemicalOut(BaseModel):
    name: str | None = None
    properties: dict[HazardProperty, int]
    specials: dict[SpecialSymbol, bool]
    identifiers: dict[IdentifierType, str] = {}

    model_config = {"from_attributes": True}


class HazardQueryResponse(BaseModel):
    items: list[ChemicalOut]
    total: int
    deduplicated: bool = False


class DatabaseSummary(BaseModel):
    name: str
    source: str
    records: int
