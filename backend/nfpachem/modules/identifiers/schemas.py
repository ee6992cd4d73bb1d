from __future__ import annotations

from pydantic import BaseModel, Field

from nfpachem.modules.chemicals.schemas import IdentifierType


class Vote(BaseModel):
    resolver: str
    priority: int = Field(ge=0)  # registration index, lower wins ties
    identifier: str | None = None


class ConsensusResult(BaseModel):
    name: str
    id_type: IdentifierType
    identifier: str | None = None
    votes: list[Vote] = []

    @property
    def agreeing(self) -> int:
        if self.identifier is None:
            return 0
        return sum(1 for vote in self.votes if vote.identifier == self.identifier)
