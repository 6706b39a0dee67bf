"""
Pydantic Schemas - Serialized shapes of progression state.

GangProgressionRecord is the persistence encoding used by the JSON
store; GangSnapshot is what the gameplay effect collaborator reads.

Level is never trusted from a record: to_state() recomputes it from
total_xp so a retuned curve takes effect on load.
"""

from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field

from .progression.curve import CurveEngine
from .progression.state import DoctrineID, GangProgressionState


class GangProgressionRecord(BaseModel):
    """Stored form of one gang's progression."""
    gang_id: str = Field(min_length=1)
    total_xp: int = Field(0, ge=0)
    level: int = Field(1, ge=1, description="Informational; recomputed on load")
    owned_upgrades: list[str] = Field(default_factory=list)
    active_doctrine: Optional[DoctrineID] = None
    premium_credits: int = Field(0, ge=0)
    revision: int = Field(0, ge=0)

    model_config = {"from_attributes": True}

    @classmethod
    def from_state(cls, state: GangProgressionState) -> GangProgressionRecord:
        return cls(
            gang_id=state.gang_id,
            total_xp=state.total_xp,
            level=state.level,
            owned_upgrades=sorted(state.owned_upgrades),
            active_doctrine=state.active_doctrine,
            premium_credits=state.premium_credits,
            revision=state.revision,
        )

    def to_state(self, curve: CurveEngine) -> GangProgressionState:
        return GangProgressionState.at_xp(
            self.gang_id, self.total_xp, curve,
            owned_upgrades=frozenset(self.owned_upgrades),
            active_doctrine=self.active_doctrine,
            premium_credits=self.premium_credits,
            revision=self.revision,
        )


class EffectInfo(BaseModel):
    """Declarative effect weights contributed by one source."""
    source_id: str
    source_type: str = Field(description="upgrade or doctrine")
    effects: dict[str, float] = Field(default_factory=dict)


class GangSnapshot(BaseModel):
    """Read model of a gang for gameplay code and operator tooling."""
    record: GangProgressionRecord
    xp_into_level: int
    xp_to_next_level: int
    level_fraction: float = Field(ge=0, le=1)
    effect_sources: list[EffectInfo] = Field(default_factory=list)
