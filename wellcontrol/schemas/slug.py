# wellcontrol/schemas/slug.py
import uuid
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Placement(str, Enum):
    IN_STRING = "in_string"
    IN_ANNULUS = "in_annulus"


class SlugStep(BaseModel):
    """A discrete fluid pill placed in the string or the annulus."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    placement: Placement = Placement.IN_STRING
    density_kgm3: float = Field(0.0, ge=0, description="Slug density, kg/m³")
    top_md_m: float = Field(0.0, description="MD at top of slug, m")
    length_m: float = Field(0.0, ge=0, description="Slug length along hole, m")
    top_tvd_m: Optional[float] = Field(None, description="Explicit TVD at top, m")
    bottom_tvd_m: Optional[float] = Field(None, description="Explicit TVD at bottom, m")
    pv_pa_s: Optional[float] = None
    yp_pa: Optional[float] = None
    pump_rate_m3_per_min: Optional[float] = None
    plan_id: Optional[uuid.UUID] = None

    @property
    def bottom_md_m(self) -> float:
        return self.top_md_m + self.length_m

    @property
    def has_explicit_tvd(self) -> bool:
        return self.top_tvd_m is not None and self.bottom_tvd_m is not None

    @property
    def tvd_span(self) -> Tuple[float, float]:
        """(top, bottom) TVD; explicit values when both are set, else TVD ≡ MD."""
        if self.has_explicit_tvd:
            return (min(self.top_tvd_m, self.bottom_tvd_m), max(self.top_tvd_m, self.bottom_tvd_m))
        return (self.top_md_m, self.bottom_md_m)


class SlugPlan(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    base_mud_density_kgm3: float = Field(1100.0, ge=0, description="Reference mud density, kg/m³")
    notes: Optional[str] = None
    steps: List[SlugStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def link_steps(self):
        self.steps = [
            s if s.plan_id == self.id else s.model_copy(update={"plan_id": self.id})
            for s in self.steps
        ]
        return self


class SlugDeltaInput(BaseModel):
    plan: SlugPlan
    tvd_m: List[float] = Field(..., description="Query TVDs, m")
    shoe_tvd_m: Optional[float] = Field(None, description="Casing shoe TVD, m")


class SlugDeltaResult(BaseModel):
    tvd_m: List[float]
    delta_kpa: List[float]
    delta_at_shoe_kpa: Optional[float] = None
