# wellcontrol/schemas/backfill.py
import logging
import uuid
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


class GeometricStrategy(BaseModel):
    """Annulus area × pulled length with the plan overfill."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["geometric"] = "geometric"


class FixedPerStandStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["fixed_per_stand"] = "fixed_per_stand"
    volume_m3: float = Field(0.0, description="Volume pumped per stand, m³")


class PerMeterStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["per_meter"] = "per_meter"
    rate_m3_per_m: float = Field(0.0, description="Volume per metre pulled, m³/m")


BackfillStrategy = Annotated[
    Union[GeometricStrategy, FixedPerStandStrategy, PerMeterStrategy],
    Field(discriminator="kind"),
]

# Integer codes used by stored rule tables
LEGACY_STRATEGY_CODES = {0: "geometric", 1: "fixed_per_stand", 2: "per_meter"}


def decode_strategy(raw: Any, fixed_volume_m3: float = 0.0, rate_m3_per_m: float = 0.0) -> Any:
    """
    Turn a stored strategy value into a tagged strategy payload.

    Integer codes 0/1/2 map to geometric, fixed per stand and per metre.
    Any other code or unknown tag decodes to geometric.
    """
    if isinstance(raw, BaseModel):
        return raw
    if isinstance(raw, dict):
        kind = raw.get("kind")
        if kind in LEGACY_STRATEGY_CODES.values():
            return raw
        logger.warning(f"Unknown backfill strategy {kind!r}, using geometric")
        return {"kind": "geometric"}
    if isinstance(raw, bool):
        raw = int(raw)
    if isinstance(raw, int):
        kind = LEGACY_STRATEGY_CODES.get(raw)
        if kind is None:
            logger.warning(f"Unknown backfill strategy code {raw}, using geometric")
            kind = "geometric"
    elif isinstance(raw, str) and raw in LEGACY_STRATEGY_CODES.values():
        kind = raw
    else:
        logger.warning(f"Unknown backfill strategy {raw!r}, using geometric")
        kind = "geometric"

    if kind == "fixed_per_stand":
        return {"kind": kind, "volume_m3": fixed_volume_m3}
    if kind == "per_meter":
        return {"kind": kind, "rate_m3_per_m": rate_m3_per_m}
    return {"kind": kind}


class BackfillRule(BaseModel):
    """
    Depth-range rule selecting how backfill is computed for a stand.

    The MD range is inclusive at both ends and is reordered at construction
    when given reversed.
    """
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    from_md_m: float = 0.0
    to_md_m: float = 0.0
    strategy: BackfillStrategy = Field(default_factory=GeometricStrategy)
    density_override_kgm3: Optional[float] = Field(None, ge=0)
    plan_id: Optional[uuid.UUID] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        lo, hi = data.get("from_md_m", 0.0), data.get("to_md_m", 0.0)
        if lo is not None and hi is not None and lo > hi:
            data["from_md_m"], data["to_md_m"] = hi, lo
        if "strategy" in data:
            data["strategy"] = decode_strategy(
                data["strategy"],
                fixed_volume_m3=data.pop("fixed_volume_per_stand_m3", 0.0),
                rate_m3_per_m=data.pop("volume_per_meter_m3_per_m", 0.0),
            )
        return data

    def contains(self, md: float) -> bool:
        return self.from_md_m <= md <= self.to_md_m


class BackfillPlan(BaseModel):
    """Ordered rule table with a default fluid and overfill fraction."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = "Backfill Plan"
    fluid_density_kgm3: float = Field(1200.0, ge=0, description="Default backfill density, kg/m³")
    overfill_frac: float = Field(0.0, ge=0, description="Overfill as a fraction of geometric volume")
    notes: Optional[str] = None
    rules: List[BackfillRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def link_rules(self):
        self.rules = [
            r if r.plan_id == self.id else r.model_copy(update={"plan_id": self.id})
            for r in self.rules
        ]
        return self


class StandBackfill(BaseModel):
    model_config = ConfigDict(frozen=True)

    top_md_m: float
    stand_length_m: float
    annulus_area_m2: float
    volume_m3: float
    cumulative_m3: float
    density_kgm3: float
    strategy: str
    rule_id: Optional[uuid.UUID] = None
    rule_name: Optional[str] = None


class BackfillScheduleInput(BaseModel):
    plan: BackfillPlan = Field(default_factory=BackfillPlan)
    annulus_area_m2: float = Field(..., ge=0, description="Area vacated per metre pulled, m²")
    start_md_m: float = Field(..., description="Bit MD before the first stand is pulled, m")
    end_md_m: float = Field(0.0, description="Bit MD after the last stand, m")
    stand_length_m: float = Field(27.0, gt=0)
