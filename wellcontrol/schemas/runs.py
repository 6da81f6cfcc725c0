# wellcontrol/schemas/runs.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from wellcontrol.schemas.backfill import BackfillPlan
from wellcontrol.schemas.hydrostatics import PressureWindow
from wellcontrol.schemas.slug import SlugPlan
from wellcontrol.schemas.swab import SwabEstimate, SwabSample, SwabSummary, SwabSurgeConfig


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SwabRun(BaseModel):
    """Frozen snapshot of one swab/surge simulation."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: datetime = Field(default_factory=_utcnow)
    name: str = "Swab Run"
    config: SwabSurgeConfig
    estimate: Optional[SwabEstimate] = None
    samples: List[SwabSample] = Field(default_factory=list)
    summary: SwabSummary = Field(default_factory=SwabSummary)

    @property
    def max_underbalance_kpa(self) -> float:
        if self.samples:
            return self.summary.max_swab_kpa
        return self.estimate.total_kpa if self.estimate is not None else 0.0

    @property
    def non_laminar(self) -> bool:
        if self.samples:
            return self.summary.any_non_laminar
        return self.estimate.non_laminar if self.estimate is not None else False


# --- Trip simulation ---------------------------------------------------------

class TripConfig(BaseModel):
    name: str = "Trip"
    swab_surge: SwabSurgeConfig
    backfill_plan: Optional[BackfillPlan] = Field(None, description="Defaults to geometric fill with base mud")
    slug_plan: Optional[SlugPlan] = None
    pressure_window: Optional[PressureWindow] = None
    shoe_md_m: Optional[float] = Field(None, description="Casing shoe MD for the fracture check, m")


class TripSample(BaseModel):
    """State after one stand of a simulated trip."""
    model_config = ConfigDict(frozen=True)

    step_index: int
    bit_md_m: float
    bit_tvd_m: float
    pressure_delta_kpa: float = 0.0
    ecd_change_kgm3: float = 0.0
    non_laminar: bool = False
    degenerate: bool = False
    sabp_kpa: float = 0.0
    hydrostatic_kpa: float = 0.0
    slug_delta_kpa: float = 0.0
    acting_pressure_kpa: float = 0.0
    esd_at_bit_kgm3: float = 0.0
    stand_length_m: float = 0.0
    backfill_m3: float = 0.0
    cumulative_backfill_m3: float = 0.0
    backfill_density_kgm3: float = 0.0
    expected_if_closed_m3: float = 0.0
    expected_if_open_m3: float = 0.0
    margin_to_fracture_kpa: Optional[float] = None
    run_id: Optional[uuid.UUID] = None


class TripRun(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: datetime = Field(default_factory=_utcnow)
    name: str = "Trip Run"
    config: TripConfig
    samples: List[TripSample] = Field(default_factory=list)
    max_underbalance_kpa: float = 0.0
    max_sabp_kpa: float = 0.0
    min_margin_to_fracture_kpa: Optional[float] = None
    cumulative_backfill_m3: float = 0.0
    non_laminar: bool = False


# --- Field recording -----------------------------------------------------------

class RecordStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class StepStatus(str, Enum):
    PENDING = "pending"
    RECORDED = "recorded"
    SKIPPED = "skipped"


class FloatState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class TripRecordStep(BaseModel):
    """Simulated values for one stand plus the actuals observed on the rig."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    step_index: int = 0
    bit_md_m: float = 0.0
    bit_tvd_m: float = 0.0

    sim_sabp_kpa: float = 0.0
    sim_backfill_m3: float = 0.0
    sim_cumulative_backfill_m3: float = 0.0
    sim_expected_if_closed_m3: float = 0.0
    sim_expected_if_open_m3: float = 0.0

    actual_backfill_m3: Optional[float] = None
    actual_sabp_kpa: Optional[float] = None
    actual_pit_change_m3: Optional[float] = None
    actual_float_override: Optional[FloatState] = None
    observed_at: Optional[datetime] = None
    skipped: bool = False
    notes: str = ""

    sabp_variance_kpa: Optional[float] = None
    backfill_variance_m3: Optional[float] = None
    backfill_variance_percent: Optional[float] = None

    record_id: Optional[uuid.UUID] = None

    @property
    def has_actual_data(self) -> bool:
        return (self.actual_backfill_m3 is not None or self.actual_sabp_kpa is not None
                or self.actual_pit_change_m3 is not None)

    @property
    def status(self) -> StepStatus:
        if self.skipped:
            return StepStatus.SKIPPED
        if self.has_actual_data:
            return StepStatus.RECORDED
        return StepStatus.PENDING


class TripRecord(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    source_run_id: Optional[uuid.UUID] = None
    source_run_name: str = ""
    start_bit_md_m: float = 0.0
    end_md_m: float = 0.0
    step_m: float = 0.0
    base_mud_density_kgm3: float = 0.0
    backfill_density_kgm3: float = 0.0

    status: RecordStatus = RecordStatus.IN_PROGRESS
    completed_at: Optional[datetime] = None

    avg_sabp_variance_kpa: float = 0.0
    avg_backfill_variance_m3: float = 0.0
    max_sabp_variance_kpa: float = 0.0
    max_backfill_variance_m3: float = 0.0
    steps_recorded: int = 0
    steps_skipped: int = 0

    steps: List[TripRecordStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def link_steps(self):
        for step in self.steps:
            step.record_id = self.id
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def trip_length_m(self) -> float:
        return abs(self.start_bit_md_m - self.end_md_m)

    @property
    def progress_percent(self) -> float:
        if not self.steps:
            return 0.0
        return (self.steps_recorded + self.steps_skipped) / len(self.steps) * 100.0


class RecordActualInput(BaseModel):
    sabp_kpa: Optional[float] = Field(None, description="Observed SABP, kPa")
    backfill_m3: Optional[float] = Field(None, description="Observed backfill, m³")
    pit_change_m3: Optional[float] = Field(None, description="Observed pit change, m³")
    float_override: Optional[FloatState] = None
    notes: str = ""
