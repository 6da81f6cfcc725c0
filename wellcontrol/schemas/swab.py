# wellcontrol/schemas/swab.py
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from wellcontrol.core.config import settings
from wellcontrol.schemas.fluids import FluidIdentity, Rheology, RheologyModelEnum
from wellcontrol.schemas.geometry import AnnulusGeometry, AnnulusSection, DrillStringSection, PipeEndType
from wellcontrol.schemas.survey import Station


class SwabSurgeDomain(str, Enum):
    SWAB_ABOVE_BIT = "swab_above_bit"    # pulling out, surface to bit
    SURGE_BELOW_BIT = "surge_below_bit"  # running in, bit to lower limit


class TripDirection(str, Enum):
    PULL_OUT = "pull_out"
    RUN_IN = "run_in"


class FluidLayer(BaseModel):
    """Fluid occupying an MD interval of the annulus."""
    model_config = ConfigDict(frozen=True)

    density_kgm3: float = Field(..., ge=0)
    top_md_m: float
    bottom_md_m: float

    @property
    def shallow_md_m(self) -> float:
        return min(self.top_md_m, self.bottom_md_m)

    @property
    def deep_md_m(self) -> float:
        return max(self.top_md_m, self.bottom_md_m)


class SwabSurgeConfig(BaseModel):
    """
    Inputs for a swab/surge estimate at one bit depth or across a trip.

    Geometry comes either from a fixed ``geometry`` applied over the whole
    domain or from the project's annulus and drill string sections.
    """
    name: str = ""

    # Geometry
    geometry: Optional[AnnulusGeometry] = Field(None, description="Uniform annulus geometry")
    annulus_sections: List[AnnulusSection] = Field(default_factory=list)
    drill_string_sections: List[DrillStringSection] = Field(default_factory=list)
    stations: List[Station] = Field(default_factory=list, description="Survey stations for MD→TVD")

    # Fluid
    fluid: FluidIdentity = Field(default_factory=lambda: FluidIdentity(density_kgm3=1100.0, pv_cp=20.0, yp_pa=5.0))
    rheology_model: RheologyModelEnum = RheologyModelEnum.BINGHAM
    rheology: Optional[Rheology] = Field(None, description="Explicit rheology parameters, overrides the fluid fit")
    layers: List[FluidLayer] = Field(default_factory=list, description="Density overrides by MD interval")

    # Pipe movement
    trip_speed_m_per_min: float = Field(10.0, description="Hoist or run speed, m/min; sign is ignored")
    eccentricity_factor: float = Field(settings.DEFAULT_ECCENTRICITY_FACTOR, gt=0)
    pipe_end_type: PipeEndType = PipeEndType.CLOSED
    clinging_constant_override: Optional[float] = Field(None, ge=0)

    # Domain
    domain: Optional[SwabSurgeDomain] = Field(None, description="Defaults from trip direction")
    bit_md_m: float = Field(0.0, description="Bit depth for a single estimate, m")
    top_md_m: float = Field(0.0, description="Top of the swab domain, m")
    lower_limit_md_m: Optional[float] = Field(None, description="Bottom of the surge domain (shoe or TD), m")

    # Trip march
    trip_start_md_m: float = 0.0
    trip_end_md_m: float = 0.0
    trip_step_m: float = Field(settings.DEFAULT_TRIP_STEP_M, gt=0)
    step_m: float = Field(settings.DEFAULT_STEP_M, gt=0, description="Integration slice length, m")

    sabp_safety_factor: float = Field(settings.SWAB_SAFETY_FACTOR, ge=1.0)

    @property
    def direction(self) -> TripDirection:
        if self.trip_start_md_m > self.trip_end_md_m:
            return TripDirection.PULL_OUT
        return TripDirection.RUN_IN

    @property
    def effective_domain(self) -> SwabSurgeDomain:
        if self.domain is not None:
            return self.domain
        if self.direction == TripDirection.PULL_OUT:
            return SwabSurgeDomain.SWAB_ABOVE_BIT
        return SwabSurgeDomain.SURGE_BELOW_BIT

    @property
    def density_kgm3(self) -> float:
        return self.fluid.density_kgm3

    def resolved_rheology(self):
        if self.rheology is not None:
            return self.rheology
        return self.fluid.rheology(self.rheology_model)

    def domain_bounds(self, bit_md: float) -> tuple:
        """(shallow, deep) MD of the fluid column moved by the pipe."""
        if self.effective_domain == SwabSurgeDomain.SWAB_ABOVE_BIT:
            a, b = self.top_md_m, bit_md
        else:
            lower = self.lower_limit_md_m
            if lower is None:
                lower = max((s.bottom_md_m for s in self.annulus_sections), default=bit_md)
            a, b = bit_md, lower
        return (min(a, b), max(a, b))


class PointEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    length_m: float
    equivalent_diameter_m: float
    velocity_m_per_s: float
    reynolds: float
    friction_factor: float
    pressure_delta_kpa: float
    non_laminar: bool
    degenerate: bool = False


class SwabSegment(BaseModel):
    """One integration slice of a profile estimate."""
    model_config = ConfigDict(frozen=True)

    md_m: float
    tvd_m: float
    equivalent_diameter_m: float
    annular_velocity_m_per_s: float
    dp_per_m_pa: float
    cumulative_kpa: float
    laminar: bool
    reynolds: float


class SwabEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    bit_md_m: float
    domain: SwabSurgeDomain
    profile: List[SwabSegment] = Field(default_factory=list)
    total_kpa: float = 0.0
    recommended_sabp_kpa: float = 0.0
    non_laminar: bool = False
    degenerate: bool = False


class SwabSample(BaseModel):
    """
    Pressure change at one bit depth of a trip.

    ``pressure_delta_kpa`` is negative for swab and positive for surge.
    """
    model_config = ConfigDict(frozen=True)

    md_m: float
    tvd_m: float
    pressure_delta_kpa: float = 0.0
    ecd_change_kgm3: float = 0.0
    annular_velocity_m_per_s: float = 0.0
    reynolds: float = 0.0
    clinging_constant: float = 0.0
    non_laminar: bool = False
    degenerate: bool = False
    run_id: Optional[uuid.UUID] = None


class SwabSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_surge_kpa: float = 0.0
    max_swab_kpa: float = 0.0
    max_surge_ecd_kgm3: float = 0.0
    max_swab_ecd_kgm3: float = 0.0
    depth_of_max_surge_m: float = 0.0
    depth_of_max_swab_m: float = 0.0
    average_clinging_constant: float = 0.0
    pipe_displacement_area_m2: float = 0.0
    any_non_laminar: bool = False
    sample_count: int = 0

    @property
    def max_underbalance_kpa(self) -> float:
        return self.max_swab_kpa


