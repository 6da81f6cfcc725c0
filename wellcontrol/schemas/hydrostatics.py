# wellcontrol/schemas/hydrostatics.py
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from wellcontrol.schemas.geometry import AnnulusSection


class FluidSegment(BaseModel):
    """Vertical span of a single fluid in the column."""
    model_config = ConfigDict(frozen=True)

    top_tvd_m: float
    bottom_tvd_m: float
    density_kgm3: float = Field(..., ge=0)


class PressureWindowPoint(BaseModel):
    tvd_m: float = Field(0.0, description="True vertical depth, m")
    pore_kpa: Optional[float] = Field(None, description="Pore pressure, kPa")
    frac_kpa: Optional[float] = Field(None, description="Fracture pressure, kPa")


class PressureWindow(BaseModel):
    """Pore and fracture pressure profile against TVD."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = "Default Window"
    pore_safety_kpa: float = Field(0.0, description="Overbalance required above pore pressure, kPa")
    frac_safety_kpa: float = Field(0.0, description="Margin kept below fracture pressure, kPa")
    points: List[PressureWindowPoint] = Field(default_factory=list)


class BhpInput(BaseModel):
    tvd_m: float = Field(..., description="TVD of interest, m")
    segments: List[FluidSegment] = Field(default_factory=list, description="Fluid stack")
    annulus_sections: List[AnnulusSection] = Field(default_factory=list)
    flow_rate_m3_per_min: float = Field(0.0, ge=0, description="Circulating rate, m³/min")
    apparent_viscosity_pa_s: float = Field(0.02, ge=0)
    sbp_kpa: float = Field(0.0, description="Surface back pressure, kPa")
    target_bhp_kpa: Optional[float] = Field(None, description="Target BHP for the required-SBP solve, kPa")
    window: Optional[PressureWindow] = None


class BhpResult(BaseModel):
    tvd_m: float
    hydrostatic_kpa: float
    friction_kpa: float
    sbp_kpa: float
    bhp_kpa: float
    equivalent_density_kgm3: float
    required_sbp_kpa: Optional[float] = None
    required_uniform_density_kgm3: Optional[float] = None
    within_window: Optional[bool] = None
    pore_kpa: Optional[float] = None
    frac_kpa: Optional[float] = None
    margin_to_fracture_kpa: Optional[float] = None
