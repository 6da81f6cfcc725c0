# wellcontrol/schemas/geometry.py
import math
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from wellcontrol.utils.conversions import CLINGING_CONSTANT_BASE, circle_area


class PipeEndType(str, Enum):
    CLOSED = "closed"  # float/bit closed, displaces the full pipe OD
    OPEN = "open"      # float open, displaces the pipe wall only


class AnnulusGeometry(BaseModel):
    """Annulus cross-section of one depth interval."""
    model_config = ConfigDict(frozen=True)

    pipe_od_m: float = Field(0.0, description="Pipe outer diameter, m")
    pipe_id_m: float = Field(0.0, description="Pipe inner diameter, m")
    hole_id_m: float = Field(0.0, description="Hole or casing inner diameter, m")

    @property
    def flow_area_m2(self) -> float:
        """A = π/4·(ID² − OD²), 0 when the pipe fills the hole."""
        if self.hole_id_m <= self.pipe_od_m:
            return 0.0
        return math.pi / 4.0 * (self.hole_id_m ** 2 - self.pipe_od_m ** 2)

    @property
    def equivalent_diameter_m(self) -> float:
        return max(self.hole_id_m - self.pipe_od_m, 0.0)

    @property
    def wetted_perimeter_m(self) -> float:
        return math.pi * (max(self.hole_id_m, 0.0) + max(self.pipe_od_m, 0.0))

    @property
    def hydraulic_radius_m(self) -> float:
        p = self.wetted_perimeter_m
        return self.flow_area_m2 / p if p > 0 else 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.flow_area_m2 <= 0.0 or self.equivalent_diameter_m <= 0.0

    @property
    def clinging_constant(self) -> float:
        """
        Burkhardt clinging constant Kc = 0.45 + 0.45·(Dp/Dh)².

        Falls back to the 0.45 base value when the geometry is degenerate.
        """
        if self.hole_id_m <= self.pipe_od_m or self.pipe_od_m <= 0:
            return CLINGING_CONSTANT_BASE
        ratio = self.pipe_od_m / self.hole_id_m
        return CLINGING_CONSTANT_BASE + ratio * ratio * CLINGING_CONSTANT_BASE

    def displacement_area_m2(self, pipe_end: PipeEndType = PipeEndType.CLOSED) -> float:
        if pipe_end == PipeEndType.OPEN:
            return max(circle_area(self.pipe_od_m) - circle_area(self.pipe_id_m), 0.0)
        return circle_area(self.pipe_od_m)


class AnnulusSection(BaseModel):
    """Casing or open-hole interval of the wellbore."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    top_md_m: float = Field(0.0, description="MD at top of section, m")
    length_m: float = Field(0.0, ge=0, description="Section length, m")
    inner_diameter_m: float = Field(0.0, description="Casing or wellbore ID, m")
    outer_diameter_m: float = Field(0.0, description="String OD assumed in this section, m")
    cased: bool = Field(False, description="True for cased hole, False for open hole")
    wall_roughness_m: float = 4.6e-5

    @property
    def bottom_md_m(self) -> float:
        return self.top_md_m + self.length_m

    def contains(self, md: float) -> bool:
        return self.top_md_m <= md <= self.bottom_md_m

    def geometry(self, pipe_od_m: Optional[float] = None, pipe_id_m: float = 0.0) -> AnnulusGeometry:
        od = self.outer_diameter_m if pipe_od_m is None else pipe_od_m
        return AnnulusGeometry(pipe_od_m=od, pipe_id_m=pipe_id_m, hole_id_m=self.inner_diameter_m)

    @property
    def volume_m3(self) -> float:
        return self.geometry().flow_area_m2 * self.length_m


class DrillStringSection(BaseModel):
    """Pipe interval of the work string."""
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = ""
    top_md_m: float = Field(0.0, description="MD at top of section, m")
    length_m: float = Field(0.0, ge=0, description="Section length, m")
    outer_diameter_m: float = Field(0.0, description="Pipe OD, m")
    inner_diameter_m: float = Field(0.0, description="Pipe ID, m")

    @property
    def bottom_md_m(self) -> float:
        return self.top_md_m + self.length_m

    def contains(self, md: float) -> bool:
        return self.top_md_m <= md <= self.bottom_md_m


class AnnulusVolumeInput(BaseModel):
    top_md_m: float = Field(..., description="Interval top MD, m")
    bottom_md_m: float = Field(..., description="Interval bottom MD, m")
    annulus_sections: List[AnnulusSection] = Field(default_factory=list)
    drill_string_sections: List[DrillStringSection] = Field(default_factory=list)


class AnnulusVolumeResult(BaseModel):
    top_md_m: float
    bottom_md_m: float
    cased_m3: float = 0.0
    open_hole_m3: float = 0.0
    total_m3: float = 0.0
