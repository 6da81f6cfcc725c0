# wellcontrol/schemas/survey.py
import math
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Station(BaseModel):
    """MD/TVD pair used to build a depth mapper."""
    model_config = ConfigDict(frozen=True)

    md: float = Field(..., description="Measured depth, m")
    tvd: Optional[float] = Field(None, description="True vertical depth, m (defaults to MD)")

    @property
    def effective_tvd(self) -> float:
        return self.md if self.tvd is None else self.tvd


class SurveyStation(BaseModel):
    md: float = Field(..., description="Measured depth of the survey, m")
    inc: float = Field(0.0, description="Inclination, degrees")
    azi: float = Field(0.0, description="Azimuth, degrees")
    tvd: Optional[float] = Field(None, description="True vertical depth, m")

    def to_station(self) -> Station:
        return Station(md=self.md, tvd=self.tvd)


class DirectionalPlanStation(BaseModel):
    md: float = Field(0.0, description="Measured depth, m")
    inc: float = Field(0.0, description="Inclination, degrees")
    azi: float = Field(0.0, description="Azimuth, degrees")
    tvd: float = Field(0.0, description="True vertical depth, m")
    ns_m: float = Field(0.0, description="North-south coordinate, m")
    ew_m: float = Field(0.0, description="East-west coordinate, m")
    vs_m: Optional[float] = Field(None, description="Vertical section, m")

    @property
    def departure_m(self) -> float:
        """Horizontal departure from origin"""
        return math.sqrt(self.ns_m * self.ns_m + self.ew_m * self.ew_m)

    @property
    def direction_deg(self) -> float:
        """Direction from origin as an azimuth in degrees"""
        if self.departure_m <= 0.001:
            return 0.0
        deg = math.degrees(math.atan2(self.ew_m, self.ns_m))
        return deg + 360.0 if deg < 0 else deg

    def to_station(self) -> Station:
        # Plan stations always carry an explicit TVD
        return Station(md=self.md, tvd=self.tvd)


class DepthLookupInput(BaseModel):
    stations: List[Station] = Field(default_factory=list, description="Survey or plan stations")
    query_md: List[float] = Field(..., description="Measured depths to convert, m")


class DepthLookupResult(BaseModel):
    md: List[float]
    tvd: List[float]
