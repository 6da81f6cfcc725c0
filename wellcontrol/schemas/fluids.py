# wellcontrol/schemas/fluids.py
import uuid
from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from wellcontrol.services.hydraulics.rheology import (
    BinghamFit,
    PowerLawFit,
    bingham_from_dials,
    herschel_bulkley_from_dials,
    power_law_from_dials,
)
from wellcontrol.utils.conversions import cp_to_pa_s


class RheologyModelEnum(str, Enum):
    BINGHAM = "bingham"
    POWER_LAW = "power_law"
    HERSCHEL_BULKLEY = "herschel_bulkley"


class BinghamRheology(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: Literal["bingham"] = "bingham"
    pv_pa_s: float = Field(0.02, ge=0, description="Plastic viscosity, Pa·s")
    yp_pa: float = Field(5.0, ge=0, description="Yield point, Pa")


class PowerLawRheology(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: Literal["power_law"] = "power_law"
    n: float = Field(0.6, gt=0, description="Flow behaviour index")
    k: float = Field(0.5, ge=0, description="Consistency index, Pa·sⁿ")


class HerschelBulkleyRheology(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: Literal["herschel_bulkley"] = "herschel_bulkley"
    tau0_pa: float = Field(3.0, ge=0, description="Yield stress, Pa")
    n: float = Field(0.6, gt=0, description="Flow behaviour index")
    k: float = Field(0.5, ge=0, description="Consistency index, Pa·sⁿ")


Rheology = Annotated[
    Union[BinghamRheology, PowerLawRheology, HerschelBulkleyRheology],
    Field(discriminator="model"),
]


class FluidIdentity(BaseModel):
    """
    Bundle of fluid physical properties: density, colour and rheology.

    Every field carries a concrete default so there is no unset-vs-zero
    ambiguity when snapshots are compared.
    """
    model_config = ConfigDict(frozen=True)

    density_kgm3: float = 0.0

    color_r: float = 0.5
    color_g: float = 0.5
    color_b: float = 0.5
    color_a: float = 1.0

    # Bingham
    pv_cp: float = Field(0.0, description="Plastic viscosity, cP (mPa·s)")
    yp_pa: float = Field(0.0, description="Yield point, Pa")

    # Fann dial readings for the power-law fit
    dial600: float = 0.0
    dial300: float = 0.0

    mud_id: Optional[uuid.UUID] = None
    mud_name: Optional[str] = None

    @property
    def color_rgba(self) -> Tuple[float, float, float, float]:
        return (self.color_r, self.color_g, self.color_b, self.color_a)

    @property
    def has_dial_readings(self) -> bool:
        return self.dial600 > 0 and self.dial300 > 0

    @property
    def has_bingham(self) -> bool:
        return self.pv_cp > 0 or self.yp_pa > 0

    def power_law_fit(self) -> Optional[PowerLawFit]:
        return power_law_from_dials(self.dial600, self.dial300)

    def bingham_from_dials(self) -> Optional[BinghamFit]:
        if not self.has_dial_readings:
            return None
        return bingham_from_dials(self.dial600, self.dial300)

    def bingham(self) -> BinghamRheology:
        if self.has_bingham:
            return BinghamRheology(pv_pa_s=cp_to_pa_s(self.pv_cp), yp_pa=self.yp_pa)
        fit = self.bingham_from_dials()
        if fit is not None:
            return BinghamRheology(pv_pa_s=fit.pv_pa_s, yp_pa=max(fit.yp_pa, 0.0))
        return BinghamRheology()

    def rheology(self, model: RheologyModelEnum) -> Union[BinghamRheology, PowerLawRheology, HerschelBulkleyRheology]:
        """
        Parameters for the selected rheology model.

        Power-law and Herschel–Bulkley need dial readings; without a usable
        fit the Bingham parameters are returned instead.
        """
        if model == RheologyModelEnum.POWER_LAW:
            fit = self.power_law_fit()
            if fit is not None:
                return PowerLawRheology(n=fit.n, k=fit.k)
        elif model == RheologyModelEnum.HERSCHEL_BULKLEY:
            # Bingham YP taken as the yield stress, n and K fitted to the excess
            tau0 = self.bingham().yp_pa
            fit = herschel_bulkley_from_dials(self.dial600, self.dial300, tau0) if self.has_dial_readings else None
            if fit is not None:
                return HerschelBulkleyRheology(tau0_pa=tau0, n=fit.n, k=fit.k)
        return self.bingham()
