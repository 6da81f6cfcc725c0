# wellcontrol/services/hydraulics/rheology.py
"""
Rheology fits and flow correlations for drilling fluids in an annulus.

All functions work in SI units (Pa, Pa·s, m, m/s, kg/m³) and degrade to
neutral values (zero gradient, zero Reynolds number) instead of raising when
the geometry or velocity is degenerate.
"""
import math
from typing import NamedTuple, Optional, Tuple

from wellcontrol.core.config import settings
from wellcontrol.utils.conversions import (
    FANN35_600RPM_SHEAR_RATE,
    FANN35_DIAL_TO_PA,
    MIN_VISCOSITY_PA_S,
    cp_to_pa_s,
    dial_to_pa,
)

# Hard regime boundary for the Newtonian friction factor
LAMINAR_FRICTION_LIMIT = 2000.0
# Generalized Reynolds threshold for non-Newtonian annular flow
GENERALIZED_LAMINAR_LIMIT = settings.LAMINAR_REYNOLDS_THRESHOLD


class PowerLawFit(NamedTuple):
    n: float
    k: float


class BinghamFit(NamedTuple):
    pv_pa_s: float
    yp_pa: float


class GradientResult(NamedTuple):
    dp_per_m_pa: float
    laminar: bool
    reynolds: float


NEUTRAL_GRADIENT = GradientResult(0.0, True, 0.0)


def power_law_from_dials(dial600: float, dial300: float) -> Optional[PowerLawFit]:
    """
    Fit power-law (n, K) from Fann 600/300 dial readings.

    n = ln(θ600/θ300) / ln 2 and K = τ600 / γ600ⁿ with τ600 in Pa.
    Returns None unless both readings are strictly positive and θ600 > θ300
    (otherwise n <= 0); callers fall back to Bingham parameters in that case.
    """
    if not (dial600 > 0 and dial300 > 0 and dial600 > dial300):
        return None
    n = math.log(dial600 / dial300) / math.log(2.0)
    if not math.isfinite(n):
        return None
    tau600 = FANN35_DIAL_TO_PA * dial600
    k = tau600 / FANN35_600RPM_SHEAR_RATE ** n
    return PowerLawFit(n=n, k=k)


def bingham_from_dials(dial600: float, dial300: float) -> Optional[BinghamFit]:
    """PV = θ600 − θ300 (cP), YP = θ300 − PV (lbf/100ft²), returned in SI."""
    if dial600 is None or dial300 is None:
        return None
    pv_cp = max(0.0, dial600 - dial300)
    yp_lbf = dial300 - pv_cp
    return BinghamFit(pv_pa_s=cp_to_pa_s(pv_cp), yp_pa=dial_to_pa(yp_lbf))


def herschel_bulkley_from_dials(dial600: float, dial300: float, tau0_pa: float) -> Optional[PowerLawFit]:
    """Fit n, K to the stress in excess of the yield stress at 600/300 RPM."""
    excess600 = dial_to_pa(dial600) - tau0_pa
    excess300 = dial_to_pa(dial300) - tau0_pa
    if not (excess600 > excess300 > 0):
        return None
    n = math.log(excess600 / excess300) / math.log(2.0)
    if not math.isfinite(n):
        return None
    k = excess600 / FANN35_600RPM_SHEAR_RATE ** n
    return PowerLawFit(n=n, k=k)


def reynolds_number(density: float, velocity: float, equivalent_diameter: float, viscosity: float) -> float:
    """Re = ρ·v·D / μ, zero for a non-positive equivalent diameter."""
    if equivalent_diameter <= 0:
        return 0.0
    return density * velocity * equivalent_diameter / max(viscosity, MIN_VISCOSITY_PA_S)


def is_laminar(reynolds: float) -> bool:
    return reynolds < LAMINAR_FRICTION_LIMIT


def friction_factor(reynolds: float) -> float:
    """
    Darcy friction factor with a hard laminar/turbulent switch at Re = 2000.

    Laminar: 64/Re. Turbulent: Blasius 0.3164/Re^0.25. No transition
    smoothing; a non-positive Re gives 0.
    """
    if reynolds <= 0:
        return 0.0
    if is_laminar(reynolds):
        return 64.0 / max(reynolds, 1.0)
    return 0.3164 / reynolds ** 0.25


def darcy_pressure_drop_pa(f: float, length: float, equivalent_diameter: float, density: float, velocity: float) -> float:
    """ΔP = f·(L/D)·(ρ·v²/2), zero for a non-positive diameter."""
    if equivalent_diameter <= 0:
        return 0.0
    return f * (length / equivalent_diameter) * (density * velocity * velocity / 2.0)


def apparent_viscosity_bingham(pv: float, yp: float, velocity: float, equivalent_diameter: float) -> float:
    """μ_app = PV + YP/γ with γ = 8V/D floored at 0.01 1/s."""
    if equivalent_diameter <= 0:
        return pv
    gamma = max(8.0 * velocity / equivalent_diameter, 0.01)
    return pv + yp / gamma


def apparent_viscosity_power_law(k: float, n: float, velocity: float, equivalent_diameter: float) -> float:
    """μ_app = K·γⁿ⁻¹ at the nominal wall shear rate 8V/D."""
    if equivalent_diameter <= 0 or velocity <= 0:
        return 0.0
    gamma = 8.0 * velocity / equivalent_diameter
    return k * gamma ** (n - 1.0)


def apparent_viscosity_herschel_bulkley(tau0: float, k: float, n: float, velocity: float, equivalent_diameter: float) -> float:
    if equivalent_diameter <= 0 or velocity <= 0:
        return 0.0
    gamma = 8.0 * velocity / equivalent_diameter
    return (tau0 + k * gamma ** n) / gamma


def bingham_annular_gradient(density: float, pv: float, yp: float, velocity: float, equivalent_diameter: float) -> GradientResult:
    """
    Bingham plastic pressure gradient in an annulus (Pa/m).

    Laminar gradient 2·τw/De with τw = YP + PV·(8V/De). The flow is laminar
    below a Hedstrom-shifted critical Reynolds number; above it the larger of
    the laminar and the turbulent (0.079/Re^0.25) gradient is used.
    """
    if equivalent_diameter <= 0:
        return NEUTRAL_GRADIENT
    de = equivalent_diameter
    pv = max(pv, MIN_VISCOSITY_PA_S)
    gamma_w = max(8.0 * velocity / de, 0.01)
    tau_w = yp + pv * gamma_w
    dpdl_laminar = 2.0 * tau_w / de

    mu_apparent = tau_w / gamma_w
    re_app = density * velocity * de / mu_apparent
    hedstrom = density * yp * de * de / (pv * pv)
    re_crit = GENERALIZED_LAMINAR_LIMIT * (1.0 + 0.05 * max(hedstrom, 0.0) ** 0.3)

    if re_app < re_crit:
        return GradientResult(dpdl_laminar, True, re_app)

    f_turb = 0.079 / re_app ** 0.25
    dpdl_turb = f_turb * density * velocity * velocity / (2.0 * de)
    return GradientResult(max(dpdl_laminar, dpdl_turb), dpdl_turb <= dpdl_laminar, re_app)


def power_law_annular_gradient(density: float, k: float, n: float, velocity: float, equivalent_diameter: float) -> GradientResult:
    """
    Power-law laminar gradient with the Mooney–Rabinowitsch wall shear rate
    and the Metzner–Reed generalized Reynolds number.
    """
    if equivalent_diameter <= 0 or n <= 0 or k <= 0:
        return NEUTRAL_GRADIENT
    dh = max(equivalent_diameter, 1e-6)
    va = max(velocity, 1e-12)
    gamma_w = ((3.0 * n + 1.0) / (4.0 * n)) * (8.0 * va / dh)
    tau_w = k * gamma_w ** n
    dp_per_m = 4.0 * tau_w / dh
    re_g = density * va ** (2.0 - n) * dh ** n / (k * 8.0 ** (n - 1.0))
    return GradientResult(dp_per_m, re_g < GENERALIZED_LAMINAR_LIMIT, re_g)


def herschel_bulkley_annular_gradient(density: float, tau0: float, k: float, n: float, velocity: float, equivalent_diameter: float) -> GradientResult:
    """Yield-shifted power-law wall stress; Re from the apparent viscosity."""
    if equivalent_diameter <= 0 or n <= 0:
        return NEUTRAL_GRADIENT
    dh = max(equivalent_diameter, 1e-6)
    va = max(velocity, 1e-12)
    gamma_w = ((3.0 * n + 1.0) / (4.0 * n)) * (8.0 * va / dh)
    tau_w = max(tau0, 0.0) + max(k, 0.0) * gamma_w ** n
    dp_per_m = 4.0 * tau_w / dh
    mu_app = max(tau_w / gamma_w, MIN_VISCOSITY_PA_S)
    re = density * va * dh / mu_app
    return GradientResult(dp_per_m, re < GENERALIZED_LAMINAR_LIMIT, re)


def fit_summary(dial600: float, dial300: float) -> Tuple[Optional[PowerLawFit], Optional[BinghamFit]]:
    """Both fits from one pair of readings, for display next to mud checks."""
    return power_law_from_dials(dial600, dial300), bingham_from_dials(dial600, dial300)
