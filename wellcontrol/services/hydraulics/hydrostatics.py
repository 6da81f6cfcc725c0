# wellcontrol/services/hydraulics/hydrostatics.py
"""
Hydrostatic column evaluation for non-uniform fluid stacks.

Slug plans are evaluated by superposition against a uniform base mud: each
step adds (ρ_step − ρ_base)·g·h over the part of its TVD span that lies above
the query depth. Absolute column pressures, BHP with annular friction and
back pressure, and pressure-window checks build on the same helpers.
"""
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from wellcontrol.schemas.geometry import AnnulusSection
from wellcontrol.schemas.hydrostatics import BhpInput, BhpResult, FluidSegment, PressureWindow
from wellcontrol.schemas.slug import SlugPlan, SlugStep
from wellcontrol.services.hydraulics.depth_mapper import DepthMapper
from wellcontrol.services.hydraulics.rheology import darcy_pressure_drop_pa, friction_factor, reynolds_number
from wellcontrol.utils.conversions import (
    G,
    circle_area,
    equivalent_density_kgm3,
    hydrostatic_gradient_kpa_per_m,
    pa_to_kpa,
)

logger = logging.getLogger(__name__)


# --- Slug plans -------------------------------------------------------------

def slug_tvd_span(step: SlugStep, mapper: Optional[DepthMapper] = None) -> Tuple[float, float]:
    """
    TVD span of a slug step.

    Explicit TVDs win; otherwise the MD span is mapped through the survey
    when a mapper is given, or taken as TVD ≡ MD.
    """
    if step.has_explicit_tvd or mapper is None:
        return step.tvd_span
    top = mapper.tvd_at(step.top_md_m)
    bottom = mapper.tvd_at(step.bottom_md_m)
    return (min(top, bottom), max(top, bottom))


def step_delta_pa(step: SlugStep, base_density_kgm3: float, tvd_m: float,
                  mapper: Optional[DepthMapper] = None) -> float:
    top, bottom = slug_tvd_span(step, mapper)
    if tvd_m < top:
        return 0.0
    covered = min(tvd_m, bottom) - top
    if covered <= 0:
        return 0.0
    return (step.density_kgm3 - base_density_kgm3) * G * covered


def delta_hydrostatic_kpa(plan: SlugPlan, tvd_m: float, mapper: Optional[DepthMapper] = None) -> float:
    """Net hydrostatic change (kPa) at tvd_m caused by the plan's slugs."""
    total_pa = sum(step_delta_pa(s, plan.base_mud_density_kgm3, tvd_m, mapper) for s in plan.steps)
    return pa_to_kpa(total_pa)


def delta_at_shoe_kpa(plan: SlugPlan, shoe_tvd_m: float, mapper: Optional[DepthMapper] = None) -> float:
    return delta_hydrostatic_kpa(plan, shoe_tvd_m, mapper)


def delta_profile_kpa(plan: SlugPlan, tvds: Iterable[float], mapper: Optional[DepthMapper] = None) -> List[float]:
    return [delta_hydrostatic_kpa(plan, t, mapper) for t in tvds]


# --- Absolute column pressure ----------------------------------------------

def hydrostatic_kpa(tvd_m: float, segments: Sequence[FluidSegment]) -> float:
    """
    Hydrostatic pressure (kPa) at tvd_m from a stack of fluid segments.

    Segment bounds are ordered and clamped at surface; segments below the
    query contribute nothing.
    """
    if tvd_m <= 0:
        return 0.0
    p_kpa = 0.0
    for seg in segments:
        t = max(0.0, min(seg.top_tvd_m, seg.bottom_tvd_m))
        b = max(0.0, max(seg.top_tvd_m, seg.bottom_tvd_m))
        if tvd_m <= t:
            continue
        covered = min(tvd_m, b) - t
        if covered <= 0:
            continue
        p_kpa += hydrostatic_gradient_kpa_per_m(seg.density_kgm3) * covered
    return p_kpa


def uniform_hydrostatic_kpa(density_kgm3: float, tvd_m: float) -> float:
    return hydrostatic_gradient_kpa_per_m(density_kgm3) * max(tvd_m, 0.0)


def annular_friction_gradient_kpa_per_m(flow_rate_m3_per_s: float, density_kgm3: float, viscosity_pa_s: float,
                                        hole_id_m: float, pipe_od_m: float) -> float:
    """
    Newtonian annular friction gradient (kPa/m) for a circulating rate.

    Bulk velocity from the flow area, De = ID − OD, laminar/Blasius
    friction factor.
    """
    area = max(circle_area(hole_id_m) - circle_area(pipe_od_m), 0.0)
    de = max(hole_id_m - pipe_od_m, 0.0)
    if area <= 0 or de <= 0:
        return 0.0
    v = flow_rate_m3_per_s / area
    re = reynolds_number(density_kgm3, v, de, viscosity_pa_s)
    f = friction_factor(re)
    return pa_to_kpa(darcy_pressure_drop_pa(f, 1.0, de, density_kgm3, v))


def annular_friction_kpa(tvd_m: float, sections: Sequence[AnnulusSection], flow_rate_m3_per_s: float,
                         density_kgm3: float, viscosity_pa_s: float,
                         mapper: Optional[DepthMapper] = None) -> float:
    """Friction accumulated over the sections lying above tvd_m."""
    p_kpa = 0.0
    for s in sections:
        if mapper is not None:
            top, bottom = mapper.tvd_at(s.top_md_m), mapper.tvd_at(s.bottom_md_m)
        else:
            top, bottom = s.top_md_m, s.bottom_md_m
        if tvd_m <= top:
            continue
        covered = min(tvd_m, bottom) - top
        if covered <= 0:
            continue
        grad = annular_friction_gradient_kpa_per_m(
            flow_rate_m3_per_s, density_kgm3, viscosity_pa_s, s.inner_diameter_m, s.outer_diameter_m
        )
        p_kpa += max(grad, 0.0) * covered
    return p_kpa


def bhp_kpa(tvd_m: float, segments: Sequence[FluidSegment], sections: Sequence[AnnulusSection] = (),
            flow_rate_m3_per_s: float = 0.0, viscosity_pa_s: float = 0.02, sbp_kpa: float = 0.0,
            mapper: Optional[DepthMapper] = None) -> float:
    """BHP = SBP + hydrostatic + annular friction."""
    hyd = hydrostatic_kpa(tvd_m, segments)
    density = equivalent_density_kgm3(hyd, tvd_m)
    fric = annular_friction_kpa(tvd_m, sections, flow_rate_m3_per_s, density, viscosity_pa_s, mapper)
    return sbp_kpa + hyd + fric


def required_sbp_kpa(target_bhp_kpa: float, tvd_m: float, segments: Sequence[FluidSegment],
                     sections: Sequence[AnnulusSection] = (), flow_rate_m3_per_s: float = 0.0,
                     viscosity_pa_s: float = 0.02, mapper: Optional[DepthMapper] = None) -> float:
    current = bhp_kpa(tvd_m, segments, sections, flow_rate_m3_per_s, viscosity_pa_s, 0.0, mapper)
    return max(target_bhp_kpa - current, 0.0)


def required_uniform_density_kgm3(target_bhp_kpa: float, tvd_m: float,
                                  friction_gradient_kpa_per_m: float = 0.0, sbp_kpa: float = 0.0) -> float:
    """Single-fluid density that reaches the target BHP with the given SBP and friction."""
    if tvd_m <= 0:
        return 0.0
    needed = max(target_bhp_kpa - sbp_kpa - friction_gradient_kpa_per_m * tvd_m, 0.0)
    return equivalent_density_kgm3(needed, tvd_m)


# --- Pressure window ---------------------------------------------------------

def _interpolate_window(window: PressureWindow, tvd_m: float, field: str) -> Optional[float]:
    pts = sorted(window.points, key=lambda p: p.tvd_m)
    if not pts:
        return None
    if tvd_m <= pts[0].tvd_m:
        return getattr(pts[0], field)
    if tvd_m >= pts[-1].tvd_m:
        return getattr(pts[-1], field)
    for a, b in zip(pts[:-1], pts[1:]):
        if a.tvd_m <= tvd_m <= b.tvd_m:
            ya, yb = getattr(a, field), getattr(b, field)
            if ya is None or yb is None:
                return None
            if b.tvd_m == a.tvd_m:
                return ya
            t = (tvd_m - a.tvd_m) / (b.tvd_m - a.tvd_m)
            return ya + t * (yb - ya)
    return None


def pore_kpa(window: PressureWindow, tvd_m: float) -> Optional[float]:
    return _interpolate_window(window, tvd_m, "pore_kpa")


def frac_kpa(window: PressureWindow, tvd_m: float) -> Optional[float]:
    return _interpolate_window(window, tvd_m, "frac_kpa")


def window_kpa(window: PressureWindow, tvd_m: float, apply_safety: bool = True) -> Optional[Tuple[float, float]]:
    """(min, max) allowable pressure at tvd_m, or None when the window is closed or unknown."""
    p_pore = pore_kpa(window, tvd_m)
    p_frac = frac_kpa(window, tvd_m)
    if p_pore is None or p_frac is None:
        return None
    lo = p_pore + window.pore_safety_kpa if apply_safety else p_pore
    hi = p_frac - window.frac_safety_kpa if apply_safety else p_frac
    return (lo, hi) if lo <= hi else None


def density_window_kgm3(window: PressureWindow, tvd_m: float,
                        apply_safety: bool = True) -> Optional[Tuple[float, float]]:
    if tvd_m <= 0:
        return None
    limits = window_kpa(window, tvd_m, apply_safety)
    if limits is None:
        return None
    return (equivalent_density_kgm3(limits[0], tvd_m), equivalent_density_kgm3(limits[1], tvd_m))


def margin_to_fracture_kpa(window: PressureWindow, tvd_m: float, pressure_kpa: float,
                           apply_safety: bool = True) -> Optional[float]:
    """Fracture pressure (less safety) minus the acting pressure; negative means losses."""
    p_frac = frac_kpa(window, tvd_m)
    if p_frac is None:
        return None
    if apply_safety:
        p_frac -= window.frac_safety_kpa
    return p_frac - pressure_kpa


def is_safe(window: PressureWindow, tvd_m: float, pressure_kpa: float) -> Tuple[bool, Optional[float], Optional[float]]:
    p_pore = pore_kpa(window, tvd_m)
    p_frac = frac_kpa(window, tvd_m)
    if p_pore is not None and pressure_kpa < p_pore:
        return (False, p_pore, p_frac)
    if p_frac is not None and pressure_kpa > p_frac:
        return (False, p_pore, p_frac)
    return (True, p_pore, p_frac)


def evaluate_bhp(data: BhpInput, mapper: Optional[DepthMapper] = None) -> BhpResult:
    """Full BHP breakdown for one TVD, with the optional target and window checks."""
    q = data.flow_rate_m3_per_min / 60.0
    hyd = hydrostatic_kpa(data.tvd_m, data.segments)
    density = equivalent_density_kgm3(hyd, data.tvd_m)
    fric = annular_friction_kpa(data.tvd_m, data.annulus_sections, q, density, data.apparent_viscosity_pa_s, mapper)
    bhp = data.sbp_kpa + hyd + fric

    result = BhpResult(
        tvd_m=data.tvd_m,
        hydrostatic_kpa=hyd,
        friction_kpa=fric,
        sbp_kpa=data.sbp_kpa,
        bhp_kpa=bhp,
        equivalent_density_kgm3=equivalent_density_kgm3(bhp, data.tvd_m),
    )

    if data.target_bhp_kpa is not None:
        result.required_sbp_kpa = max(data.target_bhp_kpa - (hyd + fric), 0.0)
        friction_grad = fric / data.tvd_m if data.tvd_m > 0 else 0.0
        result.required_uniform_density_kgm3 = required_uniform_density_kgm3(
            data.target_bhp_kpa, data.tvd_m, friction_grad, data.sbp_kpa
        )

    if data.window is not None:
        within, p_pore, p_frac = is_safe(data.window, data.tvd_m, bhp)
        result.within_window = within
        result.pore_kpa = p_pore
        result.frac_kpa = p_frac
        result.margin_to_fracture_kpa = margin_to_fracture_kpa(data.window, data.tvd_m, bhp)

    logger.debug(f"BHP at {data.tvd_m:.1f} m TVD: {bhp:.1f} kPa (hyd {hyd:.1f}, fric {fric:.1f})")
    return result
