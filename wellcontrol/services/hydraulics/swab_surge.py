# wellcontrol/services/hydraulics/swab_surge.py
"""
Swab and surge pressure estimation for pipe movement.

Three entry points:

- ``point_estimate``: single Darcy–Weisbach estimate over the whole domain
  using the geometry at the bit.
- ``estimate_at_bit``: integrates the domain in ``step_m`` slices with the
  local geometry, clinging-corrected annular velocity and the selected
  rheology kernel.
- ``trip_series``: marches the bit from the trip start to the trip end and
  records one sample per bit depth.

Degenerate geometry never raises; it yields zero pressure and a
``degenerate`` flag on the result.
"""
import logging
from typing import List, Optional

from wellcontrol.schemas.fluids import BinghamRheology, HerschelBulkleyRheology, PowerLawRheology
from wellcontrol.schemas.geometry import AnnulusGeometry
from wellcontrol.schemas.swab import (
    PointEstimate,
    SwabEstimate,
    SwabSample,
    SwabSegment,
    SwabSummary,
    SwabSurgeConfig,
    SwabSurgeDomain,
)
from wellcontrol.services.hydraulics.annulus import geometry_at, string_at
from wellcontrol.services.hydraulics.depth_mapper import DepthMapper
from wellcontrol.services.hydraulics.rheology import (
    NEUTRAL_GRADIENT,
    GradientResult,
    apparent_viscosity_bingham,
    apparent_viscosity_herschel_bulkley,
    apparent_viscosity_power_law,
    bingham_annular_gradient,
    darcy_pressure_drop_pa,
    friction_factor,
    herschel_bulkley_annular_gradient,
    is_laminar,
    power_law_annular_gradient,
    reynolds_number,
)
from wellcontrol.utils.conversions import equivalent_density_kgm3, m_per_min_to_m_per_s, pa_to_kpa

logger = logging.getLogger(__name__)

# Slices shorter than this are ignored
MIN_SLICE_M = 1e-9


def _mapper_for(config: SwabSurgeConfig, mapper: Optional[DepthMapper]) -> DepthMapper:
    return mapper if mapper is not None else DepthMapper.from_stations(config.stations)


def local_geometry(config: SwabSurgeConfig, md: float) -> AnnulusGeometry:
    if config.annulus_sections:
        return geometry_at(md, config.annulus_sections, config.drill_string_sections, fallback=config.geometry)
    return config.geometry if config.geometry is not None else AnnulusGeometry()


def pipe_displacement_area(config: SwabSurgeConfig, bit_md: float) -> float:
    """Area displaced by the pipe at the bit for the configured pipe end."""
    ds = string_at(bit_md, config.drill_string_sections)
    if ds is not None:
        pipe = AnnulusGeometry(pipe_od_m=ds.outer_diameter_m, pipe_id_m=ds.inner_diameter_m)
        return pipe.displacement_area_m2(config.pipe_end_type)
    return local_geometry(config, bit_md).displacement_area_m2(config.pipe_end_type)


def clinging_constant(config: SwabSurgeConfig, geometry: AnnulusGeometry) -> float:
    if config.clinging_constant_override is not None:
        return config.clinging_constant_override
    return geometry.clinging_constant


def annular_gradient(rheology, density: float, velocity: float, equivalent_diameter: float) -> GradientResult:
    """Pressure gradient in Pa/m for any rheology variant."""
    if isinstance(rheology, BinghamRheology):
        return bingham_annular_gradient(density, rheology.pv_pa_s, rheology.yp_pa, velocity, equivalent_diameter)
    if isinstance(rheology, PowerLawRheology):
        return power_law_annular_gradient(density, rheology.k, rheology.n, velocity, equivalent_diameter)
    if isinstance(rheology, HerschelBulkleyRheology):
        return herschel_bulkley_annular_gradient(
            density, rheology.tau0_pa, rheology.k, rheology.n, velocity, equivalent_diameter
        )
    raise TypeError(f"Unsupported rheology: {type(rheology).__name__}")


def apparent_viscosity(rheology, velocity: float, equivalent_diameter: float) -> float:
    if isinstance(rheology, BinghamRheology):
        return apparent_viscosity_bingham(rheology.pv_pa_s, rheology.yp_pa, velocity, equivalent_diameter)
    if isinstance(rheology, PowerLawRheology):
        return apparent_viscosity_power_law(rheology.k, rheology.n, velocity, equivalent_diameter)
    if isinstance(rheology, HerschelBulkleyRheology):
        return apparent_viscosity_herschel_bulkley(
            rheology.tau0_pa, rheology.k, rheology.n, velocity, equivalent_diameter
        )
    raise TypeError(f"Unsupported rheology: {type(rheology).__name__}")


def layer_density(config: SwabSurgeConfig, md: float) -> float:
    """Density of the first layer containing md, else the base fluid."""
    for layer in config.layers:
        if layer.shallow_md_m <= md <= layer.deep_md_m:
            return layer.density_kgm3
    return config.density_kgm3


def point_estimate(config: SwabSurgeConfig, bit_md: Optional[float] = None) -> PointEstimate:
    """
    ΔP = f·(L/De)·(ρ·v²/2) with v the pipe speed magnitude and L the
    domain length.
    """
    bit = config.bit_md_m if bit_md is None else bit_md
    shallow, deep = config.domain_bounds(bit)
    length = max(deep - shallow, 0.0)
    geom = local_geometry(config, bit)
    de = geom.equivalent_diameter_m
    v = abs(m_per_min_to_m_per_s(config.trip_speed_m_per_min))
    rho = config.density_kgm3

    if geom.is_degenerate:
        logger.warning(f"Degenerate annulus at MD {bit:.1f} m (hole {geom.hole_id_m}, pipe {geom.pipe_od_m})")
        return PointEstimate(
            length_m=length, equivalent_diameter_m=0.0, velocity_m_per_s=v, reynolds=0.0,
            friction_factor=0.0, pressure_delta_kpa=0.0, non_laminar=False, degenerate=True,
        )

    mu = apparent_viscosity(config.resolved_rheology(), v, de)
    re = reynolds_number(rho, v, de, mu)
    f = friction_factor(re)
    dp_pa = darcy_pressure_drop_pa(f, length, de, rho, v)
    return PointEstimate(
        length_m=length,
        equivalent_diameter_m=de,
        velocity_m_per_s=v,
        reynolds=re,
        friction_factor=f,
        pressure_delta_kpa=pa_to_kpa(dp_pa),
        non_laminar=re > 0 and not is_laminar(re),
        degenerate=False,
    )


def estimate_at_bit(config: SwabSurgeConfig, bit_md: Optional[float] = None,
                    mapper: Optional[DepthMapper] = None) -> SwabEstimate:
    """
    Integrate the domain outward from the bit in ``step_m`` slices.

    Swab runs from the bit up to the domain top, surge from the bit down to
    the lower limit. Slices with degenerate geometry contribute nothing.
    """
    bit = config.bit_md_m if bit_md is None else bit_md
    domain = config.effective_domain
    mapper = _mapper_for(config, mapper)
    shallow, deep = config.domain_bounds(bit)

    rheology = config.resolved_rheology()
    v_pipe = abs(m_per_min_to_m_per_s(config.trip_speed_m_per_min))
    a_disp = pipe_displacement_area(config, bit)
    ecc = config.eccentricity_factor
    step = config.step_m

    if domain == SwabSurgeDomain.SWAB_ABOVE_BIT:
        start, stop, sign = deep, shallow, -1.0
    else:
        start, stop, sign = shallow, deep, 1.0

    profile: List[SwabSegment] = []
    cum_pa = 0.0
    any_non_laminar = False
    md = start
    while (stop - md) * sign > MIN_SLICE_M:
        nxt = md + sign * step
        if (stop - nxt) * sign < 0:
            nxt = stop
        seg_len = abs(nxt - md)
        mid = 0.5 * (md + nxt)

        geom = local_geometry(config, mid)
        a_ann = geom.flow_area_m2
        if geom.is_degenerate:
            md = nxt
            continue

        kc = clinging_constant(config, geom)
        va = v_pipe * (1.0 + kc) * (a_disp / a_ann) * ecc
        de = geom.equivalent_diameter_m
        result = annular_gradient(rheology, layer_density(config, mid), va, de) if va > 0 else NEUTRAL_GRADIENT

        cum_pa += result.dp_per_m_pa * seg_len
        if not result.laminar:
            any_non_laminar = True
        profile.append(SwabSegment(
            md_m=nxt,
            tvd_m=mapper.tvd_at(mid),
            equivalent_diameter_m=de,
            annular_velocity_m_per_s=va,
            dp_per_m_pa=result.dp_per_m_pa,
            cumulative_kpa=pa_to_kpa(cum_pa),
            laminar=result.laminar,
            reynolds=result.reynolds,
        ))
        md = nxt

    total_kpa = pa_to_kpa(cum_pa)
    degenerate = not profile and deep - shallow > MIN_SLICE_M
    if degenerate:
        logger.warning(f"No usable annulus geometry between {shallow:.1f} and {deep:.1f} m")

    return SwabEstimate(
        bit_md_m=bit,
        domain=domain,
        profile=profile,
        total_kpa=total_kpa,
        recommended_sabp_kpa=total_kpa * config.sabp_safety_factor,
        non_laminar=any_non_laminar,
        degenerate=degenerate,
    )


def march_depths(start_md: float, end_md: float, step_m: float) -> List[float]:
    """
    Bit depths from start to end in fixed steps.

    The end depth is always the last entry; a final partial step is clamped
    to it.
    """
    if step_m <= 0:
        raise ValueError("step_m must be > 0")
    sign = -1.0 if start_md > end_md else 1.0
    span = abs(end_md - start_md)
    count = int(span / step_m + 1e-9)
    depths = [start_md + sign * i * step_m for i in range(count + 1)]
    if abs(depths[-1] - end_md) > 1e-9:
        depths.append(end_md)
    else:
        depths[-1] = end_md
    return depths


def sample_at_bit(config: SwabSurgeConfig, bit_md: float, mapper: DepthMapper) -> SwabSample:
    est = estimate_at_bit(config, bit_md, mapper)
    tvd = mapper.tvd_at(bit_md)
    sign = -1.0 if est.domain == SwabSurgeDomain.SWAB_ABOVE_BIT else 1.0
    bit_geom = local_geometry(config, bit_md)
    first = est.profile[0] if est.profile else None
    return SwabSample(
        md_m=bit_md,
        tvd_m=tvd,
        pressure_delta_kpa=sign * est.total_kpa,
        ecd_change_kgm3=sign * equivalent_density_kgm3(est.total_kpa, tvd),
        annular_velocity_m_per_s=first.annular_velocity_m_per_s if first else 0.0,
        reynolds=first.reynolds if first else 0.0,
        clinging_constant=clinging_constant(config, bit_geom),
        non_laminar=est.non_laminar,
        degenerate=est.degenerate,
    )


def trip_series(config: SwabSurgeConfig, mapper: Optional[DepthMapper] = None) -> List[SwabSample]:
    """One sample per bit depth from trip start to trip end."""
    mapper = _mapper_for(config, mapper)
    depths = march_depths(config.trip_start_md_m, config.trip_end_md_m, config.trip_step_m)
    logger.debug(
        f"Trip series {config.effective_domain.value}: {config.trip_start_md_m:.1f} -> "
        f"{config.trip_end_md_m:.1f} m, {len(depths)} steps"
    )
    samples = [sample_at_bit(config, md, mapper) for md in depths]
    degenerate = sum(1 for s in samples if s.degenerate)
    if degenerate:
        logger.warning(f"{degenerate} of {len(samples)} trip samples have degenerate geometry")
    return samples


def summarize(samples: List[SwabSample], config: Optional[SwabSurgeConfig] = None) -> SwabSummary:
    """Extremes of a trip series; swab values are reported as magnitudes."""
    if not samples:
        return SwabSummary()

    surge = max(samples, key=lambda s: s.pressure_delta_kpa)
    swab = min(samples, key=lambda s: s.pressure_delta_kpa)
    max_surge = max(surge.pressure_delta_kpa, 0.0)
    max_swab = abs(min(swab.pressure_delta_kpa, 0.0))

    area = 0.0
    if config is not None:
        strings = config.drill_string_sections
        if strings:
            deepest = max(strings, key=lambda d: d.bottom_md_m)
            pipe = AnnulusGeometry(pipe_od_m=deepest.outer_diameter_m, pipe_id_m=deepest.inner_diameter_m)
            area = pipe.displacement_area_m2(config.pipe_end_type)
        elif config.geometry is not None:
            area = config.geometry.displacement_area_m2(config.pipe_end_type)

    return SwabSummary(
        max_surge_kpa=max_surge,
        max_swab_kpa=max_swab,
        max_surge_ecd_kgm3=max(surge.ecd_change_kgm3, 0.0),
        max_swab_ecd_kgm3=abs(min(swab.ecd_change_kgm3, 0.0)),
        depth_of_max_surge_m=surge.md_m if max_surge > 0 else 0.0,
        depth_of_max_swab_m=swab.md_m if max_swab > 0 else 0.0,
        average_clinging_constant=sum(s.clinging_constant for s in samples) / len(samples),
        pipe_displacement_area_m2=area,
        any_non_laminar=any(s.non_laminar for s in samples),
        sample_count=len(samples),
    )
