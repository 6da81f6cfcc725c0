# wellcontrol/services/hydraulics/trip.py
"""
Stand-by-stand trip simulation.

Marches the bit like ``swab_surge.trip_series`` and, for every stand, adds
the backfill to pump (pulling out only), the expected fill with the float
closed and open, the recommended SABP, the hydrostatic state at the bit and
the margin to fracture at the shoe (or the bit when no shoe is given).
"""
import logging
from typing import List, Optional

from wellcontrol.schemas.backfill import BackfillPlan
from wellcontrol.schemas.geometry import AnnulusGeometry, PipeEndType
from wellcontrol.schemas.runs import TripConfig, TripRun, TripSample
from wellcontrol.schemas.swab import SwabSurgeDomain, TripDirection
from wellcontrol.services.hydraulics import backfill as backfill_calc
from wellcontrol.services.hydraulics import hydrostatics
from wellcontrol.services.hydraulics.annulus import string_at
from wellcontrol.services.hydraulics.depth_mapper import DepthMapper
from wellcontrol.services.hydraulics.swab_surge import local_geometry, march_depths, sample_at_bit
from wellcontrol.services.recorders.recorder import trip_run_recorder
from wellcontrol.utils.conversions import equivalent_density_kgm3

logger = logging.getLogger(__name__)


def _pipe_at(config: TripConfig, md: float) -> AnnulusGeometry:
    sc = config.swab_surge
    ds = string_at(md, sc.drill_string_sections)
    if ds is not None:
        return AnnulusGeometry(pipe_od_m=ds.outer_diameter_m, pipe_id_m=ds.inner_diameter_m)
    return local_geometry(sc, md)


def simulate_trip_samples(config: TripConfig, mapper: Optional[DepthMapper] = None) -> List[TripSample]:
    sc = config.swab_surge
    mapper = mapper if mapper is not None else DepthMapper.from_stations(sc.stations)
    base_density = sc.density_kgm3
    plan = config.backfill_plan or BackfillPlan(name="Default", fluid_density_kgm3=base_density)
    pulling_out = sc.direction == TripDirection.PULL_OUT
    swab_domain = sc.effective_domain == SwabSurgeDomain.SWAB_ABOVE_BIT
    shoe_tvd = mapper.tvd_at(config.shoe_md_m) if config.shoe_md_m is not None else None

    depths = march_depths(sc.trip_start_md_m, sc.trip_end_md_m, sc.trip_step_m)
    samples: List[TripSample] = []
    cumulative = 0.0
    previous = None

    for index, md in enumerate(depths):
        swab = sample_at_bit(sc, md, mapper)
        tvd = swab.tvd_m
        stand = abs(previous - md) if previous is not None else 0.0
        previous = md

        # Backfill for the stand just pulled, matched at its top MD
        volume = closed = opened = 0.0
        density = plan.fluid_density_kgm3
        if pulling_out and stand > 0:
            pipe = _pipe_at(config, md)
            closed = pipe.displacement_area_m2(PipeEndType.CLOSED) * stand
            opened = pipe.displacement_area_m2(PipeEndType.OPEN) * stand
            area = pipe.displacement_area_m2(sc.pipe_end_type)
            volume = backfill_calc.volume_for_stand_m3(plan, stand, md, area)
            density = backfill_calc.effective_density_kgm3(plan, backfill_calc.rule_for_md(plan, md))
            cumulative += volume

        sabp = abs(swab.pressure_delta_kpa) * sc.sabp_safety_factor if swab_domain else 0.0
        # Surge adds to the column while running in; SABP is held while pulling
        dynamic = sabp if swab_domain else max(swab.pressure_delta_kpa, 0.0)

        hyd = hydrostatics.uniform_hydrostatic_kpa(base_density, tvd)
        slug = hydrostatics.delta_hydrostatic_kpa(config.slug_plan, tvd, mapper) if config.slug_plan else 0.0

        check_tvd = shoe_tvd if shoe_tvd is not None else tvd
        acting = hydrostatics.uniform_hydrostatic_kpa(base_density, check_tvd) + dynamic
        if config.slug_plan:
            acting += hydrostatics.delta_hydrostatic_kpa(config.slug_plan, check_tvd, mapper)
        margin = None
        if config.pressure_window is not None:
            margin = hydrostatics.margin_to_fracture_kpa(config.pressure_window, check_tvd, acting)

        samples.append(TripSample(
            step_index=index,
            bit_md_m=md,
            bit_tvd_m=tvd,
            pressure_delta_kpa=swab.pressure_delta_kpa,
            ecd_change_kgm3=swab.ecd_change_kgm3,
            non_laminar=swab.non_laminar,
            degenerate=swab.degenerate,
            sabp_kpa=sabp,
            hydrostatic_kpa=hyd,
            slug_delta_kpa=slug,
            acting_pressure_kpa=acting,
            esd_at_bit_kgm3=equivalent_density_kgm3(hyd + slug + sabp, tvd),
            stand_length_m=stand,
            backfill_m3=volume,
            cumulative_backfill_m3=cumulative,
            backfill_density_kgm3=density,
            expected_if_closed_m3=closed,
            expected_if_open_m3=opened,
            margin_to_fracture_kpa=margin,
        ))

    return samples


def simulate_trip(config: TripConfig, mapper: Optional[DepthMapper] = None) -> TripRun:
    """Run the trip and snapshot it as a TripRun."""
    sc = config.swab_surge
    logger.debug(
        f"Simulating trip '{config.name}' {sc.trip_start_md_m:.1f} -> {sc.trip_end_md_m:.1f} m "
        f"every {sc.trip_step_m:.1f} m"
    )
    samples = simulate_trip_samples(config, mapper)
    return trip_run_recorder.record(config, samples)
