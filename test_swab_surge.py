"""
Tests for the swab/surge engine: point estimate, integrated profile at the
bit, trip series and summary.
"""

import sys
import os
import math

import pytest

# Add the project root to the Python path
sys.path.append(os.path.abspath('.'))

from wellcontrol.schemas.fluids import FluidIdentity, PowerLawRheology, RheologyModelEnum
from wellcontrol.schemas.geometry import AnnulusGeometry, AnnulusSection, DrillStringSection
from wellcontrol.schemas.survey import Station
from wellcontrol.schemas.swab import (
    FluidLayer,
    SwabSummary,
    SwabSurgeConfig,
    SwabSurgeDomain,
    TripDirection,
)
from wellcontrol.services.hydraulics.rheology import (
    apparent_viscosity_bingham,
    darcy_pressure_drop_pa,
    friction_factor,
    reynolds_number,
)
from wellcontrol.services.hydraulics.swab_surge import (
    annular_gradient,
    estimate_at_bit,
    layer_density,
    march_depths,
    point_estimate,
    summarize,
    trip_series,
)

GEOMETRY = AnnulusGeometry(pipe_od_m=0.127, pipe_id_m=0.108, hole_id_m=0.216)


def create_config(**overrides):
    """Uniform 0.216 m hole with 0.127 m pipe, Bingham mud, bit at 1000 m."""
    values = dict(
        geometry=GEOMETRY,
        fluid=FluidIdentity(density_kgm3=1100.0, pv_cp=20.0, yp_pa=5.0),
        trip_speed_m_per_min=10.0,
        domain=SwabSurgeDomain.SWAB_ABOVE_BIT,
        bit_md_m=1000.0,
        top_md_m=0.0,
        step_m=5.0,
    )
    values.update(overrides)
    return SwabSurgeConfig(**values)


def test_point_estimate_matches_darcy():
    result = point_estimate(create_config())
    v = 10.0 / 60.0
    de = 0.216 - 0.127
    mu = apparent_viscosity_bingham(0.02, 5.0, v, de)
    re = reynolds_number(1100.0, v, de, mu)
    expected_pa = darcy_pressure_drop_pa(friction_factor(re), 1000.0, de, 1100.0, v)

    assert result.length_m == pytest.approx(1000.0)
    assert result.equivalent_diameter_m == pytest.approx(de)
    assert result.reynolds == pytest.approx(re)
    assert result.pressure_delta_kpa == pytest.approx(expected_pa / 1000.0)
    assert not result.non_laminar
    assert not result.degenerate


def test_point_estimate_ignores_speed_sign():
    up = point_estimate(create_config(trip_speed_m_per_min=10.0))
    down = point_estimate(create_config(trip_speed_m_per_min=-10.0))
    assert up.pressure_delta_kpa == pytest.approx(down.pressure_delta_kpa)


def test_point_estimate_degenerate_geometry():
    config = create_config(geometry=AnnulusGeometry(pipe_od_m=0.2, hole_id_m=0.15))
    result = point_estimate(config)
    assert result.degenerate
    assert result.pressure_delta_kpa == 0.0
    assert result.reynolds == 0.0


def test_swab_profile_integrates_from_bit_to_top():
    estimate = estimate_at_bit(create_config())
    assert estimate.domain == SwabSurgeDomain.SWAB_ABOVE_BIT
    assert len(estimate.profile) == 200
    assert estimate.profile[0].md_m == pytest.approx(995.0)
    assert estimate.profile[-1].md_m == pytest.approx(0.0)

    cumulative = [s.cumulative_kpa for s in estimate.profile]
    assert cumulative == sorted(cumulative)
    # Uniform geometry and mud: constant gradient over 1000 m
    assert estimate.total_kpa == pytest.approx(estimate.profile[0].dp_per_m_pa * 1000.0 / 1000.0)
    assert estimate.recommended_sabp_kpa == pytest.approx(estimate.total_kpa * 1.15)
    assert not estimate.degenerate


def test_annular_velocity_includes_clinging_and_area_ratio():
    estimate = estimate_at_bit(create_config(eccentricity_factor=0.9))
    kc = GEOMETRY.clinging_constant
    a_disp = math.pi / 4.0 * 0.127 ** 2
    expected = (10.0 / 60.0) * (1.0 + kc) * (a_disp / GEOMETRY.flow_area_m2) * 0.9
    assert estimate.profile[0].annular_velocity_m_per_s == pytest.approx(expected)


def test_clinging_override_and_eccentricity_lower_pressure():
    base = estimate_at_bit(create_config())
    lower_kc = estimate_at_bit(create_config(clinging_constant_override=0.1))
    eccentric = estimate_at_bit(create_config(eccentricity_factor=0.5))
    assert lower_kc.total_kpa < base.total_kpa
    assert eccentric.total_kpa < base.total_kpa


def test_profile_maps_slices_through_survey():
    stations = [Station(md=0.0, tvd=0.0), Station(md=1000.0, tvd=980.0)]
    estimate = estimate_at_bit(create_config(stations=stations))
    assert estimate.profile[0].tvd_m == pytest.approx(0.98 * 997.5)


def test_surge_profile_runs_down_to_lower_limit():
    config = create_config(domain=SwabSurgeDomain.SURGE_BELOW_BIT, lower_limit_md_m=1200.0)
    estimate = estimate_at_bit(config)
    assert len(estimate.profile) == 40
    assert estimate.profile[0].md_m == pytest.approx(1005.0)
    assert estimate.profile[-1].md_m == pytest.approx(1200.0)
    assert estimate.total_kpa > 0


def test_surge_lower_limit_defaults_to_deepest_section():
    sections = [
        AnnulusSection(top_md_m=0.0, length_m=800.0, inner_diameter_m=0.224, cased=True),
        AnnulusSection(top_md_m=800.0, length_m=700.0, inner_diameter_m=0.216),
    ]
    strings = [DrillStringSection(top_md_m=0.0, length_m=1500.0, outer_diameter_m=0.127, inner_diameter_m=0.108)]
    config = create_config(geometry=None, annulus_sections=sections, drill_string_sections=strings,
                           domain=SwabSurgeDomain.SURGE_BELOW_BIT)
    assert config.domain_bounds(1000.0) == (1000.0, 1500.0)
    estimate = estimate_at_bit(config)
    assert estimate.profile[-1].md_m == pytest.approx(1500.0)
    assert estimate.total_kpa > 0


def test_degenerate_geometry_yields_zero_profile():
    estimate = estimate_at_bit(create_config(geometry=AnnulusGeometry(pipe_od_m=0.2, hole_id_m=0.2)))
    assert estimate.profile == []
    assert estimate.total_kpa == 0.0
    assert estimate.degenerate


def test_explicit_rheology_overrides_fluid():
    config = create_config(rheology=PowerLawRheology(n=0.7, k=0.3))
    assert isinstance(config.resolved_rheology(), PowerLawRheology)
    assert estimate_at_bit(config).total_kpa > 0


def test_annular_gradient_rejects_unknown_rheology():
    with pytest.raises(TypeError):
        annular_gradient(object(), 1100.0, 0.5, 0.089)


def test_layer_density_first_containing_interval():
    config = create_config(layers=[
        FluidLayer(density_kgm3=1500.0, top_md_m=500.0, bottom_md_m=0.0),
        FluidLayer(density_kgm3=1300.0, top_md_m=0.0, bottom_md_m=800.0),
    ])
    assert layer_density(config, 250.0) == 1500.0
    assert layer_density(config, 600.0) == 1300.0
    assert layer_density(config, 900.0) == 1100.0


def test_march_depths():
    assert march_depths(0.0, 100.0, 25.0) == pytest.approx([0.0, 25.0, 50.0, 75.0, 100.0])
    pulled = march_depths(1000.0, 0.0, 27.0)
    assert pulled[0] == 1000.0
    assert pulled[-1] == 0.0
    assert len(pulled) == 39
    assert pulled[-2] == pytest.approx(1.0)
    assert march_depths(500.0, 500.0, 27.0) == [500.0]
    with pytest.raises(ValueError):
        march_depths(0.0, 100.0, 0.0)


def test_direction_sets_default_domain():
    pulling = create_config(domain=None, trip_start_md_m=1000.0, trip_end_md_m=0.0)
    running = create_config(domain=None, trip_start_md_m=0.0, trip_end_md_m=1000.0)
    assert pulling.direction == TripDirection.PULL_OUT
    assert pulling.effective_domain == SwabSurgeDomain.SWAB_ABOVE_BIT
    assert running.direction == TripDirection.RUN_IN
    assert running.effective_domain == SwabSurgeDomain.SURGE_BELOW_BIT


def test_pull_out_series_is_swab():
    config = create_config(domain=None, trip_start_md_m=1000.0, trip_end_md_m=0.0, trip_step_m=100.0)
    samples = trip_series(config)
    assert len(samples) == 11
    assert all(s.pressure_delta_kpa <= 0 for s in samples)
    # Longer column above the bit swabs harder
    assert samples[0].pressure_delta_kpa < samples[5].pressure_delta_kpa < 0
    assert samples[0].ecd_change_kgm3 < 0
    # Bit at surface: nothing above it
    assert samples[-1].pressure_delta_kpa == 0.0
    assert not samples[-1].degenerate


def test_run_in_series_is_surge():
    config = create_config(domain=None, trip_start_md_m=0.0, trip_end_md_m=1000.0, trip_step_m=250.0,
                           lower_limit_md_m=1200.0)
    samples = trip_series(config)
    assert [s.md_m for s in samples] == pytest.approx([0.0, 250.0, 500.0, 750.0, 1000.0])
    assert all(s.pressure_delta_kpa > 0 for s in samples)
    assert samples[0].pressure_delta_kpa > samples[-1].pressure_delta_kpa


def test_summarize_pull_out_series():
    config = create_config(domain=None, trip_start_md_m=1000.0, trip_end_md_m=0.0, trip_step_m=100.0)
    samples = trip_series(config)
    summary = summarize(samples, config)
    assert summary.sample_count == 11
    assert summary.max_swab_kpa == pytest.approx(abs(samples[0].pressure_delta_kpa))
    assert summary.max_underbalance_kpa == summary.max_swab_kpa
    assert summary.depth_of_max_swab_m == 1000.0
    assert summary.max_surge_kpa == 0.0
    assert summary.depth_of_max_surge_m == 0.0
    assert summary.average_clinging_constant == pytest.approx(GEOMETRY.clinging_constant)
    assert summary.pipe_displacement_area_m2 == pytest.approx(math.pi / 4.0 * 0.127 ** 2)


def test_summarize_empty():
    assert summarize([]) == SwabSummary()


@pytest.mark.parametrize("d600,d300", [(40.0, 40.0), (30.0, 40.0)])
@pytest.mark.parametrize("model", [RheologyModelEnum.POWER_LAW, RheologyModelEnum.HERSCHEL_BULKLEY])
def test_unusable_dial_fit_runs_as_bingham(model, d600, d300):
    fluid = FluidIdentity(density_kgm3=1100.0, pv_cp=20.0, yp_pa=5.0, dial600=d600, dial300=d300)
    bingham = create_config()
    config = create_config(fluid=fluid, rheology_model=model)

    assert point_estimate(config).pressure_delta_kpa == pytest.approx(point_estimate(bingham).pressure_delta_kpa)
    assert estimate_at_bit(config).total_kpa == pytest.approx(estimate_at_bit(bingham).total_kpa)

    series = trip_series(create_config(fluid=fluid, rheology_model=model, domain=None,
                                       trip_start_md_m=270.0, trip_end_md_m=0.0, trip_step_m=27.0))
    assert len(series) == 11
    assert all(s.pressure_delta_kpa <= 0 for s in series)
