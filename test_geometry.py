"""
Tests for annulus geometry and the section lookups.
"""

import sys
import os
import math

import pytest

# Add the project root to the Python path
sys.path.append(os.path.abspath('.'))

from wellcontrol.schemas.geometry import (
    AnnulusGeometry,
    AnnulusSection,
    DrillStringSection,
    PipeEndType,
)
from wellcontrol.services.hydraulics.annulus import (
    effective_annular_volume,
    geometry_at,
    interval_overlap_fraction,
    interval_volumes,
    section_at,
)


def create_sections():
    """Cased interval over an open-hole interval, both 0.2 m ID."""
    casing = AnnulusSection(name="Casing", top_md_m=0.0, length_m=100.0,
                            inner_diameter_m=0.2, outer_diameter_m=0.1, cased=True)
    open_hole = AnnulusSection(name="Open hole", top_md_m=100.0, length_m=100.0,
                               inner_diameter_m=0.2, outer_diameter_m=0.1, cased=False)
    return [casing, open_hole]


def test_flow_area_and_equivalent_diameter():
    geom = AnnulusGeometry(pipe_od_m=0.127, pipe_id_m=0.108, hole_id_m=0.216)
    assert geom.flow_area_m2 == pytest.approx(math.pi / 4.0 * (0.216 ** 2 - 0.127 ** 2))
    assert geom.equivalent_diameter_m == pytest.approx(0.089)
    assert not geom.is_degenerate


def test_hydraulic_radius_is_quarter_of_gap():
    geom = AnnulusGeometry(pipe_od_m=0.127, hole_id_m=0.216)
    assert geom.wetted_perimeter_m == pytest.approx(math.pi * (0.216 + 0.127))
    assert geom.hydraulic_radius_m == pytest.approx((0.216 - 0.127) / 4.0)


@pytest.mark.parametrize("od,hole", [(0.127, 0.127), (0.2, 0.15), (0.0, 0.0)])
def test_degenerate_geometry(od, hole):
    geom = AnnulusGeometry(pipe_od_m=od, hole_id_m=hole)
    assert geom.flow_area_m2 == 0.0
    assert geom.equivalent_diameter_m == 0.0
    assert geom.is_degenerate
    assert geom.hydraulic_radius_m == 0.0


def test_clinging_constant():
    geom = AnnulusGeometry(pipe_od_m=0.127, hole_id_m=0.216)
    ratio = 0.127 / 0.216
    assert geom.clinging_constant == pytest.approx(0.45 + 0.45 * ratio * ratio)
    # Degenerate falls back to the base value
    assert AnnulusGeometry(pipe_od_m=0.3, hole_id_m=0.2).clinging_constant == pytest.approx(0.45)


def test_displacement_area_closed_and_open():
    geom = AnnulusGeometry(pipe_od_m=0.127, pipe_id_m=0.108, hole_id_m=0.216)
    closed = geom.displacement_area_m2(PipeEndType.CLOSED)
    opened = geom.displacement_area_m2(PipeEndType.OPEN)
    assert closed == pytest.approx(math.pi / 4.0 * 0.127 ** 2)
    assert opened == pytest.approx(math.pi / 4.0 * (0.127 ** 2 - 0.108 ** 2))
    assert opened < closed


def test_section_bounds_and_volume():
    casing = create_sections()[0]
    assert casing.bottom_md_m == 100.0
    assert casing.contains(0.0) and casing.contains(100.0)
    assert not casing.contains(100.1)
    assert casing.volume_m3 == pytest.approx(math.pi / 4.0 * (0.04 - 0.01) * 100.0)


def test_section_lookup_first_match():
    sections = create_sections()
    # 100 m lies in both; the first listed wins
    assert section_at(100.0, sections).name == "Casing"
    assert section_at(150.0, sections).name == "Open hole"
    assert section_at(250.0, sections) is None


def test_geometry_at_prefers_drill_string_pipe():
    sections = create_sections()
    strings = [DrillStringSection(top_md_m=0.0, length_m=200.0, outer_diameter_m=0.127, inner_diameter_m=0.108)]
    geom = geometry_at(50.0, sections, strings)
    assert geom.pipe_od_m == 0.127
    assert geom.pipe_id_m == 0.108
    assert geom.hole_id_m == 0.2

    # Without a string the section's own OD is used
    assert geometry_at(50.0, sections).pipe_od_m == 0.1


def test_geometry_at_outside_sections():
    fallback = AnnulusGeometry(pipe_od_m=0.127, hole_id_m=0.216)
    assert geometry_at(500.0, create_sections(), fallback=fallback) == fallback
    assert geometry_at(500.0, create_sections()).is_degenerate


def test_effective_annular_volume_with_partial_string():
    section = AnnulusSection(top_md_m=0.0, length_m=100.0, inner_diameter_m=0.2)
    strings = [DrillStringSection(top_md_m=0.0, length_m=50.0, outer_diameter_m=0.1)]
    expected = math.pi / 4.0 * ((0.04 - 0.01) * 50.0 + 0.04 * 50.0)
    assert effective_annular_volume(section, strings) == pytest.approx(expected)


def test_interval_overlap_fraction():
    section = AnnulusSection(top_md_m=100.0, length_m=100.0, inner_diameter_m=0.2)
    assert interval_overlap_fraction(150.0, 300.0, section) == pytest.approx(0.5)
    assert interval_overlap_fraction(0.0, 100.0, section) == 0.0
    assert interval_overlap_fraction(0.0, 50.0, AnnulusSection(length_m=0.0)) == 0.0


def test_interval_volumes_split_cased_and_open():
    volumes = interval_volumes(150.0, 50.0, create_sections())
    half = math.pi / 4.0 * 0.04 * 50.0
    assert volumes["cased_m3"] == pytest.approx(half)
    assert volumes["open_hole_m3"] == pytest.approx(half)
    assert volumes["total_m3"] == pytest.approx(2 * half)
