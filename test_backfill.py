"""
Tests for the backfill volume calculator: rule precedence, fallback to the
geometric volume, legacy strategy codes and the per-stand schedule.
"""

import sys
import os
import math

import pytest

# Add the project root to the Python path
sys.path.append(os.path.abspath('.'))

from wellcontrol.schemas.backfill import (
    BackfillPlan,
    BackfillRule,
    FixedPerStandStrategy,
    GeometricStrategy,
    PerMeterStrategy,
    decode_strategy,
)
from wellcontrol.schemas.geometry import AnnulusGeometry
from wellcontrol.services.hydraulics.backfill import (
    effective_density_kgm3,
    geometric_volume_m3,
    recommended_volume_m3,
    rule_for_md,
    stand_schedule,
    volume_for_stand_m3,
)

STAND_M = 27.0


def create_plan(rules=None, overfill=0.05):
    return BackfillPlan(name="Test plan", fluid_density_kgm3=1200.0, overfill_frac=overfill, rules=rules or [])


def test_geometric_volume_clamps_negatives():
    assert geometric_volume_m3(27.0, 0.02) == pytest.approx(0.54)
    assert geometric_volume_m3(-5.0, 0.02) == 0.0
    assert geometric_volume_m3(27.0, -0.02) == 0.0


def test_quoted_area_round_trip():
    plan = create_plan()
    volume = volume_for_stand_m3(plan, STAND_M, 1000.0, 0.02652)
    assert volume == pytest.approx(0.02652 * 27.0 * 1.05)
    assert volume == pytest.approx(0.7517, abs=5e-4)


def test_geometry_round_trip():
    area = AnnulusGeometry(pipe_od_m=0.127, hole_id_m=0.216).flow_area_m2
    assert area == pytest.approx(math.pi / 4.0 * (0.216 ** 2 - 0.127 ** 2))
    volume = volume_for_stand_m3(create_plan(), STAND_M, 1000.0, area)
    assert volume == pytest.approx(area * 27.0 * 1.05)


def test_rule_precedence_and_removal():
    fixed = BackfillRule(name="Fixed", from_md_m=0.0, to_md_m=2000.0,
                         strategy=FixedPerStandStrategy(volume_m3=0.4))
    per_meter = BackfillRule(name="Per metre", from_md_m=500.0, to_md_m=1500.0,
                             strategy=PerMeterStrategy(rate_m3_per_m=0.01))
    plan = create_plan([fixed, per_meter])

    # Overlapping ranges: the first stored rule wins
    assert rule_for_md(plan, 1000.0).name == "Fixed"
    assert volume_for_stand_m3(plan, STAND_M, 1000.0, 0.02) == pytest.approx(0.4)

    plan = create_plan([per_meter])
    assert volume_for_stand_m3(plan, STAND_M, 1000.0, 0.02) == pytest.approx(0.27)

    # Without any rule the geometric volume with overfill is used
    plan = create_plan([])
    assert volume_for_stand_m3(plan, STAND_M, 1000.0, 0.02) == pytest.approx(0.02 * 27.0 * 1.05)


def test_fallback_outside_rule_ranges():
    rule = BackfillRule(from_md_m=0.0, to_md_m=500.0, strategy=FixedPerStandStrategy(volume_m3=0.4))
    plan = create_plan([rule])
    assert rule_for_md(plan, 800.0) is None
    assert volume_for_stand_m3(plan, STAND_M, 800.0, 0.02) == pytest.approx(recommended_volume_m3(plan, 27.0, 0.02))


def test_rule_range_boundaries_inclusive():
    rule = BackfillRule(from_md_m=500.0, to_md_m=1000.0)
    assert rule.contains(500.0)
    assert rule.contains(1000.0)
    assert not rule.contains(1000.5)


def test_reversed_range_is_swapped():
    rule = BackfillRule(from_md_m=1500.0, to_md_m=500.0)
    assert rule.from_md_m == 500.0
    assert rule.to_md_m == 1500.0


def test_geometric_rule_uses_plan_overfill():
    rule = BackfillRule(from_md_m=0.0, to_md_m=3000.0, strategy=GeometricStrategy())
    plan = create_plan([rule], overfill=0.1)
    assert volume_for_stand_m3(plan, STAND_M, 1000.0, 0.02) == pytest.approx(0.02 * 27.0 * 1.1)


@pytest.mark.parametrize("code,kind", [(0, "geometric"), (1, "fixed_per_stand"), (2, "per_meter")])
def test_legacy_strategy_codes(code, kind):
    rule = BackfillRule.model_validate({
        "from_md_m": 0.0,
        "to_md_m": 1000.0,
        "strategy": code,
        "fixed_volume_per_stand_m3": 0.5,
        "volume_per_meter_m3_per_m": 0.02,
    })
    assert rule.strategy.kind == kind
    if kind == "fixed_per_stand":
        assert rule.strategy.volume_m3 == 0.5
    if kind == "per_meter":
        assert rule.strategy.rate_m3_per_m == 0.02


@pytest.mark.parametrize("raw", [7, -1, "mystery", {"kind": "bucket"}])
def test_unknown_strategy_decodes_to_geometric(raw):
    rule = BackfillRule.model_validate({"from_md_m": 0.0, "to_md_m": 1000.0, "strategy": raw})
    assert isinstance(rule.strategy, GeometricStrategy)


def test_decode_strategy_passes_tagged_payloads():
    payload = {"kind": "per_meter", "rate_m3_per_m": 0.03}
    assert decode_strategy(payload) == payload
    strategy = FixedPerStandStrategy(volume_m3=0.2)
    assert decode_strategy(strategy) is strategy


def test_effective_density():
    override = BackfillRule(from_md_m=0.0, to_md_m=1000.0, density_override_kgm3=1350.0)
    plain = BackfillRule(from_md_m=0.0, to_md_m=1000.0)
    plan = create_plan([override])
    assert effective_density_kgm3(plan, override) == 1350.0
    assert effective_density_kgm3(plan, plain) == 1200.0
    assert effective_density_kgm3(plan, None) == 1200.0


def test_plan_links_rules():
    plan = create_plan([BackfillRule(from_md_m=0.0, to_md_m=100.0)])
    assert plan.rules[0].plan_id == plan.id


def test_stand_schedule():
    rule = BackfillRule(name="Shallow", from_md_m=0.0, to_md_m=30.0, strategy=FixedPerStandStrategy(volume_m3=0.1),
                        density_override_kgm3=1000.0)
    plan = create_plan([rule], overfill=0.0)
    schedule = stand_schedule(plan, 100.0, 0.0, 27.0, 0.02)

    assert [s.stand_length_m for s in schedule] == pytest.approx([27.0, 27.0, 27.0, 19.0])
    assert [s.top_md_m for s in schedule] == pytest.approx([73.0, 46.0, 19.0, 0.0])
    assert schedule[0].strategy == "default"
    assert schedule[0].volume_m3 == pytest.approx(0.54)
    assert schedule[0].density_kgm3 == 1200.0
    assert schedule[2].strategy == "fixed_per_stand"
    assert schedule[2].rule_name == "Shallow"
    assert schedule[2].density_kgm3 == 1000.0
    assert schedule[-1].cumulative_m3 == pytest.approx(0.54 + 0.54 + 0.1 + 0.1)
