# wellcontrol/services/hydraulics/backfill.py
"""
Backfill volume per pulled stand.

Rules are scanned in stored order and the first one whose inclusive MD range
contains the stand-top MD wins, overlapping ranges included. Without a
matching rule the plan's geometric volume with overfill is used.
"""
import logging
from typing import List, Optional

from wellcontrol.schemas.backfill import (
    BackfillPlan,
    BackfillRule,
    FixedPerStandStrategy,
    GeometricStrategy,
    PerMeterStrategy,
    StandBackfill,
)
from wellcontrol.services.hydraulics.swab_surge import march_depths

logger = logging.getLogger(__name__)


def geometric_volume_m3(pulled_length_m: float, annulus_area_m2: float) -> float:
    return max(pulled_length_m, 0.0) * max(annulus_area_m2, 0.0)


def recommended_volume_m3(plan: BackfillPlan, pulled_length_m: float, annulus_area_m2: float) -> float:
    """Geometric volume scaled by (1 + overfill)."""
    return geometric_volume_m3(pulled_length_m, annulus_area_m2) * (1.0 + plan.overfill_frac)


def rule_for_md(plan: BackfillPlan, md_m: float) -> Optional[BackfillRule]:
    for rule in plan.rules:
        if rule.contains(md_m):
            return rule
    return None


def rule_volume_m3(rule: BackfillRule, plan: BackfillPlan, stand_length_m: float, annulus_area_m2: float) -> float:
    strategy = rule.strategy
    if isinstance(strategy, GeometricStrategy):
        return recommended_volume_m3(plan, stand_length_m, annulus_area_m2)
    if isinstance(strategy, FixedPerStandStrategy):
        return strategy.volume_m3
    if isinstance(strategy, PerMeterStrategy):
        return max(stand_length_m, 0.0) * max(strategy.rate_m3_per_m, 0.0)
    raise TypeError(f"Unsupported backfill strategy: {type(strategy).__name__}")


def volume_for_stand_m3(plan: BackfillPlan, stand_length_m: float, md_top_m: float, annulus_area_m2: float) -> float:
    """
    Volume to pump for one stand.

    ``md_top_m`` is the MD at the top of the stand before it is pulled and
    is only used for rule matching.
    """
    rule = rule_for_md(plan, md_top_m)
    if rule is None:
        return recommended_volume_m3(plan, stand_length_m, annulus_area_m2)
    return rule_volume_m3(rule, plan, stand_length_m, annulus_area_m2)


def effective_density_kgm3(plan: BackfillPlan, rule: Optional[BackfillRule] = None) -> float:
    """Rule density override, else the plan's default fluid density."""
    if rule is not None and rule.density_override_kgm3 is not None:
        return rule.density_override_kgm3
    return plan.fluid_density_kgm3


def stand_schedule(plan: BackfillPlan, start_md_m: float, end_md_m: float, stand_length_m: float,
                   annulus_area_m2: float) -> List[StandBackfill]:
    """
    Backfill for each stand pulled between two bit depths.

    Each stand's rule is matched at its top MD, i.e. the bit depth after the
    stand has been pulled.
    """
    depths = march_depths(start_md_m, end_md_m, stand_length_m)
    schedule: List[StandBackfill] = []
    cumulative = 0.0
    for before, after in zip(depths[:-1], depths[1:]):
        length = abs(before - after)
        top = min(before, after)
        rule = rule_for_md(plan, top)
        volume = (rule_volume_m3(rule, plan, length, annulus_area_m2) if rule is not None
                  else recommended_volume_m3(plan, length, annulus_area_m2))
        cumulative += volume
        schedule.append(StandBackfill(
            top_md_m=top,
            stand_length_m=length,
            annulus_area_m2=annulus_area_m2,
            volume_m3=volume,
            cumulative_m3=cumulative,
            density_kgm3=effective_density_kgm3(plan, rule),
            strategy=rule.strategy.kind if rule is not None else "default",
            rule_id=rule.id if rule is not None else None,
            rule_name=rule.name if rule is not None else None,
        ))
    logger.debug(f"Backfill schedule: {len(schedule)} stands, {cumulative:.3f} m³")
    return schedule
