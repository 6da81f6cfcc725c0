# wellcontrol/services/hydraulics/annulus.py
"""
Annulus geometry lookups over project sections.
"""
from typing import Dict, Optional, Sequence

from wellcontrol.schemas.geometry import AnnulusGeometry, AnnulusSection, DrillStringSection
from wellcontrol.utils.conversions import circle_area


def section_at(md: float, sections: Sequence[AnnulusSection]) -> Optional[AnnulusSection]:
    """First section whose [top, bottom] contains md."""
    for s in sections:
        if s.contains(md):
            return s
    return None


def string_at(md: float, strings: Sequence[DrillStringSection]) -> Optional[DrillStringSection]:
    for d in strings:
        if d.contains(md):
            return d
    return None


def geometry_at(
    md: float,
    sections: Sequence[AnnulusSection],
    strings: Sequence[DrillStringSection] = (),
    fallback: Optional[AnnulusGeometry] = None,
) -> AnnulusGeometry:
    """
    Local annulus geometry at an MD.

    The pipe comes from the drill string covering md, else the section's own
    string OD. Outside every section the fallback (or an all-zero, degenerate
    geometry) is returned.
    """
    section = section_at(md, sections)
    if section is None:
        return fallback if fallback is not None else AnnulusGeometry()
    ds = string_at(md, strings)
    if ds is not None:
        return AnnulusGeometry(pipe_od_m=ds.outer_diameter_m, pipe_id_m=ds.inner_diameter_m,
                               hole_id_m=section.inner_diameter_m)
    return section.geometry()


def effective_annular_volume(section: AnnulusSection, strings: Sequence[DrillStringSection]) -> float:
    """
    Annular volume of a section with the overlapping drill string ODs removed.

    The section is split at every string boundary inside it; each slice uses
    the OD of the first string covering it, or open hole where none does.
    """
    top, bottom = section.top_md_m, section.bottom_md_m
    boundaries = {top, bottom}
    for d in strings:
        if d.bottom_md_m > top and d.top_md_m < bottom:
            boundaries.add(max(d.top_md_m, top))
            boundaries.add(min(d.bottom_md_m, bottom))
    edges = sorted(boundaries)
    if len(edges) < 2:
        return 0.0

    total = 0.0
    for t, b in zip(edges[:-1], edges[1:]):
        if b <= t:
            continue
        od = next((d.outer_diameter_m for d in strings if d.top_md_m <= t and d.bottom_md_m >= b), 0.0)
        area = max(0.0, circle_area(section.inner_diameter_m) - circle_area(od))
        total += area * (b - t)
    return total


def interval_overlap_fraction(top_md: float, bottom_md: float, section: AnnulusSection) -> float:
    """Fraction of a section's length lying inside [top_md, bottom_md]."""
    if section.length_m <= 0:
        return 0.0
    overlap = min(bottom_md, section.bottom_md_m) - max(top_md, section.top_md_m)
    if overlap <= 0:
        return 0.0
    return overlap / section.length_m


def interval_volumes(
    top_md: float,
    bottom_md: float,
    sections: Sequence[AnnulusSection],
    strings: Sequence[DrillStringSection] = (),
) -> Dict[str, float]:
    """Annular volume between two MDs split into cased and open-hole parts."""
    top, bottom = min(top_md, bottom_md), max(top_md, bottom_md)
    cased = 0.0
    open_hole = 0.0
    for s in sections:
        fraction = interval_overlap_fraction(top, bottom, s)
        if fraction <= 0:
            continue
        volume = effective_annular_volume(s, strings) * fraction
        if s.cased:
            cased += volume
        else:
            open_hole += volume
    return {"cased_m3": cased, "open_hole_m3": open_hole, "total_m3": cased + open_hole}
