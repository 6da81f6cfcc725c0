# wellcontrol/services/hydraulics/depth_mapper.py
"""
Measured depth to true vertical depth conversion over a survey or plan.

A DepthMapper is built once and then only queried; the backing arrays are
marked read-only so one instance can be shared across simulations.
"""
import logging
import math
from typing import Iterable, Sequence, Union

import numpy as np

from wellcontrol.schemas.survey import DirectionalPlanStation, Station, SurveyStation
from wellcontrol.utils.conversions import INTERP_EPSILON

logger = logging.getLogger(__name__)

StationLike = Union[Station, SurveyStation, DirectionalPlanStation]


def _strictly_increasing(pairs):
    """Keep pairs whose MD exceeds the last kept MD (first wins)."""
    md_out, tvd_out = [], []
    for md, tvd in pairs:
        if md_out and not md > md_out[-1]:
            continue
        md_out.append(float(md))
        tvd_out.append(float(tvd))
    return md_out, tvd_out


class DepthMapper:
    """
    Piecewise-linear MD → TVD lookup.

    Queries clamp to the first/last station instead of extrapolating, and an
    empty table passes the queried MD straight through.
    """

    def __init__(self, md: Sequence[float], tvd: Sequence[float]):
        self._md = np.asarray(md, dtype=float)
        self._tvd = np.asarray(tvd, dtype=float)
        self._md.setflags(write=False)
        self._tvd.setflags(write=False)

    @classmethod
    def from_stations(cls, stations: Iterable[StationLike]) -> "DepthMapper":
        points = []
        for s in stations:
            st = s if isinstance(s, Station) else s.to_station()
            points.append((st.md, st.effective_tvd))
        # stable sort keeps the first of any duplicated MD
        points.sort(key=lambda p: p[0])
        md, tvd = _strictly_increasing(points)
        dropped = len(points) - len(md)
        if dropped:
            logger.debug(f"DepthMapper dropped {dropped} duplicate station(s)")
        return cls(md, tvd)

    @classmethod
    def from_arrays(cls, md: Sequence[float], tvd: Sequence[float]) -> "DepthMapper":
        """Build from arrays already sorted by MD; out-of-order entries are dropped."""
        if len(md) != len(tvd):
            raise ValueError(f"md and tvd must have the same length ({len(md)} != {len(tvd)})")
        kept_md, kept_tvd = _strictly_increasing(zip(md, tvd))
        return cls(kept_md, kept_tvd)

    @property
    def md(self) -> np.ndarray:
        return self._md

    @property
    def tvd(self) -> np.ndarray:
        return self._tvd

    @property
    def is_empty(self) -> bool:
        return self._md.size == 0

    def __len__(self) -> int:
        return int(self._md.size)

    def tvd_at(self, md: float) -> float:
        md_arr = self._md
        n = md_arr.size
        if n == 0 or math.isnan(md):
            return md
        if md <= md_arr[0]:
            return float(self._tvd[0])
        if md >= md_arr[n - 1]:
            return float(self._tvd[n - 1])

        # first index with md_arr[hi] > md
        hi = int(np.searchsorted(md_arr, md, side="right"))
        lo = hi - 1
        m0, m1 = md_arr[lo], md_arr[hi]
        t = (md - m0) / max(m1 - m0, INTERP_EPSILON)
        return float(self._tvd[lo] + t * (self._tvd[hi] - self._tvd[lo]))

    def tvd_many(self, mds: Sequence[float]) -> np.ndarray:
        """Vectorised tvd_at for a batch of measured depths."""
        q = np.asarray(mds, dtype=float)
        if self._md.size == 0:
            return q.copy()
        # np.interp clamps to the end values outside the table
        return np.interp(q, self._md, self._tvd)
