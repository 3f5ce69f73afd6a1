from __future__ import annotations
from typing import List, Optional
import re

import numpy as np

from constants import ROW_TOLERANCE_RANGE
from layout.classes import TextRun, Row
from utils import normalize_text

_LEAD_GROUP_RE = re.compile(r"^\d{1,3}(?: \d{3})*$")
_THOUSANDS_RE = re.compile(r"^\d{3}$")


def _run_key(r: TextRun):
    return (r.y, r.x, r.text, r.width)


def normalize_runs(runs: List[TextRun]) -> List[TextRun]:
    """Strip / fold whitespace and drop empty runs."""
    out = []
    for r in runs:
        t = normalize_text(r.text)
        if not t:
            continue
        if t != r.text:
            r = TextRun(t, r.x, r.y, r.width, r.height, r.font_size, r.font_name, r.page)
        out.append(r)
    return out


def default_row_tolerance(runs: List[TextRun]) -> float:
    heights = [r.height for r in runs if r.height > 0]
    med_h = float(np.median(heights)) if heights else 10.0
    lo, hi = ROW_TOLERANCE_RANGE
    return float(min(hi, max(lo, 0.55 * med_h)))


def merge_numeric_fragments(runs: List[TextRun], gap_fraction: float = 0.6) -> List[TextRun]:
    """
    Glue thousands groups that the PDF emitted as separate runs
    ('78' '615' '440' -> '78 615 440'). Input must be one row, sorted by x.
    """
    if not runs:
        return []
    out = [runs[0]]
    for r in runs[1:]:
        prev = out[-1]
        size = prev.font_size or prev.height or 10.0
        gap = r.x - prev.right
        if (_LEAD_GROUP_RE.match(prev.text) and _THOUSANDS_RE.match(r.text)
                and -1.0 <= gap <= gap_fraction * size):
            out[-1] = TextRun(
                text=f"{prev.text} {r.text}",
                x=prev.x,
                y=min(prev.y, r.y),
                width=r.right - prev.x,
                height=max(prev.height, r.height),
                font_size=prev.font_size,
                font_name=prev.font_name,
                page=prev.page,
            )
        else:
            out.append(r)
    return out


def group_rows(runs: List[TextRun],
               tolerance: Optional[float] = None,
               merge_gap: Optional[float] = 0.6) -> List[Row]:
    """
    Group runs into horizontal bands, top to bottom.
    Runs are sorted by (y, x); a new row starts when a run's y is more than
    `tolerance` away from the running mean y of the current row.
    """
    runs = normalize_runs(runs)
    if not runs:
        return []
    tol = default_row_tolerance(runs) if tolerance is None else float(tolerance)

    ordered = sorted(runs, key=_run_key)
    bands: List[List[TextRun]] = []
    current: List[TextRun] = []
    mean_y = 0.0
    for r in ordered:
        if current and abs(r.y - mean_y) > tol:
            bands.append(current)
            current = []
        current.append(r)
        mean_y = float(np.mean([c.y for c in current]))
    if current:
        bands.append(current)

    rows: List[Row] = []
    for idx, band in enumerate(bands):
        members = sorted(band, key=lambda r: (r.x, r.y, r.text, r.width))
        if merge_gap is not None:
            members = merge_numeric_fragments(members, merge_gap)
        rows.append(Row(
            y_start=min(r.y for r in members),
            y_end=max(r.y + r.height for r in members),
            index=idx,
            runs=members,
            page=members[0].page,
        ))
    return rows


def rows_to_lines(rows: List[Row]) -> List[str]:
    return [row.text for row in rows]
