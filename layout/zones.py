from __future__ import annotations
import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from layout.classes import ColumnZone, ExtractionSettings, StatementTemplate, TextRun
from layout.clustering import detect_natural_separations, find_optimal_clusters, kmeans_1d
from utils import is_amount_text, is_date, is_integer_text

log = logging.getLogger(__name__)


# ---------- Content validators ----------
def _valid_date(t: str) -> bool:
    return is_date(t)

def _valid_number(t: str) -> bool:
    return is_integer_text(t)

def _valid_amount(t: str) -> bool:
    return is_amount_text(t)

def _valid_text(t: str) -> bool:
    return bool((t or "").strip())

CONTENT_VALIDATORS = {
    "date": _valid_date,
    "number": _valid_number,
    "amount": _valid_amount,
    "text": _valid_text,
}


def classify_content(text: str) -> str:
    if is_date(text):
        return "date"
    if is_integer_text(text):
        return "number"
    if is_amount_text(text):
        return "amount"
    return "text"


# ---------- Calibrated ----------
def calibrated_zones(template: StatementTemplate, page_width: float) -> List[ColumnZone]:
    """Scale the template's zone table from its reference width to this page."""
    scale = (float(page_width) / template.reference_width) if template.reference_width else 1.0
    zones = [
        ColumnZone(
            x_start=spec.x_min * scale,
            x_end=spec.x_max * scale,
            index=i,
            name=spec.name,
            content=spec.content,
            align=spec.align,
        )
        for i, spec in enumerate(template.zones)
    ]
    log.debug("calibrated zones for %s at scale %.3f", template.name, scale)
    return adjust_boundaries(zones, page_width=None)


# ---------- Adaptive ----------
def adjust_boundaries(zones: List[ColumnZone], page_width: Optional[float]) -> List[ColumnZone]:
    """
    Sort zones by x, split overlaps at their midpoint and re-index.
    With a page width the outer zones are stretched to the page edges.
    """
    zs = sorted(zones, key=lambda z: (z.x_start, z.x_end))
    starts = [z.x_start for z in zs]
    ends = [z.x_end for z in zs]
    for i in range(len(zs) - 1):
        if ends[i] > starts[i + 1]:
            mid = (ends[i] + starts[i + 1]) / 2.0
            ends[i] = mid
            starts[i + 1] = mid
    if page_width is not None and zs:
        starts[0] = 0.0
        ends[-1] = max(ends[-1], float(page_width))
    return [
        ColumnZone(starts[i], ends[i], i, z.name or f"COL{i}", z.content, z.align)
        for i, z in enumerate(zs)
    ]


def _infer_zone(members: List[TextRun]) -> tuple:
    kinds = [classify_content(r.text) for r in members]
    counts = {k: kinds.count(k) for k in ("date", "number", "amount", "text")}
    content = max(("date", "amount", "number", "text"), key=lambda k: (counts[k], k == "text"))
    # amounts with thousands groups read as "amount"; long bare integers as "number"
    if content == "number" and counts["amount"]:
        content = "amount"
    align = "left"
    if len(members) >= 2:
        lefts = np.array([r.x for r in members], dtype=float)
        rights = np.array([r.right for r in members], dtype=float)
        if float(np.std(rights)) + 0.5 < float(np.std(lefts)):
            align = "right"
    return content, align


def estimate_zone_count(positions: List[float], settings: ExtractionSettings) -> int:
    gap_k = len(detect_natural_separations(positions, settings.column_gap_threshold)) + 1
    return find_optimal_clusters(positions, max_k=min(settings.max_k, gap_k),
                                 max_iterations=settings.kmeans_max_iterations)


def adaptive_zones(runs: List[TextRun],
                   page_width: float,
                   settings: ExtractionSettings,
                   k: Optional[int] = None) -> List[ColumnZone]:
    """Cluster distinct run start positions into ordered zones."""
    if not runs:
        return []
    positions = sorted({round(r.x, 1) for r in runs})
    if k is None:
        k = estimate_zone_count(positions, settings)
    result = kmeans_1d(positions, k, settings.kmeans_max_iterations)

    label_of: Dict[float, int] = {}
    for ci, members in enumerate(result.clusters):
        for p in members:
            label_of[p] = ci

    by_cluster: Dict[int, List[TextRun]] = {i: [] for i in range(len(result.clusters))}
    for r in runs:
        by_cluster[label_of[round(r.x, 1)]].append(r)

    zones = []
    for ci, members in by_cluster.items():
        if not members:
            continue
        content, align = _infer_zone(members)
        zones.append(ColumnZone(
            x_start=min(r.x for r in members),
            x_end=max(r.right for r in members),
            index=ci,
            name=f"COL{ci}",
            content=content,
            align=align,
        ))
    zones = adjust_boundaries(zones, page_width)
    log.info("adaptive zones: k=%d after %d k-means iteration(s)", len(zones), result.iterations)
    return zones


def amount_zone_index(zones: List[ColumnZone]) -> Optional[int]:
    """Rightmost zone whose declared content is 'amount'."""
    idx = [z.index for z in zones if z.content == "amount"]
    return max(idx) if idx else None


# ---------- Diagnostics ----------
def calibration_report(zones: List[ColumnZone], assigned: Dict[int, List[TextRun]]) -> pd.DataFrame:
    """
    Per zone: how far observed runs drift from the zone and what share of
    them pass the zone's content validator.
    """
    records = []
    for z in zones:
        members = [r for r in assigned.get(z.index, []) if r.text != "N/A"]
        check = CONTENT_VALIDATORS.get(z.content, _valid_text)
        valid = sum(1 for r in members if check(r.text))
        obs_start = min((r.x for r in members), default=None)
        obs_end = max((r.right for r in members), default=None)
        drift = 0.0
        if obs_start is not None:
            drift = max(0.0, z.x_start - obs_start) + max(0.0, obs_end - z.x_end)
        records.append({
            "zone": z.index,
            "name": z.name,
            "content": z.content,
            "x_start": round(z.x_start, 2),
            "x_end": round(z.x_end, 2),
            "observed_start": None if obs_start is None else round(obs_start, 2),
            "observed_end": None if obs_end is None else round(obs_end, 2),
            "drift": round(drift, 2),
            "runs": len(members),
            "content_rate": round(valid / len(members), 3) if members else 1.0,
        })
    df = pd.DataFrame.from_records(records)
    # empty zones have no observed extent; keep them None, not NaN
    return df.astype(object).where(df.notna(), None)
