"""
Column assignment: every text run lands in exactly one zone.

Each zone a run overlaps is scored:
  + membership_score                      always
  + alignment_bonus                       right-aligned zone and the run's right edge
                                          within right_align_fraction * width of the zone's right edge
  + content_bonus                         run text passes the zone's content validator
  - center_penalty * normalised distance  left-aligned zone, distance of run center to zone center
Highest score wins; ties go to the nearest zone center.

A run may only land in the amount zone if it passes the strict amount filter.
Runs failing it fall back to the best non-amount zone, so check and
reference numbers are never counted as money.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from layout.classes import ColumnZone, ExtractionSettings, Row, TextRun
from layout.zones import CONTENT_VALIDATORS, amount_zone_index
from utils import is_amount_text, is_date, is_integer_text, parse_amount

log = logging.getLogger(__name__)

PLACEHOLDER = "N/A"


def is_strict_amount(run: TextRun, amount_zone: Optional[ColumnZone], settings: ExtractionSettings) -> bool:
    if amount_zone is None or not amount_zone.overlaps(run):
        return False
    t = run.text.strip()
    if len(t) < settings.min_amount_length or not is_amount_text(t):
        return False
    if is_date(t):
        return False
    # bare short integers are check / reference numbers
    if is_integer_text(t) and len(t) <= settings.reference_max_digits:
        return False
    return parse_amount(t) > settings.materiality_floor


def score_zone(run: TextRun, zone: ColumnZone, settings: ExtractionSettings) -> float:
    score = settings.membership_score
    if zone.align == "right":
        if abs(zone.x_end - run.right) <= settings.right_align_fraction * zone.width:
            score += settings.alignment_bonus
    else:
        dist = abs(run.center_x - zone.center) / (zone.width / 2.0)
        score -= settings.center_penalty * min(dist, 2.0)
    check = CONTENT_VALIDATORS.get(zone.content)
    if check is not None and check(run.text):
        score += settings.content_bonus
    return score


def _nearest(run: TextRun, zones: List[ColumnZone]) -> Optional[ColumnZone]:
    if not zones:
        return None
    return min(zones, key=lambda z: (abs(run.center_x - z.center), z.index))


def assign_run(run: TextRun, zones: List[ColumnZone], settings: ExtractionSettings) -> Optional[int]:
    if not zones:
        return None
    amount_idx = amount_zone_index(zones)
    amount_zone = zones[amount_idx] if amount_idx is not None else None
    eligible = list(zones)
    if amount_zone is not None and not is_strict_amount(run, amount_zone, settings):
        eligible = [z for z in zones if z.index != amount_idx]
        if not eligible:
            return None

    candidates = [z for z in eligible if z.overlaps(run)]
    if not candidates:
        z = _nearest(run, eligible)
        return z.index if z is not None else None

    best = max(
        candidates,
        key=lambda z: (round(score_zone(run, z, settings), 9), -abs(run.center_x - z.center), -z.index),
    )
    return best.index


def assign_rows(rows: List[Row],
                zones_by_page: Dict[int, List[ColumnZone]],
                settings: ExtractionSettings,
                backfill: bool = True) -> Dict[int, List[TextRun]]:
    """
    Fill row.cells for every non-noise row and return runs per zone index.
    Rows without an amount cell get an 'N/A' placeholder there.
    """
    by_zone: Dict[int, List[TextRun]] = {}
    placeholders = 0
    for row in rows:
        row.cells = {}
        if row.noise:
            continue
        zones = zones_by_page.get(row.page) or zones_by_page.get(0) or []
        for run in row.runs:
            idx = assign_run(run, zones, settings)
            if idx is None:
                continue
            row.cells.setdefault(idx, []).append(run)
            by_zone.setdefault(idx, []).append(run)

        amount_idx = amount_zone_index(zones)
        if backfill and amount_idx is not None and amount_idx not in row.cells:
            z = zones[amount_idx]
            row.cells[amount_idx] = [TextRun(PLACEHOLDER, z.x_start, row.y_start, 0.0, 0.0, page=row.page)]
            placeholders += 1

    log.debug("assigned %d rows, %d amount placeholder(s)", len(rows), placeholders)
    return by_zone
