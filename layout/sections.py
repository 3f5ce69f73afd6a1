from __future__ import annotations
import logging
import re
from typing import List, Optional

from constants import DENYLIST_PATTERNS, DATE_SEARCH_RE
from lang import HEADER_KEYWORDS
from layout.classes import Row, Section, SectionSpec, StatementTemplate
from utils import contains_phrase, strip_accents

log = logging.getLogger(__name__)

_DENY = [re.compile(p, re.IGNORECASE) for p in DENYLIST_PATTERNS]


def is_denylisted(text: str) -> bool:
    t = strip_accents(text or "")
    return any(p.search(t) for p in _DENY)


def is_header_row(row: Row) -> bool:
    """Column-header line: two or more header words and no date."""
    t = strip_accents(row.text).lower()
    if DATE_SEARCH_RE.search(t):
        return False
    hits = {k for k in HEADER_KEYWORDS if re.search(rf"\b{re.escape(strip_accents(k))}\b", t)}
    return len(hits) >= 2


def _matches_any(text: str, phrases) -> bool:
    return any(contains_phrase(text, p) for p in phrases)


def _excluded(text: str, spec: SectionSpec) -> bool:
    t = strip_accents(text or "")
    return any(re.search(p, t, re.IGNORECASE) for p in spec.exclude)


def _is_start(row: Row, spec: SectionSpec) -> bool:
    return _matches_any(row.text, spec.start_anchors) and not _excluded(row.text, spec)


def mark_noise(rows: List[Row], template: StatementTemplate) -> int:
    """
    Flag rows that must not feed column distribution: totals, column headers,
    section title lines, known page furniture. Returns the number flagged.
    """
    flagged = 0
    for row in rows:
        title = any(_is_start(row, s) and not s.anchor_is_data for s in template.sections)
        row.noise = title or is_denylisted(row.text) or is_header_row(row)
        flagged += int(row.noise)
    return flagged


def segment_sections(rows: List[Row], template: StatementTemplate) -> List[Section]:
    """
    Slice rows into the template's sections.
    A section runs from its first start-anchor row up to its end anchor,
    the next section's start, or the end of the document, whichever comes first.
    """
    starts = []
    for spec in template.sections:
        idx = next((i for i, r in enumerate(rows) if _is_start(r, spec)), None)
        if idx is None:
            log.debug("section %s: no start anchor", spec.kind)
            continue
        starts.append((idx, spec))
    starts.sort(key=lambda s: (s[0], template.sections.index(s[1])))

    sections: List[Section] = []
    for n, (start, spec) in enumerate(starts):
        limit = starts[n + 1][0] if n + 1 < len(starts) else len(rows)
        if limit <= start:
            # two anchors on one row; the later spec gets nothing
            limit = start + 1
        end_idx: Optional[int] = None
        if spec.end_anchors:
            end_idx = next(
                (i for i in range(start + 1, limit) if _matches_any(rows[i].text, spec.end_anchors)),
                None,
            )
        stop = end_idx if end_idx is not None else limit
        first = start if spec.anchor_is_data else start + 1
        body = rows[first:stop]

        header = next((r for r in body if is_header_row(r)), None)
        data = [r for r in body if not r.noise and not is_header_row(r)]
        last = rows[stop - 1] if stop - 1 >= start else rows[start]
        sections.append(Section(
            kind=spec.kind,
            title=spec.title,
            start_y=rows[start].y_start,
            end_y=(rows[end_idx].y_end if end_idx is not None else last.y_end),
            rows=data,
            anchor_row=rows[start],
            end_row=rows[end_idx] if end_idx is not None else None,
            header_row=header,
        ))
        log.info("section %s: rows %d..%d, %d data row(s)", spec.kind, start, stop, len(data))
    return sections
