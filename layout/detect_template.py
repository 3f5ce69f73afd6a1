from __future__ import annotations
import logging
from typing import Dict, Iterable, Optional, Tuple

from layout.classes import StatementTemplate
from utils import contains_phrase

log = logging.getLogger(__name__)


def _count_hits(text: str, indicators: Iterable[str]) -> int:
    return sum(1 for p in indicators if contains_phrase(text, p))


def detect_template(text: str,
                    templates: Dict[str, StatementTemplate],
                    fallback: str,
                    min_hits: int = 3) -> Tuple[str, int, str]:
    """
    Returns (template_name, hits, method) where method is 'calibrated' when a
    zone-table template matched at least `min_hits` indicators, else 'adaptive'.
    The best match must be a registered template; ties go to registry order.
    """
    best: Tuple[Optional[str], int] = (None, 0)
    for name, tpl in templates.items():
        if name == fallback:
            continue
        hits = _count_hits(text, tpl.indicators)
        if hits > best[1]:
            best = (name, hits)

    name, hits = best
    if name is not None and hits >= min_hits:
        tpl = templates[name]
        method = "calibrated" if tpl.calibrated else "adaptive"
        log.info("template %s detected (%d/%d indicators, %s)", name, hits, len(tpl.indicators), method)
        return name, hits, method

    log.info("no template reached %d indicators (best %s=%d); using %s", min_hits, name, hits, fallback)
    return fallback, hits, "adaptive"
