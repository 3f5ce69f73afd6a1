# pipeline.py
# Geometric strategy, one document at a time:
#   TemplateDetect -> RowGrouping -> SectionSegmentation -> {Calibrated|Adaptive}Zones
#   -> ColumnAssignment -> FieldParsing -> Validation
# Rows are grouped and noise-flagged before zones are built so that totals,
# titles and header lines never feed the adaptive clustering.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from errors import ExtractionFailure
from extract.data_extract import merge_pages
from extract.unified_lines import group_rows
from layout.assign import assign_rows
from layout.classes import ColumnZone, ExtractionSettings, PageRuns, Row, Section, StatementTemplate, TextRun
from layout.detect_template import detect_template
from layout.sections import mark_noise, segment_sections
from layout.zones import adaptive_zones, calibrated_zones, calibration_report
from mapping import FALLBACK_TEMPLATE, STATEMENT_TEMPLATES
from parsers.positional import (
    parse_checks, parse_closing_balance, parse_declared_total, parse_deposits,
    parse_facilities, parse_opening_balance, parse_report_date, parse_unpaid,
)
from parsers.records import OpeningBalance, StatementExtractionResult
from validator import assemble_result

log = logging.getLogger(__name__)

TABULAR_SECTIONS = ("deposits", "checks")


@dataclass
class GeometricRun:
    result: StatementExtractionResult
    template: str
    method: str
    zones_by_page: Dict[int, List[ColumnZone]]
    diagnostics: Dict[str, Any] = field(default_factory=dict)


def _zone_dicts(zones: List[ColumnZone]) -> List[Dict[str, Any]]:
    return [
        {"index": z.index, "name": z.name, "x_start": round(z.x_start, 2), "x_end": round(z.x_end, 2),
         "content": z.content, "align": z.align}
        for z in zones
    ]


def _state(old: str, new: str) -> str:
    log.info("state %s -> %s", old, new)
    return new


class GeometricExtractor:
    """
    Stateless service: settings and the template registry are fixed at construction,
    every call to run()/extract() works on its own rows and zones.
    """

    def __init__(self,
                 settings: Optional[ExtractionSettings] = None,
                 templates: Optional[Dict[str, StatementTemplate]] = None,
                 fallback: str = FALLBACK_TEMPLATE):
        self.settings = settings or ExtractionSettings()
        self.templates = dict(templates or STATEMENT_TEMPLATES)
        if fallback not in self.templates:
            raise ValueError(f"fallback template {fallback!r} is not registered")
        self.fallback = fallback

    # ---------- template ----------
    def detect(self, pages: Sequence[PageRuns]) -> Tuple[StatementTemplate, str, int]:
        text = "\n".join(r.text for p in pages for r in p.runs)
        name, hits, method = detect_template(text, self.templates, self.fallback, self.settings.template_min_hits)
        return self.templates[name], method, hits

    def settings_for(self, template: StatementTemplate) -> ExtractionSettings:
        return self.settings.with_overrides(**template.settings_overrides)

    # ---------- zones ----------
    def _zones(self, template: StatementTemplate, pages: Sequence[PageRuns], rows: List[Row],
               sections: List[Section], settings: ExtractionSettings) -> Dict[int, List[ColumnZone]]:
        widths = {p.page_number: p.width for p in pages}
        if template.calibrated:
            by_page = {pn: calibrated_zones(template, w) for pn, w in widths.items()}
            by_page[0] = by_page[min(widths)]
            return by_page

        tabular = [r for s in sections if s.kind in TABULAR_SECTIONS for row in s.rows for r in row.runs]
        if not tabular:
            tabular = [r for row in rows if not row.noise for r in row.runs]
        zones = adaptive_zones(tabular, max(widths.values()), settings)
        return {0: zones}

    # ---------- main ----------
    def run(self, pages: Sequence[PageRuns], template: Optional[StatementTemplate] = None) -> GeometricRun:
        state = "Idle"
        if not pages or not any(p.runs for p in pages):
            raise ExtractionFailure(None, "no text content")

        state = _state(state, "TemplateDetect")
        hits = None
        if template is None:
            template, method, hits = self.detect(pages)
        else:
            method = "calibrated" if template.calibrated else "adaptive"
        settings = self.settings_for(template)

        state = _state(state, "RowGrouping")
        runs: List[TextRun] = merge_pages(list(pages))
        rows = group_rows(runs, settings.row_tolerance, settings.numeric_merge_gap)
        noise = mark_noise(rows, template)

        state = _state(state, "SectionSegmentation")
        sections = segment_sections(rows, template)
        by_kind = {s.kind: s for s in sections}

        state = _state(state, "CalibratedZones" if template.calibrated else "AdaptiveZones")
        zones_by_page = self._zones(template, pages, rows, sections, settings)

        state = _state(state, "ColumnAssignment")
        assigned = assign_rows(rows, zones_by_page, settings)

        state = _state(state, "FieldParsing")
        warnings: List[str] = []

        def zones_for(kind: str) -> List[ColumnZone]:
            s = by_kind.get(kind)
            page = s.anchor_row.page if s is not None and s.anchor_row is not None else 0
            return zones_by_page.get(page) or zones_by_page.get(0) or []

        opening = parse_opening_balance(by_kind.get("opening")) or OpeningBalance()
        deposits = parse_deposits(by_kind.get("deposits"), zones_for("deposits"), template, settings)
        checks = parse_checks(by_kind.get("checks"), zones_for("checks"), template, settings)
        facilities, declared_fac = parse_facilities(by_kind.get("facilities"))
        unpaid = parse_unpaid(by_kind.get("unpaid"), template)

        closing = parse_closing_balance(rows, template)
        if closing is None:
            warnings.append("Closing balance not found")
            closing = 0
        for kind in TABULAR_SECTIONS:
            if kind not in by_kind:
                warnings.append(f"Section '{kind}' not found")
        declared = {
            kind: parse_declared_total(by_kind[kind].end_row, template.currency_units)
            for kind in TABULAR_SECTIONS if kind in by_kind
        }

        state = _state(state, "Validation")
        result = assemble_result(
            report_date=parse_report_date(rows, template),
            opening=opening,
            deposits=deposits,
            checks=checks,
            closing=closing,
            facilities=facilities,
            unpaid=unpaid,
            declared_facilities=declared_fac,
            declared_totals=declared,
            warnings=warnings,
            tolerance=settings.validation_tolerance,
        )

        first_zones = zones_by_page.get(0) or []
        diagnostics: Dict[str, Any] = {
            "template": template.name,
            "method": method,
            "indicatorHits": hits,
            "pages": len(pages),
            "rows": len(rows),
            "noiseRows": noise,
            "sections": {s.kind: len(s.rows) for s in sections},
            "zones": _zone_dicts(first_zones),
            "counts": result.counts(),
        }
        if template.calibrated:
            diagnostics["calibration"] = calibration_report(first_zones, assigned).to_dict("records")

        _state(state, "Done")
        return GeometricRun(result, template.name, method, zones_by_page, diagnostics)

    def extract(self, pages: Sequence[PageRuns], template: Optional[StatementTemplate] = None) -> StatementExtractionResult:
        return self.run(pages, template).result
