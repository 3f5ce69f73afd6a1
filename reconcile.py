# reconcile.py
# Runs both strategies over the same pages and keeps the more trustworthy result.
#   +1 more deposits, +1 more checks, +2 valid while the other is not,
#   +1 smaller |discrepancy|. Ties go to the text strategy, both for the
#   discrepancy point and for the final winner.
#   confidence: gap >= 3 high, gap <= 1 low, else medium.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from errors import DualStrategyFailure
from extract.data_extract import extract_pdf_to_pages
from layout.classes import ExtractionSettings, PageRuns, StatementTemplate
from mapping import FALLBACK_TEMPLATE
from parsers.records import StatementExtractionResult
from parsers.text_strategy import extract_text_strategy
from pipeline import GeometricExtractor

log = logging.getLogger(__name__)

TEXT = "text"
GEOMETRIC = "geometric"


@dataclass(frozen=True)
class Comparison:
    text_score: int
    geometric_score: int
    winner: str
    confidence: str

    @property
    def gap(self) -> int:
        return abs(self.text_score - self.geometric_score)

    def to_dict(self) -> Dict[str, Any]:
        return {TEXT: self.text_score, GEOMETRIC: self.geometric_score, "gap": self.gap}


def confidence_for_gap(gap: int) -> str:
    if gap >= 3:
        return "high"
    if gap <= 1:
        return "low"
    return "medium"


def compare_extractions(text_result: StatementExtractionResult,
                        geometric_result: StatementExtractionResult) -> Comparison:
    a, b = text_result, geometric_result
    sa = sb = 0

    if len(a.deposits) > len(b.deposits):
        sa += 1
    elif len(b.deposits) > len(a.deposits):
        sb += 1

    if len(a.checks) > len(b.checks):
        sa += 1
    elif len(b.checks) > len(a.checks):
        sb += 1

    if a.validation.is_valid and not b.validation.is_valid:
        sa += 2
    elif b.validation.is_valid and not a.validation.is_valid:
        sb += 2

    da, db = abs(a.validation.discrepancy), abs(b.validation.discrepancy)
    if db < da:
        sb += 1
    else:
        sa += 1

    winner = GEOMETRIC if sb > sa else TEXT
    return Comparison(sa, sb, winner, confidence_for_gap(abs(sa - sb)))


@dataclass
class ExtractionOutcome:
    text_result: Optional[StatementExtractionResult]
    geometric_result: Optional[StatementExtractionResult]
    selected_result: StatementExtractionResult
    selected_strategy: str
    confidence: str
    scores: Dict[str, int] = field(default_factory=dict)
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "selectedStrategy": self.selected_strategy,
            "confidence": self.confidence,
            "scores": dict(self.scores),
            "selectedResult": self.selected_result.to_dict(iso_dates),
            "textResult": self.text_result.to_dict(iso_dates) if self.text_result else None,
            "geometricResult": self.geometric_result.to_dict(iso_dates) if self.geometric_result else None,
            "diagnostics": self.diagnostics,
        }


class DualStrategyExtractor:
    def __init__(self,
                 settings: Optional[ExtractionSettings] = None,
                 templates: Optional[Dict[str, StatementTemplate]] = None,
                 fallback: str = FALLBACK_TEMPLATE):
        self.geometric = GeometricExtractor(settings, templates, fallback)

    def extract_pdf(self, source: Union[str, Path, bytes]) -> ExtractionOutcome:
        pages = extract_pdf_to_pages(source, workers=self.geometric.settings.page_workers)
        return self.extract(pages)

    def extract(self, pages: Sequence[PageRuns]) -> ExtractionOutcome:
        template, method, hits = self.geometric.detect(pages)
        settings = self.geometric.settings_for(template)
        diagnostics: Dict[str, Any] = {"template": template.name, "method": method, "indicatorHits": hits}

        text_result = geo_result = None
        text_error = geo_error = None
        try:
            text_result = extract_text_strategy(pages, template, settings)
        except Exception as e:
            log.warning("text strategy failed: %s", e)
            text_error = e
        try:
            geo_run = self.geometric.run(pages, template)
            geo_result = geo_run.result
            diagnostics.update({k: v for k, v in geo_run.diagnostics.items() if k not in diagnostics})
        except Exception as e:
            log.warning("geometric strategy failed: %s", e)
            geo_error = e

        if text_result is None and geo_result is None:
            raise DualStrategyFailure(text_error, geo_error)

        diagnostics["counts"] = {
            TEXT: text_result.counts() if text_result else None,
            GEOMETRIC: geo_result.counts() if geo_result else None,
        }
        diagnostics["errors"] = {
            TEXT: str(text_error) if text_error else None,
            GEOMETRIC: str(geo_error) if geo_error else None,
        }

        if text_result is None or geo_result is None:
            strategy = GEOMETRIC if text_result is None else TEXT
            selected = geo_result if text_result is None else text_result
            log.info("only the %s strategy succeeded", strategy)
            diagnostics["warnings"] = list(selected.warnings)
            return ExtractionOutcome(text_result, geo_result, selected, strategy, "low", {}, diagnostics)

        cmp = compare_extractions(text_result, geo_result)
        selected = geo_result if cmp.winner == GEOMETRIC else text_result
        diagnostics["warnings"] = list(selected.warnings)
        log.info("selected %s strategy (text %d vs geometric %d, %s confidence)",
                 cmp.winner, cmp.text_score, cmp.geometric_score, cmp.confidence)
        return ExtractionOutcome(
            text_result=text_result,
            geometric_result=geo_result,
            selected_result=selected,
            selected_strategy=cmp.winner,
            confidence=cmp.confidence,
            scores=cmp.to_dict(),
            diagnostics=diagnostics,
        )
