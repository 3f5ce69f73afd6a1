from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Optional, Dict, List, Tuple, Any

from constants import CURRENCY_UNITS, ROW_TOLERANCE_RANGE


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float          # top-down page coordinate once inside the pipeline
    width: float
    height: float
    font_size: float = 0.0
    font_name: str = "unknown"
    page: int = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + 0.5 * self.width


@dataclass
class PageRuns:
    """One decoded page: ordered text runs plus page geometry."""
    page_number: int
    width: float
    height: float
    runs: List[TextRun] = field(default_factory=list)
    # "top": y grows downward (PyMuPDF); "bottom": PDF user space, y grows upward
    origin: str = "top"


@dataclass
class Row:
    y_start: float
    y_end: float
    index: int
    runs: List[TextRun] = field(default_factory=list)
    cells: Dict[int, List[TextRun]] = field(default_factory=dict)
    page: int = 0
    noise: bool = False

    @property
    def text(self) -> str:
        return " ".join(r.text for r in self.runs)

    def cell_text(self, column: int) -> str:
        return " ".join(r.text for r in self.cells.get(column, []))


@dataclass(frozen=True)
class ColumnZone:
    x_start: float
    x_end: float
    index: int
    name: str = ""
    content: str = "text"    # "date" | "number" | "text" | "amount"
    align: str = "left"      # "left" | "right"

    @property
    def width(self) -> float:
        return max(1e-6, self.x_end - self.x_start)

    @property
    def center(self) -> float:
        return 0.5 * (self.x_start + self.x_end)

    def overlaps(self, run: TextRun) -> bool:
        return run.x < self.x_end and run.right > self.x_start


@dataclass(frozen=True)
class ZoneSpec:
    name: str
    x_min: float
    x_max: float
    content: str = "text"
    align: str = "left"


@dataclass(frozen=True)
class SectionSpec:
    kind: str                              # opening | deposits | checks | facilities | unpaid
    title: str
    start_anchors: Tuple[str, ...]
    end_anchors: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()          # rows matching these never open the section
    anchor_is_data: bool = False


@dataclass
class Section:
    kind: str
    title: str
    start_y: float
    end_y: float
    rows: List[Row] = field(default_factory=list)
    anchor_row: Optional[Row] = None
    end_row: Optional[Row] = None
    header_row: Optional[Row] = None


@dataclass
class ExtractionSettings:
    # row grouping
    row_tolerance: float = 5.0
    numeric_merge_gap: float = 0.6          # fraction of font size

    # zone model
    column_gap_threshold: float = 20.0
    kmeans_max_iterations: int = 100
    max_k: int = 10
    template_min_hits: int = 3

    # column scoring
    membership_score: float = 1.0
    alignment_bonus: float = 0.5
    content_bonus: float = 1.0
    center_penalty: float = 0.5
    right_align_fraction: float = 0.25

    # amount rules
    materiality_floor: int = 500
    min_amount_length: int = 3
    reference_max_digits: int = 6
    invoice_min_digits: int = 6

    # validation
    validation_tolerance: int = 1000

    # decoding
    page_workers: int = 1

    def __post_init__(self):
        lo, hi = ROW_TOLERANCE_RANGE
        if not lo <= self.row_tolerance <= hi:
            raise ValueError(f"row_tolerance must be within {lo}-{hi}, got {self.row_tolerance}")

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "ExtractionSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    def with_overrides(self, **overrides) -> "ExtractionSettings":
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


@dataclass(frozen=True)
class StatementTemplate:
    name: str
    indicators: Tuple[str, ...]
    sections: Tuple[SectionSpec, ...]
    zones: Tuple[ZoneSpec, ...] = ()          # empty => adaptive clustering
    reference_width: float = 840.0
    # per section kind: field -> zone indices joined in order
    field_maps: Dict[str, Dict[str, Tuple[int, ...]]] = field(default_factory=dict)
    bank_marker: Optional[str] = None
    closing_patterns: Tuple[str, ...] = ()
    currency_units: Tuple[str, ...] = CURRENCY_UNITS
    regularization_markers: Tuple[str, ...] = ()
    settings_overrides: Dict[str, Any] = field(default_factory=dict)

    @property
    def calibrated(self) -> bool:
        return bool(self.zones)

    def section(self, kind: str) -> Optional[SectionSpec]:
        for s in self.sections:
            if s.kind == kind:
                return s
        return None
