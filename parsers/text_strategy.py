# parsers/text_strategy.py
# Layout-blind strategy: join runs in stream order into lines, then regexes.
# - newline when y moves by more than the row tolerance, two spaces otherwise
# - cells are the '\s{2,}' chunks of a line; all-digit chunks are split into digit groups
# - sections come from the same segmenter as the geometric strategy (one pseudo-row per line)

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from errors import ExtractionFailure
from layout.classes import ExtractionSettings, PageRuns, Row, StatementTemplate, TextRun
from layout.sections import mark_noise, segment_sections
from parsers.positional import (
    parse_closing_balance, parse_declared_total, parse_opening_balance, parse_report_date,
)
from parsers.records import (
    Check, Deposit, Facility, FacilityTotals, OpeningBalance, StatementExtractionResult, UnpaidItem,
)
from parsers.tokens import check_amount_from_tokens, deposits_from_tokens, split_proportional, trailing_number
from utils import is_amount_text, is_date, normalize_text, parse_amount, parse_date, strip_accents
from validator import assemble_result

log = logging.getLogger(__name__)

RE_CHUNK_SPLIT = re.compile(r"\s{2,}")
RE_LEADING_DATE = re.compile(r"^(\d{2}/\d{2}/\d{4})\s+(.+)$")
RE_UNPAID = re.compile(
    r"^(\d{2}/\d{2}/\d{4})\s+(\S+)\s+(IMPAY[EÉ]\S*|UNPAID)\s+(.*?)\s+(\d{1,3}(?:\s\d{3})+|\d+)\s*$",
    re.IGNORECASE,
)


# ---------- Text construction ----------
def build_text(pages: Sequence[PageRuns], tolerance: float) -> str:
    """Concatenate page runs in arrival order; one line per y band, pages separated by newlines."""
    page_texts = []
    for page in sorted(pages, key=lambda p: p.page_number):
        parts: List[str] = []
        last_y: Optional[float] = None
        for r in page.runs:
            if last_y is not None:
                parts.append("\n" if abs(r.y - last_y) > tolerance else "  ")
            parts.append(r.text)
            last_y = r.y
        page_texts.append("".join(parts))
    return "\n".join(page_texts)


def chunks(line: str) -> List[str]:
    return [c for c in (normalize_text(p) for p in RE_CHUNK_SPLIT.split(line.strip())) if c]


def tokens(line: str, split_numbers: bool = True) -> List[str]:
    """Chunks with leading dates peeled off; numeric chunks optionally split into digit groups."""
    out: List[str] = []
    for c in chunks(line):
        while True:
            m = RE_LEADING_DATE.match(c)
            if not m:
                break
            out.append(m.group(1))
            c = m.group(2)
        if split_numbers and is_amount_text(c):
            out.extend(c.split(" "))
        else:
            out.append(c)
    return out


def lines_to_rows(lines: Sequence[str]) -> List[Row]:
    """One pseudo-row per line; runs are the line's chunks laid out left to right."""
    rows = []
    for i, line in enumerate(lines):
        runs, x = [], 0.0
        for c in chunks(line):
            runs.append(TextRun(c, x, float(i), float(len(c)), 1.0))
            x += len(c) + 2.0
        rows.append(Row(y_start=float(i), y_end=float(i) + 1.0, index=i, runs=runs))
    return rows


# ---------- Section parsers ----------
def _deposit_line(toks: List[str], floor: int) -> Optional[Deposit]:
    if len(toks) < 4 or not (parse_date(toks[0]) and parse_date(toks[1])):
        return None
    amount, used = trailing_number(toks[2:])
    if not used or amount <= floor:
        return None
    body = toks[2: len(toks) - used]
    if len(body) >= 3:
        description, vendor, client = " ".join(body[:-2]), body[-2], body[-1]
    else:
        description, vendor, client = split_proportional(body, 3)
    return Deposit(
        date_operation=toks[0],
        date_valeur=toks[1],
        description=description or "N/A",
        vendor=vendor or "N/A",
        client=client or "N/A",
        amount=amount,
    )


def _check_line(toks: List[str], template: StatementTemplate, settings: ExtractionSettings) -> Optional[Check]:
    if len(toks) < 3 or not parse_date(toks[0]):
        return None
    amount, reference, rest = check_amount_from_tokens(toks[2:], template.currency_units, settings.invoice_min_digits)
    if amount <= 0:
        return None
    description, client = " ".join(rest), None
    if len(rest) >= 2:
        description, client = " ".join(rest[:-1]), rest[-1]
    return Check(
        date=toks[0],
        check_number=toks[1],
        description=description or "N/A",
        amount=amount,
        client=client,
        reference=reference,
    )


def _facility_line(line: str):
    cs = chunks(line)
    if len(cs) < 3 or not all(is_amount_text(c) and not is_date(c) for c in cs[-3:]):
        return None
    limit, used, balance = (parse_amount(c) for c in cs[-3:])
    head = cs[:-3]
    date = head.pop(0) if head and is_date(head[0]) else None
    return " ".join(head), date, limit, used, balance


def _unpaid_line(line: str, template: StatementTemplate) -> Optional[UnpaidItem]:
    m = RE_UNPAID.match(line.strip())
    if not m:
        return None
    slot = strip_accents(f"{m.group(2)} {m.group(3)}")
    if any(re.search(p, slot, re.IGNORECASE) for p in template.regularization_markers):
        return None
    middle = chunks(m.group(4))
    return UnpaidItem(
        date=m.group(1),
        reference=m.group(2),
        type=m.group(3).upper(),
        bank=middle[0] if middle else "",
        client=middle[1] if len(middle) > 1 else "",
        description=" ".join(middle[2:]),
        amount=parse_amount(m.group(5)),
    )


# ---------- Strategy ----------
def parse_statement_text(text: str,
                         template: StatementTemplate,
                         settings: ExtractionSettings) -> StatementExtractionResult:
    lines = [ln for ln in text.split("\n") if ln.strip()]
    rows = lines_to_rows(lines)
    mark_noise(rows, template)
    sections = {s.kind: s for s in segment_sections(rows, template)}
    warnings: List[str] = []

    def section_lines(kind: str) -> List[str]:
        s = sections.get(kind)
        return [lines[r.index] for r in s.rows] if s else []

    opening = parse_opening_balance(sections.get("opening"))
    if opening is None:
        opening = OpeningBalance()

    deposits = [d for d in (_deposit_line(tokens(ln), settings.materiality_floor)
                            for ln in section_lines("deposits")) if d]
    if not deposits and "deposits" in sections:
        toks = [t for ln in section_lines("deposits") for t in tokens(ln, split_numbers=False)]
        deposits = deposits_from_tokens(toks, settings.materiality_floor)

    checks = [c for c in (_check_line(tokens(ln), template, settings)
                          for ln in section_lines("checks")) if c]

    facilities: List[Facility] = []
    declared_fac: Optional[FacilityTotals] = None
    for ln in section_lines("facilities"):
        parsed = _facility_line(ln)
        if parsed is None:
            continue
        name, date, limit, used, balance = parsed
        if not name:
            declared_fac = FacilityTotals(limit, used, balance)
        elif limit > 0 or used > 0:
            facilities.append(Facility(name, limit, used, balance, date))

    unpaid = [u for u in (_unpaid_line(ln, template) for ln in section_lines("unpaid")) if u]

    closing = parse_closing_balance(rows, template)
    if closing is None:
        warnings.append("Closing balance not found")
        closing = 0

    for kind in ("deposits", "checks"):
        if kind not in sections:
            warnings.append(f"Section '{kind}' not found")

    declared = {
        kind: parse_declared_total(sections[kind].end_row, template.currency_units)
        for kind in ("deposits", "checks") if kind in sections
    }
    log.info("text strategy: %d deposit(s), %d check(s), %d facilit(ies), %d unpaid",
             len(deposits), len(checks), len(facilities), len(unpaid))

    return assemble_result(
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


def extract_text_strategy(pages: Sequence[PageRuns],
                          template: StatementTemplate,
                          settings: ExtractionSettings) -> StatementExtractionResult:
    text = build_text(pages, settings.row_tolerance)
    if not text.strip():
        raise ExtractionFailure(None, "no text content")
    return parse_statement_text(text, template, settings)
