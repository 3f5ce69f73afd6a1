# parsers/positional.py
# Section parsers over the row/column grid (geometric strategy).
# - deposits / checks: cells picked through a field -> zone map
#     * template field map (calibrated templates)
#     * else the section's header row (lang.HEADER_SYNONYMS)
#     * else zone content types (adaptive zones)
# - opening / closing / report date: regexes over the row text
# - facilities / unpaid: the row's runs themselves (one run per printed cell)
# - amounts are whole FCFA; 'N/A' placeholders parse to 0 and trigger token fallbacks

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from lang import HEADER_SYNONYMS
from layout.classes import ColumnZone, ExtractionSettings, Row, Section, StatementTemplate
from parsers.records import Check, Deposit, Facility, FacilityTotals, OpeningBalance, UnpaidItem
from parsers.tokens import (
    check_amount_from_tokens, deposits_from_tokens, is_amount_token, trailing_number,
)
from utils import (
    find_date, is_amount_text, is_date, leading_amount,
    normalize_text, parse_amount, parse_date, strip_accents,
)

log = logging.getLogger(__name__)

FieldMap = Dict[str, Tuple[int, ...]]

RE_DATE_AMOUNT = re.compile(r"(\d{2}/\d{2}/\d{4})\s+(\d{1,3}(?:\s\d{3})+|\d+)\b")


# ---------- Field maps ----------
def _header_field_map(header: Row, zones: List[ColumnZone], kind: str) -> FieldMap:
    """Map header cells to fields by synonym, each header run to its nearest zone."""
    fmap: Dict[str, Tuple[int, ...]] = {}
    for run in header.runs:
        zone = min(zones, key=lambda z: (abs(run.center_x - z.center), z.index))
        label = strip_accents(run.text).lower()
        for fld, words in HEADER_SYNONYMS.items():
            if any(strip_accents(w).lower() in label for w in words):
                if fld == "date" and kind == "deposits":
                    fld = "date_operation" if "date_operation" not in fmap else "date_valeur"
                if fld not in fmap:
                    fmap[fld] = (zone.index,)
                break
    return fmap


def _content_field_map(zones: List[ColumnZone], kind: str) -> FieldMap:
    dates = [z.index for z in zones if z.content == "date"]
    amounts = [z.index for z in zones if z.content == "amount"]
    amount = amounts[-1] if amounts else (zones[-1].index if zones else None)
    numbers = [z.index for z in zones if z.content == "number" and z.index != amount]
    texts = [z.index for z in zones if z.content == "text" and z.index != amount]

    fmap: Dict[str, Tuple[int, ...]] = {}
    if amount is not None:
        fmap["amount"] = (amount,)
    if kind == "deposits":
        if dates:
            fmap["date_operation"] = (dates[0],)
        if len(dates) > 1:
            fmap["date_valeur"] = (dates[1],)
        if texts:
            fmap["description"] = tuple(texts[:max(1, len(texts) - 2)])
        if len(texts) >= 2:
            fmap["client"] = (texts[-1],)
        if len(texts) >= 3:
            fmap["vendor"] = (texts[-2],)
    else:
        if dates:
            fmap["date"] = (dates[0],)
        if numbers:
            fmap["check_number"] = (numbers[0],)
        if len(numbers) > 1:
            fmap["reference"] = (numbers[-1],)
        if texts:
            fmap["description"] = tuple(texts[:max(1, len(texts) - 1)])
        if len(texts) >= 2:
            fmap["client"] = (texts[-1],)
    return fmap


def resolve_field_map(section: Section, zones: List[ColumnZone], template: StatementTemplate) -> FieldMap:
    fixed = template.field_maps.get(section.kind)
    if fixed:
        return dict(fixed)
    if section.header_row is not None and zones:
        fmap = _header_field_map(section.header_row, zones, section.kind)
        if "amount" in fmap and len(fmap) >= 3:
            log.debug("%s: field map from header row %s", section.kind, fmap)
            return fmap
    return _content_field_map(zones, section.kind)


def _field(row: Row, fmap: FieldMap, name: str) -> str:
    parts = [row.cell_text(i) for i in fmap.get(name, ())]
    return normalize_text(" ".join(p for p in parts if p and p != "N/A"))


def _amount_cell(row: Row, fmap: FieldMap) -> int:
    return sum(parse_amount(row.cell_text(i)) for i in fmap.get("amount", ()))


# ---------- Opening / closing / report date ----------
def parse_opening_balance(section: Optional[Section]) -> Optional[OpeningBalance]:
    """First date + amount pair from the anchor row onwards."""
    if section is None:
        return None
    for row in section.rows:
        text = row.text
        m = re.search(r"OPENING\s+BALANCE|SOLDE\s+D?'?\s*OUVERTURE|SOLDE\s+INITIAL", strip_accents(text), re.I)
        tail = text[m.end():] if m else text
        dm = RE_DATE_AMOUNT.search(tail)
        if dm and parse_date(dm.group(1)):
            return OpeningBalance(date=dm.group(1), amount=parse_amount(dm.group(2)))
    return None


def parse_closing_balance(rows: Sequence[Row], template: StatementTemplate) -> Optional[int]:
    for row in rows:
        for pat in template.closing_patterns:
            m = re.search(pat, strip_accents(row.text), re.IGNORECASE)
            if m:
                amount = leading_amount(m.group(1))
                if amount > 0:
                    return amount
    return None


def parse_report_date(rows: Sequence[Row], template: StatementTemplate, head_rows: int = 5) -> str:
    if template.bank_marker:
        pat = re.compile(rf"(\d{{2}}/\d{{2}}/\d{{4}})\s+{re.escape(template.bank_marker)}\b", re.I)
        for row in rows:
            m = pat.search(row.text)
            if m and parse_date(m.group(1)):
                return m.group(1)
    for row in list(rows)[:head_rows]:
        d = find_date(row.text)
        if d:
            return d
    return ""


def parse_declared_total(row: Optional[Row], units: Sequence[str]) -> Optional[int]:
    """Trailing amount on a TOTAL line, e.g. 'TOTAL DEPOSIT 12 000 000 FCFA'."""
    if row is None:
        return None
    text = row.text
    for unit in units:
        text = re.sub(rf"\b{re.escape(unit)}\b", " ", text, flags=re.IGNORECASE)
    toks = normalize_text(text).split(" ")
    amount, used = trailing_number(toks)
    return amount if used and amount > 0 else None


# ---------- Deposits ----------
def parse_deposits(section: Optional[Section], zones: List[ColumnZone], template: StatementTemplate,
                   settings: ExtractionSettings) -> List[Deposit]:
    if section is None:
        return []
    fmap = resolve_field_map(section, zones, template)
    min_cells = min(6, len(zones)) if zones else 6

    out: List[Deposit] = []
    for row in section.rows:
        if len(row.cells) < min_cells:
            continue
        d_op = parse_date(_field(row, fmap, "date_operation"))
        d_val = parse_date(_field(row, fmap, "date_valeur"))
        if not d_op or not d_val:
            continue
        amount = _amount_cell(row, fmap)
        if amount <= 0:
            tail = [r.text for r in row.runs if is_amount_token(r.text, settings.materiality_floor)]
            amount = parse_amount(tail[-1]) if tail else 0
        if amount <= 0:
            log.debug("deposit row skipped, no amount: %s", row.text)
            continue
        out.append(Deposit(
            date_operation=d_op,
            date_valeur=d_val,
            description=_field(row, fmap, "description") or "N/A",
            vendor=_field(row, fmap, "vendor") or "N/A",
            client=_field(row, fmap, "client") or "N/A",
            amount=amount,
        ))

    if not out and section.rows:
        tokens = [r.text for row in section.rows for r in row.runs]
        out = deposits_from_tokens(tokens, settings.materiality_floor)
        log.info("deposits: column pass empty, token fallback found %d", len(out))
    return out


# ---------- Checks ----------
def _check_from_tokens(row: Row, template: StatementTemplate, settings: ExtractionSettings):
    toks = [r.text for r in row.runs]
    # date, check number, then free text and numbers
    if len(toks) < 3 or not is_date(toks[0]):
        return None
    amount, reference, rest = check_amount_from_tokens(toks[2:], template.currency_units, settings.invoice_min_digits)
    return toks[0], toks[1], rest, amount, reference


def parse_checks(section: Optional[Section], zones: List[ColumnZone], template: StatementTemplate,
                 settings: ExtractionSettings) -> List[Check]:
    if section is None:
        return []
    fmap = resolve_field_map(section, zones, template)

    out: List[Check] = []
    for row in section.rows:
        date = parse_date(_field(row, fmap, "date"))
        number = _field(row, fmap, "check_number")
        description = _field(row, fmap, "description")
        client = _field(row, fmap, "client") or None
        reference = _field(row, fmap, "reference") or None
        amount = _amount_cell(row, fmap)

        if amount <= 0:
            fb = _check_from_tokens(row, template, settings)
            if fb is not None:
                f_date, f_number, rest, amount, f_ref = fb
                date = date or parse_date(f_date)
                number = number or f_number
                reference = f_ref or reference
                if not description:
                    description = " ".join(rest)
                log.debug("check amount from tokens: %s -> %s (ref %s)", row.text, amount, reference)
        if not date or not number or amount <= 0:
            continue
        out.append(Check(
            date=date,
            check_number=number,
            description=description or "N/A",
            amount=amount,
            client=client,
            reference=reference,
        ))
    return out


# ---------- Facilities ----------
def _row_frame(row: Row) -> pd.DataFrame:
    df = pd.DataFrame([{"text": r.text, "left": r.x, "right": r.right} for r in row.runs])
    if df.empty:
        return df
    df = df.sort_values("left", kind="stable").reset_index(drop=True)
    df["is_amount"] = df["text"].apply(lambda t: is_amount_text(t) and not is_date(t))
    df["is_date"] = df["text"].apply(is_date)
    return df


def parse_facilities(section: Optional[Section]) -> Tuple[List[Facility], Optional[FacilityTotals]]:
    """
    Rows '[date] name limit used balance'; the three numeric groups are the
    last three runs. A row with the same shape and no name is the totals row.
    """
    if section is None:
        return [], None
    facilities: List[Facility] = []
    totals: Optional[FacilityTotals] = None
    for row in section.rows:
        df = _row_frame(row)
        if len(df) < 3 or not df["is_amount"].iloc[-3:].all():
            continue
        limit, used, balance = (parse_amount(t) for t in df["text"].iloc[-3:])
        head = df.iloc[:-3]
        date = None
        if len(head) and bool(head["is_date"].iloc[0]):
            date = head["text"].iloc[0]
            head = head.iloc[1:]
        name = normalize_text(" ".join(head["text"]))
        if not name:
            totals = FacilityTotals(total_limit=limit, total_used=used, total_balance=balance)
            continue
        if limit > 0 or used > 0:
            facilities.append(Facility(name=name, limit=limit, used=used, balance=balance, date_echeance=date))
    return facilities, totals


# ---------- Unpaid ----------
def _is_regularization(slot: str, template: StatementTemplate) -> bool:
    flat = strip_accents(slot)
    return any(re.search(p, flat, re.IGNORECASE) for p in template.regularization_markers)


def parse_unpaid(section: Optional[Section], template: StatementTemplate) -> List[UnpaidItem]:
    """
    Rows 'date reference IMPAYE bank client description amount'.
    A row is a regularisation when the marker sits in its reference/type slot;
    the same words in the description do not count.
    """
    if section is None:
        return []
    out: List[UnpaidItem] = []
    for row in section.rows:
        toks = [normalize_text(r.text) for r in row.runs]
        if len(toks) < 4 or not is_date(toks[0]):
            continue
        type_pos = next((i for i, t in enumerate(toks[1:4], start=1) if re.search(r"IMPAYE|UNPAID", strip_accents(t), re.I)), None)
        if type_pos is None:
            continue
        if _is_regularization(" ".join(toks[1:type_pos + 1]), template):
            continue
        reference = " ".join(toks[1:type_pos])
        amount, used = trailing_number(toks[type_pos + 1:])
        if not used or amount <= 0:
            continue
        middle = toks[type_pos + 1: len(toks) - used]
        out.append(UnpaidItem(
            date=toks[0],
            reference=reference,
            type=toks[type_pos].upper(),
            bank=middle[0] if middle else "",
            client=middle[1] if len(middle) > 1 else "",
            description=" ".join(middle[2:]),
            amount=amount,
        ))
    return out
