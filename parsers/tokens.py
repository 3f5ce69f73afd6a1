# parsers/tokens.py
# Token-level fallbacks shared by both strategies.
# A "token" is one text run (geometric strategy) or one whitespace/column chunk
# of a line (text strategy); both may hold spaced amounts like '3 000 000'.

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

import numpy as np

from constants import DIGIT_GROUP_RE, THOUSANDS_GROUP_RE
from parsers.records import Deposit
from utils import is_amount_text, is_date, is_integer_text, normalize_text, parse_amount


def is_amount_token(tok: str, floor: int) -> bool:
    t = normalize_text(tok)
    return is_amount_text(t) and not is_date(t) and parse_amount(t) > floor


def split_proportional(tokens: Sequence[str], parts: int = 3) -> List[str]:
    """Split tokens into `parts` contiguous chunks of near-equal size (earlier chunks larger)."""
    if not tokens:
        return [""] * parts
    chunks = np.array_split(np.arange(len(tokens)), parts)
    return [" ".join(tokens[i] for i in chunk) for chunk in chunks]


def _strip_unit(tok: str, units: Sequence[str]) -> Tuple[str, bool]:
    t = normalize_text(tok)
    for u in units:
        m = re.match(rf"^(.*?)\s*{re.escape(u)}$", t, flags=re.IGNORECASE)
        if m:
            return m.group(1).strip(), True
    return t, False


def trailing_number(tokens: Sequence[str]) -> Tuple[int, int]:
    """
    Amount written at the end of `tokens`, and how many tokens it used.
    Either one spaced token ('71 176') or a lead group of 1-3 digits
    followed by 3-digit groups ('71', '176').
    """
    toks = [normalize_text(t) for t in tokens]
    if not toks:
        return 0, 0
    last = toks[-1]
    if is_amount_text(last) and " " in last:
        return parse_amount(last), 1
    if not DIGIT_GROUP_RE.match(last):
        if is_integer_text(last):
            return parse_amount(last), 1
        return 0, 0
    i = len(toks) - 1
    while i > 0 and THOUSANDS_GROUP_RE.match(toks[i]) and DIGIT_GROUP_RE.match(toks[i - 1]):
        i -= 1
    used = len(toks) - i
    return parse_amount("".join(toks[i:])), used


def check_amount_from_tokens(tokens: Sequence[str],
                             units: Sequence[str],
                             invoice_min_digits: int = 6) -> Tuple[int, Optional[str], List[str]]:
    """
    Separate a check row's trailing amount from an invoice / reference number.

    - With a currency unit token the amount is the number right before it.
    - Otherwise a long bare integer (>= invoice_min_digits) among the trailing
      numbers is the reference, and the shorter numbers after it are
      concatenated into the amount: ['100302', '870'] -> reference 100302, amount 870.

    Returns (amount, reference, leading non-numeric tokens).
    """
    toks = [normalize_text(t) for t in tokens if normalize_text(t)]

    for i in range(len(toks) - 1, -1, -1):
        head, has_unit = _strip_unit(toks[i], units)
        if not has_unit:
            continue
        before = toks[:i] + ([head] if head else [])
        amount, used = trailing_number(before)
        rest = before[: len(before) - used]
        reference = None
        if rest and is_integer_text(rest[-1]) and len(rest[-1]) >= invoice_min_digits:
            reference = rest.pop()
        return amount, reference, rest

    j = len(toks)
    while j > 0 and is_amount_text(toks[j - 1]) and not is_date(toks[j - 1]):
        j -= 1
    numeric = toks[j:]
    rest = toks[:j]
    if not numeric:
        return 0, None, rest

    ref_pos = next(
        (k for k, t in enumerate(numeric) if is_integer_text(t) and len(t) >= invoice_min_digits),
        None,
    )
    if ref_pos is not None and ref_pos < len(numeric) - 1:
        reference = numeric[ref_pos]
        rest = rest + numeric[:ref_pos]
        return parse_amount("".join(numeric[ref_pos + 1:])), reference, rest
    return parse_amount("".join(numeric)), None, rest


def deposits_from_tokens(tokens: Sequence[str], floor: int) -> List[Deposit]:
    """
    Scan raw section tokens for two consecutive dates; the tokens up to the
    last amount above `floor` before the next date pair are split
    proportionally into description / vendor / client.
    """
    toks = [normalize_text(t) for t in tokens if normalize_text(t)]
    starts = [i for i in range(len(toks) - 1) if is_date(toks[i]) and is_date(toks[i + 1])]
    out: List[Deposit] = []
    for n, s in enumerate(starts):
        stop = starts[n + 1] if n + 1 < len(starts) else len(toks)
        body = toks[s + 2: stop]
        amt_pos = next((k for k in range(len(body) - 1, -1, -1) if is_amount_token(body[k], floor)), None)
        if amt_pos is None:
            continue
        description, vendor, client = split_proportional(body[:amt_pos], 3)
        out.append(Deposit(
            date_operation=toks[s],
            date_valeur=toks[s + 1],
            description=description or "N/A",
            vendor=vendor or "N/A",
            client=client or "N/A",
            amount=parse_amount(body[amt_pos]),
        ))
    return out
