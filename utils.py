import re
import shutil, time
from pathlib import Path
import unicodedata
from datetime import datetime

from constants import DATE_RE, DATE_SEARCH_RE, AMOUNT_RE, INTEGER_RE


def normalize_text(s: str) -> str:
    """Collapse non-breaking / thin spaces and runs of whitespace."""
    if not s:
        return ""
    t = str(s).replace("\u00A0", " ").replace("\u2009", " ").replace("\u202F", " ")
    return re.sub(r"\s+", " ", t).strip()


def strip_accents(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFD", s)
                   if unicodedata.category(c) != "Mn")


def parse_amount(value) -> int:
    """
    Parses a whole-FCFA amount written with space thousands separators.

    '3 000 000' -> 3000000, '147 500' -> 147500, '' -> 0, 'N/A' -> 0.
    Everything except digits and whitespace is dropped before the
    whitespace is removed, so '1 234 FCFA' also gives 1234.
    """
    if value is None:
        return 0
    cleaned = re.sub(r"[^\d\s]", "", str(value))
    cleaned = re.sub(r"\s+", "", cleaned)
    if not cleaned:
        return 0
    try:
        return int(cleaned)
    except ValueError:
        return 0


def leading_amount(value: str) -> int:
    """Amount made of the digits/spaces before the first other character ('81 330 157 FCFA' -> 81330157)."""
    head = re.split(r"[^\d\s]", normalize_text(value) or "", maxsplit=1)[0]
    return parse_amount(head)


def is_date(text: str) -> bool:
    return bool(DATE_RE.match(normalize_text(text)))


def is_amount_text(text: str) -> bool:
    return bool(AMOUNT_RE.match(normalize_text(text)))


def is_integer_text(text: str) -> bool:
    return bool(INTEGER_RE.match(normalize_text(text)))


def parse_date(date_str: str) -> str:
    """
    Validate a DD/MM/YYYY date and return it unchanged (source format).
    Returns '' when the string is not a real calendar date.
    """
    t = normalize_text(date_str)
    if not DATE_RE.match(t):
        return ""
    try:
        datetime.strptime(t, "%d/%m/%Y")
    except ValueError:
        return ""
    return t


def find_date(text: str) -> str:
    m = DATE_SEARCH_RE.search(text or "")
    return parse_date(m.group(1)) if m else ""


def to_iso_date(date_str: str) -> str:
    """DD/MM/YYYY -> YYYY-MM-DD; anything unparseable passes through unchanged."""
    if not date_str:
        return date_str or ""
    try:
        return datetime.strptime(date_str, "%d/%m/%Y").strftime("%Y-%m-%d")
    except ValueError:
        return date_str


def contains_phrase(text: str, phrase: str) -> bool:
    """Case- and accent-insensitive substring match with whitespace folded."""
    hay = normalize_text(strip_accents(text or "")).upper()
    needle = normalize_text(strip_accents(phrase or "")).upper()
    return bool(needle) and needle in hay


def nuke_dir(path: Path, tries: int = 3, delay: float = 0.25) -> None:
    """Remove a directory tree, retrying a few times on file-lock errors."""
    if not path.exists():
        return
    for i in range(tries):
        try:
            shutil.rmtree(path)
            return
        except OSError:
            if i == tries - 1:
                print(f"⚠️  Failed to delete {path} after {tries} tries.")
                return
            time.sleep(delay)
