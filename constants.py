import re

# --- Detect statement template ---
TEMPLATE_INDICATORS = {
    "BDK": [
        "BDK",
        "CH.NO",
        "VENDOR PROVIDER",
        "TR NO/FACT.NO",
        "DEPOSIT NOT YET CLEARED",
        "CHECK NOT YET CLEARED",
    ],
    "GENERIC": [
        "SOLDE OUVERTURE",
        "DEPOTS NON CREDITES",
        "CHEQUES NON DEBITES",
        "FACILITES BANCAIRES",
        "IMPAYES",
        "SOLDE CLOTURE",
    ],
}


# --- Shared token shapes ---
DATE_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")
DATE_SEARCH_RE = re.compile(r"\b(\d{2}/\d{2}/\d{4})\b")
INTEGER_RE = re.compile(r"^\d+$")
AMOUNT_RE = re.compile(r"^\d+(?:\s+\d+)*$")          # digits-and-spaces
DIGIT_GROUP_RE = re.compile(r"^\d{1,3}$")
THOUSANDS_GROUP_RE = re.compile(r"^\d{3}$")


# --- Lines that never carry section data ---
DENYLIST_PATTERNS = [
    r"^\s*TOTAL\b",
    r"\bTOTAL\s+DEPOSIT\b",
    r"\bTOTAL\s*\(\s*[AB]\s*\)",
    r"\bSUB\s*-?\s*TOTAL\b",
    r"^\s*PAGE\s+\d+(\s*/\s*\d+)?\s*$",
    r"\bBALANCE\s+AS\s+PER\s+BANK\b",
    r"\bPRINTED\s+(ON|BY)\b",
    r"\bEDITE\s+LE\b",
]


# --- Markers ---
REGULARIZATION_MARKERS = [r"\bREGUL\w*\s+IMPAYE", r"\bREGULARI[SZ]ATION\b.*\bIMPAYE"]
CURRENCY_UNITS = ("FCFA", "F.CFA", "XOF", "CFA")

# Row grouping y tolerance bounds, in points
ROW_TOLERANCE_RANGE = (2.0, 8.0)
