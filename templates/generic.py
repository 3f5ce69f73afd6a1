from constants import TEMPLATE_INDICATORS, REGULARIZATION_MARKERS
from layout.classes import StatementTemplate, SectionSpec

# No zone table: columns come from clustering the observed x positions.
GENERIC_SECTIONS = (
    SectionSpec(
        "opening", "OPENING BALANCE",
        ("OPENING BALANCE", "SOLDE OUVERTURE", "SOLDE D'OUVERTURE", "SOLDE INITIAL"),
        anchor_is_data=True,
    ),
    SectionSpec(
        "deposits", "DEPOSIT NOT YET CLEARED",
        ("DEPOSIT NOT YET CLEARED", "DEPOSITS NOT CLEARED", "DEPOTS NON CREDITES", "DEPOTS EN ATTENTE"),
        end_anchors=("TOTAL DEPOSIT", "TOTAL DEPOTS", "TOTAL (A)"),
    ),
    SectionSpec(
        "checks", "CHECK NOT YET CLEARED",
        ("CHECK NOT YET CLEARED", "CHECKS NOT CLEARED", "CHEQUES NON DEBITES", "CHEQUES EN CIRCULATION"),
        end_anchors=("TOTAL (B)", "TOTAL CHEQUES"),
    ),
    SectionSpec(
        "facilities", "BANK FACILITY",
        ("BANK FACILITY", "CREDIT FACILITIES", "FACILITES BANCAIRES", "LIGNES DE CREDIT"),
    ),
    SectionSpec(
        "unpaid", "IMPAYE", ("IMPAYE", "UNPAID ITEMS"),
        exclude=tuple(REGULARIZATION_MARKERS),
        anchor_is_data=True,
    ),
)

GENERIC_TEMPLATE = StatementTemplate(
    name="GENERIC",
    indicators=tuple(TEMPLATE_INDICATORS["GENERIC"]),
    sections=GENERIC_SECTIONS,
    closing_patterns=(
        r"CLOSING\s+BALANCE\s+as\s+per\s+Book\s*:\s*C\s*=\s*\(\s*A\s*-\s*B\s*\)\s*(.*)$",
        r"CLOSING\s+BALANCE[^:]*:\s*(.*)$",
        r"SOLDE\s+(?:DE\s+)?(?:CLOTURE|FINAL)[^:]*:\s*(.*)$",
    ),
    regularization_markers=tuple(REGULARIZATION_MARKERS),
    settings_overrides={"row_tolerance": 4.0},
)
