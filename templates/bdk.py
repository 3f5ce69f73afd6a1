from constants import TEMPLATE_INDICATORS, REGULARIZATION_MARKERS
from layout.classes import StatementTemplate, SectionSpec, ZoneSpec

# Zones measured on a real BDK reconciliation report, reference page width 840
BDK_ZONES = (
    ZoneSpec("DATE",            45, 115, content="date"),
    ZoneSpec("CH.NO",          115, 195, content="number"),
    ZoneSpec("DESCRIPTION",    195, 375),
    ZoneSpec("VENDOR PROVIDER", 375, 475),
    ZoneSpec("CLIENT",         475, 575),
    ZoneSpec("TR NO/FACT.NO",  575, 675, content="number"),
    ZoneSpec("AMOUNT",         675, 795, content="amount", align="right"),
)

BDK_SECTIONS = (
    SectionSpec("opening", "OPENING BALANCE", ("OPENING BALANCE",), anchor_is_data=True),
    SectionSpec(
        "deposits", "DEPOSIT NOT YET CLEARED",
        ("ADD : DEPOSIT NOT YET CLEARED", "DEPOSIT NOT YET CLEARED", "DEPOSITS NOT CREDITED"),
        end_anchors=("TOTAL DEPOSIT",),
    ),
    SectionSpec(
        "checks", "CHECK NOT YET CLEARED",
        ("LESS : CHECK NOT YET CLEARED", "CHECK NOT YET CLEARED"),
        end_anchors=("TOTAL (B)",),
    ),
    SectionSpec("facilities", "BANK FACILITY", ("BANK FACILITY",)),
    SectionSpec(
        "unpaid", "IMPAYE", ("IMPAYE",),
        exclude=tuple(REGULARIZATION_MARKERS),
        anchor_is_data=True,
    ),
)

BDK_TEMPLATE = StatementTemplate(
    name="BDK",
    indicators=tuple(TEMPLATE_INDICATORS["BDK"]),
    sections=BDK_SECTIONS,
    zones=BDK_ZONES,
    reference_width=840.0,
    field_maps={
        "deposits": {
            "date_operation": (0,),
            "date_valeur": (1,),
            "description": (2,),
            "vendor": (3,),
            "client": (4,),
            "amount": (6,),
        },
        "checks": {
            "date": (0,),
            "check_number": (1,),
            "description": (2, 3),
            "client": (4,),
            "reference": (5,),
            "amount": (6,),
        },
    },
    bank_marker="BDK",
    closing_patterns=(
        r"CLOSING\s+BALANCE\s+as\s+per\s+Book\s*:\s*C\s*=\s*\(\s*A\s*-\s*B\s*\)\s*(.*)$",
        r"CLOSING\s+BALANCE[^:]*:\s*(.*)$",
    ),
    regularization_markers=tuple(REGULARIZATION_MARKERS),
    settings_overrides={"row_tolerance": 5.0},
)
