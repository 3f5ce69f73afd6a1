import pytest

from layout.classes import PageRuns, TextRun


def _run(text, x, y, width=None, size=9.0, page=1):
    # ~5pt per glyph at 9pt Helvetica
    w = float(len(text) * 5) if width is None else float(width)
    return TextRun(text=text, x=float(x), y=float(y), width=w, height=10.0,
                   font_size=size, font_name="Helvetica", page=page)


def _page(lines, width=840.0, height=1188.0, page=1, top=20.0, step=15.0):
    runs = []
    for i, cells in enumerate(lines):
        y = top + step * i
        for cell in cells:
            text, x = cell[0], cell[1]
            w = cell[2] if len(cell) > 2 else None
            runs.append(_run(text, x, y, w, page=page))
    return PageRuns(page_number=page, width=width, height=height, runs=runs)


# A BDK reconciliation report laid out on the calibrated 840pt grid:
# DATE 45-115 | CH.NO 115-195 | DESCRIPTION 195-375 | VENDOR 375-475 | CLIENT 475-575 | TR NO 575-675 | AMOUNT 675-795
BDK_LINES = [
    [("24/06/2025", 45), ("BDK", 120), ("BANK RECONCILIATION REPORT", 200)],
    [("OPENING BALANCE", 45), ("24/06/2025", 200), ("78 615 440", 735, 50)],
    [("ADD : DEPOSIT NOT YET CLEARED", 45)],
    [("DATE OP", 50), ("DATE VAL", 120), ("DESCRIPTION", 200), ("VENDOR PROVIDER", 380), ("CLIENT", 480), ("AMOUNT", 750)],
    [("24/06/2025", 50), ("25/06/2025", 120), ("VERSEMENT ESPECES", 200), ("SOCIETE ALPHA", 380), ("CLIENT UN", 480), ("3 000 000", 740)],
    [("25/06/2025", 50), ("26/06/2025", 120), ("REMISE CHEQUE", 200), ("SOCIETE BETA", 380), ("CLIENT DEUX", 480), ("1 500 000", 740)],
    [("TOTAL DEPOSIT", 45), ("4 500 000", 740)],
    [("LESS : CHECK NOT YET CLEARED", 45)],
    [("DATE", 50), ("CH.NO", 120), ("DESCRIPTION", 200), ("VENDOR PROVIDER", 380), ("CLIENT", 480), ("TR NO/FACT.NO", 580), ("AMOUNT", 750)],
    [("20/06/2025", 50), ("0215634", 120), ("FOURNITURE", 200), ("JADO", 380), ("CLIENT A", 480), ("100301", 580), ("1 200 000", 740)],
    [("21/06/2025", 50), ("0215635", 120), ("FOURNITURE", 200), ("JADO", 380), ("CLIENT B", 480), ("100302", 580), ("870", 770)],
    [("22/06/2025", 50), ("0215636", 120), ("LOYER JUIN", 200), ("IMMO SA", 380), ("CLIENT C", 480), ("2 500 000", 740)],
    [("TOTAL (B)", 45), ("3 700 870", 740)],
    [("CLOSING BALANCE as per Book : C=(A-B)", 45), ("79 414 570 FCFA", 705)],
    [("BANK FACILITY", 45)],
    [("30/09/2025", 45), ("DECOUVERT", 200), ("50 000 000", 480), ("30 000 000", 580), ("20 000 000", 735)],
    [("ESCOMPTE", 200), ("10 000 000", 480), ("5 000 000", 580), ("5 000 000", 740)],
    [("60 000 000", 480), ("35 000 000", 580), ("25 000 000", 735)],
    [("26/06/2025", 45), ("100245", 120), ("IMPAYE", 200), ("SGBS", 300), ("CLIENT C", 380),
     ("CHEQUE SANS PROVISION", 480), ("450 000", 750)],
    [("27/06/2025", 45), ("100246", 120), ("REGUL IMPAYE", 200), ("SGBS", 300), ("CLIENT C", 380),
     ("REGULARISATION", 480), ("450 000", 750)],
]

# A genuine unpaid cheque whose description mentions a regularisation.
DESCRIBED_REGUL_ROW = [
    ("22/04/2025", 45), ("3361178", 120), ("IMPAYE", 200), ("CORIS", 300), ("CHAFIC AZAR & Cie", 380),
    ("REGUL IMPAYE + FRAIS", 480), ("2 000 000", 740),
]

# Same statement with French anchors and no zone table.
GENERIC_LINES = [
    [("RAPPROCHEMENT BANCAIRE", 45), ("30/06/2025", 400)],
    [("SOLDE D'OUVERTURE", 45), ("24/06/2025", 200), ("78 615 440", 735, 50)],
    [("DEPOTS NON CREDITES", 45)],
    [("DATE OPERATION", 50), ("DATE VALEUR", 120), ("LIBELLE", 200), ("FOURNISSEUR", 380), ("CLIENT", 480), ("MONTANT", 745)],
    [("24/06/2025", 50), ("25/06/2025", 120), ("VERSEMENT ESPECES", 200), ("SOCIETE ALPHA", 380), ("CLIENT UN", 480), ("3 000 000", 740)],
    [("25/06/2025", 50), ("26/06/2025", 120), ("REMISE CHEQUE", 200), ("SOCIETE BETA", 380), ("CLIENT DEUX", 480), ("12 500 000", 735, 50)],
    [("TOTAL DEPOTS", 45), ("15 500 000", 735, 50)],
    [("SOLDE DE CLOTURE : 94 115 440 FCFA", 45)],
]


@pytest.fixture
def make_run():
    return _run


@pytest.fixture
def make_page():
    return _page


@pytest.fixture
def bdk_page():
    return _page(BDK_LINES)


@pytest.fixture
def bdk_page_described_regul():
    return _page(BDK_LINES + [DESCRIBED_REGUL_ROW])


@pytest.fixture
def generic_page():
    return _page(GENERIC_LINES)


@pytest.fixture
def bdk_two_pages():
    # page break in the middle of the checks table
    return [_page(BDK_LINES[:10], page=1), _page(BDK_LINES[10:], page=2)]
