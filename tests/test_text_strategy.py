from layout.classes import ExtractionSettings
from parsers.text_strategy import build_text, extract_text_strategy, parse_statement_text, tokens
from templates.bdk import BDK_TEMPLATE

import pytest

from errors import ExtractionFailure

SETTINGS = ExtractionSettings()

REPORT = "\n".join([
    "24/06/2025  BDK  BANK RECONCILIATION REPORT",
    "OPENING BALANCE 24/06/2025 78 615 440",
    "ADD : DEPOSIT NOT YET CLEARED",
    "24/06/2025 25/06/2025  VERSEMENT ESPECES  SOCIETE ALPHA  CLIENT UN  3 000 000",
    "TOTAL DEPOSIT  3 000 000",
    "LESS : CHECK NOT YET CLEARED",
    "21/06/2025  0215635  FOURNITURE  JADO  CLIENT B  100302  870",
    "TOTAL (B)  870",
    "CLOSING BALANCE as per Book : C=(A-B) 81 614 570 FCFA",
    "BANK FACILITY",
    "30/09/2025  DECOUVERT  50 000 000  30 000 000  20 000 000",
    "26/06/2025 100245 IMPAYE  SGBS  CLIENT C  CHEQUE SANS PROVISION  450 000",
    "27/06/2025 100246 REGUL IMPAYE  SGBS  CLIENT C  REGULARISATION  450 000",
])


def test_build_text_breaks_lines_on_y_change(make_page):
    page = make_page([[("A", 10), ("B", 100)], [("C", 10)]])
    assert build_text([page], tolerance=5) == "A  B\nC"


def test_tokens_peel_dates_and_split_numbers():
    assert tokens("24/06/2025 25/06/2025  VERSEMENT  3 000 000") == [
        "24/06/2025", "25/06/2025", "VERSEMENT", "3", "000", "000",
    ]
    assert tokens("A  1 500", split_numbers=False) == ["A", "1 500"]


def test_parse_report_text():
    result = parse_statement_text(REPORT, BDK_TEMPLATE, SETTINGS)
    assert result.report_date == "24/06/2025"
    assert (result.opening_balance.date, result.opening_balance.amount) == ("24/06/2025", 78615440)

    assert len(result.deposits) == 1
    d = result.deposits[0]
    assert (d.description, d.vendor, d.client, d.amount) == ("VERSEMENT ESPECES", "SOCIETE ALPHA", "CLIENT UN", 3000000)

    assert len(result.checks) == 1
    c = result.checks[0]
    assert (c.check_number, c.reference, c.amount, c.client) == ("0215635", "100302", 870, "CLIENT B")

    assert result.closing_balance == 81614570
    assert [f.name for f in result.facilities] == ["DECOUVERT"]
    assert [u.amount for u in result.unpaid_items] == [450000]
    assert result.validation.is_valid
    assert result.validation.discrepancy == 0
    assert result.warnings == []


def test_missing_sections_are_warnings():
    result = parse_statement_text("24/06/2025  BDK\nSOMETHING ELSE", BDK_TEMPLATE, SETTINGS)
    assert result.deposits == [] and result.checks == []
    assert "Opening balance not found" in result.warnings
    assert "Closing balance not found" in result.warnings
    assert "Section 'deposits' not found" in result.warnings


def test_declared_total_mismatch_is_reported():
    text = REPORT.replace("TOTAL DEPOSIT  3 000 000", "TOTAL DEPOSIT  3 500 000")
    result = parse_statement_text(text, BDK_TEMPLATE, SETTINGS)
    assert result.total_deposits == 3000000
    assert any(w.startswith("Declared total deposits") for w in result.warnings)


def test_empty_pages_raise(make_page):
    with pytest.raises(ExtractionFailure):
        extract_text_strategy([make_page([])], BDK_TEMPLATE, SETTINGS)


def test_bdk_page(bdk_page):
    result = extract_text_strategy([bdk_page], BDK_TEMPLATE, SETTINGS)
    assert [d.amount for d in result.deposits] == [3000000, 1500000]
    assert [c.amount for c in result.checks] == [1200000, 870, 2500000]
    assert result.closing_balance == 79414570
    assert result.validation.is_valid


def test_unpaid_regularisation_only_counts_in_type_slot():
    text = REPORT + "\n22/04/2025 3361178 IMPAYE  CORIS  CHAFIC AZAR & Cie  REGUL IMPAYE + FRAIS  2 000 000"
    result = parse_statement_text(text, BDK_TEMPLATE, SETTINGS)
    assert [u.reference for u in result.unpaid_items] == ["100245", "3361178"]
    u = result.unpaid_items[1]
    assert (u.bank, u.client, u.description, u.amount) == ("CORIS", "CHAFIC AZAR & Cie", "REGUL IMPAYE + FRAIS", 2000000)


def test_bdk_page_with_regularisation_in_description(bdk_page_described_regul):
    result = extract_text_strategy([bdk_page_described_regul], BDK_TEMPLATE, SETTINGS)
    assert [u.amount for u in result.unpaid_items] == [450000, 2000000]
