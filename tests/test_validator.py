from parsers.records import Check, Deposit, Facility, FacilityTotals, OpeningBalance, UnpaidItem
from validator import assemble_result, facility_totals, print_validation, validate_balances


def _deposit(amount):
    return Deposit("24/06/2025", "25/06/2025", "VERSEMENT", "N/A", "N/A", amount)


def _check(amount):
    return Check("20/06/2025", "0215634", "FOURNITURE", amount)


def test_reconciliation_within_tolerance():
    v = validate_balances(5_000_000, 10_000_000, 2_000_000, 13_000_500)
    assert v.calculated_closing == 13_000_000
    assert v.discrepancy == -500
    assert v.is_valid


def test_tolerance_is_strict():
    assert not validate_balances(0, 1000, 0, 0).is_valid
    assert validate_balances(0, 999, 0, 0).is_valid


def test_totals_are_exact_sums():
    opening = OpeningBalance("24/06/2025", 5_000_000)
    result = assemble_result(
        "24/06/2025", opening,
        deposits=[_deposit(4_000_000), _deposit(6_000_000)],
        checks=[_check(1_500_000), _check(500_000)],
        closing=13_000_000,
        facilities=[], unpaid=[],
    )
    assert result.total_deposits == 10_000_000
    assert result.total_checks == 2_000_000
    assert result.total_balance_a == 15_000_000
    assert result.validation.calculated_closing == 13_000_000
    assert result.validation.is_valid
    assert result.warnings == []


def test_quality_warnings():
    result = assemble_result(
        "", OpeningBalance(),
        deposits=[_deposit(1_000)], checks=[],
        closing=0,
        facilities=[Facility("DECOUVERT", 50_000_000, 30_000_000, 10_000_000)],
        unpaid=[UnpaidItem("26/06/2025", "100245", "IMPAYE", "SGBS", " ", "X", 0)],
        declared_totals={"deposits": 9_000, "checks": None},
    )
    text = "\n".join(result.warnings)
    assert "Opening balance not found" in text
    assert "Declared total deposits" in text
    assert "Facility 1 (DECOUVERT)" in text
    assert "Unpaid item 1: invalid amount" in text
    assert "Unpaid item 1: missing client" in text


def test_facility_totals_prefer_declared():
    fac = [Facility("A", 10, 4, 6), Facility("B", 20, 5, 15)]
    assert facility_totals(fac) == FacilityTotals(30, 9, 21)
    assert facility_totals(fac, FacilityTotals(1, 2, 3)) == FacilityTotals(1, 2, 3)


def test_result_to_dict_uses_iso_dates_and_camel_case():
    result = assemble_result("24/06/2025", OpeningBalance("24/06/2025", 1), [_deposit(600)], [], 601, [], [])
    out = result.to_dict()
    assert out["reportDate"] == "2025-06-24"
    assert out["deposits"][0]["dateValeur"] == "2025-06-25"
    assert out["validation"] == {"calculatedClosing": 601, "isValid": True, "discrepancy": 0}
    assert result.to_dict(iso_dates=False)["reportDate"] == "24/06/2025"



def test_records_in_document_order_and_counts():
    opening = OpeningBalance("24/06/2025", 1)
    fac = Facility("A", 10, 4, 6)
    result = assemble_result("", opening, [_deposit(600), _deposit(700)], [_check(900)], 401, [fac], [])
    assert result.records()[0] == opening
    assert result.records()[1:] == [_deposit(600), _deposit(700), _check(900), fac]
    assert result.counts() == {"deposits": 2, "checks": 1, "facilities": 1, "unpaidItems": 0}

def test_print_validation(capsys):
    result = assemble_result("", OpeningBalance("24/06/2025", 1), [], [], 5000, [], [])
    assert print_validation(result, "demo") is False
    assert "demo" in capsys.readouterr().out
