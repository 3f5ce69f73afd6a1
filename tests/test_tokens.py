from parsers.tokens import (
    check_amount_from_tokens, deposits_from_tokens, is_amount_token, split_proportional, trailing_number,
)

UNITS = ("FCFA", "XOF", "CFA")


def test_invoice_number_is_kept_apart_from_amount():
    amount, reference, rest = check_amount_from_tokens(["FOURNITURE", "JADO", "100302", "870"], UNITS)
    assert amount == 870
    assert reference == "100302"
    assert rest == ["FOURNITURE", "JADO"]


def test_shorter_groups_after_reference_are_concatenated():
    amount, reference, _ = check_amount_from_tokens(["LOYER", "100129", "798", "990"], UNITS)
    assert (amount, reference) == (798990, "100129")


def test_lone_long_number_is_the_amount():
    amount, reference, rest = check_amount_from_tokens(["LOYER", "1500000"], UNITS)
    assert (amount, reference, rest) == (1500000, None, ["LOYER"])


def test_currency_unit_marks_the_amount():
    amount, reference, rest = check_amount_from_tokens(["PAIEMENT", "100302", "870 000", "FCFA"], UNITS)
    assert (amount, reference, rest) == (870000, "100302", ["PAIEMENT"])
    amount, _, _ = check_amount_from_tokens(["PAIEMENT", "81 330 157 FCFA"], UNITS)
    assert amount == 81330157


def test_no_numbers():
    assert check_amount_from_tokens(["ABC"], UNITS) == (0, None, ["ABC"])


def test_trailing_number():
    assert trailing_number(["CLIENT", "71", "176"]) == (71176, 2)
    assert trailing_number(["CLIENT", "71 176"]) == (71176, 1)
    assert trailing_number(["CLIENT", "1500000"]) == (1500000, 1)
    assert trailing_number(["CLIENT"]) == (0, 0)
    assert trailing_number([]) == (0, 0)


def test_split_proportional():
    assert split_proportional(["a", "b", "c", "d"], 3) == ["a b", "c", "d"]
    assert split_proportional([], 3) == ["", "", ""]


def test_amount_token_floor():
    assert is_amount_token("3 000 000", 500)
    assert not is_amount_token("450", 500)
    assert not is_amount_token("24/06/2025", 500)


def test_deposits_from_two_date_runs():
    toks = [
        "24/06/2025", "25/06/2025", "VERSEMENT", "SOCIETE", "ALPHA", "CLIENT", "3 000 000",
        "25/06/2025", "26/06/2025", "REMISE", "1 500 000",
    ]
    deps = deposits_from_tokens(toks, 500)
    assert [d.amount for d in deps] == [3000000, 1500000]
    first = deps[0]
    assert (first.description, first.vendor, first.client) == ("VERSEMENT SOCIETE", "ALPHA", "CLIENT")
    assert (deps[1].description, deps[1].vendor, deps[1].client) == ("REMISE", "N/A", "N/A")


def test_deposit_without_amount_is_dropped():
    assert deposits_from_tokens(["24/06/2025", "25/06/2025", "NOTE", "12"], 500) == []
