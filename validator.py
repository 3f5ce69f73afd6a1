# validator.py
# Accounting identity for reconciliation reports:
#   total A            = opening + sum(deposits not yet cleared)
#   calculated closing = total A - sum(checks not yet cleared)
#   valid              = |calculated closing - declared closing| < tolerance
import logging
from typing import Dict, List, Optional

from parsers.records import (
    Check, Deposit, Facility, FacilityTotals, OpeningBalance,
    StatementExtractionResult, UnpaidItem, Validation,
)

log = logging.getLogger(__name__)

ABS_TOL = 1000  # whole FCFA


def _fmt(x) -> str:
    return "None" if x is None else f"{int(x):,}".replace(",", " ")


def _cmp(a: Optional[int], b: Optional[int], tol: int = ABS_TOL):
    """Compare with tolerance; return (delta = a - b, ok). None if either is missing."""
    if a is None or b is None:
        return None, None
    d = int(a) - int(b)
    return d, abs(d) < tol


def validate_balances(opening: int, total_deposits: int, total_checks: int,
                      closing: int, tolerance: int = ABS_TOL) -> Validation:
    total_a = int(opening) + int(total_deposits)
    calculated = total_a - int(total_checks)
    discrepancy, ok = _cmp(calculated, closing, tolerance)
    return Validation(calculated_closing=calculated, is_valid=bool(ok), discrepancy=int(discrepancy))


def facility_totals(facilities: List[Facility], declared: Optional[FacilityTotals] = None) -> FacilityTotals:
    if declared is not None:
        return declared
    return FacilityTotals(
        total_limit=sum(f.limit for f in facilities),
        total_used=sum(f.used for f in facilities),
        total_balance=sum(f.balance for f in facilities),
    )


def quality_warnings(opening: OpeningBalance,
                     facilities: List[Facility],
                     unpaid: List[UnpaidItem],
                     computed: Dict[str, int],
                     declared: Dict[str, Optional[int]],
                     tolerance: int = ABS_TOL) -> List[str]:
    """Non-fatal data-quality findings, surfaced for human review."""
    warnings: List[str] = []

    for key, label in (("deposits", "deposits"), ("checks", "checks")):
        d, ok = _cmp(computed.get(key), declared.get(key), tolerance)
        if ok is False:
            warnings.append(
                f"Declared total {label} {_fmt(declared.get(key))} differs from the sum of "
                f"extracted rows {_fmt(computed.get(key))} (delta {_fmt(d)})"
            )

    for i, f in enumerate(facilities, start=1):
        d, ok = _cmp(f.limit - f.used, f.balance, tolerance)
        if ok is False:
            warnings.append(
                f"Facility {i} ({f.name}): limit - used = {_fmt(f.limit - f.used)} "
                f"but reported balance is {_fmt(f.balance)}"
            )

    for i, u in enumerate(unpaid, start=1):
        if u.amount <= 0:
            warnings.append(f"Unpaid item {i}: invalid amount ({_fmt(u.amount)})")
        if not u.client.strip():
            warnings.append(f"Unpaid item {i}: missing client")

    if opening.amount == 0 and not opening.date:
        warnings.append("Opening balance not found")
    return warnings


def assemble_result(report_date: str,
                    opening: OpeningBalance,
                    deposits: List[Deposit],
                    checks: List[Check],
                    closing: int,
                    facilities: List[Facility],
                    unpaid: List[UnpaidItem],
                    declared_facilities: Optional[FacilityTotals] = None,
                    declared_totals: Optional[Dict[str, Optional[int]]] = None,
                    warnings: Optional[List[str]] = None,
                    tolerance: int = ABS_TOL) -> StatementExtractionResult:
    """Compute totals and validation so every strategy builds results the same way."""
    total_deposits = sum(d.amount for d in deposits)
    total_checks = sum(c.amount for c in checks)
    validation = validate_balances(opening.amount, total_deposits, total_checks, closing, tolerance)

    notes = list(warnings or [])
    notes += quality_warnings(
        opening, facilities, unpaid,
        computed={"deposits": total_deposits, "checks": total_checks},
        declared=declared_totals or {},
        tolerance=tolerance,
    )
    if not validation.is_valid:
        log.warning("closing balance mismatch: calculated %s vs declared %s (discrepancy %s)",
                    _fmt(validation.calculated_closing), _fmt(closing), _fmt(validation.discrepancy))

    return StatementExtractionResult(
        report_date=report_date,
        opening_balance=opening,
        deposits=list(deposits),
        total_deposits=total_deposits,
        total_balance_a=opening.amount + total_deposits,
        checks=list(checks),
        total_checks=total_checks,
        closing_balance=int(closing),
        facilities=list(facilities),
        total_facilities=facility_totals(facilities, declared_facilities),
        unpaid_items=list(unpaid),
        validation=validation,
        warnings=notes,
    )


def print_validation(result: StatementExtractionResult, label: str = "") -> bool:
    print(f"\n=== VALIDATION (balances) {label} ===")
    v = result.validation
    print(f"  Opening:   {_fmt(result.opening_balance.amount)} ({result.opening_balance.date or 'no date'})")
    print(f"  Deposits:  {_fmt(result.total_deposits)} ({len(result.deposits)} rows)")
    print(f"  Checks:    {_fmt(result.total_checks)} ({len(result.checks)} rows)")
    print(f"  {'✅' if v.is_valid else '❌'} Closing: declared {_fmt(result.closing_balance)} "
          f"vs calculated {_fmt(v.calculated_closing)} Δ {_fmt(v.discrepancy)}")
    for w in result.warnings:
        print(f"  ⚠️  {w}")
    return v.is_valid
