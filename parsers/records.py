# parsers/records.py
# Typed statement records, one class per section kind, plus the assembled result.
# Dates stay DD/MM/YYYY inside the pipeline; to_dict(iso_dates=True) converts them.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Union

from utils import to_iso_date


def _d(value: Optional[str], iso: bool) -> Optional[str]:
    if value is None:
        return None
    return to_iso_date(value) if iso else value


@dataclass(frozen=True)
class OpeningBalance:
    date: str = ""
    amount: int = 0
    kind: str = "opening"

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {"date": _d(self.date, iso_dates), "amount": self.amount}


@dataclass(frozen=True)
class Deposit:
    date_operation: str
    date_valeur: str
    description: str
    vendor: str
    client: str
    amount: int
    kind: str = "deposit"

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "dateOperation": _d(self.date_operation, iso_dates),
            "dateValeur": _d(self.date_valeur, iso_dates),
            "description": self.description,
            "vendor": self.vendor,
            "client": self.client,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class Check:
    date: str
    check_number: str
    description: str
    amount: int
    client: Optional[str] = None
    reference: Optional[str] = None
    kind: str = "check"

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "date": _d(self.date, iso_dates),
            "checkNumber": self.check_number,
            "description": self.description,
            "client": self.client,
            "reference": self.reference,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class Facility:
    name: str
    limit: int
    used: int
    balance: int
    date_echeance: Optional[str] = None
    kind: str = "facility"

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dateEcheance": _d(self.date_echeance, iso_dates),
            "limit": self.limit,
            "used": self.used,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class UnpaidItem:
    date: str
    reference: str
    type: str
    bank: str
    client: str
    description: str
    amount: int
    kind: str = "unpaid"

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "date": _d(self.date, iso_dates),
            "reference": self.reference,
            "type": self.type,
            "bank": self.bank,
            "client": self.client,
            "description": self.description,
            "amount": self.amount,
        }


StatementRecord = Union[OpeningBalance, Deposit, Check, Facility, UnpaidItem]


@dataclass(frozen=True)
class FacilityTotals:
    total_limit: int = 0
    total_used: int = 0
    total_balance: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLimit": self.total_limit,
            "totalUsed": self.total_used,
            "totalBalance": self.total_balance,
        }


@dataclass(frozen=True)
class Validation:
    calculated_closing: int
    is_valid: bool
    discrepancy: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calculatedClosing": self.calculated_closing,
            "isValid": self.is_valid,
            "discrepancy": self.discrepancy,
        }


_COUNT_KEYS = {Deposit: "deposits", Check: "checks", Facility: "facilities", UnpaidItem: "unpaidItems"}


@dataclass
class StatementExtractionResult:
    report_date: str
    opening_balance: OpeningBalance
    deposits: List[Deposit]
    total_deposits: int
    total_balance_a: int
    checks: List[Check]
    total_checks: int
    closing_balance: int
    facilities: List[Facility]
    total_facilities: FacilityTotals
    unpaid_items: List[UnpaidItem]
    validation: Validation
    warnings: List[str] = field(default_factory=list)

    def records(self) -> List[StatementRecord]:
        """Every parsed record in document order, opening balance first."""
        return [self.opening_balance, *self.deposits, *self.checks, *self.facilities, *self.unpaid_items]

    def counts(self) -> Dict[str, int]:
        out = {"deposits": 0, "checks": 0, "facilities": 0, "unpaidItems": 0}
        for rec in self.records():
            key = _COUNT_KEYS.get(type(rec))
            if key:
                out[key] += 1
        return out

    def to_dict(self, iso_dates: bool = True) -> Dict[str, Any]:
        return {
            "reportDate": _d(self.report_date, iso_dates),
            "openingBalance": self.opening_balance.to_dict(iso_dates),
            "deposits": [d.to_dict(iso_dates) for d in self.deposits],
            "totalDeposits": self.total_deposits,
            "totalBalanceA": self.total_balance_a,
            "checks": [c.to_dict(iso_dates) for c in self.checks],
            "totalChecks": self.total_checks,
            "closingBalance": self.closing_balance,
            "facilities": [f.to_dict(iso_dates) for f in self.facilities],
            "totalFacilities": self.total_facilities.to_dict(),
            "unpaidItems": [u.to_dict(iso_dates) for u in self.unpaid_items],
            "validation": self.validation.to_dict(),
            "warnings": list(self.warnings),
        }
