from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from app.clinica.core.metrics import metrics
from app.clinica.repos.cash_cuts import CashCutRepository

SEVERITY_CRITICAL = "CRITICAL"
SEVERITY_WARN = "WARN"
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class IntegrityFinding:
    check_id: str
    severity: str
    business_date: str
    message: str
    entity: str
    entity_id: str | None
    details: dict


def _finding(check_id: str, severity: str, day: date, message: str, record=None, details: dict | None = None):
    return IntegrityFinding(
        check_id=check_id,
        severity=severity,
        business_date=day.isoformat(),
        message=message,
        entity="cash_cut_records",
        entity_id=str(record.id) if record is not None else None,
        details=details or {},
    )


def _report(check_id: str, findings: list[IntegrityFinding]) -> list[IntegrityFinding]:
    if findings:
        metrics.increment_invariant_violation(check_id, len(findings))
    return findings


def _ordered(records) -> list:
    return sorted(records, key=lambda record: record.ledger_seq)


def resolve_business_dates(db, value: str) -> list[date]:
    if value.lower() != "all":
        return [date.fromisoformat(value)]
    return CashCutRepository(db).list_business_dates()


def check_opening_unique(records, day: date) -> list[IntegrityFinding]:
    openings = [record for record in records if record.cut_time is None]
    findings = [
        _finding(
            "opening_unique",
            SEVERITY_CRITICAL,
            day,
            "More than one opening balance recorded for the day.",
            record,
        )
        for record in openings[1:]
    ]
    return _report("opening_unique", findings)


def check_cut_label_unique(records, day: date) -> list[IntegrityFinding]:
    counts = Counter(record.cut_time for record in records if record.cut_time is not None)
    findings = [
        _finding(
            "cut_label_unique",
            SEVERITY_CRITICAL,
            day,
            "Cut time recorded more than once for the day.",
            details={"cut_time": label, "count": count},
        )
        for label, count in sorted(counts.items())
        if count > 1
    ]
    return _report("cut_label_unique", findings)


def check_opening_first(records, day: date) -> list[IntegrityFinding]:
    ordered = _ordered(records)
    if not ordered or ordered[0].cut_time is None:
        return []
    has_opening = any(record.cut_time is None for record in ordered)
    message = (
        "Cuts recorded before the opening balance."
        if has_opening
        else "Cuts recorded on a day without opening balance."
    )
    return _report(
        "opening_first",
        [_finding("opening_first", SEVERITY_CRITICAL, day, message, ordered[0], {"cut_time": ordered[0].cut_time})],
    )


def check_chain_continuity(records, day: date) -> list[IntegrityFinding]:
    ordered = _ordered(records)
    findings = []
    for previous, current in zip(ordered, ordered[1:]):
        if current.opening_balance != previous.closing_balance_reported:
            findings.append(
                _finding(
                    "chain_continuity",
                    SEVERITY_CRITICAL,
                    day,
                    "Opening balance does not match the previous reported closing balance.",
                    current,
                    {
                        "cut_time": current.cut_time,
                        "opening_balance": str(current.opening_balance),
                        "previous_closing_balance": str(previous.closing_balance_reported),
                    },
                )
            )
    return _report("chain_continuity", findings)


def check_window_continuity(records, day: date) -> list[IntegrityFinding]:
    ordered = _ordered(records)
    findings = []
    for previous, current in zip(ordered, ordered[1:]):
        if current.window_start != previous.created_at or current.created_at < previous.created_at:
            findings.append(
                _finding(
                    "window_continuity",
                    SEVERITY_CRITICAL,
                    day,
                    "Cut window does not start at the previous ledger record.",
                    current,
                    {
                        "cut_time": current.cut_time,
                        "window_start": str(current.window_start),
                        "previous_created_at": str(previous.created_at),
                    },
                )
            )
    return _report("window_continuity", findings)


def check_discrepancy_formula(records, day: date) -> list[IntegrityFinding]:
    findings = []
    for record in records:
        expected_discrepancy = record.closing_balance_reported - (record.opening_balance + record.cash_sales)
        expected_total = record.cash_sales + record.card_sales + record.transfer_sales
        if record.discrepancy != expected_discrepancy or record.total_sales != expected_total:
            findings.append(
                _finding(
                    "discrepancy_formula",
                    SEVERITY_CRITICAL,
                    day,
                    "Stored totals do not match the cut formula.",
                    record,
                    {
                        "cut_time": record.cut_time,
                        "discrepancy": str(record.discrepancy),
                        "expected_discrepancy": str(expected_discrepancy),
                        "total_sales": str(record.total_sales),
                        "expected_total_sales": str(expected_total),
                    },
                )
            )
    return _report("discrepancy_formula", findings)


def check_opening_record_shape(records, day: date) -> list[IntegrityFinding]:
    findings = []
    for record in records:
        if record.cut_time is not None:
            continue
        if (
            record.total_sales != ZERO
            or record.sales_count != 0
            or record.discrepancy != ZERO
            or record.closing_balance_reported != record.opening_balance
        ):
            findings.append(
                _finding(
                    "opening_record_shape",
                    SEVERITY_WARN,
                    day,
                    "Opening balance record carries sales or a discrepancy.",
                    record,
                    {"total_sales": str(record.total_sales), "discrepancy": str(record.discrepancy)},
                )
            )
    return _report("opening_record_shape", findings)


LEDGER_CHECKS = (
    check_opening_unique,
    check_cut_label_unique,
    check_opening_first,
    check_chain_continuity,
    check_window_continuity,
    check_discrepancy_formula,
    check_opening_record_shape,
)


def check_ledger(records, day: date) -> list[IntegrityFinding]:
    records = list(records)
    findings: list[IntegrityFinding] = []
    for check in LEDGER_CHECKS:
        findings.extend(check(records, day))
    return findings


def run_integrity_checks(db, day: date) -> list[IntegrityFinding]:
    return check_ledger(CashCutRepository(db).list_for_day(day), day)
