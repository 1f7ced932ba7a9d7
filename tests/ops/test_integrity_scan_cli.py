import json
from datetime import date
from decimal import Decimal

from app.clinica.core.clock import to_storage
from app.clinica.db.models import CashCutRecord
from app.clinica.services.cut_processor import CashCutService
from app.ops.integrity_scan import main, run_scan
from tests.cash_helpers import add_sale, local_time


def _database_url(db_session) -> str:
    return db_session.get_bind().url.render_as_string(hide_password=False)


def test_integrity_scan_clean_ledger(db_session, capsys):
    service = CashCutService(db_session)
    service.open_session("1000", None, local_time(8, 0))
    add_sale(db_session, total=200, method="cash", at=local_time(9, 0))
    service.record_cut("14:00", "1200", None, None, local_time(14, 0))

    exit_code = run_scan("2026-03-10", "json", True, database_url=_database_url(db_session))
    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["summary"] == {"days_scanned": 1, "total": 0, "critical": 0, "warn": 0}


def test_integrity_scan_critical_exit(db_session, capsys):
    service = CashCutService(db_session)
    service.open_session("1000", None, local_time(8, 0))
    db_session.add(
        CashCutRecord(
            business_date=date(2026, 3, 10),
            ledger_seq=1,
            cut_time="14:00",
            opening_balance=Decimal("900.00"),
            closing_balance_reported=Decimal("900.00"),
            discrepancy=Decimal("0.00"),
            window_start=to_storage(local_time(8, 0)),
            created_at=to_storage(local_time(14, 0)),
        )
    )
    db_session.commit()

    exit_code = run_scan("all", "json", True, database_url=_database_url(db_session))
    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["summary"]["critical"] == 1
    assert payload["findings"][0]["check_id"] == "chain_continuity"


def test_integrity_scan_text_format(db_session, capsys):
    exit_code = main(
        ["--date", "2026-03-10", "--format", "text", "--database-url", _database_url(db_session)]
    )
    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Cash Ledger Integrity Report" in output
    assert "Days scanned: 1" in output


def test_integrity_scan_disabled(monkeypatch, capsys):
    from app.ops import integrity_scan

    monkeypatch.setattr(integrity_scan.settings, "OPS_ENABLE_INTEGRITY_SCAN", False)
    assert run_scan("all", "json", True, database_url="sqlite+pysqlite:///:memory:") == 2
    assert "disabled" in capsys.readouterr().err
