from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.clinica.core.errors import setup_exception_handlers
from app.clinica.core.metrics import metrics


def _content() -> str:
    return metrics.render().content.decode("utf-8")


def test_lock_timeout_maps_to_conflict():
    metrics.reset()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/lock-timeout")
    def lock_timeout():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/lock-timeout")

    assert response.status_code == 409
    assert response.json()["code"] == "LOCK_TIMEOUT"
    if metrics.enabled:
        assert "lock_wait_timeout_total 1.0" in _content()


def test_unhandled_error_is_enveloped():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    payload = response.json()
    assert payload["code"] == "INTERNAL_ERROR"
    assert payload["details"] == {"type": "RuntimeError"}


def test_cash_cut_metrics_are_labelled():
    metrics.reset()
    metrics.record_cash_cut(kind="opening")
    metrics.record_cash_cut(kind="scheduled", direction="short")
    if metrics.enabled:
        content = _content()
        assert 'cash_cuts_recorded_total{kind="scheduled"} 1.0' in content
        assert 'cash_cut_discrepancy_total{direction="short"} 1.0' in content
