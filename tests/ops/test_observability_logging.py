import json
import logging
from types import SimpleNamespace

from starlette.requests import Request
from starlette.responses import Response

from app.clinica.middleware.observability import build_request_log_payload


def test_build_request_log_payload():
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/clinica/pos/cash/cuts",
        "headers": [],
        "route": SimpleNamespace(path="/clinica/pos/cash/cuts"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.user_id = "user-1"
    request.state.role = "RECEPTIONIST"
    request.state.error_code = "DUPLICATE_CUT"
    response = Response(status_code=409)

    payload = build_request_log_payload(
        request=request,
        response=response,
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["event"] == "http_request"
    assert payload["trace_id"] == "trace-1"
    assert payload["user_id"] == "user-1"
    assert payload["role"] == "RECEPTIONIST"
    assert payload["route"] == "/clinica/pos/cash/cuts"
    assert payload["status_code"] == 409
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57
    assert payload["error_code"] == "DUPLICATE_CUT"


def test_request_log_line_is_emitted(client, caplog):
    with caplog.at_level(logging.INFO, logger="clinica.request"):
        client.get("/health", headers={"X-Trace-ID": "trace-log"})

    lines = [json.loads(record.getMessage()) for record in caplog.records if record.name == "clinica.request"]
    assert lines
    assert lines[-1]["trace_id"] == "trace-log"
    assert lines[-1]["route"] == "/health"
    assert lines[-1]["status_code"] == 200
