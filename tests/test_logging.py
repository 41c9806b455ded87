import json
import logging

from app.core.logging import CustomJsonFormatter, request_id_var


def _format(message, **extra):
    formatter = CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)")
    record = logging.LogRecord("app.services.leave_workflow", logging.WARNING, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))

def test_log_line_carries_correlation_id():
    token = request_id_var.set("req-42")
    try:
        line = _format("Decision on leave request 7 with no current step", leave_request_id=7)
    finally:
        request_id_var.reset(token)

    assert line["request_id"] == "req-42"
    assert line["level"] == "WARNING"
    assert line["name"] == "app.services.leave_workflow"
    assert line["leave_request_id"] == 7
    assert line["timestamp"]

def test_log_line_without_request_context():
    line = _format("Leave event submitted for request 1")

    assert "request_id" not in line
    assert line["message"] == "Leave event submitted for request 1"
