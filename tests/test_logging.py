import io
import json

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from epp_repo_ids.logging import configure_logging, get_logger, printable, printable_processor
from epp_repo_ids.main import app
from epp_repo_ids.models import Rejected, RejectReason
from epp_repo_ids.validate import validate

REJECTED_FIELDS = {
    RejectReason.UNPARSABLE: "no comma here",
    RejectReason.MALFORMED_CODE_POINTS: "MX, U+004D U+0058",
    RejectReason.MISMATCH: "ENUMAT, #x0045 #x004E #x0055 #x004D #x0041",
    RejectReason.TOO_LONG: "ABCDEFGHI, #x0041 #x0042 #x0043 #x0044 #x0045 #x0046 #x0047 #x0048 #x0049",
    RejectReason.ILLEGAL_CODE_POINT: "Z\U0001F600, #x005A #x1F600",
}


@pytest.fixture
def diagnostics():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    return stream


def _is_printable_ascii(text):
    return all(" " <= ch <= "~" for ch in text)


def test_printable():
    assert printable("Z\x85\U0001F600 ok\x1b[0m") == "Z?? ok?[0m"


def test_printable_processor_sanitizes_nested_strings():
    event = printable_processor(None, "warning", {
        "event": "record_rejected",
        "field": "Z\U0001F600",
        "context": {"raw": "a\tb"},
        "record": 7,
    })
    assert event == {
        "event": "record_rejected",
        "field": "Z?",
        "context": {"raw": "a?b"},
        "record": 7,
    }


@pytest.mark.parametrize("reason", list(RejectReason))
def test_every_rejection_emits_a_diagnostic(reason):
    with capture_logs() as logs:
        result = validate(REJECTED_FIELDS[reason], 5)

    assert isinstance(result, Rejected)
    assert result.reason is reason
    rejected = [entry for entry in logs if entry["event"] == "record_rejected"]
    assert len(rejected) == 1
    assert rejected[0]["log_level"] == "warning"
    assert rejected[0]["reason"] == reason.value
    assert rejected[0]["record"] == 5


def test_accepted_record_emits_no_rejection():
    with capture_logs() as logs:
        validate("MX, #x004D #x0058", 2)
    assert not [entry for entry in logs if entry["event"] == "record_rejected"]


def test_rendered_diagnostics_are_printable(diagnostics):
    validate("Z\x85\U0001F600, #x005A #x0085 #x1F600", 3)

    lines = diagnostics.getvalue().splitlines()
    assert lines
    assert all(_is_printable_ascii(line) for line in lines)
    entry = json.loads(lines[-1])
    assert entry["event"] == "record_rejected"
    assert entry["field"] == "Z??, #x005A #x0085 #x1F600"


def test_exception_text_is_sanitized(diagnostics):
    try:
        raise ValueError("bad \U0001F600 value")
    except ValueError:
        get_logger("tests").error("update_failed", exc_info=True)

    entry = json.loads(diagnostics.getvalue().splitlines()[-1])
    assert "bad ? value" in entry["exception"]
    assert "\n" not in entry["exception"]


def test_http_surface_diagnostics_are_printable(diagnostics):
    raw = (
        "EPP Repository ID,Change Controller,Reference/Contact,Registration Date\n"
        '"Z\u0085\U0001F600, #x005A #x0085 #x1F600",Example,[x],2020-01-01\n'
    ).encode("utf-8")
    files = {"file": ("registry.csv", raw, "text/csv")}
    r = TestClient(app).post("/normalize", files=files)
    assert r.status_code == 200

    output = diagnostics.getvalue()
    assert "record_rejected" in output
    assert _is_printable_ascii(output.replace("\n", ""))
