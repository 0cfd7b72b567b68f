import pytest

try:
    from fastapi.testclient import TestClient  # type: ignore
    from xfernotify.service import build_app  # type: ignore
    FASTAPI_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency missing
    FASTAPI_AVAILABLE = False

from xfernotify.config import config_from_mapping
from xfernotify.metrics import Counters


pytestmark = pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi extra not installed")


def test_healthz():
    client = TestClient(build_app())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_stats_reflect_counters():
    counters = Counters()
    client = TestClient(build_app(counters))
    initial = client.get("/stats").json()
    assert initial["lines_read"] == 0

    counters.line(parsed=True)
    counters.line(parsed=False)
    counters.outcome("push", "delivered")
    counters.outcome("push", "skipped")
    counters.outcome("file", "failed")

    after = client.get("/stats").json()
    assert after["lines_read"] == 2
    assert after["records_parsed"] == 1
    assert after["lines_invalid"] == 1
    assert after["deliveries"] == {"push": 1}
    assert after["skips"] == {"push": 1}
    assert after["failures"] == {"file": 1}
    assert after["uptime_seconds"] >= 0


def test_outputs_do_not_leak_tokens():
    config = config_from_mapping({"pipe": "/tmp/p", "outputs": {"push": [{"token": "secret"}, {}]}})
    client = TestClient(build_app(Counters(), config))
    r = client.get("/outputs")
    assert r.status_code == 200
    data = r.json()
    assert data == {"pipe": "/tmp/p", "instances": {"file": 0, "syslog": 0, "push": 2}}
    assert "secret" not in r.text
