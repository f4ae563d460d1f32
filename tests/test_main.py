from __future__ import annotations

import importlib
import logging

from fastapi.testclient import TestClient

from account_service import main
from account_service.main import app


def test_healthz_and_metrics_are_served():
    client = TestClient(app)

    assert client.get("/healthz").json() == {"status": "ok"}

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "account_login_attempts" in metrics.text


def test_importing_app_leaves_root_handlers_alone():
    root = logging.getLogger()
    marker = logging.NullHandler()
    root.addHandler(marker)
    try:
        importlib.reload(main)

        assert marker in root.handlers
    finally:
        root.removeHandler(marker)
