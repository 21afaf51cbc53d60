import os
import subprocess
import sys
from pathlib import Path

import pytest

from app.customer_service import create_app
from app.customer_service.models import Base


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_request_id_header(client):
    r1 = client.get("/health")
    r2 = client.get("/health")
    assert r1.headers.get("X-Request-ID")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json == {"error": "Not Found"}


def test_wrong_method_is_json_405(client):
    r = client.patch("/customers/1", json={"name": "x"})
    assert r.status_code == 405
    assert r.json == {"error": "Method Not Allowed"}


def test_oversized_body_is_json_413(client):
    r = client.post("/customers", data="x" * (1024 * 1024 + 1), content_type="application/json")
    assert r.status_code == 413
    assert "too large" in r.json["error"]


@pytest.mark.parametrize("module", ["app.wsgi", "app.customer_service.modules.customers.api"])
def test_entry_points_import_cleanly(tmp_path, module):
    # Fresh interpreter, so modules cached by other tests cannot hide import cycles.
    root = Path(__file__).resolve().parents[1]
    env = dict(os.environ, DATABASE_URL=f"sqlite:///{tmp_path/'wsgi.db'}", ENV="test", PYTHONPATH=str(root))
    r = subprocess.run([sys.executable, "-c", f"import {module}"], cwd=root, env=env, capture_output=True, text=True)
    assert r.returncode == 0, r.stderr
