from fastapi import FastAPI
from fastapi.testclient import TestClient

import config
from errors import BadUpload, Forbidden, register_error_handlers


def make_app():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/forbidden")
    def forbidden():
        raise Forbidden("nope")

    @app.get("/upload")
    def upload():
        raise BadUpload("Please upload a file")

    @app.get("/boom")
    def boom():
        raise RuntimeError("disk on fire")

    return app


def test_typed_errors_map_to_envelope():
    client = TestClient(make_app())
    res = client.get("/forbidden")
    assert res.status_code == 403
    assert res.json() == {"success": False, "error": "nope"}
    assert client.get("/upload").status_code == 400


def test_unclassified_error_message_depends_on_environment(monkeypatch):
    client = TestClient(make_app(), raise_server_exceptions=False)

    monkeypatch.setattr(config, "ENVIRONMENT", "development")
    res = client.get("/boom")
    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "disk on fire"}

    monkeypatch.setattr(config, "ENVIRONMENT", "production")
    res = client.get("/boom")
    assert res.json() == {"success": False, "error": "Server Error"}
