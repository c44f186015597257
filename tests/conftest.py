from __future__ import annotations

import json
import os
import tempfile

# Qt necesita un plugin de plataforma; offscreen evita depender de un display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
# Bitácoras de la sesión fuera del repositorio
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="incendios_cierre_log_"))

import pytest
import requests
from PySide6.QtWidgets import QApplication


def _ensure_app() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def qapp():
    return _ensure_app()


def http_error(status: int, body=None) -> requests.HTTPError:
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return requests.HTTPError(f"{status} Error", response=response)


class FakeApi:
    """ApiClient en memoria: registra llamadas y responde según ``responses``."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.token = None

    def set_token(self, token):
        self.token = token

    def _respond(self, method, path, payload=None, params=None):
        self.calls.append((method, path, payload if payload is not None else params))
        result = self.responses.get((method, path), {})
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(payload if payload is not None else params)
        return result

    def get(self, path, params=None):
        return self._respond("GET", path, params=params)

    def post(self, path, data=None):
        return self._respond("POST", path, data if data is not None else {})

    def patch(self, path, data):
        return self._respond("PATCH", path, data)

    def put(self, path, data):
        return self._respond("PUT", path, data)

    def delete(self, path):
        return self._respond("DELETE", path)


class _SyncSignal:
    def __init__(self):
        self._slots = []

    def connect(self, slot):
        self._slots.append(slot)

    def emit(self, *args):
        for slot in list(self._slots):
            slot(*args)


class SyncWorker:
    """Sustituto de ApiWorker que ejecuta la llamada en ``start()``."""

    def __init__(self, func, *args, parent=None, **kwargs):
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.finished = _SyncSignal()
        self.error = _SyncSignal()

    def isRunning(self):
        return False

    def start(self):
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as e:
            self.error.emit(e)
        else:
            self.finished.emit(result)


@pytest.fixture
def sync_workers(monkeypatch, qapp):
    from incendios_cierre.viewmodels import worker_viewmodel

    monkeypatch.setattr(worker_viewmodel, "ApiWorker", SyncWorker)
    return SyncWorker


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def admin_session():
    from incendios_cierre.services.session_service import SessionService

    session = SessionService()
    session.start("token", {"id": "u1", "is_admin": True})
    return session


@pytest.fixture
def user_session():
    from incendios_cierre.services.session_service import SessionService

    session = SessionService()
    session.start("token", {"id": "u2", "is_admin": False, "rol": {"nombre": "BRIGADISTA"}})
    return session
