import base64
import json

import pytest

from conftest import FakeApi
from incendios_cierre.services.session_service import SessionService, is_admin_user
from incendios_cierre.workers.jwt_utils import claims_usuario, decode_jwt


def _jwt(payload):
    body = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")
    return f"header.{body}.firma"


def test_decode_jwt():
    assert decode_jwt(_jwt({"id": "u1", "is_admin": True})) == {"id": "u1", "is_admin": True}
    with pytest.raises(ValueError):
        decode_jwt("no-es-un-token")
    with pytest.raises(ValueError):
        decode_jwt("a.WzEsIDJd.b")


def test_claims_usuario():
    assert claims_usuario(_jwt({"sub": "u9", "email": "ana@conaf.cl", "is_admin": "true"})) == {
        "id": "u9", "email": "ana@conaf.cl", "is_admin": False, "rol": None,
    }


@pytest.mark.parametrize("user,esperado", [
    (None, False),
    ({"is_admin": True}, True),
    ({"is_admin": "true"}, False),
    ({"rol": {"nombre": "admin"}}, True),
    ({"rol": {"nombre": "SuperUsuario"}}, True),
    ({"rol": {"nombre": "Brigadista"}}, False),
    ({"rol": "ADMIN"}, False),
])
def test_is_admin_user(user, esperado):
    assert is_admin_user(user) is esperado


def test_sesion_desde_token_propaga_al_cliente():
    api = FakeApi()
    session = SessionService(api)
    token = _jwt({"id": "u1", "rol": {"nombre": "ADMIN"}})
    session.start(token)

    assert api.token == token
    assert session.get_user()["id"] == "u1"
    assert session.is_admin()

    session.clear()
    assert api.token is None
    assert not session.is_admin()
