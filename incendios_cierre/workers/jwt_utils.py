import base64
import binascii
import json


def decode_jwt(token: str) -> dict:
    """
    Decodifica el payload de un JWT sin validar la firma.
    Solo sirve para leer datos del usuario; la autorización real la hace el backend.
    """
    try:
        payload_part = token.split(".")[1]
        payload_part += "=" * (-len(payload_part) % 4)
        data = json.loads(base64.urlsafe_b64decode(payload_part).decode("utf-8"))
    except (AttributeError, IndexError, binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ValueError(f"Token inválido: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Token inválido: el payload no es un objeto")
    return data


def claims_usuario(token: str) -> dict:
    """Usuario de sesión a partir de los claims: id, email, is_admin y rol."""
    claims = decode_jwt(token)
    return {
        "id": claims.get("id") or claims.get("sub") or claims.get("userId"),
        "email": claims.get("email"),
        "is_admin": claims.get("is_admin") is True,
        "rol": claims.get("rol"),
    }
