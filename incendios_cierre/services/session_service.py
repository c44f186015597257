from incendios_cierre.core.api_client import ApiClient
from incendios_cierre.services.logger_service import LoggerService
from incendios_cierre.workers.jwt_utils import claims_usuario


def is_admin_user(user) -> bool:
    """
    True si el usuario es administrador: flag is_admin del backend o, por
    compatibilidad, rol ADMIN / *SUPER*.
    """
    if not user:
        return False
    if user.get("is_admin") is True:
        return True
    rol = user.get("rol") or {}
    rol_name = str(rol.get("nombre") or "").upper() if isinstance(rol, dict) else ""
    return rol_name == "ADMIN" or "SUPER" in rol_name


class SessionService:
    """Sesión en memoria: token y usuario de la persona conectada."""

    def __init__(self, api_client: ApiClient = None):
        self.api = api_client
        self.token = None
        self.user = None

    def start(self, token: str, user: dict = None):
        self.token = token
        self.user = user if user is not None else claims_usuario(token)
        LoggerService().init_session(str(self.user.get("email") or self.user.get("id") or "unknown"))
        if self.api is not None:
            self.api.set_token(token)

    def get_user(self):
        return self.user

    def is_admin(self) -> bool:
        return is_admin_user(self.user)

    def clear(self):
        self.token = None
        self.user = None
        if self.api is not None:
            self.api.set_token(None)
