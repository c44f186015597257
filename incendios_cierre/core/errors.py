import requests


class CierreError(Exception):
    """Error base del subsistema de cierre. Lleva título y mensaje para la UI."""

    titulo = "Error"

    def __init__(self, mensaje: str, titulo: str = None):
        super().__init__(mensaje)
        self.mensaje = mensaje
        if titulo:
            self.titulo = titulo


class FormValidationError(CierreError):
    """Validación local: nunca llega a la red."""

    titulo = "Validación"

    def __init__(self, mensaje: str, titulo: str = None, errores: dict = None):
        super().__init__(mensaje, titulo)
        self.errores = dict(errores or {})


class PermissionDeniedError(CierreError):
    titulo = "No permitido"


class LoadError(CierreError):
    pass


class SaveError(CierreError):
    pass


class FinalizeError(CierreError):
    pass


class ReopenError(CierreError):
    pass


def server_message(error, fallback: str) -> str:
    """
    Mensaje legible de un error de red.
    Prioriza error.message y message del cuerpo JSON del backend.
    """
    response = getattr(error, "response", None)
    if isinstance(error, requests.HTTPError) and response is not None:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            err = data.get("error")
            if isinstance(err, dict) and err.get("message"):
                return str(err["message"])
            if data.get("message"):
                return str(data["message"])
            if isinstance(err, str) and err:
                return err
    text = str(error) if error is not None else ""
    return text or fallback
