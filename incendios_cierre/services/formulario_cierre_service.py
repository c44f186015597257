from typing import List

from incendios_cierre.config.settings import CIERRE_FORMULARIO_PATH, FINALIZAR_INCENDIO_PATH
from incendios_cierre.core.api_client import ApiClient
from incendios_cierre.models.plantilla import FormularioCierre
from incendios_cierre.models.respuestas import RespuestaInput


class FormularioCierreService:
    """Formulario de cierre basado en la plantilla activa."""

    def __init__(self, api_client: ApiClient, formulario_path: str = None, finalizar_path: str = None):
        self.api = api_client
        self.formulario_path = formulario_path or CIERRE_FORMULARIO_PATH
        self.finalizar_path = finalizar_path or FINALIZAR_INCENDIO_PATH

    def get_formulario_cierre(self, incendio_uuid: str) -> FormularioCierre:
        data = self.api.get(self.formulario_path.format(incendio_uuid=incendio_uuid)) or {}
        data.setdefault("incendio_uuid", incendio_uuid)
        return FormularioCierre.model_validate(data)

    def guardar_respuestas(self, incendio_uuid: str, respuestas: List[RespuestaInput]) -> dict:
        return self.api.post(
            f"/cierre/{incendio_uuid}/respuestas",
            {"respuestas": [r.to_wire() for r in respuestas]},
        )

    def actualizar_respuesta(self, incendio_uuid: str, respuesta: RespuestaInput) -> dict:
        body = respuesta.to_wire()
        body.pop("campo_uuid")
        return self.api.patch(f"/cierre/{incendio_uuid}/respuestas/{respuesta.campo_uuid}", body)

    def eliminar_respuesta(self, incendio_uuid: str, campo_uuid: str) -> dict:
        return self.api.delete(f"/cierre/{incendio_uuid}/respuestas/{campo_uuid}")

    def finalizar_incendio(self, incendio_uuid: str) -> dict:
        # Operación propia, aunque el backend la sirva en la misma ruta que el registro
        return self.api.post(self.finalizar_path.format(incendio_uuid=incendio_uuid), {})
