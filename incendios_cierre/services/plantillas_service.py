from typing import List

from incendios_cierre.core.api_client import ApiClient
from incendios_cierre.models.plantilla import Campo, Plantilla, Seccion

BASE = "/cierre-admin"


class PlantillasService:
    """Administración de plantillas de cierre (solo administradores)."""

    def __init__(self, api_client: ApiClient):
        self.api = api_client

    # ===== PLANTILLAS =====
    def list_plantillas(self) -> List[Plantilla]:
        data = self.api.get(f"{BASE}/plantillas") or {}
        return [Plantilla.model_validate(p) for p in data.get("plantillas") or []]

    def get_plantilla(self, plantilla_uuid: str) -> Plantilla:
        return Plantilla.model_validate(self.api.get(f"{BASE}/plantillas/{plantilla_uuid}"))

    def create_plantilla(self, payload: dict) -> Plantilla:
        return Plantilla.model_validate(self.api.post(f"{BASE}/plantillas", payload))

    def update_plantilla(self, plantilla_uuid: str, payload: dict) -> Plantilla:
        return Plantilla.model_validate(self.api.patch(f"{BASE}/plantillas/{plantilla_uuid}", payload))

    def delete_plantilla(self, plantilla_uuid: str):
        self.api.delete(f"{BASE}/plantillas/{plantilla_uuid}")

    def activar_plantilla(self, plantilla_uuid: str):
        self.api.post(f"{BASE}/plantillas/{plantilla_uuid}/activar")

    # ===== SECCIONES =====
    def create_seccion(self, plantilla_uuid: str, payload: dict) -> Seccion:
        return Seccion.model_validate(self.api.post(f"{BASE}/plantillas/{plantilla_uuid}/secciones", payload))

    def update_seccion(self, seccion_uuid: str, payload: dict) -> Seccion:
        return Seccion.model_validate(self.api.patch(f"{BASE}/secciones/{seccion_uuid}", payload))

    def delete_seccion(self, seccion_uuid: str):
        self.api.delete(f"{BASE}/secciones/{seccion_uuid}")

    # ===== CAMPOS =====
    def create_campo(self, seccion_uuid: str, payload: dict) -> Campo:
        return Campo.model_validate(self.api.post(f"{BASE}/secciones/{seccion_uuid}/campos", payload))

    def update_campo(self, campo_uuid: str, payload: dict) -> Campo:
        return Campo.model_validate(self.api.patch(f"{BASE}/campos/{campo_uuid}", payload))

    def delete_campo(self, campo_uuid: str):
        self.api.delete(f"{BASE}/campos/{campo_uuid}")
