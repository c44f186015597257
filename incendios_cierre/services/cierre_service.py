from incendios_cierre.core.api_client import ApiClient


class CierreService:
    """Registro de cierre por catálogos (/cierre/{incendio})."""

    def __init__(self, api_client: ApiClient):
        self.api = api_client

    def get_cierre(self, incendio_uuid: str) -> dict:
        return self.api.get(f"/cierre/{incendio_uuid}") or {}

    def init_cierre(self, incendio_uuid: str) -> dict:
        return self.api.post("/cierre/init", {"incendio_uuid": incendio_uuid}) or {}

    def patch_cierre_catalogos(self, incendio_uuid: str, payload: dict) -> dict:
        return self.api.patch(f"/cierre/{incendio_uuid}", payload) or {}

    def finalizar_cierre(self, incendio_uuid: str) -> dict:
        return self.api.post(f"/cierre/{incendio_uuid}/finalizar", {}) or {}

    def reabrir_cierre(self, incendio_uuid: str) -> dict:
        return self.api.post(f"/cierre/{incendio_uuid}/reabrir", {}) or {}
