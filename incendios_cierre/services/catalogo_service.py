from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlencode

from incendios_cierre.config.settings import CATALOGO_PAGE_SIZE
from incendios_cierre.core.api_client import ApiClient
from incendios_cierre.core.errors import LoadError, server_message
from incendios_cierre.models.cierre import CatalogoItem, CatalogosCierre, Paginated
from incendios_cierre.services.cache_manager import CacheManager
from incendios_cierre.services.logger_service import LoggerService

# atributo de CatalogosCierre -> nombre del catálogo en /catalogos/{nombre}
CATALOGOS_CIERRE = {
    "tipos_incendio": "tipos_incendio",
    "tipos_propiedad": "tipo_propiedad",
    "causas": "causas_catalogo",
    "iniciado_junto_a": "iniciado_junto_a_catalogo",
    "medios_terrestres": "medios_terrestres_catalogo",
    "medios_aereos": "medios_aereos_catalogo",
    "medios_acuaticos": "medios_acuaticos_catalogo",
    "abastos": "abastos_catalogo",
    "instituciones": "instituciones",
    "tecnicas": "tecnicas_extincion_catalogo",
}


def _normalizar_item(raw: dict) -> CatalogoItem:
    return CatalogoItem(
        id=str(raw.get("id") or raw.get("uuid") or ""),
        nombre=raw.get("nombre") or "",
        descripcion=raw.get("descripcion"),
    )


class CatalogoService:
    def __init__(self, api: ApiClient, cache: CacheManager = None):
        self.api = api
        self.cache = cache if cache is not None else CacheManager()

    def get_catalogo(self, endpoint, params=None):
        query = urlencode({k: v for k, v in (params or {}).items() if v not in (None, "")})
        cache_key = f"GET {endpoint}?{query}" if query else f"GET {endpoint}"

        cached_data = self.cache.get(cache_key)
        if cached_data is not None:
            return cached_data

        data = self.api.get(endpoint, params=params)
        if data is not None:
            self.cache.set(cache_key, data)
        return data

    def list_catalogo_items(self, catalogo: str, page: int = 1, page_size: int = None, q: str = None) -> Paginated[CatalogoItem]:
        page_size = page_size or CATALOGO_PAGE_SIZE
        data = self.get_catalogo(
            f"/catalogos/{catalogo}",
            {"page": page, "pageSize": page_size, "q": q},
        ) or {}

        items = [_normalizar_item(r) for r in data.get("items") or [] if isinstance(r, dict)]
        return Paginated[CatalogoItem](
            total=data.get("total", len(items)),
            page=data.get("page", page),
            pageSize=data.get("pageSize", page_size),
            items=items,
        )

    def load_catalogos_cierre(self) -> CatalogosCierre:
        """
        Carga en paralelo todos los catálogos del editor de cierre.
        Si uno falla, falla la carga completa.
        """
        with ThreadPoolExecutor(max_workers=len(CATALOGOS_CIERRE)) as pool:
            futures = {
                attr: pool.submit(self.list_catalogo_items, nombre, 1, CATALOGO_PAGE_SIZE)
                for attr, nombre in CATALOGOS_CIERRE.items()
            }
            resultados = {}
            for attr, future in futures.items():
                try:
                    resultados[attr] = future.result().items
                except Exception as e:
                    LoggerService().log_error(f"Error cargando catálogo {CATALOGOS_CIERRE[attr]}", e)
                    raise LoadError(
                        server_message(e, "No se pudieron cargar los catálogos"),
                        titulo="Error al cargar catálogos",
                    ) from e
        return CatalogosCierre(**resultados)

    def clear_cache(self):
        self.cache.invalidate("GET /catalogos")
