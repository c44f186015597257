import pytest

from conftest import FakeApi, http_error
from incendios_cierre.core.errors import LoadError
from incendios_cierre.services.cache_manager import CacheManager
from incendios_cierre.services.catalogo_service import CATALOGOS_CIERRE, CatalogoService


def _service(api):
    return CatalogoService(api, CacheManager(ttl_seconds=60))


def test_items_normalizados_y_paginacion_por_defecto():
    api = FakeApi({("GET", "/catalogos/causas_catalogo"): {
        "items": [{"uuid": "u1", "nombre": "Rayo"}, {"id": 7, "nombre": "Quema"}, "basura"],
    }})
    page = _service(api).list_catalogo_items("causas_catalogo", page=2, page_size=50)

    assert [(i.id, i.nombre) for i in page.items] == [("u1", "Rayo"), ("7", "Quema")]
    assert (page.total, page.page, page.pageSize) == (2, 2, 50)
    assert api.calls == [("GET", "/catalogos/causas_catalogo", {"page": 2, "pageSize": 50, "q": None})]


def test_catalogo_se_cachea_por_url():
    api = FakeApi({("GET", "/catalogos/abastos_catalogo"): {"items": [{"id": "a", "nombre": "Agua"}]}})
    service = _service(api)
    service.list_catalogo_items("abastos_catalogo")
    service.list_catalogo_items("abastos_catalogo")
    service.list_catalogo_items("abastos_catalogo", q="ag")
    assert len(api.calls) == 2

    service.clear_cache()
    service.list_catalogo_items("abastos_catalogo")
    assert len(api.calls) == 3


def test_carga_todos_los_catalogos():
    responses = {
        ("GET", f"/catalogos/{nombre}"): {"items": [{"id": attr, "nombre": nombre}]}
        for attr, nombre in CATALOGOS_CIERRE.items()
    }
    catalogos = _service(FakeApi(responses)).load_catalogos_cierre()
    for attr in CATALOGOS_CIERRE:
        assert [i.id for i in getattr(catalogos, attr)] == [attr]
    assert catalogos.nombre_de(catalogos.causas, "causas") == "causas_catalogo"
    assert catalogos.nombre_de(catalogos.causas, "otro") == "Seleccionar…"


def test_falla_de_un_catalogo_falla_la_carga():
    responses = {("GET", f"/catalogos/{nombre}"): {"items": []} for nombre in CATALOGOS_CIERRE.values()}
    responses[("GET", "/catalogos/instituciones")] = http_error(503)
    with pytest.raises(LoadError) as exc:
        _service(FakeApi(responses)).load_catalogos_cierre()
    assert exc.value.titulo == "Error al cargar catálogos"
