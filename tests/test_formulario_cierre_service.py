from conftest import FakeApi
from incendios_cierre.models.respuestas import RespuestaInput
from incendios_cierre.services.formulario_cierre_service import FormularioCierreService


def test_get_formulario_completa_incendio():
    api = FakeApi({("GET", "/cierre/i1/formulario"): {
        "plantilla": {"plantilla_uuid": "p1", "nombre": "Cierre"},
        "secciones": [],
    }})
    formulario = FormularioCierreService(api).get_formulario_cierre("i1")
    assert formulario.incendio_uuid == "i1"
    assert formulario.extinguido is False


def test_cuerpos_de_respuestas():
    api = FakeApi()
    service = FormularioCierreService(api)
    respuestas = [
        RespuestaInput(campo_uuid="c1", tipo="number", valor=12.5),
        RespuestaInput(campo_uuid="c2", tipo="select", valor={"value": "aereo", "percentage": 30}),
    ]

    service.guardar_respuestas("i1", respuestas)
    service.actualizar_respuesta("i1", RespuestaInput(campo_uuid="c3", tipo="boolean", valor=True))
    service.eliminar_respuesta("i1", "c3")
    service.finalizar_incendio("i1")

    assert api.calls == [
        ("POST", "/cierre/i1/respuestas", {"respuestas": [
            {"campo_uuid": "c1", "valor_numero": 12.5},
            {"campo_uuid": "c2", "valor_json": {"value": "aereo", "percentage": 30}},
        ]}),
        ("PATCH", "/cierre/i1/respuestas/c3", {"valor_boolean": True}),
        ("DELETE", "/cierre/i1/respuestas/c3", None),
        ("POST", "/incendios/i1/finalizar", {}),
    ]


def test_rutas_configurables():
    api = FakeApi({("GET", "/cierre/i1"): {
        "plantilla": {"plantilla_uuid": "p1", "nombre": "Cierre"},
        "extinguido": True,
    }})
    service = FormularioCierreService(
        api,
        formulario_path="/cierre/{incendio_uuid}",
        finalizar_path="/cierre/{incendio_uuid}/finalizar",
    )

    assert service.get_formulario_cierre("i1").extinguido is True
    service.finalizar_incendio("i1")
    assert api.calls == [
        ("GET", "/cierre/i1", None),
        ("POST", "/cierre/i1/finalizar", {}),
    ]
