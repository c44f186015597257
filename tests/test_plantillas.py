import pytest

from incendios_cierre.core import plantillas as reglas
from incendios_cierre.core.errors import FormValidationError, PermissionDeniedError
from incendios_cierre.models.plantilla import Opcion, Plantilla, Seccion


def test_opciones_editor_agrega_con_etiquetas_por_defecto():
    editor = reglas.OpcionesEditor()
    editor.agregar(" camion ", " Camión ", requires_quantity=True)
    editor.agregar("avion", "Avión", requires_percentage=True, percentage_label="% cobertura")
    editor.agregar("ninguno", "Ninguno", quantity_label="ignorado")

    assert editor.to_json() == [
        {"value": "camion", "label": "Camión", "requiresQuantity": True, "quantityLabel": "Cantidad"},
        {"value": "avion", "label": "Avión", "requiresPercentage": True, "percentageLabel": "% cobertura"},
        {"value": "ninguno", "label": "Ninguno"},
    ]


@pytest.mark.parametrize("value,label", [("", "x"), ("x", "  "), (None, None)])
def test_opcion_requiere_value_y_label(value, label):
    with pytest.raises(FormValidationError) as exc:
        reglas.OpcionesEditor().agregar(value, label)
    assert exc.value.mensaje == reglas.MSG_OPCION_INCOMPLETA


def test_value_unico_salvo_la_misma_opcion():
    editor = reglas.OpcionesEditor(["a", "b"])
    with pytest.raises(FormValidationError) as exc:
        editor.agregar("a", "Otra A")
    assert exc.value.mensaje == reglas.MSG_OPCION_DUPLICADA

    editor.editar(0, "a", "A renombrada")
    assert editor.opciones[0].label == "A renombrada"
    with pytest.raises(FormValidationError):
        editor.editar(1, "a", "B")


def test_mover_y_eliminar():
    editor = reglas.OpcionesEditor(["a", "b", "c"])
    editor.subir(0)
    editor.bajar(2)
    assert [o.value for o in editor.opciones] == ["a", "b", "c"]

    editor.subir(2)
    assert [o.value for o in editor.opciones] == ["a", "c", "b"]
    editor.bajar(0)
    assert [o.value for o in editor.opciones] == ["c", "a", "b"]
    editor.eliminar(1)
    assert [o.value for o in editor.opciones] == ["c", "b"]


def test_opciones_legado_como_strings():
    [opcion] = reglas.OpcionesEditor(["Bosque"]).opciones
    assert opcion == Opcion(value="Bosque", label="Bosque")


def test_siguiente_orden():
    assert reglas.siguiente_orden([]) == 1
    secciones = [Seccion(seccion_uuid="a", nombre="A", orden=3), Seccion(seccion_uuid="b", nombre="B", orden=1)]
    assert reglas.siguiente_orden(secciones) == 4
    assert reglas.siguiente_orden([{"orden": 7}]) == 8


def test_payload_de_plantilla():
    assert reglas.plantilla_payload("  Cierre v3 ", "  ") == {"nombre": "Cierre v3"}
    with pytest.raises(FormValidationError, match=reglas.MSG_NOMBRE_REQUERIDO):
        reglas.plantilla_payload("   ")


@pytest.mark.parametrize("nombre,orden", [("", 1), ("Recursos", ""), ("Recursos", "dos"), ("Recursos", None)])
def test_seccion_requiere_nombre_y_orden(nombre, orden):
    with pytest.raises(FormValidationError, match=reglas.MSG_NOMBRE_ORDEN):
        reglas.seccion_payload(nombre, orden)


def test_payload_de_seccion():
    assert reglas.seccion_payload("Recursos", "2", "Medios usados") == {
        "nombre": "Recursos", "descripcion": "Medios usados", "orden": 2,
    }


def test_select_sin_opciones_rechazado():
    with pytest.raises(FormValidationError, match="requieren al menos una opción"):
        reglas.campo_payload("Tipo", "select", 1)


def test_campo_payload_solo_envia_opciones_en_selecciones():
    payload = reglas.campo_payload("Área", "number", 2, requerido=True, unidad=" ha ", opciones=["x"])
    assert payload == {"nombre": "Área", "tipo": "number", "orden": 2, "requerido": True, "unidad": "ha"}

    payload = reglas.campo_payload("Apoyo", "multiselect", "3", opciones=[{"value": "a", "label": "A"}])
    assert payload["opciones"] == [{"value": "a", "label": "A"}]
    assert payload["requerido"] is False


def test_plantilla_activa_no_se_elimina():
    with pytest.raises(PermissionDeniedError):
        reglas.check_puede_eliminar(Plantilla(plantilla_uuid="p", nombre="P", activa=True))
    reglas.check_puede_eliminar(Plantilla(plantilla_uuid="p", nombre="P", activa=False))


def test_marcar_activa_deja_una_sola():
    plantillas = [
        Plantilla(plantilla_uuid="a", nombre="A", activa=True),
        Plantilla(plantilla_uuid="b", nombre="B"),
        Plantilla(plantilla_uuid="c", nombre="C"),
    ]
    activas = [p.plantilla_uuid for p in reglas.marcar_activa(plantillas, "b") if p.activa]
    assert activas == ["b"]
    assert plantillas[0].activa
