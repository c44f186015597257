import pytest

from incendios_cierre.core import campos as motor
from incendios_cierre.models.plantilla import Campo, TipoCampo
from incendios_cierre.models.respuestas import OpcionElegida


def _campo(tipo="text", requerido=False, opciones=None, uuid="c1"):
    return Campo(campo_uuid=uuid, nombre="Campo", tipo=tipo, requerido=requerido, opciones=opciones or [])


def _select(tipo="select"):
    return _campo(tipo=tipo, opciones=[
        {"value": "camion", "label": "Camión", "requiresQuantity": True, "quantityLabel": "Unidades"},
        {"value": "avion", "label": "Avión", "requiresPercentage": True},
        {"value": "ninguno", "label": "Ninguno"},
    ])


@pytest.mark.parametrize("texto,esperado", [
    ("12", 12),
    ("3.5", 3.5),
    ("3,5", 3.5),
    ("  7 ", 7),
    ("", None),
    ("abc", None),
    ("nan", None),
    ("inf", None),
    (None, None),
])
def test_parse_numero(texto, esperado):
    assert motor.parse_numero(texto) == esperado


def test_set_texto_en_numero_nunca_guarda_nan():
    campo = _campo(tipo="number")
    assert motor.set_texto(campo, "12x") is None
    assert motor.set_texto(campo, "42") == 42


def test_es_vacio():
    assert motor.es_vacio(None)
    assert motor.es_vacio("   ")
    assert motor.es_vacio([])
    assert motor.es_vacio({})
    assert not motor.es_vacio(0)
    assert not motor.es_vacio(False)
    assert not motor.es_vacio("x")


def test_validate_solo_requeridos_vacios():
    campos = [
        _campo(uuid="a", requerido=True),
        _campo(uuid="b", requerido=True, tipo="multiselect", opciones=["x"]),
        _campo(uuid="c", requerido=False),
        _campo(uuid="d", requerido=True, tipo="number"),
    ]
    errores = motor.validate_fields(campos, {"b": [], "c": "", "d": 0})
    assert errores == {"a": motor.MENSAJE_REQUERIDO, "b": motor.MENSAJE_REQUERIDO}


def test_tipo_desconocido_no_se_renderiza_ni_valida():
    campo = _campo(tipo="firma", requerido=True)
    assert motor.render_field(campo, None) is None
    assert motor.validate_fields([campo], {}) == {}


def test_alias_en_espanol():
    assert motor.render_field(_campo(tipo="numero"), 5.0).tipo == TipoCampo.NUMBER
    assert motor.render_field(_campo(tipo="texto"), "hola").texto == "hola"


def test_render_requerido_marca_etiqueta():
    vista = motor.render_field(_campo(requerido=True), None, error="Este campo es requerido")
    assert vista.etiqueta == "Campo *"
    assert vista.error == "Este campo es requerido"


def test_select_con_cantidad_round_trip():
    campo = _select()
    valor = motor.seleccionar_opcion(campo, None, "camion")
    valor = motor.set_cantidad(campo, valor, "5")

    assert valor.as_dict() == {"value": "camion", "quantity": 5, "percentage": None}
    vista = motor.render_field(campo, valor)
    camion = vista.opciones[0]
    assert camion.seleccionada and camion.mostrar_extras
    assert camion.cantidad == 5
    assert camion.etiqueta_cantidad == "Unidades"


def test_select_cambiar_opcion_descarta_extras():
    campo = _select()
    valor = motor.seleccionar_opcion(campo, None, "avion")
    valor = motor.set_porcentaje(campo, valor, "75")
    assert valor == OpcionElegida(value="avion", percentage=75)

    valor = motor.seleccionar_opcion(campo, valor, "ninguno")
    assert valor == "ninguno"


def test_select_reelegir_misma_opcion_conserva_valor():
    campo = _select()
    valor = motor.set_cantidad(campo, motor.seleccionar_opcion(campo, None, "camion"), "3")
    assert motor.seleccionar_opcion(campo, valor, "camion") is valor


def test_select_opcion_inexistente():
    with pytest.raises(ValueError):
        motor.seleccionar_opcion(_select(), None, "barco")


def test_multiselect_alternar_es_idempotente():
    campo = _select(tipo="multiselect")
    valor = motor.alternar_opcion(campo, None, "camion")
    valor = motor.set_cantidad(campo, valor, "2", value="camion")
    valor = motor.alternar_opcion(campo, valor, "ninguno")
    assert valor == [OpcionElegida(value="camion", quantity=2), "ninguno"]

    valor = motor.alternar_opcion(campo, valor, "camion")
    assert valor == ["ninguno"]

    # Volver a marcar parte de cero
    valor = motor.alternar_opcion(campo, valor, "camion")
    assert valor[-1] == OpcionElegida(value="camion")


def test_porcentaje_en_vista_lleva_sufijo():
    vista = motor.render_field(_select(), None)
    assert vista.opciones[1].etiqueta_porcentaje == "Porcentaje (%)"
    assert not vista.opciones[1].mostrar_extras
