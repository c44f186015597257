"""
Motor de tipos de campo: vista editable y validación por tipo.

Todas las funciones son puras. Las transiciones de valor (``set_texto``,
``seleccionar_opcion``, ``alternar_opcion``, ``set_cantidad``,
``set_porcentaje``) reciben el valor actual y devuelven el nuevo; el estado lo
guarda quien las llama.
"""
import math
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from incendios_cierre.models.plantilla import Campo, TipoCampo, TIPOS_CON_OPCIONES
from incendios_cierre.models.respuestas import OpcionElegida

MENSAJE_REQUERIDO = "Este campo es requerido"

_TIPOS_NUMERICOS = (TipoCampo.NUMBER, TipoCampo.PERCENTAGE)
_TIPOS_BOOLEANOS = (TipoCampo.BOOLEAN, TipoCampo.CHECKBOX)


def parse_numero(texto):
    """
    Convierte texto a número. Texto vacío o no numérico -> ``None``.
    Nunca lanza y nunca devuelve NaN/inf. Acepta coma decimal.
    """
    if texto is None:
        return None
    if isinstance(texto, bool):
        return None
    if isinstance(texto, (int, float)):
        return texto if math.isfinite(texto) else None
    raw = str(texto).strip().replace(",", ".")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def formatear_numero(valor) -> str:
    if valor is None or isinstance(valor, bool):
        return ""
    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))
    return str(valor)


def es_vacio(valor) -> bool:
    if valor is None:
        return True
    if isinstance(valor, str):
        return not valor.strip()
    if isinstance(valor, (list, tuple, dict, set)):
        return len(valor) == 0
    return False


def valor_seleccionado(valor) -> Optional[str]:
    """``value`` de una selección simple, sea string u opción con extras."""
    if isinstance(valor, OpcionElegida):
        return valor.value
    if isinstance(valor, str) and valor:
        return valor
    return None


def _value_de(item) -> str:
    return item.value if isinstance(item, OpcionElegida) else item


def _items_multiples(valor) -> list:
    return list(valor) if isinstance(valor, (list, tuple)) else []


# ===============================
# Vista editable
# ===============================
class VistaOpcion(BaseModel):
    value: str
    label: str
    seleccionada: bool = False
    requiere_cantidad: bool = False
    requiere_porcentaje: bool = False
    etiqueta_cantidad: str = "Cantidad"
    etiqueta_porcentaje: str = "Porcentaje (%)"
    cantidad: Optional[float] = None
    porcentaje: Optional[float] = None

    @property
    def mostrar_extras(self) -> bool:
        return self.seleccionada and (self.requiere_cantidad or self.requiere_porcentaje)


class VistaCampo(BaseModel):
    campo_uuid: str
    tipo: TipoCampo
    etiqueta: str
    requerido: bool = False
    descripcion: Optional[str] = None
    placeholder: Optional[str] = None
    unidad: Optional[str] = None
    texto: str = ""
    marcado: bool = False
    opciones: List[VistaOpcion] = Field(default_factory=list)
    error: Optional[str] = None


def _vista_opciones(campo: Campo, tipo: TipoCampo, valor) -> List[VistaOpcion]:
    if tipo == TipoCampo.SELECT:
        elegidos = {valor_seleccionado(valor): valor} if valor_seleccionado(valor) else {}
    else:
        elegidos = {_value_de(item): item for item in _items_multiples(valor)}

    vistas = []
    for opcion in campo.opciones:
        item = elegidos.get(opcion.value)
        vistas.append(VistaOpcion(
            value=opcion.value,
            label=opcion.label,
            seleccionada=opcion.value in elegidos,
            requiere_cantidad=opcion.requiresQuantity,
            requiere_porcentaje=opcion.requiresPercentage,
            etiqueta_cantidad=opcion.etiqueta_cantidad,
            etiqueta_porcentaje=f"{opcion.etiqueta_porcentaje} (%)",
            cantidad=item.quantity if isinstance(item, OpcionElegida) else None,
            porcentaje=item.percentage if isinstance(item, OpcionElegida) else None,
        ))
    return vistas


def render_field(campo: Campo, valor, error: str = None) -> Optional[VistaCampo]:
    """
    Vista editable del campo. Los tipos desconocidos no se renderizan (None).
    """
    tipo = campo.tipo_normalizado
    if tipo is None:
        return None

    vista = VistaCampo(
        campo_uuid=campo.campo_uuid,
        tipo=tipo,
        etiqueta=campo.nombre + (" *" if campo.requerido else ""),
        requerido=campo.requerido,
        descripcion=campo.descripcion,
        placeholder=campo.placeholder,
        unidad=campo.unidad,
        error=error,
    )
    if tipo in TIPOS_CON_OPCIONES:
        vista.opciones = _vista_opciones(campo, tipo, valor)
    elif tipo in _TIPOS_BOOLEANOS:
        vista.marcado = valor is True
    elif tipo in _TIPOS_NUMERICOS:
        vista.texto = formatear_numero(valor)
    else:
        vista.texto = "" if valor is None else str(valor)
    return vista


# ===============================
# Validación
# ===============================
def validate_fields(campos: Iterable[Campo], valores: Dict[str, object]) -> Dict[str, str]:
    """
    Errores por campo_uuid. Solo se marcan los requeridos vacíos; los tipos
    desconocidos se ignoran.
    """
    errores = {}
    for campo in campos:
        if campo.tipo_normalizado is None:
            continue
        if campo.requerido and es_vacio(valores.get(campo.campo_uuid)):
            errores[campo.campo_uuid] = MENSAJE_REQUERIDO
    return errores


# ===============================
# Transiciones de valor
# ===============================
def set_texto(campo: Campo, texto):
    """Valor a guardar al editar un campo de texto, número o fecha."""
    tipo = campo.tipo_normalizado
    if tipo in _TIPOS_NUMERICOS:
        return parse_numero(texto)
    if tipo in _TIPOS_BOOLEANOS:
        return bool(texto)
    return texto


def _opcion_o_error(campo: Campo, value: str):
    opcion = campo.opcion(value)
    if opcion is None:
        raise ValueError(f"'{value}' no es una opción de {campo.nombre}")
    return opcion


def seleccionar_opcion(campo: Campo, valor_actual, value: Optional[str]):
    """
    Selección simple. Re-elegir la misma opción no cambia nada; elegir otra
    descarta cantidad/porcentaje previos. ``value=None`` limpia la selección.
    """
    if value is None:
        return None
    opcion = _opcion_o_error(campo, value)
    if valor_seleccionado(valor_actual) == value:
        return valor_actual
    if opcion.requiere_extra:
        return OpcionElegida(value=value)
    return value


def alternar_opcion(campo: Campo, valor_actual, value: str) -> list:
    """Marca o desmarca una opción de selección múltiple."""
    opcion = _opcion_o_error(campo, value)
    items = _items_multiples(valor_actual)
    if any(_value_de(item) == value for item in items):
        return [item for item in items if _value_de(item) != value]
    nuevo = OpcionElegida(value=value) if opcion.requiere_extra else value
    return items + [nuevo]


def _set_extra(campo: Campo, valor_actual, value: Optional[str], clave: str, texto):
    numero = parse_numero(texto)
    tipo = campo.tipo_normalizado

    if tipo == TipoCampo.SELECT:
        if isinstance(valor_actual, OpcionElegida) and value in (None, valor_actual.value):
            return valor_actual.model_copy(update={clave: numero})
        return valor_actual

    if tipo == TipoCampo.MULTISELECT:
        items = []
        for item in _items_multiples(valor_actual):
            if isinstance(item, OpcionElegida) and item.value == value:
                item = item.model_copy(update={clave: numero})
            items.append(item)
        return items

    return valor_actual


def set_cantidad(campo: Campo, valor_actual, texto, value: str = None):
    return _set_extra(campo, valor_actual, value, "quantity", texto)


def set_porcentaje(campo: Campo, valor_actual, texto, value: str = None):
    return _set_extra(campo, valor_actual, value, "percentage", texto)
