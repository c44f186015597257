"""
Reglas de edición de plantillas (lado cliente).

Se validan antes de llamar al backend; un error aquí es un
``FormValidationError`` y no genera tráfico de red.
"""
from typing import Iterable, List, Optional

from incendios_cierre.core.errors import FormValidationError, PermissionDeniedError
from incendios_cierre.models.plantilla import (
    Opcion,
    Plantilla,
    TIPOS_CON_OPCIONES,
    normalizar_tipo,
    parse_opciones,
)

MSG_NOMBRE_REQUERIDO = "El nombre es requerido"
MSG_NOMBRE_ORDEN = "Nombre y orden son requeridos"
MSG_OPCIONES_REQUERIDAS = "Los campos de tipo select/multiselect requieren al menos una opción"
MSG_OPCION_INCOMPLETA = "Value y Label son requeridos"
MSG_OPCION_DUPLICADA = "Ya existe una opción con ese value"
MSG_ELIMINAR_ACTIVA = "No se puede eliminar la plantilla activa"


def _limpio(texto) -> str:
    return str(texto or "").strip()


def _orden(valor) -> Optional[int]:
    if isinstance(valor, bool):
        return None
    if isinstance(valor, int):
        return valor
    try:
        return int(_limpio(valor))
    except ValueError:
        return None


def siguiente_orden(items: Iterable) -> int:
    """Orden sugerido para un elemento nuevo: máximo actual + 1."""
    ordenes = [getattr(i, "orden", None) if not isinstance(i, dict) else i.get("orden") for i in items]
    ordenes = [o for o in ordenes if isinstance(o, int)]
    return max(ordenes, default=0) + 1


def _con_descripcion(payload: dict, descripcion) -> dict:
    descripcion = _limpio(descripcion)
    if descripcion:
        payload["descripcion"] = descripcion
    return payload


def plantilla_payload(nombre, descripcion=None) -> dict:
    nombre = _limpio(nombre)
    if not nombre:
        raise FormValidationError(MSG_NOMBRE_REQUERIDO)
    return _con_descripcion({"nombre": nombre}, descripcion)


def seccion_payload(nombre, orden, descripcion=None) -> dict:
    nombre = _limpio(nombre)
    orden = _orden(orden)
    if not nombre or orden is None:
        raise FormValidationError(MSG_NOMBRE_ORDEN)
    payload = _con_descripcion({"nombre": nombre}, descripcion)
    payload["orden"] = orden
    return payload


def campo_payload(
    nombre,
    tipo,
    orden,
    requerido: bool = False,
    descripcion=None,
    unidad=None,
    placeholder=None,
    opciones: List[Opcion] = None,
) -> dict:
    nombre = _limpio(nombre)
    orden = _orden(orden)
    if not nombre or orden is None:
        raise FormValidationError(MSG_NOMBRE_ORDEN)

    con_opciones = normalizar_tipo(tipo) in TIPOS_CON_OPCIONES
    opciones = parse_opciones(opciones or [])
    if con_opciones and not opciones:
        raise FormValidationError(MSG_OPCIONES_REQUERIDAS)

    payload = _con_descripcion({"nombre": nombre}, descripcion)
    payload["tipo"] = str(getattr(tipo, "value", tipo))
    payload["orden"] = orden
    payload["requerido"] = bool(requerido)
    for clave, valor in (("unidad", unidad), ("placeholder", placeholder)):
        valor = _limpio(valor)
        if valor:
            payload[clave] = valor

    # Las opciones solo viajan para select/multiselect
    if con_opciones:
        payload["opciones"] = [o.to_json() for o in opciones]
    return payload


def check_puede_eliminar(plantilla: Plantilla):
    if plantilla.activa:
        raise PermissionDeniedError(MSG_ELIMINAR_ACTIVA)


def marcar_activa(plantillas: List[Plantilla], plantilla_uuid: str) -> List[Plantilla]:
    """Copia de la lista con exactamente una plantilla activa."""
    return [
        p.model_copy(update={"activa": p.plantilla_uuid == plantilla_uuid})
        for p in plantillas
    ]


class OpcionesEditor:
    """Lista ordenada de opciones de un campo select/multiselect."""

    def __init__(self, opciones=None):
        self.opciones: List[Opcion] = parse_opciones(list(opciones or []))

    def _construir(self, index, value, label, requires_quantity, requires_percentage,
                   quantity_label, percentage_label) -> Opcion:
        value = _limpio(value)
        label = _limpio(label)
        if not value or not label:
            raise FormValidationError(MSG_OPCION_INCOMPLETA)
        if any(o.value == value and i != index for i, o in enumerate(self.opciones)):
            raise FormValidationError(MSG_OPCION_DUPLICADA)

        data = {"value": value, "label": label}
        if requires_quantity:
            data["requiresQuantity"] = True
            data["quantityLabel"] = _limpio(quantity_label) or "Cantidad"
        if requires_percentage:
            data["requiresPercentage"] = True
            data["percentageLabel"] = _limpio(percentage_label) or "Porcentaje"
        return Opcion(**data)

    def agregar(self, value, label, requires_quantity=False, requires_percentage=False,
                quantity_label=None, percentage_label=None) -> Opcion:
        opcion = self._construir(None, value, label, requires_quantity, requires_percentage,
                                 quantity_label, percentage_label)
        self.opciones.append(opcion)
        return opcion

    def editar(self, index: int, value, label, requires_quantity=False, requires_percentage=False,
               quantity_label=None, percentage_label=None) -> Opcion:
        if not 0 <= index < len(self.opciones):
            raise IndexError(f"Opción {index} fuera de rango")
        opcion = self._construir(index, value, label, requires_quantity, requires_percentage,
                                 quantity_label, percentage_label)
        self.opciones[index] = opcion
        return opcion

    def eliminar(self, index: int):
        del self.opciones[index]

    def subir(self, index: int):
        if index <= 0 or index >= len(self.opciones):
            return
        self.opciones[index - 1], self.opciones[index] = self.opciones[index], self.opciones[index - 1]

    def bajar(self, index: int):
        if index < 0 or index >= len(self.opciones) - 1:
            return
        self.opciones[index + 1], self.opciones[index] = self.opciones[index], self.opciones[index + 1]

    def to_json(self) -> list:
        return [o.to_json() for o in self.opciones]
