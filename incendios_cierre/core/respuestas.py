from typing import Dict, Iterable, List

from incendios_cierre.models.plantilla import Campo, TipoCampo
from incendios_cierre.models.respuestas import (
    RespuestaInput,
    codificar,
    crear_respuesta,
    valor_desde_respuesta,
)


def build_responses(campos: Iterable[Campo], valores: Dict[str, object]) -> List[RespuestaInput]:
    """
    Una ``RespuestaInput`` por cada entrada de ``valores``, en el orden de
    inserción de ``valores`` (no en el orden de los campos). Los campos sin
    valor no se envían y los de tipo desconocido se omiten.
    """
    por_uuid = {campo.campo_uuid: campo for campo in campos}
    respuestas = []
    for campo_uuid, valor in valores.items():
        campo = por_uuid.get(campo_uuid)
        if campo is None:
            # Campo ya no presente en la plantilla: se envía como texto
            tipo = TipoCampo.TEXT
        else:
            tipo = campo.tipo_normalizado
            if tipo is None:
                # Tipo desconocido: no hay columna donde guardarlo
                continue
        respuestas.append(codificar(crear_respuesta(campo_uuid, tipo, valor)))
    return respuestas


def valores_iniciales(campos: Iterable[Campo]) -> Dict[str, object]:
    """Valores de trabajo precargados desde las respuestas ya guardadas."""
    valores = {}
    for campo in campos:
        valor = valor_desde_respuesta(campo.respuesta, campo.tipo)
        if valor is not None:
            valores[campo.campo_uuid] = valor
    return valores
