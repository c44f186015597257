"""
Respuestas del formulario de cierre.

Un valor de trabajo depende del tipo del campo:

* escalar (texto, número, fecha, booleano)
* selección: ``str`` u ``OpcionElegida`` si la opción pide cantidad/porcentaje
* selección múltiple: lista de ``str`` u ``OpcionElegida``

``RespuestaEscalar``, ``RespuestaSeleccion`` y ``RespuestaMultiple`` forman la
unión etiquetada que se serializa hacia el backend.
"""
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from incendios_cierre.models.plantilla import CierreRespuesta, TipoCampo, normalizar_tipo


class OpcionElegida(BaseModel):
    """Opción elegida con sus sub-respuestas."""

    model_config = ConfigDict(frozen=True)

    value: str
    quantity: Optional[float] = None
    percentage: Optional[float] = None

    def as_dict(self) -> dict:
        return {"value": self.value, "quantity": self.quantity, "percentage": self.percentage}

    def to_json(self) -> dict:
        # En el cable solo viajan las sub-respuestas informadas
        data = {"value": self.value}
        if self.quantity is not None:
            data["quantity"] = self.quantity
        if self.percentage is not None:
            data["percentage"] = self.percentage
        return data


ValorOpcion = Union[OpcionElegida, str]


class RespuestaEscalar(BaseModel):
    kind: Literal["escalar"] = "escalar"
    campo_uuid: str
    tipo: TipoCampo
    valor: Union[bool, int, float, str, None] = None


class RespuestaSeleccion(BaseModel):
    kind: Literal["seleccion"] = "seleccion"
    campo_uuid: str
    valor: Optional[ValorOpcion] = None

    @property
    def tipo(self) -> TipoCampo:
        return TipoCampo.SELECT


class RespuestaMultiple(BaseModel):
    kind: Literal["multiple"] = "multiple"
    campo_uuid: str
    valor: List[ValorOpcion] = Field(default_factory=list)

    @property
    def tipo(self) -> TipoCampo:
        return TipoCampo.MULTISELECT


Respuesta = Union[RespuestaEscalar, RespuestaSeleccion, RespuestaMultiple]


# Columna del backend donde se guarda cada tipo
COLUMNA_POR_TIPO = {
    TipoCampo.TEXT: "valor_texto",
    TipoCampo.TEXTAREA: "valor_texto",
    TipoCampo.NUMBER: "valor_numero",
    TipoCampo.PERCENTAGE: "valor_numero",
    TipoCampo.DATE: "valor_fecha",
    TipoCampo.DATETIME: "valor_datetime",
    TipoCampo.BOOLEAN: "valor_boolean",
    TipoCampo.CHECKBOX: "valor_boolean",
    TipoCampo.SELECT: "valor_json",
    TipoCampo.MULTISELECT: "valor_json",
}


class RespuestaInput(BaseModel):
    """Entrada de guardado: ``{campo, tipo, valor codificado}``."""

    campo_uuid: str
    tipo: Optional[str] = None
    valor: Any = None

    def to_wire(self) -> dict:
        data = {"campo_uuid": self.campo_uuid}
        tipo = normalizar_tipo(self.tipo)
        if tipo is not None:
            data[COLUMNA_POR_TIPO[tipo]] = self.valor
        return data


def _decodificar_opcion(raw) -> Optional[ValorOpcion]:
    if isinstance(raw, OpcionElegida):
        return raw
    if isinstance(raw, dict):
        if raw.get("value") is None:
            return None
        return OpcionElegida(
            value=str(raw["value"]),
            quantity=raw.get("quantity"),
            percentage=raw.get("percentage"),
        )
    if raw is None or raw == "":
        return None
    return str(raw)


def valor_desde_respuesta(respuesta: Optional[CierreRespuesta], tipo):
    """Valor de trabajo a partir de la respuesta guardada, o ``None``."""
    if respuesta is None:
        return None
    tipo = normalizar_tipo(tipo)
    if tipo is None:
        return None
    raw = getattr(respuesta, COLUMNA_POR_TIPO[tipo])
    if tipo == TipoCampo.SELECT:
        return _decodificar_opcion(raw)
    if tipo == TipoCampo.MULTISELECT:
        if not isinstance(raw, list):
            return None
        items = [_decodificar_opcion(item) for item in raw]
        return [item for item in items if item is not None]
    return raw


def crear_respuesta(campo_uuid: str, tipo: TipoCampo, valor) -> Respuesta:
    if tipo == TipoCampo.SELECT:
        return RespuestaSeleccion(campo_uuid=campo_uuid, valor=_decodificar_opcion(valor))
    if tipo == TipoCampo.MULTISELECT:
        items = [_decodificar_opcion(item) for item in (valor or [])]
        return RespuestaMultiple(campo_uuid=campo_uuid, valor=[i for i in items if i is not None])
    return RespuestaEscalar(campo_uuid=campo_uuid, tipo=tipo, valor=valor)


def _codificar_opcion(valor: Optional[ValorOpcion]):
    if isinstance(valor, OpcionElegida):
        return valor.to_json()
    return valor


def codificar(respuesta: Respuesta) -> RespuestaInput:
    if isinstance(respuesta, RespuestaSeleccion):
        encoded = _codificar_opcion(respuesta.valor)
    elif isinstance(respuesta, RespuestaMultiple):
        encoded = [_codificar_opcion(item) for item in respuesta.valor]
    elif isinstance(respuesta, RespuestaEscalar):
        encoded = respuesta.valor
    else:
        raise TypeError(f"Respuesta no soportada: {type(respuesta).__name__}")
    return RespuestaInput(campo_uuid=respuesta.campo_uuid, tipo=respuesta.tipo.value, valor=encoded)
