"""
Modelos de plantillas de cierre: Plantilla -> Sección -> Campo -> Opción.

Los nombres de atributo siguen el contrato del backend (snake_case en español);
las banderas de opción conservan su forma camelCase porque así se guardan en el
JSON de ``opciones``.
"""
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class TipoCampo(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    MULTISELECT = "multiselect"
    CHECKBOX = "checkbox"
    PERCENTAGE = "percentage"
    BOOLEAN = "boolean"


# El backend ha emitido ambos vocabularios
_ALIAS_TIPO = {
    "texto": TipoCampo.TEXT,
    "numero": TipoCampo.NUMBER,
    "fecha": TipoCampo.DATE,
}

TIPOS_CON_OPCIONES = (TipoCampo.SELECT, TipoCampo.MULTISELECT)


def normalizar_tipo(tipo) -> Optional[TipoCampo]:
    """Tipo conocido o ``None`` si el campo no se puede renderizar."""
    if isinstance(tipo, TipoCampo):
        return tipo
    raw = str(tipo or "").strip().lower()
    if raw in _ALIAS_TIPO:
        return _ALIAS_TIPO[raw]
    try:
        return TipoCampo(raw)
    except ValueError:
        return None


class Opcion(BaseModel):
    value: str
    label: str
    requiresQuantity: bool = False
    requiresPercentage: bool = False
    quantityLabel: Optional[str] = None
    percentageLabel: Optional[str] = None

    @field_validator("requiresQuantity", "requiresPercentage", mode="before")
    @classmethod
    def _flag(cls, value):
        return bool(value)

    @property
    def requiere_extra(self) -> bool:
        return self.requiresQuantity or self.requiresPercentage

    @property
    def etiqueta_cantidad(self) -> str:
        return self.quantityLabel or "Cantidad"

    @property
    def etiqueta_porcentaje(self) -> str:
        return self.percentageLabel or "Porcentaje"

    def to_json(self) -> dict:
        data = {"value": self.value, "label": self.label}
        if self.requiresQuantity:
            data["requiresQuantity"] = True
            data["quantityLabel"] = self.etiqueta_cantidad
        if self.requiresPercentage:
            data["requiresPercentage"] = True
            data["percentageLabel"] = self.etiqueta_porcentaje
        return data


def parse_opciones(raw) -> List[Opcion]:
    """
    Acepta la lista tal como la guarda el backend.
    Las opciones antiguas eran strings sueltos: se leen como value=label.
    """
    if not isinstance(raw, list):
        return []
    opciones = []
    for item in raw:
        if isinstance(item, Opcion):
            opciones.append(item)
        elif isinstance(item, str):
            opciones.append(Opcion(value=item, label=item))
        elif isinstance(item, dict):
            value = item.get("value") or item.get("id") or item.get("label")
            label = item.get("label") or item.get("nombre") or value
            if value is None:
                continue
            opciones.append(Opcion(**{**item, "value": str(value), "label": str(label)}))
    return opciones


class CierreRespuesta(BaseModel):
    respuesta_uuid: Optional[str] = None
    valor_texto: Optional[str] = None
    valor_numero: Optional[float] = None
    valor_fecha: Optional[str] = None
    valor_datetime: Optional[str] = None
    valor_boolean: Optional[bool] = None
    valor_json: Any = None
    respondido_por_uuid: Optional[str] = None
    actualizado_en: Optional[str] = None


class Campo(BaseModel):
    campo_uuid: str
    seccion_uuid: Optional[str] = None
    campo_padre_uuid: Optional[str] = None
    nombre: str
    descripcion: Optional[str] = None
    placeholder: Optional[str] = None
    tipo: Optional[str] = None
    orden: int = 0
    requerido: bool = False
    unidad: Optional[str] = None
    ayuda: Optional[str] = None
    opciones: List[Opcion] = Field(default_factory=list)
    validaciones: Any = None
    dependencias: Any = None
    respuesta: Optional[CierreRespuesta] = None

    @field_validator("opciones", mode="before")
    @classmethod
    def _opciones(cls, value):
        return parse_opciones(value)

    @field_validator("requerido", mode="before")
    @classmethod
    def _requerido(cls, value):
        return bool(value)

    @property
    def tipo_normalizado(self) -> Optional[TipoCampo]:
        return normalizar_tipo(self.tipo)

    def opcion(self, value) -> Optional[Opcion]:
        for opcion in self.opciones:
            if opcion.value == value:
                return opcion
        return None


class Seccion(BaseModel):
    seccion_uuid: str
    plantilla_uuid: Optional[str] = None
    nombre: str
    descripcion: Optional[str] = None
    orden: int = 0
    campos: List[Campo] = Field(default_factory=list)

    def campos_ordenados(self) -> List[Campo]:
        # sorted es estable: los empates quedan en orden de inserción
        return sorted(self.campos, key=lambda c: c.orden)


class Plantilla(BaseModel):
    plantilla_uuid: str
    nombre: str
    descripcion: Optional[str] = None
    activa: bool = False
    version: int = 1
    creado_en: Optional[str] = None
    actualizado_en: Optional[str] = None
    eliminado_en: Optional[str] = None
    secciones: List[Seccion] = Field(default_factory=list)

    def secciones_ordenadas(self) -> List[Seccion]:
        return sorted(self.secciones, key=lambda s: s.orden)


class FormularioCierre(BaseModel):
    incendio_uuid: Optional[str] = None
    plantilla: Plantilla
    extinguido: bool = False
    secciones: List[Seccion] = Field(default_factory=list)

    def secciones_ordenadas(self) -> List[Seccion]:
        return sorted(self.secciones, key=lambda s: s.orden)

    def campos(self) -> List[Campo]:
        return [c for s in self.secciones_ordenadas() for c in s.campos_ordenados()]

    def campo(self, campo_uuid: str) -> Optional[Campo]:
        for seccion in self.secciones:
            for campo in seccion.campos:
                if campo.campo_uuid == campo_uuid:
                    return campo
        return None
