"""
Técnicas de extinción: cada ítem del catálogo se resuelve a uno de tres slugs
fijos (directo, indirecto, control_natural).

El mapeo explícito ``{id: slug}`` se configura una vez; la heurística por
nombre solo cubre los ítems que no tengan entrada.
"""
import math
import re
import unicodedata
from typing import Dict, Iterable, List, Optional

from incendios_cierre.models.cierre import CatalogoItem
from incendios_cierre.services.logger_service import LoggerService

DIRECTO = "directo"
INDIRECTO = "indirecto"
CONTROL_NATURAL = "control_natural"
SLUGS = (DIRECTO, INDIRECTO, CONTROL_NATURAL)


def _normalizar(nombre: str) -> str:
    s = unicodedata.normalize("NFD", nombre or "")
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", s.lower()).strip()


def tecnica_slug_from_nombre(nombre: Optional[str]) -> Optional[str]:
    s = _normalizar(nombre)
    if not s:
        return None
    if "control" in s and "natural" in s:
        return CONTROL_NATURAL
    # "indirect" antes que "direct": el segundo está contenido en el primero
    if "indirect" in s:
        return INDIRECTO
    if "direct" in s:
        return DIRECTO
    return None


class TecnicaMapping:
    def __init__(self, mapping: Dict[str, str] = None):
        self._por_id = {}
        self.sin_mapear: List[CatalogoItem] = []
        for item_id, slug in (mapping or {}).items():
            if slug in SLUGS:
                self._por_id[str(item_id)] = slug

    @classmethod
    def from_catalogo(cls, items: Iterable[CatalogoItem], overrides: Dict[str, str] = None):
        mapping = cls(overrides)
        for item in items:
            if item.id in mapping._por_id:
                continue
            slug = tecnica_slug_from_nombre(item.nombre)
            if slug is None:
                mapping.sin_mapear.append(item)
                LoggerService().log_warning(
                    f"Técnica sin slug, se omitirá al guardar: {item.nombre} ({item.id})"
                )
                continue
            mapping._por_id[item.id] = slug
        return mapping

    def slug_for(self, item_id: str) -> Optional[str]:
        return self._por_id.get(item_id)

    def id_for_slug(self, slug: str) -> Optional[str]:
        for item_id, item_slug in self._por_id.items():
            if item_slug == slug:
                return item_id
        return None

    def sumar_por_slug(self, tecnicas: Dict[str, Optional[float]]) -> Dict[str, float]:
        """
        Porcentajes agregados por slug. Varios ítems con el mismo slug se suman;
        los que no tienen slug se descartan.
        """
        totales = {slug: 0.0 for slug in SLUGS}
        for item_id, pct in tecnicas.items():
            if pct is None or not math.isfinite(pct) or pct <= 0:
                continue
            slug = self.slug_for(item_id)
            if slug is None:
                continue
            totales[slug] += pct
        return totales

    def as_dict(self) -> Dict[str, str]:
        return dict(self._por_id)
