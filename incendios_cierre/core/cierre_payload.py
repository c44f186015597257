"""
Registro de cierre por catálogos: armado del PATCH parcial y validación de
grupos de porcentaje.

El payload es disperso: un grupo solo aparece si tiene al menos un dato, para
que el PATCH actualice únicamente lo que el usuario informó.
"""
import math
from typing import Dict, List, Optional

from pydantic import ValidationError

from incendios_cierre.config.settings import TOLERANCIA_PORCENTAJE
from incendios_cierre.core.errors import FormValidationError
from incendios_cierre.core.tecnicas import SLUGS, TecnicaMapping
from incendios_cierre.models.cierre import CierreFormState, SuperficieVegetacion
from incendios_cierre.services.logger_service import LoggerService


def _finito(valor) -> bool:
    return isinstance(valor, (int, float)) and not isinstance(valor, bool) and math.isfinite(valor)


def sum_values(valores: Dict[str, Optional[float]]) -> float:
    return sum(v for v in valores.values() if _finito(v))


def _positivos(valores: Dict[str, Optional[float]], clave_id: str, clave_valor: str) -> list:
    return [
        {clave_id: item_id, clave_valor: valor}
        for item_id, valor in valores.items()
        if _finito(valor) and valor > 0
    ]


def _solo_presentes(**campos) -> dict:
    return {k: v for k, v in campos.items() if v is not None}


def _texto(valor: Optional[str]) -> bool:
    return isinstance(valor, str) and len(valor) > 0


def build_payload(state: CierreFormState, tecnicas: TecnicaMapping) -> dict:
    payload = {}

    if state.tipo_principal_id:
        payload["tipo_incendio_principal_id"] = state.tipo_principal_id

    composicion = _positivos(state.composicion, "tipo_incendio_id", "pct")
    if composicion:
        payload["composicion_tipo"] = composicion

    topografia = _solo_presentes(
        plano_pct=state.topo_plano,
        ondulado_pct=state.topo_ondulado,
        quebrado_pct=state.topo_quebrado,
    )
    if topografia:
        payload["topografia"] = topografia

    propiedad = [
        {"tipo_propiedad_id": item_id, "usado": bool(usado)}
        for item_id, usado in state.propiedad.items()
    ]
    if propiedad:
        payload["propiedad"] = propiedad

    if state.iniciado_id or _texto(state.iniciado_otro):
        payload["iniciado_junto_a"] = _solo_presentes(
            iniciado_id=state.iniciado_id or None,
            otro_texto=state.iniciado_otro,
        )

    secuencia = {k: v for k, v in state.secuencia_control().items() if v}
    if secuencia:
        payload["secuencia_control"] = secuencia

    if state.sup_total is not None or _texto(state.sup_nombre_ap):
        payload["superficie"] = _solo_presentes(
            area_total_ha=state.sup_total,
            dentro_ap_ha=state.sup_dentro,
            fuera_ap_ha=state.sup_fuera,
            nombre_ap=state.sup_nombre_ap,
        )

    if state.superficie_vegetacion:
        payload["superficie_vegetacion"] = [row.model_dump() for row in state.superficie_vegetacion]

    por_slug = tecnicas.sumar_por_slug(state.tecnicas)
    tecnicas_payload = [
        {"tecnica": slug, "pct": por_slug[slug]} for slug in SLUGS if por_slug[slug] > 0
    ]
    if tecnicas_payload:
        payload["tecnicas"] = tecnicas_payload

    for clave, valores, clave_id, clave_valor in (
        ("medios_terrestres", state.medios_terrestres, "medio_terrestre_id", "cantidad"),
        ("medios_aereos", state.medios_aereos, "medio_aereo_id", "pct"),
        ("medios_acuaticos", state.medios_acuaticos, "medio_acuatico_id", "cantidad"),
    ):
        items = _positivos(valores, clave_id, clave_valor)
        if items:
            payload[clave] = items

    if state.instituciones:
        payload["medios_instituciones"] = [{"institucion_uuid": i} for i in state.instituciones]

    abastos = _positivos(state.abastos, "abasto_id", "cantidad")
    if abastos:
        payload["abastos"] = abastos

    if state.causa_id or _texto(state.causa_otro):
        payload["causa"] = _solo_presentes(
            causa_id=state.causa_id or None,
            otro_texto=state.causa_otro,
        )

    meteo = _solo_presentes(
        temp_c=state.temp_c,
        hr_pct=state.hr_pct,
        viento_vel=state.viento_vel,
        viento_dir=state.viento_dir,
    )
    if meteo:
        payload["meteo"] = meteo

    if state.nota and state.nota.strip():
        payload["nota"] = state.nota.strip()

    return payload


def _fmt(valor: float) -> str:
    return f"{valor:g}"


def validate_before_save(state: CierreFormState, tecnicas: TecnicaMapping) -> bool:
    """
    Rechaza el guardado si algún grupo de porcentajes supera 100.
    No exige que sumen exactamente 100.
    """
    limite = 100 + TOLERANCIA_PORCENTAJE

    sum_tec = sum(tecnicas.sumar_por_slug(state.tecnicas).values())
    if sum_tec > limite:
        raise FormValidationError(
            f"La suma de técnicas es {_fmt(sum_tec)}%. Debe ser ≤ 100%.",
            titulo="Revisa técnicas",
        )

    sum_aer = sum_values(state.medios_aereos)
    if sum_aer > limite:
        raise FormValidationError(
            f"La suma de porcentajes aéreos es {_fmt(sum_aer)}%. Debe ser ≤ 100%.",
            titulo="Revisa medios aéreos",
        )

    sum_comp = sum_values(state.composicion)
    if sum_comp > limite:
        raise FormValidationError(
            f"La suma de composición es {_fmt(sum_comp)}%. Debe ser ≤ 100%.",
            titulo="Revisa composición por tipo",
        )

    sum_topo = sum_values({
        "plano": state.topo_plano,
        "ondulado": state.topo_ondulado,
        "quebrado": state.topo_quebrado,
    })
    if sum_topo > limite:
        raise FormValidationError(
            f"La suma de topografía es {_fmt(sum_topo)}%. Debe ser ≤ 100%.",
            titulo="Revisa topografía",
        )

    return True


# ===============================
# Registro del backend -> estado de trabajo
# ===============================
def _num(valor) -> Optional[float]:
    try:
        n = float(valor)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def _indexar(items, clave_id: str, clave_valor: str) -> Dict[str, Optional[float]]:
    return {
        str(item[clave_id]): _num(item.get(clave_valor)) or 0.0
        for item in items or []
        if isinstance(item, dict) and item.get(clave_id)
    }


def _vegetacion(filas) -> List[SuperficieVegetacion]:
    """Filas de superficie por vegetación; las que no validan se omiten."""
    vegetacion = []
    for row in filas or []:
        if not isinstance(row, dict):
            continue
        try:
            vegetacion.append(SuperficieVegetacion(**row))
        except ValidationError as e:
            LoggerService().log_warning(f"Superficie por vegetación descartada {row}: {e.error_count()} error(es)")
    return vegetacion


def form_state_from_record(registro: Optional[dict], tecnicas: TecnicaMapping) -> CierreFormState:
    c = registro or {}
    topografia = c.get("topografia") or {}
    iniciado = c.get("iniciado_junto_a") or {}
    secuencia = c.get("secuencia_control") or {}
    superficie = c.get("superficie") or {}
    medios = c.get("medios") or {}
    causa = c.get("causa") or {}
    meteo = c.get("meteo") or {}
    principal = c.get("tipo_incendio_principal") or {}

    tecnicas_por_id = {}
    for item in c.get("tecnicas") or []:
        slug = item.get("tecnica") if isinstance(item, dict) else None
        if slug not in SLUGS:
            continue
        item_id = tecnicas.id_for_slug(slug)
        if item_id:
            tecnicas_por_id[item_id] = _num(item.get("pct")) or 0.0

    vegetacion = _vegetacion(c.get("superficie_vegetacion"))

    return CierreFormState(
        tipo_principal_id=principal.get("id") or c.get("tipo_incendio_principal_id"),
        composicion=_indexar(c.get("composicion_tipo"), "tipo_incendio_id", "pct"),
        topo_plano=_num(topografia.get("plano_pct")),
        topo_ondulado=_num(topografia.get("ondulado_pct")),
        topo_quebrado=_num(topografia.get("quebrado_pct")),
        propiedad={
            str(p["tipo_propiedad_id"]): bool(p.get("usado"))
            for p in c.get("propiedad") or []
            if isinstance(p, dict) and p.get("tipo_propiedad_id")
        },
        iniciado_id=iniciado.get("iniciado_id") or iniciado.get("id"),
        iniciado_otro=iniciado.get("otro_texto"),
        llegada_terrestres_at=secuencia.get("llegada_medios_terrestres_at"),
        llegada_aereos_at=secuencia.get("llegada_medios_aereos_at"),
        controlado_at=secuencia.get("controlado_at"),
        extinguido_at=secuencia.get("extinguido_at"),
        sup_dentro=_num(superficie.get("dentro_ap_ha")),
        sup_fuera=_num(superficie.get("fuera_ap_ha")),
        sup_nombre_ap=superficie.get("nombre_ap"),
        superficie_vegetacion=vegetacion,
        tecnicas=tecnicas_por_id,
        medios_terrestres=_indexar(medios.get("terrestres"), "medio_terrestre_id", "cantidad"),
        medios_aereos=_indexar(medios.get("aereos"), "medio_aereo_id", "pct"),
        medios_acuaticos=_indexar(medios.get("acuaticos"), "medio_acuatico_id", "cantidad"),
        instituciones=[
            str(i["institucion_uuid"])
            for i in medios.get("instituciones") or []
            if isinstance(i, dict) and i.get("institucion_uuid")
        ],
        abastos=_indexar(c.get("abastos"), "abasto_id", "cantidad"),
        causa_id=causa.get("causa_id") or causa.get("id"),
        causa_otro=causa.get("otro_texto"),
        temp_c=_num(meteo.get("temp_c")),
        hr_pct=_num(meteo.get("hr_pct")),
        viento_vel=_num(meteo.get("viento_vel")),
        viento_dir=meteo.get("viento_dir"),
        nota="",
    )
