"""
Ciclo de vida del cierre: Pendiente -> En atención -> Controlado -> Extinguido.

Extinguido es terminal salvo ``reabrir`` por un administrador. Al reabrir no se
restaura un estado previo: el estado se vuelve a inferir con los timestamps
que queden.
"""
from enum import Enum
from typing import Optional

from incendios_cierre.core.errors import PermissionDeniedError


class EstadoCierre(str, Enum):
    PENDIENTE = "Pendiente"
    EN_ATENCION = "En atención"
    CONTROLADO = "Controlado"
    EXTINGUIDO = "Extinguido"


COLORES_ESTADO = {
    EstadoCierre.EXTINGUIDO: "#2E7D32",
    EstadoCierre.CONTROLADO: "#1565C0",
    EstadoCierre.EN_ATENCION: "#E65100",
}
COLOR_POR_DEFECTO = "#616161"

MSG_EDITAR_EXTINGUIDO = "Este cierre está extinguido. Solo un administrador puede modificarlo."
MSG_REABRIR_NO_ADMIN = "Solo un administrador puede reabrir un cierre extinguido."
MSG_FINALIZAR_EXTINGUIDO = "Este cierre ya está extinguido."


def inferir_estado_cierre(secuencia_control: Optional[dict]) -> EstadoCierre:
    sc = secuencia_control
    if not sc:
        return EstadoCierre.PENDIENTE
    if sc.get("extinguido_at"):
        return EstadoCierre.EXTINGUIDO
    if sc.get("controlado_at"):
        return EstadoCierre.CONTROLADO
    if sc.get("llegada_medios_terrestres_at") or sc.get("llegada_medios_aereos_at"):
        return EstadoCierre.EN_ATENCION
    return EstadoCierre.PENDIENTE


def parse_estado(valor) -> Optional[EstadoCierre]:
    """Estado a partir del texto del backend, sin distinguir mayúsculas."""
    texto = str(valor or "").strip().lower()
    for estado in EstadoCierre:
        if estado.value.lower() == texto:
            return estado
    return None


def resolver_estado(registro: Optional[dict]) -> EstadoCierre:
    """El ``estado_cierre`` del backend manda; si falta, se infiere."""
    if not registro:
        return EstadoCierre.PENDIENTE
    estado = parse_estado(registro.get("estado_cierre"))
    if estado is not None:
        return estado
    return inferir_estado_cierre(registro.get("secuencia_control"))


def cierre_color(estado) -> str:
    return COLORES_ESTADO.get(parse_estado(getattr(estado, "value", estado)), COLOR_POR_DEFECTO)


# ===============================
# Guardas de transición
# ===============================
def check_puede_editar(estado: EstadoCierre, is_admin: bool):
    if estado == EstadoCierre.EXTINGUIDO and not is_admin:
        raise PermissionDeniedError(MSG_EDITAR_EXTINGUIDO)


def check_puede_finalizar(estado: EstadoCierre, is_admin: bool):
    if estado == EstadoCierre.EXTINGUIDO and not is_admin:
        raise PermissionDeniedError(MSG_FINALIZAR_EXTINGUIDO)


def check_puede_reabrir(estado: EstadoCierre, is_admin: bool) -> bool:
    """
    Lanza si el usuario no es administrador. Devuelve False cuando no hay nada
    que reabrir (el cierre no está extinguido).
    """
    if not is_admin:
        raise PermissionDeniedError(MSG_REABRIR_NO_ADMIN)
    return estado == EstadoCierre.EXTINGUIDO
