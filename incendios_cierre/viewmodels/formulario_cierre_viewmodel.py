from typing import Callable, Dict, List, Optional, Tuple

from PySide6.QtCore import Signal

from incendios_cierre.core import campos as motor
from incendios_cierre.core.errors import (
    CierreError,
    FinalizeError,
    FormValidationError,
    LoadError,
    PermissionDeniedError,
    SaveError,
    server_message,
)
from incendios_cierre.core.estado_cierre import (
    EstadoCierre,
    MSG_FINALIZAR_EXTINGUIDO,
    check_puede_editar,
)
from incendios_cierre.core.respuestas import build_responses, valores_iniciales
from incendios_cierre.models.plantilla import FormularioCierre, Seccion
from incendios_cierre.services.formulario_cierre_service import FormularioCierreService
from incendios_cierre.services.session_service import SessionService
from incendios_cierre.viewmodels.worker_viewmodel import WorkerViewModel

TITULO_FINALIZAR = "Finalizar incendio"
MSG_CONFIRMAR_FINALIZAR = (
    "¿Estás seguro de que quieres marcar este incendio como extinguido? "
    "Esta acción notificará a todos los seguidores."
)
MSG_SIN_PERMISO_FINALIZAR = "No tienes permiso para finalizar este incendio."
MSG_COMPLETAR_REQUERIDOS = "Por favor completa los campos requeridos"


class FormularioCierreViewModel(WorkerViewModel):
    """
    Formulario de cierre por plantilla de un incendio.

    Mantiene los valores de trabajo por ``campo_uuid`` y los errores de
    validación. Guardar valida primero todos los requeridos y no llama al
    backend si falta alguno.
    """

    form_loaded = Signal(object)
    valores_changed = Signal(dict)
    errores_changed = Signal(dict)
    saved = Signal()
    finalized = Signal()
    close_requested = Signal()

    def __init__(self, service: FormularioCierreService, session: SessionService,
                 incendio_uuid: str, can_finalize: bool = False):
        super().__init__()
        self.service = service
        self.session = session
        self.incendio_uuid = incendio_uuid
        self.can_finalize = can_finalize
        self.formulario: Optional[FormularioCierre] = None
        self.valores: Dict[str, object] = {}
        self.errores: Dict[str, str] = {}
        self.saving = False

    # ===============================
    # Estado
    # ===============================
    @property
    def extinguido(self) -> bool:
        return bool(self.formulario and self.formulario.extinguido)

    @property
    def estado(self) -> EstadoCierre:
        return EstadoCierre.EXTINGUIDO if self.extinguido else EstadoCierre.PENDIENTE

    @property
    def solo_lectura(self) -> bool:
        return self.extinguido and not self.session.is_admin()

    @property
    def puede_finalizar(self) -> bool:
        return self.can_finalize and self.formulario is not None and not self.extinguido

    def progreso(self) -> Tuple[int, int]:
        """(requeridos completos, requeridos totales)."""
        if self.formulario is None:
            return 0, 0
        requeridos = [
            c for c in self.formulario.campos()
            if c.requerido and c.tipo_normalizado is not None
        ]
        completos = [c for c in requeridos if not motor.es_vacio(self.valores.get(c.campo_uuid))]
        return len(completos), len(requeridos)

    # ===============================
    # Carga
    # ===============================
    def load(self):
        self._set_loading(True)
        self._run(
            self.service.get_formulario_cierre, self.incendio_uuid,
            on_success=self._on_loaded, on_error=self._on_load_error,
        )

    def _on_loaded(self, formulario: FormularioCierre):
        self._set_loading(False)
        self.formulario = formulario
        self.valores = valores_iniciales(formulario.campos())
        self.errores = {}
        self.logger.log_event(f"Formulario de cierre cargado: {self.incendio_uuid}")
        self.form_loaded.emit(formulario)
        self.valores_changed.emit(dict(self.valores))
        self.errores_changed.emit({})

    def _on_load_error(self, exc):
        self._set_loading(False)
        self.logger.log_error(f"Error cargando formulario de cierre {self.incendio_uuid}", exc)
        self._emit_error(LoadError(server_message(exc, "No se pudo cargar el formulario"), titulo="Error"))
        self.close_requested.emit()

    # ===============================
    # Edición
    # ===============================
    def _campo(self, campo_uuid: str):
        campo = self.formulario.campo(campo_uuid) if self.formulario else None
        if campo is None:
            raise KeyError(campo_uuid)
        return campo

    def _check_editable(self) -> bool:
        try:
            check_puede_editar(self.estado, self.session.is_admin())
        except PermissionDeniedError as e:
            self._emit_error(e)
            return False
        return True

    def set_valor(self, campo_uuid: str, valor):
        if not self._check_editable():
            return
        self.valores[campo_uuid] = valor
        if campo_uuid in self.errores:
            del self.errores[campo_uuid]
            self.errores_changed.emit(dict(self.errores))
        self.valores_changed.emit(dict(self.valores))

    def _transicion(self, campo_uuid: str, funcion: Callable, *args):
        campo = self._campo(campo_uuid)
        self.set_valor(campo_uuid, funcion(campo, self.valores.get(campo_uuid), *args))

    def set_texto(self, campo_uuid: str, texto):
        campo = self._campo(campo_uuid)
        self.set_valor(campo_uuid, motor.set_texto(campo, texto))

    def seleccionar_opcion(self, campo_uuid: str, value: Optional[str]):
        self._transicion(campo_uuid, motor.seleccionar_opcion, value)

    def alternar_opcion(self, campo_uuid: str, value: str):
        self._transicion(campo_uuid, motor.alternar_opcion, value)

    def set_cantidad(self, campo_uuid: str, texto, value: str = None):
        self._transicion(campo_uuid, motor.set_cantidad, texto, value)

    def set_porcentaje(self, campo_uuid: str, texto, value: str = None):
        self._transicion(campo_uuid, motor.set_porcentaje, texto, value)

    def vistas(self) -> List[Tuple[Seccion, List[motor.VistaCampo]]]:
        """Vistas editables por sección; los tipos desconocidos no aparecen."""
        if self.formulario is None:
            return []
        resultado = []
        for seccion in self.formulario.secciones_ordenadas():
            vistas = []
            for campo in seccion.campos_ordenados():
                vista = motor.render_field(
                    campo, self.valores.get(campo.campo_uuid), self.errores.get(campo.campo_uuid)
                )
                if vista is not None:
                    vistas.append(vista)
            resultado.append((seccion, vistas))
        return resultado

    # ===============================
    # Guardar
    # ===============================
    def validar(self) -> Dict[str, str]:
        campos = self.formulario.campos() if self.formulario else []
        self.errores = motor.validate_fields(campos, self.valores)
        self.errores_changed.emit(dict(self.errores))
        return self.errores

    def guardar(self) -> bool:
        """
        Valida y envía las respuestas. Devuelve False si no se llamó al backend.
        """
        if self.formulario is None or not self._check_editable():
            return False

        errores = self.validar()
        if errores:
            self._emit_error(FormValidationError(MSG_COMPLETAR_REQUERIDOS, errores=errores))
            return False

        respuestas = build_responses(self.formulario.campos(), self.valores)
        self.saving = True
        self._set_loading(True)
        self._run(
            self.service.guardar_respuestas, self.incendio_uuid, respuestas,
            on_success=self._on_saved, on_error=self._on_save_error,
        )
        return True

    def _on_saved(self, _result):
        self.saving = False
        self._set_loading(False)
        self.logger.log_event(f"Cierre guardado: {self.incendio_uuid}")
        self.saved.emit()
        self.close_requested.emit()

    def _on_save_error(self, exc):
        # Los valores se conservan para reintentar
        self.saving = False
        self._set_loading(False)
        self.logger.log_error(f"Error guardando cierre {self.incendio_uuid}", exc)
        self._emit_error(SaveError(server_message(exc, "No se pudo guardar el cierre"), titulo="Error"))

    # ===============================
    # Finalizar
    # ===============================
    def finalizar(self, confirmar: Callable[[str, str], bool]) -> bool:
        """
        Marca el incendio como extinguido previa confirmación.
        ``confirmar(titulo, mensaje)`` decide si se continúa.
        """
        try:
            if not self.can_finalize:
                raise PermissionDeniedError(MSG_SIN_PERMISO_FINALIZAR)
            if self.formulario is None or self.extinguido:
                raise PermissionDeniedError(MSG_FINALIZAR_EXTINGUIDO)
        except CierreError as e:
            self._emit_error(e)
            return False

        if not confirmar(TITULO_FINALIZAR, MSG_CONFIRMAR_FINALIZAR):
            return False

        self.saving = True
        self._set_loading(True)
        self._run(
            self.service.finalizar_incendio, self.incendio_uuid,
            on_success=self._on_finalized, on_error=self._on_finalize_error,
        )
        return True

    def _on_finalized(self, _result):
        self.saving = False
        self._set_loading(False)
        self.formulario = self.formulario.model_copy(update={"extinguido": True})
        self.logger.log_event(f"Incendio finalizado: {self.incendio_uuid}")
        self.finalized.emit()
        self.load()

    def _on_finalize_error(self, exc):
        self.saving = False
        self._set_loading(False)
        self.logger.log_error(f"Error finalizando incendio {self.incendio_uuid}", exc)
        self._emit_error(FinalizeError(server_message(exc, "No se pudo finalizar"), titulo="Error"))
