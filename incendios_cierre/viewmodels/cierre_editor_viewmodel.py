from typing import Dict, Optional

import requests
from PySide6.QtCore import Signal

from incendios_cierre.config.settings import CIERRE_TECNICA_SLUGS
from incendios_cierre.core.cierre_payload import build_payload, form_state_from_record, validate_before_save
from incendios_cierre.core.errors import (
    CierreError,
    FinalizeError,
    LoadError,
    ReopenError,
    SaveError,
    server_message,
)
from incendios_cierre.core.estado_cierre import (
    EstadoCierre,
    check_puede_editar,
    check_puede_finalizar,
    check_puede_reabrir,
    cierre_color,
    resolver_estado,
)
from incendios_cierre.core.tecnicas import TecnicaMapping
from incendios_cierre.models.cierre import CatalogosCierre, CierreFormState
from incendios_cierre.services.catalogo_service import CatalogoService
from incendios_cierre.services.cierre_service import CierreService
from incendios_cierre.services.session_service import SessionService
from incendios_cierre.viewmodels.worker_viewmodel import WorkerViewModel


class CierreEditorViewModel(WorkerViewModel):
    """
    Editor del registro de cierre por catálogos.

    ``form`` es el estado de trabajo; la vista lo modifica directamente y
    llama a ``guardar``. Un guardado fallido no toca ``form``.
    """

    loaded = Signal()
    estado_changed = Signal(str)
    saved = Signal(dict)
    finalized = Signal()
    reopened = Signal()

    def __init__(self, cierre_service: CierreService, catalogo_service: CatalogoService,
                 session: SessionService, incendio_uuid: str,
                 tecnica_overrides: Dict[str, str] = None):
        super().__init__()
        self.cierre_service = cierre_service
        self.catalogo_service = catalogo_service
        self.session = session
        self.incendio_uuid = incendio_uuid
        self.tecnica_overrides = CIERRE_TECNICA_SLUGS if tecnica_overrides is None else tecnica_overrides

        self.catalogos = CatalogosCierre()
        self.tecnicas = TecnicaMapping(self.tecnica_overrides)
        self.form = CierreFormState()
        self.registro: Optional[dict] = None
        self.estado = EstadoCierre.PENDIENTE
        self.load_failed = False
        self.saving = False
        self.closing = False

    # ===============================
    # Permisos visibles
    # ===============================
    @property
    def is_admin(self) -> bool:
        return self.session.is_admin()

    @property
    def puede_guardar(self) -> bool:
        return self.estado != EstadoCierre.EXTINGUIDO or self.is_admin

    @property
    def puede_reabrir(self) -> bool:
        return self.estado == EstadoCierre.EXTINGUIDO and self.is_admin

    @property
    def puede_finalizar(self) -> bool:
        return self.estado != EstadoCierre.EXTINGUIDO

    @property
    def color_estado(self) -> str:
        return cierre_color(self.estado)

    def _set_estado(self, estado: EstadoCierre):
        self.estado = estado
        self.estado_changed.emit(estado.value)

    # ===============================
    # Carga
    # ===============================
    def _obtener_registro(self) -> dict:
        try:
            return self.cierre_service.get_cierre(self.incendio_uuid)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                self.logger.log_event(f"Cierre inexistente, se inicializa: {self.incendio_uuid}")
                return self.cierre_service.init_cierre(self.incendio_uuid)
            raise

    def _cargar(self):
        # Todo el armado ocurre en el worker: cualquier fallo llega a _on_load_error
        catalogos = self.catalogo_service.load_catalogos_cierre()
        registro = self._obtener_registro()
        tecnicas = TecnicaMapping.from_catalogo(catalogos.tecnicas, self.tecnica_overrides)
        form = form_state_from_record(registro, tecnicas)
        return catalogos, tecnicas, registro, form, resolver_estado(registro)

    def load(self):
        self._set_loading(True)
        self._run(self._cargar, on_success=self._on_loaded, on_error=self._on_load_error)

    def _on_loaded(self, result):
        catalogos, tecnicas, registro, form, estado = result
        self.catalogos = catalogos
        self.tecnicas = tecnicas
        self.registro = registro
        self.form = form
        self.load_failed = False
        self._set_loading(False)
        self._set_estado(estado)
        self.logger.log_event(f"Cierre cargado: {self.incendio_uuid} ({self.estado.value})")
        self.loaded.emit()

    def _on_load_error(self, exc):
        # El editor sigue abierto con el estado que tenía
        self.load_failed = True
        self._set_loading(False)
        self.logger.log_error(f"Error cargando cierre {self.incendio_uuid}", exc)
        if isinstance(exc, CierreError):
            self._emit_error(exc)
        else:
            self._emit_error(LoadError(server_message(exc, "No se pudo cargar el cierre"), titulo="Error"))

    # ===============================
    # Guardar
    # ===============================
    def build_payload(self) -> dict:
        return build_payload(self.form, self.tecnicas)

    def guardar(self) -> bool:
        """
        Envía el PATCH parcial. Devuelve False si se rechazó localmente.
        """
        try:
            check_puede_editar(self.estado, self.is_admin)
            validate_before_save(self.form, self.tecnicas)
        except CierreError as e:
            self._emit_error(e)
            return False

        payload = self.build_payload()
        self.logger.log_event(f"PATCH cierre {self.incendio_uuid}: {sorted(payload)}")
        self.saving = True
        self._set_loading(True)
        self._run(
            self.cierre_service.patch_cierre_catalogos, self.incendio_uuid, payload,
            on_success=self._on_saved, on_error=self._on_save_error,
        )
        return True

    def _on_saved(self, registro):
        self.saving = False
        self._set_loading(False)
        if registro:
            self.registro = registro
            self._set_estado(resolver_estado(registro))
        self.logger.log_event(f"Cierre guardado: {self.incendio_uuid}")
        self.saved.emit(registro or {})

    def _on_save_error(self, exc):
        self.saving = False
        self._set_loading(False)
        self.logger.log_error(f"Error guardando cierre {self.incendio_uuid}", exc)
        self._emit_error(SaveError(server_message(exc, "No se pudo guardar"), titulo="Error"))

    # ===============================
    # Finalizar / reabrir
    # ===============================
    def finalizar(self) -> bool:
        try:
            check_puede_finalizar(self.estado, self.is_admin)
        except CierreError as e:
            self._emit_error(e)
            return False

        self.closing = True
        self._set_loading(True)
        self._run(
            self.cierre_service.finalizar_cierre, self.incendio_uuid,
            on_success=self._on_finalized, on_error=self._on_finalize_error,
        )
        return True

    def _on_finalized(self, _result):
        self.closing = False
        self._set_loading(False)
        self.logger.log_event(f"Cierre finalizado: {self.incendio_uuid}")
        self.finalized.emit()
        self.load()

    def _on_finalize_error(self, exc):
        self.closing = False
        self._set_loading(False)
        self.logger.log_error(f"Error finalizando cierre {self.incendio_uuid}", exc)
        self._emit_error(FinalizeError(server_message(exc, "No se pudo finalizar"), titulo="Error"))

    def reabrir(self) -> bool:
        try:
            if not check_puede_reabrir(self.estado, self.is_admin):
                return False
        except CierreError as e:
            self._emit_error(e)
            return False

        self.closing = True
        self._set_loading(True)
        self._run(
            self.cierre_service.reabrir_cierre, self.incendio_uuid,
            on_success=self._on_reopened, on_error=self._on_reopen_error,
        )
        return True

    def _on_reopened(self, _result):
        self.closing = False
        self._set_loading(False)
        self.logger.log_event(f"Cierre reabierto: {self.incendio_uuid}")
        self.reopened.emit()
        self.load()

    def _on_reopen_error(self, exc):
        self.closing = False
        self._set_loading(False)
        self.logger.log_error(f"Error reabriendo cierre {self.incendio_uuid}", exc)
        self._emit_error(ReopenError(server_message(exc, "No se pudo reabrir"), titulo="Error"))
