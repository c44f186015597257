from typing import List, Optional

from PySide6.QtCore import Signal

from incendios_cierre.core import plantillas as reglas
from incendios_cierre.core.errors import CierreError, LoadError, SaveError, server_message
from incendios_cierre.models.plantilla import Plantilla, Seccion
from incendios_cierre.services.plantillas_service import PlantillasService
from incendios_cierre.viewmodels.worker_viewmodel import WorkerViewModel


class PlantillaEditorViewModel(WorkerViewModel):
    """Administración de plantillas: lista, edición básica, secciones y campos."""

    plantillas_loaded = Signal(list)
    plantilla_loaded = Signal(object)
    success = Signal(str)

    def __init__(self, service: PlantillasService):
        super().__init__()
        self.service = service
        self.plantillas: List[Plantilla] = []
        self.plantilla: Optional[Plantilla] = None

    # ===============================
    # Lista
    # ===============================
    def load_plantillas(self):
        self._set_loading(True)
        self._run(self.service.list_plantillas,
                  on_success=self._on_plantillas, on_error=self._error_handler(LoadError, "No se pudieron cargar las plantillas"))

    def _on_plantillas(self, plantillas):
        self._set_loading(False)
        self.plantillas = list(plantillas)
        self.plantillas_loaded.emit(self.plantillas)

    def crear_plantilla(self, nombre, descripcion=None) -> bool:
        payload = self._validar(reglas.plantilla_payload, nombre, descripcion)
        if payload is None:
            return False
        self._mutar(self.service.create_plantilla, payload,
                    mensaje="Plantilla creada", recargar=self.load_plantillas)
        return True

    def activar(self, plantilla_uuid: str):
        def _listo(_result):
            self._set_loading(False)
            self.plantillas = reglas.marcar_activa(self.plantillas, plantilla_uuid)
            if self.plantilla is not None:
                self.plantilla = self.plantilla.model_copy(
                    update={"activa": self.plantilla.plantilla_uuid == plantilla_uuid}
                )
            self.logger.log_event(f"Plantilla activada: {plantilla_uuid}")
            self.plantillas_loaded.emit(self.plantillas)
            self.success.emit("Plantilla activada")

        self._set_loading(True)
        self._run(self.service.activar_plantilla, plantilla_uuid,
                  on_success=_listo, on_error=self._error_handler(SaveError, "No se pudo activar"))

    def eliminar_plantilla(self, plantilla: Plantilla) -> bool:
        try:
            reglas.check_puede_eliminar(plantilla)
        except CierreError as e:
            self._emit_error(e)
            return False
        self._mutar(self.service.delete_plantilla, plantilla.plantilla_uuid,
                    mensaje="Plantilla eliminada", recargar=self.load_plantillas)
        return True

    # ===============================
    # Plantilla abierta
    # ===============================
    def load(self, plantilla_uuid: str):
        self._set_loading(True)
        self._run(self.service.get_plantilla, plantilla_uuid,
                  on_success=self._on_plantilla, on_error=self._error_handler(LoadError, "No se pudo cargar la plantilla"))

    def _on_plantilla(self, plantilla: Plantilla):
        self._set_loading(False)
        self.plantilla = plantilla
        self.plantilla_loaded.emit(plantilla)

    def _recargar(self):
        if self.plantilla is not None:
            self.load(self.plantilla.plantilla_uuid)

    def guardar_basico(self, nombre, descripcion=None) -> bool:
        payload = self._validar(reglas.plantilla_payload, nombre, descripcion)
        if payload is None or self.plantilla is None:
            return False
        self._mutar(self.service.update_plantilla, self.plantilla.plantilla_uuid, payload,
                    mensaje="Plantilla actualizada", fallback="No se pudo actualizar")
        return True

    def orden_nueva_seccion(self) -> int:
        return reglas.siguiente_orden(self.plantilla.secciones if self.plantilla else [])

    def orden_nuevo_campo(self, seccion: Seccion) -> int:
        return reglas.siguiente_orden(seccion.campos)

    def guardar_seccion(self, nombre, orden, descripcion=None, seccion_uuid: str = None) -> bool:
        payload = self._validar(reglas.seccion_payload, nombre, orden, descripcion)
        if payload is None or self.plantilla is None:
            return False
        if seccion_uuid:
            self._mutar(self.service.update_seccion, seccion_uuid, payload,
                        mensaje="Sección actualizada", fallback="No se pudo guardar la sección")
        else:
            self._mutar(self.service.create_seccion, self.plantilla.plantilla_uuid, payload,
                        mensaje="Sección creada", fallback="No se pudo guardar la sección")
        return True

    def eliminar_seccion(self, seccion_uuid: str):
        self._mutar(self.service.delete_seccion, seccion_uuid,
                    mensaje="Sección eliminada", fallback="No se pudo eliminar")

    def guardar_campo(self, seccion_uuid: str, nombre, tipo, orden, requerido=False,
                      descripcion=None, unidad=None, placeholder=None, opciones=None,
                      campo_uuid: str = None) -> bool:
        payload = self._validar(
            reglas.campo_payload, nombre, tipo, orden, requerido,
            descripcion, unidad, placeholder, opciones,
        )
        if payload is None:
            return False
        if campo_uuid:
            self._mutar(self.service.update_campo, campo_uuid, payload,
                        mensaje="Campo actualizado", fallback="No se pudo guardar el campo")
        else:
            self._mutar(self.service.create_campo, seccion_uuid, payload,
                        mensaje="Campo creado", fallback="No se pudo guardar el campo")
        return True

    def eliminar_campo(self, campo_uuid: str):
        self._mutar(self.service.delete_campo, campo_uuid,
                    mensaje="Campo eliminado", fallback="No se pudo eliminar")

    # ===============================
    # Helpers
    # ===============================
    def _validar(self, regla, *args) -> Optional[dict]:
        try:
            return regla(*args)
        except CierreError as e:
            self._emit_error(e)
            return None

    def _mutar(self, func, *args, mensaje: str, fallback: str = "No se pudo guardar", recargar=None):
        recargar = recargar or self._recargar

        def _listo(_result):
            self._set_loading(False)
            self.logger.log_event(mensaje)
            recargar()
            self.success.emit(mensaje)

        self._set_loading(True)
        self._run(func, *args, on_success=_listo, on_error=self._error_handler(SaveError, fallback))

    def _error_handler(self, tipo, fallback: str):
        def _handler(exc):
            self._set_loading(False)
            self.logger.log_error(fallback, exc)
            self._emit_error(tipo(server_message(exc, fallback), titulo="Error"))
        return _handler
