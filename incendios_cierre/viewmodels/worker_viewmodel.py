from PySide6.QtCore import QObject, Signal

from incendios_cierre.core.errors import CierreError
from incendios_cierre.services.logger_service import LoggerService
from incendios_cierre.workers.api_worker import ApiWorker


class WorkerViewModel(QObject):
    """
    Base de los view models: lanza llamadas al backend en ``ApiWorker`` y
    aplica el resultado en el hilo de la UI.
    """

    loading_changed = Signal(bool)
    error = Signal(str, str)  # titulo, mensaje

    def __init__(self):
        super().__init__()
        self.logger = LoggerService()
        self.loading = False
        self.last_error = None
        self._workers = []
        self._entregados = []
        self._disposed = False

    def dispose(self):
        """Tras cerrar la vista, las respuestas pendientes se descartan."""
        self._disposed = True

    def _set_loading(self, value: bool):
        self.loading = value
        self.loading_changed.emit(value)

    def _run(self, func, *args, on_success=None, on_error=None):
        # La referencia se conserva hasta entregar la respuesta y terminar el hilo
        self._workers = [w for w in self._workers if w.isRunning() or w not in self._entregados]
        self._entregados = [w for w in self._entregados if w in self._workers]
        worker = ApiWorker(func, *args)
        self._workers.append(worker)
        worker.finished.connect(lambda result: self._dispatch(worker, on_success, result))
        worker.error.connect(lambda exc: self._dispatch(worker, on_error, exc))
        worker.start()
        return worker

    def _dispatch(self, worker, callback, value):
        self._entregados.append(worker)
        if self._disposed or callback is None:
            return
        callback(value)

    def _emit_error(self, err: CierreError):
        self.last_error = err
        self.error.emit(err.titulo, err.mensaje)
