import os
import threading
import queue
from datetime import datetime

import requests

from incendios_cierre.config.settings import LOG_DIR
from incendios_cierre.core.errors import CierreError


class LoggerService:
    """
    Bitácora de la sesión: eventos de cierre (carga, guardado, finalización,
    reapertura) y errores con su causa probable. Singleton; escribe en un hilo
    aparte y no escribe nada hasta ``init_session``.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(LoggerService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.log_dir = LOG_DIR
        self.event_file = None
        self.error_file = None
        self.username = "unknown"

        self.log_queue = queue.Queue()
        self.worker_thread = threading.Thread(target=self._process_queue, daemon=True)
        self.worker_thread.start()

        self._initialized = True

    def init_session(self, username, log_dir=None):
        # De un email solo se usa la parte de usuario
        self.username = (username or "unknown").split("@")[0]
        if log_dir:
            self.log_dir = log_dir

        os.makedirs(self.log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M")
        base = os.path.join(self.log_dir, f"{self.username}_{timestamp}")
        self.event_file = f"{base}_LogEvent.log"
        self.error_file = f"{base}_LogError.log"

    def log_event(self, message):
        """Evento de alto nivel (resumen ejecutivo)"""
        self.log_queue.put(("event", message))

    def log_warning(self, message):
        self.log_queue.put(("warning", message))

    def log_error(self, message, error=None):
        """Error detallado con causa probable"""
        self.log_queue.put(("error", message, error))

    def flush(self):
        """Espera a que la cola se vacíe."""
        self.log_queue.join()

    def _process_queue(self):
        while True:
            item = self.log_queue.get()
            try:
                kind, *args = item
                if kind == "event":
                    self._write_event(args[0])
                elif kind == "warning":
                    self._write_event(f"ADVERTENCIA: {args[0]}")
                elif kind == "error":
                    self._write_error(*args)
            except Exception:
                # Una entrada defectuosa no debe detener el hilo de la bitácora
                pass
            finally:
                self.log_queue.task_done()

    def _append(self, path, entry):
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(entry)
        except OSError:
            # Un fallo de disco no debe botar la aplicación
            pass

    def _write_event(self, message):
        if not self.event_file:
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._append(self.event_file, f"[{timestamp}] {message}\n")

    # Causa probable por código HTTP del backend de cierre
    _CAUSAS_HTTP = {
        400: "El backend rechazó los datos enviados (revisar payload de cierre).",
        401: "La sesión del usuario ha expirado o el token es inválido.",
        403: "El usuario no tiene permisos para modificar este cierre.",
        404: "El incendio, cierre o plantilla no existe en el servidor.",
        409: "El cierre cambió de estado en el servidor (posible finalización concurrente).",
        422: "El backend no aceptó las respuestas del formulario.",
    }

    def _determine_cause(self, error):
        if isinstance(error, CierreError):
            return "Validación local: la operación no llegó al servidor."

        response = getattr(error, "response", None)
        status = getattr(response, "status_code", None)
        if status in self._CAUSAS_HTTP:
            return self._CAUSAS_HTTP[status]
        if status is not None and status >= 500:
            return f"Error interno del servidor ({status})."

        if isinstance(error, requests.Timeout):
            return "El servidor tardó demasiado en responder."
        if isinstance(error, requests.ConnectionError):
            return "Sin conexión con el backend de incendios."
        if isinstance(error, ValueError):
            return "Respuesta del servidor con formato inesperado."
        return "Error técnico no identificado, requiere revisión de logs detallados."

    def _write_error(self, message, error):
        if not self.error_file:
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        if error is None:
            cause, detail = "N/A", "Sin detalle técnico"
        else:
            cause, detail = self._determine_cause(error), f"{type(error).__name__}: {error}"

        entry = (
            f"[{timestamp}] ERROR: {message}\n"
            f"    -> Detalle Técnico: {detail}\n"
            f"    -> Causa Probable: {cause}\n"
            f"{'-'*50}\n"
        )
        self._append(self.error_file, entry)
