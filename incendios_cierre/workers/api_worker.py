from PySide6.QtCore import QThread, Signal


class ApiWorker(QThread):
    """Ejecuta una llamada bloqueante fuera del hilo de la UI."""

    finished = Signal(object)
    # Se emite la excepción completa para conservar el mensaje del servidor
    error = Signal(object)

    def __init__(self, func, *args, parent=None, **kwargs):
        super().__init__(parent)
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self):
        try:
            result = self.func(*self.args, **self.kwargs)
            self.finished.emit(result)
        except Exception as e:
            self.error.emit(e)
