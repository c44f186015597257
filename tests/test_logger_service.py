import os

from conftest import http_error
from incendios_cierre.core.errors import FormValidationError
from incendios_cierre.services.logger_service import LoggerService


def _leer(path):
    with open(path, encoding="utf-8") as f:
        return f.read()


def test_escribe_eventos_y_errores(tmp_path):
    logger = LoggerService()
    assert logger is LoggerService()

    logger.init_session("ana@conaf.cl", log_dir=str(tmp_path))
    assert logger.username == "ana"

    logger.log_event("Cierre guardado: inc-1")
    logger.log_warning("Técnica sin slug")
    logger.log_error("Error guardando cierre inc-1", http_error(409, {"message": "ya finalizado"}))
    logger.log_error("Formulario incompleto", FormValidationError("Por favor completa los campos requeridos"))
    logger.flush()

    eventos = _leer(logger.event_file)
    assert "Cierre guardado: inc-1" in eventos
    assert "ADVERTENCIA: Técnica sin slug" in eventos

    errores = _leer(logger.error_file)
    assert "finalización concurrente" in errores
    assert "Validación local" in errores
    assert os.path.dirname(logger.error_file) == str(tmp_path)


def test_causa_por_codigo_http():
    logger = LoggerService()
    assert "no existe" in logger._determine_cause(http_error(404))
    assert logger._determine_cause(http_error(503)) == "Error interno del servidor (503)."


class _ErrorQueNoSeImprime(Exception):
    def __str__(self):
        raise RuntimeError("sin representación")


def test_entrada_defectuosa_no_detiene_la_bitacora(tmp_path):
    logger = LoggerService()
    logger.init_session("ana", log_dir=str(tmp_path))

    logger.log_error("Error raro", _ErrorQueNoSeImprime())
    logger.log_event("Cierre cargado: inc-2")
    logger.flush()

    assert logger.worker_thread.is_alive()
    assert "Cierre cargado: inc-2" in _leer(logger.event_file)
