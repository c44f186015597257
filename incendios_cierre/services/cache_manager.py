from PySide6.QtCore import QDateTime, QMutex, QMutexLocker

from incendios_cierre.config.settings import CATALOGO_CACHE_TTL


class CacheManager:
    """
    Caché en memoria con TTL. Se crea y se inyecta explícitamente; su vida es
    la de quien la crea (típicamente la sesión de la app).
    """

    def __init__(self, ttl_seconds: int = None):
        self.ttl_seconds = CATALOGO_CACHE_TTL if ttl_seconds is None else ttl_seconds
        self.mutex = QMutex()
        self._entries = {}

    def get(self, key):
        locker = QMutexLocker(self.mutex)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored, data = entry
        if stored.addSecs(self.ttl_seconds) > QDateTime.currentDateTime():
            return data
        del self._entries[key]
        return None

    def set(self, key, data):
        locker = QMutexLocker(self.mutex)
        self._entries[key] = (QDateTime.currentDateTime(), data)

    def invalidate(self, prefix: str):
        """Elimina las entradas cuya clave empieza con ``prefix``."""
        locker = QMutexLocker(self.mutex)
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def clear(self):
        locker = QMutexLocker(self.mutex)
        self._entries.clear()
