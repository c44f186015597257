import json
import os

from dotenv import load_dotenv

load_dotenv()

_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3000")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "30"))

# Catálogos de cierre
CATALOGO_PAGE_SIZE = int(os.getenv("CATALOGO_PAGE_SIZE", "200"))
CATALOGO_CACHE_TTL = int(os.getenv("CATALOGO_CACHE_TTL", "60"))

# Margen para sumas de porcentajes (errores de coma flotante)
TOLERANCIA_PORCENTAJE = 0.0001

LOG_DIR = os.getenv("LOG_DIR", os.path.join(_ROOT_DIR, "Log"))

# Mapeo explícito {id_item_catalogo: slug} para técnicas de extinción.
# Los ítems sin entrada se resuelven por nombre.
CIERRE_TECNICA_SLUGS = json.loads(os.getenv("CIERRE_TECNICA_SLUGS", "{}") or "{}")

# Rutas del formulario por plantilla. Por defecto no comparten URL con el
# registro por catálogos (GET /cierre/{id}, POST /cierre/{id}/finalizar);
# un backend que las sirva en esas mismas rutas puede configurarlas aquí.
CIERRE_FORMULARIO_PATH = os.getenv("CIERRE_FORMULARIO_PATH", "/cierre/{incendio_uuid}/formulario")
FINALIZAR_INCENDIO_PATH = os.getenv("FINALIZAR_INCENDIO_PATH", "/incendios/{incendio_uuid}/finalizar")
