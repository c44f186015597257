from typing import Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class CatalogoItem(BaseModel):
    id: str
    nombre: str = ""
    descripcion: Optional[str] = None


class Paginated(BaseModel, Generic[T]):
    total: int = 0
    page: int = 1
    pageSize: int = 0
    items: List[T] = Field(default_factory=list)


class CatalogosCierre(BaseModel):
    tipos_incendio: List[CatalogoItem] = Field(default_factory=list)
    tipos_propiedad: List[CatalogoItem] = Field(default_factory=list)
    causas: List[CatalogoItem] = Field(default_factory=list)
    iniciado_junto_a: List[CatalogoItem] = Field(default_factory=list)
    medios_terrestres: List[CatalogoItem] = Field(default_factory=list)
    medios_aereos: List[CatalogoItem] = Field(default_factory=list)
    medios_acuaticos: List[CatalogoItem] = Field(default_factory=list)
    abastos: List[CatalogoItem] = Field(default_factory=list)
    instituciones: List[CatalogoItem] = Field(default_factory=list)
    tecnicas: List[CatalogoItem] = Field(default_factory=list)

    @staticmethod
    def nombre_de(items: List[CatalogoItem], item_id: Optional[str], default: str = "Seleccionar…") -> str:
        for item in items:
            if item.id == item_id:
                return item.nombre
        return default


class SuperficieVegetacion(BaseModel):
    ubicacion: Literal["DENTRO_AP", "FUERA_AP"]
    categoria: Literal["bosque_natural", "plantacion_forestal", "otra_vegetacion"]
    subtipo: Optional[str] = None
    area_ha: float


class CierreFormState(BaseModel):
    """
    Estado de trabajo del editor de cierre. Los grupos por catálogo se
    indexan por id de ítem; ``None`` significa "sin dato".
    """

    tipo_principal_id: Optional[str] = None
    composicion: Dict[str, Optional[float]] = Field(default_factory=dict)

    topo_plano: Optional[float] = None
    topo_ondulado: Optional[float] = None
    topo_quebrado: Optional[float] = None

    propiedad: Dict[str, bool] = Field(default_factory=dict)

    iniciado_id: Optional[str] = None
    iniciado_otro: Optional[str] = None

    llegada_terrestres_at: Optional[str] = None
    llegada_aereos_at: Optional[str] = None
    controlado_at: Optional[str] = None
    extinguido_at: Optional[str] = None

    sup_dentro: Optional[float] = None
    sup_fuera: Optional[float] = None
    sup_nombre_ap: Optional[str] = None
    superficie_vegetacion: List[SuperficieVegetacion] = Field(default_factory=list)

    tecnicas: Dict[str, Optional[float]] = Field(default_factory=dict)

    medios_terrestres: Dict[str, Optional[float]] = Field(default_factory=dict)
    medios_aereos: Dict[str, Optional[float]] = Field(default_factory=dict)
    medios_acuaticos: Dict[str, Optional[float]] = Field(default_factory=dict)
    instituciones: List[str] = Field(default_factory=list)

    abastos: Dict[str, Optional[float]] = Field(default_factory=dict)

    causa_id: Optional[str] = None
    causa_otro: Optional[str] = None

    temp_c: Optional[float] = None
    hr_pct: Optional[float] = None
    viento_vel: Optional[float] = None
    viento_dir: Optional[str] = None

    nota: str = ""

    @property
    def sup_total(self) -> Optional[float]:
        """Siempre derivado: dentro + fuera. Sin ninguno de los dos, None."""
        if self.sup_dentro is None and self.sup_fuera is None:
            return None
        return (self.sup_dentro or 0) + (self.sup_fuera or 0)

    def secuencia_control(self) -> dict:
        return {
            "llegada_medios_terrestres_at": self.llegada_terrestres_at,
            "llegada_medios_aereos_at": self.llegada_aereos_at,
            "controlado_at": self.controlado_at,
            "extinguido_at": self.extinguido_at,
        }

    def alternar_institucion(self, institucion_id: str):
        if institucion_id in self.instituciones:
            self.instituciones.remove(institucion_id)
        else:
            self.instituciones.append(institucion_id)
