# ==========================================================
# 📦 src/territory_assignment/domain/entities.py
# ==========================================================

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union


# ==========================================================
# 📍 Coordenada
# ==========================================================
@dataclass(frozen=True)
class GeoPoint:
    """Par latitude/longitude em graus decimais."""
    latitude: float
    longitude: float

    def __post_init__(self):
        lat = float(self.latitude)
        lon = float(self.longitude)

        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"❌ Latitude fora do intervalo: {lat}")
        if not -180.0 <= lon <= 180.0:
            raise ValueError(f"❌ Longitude fora do intervalo: {lon}")

        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    def as_tuple(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


@dataclass(frozen=True)
class GeocodeHit:
    point: GeoPoint
    source: str


# ==========================================================
# 🏠 Endereço
# ==========================================================
@dataclass(frozen=True)
class Address:
    street: Optional[str] = None
    number: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    @property
    def has_locality(self) -> bool:
        """Sem cidade ou CEP não há como chegar a uma coordenada."""
        return bool((self.city or "").strip() or (self.postal_code or "").strip())


# ==========================================================
# 🗺️ Territórios (tipo soma fechado)
# ==========================================================
@dataclass(frozen=True)
class RadiusTerritory:
    center: GeoPoint
    radius_km: float
    base_city: Optional[str] = None

    def __post_init__(self):
        if self.radius_km is None or float(self.radius_km) <= 0:
            raise ValueError(f"❌ Raio inválido: {self.radius_km}")
        object.__setattr__(self, "radius_km", float(self.radius_km))


@dataclass(frozen=True)
class PolygonTerritory:
    vertices: Tuple[GeoPoint, ...]

    def __post_init__(self):
        vertices = tuple(self.vertices)
        if len(vertices) < 3:
            raise ValueError(f"❌ Polígono com {len(vertices)} vértices (mínimo 3)")
        object.__setattr__(self, "vertices", vertices)


@dataclass(frozen=True)
class CoverageArea:
    center: GeoPoint
    radius_km: float
    label: Optional[str] = None

    def __post_init__(self):
        if self.radius_km is None or float(self.radius_km) <= 0:
            raise ValueError(f"❌ Raio inválido na área '{self.label}': {self.radius_km}")
        object.__setattr__(self, "radius_km", float(self.radius_km))


@dataclass(frozen=True)
class MultiAreaTerritory:
    areas: Tuple[CoverageArea, ...]

    def __post_init__(self):
        areas = tuple(self.areas)
        if not areas:
            raise ValueError("❌ Território multi-área sem áreas válidas")
        object.__setattr__(self, "areas", areas)


Territory = Union[RadiusTerritory, PolygonTerritory, MultiAreaTerritory]


# ==========================================================
# 👤 Representante (executivo de vendas)
# ==========================================================
@dataclass
class Representative:
    id: str
    name: str
    territory: Optional[Territory] = None
    active: bool = True
    territory_active: bool = True
    territory_error: Optional[str] = None

    @property
    def is_matchable(self) -> bool:
        return self.active and self.territory_active and self.territory is not None


# ==========================================================
# 🍽️ Local de negócio (restaurante / lead)
# ==========================================================
@dataclass
class BusinessLocation:
    id: Optional[str]
    address: Address = field(default_factory=Address)
    name: Optional[str] = None
    coordinate: Optional[GeoPoint] = None
    assigned_representative_id: Optional[str] = None
    assigned_at: Optional[datetime] = None


# ==========================================================
# ❗ Taxonomia de falhas
# ==========================================================
class AssignmentFailure(str, Enum):
    NO_ADDRESS_DATA = "no_address_data"
    GEOCODING_UNAVAILABLE = "geocoding_unavailable"
    NO_COVERAGE = "no_coverage"
    INVALID_TERRITORY_CONFIG = "invalid_territory_config"
    REPRESENTATIVES_UNAVAILABLE = "representatives_unavailable"


METHOD_RADIUS = "radius"
METHOD_POLYGON = "polygon"
METHOD_MULTI_AREA = "multi-area"


# ==========================================================
# 🏁 Resultado da atribuição
# ==========================================================
@dataclass(frozen=True)
class AssignmentCandidate:
    representative_id: str
    representative_name: str
    distance_km: float
    method: str
    label: Optional[str] = None


@dataclass(frozen=True)
class AssignmentResult:
    success: bool
    representative_id: Optional[str] = None
    representative_name: Optional[str] = None
    distance_km: Optional[float] = None
    method: Optional[str] = None
    label: Optional[str] = None
    alternates: Tuple[AssignmentCandidate, ...] = ()
    error: Optional[str] = None
    error_code: Optional[AssignmentFailure] = None
    coordinate: Optional[GeoPoint] = None
    ignored_representatives: Tuple[str, ...] = ()

    @classmethod
    def failure(
        cls,
        error: str,
        code: AssignmentFailure,
        coordinate: Optional[GeoPoint] = None,
        ignored: Tuple[str, ...] = (),
    ) -> "AssignmentResult":
        return cls(
            success=False,
            error=error,
            error_code=code,
            coordinate=coordinate,
            ignored_representatives=ignored,
        )

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "representative_id": self.representative_id,
            "representative_name": self.representative_name,
            "distance_km": self.distance_km,
            "method": self.method,
            "label": self.label,
            "alternates": [
                {
                    "representative_id": c.representative_id,
                    "representative_name": c.representative_name,
                    "distance_km": c.distance_km,
                    "method": c.method,
                    "label": c.label,
                }
                for c in self.alternates
            ],
            "error": self.error,
            "error_code": self.error_code.value if self.error_code else None,
            "coordinate": (
                {"latitude": self.coordinate.latitude, "longitude": self.coordinate.longitude}
                if self.coordinate else None
            ),
            "ignored_representatives": list(self.ignored_representatives),
        }
