# ============================================================
# 📦 src/territory_assignment/domain/territory_matcher.py
# ============================================================

from dataclasses import dataclass
from typing import Optional, Sequence

from shapely.geometry import Point, Polygon

from territory_assignment.domain.entities import (
    METHOD_MULTI_AREA,
    METHOD_POLYGON,
    METHOD_RADIUS,
    GeoPoint,
    MultiAreaTerritory,
    PolygonTerritory,
    RadiusTerritory,
    Territory,
)
from territory_assignment.domain.haversine_utils import haversine_km


@dataclass(frozen=True)
class TerritoryMatch:
    inside: bool
    distance_km: float
    label: Optional[str] = None


# ============================================================
# 🔺 Ponto no polígono (lat = x, lng = y)
# ============================================================
def ponto_no_poligono(ponto: GeoPoint, vertices: Sequence[GeoPoint]) -> bool:
    poligono = Polygon([(v.latitude, v.longitude) for v in vertices])
    return poligono.contains(Point(ponto.latitude, ponto.longitude))


def centro_poligono(vertices: Sequence[GeoPoint]) -> GeoPoint:
    """Média aritmética dos vértices (usada só para ordenação)."""
    n = len(vertices)
    return GeoPoint(
        latitude=sum(v.latitude for v in vertices) / n,
        longitude=sum(v.longitude for v in vertices) / n,
    )


def method_for(territory: Territory) -> str:
    if isinstance(territory, RadiusTerritory):
        return METHOD_RADIUS
    if isinstance(territory, PolygonTerritory):
        return METHOD_POLYGON
    if isinstance(territory, MultiAreaTerritory):
        return METHOD_MULTI_AREA
    raise TypeError(f"Tipo de território desconhecido: {type(territory).__name__}")


# ============================================================
# 🎯 Teste principal
# ============================================================
def matches(point: GeoPoint, territory: Territory) -> TerritoryMatch:
    if isinstance(territory, RadiusTerritory):
        distancia = haversine_km(point, territory.center)
        return TerritoryMatch(
            inside=distancia <= territory.radius_km,
            distance_km=distancia,
            label=territory.base_city,
        )

    if isinstance(territory, PolygonTerritory):
        dentro = ponto_no_poligono(point, territory.vertices)
        distancia = haversine_km(point, centro_poligono(territory.vertices))
        return TerritoryMatch(inside=dentro, distance_km=distancia)

    if isinstance(territory, MultiAreaTerritory):
        # primeira área que cobre, na ordem declarada
        for area in territory.areas:
            distancia = haversine_km(point, area.center)
            if distancia <= area.radius_km:
                return TerritoryMatch(inside=True, distance_km=distancia, label=area.label)

        mais_proxima = min(haversine_km(point, a.center) for a in territory.areas)
        return TerritoryMatch(inside=False, distance_km=mais_proxima)

    raise TypeError(f"Tipo de território desconhecido: {type(territory).__name__}")
